"""
Robolang configuration
Run settings loaded from robolang.json or robolang.toml
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Optional

import toml

from .levels import DEFAULT_HEIGHT, DEFAULT_MAX_STEPS, DEFAULT_OBSTACLES, DEFAULT_WIDTH
from .vm import DEFAULT_MAX_INSTRUCTIONS

logger = logging.getLogger(__name__)

CONFIG_CANDIDATES = ("robolang.json", "robolang.toml")


@dataclass(frozen=True)
class RunConfig:
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    obstacles: int = DEFAULT_OBSTACLES
    max_steps: int = DEFAULT_MAX_STEPS
    seed: Optional[int] = None
    max_instructions: int = DEFAULT_MAX_INSTRUCTIONS
    trace: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RunConfig':
        known = {f.name for f in fields(cls)}
        for key in data:
            if key not in known:
                logger.warning("Ignoring unknown config key %r", key)
        return cls(**{k: v for k, v in data.items() if k in known})

    def merged(self, **overrides) -> 'RunConfig':
        """Copy with every override that is not None applied"""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def find_config(directory: str = ".") -> Optional[str]:
    for name in CONFIG_CANDIDATES:
        path = os.path.join(directory, name)
        if os.path.isfile(path):
            return path
    return None


def load_config(config_path: Optional[str] = None) -> RunConfig:
    if not config_path:
        config_path = find_config()
    if not config_path:
        return RunConfig()

    with open(config_path, "r", encoding="utf-8") as f:
        if config_path.endswith(".toml"):
            data = toml.load(f)
        else:
            data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a table of settings")
    # A [robolang] table or a top-level "robolang" object is accepted as well.
    if isinstance(data.get("robolang"), dict):
        data = data["robolang"]

    logger.debug("Loaded config %s", config_path)
    return RunConfig.from_dict(data)
