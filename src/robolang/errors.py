"""
Robolang error taxonomy
Every failure raised by the toolchain carries a machine-readable code,
an optional source line and a human-readable hint.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


_HINTS = {
    'UNEXPECTED_CHARACTER': 'Only identifiers, { } ( ) = ; . ! && || and // comments are allowed.',
    'EXPECTED_SYMBOL': 'Check for a missing bracket, "=" or terminator near this line.',
    'EXPECTED_KEYWORD': 'A file is a list of "program NAME { ... }" blocks followed by "active = NAME."',
    'EXPECTED_IDENTIFIER': 'Program and active declarations need a name.',
    'EXPECTED_STATEMENT': 'Statements are if, while or one of the actions forward, turnLeft, turnRight, pick, put.',
    'EXPECTED_CONDITION': 'Conditions combine atoms with !, && and || and may use parentheses.',
    'EMPTY_CONDITION': 'Write a condition such as obstacleAhead or !beepersHere.',
    'EMPTY_BLOCK': 'if and while blocks need at least one statement.',
    'UNTERMINATED_BLOCK': 'A "{" is missing its closing "}".',
    'UNTERMINATED_PROGRAM': 'Close every program with "}" (brace form) or ";" (legacy form).',
    'MISSING_ACTIVE': 'Add "active = NAME." at the end of the file to select a program.',
    'TRAILING_CONTENT': 'Nothing may follow the active declaration.',
    'UNKNOWN_ACTION': 'Known actions: forward, turnLeft, turnRight, pick, put.',
    'UNKNOWN_CONDITION': ('Known conditions: obstacleAhead, obstacleLeft, obstacleRight, beepersHere, '
                          'beeperInBag, won, notAtLine8, winReachable.'),
    'UNKNOWN_ACTIVE_PROGRAM': 'The active declaration must name a program declared above it.',
    'INVALID_DOCUMENT': 'The document is not valid JSON.',
    'UNKNOWN_ROOT': 'Use {"active": ..., "programs": {...}}, {"steps": [...]} or a bare list of steps.',
    'UNKNOWN_STATEMENT': 'Statement nodes need "type" set to action, if or while.',
    'MALFORMED_CONDITION': 'Conditions are strings like "a && !b" or nodes with type atom/not/and/or.',
    'MALFORMED_STATEMENT': 'Check the required fields of this statement node.',
    'MOVE_BLOCKED': 'There is a wall or the edge of the grid ahead. Test obstacleAhead or turn first.',
    'NO_BEEPER_HERE': 'There is no beeper in this cell. Test beepersHere before pick.',
    'NO_BEEPER_IN_BAG': 'The bag is empty. pick a beeper first or start with a filled bag.',
    'STEP_LIMIT': 'Your while loop probably never ends or needs too many steps.',
    'INSTRUCTION_LIMIT': 'A loop keeps testing conditions without ever running an action.',
}


def _build_context(lines: List[str], line_no_1: int, *, context: int = 2) -> str:
    idx = max(1, line_no_1)
    start = max(1, idx - context)
    end = min(len(lines), idx + context)

    out: List[str] = []
    for i in range(start, end + 1):
        prefix = '>' if i == idx else ' '
        out.append(f"{prefix} {i:4d} | {lines[i - 1]}")
    return "\n".join(out)


@dataclass(eq=False)
class RoboError(Exception):
    message: str
    code: str
    line: Optional[int] = None

    kind = 'error'

    def __str__(self) -> str:
        if self.line is not None:
            return f"{self.message} (line {self.line})"
        return self.message

    @property
    def hint(self) -> Optional[str]:
        return _HINTS.get(self.code)


@dataclass(eq=False)
class LexicalError(RoboError):
    char: str = ''

    kind = 'lexical'


@dataclass(eq=False)
class ParseError(RoboError):
    kind = 'syntax'


@dataclass(eq=False)
class SchemaError(RoboError):
    fragment: str = ''

    kind = 'schema'


@dataclass(eq=False)
class SemanticError(RoboError):
    kind = 'semantic'


@dataclass(eq=False)
class RuntimeActionError(RoboError):
    kind = 'runtime'


@dataclass(eq=False)
class RuntimeLimitError(RoboError):
    kind = 'limit'


def format_error(error: RoboError, source: Optional[str] = None) -> str:
    """Render an error with source context and its hint, for terminal output."""
    title = type(error).__name__
    text = f"{title}: {error}"
    if source is not None and error.line is not None:
        text += "\n" + _build_context(source.split('\n'), error.line)
    if error.hint:
        text += f"\nHint: {error.hint}"
    return text
