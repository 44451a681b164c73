"""
Robolang session
Caller-side driver that steps a program forward and back.

Each step runs against a fresh clone of the current state and pushes the
previous (vm, state) pair, so stepping back is just popping the history.
"""

from __future__ import annotations

import logging
from typing import List, NamedTuple, Optional

from .compiler import Instruction, compile_program
from .errors import RoboError, RuntimeLimitError
from .parser import parse_program
from .vm import DEFAULT_MAX_INSTRUCTIONS, VM, StepResult, TraceEvent, trace_event
from .world import SimulationState, clone_state

logger = logging.getLogger(__name__)


class _Snapshot(NamedTuple):
    vm: VM
    state: SimulationState
    error: Optional[RoboError]
    trace_length: int
    executed: int


class Session:
    def __init__(self, initial_state: SimulationState,
                 max_instructions: int = DEFAULT_MAX_INSTRUCTIONS):
        self.initial_state = clone_state(initial_state)
        self.max_instructions = max_instructions
        self.instructions: List[Instruction] = []
        self.vm: Optional[VM] = None
        self.state = clone_state(initial_state)
        self.history: List[_Snapshot] = []
        self.trace: List[TraceEvent] = []
        self.error: Optional[RoboError] = None
        self.active_line: Optional[int] = None
        self.executed = 0

    def load(self, source: str):
        """Parse and compile; nothing is replaced if the source is invalid"""
        statements = parse_program(source)
        self.instructions = compile_program(statements)
        self.reset()

    def reset(self):
        self.vm = VM(self.instructions)
        self.state = clone_state(self.initial_state)
        self.history = []
        self.trace = []
        self.error = None
        self.executed = 0
        self.active_line = self.vm.current_line

    @property
    def done(self) -> bool:
        return self.vm is None or self.vm.done

    def _halt(self, error: RoboError):
        logger.warning("Run halted: %s", error)
        self.error = error

    def step(self) -> StepResult:
        """Run one instruction; a runtime error halts the session and is re-raised"""
        if self.vm is None or self.vm.done or self.error is not None:
            return StepResult(None)

        if self.executed >= self.max_instructions:
            self._halt(RuntimeLimitError(f"Instruction limit of {self.max_instructions} reached",
                                         'INSTRUCTION_LIMIT', line=self.vm.current_line))
            raise self.error

        vm = self.vm.copy()
        state = clone_state(self.state)
        self.history.append(_Snapshot(self.vm, self.state, self.error, len(self.trace), self.executed))
        self.executed += 1

        try:
            result = vm.step(state)
        except RoboError as e:
            if e.line is None:
                e.line = vm.current_line
            # The partially stepped state is kept so its step counter stays visible.
            self.vm, self.state = vm, state
            self.active_line = vm.current_line
            self._halt(e)
            raise

        self.vm, self.state = vm, state
        event = trace_event(result)
        if event is not None:
            self.trace.append(event)
        self.active_line = result.line
        return result

    def step_back(self) -> bool:
        if not self.history:
            return False
        snapshot = self.history.pop()
        self.vm, self.state, self.error = snapshot.vm, snapshot.state, snapshot.error
        self.executed = snapshot.executed
        del self.trace[snapshot.trace_length:]
        self.active_line = self.vm.current_line
        return True

    def run(self) -> List[TraceEvent]:
        """Step until done"""
        while not self.done and self.error is None:
            self.step()
        return self.trace
