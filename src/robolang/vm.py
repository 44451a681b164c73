"""
Robolang VM
Single-step virtual machine over compiled instructions.

The VM owns only its program counter. Each step is handed the
SimulationState to mutate, so callers can clone states for undo and
drive the VM at their own cadence.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .compiler import Act, BranchIfFalse, Instruction, Jump
from .errors import RuntimeLimitError
from .stdlib import apply_action, evaluate_condition
from .world import SimulationState

logger = logging.getLogger(__name__)

DEFAULT_MAX_INSTRUCTIONS = 100_000


@dataclass(frozen=True)
class StepResult:
    # Source line of the instruction executed by this step; None when nothing ran.
    line: Optional[int]
    instruction: Optional[Instruction] = None
    branch_taken: Optional[bool] = None


@dataclass(frozen=True)
class TraceEvent:
    kind: str            # 'act' or 'cond'
    line: int
    detail: str          # action name, or 'true'/'false' for conditions


class VM:
    def __init__(self, instructions: List[Instruction]):
        self.instructions = instructions
        self.pc = 0
        self.done = len(instructions) == 0

    @property
    def current_line(self) -> Optional[int]:
        """Line of the instruction about to run, or None once done"""
        if self.done or not 0 <= self.pc < len(self.instructions):
            return None
        return self.instructions[self.pc].line

    def copy(self) -> 'VM':
        vm = VM(list(self.instructions))
        vm.pc = self.pc
        vm.done = self.done
        return vm

    def step(self, state: SimulationState) -> StepResult:
        if self.done or state.won:
            self.done = True
            return StepResult(None)

        if not 0 <= self.pc < len(self.instructions):
            self.done = True
            return StepResult(None)

        instr = self.instructions[self.pc]
        logger.debug("pc=%d %s", self.pc, instr)
        taken = None

        if isinstance(instr, Act):
            # A failing action propagates with the pc left on this instruction.
            apply_action(instr.action, state)
            self.pc += 1
        elif isinstance(instr, Jump):
            self.pc = instr.target
        elif isinstance(instr, BranchIfFalse):
            taken = evaluate_condition(instr.condition, state)
            if taken:
                self.pc += 1
            else:
                self.pc = instr.target
        else:
            raise TypeError(f"Unknown instruction: {instr!r}")

        if state.won or self.pc >= len(self.instructions):
            self.done = True

        return StepResult(instr.line, instr, taken)


def trace_event(result: StepResult) -> Optional[TraceEvent]:
    """Observable event of a step: actions and condition tests, not jumps"""
    instr = result.instruction
    if isinstance(instr, Act):
        return TraceEvent('act', instr.line, instr.action)
    if isinstance(instr, BranchIfFalse):
        return TraceEvent('cond', instr.line, 'true' if result.branch_taken else 'false')
    return None


def run_to_completion(vm: VM, state: SimulationState,
                      max_instructions: int = DEFAULT_MAX_INSTRUCTIONS) -> List[TraceEvent]:
    """Step until done and return the trace; world errors propagate unchanged"""
    trace: List[TraceEvent] = []
    executed = 0

    while not vm.done:
        if executed >= max_instructions:
            raise RuntimeLimitError(f"Instruction limit of {max_instructions} reached", 'INSTRUCTION_LIMIT',
                                    line=vm.current_line)
        result = vm.step(state)
        if result.instruction is not None:
            executed += 1
        event = trace_event(result)
        if event is not None:
            trace.append(event)

    return trace
