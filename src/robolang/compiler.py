"""
Robolang Compiler
Lowers statement trees into a flat instruction list with absolute jump targets
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Union

from .ast_nodes import ActionStatement, Condition, IfStatement, Statement, WhileLoop, condition_to_text

logger = logging.getLogger(__name__)

# Placeholder target until the jumped-over region has been emitted.
UNRESOLVED = -1


@dataclass(frozen=True)
class Act:
    action: str
    line: int


@dataclass(frozen=True)
class Jump:
    target: int
    line: int


@dataclass(frozen=True)
class BranchIfFalse:
    condition: Condition
    target: int
    line: int


Instruction = Union[Act, Jump, BranchIfFalse]


class Compiler:
    def __init__(self):
        self.ops: List[Instruction] = []

    def compile_program(self, statements: List[Statement]) -> List[Instruction]:
        self.ops = []
        self._emit_statements(statements)
        logger.debug("Compiled %d statement(s) into %d instruction(s)", len(statements), len(self.ops))
        return self.ops

    def _emit(self, instr: Instruction) -> int:
        self.ops.append(instr)
        return len(self.ops) - 1

    def _patch(self, index: int, target: int):
        self.ops[index] = replace(self.ops[index], target=target)

    def _emit_statements(self, stmts: List[Statement]):
        for s in stmts:
            self._emit_stmt(s)

    def _emit_stmt(self, stmt: Statement):
        if isinstance(stmt, ActionStatement):
            self._emit(Act(stmt.name, stmt.line))
        elif isinstance(stmt, IfStatement):
            jfalse_idx = self._emit(BranchIfFalse(stmt.condition, UNRESOLVED, stmt.line))
            self._emit_statements(stmt.then_branch)
            jend_idx = self._emit(Jump(UNRESOLVED, stmt.line))
            # false -> start of else, or just past the jump when there is none
            self._patch(jfalse_idx, len(self.ops))
            if stmt.else_branch:
                self._emit_statements(stmt.else_branch)
            self._patch(jend_idx, len(self.ops))
        elif isinstance(stmt, WhileLoop):
            loop_start = len(self.ops)
            jfalse_idx = self._emit(BranchIfFalse(stmt.condition, UNRESOLVED, stmt.line))
            self._emit_statements(stmt.body)
            self._emit(Jump(loop_start, stmt.line))
            self._patch(jfalse_idx, len(self.ops))
        else:
            raise TypeError(f"Cannot compile {stmt.__class__.__name__}")


def compile_program(statements: List[Statement]) -> List[Instruction]:
    return Compiler().compile_program(statements)


def disassemble(instructions: List[Instruction]) -> str:
    """Human-readable listing: index, source line, opcode and operands"""
    out = []
    for index, instr in enumerate(instructions):
        if isinstance(instr, Act):
            text = f"ACT {instr.action}"
        elif isinstance(instr, Jump):
            text = f"JUMP {instr.target}"
        else:
            text = f"JUMP_IF_FALSE {condition_to_text(instr.condition)} -> {instr.target}"
        out.append(f"{index:4d}  line {instr.line:<4d} {text}")
    return "\n".join(out)
