"""
Robolang Interpreter
Walks the statement tree directly against a SimulationState.

The compiled VM is the execution engine; this walker is the reference
it is checked against, emitting the same trace events in the same order.
"""

from typing import List

from .ast_nodes import ActionStatement, ASTNode, IfStatement, Statement, WhileLoop
from .errors import RuntimeLimitError
from .stdlib import apply_action, evaluate_condition
from .vm import DEFAULT_MAX_INSTRUCTIONS, TraceEvent
from .world import SimulationState

class _Halt(Exception):
    """Raised internally once the win flag is set"""
    pass

class Interpreter:
    def __init__(self, max_evaluations: int = DEFAULT_MAX_INSTRUCTIONS):
        self.max_evaluations = max_evaluations
        self.trace: List[TraceEvent] = []
        self.state = None
        self._evaluations = 0

    def interpret(self, statements: List[Statement], state: SimulationState) -> List[TraceEvent]:
        self.trace = []
        self.state = state
        self._evaluations = 0
        if state.won:
            return self.trace
        try:
            self.execute_block(statements)
        except _Halt:
            pass
        return self.trace

    def execute_block(self, statements: List[Statement]):
        for statement in statements:
            self.execute(statement)

    def execute(self, statement: Statement):
        return self.visit(statement)

    def visit(self, node: ASTNode):
        method_name = f'visit_{node.__class__.__name__}'
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode):
        raise TypeError(f"No visit method for {node.__class__.__name__}")

    def _count(self, line: int):
        self._evaluations += 1
        if self._evaluations > self.max_evaluations:
            raise RuntimeLimitError(f"Instruction limit of {self.max_evaluations} reached",
                                    'INSTRUCTION_LIMIT', line=line)

    def _test(self, node) -> bool:
        self._count(node.line)
        result = evaluate_condition(node.condition, self.state)
        self.trace.append(TraceEvent('cond', node.line, 'true' if result else 'false'))
        return result

    def visit_ActionStatement(self, node: ActionStatement):
        self._count(node.line)
        apply_action(node.name, self.state)
        self.trace.append(TraceEvent('act', node.line, node.name))
        if self.state.won:
            raise _Halt()

    def visit_IfStatement(self, node: IfStatement):
        if self._test(node):
            self.execute_block(node.then_branch)
        elif node.else_branch:
            self.execute_block(node.else_branch)

    def visit_WhileLoop(self, node: WhileLoop):
        while self._test(node):
            self.execute_block(node.body)
