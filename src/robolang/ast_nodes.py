"""
Robolang AST Nodes
Canonical condition and statement trees shared by every front end
"""

from abc import ABC
from typing import List, Any, Optional, Dict
from dataclasses import dataclass

class ASTNode(ABC):
    """Base class for all AST nodes"""
    pass

class Condition(ASTNode):
    """Base class for boolean conditions"""
    pass

class Statement(ASTNode):
    """Base class for statements"""
    pass

# Conditions
@dataclass
class Atom(Condition):
    name: str

@dataclass
class Not(Condition):
    inner: Condition

@dataclass
class And(Condition):
    left: Condition
    right: Condition

@dataclass
class Or(Condition):
    left: Condition
    right: Condition

# Statements
@dataclass
class ActionStatement(Statement):
    name: str
    line: int

@dataclass
class IfStatement(Statement):
    condition: Condition
    then_branch: List[Statement]
    else_branch: Optional[List[Statement]] = None
    line: int = 0

@dataclass
class WhileLoop(Statement):
    condition: Condition
    body: List[Statement]
    line: int = 0

# Helper functions for AST manipulation
def ast_to_dict(node: ASTNode) -> Dict[str, Any]:
    """Convert AST node to dictionary representation"""
    if isinstance(node, list):
        return [ast_to_dict(item) for item in node]

    if not isinstance(node, ASTNode):
        return node

    result = {'type': node.__class__.__name__}

    for field, value in node.__dict__.items():
        if isinstance(value, (ASTNode, list)):
            result[field] = ast_to_dict(value)
        else:
            result[field] = value

    return result

def condition_to_text(cond: Condition) -> str:
    """Fully parenthesized text form of a condition"""
    if isinstance(cond, Atom):
        return cond.name
    if isinstance(cond, Not):
        return f'!({condition_to_text(cond.inner)})'
    if isinstance(cond, And):
        return f'({condition_to_text(cond.left)} && {condition_to_text(cond.right)})'
    if isinstance(cond, Or):
        return f'({condition_to_text(cond.left)} || {condition_to_text(cond.right)})'
    raise TypeError(f"Not a condition: {cond!r}")

def pretty_print_program(statements: List[Statement], indent: int = 0) -> str:
    """One line per statement, prefixed by its source line"""
    spaces = '  ' * indent
    lines = []

    for stmt in statements:
        if isinstance(stmt, ActionStatement):
            lines.append(f'{stmt.line:4d} {spaces}{stmt.name}')
        elif isinstance(stmt, WhileLoop):
            lines.append(f'{stmt.line:4d} {spaces}WHILE {condition_to_text(stmt.condition)}')
            lines.append(pretty_print_program(stmt.body, indent + 1))
        elif isinstance(stmt, IfStatement):
            lines.append(f'{stmt.line:4d} {spaces}IF {condition_to_text(stmt.condition)}')
            lines.append(pretty_print_program(stmt.then_branch, indent + 1))
            if stmt.else_branch is not None:
                lines.append(f'     {spaces}ELSE')
                if stmt.else_branch:
                    lines.append(pretty_print_program(stmt.else_branch, indent + 1))

    return '\n'.join(lines)
