"""
Robolang document loader
Builds the canonical statement list from a JSON document.

Accepted roots:

    {"active": "main", "programs": {"main": [...], "other": {"steps": [...]}}}
    {"steps": [...]}
    [...]

Steps are either a bare action name or a node tagged by "type":

    {"type": "action", "name": "forward"}
    {"type": "if", "cond": ..., "then": [...], "elseIfs": [{"cond": ..., "then": [...]}], "else": [...]}
    {"type": "while", "cond": ..., "body": [...]}

Conditions are either a short expression string ("!obstacleAhead && beepersHere",
folded left to right, no parentheses) or a node tagged by "type" (atom, not, and, or).
"""

import json
import logging
import re
from typing import Any, List, Optional

from .ast_nodes import ActionStatement, And, Atom, Condition, IfStatement, Not, Or, Statement, WhileLoop
from .errors import SchemaError, SemanticError
from .stdlib import is_action, is_atom

logger = logging.getLogger(__name__)

_EXPR_TOKEN = re.compile(r'\s*(&&|\|\||!|[A-Za-z_][A-Za-z0-9_]*)')


def _fragment(node: Any) -> str:
    text = json.dumps(node, default=str)
    return text if len(text) <= 80 else text[:77] + '...'


def _schema_error(message: str, code: str, node: Any) -> SchemaError:
    return SchemaError(f"{message}: {_fragment(node)}", code, fragment=_fragment(node))


class DocumentLoader:
    """Turns decoded JSON data into statements, numbering lines in document order"""

    def __init__(self):
        self.next_line = 1

    def _line_for(self, node: Any) -> int:
        line = self.next_line
        self.next_line += 1
        if isinstance(node, dict):
            explicit = node.get('line')
            if isinstance(explicit, int) and not isinstance(explicit, bool) and explicit > 0:
                return explicit
        return line

    # Roots

    def load(self, data: Any) -> List[Statement]:
        if isinstance(data, list):
            return self.steps(data)

        if isinstance(data, dict):
            if 'programs' in data or 'active' in data:
                return self.named_programs(data)
            if 'steps' in data:
                return self.steps(data['steps'])

        raise _schema_error("Unrecognized document root", 'UNKNOWN_ROOT', data)

    def named_programs(self, data: dict) -> List[Statement]:
        programs = data.get('programs')
        active = data.get('active')
        if not isinstance(programs, dict):
            raise _schema_error("'programs' must be an object of named step lists", 'UNKNOWN_ROOT', data)
        if not isinstance(active, str):
            raise _schema_error("'active' must name one of the programs", 'UNKNOWN_ROOT', data)
        if active not in programs:
            raise SemanticError(f"Unknown active program '{active}'", 'UNKNOWN_ACTIVE_PROGRAM')

        logger.debug("Document declares %d program(s); active program %r", len(programs), active)
        body = programs[active]
        if isinstance(body, dict) and 'steps' in body:
            body = body['steps']
        return self.steps(body)

    # Statements

    def steps(self, nodes: Any) -> List[Statement]:
        if not isinstance(nodes, list):
            raise _schema_error("Expected a list of steps", 'MALFORMED_STATEMENT', nodes)
        return [self.statement(node) for node in nodes]

    def branch(self, node: Any) -> List[Statement]:
        """An else branch may be a single node or a list of nodes"""
        if isinstance(node, list):
            return self.steps(node)
        return [self.statement(node)]

    def statement(self, node: Any) -> Statement:
        if isinstance(node, str):
            return self.action(node, node, self._line_for(node))

        if not isinstance(node, dict):
            raise _schema_error("Statement must be an action name or an object", 'MALFORMED_STATEMENT', node)

        kind = node.get('type')
        if kind == 'action':
            line = self._line_for(node)
            return self.action(node.get('name'), node, line)
        if kind == 'if':
            return self.if_statement(node)
        if kind == 'while':
            line = self._line_for(node)
            body = self.required(node, 'body')
            statements = self.steps(body)
            if not statements:
                raise _schema_error("while body must not be empty", 'MALFORMED_STATEMENT', node)
            return WhileLoop(self.condition(self.condition_field(node)), statements, line)

        raise _schema_error(f"Unknown statement type {kind!r}", 'UNKNOWN_STATEMENT', node)

    def action(self, name: Any, node: Any, line: int) -> ActionStatement:
        if not isinstance(name, str) or not is_action(name):
            raise _schema_error(f"Unknown action {name!r}", 'UNKNOWN_ACTION', node)
        return ActionStatement(name, line)

    def if_statement(self, node: dict) -> IfStatement:
        line = self._line_for(node)
        cond = self.condition(self.condition_field(node))
        then_branch = self.steps(self.required(node, 'then'))
        if not then_branch:
            raise _schema_error("if branch must not be empty", 'MALFORMED_STATEMENT', node)

        else_branch: Optional[List[Statement]] = None
        chain = []
        clauses = node.get('elseIfs') or []
        if not isinstance(clauses, list):
            raise _schema_error("'elseIfs' must be a list", 'MALFORMED_STATEMENT', node)
        for clause in clauses:
            if not isinstance(clause, dict):
                raise _schema_error("elseIfs entries must be objects", 'MALFORMED_STATEMENT', clause)
            clause_line = self._line_for(clause)
            clause_cond = self.condition(self.condition_field(clause))
            clause_then = self.steps(self.required(clause, 'then'))
            if not clause_then:
                raise _schema_error("else-if branch must not be empty", 'MALFORMED_STATEMENT', clause)
            chain.append((clause_cond, clause_then, clause_line))

        if 'else' in node:
            else_branch = self.branch(node['else'])

        # else-if clauses nest right to left, each one the else branch of the one before
        for clause_cond, clause_then, clause_line in reversed(chain):
            else_branch = [IfStatement(clause_cond, clause_then, else_branch, clause_line)]

        return IfStatement(cond, then_branch, else_branch, line)

    def required(self, node: dict, key: str) -> Any:
        if key not in node:
            raise _schema_error(f"Missing '{key}'", 'MALFORMED_STATEMENT', node)
        return node[key]

    def condition_field(self, node: dict) -> Any:
        if 'cond' in node:
            return node['cond']
        if 'condition' in node:
            return node['condition']
        raise _schema_error("Missing 'cond'", 'MALFORMED_STATEMENT', node)

    # Conditions

    def condition(self, node: Any) -> Condition:
        if isinstance(node, str):
            return parse_condition_expression(node)

        if not isinstance(node, dict):
            raise _schema_error("Condition must be a string or an object", 'MALFORMED_CONDITION', node)

        kind = node.get('type')
        if kind == 'atom':
            name = node.get('name')
            if not isinstance(name, str) or not is_atom(name):
                raise _schema_error(f"Unknown condition {name!r}", 'UNKNOWN_CONDITION', node)
            return Atom(name)
        if kind == 'not':
            if 'inner' not in node:
                raise _schema_error("'not' needs 'inner'", 'MALFORMED_CONDITION', node)
            return Not(self.condition(node['inner']))
        if kind in ('and', 'or'):
            if 'left' not in node or 'right' not in node:
                raise _schema_error(f"'{kind}' needs 'left' and 'right'", 'MALFORMED_CONDITION', node)
            left = self.condition(node['left'])
            right = self.condition(node['right'])
            return And(left, right) if kind == 'and' else Or(left, right)

        raise _schema_error(f"Unknown condition type {kind!r}", 'MALFORMED_CONDITION', node)


def parse_condition_expression(text: str) -> Condition:
    """Parse "a && !b || c" strictly left to right, without precedence or parentheses"""
    tokens = []
    pos = 0
    stripped = text.rstrip()
    while pos < len(stripped):
        m = _EXPR_TOKEN.match(stripped, pos)
        if not m:
            raise _schema_error("Malformed condition expression", 'MALFORMED_CONDITION', text)
        tokens.append(m.group(1))
        pos = m.end()

    result: Optional[Condition] = None
    operator = None
    i = 0
    while i < len(tokens):
        negate = False
        if tokens[i] == '!':
            negate = True
            i += 1
        if i >= len(tokens) or tokens[i] in ('&&', '||', '!'):
            raise _schema_error("Malformed condition expression", 'MALFORMED_CONDITION', text)
        name = tokens[i]
        if not is_atom(name):
            raise _schema_error(f"Unknown condition {name!r}", 'UNKNOWN_CONDITION', text)
        operand: Condition = Not(Atom(name)) if negate else Atom(name)
        i += 1

        if result is None:
            result = operand
        elif operator == '&&':
            result = And(result, operand)
        else:
            result = Or(result, operand)

        if i < len(tokens):
            operator = tokens[i]
            if operator not in ('&&', '||') or i + 1 >= len(tokens):
                raise _schema_error("Malformed condition expression", 'MALFORMED_CONDITION', text)
            i += 1

    if result is None:
        raise _schema_error("Empty condition expression", 'MALFORMED_CONDITION', text)
    return result


def parse_document(data: Any) -> List[Statement]:
    """Statements of an already decoded JSON document"""
    try:
        return DocumentLoader().load(data)
    except RecursionError:
        raise SchemaError("Document is nested too deeply", 'MALFORMED_STATEMENT') from None


def load_document(text: str) -> List[Statement]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaError(f"Malformed document: {e.msg}", 'INVALID_DOCUMENT', line=e.lineno) from e
    except RecursionError:
        raise SchemaError("Malformed document: nested too deeply", 'INVALID_DOCUMENT') from None
    return parse_document(data)
