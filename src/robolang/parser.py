"""
Robolang Parser
Recursive descent parser that builds the canonical statement list.

Two generations of program files are accepted unchanged:

    program main {              program main =
        forward                     forward;
    }                               turnLeft
    active = main.              ;
                                active = main.

Conditions use the same precedence cascade in both: || over && over !
over an atom or a parenthesized condition.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .ast_nodes import ActionStatement, And, Atom, Condition, IfStatement, Not, Or, Statement, WhileLoop
from .document import load_document
from .errors import ParseError, SemanticError
from .lexer import Lexer, Token, TokenType
from .stdlib import is_action, is_atom

logger = logging.getLogger(__name__)

_SYMBOLS = {
    TokenType.LEFT_BRACE: '{',
    TokenType.RIGHT_BRACE: '}',
    TokenType.LEFT_PAREN: '(',
    TokenType.RIGHT_PAREN: ')',
}

def describe(token: Token) -> str:
    if token.type == TokenType.EOF:
        return "end of input"
    if token.type == TokenType.NEWLINE:
        return "line break"
    return f"'{token.value}'"

class Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.current = 0

    def is_at_end(self) -> bool:
        return self.peek().type == TokenType.EOF

    def peek(self) -> Token:
        return self.tokens[self.current]

    def previous(self) -> Token:
        return self.tokens[self.current - 1]

    def advance(self) -> Token:
        if not self.is_at_end():
            self.current += 1
        return self.previous()

    def check(self, token_type: TokenType) -> bool:
        return self.peek().type == token_type

    def check_keyword(self, word: str) -> bool:
        token = self.peek()
        return token.type == TokenType.IDENTIFIER and token.value == word

    def match(self, *types: TokenType) -> bool:
        for token_type in types:
            if self.check(token_type):
                self.advance()
                return True
        return False

    def consume(self, token_type: TokenType, message: str, code: str = 'EXPECTED_SYMBOL') -> Token:
        if self.check(token_type):
            return self.advance()
        self.error(f"{message}, got {describe(self.peek())}", code)

    def consume_keyword(self, word: str) -> Token:
        if self.check_keyword(word):
            return self.advance()
        self.error(f"Expected '{word}', got {describe(self.peek())}", 'EXPECTED_KEYWORD')

    def error(self, message: str, code: str, line: Optional[int] = None):
        raise ParseError(message, code, line=self.peek().line if line is None else line)

    def skip_newlines(self):
        while self.match(TokenType.NEWLINE):
            pass

    # File structure

    def parse(self) -> List[Statement]:
        """Parse every program declaration and return the active program's statements"""
        programs: Dict[str, List[Statement]] = {}

        self.skip_newlines()
        while self.check_keyword('program'):
            name, statements = self.program_declaration()
            if name in programs:
                logger.warning("Program %r declared more than once; the last declaration wins", name)
            programs[name] = statements
            self.skip_newlines()

        if not self.check_keyword('active'):
            if self.is_at_end():
                self.error("No active declaration found", 'MISSING_ACTIVE')
            self.error(f"Expected 'program' or 'active', got {describe(self.peek())}", 'EXPECTED_KEYWORD')

        active_line = self.peek().line
        active = self.active_declaration()
        if active not in programs:
            raise SemanticError(f"Unknown active program '{active}'", 'UNKNOWN_ACTIVE_PROGRAM', line=active_line)

        self.skip_newlines()
        if not self.is_at_end():
            self.error(f"Unexpected {describe(self.peek())} after active declaration", 'TRAILING_CONTENT')

        logger.debug("Parsed %d program(s); active program %r has %d statement(s)",
                     len(programs), active, len(programs[active]))
        return programs[active]

    def program_declaration(self) -> Tuple[str, List[Statement]]:
        start = self.consume_keyword('program')
        name = self.consume(TokenType.IDENTIFIER, "Expected program name", 'EXPECTED_IDENTIFIER').value
        self.skip_newlines()

        if self.match(TokenType.LEFT_BRACE):
            statements = self.statement_list(
                'UNTERMINATED_PROGRAM', f"Program '{name}' is not closed with '}}'", start.line)
            self.skip_newlines()
            self.match(TokenType.SEMICOLON)
            return name, statements

        if self.match(TokenType.ASSIGN):
            return name, self.legacy_program_body(name, start.line)

        self.error(f"Expected '{{' or '=' after program name, got {describe(self.peek())}", 'EXPECTED_SYMBOL')

    def legacy_program_body(self, name: str, start_line: int) -> List[Statement]:
        """Statements separated by optional ';' and closed by a final ';'"""
        statements = []

        while True:
            self.skip_newlines()
            if self.match(TokenType.SEMICOLON):
                break
            if self.is_at_end() or self.check_keyword('program') or self.check_keyword('active'):
                self.error(f"Program '{name}' is not terminated with ';'", 'UNTERMINATED_PROGRAM', start_line)

            statements.append(self.statement())

            self.skip_newlines()
            if self.match(TokenType.SEMICOLON):
                self.skip_newlines()
                if self.is_at_end() or self.check_keyword('active') or self.check_keyword('program'):
                    break

        return statements

    def active_declaration(self) -> str:
        self.consume_keyword('active')
        self.skip_newlines()
        self.match(TokenType.ASSIGN)
        self.skip_newlines()
        name = self.consume(TokenType.IDENTIFIER, "Expected program name after 'active'",
                            'EXPECTED_IDENTIFIER').value
        self.skip_newlines()
        if not self.match(TokenType.DOT, TokenType.SEMICOLON):
            self.error(f"Expected '.' after active program name, got {describe(self.peek())}", 'EXPECTED_SYMBOL')
        return name

    # Statements

    def statement_list(self, unterminated_code: str, unterminated_message: str, open_line: int) -> List[Statement]:
        """Statements up to and including the closing '}'"""
        statements = []

        self.skip_newlines()
        while not self.check(TokenType.RIGHT_BRACE):
            if self.is_at_end() or self.check_keyword('program') or self.check_keyword('active'):
                self.error(unterminated_message, unterminated_code, open_line)
            statements.append(self.statement())
            self.skip_newlines()
            # optional ';' separator
            self.match(TokenType.SEMICOLON)
            self.skip_newlines()

        self.advance()
        return statements

    def statement(self) -> Statement:
        self.skip_newlines()
        token = self.peek()
        if token.type != TokenType.IDENTIFIER:
            self.error(f"Expected statement, got {describe(token)}", 'EXPECTED_STATEMENT')

        if token.value == 'if':
            return self.if_statement()
        if token.value == 'while':
            return self.while_statement()
        return self.action_statement()

    def action_statement(self) -> ActionStatement:
        token = self.advance()
        if not is_action(token.value):
            self.error(f"Unknown action '{token.value}'", 'UNKNOWN_ACTION', token.line)
        return ActionStatement(token.value, token.line)

    def if_statement(self) -> IfStatement:
        line = self.consume_keyword('if').line
        self.skip_newlines()
        condition = self.condition(TokenType.LEFT_BRACE)
        then_branch = self.block('if')

        else_branch = None
        self.skip_newlines()
        if self.check_keyword('else'):
            self.advance()
            self.skip_newlines()
            if self.check_keyword('if'):
                else_branch = [self.if_statement()]
            else:
                else_branch = self.block('else', allow_empty=True)

        return IfStatement(condition, then_branch, else_branch, line)

    def while_statement(self) -> WhileLoop:
        line = self.consume_keyword('while').line
        self.skip_newlines()
        condition = self.condition(TokenType.LEFT_BRACE)
        body = self.block('while')
        return WhileLoop(condition, body, line)

    def block(self, owner: str, allow_empty: bool = False) -> List[Statement]:
        self.skip_newlines()
        opening = self.consume(TokenType.LEFT_BRACE, f"Expected '{{' after {owner}")
        statements = self.statement_list(
            'UNTERMINATED_BLOCK', f"Block opened on line {opening.line} is not closed (missing '}}')",
            opening.line)
        if not statements and not allow_empty:
            self.error(f"Empty {owner} block", 'EMPTY_BLOCK', opening.line)
        return statements

    # Conditions: OR -> AND -> NOT -> atom / (condition)

    def condition(self, end: TokenType) -> Condition:
        try:
            return self.logical_or(end)
        except RecursionError:
            self.error("Condition is nested too deeply", 'EXPECTED_CONDITION')

    def logical_or(self, end: TokenType) -> Condition:
        cond = self.logical_and(end)

        while self.match(TokenType.OR):
            right = self.logical_and(end)
            cond = Or(cond, right)

        return cond

    def logical_and(self, end: TokenType) -> Condition:
        cond = self.unary(end)

        while self.match(TokenType.AND):
            right = self.unary(end)
            cond = And(cond, right)

        return cond

    def unary(self, end: TokenType) -> Condition:
        if self.match(TokenType.NOT):
            return Not(self.unary(end))
        return self.primary(end)

    def primary(self, end: TokenType) -> Condition:
        if self.match(TokenType.LEFT_PAREN):
            cond = self.logical_or(TokenType.RIGHT_PAREN)
            self.consume(TokenType.RIGHT_PAREN, "Expected ')' after condition")
            return cond

        token = self.peek()
        if token.type == TokenType.IDENTIFIER:
            self.advance()
            if not is_atom(token.value):
                self.error(f"Unknown condition '{token.value}'", 'UNKNOWN_CONDITION', token.line)
            return Atom(token.value)

        if token.type == end:
            self.error(f"Empty condition before '{_SYMBOLS[end]}'", 'EMPTY_CONDITION')

        self.error(f"Expected condition, got {describe(token)}", 'EXPECTED_CONDITION')

def parse_program(source: str) -> List[Statement]:
    """Parse program text or a JSON document into the active program's statements"""
    if source.lstrip()[:1] in ('{', '['):
        return load_document(source)
    tokens = Lexer(source).tokenize()
    try:
        return Parser(tokens).parse()
    except RecursionError:
        raise ParseError("Program is nested too deeply", 'EXPECTED_STATEMENT') from None

def parse_file(path: Union[str, Path], encoding: str = 'utf-8') -> List[Statement]:
    return parse_program(Path(path).read_text(encoding=encoding))
