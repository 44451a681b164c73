"""
Robolang Lexer
Tokenizes program text into a flat stream of tokens
"""

import logging
from enum import Enum, auto
from dataclasses import dataclass
from typing import List, Optional

from .errors import LexicalError

logger = logging.getLogger(__name__)

class TokenType(Enum):
    IDENTIFIER = auto()

    # Logical
    AND = auto()
    OR = auto()
    NOT = auto()

    # Punctuation
    ASSIGN = auto()
    SEMICOLON = auto()
    DOT = auto()

    # Brackets
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()
    LEFT_BRACE = auto()
    RIGHT_BRACE = auto()

    # Special
    NEWLINE = auto()
    EOF = auto()

@dataclass
class Token:
    type: TokenType
    value: str
    line: int
    column: int

class Lexer:
    def __init__(self, source: str):
        self.source = source
        self.position = 0
        self.line = 1
        self.column = 1
        self.tokens = []

        self.operators = {
            '&&': TokenType.AND,
            '||': TokenType.OR,
        }

        self.single_char_tokens = {
            '!': TokenType.NOT,
            '=': TokenType.ASSIGN,
            ';': TokenType.SEMICOLON,
            '.': TokenType.DOT,
            '(': TokenType.LEFT_PAREN,
            ')': TokenType.RIGHT_PAREN,
            '{': TokenType.LEFT_BRACE,
            '}': TokenType.RIGHT_BRACE,
        }

    def current_char(self) -> Optional[str]:
        if self.position >= len(self.source):
            return None
        return self.source[self.position]

    def peek_char(self, offset: int = 1) -> Optional[str]:
        peek_pos = self.position + offset
        if peek_pos >= len(self.source):
            return None
        return self.source[peek_pos]

    def advance(self) -> Optional[str]:
        char = self.current_char()
        self.position += 1
        if char == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return char

    def skip_whitespace(self):
        while self.current_char() and self.current_char() in ' \t\r':
            self.advance()

    def skip_comment(self):
        while self.current_char() and self.current_char() != '\n':
            self.advance()

    def read_identifier(self) -> str:
        start = self.position
        while (self.current_char() and
               (self.current_char().isascii() and self.current_char().isalnum()
                or self.current_char() == '_')):
            self.advance()
        return self.source[start:self.position]

    def tokenize(self) -> List[Token]:
        while self.current_char():
            self.skip_whitespace()

            if not self.current_char():
                break

            start_line = self.line
            start_column = self.column
            char = self.current_char()

            # Newlines
            if char == '\n':
                self.tokens.append(Token(TokenType.NEWLINE, char, start_line, start_column))
                self.advance()
                continue

            # Comments
            if char == '/' and self.peek_char() == '/':
                self.skip_comment()
                continue

            # Identifiers
            if char.isascii() and (char.isalpha() or char == '_'):
                identifier = self.read_identifier()
                self.tokens.append(Token(TokenType.IDENTIFIER, identifier, start_line, start_column))
                continue

            # Two-character operators
            two_char = char + (self.peek_char() or '')
            if two_char in self.operators:
                self.advance()
                self.advance()
                self.tokens.append(Token(self.operators[two_char], two_char, start_line, start_column))
                continue

            if char in self.single_char_tokens:
                self.tokens.append(Token(self.single_char_tokens[char], char, start_line, start_column))
                self.advance()
                continue

            raise LexicalError(f"Unexpected character {char!r}", 'UNEXPECTED_CHARACTER',
                               line=self.line, char=char)

        self.tokens.append(Token(TokenType.EOF, '', self.line, self.column))
        logger.debug("Tokenized %d tokens over %d lines", len(self.tokens), self.line)
        return self.tokens

def tokenize(source: str) -> List[Token]:
    return Lexer(source).tokenize()
