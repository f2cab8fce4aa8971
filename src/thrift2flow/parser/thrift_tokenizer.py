"""Tokenizer for Thrift (.thrift) files."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import List


class ThriftTokenType(Enum):
    # Keywords
    INCLUDE = auto()
    CPP_INCLUDE = auto()
    NAMESPACE = auto()
    CONST = auto()
    TYPEDEF = auto()
    ENUM = auto()
    SENUM = auto()
    STRUCT = auto()
    UNION = auto()
    EXCEPTION = auto()
    SERVICE = auto()
    EXTENDS = auto()
    ONEWAY = auto()
    THROWS = auto()
    REQUIRED = auto()
    OPTIONAL = auto()
    LIST = auto()
    SET = auto()
    MAP = auto()
    TRUE = auto()
    FALSE = auto()

    # Delimiters
    LBRACE = auto()
    RBRACE = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    LANGLE = auto()
    RANGLE = auto()
    COMMA = auto()
    SEMICOLON = auto()
    COLON = auto()
    EQUALS = auto()
    STAR = auto()

    # Literals
    IDENT = auto()
    INT = auto()
    DOUBLE = auto()
    STRING_LIT = auto()

    # Special
    EOF = auto()


_KEYWORDS = {
    "include": ThriftTokenType.INCLUDE,
    "cpp_include": ThriftTokenType.CPP_INCLUDE,
    "namespace": ThriftTokenType.NAMESPACE,
    "const": ThriftTokenType.CONST,
    "typedef": ThriftTokenType.TYPEDEF,
    "enum": ThriftTokenType.ENUM,
    "senum": ThriftTokenType.SENUM,
    "struct": ThriftTokenType.STRUCT,
    "union": ThriftTokenType.UNION,
    "exception": ThriftTokenType.EXCEPTION,
    "service": ThriftTokenType.SERVICE,
    "extends": ThriftTokenType.EXTENDS,
    "oneway": ThriftTokenType.ONEWAY,
    "throws": ThriftTokenType.THROWS,
    "required": ThriftTokenType.REQUIRED,
    "optional": ThriftTokenType.OPTIONAL,
    "list": ThriftTokenType.LIST,
    "set": ThriftTokenType.SET,
    "map": ThriftTokenType.MAP,
    "true": ThriftTokenType.TRUE,
    "false": ThriftTokenType.FALSE,
}

_PUNCTUATION = {
    "{": ThriftTokenType.LBRACE,
    "}": ThriftTokenType.RBRACE,
    "(": ThriftTokenType.LPAREN,
    ")": ThriftTokenType.RPAREN,
    "[": ThriftTokenType.LBRACKET,
    "]": ThriftTokenType.RBRACKET,
    "<": ThriftTokenType.LANGLE,
    ">": ThriftTokenType.RANGLE,
    ",": ThriftTokenType.COMMA,
    ";": ThriftTokenType.SEMICOLON,
    ":": ThriftTokenType.COLON,
    "=": ThriftTokenType.EQUALS,
    "*": ThriftTokenType.STAR,
}

_HEX_DIGITS = "0123456789abcdefABCDEF"


@dataclass
class ThriftToken:
    type: ThriftTokenType
    value: str
    line: int
    col: int


def tokenize_thrift(text: str) -> List[ThriftToken]:
    """Tokenize a Thrift source string into a list of tokens.

    String literal tokens carry the text between the quotes, escapes left
    untouched.
    """
    tokens: List[ThriftToken] = []
    i = 0
    line = 1
    col = 1
    n = len(text)

    while i < n:
        ch = text[i]

        # Whitespace
        if ch in (" ", "\t", "\r"):
            i += 1
            col += 1
            continue

        if ch == "\n":
            i += 1
            line += 1
            col = 1
            continue

        # Single-line comment, C++ or shell style
        if ch == "#" or (ch == "/" and i + 1 < n and text[i + 1] == "/"):
            while i < n and text[i] != "\n":
                i += 1
            continue

        # Multi-line comment
        if ch == "/" and i + 1 < n and text[i + 1] == "*":
            i += 2
            col += 2
            while i < n:
                if text[i] == "\n":
                    line += 1
                    col = 1
                elif text[i] == "*" and i + 1 < n and text[i + 1] == "/":
                    i += 2
                    col += 2
                    break
                else:
                    col += 1
                i += 1
            continue

        if ch in _PUNCTUATION:
            tokens.append(ThriftToken(_PUNCTUATION[ch], ch, line, col))
            i += 1
            col += 1
            continue

        # String literal, either quote style
        if ch in ('"', "'"):
            quote = ch
            start_col = col
            i += 1
            col += 1
            start = i
            while i < n and text[i] != quote:
                if text[i] == "\\":
                    i += 1
                    col += 1
                if i < n and text[i] == "\n":
                    line += 1
                    col = 0
                i += 1
                col += 1
            value = text[start:i]
            if i < n:
                i += 1  # consume closing quote
                col += 1
            tokens.append(ThriftToken(ThriftTokenType.STRING_LIT, value, line, start_col))
            continue

        # Number: [+-] (0x hex | digits [. digits] [e [+-] digits])
        if ch.isdigit() or (ch in "+-" and i + 1 < n and (text[i + 1].isdigit() or text[i + 1] == ".")):
            start = i
            start_col = col
            if ch in "+-":
                i += 1
            if text.startswith(("0x", "0X"), i):
                i += 2
                while i < n and text[i] in _HEX_DIGITS:
                    i += 1
                tok_type = ThriftTokenType.INT
            else:
                tok_type = ThriftTokenType.INT
                while i < n and text[i].isdigit():
                    i += 1
                if i < n and text[i] == ".":
                    tok_type = ThriftTokenType.DOUBLE
                    i += 1
                    while i < n and text[i].isdigit():
                        i += 1
                if i < n and text[i] in "eE":
                    tok_type = ThriftTokenType.DOUBLE
                    i += 1
                    if i < n and text[i] in "+-":
                        i += 1
                    while i < n and text[i].isdigit():
                        i += 1
            col += i - start
            tokens.append(ThriftToken(tok_type, text[start:i], line, start_col))
            continue

        # Identifier / keyword; dots join qualified names such as shared.Foo
        if ch.isalpha() or ch == "_":
            start = i
            start_col = col
            while i < n and (text[i].isalnum() or text[i] in "_."):
                i += 1
                col += 1
            word = text[start:i]
            tok_type = _KEYWORDS.get(word, ThriftTokenType.IDENT)
            tokens.append(ThriftToken(tok_type, word, line, start_col))
            continue

        # Skip any other character
        i += 1
        col += 1

    tokens.append(ThriftToken(ThriftTokenType.EOF, "", line, col))
    return tokens
