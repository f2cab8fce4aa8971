"""Recursive descent parser for Thrift (.thrift) files.

Consumes a token stream from thrift_tokenizer and produces thrift_ast nodes.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .thrift_ast import (
    BaseType,
    Const,
    ConstIdentifier,
    ConstList,
    ConstLiteral,
    ConstMap,
    ConstMapEntry,
    ConstValue,
    Definition,
    Enum,
    EnumValue,
    ExceptionDef,
    Field,
    FunctionDefinition,
    Include,
    ListType,
    MapType,
    NamedType,
    Service,
    SetType,
    Struct,
    ThriftDocument,
    Typedef,
    TypeReference,
    Union,
    UnsupportedDefinition,
)
from .thrift_tokenizer import ThriftToken, ThriftTokenType, tokenize_thrift

BASE_TYPES = {
    "bool", "byte", "i8", "i16", "i32", "i64", "double", "string", "binary",
}

_LIST_SEPARATORS = (ThriftTokenType.COMMA, ThriftTokenType.SEMICOLON)


class ThriftLoadError(Exception):
    """Base class for errors raised while reading Thrift sources."""


class ThriftParseError(ThriftLoadError):
    """Raised when the parser encounters unexpected input."""

    def __init__(self, message: str, token: ThriftToken | None = None):
        if token:
            super().__init__(f"Line {token.line}:{token.col}: {message}")
        else:
            super().__init__(message)


class ThriftParser:
    """Recursive descent parser for .thrift files."""

    def __init__(self, tokens: List[ThriftToken]):
        self._tokens = tokens
        self._pos = 0

    # -- public API --

    def parse(self) -> ThriftDocument:
        """Parse the full token stream into a ThriftDocument AST."""
        includes: List[Include] = []
        namespaces: Dict[str, str] = {}
        definitions: List[Definition] = []

        while not self._at_end():
            tt = self._peek().type

            if tt == ThriftTokenType.INCLUDE:
                self._advance()
                includes.append(Include(path=self._expect(ThriftTokenType.STRING_LIT).value))
            elif tt == ThriftTokenType.CPP_INCLUDE:
                self._advance()
                self._expect(ThriftTokenType.STRING_LIT)
            elif tt == ThriftTokenType.NAMESPACE:
                self._advance()
                scope = self._advance()
                namespaces[scope.value] = self._expect(ThriftTokenType.IDENT).value
            elif tt == ThriftTokenType.CONST:
                definitions.append(self._parse_const())
            elif tt == ThriftTokenType.TYPEDEF:
                definitions.append(self._parse_typedef())
            elif tt == ThriftTokenType.ENUM:
                definitions.append(self._parse_enum())
            elif tt == ThriftTokenType.SENUM:
                definitions.append(self._parse_senum())
            elif tt == ThriftTokenType.STRUCT:
                self._advance()
                name, fields = self._parse_struct_like()
                definitions.append(Struct(name=name, fields=fields))
            elif tt == ThriftTokenType.UNION:
                self._advance()
                name, fields = self._parse_struct_like()
                definitions.append(Union(name=name, fields=fields))
            elif tt == ThriftTokenType.EXCEPTION:
                self._advance()
                name, fields = self._parse_struct_like()
                definitions.append(ExceptionDef(name=name, fields=fields))
            elif tt == ThriftTokenType.SERVICE:
                definitions.append(self._parse_service())
            elif tt in _LIST_SEPARATORS:
                self._advance()
            else:
                tok = self._peek()
                raise ThriftParseError(
                    f"Unexpected {tok.type.name} ({tok.value!r}) at top level", tok
                )

        return ThriftDocument(
            includes=includes, namespaces=namespaces, definitions=definitions
        )

    # -- definitions --

    def _parse_const(self) -> Const:
        """Parse: CONST FieldType IDENT EQUALS ConstValue [sep]"""
        self._expect(ThriftTokenType.CONST)
        value_type = self._parse_field_type()
        name_tok = self._expect(ThriftTokenType.IDENT)
        self._expect(ThriftTokenType.EQUALS)
        value = self._parse_const_value()
        self._skip_separator()
        return Const(name=name_tok.value, value_type=value_type, value=value)

    def _parse_typedef(self) -> Typedef:
        """Parse: TYPEDEF FieldType IDENT [annotations] [sep]"""
        self._expect(ThriftTokenType.TYPEDEF)
        value_type = self._parse_field_type()
        name_tok = self._expect(ThriftTokenType.IDENT)
        self._parse_annotations()
        self._skip_separator()
        return Typedef(name=name_tok.value, value_type=value_type)

    def _parse_enum(self) -> Enum:
        """Parse: ENUM IDENT LBRACE (IDENT [EQUALS INT] [annotations] [sep])* RBRACE"""
        self._expect(ThriftTokenType.ENUM)
        name_tok = self._expect(ThriftTokenType.IDENT)
        self._expect(ThriftTokenType.LBRACE)

        values: List[EnumValue] = []
        while not self._at_end() and self._peek().type != ThriftTokenType.RBRACE:
            value_name = self._expect(ThriftTokenType.IDENT).value
            value: Optional[int] = None
            if self._match(ThriftTokenType.EQUALS):
                value = _parse_int(self._expect(ThriftTokenType.INT).value)
            self._parse_annotations()
            self._skip_separator()
            values.append(EnumValue(name=value_name, value=value))

        self._expect(ThriftTokenType.RBRACE)
        self._parse_annotations()
        return Enum(name=name_tok.value, values=values)

    def _parse_senum(self) -> UnsupportedDefinition:
        """Parse the deprecated: SENUM IDENT LBRACE (STRING_LIT [sep])* RBRACE"""
        self._expect(ThriftTokenType.SENUM)
        name_tok = self._expect(ThriftTokenType.IDENT)
        self._expect(ThriftTokenType.LBRACE)
        while not self._at_end() and self._peek().type != ThriftTokenType.RBRACE:
            self._expect(ThriftTokenType.STRING_LIT)
            self._skip_separator()
        self._expect(ThriftTokenType.RBRACE)
        self._parse_annotations()
        return UnsupportedDefinition(kind="Senum", name=name_tok.value)

    def _parse_struct_like(self) -> Tuple[str, List[Field]]:
        """Parse the part shared by struct, union and exception after the keyword:
        IDENT [xsd_all] LBRACE Field* RBRACE [annotations]
        """
        name_tok = self._expect(ThriftTokenType.IDENT)
        if self._peek().type == ThriftTokenType.IDENT and self._peek().value == "xsd_all":
            self._advance()
        self._expect(ThriftTokenType.LBRACE)
        fields = self._parse_fields(ThriftTokenType.RBRACE)
        self._expect(ThriftTokenType.RBRACE)
        self._parse_annotations()
        return name_tok.value, fields

    def _parse_service(self) -> Service:
        """Parse: SERVICE IDENT [EXTENDS IDENT] LBRACE Function* RBRACE [annotations]"""
        self._expect(ThriftTokenType.SERVICE)
        name_tok = self._expect(ThriftTokenType.IDENT)
        extends = None
        if self._match(ThriftTokenType.EXTENDS):
            extends = self._expect(ThriftTokenType.IDENT).value
        self._expect(ThriftTokenType.LBRACE)

        functions: List[FunctionDefinition] = []
        while not self._at_end() and self._peek().type != ThriftTokenType.RBRACE:
            functions.append(self._parse_function())

        self._expect(ThriftTokenType.RBRACE)
        self._parse_annotations()
        return Service(name=name_tok.value, functions=functions, extends=extends)

    def _parse_function(self) -> FunctionDefinition:
        """Parse: [ONEWAY] (void | FieldType) IDENT LPAREN Field* RPAREN
        [THROWS LPAREN Field* RPAREN] [annotations] [sep]
        """
        oneway = self._match(ThriftTokenType.ONEWAY) is not None
        if self._peek().type == ThriftTokenType.IDENT and self._peek().value == "void":
            self._advance()
            returns: TypeReference = BaseType("void")
        else:
            returns = self._parse_field_type()
        name_tok = self._expect(ThriftTokenType.IDENT)

        self._expect(ThriftTokenType.LPAREN)
        fields = self._parse_fields(ThriftTokenType.RPAREN)
        self._expect(ThriftTokenType.RPAREN)

        throws: List[Field] = []
        if self._match(ThriftTokenType.THROWS):
            self._expect(ThriftTokenType.LPAREN)
            throws = self._parse_fields(ThriftTokenType.RPAREN)
            self._expect(ThriftTokenType.RPAREN)

        self._parse_annotations()
        self._skip_separator()
        return FunctionDefinition(
            name=name_tok.value,
            returns=returns,
            fields=fields,
            throws=throws,
            oneway=oneway,
        )

    # -- fields --

    def _parse_fields(self, closing: ThriftTokenType) -> List[Field]:
        fields: List[Field] = []
        while not self._at_end() and self._peek().type != closing:
            fields.append(self._parse_field())
        return fields

    def _parse_field(self) -> Field:
        """Parse: [INT COLON] [REQUIRED | OPTIONAL] FieldType IDENT
        [EQUALS ConstValue] [annotations] [sep]
        """
        field_id: Optional[int] = None
        if self._peek().type == ThriftTokenType.INT:
            field_id = _parse_int(self._advance().value)
            self._expect(ThriftTokenType.COLON)

        optional = False
        if self._match(ThriftTokenType.OPTIONAL):
            optional = True
        else:
            self._match(ThriftTokenType.REQUIRED)

        value_type = self._parse_field_type()
        name_tok = self._expect(ThriftTokenType.IDENT)

        default: Optional[ConstValue] = None
        if self._match(ThriftTokenType.EQUALS):
            default = self._parse_const_value()

        self._parse_annotations()
        self._skip_separator()
        return Field(
            name=name_tok.value,
            value_type=value_type,
            field_id=field_id,
            optional=optional,
            default=default,
        )

    # -- types --

    def _parse_field_type(self) -> TypeReference:
        tok = self._peek()

        if tok.type == ThriftTokenType.LIST:
            self._advance()
            self._skip_cpp_type()
            self._expect(ThriftTokenType.LANGLE)
            value_type = self._parse_field_type()
            self._expect(ThriftTokenType.RANGLE)
            self._parse_annotations()
            return ListType(value_type=value_type)

        if tok.type == ThriftTokenType.SET:
            self._advance()
            self._skip_cpp_type()
            self._expect(ThriftTokenType.LANGLE)
            value_type = self._parse_field_type()
            self._expect(ThriftTokenType.RANGLE)
            self._parse_annotations()
            return SetType(value_type=value_type)

        if tok.type == ThriftTokenType.MAP:
            self._advance()
            self._skip_cpp_type()
            self._expect(ThriftTokenType.LANGLE)
            key_type = self._parse_field_type()
            self._expect(ThriftTokenType.COMMA)
            value_type = self._parse_field_type()
            self._expect(ThriftTokenType.RANGLE)
            self._parse_annotations()
            return MapType(key_type=key_type, value_type=value_type)

        name_tok = self._expect(ThriftTokenType.IDENT)
        annotations = self._parse_annotations()
        if name_tok.value in BASE_TYPES:
            return BaseType(base_type=name_tok.value, annotations=annotations)
        return NamedType(name=name_tok.value)

    def _parse_annotations(self) -> Dict[str, str]:
        """Parse: LPAREN (IDENT [EQUALS STRING_LIT] [sep])* RPAREN, if present."""
        annotations: Dict[str, str] = {}
        if self._peek().type != ThriftTokenType.LPAREN:
            return annotations

        self._advance()
        while not self._at_end() and self._peek().type != ThriftTokenType.RPAREN:
            key = self._advance().value
            value = ""
            if self._match(ThriftTokenType.EQUALS):
                value = self._expect(ThriftTokenType.STRING_LIT).value
            annotations[key] = value
            self._skip_separator()
        self._expect(ThriftTokenType.RPAREN)
        return annotations

    def _skip_cpp_type(self) -> None:
        """Skip the legacy ``cpp_type "..."`` qualifier on container types."""
        if self._peek().type == ThriftTokenType.IDENT and self._peek().value == "cpp_type":
            self._advance()
            self._expect(ThriftTokenType.STRING_LIT)

    # -- constant values --

    def _parse_const_value(self) -> ConstValue:
        tok = self._advance()

        if tok.type == ThriftTokenType.INT:
            return ConstLiteral(_parse_int(tok.value))
        if tok.type == ThriftTokenType.DOUBLE:
            return ConstLiteral(float(tok.value))
        if tok.type == ThriftTokenType.STRING_LIT:
            return ConstLiteral(tok.value)
        if tok.type == ThriftTokenType.TRUE:
            return ConstLiteral(True)
        if tok.type == ThriftTokenType.FALSE:
            return ConstLiteral(False)
        if tok.type == ThriftTokenType.IDENT:
            return ConstIdentifier(tok.value)

        if tok.type == ThriftTokenType.LBRACKET:
            values: List[ConstValue] = []
            while not self._at_end() and self._peek().type != ThriftTokenType.RBRACKET:
                values.append(self._parse_const_value())
                self._skip_separator()
            self._expect(ThriftTokenType.RBRACKET)
            return ConstList(values=values)

        if tok.type == ThriftTokenType.LBRACE:
            entries: List[ConstMapEntry] = []
            while not self._at_end() and self._peek().type != ThriftTokenType.RBRACE:
                key = self._parse_const_value()
                self._expect(ThriftTokenType.COLON)
                value = self._parse_const_value()
                self._skip_separator()
                entries.append(ConstMapEntry(key=key, value=value))
            self._expect(ThriftTokenType.RBRACE)
            return ConstMap(entries=entries)

        raise ThriftParseError(
            f"Expected constant value, got {tok.type.name} ({tok.value!r})", tok
        )

    # -- token helpers --

    def _skip_separator(self) -> None:
        if self._peek().type in _LIST_SEPARATORS:
            self._advance()

    def _peek(self) -> ThriftToken:
        return self._tokens[self._pos]

    def _advance(self) -> ThriftToken:
        tok = self._tokens[self._pos]
        if tok.type != ThriftTokenType.EOF:
            self._pos += 1
        return tok

    def _match(self, expected: ThriftTokenType) -> Optional[ThriftToken]:
        if self._peek().type == expected:
            return self._advance()
        return None

    def _expect(self, expected: ThriftTokenType) -> ThriftToken:
        tok = self._peek()
        if tok.type != expected:
            raise ThriftParseError(
                f"Expected {expected.name}, got {tok.type.name} ({tok.value!r})",
                tok,
            )
        return self._advance()

    def _at_end(self) -> bool:
        return self._tokens[self._pos].type == ThriftTokenType.EOF


def _parse_int(text: str) -> int:
    """Parse a decimal or hex integer literal, with an optional sign."""
    sign = -1 if text.startswith("-") else 1
    digits = text.lstrip("+-")
    if digits[:2].lower() == "0x":
        return sign * int(digits[2:], 16)
    return sign * int(digits)


def parse_thrift(text: str) -> ThriftDocument:
    """Parse Thrift source text into a ThriftDocument."""
    return ThriftParser(tokenize_thrift(text)).parse()
