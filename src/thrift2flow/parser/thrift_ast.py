"""AST node definitions for Thrift (.thrift) files."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union as TypingUnion


# -- type references --


@dataclass(frozen=True)
class BaseType:
    """A primitive type: bool, byte, i8, i16, i32, i64, double, string, binary, void."""

    base_type: str
    annotations: Dict[str, str] = field(default_factory=dict, compare=False)

    @property
    def name(self) -> str:
        return self.base_type


@dataclass(frozen=True)
class NamedType:
    """A reference to a definition, possibly qualified (``shared.Foo``)."""

    name: str


@dataclass(frozen=True)
class ListType:
    value_type: TypeReference


@dataclass(frozen=True)
class SetType:
    value_type: TypeReference


@dataclass(frozen=True)
class MapType:
    key_type: TypeReference
    value_type: TypeReference


TypeReference = TypingUnion[BaseType, NamedType, ListType, SetType, MapType]


# -- constant values --


@dataclass(frozen=True)
class ConstLiteral:
    """A string, integer, double or boolean literal."""

    value: TypingUnion[str, int, float, bool]


@dataclass(frozen=True)
class ConstIdentifier:
    """A reference to another constant or an enum value, e.g. ``Color.RED``."""

    name: str


@dataclass(frozen=True)
class ConstList:
    values: List[ConstValue] = field(default_factory=list)


@dataclass(frozen=True)
class ConstMap:
    entries: List[ConstMapEntry] = field(default_factory=list)


@dataclass(frozen=True)
class ConstMapEntry:
    key: ConstValue
    value: ConstValue


ConstValue = TypingUnion[ConstLiteral, ConstIdentifier, ConstList, ConstMap]


# -- members --


@dataclass(frozen=True)
class Field:
    """A field declaration: [id:] [required|optional] Type name [= default]"""

    name: str
    value_type: TypeReference
    field_id: Optional[int] = None
    optional: bool = False
    default: Optional[ConstValue] = None


@dataclass(frozen=True)
class EnumValue:
    name: str
    value: Optional[int] = None


@dataclass(frozen=True)
class FunctionDefinition:
    """A service method: [oneway] ReturnType name(fields) [throws (fields)]"""

    name: str
    returns: TypeReference
    fields: List[Field] = field(default_factory=list)
    throws: List[Field] = field(default_factory=list)
    oneway: bool = False


# -- top-level definitions --


@dataclass(frozen=True)
class Struct:
    name: str
    fields: List[Field] = field(default_factory=list)


@dataclass(frozen=True)
class ExceptionDef:
    name: str
    fields: List[Field] = field(default_factory=list)


@dataclass(frozen=True)
class Union:
    name: str
    fields: List[Field] = field(default_factory=list)


@dataclass(frozen=True)
class Enum:
    name: str
    values: List[EnumValue] = field(default_factory=list)


@dataclass(frozen=True)
class Typedef:
    name: str
    value_type: TypeReference


@dataclass(frozen=True)
class Service:
    name: str
    functions: List[FunctionDefinition] = field(default_factory=list)
    extends: Optional[str] = None


@dataclass(frozen=True)
class Const:
    name: str
    value_type: TypeReference
    value: ConstValue


@dataclass(frozen=True)
class UnsupportedDefinition:
    """A definition the parser accepts but no generator renders (e.g. ``senum``)."""

    kind: str
    name: str


Definition = TypingUnion[
    Struct, ExceptionDef, Union, Enum, Typedef, Service, Const, UnsupportedDefinition
]


# -- files --


@dataclass(frozen=True)
class Include:
    path: str


@dataclass(frozen=True)
class ThriftDocument:
    """Top-level parsed representation of a .thrift file."""

    includes: List[Include] = field(default_factory=list)
    namespaces: Dict[str, str] = field(default_factory=dict)
    definitions: List[Definition] = field(default_factory=list)


@dataclass(frozen=True)
class ThriftProgram:
    """An entry file together with every file it includes, transitively.

    ``documents`` is keyed by absolute path and ordered entry first, then
    includes depth-first in declaration order.
    """

    entry_path: str
    documents: Dict[str, ThriftDocument] = field(default_factory=dict)

    @property
    def definitions(self) -> List[Definition]:
        return self.documents[self.entry_path].definitions

    @property
    def paths(self) -> List[str]:
        return list(self.documents)
