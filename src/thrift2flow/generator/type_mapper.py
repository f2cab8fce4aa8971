"""Map Thrift type references to Flow type expressions."""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional

from thrift2flow.naming import NameTransform, identity
from thrift2flow.parser.thrift_ast import (
    BaseType,
    Definition,
    Enum,
    ListType,
    MapType,
    NamedType,
    SetType,
    TypeReference,
)

# Thrift base type -> Flow type
PRIMITIVE_TYPE_MAP: Dict[str, str] = {
    "binary": "Buffer",
    "bool": "boolean",
    "byte": "number",
    "i8": "number",
    "i16": "number",
    "i32": "number",
    "i64": "Buffer",
    "double": "number",
    "string": "string",
    "void": "void",
}

# Values of the ``js.type`` annotation understood on i64 fields
I64_TYPE_MAP: Dict[str, str] = {
    "Long": "Long",
    "Date": "Date",
}

DefinitionIndex = Mapping[str, Definition]


def index_definitions(definitions: Iterable[Definition]) -> Dict[str, Definition]:
    """Index top-level definitions by name. Later duplicates win."""
    return {d.name: d for d in definitions}


class TypeMapper:
    """Converts a type reference to a Flow type expression.

    Rules are tried in order and the first one that applies wins:
    list/set, enum reference, map, annotated i64, primitive, named type.
    """

    def __init__(self, transform_name: NameTransform = identity):
        self.transform_name = transform_name

    def convert(self, t: TypeReference, definitions: DefinitionIndex) -> str:
        return (
            self._array_type(t, definitions)
            or self._enum_type(t, definitions)
            or self._map_type(t, definitions)
            or self._annotated_type(t)
            or self._primitive_type(t)
            or self.transform_name(t.name)
        )

    def _array_type(self, t: TypeReference, definitions: DefinitionIndex) -> Optional[str]:
        if isinstance(t, (ListType, SetType)):
            return f"{self.convert(t.value_type, definitions)}[]"
        return None

    def _enum_type(self, t: TypeReference, definitions: DefinitionIndex) -> Optional[str]:
        # The enum's plain type holds its keys; reference sites ask for them explicitly.
        if isinstance(t, NamedType) and isinstance(definitions.get(t.name), Enum):
            return f"$Keys<typeof {self.transform_name(t.name)}>"
        return None

    def _map_type(self, t: TypeReference, definitions: DefinitionIndex) -> Optional[str]:
        if isinstance(t, MapType):
            ktype = self.convert(t.key_type, definitions)
            vtype = self.convert(t.value_type, definitions)
            return f"{{[{ktype}]: {vtype}}}"
        return None

    @staticmethod
    def _annotated_type(t: TypeReference) -> Optional[str]:
        if isinstance(t, BaseType) and t.base_type == "i64":
            return I64_TYPE_MAP.get(t.annotations.get("js.type", ""))
        return None

    @staticmethod
    def _primitive_type(t: TypeReference) -> Optional[str]:
        if isinstance(t, BaseType):
            return PRIMITIVE_TYPE_MAP.get(t.base_type)
        return None
