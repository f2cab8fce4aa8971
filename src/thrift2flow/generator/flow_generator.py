from __future__ import annotations

import logging
import math
import os
import posixpath
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union as TypingUnion

from jinja2 import Environment, FileSystemLoader

from thrift2flow.formatter import format_flow
from thrift2flow.generator.type_mapper import TypeMapper, index_definitions
from thrift2flow.naming import NameTransform, identity
from thrift2flow.parser.thrift_ast import (
    Const,
    ConstIdentifier,
    ConstList,
    ConstLiteral,
    ConstMap,
    ConstValue,
    Definition,
    Enum,
    ExceptionDef,
    Field,
    FunctionDefinition,
    Service,
    Struct,
    ThriftProgram,
    Typedef,
    TypeReference,
    Union,
    UnsupportedDefinition,
)

logger = logging.getLogger(__name__)

THRIFT_EXTENSION = ".thrift"


@dataclass(frozen=True)
class GeneratorOptions:
    """Options shared by every file of one generation run.

    transform_name: rewrites every declared and referenced type/const name.
    enum_values: give an enum's plain name to its value union instead of its
        key union (the key union is then exported as ``<Name>Keys``).
    with_source: add the absolute path of the entry file to the header.
    """

    transform_name: NameTransform = identity
    enum_values: bool = False
    with_source: bool = False


def _get_template_env() -> Environment:
    template_dir = Path(__file__).parent.parent / "templates"
    return Environment(
        loader=FileSystemLoader(str(template_dir)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def _timestamp() -> str:
    return datetime.now().astimezone().strftime("%a %b %d %Y %H:%M:%S GMT%z (%Z)")


class FlowFileGenerator:
    """Generates the Flow declarations for the entry file of a ThriftProgram."""

    def __init__(self, program: ThriftProgram, options: Optional[GeneratorOptions] = None):
        self.program = program
        self.options = options or GeneratorOptions()
        self.transform_name = self.options.transform_name
        self.types = TypeMapper(self.transform_name)
        self.definitions = index_definitions(program.definitions)
        self._renderers: Dict[type, Callable[..., str]] = {
            Struct: self.generate_struct,
            ExceptionDef: self.generate_struct,
            Union: self.generate_union,
            Enum: self.generate_enum,
            Typedef: self.generate_typedef,
            Service: self.generate_service,
            Const: self.generate_const,
        }

    def generate_flow_file(self, timestamp: Optional[str] = None) -> str:
        """Render the complete, formatted document for the entry file."""
        template = _get_template_env().get_template("flow_file.js.flow.j2")
        declarations = [
            block
            for block in map(self.convert_definition, self.program.definitions)
            if block
        ]
        source = template.render(
            timestamp=timestamp or _timestamp(),
            source_path=self.program.entry_path if self.options.with_source else None,
            imports=self.generate_imports(),
            declarations=declarations,
        )
        return format_flow(source)

    def convert_definition(self, definition: Definition) -> Optional[str]:
        renderer = self._renderers.get(type(definition))
        if renderer is None:
            kind = (
                definition.kind
                if isinstance(definition, UnsupportedDefinition)
                else type(definition).__name__
            )
            logger.warning(
                "%s: Skipping %s %s",
                os.path.basename(self.program.entry_path),
                kind,
                getattr(definition, "name", "?"),
            )
            return None
        return renderer(definition)

    # -- imports --

    def generate_imports(self) -> List[str]:
        """One namespace import per included file, in program order."""
        entry = self.program.entry_path
        entry_dir = os.path.dirname(entry)
        statements: List[str] = []
        for path in self.program.paths:
            if path == entry:
                continue
            relpath = Path(os.path.relpath(path, entry_dir)).as_posix()
            name = posixpath.basename(relpath)
            if name.endswith(THRIFT_EXTENSION):
                name = name[: -len(THRIFT_EXTENSION)]
            module = posixpath.join(posixpath.dirname(relpath), name)
            if "/" not in module:
                module = f"./{module}"
            statements.append(f"import * as {posixpath.basename(module)} from '{module}.js';")
        return statements

    # -- definitions --

    def generate_struct(self, definition: Struct | ExceptionDef) -> str:
        return (
            f"export type {self.transform_name(definition.name)} = "
            f"{self.generate_struct_contents(definition.fields)};"
        )

    def generate_struct_contents(self, fields: List[Field]) -> str:
        members = [
            f"{f.name}{'?' if f.optional else ''}: {self.convert(f.value_type)};"
            for f in fields
        ]
        if len(members) > 1:
            return "{|\n" + "\n".join(members) + "\n|}"
        return "{|" + "".join(members) + "|}"

    def generate_union(self, definition: Union) -> str:
        return (
            f"export type {self.transform_name(definition.name)} = "
            f"{self.generate_union_contents(definition.fields)};"
        )

    def generate_union_contents(self, fields: List[Field]) -> str:
        if not fields:
            return "{||}"
        return " | ".join(
            f"{{|{f.name}: {self.convert(f.value_type)}|}}" for f in fields
        )

    def generate_enum(self, definition: Enum) -> str:
        name = self.transform_name(definition.name)
        values = self.generate_enum_values(definition)
        keys = self.generate_enum_keys(definition)
        if self.options.enum_values:
            return f"export type {name} = {values};\nexport type {name}Keys = {keys};"
        return f"export type {name}Values = {values};\nexport type {name} = {keys};"

    @staticmethod
    def generate_enum_values(definition: Enum) -> str:
        if not definition.values:
            return "empty"
        return " | ".join(
            str(v.value if v.value is not None else index)
            for index, v in enumerate(definition.values)
        )

    @staticmethod
    def generate_enum_keys(definition: Enum) -> str:
        if not definition.values:
            return "empty"
        return " | ".join(f'"{v.name}"' for v in definition.values)

    def generate_typedef(self, definition: Typedef) -> str:
        return (
            f"export type {self.transform_name(definition.name)} = "
            f"{self.convert(definition.value_type)};"
        )

    def generate_service(self, definition: Service) -> str:
        name = self.transform_name(definition.name)
        if not definition.functions:
            return f"export type {name} = {{||}};"
        functions = ",\n".join(self.generate_function(fn) for fn in definition.functions)
        return f"export type {name} = {{|\n{functions}\n|}};"

    def generate_function(self, fn: FunctionDefinition) -> str:
        params = ", ".join(f"{f.name}: {self.convert(f.value_type)}" for f in fn.fields)
        return f"{fn.name}: ({params}) => {self.convert(fn.returns)}"

    def generate_const(self, definition: Const) -> str:
        return (
            f"export const {self.transform_name(definition.name)}: "
            f"{self.convert(definition.value_type)} = "
            f"{self.generate_const_value(definition.value)};"
        )

    def generate_const_value(self, value: ConstValue) -> str:
        if isinstance(value, ConstLiteral):
            return _literal(value.value)
        if isinstance(value, ConstIdentifier):
            return self.generate_const_reference(value.name)
        if isinstance(value, ConstList):
            return "[" + ", ".join(self.generate_const_value(v) for v in value.values) + "]"
        if isinstance(value, ConstMap):
            entries = ", ".join(
                f"{self.generate_const_value(e.key)}: {self.generate_const_value(e.value)}"
                for e in value.entries
            )
            return "{" + entries + "}"
        return str(value)

    def generate_const_reference(self, name: str) -> str:
        """Render a reference to another constant or to an enum value.

        ``Enum.KEY`` of an enum in this file becomes the key literal, which is
        what the ``$Keys<typeof Enum>`` type of an enum-typed constant admits.
        Constant names go through the name transform like their declarations.
        """
        enum_name, dot, key = name.rpartition(".")
        enum = self.definitions.get(enum_name) if dot else None
        if isinstance(enum, Enum) and any(v.name == key for v in enum.values):
            return _quote(key)
        if name.count(".") > 1:
            return name
        return self.transform_name(name)

    def convert(self, t: TypeReference) -> str:
        return self.types.convert(t, self.definitions)


def _literal(value: TypingUnion[str, int, float, bool]) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
    return str(value)


def _quote(text: str) -> str:
    """Wrap source string content in single quotes, keeping its escapes.

    Line breaks inside the source literal become escape sequences.
    """
    out: List[str] = []
    escaped = False
    for ch in text:
        if escaped:
            out.append(ch)
            escaped = False
        elif ch == "\\":
            out.append(ch)
            escaped = True
        elif ch == "'":
            out.append("\\'")
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\r":
            out.append("\\r")
        else:
            out.append(ch)
    return "'" + "".join(out) + "'"
