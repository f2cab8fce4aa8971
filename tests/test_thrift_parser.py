import pytest

from thrift2flow.parser.thrift_ast import (
    BaseType,
    Const,
    ConstIdentifier,
    ConstList,
    ConstLiteral,
    ConstMap,
    Enum,
    ExceptionDef,
    ListType,
    MapType,
    NamedType,
    Service,
    SetType,
    Struct,
    Typedef,
    Union,
    UnsupportedDefinition,
)
from thrift2flow.parser.thrift_ast_parser import ThriftParseError, parse_thrift
from thrift2flow.parser.thrift_tokenizer import ThriftTokenType, tokenize_thrift


class TestTokenizer:
    def test_comments_skipped(self):
        tokens = tokenize_thrift("# shell\n// line\n/* block\n */ struct")
        assert [t.type for t in tokens] == [ThriftTokenType.STRUCT, ThriftTokenType.EOF]
        assert tokens[0].line == 4

    def test_numbers(self):
        tokens = tokenize_thrift("1 -2 0x1F 1.5 -3e2")
        assert [(t.type, t.value) for t in tokens[:-1]] == [
            (ThriftTokenType.INT, "1"),
            (ThriftTokenType.INT, "-2"),
            (ThriftTokenType.INT, "0x1F"),
            (ThriftTokenType.DOUBLE, "1.5"),
            (ThriftTokenType.DOUBLE, "-3e2"),
        ]

    def test_qualified_identifier(self):
        tokens = tokenize_thrift("shared.Color")
        assert tokens[0].type == ThriftTokenType.IDENT
        assert tokens[0].value == "shared.Color"

    def test_string_literals(self):
        tokens = tokenize_thrift("\"double\" 'single'")
        assert [t.value for t in tokens[:-1]] == ["double", "single"]
        assert all(t.type == ThriftTokenType.STRING_LIT for t in tokens[:-1])


class TestHeaders:
    def test_includes_and_namespaces(self):
        doc = parse_thrift("""\
include "shared.thrift"
include 'common/types.thrift'
cpp_include "<vector>"
namespace java com.example.api
namespace * api
""")
        assert [i.path for i in doc.includes] == ["shared.thrift", "common/types.thrift"]
        assert doc.namespaces == {"java": "com.example.api", "*": "api"}
        assert doc.definitions == []


class TestStructs:
    def test_struct_fields(self):
        doc = parse_thrift("""\
struct User {
    1: required i32 id,
    2: optional string name;
    3: list<string> tags = [],
    i64 (js.type = "Long") created
}
""")
        struct = doc.definitions[0]
        assert isinstance(struct, Struct)
        assert struct.name == "User"
        assert [f.name for f in struct.fields] == ["id", "name", "tags", "created"]
        assert [f.field_id for f in struct.fields] == [1, 2, 3, None]
        assert [f.optional for f in struct.fields] == [False, True, False, False]
        assert struct.fields[2].value_type == ListType(BaseType("string"))
        assert struct.fields[2].default == ConstList([])
        assert struct.fields[3].value_type.annotations == {"js.type": "Long"}

    def test_union_and_exception(self):
        doc = parse_thrift("""\
union Value { 1: string text; 2: double number }
exception NotFound { 1: string message } (code = "404")
""")
        assert isinstance(doc.definitions[0], Union)
        assert [f.name for f in doc.definitions[0].fields] == ["text", "number"]
        assert isinstance(doc.definitions[1], ExceptionDef)
        assert doc.definitions[1].name == "NotFound"

    def test_container_types(self):
        doc = parse_thrift("""\
struct Containers {
    1: map<string, list<i32>> index
    2: set<shared.Color> colors
    3: map cpp_type "std::unordered_map" <i8, binary> raw
}
""")
        fields = doc.definitions[0].fields
        assert fields[0].value_type == MapType(BaseType("string"), ListType(BaseType("i32")))
        assert fields[1].value_type == SetType(NamedType("shared.Color"))
        assert fields[2].value_type == MapType(BaseType("i8"), BaseType("binary"))


class TestEnums:
    def test_enum_values(self):
        doc = parse_thrift("""\
enum Color {
    RED,
    GREEN = 5,
    BLUE = 0x10 (deprecated = "true");
}
""")
        enum = doc.definitions[0]
        assert isinstance(enum, Enum)
        assert [(v.name, v.value) for v in enum.values] == [
            ("RED", None),
            ("GREEN", 5),
            ("BLUE", 16),
        ]

    def test_senum_is_unsupported(self):
        doc = parse_thrift('senum Legacy { "a", "b" }')
        assert doc.definitions == [UnsupportedDefinition(kind="Senum", name="Legacy")]


class TestTypedefsAndConsts:
    def test_typedef(self):
        doc = parse_thrift('typedef i64 (js.type = "Date") Timestamp')
        typedef = doc.definitions[0]
        assert isinstance(typedef, Typedef)
        assert typedef.name == "Timestamp"
        assert typedef.value_type.annotations == {"js.type": "Date"}

    def test_consts(self):
        doc = parse_thrift("""\
const string NAME = "x"
const i32 MAX = -10;
const double RATIO = 0.25
const bool ON = true
const Color DEFAULT = Color.RED
const map<string, i32> LIMITS = {"a": 1, "b": 2}
""")
        consts = doc.definitions
        assert all(isinstance(c, Const) for c in consts)
        assert consts[0].value == ConstLiteral("x")
        assert consts[1].value == ConstLiteral(-10)
        assert consts[2].value == ConstLiteral(0.25)
        assert consts[3].value == ConstLiteral(True)
        assert consts[4].value == ConstIdentifier("Color.RED")
        assert isinstance(consts[5].value, ConstMap)
        assert len(consts[5].value.entries) == 2


class TestServices:
    def test_service_functions(self):
        doc = parse_thrift("""\
service Users extends base.Service {
    User get(1: i32 id, 2: optional bool verbose) throws (1: NotFound nf),
    oneway void ping();
    list<User> all()
}
""")
        service = doc.definitions[0]
        assert isinstance(service, Service)
        assert service.extends == "base.Service"
        assert [fn.name for fn in service.functions] == ["get", "ping", "all"]

        get = service.functions[0]
        assert get.returns == NamedType("User")
        assert [f.name for f in get.fields] == ["id", "verbose"]
        assert [f.name for f in get.throws] == ["nf"]

        ping = service.functions[1]
        assert ping.oneway is True
        assert ping.returns == BaseType("void")
        assert ping.fields == []

        assert service.functions[2].returns == ListType(NamedType("User"))


class TestErrors:
    def test_error_carries_position(self):
        with pytest.raises(ThriftParseError, match=r"Line 3:1"):
            parse_thrift("struct A {\n    1: \n}")

    def test_unknown_top_level(self):
        with pytest.raises(ThriftParseError, match="at top level"):
            parse_thrift("message Foo {}")
