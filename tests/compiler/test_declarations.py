"""Tests for declaration tables: string/numeric constants and enum labels."""

from src.mapping.compiler.declarations import (
    collect_declarations,
    collect_enum_definitions,
    collect_numeric_constants,
    collect_string_constants,
)
from src.mapping.syntax import (
    Attribute,
    CompilationUnit,
    EnumDeclaration,
    EnumMember,
    FieldDeclaration,
    VariableDeclarator,
)
from tests.syntax_builders import binary, ident, lit

# =============================================================================
# Helpers
# =============================================================================


def _make_field(type_name: str, name: str, initializer) -> FieldDeclaration:
    return FieldDeclaration(
        type_name=type_name,
        declarators=(VariableDeclarator(name=name, initializer=initializer),),
    )


def _make_unit(fields=(), enums=()) -> CompilationUnit:
    return CompilationUnit(fields=tuple(fields), enums=tuple(enums))


# =============================================================================
# Constants
# =============================================================================


def test_string_constants_need_string_type_and_literal():
    unit = _make_unit(
        [
            _make_field("const string", "kGlow", lit("Glow")),
            _make_field("static readonly String", "kRim", lit("Rim")),
            _make_field("string", "kComputed", ident("kGlow")),
            _make_field("float", "kNotAString", lit("x")),
        ]
    )

    assert collect_string_constants(unit) == {"kGlow": "Glow", "kRim": "Rim"}


def test_numeric_constants_fold_in_declaration_order():
    unit = _make_unit(
        [
            _make_field("const float", "kBase", lit(2)),
            _make_field("const int", "kDouble", binary("*", ident("kBase"), 2)),
            _make_field("const double", "kUsesLater", binary("+", ident("kLater"), 1)),
            _make_field("const long", "kLater", lit(10)),
            _make_field("string", "kIgnored", lit(1)),
        ]
    )

    assert collect_numeric_constants(unit) == {"kBase": 2.0, "kDouble": 4.0, "kLater": 10.0}


# =============================================================================
# Enums
# =============================================================================


def test_enum_labels_default_to_member_names():
    unit = _make_unit(
        enums=[EnumDeclaration(name="Mode", members=(EnumMember(name="Off"), EnumMember(name="On")))]
    )
    assert collect_enum_definitions(unit, {}) == {"Mode": ["Off", "On"]}


def test_inspector_name_attribute_overrides_label():
    members = (
        EnumMember(name="Low", attributes=(Attribute(name="InspectorName", arguments=(lit("Low Power"),)),)),
        EnumMember(
            name="High",
            attributes=(Attribute(name="UnityEngine.InspectorNameAttribute", arguments=(ident("kHigh"),)),),
        ),
        EnumMember(name="Max", attributes=(Attribute(name="Tooltip", arguments=(lit("ignored"),)),)),
    )
    unit = _make_unit(enums=[EnumDeclaration(name="Power", members=members)])

    assert collect_enum_definitions(unit, {"kHigh": "High Power"}) == {
        "Power": ["Low Power", "High Power", "Max"]
    }


def test_collect_declarations_builds_all_tables():
    unit = _make_unit(
        fields=[_make_field("string", "kName", lit("Glow")), _make_field("float", "kMax", lit(4))],
        enums=[EnumDeclaration(name="Mode", members=(EnumMember(name="A"),))],
    )

    tables = collect_declarations(unit)

    assert tables.strings == {"kName": "Glow"}
    assert tables.numbers == {"kMax": 4.0}
    assert tables.enums == {"Mode": ["A"]}
