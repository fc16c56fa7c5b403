"""Constant and enum tables from field and enum declarations.

Identifiers inside the draw routine refer to class fields (`kGlowName`,
`kMaxLayers`) and enums; these tables let the interpreter treat those
references as literals.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.mapping.compiler.value_resolver import evaluate_numeric, resolve_string
from src.mapping.syntax import CompilationUnit, EnumMember, Literal, LiteralKind

_NUMERIC_TYPE_KEYWORDS = ("float", "double", "int", "long", "decimal")
_DISPLAY_NAME_ATTRIBUTES = ("InspectorName", "InspectorNameAttribute")


@dataclass
class DeclarationTables:
    """Lookup tables resolved from a compilation unit."""

    strings: dict[str, str] = field(default_factory=dict)
    numbers: dict[str, float] = field(default_factory=dict)
    enums: dict[str, list[str]] = field(default_factory=dict)


def collect_declarations(unit: CompilationUnit) -> DeclarationTables:
    strings = collect_string_constants(unit)
    return DeclarationTables(
        strings=strings,
        numbers=collect_numeric_constants(unit),
        enums=collect_enum_definitions(unit, strings),
    )


def collect_string_constants(unit: CompilationUnit) -> dict[str, str]:
    """String fields initialized with a string literal."""
    constants: dict[str, str] = {}
    for declaration in unit.fields:
        if "string" not in declaration.type_name.lower():
            continue
        for declarator in declaration.declarators:
            match declarator.initializer:
                case Literal(kind=LiteralKind.STRING, value=value):
                    constants[declarator.name] = value
    return constants


def collect_numeric_constants(unit: CompilationUnit) -> dict[str, float]:
    """Numeric fields whose initializer folds to a constant.

    Fields are visited in source order, so a field may refer to any
    numeric field declared before it.
    """
    constants: dict[str, float] = {}
    for declaration in unit.fields:
        type_name = declaration.type_name.lower()
        if not any(k in type_name for k in _NUMERIC_TYPE_KEYWORDS):
            continue
        for declarator in declaration.declarators:
            value = evaluate_numeric(declarator.initializer, constants)
            if value is not None:
                constants[declarator.name] = value
    return constants


def collect_enum_definitions(unit: CompilationUnit, strings: dict[str, str]) -> dict[str, list[str]]:
    """Enum type name -> ordered display labels."""
    return {
        declaration.name: [_enum_display_name(member, strings) for member in declaration.members]
        for declaration in unit.enums
    }


def _enum_display_name(member: EnumMember, strings: dict[str, str]) -> str:
    for attribute in member.attributes:
        if not attribute.name.endswith(_DISPLAY_NAME_ATTRIBUTES) or not attribute.arguments:
            continue
        resolved = resolve_string(attribute.arguments[0], strings)
        if resolved:
            return resolved
    return member.name
