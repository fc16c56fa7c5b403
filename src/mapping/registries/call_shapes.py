"""Call shape registry.

The interpreter only understands a fixed vocabulary of calls. Every
invocation is classified into exactly one CallShape; anything not named
here is OTHER, which only has an effect when it passes a registered
property binding (a property draw call) and is otherwise ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from src.mapping.syntax import Identifier, Invocation, MemberAccess


class CallShape(str, Enum):
    """Recognized call shapes."""

    MAKE_EFFECT = "make_effect"
    MAKE_SUB_EFFECT = "make_sub_effect"
    FIND_PROPERTY = "find_property"
    INDENT_UP = "indent_up"
    INDENT_DOWN = "indent_down"
    OTHER = "other"


class ValueMember(str, Enum):
    """Serialized-property value members that carry a default on assignment."""

    FLOAT_VALUE = "floatValue"
    INT_VALUE = "intValue"
    COLOR_VALUE = "colorValue"


@dataclass(frozen=True)
class EffectSignature:
    """Argument positions of a `makeEffect(...)` call."""

    toggle: int = 2
    name: int = 5
    keyword: int = 10
    keyword_define: int = 12


@dataclass(frozen=True)
class SubEffectSignature:
    """Argument positions of a `makeSubEffect(...)` call."""

    name: int = 1
    toggle: int = 2
    display_order: int = 3


@dataclass(frozen=True)
class FindPropertySignature:
    binding: int = 0


EFFECT_SIGNATURE = EffectSignature()
SUB_EFFECT_SIGNATURE = SubEffectSignature()
FIND_PROPERTY_SIGNATURE = FindPropertySignature()

DEFAULT_MODULE_NAME = "Unknown"

# name -> (shape, allowed as a bare identifier call)
_CALL_SHAPES: dict[str, tuple[CallShape, bool]] = {
    "makeEffect": (CallShape.MAKE_EFFECT, False),
    "makeSubEffect": (CallShape.MAKE_SUB_EFFECT, False),
    "FindProperty": (CallShape.FIND_PROPERTY, True),
    "doIndentUp": (CallShape.INDENT_UP, True),
    "doIndentDown": (CallShape.INDENT_DOWN, True),
}


def classify_call(invocation: Invocation) -> CallShape:
    """Classify an invocation by its callee.

    Effect constructors are only recognized as member calls
    (`june.makeEffect(...)`); the rest match either form.
    """
    function = invocation.function
    if isinstance(function, MemberAccess):
        entry = _CALL_SHAPES.get(function.name)
        return entry[0] if entry else CallShape.OTHER
    if isinstance(function, Identifier):
        entry = _CALL_SHAPES.get(function.name)
        if entry and entry[1]:
            return entry[0]
    return CallShape.OTHER


def classify_value_member(member_name: str) -> ValueMember | None:
    """Match `p.floatValue`-style assignment targets (case-insensitive)."""
    lowered = member_name.lower()
    for member in ValueMember:
        if member.value.lower() in lowered:
            return member
    return None
