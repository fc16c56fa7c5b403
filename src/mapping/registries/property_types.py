"""Property type registry.

Maps draw-call names and declarative type tokens onto PropertyType.
Inference rules are checked in order; the first match wins.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from src.models.mapping_document import PropertyType


@dataclass(frozen=True)
class InferenceRule:
    """A call matches when its name contains any `name_keywords` entry or
    one of its string arguments contains any `argument_keywords` entry."""

    property_type: PropertyType
    name_keywords: tuple[str, ...]
    argument_keywords: tuple[str, ...] = ()


TYPE_INFERENCE_RULES: list[InferenceRule] = [
    InferenceRule(PropertyType.TEXTURE, ("texture",), ("texture",)),
    InferenceRule(PropertyType.VECTOR, ("vector",), ("vector",)),
    InferenceRule(PropertyType.GRADIENT, ("gradient", "ramp"), ("gradient", "ramp")),
    InferenceRule(PropertyType.CURVE, ("curve",), ("curve",)),
    InferenceRule(PropertyType.ENUM, ("enumpopup",)),
    InferenceRule(PropertyType.COLOR, ("color",)),
    InferenceRule(PropertyType.TOGGLE, ("toggle",)),
]

FALLBACK_PROPERTY_TYPE = PropertyType.FLOAT


def infer_property_type(method_name: str, argument_strings: Iterable[str] = ()) -> PropertyType:
    """Infer a property type from a draw call."""
    name = method_name.lower()
    arguments = [s.lower() for s in argument_strings if s]
    for rule in TYPE_INFERENCE_RULES:
        if any(k in name for k in rule.name_keywords):
            return rule.property_type
        if any(k in arg for k in rule.argument_keywords for arg in arguments):
            return rule.property_type
    return FALLBACK_PROPERTY_TYPE


class CallHint(str, Enum):
    """Type-specific details a draw call can carry."""

    TOGGLE = "toggle"
    COLOR = "color"
    RANGE = "range"
    ENUM = "enum"
    VECTOR = "vector"


_CALL_HINT_KEYWORDS: dict[CallHint, tuple[str, ...]] = {
    CallHint.TOGGLE: ("toggle",),
    CallHint.COLOR: ("color",),
    CallHint.RANGE: ("slider", "range"),
    CallHint.ENUM: ("enum",),
    CallHint.VECTOR: ("vector",),
}


def call_hints(method_name: str) -> set[CallHint]:
    """Which type-specific extractions apply to a draw call."""
    name = method_name.lower()
    return {hint for hint, keywords in _CALL_HINT_KEYWORDS.items() if any(k in name for k in keywords)}


# =============================================================================
# Declarative (shader) type tokens
# =============================================================================

_TEXTURE_TOKENS = {"2d", "3d", "cube", "texture"}


def normalize_shader_type(token: str) -> PropertyType:
    """Normalize a shader property type token (`Range(0,1)`, `Color`, `2D` ...)."""
    normalized = token.strip().lower()
    if normalized.startswith("range"):
        return PropertyType.RANGE
    if normalized == "color":
        return PropertyType.COLOR
    if normalized == "vector":
        return PropertyType.VECTOR
    if normalized == "int":
        return PropertyType.INT
    if normalized in _TEXTURE_TOKENS:
        return PropertyType.TEXTURE
    return PropertyType.FLOAT


_RANGE_BOUNDS = re.compile(r"Range\(\s*([^,]+?)\s*,\s*([^\)]+?)\s*\)", re.IGNORECASE)


def parse_range_bounds(token: str) -> tuple[float | None, float | None]:
    """Extract (min, max) from a `Range(min, max)` token."""
    match = _RANGE_BOUNDS.search(token)
    if not match:
        return None, None
    return _to_float(match.group(1)), _to_float(match.group(2))


def _to_float(raw: str) -> float | None:
    try:
        return float(raw.strip())
    except ValueError:
        return None
