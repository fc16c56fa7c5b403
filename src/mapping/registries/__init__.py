"""Registry modules for declarative mappings."""

from .call_shapes import (
    CallShape,
    ValueMember,
    classify_call,
    classify_value_member,
)
from .property_types import (
    TYPE_INFERENCE_RULES,
    infer_property_type,
    normalize_shader_type,
)

__all__ = [
    "CallShape",
    "ValueMember",
    "classify_call",
    "classify_value_member",
    "TYPE_INFERENCE_RULES",
    "infer_property_type",
    "normalize_shader_type",
]
