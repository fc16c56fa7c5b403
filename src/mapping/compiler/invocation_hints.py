"""What a property draw call tells us about the property it draws.

`EditorGUILayout.Slider(p, new GUIContent("Intensity", "How bright"), 0, 4)`
carries a label, a tooltip, a range and (by its name) a type.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping

from src.mapping.compiler.property_registry import PropertyContext
from src.mapping.compiler.value_resolver import evaluate_numeric, resolve_string
from src.mapping.registries.property_types import CallHint, call_hints, infer_property_type
from src.mapping.syntax import (
    Argument,
    Cast,
    Expression,
    GenericName,
    Identifier,
    Invocation,
    MemberAccess,
    ObjectCreation,
    Parenthesized,
)
from src.models.mapping_document import PropertyType

_GUI_CONTENT_TYPE = "GUIContent"
_COLOR_COMPONENTS = 4
_MIN_VECTOR_COMPONENTS = 2
_VECTOR_WIDTH = 4


def binding_argument(invocation: Invocation, handles: Collection[str]) -> str | None:
    """Local handle passed to a call, looking through `ref`, casts, parentheses
    and member access (`p.floatValue`)."""
    for argument in invocation.arguments:
        name = _handle_name(argument.value, handles)
        if name is not None:
            return name
    return None


def _handle_name(expression: Expression, handles: Collection[str]) -> str | None:
    match expression:
        case Identifier(name=name) if name in handles:
            return name
        case Cast(operand=inner) | Parenthesized(inner=inner):
            return _handle_name(inner, handles)
        case MemberAccess(target=target, name=name):
            return _handle_name(target, handles) or (name if name in handles else None)
    return None


def label_and_hints(arguments: tuple[Argument, ...], strings: Mapping[str, str]) -> tuple[str | None, list[str]]:
    """First resolvable label, plus tooltips from `new GUIContent(label, tooltip)`."""
    label: str | None = None
    hints: list[str] = []
    for argument in arguments:
        value = argument.value
        if isinstance(value, ObjectCreation) and _GUI_CONTENT_TYPE in value.type_name:
            gui_label = resolve_string(_positional(value.arguments, 0), strings)
            tooltip = resolve_string(_positional(value.arguments, 1), strings)
            if label is None and gui_label:
                label = gui_label
            if tooltip:
                hints.append(tooltip)
            continue
        resolved = resolve_string(value, strings)
        if label is None and resolved:
            label = resolved
    return label, hints


def string_arguments(arguments: tuple[Argument, ...], strings: Mapping[str, str]) -> list[str]:
    return [s for s in (resolve_string(a.value, strings) for a in arguments) if s]


def color_literal(arguments: tuple[Argument, ...], numbers: Mapping[str, float]) -> list[float] | None:
    """First `new Color(r, g, b, a)`; unresolvable components are 0."""
    for argument in arguments:
        value = argument.value
        if isinstance(value, ObjectCreation) and len(value.arguments) == _COLOR_COMPONENTS:
            return [evaluate_numeric(a.value, numbers) or 0.0 for a in value.arguments]
    return None


def vector_literal(arguments: tuple[Argument, ...], numbers: Mapping[str, float]) -> list[float] | None:
    """First `new VectorN(...)` with at least two components, zero-padded to four."""
    for argument in arguments:
        value = argument.value
        if isinstance(value, ObjectCreation) and len(value.arguments) >= _MIN_VECTOR_COMPONENTS:
            components = [evaluate_numeric(a.value, numbers) or 0.0 for a in value.arguments]
            components.extend([0.0] * (_VECTOR_WIDTH - len(components)))
            return components
    return None


def range_arguments(arguments: tuple[Argument, ...], numbers: Mapping[str, float]) -> tuple[float | None, float | None]:
    """Slider bounds are the last two arguments."""
    if len(arguments) < 2:
        return None, None
    return evaluate_numeric(arguments[-2].value, numbers), evaluate_numeric(arguments[-1].value, numbers)


def enum_type_name(invocation: Invocation) -> str | None:
    """`EnumPopup<Mode>(...)`, or a cast `(Mode)` on one of the arguments."""
    type_name = _enum_type_of(invocation.function)
    if type_name:
        return type_name
    for argument in invocation.arguments:
        type_name = _enum_type_of(argument.value)
        if type_name:
            return type_name
    return None


def _enum_type_of(expression: Expression) -> str | None:
    match expression:
        case MemberAccess(type_args=(first, *_)) | GenericName(type_args=(first, *_)):
            return first
        case Cast(type_name=type_name):
            return type_name
        case Parenthesized(inner=inner):
            return _enum_type_of(inner)
    return None


def _positional(arguments: tuple[Argument, ...], index: int) -> Expression | None:
    return arguments[index].value if index < len(arguments) else None


def apply_draw_call(
    handle: PropertyContext,
    invocation: Invocation,
    strings: Mapping[str, str],
    numbers: Mapping[str, float],
    enums: Mapping[str, list[str]],
) -> None:
    """Fold everything a draw call says about a property into its handle.

    Label and type only fill gaps; a slider always makes the property a
    Range.
    """
    label, hints = label_and_hints(invocation.arguments, strings)
    if label and handle.display_name is None:
        handle.display_name = label
    handle.add_hints(hints)

    method_name = invocation.method_name
    if handle.property_type == PropertyType.UNKNOWN:
        handle.property_type = infer_property_type(method_name, string_arguments(invocation.arguments, strings))

    hints_for_call = call_hints(method_name)
    if CallHint.TOGGLE in hints_for_call:
        handle.is_toggle = True
    if CallHint.COLOR in hints_for_call and handle.default_color is None:
        handle.default_color = color_literal(invocation.arguments, numbers)
    if CallHint.RANGE in hints_for_call:
        minimum, maximum = range_arguments(invocation.arguments, numbers)
        if handle.range_min is None:
            handle.range_min = minimum
        if handle.range_max is None:
            handle.range_max = maximum
        handle.property_type = PropertyType.RANGE
    if CallHint.ENUM in hints_for_call:
        type_name = enum_type_name(invocation)
        if type_name:
            handle.enum_type = type_name
            if not handle.enum_values and type_name in enums:
                handle.enum_values = list(enums[type_name])
    if CallHint.VECTOR in hints_for_call and handle.default_vector is None:
        handle.default_vector = vector_literal(invocation.arguments, numbers)
