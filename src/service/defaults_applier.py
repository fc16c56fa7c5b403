"""Push a module's defaults onto a material-like target.

The target protocol allows different implementations:
- A live material binding in the host application
- InMemoryMaterial: Testing, records what was set
"""

from __future__ import annotations

import logging
from typing import Protocol

from src.models.mapping_document import MappingModule, MappingProperty, PropertyType

logger = logging.getLogger(__name__)

# Types whose default is a single float
FLOAT_DEFAULT_TYPES = frozenset({PropertyType.FLOAT, PropertyType.RANGE, PropertyType.ENUM, PropertyType.TOGGLE})

Color = tuple[float, float, float, float]


class MaterialTarget(Protocol):
    """Anything exposing named, settable shader properties."""

    def has_property(self, name: str) -> bool: ...

    def set_color(self, name: str, color: Color) -> None: ...

    def set_float(self, name: str, value: float) -> None: ...


class InMemoryMaterial:
    """In-memory MaterialTarget for testing.

    Usage:
        material = InMemoryMaterial()
        material.seed("_GlowColor", "_GlowStrength")
        apply_module_defaults(module, material)
        assert material.floats["_GlowStrength"] == 1.0
    """

    def __init__(self) -> None:
        self._names: set[str] = set()
        self.colors: dict[str, Color] = {}
        self.floats: dict[str, float] = {}

    def seed(self, *names: str) -> None:
        """Declare properties the material knows about."""
        self._names.update(names)

    def has_property(self, name: str) -> bool:
        return name in self._names

    def set_color(self, name: str, color: Color) -> None:
        self.colors[name] = color

    def set_float(self, name: str, value: float) -> None:
        self.floats[name] = value


def color_default(prop: MappingProperty) -> Color | None:
    """First four components of the default color, if there are four."""
    values = prop.default_color
    if not values or len(values) < 4:
        return None
    return (values[0], values[1], values[2], values[3])


def apply_module_defaults(module: MappingModule, target: MaterialTarget) -> int:
    """Set every Color and float-typed default the target recognizes.

    Returns:
        Number of properties set
    """
    applied = 0
    for prop in module.properties:
        name = prop.shader_property_name
        if not name or not target.has_property(name):
            continue

        if prop.property_type == PropertyType.COLOR:
            color = color_default(prop)
            if color is not None:
                target.set_color(name, color)
                applied += 1
        elif prop.property_type in FLOAT_DEFAULT_TYPES and prop.default_value is not None:
            target.set_float(name, prop.default_value)
            applied += 1

    logger.debug(f"Applied {applied} defaults from module '{module.name}'")
    return applied


def populate_default_dictionaries(
    module: MappingModule,
    float_defaults: dict[str, float],
    color_defaults: dict[str, Color],
) -> None:
    """Fill plain default lookups keyed by property name."""
    for prop in module.properties:
        if prop.property_type == PropertyType.COLOR:
            color = color_default(prop)
            if color is not None:
                color_defaults[prop.name] = color
        elif prop.property_type in FLOAT_DEFAULT_TYPES and prop.default_value is not None:
            float_defaults[prop.name] = prop.default_value
