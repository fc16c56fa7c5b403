"""Mapping document models.

The document produced by the extractor: modules -> sections -> properties.
Keys serialize as camelCase; either camelCase or snake_case is accepted on
input so documents written by older tooling still load.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

# A single term value in a ConditionalRule
ConditionValue = bool | int | float | str


class PropertyType(str, Enum):
    """Property type tags."""

    FLOAT = "Float"
    RANGE = "Range"
    INT = "Int"
    COLOR = "Color"
    VECTOR = "Vector"
    TEXTURE = "Texture"
    ENUM = "Enum"
    TOGGLE = "Toggle"
    CURVE = "Curve"
    GRADIENT = "Gradient"
    UNKNOWN = "Unknown"


class _DocumentModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConditionalRule(_DocumentModel):
    """Conjunction of `paths[i] == values[i]` terms."""

    paths: list[str] = Field(default_factory=list)
    values: list[ConditionValue] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_parallel_lists(self) -> ConditionalRule:
        if len(self.paths) != len(self.values):
            raise ValueError(
                f"paths and values must have equal length "
                f"(got {len(self.paths)} paths, {len(self.values)} values)"
            )
        return self

    def terms(self) -> list[tuple[str, ConditionValue]]:
        return list(zip(self.paths, self.values))


class MappingProperty(_DocumentModel):
    """One exposed setting bound to a shader property."""

    name: str
    display_name: str | None = None
    shader_property_name: str
    raw_shader_property_name: str
    property_type: PropertyType = PropertyType.UNKNOWN
    min: float | None = None
    max: float | None = None
    default_value: float | None = None
    default_int_value: int | None = None
    default_color: list[float] | None = None
    default_vector: list[float] | None = None
    enum_type_name: str | None = None
    enum_values: list[str] = Field(default_factory=list)
    is_toggle: bool = False
    indented: bool = False
    hints: list[str] = Field(default_factory=list)
    conditions: list[ConditionalRule] = Field(default_factory=list)


class MappingSection(_DocumentModel):
    """A foldout group of properties."""

    name: str
    foldout_name: str
    parent_section: str | None = None
    is_root_section: bool = False
    indent_level: int = 0
    display_order: int = 0
    property_indices: list[int] = Field(default_factory=list)


class MappingModule(_DocumentModel):
    """A top-level effect with its own section tree and property set."""

    name: str
    keyword: str | None = None
    keyword_define: str | None = None
    sections: list[MappingSection] = Field(default_factory=list)
    properties: list[MappingProperty] = Field(default_factory=list)

    def get_section(self, name: str) -> MappingSection | None:
        return next((s for s in self.sections if s.name == name), None)

    def get_property(self, shader_property_name: str) -> MappingProperty | None:
        return next(
            (p for p in self.properties if p.shader_property_name == shader_property_name),
            None,
        )

    def section_properties(self, name: str) -> list[MappingProperty]:
        """Properties of a section, in the section's index order."""
        section = self.get_section(name)
        if section is None:
            return []
        return [self.properties[i] for i in section.property_indices if i < len(self.properties)]


class MappingDocument(_DocumentModel):
    """Root of a serialized mapping."""

    modules: list[MappingModule] = Field(default_factory=list)

    def get_module(self, name: str) -> MappingModule | None:
        return next((m for m in self.modules if m.name == name), None)

    def counts(self) -> tuple[int, int, int]:
        """(modules, sections, properties) across the whole document."""
        return (
            len(self.modules),
            sum(len(m.sections) for m in self.modules),
            sum(len(m.properties) for m in self.modules),
        )

    def to_json(self, indent: int | None = 2) -> str:
        return self.model_dump_json(by_alias=True, indent=indent)

    @classmethod
    def from_json(cls, text: str | bytes) -> MappingDocument:
        return cls.model_validate_json(text)
