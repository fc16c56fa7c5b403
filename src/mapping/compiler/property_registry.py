"""Property registry and merge engine.

Local variables are only handles: the same shader property may be fetched
into differently named locals on different branches. The registry keys
emitted properties by the shader property name and merges what each visit
learned into a single record.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from src.mapping.compiler.condition_builder import RuleSet, dedupe, from_conditional_rule, rule_key, to_conditional_rule
from src.mapping.compiler.section_registry import SectionLayout, SectionRegistry
from src.mapping.metadata import ShaderPropertyInfo
from src.models.mapping_document import MappingProperty, PropertyType

logger = logging.getLogger(__name__)


class ConditionMergePolicy(str, Enum):
    """How an unconditional attachment interacts with recorded conditions."""

    # Attaching with no active conditions clears what was recorded
    LAST_UNCONDITIONAL_WINS = "last_unconditional_wins"
    # Conditions only ever accumulate
    ACCUMULATE = "accumulate"


@dataclass
class PropertyContext:
    """What the walk has learned about one local property handle."""

    variable_name: str
    binding: str | None
    display_name: str | None = None
    property_type: PropertyType = PropertyType.UNKNOWN
    range_min: float | None = None
    range_max: float | None = None
    default_value: float | None = None
    default_int: int | None = None
    default_color: list[float] | None = None
    default_vector: list[float] | None = None
    enum_type: str | None = None
    enum_values: list[str] = field(default_factory=list)
    is_toggle: bool = False
    indented: bool = False
    hints: list[str] = field(default_factory=list)

    def add_hints(self, hints: list[str]) -> None:
        for hint in hints:
            if hint not in self.hints:
                self.hints.append(hint)

    def apply_metadata(self, info: ShaderPropertyInfo | None) -> None:
        """Backfill from the shader declaration; call-site knowledge wins.

        Without a declaration, a still-untyped binding named like a color is
        assumed to be one.
        """
        if info is None:
            if self.property_type == PropertyType.UNKNOWN and self.binding and "color" in self.binding.lower():
                self.property_type = PropertyType.COLOR
            return

        if self.property_type == PropertyType.UNKNOWN:
            self.property_type = info.property_type
        if self.display_name is None:
            self.display_name = info.display_name
        if self.range_min is None:
            self.range_min = info.min
        if self.range_max is None:
            self.range_max = info.max
        if self.default_value is None:
            self.default_value = info.default_value
        if self.default_int is None:
            self.default_int = info.default_int
        if self.default_color is None and info.default_color is not None:
            self.default_color = list(info.default_color)
        if self.default_vector is None and info.default_vector is not None:
            self.default_vector = list(info.default_vector)


class PropertyRegistry:
    """Deduplicated properties of one module, in first-attachment order."""

    def __init__(self, policy: ConditionMergePolicy = ConditionMergePolicy.LAST_UNCONDITIONAL_WINS):
        self.policy = policy
        self._properties: list[MappingProperty] = []
        self._index_by_binding: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._properties)

    def get(self, binding: str) -> MappingProperty | None:
        index = self._index_by_binding.get(binding)
        return self._properties[index] if index is not None else None

    def attach(
        self,
        sections: SectionRegistry,
        layout: SectionLayout,
        context: PropertyContext,
        conditions: RuleSet,
        indented: bool,
        prioritize: bool,
    ) -> int | None:
        """Merge a property visit into the registry and file it under a section.

        Args:
            sections: Section registry receiving the property index.
            layout: Section the property is drawn in.
            context: Accumulated knowledge about the local handle.
            conditions: Active visibility rules (a disjunction).
            indented: Whether the draw happened at indent depth > 0.
            prioritize: Move an already-filed index to the end of the section.

        Returns:
            The property's index, or None when it has no binding.
        """
        if not context.binding:
            logger.debug(f"Skipping '{context.variable_name}': no shader property binding")
            return None

        context.indented |= indented
        index = self._index_by_binding.get(context.binding)
        if index is None:
            index = len(self)
            self._properties.append(self._create(context))
            self._index_by_binding[context.binding] = index
        else:
            self._merge(self._properties[index], context)

        sections.add_property_index(layout, index, prioritize)
        self._merge_conditions(self._properties[index], conditions)
        return index

    def refresh(self, context: PropertyContext) -> None:
        """Merge late knowledge (e.g. an assigned default) into an already attached property."""
        existing = self.get(context.binding) if context.binding else None
        if existing is not None:
            self._merge(existing, context)

    def _create(self, context: PropertyContext) -> MappingProperty:
        return MappingProperty(
            name=context.binding.lstrip("_"),
            display_name=context.display_name,
            shader_property_name=context.binding,
            raw_shader_property_name=context.binding,
            property_type=context.property_type,
            min=context.range_min,
            max=context.range_max,
            default_value=context.default_value,
            default_int_value=context.default_int,
            default_color=list(context.default_color) if context.default_color else None,
            default_vector=list(context.default_vector) if context.default_vector else None,
            enum_type_name=context.enum_type,
            enum_values=list(context.enum_values),
            is_toggle=context.is_toggle,
            indented=context.indented,
            hints=list(context.hints),
        )

    def _merge(self, existing: MappingProperty, context: PropertyContext) -> None:
        if existing.display_name is None and context.display_name:
            existing.display_name = context.display_name

        if existing.property_type == PropertyType.UNKNOWN:
            existing.property_type = context.property_type
        elif context.property_type == PropertyType.RANGE:
            existing.property_type = PropertyType.RANGE

        if existing.min is None:
            existing.min = context.range_min
        if existing.max is None:
            existing.max = context.range_max
        if existing.default_value is None:
            existing.default_value = context.default_value
        if existing.default_int_value is None:
            existing.default_int_value = context.default_int
        if existing.default_color is None and context.default_color:
            existing.default_color = list(context.default_color)
        if existing.default_vector is None and context.default_vector:
            existing.default_vector = list(context.default_vector)
        if existing.enum_type_name is None:
            existing.enum_type_name = context.enum_type
        if not existing.enum_values and context.enum_values:
            existing.enum_values = list(context.enum_values)

        existing.is_toggle |= context.is_toggle
        existing.indented |= context.indented
        existing.hints.extend(h for h in context.hints if h not in existing.hints)

    def _merge_conditions(self, existing: MappingProperty, conditions: RuleSet) -> None:
        if not conditions:
            if self.policy == ConditionMergePolicy.LAST_UNCONDITIONAL_WINS:
                existing.conditions.clear()
            return

        recorded = {rule_key(from_conditional_rule(rule)) for rule in existing.conditions}
        for rule in dedupe(conditions):
            if rule_key(rule) not in recorded:
                existing.conditions.append(to_conditional_rule(rule))
                recorded.add(rule_key(rule))

    def to_properties(self) -> list[MappingProperty]:
        return [p.model_copy(deep=True) for p in self._properties]
