"""Walk state and per-module context.

WalkState is what changes from branch to branch (section, active rules,
indent depth) and is never mutated: a branch derives a new one. The
registries on ModuleContext are the only state updated in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from src.mapping.compiler.condition_builder import EMPTY, RuleSet
from src.mapping.compiler.property_registry import ConditionMergePolicy, PropertyContext, PropertyRegistry
from src.mapping.compiler.section_registry import SectionLayout, SectionRegistry
from src.models.mapping_document import MappingModule


@dataclass(frozen=True)
class WalkState:
    """Traversal state at one point of the routine."""

    section: SectionLayout
    conditions: RuleSet = EMPTY
    indent: int = 0

    def with_section(self, section: SectionLayout) -> WalkState:
        return replace(self, section=section)

    def with_conditions(self, conditions: RuleSet) -> WalkState:
        return replace(self, conditions=conditions)

    def indent_up(self) -> WalkState:
        return replace(self, indent=self.indent + 1)

    def indent_down(self) -> WalkState:
        return replace(self, indent=max(0, self.indent - 1))


@dataclass
class ModuleContext:
    """Accumulation context for one module's walk.

    Holds the section and property registries plus the local handles
    (`var p = FindProperty(...)`) in scope for the module.
    """

    name: str
    keyword: str | None = None
    keyword_define: str | None = None
    toggle: str | None = None
    policy: ConditionMergePolicy = ConditionMergePolicy.LAST_UNCONDITIONAL_WINS
    sections: SectionRegistry = field(default_factory=SectionRegistry)
    properties: PropertyRegistry = field(init=False)
    handles: dict[str, PropertyContext] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.properties = PropertyRegistry(self.policy)

    def root_section(self) -> SectionLayout:
        return self.sections.get_or_create(self.name, self.name)

    def register_handle(self, variable_name: str, binding: str) -> PropertyContext:
        """Bind a local name to a shader property.

        Rebinding a name to the same property keeps what was learned;
        rebinding it to a different property starts over.
        """
        handle = self.handles.get(variable_name)
        if handle is None or handle.binding != binding:
            handle = PropertyContext(variable_name=variable_name, binding=binding)
            self.handles[variable_name] = handle
        return handle

    def condition_bindings(self) -> dict[str, PropertyContext | None]:
        """Names a condition may constrain: the module toggle and every handle."""
        bindings: dict[str, PropertyContext | None] = {}
        if self.toggle:
            bindings[self.toggle] = None
        bindings.update(self.handles)
        return bindings

    def attach(self, state: WalkState, handle: PropertyContext, prioritize: bool) -> int | None:
        return self.properties.attach(
            self.sections,
            state.section,
            handle,
            state.conditions,
            indented=state.indent > 0,
            prioritize=prioritize,
        )

    def to_module(self) -> MappingModule:
        return MappingModule(
            name=self.name,
            keyword=self.keyword,
            keyword_define=self.keyword_define,
            sections=self.sections.to_sections(),
            properties=self.properties.to_properties(),
        )
