"""Section layout registry.

Tracks the foldout hierarchy of one module: layouts by name, the toggle
identifiers that unlock subsections, and the property indices attached to
each section.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from src.models.mapping_document import MappingSection


@dataclass
class SectionLayout:
    """A section as seen during the walk."""

    name: str
    foldout_name: str
    parent: SectionLayout | None = None
    display_order: int = 0

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def indent_level(self) -> int:
        return 0 if self.parent is None else self.parent.indent_level + 1

    def update_foldout_name(self, label: str | None) -> None:
        """Override the label once; later overrides are ignored."""
        if label and self.foldout_name == self.name:
            self.foldout_name = label

    def update_display_order(self, explicit_order: int | None) -> None:
        if explicit_order is not None:
            self.display_order = min(self.display_order, explicit_order)


class SectionRegistry:
    """Per-module section layouts and their property indices."""

    def __init__(self) -> None:
        self._layouts: dict[str, SectionLayout] = {}
        self._subsections: dict[str, SectionLayout] = {}
        # Section name -> property indices, in first-attachment order
        self._indices: dict[str, list[int]] = {}
        self._order_counter = 0

    def get_or_create(
        self,
        name: str,
        label: str | None = None,
        parent: SectionLayout | None = None,
        explicit_order: int | None = None,
    ) -> SectionLayout:
        """Return the layout for `name`, creating it on first sight.

        A revisit may override the label (once) and lower the display order;
        parent and indent are fixed at creation.
        """
        layout = self.get(name)
        if layout is None:
            if explicit_order is None:
                order = self._order_counter
                self._order_counter += 1
            else:
                order = explicit_order
            layout = SectionLayout(name=name, foldout_name=label or name, parent=parent, display_order=order)
            self._layouts[name] = layout
        else:
            layout.update_foldout_name(label)
            layout.update_display_order(explicit_order)
        return layout

    def get(self, name: str) -> SectionLayout | None:
        return self._layouts.get(name)

    def register_subsection(self, toggle: str, layout: SectionLayout) -> None:
        if toggle:
            self._subsections[toggle] = layout

    def subsection_for(self, identifiers: Iterable[str]) -> SectionLayout | None:
        """First subsection unlocked by any of the given identifiers."""
        for identifier in identifiers:
            layout = self._subsections.get(identifier)
            if layout is not None:
                return layout
        return None

    def add_property_index(self, layout: SectionLayout, index: int, prioritize: bool) -> None:
        """Record a property under a section.

        First attachment appends; a prioritized re-attachment moves the index
        to the end, a low-priority one leaves it where it is.
        """
        indices = self._emit(layout)
        if index not in indices:
            indices.append(index)
        elif prioritize:
            indices.remove(index)
            indices.append(index)

    def _emit(self, layout: SectionLayout) -> list[int]:
        # Ancestors are emitted before their children
        if layout.name not in self._indices:
            if layout.parent is not None:
                self._emit(layout.parent)
            self._indices[layout.name] = []
        return self._indices[layout.name]

    def to_sections(self) -> list[MappingSection]:
        sections = []
        for name, indices in self._indices.items():
            layout = self._layouts[name]
            sections.append(
                MappingSection(
                    name=layout.name,
                    foldout_name=layout.foldout_name,
                    parent_section=layout.parent.name if layout.parent else None,
                    is_root_section=layout.is_root,
                    indent_level=layout.indent_level,
                    display_order=layout.display_order,
                    property_indices=list(indices),
                )
            )
        return sections
