"""Compiler package for draw routine interpretation.

Phases:
1. declarations      - Resolve field constants and enums into lookup tables
2. condition_builder - Turn branch tests into visibility rules
3. section_registry  - Accumulate the foldout hierarchy
4. property_registry - Deduplicate and merge property visits

All per-module artifacts accumulate into ModuleContext.
"""

from src.mapping.compiler.condition_builder import build_conditions, combine_and, combine_or, negate
from src.mapping.compiler.context import ModuleContext, WalkState
from src.mapping.compiler.declarations import DeclarationTables, collect_declarations
from src.mapping.compiler.property_registry import ConditionMergePolicy, PropertyContext, PropertyRegistry
from src.mapping.compiler.section_registry import SectionLayout, SectionRegistry

__all__ = [
    "ConditionMergePolicy",
    "DeclarationTables",
    "ModuleContext",
    "PropertyContext",
    "PropertyRegistry",
    "SectionLayout",
    "SectionRegistry",
    "WalkState",
    "build_conditions",
    "collect_declarations",
    "combine_and",
    "combine_or",
    "negate",
]
