"""Tests for PropertyRegistry: dedup by binding, merge rules, condition policy."""

from src.mapping.compiler.condition_builder import EMPTY, make_rule
from src.mapping.compiler.property_registry import (
    ConditionMergePolicy,
    PropertyContext,
    PropertyRegistry,
)
from src.mapping.compiler.section_registry import SectionRegistry
from src.mapping.metadata import ShaderPropertyInfo
from src.models.mapping_document import PropertyType

# =============================================================================
# Helpers
# =============================================================================


def _make_setup(policy=ConditionMergePolicy.LAST_UNCONDITIONAL_WINS):
    sections = SectionRegistry()
    root = sections.get_or_create("Glow", "Glow")
    return PropertyRegistry(policy), sections, root


def _make_context(variable="p", binding="_GlowColor", **kwargs) -> PropertyContext:
    return PropertyContext(variable_name=variable, binding=binding, **kwargs)


# =============================================================================
# Creation and dedup
# =============================================================================


def test_first_attachment_creates_property():
    registry, sections, root = _make_setup()
    index = registry.attach(sections, root, _make_context(display_name="Glow Color"), EMPTY, False, False)

    prop = registry.get("_GlowColor")
    assert index == 0
    assert prop.name == "GlowColor"
    assert prop.shader_property_name == "_GlowColor"
    assert prop.raw_shader_property_name == "_GlowColor"
    assert prop.display_name == "Glow Color"


def test_leading_underscores_stripped_from_name():
    registry, sections, root = _make_setup()
    registry.attach(sections, root, _make_context(binding="__Mask"), EMPTY, False, False)
    assert registry.get("__Mask").name == "Mask"


def test_same_binding_different_locals_dedupes():
    registry, sections, root = _make_setup()
    first = registry.attach(sections, root, _make_context("a"), EMPTY, False, False)
    second = registry.attach(sections, root, _make_context("b"), EMPTY, False, False)

    assert first == second == 0
    assert len(registry) == 1


def test_context_without_binding_is_skipped():
    registry, sections, root = _make_setup()
    assert registry.attach(sections, root, _make_context(binding=None), EMPTY, False, False) is None
    assert len(registry) == 0


# =============================================================================
# Merge rules
# =============================================================================


def test_display_name_fills_only_when_absent():
    registry, sections, root = _make_setup()
    registry.attach(sections, root, _make_context(display_name="First"), EMPTY, False, False)
    registry.attach(sections, root, _make_context(display_name="Second"), EMPTY, False, False)
    assert registry.get("_GlowColor").display_name == "First"


def test_unknown_type_is_upgraded():
    registry, sections, root = _make_setup()
    registry.attach(sections, root, _make_context(), EMPTY, False, False)
    registry.attach(sections, root, _make_context(property_type=PropertyType.COLOR), EMPTY, False, False)
    assert registry.get("_GlowColor").property_type == PropertyType.COLOR


def test_known_type_is_kept():
    registry, sections, root = _make_setup()
    registry.attach(sections, root, _make_context(property_type=PropertyType.COLOR), EMPTY, False, False)
    registry.attach(sections, root, _make_context(property_type=PropertyType.FLOAT), EMPTY, False, False)
    assert registry.get("_GlowColor").property_type == PropertyType.COLOR


def test_range_promotes_known_type():
    registry, sections, root = _make_setup()
    registry.attach(sections, root, _make_context(property_type=PropertyType.FLOAT), EMPTY, False, False)
    registry.attach(sections, root, _make_context(property_type=PropertyType.RANGE), EMPTY, False, False)
    assert registry.get("_GlowColor").property_type == PropertyType.RANGE


def test_defaults_fill_only_when_absent():
    registry, sections, root = _make_setup()
    registry.attach(sections, root, _make_context(default_value=1.0), EMPTY, False, False)
    registry.attach(
        sections,
        root,
        _make_context(default_value=2.0, range_min=0.0, range_max=4.0, default_color=[1, 0, 0, 1]),
        EMPTY,
        False,
        False,
    )

    prop = registry.get("_GlowColor")
    assert prop.default_value == 1.0
    assert (prop.min, prop.max) == (0.0, 4.0)
    assert prop.default_color == [1, 0, 0, 1]


def test_flags_are_ored_and_hints_unioned():
    registry, sections, root = _make_setup()
    registry.attach(sections, root, _make_context(hints=["a"]), EMPTY, indented=True, prioritize=False)
    registry.attach(sections, root, _make_context(is_toggle=True, hints=["a", "b"]), EMPTY, False, False)

    prop = registry.get("_GlowColor")
    assert prop.indented is True
    assert prop.is_toggle is True
    assert prop.hints == ["a", "b"]


def test_enum_values_copied_once():
    registry, sections, root = _make_setup()
    registry.attach(sections, root, _make_context(enum_values=["A", "B"]), EMPTY, False, False)
    registry.attach(sections, root, _make_context(enum_values=["X"]), EMPTY, False, False)
    assert registry.get("_GlowColor").enum_values == ["A", "B"]


def test_refresh_merges_into_attached_property():
    registry, sections, root = _make_setup()
    context = _make_context()
    registry.attach(sections, root, context, EMPTY, False, False)

    context.default_value = 0.5
    registry.refresh(context)

    assert registry.get("_GlowColor").default_value == 0.5


def test_refresh_of_unattached_context_is_noop():
    registry, _, _ = _make_setup()
    registry.refresh(_make_context())
    assert len(registry) == 0


# =============================================================================
# Conditions
# =============================================================================


def test_conditions_append_without_duplicates():
    registry, sections, root = _make_setup()
    rules = (make_rule("glowToggle", True),)
    registry.attach(sections, root, _make_context(), rules, False, False)
    registry.attach(sections, root, _make_context(), rules + (make_rule("mode", 1),), False, False)

    conditions = registry.get("_GlowColor").conditions
    assert [(c.paths, c.values) for c in conditions] == [(["glowToggle"], [True]), (["mode"], [1])]


def test_unconditional_attachment_clears_conditions():
    registry, sections, root = _make_setup()
    registry.attach(sections, root, _make_context(), (make_rule("A", True),), False, False)
    registry.attach(sections, root, _make_context(), EMPTY, False, False)
    assert registry.get("_GlowColor").conditions == []


def test_accumulate_policy_never_clears():
    registry, sections, root = _make_setup(ConditionMergePolicy.ACCUMULATE)
    registry.attach(sections, root, _make_context(), (make_rule("A", True),), False, False)
    registry.attach(sections, root, _make_context(), EMPTY, False, False)
    assert len(registry.get("_GlowColor").conditions) == 1


def test_to_properties_returns_copies():
    registry, sections, root = _make_setup()
    registry.attach(sections, root, _make_context(), (make_rule("A", True),), False, False)

    emitted = registry.to_properties()
    emitted[0].conditions.clear()

    assert len(registry.get("_GlowColor").conditions) == 1


# =============================================================================
# PropertyContext.apply_metadata
# =============================================================================


def test_metadata_fills_gaps():
    context = _make_context(binding="_Strength", display_name="From Call")
    info = ShaderPropertyInfo(
        name="_Strength",
        property_type=PropertyType.RANGE,
        display_name="Strength",
        min=0.0,
        max=4.0,
        default_value=1.0,
    )

    context.apply_metadata(info)

    assert context.property_type == PropertyType.RANGE
    assert context.display_name == "From Call"
    assert (context.range_min, context.range_max, context.default_value) == (0.0, 4.0, 1.0)


def test_metadata_color_tuple_becomes_list():
    context = _make_context()
    info = ShaderPropertyInfo(
        name="_GlowColor",
        property_type=PropertyType.COLOR,
        display_name="Glow",
        default_color=(1.0, 0.5, 0.0, 1.0),
    )
    context.apply_metadata(info)
    assert context.default_color == [1.0, 0.5, 0.0, 1.0]


def test_missing_metadata_types_color_named_binding():
    context = _make_context(binding="_RimColor")
    context.apply_metadata(None)
    assert context.property_type == PropertyType.COLOR


def test_missing_metadata_leaves_other_bindings_unknown():
    context = _make_context(binding="_Strength")
    context.apply_metadata(None)
    assert context.property_type == PropertyType.UNKNOWN
