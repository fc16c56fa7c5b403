"""Statement walker: the interpreter over one module's statements.

Walks the draw routine without executing it. Each statement is matched
against a small vocabulary of shapes:

- `var p = X.FindProperty("_Name")`       registers a property handle
- `Draw(p, ...)` / `p.floatValue = Draw(p, ...)`   attaches the property
- `doIndentUp()` / `doIndentDown()`       adjusts the indent depth
- `t = X.makeSubEffect(..., "Name", ...)` opens a subsection keyed to `t`
- `if` / `switch`                          narrows the visibility rules

Everything else is ignored.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from src.mapping.compiler.condition_builder import build_conditions, combine_and, make_rule, negate
from src.mapping.compiler.context import ModuleContext, WalkState
from src.mapping.compiler.declarations import DeclarationTables
from src.mapping.compiler.invocation_hints import apply_draw_call, binding_argument
from src.mapping.compiler.property_registry import PropertyContext
from src.mapping.compiler.value_resolver import (
    comparable_value,
    evaluate_numeric,
    property_path,
    resolve_string,
    round_half_even,
)
from src.mapping.metadata import ShaderPropertyInfo
from src.mapping.registries.call_shapes import (
    FIND_PROPERTY_SIGNATURE,
    SUB_EFFECT_SIGNATURE,
    CallShape,
    ValueMember,
    classify_call,
    classify_value_member,
)
from src.mapping.syntax import (
    Assignment,
    CaseLabel,
    DefaultLabel,
    Expression,
    ExpressionStatement,
    Identifier,
    If,
    Invocation,
    LocalDeclaration,
    MemberAccess,
    Statement,
    Switch,
    first_invocation,
    referenced_identifiers,
    simple_name,
)
from src.mapping.visitors.base import StatementVisitor
from src.models.mapping_document import PropertyType

logger = logging.getLogger(__name__)


class ModuleWalker(StatementVisitor[WalkState]):
    """Interprets one module's statements into its ModuleContext.

    Usage:
        module = ModuleContext(name="Glow", toggle="glowToggle")
        ModuleWalker(module, tables, metadata).walk(statements)
        result = module.to_module()
    """

    def __init__(
        self,
        module: ModuleContext,
        tables: DeclarationTables,
        metadata: Mapping[str, ShaderPropertyInfo],
    ):
        self.module = module
        self.tables = tables
        self.metadata = metadata

    def walk(self, statements: tuple[Statement, ...]) -> ModuleContext:
        state = WalkState(section=self.module.root_section())
        self.visit_sequence(statements, state)
        return self.module

    def visit_default(self, statement: Statement, state: WalkState) -> WalkState:
        logger.debug(f"Ignoring {type(statement).__name__} in module '{self.module.name}'")
        return state

    # =========================================================================
    # Declarations and expression statements
    # =========================================================================

    def visit_LocalDeclaration(self, statement: LocalDeclaration, state: WalkState) -> WalkState:
        if len(statement.declarators) != 1:
            return state
        declarator = statement.declarators[0]
        if isinstance(declarator.initializer, Invocation):
            self._bind_local(declarator.name, declarator.initializer, state)
        return state

    def visit_ExpressionStatement(self, statement: ExpressionStatement, state: WalkState) -> WalkState:
        match statement.expression:
            case Assignment() as assignment:
                self._assignment(assignment, state)
            case Invocation() as invocation:
                return self._invocation(invocation, state)
        return state

    def _invocation(self, invocation: Invocation, state: WalkState) -> WalkState:
        match classify_call(invocation):
            case CallShape.INDENT_UP:
                return state.indent_up()
            case CallShape.INDENT_DOWN:
                return state.indent_down()
            case CallShape.MAKE_SUB_EFFECT:
                toggle = simple_name(invocation.argument(SUB_EFFECT_SIGNATURE.toggle))
                self._open_subsection(toggle, invocation, state)
            case CallShape.OTHER:
                self._draw(invocation, state)
        return state

    def _bind_local(self, name: str, invocation: Invocation, state: WalkState) -> None:
        match classify_call(invocation):
            case CallShape.MAKE_SUB_EFFECT:
                self._open_subsection(name, invocation, state)
            case CallShape.FIND_PROPERTY:
                self._register(name, invocation, state)

    def _assignment(self, assignment: Assignment, state: WalkState) -> None:
        invocation = first_invocation(assignment.value)
        target = assignment.target

        if invocation is not None and isinstance(target, Identifier):
            self._bind_local(target.name, invocation, state)
            return

        if not (isinstance(target, MemberAccess) and isinstance(target.target, Identifier)):
            return
        handle = self.module.handles.get(target.target.name)
        if handle is None:
            return

        self._assign_default(handle, target.name, assignment.value)
        if invocation is not None:
            apply_draw_call(handle, invocation, self.tables.strings, self.tables.numbers, self.tables.enums)
            self.module.attach(state, handle, prioritize=True)
        else:
            self.module.properties.refresh(handle)

    def _assign_default(self, handle: PropertyContext, member_name: str, value: Expression) -> None:
        """`p.floatValue = 0.5f` and friends: constant defaults fill gaps."""
        numeric = evaluate_numeric(value, self.tables.numbers)
        if numeric is None:
            return

        match classify_value_member(member_name):
            case ValueMember.FLOAT_VALUE:
                if handle.default_value is None:
                    handle.default_value = numeric
                if handle.property_type == PropertyType.UNKNOWN:
                    handle.property_type = PropertyType.FLOAT
            case ValueMember.INT_VALUE:
                if handle.default_int is None:
                    handle.default_int = round_half_even(numeric)
                if handle.property_type == PropertyType.UNKNOWN:
                    handle.property_type = PropertyType.INT
            case ValueMember.COLOR_VALUE:
                if handle.property_type == PropertyType.UNKNOWN:
                    handle.property_type = PropertyType.COLOR

    def _register(self, name: str, invocation: Invocation, state: WalkState) -> None:
        binding = resolve_string(invocation.argument(FIND_PROPERTY_SIGNATURE.binding), self.tables.strings)
        if not binding:
            logger.debug(f"FindProperty for '{name}' has no resolvable property name")
            return
        handle = self.module.register_handle(name, binding)
        handle.apply_metadata(self.metadata.get(binding))
        self.module.attach(state, handle, prioritize=False)

    def _draw(self, invocation: Invocation, state: WalkState) -> None:
        name = binding_argument(invocation, self.module.handles)
        if name is None:
            return
        handle = self.module.handles[name]
        apply_draw_call(handle, invocation, self.tables.strings, self.tables.numbers, self.tables.enums)
        self.module.attach(state, handle, prioritize=True)

    def _open_subsection(self, toggle: str | None, invocation: Invocation, state: WalkState) -> None:
        section_name = resolve_string(invocation.argument(SUB_EFFECT_SIGNATURE.name), self.tables.strings)
        if not toggle or not section_name:
            return
        order = evaluate_numeric(invocation.argument(SUB_EFFECT_SIGNATURE.display_order), self.tables.numbers)
        layout = self.module.sections.get_or_create(
            section_name,
            section_name,
            parent=state.section,
            explicit_order=round_half_even(order) if order is not None else None,
        )
        self.module.sections.register_subsection(toggle, layout)

    # =========================================================================
    # Control flow
    # =========================================================================

    def visit_If(self, statement: If, state: WalkState) -> WalkState:
        subsection = self.module.sections.subsection_for(referenced_identifiers(statement.test))
        if subsection is not None:
            self.visit(statement.then, state.with_section(subsection))
            if statement.otherwise is not None:
                self.visit(statement.otherwise, state)
            return state

        parsed = build_conditions(statement.test, self.tables.strings, self.module.condition_bindings())
        self.visit(statement.then, state.with_conditions(combine_and(state.conditions, parsed)))
        if statement.otherwise is not None:
            otherwise = combine_and(state.conditions, negate(parsed)) if parsed else state.conditions
            self.visit(statement.otherwise, state.with_conditions(otherwise))
        return state

    def visit_Switch(self, statement: Switch, state: WalkState) -> WalkState:
        path = property_path(statement.discriminant)
        if path not in self.module.condition_bindings():
            path = None

        for section in statement.sections:
            label_conditions = []
            for label in section.labels:
                match label:
                    case CaseLabel(value=value) if path is not None:
                        literal = comparable_value(value, self.tables.strings)
                        if literal is not None:
                            label_conditions.append(combine_and(state.conditions, (make_rule(path, literal),)))
                    case DefaultLabel():
                        label_conditions.append(state.conditions)
            if not label_conditions:
                label_conditions.append(state.conditions)

            for conditions in label_conditions:
                self.visit_sequence(section.statements, state.with_conditions(conditions))
        return state
