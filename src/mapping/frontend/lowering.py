"""Lower a tree-sitter C# tree into the mapping syntax tree.

Only the node kinds the interpreter cares about get a dedicated handler
(`_lower_<node type>`); every other expression becomes an
UnknownExpression that still carries its lowered children, and every
other statement becomes an UnknownStatement.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from typing import Any

from src.mapping.syntax import (
    Argument,
    Assignment,
    Attribute,
    Binary,
    Block,
    CaseLabel,
    Cast,
    CompilationUnit,
    Conditional,
    DefaultLabel,
    EnumDeclaration,
    EnumMember,
    Expression,
    ExpressionStatement,
    FieldDeclaration,
    GenericName,
    Identifier,
    If,
    Invocation,
    Literal,
    LiteralKind,
    LocalDeclaration,
    MemberAccess,
    MethodDeclaration,
    ObjectCreation,
    Parenthesized,
    Statement,
    Switch,
    SwitchSection,
    Unary,
    UnknownExpression,
    UnknownStatement,
    VariableDeclarator,
)

# tree-sitter nodes are untyped at the Python level
Node = Any

# Preprocessor wrappers whose statements are walked as if unwrapped
_PREPROC_WRAPPERS = frozenset({"preproc_if", "preproc_ifdef", "preproc_region"})
# Alternative preprocessor branches are skipped
_PREPROC_ALTERNATIVES = frozenset({"preproc_elif", "preproc_else"})

_ARGUMENT_MODIFIERS = frozenset({"ref", "out", "in"})
_ASSIGNMENT_OPERATORS = frozenset({"=", "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "<<=", ">>=", "??="})

_ESCAPE = re.compile(r"\\(u[0-9A-Fa-f]{4}|U[0-9A-Fa-f]{8}|x[0-9A-Fa-f]{1,4}|.)", re.DOTALL)
_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "0": "\0",
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "\\": "\\",
    "'": "'",
    '"': '"',
}


def node_text(node: Node | None) -> str:
    if node is None or not node.text:
        return ""
    return node.text.decode("utf-8")


def unescape(body: str) -> str:
    """Decode C# escape sequences in a regular string or char literal body."""

    def replace(match: re.Match) -> str:
        escape = match.group(1)
        if escape[0] in "uUx" and len(escape) > 1:
            return chr(int(escape[1:], 16))
        return _SIMPLE_ESCAPES.get(escape, escape)

    return _ESCAPE.sub(replace, body)


def is_statement(node: Node) -> bool:
    return node.type == "block" or node.type.endswith("_statement")


def _is_comment(node: Node) -> bool:
    return node.type == "comment"


class SyntaxLowering:
    """Converts tree-sitter nodes to mapping syntax nodes.

    Usage:
        unit = SyntaxLowering().lower_unit(tree.root_node)
    """

    # =========================================================================
    # Declarations
    # =========================================================================

    def lower_unit(self, root: Node) -> CompilationUnit:
        """Collect every field, enum and method declaration in source order."""
        fields: list[FieldDeclaration] = []
        enums: list[EnumDeclaration] = []
        methods: list[MethodDeclaration] = []

        for node in self._descendants(root):
            match node.type:
                case "field_declaration":
                    declaration = self._field(node)
                    if declaration is not None:
                        fields.append(declaration)
                case "enum_declaration":
                    enums.append(self._enum(node))
                case "method_declaration":
                    methods.append(self._method(node))

        return CompilationUnit(fields=tuple(fields), enums=tuple(enums), methods=tuple(methods))

    def _descendants(self, root: Node) -> Iterator[Node]:
        """Pre-order walk that does not descend into method bodies."""
        stack = [root]
        while stack:
            node = stack.pop()
            yield node
            if node.type == "method_declaration":
                continue
            stack.extend(reversed(node.named_children))

    def _field(self, node: Node) -> FieldDeclaration | None:
        declaration = _first_child_of_type(node, "variable_declaration")
        if declaration is None:
            return None
        type_name, declarators = self._variable_declaration(declaration)
        return FieldDeclaration(type_name=type_name, declarators=declarators)

    def _variable_declaration(self, node: Node) -> tuple[str, tuple[VariableDeclarator, ...]]:
        type_name = node_text(node.child_by_field_name("type"))
        declarators = tuple(
            self._declarator(child) for child in node.named_children if child.type == "variable_declarator"
        )
        return type_name, declarators

    def _declarator(self, node: Node) -> VariableDeclarator:
        name_node = node.child_by_field_name("name") or _first_child_of_type(node, "identifier")
        return VariableDeclarator(name=node_text(name_node), initializer=self._initializer(node))

    def _initializer(self, node: Node) -> Expression | None:
        clause = _first_child_of_type(node, "equals_value_clause")
        if clause is not None:
            value = _first_named(clause)
            return self.expression(value) if value is not None else None

        seen_equals = False
        for child in node.children:
            if seen_equals and child.is_named and not _is_comment(child):
                return self.expression(child)
            if child.type == "=":
                seen_equals = True
        return None

    def _enum(self, node: Node) -> EnumDeclaration:
        name = node_text(node.child_by_field_name("name"))
        body = node.child_by_field_name("body") or _first_child_of_type(node, "enum_member_declaration_list")
        members = []
        if body is not None:
            for child in body.named_children:
                if child.type == "enum_member_declaration":
                    members.append(self._enum_member(child))
        return EnumDeclaration(name=name, members=tuple(members))

    def _enum_member(self, node: Node) -> EnumMember:
        name_node = node.child_by_field_name("name") or _first_child_of_type(node, "identifier")
        attributes = []
        for attribute_list in node.named_children:
            if attribute_list.type != "attribute_list":
                continue
            for attribute in attribute_list.named_children:
                if attribute.type == "attribute":
                    attributes.append(self._attribute(attribute))
        return EnumMember(name=node_text(name_node), attributes=tuple(attributes))

    def _attribute(self, node: Node) -> Attribute:
        name = node_text(node.child_by_field_name("name"))
        arguments = []
        argument_list = _first_child_of_type(node, "attribute_argument_list")
        if argument_list is not None:
            for argument in argument_list.named_children:
                if argument.type != "attribute_argument":
                    continue
                value = _last_named(argument, skip=("name_equals", "name_colon"))
                if value is not None:
                    arguments.append(self.expression(value))
        return Attribute(name=name, arguments=tuple(arguments))

    def _method(self, node: Node) -> MethodDeclaration:
        name = node_text(node.child_by_field_name("name"))
        body = node.child_by_field_name("body")
        if body is None or body.type != "block":
            return MethodDeclaration(name=name, body=None)
        return MethodDeclaration(name=name, body=self.block(body))

    # =========================================================================
    # Statements
    # =========================================================================

    def block(self, node: Node) -> Block:
        return Block(statements=tuple(self.statement(child) for child in self._statement_children(node)))

    def _statement_children(self, node: Node) -> Iterator[Node]:
        """Statement children, with `#if`/`#region` wrappers flattened."""
        for child in node.named_children:
            if child.type in _PREPROC_WRAPPERS:
                yield from self._statement_children(child)
            elif child.type in _PREPROC_ALTERNATIVES:
                continue
            elif is_statement(child):
                yield child

    def statement(self, node: Node) -> Statement:
        match node.type:
            case "block":
                return self.block(node)
            case "local_declaration_statement":
                declaration = _first_child_of_type(node, "variable_declaration")
                if declaration is None:
                    return UnknownStatement(text=node.type)
                type_name, declarators = self._variable_declaration(declaration)
                return LocalDeclaration(type_name=type_name, declarators=declarators)
            case "expression_statement":
                expression = _first_named(node)
                if expression is None:
                    return UnknownStatement(text=node.type)
                return ExpressionStatement(expression=self.expression(expression))
            case "if_statement":
                return self._if(node)
            case "switch_statement":
                return self._switch(node)
        return UnknownStatement(text=node.type)

    def _if(self, node: Node) -> If:
        consequence = node.child_by_field_name("consequence")
        alternative = node.child_by_field_name("alternative")
        if alternative is not None and alternative.type == "else_clause":
            alternative = _first_named(alternative)
        return If(
            test=self.expression(node.child_by_field_name("condition")),
            then=self.statement(consequence) if consequence is not None else Block(),
            otherwise=self.statement(alternative) if alternative is not None else None,
        )

    def _switch(self, node: Node) -> Switch:
        value = node.child_by_field_name("value")
        if value is not None and value.type == "parenthesized_expression":
            value = _first_named(value)
        body = node.child_by_field_name("body") or _first_child_of_type(node, "switch_body")
        sections = []
        # Some grammar versions split `case 1: case 2: ...` into sections
        # with no statements; those labels belong to the next section.
        pending: list[CaseLabel | DefaultLabel] = []
        if body is not None:
            for child in body.named_children:
                if child.type != "switch_section":
                    continue
                section = self._switch_section(child)
                if not section.statements:
                    pending.extend(section.labels)
                    continue
                if pending:
                    section = SwitchSection(labels=(*pending, *section.labels), statements=section.statements)
                    pending = []
                sections.append(section)
        if pending:
            sections.append(SwitchSection(labels=tuple(pending)))
        return Switch(discriminant=self.expression(value), sections=tuple(sections))

    def _switch_section(self, node: Node) -> SwitchSection:
        labels: list[CaseLabel | DefaultLabel] = []
        statements: list[Statement] = []
        children = [c for c in node.children if not _is_comment(c)]

        index = 0
        while index < len(children):
            child = children[index]
            match child.type:
                case "case":
                    # `case <expression or pattern> [when ...] :`
                    if index + 1 < len(children) and children[index + 1].is_named:
                        labels.append(CaseLabel(value=self._case_value(children[index + 1])))
                        index += 1
                case "default" | "default_switch_label":
                    labels.append(DefaultLabel())
                case "case_switch_label" | "case_pattern_switch_label":
                    value = _first_named(child)
                    if value is not None:
                        labels.append(CaseLabel(value=self._case_value(value)))
                case _ if child.type in _PREPROC_WRAPPERS:
                    statements.extend(self.statement(s) for s in self._statement_children(child))
                case _ if child.is_named and is_statement(child):
                    statements.append(self.statement(child))
            index += 1

        return SwitchSection(labels=tuple(labels), statements=tuple(statements))

    def _case_value(self, node: Node) -> Expression:
        if node.type == "constant_pattern":
            inner = _first_named(node)
            return self.expression(inner) if inner is not None else UnknownExpression(text=node_text(node))
        return self.expression(node)

    # =========================================================================
    # Expressions
    # =========================================================================

    def expression(self, node: Node | None) -> Expression:
        if node is None:
            return UnknownExpression()
        handler = getattr(self, f"_lower_{node.type}", None)
        if handler is not None:
            return handler(node)
        return UnknownExpression(
            text=node_text(node),
            children=tuple(self.expression(c) for c in node.named_children if not _is_comment(c)),
        )

    def _lower_identifier(self, node: Node) -> Expression:
        return Identifier(name=node_text(node))

    def _lower_this_expression(self, node: Node) -> Expression:
        return Identifier(name="this")

    _lower_this = _lower_this_expression
    _lower_predefined_type = _lower_identifier

    def _lower_qualified_name(self, node: Node) -> Expression:
        qualifier = node.child_by_field_name("qualifier")
        name = node.child_by_field_name("name")
        if qualifier is None or name is None:
            return Identifier(name=node_text(node))
        return MemberAccess(target=self.expression(qualifier), name=node_text(name))

    def _lower_generic_name(self, node: Node) -> Expression:
        name, type_args = _generic_parts(node)
        return GenericName(name=name, type_args=type_args)

    def _lower_member_access_expression(self, node: Node) -> Expression:
        target = self.expression(node.child_by_field_name("expression"))
        name_node = node.child_by_field_name("name")
        if name_node is not None and name_node.type == "generic_name":
            name, type_args = _generic_parts(name_node)
            return MemberAccess(target=target, name=name, type_args=type_args)
        return MemberAccess(target=target, name=node_text(name_node))

    def _lower_invocation_expression(self, node: Node) -> Expression:
        return Invocation(
            function=self.expression(node.child_by_field_name("function")),
            arguments=self._arguments(node.child_by_field_name("arguments")),
        )

    def _arguments(self, node: Node | None) -> tuple[Argument, ...]:
        if node is None:
            return ()
        arguments = []
        for child in node.named_children:
            if child.type != "argument":
                continue
            name_colon = _first_child_of_type(child, "name_colon")
            name_node = _first_named(name_colon) if name_colon is not None else child.child_by_field_name("name")
            modifier = next((c.type for c in child.children if c.type in _ARGUMENT_MODIFIERS), None)
            value = _last_named(child, skip=("name_colon",))
            arguments.append(
                Argument(
                    value=self.expression(value),
                    modifier=modifier,
                    name=node_text(name_node) or None,
                )
            )
        return tuple(arguments)

    def _lower_object_creation_expression(self, node: Node) -> Expression:
        return ObjectCreation(
            type_name=node_text(node.child_by_field_name("type")),
            arguments=self._arguments(node.child_by_field_name("arguments")),
        )

    def _lower_implicit_object_creation_expression(self, node: Node) -> Expression:
        return ObjectCreation(
            type_name="",
            arguments=self._arguments(_first_child_of_type(node, "argument_list")),
        )

    def _lower_cast_expression(self, node: Node) -> Expression:
        return Cast(
            type_name=node_text(node.child_by_field_name("type")),
            operand=self.expression(node.child_by_field_name("value")),
        )

    def _lower_parenthesized_expression(self, node: Node) -> Expression:
        return Parenthesized(inner=self.expression(_first_named(node)))

    def _lower_prefix_unary_expression(self, node: Node) -> Expression:
        operand = node.child_by_field_name("operand") or _first_named(node)
        operator_node = node.child_by_field_name("operator")
        if operator_node is not None:
            operator = node_text(operator_node)
        else:
            operator = next((c.type for c in node.children if not c.is_named), "")
        return Unary(operator=operator, operand=self.expression(operand))

    def _lower_binary_expression(self, node: Node) -> Expression:
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        operator_node = node.child_by_field_name("operator")
        operator = node_text(operator_node) if operator_node is not None else _anonymous_between(node, left, right)
        return Binary(operator=operator, left=self.expression(left), right=self.expression(right))

    def _lower_assignment_expression(self, node: Node) -> Expression:
        operator_node = node.child_by_field_name("operator")
        if operator_node is not None:
            operator = node_text(operator_node)
        else:
            operator = next(
                (node_text(c) for c in node.children if c.type in _ASSIGNMENT_OPERATORS or c.type == "assignment_operator"),
                "=",
            )
        return Assignment(
            target=self.expression(node.child_by_field_name("left")),
            value=self.expression(node.child_by_field_name("right")),
            operator=operator,
        )

    def _lower_conditional_expression(self, node: Node) -> Expression:
        return Conditional(
            test=self.expression(node.child_by_field_name("condition")),
            when_true=self.expression(node.child_by_field_name("consequence")),
            when_false=self.expression(node.child_by_field_name("alternative")),
        )

    # Literals

    def _lower_string_literal(self, node: Node) -> Expression:
        text = node_text(node)
        if text.endswith("u8"):
            text = text[:-2]
        return Literal(value=unescape(text[1:-1]), kind=LiteralKind.STRING)

    def _lower_verbatim_string_literal(self, node: Node) -> Expression:
        text = node_text(node)
        return Literal(value=text[2:-1].replace('""', '"'), kind=LiteralKind.STRING)

    def _lower_raw_string_literal(self, node: Node) -> Expression:
        text = node_text(node)
        quotes = len(text) - len(text.lstrip('"'))
        return Literal(value=text[quotes:-quotes].strip("\r\n"), kind=LiteralKind.STRING)

    def _lower_character_literal(self, node: Node) -> Expression:
        return Literal(value=unescape(node_text(node)[1:-1]), kind=LiteralKind.CHAR)

    def _lower_boolean_literal(self, node: Node) -> Expression:
        return Literal(value=node_text(node) == "true", kind=LiteralKind.BOOL)

    def _lower_null_literal(self, node: Node) -> Expression:
        return Literal(value=None, kind=LiteralKind.NULL)

    def _lower_integer_literal(self, node: Node) -> Expression:
        text = node_text(node)
        cleaned = text.replace("_", "").lower().rstrip("ul")
        try:
            if cleaned.startswith("0x"):
                value = int(cleaned[2:], 16)
            elif cleaned.startswith("0b"):
                value = int(cleaned[2:], 2)
            else:
                value = int(cleaned)
        except ValueError:
            return UnknownExpression(text=text)
        return Literal(value=value, kind=LiteralKind.NUMBER)

    def _lower_real_literal(self, node: Node) -> Expression:
        text = node_text(node)
        try:
            value = float(text.replace("_", "").lower().rstrip("fdm"))
        except ValueError:
            return UnknownExpression(text=text)
        return Literal(value=value, kind=LiteralKind.NUMBER)


# =============================================================================
# Node helpers
# =============================================================================


def _first_child_of_type(node: Node, node_type: str) -> Node | None:
    return next((c for c in node.named_children if c.type == node_type), None)


def _first_named(node: Node) -> Node | None:
    return next((c for c in node.named_children if not _is_comment(c)), None)


def _last_named(node: Node, skip: tuple[str, ...] = ()) -> Node | None:
    candidates = [c for c in node.named_children if not _is_comment(c) and c.type not in skip]
    return candidates[-1] if candidates else None


def _generic_parts(node: Node) -> tuple[str, tuple[str, ...]]:
    name_node = node.child_by_field_name("name") or _first_child_of_type(node, "identifier")
    type_list = _first_child_of_type(node, "type_argument_list")
    type_args = tuple(node_text(c) for c in type_list.named_children) if type_list is not None else ()
    return node_text(name_node), type_args


def _anonymous_between(node: Node, left: Node | None, right: Node | None) -> str:
    """Operator token of a binary node without an `operator` field."""
    inside = False
    for child in node.children:
        if left is not None and child == left:
            inside = True
            continue
        if right is not None and child == right:
            break
        if inside and not child.is_named:
            return child.type
    return ""
