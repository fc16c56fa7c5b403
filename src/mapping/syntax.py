"""Syntax tree consumed by the mapping interpreter.

A small closed set of frozen node types covering what a draw routine is
made of: declarations, assignments, calls, conditionals, switches and
unary/binary/literal expressions. Anything the frontend cannot map onto
these lands in UnknownExpression / UnknownStatement, which the interpreter
ignores.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

# =============================================================================
# Expressions
# =============================================================================


class LiteralKind(str, Enum):
    """Literal categories."""

    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    CHAR = "char"
    NULL = "null"


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class GenericName:
    """`Name<T1, T2>` used as a callee."""

    name: str
    type_args: tuple[str, ...] = ()


@dataclass(frozen=True)
class MemberAccess:
    """`target.name`, optionally `target.name<T>`."""

    target: Expression
    name: str
    type_args: tuple[str, ...] = ()


@dataclass(frozen=True)
class Literal:
    value: str | int | float | bool | None
    kind: LiteralKind


@dataclass(frozen=True)
class Argument:
    value: Expression
    modifier: str | None = None  # ref / out / in
    name: str | None = None  # named argument


@dataclass(frozen=True)
class Invocation:
    function: Expression
    arguments: tuple[Argument, ...] = ()

    @property
    def method_name(self) -> str:
        return callee_name(self.function)

    def argument(self, index: int) -> Expression | None:
        """Positional argument expression, or None when absent."""
        if 0 <= index < len(self.arguments):
            return self.arguments[index].value
        return None


@dataclass(frozen=True)
class ObjectCreation:
    """`new Type(args)`."""

    type_name: str
    arguments: tuple[Argument, ...] = ()


@dataclass(frozen=True)
class Cast:
    type_name: str
    operand: Expression


@dataclass(frozen=True)
class Parenthesized:
    inner: Expression


@dataclass(frozen=True)
class Unary:
    operator: str
    operand: Expression


@dataclass(frozen=True)
class Binary:
    operator: str
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Assignment:
    target: Expression
    value: Expression
    operator: str = "="


@dataclass(frozen=True)
class Conditional:
    """`test ? when_true : when_false`."""

    test: Expression
    when_true: Expression
    when_false: Expression


@dataclass(frozen=True)
class UnknownExpression:
    text: str = ""
    children: tuple[Expression, ...] = ()


Expression = (
    Identifier
    | GenericName
    | MemberAccess
    | Literal
    | Invocation
    | ObjectCreation
    | Cast
    | Parenthesized
    | Unary
    | Binary
    | Assignment
    | Conditional
    | UnknownExpression
)


# =============================================================================
# Statements
# =============================================================================


@dataclass(frozen=True)
class Block:
    statements: tuple[Statement, ...] = ()


@dataclass(frozen=True)
class VariableDeclarator:
    name: str
    initializer: Expression | None = None


@dataclass(frozen=True)
class LocalDeclaration:
    type_name: str
    declarators: tuple[VariableDeclarator, ...]


@dataclass(frozen=True)
class ExpressionStatement:
    expression: Expression


@dataclass(frozen=True)
class If:
    test: Expression
    then: Statement
    otherwise: Statement | None = None


@dataclass(frozen=True)
class CaseLabel:
    value: Expression


@dataclass(frozen=True)
class DefaultLabel:
    pass


@dataclass(frozen=True)
class SwitchSection:
    labels: tuple[CaseLabel | DefaultLabel, ...]
    statements: tuple[Statement, ...] = ()


@dataclass(frozen=True)
class Switch:
    discriminant: Expression
    sections: tuple[SwitchSection, ...] = ()


@dataclass(frozen=True)
class UnknownStatement:
    text: str = ""


Statement = Block | LocalDeclaration | ExpressionStatement | If | Switch | UnknownStatement


# =============================================================================
# Declarations
# =============================================================================


@dataclass(frozen=True)
class Attribute:
    name: str
    arguments: tuple[Expression, ...] = ()


@dataclass(frozen=True)
class FieldDeclaration:
    type_name: str
    declarators: tuple[VariableDeclarator, ...]


@dataclass(frozen=True)
class EnumMember:
    name: str
    attributes: tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class EnumDeclaration:
    name: str
    members: tuple[EnumMember, ...] = ()


@dataclass(frozen=True)
class MethodDeclaration:
    name: str
    body: Block | None = None


@dataclass(frozen=True)
class CompilationUnit:
    """Everything the interpreter needs from one source file, in source order."""

    fields: tuple[FieldDeclaration, ...] = ()
    enums: tuple[EnumDeclaration, ...] = ()
    methods: tuple[MethodDeclaration, ...] = ()

    def find_method(self, name: str) -> MethodDeclaration | None:
        """First method with this name that has a block body."""
        for method in self.methods:
            if method.name == name and method.body is not None:
                return method
        return None


# =============================================================================
# Helpers
# =============================================================================


def callee_name(function: Expression) -> str:
    """Simple name of a call target: `Foo`, `x.Foo`, `x.Foo<T>` -> "Foo"."""
    if isinstance(function, (Identifier, GenericName, MemberAccess)):
        return function.name
    return ""


def child_expressions(expression: Expression) -> tuple[Expression, ...]:
    """Direct sub-expressions, in source order."""
    match expression:
        case MemberAccess(target=target):
            return (target,)
        case Invocation(function=function, arguments=arguments):
            return (function, *(a.value for a in arguments))
        case ObjectCreation(arguments=arguments):
            return tuple(a.value for a in arguments)
        case Cast(operand=operand) | Unary(operand=operand):
            return (operand,)
        case Parenthesized(inner=inner):
            return (inner,)
        case Binary(left=left, right=right):
            return (left, right)
        case Assignment(target=target, value=value):
            return (target, value)
        case Conditional(test=test, when_true=when_true, when_false=when_false):
            return (test, when_true, when_false)
        case UnknownExpression(children=children):
            return children
    return ()


def walk_expression(expression: Expression | None) -> Iterator[Expression]:
    """Yield the expression and all its descendants, pre-order."""
    if expression is None:
        return
    stack = [expression]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(child_expressions(node)))


def referenced_identifiers(expression: Expression | None) -> Iterator[str]:
    """Names of every bare identifier inside an expression."""
    for node in walk_expression(expression):
        if isinstance(node, Identifier):
            yield node.name


def first_invocation(expression: Expression | None) -> Invocation | None:
    """The call an expression is built around, looking through casts,
    parentheses and ternaries before falling back to any nested call."""
    match expression:
        case None:
            return None
        case Invocation():
            return expression
        case Cast(operand=inner) | Parenthesized(inner=inner):
            return first_invocation(inner)
        case Conditional(test=test, when_true=when_true, when_false=when_false):
            return first_invocation(test) or first_invocation(when_true) or first_invocation(when_false)
    for node in walk_expression(expression):
        if isinstance(node, Invocation):
            return node
    return None


def simple_name(expression: Expression | None) -> str | None:
    """Name of a plain variable reference, `x` or `this.x`."""
    match expression:
        case Identifier(name=name):
            return name
        case MemberAccess(target=Identifier(name="this"), name=name):
            return name
        case Parenthesized(inner=inner):
            return simple_name(inner)
    return None
