"""Base visitor class for statement tree traversal."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from src.mapping.syntax import Block, Statement

S = TypeVar("S")


class StatementVisitor(ABC, Generic[S]):
    """Abstract visitor threading a state value through a statement tree.

    Each visit method takes the statement and the incoming state and
    returns the state for the next statement in the same block. Blocks are
    scoped: whatever a nested block does to the state does not leak out.

    Type parameter S is the state type.

    Usage:
        class MyVisitor(StatementVisitor[int]):
            def visit_default(self, statement, state):
                return state  # ignore unknown statements

            def visit_ExpressionStatement(self, statement, state):
                return state + 1
    """

    def visit(self, statement: Statement, state: S) -> S:
        """Dispatch to the appropriate visit method.

        Looks for visit_{ClassName} method, falls back to visit_default.
        """
        method_name = f"visit_{type(statement).__name__}"
        visitor = getattr(self, method_name, self.visit_default)
        return visitor(statement, state)

    def visit_sequence(self, statements: tuple[Statement, ...], state: S) -> S:
        """Visit statements in order, threading the state."""
        for statement in statements:
            state = self.visit(statement, state)
        return state

    def visit_Block(self, block: Block, state: S) -> S:
        """Visit a nested block; its final state is discarded."""
        self.visit_sequence(block.statements, state)
        return state

    @abstractmethod
    def visit_default(self, statement: Statement, state: S) -> S:
        """Default handler for statement types without specific visit methods."""
        ...
