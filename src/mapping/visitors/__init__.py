"""Visitor implementations for statement tree traversal."""

from .base import StatementVisitor
from .statement_walker import ModuleWalker

__all__ = ["StatementVisitor", "ModuleWalker"]
