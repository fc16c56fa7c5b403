"""C# parsing via tree-sitter.

tree-sitter recovers from syntax errors, so a broken editor script still
yields a tree; the damaged regions are reported and otherwise ignored.
"""

from __future__ import annotations

import logging

import tree_sitter
import tree_sitter_c_sharp

from src.mapping.frontend.lowering import SyntaxLowering
from src.mapping.syntax import CompilationUnit

logger = logging.getLogger(__name__)

CSHARP_LANGUAGE = tree_sitter.Language(tree_sitter_c_sharp.language())


def count_syntax_errors(root) -> int:
    """Number of ERROR and missing nodes under `root`."""
    count = 0
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            count += 1
        if node.has_error:
            stack.extend(node.children)
    return count


class CSharpParser:
    """Parses C# source into a CompilationUnit."""

    def __init__(self):
        self._parser = tree_sitter.Parser(CSHARP_LANGUAGE)

    def parse_tree(self, source: str | bytes) -> tree_sitter.Tree:
        content = source.encode("utf-8") if isinstance(source, str) else source
        return self._parser.parse(content)

    def parse(self, source: str | bytes, origin: str = "<source>") -> CompilationUnit:
        tree = self.parse_tree(source)
        if tree.root_node.has_error:
            errors = count_syntax_errors(tree.root_node)
            logger.warning(f"{origin}: {errors} syntax error(s); continuing with the recovered tree")
        return SyntaxLowering().lower_unit(tree.root_node)


def parse_csharp(source: str | bytes, origin: str = "<source>") -> CompilationUnit:
    """Convenience function to parse C# source."""
    return CSharpParser().parse(source, origin)
