"""C# frontend: tree-sitter parse tree to mapping syntax tree."""

from .parser import CSharpParser, parse_csharp

__all__ = ["CSharpParser", "parse_csharp"]
