"""Editor draw routine to mapping document extractor.

Statically interprets a C# `OnGUI` routine and reconstructs the
modules -> sections -> properties layout it draws.

The extraction pipeline:
  1. Shader files -> ShaderPropertyScanner -> metadata table
  2. C# text -> CSharpParser (tree-sitter) -> CompilationUnit
  3. CompilationUnit -> ModuleWalker per makeEffect segment -> MappingModule
  4. MappingDocument.to_json() -> JuneMapping.json
"""

from .errors import DocumentError, EntryPointNotFoundError, MappingError, SourceNotFoundError
from .extractor import ExtractionOptions, MappingExtractor
from .validator import ValidationResult, validate_document

__all__ = [
    "MappingExtractor",
    "ExtractionOptions",
    "MappingError",
    "SourceNotFoundError",
    "EntryPointNotFoundError",
    "DocumentError",
    "ValidationResult",
    "validate_document",
]
