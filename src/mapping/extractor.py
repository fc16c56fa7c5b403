"""Mapping extraction: editor source to MappingDocument.

The pipeline:
  1. Shader metadata is scanned once into a read-only table
  2. The C# source is parsed (tree-sitter) and lowered to the syntax tree
  3. Field constants and enums are resolved into lookup tables
  4. The entry-point body is split into one segment per `makeEffect` call
  5. Each segment is walked by a ModuleWalker into a MappingModule
  6. The document is validated; findings are logged, never fatal
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from src.mapping.compiler.context import ModuleContext
from src.mapping.compiler.declarations import DeclarationTables, collect_declarations
from src.mapping.compiler.property_registry import ConditionMergePolicy
from src.mapping.compiler.value_resolver import resolve_string
from src.mapping.errors import EntryPointNotFoundError, SourceNotFoundError
from src.mapping.frontend import CSharpParser
from src.mapping.metadata import (
    DEFAULT_SHADER_GLOB,
    ShaderPropertyInfo,
    ShaderPropertyScanner,
    default_shader_root,
)
from src.mapping.registries.call_shapes import (
    DEFAULT_MODULE_NAME,
    EFFECT_SIGNATURE,
    CallShape,
    classify_call,
)
from src.mapping.syntax import CompilationUnit, ExpressionStatement, Invocation, Statement, simple_name
from src.mapping.validator import validate_document
from src.mapping.visitors.statement_walker import ModuleWalker
from src.models.mapping_document import MappingDocument

logger = logging.getLogger(__name__)

DEFAULT_ENTRY_POINT = "OnGUI"


@dataclass
class ExtractionOptions:
    """Knobs for one extraction run."""

    entry_point: str = DEFAULT_ENTRY_POINT
    shader_root: Path | None = None  # None: derived from the source path
    shader_glob: str = DEFAULT_SHADER_GLOB
    policy: ConditionMergePolicy = ConditionMergePolicy.LAST_UNCONDITIONAL_WINS

    @classmethod
    def from_env(cls) -> ExtractionOptions:
        shader_root = os.getenv("JUNE_MAPPING_SHADER_ROOT")
        return cls(
            entry_point=os.getenv("JUNE_MAPPING_ENTRY_POINT", DEFAULT_ENTRY_POINT),
            shader_root=Path(shader_root) if shader_root else None,
            shader_glob=os.getenv("JUNE_MAPPING_SHADER_GLOB", DEFAULT_SHADER_GLOB),
        )


@dataclass
class ModuleSegment:
    """A `makeEffect` call and the entry-point statements that follow it."""

    call: Invocation
    statements: list[Statement] = field(default_factory=list)


def effect_call(statement: Statement) -> Invocation | None:
    if isinstance(statement, ExpressionStatement) and isinstance(statement.expression, Invocation):
        if classify_call(statement.expression) == CallShape.MAKE_EFFECT:
            return statement.expression
    return None


def segment_modules(statements: tuple[Statement, ...]) -> list[ModuleSegment]:
    """Split the entry-point body at each `makeEffect` statement.

    Statements before the first `makeEffect` belong to no module.
    """
    segments: list[ModuleSegment] = []
    for statement in statements:
        call = effect_call(statement)
        if call is not None:
            segments.append(ModuleSegment(call=call))
        elif segments:
            segments[-1].statements.append(statement)
    return segments


class MappingExtractor:
    """Extracts a MappingDocument from an editor script.

    Holds no state between calls; every extraction starts fresh.

    Usage:
        extractor = MappingExtractor()
        document = extractor.extract_file(Path("Assets/June/Editor/JuneEditor.cs"))
    """

    def __init__(self, options: ExtractionOptions | None = None, parser: CSharpParser | None = None):
        self.options = options or ExtractionOptions.from_env()
        self.parser = parser or CSharpParser()
        self.scanner = ShaderPropertyScanner(self.options.shader_glob)

    def extract_file(self, path: str | Path) -> MappingDocument:
        """Extract from a source file, scanning shaders under the configured root.

        Raises:
            SourceNotFoundError: If the file is missing or unreadable
            EntryPointNotFoundError: If the source has no entry-point method
        """
        source_path = Path(path)
        try:
            text = source_path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise SourceNotFoundError(f"Editor source not found: {source_path}") from e
        except OSError as e:
            raise SourceNotFoundError(f"Cannot read editor source {source_path}: {e}") from e

        shader_root = self.options.shader_root or default_shader_root(source_path)
        metadata = self.scanner.scan_directory(shader_root)
        return self.extract_source(text, metadata, origin=str(source_path))

    def extract_source(
        self,
        text: str,
        metadata: Mapping[str, ShaderPropertyInfo] | None = None,
        origin: str = "<source>",
    ) -> MappingDocument:
        unit = self.parser.parse(text, origin)
        return self.extract_unit(unit, metadata or {}, origin)

    def extract_unit(
        self,
        unit: CompilationUnit,
        metadata: Mapping[str, ShaderPropertyInfo],
        origin: str = "<source>",
    ) -> MappingDocument:
        method = unit.find_method(self.options.entry_point)
        if method is None:
            raise EntryPointNotFoundError(self.options.entry_point, origin)

        tables = collect_declarations(unit)
        modules = []
        for segment in segment_modules(method.body.statements):
            module = self._module_context(segment.call, tables)
            ModuleWalker(module, tables, metadata).walk(tuple(segment.statements))
            modules.append(module.to_module())

        document = MappingDocument(modules=modules)

        validation = validate_document(document)
        for error in validation.errors:
            logger.warning(f"{origin}: {error.path}: {error.message}")

        module_count, section_count, property_count = document.counts()
        logger.info(
            f"{origin}: extracted {module_count} modules, {section_count} sections, "
            f"{property_count} properties"
        )
        return document

    def _module_context(self, call: Invocation, tables: DeclarationTables) -> ModuleContext:
        name = resolve_string(call.argument(EFFECT_SIGNATURE.name), tables.strings)
        if not name:
            logger.debug(f"makeEffect without a resolvable name, using '{DEFAULT_MODULE_NAME}'")
        return ModuleContext(
            name=name or DEFAULT_MODULE_NAME,
            keyword=resolve_string(call.argument(EFFECT_SIGNATURE.keyword), tables.strings),
            keyword_define=resolve_string(call.argument(EFFECT_SIGNATURE.keyword_define), tables.strings),
            toggle=simple_name(call.argument(EFFECT_SIGNATURE.toggle)),
            policy=self.options.policy,
        )
