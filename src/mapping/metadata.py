"""Shader property metadata.

Scans the `Properties { ... }` blocks of `.shader` files for declarations
like

    [HDR] _GlowColor ("Glow Color", Color) = (1, 0.5, 0, 1)
    _GlowStrength ("Strength", Range(0, 4)) = 1

and builds a table of type/range/default metadata keyed by the shader
property name. Lines that don't match are skipped.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable
from dataclasses import dataclass, replace
from pathlib import Path

from src.mapping.registries.property_types import normalize_shader_type, parse_range_bounds
from src.models.mapping_document import PropertyType

logger = logging.getLogger(__name__)

DEFAULT_SHADER_GLOB = "*.shader"

PROPERTY_PATTERN = re.compile(
    r"^\s*(?:\[[^\]]+\]\s*)*"
    r"(?P<name>_[A-Za-z0-9]+)\s*"
    r"\(\"(?P<display>[^\"]+)\"\s*,\s*"
    r"(?P<type>Range\([^\)]*\)|Color|Vector|Float|Int|2D|3D|Cube|Texture)"
    r"(?:\s*/\*.*?\*/)?\)\s*=\s*"
    r"(?P<default>[^/]+)?",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ShaderPropertyInfo:
    """One shader property declaration."""

    name: str
    property_type: PropertyType
    display_name: str
    min: float | None = None
    max: float | None = None
    default_value: float | None = None
    default_int: int | None = None
    default_color: tuple[float, ...] | None = None
    default_vector: tuple[float, ...] | None = None


ShaderPropertyTable = dict[str, ShaderPropertyInfo]


def strip_line_comment(line: str) -> str:
    index = line.find("//")
    return line[:index] if index >= 0 else line


def parse_property_line(line: str) -> ShaderPropertyInfo | None:
    """Parse a single declaration line; None when it is not one."""
    match = PROPERTY_PATTERN.match(strip_line_comment(line))
    if not match:
        return None

    raw_type = match.group("type")
    property_type = normalize_shader_type(raw_type)
    minimum, maximum = parse_range_bounds(raw_type) if property_type == PropertyType.RANGE else (None, None)
    info = ShaderPropertyInfo(
        name=match.group("name"),
        property_type=property_type,
        display_name=match.group("display"),
        min=minimum,
        max=maximum,
    )
    return _with_default(info, match.group("default"))


def _with_default(info: ShaderPropertyInfo, raw_default: str | None) -> ShaderPropertyInfo:
    if raw_default is None or not raw_default.strip():
        return info
    raw = raw_default.strip()

    match info.property_type:
        case PropertyType.COLOR:
            return replace(info, default_color=parse_float_tuple(raw))
        case PropertyType.VECTOR:
            return replace(info, default_vector=parse_float_tuple(raw))
        case PropertyType.INT:
            try:
                return replace(info, default_int=int(raw))
            except ValueError:
                return replace(info, default_value=parse_float(raw))
    return replace(info, default_value=parse_float(raw))


def parse_float(raw: str) -> float | None:
    try:
        return float(raw.strip())
    except ValueError:
        return None


def parse_float_tuple(raw: str) -> tuple[float, ...] | None:
    """`(1, 0.5, 0, 1)` -> (1.0, 0.5, 0.0, 1.0); unparsable parts are skipped."""
    text = raw.strip()
    if text.startswith("(") and text.endswith(")"):
        text = text[1:-1]
    values = [v for v in (parse_float(part) for part in text.split(",")) if v is not None]
    return tuple(values) if values else None


class ShaderPropertyScanner:
    """Builds a ShaderPropertyTable from shader sources.

    Usage:
        scanner = ShaderPropertyScanner()
        table = scanner.scan_directory(Path("Assets/June"))
    """

    def __init__(self, pattern: str | None = None):
        self.pattern = pattern or os.getenv("JUNE_MAPPING_SHADER_GLOB", DEFAULT_SHADER_GLOB)

    def scan_text(self, text: str, table: ShaderPropertyTable | None = None) -> ShaderPropertyTable:
        """Scan one shader's text; later declarations replace earlier ones."""
        table = {} if table is None else table
        for line in text.splitlines():
            info = parse_property_line(line)
            if info is not None:
                table[info.name] = info
        return table

    def scan_sources(self, sources: Iterable[str]) -> ShaderPropertyTable:
        table: ShaderPropertyTable = {}
        for text in sources:
            self.scan_text(text, table)
        return table

    def scan_directory(self, root: Path) -> ShaderPropertyTable:
        """Scan every matching file below `root`, in sorted path order."""
        table: ShaderPropertyTable = {}
        if not root.is_dir():
            logger.debug(f"Shader root {root} does not exist, no metadata")
            return table

        for path in sorted(root.rglob(self.pattern)):
            if not path.is_file():
                continue
            try:
                text = path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                logger.warning(f"Skipping unreadable shader {path}: {e}")
                continue
            self.scan_text(text, table)

        logger.info(f"Collected {len(table)} shader properties from {root}")
        return table


def default_shader_root(source_path: Path) -> Path:
    """Shaders live two directories above the editor script's directory."""
    override = os.getenv("JUNE_MAPPING_SHADER_ROOT")
    if override:
        return Path(override)
    return (source_path.parent / ".." / "..").resolve()
