"""Mapping document persistence.

Documents are written as camelCase JSON. Readers go through DocumentCache,
which skips re-decoding a document whose file has not changed.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from src.mapping.errors import DocumentError
from src.models.mapping_document import MappingDocument

logger = logging.getLogger(__name__)


def save_document(document: MappingDocument, path: str | Path) -> Path:
    """Write a document as JSON, creating parent directories as needed."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(document.to_json(), encoding="utf-8")
    logger.info(f"Wrote mapping document to {target}")
    return target


def decode_document(text: str | bytes, origin: str = "<document>") -> MappingDocument:
    if not text or not text.strip():
        raise DocumentError(f"Mapping document {origin} is empty")
    try:
        return MappingDocument.from_json(text)
    except ValidationError as e:
        raise DocumentError(f"Invalid mapping document {origin}: {e}") from e


def load_document(path: str | Path) -> MappingDocument:
    """Read and decode a stored document.

    Raises:
        DocumentError: If the file is missing, unreadable or not a mapping document
    """
    source = Path(path)
    try:
        text = source.read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentError(f"Cannot read mapping document {source}: {e}") from e
    return decode_document(text, str(source))


@dataclass(frozen=True)
class CacheKey:
    """Identity of one version of a stored document."""

    origin: str
    modified_ns: int
    content_hash: str

    @classmethod
    def for_text(cls, origin: str, text: str, modified_ns: int = 0) -> CacheKey:
        digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
        return cls(origin=origin, modified_ns=modified_ns, content_hash=digest)


class DocumentCache:
    """Single-entry cache of the last decoded document.

    A hit requires the same origin, modification time and content hash.

    Usage:
        cache = DocumentCache()
        document = cache.load(Path("JuneMapping.json"))
    """

    def __init__(self) -> None:
        self._key: CacheKey | None = None
        self._document: MappingDocument | None = None

    @property
    def key(self) -> CacheKey | None:
        return self._key

    def load(self, path: str | Path) -> MappingDocument:
        source = Path(path)
        try:
            text = source.read_text(encoding="utf-8")
            modified_ns = source.stat().st_mtime_ns
        except OSError as e:
            raise DocumentError(f"Cannot read mapping document {source}: {e}") from e
        return self.load_text(text, origin=str(source.resolve()), modified_ns=modified_ns)

    def load_text(self, text: str, origin: str = "", modified_ns: int = 0) -> MappingDocument:
        key = CacheKey.for_text(origin, text, modified_ns)
        if self._document is not None and key == self._key:
            logger.debug(f"Mapping cache hit for {origin or '<text>'}")
            return self._document

        document = decode_document(text, origin or "<text>")
        self._key = key
        self._document = document
        return document

    def clear(self) -> None:
        self._key = None
        self._document = None
