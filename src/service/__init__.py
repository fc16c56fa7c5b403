"""Mapping document services: persistence, caching and defaults."""

from src.service.defaults_applier import InMemoryMaterial, MaterialTarget, apply_module_defaults
from src.service.document_store import DocumentCache, load_document, save_document

__all__ = [
    "DocumentCache",
    "InMemoryMaterial",
    "MaterialTarget",
    "apply_module_defaults",
    "load_document",
    "save_document",
]
