"""Mapping routes for on-demand extraction."""

import logging
from dataclasses import replace

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from src.mapping.compiler.property_registry import ConditionMergePolicy
from src.mapping.errors import EntryPointNotFoundError, MappingError
from src.mapping.extractor import ExtractionOptions, MappingExtractor
from src.mapping.metadata import ShaderPropertyScanner
from src.models.mapping_document import MappingDocument

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/mapping", tags=["mapping"])


class ExtractRequestModel(BaseModel):
    """Request to extract a mapping from editor source text.

    Shader sources are scanned for property metadata in order; a later
    declaration of the same property replaces an earlier one.
    """

    source: str
    shader_sources: list[str] = Field(default_factory=list)
    entry_point: str | None = None
    accumulate_conditions: bool = False


class ExtractResponseModel(BaseModel):
    """Extracted document plus entity counts."""

    document: MappingDocument
    module_count: int
    section_count: int
    property_count: int


@router.post("/extract", response_model=ExtractResponseModel)
async def extract_mapping(request: ExtractRequestModel) -> ExtractResponseModel:
    """Extract a mapping document from C# source.

    A source without the entry-point method is rejected with 422; any other
    extraction failure with 400.
    """
    options = ExtractionOptions.from_env()
    if request.entry_point:
        options = replace(options, entry_point=request.entry_point)
    if request.accumulate_conditions:
        options = replace(options, policy=ConditionMergePolicy.ACCUMULATE)

    extractor = MappingExtractor(options)
    metadata = ShaderPropertyScanner(options.shader_glob).scan_sources(request.shader_sources)

    try:
        document = extractor.extract_source(request.source, metadata, origin="<request>")
    except EntryPointNotFoundError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except MappingError as e:
        logger.error(f"Extraction failed: {e}")
        raise HTTPException(status_code=400, detail=str(e)) from e

    module_count, section_count, property_count = document.counts()
    return ExtractResponseModel(
        document=document,
        module_count=module_count,
        section_count=section_count,
        property_count=property_count,
    )
