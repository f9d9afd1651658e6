"""Overrides import/export endpoints"""

import json
import logging
from typing import Any, Dict
from fastapi import APIRouter, HTTPException, status

from gtfs_od.api.deps import build_store
from gtfs_od.core.config import settings
from gtfs_od.schemas.overrides import (
    OverridesExportRequest,
    OverridesImportRequest,
    OverridesImportResponse,
)
from gtfs_od.services.overrides_service import export_overrides, import_overrides

logger = logging.getLogger(__name__)

router = APIRouter()


def _load_document(payload: OverridesImportRequest) -> Any:
    if payload.document_text is None:
        if payload.document is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Either document or document_text is required",
            )
        return payload.document

    if len(payload.document_text.encode("utf-8")) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Overrides file exceeds {settings.MAX_UPLOAD_SIZE_MB} MB",
        )

    try:
        return json.loads(payload.document_text)
    except json.JSONDecodeError as e:
        logger.warning(f"Rejected overrides document: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid overrides.json",
        )


@router.post("/import", response_model=OverridesImportResponse, response_model_exclude_none=True)
async def import_overrides_document(payload: OverridesImportRequest) -> OverridesImportResponse:
    """
    Merge an overrides document into the current restriction map.

    Accepts a composite-key map, an array of explicit records, or a
    multi-feed ``{"overrides": {slug: ...}}`` file. Every entry is checked
    against the supplied stop times; unknown trips, unparsable keys and stops
    not on the trip are counted in the report and skipped.
    """
    document = _load_document(payload)
    store = build_store(payload.stop_times, payload.restrictions)
    report = import_overrides(document, store, slug=payload.slug)
    return OverridesImportResponse(restrictions=store.to_map(), report=report)


@router.post("/export")
async def export_overrides_document(payload: OverridesExportRequest) -> Dict[str, Any]:
    """Serialize a restriction map as an overrides document."""
    store = build_store(payload.stop_times, payload.restrictions)
    return export_overrides(store, slug=payload.slug, as_records=payload.as_records)
