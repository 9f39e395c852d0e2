"""
Sign document and signature zone management endpoints (producer side).
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from typing import Annotated, List, Dict, Any
from logging import getLogger

from models import SignDocument, Zone, default_zone_label
from schemas import (
    SaveSignDocumentRequest,
    SaveSignDocumentResponse,
    GetSignDocumentResponse,
    ZoneIn,
    ZoneOut,
    ZonePatch,
)
from core.validation import (
    validate_percent_rect,
    validate_page,
    ensure_unique_zone_ids,
    raise_for_storage_error,
)
from adapters.base import StorageAdapter

logger = getLogger(__name__)
router = APIRouter(prefix="/sign-documents", tags=["sign-documents"])


def get_storage() -> StorageAdapter:
    """Dependency to get storage adapter from app state."""
    from main import get_storage_adapter, get_settings
    return get_storage_adapter(get_settings())


def _zones_for(doc_id: str) -> List[Dict[str, Any]]:
    from main import storage_get_zones
    return storage_get_zones(doc_id)


def _invalidate(doc_id: str) -> None:
    from main import invalidate_zone_cache
    invalidate_zone_cache(doc_id)


def _zone_from_request(z: ZoneIn, existing_count: int) -> Zone:
    """Validate a wire zone and fill in the default label."""
    validate_page(z.page)
    validate_percent_rect(z.x, z.y, z.width, z.height)

    data = z.model_dump()
    if data.get("label") is None:
        data["label"] = default_zone_label(existing_count)
    try:
        return Zone.from_api(data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _load_document(storage: StorageAdapter, doc_id: str) -> SignDocument:
    row = storage.get_sign_document(doc_id)
    if not row:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="SIGN_DOCUMENT_NOT_FOUND")
    return SignDocument.from_storage(row, _zones_for(doc_id))


@router.put("/{doc_id}", response_model=SaveSignDocumentResponse)
async def save_sign_document(
    doc_id: str,
    body: SaveSignDocumentRequest,
    storage: Annotated[StorageAdapter, Depends(get_storage)],
):
    """
    Save the file reference and the full, ordered zone list of a document.

    The stored zone list is replaced as a whole; creation order is the order
    of `signature_zones`.
    """
    zones = [_zone_from_request(z, i) for i, z in enumerate(body.signature_zones)]
    ensure_unique_zone_ids([z.to_api() for z in zones])

    try:
        storage.save_sign_document(
            doc_id,
            body.file_path.strip(),
            [z.to_storage(doc_id, i) for i, z in enumerate(zones)],
            original_filename=body.original_filename,
            file_size=body.file_size,
            uploaded_by=body.uploaded_by,
        )
    except ValueError as e:
        raise_for_storage_error(e)
    finally:
        _invalidate(doc_id)

    doc = _load_document(storage, doc_id)
    logger.info(f"Saved sign document {doc_id} with {len(doc.zones)} zones")
    return {
        "success": True,
        "sign_document": doc.to_api(),
        "message": f"Saved {len(doc.zones)} signature zone(s)",
    }


@router.get("/{doc_id}", response_model=GetSignDocumentResponse)
async def get_sign_document(
    doc_id: str,
    storage: Annotated[StorageAdapter, Depends(get_storage)],
):
    row = storage.get_sign_document(doc_id)
    if not row:
        return {"success": True, "sign_document": None}
    return {
        "success": True,
        "sign_document": SignDocument.from_storage(row, _zones_for(doc_id)).to_api(),
    }


@router.post("/{doc_id}/zones", response_model=ZoneOut, status_code=201)
async def create_zone(
    doc_id: str,
    body: ZoneIn,
    storage: Annotated[StorageAdapter, Depends(get_storage)],
):
    """Append one zone to an existing document."""
    existing = _load_document(storage, doc_id).zones
    zone = _zone_from_request(body, len(existing))

    try:
        row = storage.create_zone(doc_id, zone.to_storage(doc_id, len(existing)))
    except ValueError as e:
        raise_for_storage_error(e)
    finally:
        _invalidate(doc_id)

    logger.info(f"Created zone {zone.id} on page {zone.page} of {doc_id}")
    return Zone.from_storage(row).to_api()


@router.patch("/{doc_id}/zones/{zone_id}", response_model=ZoneOut)
async def patch_zone(
    doc_id: str,
    zone_id: str,
    patch: ZonePatch,
    storage: Annotated[StorageAdapter, Depends(get_storage)],
):
    """Relabel a zone. Geometry cannot change after a zone is drawn."""
    try:
        row = storage.update_zone(doc_id, zone_id, patch.model_dump(exclude_unset=True))
    except ValueError as e:
        raise_for_storage_error(e)
    finally:
        _invalidate(doc_id)
    return Zone.from_storage(row).to_api()


@router.delete("/{doc_id}/zones/{zone_id}", status_code=200)
async def delete_zone(
    doc_id: str,
    zone_id: str,
    storage: Annotated[StorageAdapter, Depends(get_storage)],
):
    try:
        storage.delete_zone(doc_id, zone_id)
    except ValueError as e:
        raise_for_storage_error(e)
    finally:
        _invalidate(doc_id)

    logger.info(f"Deleted zone {zone_id} from {doc_id}")
    return {"success": True, "message": f"Zone {zone_id} deleted"}
