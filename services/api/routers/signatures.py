"""
Signature submission endpoints (consumer side).

One signing session (`session_id`, e.g. a task or a signer) holds at most one
signature per zone. A submission must cover every zone of the document and
replaces whatever the session had stored before.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from typing import Annotated
from logging import getLogger

from models import SignatureRecord, SignDocument
from schemas import SubmitSignaturesRequest, SubmitSignaturesResponse, GetSignaturesResponse
from core.validation import check_signature_coverage, raise_for_storage_error
from adapters.base import StorageAdapter

logger = getLogger(__name__)
router = APIRouter(prefix="/sign-documents", tags=["signatures"])


def get_storage() -> StorageAdapter:
    """Dependency to get storage adapter from app state."""
    from main import get_storage_adapter, get_settings
    return get_storage_adapter(get_settings())


def _load_document(storage: StorageAdapter, doc_id: str) -> SignDocument:
    from main import storage_get_zones

    row = storage.get_sign_document(doc_id)
    if not row:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="SIGN_DOCUMENT_NOT_FOUND")
    return SignDocument.from_storage(row, storage_get_zones(doc_id))


@router.post(
    "/{doc_id}/sessions/{session_id}/signatures",
    response_model=SubmitSignaturesResponse,
)
async def submit_signatures(
    doc_id: str,
    session_id: str,
    body: SubmitSignaturesRequest,
    storage: Annotated[StorageAdapter, Depends(get_storage)],
):
    doc = _load_document(storage, doc_id)
    entries = [s.model_dump() for s in body.signatures]
    check_signature_coverage([z.id for z in doc.zones], entries)

    by_zone = {e["zone_id"]: SignatureRecord.from_api(e) for e in entries}
    rows = []
    for z in doc.zones:
        rec = by_zone[z.id]
        rows.append({
            "zone_id": rec.zone_id,
            "signature_data": rec.to_data_uri(),
            "signed_at": rec.signed_at,
        })

    try:
        count = storage.replace_signatures(doc_id, session_id, rows)
    except ValueError as e:
        raise_for_storage_error(e)

    logger.info(f"Stored {count} signatures for {doc_id} (session {session_id})")
    return {
        "success": True,
        "message": f"{count} signature(s) saved",
        "signatures_count": count,
    }


@router.get(
    "/{doc_id}/sessions/{session_id}/signatures",
    response_model=GetSignaturesResponse,
)
async def get_signatures(
    doc_id: str,
    session_id: str,
    storage: Annotated[StorageAdapter, Depends(get_storage)],
):
    doc = _load_document(storage, doc_id)
    rows = storage.list_signatures(doc_id, session_id)
    return {
        "success": True,
        "signatures": [
            {
                "zone_id": r["zone_id"],
                "signature_data": r["signature_data"],
                "signed_at": r.get("signed_at"),
            }
            for r in rows
        ],
        "sign_document": doc.to_api(),
    }
