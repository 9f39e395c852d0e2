"""
Pydantic schemas for API request/response validation.
"""
from typing import Optional

from pydantic import BaseModel

from .zone import ZoneBase, ZoneIn, ZoneOut, ZonePatch
from .sign_document import (
    SaveSignDocumentRequest,
    SignDocumentOut,
    SaveSignDocumentResponse,
    GetSignDocumentResponse,
)
from .signature import (
    SignatureIn,
    SubmitSignaturesRequest,
    SubmitSignaturesResponse,
    SignatureOut,
    GetSignaturesResponse,
)


# ============ Health Check ============


class HealthCheck(BaseModel):
    """Health check response."""
    ok: bool = True
    backend: Optional[str] = None


# Re-export all
__all__ = [
    "ZoneBase",
    "ZoneIn",
    "ZoneOut",
    "ZonePatch",
    "SaveSignDocumentRequest",
    "SignDocumentOut",
    "SaveSignDocumentResponse",
    "GetSignDocumentResponse",
    "SignatureIn",
    "SubmitSignaturesRequest",
    "SubmitSignaturesResponse",
    "SignatureOut",
    "GetSignaturesResponse",
    "HealthCheck",
]
