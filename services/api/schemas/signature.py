"""
Pydantic schemas for signature submission.
"""
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .sign_document import SignDocumentOut


class SignatureIn(BaseModel):
    """One signed zone in a submission."""
    zone_id: str = Field(..., min_length=1, description="Zone id")
    signature_data: str = Field(..., min_length=1, description="Base64 image data URI")

    @field_validator("signature_data")
    @classmethod
    def strip_signature_data(cls, v: str) -> str:
        # decoded by the submission gate, which reports INVALID_SIGNATURE_DATA
        return v.strip()


class SubmitSignaturesRequest(BaseModel):
    signatures: List[SignatureIn] = Field(
        default_factory=list,
        max_length=500,
        description="Signatures in zone creation order",
    )


class SubmitSignaturesResponse(BaseModel):
    success: bool = True
    message: str = ""
    signatures_count: int = 0


class SignatureOut(BaseModel):
    """Stored signature for one zone."""
    zone_id: str
    signature_data: str
    signed_at: Optional[str] = None


class GetSignaturesResponse(BaseModel):
    success: bool = True
    signatures: List[SignatureOut] = Field(default_factory=list)
    sign_document: Optional[SignDocumentOut] = None
