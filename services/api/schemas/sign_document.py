"""
Pydantic schemas for documents prepared for signing.
"""
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator

from .zone import ZoneIn, ZoneOut


class SaveSignDocumentRequest(BaseModel):
    """Full save from the editor: file reference plus the ordered zone list."""
    file_path: str = Field(..., min_length=1, description="URL of the PDF document")
    original_filename: Optional[str] = Field(None, max_length=500, description="Uploaded file name")
    file_size: Optional[int] = Field(None, ge=0, description="File size in bytes")
    signature_zones: List[ZoneIn] = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Zones in creation order",
    )
    uploaded_by: Optional[str] = Field(None, description="Uploader email/ID")

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "SaveSignDocumentRequest":
        ids = [z.id for z in self.signature_zones if z.id]
        if len(ids) != len(set(ids)):
            raise ValueError("Duplicate zone ids")
        return self


class SignDocumentOut(BaseModel):
    doc_id: str = Field(..., description="Document ID")
    file_path: str
    original_filename: str = ""
    file_size: Optional[int] = None
    signature_zones: List[ZoneOut] = Field(default_factory=list)
    uploaded_by: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""

    class Config:
        from_attributes = True


class SaveSignDocumentResponse(BaseModel):
    success: bool = True
    sign_document: SignDocumentOut
    message: str = ""


class GetSignDocumentResponse(BaseModel):
    success: bool = True
    sign_document: Optional[SignDocumentOut] = None
