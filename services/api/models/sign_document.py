from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .zone import Zone, validate_zone_list


@dataclass
class SignDocument:
    """
    Domain model for a document prepared for signing.

    This is a pure data object that is easy to map:
      - from storage rows + zone rows
      - to Pydantic schemas (SignDocumentOut, etc.)
    """
    doc_id: str
    file_path: str                       # URL of the PDF handed to the renderer

    original_filename: str = ""
    file_size: Optional[int] = None
    zones: List[Zone] = field(default_factory=list)   # creation order

    uploaded_by: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""

    def validate(self) -> None:
        if not self.doc_id:
            raise ValueError("doc_id must not be empty")
        if not (self.file_path or "").strip():
            raise ValueError("file_path must not be empty")
        if self.file_size is not None and self.file_size < 0:
            raise ValueError("file_size must be >= 0")
        validate_zone_list(self.zones)

    @classmethod
    def from_storage(cls, row: Dict[str, Any], zone_rows: List[Dict[str, Any]]) -> "SignDocument":
        ordered = sorted(zone_rows, key=lambda r: int(r.get("order_index", 0)))
        size = row.get("file_size")
        return cls(
            doc_id=row.get("doc_id", ""),
            file_path=row.get("file_path", ""),
            original_filename=row.get("original_filename") or "",
            file_size=int(size) if size not in (None, "") else None,
            zones=[Zone.from_storage(r) for r in ordered],
            uploaded_by=row.get("uploaded_by") or None,
            created_at=str(row.get("created_at") or ""),
            updated_at=str(row.get("updated_at") or ""),
        )

    def to_api(self) -> Dict[str, Any]:
        return {
            "doc_id": self.doc_id,
            "file_path": self.file_path,
            "original_filename": self.original_filename,
            "file_size": self.file_size,
            "signature_zones": [z.to_api() for z in self.zones],
            "uploaded_by": self.uploaded_by,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
