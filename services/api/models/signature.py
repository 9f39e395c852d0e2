# services/api/models/signature.py
from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_DATA_URI_RE = re.compile(r"^data:(?P<media>[\w.+-]+/[\w.+-]+);base64,(?P<data>.*)$", re.DOTALL)


def _utc_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_data_uri(data_uri: str) -> tuple[str, bytes]:
    """
    Split a base64 data URI ("data:image/png;base64,....") into
    (media_type, raw bytes).

    Raises:
        ValueError: if the string is not a base64 image data URI.
    """
    m = _DATA_URI_RE.match((data_uri or "").strip())
    if not m:
        raise ValueError("signature_data must be a base64 data URI")

    media_type = m.group("media").lower()
    if not media_type.startswith("image/"):
        raise ValueError(f"signature_data must be an image, got {media_type}")

    try:
        raw = base64.b64decode(m.group("data"), validate=True)
    except (binascii.Error, ValueError):
        raise ValueError("signature_data is not valid base64")

    if not raw:
        raise ValueError("signature_data is empty")
    return media_type, raw


@dataclass
class SignatureRecord:
    """
    Raster signature captured for one zone.

    Only the zone id links a record to its zone; geometry is never stored here.
    """
    zone_id: str
    image: bytes
    media_type: str = "image/png"
    signed_at: str = field(default_factory=_utc_iso)

    def to_data_uri(self) -> str:
        encoded = base64.b64encode(self.image).decode("ascii")
        return f"data:{self.media_type};base64,{encoded}"

    @classmethod
    def from_data_uri(
        cls,
        zone_id: str,
        data_uri: str,
        signed_at: Optional[str] = None,
    ) -> "SignatureRecord":
        media_type, raw = parse_data_uri(data_uri)
        return cls(
            zone_id=zone_id,
            image=raw,
            media_type=media_type,
            signed_at=signed_at or _utc_iso(),
        )

    # Wire shape of the submission endpoint
    def to_api(self) -> Dict[str, Any]:
        return {"zone_id": self.zone_id, "signature_data": self.to_data_uri()}

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "SignatureRecord":
        zone_id = str(data.get("zone_id") or "").strip()
        if not zone_id:
            raise ValueError("zone_id is required")
        return cls.from_data_uri(
            zone_id,
            data.get("signature_data") or "",
            signed_at=data.get("signed_at"),
        )
