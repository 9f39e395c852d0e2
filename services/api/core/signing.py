"""
Consumer-side signing state: which zones carry a signature, plus the single
capture slot used while a signature is being drawn.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from models import SignatureRecord, Zone
from core.capture import DEFAULT_CANVAS_SIZE, DEFAULT_PEN_COLOR, DEFAULT_STROKE_WIDTH, SignatureCapture

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Progress:
    signed: int
    total: int

    @property
    def ratio(self) -> float:
        return self.signed / self.total if self.total else 0.0

    def __str__(self) -> str:
        return f"{self.signed} / {self.total}"


SeedItem = Union[SignatureRecord, Dict[str, Any]]


class SigningSession:
    """
    Mapping zone_id -> SignatureRecord for one document instance.

    Completion is always evaluated over the whole zone list handed in, never
    over the page currently on screen.
    """

    def __init__(
        self,
        existing: Optional[Iterable[SeedItem]] = None,
        *,
        canvas_size: Tuple[int, int] = DEFAULT_CANVAS_SIZE,
        pen_color: str = DEFAULT_PEN_COLOR,
        stroke_width: int = DEFAULT_STROKE_WIDTH,
    ):
        self._records: Dict[str, SignatureRecord] = {}
        self.canvas_size = canvas_size
        self.pen_color = pen_color
        self.stroke_width = stroke_width

        self.active_zone_id: Optional[str] = None
        self.capture: Optional[SignatureCapture] = None

        for item in existing or ():
            rec = item if isinstance(item, SignatureRecord) else SignatureRecord.from_api(item)
            self._records[rec.zone_id] = rec

    # ---------- records ----------

    def sign(self, zone_id: str, image: Union[bytes, SignatureRecord], media_type: str = "image/png") -> SignatureRecord:
        """Insert or fully replace the signature for `zone_id`."""
        if isinstance(image, SignatureRecord):
            rec = SignatureRecord(zone_id=zone_id, image=image.image, media_type=image.media_type)
        else:
            rec = SignatureRecord(zone_id=zone_id, image=image, media_type=media_type)
        self._records[zone_id] = rec
        return rec

    def unsign(self, zone_id: str) -> None:
        self._records.pop(zone_id, None)

    def get(self, zone_id: str) -> Optional[SignatureRecord]:
        return self._records.get(zone_id)

    def is_signed(self, zone_id: str) -> bool:
        return zone_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    # ---------- completion oracle ----------

    def is_complete(self, zones: Sequence[Zone]) -> bool:
        return len(zones) > 0 and all(z.id in self._records for z in zones)

    def progress(self, zones: Sequence[Zone]) -> Progress:
        signed = sum(1 for z in zones if z.id in self._records)
        return Progress(signed=signed, total=len(zones))

    def unsigned(self, zones: Sequence[Zone]) -> List[Zone]:
        return [z for z in zones if z.id not in self._records]

    def records_for(self, zones: Sequence[Zone]) -> List[SignatureRecord]:
        """Records of the signed zones, in the order of `zones`."""
        return [self._records[z.id] for z in zones if z.id in self._records]

    # ---------- capture slot ----------

    @property
    def capturing(self) -> bool:
        return self.capture is not None

    def begin_capture(self, zone: Zone) -> Optional[SignatureCapture]:
        """
        Open the capture surface for `zone`.

        Only one capture can be open. An existing signature on the zone is
        removed right away; abandoning the capture leaves the zone unsigned.
        """
        if self.capture is not None:
            logger.debug(f"capture for {self.active_zone_id} still open; ignoring {zone.id}")
            return None

        if self.is_signed(zone.id):
            self.unsign(zone.id)

        self.active_zone_id = zone.id
        self.capture = SignatureCapture(
            size=self.canvas_size,
            pen_color=self.pen_color,
            stroke_width=self.stroke_width,
        )
        return self.capture

    def cancel_capture(self) -> None:
        self.active_zone_id = None
        self.capture = None

    def confirm_capture(self) -> bool:
        """
        Serialize the capture and sign the active zone.

        Returns False (and keeps the surface open) when nothing was drawn.
        """
        if self.capture is None or self.active_zone_id is None:
            return False
        if self.capture.is_empty:
            return False

        png = self.capture.render_png()
        self.sign(self.active_zone_id, png, media_type="image/png")
        logger.info(f"zone {self.active_zone_id} signed ({len(png)} bytes)")
        self.cancel_capture()
        return True
