"""
Consumer context: one signer working through the zones of one document.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from models import Zone
from core.capture import DEFAULT_CANVAS_SIZE, DEFAULT_PEN_COLOR, DEFAULT_STROKE_WIDTH, SignatureCapture
from core.navigation import PageNavigator, ZoomControl
from core.signing import Progress, SeedItem, SigningSession
from core.status import DocumentState, DocumentStatus
from core.submission import SubmissionGate, SubmissionOutcome, SubmissionResult, Submitter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZoneView:
    """What the overlay for one zone needs: the zone and whether it is signed."""
    zone: Zone
    signed: bool
    signature_data: Optional[str] = None


class SigningViewer:
    def __init__(
        self,
        zones: Iterable[Zone],
        existing_signatures: Optional[Iterable[SeedItem]] = None,
        *,
        read_only: bool = False,
        canvas_size: Tuple[int, int] = DEFAULT_CANVAS_SIZE,
        pen_color: str = DEFAULT_PEN_COLOR,
        stroke_width: int = DEFAULT_STROKE_WIDTH,
        zoom_width: int = 620,
        zoom_min: int = 300,
        zoom_max: int = 800,
        zoom_step: int = 80,
    ):
        # Immutable snapshot: the signer works against a fixed zone list.
        self.zones: Tuple[Zone, ...] = tuple(zones)
        self.read_only = read_only
        self.session = SigningSession(
            existing_signatures,
            canvas_size=canvas_size,
            pen_color=pen_color,
            stroke_width=stroke_width,
        )
        self.navigator = PageNavigator()
        self.zoom = ZoomControl(zoom_width, zoom_min, zoom_max, zoom_step)
        self.gate = SubmissionGate(self.zones, self.session)
        self.document = DocumentState()

    @classmethod
    def from_settings(
        cls,
        settings,
        zones: Iterable[Zone],
        existing_signatures: Optional[Iterable[SeedItem]] = None,
        **kwargs,
    ) -> "SigningViewer":
        return cls(
            zones,
            existing_signatures,
            canvas_size=settings.signature_canvas_size,
            pen_color=settings.signature_pen_color,
            stroke_width=settings.signature_stroke_width,
            zoom_max=settings.viewer_zoom_max,
            zoom_step=settings.zoom_step,
            **kwargs,
        )

    # ---------- renderer callbacks ----------

    @property
    def status(self) -> DocumentStatus:
        return self.document.status

    def on_document_loaded(self, page_count: int) -> None:
        if self.document.loaded():
            self.navigator.set_page_count(page_count)

    def on_document_error(self, error: object) -> None:
        logger.error(f"Document failed to load: {error}")
        self.document.failed(error)
        self.session.cancel_capture()

    @property
    def interactive(self) -> bool:
        return not self.read_only and not self.document.unavailable

    # ---------- rendering helpers ----------

    def visible_zones(self) -> List[ZoneView]:
        page = self.navigator.current_page
        out: List[ZoneView] = []
        for z in self.zones:
            if z.page != page:
                continue
            rec = self.session.get(z.id)
            out.append(ZoneView(zone=z, signed=rec is not None, signature_data=rec.to_data_uri() if rec else None))
        return out

    def pending_elsewhere(self) -> List[Zone]:
        """Unsigned zones on other pages, for the "sign X on page N" shortcuts."""
        if not self.interactive:
            return []
        page = self.navigator.current_page
        return [z for z in self.session.unsigned(self.zones) if z.page != page]

    def progress(self) -> Progress:
        return self.session.progress(self.zones)

    @property
    def all_signed(self) -> bool:
        return self.session.is_complete(self.zones)

    # ---------- signing ----------

    def _zone(self, zone_id: str) -> Optional[Zone]:
        return next((z for z in self.zones if z.id == zone_id), None)

    def click_zone(self, zone_id: str) -> Optional[SignatureCapture]:
        """
        Open the capture surface for a zone. Clicking a signed zone starts a
        re-sign, which drops the existing signature first.
        """
        if not self.interactive:
            return None
        zone = self._zone(zone_id)
        if zone is None:
            return None
        return self.session.begin_capture(zone)

    def go_to_zone(self, zone_id: str) -> int:
        zone = self._zone(zone_id)
        if zone is not None:
            self.navigator.jump_to(zone)
        return self.navigator.current_page

    def confirm_signature(self) -> bool:
        if not self.interactive:
            return False
        return self.session.confirm_capture()

    def close_capture(self) -> None:
        self.session.cancel_capture()

    # ---------- submission ----------

    @property
    def can_submit(self) -> bool:
        return self.interactive and self.gate.is_open and not self.gate.submitted and not self.gate.in_flight

    def submit(self, submitter: Submitter) -> SubmissionResult:
        if not self.interactive:
            return SubmissionResult(SubmissionOutcome.DISABLED, message="Signing is not available")
        return self.gate.submit(submitter)
