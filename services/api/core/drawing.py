"""
Drawing controller: turns a press-drag-release gesture into a committed zone.

States:
    IDLE     -> DRAWING  primary press inside the page surface
    DRAWING  -> DRAWING  any pointer move (tracked globally, even off-surface)
    DRAWING  -> IDLE     pointer release (commit or discard), cancel, close

Move/up handlers live on the top-level dispatcher only while DRAWING.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, List, Optional

from models import Zone, default_zone_label, gen_zone_id
from core.dispatcher import PointerButton, PointerDispatcher, PointerEvent, PointerEventKind, Subscription
from core.geometry import ContainerRect, PercentRect, PixelPoint, rect_from_pixels
from core.navigation import PageNavigator
from core.zone_store import ZoneStore

logger = logging.getLogger(__name__)

# Reference thresholds (percent of page); anything smaller is an accidental click.
DEFAULT_MIN_WIDTH_PCT = 3.0
DEFAULT_MIN_HEIGHT_PCT = 2.0

SurfaceProvider = Callable[[], Optional[ContainerRect]]


class DrawingState(str, Enum):
    IDLE = "idle"
    DRAWING = "drawing"


class DrawingController:
    def __init__(
        self,
        store: ZoneStore,
        navigator: PageNavigator,
        dispatcher: PointerDispatcher,
        surface: SurfaceProvider,
        *,
        min_width_pct: float = DEFAULT_MIN_WIDTH_PCT,
        min_height_pct: float = DEFAULT_MIN_HEIGHT_PCT,
        id_factory: Callable[[], str] = gen_zone_id,
    ):
        self._store = store
        self._navigator = navigator
        self._dispatcher = dispatcher
        self._surface = surface
        self.min_width_pct = min_width_pct
        self.min_height_pct = min_height_pct
        self._id_factory = id_factory

        self.state = DrawingState.IDLE
        self.enabled = True
        self._start: Optional[PixelPoint] = None
        self._current: Optional[PixelPoint] = None
        self._subs: List[Subscription] = []
        self.last_committed: Optional[Zone] = None

    # ---------- gesture ----------

    def pointer_down(self, event: PointerEvent) -> bool:
        """Press on the drawable surface. Returns True if a gesture started."""
        if not self.enabled or self.state is not DrawingState.IDLE:
            return False
        if event.button != PointerButton.PRIMARY:
            return False

        container = self._surface()
        if container is None or not container.contains(event.point):
            return False

        self._start = event.point
        self._current = event.point
        self.state = DrawingState.DRAWING
        self._acquire_listeners()
        return True

    def _on_move(self, event: PointerEvent) -> None:
        if self.state is DrawingState.DRAWING:
            self._current = event.point

    def _on_up(self, event: PointerEvent) -> None:
        if self.state is not DrawingState.DRAWING or self._start is None:
            return
        self._current = event.point
        rect = rect_from_pixels(self._start, self._current, self._surface())
        self._reset()
        self.last_committed = self._commit(rect)

    @property
    def preview(self) -> Optional[PercentRect]:
        """In-progress rectangle for rendering only; never committed from here."""
        if self.state is not DrawingState.DRAWING or self._start is None or self._current is None:
            return None
        rect = rect_from_pixels(self._start, self._current, self._surface())
        return None if rect.indeterminate else rect

    def _commit(self, rect: PercentRect) -> Optional[Zone]:
        if rect.indeterminate:
            logger.debug("drawing discarded: no reference surface")
            return None
        if rect.width < self.min_width_pct or rect.height < self.min_height_pct:
            logger.debug(f"drawing discarded: {rect.width:.2f}% x {rect.height:.2f}% below threshold")
            return None

        zone = Zone(
            id=self._id_factory(),
            page=self._navigator.current_page,
            x=rect.x,
            y=rect.y,
            width=rect.width,
            height=rect.height,
            label=default_zone_label(len(self._store)),
        )
        zone.validate()
        self._store.add(zone)
        logger.info(f"zone {zone.id} committed on page {zone.page}")
        return zone

    # ---------- listener scope ----------

    def _acquire_listeners(self) -> None:
        self._subs = [
            self._dispatcher.subscribe(PointerEventKind.MOVE, self._on_move),
            self._dispatcher.subscribe(PointerEventKind.UP, self._on_up),
        ]

    def _release_listeners(self) -> None:
        for sub in self._subs:
            sub.release()
        self._subs = []

    def _reset(self) -> None:
        self._release_listeners()
        self.state = DrawingState.IDLE
        self._start = None
        self._current = None

    # ---------- lifecycle ----------

    def cancel(self) -> None:
        """Abandon any gesture in progress without committing."""
        self._reset()

    def disable(self) -> None:
        self.enabled = False
        self._reset()

    def enable(self) -> None:
        self.enabled = True

    def close(self) -> None:
        self._reset()

    def __enter__(self) -> "DrawingController":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
