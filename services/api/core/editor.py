"""
Producer context: one document being prepared for signing.

Wires the zone store, page navigation, the drawing controller and view zoom
together, and reacts to the renderer's load outcome.
"""
from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional

from models import Zone, gen_zone_id
from adapters.base import StorageAdapter
from core.dispatcher import PointerDispatcher, PointerEvent
from core.drawing import DEFAULT_MIN_HEIGHT_PCT, DEFAULT_MIN_WIDTH_PCT, DrawingController
from core.geometry import ContainerRect
from core.navigation import PageNavigator, ZoomControl
from core.status import DocumentState, DocumentStatus
from core.zone_store import ZoneChange, ZoneListener, ZoneStore

logger = logging.getLogger(__name__)


def persist_zone_changes(storage: StorageAdapter, doc_id: str) -> ZoneListener:
    """
    Store listener that mirrors every create, relabel and delete into a
    storage adapter. The adapter assigns the order index on create.
    """
    def _apply(change: ZoneChange) -> None:
        zone = change.zone
        if change.kind == "created":
            storage.create_zone(doc_id, zone.to_storage(doc_id, 0))
        elif change.kind == "updated":
            storage.update_zone(doc_id, zone.id, {"label": zone.label})
        elif change.kind == "deleted":
            storage.delete_zone(doc_id, zone.id)

    return _apply


class ZoneEditor:
    def __init__(
        self,
        zones: Optional[Iterable[Zone]] = None,
        *,
        dispatcher: Optional[PointerDispatcher] = None,
        min_width_pct: float = DEFAULT_MIN_WIDTH_PCT,
        min_height_pct: float = DEFAULT_MIN_HEIGHT_PCT,
        zoom_width: int = 650,
        zoom_min: int = 300,
        zoom_max: int = 900,
        zoom_step: int = 80,
        id_factory: Callable[[], str] = gen_zone_id,
        storage: Optional[StorageAdapter] = None,
        doc_id: Optional[str] = None,
    ):
        self.store = ZoneStore(zones)
        self.navigator = PageNavigator()
        self.dispatcher = dispatcher or PointerDispatcher()
        self.zoom = ZoomControl(zoom_width, zoom_min, zoom_max, zoom_step)
        self.document = DocumentState()
        self.editing_zone_id: Optional[str] = None
        self._surface: Optional[ContainerRect] = None

        self.drawing = DrawingController(
            self.store,
            self.navigator,
            self.dispatcher,
            lambda: self._surface,
            min_width_pct=min_width_pct,
            min_height_pct=min_height_pct,
            id_factory=id_factory,
        )
        # Nothing to draw on until the renderer reports success.
        self.drawing.disable()

        self._unsync: Optional[Callable[[], None]] = None
        if storage is not None:
            if not doc_id:
                raise ValueError("doc_id is required to persist zone changes")
            self._unsync = self.store.subscribe(persist_zone_changes(storage, doc_id))

    @classmethod
    def from_settings(cls, settings, zones: Optional[Iterable[Zone]] = None, **kwargs) -> "ZoneEditor":
        return cls(
            zones,
            min_width_pct=settings.min_zone_width_pct,
            min_height_pct=settings.min_zone_height_pct,
            zoom_min=settings.editor_zoom_min,
            zoom_max=settings.editor_zoom_max,
            zoom_step=settings.zoom_step,
            **kwargs,
        )

    # ---------- renderer callbacks ----------

    @property
    def status(self) -> DocumentStatus:
        return self.document.status

    def on_document_loaded(self, page_count: int) -> None:
        if not self.document.loaded():
            return
        self.navigator.set_page_count(page_count)
        self.drawing.enable()

    def on_document_error(self, error: object) -> None:
        logger.error(f"Document failed to load: {error}")
        self.document.failed(error)
        self.drawing.disable()

    def on_page_rendered(self, surface: Optional[ContainerRect]) -> None:
        """Reference rectangle of the page currently on screen (None while re-rendering)."""
        self._surface = surface

    # ---------- input ----------

    def pointer_down(self, event: PointerEvent) -> bool:
        return self.drawing.pointer_down(event)

    def dispatch(self, event: PointerEvent) -> None:
        """Forward a window-level pointer event."""
        self.dispatcher.dispatch(event)

    # ---------- zone list ----------

    def zones_on_current_page(self) -> List[Zone]:
        return self.store.by_page(self.navigator.current_page)

    def remove_zone(self, zone_id: str) -> None:
        self.store.remove(zone_id)
        if self.editing_zone_id == zone_id:
            self.editing_zone_id = None

    def relabel(self, zone_id: str, label: str) -> None:
        self.store.relabel(zone_id, label)

    def toggle_editing(self, zone_id: str) -> Optional[str]:
        if zone_id not in self.store:
            return self.editing_zone_id
        self.editing_zone_id = None if self.editing_zone_id == zone_id else zone_id
        return self.editing_zone_id

    def go_to_zone(self, zone_id: str) -> int:
        zone = self.store.get(zone_id)
        if zone is not None:
            self.navigator.jump_to(zone)
        return self.navigator.current_page

    # ---------- lifecycle ----------

    def close(self) -> None:
        self.drawing.close()
        if self._unsync is not None:
            self._unsync()
            self._unsync = None

    def __enter__(self) -> "ZoneEditor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
