"""
Top-level pointer input dispatcher.

The hosting view forwards every pointer event it receives here, whether or
not the pointer is over the page surface. Components that need to follow a
gesture past the surface edge subscribe for the duration of that gesture.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Callable, Dict, List

from core.geometry import PixelPoint

logger = logging.getLogger(__name__)


class PointerEventKind(str, Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"


class PointerButton(IntEnum):
    PRIMARY = 0
    MIDDLE = 1
    SECONDARY = 2


@dataclass(frozen=True)
class PointerEvent:
    kind: PointerEventKind
    x: float
    y: float
    button: int = PointerButton.PRIMARY

    @property
    def point(self) -> PixelPoint:
        return PixelPoint(self.x, self.y)


PointerHandler = Callable[[PointerEvent], None]


class Subscription:
    """Handle for one registered handler. `release()` is idempotent."""

    def __init__(self, dispatcher: "PointerDispatcher", kind: PointerEventKind, handler: PointerHandler):
        self._dispatcher = dispatcher
        self.kind = kind
        self.handler = handler
        self.active = True

    def release(self) -> None:
        if not self.active:
            return
        self.active = False
        self._dispatcher._remove(self)


class PointerDispatcher:
    def __init__(self) -> None:
        self._subs: Dict[PointerEventKind, List[Subscription]] = {k: [] for k in PointerEventKind}

    def subscribe(self, kind: PointerEventKind, handler: PointerHandler) -> Subscription:
        sub = Subscription(self, kind, handler)
        self._subs[kind].append(sub)
        return sub

    def listener_count(self, kind: PointerEventKind) -> int:
        return len(self._subs[kind])

    def dispatch(self, event: PointerEvent) -> None:
        # Copy: a handler may release its own subscription (e.g. on pointer-up).
        for sub in list(self._subs[event.kind]):
            if sub.active:
                sub.handler(event)

    def _remove(self, sub: Subscription) -> None:
        try:
            self._subs[sub.kind].remove(sub)
        except ValueError:
            logger.debug(f"subscription for {sub.kind.value} already removed")
