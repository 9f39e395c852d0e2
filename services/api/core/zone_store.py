"""
Ordered, id-addressable collection of the zones defined on one document.
"""
from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from models import Zone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZoneChange:
    """Notification sent to subscribers after every mutation."""
    kind: str          # "created" | "updated" | "deleted"
    zone: Zone


ZoneListener = Callable[[ZoneChange], None]


class ZoneStore:
    """
    Owns the zone definitions of one editing session.

    Insertion order is creation order; it drives list display, default label
    numbering and the submission payload, so it is never re-derived from page
    number or position.
    """

    def __init__(self, zones: Optional[Iterable[Zone]] = None):
        self._zones: "OrderedDict[str, Zone]" = OrderedDict()
        self._listeners: List[ZoneListener] = []
        if zones:
            self.load(zones)

    # ---------- mutations ----------

    def add(self, zone: Zone) -> None:
        if zone.id in self._zones:
            raise ValueError(f"Duplicate zone id: {zone.id}")
        self._zones[zone.id] = zone
        self._notify("created", zone)

    def remove(self, zone_id: str) -> None:
        zone = self._zones.pop(zone_id, None)
        if zone is None:
            logger.debug(f"remove: zone {zone_id} not present")
            return
        self._notify("deleted", zone)

    def relabel(self, zone_id: str, label: str) -> None:
        zone = self._zones.get(zone_id)
        if zone is None:
            return
        # Replacing the value keeps the key's position.
        updated = zone.with_label(label)
        self._zones[zone_id] = updated
        self._notify("updated", updated)

    def load(self, zones: Iterable[Zone]) -> None:
        """Replace the contents with stored zones, keeping their stored order. Silent."""
        fresh: "OrderedDict[str, Zone]" = OrderedDict()
        for z in zones:
            if z.id in fresh:
                raise ValueError(f"Duplicate zone id: {z.id}")
            fresh[z.id] = z
        self._zones = fresh

    # ---------- reads ----------

    def get(self, zone_id: str) -> Optional[Zone]:
        return self._zones.get(zone_id)

    def by_page(self, page: int) -> List[Zone]:
        return [z for z in self._zones.values() if z.page == page]

    def snapshot(self) -> Tuple[Zone, ...]:
        return tuple(self._zones.values())

    def __len__(self) -> int:
        return len(self._zones)

    def __iter__(self) -> Iterator[Zone]:
        return iter(list(self._zones.values()))

    def __contains__(self, zone_id: object) -> bool:
        return zone_id in self._zones

    # ---------- observers ----------

    def subscribe(self, listener: ZoneListener) -> Callable[[], None]:
        """Register a change listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, kind: str, zone: Zone) -> None:
        for listener in list(self._listeners):
            listener(ZoneChange(kind=kind, zone=zone))
