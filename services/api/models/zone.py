# services/api/models/zone.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from uuid import uuid4

# Tolerance for float drift when a zone comes back from storage / the wire.
_EDGE_TOLERANCE = 0.001


def gen_zone_id() -> str:
  return f"zone_{uuid4().hex[:12]}"


def default_zone_label(existing_count: int) -> str:
  """Label given to a freshly drawn zone; `existing_count` is taken at commit time."""
  return f"Signature {existing_count + 1}"


def _float(val: Any, name: str) -> float:
  try:
    return float(val)
  except (TypeError, ValueError):
    raise ValueError(f"{name} must be a number, got {val!r}")


def _int(val: Any, name: str) -> int:
  try:
    return int(val)
  except (TypeError, ValueError):
    raise ValueError(f"{name} must be an integer, got {val!r}")


@dataclass
class Zone:
  """
  Domain model for a single signature zone.

  All coordinates are PERCENTAGES (0..100) of the rendered page, origin at the
  top-left corner. Geometry is fixed once the zone is drawn; only `label`
  may change afterwards.
  """

  id: str = field(default_factory=gen_zone_id)
  page: int = 1                # 1-based

  x: float = 0.0
  y: float = 0.0
  width: float = 0.0
  height: float = 0.0

  label: str = ""

  # --------------------
  # Validation
  # --------------------
  def validate(self) -> None:
    """
    Raises ValueError if any invariant is broken.
    """
    if not self.id:
      raise ValueError("id must not be empty")

    if self.page < 1:
      raise ValueError("page must be >= 1")

    for field_name in ("x", "y", "width", "height"):
      v = getattr(self, field_name)
      if not (0.0 <= v <= 100.0):
        raise ValueError(f"{field_name} must be in [0, 100], got {v}")

    if self.x + self.width > 100.0 + _EDGE_TOLERANCE:
      raise ValueError(
        f"Zone extends beyond page width: x({self.x}) + width({self.width}) > 100"
      )
    if self.y + self.height > 100.0 + _EDGE_TOLERANCE:
      raise ValueError(
        f"Zone extends beyond page height: y({self.y}) + height({self.height}) > 100"
      )

    if self.label is None:
      raise ValueError("label must not be None (use empty string instead)")

  def with_label(self, label: str) -> "Zone":
    return Zone(
      id=self.id,
      page=self.page,
      x=self.x,
      y=self.y,
      width=self.width,
      height=self.height,
      label=label,
    )

  # --------------------
  # Conversions – wire shape (persistence collaborator / frontend)
  # --------------------
  @classmethod
  def from_api(cls, data: Dict[str, Any]) -> "Zone":
    """
    Build from the wire shape {id, page, x, y, width, height, label}.
    Coordinates are expected in percent, exactly as the editor draws them.
    """
    zone = cls(
      id=str(data.get("id") or gen_zone_id()),
      page=_int(data.get("page", 1), "page"),
      x=_float(data.get("x", 0.0), "x"),
      y=_float(data.get("y", 0.0), "y"),
      width=_float(data.get("width", 0.0), "width"),
      height=_float(data.get("height", 0.0), "height"),
      label="" if data.get("label") is None else str(data.get("label")),
    )
    zone.validate()
    return zone

  def to_api(self) -> Dict[str, Any]:
    self.validate()
    return {
      "id": self.id,
      "page": self.page,
      "x": self.x,
      "y": self.y,
      "width": self.width,
      "height": self.height,
      "label": self.label,
    }

  # --------------------
  # Conversions – storage layer (JSON / SQLite)
  # --------------------
  @classmethod
  def from_storage(cls, row: Dict[str, Any]) -> "Zone":
    zone = cls(
      id=str(row.get("zone_id") or row.get("id") or ""),
      page=_int(row.get("page", 1), "page"),
      x=_float(row.get("x", 0.0), "x"),
      y=_float(row.get("y", 0.0), "y"),
      width=_float(row.get("width", 0.0), "width"),
      height=_float(row.get("height", 0.0), "height"),
      label=row.get("label") or "",
    )
    zone.validate()
    return zone

  def to_storage(self, doc_id: str, order_index: int) -> Dict[str, Any]:
    """
    Flat row for storage adapters. `order_index` preserves creation order.
    """
    self.validate()
    return {
      "zone_id": self.id,
      "doc_id": doc_id,
      "order_index": order_index,
      "page": self.page,
      "x": self.x,
      "y": self.y,
      "width": self.width,
      "height": self.height,
      "label": self.label,
    }


# ------------ helpers on whole lists ------------

def validate_zone_list(zones: List[Zone]) -> None:
  for z in zones:
    z.validate()

  seen_ids = set()
  for z in zones:
    if z.id in seen_ids:
      raise ValueError(f"Duplicate zone id in list: {z.id}")
    seen_ids.add(z.id)


def find_zone(zones: List[Zone], zone_id: str) -> Optional[Zone]:
  return next((z for z in zones if z.id == zone_id), None)
