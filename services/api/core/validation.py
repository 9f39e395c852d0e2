"""
Validation utilities for the signing API.
Ensures data integrity and provides clear error messages.
"""
from typing import List, Dict, Any, Iterable
from fastapi import HTTPException

from models import parse_data_uri


def validate_percent_rect(x: float, y: float, width: float, height: float) -> None:
    """
    Validate that percentage rectangle coordinates are within valid ranges.

    Rules:
    - x, y must be in [0, 100] (position within page)
    - width, height must be in [0, 100]
    - x + width must not exceed 100 (right edge within page)
    - y + height must not exceed 100 (bottom edge within page)

    Raises:
        HTTPException: 400 if validation fails
    """
    for name, v in (("x", x), ("y", y), ("width", width), ("height", height)):
        if not (0 <= v <= 100):
            raise HTTPException(
                status_code=400,
                detail=f"{name} must be in range [0, 100], got {v}"
            )

    # Boundary validation (must not extend beyond page)
    if x + width > 100.001:  # Small tolerance for floating point
        raise HTTPException(
            status_code=400,
            detail=f"x + width must not exceed 100 (got {x} + {width} = {x + width})"
        )
    if y + height > 100.001:
        raise HTTPException(
            status_code=400,
            detail=f"y + height must not exceed 100 (got {y} + {height} = {y + height})"
        )


def ensure_unique_zone_ids(zones: List[Dict[str, Any]]) -> None:
    """
    Ensure all zones have unique ids.

    Args:
        zones: List of zone dictionaries with 'id' field

    Raises:
        HTTPException: 400 if duplicate id found
    """
    seen = set()
    duplicates = []

    for zone in zones:
        zid = zone.get("id")
        if zid in seen:
            duplicates.append(zid)
        seen.add(zid)

    if duplicates:
        raise HTTPException(
            status_code=400,
            detail=f"Duplicate zone ids found: {sorted(set(duplicates))}"
        )


def validate_page(page: int) -> None:
    """
    Pages are 1-based. The page count lives in the renderer, so the upper
    bound is not checked here.
    """
    if page < 1:
        raise HTTPException(status_code=400, detail=f"page must be >= 1, got {page}")


def check_signature_coverage(zone_ids: Iterable[str], signatures: List[Dict[str, Any]]) -> None:
    """
    Server-side submission gate.

    Every zone of the document must be covered exactly once and every payload
    must be an image data URI.

    Raises:
        HTTPException: 400 with a short error code
    """
    ordered_ids = list(zone_ids)
    if not ordered_ids:
        raise HTTPException(status_code=400, detail="NO_ZONES")

    known = set(ordered_ids)
    seen = set()
    for sig in signatures:
        zid = sig.get("zone_id")
        if zid not in known:
            raise HTTPException(status_code=400, detail=f"UNKNOWN_ZONE: {zid}")
        if zid in seen:
            raise HTTPException(status_code=400, detail=f"DUPLICATE_ZONE: {zid}")
        seen.add(zid)
        try:
            parse_data_uri(sig.get("signature_data") or "")
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"INVALID_SIGNATURE_DATA: {zid}: {e}")

    missing = [zid for zid in ordered_ids if zid not in seen]
    if missing:
        raise HTTPException(
            status_code=400,
            detail=f"INCOMPLETE_SIGNATURES: {len(seen)} / {len(ordered_ids)} zones signed"
        )


def raise_for_storage_error(e: ValueError) -> None:
    """
    Map adapter ValueErrors to HTTP errors.

    *_NOT_FOUND -> 404, ZONE_ALREADY_EXISTS -> 409, anything else -> 400.
    """
    code = str(e)
    if code.endswith("_NOT_FOUND"):
        raise HTTPException(status_code=404, detail=code)
    if code == "ZONE_ALREADY_EXISTS":
        raise HTTPException(status_code=409, detail=code)
    raise HTTPException(status_code=400, detail=code)
