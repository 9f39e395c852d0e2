"""
Pydantic schemas for signature zones with strict validation.
Coordinates are percentages of the rendered page (0..100, origin top-left).
"""

from typing import Optional
from pydantic import BaseModel, Field, model_validator


class ZoneBase(BaseModel):
    """Base zone schema with coordinate validation."""
    page: int = Field(1, ge=1, description="Page number (1-based)")

    x: float = Field(..., ge=0.0, le=100.0, description="Left edge, % of page width")
    y: float = Field(..., ge=0.0, le=100.0, description="Top edge, % of page height")
    width: float = Field(..., ge=0.0, le=100.0, description="Width, % of page width")
    height: float = Field(..., ge=0.0, le=100.0, description="Height, % of page height")

    label: Optional[str] = Field(
        None,
        max_length=200,
        description="Display label like 'Signature 1' (server fills it when omitted)",
    )

    @model_validator(mode="after")
    def validate_bounds(self) -> "ZoneBase":
        """Ensure the zone stays within the page."""
        if self.x + self.width > 100.001:  # Small tolerance for floating point
            raise ValueError(
                f"Zone extends beyond page width: x({self.x}) + width({self.width}) > 100"
            )
        if self.y + self.height > 100.001:
            raise ValueError(
                f"Zone extends beyond page height: y({self.y}) + height({self.height}) > 100"
            )
        return self


class ZoneIn(ZoneBase):
    """
    Zone as sent by the editor.

    `id` is generated client-side when the zone is drawn; the server only
    generates one when it is missing.
    """
    id: Optional[str] = Field(None, min_length=1, max_length=100, description="Zone id")


class ZoneOut(ZoneBase):
    """Zone as returned to the editor/viewer."""
    id: str = Field(..., description="Zone id")
    label: str = ""


class ZonePatch(BaseModel):
    """Only the label of a zone can change after it is drawn."""
    label: str = Field(..., max_length=200, description="New label")
