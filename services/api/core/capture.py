"""
Freehand signature capture surface.

Strokes are accumulated as pixel polylines on a fixed-size surface and
rasterized to a transparent PNG only when the signer confirms.
"""
from __future__ import annotations

import io
from typing import List, Optional, Tuple

from PIL import Image, ImageColor, ImageDraw

Point = Tuple[int, int]

DEFAULT_CANVAS_SIZE = (450, 180)
DEFAULT_PEN_COLOR = "#1e293b"
DEFAULT_STROKE_WIDTH = 2


class SignatureCapture:
    def __init__(
        self,
        size: Tuple[int, int] = DEFAULT_CANVAS_SIZE,
        pen_color: str = DEFAULT_PEN_COLOR,
        stroke_width: int = DEFAULT_STROKE_WIDTH,
    ):
        w, h = size
        if w <= 0 or h <= 0:
            raise ValueError("capture size must be positive")
        self.size = (int(w), int(h))
        self.pen_color = pen_color
        self.stroke_width = max(1, int(stroke_width))
        self._strokes: List[List[Point]] = []
        self._current: Optional[List[Point]] = None

    # Canvas handlers
    def begin_stroke(self, x: float, y: float) -> None:
        self._current = [self._clip(x, y)]

    def extend_stroke(self, x: float, y: float) -> None:
        if self._current is not None:
            self._current.append(self._clip(x, y))

    def end_stroke(self) -> None:
        if self._current:
            self._strokes.append(self._current)
        self._current = None

    def clear(self) -> None:
        self._strokes.clear()
        self._current = None

    @property
    def strokes(self) -> List[List[Point]]:
        return [list(s) for s in self._strokes]

    @property
    def stroke_count(self) -> int:
        return len(self._strokes)

    @property
    def is_empty(self) -> bool:
        return not self._strokes

    def render_png(self) -> bytes:
        """
        Rasterize the finished strokes into a transparent PNG of `size`.
        """
        w, h = self.size
        rgb = ImageColor.getrgb(self.pen_color)
        fill = (rgb[0], rgb[1], rgb[2], 255)

        img = Image.new("RGBA", (w, h), (0, 0, 0, 0))
        drw = ImageDraw.Draw(img)
        for poly in self._strokes:
            if len(poly) >= 2:
                drw.line(poly, fill=fill, width=self.stroke_width, joint="curve")
            else:
                # A tap: draw a dot the size of the pen.
                (px, py), r = poly[0], self.stroke_width / 2
                drw.ellipse((px - r, py - r, px + r, py + r), fill=fill)

        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()

    def _clip(self, x: float, y: float) -> Point:
        w, h = self.size
        return (int(round(max(0, min(w - 1, x)))), int(round(max(0, min(h - 1, y)))))
