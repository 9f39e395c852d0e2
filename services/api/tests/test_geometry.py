"""
Tests for pixel -> percent mapping.

Run with: pytest tests/test_geometry.py -v
"""
import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.geometry import (
    ContainerRect,
    PercentPoint,
    PercentRect,
    PixelPoint,
    normalize_rect,
    rect_from_pixels,
    to_percent,
)

PAGE = ContainerRect(left=100, top=50, width=400, height=200)


class TestToPercent:

    def test_inside(self):
        p = to_percent(PixelPoint(300, 150), PAGE)
        assert p == PercentPoint(50.0, 50.0)

    def test_origin(self):
        p = to_percent(PixelPoint(100, 50), PAGE)
        assert (p.x, p.y) == (0.0, 0.0)
        assert not p.indeterminate

    def test_clamped_outside(self):
        """Points past the surface edge clamp to [0, 100]."""
        p = to_percent(PixelPoint(900, -40), PAGE)
        assert (p.x, p.y) == (100.0, 0.0)

    def test_no_container(self):
        p = to_percent(PixelPoint(10, 10), None)
        assert (p.x, p.y) == (0.0, 0.0)
        assert p.indeterminate

    def test_unmeasurable_container(self):
        p = to_percent(PixelPoint(10, 10), ContainerRect(0, 0, 0, 100))
        assert p.indeterminate


class TestNormalizeRect:

    def test_reverse_drag(self):
        """Dragging up-left gives the same rectangle as down-right."""
        a, b = PercentPoint(40, 30), PercentPoint(10, 5)
        assert normalize_rect(a, b) == normalize_rect(b, a) == PercentRect(10, 5, 30, 25)

    def test_never_exceeds_page(self):
        r = rect_from_pixels(PixelPoint(150, 60), PixelPoint(5000, 5000), PAGE)
        assert r.x + r.width <= 100
        assert r.y + r.height <= 100

    def test_indeterminate_propagates(self):
        r = normalize_rect(PercentPoint(0, 0, indeterminate=True), PercentPoint(50, 50))
        assert r.indeterminate

    def test_to_pixels_inverse(self):
        r = rect_from_pixels(PixelPoint(140, 70), PixelPoint(300, 150), PAGE)
        left, top, w, h = r.to_pixels(PAGE)
        assert left == pytest.approx(140)
        assert top == pytest.approx(70)
        assert w == pytest.approx(160)
        assert h == pytest.approx(80)

    def test_zoom_independent(self):
        """The same relative drag yields the same percentages at any render size."""
        small = ContainerRect(0, 0, 300, 400)
        large = ContainerRect(0, 0, 900, 1200)
        r1 = rect_from_pixels(PixelPoint(30, 40), PixelPoint(120, 80), small)
        r2 = rect_from_pixels(PixelPoint(90, 120), PixelPoint(360, 240), large)
        assert r1.x == pytest.approx(r2.x)
        assert r1.width == pytest.approx(r2.width)
        assert r1.height == pytest.approx(r2.height)
