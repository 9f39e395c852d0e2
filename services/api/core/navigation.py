"""
Active-page tracking and view zoom.
"""
from __future__ import annotations

from models import Zone


class PageNavigator:
    """
    Holds the 1-based current page, clamped to [1, page_count].

    page_count == 0 means the renderer has not reported a count yet; the
    current page then stays at 1.
    """

    def __init__(self, page_count: int = 0, current_page: int = 1):
        self._page_count = max(0, int(page_count))
        self._current = 1
        self.go_to(current_page)

    @property
    def page_count(self) -> int:
        return self._page_count

    @property
    def current_page(self) -> int:
        return self._current

    @property
    def can_prev(self) -> bool:
        return self._current > 1

    @property
    def can_next(self) -> bool:
        return self._current < self._page_count

    def set_page_count(self, page_count: int) -> None:
        self._page_count = max(0, int(page_count))
        self.go_to(self._current)

    def go_to(self, page: int) -> int:
        upper = max(1, self._page_count)
        self._current = max(1, min(upper, int(page)))
        return self._current

    def next_page(self) -> int:
        if self.can_next:
            self._current += 1
        return self._current

    def prev_page(self) -> int:
        if self.can_prev:
            self._current -= 1
        return self._current

    def jump_to(self, zone: Zone) -> int:
        """Show the page a zone lives on. Not clamped: zones carry their own page."""
        self._current = zone.page
        return self._current


class ZoomControl:
    """
    Rendered page width in pixels. Purely a view concern: zone percentages are
    measured against whatever size the page is rendered at.
    """

    def __init__(self, width: int, min_width: int = 300, max_width: int = 900, step: int = 80):
        if min_width > max_width:
            raise ValueError("min_width must be <= max_width")
        self.min_width = min_width
        self.max_width = max_width
        self.step = step
        self._width = max(min_width, min(max_width, width))

    @property
    def width(self) -> int:
        return self._width

    def zoom_in(self) -> int:
        self._width = min(self.max_width, self._width + self.step)
        return self._width

    def zoom_out(self) -> int:
        self._width = max(self.min_width, self._width - self.step)
        return self._width
