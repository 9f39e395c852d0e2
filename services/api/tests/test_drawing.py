"""
Tests for the press-drag-release zone drawing gesture.

Run with: pytest tests/test_drawing.py -v
"""
import itertools

import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.dispatcher import PointerButton, PointerDispatcher, PointerEvent, PointerEventKind
from core.drawing import DrawingController, DrawingState
from core.geometry import ContainerRect
from core.navigation import PageNavigator
from core.zone_store import ZoneStore

# 1 percent == 10 px horizontally, 20 px vertically
PAGE = ContainerRect(left=0, top=0, width=1000, height=2000)


def down(x, y, button=PointerButton.PRIMARY):
    return PointerEvent(PointerEventKind.DOWN, x, y, button)


def move(x, y):
    return PointerEvent(PointerEventKind.MOVE, x, y)


def up(x, y):
    return PointerEvent(PointerEventKind.UP, x, y)


@pytest.fixture
def rig():
    store = ZoneStore()
    navigator = PageNavigator(page_count=3)
    dispatcher = PointerDispatcher()
    surface = {"rect": PAGE}
    ids = (f"z{i}" for i in itertools.count(1))
    controller = DrawingController(
        store, navigator, dispatcher, lambda: surface["rect"], id_factory=lambda: next(ids)
    )
    return controller, store, navigator, dispatcher, surface


def drag(controller, dispatcher, start, end):
    started = controller.pointer_down(down(*start))
    dispatcher.dispatch(move(*end))
    dispatcher.dispatch(up(*end))
    return started


class TestDrawingGesture:

    def test_commit(self, rig):
        controller, store, navigator, dispatcher, _ = rig
        navigator.go_to(2)
        assert drag(controller, dispatcher, (100, 200), (400, 400))

        assert len(store) == 1
        z = store.snapshot()[0]
        assert (z.id, z.page, z.label) == ("z1", 2, "Signature 1")
        assert (z.x, z.y, z.width, z.height) == pytest.approx((10, 10, 30, 10))
        assert controller.last_committed == z

    def test_below_threshold_discarded(self, rig):
        """(10%,10%) -> (11%,10.5%) is 1 x 0.5 percent: nothing is added."""
        controller, store, _, dispatcher, _ = rig
        drag(controller, dispatcher, (100, 200), (400, 400))
        before = len(store)

        drag(controller, dispatcher, (100, 200), (110, 210))
        assert len(store) == before
        assert controller.state is DrawingState.IDLE

    @pytest.mark.parametrize("end", [(129, 600), (600, 239)])
    def test_threshold_each_axis(self, rig, end):
        """Width < 3% or height < 2% alone is enough to discard."""
        controller, store, _, dispatcher, _ = rig
        drag(controller, dispatcher, (100, 200), end)
        assert len(store) == 0

    def test_just_above_threshold_commits(self, rig):
        controller, store, _, dispatcher, _ = rig
        drag(controller, dispatcher, (100, 200), (135, 250))
        assert len(store) == 1

    def test_tracks_pointer_off_surface(self, rig):
        """Moves and release outside the page still finish the gesture, clamped."""
        controller, store, _, dispatcher, _ = rig
        controller.pointer_down(down(500, 1000))
        dispatcher.dispatch(move(5000, -300))
        dispatcher.dispatch(up(5000, -300))

        z = store.snapshot()[0]
        assert (z.x, z.y, z.width, z.height) == (50.0, 0.0, 50.0, 50.0)
        assert z.x + z.width <= 100 and z.y + z.height <= 100

    def test_reverse_drag(self, rig):
        controller, store, _, dispatcher, _ = rig
        drag(controller, dispatcher, (400, 400), (100, 200))
        z = store.snapshot()[0]
        assert (z.x, z.y, z.width, z.height) == pytest.approx((10, 10, 30, 10))

    def test_labels_follow_count(self, rig):
        controller, store, _, dispatcher, _ = rig
        drag(controller, dispatcher, (0, 0), (100, 100))
        drag(controller, dispatcher, (200, 200), (400, 400))
        store.remove("z1")
        drag(controller, dispatcher, (500, 500), (700, 700))
        assert [z.label for z in store] == ["Signature 2", "Signature 2"]

    def test_ignores_secondary_button(self, rig):
        controller, _, _, dispatcher, _ = rig
        assert not controller.pointer_down(down(100, 100, PointerButton.SECONDARY))
        assert dispatcher.listener_count(PointerEventKind.MOVE) == 0

    def test_ignores_press_outside_surface(self, rig):
        controller, _, _, dispatcher, _ = rig
        assert not controller.pointer_down(down(2000, 100))
        assert controller.state is DrawingState.IDLE

    def test_ignores_press_without_surface(self, rig):
        controller, _, _, _, surface = rig
        surface["rect"] = None
        assert not controller.pointer_down(down(100, 100))

    def test_surface_lost_mid_drag(self, rig):
        """Without a reference rectangle at release the zone is not committed."""
        controller, store, _, dispatcher, surface = rig
        controller.pointer_down(down(100, 200))
        surface["rect"] = None
        dispatcher.dispatch(up(400, 400))
        assert len(store) == 0
        assert controller.state is DrawingState.IDLE

    def test_second_press_while_drawing(self, rig):
        controller, _, _, _, _ = rig
        assert controller.pointer_down(down(100, 200))
        assert not controller.pointer_down(down(300, 300))

    def test_preview(self, rig):
        controller, store, _, dispatcher, _ = rig
        assert controller.preview is None
        controller.pointer_down(down(100, 200))
        dispatcher.dispatch(move(300, 600))
        p = controller.preview
        assert (p.x, p.y, p.width, p.height) == pytest.approx((10, 10, 20, 20))
        assert len(store) == 0


class TestListenerScope:
    """Move/up listeners exist only while a gesture is in progress."""

    def test_attached_only_while_drawing(self, rig):
        controller, _, _, dispatcher, _ = rig
        assert dispatcher.listener_count(PointerEventKind.MOVE) == 0
        controller.pointer_down(down(100, 200))
        assert dispatcher.listener_count(PointerEventKind.MOVE) == 1
        assert dispatcher.listener_count(PointerEventKind.UP) == 1
        dispatcher.dispatch(up(400, 400))
        assert dispatcher.listener_count(PointerEventKind.MOVE) == 0
        assert dispatcher.listener_count(PointerEventKind.UP) == 0

    def test_released_on_discard(self, rig):
        controller, _, _, dispatcher, _ = rig
        drag(controller, dispatcher, (100, 200), (101, 201))
        assert dispatcher.listener_count(PointerEventKind.UP) == 0

    @pytest.mark.parametrize("teardown", ["cancel", "disable", "close"])
    def test_released_on_teardown(self, rig, teardown):
        controller, store, _, dispatcher, _ = rig
        controller.pointer_down(down(100, 200))
        getattr(controller, teardown)()
        assert dispatcher.listener_count(PointerEventKind.MOVE) == 0
        assert dispatcher.listener_count(PointerEventKind.UP) == 0
        dispatcher.dispatch(up(400, 400))
        assert len(store) == 0

    def test_released_on_context_exit(self, rig):
        controller, _, _, dispatcher, _ = rig
        with controller:
            controller.pointer_down(down(100, 200))
        assert dispatcher.listener_count(PointerEventKind.UP) == 0

    def test_disabled_controller(self, rig):
        controller, _, _, _, _ = rig
        controller.disable()
        assert not controller.pointer_down(down(100, 200))
        controller.enable()
        assert controller.pointer_down(down(100, 200))


class TestDispatcher:

    def test_release_is_idempotent(self):
        d = PointerDispatcher()
        sub = d.subscribe(PointerEventKind.MOVE, lambda e: None)
        sub.release()
        sub.release()
        assert d.listener_count(PointerEventKind.MOVE) == 0

    def test_handler_may_release_itself(self):
        d = PointerDispatcher()
        calls = []
        subs = []

        def handler(event):
            calls.append(event)
            subs[0].release()

        subs.append(d.subscribe(PointerEventKind.UP, handler))
        d.dispatch(up(1, 1))
        d.dispatch(up(2, 2))
        assert len(calls) == 1
