"""
Tests for the SelectionTracker state machine and viewport listener lifetime.
"""

import pytest

from sirzmail.editor.constants import TOOLBAR_OFFSET_PX
from sirzmail.editor.selection import ClickTarget, Rect, SelectionTracker
from sirzmail.editor.sync import Mode, SyncController


SOURCE = (
    '<div>\n'
    '  <img src="one.png" alt="One">\n'
    '  <p>Hello <a href="https://example.com">link</a></p>\n'
    "  <img src='two.png' alt=\"Two\" />\n"
    '</div>'
)

RECT = Rect(top=100, left=40, width=200, height=50)


class FakeViewport:
    """Records which images currently have scroll/resize listeners."""

    def __init__(self):
        self.active = []
        self.callbacks = {}

    def subscribe(self, image_index, callback):
        self.active.append(image_index)
        self.callbacks[image_index] = callback

        def unsubscribe():
            self.active.remove(image_index)
            self.callbacks.pop(image_index, None)

        return unsubscribe


def image_click(index, rect=RECT):
    return ClickTarget(tag='img', image_index=index, in_surface=True, rect=rect)


@pytest.fixture
def controller():
    return SyncController(SOURCE)


@pytest.fixture
def viewport():
    return FakeViewport()


@pytest.fixture
def tracker(controller, viewport):
    return SelectionTracker(controller, viewport)


class TestClickTransitions:

    def test_image_click_selects(self, tracker, viewport):
        outcome = tracker.handle_click(image_click(1))
        assert outcome.selection_changed
        assert tracker.is_selected
        assert tracker.selection.handle.index == 1
        assert tracker.url_input == 'two.png'
        assert viewport.active == [1]

    def test_click_elsewhere_in_surface_clears(self, tracker, viewport):
        tracker.handle_click(image_click(0))
        outcome = tracker.handle_click(ClickTarget(tag='p', in_surface=True))
        assert outcome.selection_changed
        assert not tracker.is_selected
        assert viewport.active == []

    def test_click_outside_surface_clears(self, tracker, viewport):
        tracker.handle_click(image_click(0))
        tracker.handle_click(ClickTarget(tag='button'))
        assert not tracker.is_selected
        assert viewport.active == []

    def test_toolbar_click_keeps_selection(self, tracker, viewport):
        tracker.handle_click(image_click(0))
        outcome = tracker.handle_click(ClickTarget(tag='input', in_toolbar=True))
        assert not outcome.selection_changed
        assert tracker.selection.handle.index == 0
        assert viewport.active == [0]

    def test_click_with_nothing_selected(self, tracker):
        outcome = tracker.handle_click(ClickTarget(tag='p', in_surface=True))
        assert not outcome.selection_changed
        assert not tracker.is_selected

    def test_anchor_click_is_prevented(self, tracker):
        outcome = tracker.handle_click(ClickTarget(tag='a', in_surface=True, in_anchor=True))
        assert outcome.prevent_default

    def test_anchor_outside_surface_is_not_prevented(self, tracker):
        outcome = tracker.handle_click(ClickTarget(tag='a', in_anchor=True))
        assert not outcome.prevent_default

    def test_image_outside_surface_does_not_select(self, tracker):
        tracker.handle_click(ClickTarget(tag='img', image_index=0, rect=RECT))
        assert not tracker.is_selected

    def test_reselecting_swaps_listener(self, tracker, viewport):
        tracker.handle_click(image_click(0))
        tracker.handle_click(image_click(1))
        assert viewport.active == [1]
        assert tracker.url_input == 'two.png'


class TestLifecycle:

    def test_mode_switch_clears_and_releases(self, tracker, controller, viewport):
        tracker.handle_click(image_click(0))
        controller.switch_mode(Mode.CODE)
        assert not tracker.is_selected
        assert viewport.active == []

    def test_no_selection_in_code_mode(self, tracker, controller, viewport):
        controller.switch_mode(Mode.CODE)
        assert tracker.select(0, RECT) is False
        assert viewport.active == []

    def test_rebuild_clears(self, tracker, controller, viewport):
        tracker.handle_click(image_click(1))
        controller.set_from_external('<p><img src="new.png"></p>')
        assert not tracker.is_selected
        assert viewport.active == []

    def test_dismiss(self, tracker, viewport):
        tracker.handle_click(image_click(0))
        tracker.dismiss()
        assert not tracker.is_selected
        assert viewport.active == []

    def test_typed_edit_removing_images_clears(self, tracker, controller, viewport):
        tracker.handle_click(image_click(1))
        controller.capture_from_rendered('<div><img src="one.png"></div>')
        assert not tracker.is_selected
        assert viewport.active == []

    def test_current_handle_revalidates(self, tracker, controller):
        tracker.handle_click(image_click(0))
        assert tracker.current_handle() == tracker.selection.handle
        controller.tree.generation += 1
        assert tracker.current_handle() is None

    def test_unknown_image_index(self, tracker, viewport):
        assert tracker.select(7, RECT) is False
        assert viewport.active == []

    def test_on_change_callback(self, tracker):
        seen = []
        tracker.set_on_change(seen.append)
        tracker.handle_click(image_click(0))
        tracker.clear()
        assert seen[0].handle.index == 0
        assert seen[1] is None


class TestGeometry:

    def test_toolbar_sits_below_image(self, tracker):
        tracker.handle_click(image_click(0))
        assert tracker.overlay_rect() == RECT
        assert tracker.toolbar_position() == (RECT.top + RECT.height + TOOLBAR_OFFSET_PX, RECT.left)

    def test_viewport_report_moves_overlay(self, tracker, viewport):
        tracker.handle_click(image_click(0))
        moved = Rect(top=20, left=40, width=200, height=50)
        viewport.callbacks[0](moved)
        assert tracker.overlay_rect() == moved
        assert tracker.selection.handle.index == 0

    def test_missing_element_clears(self, tracker, viewport):
        tracker.handle_click(image_click(0))
        viewport.callbacks[0](None)
        assert not tracker.is_selected
        assert viewport.active == []

    def test_nothing_selected_has_no_geometry(self, tracker):
        assert tracker.overlay_rect() is None
        assert tracker.toolbar_position() is None


class TestPayloads:

    def test_click_payload(self):
        target = ClickTarget.from_payload({
            'tag': 'IMG',
            'image_index': 1,
            'in_surface': True,
            'in_anchor': False,
            'in_toolbar': False,
            'rect': {'top': 1, 'left': 2, 'width': 3, 'height': 4},
        })
        assert target.tag == 'img'
        assert target.image_index == 1
        assert target.rect == Rect(1, 2, 3, 4)

    def test_garbage_payload(self):
        target = ClickTarget.from_payload(None)
        assert target == ClickTarget()
        assert Rect.from_payload({'top': 'x'}) is None
