"""
Tests for the SyncController: canonical text ownership and mode switching.
"""

import pytest

from sirzmail.constants import DEFAULT_TEMPLATE
from sirzmail.editor.sync import (
    CODE_TIP,
    VISUAL_TIP,
    DevicePreview,
    Mode,
    SyncController,
)


SOURCE = (
    '<div>\n'
    '  <img src="one.png" alt="One">\n'
    '  <p>Hello <a href="https://example.com">link</a></p>\n'
    "  <img src='two.png' alt=\"Two\" />\n"
    '</div>'
)


@pytest.fixture
def controller():
    return SyncController(SOURCE)


@pytest.fixture
def events(controller):
    received = []
    controller.add_listener(received.append)
    return received


class TestInitialState:

    def test_starts_in_visual_with_a_tree(self, controller):
        assert controller.mode is Mode.VISUAL
        assert controller.tree is not None
        assert controller.tree.generation == controller.generation
        assert controller.canonical == SOURCE

    def test_starts_in_code_without_a_tree(self):
        controller = SyncController(SOURCE, mode=Mode.CODE)
        assert controller.tree is None
        assert controller.canonical == SOURCE

    def test_state_snapshot(self, controller):
        state = controller.state
        assert state.mode is Mode.VISUAL
        assert state.device is DevicePreview.DESKTOP
        assert state.length == len(SOURCE)


class TestCapture:

    def test_rendered_capture_is_idempotent(self, controller):
        assert controller.capture_from_rendered()
        first = controller.canonical
        assert controller.capture_from_rendered()
        assert controller.canonical == first == SOURCE

    def test_default_template_round_trips(self):
        controller = SyncController(DEFAULT_TEMPLATE)
        controller.capture_from_rendered()
        assert controller.canonical == DEFAULT_TEMPLATE

    def test_rendered_capture_absorbs_typed_edit(self, controller, events):
        edited = SOURCE.replace('Hello', 'Hi there')
        assert controller.capture_from_rendered(edited)
        assert controller.canonical == edited
        assert events == ['captured']

    def test_typed_edit_changing_images_invalidates_handles(self, controller, events):
        generation = controller.generation
        controller.capture_from_rendered('<div><img src="one.png"></div>')
        assert controller.generation == generation + 1
        assert controller.tree.generation == controller.generation
        assert events == ['handles_invalidated', 'captured']

    def test_rendered_capture_ignored_in_code(self, controller):
        controller.switch_mode(Mode.CODE)
        assert controller.capture_from_rendered('<p>nope</p>') is False
        assert controller.canonical == SOURCE

    def test_raw_capture_ignored_in_visual(self, controller):
        assert controller.capture_from_raw('<p>nope</p>') is False
        assert controller.canonical == SOURCE

    def test_raw_capture_does_not_rebuild_tree(self, controller, events):
        controller.switch_mode(Mode.CODE)
        events.clear()
        assert controller.capture_from_raw('<p>typed</p>')
        assert controller.canonical == '<p>typed</p>'
        assert controller.tree is None
        assert events == ['captured']


class TestModeSwitch:

    def test_round_trip_preserves_text(self, controller):
        controller.switch_mode(Mode.CODE)
        controller.switch_mode(Mode.VISUAL)
        assert controller.canonical == SOURCE
        controller.capture_from_rendered()
        assert controller.canonical == SOURCE

    def test_code_edits_reach_the_rebuilt_tree(self, controller):
        controller.switch_mode(Mode.CODE)
        controller.capture_from_raw('<p><img src="only.png"></p>')
        controller.switch_mode(Mode.VISUAL)
        tree = controller.tree
        assert tree.image_count() == 1
        assert tree.image_source(tree.handle_for(0)) == 'only.png'

    def test_each_visual_entry_bumps_generation(self, controller):
        first = controller.generation
        controller.switch_mode(Mode.CODE)
        controller.switch_mode(Mode.VISUAL)
        assert controller.generation > first
        assert controller.tree.generation == controller.generation

    def test_switching_to_current_mode_is_a_no_op(self, controller, events):
        assert controller.switch_mode(Mode.VISUAL) is False
        assert events == []

    def test_event_order(self, controller, events):
        controller.switch_mode(Mode.CODE)
        assert events == ['mode_changed']
        events.clear()
        controller.switch_mode(Mode.VISUAL)
        assert events == ['rebuilt', 'mode_changed']

    def test_accepts_plain_strings(self, controller):
        assert controller.switch_mode('code')
        assert controller.mode is Mode.CODE

    def test_status_text_follows_mode(self, controller):
        assert controller.status_text() == VISUAL_TIP
        controller.switch_mode(Mode.CODE)
        assert controller.status_text() == CODE_TIP


class TestExternalReplacement:

    def test_rebuilds_in_visual(self, controller, events):
        generation = controller.generation
        controller.set_from_external('<p><img src="gen.png"></p>')
        assert controller.canonical == '<p><img src="gen.png"></p>'
        assert controller.generation == generation + 1
        assert controller.tree.image_count() == 1
        assert events == ['rebuilt', 'external']

    def test_code_mode_keeps_no_tree(self, controller, events):
        controller.switch_mode(Mode.CODE)
        events.clear()
        controller.set_from_external('<p>loaded</p>')
        assert controller.canonical == '<p>loaded</p>'
        assert controller.tree is None
        assert events == ['external']


class TestDevicePreview:

    def test_set_device(self, controller, events):
        controller.set_device(DevicePreview.MOBILE)
        assert controller.device is DevicePreview.MOBILE
        assert events == ['device_changed']

    def test_same_device_is_silent(self, controller, events):
        controller.set_device(DevicePreview.DESKTOP)
        assert events == []

    def test_device_does_not_touch_text(self, controller):
        controller.set_device('mobile')
        assert controller.canonical == SOURCE
