"""
Editor Handlers - Event handlers wiring the editor core to the page.

This module keeps the browser event plumbing out of app.py so the main
application file stays focused on layout.
"""

import logging
from typing import Any, Callable, Dict, Optional

from nicegui import ui

from sirzmail.editor.constants import (
    DESKTOP_FRAME_CLASSES,
    MOBILE_FRAME_CLASSES,
    SURFACE_CLICK_EVENT,
    SURFACE_INPUT_EVENT,
)
from sirzmail.editor.images import ImageMutationEngine, UploadedFile
from sirzmail.editor.selection import ClickTarget, Selection, SelectionTracker
from sirzmail.editor.surface import EditorSurface
from sirzmail.editor.sync import (
    EVENT_CAPTURED,
    EVENT_DEVICE_CHANGED,
    EVENT_EXTERNAL,
    EVENT_MODE_CHANGED,
    EVENT_REBUILT,
    DevicePreview,
    Mode,
    SyncController,
)

logger = logging.getLogger(__name__)


def setup_editor_handlers(
    elements: Dict[str, Any],
    controller: SyncController,
    surface: EditorSurface,
    tracker: SelectionTracker,
    engine: ImageMutationEngine,
    toolbar: Dict[str, Any],
    refresh_chrome: Callable[[], None],
):
    """
    Set up all editor event handlers.

    Args:
        elements: Page elements ('visual_container', 'code_container',
            'code_editor', 'frame', 'footer_status', 'footer_length')
        controller: SyncController instance
        surface: EditorSurface instance (already set up)
        tracker: SelectionTracker instance
        engine: ImageMutationEngine instance
        toolbar: Dict returned by render_image_toolbar
        refresh_chrome: Redraws the mode/device toggles in the header

    Returns:
        Dict with handler functions for binding to UI events
    """
    code_editor = elements['code_editor']

    def apply_frame():
        frame = elements['frame']
        if controller.device is DevicePreview.MOBILE:
            frame.classes(MOBILE_FRAME_CLASSES, remove=DESKTOP_FRAME_CLASSES)
        else:
            frame.classes(DESKTOP_FRAME_CLASSES, remove=MOBILE_FRAME_CLASSES)

    def update_footer():
        elements['footer_status'].text = controller.status_text()
        elements['footer_length'].text = f'{controller.state.length} chars'

    def show_projection():
        is_visual = controller.mode is Mode.VISUAL
        elements['visual_container'].set_visibility(is_visual)
        elements['code_container'].set_visibility(not is_visual)
        if not is_visual:
            code_editor.value = controller.canonical

    def on_controller_event(event: str):
        if event == EVENT_REBUILT:
            surface.set_content(controller.canonical)
        elif event in (EVENT_MODE_CHANGED, EVENT_EXTERNAL):
            show_projection()
            refresh_chrome()
        elif event == EVENT_DEVICE_CHANGED:
            apply_frame()
            refresh_chrome()
        if event in (EVENT_CAPTURED, EVENT_EXTERNAL, EVENT_MODE_CHANGED, EVENT_REBUILT):
            update_footer()

    controller.add_listener(on_controller_event)

    def on_selection_change(selection: Optional[Selection]):
        if selection is None:
            engine.cancel_pending()
            toolbar['update'](None)
            return
        tree = controller.tree
        current_src = tree.image_source(selection.handle) if tree else ''
        toolbar['update'](selection, current_src or '')

    tracker.set_on_change(on_selection_change)

    def handle_surface_click(event):
        raw = event.args if hasattr(event, 'args') else event
        tracker.handle_click(ClickTarget.from_payload(raw))

    def handle_surface_input(event):
        raw = event.args if hasattr(event, 'args') else event
        if not isinstance(raw, dict) or not isinstance(raw.get('html'), str):
            logger.debug(f"Ignoring malformed surface input payload: {raw!r:.80}")
            return
        controller.capture_from_rendered(raw['html'])

    def handle_code_change(e):
        if controller.mode is not Mode.CODE:
            return
        if e.value != controller.canonical:
            controller.capture_from_raw(e.value or '')

    def handle_url_submit(url: str):
        tracker.url_input = url
        if engine.apply_url(url):
            ui.notify('Image updated', type='positive', position='bottom', timeout=1000)

    async def handle_upload(e):
        upload = UploadedFile(name=e.name, stream=e.content, mime_type=e.type or '')
        if await engine.upload(upload):
            ui.notify('Image updated', type='positive', position='bottom', timeout=1000)

    def handle_mode(mode: Mode):
        controller.switch_mode(mode)

    def handle_device(device: DevicePreview):
        controller.set_device(device)

    ui.on(SURFACE_CLICK_EVENT, handle_surface_click)
    ui.on(SURFACE_INPUT_EVENT, handle_surface_input)
    code_editor.on_value_change(handle_code_change)

    # Initial paint; the surface content itself is pushed once the client connects
    show_projection()
    apply_frame()
    update_footer()

    return {
        'handle_url_submit': handle_url_submit,
        'handle_upload': handle_upload,
        'handle_mode': handle_mode,
        'handle_device': handle_device,
        'handle_surface_click': handle_surface_click,
        'handle_surface_input': handle_surface_input,
    }
