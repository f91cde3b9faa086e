"""
Image Toolbar Component

The floating panel shown under a selected image, plus the selection ring
drawn over it. Both use fixed positioning in viewport coordinates taken
from the tracker's cached rectangle.
"""

from nicegui import ui
from typing import Awaitable, Callable, Optional

from sirzmail.editor.constants import TOOLBAR_CLASS, UPLOAD_ACCEPT
from sirzmail.editor.document import ImageHandle
from sirzmail.editor.selection import Selection


def render_image_toolbar(
    on_close: Callable[[], None],
    on_url_submit: Callable[[str], None],
    on_upload: Callable[..., Awaitable[None]],
) -> dict:
    """
    Render the (initially hidden) selection ring and image toolbar.

    Args:
        on_close: Toolbar close control
        on_url_submit: Called with the URL field value on Enter
        on_upload: NiceGUI upload handler (receives UploadEventArguments)

    Returns:
        Dict with 'update' (takes Optional[Selection] and the current src),
        'upload' (the ui.upload element) and 'url_input'
    """
    ring = ui.element('div').classes('fixed pointer-events-none border-2 border-blue-500 z-10')
    ring.set_visibility(False)

    with ui.card().classes(
        f'{TOOLBAR_CLASS} fixed bg-white rounded-lg shadow-xl border border-gray-200 p-3 z-50 gap-3 w-72'
    ) as card:
        with ui.row().classes('w-full items-center justify-between border-b border-gray-100 pb-2'):
            with ui.row().classes('items-center gap-1'):
                ui.icon('image', size='xs').classes('text-gray-500')
                ui.label('Edit Image').classes('text-xs font-semibold text-gray-500 uppercase')
            ui.button(icon='close', on_click=on_close).props('flat round dense size=sm color=grey')

        upload = ui.upload(
            label='Upload',
            auto_upload=True,
            max_files=1,
            on_upload=on_upload,
        ).props(f'accept="{UPLOAD_ACCEPT}" flat bordered').classes('w-full')

        url_input = ui.input(placeholder='Or paste image URL...').props('dense outlined clearable').classes('w-full text-xs')
        with url_input.add_slot('prepend'):
            ui.icon('link', size='xs').classes('text-gray-400')
        url_input.on('keydown.enter', lambda: on_url_submit(url_input.value or ''))

    card.set_visibility(False)

    shown: dict = {'handle': None}

    def update(selection: Optional[Selection], current_src: str = ''):
        if selection is None:
            ring.set_visibility(False)
            card.set_visibility(False)
            shown['handle'] = None
            return

        rect = selection.rect
        ring.style(
            f'top: {rect.top}px; left: {rect.left}px; width: {rect.width}px; height: {rect.height}px'
        )
        top, left = rect.toolbar_position()
        card.style(f'top: {top}px; left: {left}px')

        # Only seed the URL field when a different image gets selected;
        # geometry refreshes must not clobber what the user is typing.
        handle: ImageHandle = selection.handle
        if shown['handle'] != handle:
            url_input.value = current_src
            shown['handle'] = handle

        ring.set_visibility(True)
        card.set_visibility(True)

    return {
        'update': update,
        'upload': upload,
        'url_input': url_input,
    }
