"""
Main NiceGUI application for Sirz Mail.

Lays out the page (sidebar, editor header, Visual/Code editor, footer) and
wires the editor core from sirzmail.editor to the browser. Generation,
the saved template library and the send simulation live in sirzmail.*.
"""

import logging
import os
import sys

from nicegui import ui, run, Client

from dotenv import load_dotenv
load_dotenv()

# Path and config initialization
from sirzmail.paths import ensure_db_dir
from sirzmail.config import ensure_api_key_in_env

logging.basicConfig(
    level=os.environ.get('SIRZ_MAIL_LOG_LEVEL', 'INFO').upper(),
    format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
)
logger = logging.getLogger('sirzmail.app')

# Ensure required directories exist on startup
ensure_db_dir()

from sirzmail.components import (
    confirm,
    render_image_toolbar,
    render_sidebar,
    show_api_key_dialog,
    show_save_dialog,
    show_send_dialog,
)
from sirzmail.constants import DEFAULT_TEMPLATE, DELETE_CONFIRMATION
from sirzmail.editor import (
    DevicePreview,
    EditorSurface,
    ExportActions,
    ImageMutationEngine,
    Mode,
    SelectionTracker,
    SyncController,
    setup_editor_handlers,
)
from sirzmail.generator import EmailGenerator, GenerationSession
from sirzmail.library import TemplateLibrary
from sirzmail.models import EmailOptions, SavedTemplate
from sirzmail.storage import TemplateStore

# Check for API key at startup
if not ensure_api_key_in_env():
    logger.warning("No OpenAI API key configured. User will be prompted on first page load.")

# Global Styles
ui.add_head_html('''
    <style>
        [data-sirz-surface] {
            outline: none;
            min-height: 100%;
        }
        [data-sirz-surface] img {
            cursor: pointer;
        }
        [data-sirz-surface] img:hover {
            outline: 2px dashed #818cf8;
        }
    </style>
''', shared=True)


# UI Construction - encapsulated in page function to avoid global state issues
@ui.page('/')
async def main_page(client: Client):
    ui.query('body').style('margin: 0; padding: 0; overflow: hidden;')

    # --- Per-page state ---
    controller = SyncController(DEFAULT_TEMPLATE)
    session = GenerationSession(EmailGenerator(), runner=run.io_bound)
    library = TemplateLibrary(TemplateStore())
    surface = EditorSurface(client)
    tracker = SelectionTracker(controller, viewport=surface)
    handlers = {}

    # --- Generation / library callbacks ---

    async def handle_generate(options: EmailOptions):
        html = await session.submit(options)
        if html is not None:
            controller.set_from_external(html)
            ui.notify('Template generated', type='positive', position='bottom', timeout=1500)

    def handle_load(template: SavedTemplate):
        controller.set_from_external(template.content)
        ui.notify(f"Loaded '{template.name}'", position='bottom', timeout=1500)

    async def handle_delete(template: SavedTemplate):
        try:
            deleted = await library.delete(template.id, lambda: confirm(DELETE_CONFIRMATION))
        except OSError as e:
            logger.error(f"Failed to delete template {template.id}: {e}")
            ui.notify(f'Delete failed: {e}', type='negative', position='bottom')
            return
        if deleted:
            ui.notify(f"Deleted '{template.name}'", position='bottom', timeout=1500)

    def handle_save(name: str):
        try:
            template = library.save(name, controller.canonical)
        except OSError as e:
            logger.error(f"Failed to save template '{name}': {e}")
            ui.notify(f'Save failed: {e}', type='negative', position='bottom')
            return
        ui.notify(f"Saved '{template.name}'", type='positive', position='bottom', timeout=1500)

    with ui.row().classes('w-screen h-screen gap-0 no-wrap bg-gray-50'):
        # 1. Sidebar
        sidebar = render_sidebar(
            session=session,
            library=library,
            on_generate=handle_generate,
            on_load=handle_load,
            on_delete=handle_delete,
        )

        with ui.column().classes('flex-1 h-full gap-0 min-w-0 no-wrap'):
            # 2. Editor header
            with ui.row().classes('w-full items-center justify-between px-4 py-2 bg-white border-b border-gray-200 no-wrap') as header:
                with ui.row().classes('items-center gap-2'):
                    ui.icon('mail', size='sm').classes('text-indigo-600')
                    ui.label('Sirz Mail').classes('text-lg font-bold text-gray-800')

                chrome_container = ui.row().classes('items-center gap-4 no-wrap')

            def render_chrome():
                chrome_container.clear()
                with chrome_container:
                    with ui.button_group().props('flat'):
                        for mode, label, icon in ((Mode.VISUAL, 'Visual', 'edit'), (Mode.CODE, 'Code', 'code')):
                            ui.button(
                                label, icon=icon,
                                on_click=lambda m=mode: handlers['handle_mode'](m),
                            ).props(f'dense no-caps {"color=indigo" if controller.mode is mode else "flat color=grey-8"}')

                    # Device preview only makes sense for the rendered projection
                    if controller.mode is Mode.VISUAL:
                        with ui.row().classes('gap-0'):
                            for device, icon in ((DevicePreview.DESKTOP, 'desktop_windows'), (DevicePreview.MOBILE, 'smartphone')):
                                ui.button(
                                    icon=icon,
                                    on_click=lambda d=device: handlers['handle_device'](d),
                                ).props(f'flat round dense {"color=indigo" if controller.device is device else "color=grey"}').tooltip(
                                    f'{device.value.title()} preview'
                                )

                    with ui.row().classes('gap-1 no-wrap'):
                        ui.button('Save', icon='save', on_click=lambda: show_save_dialog(handle_save)).props('flat dense no-caps color=grey-8')
                        ui.button(
                            'Copied!' if export.copied else 'Copy HTML',
                            icon='check' if export.copied else 'content_copy',
                            on_click=export.copy_to_clipboard,
                        ).props(f'flat dense no-caps {"color=positive" if export.copied else "color=grey-8"}')
                        ui.button('Send Test', icon='send', on_click=lambda: show_send_dialog()).props('flat dense no-caps color=grey-8')
                        ui.button('Export', icon='download', on_click=export.download).props('dense no-caps color=indigo')
                        ui.button(icon='key', on_click=lambda: show_api_key_dialog()).props('flat round dense color=grey').tooltip('Configure API key')

            # 3. Generation status: error banner and loading indicator
            status_container = ui.column().classes('w-full gap-0')

            def render_generation_status():
                status_container.clear()
                with status_container:
                    if session.error:
                        with ui.row().classes('w-full items-center justify-between px-4 py-2 bg-red-50 border-b border-red-200 no-wrap'):
                            with ui.row().classes('items-center gap-2'):
                                ui.icon('error_outline').classes('text-red-600')
                                ui.label(session.error).classes('text-sm text-red-700')
                            ui.button('Dismiss', on_click=session.dismiss_error).props('flat dense no-caps color=negative')
                    if session.busy:
                        with ui.row().classes('w-full items-center justify-center gap-3 py-2 bg-indigo-50 border-b border-indigo-100'):
                            ui.spinner(size='sm', color='indigo')
                            ui.label('Generating your template...').classes('text-sm text-indigo-700')

            # 4. Editor area
            with ui.element('div').classes('w-full flex-1 relative overflow-hidden'):
                visual_container = ui.element('div').classes('absolute inset-0 overflow-auto bg-gray-100 flex justify-center p-8')
                with visual_container:
                    frame = ui.element('div').classes('bg-white shadow-sm transition-all duration-300')
                    with frame:
                        ui.element('div').props('contenteditable=true data-sirz-surface spellcheck=false').classes('w-full h-full p-4')

                code_container = ui.element('div').classes('absolute inset-0 bg-white')
                with code_container:
                    code_editor = ui.codemirror(language='HTML').classes('w-full h-full')

            # 5. Footer
            with ui.row().classes('w-full items-center justify-between px-4 py-1 bg-white border-t border-gray-200 text-xs text-gray-500'):
                footer_status = ui.label('')
                footer_length = ui.label('')

    # --- Floating image toolbar (fixed positioning, outside the layout flow) ---
    toolbar = render_image_toolbar(
        on_close=tracker.dismiss,
        on_url_submit=lambda url: handlers['handle_url_submit'](url),
        on_upload=lambda e: handlers['handle_upload'](e),
    )

    engine = ImageMutationEngine(
        controller,
        tracker,
        runner=run.io_bound,
        on_applied=lambda handle, src: surface.set_image_src(handle.index, src),
        reset_picker=toolbar['upload'].reset,
    )

    def schedule(delay, callback):
        # Outside chrome_container, which the feedback itself rebuilds
        with header:
            ui.timer(delay, callback, once=True)

    export = ExportActions(
        controller,
        clipboard_write=ui.clipboard.write,
        download=ui.download,
        schedule=schedule,
    )

    render_chrome()
    render_generation_status()

    surface.setup()
    handlers.update(setup_editor_handlers(
        elements={
            'visual_container': visual_container,
            'code_container': code_container,
            'code_editor': code_editor,
            'frame': frame,
            'footer_status': footer_status,
            'footer_length': footer_length,
        },
        controller=controller,
        surface=surface,
        tracker=tracker,
        engine=engine,
        toolbar=toolbar,
        refresh_chrome=render_chrome,
    ))

    def on_session_change(_):
        sidebar['refresh_generate']()
        render_generation_status()

    session.set_on_change(on_session_change)
    library.set_on_change(lambda _: sidebar['refresh_saved']())
    export.set_on_feedback(lambda _: render_chrome())

    # The surface script is injected with the page; push content once the socket is up
    await client.connected()
    surface.set_content(controller.canonical)

    if not ensure_api_key_in_env():
        show_api_key_dialog(required=True)


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(
        title='Sirz Mail',
        port=int(os.environ.get('SIRZ_MAIL_PORT', 8080)),
        reload=not getattr(sys, 'frozen', False),
        favicon='✉️',
    )
