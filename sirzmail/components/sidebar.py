"""
Sidebar Component

Left-hand panel with two tabs:
- Create: the generation form (type, topic, audience, tone, context)
- Saved: the template library, newest first, with load and delete
"""

from datetime import datetime
from typing import Awaitable, Callable

from nicegui import ui

from sirzmail.generator import GenerationSession
from sirzmail.library import TemplateLibrary
from sirzmail.models import EMAIL_TONES, EMAIL_TYPES_LIST, EmailOptions, EmailType, SavedTemplate


def _format_date(created_at: int) -> str:
    return datetime.fromtimestamp(created_at / 1000).strftime('%x')


def render_sidebar(
    session: GenerationSession,
    library: TemplateLibrary,
    on_generate: Callable[[EmailOptions], Awaitable[None]],
    on_load: Callable[[SavedTemplate], None],
    on_delete: Callable[[SavedTemplate], Awaitable[None]],
) -> dict:
    """
    Render the sidebar.

    Args:
        session: GenerationSession driving the Generate button's loading state
        library: TemplateLibrary listed in the Saved tab
        on_generate: Called with the validated form options
        on_load: Called with the template chosen in the Saved tab
        on_delete: Called with the template whose delete button was pressed

    Returns:
        Dict with 'refresh_saved' and 'refresh_generate'
    """
    with ui.column().classes('w-80 h-full bg-white border-r border-gray-200 gap-0 no-wrap'):
        with ui.tabs().classes('w-full border-b border-gray-200') as tabs:
            create_tab = ui.tab('Create', icon='auto_awesome')
            saved_tab = ui.tab('Saved', icon='folder_open')

        with ui.tab_panels(tabs, value=create_tab).classes('w-full flex-1 overflow-y-auto'):
            with ui.tab_panel(create_tab).classes('gap-4'):
                type_select = ui.select(EMAIL_TYPES_LIST, value=EmailType.NEWSLETTER.value, label='Email Type').classes('w-full')
                topic_input = ui.input('Topic / Subject', placeholder='e.g. Summer Sale, Product Launch').classes('w-full')
                audience_input = ui.input('Target Audience', placeholder='e.g. Young professionals, Tech enthusiasts').classes('w-full')
                tone_select = ui.select(EMAIL_TONES, value=EMAIL_TONES[0], label='Tone').classes('w-full')
                context_input = ui.textarea(
                    'Additional Context',
                    placeholder='Any specific details, offers, or links to include...',
                ).classes('w-full').props('autogrow')

                async def do_generate():
                    options = EmailOptions(
                        topic=topic_input.value or '',
                        audience=audience_input.value or '',
                        tone=tone_select.value,
                        type=EmailType(type_select.value),
                        additional_context=context_input.value or '',
                    )
                    problem = options.validation_error()
                    if problem:
                        ui.notify(problem, type='warning', position='bottom')
                        return
                    await on_generate(options)

                generate_container = ui.column().classes('w-full')

                def render_generate_button():
                    generate_container.clear()
                    with generate_container:
                        if session.busy:
                            ui.button('Generating...', icon='hourglass_empty').props('color=indigo loading').classes('w-full').disable()
                        else:
                            ui.button('Generate Template', icon='auto_awesome', on_click=do_generate).props('color=indigo').classes('w-full')

                render_generate_button()

            with ui.tab_panel(saved_tab):
                saved_container = ui.column().classes('w-full gap-2')

                def render_saved_list():
                    saved_container.clear()
                    with saved_container:
                        _render_saved_entries(library, on_load, on_delete)

                render_saved_list()

    return {
        'refresh_saved': render_saved_list,
        'refresh_generate': render_generate_button,
    }


def _render_saved_entries(
    library: TemplateLibrary,
    on_load: Callable[[SavedTemplate], None],
    on_delete: Callable[[SavedTemplate], Awaitable[None]],
):
    templates = library.templates
    if not templates:
        with ui.column().classes('w-full items-center py-10 text-gray-400'):
            ui.icon('folder_open', size='lg')
            ui.label('No saved templates yet.').classes('text-sm')
        return

    for template in templates:
        with ui.card().classes('w-full p-3 hover:border-indigo-300'):
            with ui.row().classes('w-full items-start justify-between no-wrap'):
                with ui.column().classes('gap-0 min-w-0'):
                    ui.label(template.name).classes('font-medium text-gray-800 truncate')
                    ui.label(_format_date(template.created_at)).classes('text-xs text-gray-400')
                with ui.row().classes('gap-0 no-wrap'):
                    ui.button(
                        icon='open_in_browser',
                        on_click=lambda t=template: on_load(t),
                    ).props('flat round dense size=sm color=indigo').tooltip('Load')
                    ui.button(
                        icon='delete',
                        on_click=lambda t=template: on_delete(t),
                    ).props('flat round dense size=sm color=grey').tooltip('Delete')
