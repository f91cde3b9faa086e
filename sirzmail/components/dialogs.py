"""
Modal dialogs: save template, send test email, delete confirmation, API key.
"""

import asyncio
from typing import Callable, Optional

from nicegui import run, ui

from sirzmail.config import get_api_key, validate_and_store_api_key
from sirzmail.constants import DEFAULT_SEND_SUBJECT, SEND_SUCCESS_SECONDS
from sirzmail.sending import SendSimulation, build_mailto_link, validate_send_form


async def confirm(message: str, confirm_label: str = 'Delete') -> bool:
    """Blocking confirmation prompt; closing the dialog counts as "no"."""
    with ui.dialog() as dialog, ui.card().classes('w-96'):
        ui.label(message).classes('text-base')
        with ui.row().classes('w-full justify-end gap-2 mt-4'):
            ui.button('Cancel', on_click=lambda: dialog.submit(False)).props('flat')
            ui.button(confirm_label, on_click=lambda: dialog.submit(True)).props('color=negative')
    result = await dialog
    dialog.delete()
    return result is True


def show_save_dialog(on_save: Callable[[str], None]):
    """Ask for a template name and hand it to `on_save`."""
    with ui.dialog() as dialog, ui.card().classes('w-full max-w-md p-6'):
        with ui.row().classes('w-full items-center justify-between mb-4'):
            ui.label('Save Template').classes('text-lg font-bold')
            ui.button(icon='close', on_click=dialog.close).props('flat round dense color=grey')

        name_input = ui.input('Template Name', placeholder='e.g. Summer Sale V1').classes('w-full').props('autofocus')
        error_label = ui.label('').classes('text-red-500 text-sm')

        def do_save():
            name = name_input.value or ''
            if not name.strip():
                error_label.text = 'Please enter a template name'
                return
            on_save(name)
            dialog.close()

        name_input.on('keydown.enter', do_save)

        with ui.row().classes('w-full justify-end gap-3 pt-2'):
            ui.button('Cancel', on_click=dialog.close).props('flat')
            ui.button('Save to Library', on_click=do_save).props('color=primary')

    dialog.open()
    return dialog


def show_send_dialog(simulation: Optional[SendSimulation] = None):
    """Simulated test send, with a mailto handoff to the default mail app."""
    simulation = simulation or SendSimulation()
    simulation.reset()

    dialog = ui.dialog()
    with dialog, ui.card().classes('w-full max-w-md p-6'):
        with ui.row().classes('w-full items-center justify-between mb-4'):
            ui.label('Send Test Email').classes('text-lg font-bold')
            ui.button(icon='close', on_click=dialog.close).props('flat round dense color=grey')

        body = ui.column().classes('w-full gap-4')

    def render_success():
        body.clear()
        with body:
            with ui.column().classes('w-full items-center py-8'):
                ui.icon('check_circle', size='xl').classes('text-green-600')
                ui.label('Email Sent!').classes('text-lg font-medium')
                ui.label('Your test email has been successfully queued.').classes('text-gray-500 text-sm')

    with body:
        recipient_input = ui.input('Recipient', placeholder='you@example.com').classes('w-full')
        subject_input = ui.input('Subject', value=DEFAULT_SEND_SUBJECT, placeholder='My Awesome Template').classes('w-full')
        error_label = ui.label('').classes('text-red-500 text-sm')

        with ui.row().classes('w-full bg-yellow-50 border border-yellow-200 rounded-lg p-3 gap-2 no-wrap'):
            ui.icon('mail').classes('text-yellow-800')
            ui.label(
                'This is a preview simulation. To send real emails, you would typically integrate '
                'with an ESP (Mailchimp, SendGrid, etc). You can also try opening your default mail client below.'
            ).classes('text-xs text-yellow-800')

        async def do_send():
            problem = validate_send_form(recipient_input.value or '', subject_input.value or '')
            if problem:
                error_label.text = problem
                return
            error_label.text = ''
            send_button.disable()
            send_button.text = 'Sending...'
            try:
                sent = await simulation.send(recipient_input.value, subject_input.value)
            finally:
                send_button.enable()
                send_button.text = 'Send Test'
            if sent:
                render_success()
                await asyncio.sleep(SEND_SUCCESS_SECONDS)
                dialog.close()

        def open_mail_client():
            recipient = recipient_input.value or ''
            if not recipient.strip():
                error_label.text = 'Recipient is required'
                return
            ui.navigate.to(build_mailto_link(recipient, subject_input.value or ''), new_tab=True)

        send_button = ui.button('Send Test', icon='send', on_click=do_send).props('color=indigo').classes('w-full')
        ui.label('OR').classes('w-full text-center text-gray-400 text-xs')
        ui.button('Open in Default Mail App', on_click=open_mail_client).props('outline color=grey-8').classes('w-full')

    dialog.open()
    return dialog


_STATUS_COLORS = {
    'error': 'text-red-500',
    'pending': 'text-yellow-500',
    'ok': 'text-green-500',
}


def _mask_key(key: Optional[str]) -> str:
    if not key or len(key) <= 15:
        return ''
    return f'{key[:7]}...{key[-4:]}'


def show_api_key_dialog(required: bool = False):
    """
    Ask for an OpenAI API key, validate it off the event loop and store it.

    With `required` the dialog cannot be dismissed until a valid key is saved;
    the app opens it that way when no key is configured at startup.
    """
    dialog = ui.dialog()
    if required:
        dialog.props('persistent')
    with dialog, ui.card().classes('w-[500px]'):
        if required:
            ui.label('API Key Required').classes('text-xl font-bold text-primary')
            ui.label('Sirz Mail needs an OpenAI API key to generate templates.').classes('text-gray-500 mb-2')
        else:
            ui.label('Configure API Key').classes('text-lg font-bold')

        masked = _mask_key(get_api_key())
        if masked:
            ui.label(f'Current key: {masked}').classes('text-gray-500 text-sm mb-2')

        key_input = ui.input('OpenAI API Key', placeholder='sk-...', password=True, password_toggle_button=True).classes('w-full')
        status_label = ui.label('').classes('text-sm')

        def show_status(kind: str, text: str):
            status_label.text = text
            others = ' '.join(c for k, c in _STATUS_COLORS.items() if k != kind)
            status_label.classes(_STATUS_COLORS[kind], remove=others)

        async def do_save():
            key = (key_input.value or '').strip()
            if not key:
                show_status('error', 'Please enter an API key')
                return

            show_status('pending', 'Validating...')
            save_button.disable()
            try:
                is_valid, message = await validate_and_store_api_key(key, runner=run.io_bound)
            finally:
                save_button.enable()

            if not is_valid:
                show_status('error', message)
                return
            show_status('ok', message)
            ui.notify('API key saved', type='positive', position='bottom')
            await asyncio.sleep(1)
            dialog.close()

        key_input.on('keydown.enter', do_save)

        with ui.row().classes('w-full justify-end gap-2 mt-4'):
            if not required:
                ui.button('Cancel', on_click=dialog.close).props('flat')
            save_button = ui.button('Validate & Save', on_click=do_save).props('color=primary')

    dialog.open()
    return dialog
