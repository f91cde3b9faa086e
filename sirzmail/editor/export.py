"""
Export and clipboard adapters. Both only read the canonical text.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

from sirzmail.constants import COPY_FEEDBACK_SECONDS, EXPORT_FILENAME, EXPORT_MEDIA_TYPE
from sirzmail.editor.sync import SyncController


@dataclass(frozen=True)
class ExportPayload:
    filename: str
    media_type: str
    content: bytes


def build_export(html: str) -> ExportPayload:
    return ExportPayload(
        filename=EXPORT_FILENAME,
        media_type=EXPORT_MEDIA_TYPE,
        content=html.encode('utf-8'),
    )


class ExportActions:
    """
    Copy and download for the current document.

    `clipboard_write` and `download` are the host hooks (ui.clipboard.write and
    ui.download in the app). `schedule(delay, callback)` runs the callback
    once after `delay` seconds and is used to revert the "Copied" indicator.
    """

    def __init__(
        self,
        controller: SyncController,
        clipboard_write: Callable[[str], Any],
        download: Callable[[bytes, str, str], Any],
        schedule: Callable[[float, Callable[[], None]], Any],
    ):
        self._controller = controller
        self._clipboard_write = clipboard_write
        self._download = download
        self._schedule = schedule
        self._copied = False
        self._copy_count = 0
        self._on_feedback: Optional[Callable[[bool], None]] = None

    @property
    def copied(self) -> bool:
        return self._copied

    def set_on_feedback(self, callback: Callable[[bool], None]):
        self._on_feedback = callback

    def copy_to_clipboard(self):
        self._clipboard_write(self._controller.canonical)
        self._copy_count += 1
        self._set_copied(True)
        self._schedule(COPY_FEEDBACK_SECONDS, lambda count=self._copy_count: self._revert_copied(count))

    def download(self) -> ExportPayload:
        payload = build_export(self._controller.canonical)
        self._download(payload.content, payload.filename, payload.media_type)
        return payload

    def _revert_copied(self, count: int):
        # A later copy owns the indicator until its own timer fires
        if count == self._copy_count:
            self._set_copied(False)

    def _set_copied(self, value: bool):
        self._copied = value
        if self._on_feedback:
            self._on_feedback(value)
