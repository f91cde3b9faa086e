"""
Image Mutation Engine

Replaces the source of the selected image, either with a pasted URL or with
an uploaded file inlined as a data URL, then asks the Sync Controller to
re-capture the canonical text.

Uploads are converted off the event loop. By the time the conversion
finishes the user may have switched modes or selected another image, so the
result is only committed if the same image is still selected and attached.
"""

import asyncio
import base64
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, BinaryIO, Callable, Optional

from sirzmail.editor.constants import DEFAULT_UPLOAD_MIME
from sirzmail.editor.document import ImageHandle
from sirzmail.editor.selection import SelectionTracker
from sirzmail.editor.sync import Mode, SyncController
from sirzmail.utils import run_inline

logger = logging.getLogger(__name__)

Runner = Callable[..., Awaitable[Any]]


@dataclass
class UploadedFile:
    name: str
    stream: BinaryIO
    mime_type: str = ''


def encode_data_url(data: bytes, mime_type: Optional[str] = None) -> str:
    """Inline binary image data as a self-contained data URL."""
    mime = mime_type or DEFAULT_UPLOAD_MIME
    payload = base64.b64encode(data).decode('ascii')
    return f"data:{mime};base64,{payload}"


def read_as_data_url(upload: UploadedFile) -> str:
    upload.stream.seek(0)
    return encode_data_url(upload.stream.read(), upload.mime_type)


class ImageMutationEngine:
    """
    Writes new image sources into the live rendered tree.

    Both entry points are no-ops (returning False) when nothing usable was
    provided or no image is selected.
    """

    def __init__(
        self,
        controller: SyncController,
        tracker: SelectionTracker,
        runner: Optional[Runner] = None,
        on_applied: Optional[Callable[[ImageHandle, str], None]] = None,
        reset_picker: Optional[Callable[[], None]] = None,
    ):
        self._controller = controller
        self._tracker = tracker
        self._runner = runner or run_inline
        self._on_applied = on_applied
        self._reset_picker = reset_picker
        self._pending: Optional[asyncio.Task] = None

    @property
    def has_pending_upload(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def apply_url(self, url: Optional[str]) -> bool:
        """Point the selected image at `url`. Empty input is ignored."""
        url = (url or '').strip()
        if not url:
            return False
        handle = self._tracker.current_handle()
        if handle is None:
            return False
        return self._write(handle, url)

    def start_upload(self, upload: Optional[UploadedFile]) -> Optional[asyncio.Task]:
        """
        Begin converting `upload` for the selected image.

        Returns the conversion task, or None when there is nothing to do.
        A newer upload cancels one that is still converting.
        """
        if upload is None:
            self._reset()
            return None
        handle = self._tracker.current_handle()
        if handle is None:
            self._reset()
            return None

        self.cancel_pending()
        self._pending = asyncio.create_task(self._convert_and_commit(handle, upload))
        return self._pending

    async def upload(self, upload: Optional[UploadedFile]) -> bool:
        """Convert and commit `upload`; True if the image was replaced."""
        task = self.start_upload(upload)
        if task is None:
            return False
        await asyncio.wait({task})
        return not task.cancelled() and task.result()

    def cancel_pending(self):
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def _convert_and_commit(self, handle: ImageHandle, upload: UploadedFile) -> bool:
        try:
            data_url = await self._runner(read_as_data_url, upload)
        finally:
            self._reset()

        if self._controller.mode is not Mode.VISUAL or self._tracker.current_handle() != handle:
            logger.debug(f"Discarding upload '{upload.name}': image #{handle.index} is no longer selected")
            return False
        return self._write(handle, data_url)

    def _write(self, handle: ImageHandle, src: str) -> bool:
        tree = self._controller.tree
        if tree is None or not tree.set_image_source(handle, src):
            return False
        self._controller.capture_from_rendered()
        if self._on_applied:
            self._on_applied(handle, src)
        return True

    def _reset(self):
        if self._reset_picker:
            self._reset_picker()
