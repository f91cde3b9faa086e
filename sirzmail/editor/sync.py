"""
Sync Controller - Single source of truth for the edited document.

The controller owns the canonical HTML text and decides which projection
may write to it:
- Visual mode: the rendered tree is authoritative; edits are captured from it
- Code mode: the raw text is authoritative; keystrokes set the text directly

The two projections are only reconciled at mode switches. We NEVER rebuild
the rendered tree while the user types raw source, and we never push
captured text back into the tree it came from.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from sirzmail.editor.document import RenderedTree

logger = logging.getLogger(__name__)


class Mode(str, Enum):
    VISUAL = 'visual'
    CODE = 'code'


class DevicePreview(str, Enum):
    DESKTOP = 'desktop'
    MOBILE = 'mobile'


# Events delivered to listeners
EVENT_REBUILT = 'rebuilt'
EVENT_CAPTURED = 'captured'
EVENT_EXTERNAL = 'external'
EVENT_MODE_CHANGED = 'mode_changed'
EVENT_DEVICE_CHANGED = 'device_changed'
EVENT_HANDLES_INVALIDATED = 'handles_invalidated'

VISUAL_TIP = 'Tip: Click text to edit. Click images to replace them.'
CODE_TIP = 'Editing raw HTML source code.'


@dataclass(frozen=True)
class EditorState:
    """Immutable snapshot of the editor for the toolbar and footer."""
    mode: Mode
    device: DevicePreview
    generation: int
    length: int


class SyncController:
    """Keeps the canonical text and its rendered projection consistent."""

    def __init__(self, initial_html: str, mode: Mode = Mode.VISUAL):
        self._canonical = initial_html
        self._mode = mode
        self._device = DevicePreview.DESKTOP
        self._generation = 0
        self._tree: Optional[RenderedTree] = None
        self._listeners: List[Callable[[str], None]] = []
        if mode is Mode.VISUAL:
            self._rebuild()

    # --- Read access ---

    @property
    def canonical(self) -> str:
        return self._canonical

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def device(self) -> DevicePreview:
        return self._device

    @property
    def tree(self) -> Optional[RenderedTree]:
        """The live rendered tree; None outside Visual mode."""
        return self._tree

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def state(self) -> EditorState:
        return EditorState(self._mode, self._device, self._generation, len(self._canonical))

    def status_text(self) -> str:
        return VISUAL_TIP if self._mode is Mode.VISUAL else CODE_TIP

    def add_listener(self, callback: Callable[[str], None]):
        self._listeners.append(callback)

    # --- Writes ---

    def set_from_external(self, html: str):
        """Replace the document (generated or loaded template), rebuilding the tree in Visual mode."""
        self._canonical = html
        if self._mode is Mode.VISUAL:
            self._rebuild()
        self._notify(EVENT_EXTERNAL)

    def capture_from_rendered(self, surface_markup: Optional[str] = None) -> bool:
        """
        Re-serialize the rendered tree into the canonical text.

        `surface_markup` is the surface's own markup after a typed edit; when
        given it first replaces the tree content. Returns False outside
        Visual mode, where the rendered tree is not authoritative.
        """
        if self._mode is not Mode.VISUAL or self._tree is None:
            logger.debug("Ignoring rendered capture outside Visual mode")
            return False

        if surface_markup is not None and not self._tree.absorb(surface_markup):
            # Images were added or removed by the edit; ordinals no longer line up
            self._generation += 1
            self._tree.generation = self._generation
            self._notify(EVENT_HANDLES_INVALIDATED)

        self._canonical = self._tree.serialize()
        self._notify(EVENT_CAPTURED)
        return True

    def capture_from_raw(self, text: str) -> bool:
        """Set the canonical text from the source editor. The tree waits for the next Visual entry."""
        if self._mode is not Mode.CODE:
            logger.debug("Ignoring raw capture outside Code mode")
            return False
        self._canonical = text
        self._notify(EVENT_CAPTURED)
        return True

    def switch_mode(self, mode: Mode) -> bool:
        """Switch projections. Returns False if already in `mode`."""
        mode = Mode(mode)
        if mode is self._mode:
            return False

        logger.debug(f"Switching editor mode {self._mode.value} -> {mode.value}")
        self._mode = mode
        if mode is Mode.VISUAL:
            self._rebuild()
        else:
            # Canonical text is already current from the last capture
            self._tree = None
            self._generation += 1
        self._notify(EVENT_MODE_CHANGED)
        return True

    def set_device(self, device: DevicePreview):
        device = DevicePreview(device)
        if device is not self._device:
            self._device = device
            self._notify(EVENT_DEVICE_CHANGED)

    # --- Internals ---

    def _rebuild(self):
        self._generation += 1
        self._tree = RenderedTree(self._canonical, self._generation)
        self._notify(EVENT_REBUILT)

    def _notify(self, event: str):
        for callback in list(self._listeners):
            callback(event)
