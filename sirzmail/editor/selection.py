"""
Selection Tracker - which image is selected and where it sits on screen.

State machine over {Unselected, Selected}:
- Unselected -> Selected: click on an image inside the surface (Visual mode only)
- Selected -> Selected: scroll/resize reports refresh the cached rectangle
- Selected -> Unselected: click elsewhere (not on the toolbar), toolbar close,
  mode switch, tree rebuild, or the image disappearing

Viewport listeners exist only while something is selected. They are acquired
on entering Selected and released on leaving it through an ExitStack, so a
selection can never leak a listener.
"""

import logging
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterator, Optional, Protocol, Tuple

from sirzmail.editor.constants import TOOLBAR_OFFSET_PX
from sirzmail.editor.document import ImageHandle
from sirzmail.editor.sync import (
    EVENT_HANDLES_INVALIDATED,
    EVENT_MODE_CHANGED,
    EVENT_REBUILT,
    Mode,
    SyncController,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rect:
    """Viewport-space bounding box, as reported by getBoundingClientRect()."""
    top: float
    left: float
    width: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def right(self) -> float:
        return self.left + self.width

    def toolbar_position(self) -> Tuple[float, float]:
        """(top, left) of the floating toolbar: just below the image, left-aligned."""
        return self.bottom + TOOLBAR_OFFSET_PX, self.left

    @classmethod
    def from_payload(cls, raw: Any) -> Optional['Rect']:
        if not isinstance(raw, dict):
            return None
        try:
            return cls(
                top=float(raw['top']),
                left=float(raw['left']),
                width=float(raw['width']),
                height=float(raw['height']),
            )
        except (KeyError, TypeError, ValueError):
            return None


@dataclass(frozen=True)
class Selection:
    handle: ImageHandle
    rect: Rect


@dataclass(frozen=True)
class ClickTarget:
    """What the browser reports about a click."""
    tag: str = ''
    image_index: Optional[int] = None
    in_surface: bool = False
    in_anchor: bool = False
    in_toolbar: bool = False
    rect: Optional[Rect] = None

    @classmethod
    def from_payload(cls, raw: Any) -> 'ClickTarget':
        """Normalize an event payload from the surface script."""
        if not isinstance(raw, dict):
            return cls()
        index = raw.get('image_index')
        if isinstance(index, bool) or not isinstance(index, int):
            index = None
        return cls(
            tag=str(raw.get('tag') or '').lower(),
            image_index=index,
            in_surface=bool(raw.get('in_surface')),
            in_anchor=bool(raw.get('in_anchor')),
            in_toolbar=bool(raw.get('in_toolbar')),
            rect=Rect.from_payload(raw.get('rect')),
        )


@dataclass(frozen=True)
class ClickOutcome:
    prevent_default: bool = False
    selection_changed: bool = False


class ViewportEvents(Protocol):
    """Source of scroll/resize geometry reports for one selected image."""

    def subscribe(self, image_index: int, callback: Callable[[Optional[Rect]], None]) -> Callable[[], None]:
        """Start reporting the image's rectangle; returns the function that stops it."""
        ...


@contextmanager
def viewport_subscription(
    events: Optional[ViewportEvents],
    image_index: int,
    callback: Callable[[Optional[Rect]], None],
) -> Iterator[None]:
    if events is None:
        yield
        return
    unsubscribe = events.subscribe(image_index, callback)
    try:
        yield
    finally:
        unsubscribe()


class SelectionTracker:
    """Tracks the selected image and its overlay geometry."""

    def __init__(self, controller: SyncController, viewport: Optional[ViewportEvents] = None):
        self._controller = controller
        self._viewport = viewport
        self._selection: Optional[Selection] = None
        self._url_input = ''
        self._listeners = ExitStack()
        self._on_change: Optional[Callable[[Optional[Selection]], None]] = None
        controller.add_listener(self._on_controller_event)

    # --- Read access ---

    @property
    def selection(self) -> Optional[Selection]:
        return self._selection

    @property
    def is_selected(self) -> bool:
        return self._selection is not None

    @property
    def url_input(self) -> str:
        return self._url_input

    @url_input.setter
    def url_input(self, value: str):
        self._url_input = value or ''

    def current_handle(self) -> Optional[ImageHandle]:
        """The selected handle if it still resolves to an attached image in Visual mode."""
        if self._selection is None or self._controller.mode is not Mode.VISUAL:
            return None
        tree = self._controller.tree
        if tree is None or not tree.is_attached(self._selection.handle):
            return None
        return self._selection.handle

    def overlay_rect(self) -> Optional[Rect]:
        return self._selection.rect if self._selection else None

    def toolbar_position(self) -> Optional[Tuple[float, float]]:
        return self._selection.rect.toolbar_position() if self._selection else None

    def set_on_change(self, callback: Callable[[Optional[Selection]], None]):
        self._on_change = callback

    # --- Transitions ---

    def handle_click(self, target: ClickTarget) -> ClickOutcome:
        """
        Apply a click reported by the surface.

        Anchor clicks inside the surface never navigate; the caret still
        lands in the link text so it stays editable.
        """
        prevent = target.in_surface and target.in_anchor

        if (
            target.in_surface
            and target.tag == 'img'
            and target.image_index is not None
            and target.rect is not None
        ):
            changed = self.select(target.image_index, target.rect)
            return ClickOutcome(prevent_default=prevent, selection_changed=changed)

        if target.in_toolbar or self._selection is None:
            return ClickOutcome(prevent_default=prevent)

        self.clear()
        return ClickOutcome(prevent_default=prevent, selection_changed=True)

    def select(self, image_index: int, rect: Rect) -> bool:
        """Select the image at `image_index` of the live tree. Only possible in Visual mode."""
        if self._controller.mode is not Mode.VISUAL or self._controller.tree is None:
            return False
        tree = self._controller.tree
        handle = tree.handle_for(image_index)
        if handle is None:
            logger.debug(f"Click reported unknown image #{image_index}")
            return False

        self._listeners.close()
        self._selection = Selection(handle=handle, rect=rect)
        self._url_input = tree.image_source(handle) or ''
        self._listeners.enter_context(
            viewport_subscription(self._viewport, image_index, self.refresh_geometry)
        )
        self._notify()
        return True

    def refresh_geometry(self, rect: Optional[Rect]) -> bool:
        """Update the cached rectangle after scroll/resize; never changes the selected image."""
        if self._selection is None:
            return False
        if rect is None or self.current_handle() is None:
            # The element is gone from the surface
            self.clear()
            return False
        if rect != self._selection.rect:
            self._selection = replace(self._selection, rect=rect)
            self._notify()
        return True

    def dismiss(self):
        """Toolbar close control."""
        self.clear()

    def clear(self):
        self._listeners.close()
        if self._selection is None:
            return
        self._selection = None
        self._notify()

    # --- Internals ---

    def _on_controller_event(self, event: str):
        if event in (EVENT_MODE_CHANGED, EVENT_REBUILT, EVENT_HANDLES_INVALIDATED):
            self.clear()

    def _notify(self):
        if self._on_change:
            self._on_change(self._selection)
