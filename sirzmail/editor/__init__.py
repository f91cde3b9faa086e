"""
Dual-mode email editor for Sirz Mail.

This package provides the Visual/Code editing core:
- SyncController: canonical HTML text and mode switching
- RenderedTree: parsed projection used in Visual mode
- SelectionTracker: selected image and its overlay geometry
- ImageMutationEngine: URL and upload image replacement
- ExportActions: clipboard copy and HTML file download
- EditorSurface: browser bridge for the contenteditable surface
- editor handlers: Event handlers for app.py integration

Usage:
    from sirzmail.editor import SyncController, SelectionTracker, ImageMutationEngine
    from sirzmail.editor.handlers import setup_editor_handlers
"""

from sirzmail.editor.constants import (
    TOOLBAR_OFFSET_PX,
    TOOLBAR_CLASS,
    SURFACE_SELECTOR,
)
from sirzmail.editor.document import ImageHandle, RenderedTree
from sirzmail.editor.sync import DevicePreview, EditorState, Mode, SyncController
from sirzmail.editor.selection import ClickTarget, Rect, Selection, SelectionTracker
from sirzmail.editor.images import ImageMutationEngine, UploadedFile
from sirzmail.editor.export import ExportActions, ExportPayload
from sirzmail.editor.surface import EditorSurface
from sirzmail.editor.handlers import setup_editor_handlers

__all__ = [
    'ImageHandle',
    'RenderedTree',
    'DevicePreview',
    'EditorState',
    'Mode',
    'SyncController',
    'ClickTarget',
    'Rect',
    'Selection',
    'SelectionTracker',
    'ImageMutationEngine',
    'UploadedFile',
    'ExportActions',
    'ExportPayload',
    'EditorSurface',
    'setup_editor_handlers',
    'TOOLBAR_OFFSET_PX',
    'TOOLBAR_CLASS',
    'SURFACE_SELECTOR',
]
