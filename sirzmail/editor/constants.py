"""
Shared constants for the editor.

These values are used by both Python (sync, selection, images)
and JavaScript (surface). Keep them in sync!
"""

# Vertical gap in pixels between the selected image's bottom edge and the floating toolbar
TOOLBAR_OFFSET_PX = 10

# CSS class marking the floating image toolbar; clicks inside it never clear the selection
TOOLBAR_CLASS = 'image-toolbar'

# CSS selector of the contenteditable surface
SURFACE_SELECTOR = '[data-sirz-surface]'

# Custom events emitted from the browser to Python
SURFACE_CLICK_EVENT = 'sirz_surface_click'
SURFACE_INPUT_EVENT = 'sirz_surface_input'
VIEWPORT_EVENT = 'sirz_viewport_change'

# Device preview frames (Tailwind classes)
DESKTOP_FRAME_CLASSES = 'w-full max-w-4xl min-h-[800px] rounded-lg border border-gray-200'
MOBILE_FRAME_CLASSES = 'w-[375px] h-[812px] rounded-[32px] border-8 border-gray-800 overflow-hidden'

UPLOAD_ACCEPT = 'image/*'
DEFAULT_UPLOAD_MIME = 'application/octet-stream'
