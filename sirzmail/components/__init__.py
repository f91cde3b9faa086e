"""
Reusable UI Components
"""

from .image_toolbar import render_image_toolbar
from .sidebar import render_sidebar
from .dialogs import confirm, show_api_key_dialog, show_save_dialog, show_send_dialog

__all__ = [
    'render_image_toolbar',
    'render_sidebar',
    'confirm',
    'show_api_key_dialog',
    'show_save_dialog',
    'show_send_dialog',
]
