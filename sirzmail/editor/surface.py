"""
Editor Surface - the browser half of the Visual editor.

The contenteditable element lives in the browser. This module injects a
small script that:
- reports clicks (with the clicked image's ordinal and bounding box)
- reports typed edits (the surface's innerHTML)
- reports the selected image's geometry on scroll/resize, at most once per
  animation frame, only while Python has a watch registered

Python pushes content the other way: a full innerHTML replacement on tree
rebuild, and a single src attribute update after an image replacement so
the caret and the rest of the DOM stay where they are.
"""

import json
import logging
from typing import Callable, Optional

from nicegui import ui

from sirzmail.editor.constants import (
    SURFACE_CLICK_EVENT,
    SURFACE_INPUT_EVENT,
    SURFACE_SELECTOR,
    TOOLBAR_CLASS,
    VIEWPORT_EVENT,
)
from sirzmail.editor.selection import Rect

logger = logging.getLogger(__name__)


class EditorSurface:
    """
    Bridges the contenteditable surface and the Python editor state.

    Also implements ViewportEvents for the SelectionTracker. Scripts are sent
    through the page's client so pushes from background tasks still arrive.
    """

    def __init__(self, client):
        self._client = client
        self._is_setup = False
        self._watch_index: Optional[int] = None
        self._watch_callback: Optional[Callable[[Optional[Rect]], None]] = None

    def setup(self):
        """Inject the surface script. Call once per page."""
        if self._is_setup:
            return

        selector = json.dumps(SURFACE_SELECTOR)
        toolbar = json.dumps('.' + TOOLBAR_CLASS)

        ui.add_body_html(f'''
            <script>
                window.sirzSurface = {{
                    selector: {selector},
                    watching: null,
                    frame: null,
                    unwatch: function() {{}},
                    report: function() {{}},
                }};

                window.sirzSurface.element = function() {{
                    return document.querySelector(window.sirzSurface.selector);
                }};

                window.sirzSurface.image = function(index) {{
                    const surface = window.sirzSurface.element();
                    if (!surface) return null;
                    return surface.querySelectorAll('img')[index] || null;
                }};

                window.sirzSurface.rectOf = function(el) {{
                    const r = el.getBoundingClientRect();
                    return {{ top: r.top, left: r.left, width: r.width, height: r.height }};
                }};

                document.addEventListener('click', function(e) {{
                    const target = e.target;
                    if (!(target instanceof Element)) return;
                    const surface = window.sirzSurface.element();
                    const inSurface = !!(surface && surface.contains(target));
                    const inAnchor = inSurface && !!target.closest('a');
                    // The surface is an editing canvas, not a live page
                    if (inAnchor) e.preventDefault();

                    let imageIndex = null;
                    let rect = null;
                    if (inSurface && target.tagName === 'IMG') {{
                        imageIndex = Array.from(surface.querySelectorAll('img')).indexOf(target);
                        rect = window.sirzSurface.rectOf(target);
                    }}
                    emitEvent('{SURFACE_CLICK_EVENT}', {{
                        tag: target.tagName,
                        image_index: imageIndex,
                        in_surface: inSurface,
                        in_anchor: inAnchor,
                        in_toolbar: !!target.closest({toolbar}),
                        rect: rect,
                    }});
                }}, true);

                document.addEventListener('input', function(e) {{
                    const surface = window.sirzSurface.element();
                    if (!surface || !(e.target instanceof Node) || !surface.contains(e.target)) return;
                    emitEvent('{SURFACE_INPUT_EVENT}', {{ html: surface.innerHTML }});
                    window.sirzSurface.report();
                }});

                window.sirzSurface.watchImage = function(index) {{
                    const st = window.sirzSurface;
                    st.unwatch();
                    const report = function() {{
                        if (st.frame !== null) return;
                        st.frame = requestAnimationFrame(function() {{
                            st.frame = null;
                            const img = st.image(index);
                            emitEvent('{VIEWPORT_EVENT}', {{
                                image_index: index,
                                rect: img ? st.rectOf(img) : null,
                            }});
                        }});
                    }};
                    window.addEventListener('scroll', report, true);
                    window.addEventListener('resize', report);
                    st.watching = index;
                    st.report = report;
                    st.unwatch = function() {{
                        window.removeEventListener('scroll', report, true);
                        window.removeEventListener('resize', report);
                        st.watching = null;
                        st.report = function() {{}};
                        st.unwatch = function() {{}};
                    }};
                }};
            </script>
        ''')

        ui.on(VIEWPORT_EVENT, self._handle_viewport_event)
        self._is_setup = True

    # --- Python -> browser ---

    def set_content(self, html: str):
        """Replace the surface content (tree rebuild). Resets caret and scroll."""
        self._client.run_javascript(f'''
            const surface = window.sirzSurface && window.sirzSurface.element();
            if (surface) surface.innerHTML = {json.dumps(html)};
        ''')

    def set_image_src(self, index: int, src: str):
        self._client.run_javascript(f'''
            const img = window.sirzSurface && window.sirzSurface.image({index});
            if (img) img.setAttribute('src', {json.dumps(src)});
        ''')

    # --- ViewportEvents ---

    def subscribe(self, image_index: int, callback: Callable[[Optional[Rect]], None]) -> Callable[[], None]:
        self._watch_index = image_index
        self._watch_callback = callback
        self._client.run_javascript(f'window.sirzSurface && window.sirzSurface.watchImage({image_index});')

        def unsubscribe():
            if self._watch_index != image_index:
                return
            self._watch_index = None
            self._watch_callback = None
            self._client.run_javascript('window.sirzSurface && window.sirzSurface.unwatch();')

        return unsubscribe

    def _handle_viewport_event(self, event):
        raw = event.args if hasattr(event, 'args') else event
        if not isinstance(raw, dict) or self._watch_callback is None:
            return
        if raw.get('image_index') != self._watch_index:
            logger.debug(f"Dropping geometry report for unwatched image #{raw.get('image_index')}")
            return
        self._watch_callback(Rect.from_payload(raw.get('rect')))
