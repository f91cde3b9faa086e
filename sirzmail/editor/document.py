"""
Rendered Tree - the editable projection of the canonical HTML.

The tree keeps two things side by side:
- the markup it currently represents (its serialization)
- a BeautifulSoup parse of that markup, used to enumerate images,
  read their attributes and locate them in the source

Image edits splice the new value into the markup at the exact attribute
span reported by the parser, so every other byte of the document survives
a replacement untouched. Serializing is therefore a plain read and is
idempotent by construction.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

logger = logging.getLogger(__name__)

# Attribute grammar inside a start tag: name, optionally followed by a
# double-quoted, single-quoted or bare value.
_ATTR_RE = re.compile(
    r'''(?P<name>[^\s/>"'=]+)
        (?:\s*=\s*
            (?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\s>]+))
        )?''',
    re.VERBOSE,
)

# Elements whose content the browser keeps out of the live DOM (raw text or
# template fragments), so querySelectorAll never reaches an <img> inside them.
_INERT_CONTAINERS = frozenset({
    'iframe', 'noembed', 'noframes', 'noscript',
    'template', 'textarea', 'title', 'xmp',
})


@dataclass(frozen=True)
class ImageHandle:
    """
    Weak reference to an image in a specific tree build.

    Holds the tree generation and the image's ordinal in document order.
    A handle never keeps the element alive; resolve it through the tree
    before every use.
    """
    generation: int
    index: int


def _line_offsets(source: str) -> List[int]:
    offsets = [0]
    for i, ch in enumerate(source):
        if ch == '\n':
            offsets.append(i + 1)
    return offsets


def _escape_attr(value: str, quote: str) -> str:
    value = value.replace('&', '&amp;')
    if quote == '"':
        return value.replace('"', '&quot;')
    return value.replace("'", '&#39;')


def splice_src_attribute(source: str, tag_start: int, new_src: str) -> Optional[str]:
    """
    Return `source` with the src value of the <img> tag starting at `tag_start`
    replaced by `new_src`, or None when no img start tag begins there.

    Only the attribute value changes; quoting style is kept when the old value
    was quoted. A missing src attribute is inserted right after the tag name.
    """
    if source[tag_start:tag_start + 4].lower() != '<img':
        return None

    pos = tag_start + 4
    end = len(source)
    while pos < end:
        ch = source[pos]
        if ch.isspace() or ch == '/':
            pos += 1
            continue
        if ch == '>':
            break
        match = _ATTR_RE.match(source, pos)
        if not match:
            break
        if match.group('name').lower() == 'src':
            if match.group('dq') is not None:
                start, stop = match.span('dq')
                return source[:start] + _escape_attr(new_src, '"') + source[stop:]
            if match.group('sq') is not None:
                start, stop = match.span('sq')
                return source[:start] + _escape_attr(new_src, "'") + source[stop:]
            if match.group('bare') is not None:
                start, stop = match.span('bare')
            else:
                # Valueless `src`
                start = stop = match.end('name')
                return source[:start] + '="' + _escape_attr(new_src, '"') + '"' + source[stop:]
            return source[:start] + '"' + _escape_attr(new_src, '"') + '"' + source[stop:]
        pos = match.end()

    insert_at = tag_start + 4
    return source[:insert_at] + ' src="' + _escape_attr(new_src, '"') + '"' + source[insert_at:]


class RenderedTree:
    """Parsed, mutable view of one HTML document build."""

    def __init__(self, source: str, generation: int):
        self.generation = generation
        self._load(source)

    def _load(self, source: str):
        self._source = source
        self._soup = BeautifulSoup(source, 'html.parser')
        self._line_offsets = _line_offsets(source)

    def serialize(self) -> str:
        """Return the markup the tree currently represents."""
        return self._source

    def images(self) -> List[Tag]:
        """Images in document order, counted the way the browser surface counts them."""
        return [
            tag for tag in self._soup.find_all('img')
            if not any(parent.name in _INERT_CONTAINERS for parent in tag.parents)
        ]

    def image_count(self) -> int:
        return len(self.images())

    def handle_for(self, index: int) -> Optional[ImageHandle]:
        """Create a handle for the image at `index`, or None if there is no such image."""
        if 0 <= index < self.image_count():
            return ImageHandle(self.generation, index)
        return None

    def resolve(self, handle: Optional[ImageHandle]) -> Optional[Tag]:
        """Return the live element behind `handle`, or None when it is stale or detached."""
        if handle is None or handle.generation != self.generation:
            return None
        images = self.images()
        if not 0 <= handle.index < len(images):
            return None
        return images[handle.index]

    def is_attached(self, handle: Optional[ImageHandle]) -> bool:
        return self.resolve(handle) is not None

    def image_source(self, handle: Optional[ImageHandle]) -> Optional[str]:
        tag = self.resolve(handle)
        if tag is None:
            return None
        return tag.get('src', '')

    def set_image_source(self, handle: ImageHandle, src: str) -> bool:
        """
        Write `src` into the image behind `handle`.

        Returns False when the handle no longer resolves. The image set is
        unchanged afterwards, so existing handles stay valid.
        """
        tag = self.resolve(handle)
        if tag is None:
            return False

        new_source = None
        if tag.sourceline is not None and tag.sourcepos is not None:
            line = tag.sourceline - 1
            if 0 <= line < len(self._line_offsets):
                start = self._line_offsets[line] + tag.sourcepos
                new_source = splice_src_attribute(self._source, start, src)

        if new_source is None:
            # Position data did not line up with the markup; fall back to
            # re-serializing the whole tree.
            logger.warning(f"Could not locate image #{handle.index} in source, re-serializing tree")
            tag['src'] = src
            new_source = str(self._soup)

        self._load(new_source)
        return True

    def absorb(self, markup: str) -> bool:
        """
        Replace the tree content with markup reported by the editing surface.

        Returns True when the image set kept its size (handles still line up),
        False when images were added or removed.
        """
        before = self.image_count()
        self._load(markup)
        return self.image_count() == before
