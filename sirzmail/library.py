"""
Saved template library: the newest-first collection behind the "Saved" tab.
"""

import logging
from typing import Awaitable, Callable, List, Optional

from sirzmail.models import SavedTemplate
from sirzmail.storage import TemplateStore

logger = logging.getLogger(__name__)


class TemplateLibrary:
    """
    In-memory list of saved templates, persisted through a TemplateStore.

    Loaded once on construction; every add/delete rewrites the store.
    """

    def __init__(self, store: TemplateStore):
        self._store = store
        self._templates: List[SavedTemplate] = store.load()
        self._on_change: Optional[Callable[[List[SavedTemplate]], None]] = None

    @property
    def templates(self) -> List[SavedTemplate]:
        return list(self._templates)

    def set_on_change(self, callback: Callable[[List[SavedTemplate]], None]):
        self._on_change = callback

    def get(self, template_id: str) -> Optional[SavedTemplate]:
        return next((t for t in self._templates if t.id == template_id), None)

    def save(self, name: str, content: str) -> SavedTemplate:
        """Snapshot `content` under `name` at the top of the list."""
        if not name or not name.strip():
            raise ValueError("Template name is required")
        template = SavedTemplate(name=name, content=content)
        self._persist([template] + self._templates)
        logger.info(f"Saved template '{name}' ({template.id})")
        return template

    async def delete(self, template_id: str, confirm: Callable[[], Awaitable[bool]]) -> bool:
        """
        Remove the template with `template_id` once the user confirms.

        Returns True only when a template was removed.
        """
        if self.get(template_id) is None:
            return False
        if not await confirm():
            return False
        self._persist([t for t in self._templates if t.id != template_id])
        logger.info(f"Deleted template {template_id}")
        return True

    def _persist(self, templates: List[SavedTemplate]):
        # Only adopt the new list once it is on disk
        self._store.save(templates)
        self._templates = templates
        if self._on_change:
            self._on_change(self.templates)
