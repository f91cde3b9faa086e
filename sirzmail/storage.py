"""
Template storage for Sirz Mail.

Saved templates live in a single JSON file:

    {"sirz_saved_templates": [{"id": ..., "name": ..., "content": ..., "createdAt": ...}, ...]}

The list is read once when the library starts and rewritten in full after
every change. A missing or unreadable file means "no saved templates".
"""

import json
import logging
from pathlib import Path
from typing import List, Optional, Union

from sirzmail.constants import STORAGE_KEY
from sirzmail.models import SavedTemplate
from sirzmail.paths import get_storage_path

logger = logging.getLogger(__name__)


class TemplateStore:
    """JSON-file persistence for the saved template list."""

    def __init__(self, path: Optional[Union[str, Path]] = None, key: str = STORAGE_KEY):
        self.path = Path(path) if path is not None else get_storage_path()
        self.key = key

    def load(self) -> List[SavedTemplate]:
        if not self.path.exists():
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            logger.warning(f"Failed to load saved templates from {self.path}: {e}")
            return []

        records = data.get(self.key, []) if isinstance(data, dict) else None
        if not isinstance(records, list):
            logger.warning(f"Saved templates in {self.path} are not a list; starting empty")
            return []

        templates = []
        for record in records:
            try:
                templates.append(SavedTemplate.from_dict(record))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping malformed saved template {record!r:.80}: {e}")
        return templates

    def save(self, templates: List[SavedTemplate]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {self.key: [t.to_dict() for t in templates]}
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
