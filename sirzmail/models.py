"""Data models for Sirz Mail."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class LoadingState(str, Enum):
    IDLE = 'IDLE'
    GENERATING = 'GENERATING'
    SUCCESS = 'SUCCESS'
    ERROR = 'ERROR'


class EmailType(str, Enum):
    NEWSLETTER = 'Newsletter'
    PROMOTIONAL = 'Promotional'
    TRANSACTIONAL = 'Transactional'
    WELCOME = 'Welcome Series'
    COLD_OUTREACH = 'Cold Outreach'


EMAIL_TONES = [
    'Professional',
    'Friendly',
    'Urgent',
    'Witty',
    'Empathetic',
    'Minimalist',
]

EMAIL_TYPES_LIST = [t.value for t in EmailType]


@dataclass
class EmailOptions:
    """Input to a generation call, collected by the sidebar form."""
    topic: str = ''
    audience: str = ''
    tone: str = EMAIL_TONES[0]
    type: EmailType = EmailType.NEWSLETTER
    additional_context: str = ''

    def validation_error(self) -> str | None:
        """Return a user-facing message when the options cannot be submitted."""
        if not self.topic or not self.topic.strip():
            return 'Topic is required'
        if self.tone not in EMAIL_TONES:
            return f"Unknown tone '{self.tone}'"
        try:
            EmailType(self.type)
        except ValueError:
            return f"Unknown email type '{self.type}'"
        return None


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class SavedTemplate:
    """
    A named snapshot of the editor document.

    Serialized with the keys id, name, content and createdAt (epoch milliseconds).
    """
    name: str
    content: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: int = field(default_factory=_now_ms)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'content': self.content,
            'createdAt': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SavedTemplate':
        """Build a record from storage; raises KeyError/TypeError/ValueError on malformed data."""
        template_id = data['id']
        name = data['name']
        content = data['content']
        created_at = data.get('createdAt', 0)
        if not isinstance(template_id, str) or not template_id:
            raise ValueError('template id must be a non-empty string')
        if not isinstance(name, str) or not isinstance(content, str):
            raise TypeError('template name and content must be strings')
        if isinstance(created_at, bool) or not isinstance(created_at, (int, float)):
            raise TypeError('createdAt must be a number')
        return cls(name=name, content=content, id=template_id, created_at=int(created_at))
