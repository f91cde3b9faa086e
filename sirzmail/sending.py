"""
Test-send simulation and mail client handoff.

Nothing is delivered: the "send" waits for a moment and reports success.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import quote

from sirzmail.constants import SEND_SIMULATION_SECONDS

logger = logging.getLogger(__name__)

# Characters encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


def build_mailto_link(recipient: str, subject: str) -> str:
    return f"mailto:{recipient}?subject={quote(subject, safe=_URI_COMPONENT_SAFE)}"


def validate_send_form(recipient: str, subject: str) -> Optional[str]:
    if not recipient or not recipient.strip():
        return 'Recipient is required'
    if '@' not in recipient:
        return 'Recipient must be an email address'
    if not subject or not subject.strip():
        return 'Subject is required'
    return None


class SendSimulation:
    """Tracks one simulated send; the trigger stays disabled while `is_sending`."""

    def __init__(
        self,
        delay: float = SEND_SIMULATION_SECONDS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._delay = delay
        self._sleep = sleep
        self.is_sending = False
        self.success = False

    def reset(self):
        self.is_sending = False
        self.success = False

    async def send(self, recipient: str, subject: str) -> bool:
        """Pretend to send; returns False if a send is already running."""
        if self.is_sending:
            return False
        self.is_sending = True
        self.success = False
        logger.info(f"Simulating test send to {recipient} ({subject!r})")
        try:
            await self._sleep(self._delay)
        finally:
            self.is_sending = False
        self.success = True
        return True
