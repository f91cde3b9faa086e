"""Small helpers shared across Sirz Mail modules."""

from typing import Any, Callable


async def run_inline(func: Callable[..., Any], *args: Any) -> Any:
    """
    Awaitable stand-in for nicegui.run.io_bound that calls `func` on the event loop.

    Used when no NiceGUI app is running (tests, scripts).
    """
    return func(*args)
