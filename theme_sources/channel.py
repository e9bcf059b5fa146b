"""
Request/response events exchanged with the UI process.

Every request carries a caller-chosen correlation id and is answered by
exactly one response event tagged with the same id.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Protocol

LOGGER = logging.getLogger(__name__)


class ThemeEvent(str, Enum):
    """Event names on the theme manager channel."""

    # Requests
    LIST_THEMES = "theme-manager-list-themes"
    ACTIVE_THEME_INFO = "theme-manager-active-theme-info"
    ACTIVATE_THEME = "theme-manager-activate-theme"

    # Responses
    THEMES_LIST = "theme-manager-themes-list"
    THEME_INFO = "theme-manager-active-theme-info"  # alias of the request name
    THEME_ACTIVATED = "theme-manager-theme-activated"
    ERROR = "theme-manager-error"


class Sender(Protocol):
    """The requesting side of the channel."""

    def send(self, event: ThemeEvent, request_id: str, payload: Any) -> None:
        ...


@dataclass
class Response:
    event: ThemeEvent
    request_id: str
    payload: Any

    @property
    def is_error(self) -> bool:
        return self.event == ThemeEvent.ERROR


class ResponseCollector:
    """Sender that records responses and lets callers await them by id."""

    def __init__(self) -> None:
        self.responses: list[Response] = []
        self._waiters: dict[str, asyncio.Future] = {}

    def send(self, event: ThemeEvent, request_id: str, payload: Any) -> None:
        response = Response(event=ThemeEvent(event), request_id=request_id, payload=payload)
        self.responses.append(response)
        waiter = self._waiters.pop(request_id, None)
        if waiter is not None and not waiter.done():
            waiter.set_result(response)

    async def wait_for(self, request_id: str) -> Response:
        """Return the response for ``request_id``, waiting until it is sent."""
        for response in self.responses:
            if response.request_id == request_id:
                return response
        waiter = asyncio.get_running_loop().create_future()
        self._waiters[request_id] = waiter
        return await waiter


Handler = Callable[..., Awaitable[None]]


class EventChannel:
    """
    In-process event channel.

    Mirrors the listener API of a host IPC transport: handlers are
    registered per event name and invoked as ``handler(sender, *args)``.
    Each emitted request runs as its own task; there is no ordering or
    mutual exclusion between requests.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Handler]] = {}
        self._tasks: set[asyncio.Task] = set()

    def on(self, event: ThemeEvent, handler: Handler) -> None:
        self._listeners.setdefault(ThemeEvent(event).value, []).append(handler)

    def remove_listener(self, event: ThemeEvent, handler: Handler) -> None:
        handlers = self._listeners.get(ThemeEvent(event).value, [])
        if handler in handlers:
            handlers.remove(handler)

    def listener_count(self, event: ThemeEvent) -> int:
        return len(self._listeners.get(ThemeEvent(event).value, []))

    def emit(self, event: ThemeEvent, sender: Sender, *args: Any) -> list[asyncio.Task]:
        """Dispatch a request to every registered handler."""
        handlers = list(self._listeners.get(ThemeEvent(event).value, []))
        if not handlers:
            LOGGER.warning(f"No listeners for event: {ThemeEvent(event).value}")
        loop = asyncio.get_running_loop()
        tasks = []
        for handler in handlers:
            task = loop.create_task(handler(sender, *args))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            tasks.append(task)
        return tasks

    async def drain(self) -> None:
        """Wait for every in-flight request handler to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))


__all__ = [
    "EventChannel",
    "Handler",
    "Response",
    "ResponseCollector",
    "Sender",
    "ThemeEvent",
]
