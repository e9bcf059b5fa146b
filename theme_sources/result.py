"""Tagged results for calls into external collaborators.

Request handlers never inspect raw exceptions. Each collaborator call is run
through :func:`capture`, which yields either ``Ok(value)`` or
``Err(message)``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Generic, TypeVar, Union

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    message: str

    @property
    def ok(self) -> bool:
        return False

    def to_payload(self) -> dict[str, str]:
        return {"message": self.message}


Result = Union[Ok[T], Err]


def error_message(exc: BaseException) -> str:
    """Normalize an exception into the message reported to callers."""
    text = str(exc)
    return text if text else type(exc).__name__


async def capture(awaitable: Awaitable[T]) -> Result[T]:
    """Await a collaborator call and fold any failure into an ``Err``."""
    try:
        return Ok(await awaitable)
    except Exception as e:
        LOGGER.debug(f"Collaborator call failed: {e!r}")
        return Err(error_message(e))


__all__ = ["Err", "Ok", "Result", "capture", "error_message"]
