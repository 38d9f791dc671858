"""
Interfaces of the external collaborators the engine talks to.

Key patterns:
- Protocol-based dependency injection (OCR, reminders)
- Result values for expected failures such as undecodable images
"""

from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Generic, Protocol, TypeVar
from uuid import UUID

ValueT = TypeVar("ValueT")
ErrorT = TypeVar("ErrorT", bound=BaseException)


class Result(Generic[ValueT, ErrorT]):
    """
    Outcome of a collaborator call that can fail in an expected way.

    An OCR service that cannot decode an image returns `Result.err(...)`;
    the engine turns that into a zero-confidence extraction instead of raising.
    """

    __slots__ = ("_value", "_error")

    def __init__(self, value: ValueT | None = None, error: ErrorT | None = None) -> None:
        if (value is None) == (error is None):
            raise ValueError("Result holds exactly one of value or error")
        self._value = value
        self._error = error

    @classmethod
    def ok(cls, value: ValueT) -> "Result[ValueT, ErrorT]":
        return cls(value=value)

    @classmethod
    def err(cls, error: ErrorT) -> "Result[ValueT, ErrorT]":
        return cls(error=error)

    def is_err(self) -> bool:
        return self._error is not None

    def unwrap(self) -> ValueT:
        """The value; re-raises the stored error on a failed result."""
        if self._error is not None:
            raise self._error
        assert self._value is not None
        return self._value

    def unwrap_err(self) -> ErrorT:
        if self._error is None:
            raise ValueError("unwrap_err() called on a successful result")
        return self._error


class ImageDecodeError(Exception):
    """The OCR collaborator could not turn the bytes into an image."""


def join_recognized_lines(lines: Iterable[str]) -> str:
    """Line-join OCR observations the way the engine expects them."""
    return "\n".join(lines)


class TextRecognizer(Protocol):
    """Image-to-text service."""

    async def recognize_text(self, image_bytes: bytes) -> Result[str, Exception]:
        """
        Recognize the text in an image.

        Returns:
            Result[str, Exception]: the recognized lines joined with newlines,
            or an ImageDecodeError when the bytes are not a usable image.
        """
        ...


class ReminderScheduler(Protocol):
    """Local notification service; fire times are handed through unchanged."""

    def schedule(
        self,
        id: UUID,
        title: str,
        body: str,
        fire_at: datetime,
        lead_time: timedelta,
    ) -> None: ...

    def cancel(self, id: UUID) -> None: ...
