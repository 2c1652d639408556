"""Exception types raised by the generation pipeline."""

from __future__ import annotations


class InterviewPrepError(Exception):
    """Base class for errors surfaced to callers."""


class TransportError(InterviewPrepError):
    """Every attempt to reach the completion endpoint failed.

    *cause* is the error from the last attempt.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ParseError(InterviewPrepError):
    """Model output could not be coerced into the expected shape."""
