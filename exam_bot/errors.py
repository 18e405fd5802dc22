"""Exception hierarchy shared by the Exam Bot client components."""

from __future__ import annotations

from typing import Optional


class ExamBotError(Exception):
    """Base class for every error raised by the client."""


class ConfigError(ExamBotError):
    """Raised when the client configuration cannot be assembled."""


class ValidationError(ExamBotError):
    """An action was blocked locally before any network call was made."""


class TransportError(ExamBotError):
    """The backend could not be reached or answered with something unusable."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DomainRejection(ExamBotError):
    """The backend answered but explicitly refused the request."""


__all__ = [
    "ConfigError",
    "DomainRejection",
    "ExamBotError",
    "TransportError",
    "ValidationError",
]
