"""Completion failure types raised by completion adapters."""

from __future__ import annotations

from typing import Optional


class CompletionError(Exception):
    """Base class for failures of the completion call."""


class RemoteCompletionError(CompletionError):
    """The provider could not be reached or answered with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedCompletionError(CompletionError):
    """The provider answered, but not with a usable completion."""
