"""Exceptions raised by the agenda collaborators."""
from __future__ import annotations

import typing as t

if t.TYPE_CHECKING:
    from agenda_builder.models import ValidationError


class GenerationError(RuntimeError):
    """The chat-completion call failed or returned nothing."""


class PersistenceError(RuntimeError):
    """A record store operation failed."""

    def __init__(self, message: str, status_code: t.Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AgendaValidationError(ValueError):
    """Raised when an agenda with validation errors is handed off for saving."""

    def __init__(self, errors: list[ValidationError], messages: list[str]) -> None:
        super().__init__("Validation errors:\n" + "\n".join(messages))
        self.errors = errors
        self.messages = messages
