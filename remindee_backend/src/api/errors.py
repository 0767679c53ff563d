from __future__ import annotations

from typing import Any, Optional


class RemindeeError(Exception):
    """Base class for errors raised by the situation engine and its adapters."""

    error_name = "RemindeeError"

    def __init__(self, message: str, detail: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


# PUBLIC_INTERFACE
class ParseError(RemindeeError):
    """
    Persisted JSON did not match the expected shape.

    `detail` carries the pydantic error list when validation (rather than JSON
    decoding) failed. Callers decide whether to fall back to an empty store.
    """

    error_name = "ParseError"


# PUBLIC_INTERFACE
class NotFound(RemindeeError):
    """A situation, todo or sub-todo id was not present in the store."""

    error_name = "NotFound"


# PUBLIC_INTERFACE
class PersistenceError(RemindeeError):
    """The key-value backend failed to read or write a blob."""

    error_name = "PersistenceError"
