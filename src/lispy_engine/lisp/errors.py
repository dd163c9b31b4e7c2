"""Exceptions raised by the lispy engine and its collaborators."""

from __future__ import annotations


class LispyError(RuntimeError):
    """Base class for engine errors."""


class OracleUnavailable(LispyError):
    """Raised when a syntax oracle cannot classify the cursor position.

    ``query`` names the failed question (``"string"`` or ``"comment"``).
    """

    def __init__(self, message: str, *, query: str | None = None) -> None:
        super().__init__(message)
        self.query = query


__all__ = ["LispyError", "OracleUnavailable"]
