"""Base error definitions for euterpe packages."""

from typing import Any, Dict


class EuterpeError(Exception):
    """Base exception for all euterpe errors.

    Carries a human-readable message and arbitrary structured context
    (paths, ids, ...) which is logged alongside it.
    """

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value!r}" for key, value in self.context.items())
        return f"{self.message} ({details})"
