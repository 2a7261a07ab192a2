from __future__ import annotations


class ValidationError(ValueError):
    """Rejected input; raised before anything is written."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field
