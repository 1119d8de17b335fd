"""Parser error types."""

from __future__ import annotations


class ParseError(Exception):
    """Raised when DOT source cannot be parsed."""

    def __init__(
        self, message: str, line: int | None = None, column: int | None = None
    ):
        self.line = line
        self.column = column
        if line is not None:
            message = f"line {line}, column {column}: {message}"
        super().__init__(message)
