"""Exception types shared by the TSV loader and the layout extractor."""

from __future__ import annotations

from typing import Optional


class HyperpaperError(Exception):
    """Base class for errors raised by hyperpaper."""


class FormatError(HyperpaperError, ValueError):
    """Raised when an OCR export or layout document is malformed.

    ``line`` is the 1-based input line the problem was found on (when known)
    and ``field`` the column or attribute name involved.
    """

    def __init__(
        self,
        message: str,
        *,
        line: Optional[int] = None,
        field: Optional[str] = None,
    ) -> None:
        self.line = line
        self.field = field
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class InternalConsistencyError(HyperpaperError, RuntimeError):
    """Raised when the XML pull parser yields a token kind we never asked for."""
