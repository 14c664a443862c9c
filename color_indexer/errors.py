"""Structured error types with recovery suggestions.

Parse failures and unresolved references are never errors: they produce no
value. These exceptions cover the conditions a host has to hear about, such
as an unreadable configuration file or a stylesheet that cannot be read.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Categories of errors for grouping and exit handling."""

    CONFIGURATION = "configuration"
    FILE_SYSTEM = "file_system"
    INDEXING = "indexing"


@dataclass
class ColorIndexerError(Exception):
    """Base class for structured errors.

    Attributes:
        category: Error category for grouping.
        message: Human-readable error message.
        suggestion: Optional actionable recovery suggestion.
        details: Optional additional details dict.
        exit_code: Exit code to use when this error terminates the CLI.
    """

    category: ErrorCategory
    message: str
    suggestion: str | None = None
    details: dict[str, Any] | None = field(default_factory=dict)
    exit_code: int = 1

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def format(self) -> str:
        """Format the error for display, including the suggestion."""
        lines = [f"Error: {self.message}"]
        if self.suggestion:
            lines.append(f"Suggestion: {self.suggestion}")
        if self.details:
            for key, value in self.details.items():
                lines.append(f"  {key}: {value}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.format()


class ConfigurationError(ColorIndexerError):
    """Invalid or unreadable configuration."""

    def __init__(self, message: str, path: str | os.PathLike | None = None):
        super().__init__(
            category=ErrorCategory.CONFIGURATION,
            message=message,
            suggestion="Check the configuration file for invalid keys or values",
            details={"path": str(path)} if path else {},
            exit_code=2,
        )


class StylesheetReadError(ColorIndexerError):
    """A stylesheet could not be read from disk."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            category=ErrorCategory.FILE_SYSTEM,
            message=f"Cannot read stylesheet: {path}",
            suggestion="Check that the file exists, is readable and is UTF-8 text",
            details={"path": path, "reason": reason},
        )
        self.path = path
        self.reason = reason
