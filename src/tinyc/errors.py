"""
tinyc Error Hierarchy
=====================

This module defines the base of the exception hierarchy for tinyc.
All exceptions inherit from TinyCError, allowing callers to catch all
tinyc errors with a single except clause if desired.

Exception Hierarchy
-------------------
TinyCError (base)
└── TranslatorError (see tinyc.translator.errors)
    ├── TranslationSyntaxError - grammar violations
    │   ├── InvalidCharacterError - unrecognised character (ERROR token)
    │   ├── UnexpectedTokenError - token cannot start/continue a rule
    │   └── MissingTokenError - required punctuation absent
    └── TranslationFailedError - aggregate raised in strict mode

Error messages follow this format:
    filename:line:column: error: description
    source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source text for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        offset: Character offset from the start of the buffer (0-indexed)
    """
    filename: str
    line: int
    column: int
    offset: int = 0

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Base Exception Class
# =============================================================================

class TinyCError(Exception):
    """
    Base exception for all tinyc errors.

    Provides the common message layout: location prefix, the offending
    source line with a caret under the column, and an optional hint.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            prog.tc:1:12: error: invalid character '#'
                int x = 10 # ;
                           ^
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)
