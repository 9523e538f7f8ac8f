"""
Translator Error Hierarchy
==========================

Exceptions and the diagnostics sink used by the statement translator.

None of these exceptions are raised while translating. The translator
follows a best-effort policy: each problem is turned into an exception
object, handed to a DiagnosticCollector and translation carries on until
end of input. Only the facade raises, and only TranslationFailedError
when strict mode was requested.

Exception Hierarchy
-------------------
TranslatorError
├── TranslationSyntaxError
│   ├── InvalidCharacterError - ERROR token from the scanner
│   ├── UnexpectedTokenError - token cannot start or continue a rule
│   └── MissingTokenError - required punctuation is absent
└── TranslationFailedError - aggregate report (strict mode)
"""

import logging
from typing import List, Optional

from tinyc.errors import TinyCError, SourceLocation

logger = logging.getLogger(__name__)


class TranslatorError(TinyCError):
    """Base exception for all translator errors."""
    pass


class TranslationFailedError(TranslatorError):
    """
    Aggregate error containing every collected diagnostic.

    The message is a ready-made report from DiagnosticCollector.report(),
    so no location prefix is added.
    """

    def _format_message(self) -> str:
        return self.message


# =============================================================================
# Syntax Errors
# =============================================================================

class TranslationSyntaxError(TranslatorError):
    """
    A grammar rule met a token it cannot start or continue with.

    Examples:
        - Missing '(' after 'if'
        - Missing identifier after a type keyword
        - Unexpected token at statement level
    """
    pass


class InvalidCharacterError(TranslationSyntaxError):
    """
    Unrecognised character in the source text.

    The scanner never fails: it wraps the character in an ERROR token.
    The translator reports it with this class when it reaches it.
    """

    def __init__(
        self,
        char: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.char = char
        code = f" (0x{ord(char):02X})" if len(char) == 1 else ""
        super().__init__(
            f"invalid character '{char}'{code}",
            location=location,
            source_line=source_line,
        )


class UnexpectedTokenError(TranslationSyntaxError):
    """Token that does not fit the grammar at this point."""

    def __init__(
        self,
        found: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        context: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected

        if context:
            message = f"unexpected token {context}"
        elif found:
            message = f"unexpected token '{found}'"
        else:
            message = "unexpected end of input"

        hint = f"expected {expected}" if expected else None

        super().__init__(
            message,
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MissingTokenError(TranslationSyntaxError):
    """
    Required token is missing.

    Raised when a required token (like '(' or ')') or an identifier is
    not found where the grammar needs it.
    """

    def __init__(
        self,
        expected: str,
        after: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        self.after = after
        message = f"expected {expected}"
        if after:
            message += f" after {after}"
        super().__init__(
            message,
            location=location,
            source_line=source_line,
        )


# =============================================================================
# Diagnostics Sink
# =============================================================================

class DiagnosticCollector:
    """
    Collects syntax errors for batch reporting.

    This is the diagnostics sink of the translator. Errors are kept in
    the order they were found and never written to the instruction
    stream.

    Example:
        diagnostics = DiagnosticCollector()
        Translator(scanner, emitter, diagnostics).translate()

        if diagnostics.has_errors():
            print(diagnostics.report())
    """

    def __init__(self):
        self.errors: List[TranslatorError] = []

    def add(self, error: TranslatorError) -> None:
        """Record an error."""
        logger.debug(f"Recorded diagnostic at {error.location or '<unknown>'}: {error.message}")
        self.errors.append(error)

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def error_count(self) -> int:
        """Return the number of collected errors."""
        return len(self.errors)

    @property
    def messages(self) -> List[str]:
        """One-line messages of every collected error, in order."""
        return [error.message for error in self.errors]

    def report(self) -> str:
        """Format all errors for display."""
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        error_word = "error" if len(self.errors) == 1 else "errors"
        lines.append(f"\n{len(self.errors)} {error_word}")

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all collected errors."""
        self.errors.clear()

    def raise_if_errors(self) -> None:
        """Raise a TranslationFailedError if any errors were collected."""
        if self.has_errors():
            raise TranslationFailedError(self.report())
