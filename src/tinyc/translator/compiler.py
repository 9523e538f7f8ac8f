"""
tinyc Translator Main Module
============================

This module provides the driver-facing interface of the translator.
It wires the pipeline together for one program:

    Source -> Scanner -> Translator -> InstructionEmitter

Usage
-----
Command line:
    $ tinyc prog.tc -o prog.asm

Programmatic:
    >>> from tinyc.translator import translate_source
    >>> print(translate_source("float y;"), end="")
    var y

Configuration
-------------
TranslatorOptions controls label naming, error recovery and strictness.
Options can be built directly or read from the environment with
TranslatorOptions.from_env():

    TINYC_UNIQUE_LABELS   "1"/"true"/"yes" enables label_N/end_label_N
    TINYC_RECOVERY        "synchronize" or "token"
    TINYC_STRICT          "1"/"true"/"yes" raises on any diagnostic
"""

import io
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from tinyc.translator.lexer import Scanner, TokenKind
from tinyc.translator.parser import Translator, RecoveryMode
from tinyc.translator.emitter import InstructionEmitter, TextSink
from tinyc.translator.errors import DiagnosticCollector

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")

# The program the original command-line driver always translated
DEMO_PROGRAM = """\
int x = 10;
int y = 20;
if (x > y) {
    print(x);
} else {
    print(y);
}
while (x > 0) {
    x = x - 1;
}
"""


@dataclass
class TranslatorOptions:
    """
    Translator configuration options.

    Attributes:
        unique_labels: Suffix labels with a counter (label_1, end_label_1, ...)
                       instead of the fixed 'label' / 'end_label' names.
        recovery: Error recovery policy after a syntax error.
        strict: Raise TranslationFailedError when any diagnostic was collected.
        keywords: Keyword table override (None uses the default table).
        operators: Operator table override (None uses the default table).
    """
    unique_labels: bool = False
    recovery: RecoveryMode = RecoveryMode.SYNCHRONIZE
    strict: bool = False
    keywords: Optional[Mapping[str, TokenKind]] = field(default=None, repr=False)
    operators: Optional[Mapping[str, TokenKind]] = field(default=None, repr=False)

    @classmethod
    def from_env(cls) -> "TranslatorOptions":
        """
        Create TranslatorOptions from environment variables.

        Unrecognised values are ignored and the default kept.
        """
        options = cls()

        if unique := os.environ.get("TINYC_UNIQUE_LABELS"):
            options.unique_labels = unique.strip().lower() in _TRUE_VALUES

        if recovery := os.environ.get("TINYC_RECOVERY"):
            try:
                options.recovery = RecoveryMode(recovery.strip().lower())
            except ValueError:
                logger.debug(f"Ignoring invalid TINYC_RECOVERY={recovery!r}")

        if strict := os.environ.get("TINYC_STRICT"):
            options.strict = strict.strip().lower() in _TRUE_VALUES

        return options


@dataclass
class TranslationResult:
    """
    Result of a translation.

    Attributes:
        filename: Source filename
        success: True if no diagnostics were collected
        assembly: The emitted instruction text (newline-terminated lines)
        instructions: The emitted lines without newlines
        diagnostics: Collected syntax errors
        token_count: Number of tokens pulled from the scanner
    """
    filename: str = ""
    success: bool = False
    assembly: str = ""
    instructions: list = field(default_factory=list)
    diagnostics: list = field(default_factory=list)
    token_count: int = 0


class TinyCTranslator:
    """
    Driver for translating tinyc programs.

    Example:
        translator = TinyCTranslator()
        result = translator.translate_source("int x = 10;")
        print(result.assembly)

    Attributes:
        options: Translator configuration options
    """

    def __init__(self, options: Optional[TranslatorOptions] = None):
        self.options = options or TranslatorOptions()
        self._diagnostics = DiagnosticCollector()

    @property
    def diagnostics(self) -> DiagnosticCollector:
        """Diagnostics of the most recent translation."""
        return self._diagnostics

    def translate_source(
        self,
        source: str,
        filename: str = "<input>",
        sink: Optional[TextSink] = None,
    ) -> TranslationResult:
        """
        Translate program text.

        Args:
            source: Program text
            filename: Source filename for diagnostics
            sink: Optional text stream that receives each line as emitted

        Returns:
            TranslationResult with the instructions and diagnostics

        Raises:
            TranslationFailedError: In strict mode, if any diagnostic was collected
        """
        self._diagnostics.clear()

        scanner = Scanner(
            source,
            filename,
            keywords=self.options.keywords,
            operators=self.options.operators,
        )
        emitter = InstructionEmitter(sink, unique_labels=self.options.unique_labels)
        translator = Translator(
            scanner,
            emitter,
            self._diagnostics,
            recovery=self.options.recovery,
        )
        translator.translate()

        result = TranslationResult(
            filename=filename,
            success=not self._diagnostics.has_errors(),
            assembly=emitter.getvalue(),
            instructions=list(emitter.lines),
            diagnostics=list(self._diagnostics.errors),
            token_count=translator.token_count,
        )

        if self.options.strict:
            self._diagnostics.raise_if_errors()

        return result

    def translate_file(self, filepath: str, sink: Optional[TextSink] = None) -> TranslationResult:
        """
        Translate a program file.

        Raises:
            FileNotFoundError: If the source file does not exist
            TranslationFailedError: In strict mode, on any diagnostic
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8")
        return self.translate_source(source, str(filepath), sink)


# =============================================================================
# Convenience Functions
# =============================================================================

def _log_diagnostics(result: TranslationResult) -> None:
    for error in result.diagnostics:
        logger.warning(str(error))


def translate_source(source: str, options: Optional[TranslatorOptions] = None) -> str:
    """
    Translate program text and return the instruction text.

    Diagnostics are not returned; each one is logged at WARNING level.
    Use TinyCTranslator to inspect them.

    Example:
        >>> translate_source("int x = 10;")
        'load 10 into eax\\nmov x, eax\\n'
    """
    result = TinyCTranslator(options).translate_source(source)
    _log_diagnostics(result)
    return result.assembly


def translate_file(
    filepath: str,
    output_path: Optional[str] = None,
    options: Optional[TranslatorOptions] = None,
) -> str:
    """
    Translate a program file, optionally writing the instructions to a file.

    Diagnostics are logged at WARNING level, as in translate_source().

    Returns:
        The instruction text
    """
    sink = io.StringIO()
    result = TinyCTranslator(options).translate_file(filepath, sink)
    _log_diagnostics(result)
    assembly = sink.getvalue()

    if output_path:
        Path(output_path).write_text(assembly, encoding="utf-8")

    return assembly
