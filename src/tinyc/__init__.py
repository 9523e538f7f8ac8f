"""
tinyc - Tiny Statement Language to Pseudo-Assembly Translator
=============================================================

This package translates programs written in a tiny imperative language
(int/float declarations, assignment, if/else, while, print and
zero-argument calls) into a human-readable pseudo-assembly listing.

Main Components
---------------
- **translator**: scanner, recursive descent translator, instruction emitter
- **cli**: the `tinyc` command-line tool

Quick Start
-----------
    >>> from tinyc import translate_source
    >>> print(translate_source("float y;"), end="")
    var y

Or from the command line:
    $ tinyc prog.tc -o prog.asm
    $ tinyc                      # translate the built-in demo to output.asm
"""

__version__ = "1.0.0"

from tinyc.errors import TinyCError, SourceLocation
from tinyc.translator import (
    TinyCTranslator,
    TranslatorOptions,
    TranslationResult,
    RecoveryMode,
    translate_source,
    translate_file,
)

__all__ = [
    "__version__",
    "TinyCError",
    "SourceLocation",
    "TinyCTranslator",
    "TranslatorOptions",
    "TranslationResult",
    "RecoveryMode",
    "translate_source",
    "translate_file",
]
