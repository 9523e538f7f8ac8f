"""
tinyc Translator
================

Single-pass translator from the tinyc statement language to a linear
pseudo-assembly text.

Pipeline
--------
    Source text -> Scanner -> Translator -> InstructionEmitter

The translator recognises statements with one token of lookahead and
emits instructions as it goes; there is no syntax tree, symbol table or
optimisation pass.

Usage
-----
>>> from tinyc.translator import translate_source
>>> print(translate_source("int x = 10;"), end="")
load 10 into eax
mov x, eax

Language Subset
---------------
- Declarations: int x;  float y = 1.5;
- Assignment: x = y - 1;
- Calls without arguments: reset();
- if (cond) block [else block], while (cond) block
- print(expr);
- Expressions: one operand, optionally followed by one of > - + and
  a second operand
"""

from tinyc.translator.compiler import (
    TinyCTranslator,
    TranslatorOptions,
    TranslationResult,
    DEMO_PROGRAM,
    translate_source,
    translate_file,
)
from tinyc.translator.errors import (
    TranslatorError,
    TranslationSyntaxError,
    TranslationFailedError,
    InvalidCharacterError,
    UnexpectedTokenError,
    MissingTokenError,
    DiagnosticCollector,
)
from tinyc.translator.lexer import Scanner, Token, TokenKind, KEYWORDS, OPERATORS
from tinyc.translator.parser import Translator, RecoveryMode
from tinyc.translator.emitter import InstructionEmitter

__all__ = [
    # Main API
    "TinyCTranslator",
    "TranslatorOptions",
    "TranslationResult",
    "DEMO_PROGRAM",
    "translate_source",
    "translate_file",
    # Errors
    "TranslatorError",
    "TranslationSyntaxError",
    "TranslationFailedError",
    "InvalidCharacterError",
    "UnexpectedTokenError",
    "MissingTokenError",
    "DiagnosticCollector",
    # Scanner
    "Scanner",
    "Token",
    "TokenKind",
    "KEYWORDS",
    "OPERATORS",
    # Translator
    "Translator",
    "RecoveryMode",
    # Emitter
    "InstructionEmitter",
]
