"""
tinyc Statement Translator
==========================

This module implements a single-pass recursive descent translator. It
pulls tokens from a Scanner one at a time and, as each grammar rule is
recognised, immediately writes pseudo-assembly through an
InstructionEmitter. No syntax tree is built: every name and operator the
emitter needs is known at the moment its token is consumed.

Grammar (Simplified EBNF)
-------------------------
program      ::= statement*
statement    ::= declaration | assign_call | if_stmt | while_stmt | print_stmt
declaration  ::= TYPE IDENTIFIER (';' | '=' expression ';')
assign_call  ::= IDENTIFIER ('=' expression ';' | '(' tokens* ')' ';')
if_stmt      ::= 'if' '(' expression ')' block ('else' block)?
while_stmt   ::= 'while' '(' expression ')' block
print_stmt   ::= 'print' '(' expression ')' ';'?
block        ::= '{' statement* '}' | statement
expression   ::= primary (('>' | '-' | '+') TOKEN)?
primary      ::= IDENTIFIER | INT_LITERAL | FLOAT_LITERAL

The expression form is deliberately flat: one primary and at most one
operator. There is no precedence and no parenthesised sub-expression.

Error Recovery
--------------
Syntax errors are reported to a DiagnosticCollector and translation
continues. How much input is skipped afterwards depends on RecoveryMode:

- SYNCHRONIZE: skip to the next statement boundary (a statement keyword,
  identifier, type keyword or '}' stays, a ';' is consumed). An
  identifier directly after an identifier or number is skipped too.
- TOKEN: dispatch and block levels drop the offending token only;
  errors inside a rule skip nothing further.

Example Usage
-------------
>>> from tinyc.translator.lexer import Scanner
>>> from tinyc.translator.parser import Translator
>>> translator = Translator(Scanner("int x = 10;"))
>>> translator.translate()
>>> translator.emitter.lines
['load 10 into eax', 'mov x, eax']
"""

import logging
from enum import Enum
from typing import Optional

from tinyc.translator.lexer import Scanner, Token, TokenKind
from tinyc.translator.emitter import InstructionEmitter
from tinyc.translator.errors import (
    DiagnosticCollector,
    TranslatorError,
    InvalidCharacterError,
    UnexpectedTokenError,
    MissingTokenError,
)

logger = logging.getLogger(__name__)


class RecoveryMode(Enum):
    """How far the translator skips after reporting a syntax error."""
    SYNCHRONIZE = "synchronize"
    TOKEN = "token"


# Tokens that can start a statement (type keywords are checked separately)
STATEMENT_START = (
    TokenKind.IDENTIFIER,
    TokenKind.IF,
    TokenKind.WHILE,
    TokenKind.PRINT,
)

# Operator kind -> InstructionEmitter method
BINARY_OPERATORS = {
    TokenKind.GREATER_THAN: "compare",
    TokenKind.MINUS: "subtract",
    TokenKind.PLUS: "add",
}


class Translator:
    """
    Recursive descent translator with direct instruction emission.

    The translator keeps exactly one token of lookahead in `current`.
    At the start of every rule `current` is the first unconsumed token of
    that rule; advancing always fetches a fresh token from the scanner
    and overwrites it.

    Attributes:
        scanner: Token source
        emitter: Instruction sink
        diagnostics: Syntax error sink
        recovery: Error recovery policy
        current: The lookahead token
        previous: The most recently consumed token
        token_count: Number of tokens pulled from the scanner
    """

    def __init__(
        self,
        scanner: Scanner,
        emitter: Optional[InstructionEmitter] = None,
        diagnostics: Optional[DiagnosticCollector] = None,
        recovery: RecoveryMode = RecoveryMode.SYNCHRONIZE,
    ):
        """
        Initialize the translator and prime the lookahead.

        Args:
            scanner: Scanner over the program text
            emitter: Where instructions go (in-memory emitter if None)
            diagnostics: Where syntax errors go (new collector if None)
            recovery: Error recovery policy
        """
        self.scanner = scanner
        self.emitter = emitter if emitter is not None else InstructionEmitter()
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticCollector()
        self.recovery = recovery
        self.token_count = 0
        self.previous: Optional[Token] = None
        self.current: Token = self._next_token()

    def translate(self) -> None:
        """Translate statements until the end of input."""
        logger.debug(f"Translating {self.scanner.filename} (recovery: {self.recovery.value})")

        while not self._check(TokenKind.END_OF_INPUT):
            self._parse_statement()

        logger.debug(
            f"Translated {self.scanner.filename}: {len(self.emitter.lines)} instructions, "
            f"{self.token_count} tokens, {self.diagnostics.error_count()} errors"
        )

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _next_token(self) -> Token:
        self.token_count += 1
        return self.scanner.next_token()

    def _advance(self) -> Token:
        """Consume the current token and return it."""
        token = self.current
        self.previous = token
        self.current = self._next_token()
        return token

    def _check(self, *kinds: TokenKind) -> bool:
        """Check if the current token is one of the given kinds."""
        return self.current.kind in kinds

    def _match(self, kind: TokenKind) -> bool:
        """Consume the current token if it has the given kind."""
        if self._check(kind):
            self._advance()
            return True
        return False

    # =========================================================================
    # Error Reporting and Recovery
    # =========================================================================

    def _source_line(self, token: Token) -> Optional[str]:
        return self.scanner.source_line(token.line)

    def _report(self, error: TranslatorError) -> None:
        self.diagnostics.add(error)

    def _missing(self, expected: str, after: str) -> None:
        """Report a required token that is not there."""
        token = self.current
        self._report(MissingTokenError(
            expected,
            after=after,
            location=token.location,
            source_line=self._source_line(token),
        ))

    def _follows_operand(self) -> bool:
        previous = self.previous
        return previous is not None and (
            previous.kind == TokenKind.IDENTIFIER or previous.is_number()
        )

    def _at_statement_boundary(self) -> bool:
        # In "x y" the second identifier is a stray operand, not a statement
        if self._check(TokenKind.IDENTIFIER) and self._follows_operand():
            return False
        return (
            self._check(*STATEMENT_START, TokenKind.RBRACE)
            or self.current.is_type_keyword()
        )

    def _synchronize(self) -> None:
        """
        Skip tokens until a statement boundary.

        A ';' is consumed; a statement-starting token or '}' is left as
        the current token.
        """
        while not self._check(TokenKind.END_OF_INPUT):
            if self._match(TokenKind.SEMICOLON):
                return
            if self._at_statement_boundary():
                return
            self._advance()

    def _recover(self) -> None:
        """Recovery after an error inside a rule (leading token already consumed)."""
        if self.recovery is RecoveryMode.SYNCHRONIZE:
            self._synchronize()

    def _skip_offending_token(self) -> None:
        """Recovery after an error at dispatch level: always drops a token."""
        self._advance()
        if self.recovery is RecoveryMode.SYNCHRONIZE:
            self._synchronize()

    # =========================================================================
    # Statements
    # =========================================================================

    def _parse_statement(self) -> None:
        """Dispatch on the current token to the matching statement rule."""
        token = self.current

        if token.kind == TokenKind.END_OF_INPUT:
            return

        if token.kind == TokenKind.ERROR:
            self._report(InvalidCharacterError(
                token.lexeme,
                location=token.location,
                source_line=self._source_line(token),
            ))
            self._skip_offending_token()
        elif token.is_type_keyword():
            self._parse_declaration()
        elif token.kind == TokenKind.IDENTIFIER:
            self._parse_assignment_or_call()
        elif token.kind == TokenKind.IF:
            self._parse_if_statement()
        elif token.kind == TokenKind.WHILE:
            self._parse_while_statement()
        elif token.kind == TokenKind.PRINT:
            self._parse_print_statement()
        else:
            self._report(UnexpectedTokenError(
                token.lexeme,
                expected="a statement",
                location=token.location,
                source_line=self._source_line(token),
            ))
            self._skip_offending_token()

    def _parse_declaration(self) -> None:
        """
        Parse a variable declaration.

            int x;        ->  var x
            float y = 2;  ->  load 2 into eax
                              mov y, eax
        """
        type_token = self._advance()

        if not self._check(TokenKind.IDENTIFIER):
            self._missing("identifier", after=f"type '{type_token.lexeme}'")
            self._recover()
            return

        name = self._advance().lexeme

        if self._match(TokenKind.ASSIGN):
            self._parse_expression()
            self.emitter.store(name)
        elif self._check(TokenKind.SEMICOLON):
            self.emitter.declare(name)
        else:
            token = self.current
            self._report(UnexpectedTokenError(
                token.lexeme,
                expected="';' or '='",
                location=token.location,
                source_line=self._source_line(token),
                context=f"after declaration of '{name}'",
            ))
            self._recover()
            return

        self._match(TokenKind.SEMICOLON)

    def _parse_assignment_or_call(self) -> None:
        """
        Parse an assignment or a zero-argument call.

        Anything between the call parentheses is skipped unevaluated.
        """
        name = self._advance().lexeme

        if self._match(TokenKind.ASSIGN):
            self._parse_expression()
            self.emitter.store(name)
            self._match(TokenKind.SEMICOLON)
        elif self._match(TokenKind.LPAREN):
            self._skip_call_arguments(name)
            self.emitter.call(name)
            self._match(TokenKind.SEMICOLON)
        else:
            token = self.current
            self._report(UnexpectedTokenError(
                token.lexeme,
                expected="'=' or '('",
                location=token.location,
                source_line=self._source_line(token),
                context=f"after identifier '{name}'",
            ))
            self._recover()

    def _skip_call_arguments(self, name: str) -> None:
        """Discard tokens up to and including the matching ')'."""
        depth = 1
        while not self._check(TokenKind.END_OF_INPUT):
            if self._check(TokenKind.LPAREN):
                depth += 1
            elif self._check(TokenKind.RPAREN):
                depth -= 1
                if depth == 0:
                    self._advance()
                    return
            self._advance()

        self._missing("')'", after=f"call to '{name}'")

    def _parse_if_statement(self) -> None:
        """
        Parse if/else.

        The jump target is only defined when an else branch follows.
        """
        self._advance()  # 'if'

        if not self._match(TokenKind.LPAREN):
            self._missing("'('", after="'if'")
            self._recover()
            return

        self._parse_expression()

        if not self._match(TokenKind.RPAREN):
            self._missing("')'", after="condition in if statement")
            self._recover()
            return

        else_label, _ = self.emitter.new_labels()
        self.emitter.jump_if_true(else_label)
        self._parse_block()

        if self._match(TokenKind.ELSE):
            self.emitter.label(else_label)
            self._parse_block()

    def _parse_while_statement(self) -> None:
        """Parse a while loop; the loop label precedes the condition."""
        self._advance()  # 'while'

        loop_label, end_label = self.emitter.new_labels()
        self.emitter.label(loop_label)

        if not self._match(TokenKind.LPAREN):
            self._missing("'('", after="'while'")
            self._recover()
            return

        self._parse_expression()

        if not self._match(TokenKind.RPAREN):
            self._missing("')'", after="condition in while statement")
            self._recover()
            return

        self.emitter.jump_if_false(end_label)
        self._parse_block()
        self.emitter.jump(loop_label)
        self.emitter.label(end_label)

    def _parse_print_statement(self) -> None:
        """
        Parse print(expression).

        A missing '(' abandons the statement. A missing ')' is reported
        after 'print eax' has been emitted.
        """
        self._advance()  # 'print'

        if not self._match(TokenKind.LPAREN):
            self._missing("'('", after="'print'")
            self._recover()
            return

        self._parse_expression()
        self.emitter.print_eax()

        if not self._match(TokenKind.RPAREN):
            self._missing("')'", after="print argument")
            if self.recovery is RecoveryMode.SYNCHRONIZE:
                self._synchronize()
                return

        self._match(TokenKind.SEMICOLON)

    def _parse_block(self) -> None:
        """Parse a braced statement list, or a single statement."""
        if not self._match(TokenKind.LBRACE):
            self._parse_statement()
            return

        while not self._check(TokenKind.RBRACE, TokenKind.END_OF_INPUT):
            self._parse_statement()

        if not self._match(TokenKind.RBRACE):
            self._missing("'}'", after="block")

    # =========================================================================
    # Expressions
    # =========================================================================

    def _parse_expression(self) -> None:
        """
        Parse a primary with at most one trailing operator.

        The token after the operator is taken as the operand whatever
        its kind.
        """
        token = self.current
        if token.kind == TokenKind.IDENTIFIER or token.is_number():
            self.emitter.load(token.lexeme)
            self._advance()
        else:
            self._report(MissingTokenError(
                "operand",
                location=token.location,
                source_line=self._source_line(token),
            ))

        method = BINARY_OPERATORS.get(self.current.kind)
        if method is not None:
            self._advance()
            operand = self._advance()
            getattr(self.emitter, method)(operand.lexeme)
