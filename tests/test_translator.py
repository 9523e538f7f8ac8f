"""
Translator Test Suite
=====================

Tests for the statement translator, the instruction emitter and the
translation facade.

Test Organization
-----------------
- TestDeclarations / TestAssignmentsAndCalls / TestPrint: simple statements
- TestExpressions: the one-operator expression form
- TestControlFlow: if/else and while emission order
- TestLabels: fixed and unique jump labels
- TestErrorRecovery: diagnostics and both recovery policies
- TestEmitter: the instruction sink
- TestFacade: TinyCTranslator, options and convenience functions
"""

import io
import logging

import pytest
from tinyc.translator import (
    DEMO_PROGRAM,
    DiagnosticCollector,
    InstructionEmitter,
    InvalidCharacterError,
    MissingTokenError,
    RecoveryMode,
    Scanner,
    TinyCTranslator,
    TokenKind,
    TranslationFailedError,
    Translator,
    TranslatorOptions,
    UnexpectedTokenError,
    translate_file,
    translate_source,
)


# =============================================================================
# Helpers
# =============================================================================

def run(source: str, recovery: RecoveryMode = RecoveryMode.SYNCHRONIZE,
        unique_labels: bool = False):
    """Translate source and return (instruction lines, diagnostics)."""
    emitter = InstructionEmitter(unique_labels=unique_labels)
    diagnostics = DiagnosticCollector()
    Translator(Scanner(source), emitter, diagnostics, recovery=recovery).translate()
    return emitter.lines, diagnostics


def lines_of(source: str, **kwargs) -> list:
    return run(source, **kwargs)[0]


# =============================================================================
# Statement Tests
# =============================================================================

class TestDeclarations:
    """Tests for int/float declarations."""

    def test_initialized_declaration(self):
        """'int x = 10;' emits exactly a load and a mov."""
        lines, diagnostics = run("int x = 10;")
        assert lines == ["load 10 into eax", "mov x, eax"]
        assert not diagnostics.has_errors()

    def test_bare_declaration(self):
        """'float y;' emits exactly 'var y'."""
        lines, diagnostics = run("float y;")
        assert lines == ["var y"]
        assert not diagnostics.has_errors()

    def test_float_initializer(self):
        """Float literals are loaded verbatim."""
        assert lines_of("float f = 2.75;") == ["load 2.75 into eax", "mov f, eax"]

    def test_initializer_with_operator(self):
        """The initializer may use one operator."""
        assert lines_of("int z = x + 1;") == [
            "load x into eax",
            "add eax with 1",
            "mov z, eax",
        ]

    def test_missing_semicolon_is_tolerated(self):
        """The trailing ';' is consumed when present, not required."""
        lines, diagnostics = run("int x = 1 int y;")
        assert lines == ["load 1 into eax", "mov x, eax", "var y"]
        assert not diagnostics.has_errors()

    def test_missing_identifier(self):
        """A type keyword without identifier reports and emits nothing."""
        lines, diagnostics = run("int = 5;")
        assert lines == []
        assert diagnostics.error_count() == 1
        error = diagnostics.errors[0]
        assert isinstance(error, MissingTokenError)
        assert "expected identifier after type 'int'" in error.message

    def test_number_at_statement_start_is_not_a_declaration(self):
        """A numeric literal cannot start a statement."""
        lines, diagnostics = run("10; float y;")
        assert lines == ["var y"]
        assert isinstance(diagnostics.errors[0], UnexpectedTokenError)
        assert diagnostics.errors[0].found == "10"


class TestAssignmentsAndCalls:
    """Tests for identifier-led statements."""

    def test_assignment(self):
        """Assignment evaluates then stores."""
        assert lines_of("x = y;") == ["load y into eax", "mov x, eax"]

    def test_call(self):
        """A call emits 'call <name>'."""
        lines, diagnostics = run("reset();")
        assert lines == ["call reset"]
        assert not diagnostics.has_errors()

    def test_call_arguments_are_discarded(self):
        """Tokens inside the parentheses are skipped, not evaluated."""
        assert lines_of("draw(x + 1, 2); print(3);") == [
            "call draw",
            "load 3 into eax",
            "print eax",
        ]

    def test_call_skips_to_matching_paren(self):
        """Nested parentheses do not end the argument list early."""
        assert lines_of("f((a)(b)); g();") == ["call f", "call g"]

    def test_unterminated_call(self):
        """End of input inside the argument list still emits the call."""
        lines, diagnostics = run("f(a")
        assert lines == ["call f"]
        assert "expected ')' after call to 'f'" in diagnostics.messages

    def test_unexpected_token_after_identifier(self):
        """An identifier followed by neither '=' nor '(' is an error."""
        lines, diagnostics = run("x + 1; print(x);")
        assert lines == ["load x into eax", "print eax"]
        assert diagnostics.messages == ["unexpected token after identifier 'x'"]


class TestPrint:
    """Tests for print statements."""

    def test_print(self):
        """print emits the expression then 'print eax'."""
        assert lines_of("print(x);") == ["load x into eax", "print eax"]

    def test_print_without_semicolon(self):
        """The ';' after print is optional."""
        lines, diagnostics = run("print(1) print(2)")
        assert lines == ["load 1 into eax", "print eax", "load 2 into eax", "print eax"]
        assert not diagnostics.has_errors()

    def test_print_missing_lparen(self):
        """Missing '(' abandons the statement."""
        lines, diagnostics = run("print x; int y;")
        assert lines == ["var y"]
        assert "expected '(' after 'print'" in diagnostics.messages

    def test_print_missing_rparen_still_prints(self):
        """Missing ')' is reported after 'print eax' was emitted."""
        lines, diagnostics = run("print(x; int y;")
        assert lines == ["load x into eax", "print eax", "var y"]
        assert "expected ')' after print argument" in diagnostics.messages


# =============================================================================
# Expression Tests
# =============================================================================

class TestExpressions:
    """The expression form: one primary, at most one operator."""

    @pytest.mark.parametrize("op,line", [
        (">", "compare eax with 5"),
        ("-", "subtract eax with 5"),
        ("+", "add eax with 5"),
    ])
    def test_operators(self, op, line):
        """Each operator maps to one instruction."""
        assert lines_of(f"x = y {op} 5;") == ["load y into eax", line, "mov x, eax"]

    def test_operand_taken_unconditionally(self):
        """The token after the operator is the operand whatever its kind."""
        assert lines_of("x = y + while;")[1] == "add eax with while"

    def test_only_one_operator(self):
        """A second operator is not part of the expression."""
        lines, diagnostics = run("x = a + b + c;")
        assert lines == ["load a into eax", "add eax with b", "mov x, eax"]
        assert diagnostics.has_errors()

    def test_unsupported_operator_ends_expression(self):
        """'*' and '/' are scanned but not translated."""
        lines, diagnostics = run("x = a * 2;")
        assert lines == ["load a into eax", "mov x, eax"]
        assert diagnostics.errors[0].found == "*"

    def test_missing_operand(self):
        """An expression without a primary is reported but emission goes on."""
        lines, diagnostics = run("x = ;")
        assert lines == ["mov x, eax"]
        assert diagnostics.messages == ["expected operand"]


# =============================================================================
# Control Flow Tests
# =============================================================================

class TestControlFlow:
    """Tests for if/else and while emission."""

    def test_if_else_scenario(self):
        """Condition, conditional jump, then-branch, label, else-branch."""
        source = (
            "int x = 10; int y = 20; "
            "if (x > y) { print(x); } else { print(y); }"
        )
        lines, diagnostics = run(source)
        assert not diagnostics.has_errors()
        assert lines == [
            "load 10 into eax",
            "mov x, eax",
            "load 20 into eax",
            "mov y, eax",
            "load x into eax",
            "compare eax with y",
            "if eax != 0 jump label",
            "load x into eax",
            "print eax",
            "label:",
            "load y into eax",
            "print eax",
        ]
        assert lines.count("print eax") == 2

    def test_if_without_else(self):
        """Without else no label line is emitted."""
        assert lines_of("if (x) print(x);") == [
            "load x into eax",
            "if eax != 0 jump label",
            "load x into eax",
            "print eax",
        ]

    def test_while_scenario(self):
        """Loop label precedes the condition; end label closes the loop."""
        lines, diagnostics = run("while (x > 0) { x = x - 1; }")
        assert not diagnostics.has_errors()
        assert lines == [
            "label:",
            "load x into eax",
            "compare eax with 0",
            "if eax == 0 jump end_label",
            "load x into eax",
            "subtract eax with 1",
            "mov x, eax",
            "jump label",
            "end_label:",
        ]

    def test_braceless_body(self):
        """A block without braces is exactly one statement."""
        assert lines_of("while (x) x = x - 1; print(x);") == [
            "label:",
            "load x into eax",
            "if eax == 0 jump end_label",
            "load x into eax",
            "subtract eax with 1",
            "mov x, eax",
            "jump label",
            "end_label:",
            "load x into eax",
            "print eax",
        ]

    def test_empty_block(self):
        """An empty block emits nothing of its own."""
        assert lines_of("if (x) { }") == ["load x into eax", "if eax != 0 jump label"]

    def test_nested_statements(self):
        """Blocks may contain control flow."""
        lines = lines_of("while (n) { if (n > 1) { print(n); } n = n - 1; }")
        assert lines.index("if eax == 0 jump end_label") < lines.index("if eax != 0 jump label")
        assert lines[-2:] == ["jump label", "end_label:"]

    def test_if_missing_lparen(self):
        """'if' without '(' is reported and nothing is emitted for it."""
        lines, diagnostics = run("if x > 1 { print(x); }")
        assert "expected '(' after 'if'" in diagnostics.messages
        assert "if eax != 0 jump label" not in lines

    def test_while_missing_rparen(self):
        """The loop label is already out when the ')' is found missing."""
        lines, diagnostics = run("while (x { }")
        assert lines[:2] == ["label:", "load x into eax"]
        assert "expected ')' after condition in while statement" in diagnostics.messages

    def test_unclosed_block(self):
        """End of input inside a block is reported."""
        lines, diagnostics = run("if (x) { print(x);")
        assert lines[-1] == "print eax"
        assert "expected '}' after block" in diagnostics.messages


# =============================================================================
# Label Tests
# =============================================================================

class TestLabels:
    """Fixed and unique label naming."""

    def test_fixed_labels_collide(self):
        """By default every construct uses 'label' / 'end_label'."""
        lines = lines_of("while (a) { } while (b) { }")
        assert lines.count("label:") == 2
        assert lines.count("end_label:") == 2

    def test_unique_labels(self):
        """With unique labels each construct gets its own number."""
        lines = lines_of(
            "if (a) print(a); else print(b); while (b) { b = b - 1; }",
            unique_labels=True,
        )
        assert "if eax != 0 jump label_1" in lines
        assert "label_1:" in lines
        assert "label_2:" in lines
        assert "if eax == 0 jump end_label_2" in lines
        assert "jump label_2" in lines
        assert lines[-1] == "end_label_2:"

    def test_unique_labels_nested(self):
        """Nested loops do not share labels."""
        lines = lines_of("while (a) { while (b) { } }", unique_labels=True)
        assert lines == [
            "label_1:",
            "load a into eax",
            "if eax == 0 jump end_label_1",
            "label_2:",
            "load b into eax",
            "if eax == 0 jump end_label_2",
            "jump label_2",
            "end_label_2:",
            "jump label_1",
            "end_label_1:",
        ]


# =============================================================================
# Error Recovery Tests
# =============================================================================

class TestErrorRecovery:
    """Diagnostics and recovery policies."""

    def test_unknown_character_does_not_abort(self):
        """'#' is reported and the surrounding statements still translate."""
        lines, diagnostics = run("int x = 10 # ; print(x);")
        assert lines == ["load 10 into eax", "mov x, eax", "load x into eax", "print eax"]
        assert diagnostics.error_count() == 1
        error = diagnostics.errors[0]
        assert isinstance(error, InvalidCharacterError)
        assert error.char == "#"

    def test_diagnostic_location(self):
        """Diagnostics carry line and column of the offending token."""
        _, diagnostics = run("int x;\nint y = 1 @;")
        error = diagnostics.errors[0]
        assert (error.location.line, error.location.column) == (2, 11)
        assert error.location.offset == 17
        assert str(error).startswith("<input>:2:11: error: invalid character '@'")
        assert "    int y = 1 @;" in str(error)

    def test_diagnostics_not_in_instruction_stream(self):
        """Error text never appears among emitted lines."""
        lines, _ = run("# } ) print(1);")
        assert lines == ["load 1 into eax", "print eax"]

    def test_error_inside_block(self):
        """ERROR tokens inside braces are reported and skipped."""
        lines, diagnostics = run("if (x) { $ print(x); } else { print(y); }")
        assert "label:" in lines
        assert lines.count("print eax") == 2
        assert isinstance(diagnostics.errors[0], InvalidCharacterError)

    def test_synchronize_skips_to_statement(self):
        """After an error the rest of the broken statement is skipped."""
        lines, diagnostics = run("= 1 2 3; print(1);")
        assert lines == ["load 1 into eax", "print eax"]
        assert diagnostics.error_count() == 1

    def test_token_recovery_reports_each_token(self):
        """Token-at-a-time recovery reports every stray token."""
        lines, diagnostics = run("= 1 2 3; print(1);", recovery=RecoveryMode.TOKEN)
        assert lines == ["load 1 into eax", "print eax"]
        assert diagnostics.error_count() == 5

    def test_token_recovery_unknown_character(self):
        """With token recovery the ';' after '#' is a second error."""
        lines, diagnostics = run("int x = 10 # ;", recovery=RecoveryMode.TOKEN)
        assert lines == ["load 10 into eax", "mov x, eax"]
        assert diagnostics.error_count() == 2
        assert diagnostics.errors[0].char == "#"

    def test_token_recovery_print_missing_rparen_continues(self):
        """With token recovery print carries on and consumes the ';'."""
        lines, diagnostics = run("print(x; int y;", recovery=RecoveryMode.TOKEN)
        assert lines == ["load x into eax", "print eax", "var y"]
        assert diagnostics.error_count() == 1

    def test_synchronize_skips_stray_operand(self):
        """An identifier right after an operand does not restart a statement."""
        lines, diagnostics = run("print(x y); z = 1;")
        assert lines == ["load x into eax", "print eax", "load 1 into eax", "mov z, eax"]
        assert diagnostics.messages == ["expected ')' after print argument"]

    def test_synchronize_keeps_statement_after_keyword(self):
        """An identifier after a non-operand token still starts a statement."""
        lines, diagnostics = run("print x = 1;")
        assert lines == ["load 1 into eax", "mov x, eax"]
        assert diagnostics.messages == ["expected '(' after 'print'"]

    def test_synchronize_stops_at_closing_brace(self):
        """Recovery inside a block does not swallow the '}'."""
        lines, diagnostics = run("while (x) { y + ; } print(z);")
        assert lines[-2:] == ["load z into eax", "print eax"]
        assert "end_label:" in lines
        assert diagnostics.error_count() == 1

    @pytest.mark.parametrize("recovery", list(RecoveryMode))
    @pytest.mark.parametrize("source", [
        "", "}}}", "((((", "int", "if", "while (", "print", "x", "1.2.3.4",
        "int x = = = ;", "else else", "if (x) else", "#@!$%",
    ])
    def test_always_terminates(self, recovery, source):
        """Translation reaches the end of input for any input."""
        scanner = Scanner(source)
        translator = Translator(scanner, recovery=recovery)
        translator.translate()
        assert translator.current.kind == TokenKind.END_OF_INPUT
        assert scanner.at_end()


# =============================================================================
# Emitter Tests
# =============================================================================

class TestEmitter:
    """Tests for the instruction sink."""

    def test_lines_written_to_sink_in_order(self):
        """Each instruction is written as soon as it is emitted."""
        sink = io.StringIO()
        emitter = InstructionEmitter(sink)
        Translator(Scanner("int x = 1; print(x);"), emitter).translate()
        assert sink.getvalue() == (
            "load 1 into eax\n"
            "mov x, eax\n"
            "load x into eax\n"
            "print eax\n"
        )

    def test_getvalue_matches_sink(self):
        """getvalue() reproduces what the sink received."""
        sink = io.StringIO()
        emitter = InstructionEmitter(sink)
        emitter.declare("a")
        emitter.call("f")
        assert emitter.getvalue() == sink.getvalue() == "var a\ncall f\n"

    def test_fixed_label_pair(self):
        """Fixed mode always hands out the same names."""
        emitter = InstructionEmitter()
        assert emitter.new_labels() == ("label", "end_label")
        assert emitter.new_labels() == ("label", "end_label")

    def test_unique_label_pairs(self):
        """Unique mode numbers each pair."""
        emitter = InstructionEmitter(unique_labels=True)
        assert emitter.new_labels() == ("label_1", "end_label_1")
        assert emitter.new_labels() == ("label_2", "end_label_2")


# =============================================================================
# Facade Tests
# =============================================================================

class TestFacade:
    """Tests for TinyCTranslator, options and convenience functions."""

    def test_translate_source(self):
        """translate_source returns newline-terminated instruction text."""
        assert translate_source("int x = 10;") == "load 10 into eax\nmov x, eax\n"

    def test_translate_source_logs_diagnostics(self, caplog):
        """The convenience function logs each diagnostic as a warning."""
        with caplog.at_level(logging.WARNING, logger="tinyc.translator.compiler"):
            assembly = translate_source("int x = 10 # ;")
        assert assembly == "load 10 into eax\nmov x, eax\n"
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "invalid character '#'" in warnings[0].getMessage()

    def test_report_summary(self):
        """report() lists each error and ends with the error count."""
        result = TinyCTranslator().translate_source("# ; @")
        collector = DiagnosticCollector()
        for error in result.diagnostics:
            collector.add(error)
        report = collector.report()
        assert report.endswith("\n2 errors")
        assert "warning" not in report
        assert DiagnosticCollector().report().endswith("\n0 errors")

    def test_result_fields(self):
        """TranslationResult reports instructions, tokens and success."""
        result = TinyCTranslator().translate_source("float y;", "prog.tc")
        assert result.success
        assert result.filename == "prog.tc"
        assert result.instructions == ["var y"]
        assert result.assembly == "var y\n"
        assert result.diagnostics == []
        assert result.token_count == 4

    def test_result_with_errors(self):
        """Diagnostics make the result unsuccessful but keep the output."""
        result = TinyCTranslator().translate_source("int x = 10 # ;")
        assert not result.success
        assert result.instructions == ["load 10 into eax", "mov x, eax"]
        assert len(result.diagnostics) == 1

    def test_strict_mode_raises(self):
        """Strict mode turns collected diagnostics into an exception."""
        translator = TinyCTranslator(TranslatorOptions(strict=True))
        with pytest.raises(TranslationFailedError) as exc_info:
            translator.translate_source("int x = 10 # ;")
        assert "invalid character '#'" in str(exc_info.value)
        assert str(exc_info.value).endswith("\n1 error")

    def test_strict_mode_clean_source(self):
        """Strict mode does not raise for a valid program."""
        translator = TinyCTranslator(TranslatorOptions(strict=True))
        assert translator.translate_source("print(1);").success

    def test_diagnostics_reset_between_runs(self):
        """Each translation starts with an empty diagnostics sink."""
        translator = TinyCTranslator()
        translator.translate_source("#")
        assert translator.diagnostics.error_count() == 1
        translator.translate_source("int x;")
        assert translator.diagnostics.error_count() == 0

    def test_unique_labels_option(self):
        """The option reaches the emitter."""
        options = TranslatorOptions(unique_labels=True)
        assert "label_1:" in translate_source("while (x) { }", options)

    def test_demo_program(self):
        """The demonstration program translates without diagnostics."""
        result = TinyCTranslator().translate_source(DEMO_PROGRAM)
        assert result.success
        assert result.instructions[-3:] == ["mov x, eax", "jump label", "end_label:"]

    def test_translate_file(self, tmp_path):
        """translate_file reads the source and writes the output."""
        source = tmp_path / "prog.tc"
        source.write_text("float y;")
        output = tmp_path / "prog.asm"
        assert translate_file(str(source), str(output)) == "var y\n"
        assert output.read_text() == "var y\n"

    def test_translate_missing_file(self, tmp_path):
        """A missing source file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            TinyCTranslator().translate_file(str(tmp_path / "nope.tc"))


class TestOptionsFromEnv:
    """TranslatorOptions.from_env()."""

    def test_defaults(self, monkeypatch):
        """Without variables the defaults apply."""
        for name in ("TINYC_UNIQUE_LABELS", "TINYC_RECOVERY", "TINYC_STRICT"):
            monkeypatch.delenv(name, raising=False)
        options = TranslatorOptions.from_env()
        assert options.unique_labels is False
        assert options.recovery is RecoveryMode.SYNCHRONIZE
        assert options.strict is False

    def test_overrides(self, monkeypatch):
        """Variables override the defaults."""
        monkeypatch.setenv("TINYC_UNIQUE_LABELS", "yes")
        monkeypatch.setenv("TINYC_RECOVERY", "Token")
        monkeypatch.setenv("TINYC_STRICT", "1")
        options = TranslatorOptions.from_env()
        assert options.unique_labels is True
        assert options.recovery is RecoveryMode.TOKEN
        assert options.strict is True

    def test_invalid_recovery_ignored(self, monkeypatch):
        """An unknown recovery name keeps the default."""
        monkeypatch.setenv("TINYC_RECOVERY", "panic")
        assert TranslatorOptions.from_env().recovery is RecoveryMode.SYNCHRONIZE
