"""
tinyc - Translator Command-Line Interface
=========================================

This module implements the command-line interface for the translator.

Usage Examples
--------------
Translate the built-in demonstration program to output.asm:
    $ tinyc

Translate a file (writes prog.asm next to it):
    $ tinyc prog.tc

With output file, or '-' for stdout:
    $ tinyc prog.tc -o out.asm
    $ tinyc prog.tc -o -

Unique jump labels and the original per-rule error recovery:
    $ tinyc --unique-labels --recovery token prog.tc

Dump the token stream:
    $ tinyc --tokens prog.tc
"""

import logging
from pathlib import Path
from typing import Optional

import click

from tinyc import __version__
from tinyc.cli.errors import handle_cli_exception
from tinyc.translator import (
    DEMO_PROGRAM,
    RecoveryMode,
    Scanner,
    TinyCTranslator,
    TranslatorOptions,
)

logger = logging.getLogger(__name__)

DEMO_FILENAME = "<demo>"
DEMO_OUTPUT = Path("output.asm")


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    required=False,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, allow_dash=True, path_type=Path),
    help="Output file (default: input.asm, or output.asm for the demo; '-' for stdout)",
)
@click.option(
    "--unique-labels/--fixed-labels",
    default=None,
    help="Number jump labels per if/while (label_1, end_label_1, ...). "
         "Default: fixed 'label'/'end_label', or TINYC_UNIQUE_LABELS.",
)
@click.option(
    "--recovery",
    type=click.Choice([mode.value for mode in RecoveryMode], case_sensitive=False),
    default=None,
    help="Error recovery after a syntax error. Default: synchronize, or TINYC_RECOVERY.",
)
@click.option(
    "--strict/--no-strict",
    default=None,
    help="Fail with exit code 1 if any syntax error was reported. "
         "Default: off, or TINYC_STRICT.",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the token stream and exit (for debugging)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="tinyc")
def main(
    input_file: Optional[Path],
    output: Optional[Path],
    unique_labels: Optional[bool],
    recovery: Optional[str],
    strict: Optional[bool],
    tokens: bool,
    verbose: bool,
) -> None:
    """
    Translate a tinyc program to pseudo-assembly.

    INPUT_FILE is the program to translate. Without it, the built-in
    demonstration program is translated.

    \b
    Examples:
        tinyc                        # demo program -> output.asm
        tinyc prog.tc                # Outputs prog.asm
        tinyc prog.tc -o -           # Write to stdout
        tinyc --unique-labels prog.tc

    Syntax errors are reported on stderr; translation always runs to the
    end of the input.
    """
    setup_logging(verbose)

    options = TranslatorOptions.from_env()
    if unique_labels is not None:
        options.unique_labels = unique_labels
    if recovery is not None:
        options.recovery = RecoveryMode(recovery.lower())
    if strict is not None:
        options.strict = strict

    try:
        if input_file is None:
            source = DEMO_PROGRAM
            filename = DEMO_FILENAME
            default_output = DEMO_OUTPUT
        else:
            source = input_file.read_text(encoding="utf-8")
            filename = str(input_file)
            default_output = input_file.with_suffix(".asm")

        if tokens:
            for token in Scanner(source, filename).tokenize():
                click.echo(repr(token))
            return

        if output is None:
            output = default_output
        to_stdout = str(output) == "-"

        if not to_stdout and input_file is not None and output.resolve() == input_file.resolve():
            raise click.BadParameter(
                f"output would overwrite the input file {input_file}",
                param_hint="'-o' / '--output'",
            )

        if verbose:
            click.echo(f"Translating {filename}...", err=True)
            click.echo(f"Options: {options}", err=True)

        translator = TinyCTranslator(options)
        with click.open_file(str(output), "w", encoding="utf-8") as sink:
            result = translator.translate_source(source, filename, sink)
        logger.debug(f"Wrote {len(result.instructions)} instructions to {output}")

        for error in result.diagnostics:
            click.echo(str(error), err=True)

        if verbose:
            click.echo(f"Tokenized: {result.token_count} tokens", err=True)
            click.echo(f"Emitted: {len(result.instructions)} instructions", err=True)

        if not to_stdout:
            click.echo("Execution completed")

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
