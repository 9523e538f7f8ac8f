"""
Instruction Emitter
===================

Writes mnemonic instructions to an output sink as the translator
recognises them. Each instruction is one newline-terminated line; the
emitter never buffers, reorders or rewrites what it was given.

Instruction Vocabulary
----------------------
| Method         | Line written                    |
|----------------|---------------------------------|
| declare        | var <name>                      |
| store          | mov <name>, eax                 |
| call           | call <name>                     |
| load           | load <operand> into eax         |
| compare        | compare eax with <operand>      |
| subtract       | subtract eax with <operand>     |
| add            | add eax with <operand>          |
| jump_if_true   | if eax != 0 jump <label>        |
| jump_if_false  | if eax == 0 jump <label>        |
| jump           | jump <label>                    |
| label          | <label>:                        |
| print          | print eax                       |

Downstream tools may parse these strings, so they are kept verbatim.
"""

import logging
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

# Fixed jump targets used when unique labels are disabled
LOOP_LABEL = "label"
END_LABEL = "end_label"


class TextSink(Protocol):
    """Anything with a text write() method (files, StringIO, sys.stdout)."""

    def write(self, text: str) -> int: ...


class InstructionEmitter:
    """
    Emits pseudo-assembly lines to a text sink.

    The emitter also owns label naming. With unique_labels disabled every
    if/while uses the fixed names 'label' and 'end_label' (nested or
    sequential constructs then share them). With unique_labels enabled a
    counter suffixes both names, one number per construct.

    Attributes:
        sink: Where lines are written (None keeps them in memory only)
        unique_labels: Whether label names get a counter suffix
        lines: Every line emitted so far, without newlines
    """

    def __init__(self, sink: Optional[TextSink] = None, unique_labels: bool = False):
        self.sink = sink
        self.unique_labels = unique_labels
        self.lines: list[str] = []
        self._label_counter = 0

    def emit(self, line: str) -> None:
        """Write one instruction line."""
        self.lines.append(line)
        if self.sink is not None:
            self.sink.write(line + "\n")

    def getvalue(self) -> str:
        """Everything emitted so far as one newline-terminated text."""
        return "".join(line + "\n" for line in self.lines)

    # =========================================================================
    # Label Generation
    # =========================================================================

    def new_labels(self) -> tuple[str, str]:
        """
        Return the (label, end_label) pair for a new if/while construct.

        Returns:
            ("label", "end_label") in fixed mode, otherwise
            ("label_N", "end_label_N") with N starting at 1
        """
        if not self.unique_labels:
            return LOOP_LABEL, END_LABEL
        self._label_counter += 1
        suffix = self._label_counter
        logger.debug(f"Allocated label pair #{suffix}")
        return f"{LOOP_LABEL}_{suffix}", f"{END_LABEL}_{suffix}"

    # =========================================================================
    # Instructions
    # =========================================================================

    def declare(self, name: str) -> None:
        self.emit(f"var {name}")

    def store(self, name: str) -> None:
        self.emit(f"mov {name}, eax")

    def call(self, name: str) -> None:
        self.emit(f"call {name}")

    def load(self, operand: str) -> None:
        self.emit(f"load {operand} into eax")

    def compare(self, operand: str) -> None:
        self.emit(f"compare eax with {operand}")

    def subtract(self, operand: str) -> None:
        self.emit(f"subtract eax with {operand}")

    def add(self, operand: str) -> None:
        self.emit(f"add eax with {operand}")

    def jump_if_true(self, label: str) -> None:
        self.emit(f"if eax != 0 jump {label}")

    def jump_if_false(self, label: str) -> None:
        self.emit(f"if eax == 0 jump {label}")

    def jump(self, label: str) -> None:
        self.emit(f"jump {label}")

    def label(self, label: str) -> None:
        """Emit a label definition."""
        self.emit(f"{label}:")

    def print_eax(self) -> None:
        self.emit("print eax")
