"""
C6461 Line Analyzer (Pass 1)
============================

This module converts raw source lines into an ordered list of SourceLine
records and fills the symbol table. It is the first pass of the
assembler: it assigns every word-producing line its address, so that by
the time pass 2 runs every label, including those referenced before
their definition, is known.

Line Syntax
-----------
```asm
; comment-only line
LOC 10                  ; set the location counter (decimal)
START:  LDR 0,0,100     ; label + instruction
LOOP:                   ; label-only line
        AIR 1,5
D1:     Data 7          ; literal data word
PTR:    Data START      ; data word holding a label's address
```

Line Kinds
----------
| Kind        | Occupies a word | Advances the counter      |
|-------------|-----------------|---------------------------|
| BLANK       | no              | no                        |
| LABEL_ONLY  | no              | no                        |
| LOC         | no              | sets it to the argument   |
| DATA        | yes             | +1                        |
| INSTRUCTION | yes             | +1                        |

The location counter is threaded explicitly through the per-line step:
each call receives the current value and returns the next one.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Optional, Union

from c6461_asm.cpu import WORD_MASK
from c6461_asm.errors import DiagnosticLog, DirectiveError, SourceLocation
from c6461_asm.assembler.symbols import SymbolTable

logger = logging.getLogger(__name__)


# =============================================================================
# Lexical Patterns
# =============================================================================

COMMENT_CHAR = ";"

LABEL_PATTERN = re.compile(r"^\s*([A-Za-z_]\w*):\s*(.*)$", re.ASCII | re.DOTALL)
IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_]\w*$", re.ASCII)
DECIMAL_PATTERN = re.compile(r"^[+-]?\d+$", re.ASCII)
UNSIGNED_DECIMAL_PATTERN = re.compile(r"^\d+$", re.ASCII)

LOC_DIRECTIVE = "LOC"
DATA_DIRECTIVE = "DATA"


# =============================================================================
# Operand Values
# =============================================================================

@dataclass(frozen=True)
class Literal:
    """A decimal integer operand."""
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class LabelRef:
    """A label operand, resolved against the symbol table in pass 2."""
    name: str

    def __str__(self) -> str:
        return self.name


OperandValue = Union[Literal, LabelRef]


def is_decimal(text: str) -> bool:
    """Return True if `text` is an optionally signed decimal integer."""
    return DECIMAL_PATTERN.match(text) is not None


def is_identifier(text: str) -> bool:
    return IDENTIFIER_PATTERN.match(text) is not None


def parse_value(text: str) -> Optional[OperandValue]:
    """
    Classify an operand token as a literal or a label reference.

    Returns:
        Literal for a decimal integer, LabelRef for an identifier,
        None for anything else
    """
    text = text.strip()
    if is_decimal(text):
        return Literal(int(text))
    if is_identifier(text):
        return LabelRef(text)
    return None


# =============================================================================
# Intermediate Line Records
# =============================================================================

class LineKind(Enum):
    """Classification of a source line."""
    BLANK = auto()        # Empty or comment-only
    LABEL_ONLY = auto()   # "NAME:" with nothing after it
    LOC = auto()          # Location counter directive
    DATA = auto()         # Data word directive
    INSTRUCTION = auto()  # Machine instruction


@dataclass
class SourceLine:
    """
    Intermediate record for one source line.

    Attributes:
        line_no: 1-based line number
        raw: Original text, verbatim (comment included)
        kind: Line classification
        label: Label defined on this line, if any
        operation: Mnemonic (upper case) or directive keyword as written
        operand_text: Operand text, unparsed
        address: Assigned address for word lines; new counter value for LOC;
                 counter value at the line otherwise
        occupies_word: True for DATA and INSTRUCTION lines
        data_value: Literal or LabelRef for DATA lines
        comment: Comment text after ';', if any
        filename: Source file name for diagnostics
    """
    line_no: int
    raw: str
    kind: LineKind
    address: int = 0
    label: Optional[str] = None
    operation: Optional[str] = None
    operand_text: str = ""
    occupies_word: bool = False
    data_value: Optional[OperandValue] = None
    comment: Optional[str] = None
    filename: str = "<input>"

    @property
    def location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line_no)


def split_comment(raw: str) -> tuple[str, Optional[str]]:
    """
    Split a line at the first ';'.

    Returns:
        (code, comment) where comment is None if the line has no ';'
    """
    index = raw.find(COMMENT_CHAR)
    if index < 0:
        return raw, None
    return raw[:index], raw[index + 1:].strip()


# =============================================================================
# Line Analyzer
# =============================================================================

class LineAnalyzer:
    """
    First pass of the assembler.

    Usage:
        symbols = SymbolTable()
        analyzer = LineAnalyzer(symbols, "prog.asm")
        records = analyzer.analyze(lines)
    """

    def __init__(self, symbols: SymbolTable, filename: str = "<input>",
                 diagnostics: Optional[DiagnosticLog] = None):
        self._symbols = symbols
        self._filename = filename
        self._diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()

    def analyze(self, lines: Iterable[str]) -> list[SourceLine]:
        """
        Analyze every line in order and return the records.

        The location counter starts at 0 and is threaded through
        analyze_line(); nothing else may change it.
        """
        records: list[SourceLine] = []
        location_counter = 0

        for line_no, raw in enumerate(lines, start=1):
            record, location_counter = self.analyze_line(
                raw.rstrip("\r\n"), line_no, location_counter
            )
            records.append(record)

        words = sum(1 for r in records if r.occupies_word)
        logger.debug(
            f"Pass 1: {len(records)} lines, {words} words, "
            f"{len(self._symbols)} labels"
        )
        return records

    def analyze_line(self, raw: str, line_no: int,
                     location_counter: int) -> tuple[SourceLine, int]:
        """
        Analyze one line.

        Args:
            raw: Line text without line terminator
            line_no: 1-based line number
            location_counter: Address the next word will receive

        Returns:
            (record, next_location_counter)

        Raises:
            DirectiveError: If a LOC or Data argument is missing or malformed
        """
        code, comment = split_comment(raw)

        record = SourceLine(
            line_no=line_no,
            raw=raw,
            kind=LineKind.BLANK,
            address=location_counter,
            comment=comment,
            filename=self._filename,
        )

        if not code.strip():
            return record, location_counter

        match = LABEL_PATTERN.match(code)
        if match:
            record.label = match.group(1)
            code = match.group(2)

        code = code.strip()
        if not code:
            record.kind = LineKind.LABEL_ONLY
            self._bind_label(record, location_counter)
            return record, location_counter

        parts = code.split(None, 1)
        operation = parts[0]
        operand_text = parts[1].strip() if len(parts) > 1 else ""
        record.operand_text = operand_text

        keyword = operation.upper()
        if keyword == LOC_DIRECTIVE:
            return self._analyze_loc(record, operation, operand_text)
        if keyword == DATA_DIRECTIVE:
            return self._analyze_data(record, operation, operand_text, location_counter)

        record.kind = LineKind.INSTRUCTION
        record.operation = keyword
        record.occupies_word = True
        self._check_word_address(record)
        self._bind_label(record, location_counter)
        return record, location_counter + 1

    # =========================================================================
    # Directives
    # =========================================================================

    def _analyze_loc(self, record: SourceLine, operation: str,
                     argument: str) -> tuple[SourceLine, int]:
        """LOC n: the counter becomes n; the line itself takes no word."""
        if not argument:
            raise DirectiveError(
                f"{operation} requires a decimal address",
                location=record.location,
                source_line=record.raw,
            )
        if not UNSIGNED_DECIMAL_PATTERN.match(argument):
            raise DirectiveError(
                f"invalid {operation} address '{argument}'",
                location=record.location,
                hint="the address must be a non-negative decimal integer",
                source_line=record.raw,
            )

        new_counter = int(argument)
        if new_counter > WORD_MASK:
            raise DirectiveError(
                f"{operation} address {new_counter} does not fit in 16 bits",
                location=record.location,
                hint=f"the address must be at most {WORD_MASK}",
                source_line=record.raw,
            )

        record.kind = LineKind.LOC
        record.operation = LOC_DIRECTIVE
        record.address = new_counter
        # A label on a LOC line names the address LOC sets
        self._bind_label(record, new_counter)
        logger.debug(f"Line {record.line_no}: location counter set to {new_counter}")
        return record, new_counter

    def _analyze_data(self, record: SourceLine, operation: str, argument: str,
                      location_counter: int) -> tuple[SourceLine, int]:
        """Data n|label: one word at the current counter."""
        if not argument:
            raise DirectiveError(
                f"{operation} requires a value or label",
                location=record.location,
                source_line=record.raw,
            )

        value = parse_value(argument)
        if value is None:
            raise DirectiveError(
                f"invalid {operation} value '{argument}'",
                location=record.location,
                hint="expected a decimal integer or a label name",
                source_line=record.raw,
            )

        record.kind = LineKind.DATA
        record.operation = "Data"
        record.data_value = value
        record.occupies_word = True
        self._check_word_address(record)
        self._bind_label(record, location_counter)
        return record, location_counter + 1

    def _check_word_address(self, record: SourceLine) -> None:
        if record.address > WORD_MASK:
            self._diagnostics.warn(
                f"location counter {record.address} does not fit in 16 bits; "
                f"word is placed at {record.address & WORD_MASK}",
                record.location,
            )

    def _bind_label(self, record: SourceLine, address: int) -> None:
        if record.label is not None:
            self._symbols.define(record.label, address, record.location)


def analyze_source(lines: Iterable[str], symbols: SymbolTable,
                   filename: str = "<input>",
                   diagnostics: Optional[DiagnosticLog] = None) -> list[SourceLine]:
    """Run pass 1 over `lines` and return the records."""
    return LineAnalyzer(symbols, filename, diagnostics).analyze(lines)
