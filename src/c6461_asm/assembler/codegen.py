"""
C6461 Code Generator (Pass 2)
=============================

This module turns the SourceLine records built by pass 1 into 16-bit
instruction and data words, and formats the two assembler outputs.

Pass 2 (Encoding)
-----------------
- Walk the records in source order
- Skip lines that occupy no word (blank, label-only, LOC)
- Encode Data lines: literal wrapped to 16 bits, or the address of a label
- Encode instructions: look up the opcode, parse the operands for the
  instruction class, pack the fields into the word
- Resolve label operands against the (frozen) symbol table

Output Formats
--------------
Listing, one line per source line:
```
000012 002144 START:  LDR 0,0,100        ; R0 <- M[100]
        ; Data region
```
Word lines carry the address and the word as six octal digits each;
other lines carry an eight-space prefix.

Load file, one line per word:
```
000012 002144
```
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from c6461_asm.cpu import (
    InstructionClass,
    MNEMONICS,
    WORD_MASK,
    OPCODE_SHIFT,
    OPCODE_MASK,
    R_SHIFT,
    IX_SHIFT,
    I_SHIFT,
    ADDRESS_MASK,
    COUNT_SHIFT,
    LR_SHIFT,
    AL_SHIFT,
    MAX_ADDRESS_FIELD,
    get_instruction_info,
)
from c6461_asm.errors import (
    DiagnosticLog,
    OperandSyntaxError,
    UnknownOpcodeError,
    suggest_similar,
)
from c6461_asm.assembler.parser import (
    LabelRef,
    LineKind,
    Literal,
    OperandValue,
    SourceLine,
)
from c6461_asm.assembler.operands import (
    IOOperands,
    ImmediateOperands,
    MemoryOperands,
    OperandParser,
    RegisterOperands,
    ShiftOperands,
)
from c6461_asm.assembler.symbols import SymbolTable

logger = logging.getLogger(__name__)


# Listing prefix for lines that produce no word
LISTING_BLANK_PREFIX = " " * 8


def format_octal(value: int) -> str:
    """Format a 16-bit value as six zero-padded octal digits."""
    return f"{value & WORD_MASK:06o}"


# =============================================================================
# Encoded Words
# =============================================================================

@dataclass(frozen=True)
class EncodedWord:
    """
    One assembled word.

    Attributes:
        address: Word address
        word: 16-bit value
        line_no: Source line that produced it
    """
    address: int
    word: int
    line_no: int

    def format(self) -> str:
        """Return the 'AAAAAA WWWWWW' load-file form."""
        return f"{format_octal(self.address)} {format_octal(self.word)}"


def pack_word(opcode: int, register: int = 0, index: int = 0,
              indirect: int = 0, low: int = 0) -> int:
    """Pack the common opcode/R/IX/I/low-five-bits layout."""
    return (
        ((opcode & OPCODE_MASK) << OPCODE_SHIFT)
        | ((register & 0x3) << R_SHIFT)
        | ((index & 0x3) << IX_SHIFT)
        | ((indirect & 0x1) << I_SHIFT)
        | (low & ADDRESS_MASK)
    )


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator:
    """
    Encodes pass-1 records into words.

    The symbol table is only read here; pass 1 must have finished (and
    frozen the table) before generate() is called.

    Usage:
        codegen = CodeGenerator(symbols, diagnostics)
        words = codegen.generate(records)
        listing = codegen.get_listing()
        load = codegen.get_load()
    """

    def __init__(self, symbols: SymbolTable,
                 diagnostics: Optional[DiagnosticLog] = None,
                 strict_flags: bool = False):
        self._symbols = symbols
        self._diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
        self._strict_flags = strict_flags
        self._records: list[SourceLine] = []
        self._words: list[EncodedWord] = []
        self._words_by_line: dict[int, EncodedWord] = {}

    # =========================================================================
    # Public Interface
    # =========================================================================

    def generate(self, records: list[SourceLine]) -> list[EncodedWord]:
        """
        Encode every word-producing record, in source order.

        Returns:
            The (address, word) pairs

        Raises:
            UnknownOpcodeError: Mnemonic not in the opcode table
            OperandSyntaxError: Malformed or out-of-range operands
            UndefinedLabelError: Label operand never defined
        """
        self._records = list(records)
        self._words = []
        self._words_by_line = {}

        for record in self._records:
            if not record.occupies_word:
                continue
            word = self.encode_line(record)
            encoded = EncodedWord(record.address, word & WORD_MASK, record.line_no)
            self._words.append(encoded)
            self._words_by_line[record.line_no] = encoded

        logger.debug(f"Pass 2: encoded {len(self._words)} words")
        return list(self._words)

    def encode_line(self, record: SourceLine) -> int:
        """Encode one word-producing record."""
        if record.kind is LineKind.DATA:
            return self._encode_data(record)
        return self._encode_instruction(record)

    def get_words(self) -> list[EncodedWord]:
        return list(self._words)

    def get_listing_lines(self) -> list[str]:
        """Return the listing, one entry per source line."""
        lines = []
        for record in self._records:
            encoded = self._words_by_line.get(record.line_no)
            if encoded is None:
                lines.append(f"{LISTING_BLANK_PREFIX}{record.raw}")
            else:
                lines.append(f"{encoded.format()} {record.raw}")
        return lines

    def get_load_lines(self) -> list[str]:
        """Return the load file, one entry per word."""
        return [encoded.format() for encoded in self._words]

    def get_listing(self) -> str:
        return _join_lines(self.get_listing_lines())

    def get_load(self) -> str:
        return _join_lines(self.get_load_lines())

    def write_listing(self, filepath: str | Path) -> None:
        """Write the listing file."""
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.get_listing())

    def write_load(self, filepath: str | Path) -> None:
        """Write the load file."""
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.get_load())

    # =========================================================================
    # Data Words
    # =========================================================================

    def _encode_data(self, record: SourceLine) -> int:
        value = record.data_value
        if isinstance(value, Literal):
            return value.value & WORD_MASK
        address = self._symbols.resolve(value.name, record.location, record.raw)
        return address & WORD_MASK

    # =========================================================================
    # Instruction Words
    # =========================================================================

    def _encode_instruction(self, record: SourceLine) -> int:
        mnemonic = record.operation
        info = get_instruction_info(mnemonic)
        if info is None:
            raise UnknownOpcodeError(
                mnemonic,
                location=record.location,
                source_line=record.raw,
                similar_mnemonics=suggest_similar(mnemonic, sorted(MNEMONICS)),
            )

        parser = OperandParser(
            mnemonic,
            record.location,
            source_line=record.raw,
            diagnostics=self._diagnostics,
            strict_flags=self._strict_flags,
        )
        operands = parser.parse(info, record.operand_text)
        opcode = info.opcode & OPCODE_MASK

        if info.iclass is InstructionClass.MEMORY:
            return self._emit_memory(opcode, operands, record)
        if info.iclass is InstructionClass.IMMEDIATE:
            return self._emit_immediate(opcode, operands)
        if info.iclass is InstructionClass.REGISTER:
            return self._emit_register(opcode, operands)
        if info.iclass is InstructionClass.SHIFT:
            return self._emit_shift(opcode, operands)
        if info.iclass is InstructionClass.IO:
            return self._emit_io(opcode, operands)
        return pack_word(opcode)

    def _emit_memory(self, opcode: int, ops: MemoryOperands, record: SourceLine) -> int:
        address = self._resolve_address_field(ops.address, record)
        return pack_word(opcode, ops.register, ops.index, int(ops.indirect), address)

    def _emit_immediate(self, opcode: int, ops: ImmediateOperands) -> int:
        return pack_word(opcode, ops.register, low=ops.immediate)

    def _emit_register(self, opcode: int, ops: RegisterOperands) -> int:
        return pack_word(opcode, ops.rx, ops.ry)

    def _emit_shift(self, opcode: int, ops: ShiftOperands) -> int:
        return (
            pack_word(opcode, ops.register)
            | ((ops.count & 0xF) << COUNT_SHIFT)
            | (int(ops.left) << LR_SHIFT)
            | (int(ops.arithmetic) << AL_SHIFT)
        )

    def _emit_io(self, opcode: int, ops: IOOperands) -> int:
        return pack_word(opcode, ops.register, low=ops.device)

    def _resolve_address_field(self, value: OperandValue, record: SourceLine) -> int:
        """
        Resolve a memory operand to its 5-bit address field.

        Values above 31 are truncated to their low five bits with a warning;
        reaching the full address is left to the program's index registers.
        """
        if isinstance(value, LabelRef):
            address = self._symbols.resolve(value.name, record.location, record.raw)
        else:
            address = value.value

        if address < 0:
            raise OperandSyntaxError(
                f"negative address {address}",
                location=record.location,
                source_line=record.raw,
            )
        if address > WORD_MASK:
            self._diagnostics.warn(
                f"address {address} does not fit in 16 bits", record.location
            )
        if address > MAX_ADDRESS_FIELD:
            field = address & ADDRESS_MASK
            shown = f"'{value}' = {address}" if isinstance(value, LabelRef) else str(address)
            self._diagnostics.warn(
                f"address {shown} > {MAX_ADDRESS_FIELD}; encoding "
                f"lower 5 bits ({field}). Use index registers to reach the "
                f"full address",
                record.location,
            )
            return field
        return address


def _join_lines(lines: list[str]) -> str:
    return "".join(f"{line}\n" for line in lines)
