"""
C6461 Operand Parsing
=====================

One parser per instruction class. Each turns the raw operand text of an
instruction line into a small immutable value that the code generator
packs into the instruction word.

Operand Syntax
--------------
| Class     | Syntax                     | Example        |
|-----------|----------------------------|----------------|
| MEMORY    | R,IX,ADDR[,I]              | LDR 1,2,10,I   |
| MEMORY    | IX,ADDR[,I] (LDX, STX)     | LDX 2,LOOP     |
| IMMEDIATE | R,IMMED                    | AIR 0,31       |
| REGISTER  | RX,RY                      | MLT 0,2        |
| SHIFT     | R,COUNT,L/R,A/L            | SRC 3,4,L,A    |
| IO        | R,DEVID                    | OUT 1,4        |
| NONE      | (nothing)                  | HLT            |

Fields are separated by commas; whitespace around a field is ignored.
All numbers are decimal. Any other form raises OperandSyntaxError.
"""

from dataclasses import dataclass
from typing import Optional

from c6461_asm.cpu import (
    InstructionClass,
    InstructionInfo,
    OPERAND_SYNTAX,
    MAX_REGISTER,
    MAX_INDEX_REGISTER,
    MAX_IMMEDIATE,
    MAX_SHIFT_COUNT,
    MAX_DEVICE_ID,
)
from c6461_asm.errors import DiagnosticLog, OperandSyntaxError, SourceLocation
from c6461_asm.assembler.parser import (
    OperandValue,
    is_decimal,
    parse_value,
)


# =============================================================================
# Flag Spellings
# =============================================================================
# Shift/rotate direction and type flags. L means "left" in the L/R field
# but "logical" in the A/L field, so the two fields have separate tables.

INDIRECT_TRUE = frozenset({"1", "I"})
INDIRECT_FALSE = frozenset({"0"})

LR_TRUE = frozenset({"1", "L", "LEFT"})
LR_FALSE = frozenset({"0", "R", "RIGHT"})

AL_TRUE = frozenset({"1", "A", "ARITHMETIC"})
AL_FALSE = frozenset({"0", "L", "LOGICAL"})


# =============================================================================
# Parsed Operands
# =============================================================================

@dataclass(frozen=True)
class MemoryOperands:
    register: int
    index: int
    indirect: bool
    address: OperandValue


@dataclass(frozen=True)
class ImmediateOperands:
    register: int
    immediate: int


@dataclass(frozen=True)
class RegisterOperands:
    rx: int
    ry: int


@dataclass(frozen=True)
class ShiftOperands:
    register: int
    count: int
    left: bool
    arithmetic: bool


@dataclass(frozen=True)
class IOOperands:
    register: int
    device: int


# =============================================================================
# Operand Parser
# =============================================================================

class OperandParser:
    """
    Parses the operand text of one instruction line.

    A parser is bound to the line it parses so every error it raises
    names that line.

    Attributes:
        mnemonic: Instruction mnemonic (for messages)
        location: Source location of the line
        source_line: Raw line text
        strict_flags: If True, unrecognized shift flags are fatal;
                      otherwise they read as 0 with a warning
    """

    def __init__(self, mnemonic: str, location: SourceLocation,
                 source_line: Optional[str] = None,
                 diagnostics: Optional[DiagnosticLog] = None,
                 strict_flags: bool = False):
        self.mnemonic = mnemonic
        self.location = location
        self.source_line = source_line
        self.strict_flags = strict_flags
        self._diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()

    def parse(self, info: InstructionInfo, text: str):
        """Dispatch on the instruction class."""
        iclass = info.iclass
        if iclass is InstructionClass.MEMORY:
            return self.parse_memory(text, index_form=info.index_form)
        if iclass is InstructionClass.IMMEDIATE:
            return self.parse_immediate(text)
        if iclass is InstructionClass.REGISTER:
            return self.parse_register_pair(text)
        if iclass is InstructionClass.SHIFT:
            return self.parse_shift(text)
        if iclass is InstructionClass.IO:
            return self.parse_io(text)
        return self.parse_none(text)

    # =========================================================================
    # Per-Class Parsers
    # =========================================================================

    def parse_memory(self, text: str, index_form: bool = False) -> MemoryOperands:
        """
        Parse R,IX,ADDR[,I] or the short IX,ADDR form.

        Three fields are R,IX,ADDR for every instruction. Index-register
        instructions (LDX, STX) also take IX,ADDR,I when the third field
        is the letter I.
        """
        tokens = self._split(text, InstructionClass.MEMORY)
        count = len(tokens)

        if count == 2:
            register = 0
            index = self._field(tokens[0], "index register", MAX_INDEX_REGISTER)
            address = self._address(tokens[1])
            indirect = False
        elif count == 3 and index_form and tokens[2].upper() == "I":
            register = 0
            index = self._field(tokens[0], "index register", MAX_INDEX_REGISTER)
            address = self._address(tokens[1])
            indirect = True
        elif count in (3, 4):
            register = self._field(tokens[0], "register", MAX_REGISTER)
            index = self._field(tokens[1], "index register", MAX_INDEX_REGISTER)
            address = self._address(tokens[2])
            indirect = self._indirect(tokens[3]) if count == 4 else False
        else:
            raise self._count_error(InstructionClass.MEMORY, count)

        return MemoryOperands(register, index, indirect, address)

    def parse_immediate(self, text: str) -> ImmediateOperands:
        tokens = self._expect(text, InstructionClass.IMMEDIATE, 2)
        register = self._field(tokens[0], "register", MAX_REGISTER)
        immediate = self._field(tokens[1], "immediate", MAX_IMMEDIATE)
        return ImmediateOperands(register, immediate)

    def parse_register_pair(self, text: str) -> RegisterOperands:
        tokens = self._expect(text, InstructionClass.REGISTER, 2)
        rx = self._field(tokens[0], "register", MAX_REGISTER)
        ry = self._field(tokens[1], "register", MAX_REGISTER)
        return RegisterOperands(rx, ry)

    def parse_shift(self, text: str) -> ShiftOperands:
        tokens = self._expect(text, InstructionClass.SHIFT, 4)
        register = self._field(tokens[0], "register", MAX_REGISTER)
        count = self._field(tokens[1], "shift count", MAX_SHIFT_COUNT)
        left = self._flag(tokens[2], "L/R", LR_TRUE, LR_FALSE)
        arithmetic = self._flag(tokens[3], "A/L", AL_TRUE, AL_FALSE)
        return ShiftOperands(register, count, left, arithmetic)

    def parse_io(self, text: str) -> IOOperands:
        tokens = self._expect(text, InstructionClass.IO, 2)
        register = self._field(tokens[0], "register", MAX_REGISTER)
        device = self._field(tokens[1], "device id", MAX_DEVICE_ID)
        return IOOperands(register, device)

    def parse_none(self, text: str) -> None:
        if text.strip():
            raise self._error(
                f"'{self.mnemonic}' takes no operands, got '{text.strip()}'"
            )
        return None

    # =========================================================================
    # Field Helpers
    # =========================================================================

    def _split(self, text: str, iclass: InstructionClass) -> list[str]:
        if not text or not text.strip():
            raise self._error(
                f"missing operands for '{self.mnemonic}'",
                hint=f"expected {OPERAND_SYNTAX[iclass]}",
            )
        tokens = [token.strip() for token in text.split(",")]
        for position, token in enumerate(tokens, start=1):
            if not token:
                raise self._error(
                    f"empty operand field {position} in '{text.strip()}'",
                    hint=f"expected {OPERAND_SYNTAX[iclass]}",
                )
        return tokens

    def _expect(self, text: str, iclass: InstructionClass, count: int) -> list[str]:
        tokens = self._split(text, iclass)
        if len(tokens) != count:
            raise self._count_error(iclass, len(tokens))
        return tokens

    def _field(self, token: str, what: str, maximum: int) -> int:
        """Parse a decimal field and check it lies in 0..maximum."""
        if not is_decimal(token):
            raise self._error(f"invalid {what} '{token}': expected a decimal number")
        value = int(token)
        if value < 0 or value > maximum:
            raise self._error(f"{what} out of range 0..{maximum}: {token}")
        return value

    def _address(self, token: str) -> OperandValue:
        value = parse_value(token)
        if value is None:
            raise self._error(
                f"invalid address '{token}'",
                hint="expected a decimal address or a label name",
            )
        return value

    def _indirect(self, token: str) -> bool:
        spelled = token.upper()
        if spelled in INDIRECT_TRUE:
            return True
        if spelled in INDIRECT_FALSE:
            return False
        raise self._error(
            f"invalid indirect flag '{token}'",
            hint="use I or 1 for indirect addressing, 0 or nothing for direct",
        )

    def _flag(self, token: str, name: str,
              true_spellings: frozenset[str], false_spellings: frozenset[str]) -> bool:
        spelled = token.upper()
        if spelled in true_spellings:
            return True
        if spelled in false_spellings:
            return False

        message = f"unrecognized {name} flag '{token}'"
        if self.strict_flags:
            raise self._error(
                message,
                hint=f"{name} accepts {', '.join(sorted(true_spellings | false_spellings))}",
            )
        self._diagnostics.warn(f"{message}; treating it as 0", self.location)
        return False

    def _count_error(self, iclass: InstructionClass, count: int) -> OperandSyntaxError:
        word = "field" if count == 1 else "fields"
        return self._error(
            f"wrong number of operands for '{self.mnemonic}': got {count} {word}",
            hint=f"expected {OPERAND_SYNTAX[iclass]}",
        )

    def _error(self, message: str, hint: Optional[str] = None) -> OperandSyntaxError:
        return OperandSyntaxError(
            message,
            location=self.location,
            hint=hint,
            source_line=self.source_line,
        )
