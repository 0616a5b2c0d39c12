"""
C6461 Instruction Set Definition
================================

This module defines the C6461 instruction set: every mnemonic, its 6-bit
opcode and the instruction class that decides how its operands are parsed
and laid out in the 16-bit word.

The C6461 is a word-addressed machine with 16-bit words, four general
purpose registers (R0-R3) and three index registers (X1-X3). Opcodes are
documented in octal, and this table keeps them in octal.

Instruction Word Layouts
------------------------
All instructions occupy exactly one 16-bit word with the opcode in the top
six bits. The remaining ten bits depend on the instruction class:

    bit  15    10 9  8 7  6 5 4         0
        +--------+----+----+-+-----------+
        | opcode |  R | IX |I|  address  |   MEMORY
        +--------+----+----+-+-----------+
        | opcode |  R | 00 |0| immediate |   IMMEDIATE
        +--------+----+----+-+-----------+
        | opcode | RX | RY |  000000     |   REGISTER
        +--------+----+--------+--+--+---+
        | opcode |  R | count  |LR|AL|00 |   SHIFT
        +--------+----+-+------+--+--+---+
        | opcode |  R |0| devid          |   IO
        +--------+----+-+----------------+
        | opcode |  0000000000           |   NONE
        +--------+-----------------------+

Index-Register Forms
--------------------
LDX and STX address an index register rather than a general register, so
they also accept the short forms `IX,ADDR` and `IX,ADDR,I`.

Reference
---------
- C6461 Instruction Set Architecture (course handout)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


# =============================================================================
# Word Layout Constants
# =============================================================================

WORD_BITS = 16
WORD_MASK = 0xFFFF

OPCODE_SHIFT = 10
OPCODE_MASK = 0x3F
R_SHIFT = 8
IX_SHIFT = 6
I_SHIFT = 5
ADDRESS_MASK = 0x1F
COUNT_SHIFT = 4
LR_SHIFT = 3
AL_SHIFT = 2

MAX_REGISTER = 3
MAX_INDEX_REGISTER = 3
MAX_ADDRESS_FIELD = 31
MAX_IMMEDIATE = 31
MAX_SHIFT_COUNT = 15
MAX_DEVICE_ID = 31


# =============================================================================
# Instruction Classes
# =============================================================================

class InstructionClass(Enum):
    """
    Operand syntax and bit layout family of an instruction.

    Every mnemonic belongs to exactly one class.
    """
    MEMORY = auto()      # R,IX,ADDR[,I]  load/store/transfer/float/vector
    IMMEDIATE = auto()   # R,IMMED        AIR, SIR
    REGISTER = auto()    # RX,RY          MLT, DVD, TRR, AND, ORR, NOT
    SHIFT = auto()       # R,COUNT,LR,AL  SRC, RRC
    IO = auto()          # R,DEVID        IN, OUT, CHK
    NONE = auto()        # (no operand)   HLT

    def __str__(self) -> str:
        """Return human-readable name for error messages."""
        return {
            InstructionClass.MEMORY: "memory-reference",
            InstructionClass.IMMEDIATE: "arithmetic-immediate",
            InstructionClass.REGISTER: "register-to-register",
            InstructionClass.SHIFT: "shift/rotate",
            InstructionClass.IO: "I/O",
            InstructionClass.NONE: "no-operand",
        }[self]


# Operand syntax shown in diagnostics
OPERAND_SYNTAX: dict[InstructionClass, str] = {
    InstructionClass.MEMORY: "R,IX,ADDR[,I]",
    InstructionClass.IMMEDIATE: "R,IMMED",
    InstructionClass.REGISTER: "RX,RY",
    InstructionClass.SHIFT: "R,COUNT,L/R,A/L",
    InstructionClass.IO: "R,DEVID",
    InstructionClass.NONE: "(no operands)",
}


# =============================================================================
# Instruction Information
# =============================================================================

@dataclass(frozen=True)
class InstructionInfo:
    """
    Opcode table entry.

    Attributes:
        opcode: 6-bit opcode value
        iclass: Operand/layout class
        index_form: True for instructions that name an index register
                    (accept the short IX,ADDR[,I] form)
    """
    opcode: int
    iclass: InstructionClass
    index_form: bool = False

    def __repr__(self) -> str:
        return f"InstructionInfo(opcode=0o{self.opcode:02o}, iclass={self.iclass.name})"


def _oct(digits: str) -> int:
    return int(digits, 8)


# =============================================================================
# Opcode Table
# =============================================================================
# Key: mnemonic (upper case)
# Value: InstructionInfo(opcode, class[, index_form])
# =============================================================================

OPCODE_TABLE: dict[str, InstructionInfo] = {
    # Miscellaneous
    "HLT": InstructionInfo(_oct("00"), InstructionClass.NONE),
    "TRAP": InstructionInfo(_oct("30"), InstructionClass.MEMORY),

    # Load/store
    "LDR": InstructionInfo(_oct("01"), InstructionClass.MEMORY),
    "STR": InstructionInfo(_oct("02"), InstructionClass.MEMORY),
    "LDA": InstructionInfo(_oct("03"), InstructionClass.MEMORY),
    "LDX": InstructionInfo(_oct("41"), InstructionClass.MEMORY, index_form=True),
    "STX": InstructionInfo(_oct("42"), InstructionClass.MEMORY, index_form=True),

    # Transfer
    "JZ": InstructionInfo(_oct("10"), InstructionClass.MEMORY),
    "JNE": InstructionInfo(_oct("11"), InstructionClass.MEMORY),
    "JCC": InstructionInfo(_oct("12"), InstructionClass.MEMORY),
    "JMA": InstructionInfo(_oct("13"), InstructionClass.MEMORY),
    "JSR": InstructionInfo(_oct("14"), InstructionClass.MEMORY),
    "RFS": InstructionInfo(_oct("15"), InstructionClass.MEMORY),
    "SOB": InstructionInfo(_oct("16"), InstructionClass.MEMORY),
    "JGE": InstructionInfo(_oct("17"), InstructionClass.MEMORY),

    # Arithmetic with memory
    "AMR": InstructionInfo(_oct("04"), InstructionClass.MEMORY),
    "SMR": InstructionInfo(_oct("05"), InstructionClass.MEMORY),

    # Arithmetic with immediate
    "AIR": InstructionInfo(_oct("06"), InstructionClass.IMMEDIATE),
    "SIR": InstructionInfo(_oct("07"), InstructionClass.IMMEDIATE),

    # Register to register
    "MLT": InstructionInfo(_oct("70"), InstructionClass.REGISTER),
    "DVD": InstructionInfo(_oct("71"), InstructionClass.REGISTER),
    "TRR": InstructionInfo(_oct("72"), InstructionClass.REGISTER),
    "AND": InstructionInfo(_oct("73"), InstructionClass.REGISTER),
    "ORR": InstructionInfo(_oct("74"), InstructionClass.REGISTER),
    "NOT": InstructionInfo(_oct("75"), InstructionClass.REGISTER),

    # Shift/rotate
    "SRC": InstructionInfo(_oct("31"), InstructionClass.SHIFT),
    "RRC": InstructionInfo(_oct("32"), InstructionClass.SHIFT),

    # I/O
    "IN": InstructionInfo(_oct("61"), InstructionClass.IO),
    "OUT": InstructionInfo(_oct("62"), InstructionClass.IO),
    "CHK": InstructionInfo(_oct("63"), InstructionClass.IO),

    # Floating point and vector (memory-reference layout)
    "FADD": InstructionInfo(_oct("33"), InstructionClass.MEMORY),
    "FSUB": InstructionInfo(_oct("34"), InstructionClass.MEMORY),
    "VADD": InstructionInfo(_oct("35"), InstructionClass.MEMORY),
    "VSUB": InstructionInfo(_oct("36"), InstructionClass.MEMORY),
    "CNVRT": InstructionInfo(_oct("37"), InstructionClass.MEMORY),
    "LDFR": InstructionInfo(_oct("50"), InstructionClass.MEMORY),
    "STFR": InstructionInfo(_oct("51"), InstructionClass.MEMORY),
}


# Set of all valid mnemonics
MNEMONICS: frozenset[str] = frozenset(OPCODE_TABLE)


# =============================================================================
# Lookup Functions
# =============================================================================

def get_instruction_info(mnemonic: str) -> Optional[InstructionInfo]:
    """
    Look up an instruction by mnemonic (case-insensitive).

    Returns:
        InstructionInfo if found, None if the mnemonic is unknown
    """
    return OPCODE_TABLE.get(mnemonic.upper())


def is_valid_instruction(mnemonic: str) -> bool:
    """Check if a mnemonic is a C6461 instruction."""
    return mnemonic.upper() in MNEMONICS


def mnemonics_in_class(iclass: InstructionClass) -> list[str]:
    """Return the mnemonics of one instruction class, sorted."""
    return sorted(m for m, info in OPCODE_TABLE.items() if info.iclass is iclass)
