"""
C6461 CPU Package
=================

Architecture definitions shared by the assembler and the command-line
tools: the opcode table, instruction classes and word-layout constants.

Usage:
    from c6461_asm.cpu import (
        InstructionClass,
        InstructionInfo,
        OPCODE_TABLE,
        get_instruction_info,
    )
"""

from c6461_asm.cpu.c6461 import (
    # Core types
    InstructionClass,
    InstructionInfo,
    # Master instruction database
    OPCODE_TABLE,
    MNEMONICS,
    OPERAND_SYNTAX,
    # Word layout
    WORD_BITS,
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
    # Field ranges
    MAX_REGISTER,
    MAX_INDEX_REGISTER,
    MAX_ADDRESS_FIELD,
    MAX_IMMEDIATE,
    MAX_SHIFT_COUNT,
    MAX_DEVICE_ID,
    # Lookup functions
    get_instruction_info,
    is_valid_instruction,
    mnemonics_in_class,
)

__all__ = [
    "InstructionClass",
    "InstructionInfo",
    "OPCODE_TABLE",
    "MNEMONICS",
    "OPERAND_SYNTAX",
    "WORD_BITS",
    "WORD_MASK",
    "OPCODE_SHIFT",
    "OPCODE_MASK",
    "R_SHIFT",
    "IX_SHIFT",
    "I_SHIFT",
    "ADDRESS_MASK",
    "COUNT_SHIFT",
    "LR_SHIFT",
    "AL_SHIFT",
    "MAX_REGISTER",
    "MAX_INDEX_REGISTER",
    "MAX_ADDRESS_FIELD",
    "MAX_IMMEDIATE",
    "MAX_SHIFT_COUNT",
    "MAX_DEVICE_ID",
    "get_instruction_info",
    "is_valid_instruction",
    "mnemonics_in_class",
]
