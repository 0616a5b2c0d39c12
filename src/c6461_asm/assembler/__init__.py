"""
C6461 Two-Pass Assembler
========================

This module provides the assembler for the C6461, the 16-bit
word-addressed teaching computer. It turns a source file into a listing
file and a load file of octal (address, word) pairs.

Main Components
---------------
- **Assembler**: Main assembler class that runs both passes
- **LineAnalyzer**: Pass 1, classifies lines and assigns addresses
- **SymbolTable**: Label to address mapping, frozen after pass 1
- **OperandParser**: Parses operand text for each instruction class
- **CodeGenerator**: Pass 2, encodes words and formats the outputs

Assembly Process
----------------
1. **Pass 1 (LineAnalyzer)**:
   - Split off comments and labels
   - Handle LOC and Data directives
   - Give every instruction and Data line the current address
   - Define labels in the symbol table

2. **Pass 2 (CodeGenerator)**:
   - Look up each mnemonic in the opcode table
   - Parse operands according to the instruction class
   - Resolve label operands (forward references included)
   - Pack the 16-bit word

Example Usage
-------------
>>> from c6461_asm.assembler import Assembler
>>> asm = Assembler()
>>> asm.assemble_file("program_a.asm")
>>> asm.write_listing("program_a.lst")
>>> asm.write_load("program_a.load")

Supported Features
------------------
- Full C6461 instruction set (memory, immediate, register, shift, I/O)
- Labels, including forward references
- LOC and Data directives
- Indirect addressing and index registers
- Listing, load and symbol file generation
"""

from c6461_asm.assembler.assembler import (
    Assembler,
    AssemblyResult,
    assemble,
    assemble_file,
)
from c6461_asm.assembler.parser import (
    LineAnalyzer,
    LineKind,
    SourceLine,
    Literal,
    LabelRef,
    analyze_source,
)
from c6461_asm.assembler.symbols import SymbolTable
from c6461_asm.assembler.operands import OperandParser
from c6461_asm.assembler.codegen import CodeGenerator, EncodedWord, format_octal
from c6461_asm.cpu import (
    InstructionClass,
    InstructionInfo,
    OPCODE_TABLE,
    MNEMONICS,
)

__all__ = [
    # Main class and functions
    "Assembler",
    "AssemblyResult",
    "assemble",
    "assemble_file",
    # Pass 1
    "LineAnalyzer",
    "LineKind",
    "SourceLine",
    "Literal",
    "LabelRef",
    "analyze_source",
    # Symbols
    "SymbolTable",
    # Operands
    "OperandParser",
    # Code generator
    "CodeGenerator",
    "EncodedWord",
    "format_octal",
    # Opcodes
    "InstructionClass",
    "InstructionInfo",
    "OPCODE_TABLE",
    "MNEMONICS",
]
