"""
C6461 Assembler - Toolchain for the C6461 Teaching Computer
===========================================================

This package provides a two-pass assembler for the C6461, a 16-bit
word-addressed machine with four general purpose registers and three
index registers. Programs are written in a small assembly language and
assembled into a listing file and a load file for the C6461 simulator.

Main Components
---------------
- **assembler**: Two-pass assembler (c6461asm)
    Converts assembly source files (.asm) to listing and load files

- **cpu**: Instruction set definition
    Opcode table, instruction classes and word layout constants

Quick Start
-----------
Assemble a program:
    >>> from c6461_asm import Assembler
    >>> asm = Assembler()
    >>> asm.assemble_file("program_a.asm")
    >>> asm.write_listing("program_a.lst")
    >>> asm.write_load("program_a.load")

Or use the command-line tool:
    $ c6461asm program_a.asm program_a.lst program_a.load

Version History
---------------
1.0.0 - Initial release
"""

import logging

__version__ = "1.0.0"
__author__ = "C6461 Toolchain Contributors"

logging.getLogger(__name__).addHandler(logging.NullHandler())

# =============================================================================
# Public API Exports
# =============================================================================

from c6461_asm.assembler import Assembler, AssemblyResult, assemble, assemble_file
from c6461_asm.errors import (
    C6461Error,
    AssemblerError,
    OperandSyntaxError,
    DirectiveError,
    UndefinedLabelError,
    UnknownOpcodeError,
    SymbolTableFrozenError,
    WarningsAsErrors,
    AssemblyWarning,
    SourceLocation,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Assembler
    "Assembler",
    "AssemblyResult",
    "assemble",
    "assemble_file",
    # Exception hierarchy
    "C6461Error",
    "AssemblerError",
    "OperandSyntaxError",
    "DirectiveError",
    "UndefinedLabelError",
    "UnknownOpcodeError",
    "SymbolTableFrozenError",
    "WarningsAsErrors",
    # Diagnostics
    "AssemblyWarning",
    "SourceLocation",
]
