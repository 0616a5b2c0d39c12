"""
C6461 Assembler - Main Interface
================================

This module provides the Assembler class, the primary interface for
assembling C6461 source code. It runs the line analyzer (pass 1) to
completion, freezes the symbol table, and then runs the code generator
(pass 2).

Example Usage
-------------
>>> from c6461_asm.assembler import Assembler
>>>
>>> asm = Assembler()
>>> asm.assemble_string('''
... LOC 10
... START:  LDR 0,0,DATA
...         HLT
... DATA:   Data 7
... ''')
>>>
>>> print(asm.get_load())
000012 002014
000013 000000
000014 000007
>>>
>>> asm.write_listing("prog.lst")
>>> asm.write_load("prog.load")

Command-Line Usage
------------------
    $ c6461asm prog.asm prog.lst prog.load

Options:
    -s, --symbols FILE           Generate symbol file
    --strict-flags               Reject unrecognized shift/rotate flags
    -W, --warnings-as-errors     Fail if any warning was produced
    -v, --verbose                Verbose output
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from c6461_asm.assembler.codegen import CodeGenerator, EncodedWord, format_octal
from c6461_asm.assembler.parser import LineAnalyzer, SourceLine
from c6461_asm.assembler.symbols import SymbolTable
from c6461_asm.errors import (
    AssemblyWarning,
    DiagnosticLog,
    WarningsAsErrors,
)


@dataclass
class AssemblyResult:
    """
    Everything one assembly run produced.

    Attributes:
        records: Pass-1 records, one per source line
        words: Encoded (address, word) pairs in source order
        symbols: Label to address mapping
        warnings: Non-fatal diagnostics
        listing_lines: Listing text, one entry per source line
        load_lines: Load file text, one entry per word
    """
    records: list[SourceLine] = field(default_factory=list)
    words: list[EncodedWord] = field(default_factory=list)
    symbols: dict[str, int] = field(default_factory=dict)
    warnings: list[AssemblyWarning] = field(default_factory=list)
    listing_lines: list[str] = field(default_factory=list)
    load_lines: list[str] = field(default_factory=list)

    @property
    def listing(self) -> str:
        return "".join(f"{line}\n" for line in self.listing_lines)

    @property
    def load(self) -> str:
        return "".join(f"{line}\n" for line in self.load_lines)


class Assembler:
    """
    Main C6461 assembler class.

    Each assemble_* call starts from an empty symbol table and warning
    log, so assembling the same source twice gives identical output.

    Attributes:
        verbose: If True, print progress messages
        strict_flags: If True, unrecognized shift/rotate flags are fatal
        warnings_as_errors: If True, any warning fails the assembly
    """

    def __init__(self, verbose: bool = False,
                 strict_flags: bool = False,
                 warnings_as_errors: bool = False):
        """
        Initialize the assembler.

        Args:
            verbose: Enable verbose output
            strict_flags: Treat an unrecognized L/R or A/L token in a
                          shift/rotate instruction as an error instead of
                          reading it as 0 with a warning
            warnings_as_errors: Raise WarningsAsErrors after assembly if any
                                warning was produced
        """
        self._verbose = verbose
        self._strict_flags = strict_flags
        self._warnings_as_errors = warnings_as_errors
        self._source_file: Optional[Path] = None
        self._diagnostics = DiagnosticLog()
        self._symbols = SymbolTable(self._diagnostics)
        self._codegen = CodeGenerator(self._symbols, self._diagnostics, strict_flags)
        self._result: Optional[AssemblyResult] = None

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_lines(self, lines: Iterable[str],
                       filename: str = "<input>") -> AssemblyResult:
        """
        Assemble an ordered sequence of source lines.

        Pass 1 runs over every line before pass 2 starts.

        Args:
            lines: Source lines (line terminators are ignored)
            filename: Name used in diagnostics

        Returns:
            AssemblyResult for this run

        Raises:
            AssemblerError: On the first fatal error
        """
        self._diagnostics = DiagnosticLog()
        self._symbols = SymbolTable(self._diagnostics)
        self._codegen = CodeGenerator(self._symbols, self._diagnostics, self._strict_flags)
        self._result = None

        # Pass 1
        records = LineAnalyzer(self._symbols, filename, self._diagnostics).analyze(lines)
        self._symbols.freeze()

        if self._verbose:
            print(f"Pass 1: {len(records)} lines, {len(self._symbols)} labels")

        # Pass 2
        words = self._codegen.generate(records)

        if self._verbose:
            print(f"Pass 2: {len(words)} words")

        result = AssemblyResult(
            records=records,
            words=words,
            symbols=self._symbols.as_dict(),
            warnings=list(self._diagnostics.warnings),
            listing_lines=self._codegen.get_listing_lines(),
            load_lines=self._codegen.get_load_lines(),
        )

        if self._warnings_as_errors and result.warnings:
            raise WarningsAsErrors(result.warnings)

        self._result = result
        return result

    def assemble_string(self, source: str, filename: str = "<input>") -> AssemblyResult:
        """
        Assemble source code from a string.

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages
        """
        if self._verbose:
            print("Assembling from string...")
        return self.assemble_lines(source.splitlines(), filename)

    def assemble_file(self, filepath: str | Path) -> AssemblyResult:
        """
        Assemble source code from a file.

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        self._source_file = filepath

        if self._verbose:
            print(f"Assembling {filepath}...")

        source = filepath.read_text(encoding="utf-8")
        return self.assemble_lines(source.splitlines(), str(filepath))

    def assemble(self, source: str, filename: str = "<input>") -> AssemblyResult:
        """Assemble source code (alias for assemble_string)."""
        return self.assemble_string(source, filename)

    # =========================================================================
    # Output Methods
    # =========================================================================

    def _require_result(self) -> AssemblyResult:
        if self._result is None:
            raise RuntimeError("no successful assembly yet; call an assemble_* method first")
        return self._result

    def get_result(self) -> AssemblyResult:
        return self._require_result()

    def get_records(self) -> list[SourceLine]:
        return list(self._require_result().records)

    def get_words(self) -> list[EncodedWord]:
        """Return the (address, word) pairs in source order."""
        return list(self._require_result().words)

    def get_symbols(self) -> dict[str, int]:
        """Return the symbol table as a label to address dictionary."""
        return dict(self._require_result().symbols)

    def get_listing(self) -> str:
        return self._require_result().listing

    def get_load(self) -> str:
        return self._require_result().load

    def write_listing(self, filepath: str | Path) -> None:
        """
        Write the listing file.

        One line per source line: 'AAAAAA WWWWWW source' for word lines,
        eight spaces and the source text otherwise.
        """
        self._require_result()
        self._codegen.write_listing(filepath)

        if self._verbose:
            print(f"Wrote listing to {filepath}")

    def write_load(self, filepath: str | Path) -> None:
        """Write the load file: one 'AAAAAA WWWWWW' line per word."""
        self._require_result()
        self._codegen.write_load(filepath)

        if self._verbose:
            print(f"Wrote load file to {filepath}")

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Format: name address (octal), sorted by name
        """
        symbols = self._require_result().symbols
        with open(filepath, "w", encoding="utf-8") as f:
            f.write("# Symbol table\n")
            f.write("# Generated by c6461asm\n")
            for name, address in sorted(symbols.items()):
                f.write(f"{name} {format_octal(address)}\n")

        if self._verbose:
            print(f"Wrote symbols to {filepath}")

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def get_warnings(self) -> list[AssemblyWarning]:
        """Warnings from the most recent run, including a failed one."""
        return list(self._diagnostics.warnings)

    def has_warnings(self) -> bool:
        return self._diagnostics.has_warnings()

    def get_warning_report(self) -> str:
        return self._diagnostics.report()

    def is_strict(self) -> bool:
        return self._strict_flags


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>",
             strict_flags: bool = False) -> AssemblyResult:
    """
    Convenience function to assemble source code.

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler(strict_flags=strict_flags).assemble_string(source, filename)


def assemble_file(filepath: str | Path, strict_flags: bool = False) -> AssemblyResult:
    """
    Convenience function to assemble a file.

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler(strict_flags=strict_flags).assemble_file(filepath)
