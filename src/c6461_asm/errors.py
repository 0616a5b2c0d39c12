"""
C6461 Assembler Error Hierarchy
===============================

This module defines the exception hierarchy for the C6461 toolchain.
All exceptions inherit from C6461Error, allowing callers to catch every
assembler-related error with a single except clause if desired.

Exception Hierarchy
-------------------
C6461Error (base)
└── AssemblerError (assembler-related)
    ├── OperandSyntaxError - malformed or out-of-range operand text
    │   └── DirectiveError - bad LOC/Data argument
    ├── UndefinedLabelError - reference to a label that was never defined
    ├── UnknownOpcodeError - mnemonic not in the opcode table
    ├── SymbolTableFrozenError - symbol table written after pass 1
    └── WarningsAsErrors - warnings promoted to a fatal error

Every fatal error is raised at the first offending line; there is no
error recovery. Warnings are collected in a DiagnosticLog and reported
after assembly.

Error messages follow this format:
    filename:line: error: description
        source_line_text
    hint: suggestion for fixing (when available)
"""

import difflib
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


# =============================================================================
# Base Exception Class
# =============================================================================

class C6461Error(Exception):
    """
    Base exception for all C6461 toolchain errors.

        try:
            assembler.assemble_file("program.asm")
        except C6461Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A line in a source file, for diagnostics.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
    """
    filename: str
    line: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(C6461Error):
    """
    Base exception for all assembler errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The raw source text of the offending line (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    @property
    def line(self) -> Optional[int]:
        """1-based source line number, if known."""
        return self.location.line if self.location else None

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            prog.asm:7: error: undefined label 'LOPP'
                    JNE 0,0,LOPP
            hint: did you mean 'LOOP'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line.rstrip()}")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class OperandSyntaxError(AssemblerError):
    """
    Malformed operand text.

    Raised when an instruction's operands cannot be parsed for its class:

    Examples:
        - Wrong number of comma-separated fields
        - Non-numeric text where a register number is required
        - Register, index, immediate, count or device out of range
        - Operand text on an instruction that takes none (HLT)
    """
    pass


class DirectiveError(OperandSyntaxError):
    """
    Bad argument to the LOC or Data directive.

    Examples:
        - LOC with no argument or a non-decimal argument
        - Data with no argument
        - Data argument that is neither an integer nor a label name
    """
    pass


class UndefinedLabelError(AssemblerError):
    """
    Reference to a label that was never defined.

    Raised during the second pass when a label operand cannot be resolved.
    Similarly-named labels are suggested to help catch typos.
    """

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        similar_labels: Optional[list[str]] = None,
    ):
        self.label = label
        self.similar_labels = similar_labels or []

        hint = None
        if self.similar_labels:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_labels[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined label '{label}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UnknownOpcodeError(AssemblerError):
    """Mnemonic not present in the C6461 opcode table."""

    def __init__(
        self,
        mnemonic: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        similar_mnemonics: Optional[list[str]] = None,
    ):
        self.mnemonic = mnemonic
        self.similar_mnemonics = similar_mnemonics or []

        hint = None
        if self.similar_mnemonics:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_mnemonics[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"unknown opcode '{mnemonic}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class SymbolTableFrozenError(AssemblerError):
    """
    Attempt to define a label after pass 1 has completed.

    This is never caused by source text; it indicates a caller that
    tried to interleave the two passes.
    """
    pass


class WarningsAsErrors(AssemblerError):
    """Raised when warnings were produced and the caller asked to fail on them."""

    def __init__(self, warnings: list["AssemblyWarning"]):
        self.warnings = list(warnings)
        word = "warning" if len(self.warnings) == 1 else "warnings"
        details = "\n".join(f"  {w}" for w in self.warnings)
        super().__init__(
            f"{len(self.warnings)} {word} treated as errors:\n{details}"
        )


def suggest_similar(name: str, candidates: Iterable[str], limit: int = 3) -> list[str]:
    """Return up to `limit` candidates that look like typos of `name`."""
    return difflib.get_close_matches(name, list(candidates), n=limit, cutoff=0.6)


# =============================================================================
# Warnings and Batch Reporting
# =============================================================================

@dataclass(frozen=True)
class AssemblyWarning:
    """
    A non-fatal diagnostic.

    Attributes:
        message: The warning text
        location: Where in the source the warning applies
    """
    message: str
    location: Optional[SourceLocation] = None

    @property
    def line(self) -> Optional[int]:
        return self.location.line if self.location else None

    def __str__(self) -> str:
        if self.location:
            return f"{self.location}: warning: {self.message}"
        return f"warning: {self.message}"


class DiagnosticLog:
    """
    Collects warnings for batch reporting.

    Fatal errors are raised immediately and never collected here; the log
    only holds the warnings an assembly run produced so that the caller
    can print them (or fail on them) once assembly is complete.

    Example:
        log = DiagnosticLog()
        log.warn("label redefined: 'A'", SourceLocation("prog.asm", 12))
        if log.has_warnings():
            print(log.report())
    """

    def __init__(self):
        self.warnings: list[AssemblyWarning] = []

    def warn(self, message: str, location: Optional[SourceLocation] = None) -> AssemblyWarning:
        """Record a warning and return it."""
        warning = AssemblyWarning(message, location)
        self.warnings.append(warning)
        logger.warning(str(warning))
        return warning

    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def warning_count(self) -> int:
        return len(self.warnings)

    def report(self) -> str:
        """
        Format all warnings for display.

        Returns:
            One warning per line followed by a summary line
        """
        lines = [str(w) for w in self.warnings]
        word = "warning" if len(self.warnings) == 1 else "warnings"
        lines.append(f"{len(self.warnings)} {word}")
        return "\n".join(lines)

    def clear(self) -> None:
        self.warnings.clear()
