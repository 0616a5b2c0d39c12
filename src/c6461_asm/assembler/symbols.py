"""
C6461 Symbol Table
==================

Maps label names to the decimal word address they denote.

The table is written only by pass 1 and read only by pass 2. Once pass 1
completes the assembler calls freeze(); any later define() raises
SymbolTableFrozenError, so the two passes cannot be interleaved by
accident.

Labels are case-sensitive. Redefining a label is not fatal: the newest
address wins and a warning naming the line is recorded.
"""

import logging
from typing import Iterator, Optional

from c6461_asm.errors import (
    DiagnosticLog,
    SourceLocation,
    SymbolTableFrozenError,
    UndefinedLabelError,
    suggest_similar,
)

logger = logging.getLogger(__name__)


class SymbolTable:
    """
    Label to address mapping with a pass-1 write phase and a pass-2 read phase.

    Usage:
        symbols = SymbolTable(diagnostics)
        symbols.define("START", 10, location)
        symbols.freeze()
        address = symbols.resolve("START", location)
    """

    def __init__(self, diagnostics: Optional[DiagnosticLog] = None):
        self._addresses: dict[str, int] = {}
        self._definitions: dict[str, SourceLocation] = {}
        self._frozen = False
        self._diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()

    # =========================================================================
    # Pass 1: Definition
    # =========================================================================

    def define(self, label: str, address: int,
               location: Optional[SourceLocation] = None) -> None:
        """
        Bind `label` to `address`, overwriting any earlier binding.

        Args:
            label: Label name (case-sensitive)
            address: Word address the label denotes
            location: Defining line, used in the redefinition warning

        Raises:
            SymbolTableFrozenError: If called after freeze()
        """
        if self._frozen:
            raise SymbolTableFrozenError(
                f"cannot define label '{label}' after pass 1 has completed",
                location=location,
            )

        previous = self._addresses.get(label)
        if previous is not None and previous != address:
            message = (
                f"label redefined: '{label}' (was {previous}, now {address})"
            )
            first = self._definitions.get(label)
            if first is not None:
                message += f"; first defined at line {first.line}"
            self._diagnostics.warn(message, location)

        self._addresses[label] = address
        if location is not None:
            self._definitions.setdefault(label, location)

    def freeze(self) -> None:
        """Mark the end of pass 1; the table is read-only from now on."""
        self._frozen = True
        logger.debug(f"Symbol table frozen with {len(self._addresses)} labels")

    @property
    def frozen(self) -> bool:
        return self._frozen

    # =========================================================================
    # Pass 2: Resolution
    # =========================================================================

    def resolve(self, label: str, location: Optional[SourceLocation] = None,
                source_line: Optional[str] = None) -> int:
        """
        Return the address bound to `label`.

        Raises:
            UndefinedLabelError: If the label was never defined
        """
        try:
            return self._addresses[label]
        except KeyError:
            raise UndefinedLabelError(
                label,
                location=location,
                source_line=source_line,
                similar_labels=suggest_similar(label, self._addresses),
            ) from None

    def get(self, label: str) -> Optional[int]:
        return self._addresses.get(label)

    def __contains__(self, label: object) -> bool:
        return label in self._addresses

    def __len__(self) -> int:
        return len(self._addresses)

    def __iter__(self) -> Iterator[str]:
        return iter(self._addresses)

    def items(self):
        return self._addresses.items()

    def as_dict(self) -> dict[str, int]:
        """Return a copy of the label to address mapping."""
        return dict(self._addresses)
