"""
C6461 Command-Line Interface
============================

This package provides the command-line tools for the C6461 toolchain:

- **c6461asm**: C6461 two-pass assembler

Each tool is implemented as a Click-based CLI application with
help text and consistent exit codes.
"""

__all__ = ["c6461asm"]
