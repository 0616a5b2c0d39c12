"""
c6461asm - C6461 Assembler Command-Line Interface
=================================================

This module implements the command-line interface for the C6461
two-pass assembler.

Usage Examples
--------------
Basic assembly:
    $ c6461asm program_a.asm program_a.lst program_a.load

With a symbol file:
    $ c6461asm program_a.asm out.lst out.load -s out.sym

Reject unrecognized shift/rotate flags:
    $ c6461asm --strict-flags program_b.asm out.lst out.load

Fail on any warning:
    $ c6461asm -W program_b.asm out.lst out.load

Verbose mode:
    $ c6461asm -v program_a.asm out.lst out.load
"""

import logging
from pathlib import Path
from typing import Optional

import click

from c6461_asm import __version__
from c6461_asm.assembler import Assembler
from c6461_asm.errors import WarningsAsErrors
from c6461_asm.cli.errors import handle_cli_exception


def setup_logging(verbose: bool) -> None:
    """
    Configure logging based on verbosity.

    Warnings are echoed by the command itself, so the handler only
    passes records below WARNING.
    """
    if not verbose:
        return
    handler = logging.StreamHandler()
    handler.addFilter(lambda record: record.levelno < logging.WARNING)
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(levelname)s: %(message)s",
        handlers=[handler],
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.argument(
    "listing_file",
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.argument(
    "load_file",
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "--strict-flags/--lenient-flags",
    default=False,
    help="Reject unrecognized L/R and A/L flags in SRC/RRC instead of "
         "reading them as 0 with a warning. Default: lenient.",
)
@click.option(
    "-W", "--warnings-as-errors",
    is_flag=True,
    help="Treat any warning as a fatal error",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="c6461asm")
def main(
    input_file: Path,
    listing_file: Path,
    load_file: Path,
    symbols: Optional[Path],
    strict_flags: bool,
    warnings_as_errors: bool,
    verbose: bool,
) -> None:
    """
    Assemble C6461 source code.

    INPUT_FILE is the assembly source file (.asm). The listing is written
    to LISTING_FILE and the octal load image to LOAD_FILE. Neither file is
    written if assembly fails.

    \b
    Examples:
        c6461asm prog.asm prog.lst prog.load
        c6461asm prog.asm prog.lst prog.load -s prog.sym
        c6461asm -W prog.asm prog.lst prog.load
    """
    setup_logging(verbose)

    asm = Assembler(
        verbose=verbose,
        strict_flags=strict_flags,
        warnings_as_errors=warnings_as_errors,
    )

    if verbose:
        mode = "strict" if strict_flags else "lenient"
        click.echo(f"Shift/rotate flags: {mode}")

    try:
        asm.assemble_file(input_file)

        for warning in asm.get_warnings():
            click.echo(str(warning), err=True)

        asm.write_listing(listing_file)
        asm.write_load(load_file)

        if symbols:
            asm.write_symbols(symbols)

        if verbose:
            words = asm.get_words()
            sym_count = len(asm.get_symbols())
            click.echo(f"Assembled {len(words)} words")
            click.echo(f"Defined {sym_count} labels")

        click.echo(f"Assembling complete. Listing -> {listing_file}, Load -> {load_file}")

    except Exception as e:
        # WarningsAsErrors already lists them
        if not isinstance(e, WarningsAsErrors):
            for warning in asm.get_warnings():
                click.echo(str(warning), err=True)
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
