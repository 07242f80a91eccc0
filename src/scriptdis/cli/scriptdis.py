"""
scriptdis - Script Bytecode Disassembler Command-Line Interface
===============================================================

This module implements the command-line driver for the disassembler
framework. It lists the registered engines and disassembles a script file
with a chosen engine.

Usage Examples
--------------
List the supported engines:
    $ scriptdis --list

Disassemble to stdout:
    $ scriptdis -e scummv6 -d -- script.bin
    $ scriptdis -d -e scummv6 script.bin

Disassemble to a file:
    $ scriptdis -e scummv6 -d listing.txt script.bin

Exit codes: 0 success, 1 help or missing input file, 2 engine or input
error, 3 unexpected error.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from scriptdis import __version__
from scriptdis.cli.errors import ExitCode, fail, handle_cli_exception
from scriptdis.config import DisassemblerConfig
from scriptdis.registry import EngineRegistry, create_default_registry


logger = logging.getLogger(__name__)

USAGE_NOTE = (
    "Note: If outputting to stdout, -d must NOT be specified immediately "
    "before the input file."
)


def setup_logging(verbose: bool, level_name: str) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else getattr(logging, level_name, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command(add_help_option=False)
@click.argument(
    "input_file",
    required=False,
    type=click.Path(path_type=Path),
)
@click.option(
    "-?", "-h", "--help", "show_help",
    is_flag=True,
    help="Produce this help message.",
)
@click.option(
    "-e", "--engine",
    type=str,
    default=None,
    help="Engine the script originates from.",
)
@click.option(
    "-l", "--list", "list_engines",
    is_flag=True,
    help="List the supported engines.",
)
@click.option(
    "-d", "--dump-disassembly", "dump",
    is_flag=False,
    flag_value="-",
    default=None,
    metavar="[FILE]",
    help="Dump the disassembly to a file. Leave out filename to output to stdout.",
)
@click.option(
    "--no-bytes",
    is_flag=True,
    help="Omit raw bytes from the listing.",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="scriptdis")
@click.pass_context
def main(
    ctx: click.Context,
    input_file: Optional[Path],
    show_help: bool,
    engine: Optional[str],
    list_engines: bool,
    dump: Optional[str],
    no_bytes: bool,
    verbose: bool,
) -> None:
    """
    Disassemble engine script bytecode.

    INPUT_FILE is the script file to disassemble.
    """
    config = DisassemblerConfig.from_env()
    setup_logging(verbose, config.log_level)

    if isinstance(ctx.obj, EngineRegistry):
        registry = ctx.obj
    else:
        registry = create_default_registry()

    if list_engines:
        click.echo("Available engines:")
        for engine_id, description in registry.list():
            click.echo(f"{engine_id} {description}")
        sys.exit(ExitCode.SUCCESS)

    if show_help or input_file is None:
        click.echo(ctx.get_help())
        click.echo(USAGE_NOTE)
        sys.exit(ExitCode.USAGE)

    engine = engine or config.default_engine
    if not engine:
        fail("Engine must be specified.", ExitCode.ENGINE_ERROR)
    if engine not in registry:
        fail("Unknown engine.", ExitCode.ENGINE_ERROR)

    if no_bytes:
        config.show_bytes = False

    try:
        disasm = registry.create(engine)
        disasm.config = config
        disasm.open(input_file)
        instructions = disasm.decode()

        if verbose:
            click.echo(f"Input file: {input_file} ({len(disasm.data)} bytes)", err=True)
            click.echo(f"Engine: {engine} ({registry.describe(engine)})", err=True)
            click.echo(f"Instructions disassembled: {len(instructions)}", err=True)

        if dump is not None:
            try:
                with click.open_file(dump, "w", encoding="utf-8") as out:
                    disasm.render(out)
            except OSError as e:
                fail(f"Error writing {dump}: {e}", ExitCode.ENGINE_ERROR)
            if verbose and dump != "-":
                click.echo(f"Output written to: {dump}", err=True)
    except Exception as e:
        handle_cli_exception(e, verbose=verbose)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
