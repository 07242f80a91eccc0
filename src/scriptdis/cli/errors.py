"""
Unified CLI Error Handling
==========================

Maps framework errors onto the driver's exit codes and user messages.
"""

import logging
import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from scriptdis.errors import (
    MalformedBytecodeError,
    SourceError,
    UnknownEngineError,
    UsageError,
)


logger = logging.getLogger(__name__)


class ExitCode(IntEnum):
    """Exit codes of the scriptdis driver."""
    SUCCESS = 0
    USAGE = 1            # Help requested or input file missing
    ENGINE_ERROR = 2     # Engine missing/unknown, unreadable or malformed input
    INTERNAL_ERROR = 3   # Unexpected exception


def fail(message: str, code: ExitCode) -> NoReturn:
    """Print message to stderr and exit with code."""
    click.echo(message, err=True)
    sys.exit(code)


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Unified exception handler for the driver.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    if isinstance(error, UnknownEngineError):
        fail("Unknown engine.", ExitCode.ENGINE_ERROR)

    elif isinstance(error, SourceError):
        # Missing or unreadable input file
        fail(f"Error: {error}", ExitCode.ENGINE_ERROR)

    elif isinstance(error, MalformedBytecodeError):
        fail(f"Error: {error}", ExitCode.ENGINE_ERROR)

    elif isinstance(error, UsageError):
        # State machine misuse is a bug in the driver itself
        logger.error(f"Disassembler used out of order: {error}")
        click.echo(f"ERROR: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)

    else:
        click.echo(f"ERROR: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
