"""
Unified CLI Error Handling
==========================

Provides consistent error handling and exit codes across all CLI tools.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    LOAD_ERROR = 1       # Image missing, unreadable or malformed
    INVALID_ARGS = 2     # Invalid arguments (click usage errors)
    INTERNAL_ERROR = 3   # Unexpected internal error
    INTERRUPTED = 254    # Stopped by SIGINT (exit status -2 as a byte)


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Unified exception handler for all CLI tools.

    Formats the error message appropriately, optionally prints traceback
    in verbose mode, and exits with the correct exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    from lc3_vm.errors import ImageError, LC3Error

    if isinstance(error, ImageError):
        # Already formatted as "Failed to load image: <path>"
        click.echo(str(error), err=True)
        sys.exit(ExitCode.LOAD_ERROR)

    elif isinstance(error, LC3Error):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.LOAD_ERROR)

    elif isinstance(error, click.BadParameter):
        # Invalid command-line arguments
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        # Unexpected internal error
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
