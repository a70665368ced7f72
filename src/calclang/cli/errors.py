"""
Unified CLI Error Handling
==========================

Provides consistent error handling and exit codes for the calclang CLI.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    COMPILE_ERROR = 1    # Fatal lexical error
    INVALID_ARGS = 2     # Invalid arguments or missing files
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
) -> NoReturn:
    """
    Unified exception handler for the CLI.

    Formats the error message appropriately, optionally prints traceback
    in verbose mode, and exits with the correct exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    from calclang.calc.errors import CalcSyntaxError
    from calclang.errors import CalcError

    if isinstance(error, CalcSyntaxError):
        # Front-end errors already carry the "error:" prefix
        click.echo(str(error), err=True)
        sys.exit(ExitCode.COMPILE_ERROR)

    elif isinstance(error, CalcError):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.COMPILE_ERROR)

    elif isinstance(error, click.BadParameter):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, (FileNotFoundError, PermissionError, IsADirectoryError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        # Unexpected internal error
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
