"""CLI error handling.

Maps library exceptions to exit codes and prints them consistently.
"""

from __future__ import annotations

import functools
import logging
from enum import Enum
from typing import Any, Callable, TypeVar

import typer

from lingobundle.exceptions import (
    BundleError,
    CatalogError,
    CompileError,
    ConfigError,
    EmitError,
    PluralFormsError,
)

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """CLI exit codes."""

    GENERAL_ERROR = 1
    USAGE_ERROR = 2

    FILE_NOT_FOUND = 10
    FILE_NOT_WRITABLE = 12
    INVALID_FILE_FORMAT = 13

    COMPILE_FAILED = 20

    CONFIG_INVALID = 31


class CLIError(Exception):
    """Error raised by CLI commands.

    Attributes:
        message: Error message
        code: Exit code
        hint: Helpful hint for resolution
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.GENERAL_ERROR,
        hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.hint = hint


def classify(error: BaseException) -> ErrorCode:
    """Exit code for a library or OS exception."""
    if isinstance(error, FileNotFoundError):
        return ErrorCode.FILE_NOT_FOUND
    if isinstance(error, ConfigError):
        return ErrorCode.CONFIG_INVALID
    if isinstance(error, (CompileError, PluralFormsError)):
        return ErrorCode.COMPILE_FAILED
    if isinstance(error, (CatalogError, EmitError)):
        return ErrorCode.INVALID_FILE_FORMAT
    if isinstance(error, OSError):
        return ErrorCode.FILE_NOT_WRITABLE
    return ErrorCode.GENERAL_ERROR


F = TypeVar("F", bound=Callable[..., Any])


def error_boundary(func: F) -> F:
    """Convert exceptions raised by a command into messages and exit codes."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except CLIError as e:
            typer.echo(typer.style(f"Error: {e.message}", fg="red"), err=True)
            if e.hint:
                typer.echo(typer.style(f"Hint: {e.hint}", fg="yellow"), err=True)
            raise typer.Exit(e.code.value)
        except (BundleError, OSError) as e:
            typer.echo(typer.style(f"Error: {e}", fg="red"), err=True)
            raise typer.Exit(classify(e).value)
        except Exception as e:
            logger.exception("Unexpected error")
            typer.echo(typer.style(f"Error: {e}", fg="red"), err=True)
            raise typer.Exit(ErrorCode.GENERAL_ERROR.value)

    return wrapper  # type: ignore
