"""Turning exceptions of CLI commands into readable output."""

from __future__ import annotations

import traceback
from collections.abc import Callable
from functools import wraps
from typing import TypeVar

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.panel import Panel

from com_graph.cli.error_formatter import ErrorFormatter
from com_graph.cli.pydantic_errors import (
    format_pydantic_location,
    get_suggestion_for_error,
    translate_pydantic_error,
)
from com_graph.description.builder import BuildError
from com_graph.description.loader import LoaderError
from com_graph.errors import CommunicationError
from com_graph.validation.validator import ValidationError

T = TypeVar("T")

console = Console(stderr=True)


def _error_panel(title: str, body: str) -> None:
    console.print(Panel(body, title=title, border_style="red"))


def _report_audit(error: ValidationError, verbose: bool) -> None:
    ErrorFormatter(console, show_context=verbose).format_validation_result(error.result)


def _report_schema(error: PydanticValidationError, verbose: bool) -> None:
    console.print("[red bold]Schema Validation Failed[/red bold]\n")
    for detail in error.errors():
        lines = [
            f"[red]✗[/red] {format_pydantic_location(detail['loc'])}",
            f"  {translate_pydantic_error(detail)}",
            f"  [dim]({detail['type']})[/dim]",
        ]
        hint = get_suggestion_for_error(detail)
        if hint:
            lines.append(f"  [green]💡 {hint}[/green]")
        console.print("\n".join(lines) + "\n")
    if verbose:
        console.print(f"[dim]Full error:[/dim]\n{error}")


def _report_loader(error: LoaderError, verbose: bool) -> None:
    _error_panel("Could not load network description", f"[red]{error}[/red]")


def _report_build(error: BuildError, verbose: bool) -> None:
    _error_panel(
        f"Build Failed ({type(error.cause).__name__})",
        f"[red]{error.cause}[/red]\n\n[dim]at {error.path}[/dim]",
    )


def _report_model(error: CommunicationError, verbose: bool) -> None:
    _error_panel(type(error).__name__, f"[red]{error}[/red]")


def _report_unexpected(error: Exception, verbose: bool) -> None:
    _error_panel("Error", f"[red]An unexpected error occurred:[/red]\n{error}")
    if verbose:
        console.print(f"\n[dim]Traceback:[/dim]\n{traceback.format_exc()}")
    else:
        console.print("\n[dim]Use --verbose for full traceback[/dim]")


# Checked in order; BuildError and LoaderError before their generic fallbacks.
_REPORTERS: list[tuple[type[Exception], Callable[..., None]]] = [
    (ValidationError, _report_audit),
    (PydanticValidationError, _report_schema),
    (LoaderError, _report_loader),
    (BuildError, _report_build),
    (CommunicationError, _report_model),
    (Exception, _report_unexpected),
]


def handle_exceptions(
    verbose: bool = False,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorate a command so that its errors are printed and exit with code 1.

    Args:
    ----
        verbose: Print tracebacks and full pydantic errors.

    Returns:
    -------
        The decorator.

    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: object, **kwargs: object) -> T:
            try:
                return func(*args, **kwargs)
            except typer.Exit:
                raise
            except Exception as e:
                reporter = next(
                    report for kind, report in _REPORTERS if isinstance(e, kind)
                )
                reporter(e, verbose)
                raise typer.Exit(1) from None

        return wrapper

    return decorator
