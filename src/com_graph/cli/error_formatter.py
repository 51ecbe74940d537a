"""Rich renderings of a graph audit: a detailed report, a table and a tree."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from com_graph.validation.errors import ValidationSeverity

if TYPE_CHECKING:
    from pathlib import Path

    from com_graph.validation.errors import ValidationIssue, ValidationResult

SEVERITY_STYLES = {
    ValidationSeverity.ERROR: "red",
    ValidationSeverity.WARNING: "yellow",
}


def _style(issue: ValidationIssue) -> str:
    return SEVERITY_STYLES.get(issue.severity, "white")


def _section(issue: ValidationIssue) -> str:
    """First segment of the issue path: frames, pdus, signals, ..."""
    if issue.location is None:
        return "general"
    return issue.location.path.partition(".")[0]


class _IssueRenderer:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)


class ErrorFormatter(_IssueRenderer):
    """Detailed report: a summary panel, then every issue with location and hint.

    Args:
    ----
        console: Where to print; stderr by default.
        show_context: Also print the details recorded with each issue, such as
            the coverage bitmap of an overlapping frame.

    """

    def __init__(self, console: Console | None = None, show_context: bool = True) -> None:
        super().__init__(console)
        self.show_context = show_context

    def format_validation_result(
        self, result: ValidationResult, source_path: Path | None = None
    ) -> None:
        """Print ``result``; ``source_path`` is shown in the summary panel."""
        errors, warnings = result.errors, result.warnings
        if not errors and not warnings:
            self.console.print("[green]✓ Validation passed[/green]")
            return

        self.console.print(self._summary(len(errors), len(warnings), source_path))
        self.console.print()
        for issue in [*errors, *warnings]:
            self._print_issue(issue)

        totals = Text()
        if errors:
            totals.append(f"✗ {len(errors)} error(s)", style="red bold")
        if warnings:
            totals.append(", " if errors else "")
            totals.append(f"{len(warnings)} warning(s)", style="yellow")
        self.console.print(totals)

    @staticmethod
    def _summary(errors: int, warnings: int, source_path: Path | None) -> Panel:
        body = Text()
        if source_path:
            body.append(f"File: {source_path}\n", style="dim")
        counts = []
        if errors:
            counts.append((f"Errors: {errors}", "red bold"))
        if warnings:
            counts.append((f"Warnings: {warnings}", "yellow"))
        for index, (label, style) in enumerate(counts):
            if index:
                body.append("  ")
            body.append(label, style=style)

        if errors:
            return Panel(body, title="Validation Failed", border_style="red")
        return Panel(body, title="Validation Warnings", border_style="yellow")

    def _print_issue(self, issue: ValidationIssue) -> None:
        style = _style(issue)
        headline = Text()
        headline.append(issue.severity.name, style=f"{style} bold")
        headline.append(f" [{issue.code}] ", style=style)
        headline.append(issue.message)
        self.console.print(headline)

        details = []
        if issue.location:
            details.append(f"[dim]at {issue.location}[/dim]")
        if self.show_context:
            details += [f"[dim]{key}: {value}[/dim]" for key, value in issue.context.items()]
        if issue.suggestion:
            details.append(f"[green]💡 {issue.suggestion}[/green]")
        for line in details:
            self.console.print(f"  {line}")
        self.console.print()


class ErrorTree(_IssueRenderer):
    """Issues grouped by the section of the graph they were found in."""

    def print_result(self, result: ValidationResult) -> None:
        grouped: defaultdict[str, list[ValidationIssue]] = defaultdict(list)
        for issue in result.issues:
            grouped[_section(issue)].append(issue)

        tree = Tree("[bold]Validation Issues[/bold]")
        for section in sorted(grouped):
            issues = grouped[section]
            branch = tree.add(f"[cyan]{section}[/cyan] ({len(issues)} issues)")
            for issue in issues:
                branch.add(Text.assemble((issue.code, _style(issue)), " ", issue.message))
        self.console.print(tree)


class ErrorTable(_IssueRenderer):
    """One table row per issue."""

    def print_result(self, result: ValidationResult) -> None:
        table = Table(title="Validation Issues")
        table.add_column("Code", style="cyan", width=6)
        table.add_column("Severity", width=8)
        table.add_column("Location", style="dim")
        table.add_column("Message")

        for issue in result.issues:
            table.add_row(
                issue.code,
                Text(issue.severity.name, style=_style(issue)),
                str(issue.location or "-"),
                issue.message,
            )
        self.console.print(table)
