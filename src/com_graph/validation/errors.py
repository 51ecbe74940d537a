"""Issues reported by the graph audit, and the codes identifying them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ValidationSeverity(Enum):
    """How bad an issue is. Only errors make a graph invalid."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class ValidationLocation:
    """Where an issue was found.

    ``path`` is dotted, following the description layout, e.g.
    ``frames.EngineFrame.mappings.EngineData``. Line and column are only
    known for issues tied to a source file.
    """

    path: str
    line: int | None = None
    column: int | None = None

    def __str__(self) -> str:
        """Return the path, followed by line and column where known."""
        if self.line is None:
            return self.path
        position = f"line {self.line}"
        if self.column is not None:
            position += f", col {self.column}"
        return f"{self.path} ({position})"


@dataclass(frozen=True)
class ValidationIssue:
    """One finding of a validator."""

    code: str
    message: str
    severity: ValidationSeverity
    location: ValidationLocation | None = None
    suggestion: str | None = None
    # free-form details for the verbose report, e.g. the coverage bitmap
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Return ``[code] SEVERITY message at location (hint: suggestion)``."""
        text = f"[{self.code}] {self.severity.name} {self.message}"
        if self.location:
            text += f" at {self.location}"
        if self.suggestion:
            text += f" (hint: {self.suggestion})"
        return text


@dataclass
class ValidationResult:
    """Collected issues of one or more validators."""

    issues: list[ValidationIssue] = field(default_factory=list)

    def _with_severity(self, severity: ValidationSeverity) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity is severity]

    @property
    def errors(self) -> list[ValidationIssue]:
        """Issues of severity ERROR."""
        return self._with_severity(ValidationSeverity.ERROR)

    @property
    def warnings(self) -> list[ValidationIssue]:
        """Issues of severity WARNING."""
        return self._with_severity(ValidationSeverity.WARNING)

    @property
    def is_valid(self) -> bool:
        """True while no error was reported; warnings do not count."""
        return not self.errors

    def add(self, issue: ValidationIssue) -> None:
        self.issues.append(issue)

    def _report(
        self,
        severity: ValidationSeverity,
        code: str,
        message: str,
        path: str,
        suggestion: str | None,
        context: dict[str, Any],
    ) -> None:
        self.add(
            ValidationIssue(
                code=code,
                message=message,
                severity=severity,
                location=ValidationLocation(path=path),
                suggestion=suggestion,
                context=context,
            )
        )

    def add_error(
        self, code: str, message: str, path: str, suggestion: str | None = None, **context: Any
    ) -> None:
        """Report an error at ``path``; keyword arguments become the issue context."""
        self._report(ValidationSeverity.ERROR, code, message, path, suggestion, context)

    def add_warning(
        self, code: str, message: str, path: str, suggestion: str | None = None, **context: Any
    ) -> None:
        """Report a warning at ``path``; keyword arguments become the issue context."""
        self._report(ValidationSeverity.WARNING, code, message, path, suggestion, context)

    def merge(self, other: ValidationResult) -> None:
        """Append the issues of ``other``."""
        self.issues += other.issues


class ErrorCodes:
    """Issue codes. Exxx are errors, Wxxx warnings."""

    # description could not be replayed into a graph
    E001_BUILD_FAILED = "E001"

    # bit layout of frames and PDUs
    E400_LAYOUT_OVERLAP = "E400"
    E401_INVALID_PDU_PLACEMENT = "E401"
    E402_GROUP_NOT_MAPPED = "E402"

    # triggerings and ports missing below a triggered or connected element
    E500_MISSING_TRIGGERING = "E500"
    E501_MISSING_PORT = "E501"

    # elements defined but never used
    W100_UNUSED_PDU = "W100"
    W101_UNUSED_SIGNAL = "W101"
