"""Main validator combining all consistency rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from com_graph.validation.base import CompositeValidator
from com_graph.validation.consistency_validators import (
    FrameLayoutValidator,
    PduLayoutValidator,
    PortCoverageValidator,
    SignalGroupMappingValidator,
    TriggeringCoverageValidator,
    UnusedElementValidator,
)
from com_graph.validation.errors import ValidationResult

if TYPE_CHECKING:
    from com_graph.model.graph import CommunicationModel


class NetworkValidator:
    """Audits a complete communication model.

    Combines layout validators (bit placement of PDUs and signals) and
    propagation validators (triggering and port coverage).
    """

    def __init__(self, strict: bool = False) -> None:
        """Initialize validator.

        Args:
        ----
            strict: If True, treat warnings as errors.

        """
        self.strict = strict
        self._validator = CompositeValidator(
            [
                # Layout validators
                FrameLayoutValidator(),
                PduLayoutValidator(),
                SignalGroupMappingValidator(),
                # Propagation validators
                TriggeringCoverageValidator(),
                PortCoverageValidator(),
                UnusedElementValidator(),
            ]
        )

    def validate(self, model: CommunicationModel) -> ValidationResult:
        """Validate a communication model.

        Args:
        ----
            model: The model to validate.

        Returns:
        -------
            ValidationResult with all issues found.

        """
        result = ValidationResult()
        with model.lock:
            self._validator.validate(model, result)
        return result

    @property
    def pass_counts(self) -> dict[str, int]:
        """Issues found by each pass in the last run, keyed by pass name."""
        return dict(self._validator.counts)

    def validate_and_raise(self, model: CommunicationModel) -> None:
        """Validate and raise exception if invalid.

        Args:
        ----
            model: The model to validate.

        Raises:
        ------
            ValidationError: If validation fails.

        """
        result = self.validate(model)

        if not result.is_valid or (self.strict and result.warnings):
            raise ValidationError(result)


class ValidationError(Exception):
    """An audit found errors, or warnings in strict mode.

    The message counts the issues, e.g. ``Validation failed: 2 error(s), 1 warning(s)``;
    ``result`` holds the issues themselves.
    """

    def __init__(self, result: ValidationResult) -> None:
        self.result = result
        counts = [
            f"{len(issues)} {label}(s)"
            for label, issues in (("error", result.errors), ("warning", result.warnings))
            if issues
        ]
        super().__init__(f"Validation failed: {', '.join(counts)}")

    def format_issues(self) -> str:
        """Return one line per issue, errors first, each prefixed with its severity."""
        ordered = [*self.result.errors, *self.result.warnings]
        return "\n".join(f"{issue.severity.name}: {issue}" for issue in ordered)

    @property
    def errors_only(self) -> list[str]:
        """The error issues as strings, without warnings."""
        return [str(issue) for issue in self.result.errors]
