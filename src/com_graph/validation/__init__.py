"""Validation module for communication models."""

from com_graph.validation.errors import (
    ErrorCodes,
    ValidationIssue,
    ValidationLocation,
    ValidationResult,
    ValidationSeverity,
)
from com_graph.validation.validator import (
    NetworkValidator,
    ValidationError,
)

__all__ = [
    "ErrorCodes",
    "NetworkValidator",
    "ValidationError",
    "ValidationIssue",
    "ValidationLocation",
    "ValidationResult",
    "ValidationSeverity",
]
