"""Audit passes and their composition.

Every pass declares the issue codes it may report. The composite runs the
passes one after another, each into its own result, so it can tell how
many issues every pass found and reject a pass that reports a code
outside its family.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from com_graph.validation.errors import ValidationResult

if TYPE_CHECKING:
    from com_graph.model.graph import CommunicationModel

logger = logging.getLogger(__name__)


class BaseValidator(ABC):
    """One audit pass over a communication model."""

    name: ClassVar[str]
    codes: ClassVar[frozenset[str]]

    @abstractmethod
    def validate(self, model: CommunicationModel, result: ValidationResult) -> None:
        """Add the issues found in ``model`` to ``result``."""


class CompositeValidator(BaseValidator):
    """Runs several passes and keeps the issue count of each.

    Args:
    ----
        validators: Passes in the order they run.

    """

    name = "composite"

    def __init__(self, validators: list[BaseValidator] | None = None) -> None:
        self.validators = validators or []
        self.counts: dict[str, int] = {}

    @property
    def codes(self) -> frozenset[str]:  # type: ignore[override]
        """Union of the codes of all passes."""
        return frozenset().union(*(validator.codes for validator in self.validators))

    def add(self, validator: BaseValidator) -> None:
        self.validators.append(validator)

    def validate(self, model: CommunicationModel, result: ValidationResult) -> None:
        """Run every pass and merge its issues into ``result``.

        Raises
        ------
            ValueError: If a pass reports a code it does not declare.

        """
        self.counts = {}
        for validator in self.validators:
            found = ValidationResult()
            validator.validate(model, found)

            stray = {issue.code for issue in found.issues} - validator.codes
            if stray:
                raise ValueError(
                    f"Validator '{validator.name}' reported undeclared code(s) "
                    f"{', '.join(sorted(stray))}"
                )

            self.counts[validator.name] = len(found.issues)
            logger.debug(
                "Audit pass %s: %d error(s), %d warning(s)",
                validator.name,
                len(found.errors),
                len(found.warnings),
            )
            result.merge(found)
