"""Tests for the main NetworkValidator."""

import pytest
from com_graph.model import CommunicationModel, PduKind, PduToFrameMapping
from com_graph.model.enums import ByteOrder
from com_graph.validation import NetworkValidator, ValidationError, ValidationResult


@pytest.fixture
def model_with_warning(linked_model: CommunicationModel) -> CommunicationModel:
    """Return a consistent model with one unused signal."""
    linked_model.create_signal("Lonely", 1)
    return linked_model


@pytest.fixture
def model_with_error(linked_model: CommunicationModel) -> CommunicationModel:
    """Return a model with overlapping PDUs."""
    linked_model.create_pdu("Pdu2", PduKind.ISIGNAL_IPDU, 4)
    linked_model.frames["Frame1"].mappings.append(
        PduToFrameMapping("Pdu2", "Pdu2", 0, ByteOrder.MOST_SIGNIFICANT_BYTE_LAST)
    )
    linked_model.pdus["Pdu2"].frames.append("Frame1")
    return linked_model


class TestNetworkValidator:
    """Tests for NetworkValidator class."""

    def test_validate_returns_result(self, linked_model: CommunicationModel) -> None:
        """Should return ValidationResult."""
        result = NetworkValidator().validate(linked_model)
        assert isinstance(result, ValidationResult)

    def test_validate_consistent_model(self, linked_model: CommunicationModel) -> None:
        """Should report nothing for a model built through its operations."""
        result = NetworkValidator().validate(linked_model)
        assert result.issues == []

    def test_validate_empty_model(self, model: CommunicationModel) -> None:
        """Should accept an empty model."""
        assert NetworkValidator().validate(model).is_valid

    def test_validate_inconsistent_model(self, model_with_error: CommunicationModel) -> None:
        """Should collect errors from layout and propagation validators."""
        result = NetworkValidator().validate(model_with_error)

        assert not result.is_valid
        assert {issue.code for issue in result.errors} == {"E400", "E500"}


class TestValidateAndRaise:
    """Tests for validate_and_raise method."""

    def test_valid_model_no_exception(self, linked_model: CommunicationModel) -> None:
        """Should not raise for a consistent model."""
        NetworkValidator().validate_and_raise(linked_model)

    def test_invalid_model_raises_error(self, model_with_error: CommunicationModel) -> None:
        """Should raise ValidationError for an inconsistent model."""
        with pytest.raises(ValidationError) as exc_info:
            NetworkValidator().validate_and_raise(model_with_error)

        assert "error" in str(exc_info.value).lower()

    def test_strict_mode_raises_on_warnings(
        self, model_with_warning: CommunicationModel
    ) -> None:
        """Should raise in strict mode when there are warnings."""
        with pytest.raises(ValidationError):
            NetworkValidator(strict=True).validate_and_raise(model_with_warning)

    def test_non_strict_mode_allows_warnings(
        self, model_with_warning: CommunicationModel
    ) -> None:
        """Should not raise in non-strict mode when there are only warnings."""
        NetworkValidator(strict=False).validate_and_raise(model_with_warning)


class TestValidationError:
    """Tests for ValidationError class."""

    def test_error_message_contains_counts(self, model_with_error: CommunicationModel) -> None:
        """Error message should contain error/warning counts."""
        model_with_error.create_signal("Lonely", 1)

        with pytest.raises(ValidationError) as exc_info:
            NetworkValidator().validate_and_raise(model_with_error)

        assert str(exc_info.value) == "Validation failed: 2 error(s), 1 warning(s)"

    def test_format_issues(self, model_with_warning: CommunicationModel) -> None:
        """Should list warnings with their prefix."""
        with pytest.raises(ValidationError) as exc_info:
            NetworkValidator(strict=True).validate_and_raise(model_with_warning)

        formatted = exc_info.value.format_issues()
        assert formatted.startswith("WARNING: [W101]")
        assert exc_info.value.errors_only == []


class TestPassCounts:
    """Tests for the per-pass issue counts."""

    def test_counts_per_pass(self, model_with_error: CommunicationModel) -> None:
        """Should count the issues of every pass in run order."""
        validator = NetworkValidator()
        validator.validate(model_with_error)

        counts = validator.pass_counts
        assert list(counts) == [
            "frame-layout",
            "pdu-layout",
            "signal-groups",
            "triggering-coverage",
            "port-coverage",
            "unused-elements",
        ]
        assert counts["frame-layout"] >= 1
        assert counts["triggering-coverage"] >= 1
        assert counts["unused-elements"] == 0

    def test_counts_warnings(self, model_with_warning: CommunicationModel) -> None:
        """Should count warnings of the pass reporting them."""
        validator = NetworkValidator()
        validator.validate(model_with_warning)
        assert validator.pass_counts["unused-elements"] == 1
