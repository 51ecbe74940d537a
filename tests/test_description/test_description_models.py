"""Tests for the network description models."""

from typing import Any

import pytest
import yaml
from com_graph.description.models import (
    ChannelDescription,
    FlexrayTriggeringDescription,
    NetworkDescription,
    TechnologyDescription,
    TriggeringDescription,
)
from com_graph.model import ByteOrder, CycleRepetition, PduKind, TransferProperty
from pydantic import ValidationError


class TestNetworkDescription:
    """Tests for the root model."""

    def test_minimal(self) -> None:
        """Should accept a description with only the schema."""
        doc = NetworkDescription.model_validate({"schema": "com-graph.network/v1"})
        assert doc.schema_version == "com-graph.network/v1"
        assert doc.clusters == {}
        assert doc.triggerings == []

    def test_wrong_schema(self) -> None:
        """Should reject other schema identifiers."""
        with pytest.raises(ValidationError) as exc_info:
            NetworkDescription.model_validate({"schema": "com-graph.network/v2"})
        assert exc_info.value.errors()[0]["type"] == "literal_error"

    def test_missing_schema(self) -> None:
        """Should require the schema."""
        with pytest.raises(ValidationError):
            NetworkDescription.model_validate({"clusters": {}})

    def test_unknown_section(self) -> None:
        """Should reject unknown top-level keys."""
        with pytest.raises(ValidationError) as exc_info:
            NetworkDescription.model_validate({"schema": "com-graph.network/v1", "buses": {}})
        assert exc_info.value.errors()[0]["type"] == "extra_forbidden"

    def test_defaults(self, valid_yaml_content: str) -> None:
        """Should apply PDU kind and transfer property defaults."""
        doc = NetworkDescription.model_validate(yaml.safe_load(valid_yaml_content))
        assert doc.pdus["ServicePdu"].kind == PduKind.ISIGNAL_IPDU
        mapping = doc.pdus["EngineData"].signals[1]
        assert mapping.byte_order == ByteOrder.MOST_SIGNIFICANT_BYTE_LAST
        assert mapping.update_bit == 63
        assert mapping.transfer_property == TransferProperty.TRIGGERED
        assert doc.signals["ServiceData"].transformation_props[0].data_ids == [0x123]

    def test_signal_length_must_be_positive(self) -> None:
        """Should reject empty signals."""
        with pytest.raises(ValidationError):
            NetworkDescription.model_validate(
                {"schema": "com-graph.network/v1", "signals": {"S": {"length": 0}}}
            )


class TestChannelDescription:
    """Tests for ChannelDescription."""

    def test_vlan_and_flexray_channel(self) -> None:
        """Should reject a channel that is both VLAN and FlexRay."""
        with pytest.raises(ValidationError, match="both 'vlan' and 'flexray_channel'"):
            ChannelDescription.model_validate(
                {"name": "C", "vlan": {"name": "V", "id": 1}, "flexray_channel": "A"}
            )


class TestTechnologyDescription:
    """Tests for TechnologyDescription."""

    def test_exactly_one_config(self) -> None:
        """Should require exactly one configuration."""
        with pytest.raises(ValidationError, match="exactly one"):
            TechnologyDescription.model_validate({})
        with pytest.raises(ValidationError, match="exactly one"):
            TechnologyDescription.model_validate(
                {"com": {"isignal_ipdu_length": 8}, "e2e": {"profile": "P05"}}
            )

    def test_e2e_defaults(self) -> None:
        """Should fill the E2E defaults."""
        technology = TechnologyDescription.model_validate({"e2e": {"profile": "P05"}})
        assert technology.e2e is not None
        assert technology.e2e.transform_in_place is True
        assert technology.e2e.max_delta_counter == 1


class TestFlexrayTriggeringDescription:
    """Tests for FlexrayTriggeringDescription."""

    def test_cycle_counter(self) -> None:
        """Should accept a cycle counter."""
        desc = FlexrayTriggeringDescription.model_validate({"slot_id": 3, "cycle_counter": 5})
        assert desc.cycle_counter == 5

    def test_repetition(self) -> None:
        """Should accept base cycle and repetition."""
        desc = FlexrayTriggeringDescription.model_validate(
            {"slot_id": 3, "base_cycle": 1, "repetition": 4}
        )
        assert desc.repetition == CycleRepetition.C4

    @pytest.mark.parametrize(
        "data",
        [
            {"slot_id": 3},
            {"slot_id": 3, "base_cycle": 1},
            {"slot_id": 3, "cycle_counter": 5, "repetition": 4},
            {"slot_id": 3, "cycle_counter": 64},
            {"slot_id": 0, "cycle_counter": 1},
        ],
    )
    def test_invalid_cycles(self, data: dict[str, Any]) -> None:
        """Should reject incomplete, conflicting or out of range settings."""
        with pytest.raises(ValidationError):
            FlexrayTriggeringDescription.model_validate(data)


class TestTriggeringDescription:
    """Tests for TriggeringDescription."""

    def test_frame_triggering(self) -> None:
        """Should accept a frame with CAN settings."""
        desc = TriggeringDescription.model_validate(
            {"channel": "C/Ch", "frame": "F", "can": {"identifier": "0x7FF"}}
        )
        assert desc.can is not None
        assert desc.can.identifier == 0x7FF

    @pytest.mark.parametrize(
        ("data", "message"),
        [
            ({"channel": "C/Ch"}, "exactly one of 'frame' or 'pdu'"),
            ({"channel": "C/Ch", "frame": "F", "pdu": "P"}, "exactly one of 'frame' or 'pdu'"),
            (
                {"channel": "C/Ch", "pdu": "P", "can": {"identifier": 1}},
                "take no 'can' or 'flexray'",
            ),
            ({"channel": "C/Ch", "frame": "F"}, "exactly one of 'can' or 'flexray'"),
        ],
    )
    def test_invalid_targets(self, data: dict[str, Any], message: str) -> None:
        """Should reject ambiguous or incomplete triggerings."""
        with pytest.raises(ValidationError, match=message):
            TriggeringDescription.model_validate(data)
