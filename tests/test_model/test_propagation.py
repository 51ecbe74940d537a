"""Tests for triggering and port propagation."""

from __future__ import annotations

import pytest
from com_graph import propagation
from com_graph.errors import NotConnectedError
from com_graph.model import (
    ByteOrder,
    CommunicationDirection,
    CommunicationModel,
    PortKind,
)

LE = ByteOrder.MOST_SIGNIFICANT_BYTE_LAST
CHANNEL = "CanCluster/CanChannel"


def _signal_triggerings_of(model: CommunicationModel, pdu_triggering_path: str) -> list[str]:
    pdu_triggering = model.pdu_triggerings[pdu_triggering_path]
    return [model.signal_triggerings[path].target for path in pdu_triggering.signal_triggerings]


class TestConstructionOrder:
    """The same graph results whichever order mappings and triggerings are made in."""

    def test_mapping_before_triggering(self, can_model: CommunicationModel) -> None:
        """Triggering a frame creates PDU and signal triggerings for existing mappings."""
        can_model.map_signal_into_pdu("Pdu1", "Signal1", 0, LE)
        can_model.map_pdu_into_frame("Frame1", "Pdu1", 0, LE)
        frame_triggering = can_model.trigger_can_frame(CHANNEL, "Frame1", 0x100)

        assert frame_triggering.path == "CanCluster/CanChannel/FT_Frame1"
        assert frame_triggering.pdu_triggerings == ["CanCluster/CanChannel/PT_Pdu1"]
        assert _signal_triggerings_of(can_model, "CanCluster/CanChannel/PT_Pdu1") == ["Signal1"]

    def test_triggering_before_mapping(self, can_model: CommunicationModel) -> None:
        """Mapping into a triggered frame creates the missing triggerings."""
        frame_triggering = can_model.trigger_can_frame(CHANNEL, "Frame1", 0x100)
        can_model.map_pdu_into_frame("Frame1", "Pdu1", 0, LE)
        can_model.map_signal_into_pdu("Pdu1", "Signal1", 0, LE)

        assert frame_triggering.pdu_triggerings == ["CanCluster/CanChannel/PT_Pdu1"]
        pdu_triggering = can_model.pdu_triggerings["CanCluster/CanChannel/PT_Pdu1"]
        assert pdu_triggering.frame_triggering == frame_triggering.path
        assert pdu_triggering.signal_triggerings == ["CanCluster/CanChannel/ST_Signal1"]
        assert can_model.signals["Signal1"].signal_triggerings == [
            "CanCluster/CanChannel/ST_Signal1"
        ]

    def test_signal_group_triggering(self, can_model: CommunicationModel) -> None:
        """Signal groups get their own signal triggering."""
        can_model.create_signal_group("Group1")
        can_model.add_signal_to_group("Group1", "Signal1")
        can_model.map_pdu_into_frame("Frame1", "Pdu1", 0, LE)
        can_model.trigger_can_frame(CHANNEL, "Frame1", 0x100)
        can_model.map_signal_group_into_pdu("Pdu1", "Group1")
        can_model.map_signal_into_pdu("Pdu1", "Signal1", 0, LE)

        targets = _signal_triggerings_of(can_model, "CanCluster/CanChannel/PT_Pdu1")
        assert targets == ["Group1", "Signal1"]
        group_triggering = can_model.signal_triggerings["CanCluster/CanChannel/ST_Group1"]
        assert group_triggering.signal is None
        assert group_triggering.signal_group == "Group1"


class TestPorts:
    """Tests for connect_triggering_to_ecu and port replication."""

    @pytest.fixture
    def triggered(self, can_model: CommunicationModel) -> CommunicationModel:
        """Map Signal1 into Pdu1 into Frame1 and trigger the frame."""
        can_model.map_signal_into_pdu("Pdu1", "Signal1", 0, LE)
        can_model.map_pdu_into_frame("Frame1", "Pdu1", 0, LE)
        can_model.trigger_can_frame(CHANNEL, "Frame1", 0x100)
        return can_model

    def test_frame_port_walks_down(self, triggered: CommunicationModel) -> None:
        """A frame port creates PDU and signal ports for the same ECU and direction."""
        port = triggered.connect_triggering_to_ecu(
            f"{CHANNEL}/FT_Frame1", "Sender", CommunicationDirection.OUT
        )
        assert port.name == "FT_Frame1_Tx"
        assert port.kind == PortKind.FRAME
        assert port.path == "Sender/Sender_CanChannel/FT_Frame1_Tx"

        pdu_port = triggered.ports[triggered.pdu_triggerings[f"{CHANNEL}/PT_Pdu1"].ports[0]]
        signal_port = triggered.ports[
            triggered.signal_triggerings[f"{CHANNEL}/ST_Signal1"].ports[0]
        ]
        assert (pdu_port.name, pdu_port.kind) == ("PT_Pdu1_Tx", PortKind.PDU)
        assert (signal_port.name, signal_port.kind) == ("ST_Signal1_Tx", PortKind.SIGNAL)
        assert signal_port.ecu == "Sender"
        assert signal_port.direction == CommunicationDirection.OUT

    def test_connect_is_idempotent(self, triggered: CommunicationModel) -> None:
        """Connecting the same ECU twice returns the existing port."""
        first = triggered.connect_triggering_to_ecu(
            f"{CHANNEL}/FT_Frame1", "Receiver", CommunicationDirection.IN
        )
        port_count = len(triggered.ports)
        second = triggered.connect_triggering_to_ecu(
            f"{CHANNEL}/FT_Frame1", "Receiver", CommunicationDirection.IN
        )
        assert second is first
        assert len(triggered.ports) == port_count == 3

    def test_both_directions(self, triggered: CommunicationModel) -> None:
        """One ECU may send and receive the same triggering."""
        triggered.connect_triggering_to_ecu(
            f"{CHANNEL}/FT_Frame1", "Sender", CommunicationDirection.OUT
        )
        triggered.connect_triggering_to_ecu(
            f"{CHANNEL}/FT_Frame1", "Sender", CommunicationDirection.IN
        )
        frame_triggering = triggered.frame_triggerings[f"{CHANNEL}/FT_Frame1"]
        assert len(frame_triggering.ports) == 2

    def test_port_then_new_signal(self, triggered: CommunicationModel) -> None:
        """A signal mapped after the ECU was connected receives the PDU's ports."""
        triggered.connect_triggering_to_ecu(
            f"{CHANNEL}/FT_Frame1", "Receiver", CommunicationDirection.IN
        )
        triggered.create_signal("Signal2", 8)
        triggered.map_signal_into_pdu("Pdu1", "Signal2", 8, LE)

        signal_triggering = triggered.signal_triggerings[f"{CHANNEL}/ST_Signal2"]
        assert len(signal_triggering.ports) == 1
        assert triggered.ports[signal_triggering.ports[0]].name == "ST_Signal2_Rx"

    def test_port_then_new_pdu(self, can_model: CommunicationModel) -> None:
        """A PDU mapped into a connected frame triggering receives the frame's ports."""
        can_model.trigger_can_frame(CHANNEL, "Frame1", 0x100)
        can_model.connect_triggering_to_ecu(
            f"{CHANNEL}/FT_Frame1", "Sender", CommunicationDirection.OUT
        )
        can_model.map_signal_into_pdu("Pdu1", "Signal1", 0, LE)
        can_model.map_pdu_into_frame("Frame1", "Pdu1", 0, LE)

        for collection in (can_model.pdu_triggerings, can_model.signal_triggerings):
            for triggering in collection.values():
                assert [can_model.ports[p].ecu for p in triggering.ports] == ["Sender"]

    def test_not_connected(self, triggered: CommunicationModel) -> None:
        """An ECU without connector on the channel is rejected before anything is created."""
        triggered.create_ecu("Lonely")
        with pytest.raises(NotConnectedError) as exc_info:
            triggered.connect_triggering_to_ecu(
                f"{CHANNEL}/FT_Frame1", "Lonely", CommunicationDirection.IN
            )
        assert exc_info.value.ecu == "Lonely"
        assert exc_info.value.channel == CHANNEL
        assert triggered.ports == {}

    def test_signal_level_port_does_not_walk_up(self, triggered: CommunicationModel) -> None:
        """A port on a signal triggering leaves PDU and frame triggerings untouched."""
        triggered.connect_triggering_to_ecu(
            f"{CHANNEL}/ST_Signal1", "Receiver", CommunicationDirection.IN
        )
        assert triggered.frame_triggerings[f"{CHANNEL}/FT_Frame1"].ports == []
        assert triggered.pdu_triggerings[f"{CHANNEL}/PT_Pdu1"].ports == []
        assert len(triggered.ports) == 1


class TestPropagationProcedures:
    """Tests for the find-or-create procedures themselves."""

    def test_ensure_pdu_triggering_is_idempotent(self, can_model: CommunicationModel) -> None:
        """Should return the existing PDU triggering of a frame triggering."""
        can_model.map_pdu_into_frame("Frame1", "Pdu1", 0, LE)
        frame_triggering = can_model.trigger_can_frame(CHANNEL, "Frame1", 0x100)
        channel = can_model.channels[CHANNEL]
        pdu = can_model.pdus["Pdu1"]

        first = propagation.ensure_pdu_triggering(can_model, channel, pdu, frame_triggering)
        second = propagation.ensure_pdu_triggering(can_model, channel, pdu, frame_triggering)
        assert first is second
        assert len(can_model.pdu_triggerings) == 1

    def test_propagate_frame_triggering_repairs(self, can_model: CommunicationModel) -> None:
        """Should recreate PDU triggerings missing below a frame triggering."""
        can_model.map_pdu_into_frame("Frame1", "Pdu1", 0, LE)
        frame_triggering = can_model.trigger_can_frame(CHANNEL, "Frame1", 0x100)
        pdu_triggering_path = frame_triggering.pdu_triggerings.pop()
        del can_model.pdu_triggerings[pdu_triggering_path]
        can_model.channels[CHANNEL].pdu_triggerings.remove(pdu_triggering_path)

        result = propagation.propagate_frame_triggering(can_model, frame_triggering)
        assert [pt.pdu for pt in result] == ["Pdu1"]
        assert frame_triggering.pdu_triggerings == [result[0].path]

    def test_propagate_signal_mapping_without_triggerings(
        self, can_model: CommunicationModel
    ) -> None:
        """Should do nothing for a PDU that is not triggered."""
        signal = can_model.signals["Signal1"]
        assert propagation.propagate_signal_mapping(can_model, can_model.pdus["Pdu1"], signal) == []
