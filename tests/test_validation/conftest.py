"""Fixtures for validation tests."""

from __future__ import annotations

import pytest
from com_graph.model import ByteOrder, CommunicationDirection, CommunicationModel


@pytest.fixture
def linked_model(can_model: CommunicationModel) -> CommunicationModel:
    """Return the CAN model with Signal1 in Pdu1 in Frame1, triggered and connected."""
    can_model.map_signal_into_pdu("Pdu1", "Signal1", 0, ByteOrder.MOST_SIGNIFICANT_BYTE_LAST)
    can_model.map_pdu_into_frame("Frame1", "Pdu1", 0, ByteOrder.MOST_SIGNIFICANT_BYTE_LAST)
    frame_triggering = can_model.trigger_can_frame("CanCluster/CanChannel", "Frame1", 0x100)
    can_model.connect_triggering_to_ecu(
        frame_triggering.path, "Sender", CommunicationDirection.OUT
    )
    can_model.connect_triggering_to_ecu(
        frame_triggering.path, "Receiver", CommunicationDirection.IN
    )
    return can_model
