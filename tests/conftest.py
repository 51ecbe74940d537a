"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
from com_graph.model import (
    ClusterKind,
    CommunicationModel,
    FlexrayChannelName,
    FrameKind,
    PduKind,
)

CAN_CHANNEL = "CanCluster/CanChannel"
FLEXRAY_CHANNEL = "FlexrayCluster/ChannelA"


@pytest.fixture
def model() -> CommunicationModel:
    """Return an empty communication model."""
    return CommunicationModel()


@pytest.fixture
def can_model(model: CommunicationModel) -> CommunicationModel:
    """Return a model with one CAN channel, two connected ECUs, a frame, a PDU and a signal."""
    model.create_cluster("CanCluster", ClusterKind.CAN)
    model.create_physical_channel("CanCluster", "CanChannel")
    for ecu in ("Sender", "Receiver"):
        model.create_ecu(ecu)
        model.connect_ecu(ecu, CAN_CHANNEL)
    model.create_frame("Frame1", FrameKind.CAN, 8)
    model.create_pdu("Pdu1", PduKind.ISIGNAL_IPDU, 8)
    model.create_signal("Signal1", 8)
    return model


@pytest.fixture
def flexray_model(model: CommunicationModel) -> CommunicationModel:
    """Return a model with one FlexRay channel (A), one connected ECU and a 16 byte frame."""
    model.create_cluster("FlexrayCluster", ClusterKind.FLEXRAY)
    model.create_physical_channel("FlexrayCluster", "ChannelA", channel_name=FlexrayChannelName.A)
    model.create_ecu("Node")
    model.connect_ecu("Node", FLEXRAY_CHANNEL)
    model.create_frame("FrFrame", FrameKind.FLEXRAY, 16)
    return model


@pytest.fixture
def valid_yaml_content() -> str:
    """Return a complete network description with CAN, Ethernet and transformations."""
    return """\
schema: com-graph.network/v1
clusters:
  PowertrainCan:
    kind: can
    channels:
      - name: PowertrainChannel
  Backbone:
    kind: ethernet
    channels:
      - name: Untagged
      - name: Vlan10
        vlan:
          name: VLAN_10
          id: 10
ecus:
  EngineEcu:
    connections:
      - channel: PowertrainCan/PowertrainChannel
  GatewayEcu:
    connections:
      - channel: PowertrainCan/PowertrainChannel
        connector: GatewayCanConnector
      - channel: Backbone/Vlan10
transformations:
  Transformers:
    technologies:
      SomeIp:
        someip:
          alignment: 8
          byte_order: most-significant-byte-first
          interface_version: 1
      E2E:
        e2e:
          profile: P05
          offset: 64
    chains:
      SomeIpE2E:
        technologies: [SomeIp, E2E]
        execute_despite_data_unavailability: true
signals:
  EngineSpeed:
    length: 16
  EngineTemp:
    length: 8
  Counter:
    length: 4
  Crc:
    length: 8
  ServiceData:
    length: 32
    transformations: [Transformers/SomeIpE2E]
    transformation_props:
      - technology: Transformers/E2E
        data_ids: ["0x123"]
        data_length: 32
signal_groups:
  EngineProtected:
    signals: [Counter, Crc]
pdus:
  EngineData:
    kind: isignal-ipdu
    length: 8
    signal_groups: [EngineProtected]
    signals:
      - signal: EngineSpeed
        start_position: 0
        byte_order: most-significant-byte-last
      - signal: EngineTemp
        start_position: 16
        byte_order: most-significant-byte-last
        update_bit: 63
      - signal: Counter
        start_position: 24
        byte_order: most-significant-byte-last
      - signal: Crc
        start_position: 32
        byte_order: most-significant-byte-last
  ServicePdu:
    length: 8
    signals:
      - signal: ServiceData
        start_position: 0
        byte_order: most-significant-byte-last
frames:
  EngineFrame:
    kind: can
    length: 8
    pdus:
      - pdu: EngineData
        start_position: 0
        byte_order: most-significant-byte-last
triggerings:
  - channel: PowertrainCan/PowertrainChannel
    frame: EngineFrame
    can:
      identifier: "0x100"
    ports:
      - ecu: EngineEcu
        direction: out
      - ecu: GatewayEcu
        direction: in
  - channel: Backbone/Vlan10
    pdu: ServicePdu
    ports:
      - ecu: GatewayEcu
        direction: out
"""


@pytest.fixture
def valid_yaml_file(tmp_path: Path, valid_yaml_content: str) -> Path:
    """Write the complete network description to a temporary file."""
    path = tmp_path / "network.yaml"
    path.write_text(valid_yaml_content)
    return path
