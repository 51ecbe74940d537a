"""Topology graph of the communication model."""

from com_graph.model.enums import (
    ByteOrder,
    CanAddressingMode,
    CanFrameType,
    ClusterKind,
    CommunicationDirection,
    CycleRepetition,
    FlexrayChannelName,
    FrameKind,
    PduKind,
    PortKind,
    TransferProperty,
)
from com_graph.model.entities import (
    CanTriggeringInfo,
    Cluster,
    CommunicationConnector,
    CycleCounterTiming,
    CycleRepetitionTiming,
    EcuInstance,
    FlexrayTriggeringInfo,
    Frame,
    FrameTriggering,
    Pdu,
    PduToFrameMapping,
    PduTriggering,
    PhysicalChannel,
    Port,
    Signal,
    SignalGroup,
    SignalToPduMapping,
    SignalTriggering,
    Vlan,
    make_unique_name,
)
from com_graph.model.graph import CommunicationModel

__all__ = [
    # Enums
    "ByteOrder",
    "CanAddressingMode",
    "CanFrameType",
    "ClusterKind",
    "CommunicationDirection",
    "CycleRepetition",
    "FlexrayChannelName",
    "FrameKind",
    "PduKind",
    "PortKind",
    "TransferProperty",
    # Entities
    "CanTriggeringInfo",
    "Cluster",
    "CommunicationConnector",
    "CycleCounterTiming",
    "CycleRepetitionTiming",
    "EcuInstance",
    "FlexrayTriggeringInfo",
    "Frame",
    "FrameTriggering",
    "Pdu",
    "PduToFrameMapping",
    "PduTriggering",
    "PhysicalChannel",
    "Port",
    "Signal",
    "SignalGroup",
    "SignalToPduMapping",
    "SignalTriggering",
    "Vlan",
    "make_unique_name",
    # Graph
    "CommunicationModel",
]
