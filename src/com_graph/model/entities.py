"""Entities of the communication model.

Entities reference each other by name or path, never by object. Paths are
built from the owning scope:

- physical channel: ``<cluster>/<channel>``
- connector: ``<ecu>/<connector>``
- triggering: ``<cluster>/<channel>/<triggering>``
- port: ``<ecu>/<connector>/<port>``

All lookups go through the ``CommunicationModel`` that owns the entities.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Union

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
from com_graph.transformation import TransformationProps, TransformationTarget

# Signals may be at most 2**32 bytes long
MAX_SIGNAL_LENGTH = 2**32 * 8


def make_unique_name(base: str, existing: Iterable[str]) -> str:
    """Return ``base``, or ``base`` with the first free ``_<n>`` suffix.

    Args:
    ----
        base: Preferred name.
        existing: Names already taken in the scope.

    Returns:
    -------
        A name that is not in ``existing``.

    """
    taken = set(existing)
    if base not in taken:
        return base
    index = 1
    while f"{base}_{index}" in taken:
        index += 1
    return f"{base}_{index}"


@dataclass(frozen=True)
class Vlan:
    """VLAN of an Ethernet physical channel."""

    name: str
    vlan_id: int


@dataclass
class Cluster:
    """A bus (CAN, LIN, FlexRay or Ethernet) holding physical channels."""

    name: str
    kind: ClusterKind
    channels: list[str] = field(default_factory=list)


@dataclass
class PhysicalChannel:
    """A physical channel of a cluster."""

    name: str
    cluster: str
    kind: ClusterKind
    vlan: Vlan | None = None
    channel_name: FlexrayChannelName | None = None
    connectors: list[str] = field(default_factory=list)
    frame_triggerings: list[str] = field(default_factory=list)
    pdu_triggerings: list[str] = field(default_factory=list)
    signal_triggerings: list[str] = field(default_factory=list)

    @property
    def path(self) -> str:
        """Identifier of the channel (``<cluster>/<name>``)."""
        return f"{self.cluster}/{self.name}"


@dataclass
class EcuInstance:
    """An ECU taking part in the communication."""

    name: str
    connectors: list[str] = field(default_factory=list)


@dataclass
class CommunicationConnector:
    """Attachment of one ECU to one physical channel; owner of the ECU's ports there."""

    name: str
    ecu: str
    channel: str
    ports: list[str] = field(default_factory=list)

    @property
    def path(self) -> str:
        """Identifier of the connector (``<ecu>/<name>``)."""
        return f"{self.ecu}/{self.name}"


@dataclass(frozen=True)
class PduToFrameMapping:
    """Placement of a PDU inside a frame."""

    name: str
    pdu: str
    start_position: int
    byte_order: ByteOrder
    update_bit: int | None = None


@dataclass
class Frame:
    """A CAN or FlexRay frame carrying PDUs."""

    name: str
    kind: FrameKind
    length: int
    mappings: list[PduToFrameMapping] = field(default_factory=list)
    frame_triggerings: list[str] = field(default_factory=list)

    def mapped_pdus(self) -> list[str]:
        """Names of the PDUs mapped into the frame, in mapping order."""
        return [mapping.pdu for mapping in self.mappings]


@dataclass(frozen=True)
class SignalToPduMapping:
    """Placement of a signal, or the attachment of a signal group, inside a PDU.

    Signal group mappings carry no position; the group's member signals are
    mapped individually.
    """

    name: str
    signal: str | None = None
    signal_group: str | None = None
    start_position: int | None = None
    byte_order: ByteOrder | None = None
    update_bit: int | None = None
    transfer_property: TransferProperty | None = None

    @property
    def target(self) -> str:
        """Name of the mapped signal or signal group."""
        return self.signal if self.signal is not None else self.signal_group  # type: ignore[return-value]


@dataclass
class Pdu:
    """A protocol data unit of fixed length."""

    name: str
    kind: PduKind
    length: int
    mappings: list[SignalToPduMapping] = field(default_factory=list)
    frames: list[str] = field(default_factory=list)
    pdu_triggerings: list[str] = field(default_factory=list)
    # container PDUs: triggerings of the PDUs they contain
    contained_pdu_triggerings: list[str] = field(default_factory=list)
    # secured PDUs: triggering of the protected payload
    payload_pdu_triggering: str | None = None

    @property
    def carries_signals(self) -> bool:
        """Whether signals and signal groups can be mapped into the PDU."""
        return self.kind.carries_signals

    def group_mapping(self, group: str) -> SignalToPduMapping | None:
        """Get the mapping of a signal group, if the group is mapped into this PDU."""
        for mapping in self.mappings:
            if mapping.signal_group == group:
                return mapping
        return None


@dataclass
class Signal(TransformationTarget):
    """A signal of fixed bit length."""

    name: str
    length: int
    signal_group: str | None = None
    data_transformations: list[str] = field(default_factory=list)
    transformation_props: list[TransformationProps] = field(default_factory=list)
    pdus: list[str] = field(default_factory=list)
    signal_triggerings: list[str] = field(default_factory=list)


@dataclass
class SignalGroup(TransformationTarget):
    """An atomic bundle of signals."""

    name: str
    signals: list[str] = field(default_factory=list)
    data_transformations: list[str] = field(default_factory=list)
    transformation_props: list[TransformationProps] = field(default_factory=list)
    pdus: list[str] = field(default_factory=list)
    signal_triggerings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CanTriggeringInfo:
    """CAN specific settings of a frame triggering."""

    identifier: int
    addressing_mode: CanAddressingMode
    frame_type: CanFrameType


@dataclass(frozen=True)
class CycleCounterTiming:
    """FlexRay frame sent in one cycle of the 64 cycle matrix."""

    cycle_counter: int


@dataclass(frozen=True)
class CycleRepetitionTiming:
    """FlexRay frame sent every ``repetition`` cycles, starting at ``base_cycle``."""

    base_cycle: int
    repetition: CycleRepetition


FlexrayCommunicationCycle = Union[CycleCounterTiming, CycleRepetitionTiming]


@dataclass(frozen=True)
class FlexrayTriggeringInfo:
    """FlexRay specific settings of a frame triggering."""

    slot_id: int
    cycle: FlexrayCommunicationCycle


@dataclass
class FrameTriggering:
    """A frame transmitted on a physical channel."""

    name: str
    channel: str
    frame: str
    can: CanTriggeringInfo | None = None
    flexray: FlexrayTriggeringInfo | None = None
    pdu_triggerings: list[str] = field(default_factory=list)
    ports: list[str] = field(default_factory=list)

    @property
    def path(self) -> str:
        """Identifier of the triggering (``<channel path>/<name>``)."""
        return f"{self.channel}/{self.name}"


@dataclass
class PduTriggering:
    """A PDU transmitted on a physical channel, inside a frame triggering or directly."""

    name: str
    channel: str
    pdu: str
    frame_triggering: str | None = None
    signal_triggerings: list[str] = field(default_factory=list)
    ports: list[str] = field(default_factory=list)

    @property
    def path(self) -> str:
        """Identifier of the triggering (``<channel path>/<name>``)."""
        return f"{self.channel}/{self.name}"


@dataclass
class SignalTriggering:
    """A signal or signal group transmitted on a physical channel inside a PDU triggering."""

    name: str
    channel: str
    pdu_triggering: str
    signal: str | None = None
    signal_group: str | None = None
    ports: list[str] = field(default_factory=list)

    @property
    def path(self) -> str:
        """Identifier of the triggering (``<channel path>/<name>``)."""
        return f"{self.channel}/{self.name}"

    @property
    def target(self) -> str:
        """Name of the triggered signal or signal group."""
        return self.signal if self.signal is not None else self.signal_group  # type: ignore[return-value]


Triggering = Union[FrameTriggering, PduTriggering, SignalTriggering]


@dataclass
class Port:
    """An ECU sending or receiving a triggering."""

    name: str
    connector: str
    ecu: str
    triggering: str
    kind: PortKind
    direction: CommunicationDirection

    @property
    def path(self) -> str:
        """Identifier of the port (``<connector path>/<name>``)."""
        return f"{self.connector}/{self.name}"
