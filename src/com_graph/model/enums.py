"""Enumerations shared by the communication model."""

from __future__ import annotations

from enum import Enum


class ByteOrder(str, Enum):
    """Byte order of a placement inside a buffer."""

    # Big endian: the start position is the most significant bit of the field
    MOST_SIGNIFICANT_BYTE_FIRST = "most-significant-byte-first"
    # Little endian: the start position is the least significant bit of the field
    MOST_SIGNIFICANT_BYTE_LAST = "most-significant-byte-last"
    OPAQUE = "opaque"


class CommunicationDirection(str, Enum):
    """Direction of a port, seen from the ECU."""

    IN = "in"
    OUT = "out"


class TransferProperty(str, Enum):
    """Transfer property of a signal inside a PDU."""

    PENDING = "pending"
    TRIGGERED = "triggered"
    TRIGGERED_ON_CHANGE = "triggered-on-change"
    TRIGGERED_ON_CHANGE_WITHOUT_REPETITION = "triggered-on-change-without-repetition"
    TRIGGERED_WITHOUT_REPETITION = "triggered-without-repetition"


class ClusterKind(str, Enum):
    """Bus technology of a cluster."""

    CAN = "can"
    LIN = "lin"
    FLEXRAY = "flexray"
    ETHERNET = "ethernet"

    @property
    def single_channel(self) -> bool:
        """Whether the cluster permits only one physical channel."""
        return self in (ClusterKind.CAN, ClusterKind.LIN)


class FrameKind(str, Enum):
    """Bus technology of a frame."""

    CAN = "can"
    FLEXRAY = "flexray"


class PduKind(str, Enum):
    """Kind of a PDU."""

    ISIGNAL_IPDU = "isignal-ipdu"
    NM_PDU = "nm-pdu"
    CONTAINER_IPDU = "container-ipdu"
    SECURED_IPDU = "secured-ipdu"
    DCM_IPDU = "dcm-ipdu"
    MULTIPLEXED_IPDU = "multiplexed-ipdu"
    GENERAL_PURPOSE_PDU = "general-purpose-pdu"
    GENERAL_PURPOSE_IPDU = "general-purpose-ipdu"
    N_PDU = "n-pdu"
    USER_DEFINED_PDU = "user-defined-pdu"

    @property
    def carries_signals(self) -> bool:
        """Whether signals and signal groups can be mapped into this kind of PDU."""
        return self in (PduKind.ISIGNAL_IPDU, PduKind.NM_PDU)


class CanAddressingMode(str, Enum):
    """Identifier length of a CAN frame triggering."""

    STANDARD = "standard"
    EXTENDED = "extended"

    @property
    def max_identifier(self) -> int:
        """Largest identifier permitted by the addressing mode."""
        if self == CanAddressingMode.STANDARD:
            return 0x7FF
        return 0x1FFFFFFF


class CanFrameType(str, Enum):
    """Frame format of a CAN frame triggering."""

    CAN_20 = "can-20"
    CAN_FD = "can-fd"
    ANY = "any"


class FlexrayChannelName(str, Enum):
    """Name of a FlexRay channel."""

    A = "A"
    B = "B"


class CycleRepetition(Enum):
    """Repetition of a FlexRay frame, in communication cycles."""

    C1 = 1
    C2 = 2
    C4 = 4
    C5 = 5
    C8 = 8
    C10 = 10
    C16 = 16
    C20 = 20
    C32 = 32
    C40 = 40
    C50 = 50
    C64 = 64


class PortKind(str, Enum):
    """Layer of a port."""

    FRAME = "frame"
    PDU = "pdu"
    SIGNAL = "signal"
