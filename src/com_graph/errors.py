"""Exceptions raised by the communication model."""

from __future__ import annotations


class CommunicationError(Exception):
    """Base class for all errors raised while modifying the communication model."""


class ItemAlreadyExistsError(CommunicationError):
    """An item with the same identity already exists.

    Raised for a second channel on a single-channel cluster, a duplicate
    VLAN id or a second untagged channel on an Ethernet cluster, and for
    duplicate names inside a scope.
    """


class OverlapError(CommunicationError):
    """A placement collides with existing placements or exceeds the buffer."""


class InvalidParameterError(CommunicationError):
    """A parameter of the requested operation is not acceptable."""


class EmptyChainError(InvalidParameterError):
    """A data transformation was requested without any technology."""


class ChainOrderError(InvalidParameterError):
    """A serializer technology appears after the first position of a chain."""


class CrossSetReferenceError(InvalidParameterError):
    """A chain references a technology owned by a different transformation set."""


class MissingUnavailabilityFlagError(InvalidParameterError):
    """An E2E chain does not set ``execute_despite_data_unavailability``."""


class NotConnectedError(CommunicationError):
    """An ECU has no connector on the physical channel of a triggering."""

    def __init__(self, ecu: str, channel: str) -> None:
        """Initialize NotConnectedError.

        Args:
        ----
            ecu: Name of the ECU.
            channel: Path of the physical channel.

        """
        self.ecu = ecu
        self.channel = channel
        super().__init__(f"ECU '{ecu}' is not connected to physical channel '{channel}'")


class ConversionError(CommunicationError):
    """An element was expected to be of one kind but is of another."""
