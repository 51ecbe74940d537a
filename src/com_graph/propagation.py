"""Propagation of triggerings and ports through the communication model.

The model keeps two derived layers in sync with the mappings:

- every frame triggering has a PDU triggering for each PDU mapped into the
  frame, and every PDU triggering has a signal triggering for each signal or
  signal group mapped into the PDU;
- every port of a frame or PDU triggering has a matching port, for the same
  ECU and direction, on each triggering below it.

The procedures here are find-or-create: calling them again returns the
existing triggering or port and only fills in what is missing. Each one
walks down after it has found or created its element, so the invariants
hold whichever order mappings, triggerings and connections were made in.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Union

from com_graph.errors import NotConnectedError
from com_graph.model.entities import (
    FrameTriggering,
    Pdu,
    PduTriggering,
    PhysicalChannel,
    Port,
    Signal,
    SignalGroup,
    SignalTriggering,
    Triggering,
    make_unique_name,
)
from com_graph.model.enums import CommunicationDirection, PortKind

if TYPE_CHECKING:
    from com_graph.model.entities import Frame
    from com_graph.model.graph import CommunicationModel

logger = logging.getLogger(__name__)

SignalTarget = Union[Signal, SignalGroup]


def ensure_pdu_triggering(
    model: CommunicationModel,
    channel: PhysicalChannel,
    pdu: Pdu,
    frame_triggering: FrameTriggering | None = None,
) -> PduTriggering:
    """Find or create the PDU triggering of a PDU.

    With a frame triggering, the PDU triggering is looked up among the PDU
    triggerings of that frame triggering. Without one (Ethernet), it is
    looked up among the channel's PDU triggerings that belong to no frame.
    Signal triggerings are ensured for every signal and signal group mapped
    into the PDU, and the ports of the frame triggering are replicated.

    Args:
    ----
        model: The model owning the elements.
        channel: Physical channel of the triggering.
        pdu: The triggered PDU.
        frame_triggering: Frame triggering carrying the PDU, if any.

    Returns:
    -------
        The existing or new PDU triggering.

    """
    frame_triggering_path = frame_triggering.path if frame_triggering is not None else None
    pdu_triggering = _find_pdu_triggering(model, channel, pdu, frame_triggering)

    if pdu_triggering is None:
        name = make_unique_name(
            f"PT_{pdu.name}",
            (model.pdu_triggerings[path].name for path in channel.pdu_triggerings),
        )
        pdu_triggering = PduTriggering(
            name=name,
            channel=channel.path,
            pdu=pdu.name,
            frame_triggering=frame_triggering_path,
        )
        model.pdu_triggerings[pdu_triggering.path] = pdu_triggering
        channel.pdu_triggerings.append(pdu_triggering.path)
        pdu.pdu_triggerings.append(pdu_triggering.path)
        if frame_triggering is not None:
            frame_triggering.pdu_triggerings.append(pdu_triggering.path)
        logger.debug("Created PDU triggering %s for PDU %s", pdu_triggering.path, pdu.name)

    for mapping in pdu.mappings:
        ensure_signal_triggering(model, pdu_triggering, model.signal_target(mapping))

    if frame_triggering is not None:
        for port_path in list(frame_triggering.ports):
            port = model.ports[port_path]
            ensure_port(model, pdu_triggering, port.ecu, port.direction)

    return pdu_triggering


def _find_pdu_triggering(
    model: CommunicationModel,
    channel: PhysicalChannel,
    pdu: Pdu,
    frame_triggering: FrameTriggering | None,
) -> PduTriggering | None:
    if frame_triggering is not None:
        candidates = frame_triggering.pdu_triggerings
    else:
        candidates = channel.pdu_triggerings

    for path in candidates:
        pdu_triggering = model.pdu_triggerings[path]
        if frame_triggering is None and pdu_triggering.frame_triggering is not None:
            continue
        if pdu_triggering.pdu == pdu.name:
            return pdu_triggering
    return None


def ensure_signal_triggering(
    model: CommunicationModel,
    pdu_triggering: PduTriggering,
    target: SignalTarget,
) -> SignalTriggering:
    """Find or create the signal triggering of a signal or group in a PDU triggering.

    The ports of the PDU triggering are replicated onto the signal triggering.

    Args:
    ----
        model: The model owning the elements.
        pdu_triggering: PDU triggering carrying the signal.
        target: The triggered signal or signal group.

    Returns:
    -------
        The existing or new signal triggering.

    """
    is_group = isinstance(target, SignalGroup)
    signal_triggering = None
    for path in pdu_triggering.signal_triggerings:
        candidate = model.signal_triggerings[path]
        candidate_target = candidate.signal_group if is_group else candidate.signal
        if candidate_target == target.name:
            signal_triggering = candidate
            break

    if signal_triggering is None:
        channel = model.channels[pdu_triggering.channel]
        name = make_unique_name(
            f"ST_{target.name}",
            (model.signal_triggerings[path].name for path in channel.signal_triggerings),
        )
        signal_triggering = SignalTriggering(
            name=name,
            channel=channel.path,
            pdu_triggering=pdu_triggering.path,
            signal=None if is_group else target.name,
            signal_group=target.name if is_group else None,
        )
        model.signal_triggerings[signal_triggering.path] = signal_triggering
        channel.signal_triggerings.append(signal_triggering.path)
        pdu_triggering.signal_triggerings.append(signal_triggering.path)
        target.signal_triggerings.append(signal_triggering.path)
        logger.debug(
            "Created signal triggering %s for %s %s",
            signal_triggering.path,
            "signal group" if is_group else "signal",
            target.name,
        )

    for port_path in list(pdu_triggering.ports):
        port = model.ports[port_path]
        ensure_port(model, signal_triggering, port.ecu, port.direction)

    return signal_triggering


def ensure_port(
    model: CommunicationModel,
    triggering: Triggering,
    ecu: str,
    direction: CommunicationDirection,
) -> Port:
    """Find or create the port of an ECU on a triggering, then walk down.

    A frame port gets matching ports on all PDU triggerings of the frame
    triggering; a PDU port gets matching ports on all its signal triggerings.

    Args:
    ----
        model: The model owning the elements.
        triggering: Frame, PDU or signal triggering.
        ecu: Name of the ECU.
        direction: Direction of the port, seen from the ECU.

    Returns:
    -------
        The existing or new port.

    Raises:
    ------
        NotConnectedError: If the ECU has no connector on the triggering's channel.

    """
    port = None
    for path in triggering.ports:
        candidate = model.ports[path]
        if candidate.ecu == ecu and candidate.direction == direction:
            port = candidate
            break

    if port is None:
        connector = model.connector_for(triggering.channel, ecu)
        if connector is None:
            raise NotConnectedError(ecu, triggering.channel)

        suffix = "Rx" if direction == CommunicationDirection.IN else "Tx"
        name = make_unique_name(
            f"{triggering.name}_{suffix}",
            (model.ports[path].name for path in connector.ports),
        )
        port = Port(
            name=name,
            connector=connector.path,
            ecu=ecu,
            triggering=triggering.path,
            kind=_port_kind(triggering),
            direction=direction,
        )
        model.ports[port.path] = port
        connector.ports.append(port.path)
        triggering.ports.append(port.path)
        logger.debug("Created %s port %s for %s", port.kind.value, port.path, triggering.path)

    if isinstance(triggering, FrameTriggering):
        for path in list(triggering.pdu_triggerings):
            ensure_port(model, model.pdu_triggerings[path], ecu, direction)
    elif isinstance(triggering, PduTriggering):
        for path in list(triggering.signal_triggerings):
            ensure_port(model, model.signal_triggerings[path], ecu, direction)

    return port


def _port_kind(triggering: Triggering) -> PortKind:
    if isinstance(triggering, FrameTriggering):
        return PortKind.FRAME
    if isinstance(triggering, PduTriggering):
        return PortKind.PDU
    return PortKind.SIGNAL


def propagate_frame_triggering(
    model: CommunicationModel,
    frame_triggering: FrameTriggering,
) -> list[PduTriggering]:
    """Walk down from a frame triggering to all PDUs mapped into its frame.

    Returns
    -------
        The PDU triggerings of the frame triggering, in mapping order.

    """
    frame = model.frames[frame_triggering.frame]
    channel = model.channels[frame_triggering.channel]
    return [
        ensure_pdu_triggering(model, channel, model.pdus[pdu_name], frame_triggering)
        for pdu_name in frame.mapped_pdus()
    ]


def propagate_pdu_mapping(
    model: CommunicationModel,
    frame: Frame,
    pdu: Pdu,
) -> list[PduTriggering]:
    """Give a newly mapped PDU a triggering in every triggering of its frame.

    Returns
    -------
        One PDU triggering per frame triggering of the frame.

    """
    result = []
    for path in list(frame.frame_triggerings):
        frame_triggering = model.frame_triggerings[path]
        channel = model.channels[frame_triggering.channel]
        result.append(ensure_pdu_triggering(model, channel, pdu, frame_triggering))
    return result


def propagate_signal_mapping(
    model: CommunicationModel,
    pdu: Pdu,
    target: SignalTarget,
) -> list[SignalTriggering]:
    """Give a newly mapped signal or group a triggering in every triggering of its PDU.

    Returns
    -------
        One signal triggering per PDU triggering of the PDU.

    """
    return [
        ensure_signal_triggering(model, model.pdu_triggerings[path], target)
        for path in list(pdu.pdu_triggerings)
    ]
