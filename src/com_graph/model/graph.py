"""The communication model: an arena of named entities.

``CommunicationModel`` owns every entity and is the only place where
entities are created. Mapping, triggering and connection operations check
all their preconditions before they modify anything, so a rejected call
leaves the model unchanged. After a successful change the derived
triggerings and ports are brought up to date by ``com_graph.propagation``.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import TypeVar

from com_graph import layout, propagation
from com_graph.errors import (
    ConversionError,
    InvalidParameterError,
    ItemAlreadyExistsError,
    OverlapError,
)
from com_graph.model.entities import (
    MAX_SIGNAL_LENGTH,
    CanTriggeringInfo,
    Cluster,
    CommunicationConnector,
    CycleCounterTiming,
    CycleRepetitionTiming,
    EcuInstance,
    FlexrayCommunicationCycle,
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
    Triggering,
    Vlan,
    make_unique_name,
)
from com_graph.model.enums import (
    ByteOrder,
    CanAddressingMode,
    CanFrameType,
    ClusterKind,
    CommunicationDirection,
    FlexrayChannelName,
    FrameKind,
    PduKind,
    TransferProperty,
)
from com_graph.transformation import DataTransformationSet

logger = logging.getLogger(__name__)

T = TypeVar("T")

# FlexRay schedules repeat every 64 communication cycles
FLEXRAY_CYCLE_COUNT = 64
MAX_VLAN_ID = 4095


@dataclass
class CommunicationModel:
    """Topology graph of a communication network.

    Entities are stored in dictionaries keyed by name (clusters, ECUs,
    frames, PDUs, signals, signal groups, transformation sets) or by path
    (channels, connectors, triggerings, ports). Operations accept either an
    entity or its key.

    The model is mutable and meant to be built incrementally. Every mutating
    operation holds ``lock``, so several threads sharing one model are
    serialized.

    Attributes
    ----------
        clusters: Clusters by name.
        channels: Physical channels by path.
        ecus: ECU instances by name.
        connectors: Communication connectors by path.
        frames: Frames by name.
        pdus: PDUs by name.
        signals: Signals by name.
        signal_groups: Signal groups by name.
        frame_triggerings: Frame triggerings by path.
        pdu_triggerings: PDU triggerings by path.
        signal_triggerings: Signal triggerings by path.
        ports: Ports by path.
        transformation_sets: Data transformation sets by name.

    """

    clusters: dict[str, Cluster] = field(default_factory=dict)
    channels: dict[str, PhysicalChannel] = field(default_factory=dict)
    ecus: dict[str, EcuInstance] = field(default_factory=dict)
    connectors: dict[str, CommunicationConnector] = field(default_factory=dict)
    frames: dict[str, Frame] = field(default_factory=dict)
    pdus: dict[str, Pdu] = field(default_factory=dict)
    signals: dict[str, Signal] = field(default_factory=dict)
    signal_groups: dict[str, SignalGroup] = field(default_factory=dict)
    frame_triggerings: dict[str, FrameTriggering] = field(default_factory=dict)
    pdu_triggerings: dict[str, PduTriggering] = field(default_factory=dict)
    signal_triggerings: dict[str, SignalTriggering] = field(default_factory=dict)
    ports: dict[str, Port] = field(default_factory=dict)
    transformation_sets: dict[str, DataTransformationSet] = field(default_factory=dict)
    lock: threading.RLock = field(
        default_factory=threading.RLock, repr=False, compare=False
    )

    # -- lookup ------------------------------------------------------------

    def get_cluster(self, cluster: Cluster | str) -> Cluster:
        """Resolve a cluster by name."""
        return _resolve(self.clusters, cluster, Cluster, "cluster")

    def get_channel(self, channel: PhysicalChannel | str) -> PhysicalChannel:
        """Resolve a physical channel by path (``<cluster>/<channel>``)."""
        return _resolve(self.channels, channel, PhysicalChannel, "physical channel")

    def get_ecu(self, ecu: EcuInstance | str) -> EcuInstance:
        """Resolve an ECU instance by name."""
        return _resolve(self.ecus, ecu, EcuInstance, "ECU")

    def get_frame(self, frame: Frame | str) -> Frame:
        """Resolve a frame by name."""
        return _resolve(self.frames, frame, Frame, "frame")

    def get_pdu(self, pdu: Pdu | str) -> Pdu:
        """Resolve a PDU by name."""
        return _resolve(self.pdus, pdu, Pdu, "PDU")

    def get_signal(self, signal: Signal | str) -> Signal:
        """Resolve a signal by name."""
        return _resolve(self.signals, signal, Signal, "signal")

    def get_signal_group(self, group: SignalGroup | str) -> SignalGroup:
        """Resolve a signal group by name."""
        return _resolve(self.signal_groups, group, SignalGroup, "signal group")

    def get_transformation_set(
        self, transformation_set: DataTransformationSet | str
    ) -> DataTransformationSet:
        """Resolve a data transformation set by name."""
        return _resolve(
            self.transformation_sets,
            transformation_set,
            DataTransformationSet,
            "data transformation set",
        )

    def get_triggering(self, triggering: Triggering | str) -> Triggering:
        """Resolve a frame, PDU or signal triggering by path.

        Raises
        ------
            InvalidParameterError: If no triggering has this path.
            ConversionError: If the object is not a triggering.

        """
        if isinstance(triggering, str):
            for collection in (self.frame_triggerings, self.pdu_triggerings, self.signal_triggerings):
                if triggering in collection:
                    return collection[triggering]  # type: ignore[return-value]
            raise InvalidParameterError(f"Unknown triggering '{triggering}'")
        if isinstance(triggering, FrameTriggering):
            return _resolve(self.frame_triggerings, triggering, FrameTriggering, "frame triggering")
        if isinstance(triggering, PduTriggering):
            return _resolve(self.pdu_triggerings, triggering, PduTriggering, "PDU triggering")
        if isinstance(triggering, SignalTriggering):
            return _resolve(
                self.signal_triggerings, triggering, SignalTriggering, "signal triggering"
            )
        raise ConversionError(f"Expected a triggering, got {type(triggering).__name__}")

    def connector_for(
        self,
        channel: PhysicalChannel | str,
        ecu: EcuInstance | str,
    ) -> CommunicationConnector | None:
        """Get the connector attaching an ECU to a channel.

        Returns
        -------
            The connector, or None if the ECU is not connected to the channel.

        """
        channel_path = channel if isinstance(channel, str) else channel.path
        ecu_name = ecu if isinstance(ecu, str) else ecu.name
        for path in self.channels[channel_path].connectors:
            connector = self.connectors[path]
            if connector.ecu == ecu_name:
                return connector
        return None

    def signal_target(self, mapping: SignalToPduMapping) -> Signal | SignalGroup:
        """Get the signal or signal group of a signal-to-PDU mapping."""
        if mapping.signal is not None:
            return self.signals[mapping.signal]
        return self.signal_groups[mapping.signal_group]  # type: ignore[index]

    def frame_placements(self, frame: Frame | str) -> list[layout.Placement]:
        """Get the placements of all PDUs mapped into a frame."""
        frame = self.get_frame(frame)
        return [
            layout.Placement(
                bit_offset=mapping.start_position,
                bit_length=self.pdus[mapping.pdu].length * 8,
                byte_order=mapping.byte_order,
                update_bit=mapping.update_bit,
            )
            for mapping in frame.mappings
        ]

    def pdu_placements(self, pdu: Pdu | str) -> list[layout.Placement]:
        """Get the placements of all signals mapped into a PDU.

        Signal group mappings have no position and are skipped.
        """
        pdu = self.get_pdu(pdu)
        return [
            layout.Placement(
                bit_offset=mapping.start_position,
                bit_length=self.signals[mapping.signal].length,
                byte_order=mapping.byte_order,  # type: ignore[arg-type]
                update_bit=mapping.update_bit,
            )
            for mapping in pdu.mappings
            if mapping.signal is not None and mapping.start_position is not None
        ]

    # -- topology ----------------------------------------------------------

    def create_cluster(self, name: str, kind: ClusterKind) -> Cluster:
        """Create a cluster.

        Raises
        ------
            ItemAlreadyExistsError: If a cluster with this name exists.

        """
        with self.lock:
            if name in self.clusters:
                raise ItemAlreadyExistsError(f"Cluster '{name}' already exists")
            cluster = Cluster(name=name, kind=kind)
            self.clusters[name] = cluster
            logger.debug("Created %s cluster %s", kind.value, name)
            return cluster

    def create_physical_channel(
        self,
        cluster: Cluster | str,
        name: str,
        vlan: Vlan | None = None,
        channel_name: FlexrayChannelName | None = None,
    ) -> PhysicalChannel:
        """Create a physical channel in a cluster.

        CAN and LIN clusters hold a single channel. FlexRay clusters hold at
        most one channel per channel name (A, B). Ethernet channels are told
        apart by their VLAN: VLAN ids are unique within the cluster and at
        most one channel is untagged.

        Args:
        ----
            cluster: The owning cluster.
            name: Name of the channel, unique within the cluster.
            vlan: VLAN of an Ethernet channel; None for an untagged channel.
            channel_name: FlexRay channel name; required for FlexRay clusters.

        Returns:
        -------
            The new physical channel.

        Raises:
        ------
            ItemAlreadyExistsError: If the cluster cannot hold another channel like this one.
            InvalidParameterError: If ``vlan`` or ``channel_name`` do not fit the cluster kind.

        """
        with self.lock:
            cluster = self.get_cluster(cluster)
            existing = [self.channels[path] for path in cluster.channels]

            if any(channel.name == name for channel in existing):
                raise ItemAlreadyExistsError(
                    f"Physical channel '{name}' already exists in cluster '{cluster.name}'"
                )
            if vlan is not None and cluster.kind != ClusterKind.ETHERNET:
                raise InvalidParameterError(
                    f"VLANs are only supported on Ethernet clusters, not {cluster.kind.value}"
                )
            if channel_name is not None and cluster.kind != ClusterKind.FLEXRAY:
                raise InvalidParameterError(
                    f"Channel names are only supported on FlexRay clusters, not {cluster.kind.value}"
                )

            if cluster.kind.single_channel and existing:
                raise ItemAlreadyExistsError(
                    f"{cluster.kind.value.upper()} cluster '{cluster.name}' already has a "
                    f"physical channel"
                )
            if cluster.kind == ClusterKind.FLEXRAY:
                if channel_name is None:
                    raise InvalidParameterError("FlexRay channels require a channel name (A or B)")
                if any(channel.channel_name == channel_name for channel in existing):
                    raise ItemAlreadyExistsError(
                        f"FlexRay cluster '{cluster.name}' already has a channel "
                        f"{channel_name.value}"
                    )
            if cluster.kind == ClusterKind.ETHERNET:
                self._check_vlan(cluster, existing, vlan)

            channel = PhysicalChannel(
                name=name,
                cluster=cluster.name,
                kind=cluster.kind,
                vlan=vlan,
                channel_name=channel_name,
            )
            self.channels[channel.path] = channel
            cluster.channels.append(channel.path)
            logger.debug("Created physical channel %s", channel.path)
            return channel

    @staticmethod
    def _check_vlan(
        cluster: Cluster,
        existing: list[PhysicalChannel],
        vlan: Vlan | None,
    ) -> None:
        if vlan is None:
            if any(channel.vlan is None for channel in existing):
                raise ItemAlreadyExistsError(
                    f"Ethernet cluster '{cluster.name}' already has an untagged channel"
                )
            return

        if not 0 <= vlan.vlan_id <= MAX_VLAN_ID:
            raise InvalidParameterError(f"VLAN id {vlan.vlan_id} is out of range (0-{MAX_VLAN_ID})")
        if any(channel.vlan is not None and channel.vlan.vlan_id == vlan.vlan_id for channel in existing):
            raise ItemAlreadyExistsError(
                f"Ethernet cluster '{cluster.name}' already has a channel with VLAN id "
                f"{vlan.vlan_id}"
            )

    def create_ecu(self, name: str) -> EcuInstance:
        """Create an ECU instance.

        Raises
        ------
            ItemAlreadyExistsError: If an ECU with this name exists.

        """
        with self.lock:
            if name in self.ecus:
                raise ItemAlreadyExistsError(f"ECU '{name}' already exists")
            ecu = EcuInstance(name=name)
            self.ecus[name] = ecu
            logger.debug("Created ECU %s", name)
            return ecu

    def connect_ecu(
        self,
        ecu: EcuInstance | str,
        channel: PhysicalChannel | str,
        connector_name: str | None = None,
    ) -> CommunicationConnector:
        """Attach an ECU to a physical channel through a new connector.

        Args:
        ----
            ecu: The ECU to connect.
            channel: The physical channel.
            connector_name: Name of the connector, unique within the ECU.
                Defaults to ``<ecu>_<channel>``.

        Returns:
        -------
            The new connector.

        Raises:
        ------
            ItemAlreadyExistsError: If the ECU is already connected to the channel,
                or the connector name is taken.

        """
        with self.lock:
            ecu = self.get_ecu(ecu)
            channel = self.get_channel(channel)

            if self.connector_for(channel, ecu) is not None:
                raise ItemAlreadyExistsError(
                    f"ECU '{ecu.name}' is already connected to '{channel.path}'"
                )
            name = connector_name or f"{ecu.name}_{channel.name}"
            if any(self.connectors[path].name == name for path in ecu.connectors):
                raise ItemAlreadyExistsError(
                    f"Connector '{name}' already exists in ECU '{ecu.name}'"
                )

            connector = CommunicationConnector(name=name, ecu=ecu.name, channel=channel.path)
            self.connectors[connector.path] = connector
            ecu.connectors.append(connector.path)
            channel.connectors.append(connector.path)
            logger.debug("Connected ECU %s to %s via %s", ecu.name, channel.path, name)
            return connector

    # -- frames, PDUs and signals ------------------------------------------

    def create_frame(self, name: str, kind: FrameKind, length: int) -> Frame:
        """Create a frame of ``length`` bytes.

        Raises
        ------
            ItemAlreadyExistsError: If a frame with this name exists.
            InvalidParameterError: If the length is negative.

        """
        with self.lock:
            if name in self.frames:
                raise ItemAlreadyExistsError(f"Frame '{name}' already exists")
            if length < 0:
                raise InvalidParameterError(f"Frame length must not be negative: {length}")
            frame = Frame(name=name, kind=kind, length=length)
            self.frames[name] = frame
            logger.debug("Created %s frame %s (%d bytes)", kind.value, name, length)
            return frame

    def create_pdu(self, name: str, kind: PduKind, length: int) -> Pdu:
        """Create a PDU of ``length`` bytes.

        Raises
        ------
            ItemAlreadyExistsError: If a PDU with this name exists.
            InvalidParameterError: If the length is negative.

        """
        with self.lock:
            if name in self.pdus:
                raise ItemAlreadyExistsError(f"PDU '{name}' already exists")
            if length < 0:
                raise InvalidParameterError(f"PDU length must not be negative: {length}")
            pdu = Pdu(name=name, kind=kind, length=length)
            self.pdus[name] = pdu
            logger.debug("Created %s %s (%d bytes)", kind.value, name, length)
            return pdu

    def create_signal(self, name: str, length: int) -> Signal:
        """Create a signal of ``length`` bits.

        Raises
        ------
            ItemAlreadyExistsError: If a signal with this name exists.
            InvalidParameterError: If the length is out of range.

        """
        with self.lock:
            if name in self.signals:
                raise ItemAlreadyExistsError(f"Signal '{name}' already exists")
            if not 0 < length <= MAX_SIGNAL_LENGTH:
                raise InvalidParameterError(f"Signal length {length} is out of range")
            signal = Signal(name=name, length=length)
            self.signals[name] = signal
            logger.debug("Created signal %s (%d bits)", name, length)
            return signal

    def create_signal_group(self, name: str) -> SignalGroup:
        """Create an empty signal group.

        Raises
        ------
            ItemAlreadyExistsError: If a signal group with this name exists.

        """
        with self.lock:
            if name in self.signal_groups:
                raise ItemAlreadyExistsError(f"Signal group '{name}' already exists")
            group = SignalGroup(name=name)
            self.signal_groups[name] = group
            logger.debug("Created signal group %s", name)
            return group

    def add_signal_to_group(self, group: SignalGroup | str, signal: Signal | str) -> None:
        """Make a signal a member of a signal group.

        Raises
        ------
            InvalidParameterError: If the signal already belongs to another group.

        """
        with self.lock:
            group = self.get_signal_group(group)
            signal = self.get_signal(signal)
            if signal.signal_group == group.name:
                return
            if signal.signal_group is not None:
                raise InvalidParameterError(
                    f"Signal '{signal.name}' already belongs to group '{signal.signal_group}'"
                )
            signal.signal_group = group.name
            group.signals.append(signal.name)
            logger.debug("Added signal %s to group %s", signal.name, group.name)

    def create_data_transformation_set(self, name: str) -> DataTransformationSet:
        """Create a data transformation set.

        Raises
        ------
            ItemAlreadyExistsError: If a set with this name exists.

        """
        with self.lock:
            if name in self.transformation_sets:
                raise ItemAlreadyExistsError(f"Data transformation set '{name}' already exists")
            transformation_set = DataTransformationSet(name=name)
            self.transformation_sets[name] = transformation_set
            logger.debug("Created data transformation set %s", name)
            return transformation_set

    # -- mappings ----------------------------------------------------------

    def map_pdu_into_frame(
        self,
        frame: Frame | str,
        pdu: Pdu | str,
        start_position: int,
        byte_order: ByteOrder,
        update_bit: int | None = None,
    ) -> PduToFrameMapping:
        """Map a PDU into a frame and give it a triggering in every frame triggering.

        Args:
        ----
            frame: The frame.
            pdu: The PDU to place in the frame.
            start_position: Bit position of the PDU; must start a byte.
            byte_order: Byte order of the PDU; all PDUs of a frame share one byte order.
            update_bit: Optional position of the PDU's update bit.

        Returns:
        -------
            The new mapping.

        Raises:
        ------
            InvalidParameterError: If the byte order or start position is not acceptable,
                or a CAN frame already carries a PDU.
            OverlapError: If the PDU overlaps other PDUs or does not fit into the frame.

        """
        with self.lock:
            frame = self.get_frame(frame)
            pdu = self.get_pdu(pdu)

            _check_positions(start_position, update_bit)
            if byte_order == ByteOrder.OPAQUE:
                raise InvalidParameterError("PDUs cannot be mapped with opaque byte order")
            if not layout.is_pdu_start_aligned(start_position, byte_order):
                raise InvalidParameterError(
                    f"PDU '{pdu.name}' must start on a byte boundary, "
                    f"start position {start_position} is not aligned for {byte_order.value}"
                )
            if frame.kind == FrameKind.CAN and frame.mappings:
                raise InvalidParameterError(
                    f"CAN frame '{frame.name}' already carries PDU '{frame.mappings[0].pdu}'"
                )
            if any(mapping.byte_order != byte_order for mapping in frame.mappings):
                raise InvalidParameterError(
                    f"All PDUs in frame '{frame.name}' must use the same byte order"
                )

            placement = layout.Placement(start_position, pdu.length * 8, byte_order, update_bit)
            if not layout.validate_and_reserve(
                frame.length, self.frame_placements(frame), placement
            ):
                raise OverlapError(
                    f"PDU '{pdu.name}' at bit {start_position} overlaps other PDUs "
                    f"or exceeds frame '{frame.name}'"
                )

            mapping = PduToFrameMapping(
                name=make_unique_name(pdu.name, (m.name for m in frame.mappings)),
                pdu=pdu.name,
                start_position=start_position,
                byte_order=byte_order,
                update_bit=update_bit,
            )
            frame.mappings.append(mapping)
            if frame.name not in pdu.frames:
                pdu.frames.append(frame.name)
            logger.debug("Mapped PDU %s into frame %s at bit %d", pdu.name, frame.name, start_position)

            propagation.propagate_pdu_mapping(self, frame, pdu)
            return mapping

    def map_signal_into_pdu(
        self,
        pdu: Pdu | str,
        signal: Signal | str,
        start_position: int,
        byte_order: ByteOrder,
        update_bit: int | None = None,
        transfer_property: TransferProperty = TransferProperty.TRIGGERED,
    ) -> SignalToPduMapping:
        """Map a signal into a PDU and give it a triggering in every PDU triggering.

        A signal that belongs to a signal group can only be mapped after the
        group was mapped into the same PDU.

        Args:
        ----
            pdu: A signal-carrying PDU.
            signal: The signal to place in the PDU.
            start_position: Bit position of the signal.
            byte_order: Byte order of the signal.
            update_bit: Optional position of the signal's update bit.
            transfer_property: Transfer property of the signal.

        Returns:
        -------
            The new mapping.

        Raises:
        ------
            ConversionError: If the PDU cannot carry signals.
            InvalidParameterError: If the signal's group is not mapped into the PDU yet.
            OverlapError: If the signal overlaps other signals or does not fit into the PDU.

        """
        with self.lock:
            pdu = self.get_pdu(pdu)
            signal = self.get_signal(signal)

            if not pdu.carries_signals:
                raise ConversionError(f"PDU '{pdu.name}' ({pdu.kind.value}) cannot carry signals")
            _check_positions(start_position, update_bit)
            if signal.signal_group is not None and pdu.group_mapping(signal.signal_group) is None:
                raise InvalidParameterError(
                    f"Signal '{signal.name}' belongs to group '{signal.signal_group}', "
                    f"which must be mapped into PDU '{pdu.name}' first"
                )

            placement = layout.Placement(start_position, signal.length, byte_order, update_bit)
            if not layout.validate_and_reserve(pdu.length, self.pdu_placements(pdu), placement):
                raise OverlapError(
                    f"Signal '{signal.name}' at bit {start_position} overlaps other signals "
                    f"or exceeds PDU '{pdu.name}'"
                )

            mapping = SignalToPduMapping(
                name=make_unique_name(signal.name, (m.name for m in pdu.mappings)),
                signal=signal.name,
                start_position=start_position,
                byte_order=byte_order,
                update_bit=update_bit,
                transfer_property=transfer_property,
            )
            pdu.mappings.append(mapping)
            if pdu.name not in signal.pdus:
                signal.pdus.append(pdu.name)
            logger.debug(
                "Mapped signal %s into PDU %s at bit %d", signal.name, pdu.name, start_position
            )

            propagation.propagate_signal_mapping(self, pdu, signal)
            return mapping

    def map_signal_group_into_pdu(
        self,
        pdu: Pdu | str,
        group: SignalGroup | str,
    ) -> SignalToPduMapping:
        """Map a signal group into a PDU and give it a triggering in every PDU triggering.

        Raises
        ------
            ConversionError: If the PDU cannot carry signals.

        """
        with self.lock:
            pdu = self.get_pdu(pdu)
            group = self.get_signal_group(group)

            if not pdu.carries_signals:
                raise ConversionError(
                    f"PDU '{pdu.name}' ({pdu.kind.value}) cannot carry signal groups"
                )

            mapping = SignalToPduMapping(
                name=make_unique_name(group.name, (m.name for m in pdu.mappings)),
                signal_group=group.name,
            )
            pdu.mappings.append(mapping)
            if pdu.name not in group.pdus:
                group.pdus.append(pdu.name)
            logger.debug("Mapped signal group %s into PDU %s", group.name, pdu.name)

            propagation.propagate_signal_mapping(self, pdu, group)
            return mapping

    # -- triggerings and ports ---------------------------------------------

    def trigger_can_frame(
        self,
        channel: PhysicalChannel | str,
        frame: Frame | str,
        identifier: int,
        addressing_mode: CanAddressingMode = CanAddressingMode.STANDARD,
        frame_type: CanFrameType = CanFrameType.CAN_20,
    ) -> FrameTriggering:
        """Transmit a CAN frame on a CAN channel.

        PDU and signal triggerings are created for everything already mapped
        into the frame.

        Raises
        ------
            ConversionError: If the channel or the frame is not a CAN one.
            InvalidParameterError: If the identifier does not fit the addressing mode.

        """
        with self.lock:
            channel = self.get_channel(channel)
            frame = self.get_frame(frame)

            if channel.kind != ClusterKind.CAN:
                raise ConversionError(f"Physical channel '{channel.path}' is not a CAN channel")
            if frame.kind != FrameKind.CAN:
                raise ConversionError(f"Frame '{frame.name}' is not a CAN frame")
            if not 0 <= identifier <= addressing_mode.max_identifier:
                raise InvalidParameterError(
                    f"CAN identifier 0x{identifier:X} is out of range for "
                    f"{addressing_mode.value} addressing"
                )

            info = CanTriggeringInfo(identifier, addressing_mode, frame_type)
            return self._create_frame_triggering(channel, frame, can=info)

    def trigger_flexray_frame(
        self,
        channel: PhysicalChannel | str,
        frame: Frame | str,
        slot_id: int,
        cycle: FlexrayCommunicationCycle,
    ) -> FrameTriggering:
        """Transmit a FlexRay frame on a FlexRay channel.

        Raises
        ------
            ConversionError: If the channel or the frame is not a FlexRay one.
            InvalidParameterError: If the cycle is outside the 64 cycle matrix.

        """
        with self.lock:
            channel = self.get_channel(channel)
            frame = self.get_frame(frame)

            if channel.kind != ClusterKind.FLEXRAY:
                raise ConversionError(
                    f"Physical channel '{channel.path}' is not a FlexRay channel"
                )
            if frame.kind != FrameKind.FLEXRAY:
                raise ConversionError(f"Frame '{frame.name}' is not a FlexRay frame")
            if isinstance(cycle, CycleCounterTiming):
                first_cycle = cycle.cycle_counter
            elif isinstance(cycle, CycleRepetitionTiming):
                first_cycle = cycle.base_cycle
            else:
                raise ConversionError(f"Unsupported FlexRay cycle {cycle!r}")
            if not 0 <= first_cycle < FLEXRAY_CYCLE_COUNT:
                raise InvalidParameterError(
                    f"FlexRay cycle {first_cycle} is out of range (0-{FLEXRAY_CYCLE_COUNT - 1})"
                )

            info = FlexrayTriggeringInfo(slot_id, cycle)
            return self._create_frame_triggering(channel, frame, flexray=info)

    def _create_frame_triggering(
        self,
        channel: PhysicalChannel,
        frame: Frame,
        can: CanTriggeringInfo | None = None,
        flexray: FlexrayTriggeringInfo | None = None,
    ) -> FrameTriggering:
        name = make_unique_name(
            f"FT_{frame.name}",
            (self.frame_triggerings[path].name for path in channel.frame_triggerings),
        )
        frame_triggering = FrameTriggering(
            name=name,
            channel=channel.path,
            frame=frame.name,
            can=can,
            flexray=flexray,
        )
        self.frame_triggerings[frame_triggering.path] = frame_triggering
        channel.frame_triggerings.append(frame_triggering.path)
        frame.frame_triggerings.append(frame_triggering.path)
        logger.debug("Created frame triggering %s for frame %s", frame_triggering.path, frame.name)

        propagation.propagate_frame_triggering(self, frame_triggering)
        return frame_triggering

    def trigger_pdu(self, channel: PhysicalChannel | str, pdu: Pdu | str) -> PduTriggering:
        """Transmit a PDU directly on an Ethernet channel.

        Calling this again for the same PDU returns the existing triggering.

        Raises
        ------
            ConversionError: If the channel is not an Ethernet channel.

        """
        with self.lock:
            channel = self.get_channel(channel)
            pdu = self.get_pdu(pdu)

            if channel.kind != ClusterKind.ETHERNET:
                raise ConversionError(
                    f"PDUs can only be triggered directly on Ethernet channels, "
                    f"'{channel.path}' is {channel.kind.value}"
                )
            return propagation.ensure_pdu_triggering(self, channel, pdu)

    def map_contained_ipdu(
        self,
        container: Pdu | str,
        pdu: Pdu | str,
        channel: PhysicalChannel | str,
    ) -> PduTriggering:
        """Place a PDU into a container PDU on a physical channel.

        The contained PDU gets its own PDU triggering on the channel, outside
        of any frame triggering, and the container records it. Mapping the
        same PDU on the same channel again returns the existing triggering.

        Args:
        ----
            container: A container PDU.
            pdu: The PDU transported inside the container.
            channel: Channel on which the container is transmitted.

        Returns:
        -------
            The PDU triggering of the contained PDU.

        Raises:
        ------
            ConversionError: If ``container`` is not a container PDU.
            InvalidParameterError: If a container would contain itself.

        """
        with self.lock:
            container = self.get_pdu(container)
            pdu = self.get_pdu(pdu)
            channel = self.get_channel(channel)

            if container.kind != PduKind.CONTAINER_IPDU:
                raise ConversionError(
                    f"PDU '{container.name}' ({container.kind.value}) is not a container PDU"
                )
            if pdu is container:
                raise InvalidParameterError(f"Container PDU '{container.name}' cannot contain itself")

            pdu_triggering = propagation.ensure_pdu_triggering(self, channel, pdu)
            if pdu_triggering.path not in container.contained_pdu_triggerings:
                container.contained_pdu_triggerings.append(pdu_triggering.path)
                logger.debug(
                    "Mapped PDU %s into container %s on %s", pdu.name, container.name, channel.path
                )
            return pdu_triggering

    def set_secured_payload(
        self,
        secured: Pdu | str,
        pdu: Pdu | str,
        channel: PhysicalChannel | str,
    ) -> PduTriggering:
        """Protect a PDU with a secured PDU on a physical channel.

        The payload PDU gets a PDU triggering on the channel, outside of any
        frame triggering, which becomes the payload of the secured PDU. A
        previous payload reference is replaced; its triggering stays in the
        model.

        Raises
        ------
            ConversionError: If ``secured`` is not a secured PDU.
            InvalidParameterError: If a secured PDU would protect itself.

        """
        with self.lock:
            secured = self.get_pdu(secured)
            pdu = self.get_pdu(pdu)
            channel = self.get_channel(channel)

            self._check_secured(secured)
            if pdu is secured:
                raise InvalidParameterError(f"Secured PDU '{secured.name}' cannot protect itself")

            pdu_triggering = propagation.ensure_pdu_triggering(self, channel, pdu)
            secured.payload_pdu_triggering = pdu_triggering.path
            logger.debug("Set payload of secured PDU %s to %s", secured.name, pdu_triggering.path)
            return pdu_triggering

    def set_secured_payload_triggering(
        self,
        secured: Pdu | str,
        pdu_triggering: PduTriggering | str,
    ) -> None:
        """Use an existing PDU triggering as payload of a secured PDU.

        This is the case for cryptographic PDUs, whose payload is transmitted
        separately and therefore already has a triggering.

        Raises
        ------
            ConversionError: If ``secured`` is not a secured PDU or the
                triggering is not a PDU triggering.

        """
        with self.lock:
            secured = self.get_pdu(secured)
            triggering = self.get_triggering(pdu_triggering)

            self._check_secured(secured)
            if not isinstance(triggering, PduTriggering):
                raise ConversionError(f"'{triggering.path}' is not a PDU triggering")
            if triggering.pdu == secured.name:
                raise InvalidParameterError(f"Secured PDU '{secured.name}' cannot protect itself")

            secured.payload_pdu_triggering = triggering.path
            logger.debug("Set payload of secured PDU %s to %s", secured.name, triggering.path)

    @staticmethod
    def _check_secured(secured: Pdu) -> None:
        if secured.kind != PduKind.SECURED_IPDU:
            raise ConversionError(
                f"PDU '{secured.name}' ({secured.kind.value}) is not a secured PDU"
            )

    def connect_triggering_to_ecu(
        self,
        triggering: Triggering | str,
        ecu: EcuInstance | str,
        direction: CommunicationDirection,
    ) -> Port:
        """Make an ECU send or receive a triggering.

        The port is created on the ECU's connector for the triggering's
        channel; matching ports are created on every triggering below it.
        An existing port for the same ECU and direction is returned as is.

        Raises
        ------
            NotConnectedError: If the ECU has no connector on the triggering's channel.

        """
        with self.lock:
            triggering = self.get_triggering(triggering)
            ecu = self.get_ecu(ecu)
            return propagation.ensure_port(self, triggering, ecu.name, direction)


def _resolve(collection: dict[str, T], ref: T | str, kind: type, what: str) -> T:
    if isinstance(ref, str):
        try:
            return collection[ref]
        except KeyError:
            raise InvalidParameterError(f"Unknown {what} '{ref}'") from None

    if not isinstance(ref, kind):
        raise ConversionError(f"Expected a {what}, got {type(ref).__name__}")

    key = getattr(ref, "path", None) or ref.name  # type: ignore[attr-defined]
    if collection.get(key) is not ref:
        raise InvalidParameterError(f"The {what} '{key}' is not part of this model")
    return ref


def _check_positions(start_position: int, update_bit: int | None) -> None:
    if start_position < 0:
        raise InvalidParameterError(f"Start position {start_position} is negative")
    if update_bit is not None and update_bit < 0:
        raise InvalidParameterError(f"Update bit {update_bit} is negative")
