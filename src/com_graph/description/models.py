"""Pydantic models for com-graph network description files.

Model Hierarchy:
    NetworkDescription (root)
    ├── clusters - buses and their physical channels
    ├── ecus - ECU instances and their channel connections
    ├── transformations - data transformation sets (technologies and chains)
    ├── signals / signal_groups - signals, groups and their transformations
    ├── pdus - PDUs with their signal and signal group mappings
    ├── frames - frames with their PDU mappings
    └── triggerings - frames and PDUs transmitted on channels, with ECU connections
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from com_graph.description.common import HexInt16, HexInt32
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
    TransferProperty,
)
from com_graph.transformation import DataIdMode, E2EProfile, E2EProfileBehavior

SCHEMA_VERSION = "com-graph.network/v1"


class VlanDescription(BaseModel):
    """VLAN of an Ethernet channel.

    Example:
    -------
        ```yaml
        vlan:
          name: VLAN_10
          id: 10
        ```

    """

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1, description="VLAN name")]
    id: Annotated[HexInt16, Field(description="VLAN identifier (0-4095)")]


class ChannelDescription(BaseModel):
    """A physical channel of a cluster."""

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1, description="Channel name, unique within the cluster")]
    vlan: Annotated[
        VlanDescription | None,
        Field(default=None, description="VLAN of an Ethernet channel; omit for untagged"),
    ]
    flexray_channel: Annotated[
        FlexrayChannelName | None,
        Field(default=None, description="FlexRay channel name (A or B)"),
    ]

    @model_validator(mode="after")
    def validate_single_kind(self) -> ChannelDescription:
        """A channel is either an Ethernet VLAN channel or a FlexRay channel."""
        if self.vlan is not None and self.flexray_channel is not None:
            raise ValueError("A channel cannot have both 'vlan' and 'flexray_channel'")
        return self


class ClusterDescription(BaseModel):
    """A bus and its physical channels.

    Example:
    -------
        ```yaml
        PowertrainCan:
          kind: can
          channels:
            - name: PowertrainChannel
        ```

    """

    model_config = ConfigDict(extra="forbid")

    kind: Annotated[ClusterKind, Field(description="Bus technology")]
    channels: Annotated[
        list[ChannelDescription],
        Field(default_factory=list, description="Physical channels of the cluster"),
    ]


class ConnectionDescription(BaseModel):
    """Attachment of an ECU to a physical channel."""

    model_config = ConfigDict(extra="forbid")

    channel: Annotated[str, Field(description="Channel path: <cluster>/<channel>")]
    connector: Annotated[
        str | None,
        Field(default=None, description="Connector name; defaults to <ecu>_<channel>"),
    ]


class EcuDescription(BaseModel):
    """An ECU instance."""

    model_config = ConfigDict(extra="forbid")

    connections: Annotated[
        list[ConnectionDescription],
        Field(default_factory=list, description="Channels the ECU is connected to"),
    ]


class GenericTechnologyDescription(BaseModel):
    """User defined transformer."""

    model_config = ConfigDict(extra="forbid")

    protocol_name: str
    protocol_version: str
    header_length: Annotated[int, Field(ge=0)]
    in_place: bool


class ComTechnologyDescription(BaseModel):
    """COM based serializer."""

    model_config = ConfigDict(extra="forbid")

    isignal_ipdu_length: Annotated[int, Field(ge=0)]


class E2ETechnologyDescription(BaseModel):
    """E2E protection transformer."""

    model_config = ConfigDict(extra="forbid")

    profile: E2EProfile
    zero_header_length: bool = False
    transform_in_place: bool = True
    offset: Annotated[int, Field(default=0, ge=0)]
    max_delta_counter: Annotated[int, Field(default=1, ge=0)]
    max_error_state_init: Annotated[int, Field(default=0, ge=0)]
    max_error_state_invalid: Annotated[int, Field(default=0, ge=0)]
    max_error_state_valid: Annotated[int, Field(default=0, ge=0)]
    max_no_new_or_repeated_data: Annotated[int, Field(default=0, ge=0)]
    min_ok_state_init: Annotated[int, Field(default=1, ge=0)]
    min_ok_state_invalid: Annotated[int, Field(default=1, ge=0)]
    min_ok_state_valid: Annotated[int, Field(default=1, ge=0)]
    window_size: Annotated[int, Field(default=1, ge=0)]
    window_size_init: int | None = None
    window_size_invalid: int | None = None
    window_size_valid: int | None = None
    profile_behavior: E2EProfileBehavior | None = None
    sync_counter_init: int | None = None
    data_id_mode: DataIdMode | None = None
    data_id_nibble_offset: int | None = None
    crc_offset: int | None = None
    counter_offset: int | None = None


class SomeIpTechnologyDescription(BaseModel):
    """SOME/IP serializer."""

    model_config = ConfigDict(extra="forbid")

    alignment: Annotated[int, Field(ge=0)]
    byte_order: ByteOrder
    interface_version: Annotated[int, Field(ge=0)]


class TechnologyDescription(BaseModel):
    """A transformation technology; exactly one configuration must be given.

    Example:
    -------
        ```yaml
        E2E:
          e2e:
            profile: P05
            offset: 64
        ```

    """

    model_config = ConfigDict(extra="forbid")

    generic: GenericTechnologyDescription | None = None
    com: ComTechnologyDescription | None = None
    e2e: E2ETechnologyDescription | None = None
    someip: SomeIpTechnologyDescription | None = None

    @model_validator(mode="after")
    def validate_exactly_one_config(self) -> TechnologyDescription:
        """Exactly one of generic, com, e2e and someip must be set."""
        configured = [
            name
            for name in ("generic", "com", "e2e", "someip")
            if getattr(self, name) is not None
        ]
        if len(configured) != 1:
            raise ValueError(
                "A technology needs exactly one of 'generic', 'com', 'e2e' or 'someip', "
                f"got {configured or 'none'}"
            )
        return self


class ChainDescription(BaseModel):
    """A data transformation: an ordered chain of technologies of the same set."""

    model_config = ConfigDict(extra="forbid")

    technologies: Annotated[
        list[str],
        Field(description="Technology names of the set, in execution order"),
    ]
    execute_despite_data_unavailability: bool = False


class TransformationSetDescription(BaseModel):
    """A data transformation set."""

    model_config = ConfigDict(extra="forbid")

    technologies: Annotated[
        dict[str, TechnologyDescription],
        Field(default_factory=dict, description="Transformation technologies by name"),
    ]
    chains: Annotated[
        dict[str, ChainDescription],
        Field(default_factory=dict, description="Data transformations by name"),
    ]


class TransformationPropsDescription(BaseModel):
    """Per-technology settings of a signal or signal group.

    E2E fields apply to E2E technologies and SOME/IP fields to SOME/IP
    technologies.
    """

    model_config = ConfigDict(extra="forbid")

    technology: Annotated[str, Field(description="Technology path: <set>/<technology>")]
    data_ids: list[HexInt16] = []
    data_length: int | None = None
    max_data_length: int | None = None
    min_data_length: int | None = None
    legacy_strings: bool | None = None
    interface_version: int | None = None
    size_of_array_length: int | None = None


class SignalDescription(BaseModel):
    """A signal."""

    model_config = ConfigDict(extra="forbid")

    length: Annotated[int, Field(gt=0, description="Length in bits")]
    transformations: Annotated[
        list[str],
        Field(default_factory=list, description="Data transformation paths: <set>/<chain>"),
    ]
    transformation_props: list[TransformationPropsDescription] = []


class SignalGroupDescription(BaseModel):
    """A signal group."""

    model_config = ConfigDict(extra="forbid")

    signals: Annotated[list[str], Field(default_factory=list, description="Member signals")]
    transformations: list[str] = []
    transformation_props: list[TransformationPropsDescription] = []


class SignalMappingDescription(BaseModel):
    """Placement of a signal inside a PDU."""

    model_config = ConfigDict(extra="forbid")

    signal: str
    start_position: Annotated[int, Field(ge=0, description="Bit position of the signal")]
    byte_order: ByteOrder
    update_bit: Annotated[int | None, Field(default=None, ge=0)]
    transfer_property: TransferProperty = TransferProperty.TRIGGERED


class PduDescription(BaseModel):
    """A PDU and the signals placed in it.

    Example:
    -------
        ```yaml
        EngineData:
          kind: isignal-ipdu
          length: 8
          signal_groups: [EngineGroup]
          signals:
            - signal: EngineSpeed
              start_position: 0
              byte_order: most-significant-byte-last
        ```

    """

    model_config = ConfigDict(extra="forbid")

    kind: PduKind = PduKind.ISIGNAL_IPDU
    length: Annotated[int, Field(ge=0, description="Length in bytes")]
    signal_groups: Annotated[
        list[str],
        Field(default_factory=list, description="Signal groups mapped before any signal"),
    ]
    signals: list[SignalMappingDescription] = []


class PduMappingDescription(BaseModel):
    """Placement of a PDU inside a frame."""

    model_config = ConfigDict(extra="forbid")

    pdu: str
    start_position: Annotated[int, Field(ge=0, description="Bit position of the PDU")]
    byte_order: ByteOrder
    update_bit: Annotated[int | None, Field(default=None, ge=0)]


class FrameDescription(BaseModel):
    """A frame and the PDUs placed in it."""

    model_config = ConfigDict(extra="forbid")

    kind: FrameKind
    length: Annotated[int, Field(ge=0, description="Length in bytes")]
    pdus: list[PduMappingDescription] = []


class CanTriggeringDescription(BaseModel):
    """CAN settings of a frame triggering."""

    model_config = ConfigDict(extra="forbid")

    identifier: HexInt32
    addressing_mode: CanAddressingMode = CanAddressingMode.STANDARD
    frame_type: CanFrameType = CanFrameType.CAN_20


class FlexrayTriggeringDescription(BaseModel):
    """FlexRay settings of a frame triggering.

    Either ``cycle_counter`` or ``base_cycle`` together with ``repetition``
    must be given.
    """

    model_config = ConfigDict(extra="forbid")

    slot_id: Annotated[int, Field(ge=1)]
    cycle_counter: Annotated[int | None, Field(default=None, ge=0, le=63)]
    base_cycle: Annotated[int | None, Field(default=None, ge=0, le=63)]
    repetition: CycleRepetition | None = None

    @model_validator(mode="after")
    def validate_cycle(self) -> FlexrayTriggeringDescription:
        """Check that exactly one way of describing the cycle is used."""
        repetition_given = self.base_cycle is not None or self.repetition is not None
        if self.cycle_counter is not None and repetition_given:
            raise ValueError("Use either 'cycle_counter' or 'base_cycle' with 'repetition'")
        if self.cycle_counter is None:
            if self.base_cycle is None or self.repetition is None:
                raise ValueError(
                    "A FlexRay triggering needs 'cycle_counter' or both 'base_cycle' "
                    "and 'repetition'"
                )
        return self


class PortDescription(BaseModel):
    """An ECU sending or receiving a triggering."""

    model_config = ConfigDict(extra="forbid")

    ecu: str
    direction: CommunicationDirection


class TriggeringDescription(BaseModel):
    """A frame or PDU transmitted on a physical channel.

    Example:
    -------
        ```yaml
        - channel: PowertrainCan/PowertrainChannel
          frame: EngineFrame
          can:
            identifier: 0x100
          ports:
            - ecu: EngineEcu
              direction: out
        ```

    """

    model_config = ConfigDict(extra="forbid")

    channel: Annotated[str, Field(description="Channel path: <cluster>/<channel>")]
    frame: str | None = None
    pdu: Annotated[
        str | None,
        Field(default=None, description="PDU triggered directly on an Ethernet channel"),
    ]
    can: CanTriggeringDescription | None = None
    flexray: FlexrayTriggeringDescription | None = None
    ports: list[PortDescription] = []

    @model_validator(mode="after")
    def validate_target(self) -> TriggeringDescription:
        """Check that either a frame with bus settings or a PDU is triggered."""
        if (self.frame is None) == (self.pdu is None):
            raise ValueError("A triggering needs exactly one of 'frame' or 'pdu'")
        if self.pdu is not None and (self.can is not None or self.flexray is not None):
            raise ValueError("PDU triggerings take no 'can' or 'flexray' settings")
        if self.frame is not None and (self.can is None) == (self.flexray is None):
            raise ValueError("A frame triggering needs exactly one of 'can' or 'flexray'")
        return self


class NetworkDescription(BaseModel):
    """Root model for com-graph network description YAML/JSON files.

    Example:
    -------
        ```yaml
        schema: com-graph.network/v1
        clusters:
          PowertrainCan:
            kind: can
            channels:
              - name: PowertrainChannel
        ecus:
          EngineEcu:
            connections:
              - channel: PowertrainCan/PowertrainChannel
        ...
        ```

    """

    model_config = ConfigDict(
        # Allow population by field name AND alias
        populate_by_name=True,
        extra="forbid",
        validate_default=True,
    )

    # "schema" shadows a BaseModel attribute, hence the alias
    schema_version: Annotated[
        Literal["com-graph.network/v1"],
        Field(alias="schema", description="Schema version identifier"),
    ]
    clusters: dict[str, ClusterDescription] = {}
    ecus: dict[str, EcuDescription] = {}
    transformations: dict[str, TransformationSetDescription] = {}
    signals: dict[str, SignalDescription] = {}
    signal_groups: dict[str, SignalGroupDescription] = {}
    pdus: dict[str, PduDescription] = {}
    frames: dict[str, FrameDescription] = {}
    triggerings: list[TriggeringDescription] = []
