"""Build a communication model from a validated network description."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from com_graph.description.models import (
    NetworkDescription,
    TechnologyDescription,
    TransformationPropsDescription,
    TriggeringDescription,
)
from com_graph.errors import CommunicationError, InvalidParameterError
from com_graph.model.entities import (
    CycleCounterTiming,
    CycleRepetitionTiming,
    Triggering,
    Vlan,
)
from com_graph.model.graph import CommunicationModel
from com_graph.transformation import (
    SOMEIP_PROTOCOL,
    ComTransformationConfig,
    DataTransformation,
    E2ETransformationConfig,
    GenericTransformationConfig,
    SomeIpTransformationConfig,
    TransformationTarget,
    TransformationTechnology,
    TransformationTechnologyConfig,
)

logger = logging.getLogger(__name__)


class BuildError(Exception):
    """A network description violates a rule of the communication model.

    Attributes
    ----------
        path: Dotted location of the offending element in the description.
        cause: The error raised by the model.

    """

    def __init__(self, path: str, cause: CommunicationError) -> None:
        """Initialize BuildError.

        Args:
        ----
            path: Dotted location of the offending element in the description.
            cause: The error raised by the model.

        """
        self.path = path
        self.cause = cause
        super().__init__(f"{path}: {cause}")


@contextmanager
def _at(path: str) -> Iterator[None]:
    try:
        yield
    except CommunicationError as e:
        raise BuildError(path, e) from e


class NetworkBuilder:
    """Turn a NetworkDescription into a CommunicationModel.

    Elements are created in dependency order: clusters and channels, ECUs
    and their connections, transformation sets, signals and signal groups,
    PDUs, frames and finally triggerings with their ports. Signal groups are
    mapped into a PDU before any signal, so grouped signals can follow.

    Usage:
        model = NetworkBuilder().build(description)
    """

    def build(self, doc: NetworkDescription) -> CommunicationModel:
        """Build the communication model of a description.

        Args:
        ----
            doc: Validated Pydantic model from YAML/JSON.

        Returns:
        -------
            The populated communication model.

        Raises:
        ------
            BuildError: If an element violates a rule of the model.

        """
        model = CommunicationModel()

        self._process_clusters(doc, model)
        self._process_ecus(doc, model)
        self._process_transformations(doc, model)
        self._process_signals(doc, model)
        self._process_pdus(doc, model)
        self._process_frames(doc, model)
        self._process_triggerings(doc, model)

        logger.info(
            "Built model with %d channels, %d frame triggerings, %d PDU triggerings, "
            "%d signal triggerings and %d ports",
            len(model.channels),
            len(model.frame_triggerings),
            len(model.pdu_triggerings),
            len(model.signal_triggerings),
            len(model.ports),
        )
        return model

    def _process_clusters(self, doc: NetworkDescription, model: CommunicationModel) -> None:
        for cluster_name, cluster_def in doc.clusters.items():
            with _at(f"clusters.{cluster_name}"):
                model.create_cluster(cluster_name, cluster_def.kind)

            for index, channel_def in enumerate(cluster_def.channels):
                vlan = None
                if channel_def.vlan is not None:
                    vlan = Vlan(name=channel_def.vlan.name, vlan_id=channel_def.vlan.id)
                with _at(f"clusters.{cluster_name}.channels.{index}"):
                    model.create_physical_channel(
                        cluster_name,
                        channel_def.name,
                        vlan=vlan,
                        channel_name=channel_def.flexray_channel,
                    )

    def _process_ecus(self, doc: NetworkDescription, model: CommunicationModel) -> None:
        for ecu_name, ecu_def in doc.ecus.items():
            with _at(f"ecus.{ecu_name}"):
                model.create_ecu(ecu_name)

            for index, connection in enumerate(ecu_def.connections):
                with _at(f"ecus.{ecu_name}.connections.{index}"):
                    model.connect_ecu(ecu_name, connection.channel, connection.connector)

    def _process_transformations(
        self, doc: NetworkDescription, model: CommunicationModel
    ) -> None:
        for set_name, set_def in doc.transformations.items():
            with _at(f"transformations.{set_name}"):
                transformation_set = model.create_data_transformation_set(set_name)

            for tech_name, tech_def in set_def.technologies.items():
                with _at(f"transformations.{set_name}.technologies.{tech_name}"):
                    transformation_set.create_transformation_technology(
                        tech_name, _technology_config(tech_def)
                    )

            for chain_name, chain_def in set_def.chains.items():
                with _at(f"transformations.{set_name}.chains.{chain_name}"):
                    transformation_set.create_data_transformation(
                        chain_name,
                        chain_def.technologies,
                        chain_def.execute_despite_data_unavailability,
                    )

    def _process_signals(self, doc: NetworkDescription, model: CommunicationModel) -> None:
        for signal_name, signal_def in doc.signals.items():
            path = f"signals.{signal_name}"
            with _at(path):
                signal = model.create_signal(signal_name, signal_def.length)
                self._apply_transformations(
                    model,
                    signal,
                    signal_def.transformations,
                    signal_def.transformation_props,
                )

        for group_name, group_def in doc.signal_groups.items():
            path = f"signal_groups.{group_name}"
            with _at(path):
                group = model.create_signal_group(group_name)
                self._apply_transformations(
                    model,
                    group,
                    group_def.transformations,
                    group_def.transformation_props,
                )
            for signal_name in group_def.signals:
                with _at(f"{path}.signals.{signal_name}"):
                    model.add_signal_to_group(group, signal_name)

    def _apply_transformations(
        self,
        model: CommunicationModel,
        target: TransformationTarget,
        transformations: list[str],
        props: list[TransformationPropsDescription],
    ) -> None:
        for reference in transformations:
            target.add_data_transformation(_find_transformation(model, reference))

        for props_def in props:
            technology = _find_technology(model, props_def.technology)
            if technology.protocol == SOMEIP_PROTOCOL:
                target.create_someip_transformation_props(
                    technology,
                    legacy_strings=props_def.legacy_strings,
                    interface_version=props_def.interface_version,
                    size_of_array_length=props_def.size_of_array_length,
                )
            else:
                target.create_e2e_transformation_props(
                    technology,
                    data_ids=props_def.data_ids,
                    data_length=props_def.data_length,
                    max_data_length=props_def.max_data_length,
                    min_data_length=props_def.min_data_length,
                )

    def _process_pdus(self, doc: NetworkDescription, model: CommunicationModel) -> None:
        for pdu_name, pdu_def in doc.pdus.items():
            path = f"pdus.{pdu_name}"
            with _at(path):
                model.create_pdu(pdu_name, pdu_def.kind, pdu_def.length)

            for group_name in pdu_def.signal_groups:
                with _at(f"{path}.signal_groups.{group_name}"):
                    model.map_signal_group_into_pdu(pdu_name, group_name)

            for index, mapping in enumerate(pdu_def.signals):
                with _at(f"{path}.signals.{index}"):
                    model.map_signal_into_pdu(
                        pdu_name,
                        mapping.signal,
                        mapping.start_position,
                        mapping.byte_order,
                        update_bit=mapping.update_bit,
                        transfer_property=mapping.transfer_property,
                    )

    def _process_frames(self, doc: NetworkDescription, model: CommunicationModel) -> None:
        for frame_name, frame_def in doc.frames.items():
            path = f"frames.{frame_name}"
            with _at(path):
                model.create_frame(frame_name, frame_def.kind, frame_def.length)

            for index, mapping in enumerate(frame_def.pdus):
                with _at(f"{path}.pdus.{index}"):
                    model.map_pdu_into_frame(
                        frame_name,
                        mapping.pdu,
                        mapping.start_position,
                        mapping.byte_order,
                        update_bit=mapping.update_bit,
                    )

    def _process_triggerings(self, doc: NetworkDescription, model: CommunicationModel) -> None:
        for index, triggering_def in enumerate(doc.triggerings):
            path = f"triggerings.{index}"
            with _at(path):
                triggering = self._create_triggering(model, triggering_def)

            for port_index, port_def in enumerate(triggering_def.ports):
                with _at(f"{path}.ports.{port_index}"):
                    model.connect_triggering_to_ecu(triggering, port_def.ecu, port_def.direction)

    @staticmethod
    def _create_triggering(
        model: CommunicationModel, triggering_def: TriggeringDescription
    ) -> Triggering:
        if triggering_def.pdu is not None:
            return model.trigger_pdu(triggering_def.channel, triggering_def.pdu)

        if triggering_def.can is not None:
            return model.trigger_can_frame(
                triggering_def.channel,
                triggering_def.frame,  # type: ignore[arg-type]
                triggering_def.can.identifier,
                addressing_mode=triggering_def.can.addressing_mode,
                frame_type=triggering_def.can.frame_type,
            )

        flexray = triggering_def.flexray
        assert flexray is not None  # guaranteed by TriggeringDescription
        if flexray.cycle_counter is not None:
            cycle = CycleCounterTiming(flexray.cycle_counter)
        else:
            cycle = CycleRepetitionTiming(flexray.base_cycle, flexray.repetition)  # type: ignore[arg-type]
        return model.trigger_flexray_frame(
            triggering_def.channel,
            triggering_def.frame,  # type: ignore[arg-type]
            flexray.slot_id,
            cycle,
        )


def _technology_config(tech_def: TechnologyDescription) -> TransformationTechnologyConfig:
    if tech_def.generic is not None:
        return GenericTransformationConfig(**tech_def.generic.model_dump())
    if tech_def.com is not None:
        return ComTransformationConfig(**tech_def.com.model_dump())
    if tech_def.e2e is not None:
        return E2ETransformationConfig(**tech_def.e2e.model_dump())
    assert tech_def.someip is not None
    return SomeIpTransformationConfig(**tech_def.someip.model_dump())


def _split_reference(reference: str, what: str) -> tuple[str, str]:
    set_name, sep, name = reference.partition("/")
    if not sep or not name:
        raise InvalidParameterError(f"{what} reference '{reference}' must be <set>/<name>")
    return set_name, name


def _find_transformation(model: CommunicationModel, reference: str) -> DataTransformation:
    set_name, name = _split_reference(reference, "Data transformation")
    transformation_set = model.get_transformation_set(set_name)
    try:
        return transformation_set.transformations[name]
    except KeyError:
        raise InvalidParameterError(f"Unknown data transformation '{reference}'") from None


def _find_technology(model: CommunicationModel, reference: str) -> TransformationTechnology:
    set_name, name = _split_reference(reference, "Transformation technology")
    transformation_set = model.get_transformation_set(set_name)
    try:
        return transformation_set.technologies[name]
    except KeyError:
        raise InvalidParameterError(f"Unknown transformation technology '{reference}'") from None
