"""Validators auditing the consistency of a communication model."""

from __future__ import annotations

from typing import TYPE_CHECKING

from com_graph.layout import BitLayoutValidator, is_pdu_start_aligned
from com_graph.model.entities import FrameTriggering, PduTriggering, SignalTriggering
from com_graph.validation.base import BaseValidator
from com_graph.validation.errors import ErrorCodes, ValidationResult

if TYPE_CHECKING:
    from com_graph.model.graph import CommunicationModel


class FrameLayoutValidator(BaseValidator):
    """Validates the placement of PDUs inside frames."""

    name = "frame-layout"
    codes = frozenset({ErrorCodes.E400_LAYOUT_OVERLAP, ErrorCodes.E401_INVALID_PDU_PLACEMENT})

    def validate(
        self,
        model: CommunicationModel,
        result: ValidationResult,
    ) -> None:
        """Check alignment, byte order and overlap of every frame's PDUs."""
        for frame in model.frames.values():
            if not frame.mappings:
                continue

            byte_order = frame.mappings[0].byte_order
            bitmap = BitLayoutValidator(frame.length)

            for mapping in frame.mappings:
                path = f"frames.{frame.name}.mappings.{mapping.name}"

                if not is_pdu_start_aligned(mapping.start_position, mapping.byte_order):
                    result.add_error(
                        code=ErrorCodes.E401_INVALID_PDU_PLACEMENT,
                        message=(
                            f"PDU '{mapping.pdu}' starts at bit {mapping.start_position}, "
                            f"which is not byte aligned for {mapping.byte_order.value}"
                        ),
                        path=path,
                        suggestion="Big-endian PDUs start at bit 7 of a byte, little-endian at bit 0",
                    )
                if mapping.byte_order != byte_order:
                    result.add_error(
                        code=ErrorCodes.E401_INVALID_PDU_PLACEMENT,
                        message=(
                            f"PDU '{mapping.pdu}' uses {mapping.byte_order.value}, other PDUs "
                            f"of frame '{frame.name}' use {byte_order.value}"
                        ),
                        path=path,
                        suggestion="All PDUs of a frame must use the same byte order",
                    )

                fits = bitmap.add_placement(
                    mapping.start_position,
                    model.pdus[mapping.pdu].length * 8,
                    mapping.byte_order,
                    mapping.update_bit,
                )
                if not fits:
                    result.add_error(
                        code=ErrorCodes.E400_LAYOUT_OVERLAP,
                        message=(
                            f"PDU '{mapping.pdu}' overlaps another PDU or exceeds the "
                            f"{frame.length} byte frame '{frame.name}'"
                        ),
                        path=path,
                        coverage=bitmap.coverage.hex(" "),
                    )


class PduLayoutValidator(BaseValidator):
    """Validates the placement of signals inside PDUs."""

    name = "pdu-layout"
    codes = frozenset({ErrorCodes.E400_LAYOUT_OVERLAP})

    def validate(
        self,
        model: CommunicationModel,
        result: ValidationResult,
    ) -> None:
        """Check that the signals of every PDU fit and do not overlap."""
        for pdu in model.pdus.values():
            bitmap = BitLayoutValidator(pdu.length)

            for mapping in pdu.mappings:
                if mapping.signal is None or mapping.start_position is None:
                    continue

                fits = bitmap.add_placement(
                    mapping.start_position,
                    model.signals[mapping.signal].length,
                    mapping.byte_order,  # type: ignore[arg-type]
                    mapping.update_bit,
                )
                if not fits:
                    result.add_error(
                        code=ErrorCodes.E400_LAYOUT_OVERLAP,
                        message=(
                            f"Signal '{mapping.signal}' overlaps another signal or exceeds "
                            f"the {pdu.length} byte PDU '{pdu.name}'"
                        ),
                        path=f"pdus.{pdu.name}.mappings.{mapping.name}",
                        coverage=bitmap.coverage.hex(" "),
                    )


class SignalGroupMappingValidator(BaseValidator):
    """Validates that grouped signals are only mapped together with their group."""

    name = "signal-groups"
    codes = frozenset({ErrorCodes.E402_GROUP_NOT_MAPPED})

    def validate(
        self,
        model: CommunicationModel,
        result: ValidationResult,
    ) -> None:
        """Check that the group of every mapped grouped signal is mapped too."""
        for pdu in model.pdus.values():
            for mapping in pdu.mappings:
                if mapping.signal is None:
                    continue
                group = model.signals[mapping.signal].signal_group
                if group is not None and pdu.group_mapping(group) is None:
                    result.add_error(
                        code=ErrorCodes.E402_GROUP_NOT_MAPPED,
                        message=(
                            f"Signal '{mapping.signal}' is mapped into PDU '{pdu.name}' "
                            f"without its signal group '{group}'"
                        ),
                        path=f"pdus.{pdu.name}.mappings.{mapping.name}",
                        suggestion=f"Map signal group '{group}' into the PDU first",
                    )


class TriggeringCoverageValidator(BaseValidator):
    """Validates that every mapped PDU and signal is triggered wherever its container is."""

    name = "triggering-coverage"
    codes = frozenset({ErrorCodes.E500_MISSING_TRIGGERING})

    def validate(
        self,
        model: CommunicationModel,
        result: ValidationResult,
    ) -> None:
        """Check PDU triggerings of frame triggerings and signal triggerings of PDU triggerings."""
        for frame_triggering in model.frame_triggerings.values():
            triggered = {
                model.pdu_triggerings[path].pdu for path in frame_triggering.pdu_triggerings
            }
            for pdu_name in model.frames[frame_triggering.frame].mapped_pdus():
                if pdu_name not in triggered:
                    result.add_error(
                        code=ErrorCodes.E500_MISSING_TRIGGERING,
                        message=(
                            f"Frame triggering '{frame_triggering.path}' has no PDU "
                            f"triggering for PDU '{pdu_name}'"
                        ),
                        path=f"frame_triggerings.{frame_triggering.path}",
                    )

        for pdu_triggering in model.pdu_triggerings.values():
            triggered = {
                model.signal_triggerings[path].target
                for path in pdu_triggering.signal_triggerings
            }
            for mapping in model.pdus[pdu_triggering.pdu].mappings:
                if mapping.target not in triggered:
                    result.add_error(
                        code=ErrorCodes.E500_MISSING_TRIGGERING,
                        message=(
                            f"PDU triggering '{pdu_triggering.path}' has no signal "
                            f"triggering for '{mapping.target}'"
                        ),
                        path=f"pdu_triggerings.{pdu_triggering.path}",
                    )


class PortCoverageValidator(BaseValidator):
    """Validates that ports of frame and PDU triggerings are replicated below them."""

    name = "port-coverage"
    codes = frozenset({ErrorCodes.E501_MISSING_PORT})

    def validate(
        self,
        model: CommunicationModel,
        result: ValidationResult,
    ) -> None:
        """Check that every lower triggering has the ports of the triggering above it."""
        for frame_triggering in model.frame_triggerings.values():
            self._check_children(
                model,
                frame_triggering,
                [model.pdu_triggerings[path] for path in frame_triggering.pdu_triggerings],
                result,
            )
        for pdu_triggering in model.pdu_triggerings.values():
            self._check_children(
                model,
                pdu_triggering,
                [model.signal_triggerings[path] for path in pdu_triggering.signal_triggerings],
                result,
            )

    @staticmethod
    def _check_children(
        model: CommunicationModel,
        parent: FrameTriggering | PduTriggering,
        children: list[PduTriggering] | list[SignalTriggering],
        result: ValidationResult,
    ) -> None:
        for port_path in parent.ports:
            port = model.ports[port_path]
            for child in children:
                has_port = any(
                    model.ports[path].ecu == port.ecu
                    and model.ports[path].direction == port.direction
                    for path in child.ports
                )
                if not has_port:
                    result.add_error(
                        code=ErrorCodes.E501_MISSING_PORT,
                        message=(
                            f"'{child.path}' has no {port.direction.value} port for ECU "
                            f"'{port.ecu}' although '{parent.path}' has one"
                        ),
                        path=f"ports.{child.path}",
                    )


class UnusedElementValidator(BaseValidator):
    """Warns about PDUs and signals that are never transmitted."""

    name = "unused-elements"
    codes = frozenset({ErrorCodes.W100_UNUSED_PDU, ErrorCodes.W101_UNUSED_SIGNAL})

    def validate(
        self,
        model: CommunicationModel,
        result: ValidationResult,
    ) -> None:
        """Check for PDUs outside any frame or triggering and for unmapped signals."""
        for pdu in model.pdus.values():
            if not pdu.frames and not pdu.pdu_triggerings:
                result.add_warning(
                    code=ErrorCodes.W100_UNUSED_PDU,
                    message=f"PDU '{pdu.name}' is neither mapped into a frame nor triggered",
                    path=f"pdus.{pdu.name}",
                    suggestion="Map the PDU into a frame or remove it",
                )

        for signal in model.signals.values():
            if not signal.pdus:
                result.add_warning(
                    code=ErrorCodes.W101_UNUSED_SIGNAL,
                    message=f"Signal '{signal.name}' is not mapped into any PDU",
                    path=f"signals.{signal.name}",
                    suggestion="Map the signal into a PDU or remove it",
                )
