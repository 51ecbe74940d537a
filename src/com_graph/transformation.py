"""Data transformation sets, transformation technologies and chains.

A data transformation set owns named transformation technologies (COM,
SOME/IP, E2E or generic transformers) and data transformations, which are
ordered chains of technologies from the same set. Signals and signal groups
reference data transformations and carry per-technology properties.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Union

from com_graph.errors import (
    ChainOrderError,
    CrossSetReferenceError,
    EmptyChainError,
    InvalidParameterError,
    ItemAlreadyExistsError,
    MissingUnavailabilityFlagError,
)

if TYPE_CHECKING:
    from com_graph.model.enums import ByteOrder

logger = logging.getLogger(__name__)

E2E_PROTOCOL = "E2E"
SOMEIP_PROTOCOL = "SOMEIP"
COM_PROTOCOL = "COMBased"


class TransformerClass(str, Enum):
    """Class of a transformation technology."""

    SERIALIZER = "serializer"
    SAFETY = "safety"
    SECURITY = "security"
    CUSTOM = "custom"


class E2EProfile(str, Enum):
    """End-to-end protection profile."""

    P01 = "P01"
    P02 = "P02"
    P04 = "P04"
    P04M = "P04m"
    P05 = "P05"
    P06 = "P06"
    P07 = "P07"
    P07M = "P07m"
    P08 = "P08"
    P08M = "P08m"
    P11 = "P11"
    P22 = "P22"
    P44 = "P44"
    P44M = "P44m"


# Header length in bits added by each E2E profile
E2E_HEADER_LENGTHS: dict[E2EProfile, int] = {
    E2EProfile.P01: 16,
    E2EProfile.P02: 16,
    E2EProfile.P04: 96,
    E2EProfile.P04M: 128,
    E2EProfile.P05: 24,
    E2EProfile.P06: 40,
    E2EProfile.P07: 160,
    E2EProfile.P07M: 192,
    E2EProfile.P08: 128,
    E2EProfile.P08M: 160,
    E2EProfile.P11: 16,
    E2EProfile.P22: 16,
    E2EProfile.P44: 96,
    E2EProfile.P44M: 128,
}


class E2EProfileBehavior(str, Enum):
    """Behavior of the E2E check functionality."""

    PRE_R4_2 = "pre-r4-2"
    R4_2 = "r4-2"


class DataIdMode(str, Enum):
    """How the data id is included in the CRC of profiles 01 and 11."""

    ALL_16_BIT = "all-16-bit"
    ALTERNATING_8_BIT = "alternating-8-bit"
    LOWER_12_BIT = "lower-12-bit"
    LOWER_8_BIT = "lower-8-bit"


@dataclass(frozen=True)
class TechnologySettings:
    """Protocol attributes derived from a technology configuration."""

    protocol: str
    version: str
    transformer_class: TransformerClass
    header_length: int
    in_place: bool


@dataclass(frozen=True)
class GenericTransformationConfig:
    """Configuration of a user defined transformer."""

    protocol_name: str
    protocol_version: str
    header_length: int
    in_place: bool

    def validate(self) -> None:
        """Generic configurations are accepted as given."""

    def settings(self) -> TechnologySettings:
        """Get the protocol attributes of this configuration."""
        return TechnologySettings(
            protocol=self.protocol_name,
            version=self.protocol_version,
            transformer_class=TransformerClass.CUSTOM,
            header_length=self.header_length,
            in_place=self.in_place,
        )


@dataclass(frozen=True)
class ComTransformationConfig:
    """Configuration of a COM based serializer."""

    isignal_ipdu_length: int

    def validate(self) -> None:
        """COM configurations are accepted as given."""

    def settings(self) -> TechnologySettings:
        """Get the protocol attributes of this configuration."""
        return TechnologySettings(
            protocol=COM_PROTOCOL,
            version="1",
            transformer_class=TransformerClass.SERIALIZER,
            header_length=0,
            in_place=False,
        )


@dataclass(frozen=True)
class E2ETransformationConfig:
    """Configuration of an E2E protection transformer.

    When E2E follows a COM serializer, ``zero_header_length`` should be set
    and the signal group layout must provide space for the E2E data. The
    ``offset`` is the bit offset of the E2E data: 0 after COM, 64 after
    SOME/IP.
    """

    profile: E2EProfile
    zero_header_length: bool = False
    transform_in_place: bool = True
    offset: int = 0
    max_delta_counter: int = 1
    max_error_state_init: int = 0
    max_error_state_invalid: int = 0
    max_error_state_valid: int = 0
    max_no_new_or_repeated_data: int = 0
    min_ok_state_init: int = 1
    min_ok_state_invalid: int = 1
    min_ok_state_valid: int = 1
    window_size: int = 1
    window_size_init: int | None = None
    window_size_invalid: int | None = None
    window_size_valid: int | None = None
    profile_behavior: E2EProfileBehavior | None = None
    sync_counter_init: int | None = None
    data_id_mode: DataIdMode | None = None
    data_id_nibble_offset: int | None = None
    crc_offset: int | None = None
    counter_offset: int | None = None

    def validate(self) -> None:
        """Check the parameters required by profiles 01 and 11.

        Raises:
        ------
            InvalidParameterError: If a required parameter is missing.

        """
        if self.profile not in (E2EProfile.P01, E2EProfile.P11):
            return

        missing = [
            name
            for name in ("data_id_mode", "counter_offset", "crc_offset")
            if getattr(self, name) is None
        ]
        if self.data_id_mode == DataIdMode.LOWER_12_BIT and self.data_id_nibble_offset is None:
            missing.append("data_id_nibble_offset")
        if missing:
            raise InvalidParameterError(
                f"E2E profile {self.profile.value} requires: {', '.join(missing)}"
            )

    def settings(self) -> TechnologySettings:
        """Get the protocol attributes of this configuration."""
        header_length = 0 if self.zero_header_length else E2E_HEADER_LENGTHS[self.profile]
        return TechnologySettings(
            protocol=E2E_PROTOCOL,
            version="1.0.0",
            transformer_class=TransformerClass.SAFETY,
            header_length=header_length,
            in_place=self.transform_in_place,
        )


@dataclass(frozen=True)
class SomeIpTransformationConfig:
    """Configuration of a SOME/IP serializer."""

    alignment: int
    byte_order: ByteOrder
    interface_version: int

    def validate(self) -> None:
        """SOME/IP configurations are accepted as given."""

    def settings(self) -> TechnologySettings:
        """Get the protocol attributes of this configuration."""
        return TechnologySettings(
            protocol=SOMEIP_PROTOCOL,
            version="1.0.0",
            transformer_class=TransformerClass.SERIALIZER,
            header_length=64,
            in_place=False,
        )


TransformationTechnologyConfig = Union[
    GenericTransformationConfig,
    ComTransformationConfig,
    E2ETransformationConfig,
    SomeIpTransformationConfig,
]


@dataclass
class TransformationTechnology:
    """A named transformation step owned by a data transformation set."""

    name: str
    transformation_set: str
    config: TransformationTechnologyConfig
    settings: TechnologySettings

    @property
    def path(self) -> str:
        """Identifier of the technology (``<set>/<name>``)."""
        return f"{self.transformation_set}/{self.name}"

    @property
    def protocol(self) -> str:
        """Protocol name of the technology."""
        return self.settings.protocol

    @property
    def transformer_class(self) -> TransformerClass:
        """Transformer class of the technology."""
        return self.settings.transformer_class


@dataclass
class DataTransformation:
    """An ordered chain of transformation technologies."""

    name: str
    transformation_set: str
    technologies: tuple[str, ...]
    execute_despite_data_unavailability: bool

    @property
    def path(self) -> str:
        """Identifier of the transformation (``<set>/<name>``)."""
        return f"{self.transformation_set}/{self.name}"


def validate_transformation_chain(
    transformation_set: DataTransformationSet,
    technologies: Sequence[TransformationTechnology],
    execute_despite_data_unavailability: bool,
) -> None:
    """Check a chain of technologies before a data transformation is created.

    Args:
    ----
        transformation_set: Set that will own the data transformation.
        technologies: Technologies of the chain, in execution order.
        execute_despite_data_unavailability: Flag requested for the chain.

    Raises:
    ------
        EmptyChainError: If the chain has no technology.
        ChainOrderError: If a serializer appears after the first position.
        CrossSetReferenceError: If a technology belongs to another set.
        MissingUnavailabilityFlagError: If an E2E step is present but the flag is not set.

    """
    if not technologies:
        raise EmptyChainError("A data transformation requires at least one technology")

    for index, technology in enumerate(technologies):
        if transformation_set.technologies.get(technology.name) is not technology:
            raise CrossSetReferenceError(
                f"Technology '{technology.path}' is not part of "
                f"transformation set '{transformation_set.name}'"
            )
        if index > 0 and technology.transformer_class == TransformerClass.SERIALIZER:
            raise ChainOrderError(
                f"Serializer '{technology.name}' must be the first technology of the chain"
            )

    if not execute_despite_data_unavailability and any(
        technology.protocol == E2E_PROTOCOL for technology in technologies
    ):
        raise MissingUnavailabilityFlagError(
            "Chains containing an E2E transformer require execute_despite_data_unavailability"
        )


@dataclass
class DataTransformationSet:
    """Container of transformation technologies and data transformations."""

    name: str
    technologies: dict[str, TransformationTechnology] = field(default_factory=dict)
    transformations: dict[str, DataTransformation] = field(default_factory=dict)

    def create_transformation_technology(
        self,
        name: str,
        config: TransformationTechnologyConfig,
    ) -> TransformationTechnology:
        """Create a transformation technology in this set.

        Args:
        ----
            name: Name of the technology, unique within the set.
            config: Protocol configuration of the technology.

        Returns:
        -------
            The new technology.

        Raises:
        ------
            ItemAlreadyExistsError: If the name is already used.
            InvalidParameterError: If the configuration is incomplete.

        """
        if name in self.technologies:
            raise ItemAlreadyExistsError(
                f"Transformation technology '{name}' already exists in set '{self.name}'"
            )
        config.validate()

        technology = TransformationTechnology(
            name=name,
            transformation_set=self.name,
            config=config,
            settings=config.settings(),
        )
        self.technologies[name] = technology
        logger.debug("Created transformation technology %s (%s)", technology.path, technology.protocol)
        return technology

    def create_data_transformation(
        self,
        name: str,
        technologies: Sequence[TransformationTechnology | str],
        execute_despite_data_unavailability: bool,
    ) -> DataTransformation:
        """Create a data transformation from a chain of technologies.

        Args:
        ----
            name: Name of the data transformation, unique within the set.
            technologies: Technologies in execution order. Names are resolved within this set.
            execute_despite_data_unavailability: Whether the chain runs when data is unavailable.

        Returns:
        -------
            The new data transformation.

        Raises:
        ------
            ItemAlreadyExistsError: If the name is already used.
            InvalidParameterError: If the chain violates one of the chain rules.

        """
        if name in self.transformations:
            raise ItemAlreadyExistsError(
                f"Data transformation '{name}' already exists in set '{self.name}'"
            )

        resolved = [self._resolve_technology(technology) for technology in technologies]
        validate_transformation_chain(self, resolved, execute_despite_data_unavailability)

        transformation = DataTransformation(
            name=name,
            transformation_set=self.name,
            technologies=tuple(technology.path for technology in resolved),
            execute_despite_data_unavailability=execute_despite_data_unavailability,
        )
        self.transformations[name] = transformation
        logger.debug(
            "Created data transformation %s with chain %s",
            transformation.path,
            ", ".join(transformation.technologies),
        )
        return transformation

    def chain_of(self, transformation: DataTransformation) -> list[TransformationTechnology]:
        """Get the technologies of a data transformation of this set, in order."""
        return [self.technologies[path.rsplit("/", 1)[1]] for path in transformation.technologies]

    def _resolve_technology(
        self,
        technology: TransformationTechnology | str,
    ) -> TransformationTechnology:
        if isinstance(technology, TransformationTechnology):
            return technology
        try:
            return self.technologies[technology]
        except KeyError:
            raise CrossSetReferenceError(
                f"Technology '{technology}' is not part of transformation set '{self.name}'"
            ) from None


@dataclass(frozen=True)
class E2ETransformationProps:
    """E2E settings of a signal or signal group for one E2E technology."""

    technology: str
    data_ids: tuple[int, ...] = ()
    data_length: int | None = None
    max_data_length: int | None = None
    min_data_length: int | None = None


@dataclass(frozen=True)
class SomeIpTransformationProps:
    """SOME/IP settings of a signal or signal group for one SOME/IP technology."""

    technology: str
    legacy_strings: bool | None = None
    interface_version: int | None = None
    size_of_array_length: int | None = None


TransformationProps = Union[E2ETransformationProps, SomeIpTransformationProps]


class TransformationTarget:
    """Data transformation references shared by signals and signal groups.

    Classes using this mixin provide ``name``, ``data_transformations`` and
    ``transformation_props`` attributes.
    """

    name: str
    data_transformations: list[str]
    transformation_props: list[TransformationProps]

    def add_data_transformation(self, transformation: DataTransformation) -> None:
        """Reference a data transformation.

        Args:
        ----
            transformation: The data transformation to apply to this element.

        """
        if transformation.path not in self.data_transformations:
            self.data_transformations.append(transformation.path)

    def create_e2e_transformation_props(
        self,
        technology: TransformationTechnology,
        data_ids: Sequence[int] = (),
        data_length: int | None = None,
        max_data_length: int | None = None,
        min_data_length: int | None = None,
    ) -> E2ETransformationProps:
        """Attach E2E properties for an E2E technology.

        Raises:
        ------
            InvalidParameterError: If the technology is not an E2E transformer.

        """
        if technology.protocol != E2E_PROTOCOL:
            raise InvalidParameterError(
                f"Technology '{technology.path}' is not an E2E transformer"
            )
        props = E2ETransformationProps(
            technology=technology.path,
            data_ids=tuple(data_ids),
            data_length=data_length,
            max_data_length=max_data_length,
            min_data_length=min_data_length,
        )
        self.transformation_props.append(props)
        return props

    def create_someip_transformation_props(
        self,
        technology: TransformationTechnology,
        legacy_strings: bool | None = None,
        interface_version: int | None = None,
        size_of_array_length: int | None = None,
    ) -> SomeIpTransformationProps:
        """Attach SOME/IP properties for a SOME/IP technology.

        Raises:
        ------
            InvalidParameterError: If the technology is not a SOME/IP transformer.

        """
        if technology.protocol != SOMEIP_PROTOCOL:
            raise InvalidParameterError(
                f"Technology '{technology.path}' is not a SOME/IP transformer"
            )
        props = SomeIpTransformationProps(
            technology=technology.path,
            legacy_strings=legacy_strings,
            interface_version=interface_version,
            size_of_array_length=size_of_array_length,
        )
        self.transformation_props.append(props)
        return props
