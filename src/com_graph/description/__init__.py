"""Network description files for com-graph.

A network description is a YAML or JSON document listing clusters, ECUs,
transformation sets, signals, PDUs, frames and triggerings. It is validated
with Pydantic models and then built into a ``CommunicationModel``, which
applies the layout, propagation and transformation rules.

Primary Entry Points:
    load_network(path): Load a file and build its communication model
    load_network_description(path): Load and validate a file
    validate_network_description(path): Validate and return list of errors
    NetworkBuilder: Build a model from a NetworkDescription

Example:
-------
    >>> from com_graph.description import load_network
    >>> model = load_network(Path("vehicle.yaml"))
    >>> print(f"Frame triggerings: {len(model.frame_triggerings)}")

"""

from com_graph.description.builder import BuildError, NetworkBuilder
from com_graph.description.loader import (
    LoaderError,
    load_network,
    load_network_description,
    load_yaml_file,
    validate_network_description,
)
from com_graph.description.models import SCHEMA_VERSION, NetworkDescription

__all__ = [
    "SCHEMA_VERSION",
    "BuildError",
    "LoaderError",
    "NetworkBuilder",
    "NetworkDescription",
    "load_network",
    "load_network_description",
    "load_yaml_file",
    "validate_network_description",
]
