"""YAML/JSON file loading utilities."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import ValidationError

from com_graph.description.builder import BuildError, NetworkBuilder
from com_graph.description.models import NetworkDescription

if TYPE_CHECKING:
    from com_graph.model.graph import CommunicationModel


class LoaderError(Exception):
    """Error during YAML/JSON file loading."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        """Initialize LoaderError.

        Args:
        ----
            message: Error message describing what went wrong.
            path: Optional path to the file that caused the error.

        """
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML or JSON file and return the raw dictionary.

    Args:
    ----
        path: Path to the YAML or JSON file.

    Returns:
    -------
        Parsed dictionary from the file.

    Raises:
    ------
        LoaderError: If the file cannot be loaded or parsed.

    """
    if not path.exists():
        raise LoaderError(f"File not found: {path}", path)

    if not path.is_file():
        raise LoaderError(f"Not a file: {path}", path)

    suffix = path.suffix.lower()
    if suffix not in {".yaml", ".yml", ".json"}:
        raise LoaderError(
            f"Unsupported file extension: {suffix}. Use .yaml, .yml, or .json",
            path,
        )

    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise LoaderError(f"YAML parsing error: {e}", path) from e
    except OSError as e:
        raise LoaderError(f"File read error: {e}", path) from e

    if data is None:
        raise LoaderError("File is empty", path)

    if not isinstance(data, dict):
        raise LoaderError(
            f"Expected dictionary at root level, got {type(data).__name__}",
            path,
        )

    return data


def load_network_description(path: Path) -> NetworkDescription:
    """Load and validate a network description from a YAML/JSON file.

    Args:
    ----
        path: Path to the network description file.

    Returns:
    -------
        Validated NetworkDescription model instance.

    Raises:
    ------
        LoaderError: If the file cannot be loaded.
        ValidationError: If the file content is invalid.

    """
    data = load_yaml_file(path)
    return NetworkDescription.model_validate(data)


def load_network(path: Path) -> CommunicationModel:
    """Load a network description file and build its communication model.

    Raises
    ------
        LoaderError: If the file cannot be loaded.
        ValidationError: If the file content is invalid.
        BuildError: If the description violates a rule of the model.

    """
    return NetworkBuilder().build(load_network_description(path))


def validate_network_description(path: Path) -> list[str]:
    """Validate a network description file and return list of errors.

    This is a non-throwing version of load_network, useful for validation
    CLI commands. Besides the schema, the description is built into a model
    so that rule violations (overlaps, invalid chains, ...) are reported too.

    Args:
    ----
        path: Path to the network description file.

    Returns:
    -------
        List of error messages (empty if valid).

    """
    try:
        data = load_yaml_file(path)
    except LoaderError as e:
        return [str(e)]

    try:
        description = NetworkDescription.model_validate(data)
    except ValidationError as e:
        errors: list[str] = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            errors.append(f"{loc}: {error['msg']}")
        return errors

    try:
        NetworkBuilder().build(description)
    except BuildError as e:
        return [str(e)]

    return []
