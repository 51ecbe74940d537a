"""Tests for loading network description files."""

from pathlib import Path
from textwrap import dedent

import pytest
from com_graph.description import (
    BuildError,
    LoaderError,
    load_network,
    load_network_description,
    load_yaml_file,
    validate_network_description,
)
from pydantic import ValidationError


class TestLoadYamlFile:
    """Tests for load_yaml_file function."""

    def test_load_valid_yaml(self, tmp_path: Path) -> None:
        """Should load valid YAML file."""
        yaml_file = tmp_path / "network.yml"
        yaml_file.write_text("schema: com-graph.network/v1\nframes: {}")

        assert load_yaml_file(yaml_file) == {"schema": "com-graph.network/v1", "frames": {}}

    def test_load_valid_json(self, tmp_path: Path) -> None:
        """Should load valid JSON file."""
        json_file = tmp_path / "network.json"
        json_file.write_text('{"schema": "com-graph.network/v1"}')

        assert load_yaml_file(json_file) == {"schema": "com-graph.network/v1"}

    def test_file_not_found(self, tmp_path: Path) -> None:
        """Should raise LoaderError for missing file."""
        with pytest.raises(LoaderError, match="File not found"):
            load_yaml_file(tmp_path / "nonexistent.yaml")

    def test_directory(self, tmp_path: Path) -> None:
        """Should raise LoaderError for directories."""
        with pytest.raises(LoaderError, match="Not a file"):
            load_yaml_file(tmp_path)

    def test_unsupported_extension(self, tmp_path: Path) -> None:
        """Should raise LoaderError for unsupported extension."""
        arxml_file = tmp_path / "network.arxml"
        arxml_file.write_text("<AUTOSAR/>")

        with pytest.raises(LoaderError, match="Unsupported file extension"):
            load_yaml_file(arxml_file)

    def test_empty_file(self, tmp_path: Path) -> None:
        """Should raise LoaderError for empty file."""
        empty_file = tmp_path / "empty.yaml"
        empty_file.write_text("")

        with pytest.raises(LoaderError, match="File is empty"):
            load_yaml_file(empty_file)

    def test_invalid_yaml_syntax(self, tmp_path: Path) -> None:
        """Should raise LoaderError for invalid YAML."""
        invalid_file = tmp_path / "invalid.yaml"
        invalid_file.write_text("clusters: [unclosed bracket")

        with pytest.raises(LoaderError, match="YAML parsing error"):
            load_yaml_file(invalid_file)

    def test_non_dict_root(self, tmp_path: Path) -> None:
        """Should raise LoaderError for a list at root level."""
        list_file = tmp_path / "list.yaml"
        list_file.write_text("- a\n- b\n")

        with pytest.raises(LoaderError, match="got list"):
            load_yaml_file(list_file)

    def test_error_carries_path(self, tmp_path: Path) -> None:
        """Should keep the offending path on the error."""
        missing = tmp_path / "missing.yaml"
        with pytest.raises(LoaderError) as exc_info:
            load_yaml_file(missing)
        assert exc_info.value.path == missing


class TestLoadNetwork:
    """Tests for load_network_description and load_network."""

    def test_load_description(self, valid_yaml_file: Path) -> None:
        """Should return the validated description."""
        doc = load_network_description(valid_yaml_file)
        assert list(doc.frames) == ["EngineFrame"]

    def test_schema_error(self, tmp_path: Path) -> None:
        """Should raise pydantic's ValidationError for invalid content."""
        path = tmp_path / "network.yaml"
        path.write_text("schema: com-graph.network/v1\nframes:\n  F:\n    kind: lin\n    length: 8\n")

        with pytest.raises(ValidationError):
            load_network_description(path)

    def test_load_network(self, valid_yaml_file: Path) -> None:
        """Should build the communication model."""
        model = load_network(valid_yaml_file)
        assert "PowertrainCan/PowertrainChannel/FT_EngineFrame" in model.frame_triggerings

    def test_load_network_build_error(self, tmp_path: Path, valid_yaml_content: str) -> None:
        """Should raise BuildError for rule violations."""
        path = tmp_path / "network.yaml"
        path.write_text(valid_yaml_content.replace("length: 8\n    pdus:", "length: 4\n    pdus:"))

        with pytest.raises(BuildError, match="frames.EngineFrame.pdus.0"):
            load_network(path)


class TestValidateNetworkDescription:
    """Tests for validate_network_description function."""

    def test_valid_file(self, valid_yaml_file: Path) -> None:
        """Should return empty list for valid file."""
        assert validate_network_description(valid_yaml_file) == []

    def test_missing_file(self, tmp_path: Path) -> None:
        """Should return the loader error."""
        errors = validate_network_description(tmp_path / "missing.yaml")
        assert len(errors) == 1
        assert "File not found" in errors[0]

    def test_schema_errors(self, tmp_path: Path) -> None:
        """Should return one message per schema error with its location."""
        path = tmp_path / "network.yaml"
        path.write_text(
            dedent(
                """\
                schema: com-graph.network/v1
                signals:
                  Speed:
                    length: 0
                pdus:
                  Data:
                    length: -1
                """
            )
        )

        errors = validate_network_description(path)
        assert len(errors) == 2
        assert errors[0].startswith("signals.Speed.length: ")
        assert errors[1].startswith("pdus.Data.length: ")

    def test_build_error(self, tmp_path: Path, valid_yaml_content: str) -> None:
        """Should return the build error with its location."""
        path = tmp_path / "network.yaml"
        path.write_text(valid_yaml_content.replace("start_position: 32", "start_position: 20"))

        errors = validate_network_description(path)
        assert len(errors) == 1
        assert errors[0].startswith("pdus.EngineData.signals.3: Signal 'Crc' at bit 20 overlaps")
