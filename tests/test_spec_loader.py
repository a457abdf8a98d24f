"""Tests for declaration file loading."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from provisioner.registry import ResourceKindRegistry
from provisioner.spec_loader import SpecLoadError, load_declarations, parse_declarations

VALID_DOCUMENT = """
resources:
  - kind: nomad_cluster
    name: primary
    attributes:
      name: test-nomad-cluster
      region: eu-west-1
      server_count: 3
      client_count: 5
      tags:
        env: test
  - kind: vault_cluster
    name: secrets
    attributes:
      name: test-vault
      region: eu-west-1
      node_count: 3
      storage_type: raft
"""


class TestLoadDeclarations:
    """Tests for load_declarations."""

    def test_valid_file(self, tmp_path: Path, registry: ResourceKindRegistry) -> None:
        """A valid file yields declared resources in order."""
        path = tmp_path / "resources.yaml"
        path.write_text(VALID_DOCUMENT)

        declared = load_declarations(path, registry)

        assert [d.address for d in declared] == ["nomad_cluster.primary", "vault_cluster.secrets"]
        assert declared[0].spec["server_count"] == 3
        assert declared[0].spec["tags"] == {"env": "test"}
        assert declared[1].spec["storage_type"] == "raft"

    def test_missing_file(self, tmp_path: Path, registry: ResourceKindRegistry) -> None:
        """A missing file is reported."""
        with pytest.raises(SpecLoadError, match="not found"):
            load_declarations(tmp_path / "missing.yaml", registry)

    def test_invalid_yaml(self, tmp_path: Path, registry: ResourceKindRegistry) -> None:
        """Malformed YAML is reported."""
        path = tmp_path / "broken.yaml"
        path.write_text("resources: [unclosed")

        with pytest.raises(SpecLoadError, match="Invalid YAML"):
            load_declarations(path, registry)

    def test_file_too_large(self, tmp_path: Path, registry: ResourceKindRegistry) -> None:
        """Files above the size cap are rejected before reading."""
        path = tmp_path / "large.yaml"
        path.write_text("resources: []\n" + "#" * 200)

        with patch("provisioner.spec_loader.MAX_SPEC_FILE_SIZE_BYTES", 100):
            with pytest.raises(SpecLoadError, match="exceeds maximum size"):
                load_declarations(path, registry)

    def test_empty_file(self, tmp_path: Path, registry: ResourceKindRegistry) -> None:
        """An empty file is not a mapping."""
        path = tmp_path / "empty.yaml"
        path.write_text("")

        with pytest.raises(SpecLoadError, match="must contain a YAML mapping"):
            load_declarations(path, registry)


class TestParseDeclarations:
    """Tests for parse_declarations."""

    def test_unknown_kind(self, registry: ResourceKindRegistry) -> None:
        """Unregistered kinds are reported with their index."""
        data = {"resources": [{"kind": "terraform_workspace", "name": "ws"}]}
        with pytest.raises(SpecLoadError, match=r"resources\[0\].*terraform_workspace"):
            parse_declarations(data, registry)

    def test_schema_errors(self, registry: ResourceKindRegistry) -> None:
        """Attribute problems are reported with the declaration name."""
        data = {
            "resources": [
                {
                    "kind": "nomad_cluster",
                    "name": "primary",
                    "attributes": {"name": "c", "region": "r", "server_count": 9},
                }
            ]
        }
        with pytest.raises(SpecLoadError) as exc_info:
            parse_declarations(data, registry)
        message = str(exc_info.value)
        assert "primary" in message
        assert "server_count: must be between 1 and 5" in message
        assert "client_count: required attribute is missing" in message

    def test_extra_fields_rejected(self, registry: ResourceKindRegistry) -> None:
        """Unknown document fields are rejected."""
        data = {"resources": [{"kind": "nomad_cluster", "name": "p", "count": 2}]}
        with pytest.raises(SpecLoadError, match="resources.0.count"):
            parse_declarations(data, registry)

    def test_invalid_declaration_name(self, registry: ResourceKindRegistry) -> None:
        """Declaration names are restricted to safe characters."""
        data = {"resources": [{"kind": "nomad_cluster", "name": "bad name!"}]}
        with pytest.raises(SpecLoadError, match="resources.0.name"):
            parse_declarations(data, registry)

    def test_duplicate_address(self, registry: ResourceKindRegistry) -> None:
        """The same kind and name cannot be declared twice."""
        attributes = {"name": "w", "region": "eu-west-1"}
        data = {
            "resources": [
                {"kind": "waypoint_runner", "name": "runner", "attributes": attributes},
                {"kind": "waypoint_runner", "name": "runner", "attributes": attributes},
            ]
        }
        with pytest.raises(SpecLoadError, match="duplicate declaration 'waypoint_runner.runner'"):
            parse_declarations(data, registry)

    def test_same_name_different_kinds(self, registry: ResourceKindRegistry) -> None:
        """Names only need to be unique per kind."""
        data = {
            "resources": [
                {
                    "kind": "waypoint_runner",
                    "name": "main",
                    "attributes": {"name": "w", "region": "eu-west-1"},
                },
                {
                    "kind": "consul_cluster",
                    "name": "main",
                    "attributes": {"name": "c", "region": "eu-west-1", "server_count": 3},
                },
            ]
        }
        assert len(parse_declarations(data, registry)) == 2

    def test_empty_resources(self, registry: ResourceKindRegistry) -> None:
        """A document without resources is valid."""
        assert parse_declarations({}, registry) == []
