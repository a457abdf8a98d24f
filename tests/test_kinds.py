"""Tests for the built-in resource kinds."""

from __future__ import annotations

import pytest

from provisioner.errors import SchemaError
from provisioner.kinds import (
    BOUNDARY_CLUSTER,
    BUILTIN_KINDS,
    CONSUL_CLUSTER,
    NOMAD_CLUSTER,
    PACKER_TEMPLATE,
    VAULT_CLUSTER,
    WAYPOINT_RUNNER,
)


def _mutable(kind) -> set[str]:
    return {attr.name for attr in kind.schema.mutable}


class TestBuiltinKinds:
    """Properties shared by every built-in kind."""

    @pytest.mark.parametrize("kind", BUILTIN_KINDS, ids=lambda k: k.name)
    def test_identity_forces_replacement(self, kind) -> None:
        """name and region are required and never updated in place."""
        for name in ("name", "region"):
            attr = kind.schema.attribute(name)
            assert attr.is_required
            assert attr.force_new

    @pytest.mark.parametrize("kind", BUILTIN_KINDS, ids=lambda k: k.name)
    def test_tags_mutable(self, kind) -> None:
        """Every kind carries a mutable tags map."""
        assert "tags" in _mutable(kind)

    @pytest.mark.parametrize("kind", BUILTIN_KINDS, ids=lambda k: k.name)
    def test_status_computed(self, kind) -> None:
        """status is remote-assigned."""
        assert kind.schema.attribute("status").is_computed

    def test_collection_paths_unique(self) -> None:
        """Each kind has its own collection."""
        paths = [kind.collection_path for kind in BUILTIN_KINDS]
        assert len(set(paths)) == len(paths)
        assert all(path.startswith("/cloud/project/") for path in paths)


class TestMutableSets:
    """In-place updatable attributes per kind."""

    def test_nomad(self) -> None:
        assert _mutable(NOMAD_CLUSTER) == {"server_count", "client_count", "tags"}

    def test_vault(self) -> None:
        assert _mutable(VAULT_CLUSTER) == {"node_count", "tags"}

    def test_consul(self) -> None:
        assert _mutable(CONSUL_CLUSTER) == {"server_count", "client_count", "tags"}

    def test_boundary(self) -> None:
        assert _mutable(BOUNDARY_CLUSTER) == {"controller_count", "worker_count", "tags"}

    def test_waypoint(self) -> None:
        assert _mutable(WAYPOINT_RUNNER) == {"capacity", "tags"}

    def test_packer(self) -> None:
        assert _mutable(PACKER_TEMPLATE) == {
            "source_image",
            "builders",
            "provisioners",
            "post_processors",
            "variables",
            "auto_build",
            "build_timeout",
            "tags",
        }


class TestValidation:
    """Per-kind value checks."""

    def test_nomad_minimal(self, nomad_values: dict) -> None:
        """The minimal Nomad declaration is valid and defaults apply."""
        spec = NOMAD_CLUSTER.parse(nomad_values)
        assert spec["datacenter"] == "dc1"
        assert spec["acl_enabled"] is True
        assert spec["gpu_support"] is False
        assert spec["instance_type"] is None

    def test_nomad_server_count_range(self, nomad_values: dict) -> None:
        """Nomad supports 1 to 5 servers."""
        with pytest.raises(SchemaError, match="server_count: must be between 1 and 5"):
            NOMAD_CLUSTER.parse({**nomad_values, "server_count": 0})

    def test_instance_type_enum(self, nomad_values: dict) -> None:
        """Instance types come from the flavor list."""
        NOMAD_CLUSTER.parse({**nomad_values, "instance_type": "c2-15"})
        with pytest.raises(SchemaError, match="instance_type: must be one of"):
            NOMAD_CLUSTER.parse({**nomad_values, "instance_type": "m5.large"})

    def test_vault_storage_type(self) -> None:
        """Vault storage is restricted to supported backends."""
        base = {"name": "v", "region": "eu-west-1", "node_count": 3}
        assert VAULT_CLUSTER.parse(base)["storage_type"] == "consul"
        assert VAULT_CLUSTER.parse({**base, "storage_type": "raft"})["storage_type"] == "raft"
        with pytest.raises(SchemaError, match="storage_type"):
            VAULT_CLUSTER.parse({**base, "storage_type": "s3"})

    def test_vault_secrets_sensitive(self) -> None:
        """Vault root token and unseal keys are sensitive."""
        assert VAULT_CLUSTER.schema.attribute("root_token").sensitive
        assert VAULT_CLUSTER.schema.attribute("unseal_keys").sensitive

    def test_consul_client_count_default(self) -> None:
        """Consul defaults to three clients."""
        spec = CONSUL_CLUSTER.parse({"name": "c", "region": "eu-west-1", "server_count": 3})
        assert spec["client_count"] == 3

    def test_boundary_worker_range(self) -> None:
        """Boundary needs at least one worker."""
        with pytest.raises(SchemaError, match="worker_count"):
            BOUNDARY_CLUSTER.parse(
                {"name": "b", "region": "eu-west-1", "controller_count": 1, "worker_count": 0}
            )

    def test_waypoint_defaults(self) -> None:
        """Waypoint runners default to static with capacity 10."""
        spec = WAYPOINT_RUNNER.parse({"name": "w", "region": "eu-west-1"})
        assert spec["runner_type"] == "static"
        assert spec["capacity"] == 10

    def test_packer_build_timeout_range(self) -> None:
        """Packer builds run between 5 minutes and 2 hours."""
        base = {
            "name": "p",
            "region": "eu-west-1",
            "source_image": "ubuntu-22.04",
            "builders": ["openstack"],
        }
        assert PACKER_TEMPLATE.parse(base)["build_timeout"] == 3600
        with pytest.raises(SchemaError, match="build_timeout"):
            PACKER_TEMPLATE.parse({**base, "build_timeout": 60})
