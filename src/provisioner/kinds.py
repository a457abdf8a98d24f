"""Built-in resource kinds.

Field tables for the six HashiCorp products provisioned on the control plane.
Each attribute that the remote API cannot update in place is force_new; the
mutable attributes of each kind are exactly the ones its update endpoint
accepts. Every kind carries a tags map with full-replace update semantics.
"""

from __future__ import annotations

from typing import Any

from .registry import ResourceKind
from .schema import (
    AttributeDescriptor,
    AttributeType,
    Requirement,
    ResourceSchema,
    between,
    one_of,
)

# Instance flavors offered by the compute API
INSTANCE_TYPES: tuple[str, ...] = (
    "s1-2", "s1-4", "s1-8",
    "c2-7", "c2-15", "c2-30", "c2-60", "c2-120",
    "r2-15", "r2-30", "r2-60", "r2-120",
    "t1-45", "t1-90", "t1-180",
)

VAULT_STORAGE_TYPES: tuple[str, ...] = ("consul", "raft", "etcd", "dynamodb")
BOUNDARY_DATABASE_TYPES: tuple[str, ...] = ("postgresql", "mysql")
WAYPOINT_RUNNER_TYPES: tuple[str, ...] = ("static", "on-demand", "kubernetes")

DEFAULT_DATACENTER = "dc1"


# =============================================================================
# Descriptor helpers
# =============================================================================


def _required(
    name: str, type_: AttributeType, description: str, **kwargs: Any
) -> AttributeDescriptor:
    return AttributeDescriptor(
        name, type_, Requirement.REQUIRED, description=description, **kwargs
    )


def _optional(
    name: str, type_: AttributeType, description: str, **kwargs: Any
) -> AttributeDescriptor:
    return AttributeDescriptor(
        name, type_, Requirement.OPTIONAL, description=description, **kwargs
    )


def _computed(
    name: str, type_: AttributeType, description: str, **kwargs: Any
) -> AttributeDescriptor:
    return AttributeDescriptor(
        name, type_, Requirement.COMPUTED, description=description, **kwargs
    )


def _flag(name: str, default: bool, description: str) -> AttributeDescriptor:
    """Boolean feature switch fixed at creation time."""
    return _optional(name, AttributeType.BOOLEAN, description, default=default, force_new=True)


def _identity(noun: str) -> list[AttributeDescriptor]:
    """name and region, shared by every kind and never updatable."""
    return [
        _required("name", AttributeType.STRING, f"Name of the {noun}", force_new=True),
        _required("region", AttributeType.STRING, f"Region of the {noun}", force_new=True),
    ]


def _tags(noun: str) -> AttributeDescriptor:
    return _optional("tags", AttributeType.STRING_MAP, f"Tags to apply to {noun} resources")


def _status(noun: str) -> AttributeDescriptor:
    return _computed("status", AttributeType.STRING, f"{noun} status")


def _instance_type(noun: str) -> AttributeDescriptor:
    return _optional(
        "instance_type",
        AttributeType.STRING,
        f"Instance type for {noun} nodes",
        force_new=True,
        validator=one_of(*INSTANCE_TYPES),
    )


# =============================================================================
# Compute orchestration: Nomad
# =============================================================================

NOMAD_CLUSTER = ResourceKind(
    name="nomad_cluster",
    collection_path="/cloud/project/nomad/cluster",
    description="Nomad cluster with enterprise features",
    schema=ResourceSchema(
        "nomad_cluster",
        [
            *_identity("Nomad cluster"),
            _required(
                "server_count", AttributeType.INTEGER, "Number of Nomad server nodes",
                validator=between(1, 5),
            ),
            _required(
                "client_count", AttributeType.INTEGER, "Number of Nomad client nodes",
                validator=between(0, 100),
            ),
            _instance_type("Nomad"),
            _optional(
                "datacenter", AttributeType.STRING, "Nomad datacenter name",
                default=DEFAULT_DATACENTER, force_new=True,
            ),
            _flag("vault_integration", True, "Enable Vault integration for secrets management"),
            _flag("consul_integration", True, "Enable Consul integration for service discovery"),
            _flag("acl_enabled", True, "Enable Nomad ACL system"),
            _flag("tls_enabled", True, "Enable TLS encryption"),
            _flag("web3_enabled", False, "Enable Web3 blockchain integration"),
            _flag("kata_containers", False, "Enable Kata containers for secure workloads"),
            _flag("gpu_support", False, "Enable GPU support for ML workloads"),
            _tags("cluster"),
            _computed("server_endpoints", AttributeType.STRING_LIST, "Nomad server endpoints"),
            _computed("ui_url", AttributeType.STRING, "Nomad UI URL"),
            _status("Cluster"),
            _computed("created_at", AttributeType.STRING, "Cluster creation timestamp"),
        ],
    ),
)


# =============================================================================
# Secrets: Vault
# =============================================================================

VAULT_CLUSTER = ResourceKind(
    name="vault_cluster",
    collection_path="/cloud/project/vault/cluster",
    description="Vault cluster with enterprise features",
    schema=ResourceSchema(
        "vault_cluster",
        [
            *_identity("Vault cluster"),
            _required(
                "node_count", AttributeType.INTEGER, "Number of Vault nodes",
                validator=between(1, 7),
            ),
            _instance_type("Vault"),
            _optional(
                "storage_type", AttributeType.STRING, "Vault storage backend type",
                default="consul", force_new=True, validator=one_of(*VAULT_STORAGE_TYPES),
            ),
            _flag("auto_unseal", True, "Enable auto-unseal with the platform KMS"),
            _flag("audit_enabled", True, "Enable audit logging"),
            _flag("performance_replication", False, "Enable performance replication"),
            _flag("disaster_recovery", False, "Enable disaster recovery replication"),
            _flag("web3_secrets", False, "Enable Web3 secrets engine"),
            _flag("kubernetes_auth", True, "Enable Kubernetes authentication"),
            _tags("cluster"),
            _computed("cluster_url", AttributeType.STRING, "Vault cluster URL"),
            _computed("ui_url", AttributeType.STRING, "Vault UI URL"),
            _computed("root_token", AttributeType.STRING, "Initial root token", sensitive=True),
            _computed("unseal_keys", AttributeType.STRING_LIST, "Unseal keys", sensitive=True),
            _status("Cluster"),
        ],
    ),
)


# =============================================================================
# Service mesh: Consul
# =============================================================================

CONSUL_CLUSTER = ResourceKind(
    name="consul_cluster",
    collection_path="/cloud/project/consul/cluster",
    description="Consul cluster with service mesh capabilities",
    schema=ResourceSchema(
        "consul_cluster",
        [
            *_identity("Consul cluster"),
            _required(
                "server_count", AttributeType.INTEGER, "Number of Consul server nodes",
                validator=between(1, 7),
            ),
            _optional(
                "client_count", AttributeType.INTEGER, "Number of Consul client nodes",
                default=3, validator=between(0, 100),
            ),
            _instance_type("Consul"),
            _optional(
                "datacenter", AttributeType.STRING, "Consul datacenter name",
                default=DEFAULT_DATACENTER, force_new=True,
            ),
            _flag("connect_enabled", True, "Enable Consul Connect service mesh"),
            _flag("acl_enabled", True, "Enable Consul ACL system"),
            _flag("encryption_enabled", True, "Enable gossip encryption"),
            _flag("tls_enabled", True, "Enable TLS encryption"),
            _flag("ui_enabled", True, "Enable Consul UI"),
            _flag("monitoring_enabled", True, "Enable monitoring and metrics"),
            _flag("backup_enabled", True, "Enable automated backups"),
            _flag("web3_services", False, "Enable Web3 service discovery"),
            _tags("cluster"),
            _computed("server_endpoints", AttributeType.STRING_LIST, "Consul server endpoints"),
            _computed("ui_url", AttributeType.STRING, "Consul UI URL"),
            _computed("gossip_key", AttributeType.STRING, "Gossip encryption key", sensitive=True),
            _computed("master_token", AttributeType.STRING, "ACL master token", sensitive=True),
            _status("Cluster"),
        ],
    ),
)


# =============================================================================
# Access broker: Boundary
# =============================================================================

BOUNDARY_CLUSTER = ResourceKind(
    name="boundary_cluster",
    collection_path="/cloud/project/boundary/cluster",
    description="Boundary cluster for secure access management",
    schema=ResourceSchema(
        "boundary_cluster",
        [
            *_identity("Boundary cluster"),
            _required(
                "controller_count", AttributeType.INTEGER, "Number of Boundary controller nodes",
                validator=between(1, 5),
            ),
            _required(
                "worker_count", AttributeType.INTEGER, "Number of Boundary worker nodes",
                validator=between(1, 20),
            ),
            _instance_type("Boundary"),
            _optional(
                "database_type", AttributeType.STRING, "Database backend type",
                default="postgresql", force_new=True, validator=one_of(*BOUNDARY_DATABASE_TYPES),
            ),
            _flag("vault_integration", True, "Enable Vault integration for credential brokering"),
            _flag("ldap_auth", False, "Enable LDAP authentication"),
            _flag("oidc_auth", False, "Enable OIDC authentication"),
            _flag("session_recording", True, "Enable session recording"),
            _flag("multi_hop_sessions", False, "Enable multi-hop sessions"),
            _flag("web3_targets", False, "Enable Web3 target management"),
            _tags("cluster"),
            _computed(
                "controller_endpoints", AttributeType.STRING_LIST, "Boundary controller endpoints"
            ),
            _computed("ui_url", AttributeType.STRING, "Boundary UI URL"),
            _computed("auth_method_id", AttributeType.STRING, "Default auth method ID"),
            _status("Cluster"),
        ],
    ),
)


# =============================================================================
# Deployment runner: Waypoint
# =============================================================================

WAYPOINT_RUNNER = ResourceKind(
    name="waypoint_runner",
    collection_path="/cloud/project/waypoint/runner",
    description="Waypoint runner for application deployment",
    schema=ResourceSchema(
        "waypoint_runner",
        [
            *_identity("Waypoint runner"),
            _instance_type("runner"),
            _optional(
                "runner_type", AttributeType.STRING, "Type of runner",
                default="static", force_new=True, validator=one_of(*WAYPOINT_RUNNER_TYPES),
            ),
            _optional(
                "capacity", AttributeType.INTEGER, "Maximum concurrent jobs",
                default=10, validator=between(1, 100),
            ),
            _flag("docker_enabled", True, "Enable Docker support"),
            _flag("kubernetes_enabled", False, "Enable Kubernetes support"),
            _flag("nomad_enabled", False, "Enable Nomad support"),
            _flag("web3_deployments", False, "Enable Web3 application deployments"),
            _tags("runner"),
            _computed("runner_id", AttributeType.STRING, "Waypoint runner ID"),
            _computed("token", AttributeType.STRING, "Runner authentication token", sensitive=True),
            _computed("endpoint", AttributeType.STRING, "Runner endpoint URL"),
            _status("Runner"),
        ],
    ),
)


# =============================================================================
# Image builder: Packer
# =============================================================================

PACKER_TEMPLATE = ResourceKind(
    name="packer_template",
    collection_path="/cloud/project/packer/template",
    description="Packer template for image building",
    schema=ResourceSchema(
        "packer_template",
        [
            *_identity("Packer template"),
            _required("source_image", AttributeType.STRING, "Source image for building"),
            _optional(
                "instance_type", AttributeType.STRING, "Instance type for building",
                force_new=True, validator=one_of(*INSTANCE_TYPES),
            ),
            _required("builders", AttributeType.STRING_LIST, "Packer builders configuration"),
            _optional(
                "provisioners", AttributeType.STRING_LIST, "Packer provisioners configuration"
            ),
            _optional(
                "post_processors", AttributeType.STRING_LIST, "Packer post-processors configuration"
            ),
            _optional("variables", AttributeType.STRING_MAP, "Template variables"),
            _optional(
                "auto_build", AttributeType.BOOLEAN, "Enable automatic builds on changes",
                default=False,
            ),
            _optional(
                "build_timeout", AttributeType.INTEGER, "Build timeout in seconds",
                default=3600, validator=between(300, 7200),
            ),
            _flag("web3_tools", False, "Include Web3 development tools"),
            _flag("kata_support", False, "Include Kata containers support"),
            _tags("template"),
            _computed("template_id", AttributeType.STRING, "Packer template ID"),
            _computed("last_build_id", AttributeType.STRING, "Last successful build ID"),
            _computed("image_id", AttributeType.STRING, "Generated image ID"),
            _status("Template"),
        ],
    ),
)


BUILTIN_KINDS: tuple[ResourceKind, ...] = (
    NOMAD_CLUSTER,
    VAULT_CLUSTER,
    CONSUL_CLUSTER,
    BOUNDARY_CLUSTER,
    WAYPOINT_RUNNER,
    PACKER_TEMPLATE,
)
