"""Resource kind registry.

One generic engine serves every kind. A ResourceKind bundles what differs
between kinds (attribute schema, collection path, status vocabulary); the
registry maps kind names to those bundles and hands out Reconcilers.

Registration is static: build_default_registry() registers the built-in
kinds once at process start.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from .errors import UnknownKindError
from .models import RemoteResourceState, ResourceStatus
from .schema import ResourceSchema, ResourceSpec
from .translator import from_remote_payload

if TYPE_CHECKING:
    from .client import ControlPlaneClient
    from .poller import ReadinessPoller
    from .reconciler import Reconciler

logger = logging.getLogger(__name__)

DEFAULT_READY_STATUSES: frozenset[str] = frozenset({"READY"})
DEFAULT_FAILED_STATUSES: frozenset[str] = frozenset({"FAILED", "ERROR"})
DEFAULT_DELETING_STATUSES: frozenset[str] = frozenset({"DELETING"})


@dataclass(frozen=True)
class ResourceKind:
    """Everything the engine needs to know about one kind of resource.

    Attributes:
        name: Kind identifier (e.g., "nomad_cluster").
        collection_path: Remote collection, e.g. "/cloud/project/nomad/cluster".
        schema: Attribute table.
        description: Human-readable description.
        ready_statuses: Remote status strings meaning terminal success.
        failed_statuses: Remote status strings meaning terminal failure.
        deleting_statuses: Remote status strings meaning teardown in progress.
        status_field: Remote field carrying the status string.
    """

    name: str
    collection_path: str
    schema: ResourceSchema
    description: str = ""
    ready_statuses: frozenset[str] = DEFAULT_READY_STATUSES
    failed_statuses: frozenset[str] = DEFAULT_FAILED_STATUSES
    deleting_statuses: frozenset[str] = DEFAULT_DELETING_STATUSES
    status_field: str = "status"

    def resource_path(self, resource_id: str) -> str:
        """Return the path addressing one resource of this kind."""
        return f"{self.collection_path}/{quote(resource_id, safe='')}"

    def classify_status(self, raw_status: Any) -> ResourceStatus:
        """Map a remote status string onto ResourceStatus."""
        if raw_status is None or raw_status == "":
            return ResourceStatus.UNKNOWN
        value = str(raw_status)
        if value in self.ready_statuses:
            return ResourceStatus.READY
        if value in self.failed_statuses:
            return ResourceStatus.FAILED
        if value in self.deleting_statuses:
            return ResourceStatus.DELETING
        return ResourceStatus.PENDING

    def parse(self, values: Mapping[str, Any]) -> ResourceSpec:
        """Validate desired state for this kind."""
        return self.schema.parse(values)

    def state_from_payload(
        self, resource_id: str, payload: Mapping[str, Any]
    ) -> RemoteResourceState:
        """Build the observed state from a remote payload.

        Raises:
            RemoteAPIError: If the payload carries mistyped fields.
        """
        raw_status = payload.get(self.status_field)
        return RemoteResourceState(
            id=resource_id,
            kind=self.name,
            status=self.classify_status(raw_status),
            spec=from_remote_payload(self.schema, payload),
            payload=dict(payload),
            raw_status=str(raw_status) if raw_status is not None else None,
        )


class ResourceKindRegistry:
    """Maps kind names to ResourceKinds."""

    def __init__(self) -> None:
        self._kinds: dict[str, ResourceKind] = {}

    def register(self, kind: ResourceKind) -> None:
        """Register a kind.

        Raises:
            ValueError: If a kind with the same name is already registered.
        """
        if kind.name in self._kinds:
            raise ValueError(f"Resource kind '{kind.name}' is already registered")
        self._kinds[kind.name] = kind
        logger.debug(
            "Registered resource kind",
            extra={"kind": kind.name, "collection_path": kind.collection_path},
        )

    def get(self, name: str) -> ResourceKind:
        """Look up a kind.

        Raises:
            UnknownKindError: If the kind is not registered.
        """
        try:
            return self._kinds[name]
        except KeyError:
            raise UnknownKindError(name, list(self._kinds)) from None

    def __contains__(self, name: object) -> bool:
        return name in self._kinds

    def __iter__(self) -> Iterator[ResourceKind]:
        return iter(self._kinds.values())

    def __len__(self) -> int:
        return len(self._kinds)

    @property
    def names(self) -> list[str]:
        return sorted(self._kinds)

    def reconciler(
        self,
        name: str,
        client: ControlPlaneClient,
        poller: ReadinessPoller | None = None,
    ) -> Reconciler:
        """Create a Reconciler for a registered kind.

        Args:
            name: Kind name.
            client: Control-plane client used for every remote call.
            poller: Readiness poller; defaults to the standard cadence.

        Raises:
            UnknownKindError: If the kind is not registered.
        """
        from .reconciler import Reconciler

        return Reconciler(self.get(name), client, poller=poller)


def build_default_registry() -> ResourceKindRegistry:
    """Create a registry holding every built-in kind."""
    from .kinds import BUILTIN_KINDS

    registry = ResourceKindRegistry()
    for kind in BUILTIN_KINDS:
        registry.register(kind)
    return registry
