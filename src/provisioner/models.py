"""Observed remote state of provisioned resources."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from .schema import ResourceSpec


class ResourceStatus(str, Enum):
    """Normalized lifecycle status.

    Each kind maps its own remote status strings onto these values; anything
    unrecognized is PENDING, a missing status is UNKNOWN.
    """

    PENDING = "PENDING"
    READY = "READY"
    FAILED = "FAILED"
    DELETING = "DELETING"
    UNKNOWN = "UNKNOWN"

    @property
    def is_terminal(self) -> bool:
        return self in (ResourceStatus.READY, ResourceStatus.FAILED)


@dataclass(frozen=True)
class RemoteResourceState:
    """Last-observed remote representation of one resource.

    Attributes:
        id: Remote ID assigned by the control plane at create time.
        kind: Registered kind name.
        status: Normalized status.
        raw_status: Status string exactly as reported, if any.
        spec: Payload translated back into a spec (settable and computed).
        payload: Full remote payload as received.
        observed_at: When the payload was read.
    """

    id: str
    kind: str
    status: ResourceStatus
    spec: ResourceSpec
    payload: dict[str, Any] = field(default_factory=dict, repr=False)
    raw_status: str | None = None
    observed_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_ready(self) -> bool:
        return self.status == ResourceStatus.READY
