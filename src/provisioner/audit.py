"""Lifecycle audit records.

Every create, update and delete the engine performs produces one structured
record on the "provisioner.audit" logger, answering:
- "Which remote resource was touched, and how?"
- "Which attributes changed?" (names only, never values)
- "Did it succeed, and how long did it take?"
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

logger = logging.getLogger("provisioner.audit")

# Version is set at build time or falls back to dev
ENGINE_VERSION = os.environ.get("PROVISIONER_VERSION", "dev")


class Operation(str, Enum):
    """Lifecycle operations recorded in the audit trail."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class Outcome(str, Enum):
    """How an operation ended."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    NO_CHANGE = "no_change"
    ALREADY_ABSENT = "already_absent"


@dataclass
class LifecycleEvent:
    """Audit record for one lifecycle operation."""

    kind: str
    operation: Operation
    resource_id: str | None = None
    outcome: Outcome = Outcome.SUCCEEDED
    changed_attributes: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0
    error: str | None = None
    error_type: str | None = None
    engine_version: str = ENGINE_VERSION
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def fail(self, error: Exception) -> None:
        """Mark the event as failed with the given error."""
        self.outcome = Outcome.FAILED
        self.error = str(error)
        self.error_type = type(error).__name__

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = asdict(self)
        result["operation"] = self.operation.value
        result["outcome"] = self.outcome.value
        result["timestamp"] = self.timestamp.isoformat()
        return result


def log_lifecycle_event(event: LifecycleEvent) -> None:
    """Emit an audit record.

    Failures log at ERROR, no-op updates at DEBUG, everything else at INFO.
    """
    log_level = logging.INFO
    if event.outcome == Outcome.FAILED:
        log_level = logging.ERROR
    elif event.outcome == Outcome.NO_CHANGE:
        log_level = logging.DEBUG

    logger.log(
        log_level,
        f"Resource {event.operation.value} {event.outcome.value}",
        extra={
            "audit": event.to_dict(),
            # Flatten key fields for easier querying
            "kind": event.kind,
            "operation": event.operation.value,
            "resource_id": event.resource_id,
            "outcome": event.outcome.value,
        },
    )
