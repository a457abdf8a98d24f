"""Minimal update diffs between desired and last-known state.

RULES:
- Computed attributes are never compared; the remote side owns them
- Collections compare with empty equivalence: None, [] and {} are equal
- Undeclared optional scalars (None in desired state) never produce a change
- Sensitive attributes change only when a new value is declared; their values
  never appear in describe() output or logs
- Any change to a force_new attribute yields force_replace with no changed
  fields, whatever else changed alongside
- String maps (tags) are full-replace: the whole desired map is sent

changed_fields is keyed by remote field name in lexicographic order so the
resulting payloads are reproducible.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .errors import SchemaError
from .schema import SENSITIVE_PLACEHOLDER, AttributeDescriptor, ResourceSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiffResult:
    """Outcome of comparing desired state with last-known state.

    Attributes:
        changed_fields: Partial update payload keyed by remote field name.
        changed_attributes: Local names of the attributes in changed_fields.
        replace_attributes: Local names of changed force_new attributes.
        sensitive_fields: Remote names in changed_fields whose values are masked.
    """

    changed_fields: dict[str, Any] = field(default_factory=dict)
    changed_attributes: tuple[str, ...] = ()
    replace_attributes: tuple[str, ...] = ()
    sensitive_fields: frozenset[str] = frozenset()

    @property
    def force_replace(self) -> bool:
        return bool(self.replace_attributes)

    @property
    def has_changes(self) -> bool:
        return bool(self.changed_fields)

    def describe(self) -> dict[str, Any]:
        """Return a log-safe summary with sensitive values masked."""
        return {
            "force_replace": self.force_replace,
            "replace_attributes": list(self.replace_attributes),
            "changed_fields": {
                key: SENSITIVE_PLACEHOLDER if key in self.sensitive_fields else value
                for key, value in self.changed_fields.items()
            },
        }


def _normalize(attr: AttributeDescriptor, value: Any) -> Any:
    if attr.is_collection and value is None:
        return attr.empty_value()
    return value


def _is_changed(attr: AttributeDescriptor, desired: Any, last_known: Any) -> bool:
    if desired is None and not attr.is_collection:
        # Not declared: the remote side keeps whatever it has
        return False
    return _normalize(attr, desired) != _normalize(attr, last_known)


def diff(desired: ResourceSpec, last_known: ResourceSpec) -> DiffResult:
    """Compute the minimal in-place update from last_known to desired.

    Args:
        desired: State declared by the caller.
        last_known: State last observed on the control plane.

    Returns:
        DiffResult; empty when nothing changed.

    Raises:
        SchemaError: If the two specs belong to different schemas.
    """
    schema = desired.schema
    if last_known.schema is not schema:
        raise SchemaError(
            f"Cannot diff a {schema.name} spec against a {last_known.schema.name} spec"
        )

    changed: dict[str, Any] = {}
    changed_attributes: list[str] = []
    replace: list[str] = []
    sensitive: set[str] = set()

    for attr in schema.settable:
        desired_value = desired[attr.name]
        if not _is_changed(attr, desired_value, last_known[attr.name]):
            continue
        if attr.force_new:
            replace.append(attr.name)
            continue
        changed[attr.remote_name] = _normalize(attr, desired_value)
        changed_attributes.append(attr.name)
        if attr.sensitive:
            sensitive.add(attr.remote_name)

    if replace:
        logger.debug(
            "Diff requires replacement",
            extra={"kind": schema.name, "replace_attributes": replace},
        )
        return DiffResult(replace_attributes=tuple(replace))

    ordered = {key: changed[key] for key in sorted(changed)}
    return DiffResult(
        changed_fields=ordered,
        changed_attributes=tuple(changed_attributes),
        sensitive_fields=frozenset(sensitive),
    )
