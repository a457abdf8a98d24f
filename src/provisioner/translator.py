"""Bidirectional translation between ResourceSpecs and remote payloads.

The remote API speaks camelCase JSON objects; specs use local snake_case
names. The descriptor table is the only source of the mapping:
- Outbound payloads carry settable attributes only, never computed ones
- Inbound payloads populate settable and computed attributes alike
- Remote fields the schema does not know are ignored (forward compatibility)
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any

from .errors import RemoteAPIError
from .schema import ResourceSchema, ResourceSpec

logger = logging.getLogger(__name__)


def to_remote_payload(spec: ResourceSpec) -> dict[str, Any]:
    """Build a create payload from desired state.

    Undeclared optional attributes (None) are omitted so the control plane
    applies its own default.

    Args:
        spec: Desired state.

    Returns:
        JSON-ready payload keyed by remote field name.

    Raises:
        SchemaError: If a required attribute is missing.
    """
    schema = spec.schema
    schema.check_required(spec)

    payload: dict[str, Any] = {}
    for attr in schema.settable:
        value = spec[attr.name]
        if value is None:
            continue
        payload[attr.remote_name] = copy.deepcopy(value)
    return payload


def from_remote_payload(schema: ResourceSchema, payload: Mapping[str, Any]) -> ResourceSpec:
    """Build a spec from a remote representation.

    Remote values are authoritative, so only their types are checked; range
    and enum validators are not applied. Fields missing from the payload
    keep the schema default.

    Args:
        schema: Schema of the resource kind.
        payload: Decoded JSON object from the control plane.

    Returns:
        Spec with settable and computed attributes populated.

    Raises:
        RemoteAPIError: If a known field carries a value of the wrong type.
    """
    values: dict[str, Any] = {}
    errors: list[str] = []

    for attr in schema.attributes:
        raw = payload.get(attr.remote_name)
        if raw is None:
            values[attr.name] = attr.default_value()
            continue
        try:
            values[attr.name] = attr.coerce(raw, strict=False)
        except ValueError as e:
            errors.append(f"{attr.remote_name}: {e}")

    if errors:
        raise RemoteAPIError(
            f"Malformed {schema.name} payload from control plane: " + "; ".join(errors)
        )

    return ResourceSpec(schema, values)
