"""Generic create/read/update/delete against the remote control plane.

One Reconciler serves one ResourceKind; the kind's schema and collection path
are the only per-kind inputs. Flow for create and update:

    desired spec -> translator/diff -> client POST/PUT -> readiness poller
                 -> observed RemoteResourceState returned to the caller

The reconciler holds no per-resource state between calls. It assumes at most
one call in flight per remote ID; the caller enforces that. Calls for
different IDs may run concurrently.

PARTIAL FAILURE: if polling fails after a successful POST, the resource exists
remotely. The raised ReadinessError carries its resource_id and the resource
is never deleted by the engine.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import time
from collections.abc import Callable
from typing import Any

from .audit import LifecycleEvent, Operation, Outcome, log_lifecycle_event
from .client import ControlPlaneClient
from .diff import diff
from .errors import (
    ImmutableFieldChangedError,
    ProvisionerError,
    RemoteAPIError,
    ResourceNotFoundError,
    SchemaError,
)
from .models import RemoteResourceState
from .poller import ReadinessPoller
from .registry import ResourceKind
from .schema import ResourceSpec
from .translator import to_remote_payload

logger = logging.getLogger(__name__)


def _extract_id(body: Any, path: str) -> str:
    """Return the non-empty string id of a remote object."""
    if not isinstance(body, dict):
        raise RemoteAPIError(
            f"Expected a JSON object from {path}, got {type(body).__name__}", path=path
        )
    resource_id = body.get("id")
    if not isinstance(resource_id, str) or not resource_id:
        raise RemoteAPIError(f"Response from {path} has no usable 'id' field", path=path)
    return resource_id


class Reconciler:
    """Lifecycle operations for one resource kind."""

    def __init__(
        self,
        kind: ResourceKind,
        client: ControlPlaneClient,
        poller: ReadinessPoller | None = None,
    ) -> None:
        """Initialize the reconciler.

        Args:
            kind: Resource kind served by this reconciler.
            client: Control-plane client for every remote call.
            poller: Readiness poller; defaults to 30s ticks with a 30m bound.
        """
        self._kind = kind
        self._client = client
        self._poller = poller or ReadinessPoller()

    @property
    def kind(self) -> ResourceKind:
        return self._kind

    # =========================================================================
    # Lifecycle operations
    # =========================================================================

    async def create(
        self,
        spec: ResourceSpec,
        cancel_event: asyncio.Event | None = None,
    ) -> RemoteResourceState:
        """Create a resource and wait until it is ready.

        Args:
            spec: Desired state.
            cancel_event: Set by the caller to abort the readiness wait.

        Returns:
            Observed state once the resource is ready.

        Raises:
            SchemaError: The spec is invalid (no remote call made).
            RemoteAPIError: The POST failed or returned no id.
            ReadinessError: The resource was created but did not become ready.
        """
        self._check_spec(spec)
        payload = to_remote_payload(spec)
        path = self._kind.collection_path

        event = LifecycleEvent(
            kind=self._kind.name,
            operation=Operation.CREATE,
            changed_attributes=[
                attr.name for attr in spec.schema.settable if spec[attr.name] is not None
            ],
        )
        start = time.monotonic()
        try:
            response = await self._call(self._client.post, path, payload)
            resource_id = _extract_id(response, path)
            event.resource_id = resource_id
            logger.info(
                f"Created {self._kind.name} '{resource_id}', waiting for readiness",
                extra={"kind": self._kind.name, "resource_id": resource_id},
            )
            state = await self._poller.wait_until_ready(resource_id, self.read, cancel_event)
        except (ProvisionerError, asyncio.CancelledError) as e:
            event.fail(e)
            raise
        finally:
            event.duration_seconds = time.monotonic() - start
            log_lifecycle_event(event)

        return state

    async def read(self, resource_id: str) -> RemoteResourceState | None:
        """Read the current remote state.

        Args:
            resource_id: Remote ID.

        Returns:
            Observed state, or None if the resource no longer exists.

        Raises:
            RemoteAPIError: The GET failed or returned a malformed body.
        """
        path = self._kind.resource_path(resource_id)
        try:
            body = await self._call(self._client.get, path)
        except ResourceNotFoundError:
            logger.info(
                f"{self._kind.name} '{resource_id}' not found, treating as absent",
                extra={"kind": self._kind.name, "resource_id": resource_id},
            )
            return None

        if not isinstance(body, dict):
            raise RemoteAPIError(
                f"Expected a JSON object from {path}, got {type(body).__name__}", path=path
            )
        return self._kind.state_from_payload(resource_id, body)

    async def update(
        self,
        resource_id: str,
        desired: ResourceSpec,
        last_known: RemoteResourceState,
        cancel_event: asyncio.Event | None = None,
    ) -> RemoteResourceState:
        """Apply the minimal in-place update and wait until ready again.

        Args:
            resource_id: Remote ID.
            desired: Desired state.
            last_known: State last observed for this resource.
            cancel_event: Set by the caller to abort the readiness wait.

        Returns:
            Observed state after the update, or last_known when nothing changed.

        Raises:
            SchemaError: The spec is invalid.
            ImmutableFieldChangedError: A force_new attribute changed; the
                caller must replace the resource.
            RemoteAPIError: The PUT failed.
            ReadinessError: The resource did not become ready again.
        """
        self._check_spec(desired)
        # Specs from parse(partial=True) have not been checked for required values
        desired.schema.check_required(desired)
        result = diff(desired, last_known.spec)

        if result.force_replace:
            logger.warning(
                f"{self._kind.name} '{resource_id}' needs replacement",
                extra={
                    "kind": self._kind.name,
                    "resource_id": resource_id,
                    "replace_attributes": list(result.replace_attributes),
                },
            )
            raise ImmutableFieldChangedError(result.replace_attributes)

        event = LifecycleEvent(
            kind=self._kind.name,
            operation=Operation.UPDATE,
            resource_id=resource_id,
            changed_attributes=list(result.changed_attributes),
        )

        if not result.has_changes:
            event.outcome = Outcome.NO_CHANGE
            log_lifecycle_event(event)
            return last_known

        path = self._kind.resource_path(resource_id)
        start = time.monotonic()
        try:
            await self._call(self._client.put, path, result.changed_fields)
            logger.info(
                f"Updated {self._kind.name} '{resource_id}', waiting for readiness",
                extra={
                    "kind": self._kind.name,
                    "resource_id": resource_id,
                    "changed_attributes": list(result.changed_attributes),
                },
            )
            # Any change may affect provisioning, so always re-poll
            state = await self._poller.wait_until_ready(resource_id, self.read, cancel_event)
        except (ProvisionerError, asyncio.CancelledError) as e:
            event.fail(e)
            raise
        finally:
            event.duration_seconds = time.monotonic() - start
            log_lifecycle_event(event)

        return state

    async def delete(self, resource_id: str) -> None:
        """Delete a resource. Deleting an absent resource succeeds.

        Raises:
            RemoteAPIError: The DELETE failed for a reason other than not-found.
        """
        path = self._kind.resource_path(resource_id)
        event = LifecycleEvent(
            kind=self._kind.name,
            operation=Operation.DELETE,
            resource_id=resource_id,
        )
        start = time.monotonic()
        try:
            await self._call(self._client.delete, path)
        except ResourceNotFoundError:
            event.outcome = Outcome.ALREADY_ABSENT
        except (ProvisionerError, asyncio.CancelledError) as e:
            event.fail(e)
            raise
        finally:
            event.duration_seconds = time.monotonic() - start
            log_lifecycle_event(event)

    async def list(
        self,
        region: str | None = None,
        status: str | None = None,
    ) -> list[RemoteResourceState]:
        """List resources of this kind, optionally filtered.

        The collection may return full objects or bare IDs; bare IDs are
        read individually and skipped if they vanished meanwhile.

        Args:
            region: Keep only resources in this region.
            status: Keep only resources whose raw status equals this value.

        Returns:
            Matching states in collection order.

        Raises:
            RemoteAPIError: The GET failed or returned a malformed body.
        """
        path = self._kind.collection_path
        body = await self._call(self._client.get, path)
        if body is None:
            body = []
        if not isinstance(body, list):
            raise RemoteAPIError(
                f"Expected a JSON array from {path}, got {type(body).__name__}", path=path
            )

        states: list[RemoteResourceState] = []
        for entry in body:
            if isinstance(entry, str):
                state = await self.read(entry)
                if state is None:
                    continue
            else:
                state = self._kind.state_from_payload(_extract_id(entry, path), entry)

            if region is not None and state.spec.get("region") != region:
                continue
            if status is not None and state.raw_status != status:
                continue
            states.append(state)

        logger.debug(
            f"Listed {len(states)} {self._kind.name} resources",
            extra={"kind": self._kind.name, "region": region, "status": status},
        )
        return states

    # =========================================================================
    # Helpers
    # =========================================================================

    def _check_spec(self, spec: ResourceSpec) -> None:
        if spec.schema is not self._kind.schema:
            raise SchemaError(
                f"Spec for '{spec.schema.name}' passed to the {self._kind.name} reconciler"
            )

    async def _call(self, method: Callable[..., Any], *args: Any) -> Any:
        """Run a synchronous client call off the event loop.

        Exceptions that are not RemoteAPIErrors are transport failures from a
        client that did not translate them; they are wrapped, not retried.
        """
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, functools.partial(method, *args))
        except RemoteAPIError:
            raise
        except Exception as e:
            raise RemoteAPIError(f"Control plane call failed: {e}") from e
