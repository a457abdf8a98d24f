"""Readiness polling for asynchronously provisioned resources.

STATE MACHINE:
    PENDING --ready status--> READY      (returns the observed state)
    PENDING --failed status-> FAILED     (PollFailedError)
    PENDING --deadline------> TIMEOUT    (PollTimeoutError)
    PENDING --cancel_event--> CANCELLED  (CancellationError)

Each tick waits one interval, then reads the resource. Both the wait and
the read are cooperative: setting the cancel event ends either immediately,
even while a slow remote call is in flight. Every read is bounded by the
time left before the deadline, so a slow control plane can eat into the
bound but never extend it. Read errors and not-yet-visible resources are
logged and polling continues at the same cadence. Cancellation and timeout
never touch the remote resource.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from enum import Enum

from .config import DEFAULT_POLL_INTERVAL_SECONDS, DEFAULT_POLL_TIMEOUT_SECONDS, Config
from .errors import CancellationError, PollFailedError, PollTimeoutError, RemoteAPIError
from .models import RemoteResourceState, ResourceStatus

logger = logging.getLogger(__name__)

ReadFunc = Callable[[str], Awaitable[RemoteResourceState | None]]


class _CancelSignal(Exception):
    """Internal signal: the cancel event fired while a read was in flight."""

    pass


class PollState(str, Enum):
    """States of a single readiness wait."""

    PENDING = "PENDING"
    READY = "READY"
    FAILED = "FAILED"
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"


class ReadinessPoller:
    """Blocks until a resource reports a terminal status or the bound expires."""

    def __init__(
        self,
        interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        timeout_seconds: float = DEFAULT_POLL_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the poller.

        Args:
            interval_seconds: Fixed delay before each read.
            timeout_seconds: Overall bound for one wait.

        Raises:
            ValueError: If the interval is not positive or exceeds the bound.
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        if timeout_seconds < interval_seconds:
            raise ValueError("timeout_seconds must be at least interval_seconds")
        self._interval = interval_seconds
        self._timeout = timeout_seconds

    @classmethod
    def from_config(cls, config: Config) -> ReadinessPoller:
        return cls(
            interval_seconds=config.poll_interval_seconds,
            timeout_seconds=config.poll_timeout_seconds,
        )

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def timeout_seconds(self) -> float:
        return self._timeout

    async def wait_until_ready(
        self,
        resource_id: str,
        read: ReadFunc,
        cancel_event: asyncio.Event | None = None,
    ) -> RemoteResourceState:
        """Poll until the resource is ready.

        Args:
            resource_id: Remote ID being waited on.
            read: Coroutine function returning the observed state, or None
                when the resource is not (yet) visible.
            cancel_event: Set by the caller to abort the wait.

        Returns:
            The first observed state with status READY.

        Raises:
            PollFailedError: A terminal failure status was observed.
            PollTimeoutError: The bound expired first.
            CancellationError: cancel_event was set.
        """
        state = PollState.PENDING
        start = time.monotonic()
        deadline = start + self._timeout
        last: RemoteResourceState | None = None
        reads = 0

        while state == PollState.PENDING:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                state = PollState.TIMEOUT
                break

            if await self._wait(cancel_event, min(self._interval, remaining)):
                state = PollState.CANCELLED
                break

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                state = PollState.TIMEOUT
                break

            try:
                observed = await self._read(resource_id, read, cancel_event, remaining)
            except _CancelSignal:
                state = PollState.CANCELLED
                break
            except TimeoutError:
                state = PollState.TIMEOUT
                break
            except RemoteAPIError as e:
                reads += 1
                logger.warning(
                    f"Readiness read for '{resource_id}' failed, will retry: {e}",
                    extra={"resource_id": resource_id, "error_type": type(e).__name__},
                )
                continue

            reads += 1
            if observed is None:
                logger.debug(
                    f"Resource '{resource_id}' not visible yet",
                    extra={"resource_id": resource_id, "reads": reads},
                )
                continue

            last = observed
            if observed.status == ResourceStatus.READY:
                state = PollState.READY
            elif observed.status == ResourceStatus.FAILED:
                state = PollState.FAILED
            else:
                logger.debug(
                    f"Resource '{resource_id}' not ready",
                    extra={
                        "resource_id": resource_id,
                        "status": observed.raw_status,
                        "reads": reads,
                    },
                )

        elapsed = time.monotonic() - start
        extra = {
            "resource_id": resource_id,
            "poll_state": state.value,
            "reads": reads,
            "elapsed_seconds": round(elapsed, 3),
        }

        if state == PollState.READY and last is not None:
            logger.info(f"Resource '{resource_id}' is ready", extra=extra)
            return last

        if state == PollState.FAILED and last is not None:
            logger.error(f"Resource '{resource_id}' failed to provision", extra=extra)
            raise PollFailedError(resource_id, last.raw_status or last.status.value)

        if state == PollState.CANCELLED:
            logger.warning(f"Readiness wait for '{resource_id}' cancelled", extra=extra)
            raise CancellationError(resource_id)

        logger.error(f"Timed out waiting for '{resource_id}'", extra=extra)
        raise PollTimeoutError(
            resource_id,
            elapsed_seconds=elapsed,
            last_status=last.raw_status if last is not None else None,
        )

    @staticmethod
    async def _wait(cancel_event: asyncio.Event | None, delay: float) -> bool:
        """Sleep for delay seconds; return True if cancelled meanwhile."""
        if cancel_event is None:
            await asyncio.sleep(delay)
            return False
        if cancel_event.is_set():
            return True
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay)
        except TimeoutError:
            return False
        return True

    @staticmethod
    async def _read(
        resource_id: str,
        read: ReadFunc,
        cancel_event: asyncio.Event | None,
        timeout: float,
    ) -> RemoteResourceState | None:
        """Run one read, racing it against the deadline and the cancel event.

        Raises:
            TimeoutError: The deadline passed before the read finished.
            _CancelSignal: The cancel event fired before the read finished.
        """
        if cancel_event is None:
            return await asyncio.wait_for(read(resource_id), timeout=timeout)

        read_task = asyncio.ensure_future(read(resource_id))
        cancel_task = asyncio.ensure_future(cancel_event.wait())
        try:
            done, _ = await asyncio.wait(
                {read_task, cancel_task},
                timeout=timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            pending = [task for task in (read_task, cancel_task) if not task.done()]
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        if cancel_task in done:
            if read_task in done and not read_task.cancelled():
                # Retrieve the outcome so a failed read is not reported as unhandled
                read_task.exception()
            raise _CancelSignal()
        if read_task in done:
            return read_task.result()
        raise TimeoutError()
