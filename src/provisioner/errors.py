"""Error taxonomy for the resource lifecycle engine.

Local errors (schema validation) are caller bugs and are never retried.
Remote errors are surfaced verbatim; the caller owns retry policy. "Not found"
is not an error on read or delete and never reaches the caller as one.
"""

from __future__ import annotations


class ProvisionerError(Exception):
    """Base class for all lifecycle engine errors."""

    pass


class SchemaError(ProvisionerError):
    """Raised when a resource spec does not satisfy its schema.

    Attributes:
        errors: One human-readable line per problem found.
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.errors = errors or []
        if self.errors:
            message = message + ":\n  - " + "\n  - ".join(self.errors)
        super().__init__(message)


class RemoteAPIError(ProvisionerError):
    """Raised when the control plane rejects a call or replies with a malformed body."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        path: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.path = path
        super().__init__(message)


class ResourceNotFoundError(RemoteAPIError):
    """Raised by clients when the addressed remote resource does not exist."""

    pass


class ImmutableFieldChangedError(ProvisionerError):
    """Raised when an update touches attributes that force replacement.

    The engine never destroys and recreates on its own; the caller decides.
    """

    def __init__(self, attributes: tuple[str, ...]) -> None:
        self.attributes = attributes
        super().__init__(
            "Attributes cannot be changed in place and require replacement: "
            + ", ".join(attributes)
        )


class ReadinessError(ProvisionerError):
    """Base class for readiness polling failures.

    The remote resource exists when this is raised; it is never deleted
    by the engine.
    """

    def __init__(self, message: str, resource_id: str) -> None:
        self.resource_id = resource_id
        super().__init__(message)


class PollTimeoutError(ReadinessError):
    """Raised when a resource does not become ready within the poll bound."""

    def __init__(
        self,
        resource_id: str,
        elapsed_seconds: float,
        last_status: str | None = None,
    ) -> None:
        self.elapsed_seconds = elapsed_seconds
        self.last_status = last_status
        super().__init__(
            f"Timed out waiting for resource '{resource_id}' to become ready "
            f"after {elapsed_seconds:.1f}s (last status: {last_status or 'none observed'})",
            resource_id,
        )


class PollFailedError(ReadinessError):
    """Raised when a resource reports a terminal failure status."""

    def __init__(self, resource_id: str, status: str) -> None:
        self.status = status
        super().__init__(
            f"Resource '{resource_id}' reported terminal failure status '{status}'",
            resource_id,
        )


class CancellationError(ReadinessError):
    """Raised when the caller aborts a readiness wait."""

    def __init__(self, resource_id: str) -> None:
        super().__init__(f"Readiness wait for resource '{resource_id}' was cancelled", resource_id)


class UnknownKindError(ProvisionerError):
    """Raised when a resource kind is not registered."""

    def __init__(self, kind: str, known: list[str] | None = None) -> None:
        self.kind = kind
        self.known = sorted(known or [])
        super().__init__(f"Unknown resource kind '{kind}'. Registered kinds: {self.known}")
