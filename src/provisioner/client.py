"""Remote control-plane client.

The engine consumes any object satisfying ControlPlaneClient. Calls are
synchronous and raise RemoteAPIError (ResourceNotFoundError for 404).

HttpControlPlaneClient is the requests-based implementation. It performs no
authentication and no retries: callers hand in a Session already carrying
whatever credentials their control plane requires.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import requests

from .config import Config
from .errors import RemoteAPIError, ResourceNotFoundError

logger = logging.getLogger(__name__)

HTTP_NOT_FOUND = 404


class ControlPlaneClient(Protocol):
    """Synchronous JSON client for the remote control plane.

    Paths follow /{domain}/{kind}/{collection}[/{id}].
    """

    def get(self, path: str) -> Any: ...

    def post(self, path: str, body: Any) -> Any: ...

    def put(self, path: str, body: Any) -> Any: ...

    def delete(self, path: str) -> Any: ...


class HttpControlPlaneClient:
    """JSON-over-HTTPS control-plane client built on requests."""

    def __init__(
        self,
        base_url: str,
        session: requests.Session | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: API root, e.g. "https://eu.api.ovh.com/1.0".
            session: Pre-configured session; a bare one is created when omitted
                and closed by close(). A session passed in stays open.
            timeout_seconds: Socket timeout per request (None waits indefinitely).
        """
        self._base_url = base_url.rstrip("/")
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._timeout = timeout_seconds

    @classmethod
    def from_config(
        cls, config: Config, session: requests.Session | None = None
    ) -> HttpControlPlaneClient:
        """Create a client for the configured endpoint."""
        return cls(
            base_url=config.base_url,
            session=session,
            timeout_seconds=config.request_timeout_seconds,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        """Close the session if this client created it."""
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> HttpControlPlaneClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def get(self, path: str) -> Any:
        return self._request("GET", path)

    def post(self, path: str, body: Any) -> Any:
        return self._request("POST", path, body)

    def put(self, path: str, body: Any) -> Any:
        return self._request("PUT", path, body)

    def delete(self, path: str) -> Any:
        return self._request("DELETE", path)

    def _request(self, method: str, path: str, body: Any = None) -> Any:
        """Issue one request and decode the JSON reply.

        Returns:
            Decoded JSON, or None for an empty body.

        Raises:
            ResourceNotFoundError: On HTTP 404.
            RemoteAPIError: On transport failure, other non-2xx replies,
                or a body that is not JSON.
        """
        url = f"{self._base_url}{path}"
        logger.debug("Control plane request", extra={"method": method, "path": path})

        try:
            response = self._session.request(
                method,
                url,
                json=body if method in ("POST", "PUT") else None,
                timeout=self._timeout,
            )
        except requests.exceptions.RequestException as e:
            raise RemoteAPIError(f"{method} {path} failed: {e}", path=path) from e

        if response.status_code == HTTP_NOT_FOUND:
            raise ResourceNotFoundError(
                f"{method} {path}: resource not found",
                status_code=response.status_code,
                path=path,
            )

        if not response.ok:
            raise RemoteAPIError(
                f"{method} {path} returned HTTP {response.status_code}: "
                f"{_error_message(response)}",
                status_code=response.status_code,
                path=path,
            )

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise RemoteAPIError(
                f"{method} {path} returned a body that is not JSON",
                status_code=response.status_code,
                path=path,
            ) from e


def _error_message(response: requests.Response) -> str:
    """Extract the control plane's error message from a failed reply."""
    try:
        data = response.json()
    except ValueError:
        return response.text[:200] or response.reason or "no details"
    if isinstance(data, dict) and isinstance(data.get("message"), str):
        return data["message"]
    return str(data)[:200]
