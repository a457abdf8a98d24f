"""Mock control plane client.

Implements the ControlPlaneClient protocol on top of MockControlPlaneState
and records every call it receives.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import unquote

from provisioner.errors import RemoteAPIError, ResourceNotFoundError

from .state import MockControlPlaneState


@dataclass
class MockCall:
    """One recorded client call."""

    method: str
    path: str
    body: Any = None


class MockControlPlaneClient:
    """Synchronous client backed by in-memory state."""

    def __init__(self, state: MockControlPlaneState | None = None) -> None:
        self.state = state or MockControlPlaneState()
        self.calls: list[MockCall] = []
        self._errors: dict[str, list[Exception]] = {}

    def inject_error(self, method: str, error: Exception, times: int = 1) -> None:
        """Make the next `times` calls of a method raise error."""
        self._errors.setdefault(method.upper(), []).extend([error] * times)

    def calls_for(self, method: str) -> list[MockCall]:
        """Get recorded calls of one method in call order."""
        return [call for call in self.calls if call.method == method.upper()]

    def get(self, path: str) -> Any:
        self._record("GET", path)
        collection, resource_id = self._split(path)
        if resource_id is None:
            return self.state.list(collection)
        payload = self.state.read(collection, resource_id)
        if payload is None:
            raise ResourceNotFoundError(f"GET {path}: resource not found", 404, path)
        return payload

    def post(self, path: str, body: Any) -> Any:
        self._record("POST", path, body)
        collection, resource_id = self._split(path)
        if resource_id is not None:
            raise RemoteAPIError(f"POST {path}: method not allowed", 405, path)
        return self.state.create(collection, body)

    def put(self, path: str, body: Any) -> Any:
        self._record("PUT", path, body)
        collection, resource_id = self._split(path)
        if resource_id is None or not self.state.update(collection, resource_id, body):
            raise ResourceNotFoundError(f"PUT {path}: resource not found", 404, path)
        return None

    def delete(self, path: str) -> Any:
        self._record("DELETE", path)
        collection, resource_id = self._split(path)
        if resource_id is None or not self.state.delete(collection, resource_id):
            raise ResourceNotFoundError(f"DELETE {path}: resource not found", 404, path)
        return None

    def _record(self, method: str, path: str, body: Any = None) -> None:
        self.calls.append(MockCall(method, path, body))
        pending = self._errors.get(method)
        if pending:
            raise pending.pop(0)

    def _split(self, path: str) -> tuple[str, str | None]:
        if self.state.is_collection(path):
            return path, None
        parent, _, last = path.rpartition("/")
        if self.state.is_collection(parent):
            return parent, unquote(last)
        raise ResourceNotFoundError(f"{path}: unknown collection", 404, path)
