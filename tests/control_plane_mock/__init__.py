"""Control plane mock for integration testing.

In-memory stand-in for the remote control plane that lets reconciler tests
run without network access.

Key Features:
- In-memory collections keyed by collection path
- Scripted status sequences per resource ID (PENDING -> READY/FAILED)
- Error injection per HTTP method
- Call log for asserting which remote calls were made

Usage:
    from control_plane_mock import MockControlPlaneClient

    client = MockControlPlaneClient()
    client.state.queue_ids("abc123")
    client.state.script_status("abc123", "PENDING", "READY")

    reconciler = registry.reconciler("nomad_cluster", client, poller=fast_poller)
    state = await reconciler.create(spec)

    assert client.calls_for("POST")[0].path == "/cloud/project/nomad/cluster"
"""

from .client import MockCall, MockControlPlaneClient
from .state import MockControlPlaneState

__all__ = [
    "MockCall",
    "MockControlPlaneClient",
    "MockControlPlaneState",
]
