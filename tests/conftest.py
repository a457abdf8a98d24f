"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

# Add tests to path for control_plane_mock imports
tests_path = Path(__file__).parent
sys.path.insert(0, str(tests_path))

from control_plane_mock import MockControlPlaneClient  # noqa: E402
from provisioner.poller import ReadinessPoller  # noqa: E402
from provisioner.registry import ResourceKindRegistry, build_default_registry  # noqa: E402


@pytest.fixture
def registry() -> ResourceKindRegistry:
    """Registry holding every built-in kind."""
    return build_default_registry()


@pytest.fixture
def fast_poller() -> ReadinessPoller:
    """Poller with a short cadence so readiness tests run quickly."""
    return ReadinessPoller(interval_seconds=0.01, timeout_seconds=2.0)


@pytest.fixture
def mock_client() -> MockControlPlaneClient:
    """Mock control plane client with empty state."""
    return MockControlPlaneClient()


@pytest.fixture
def nomad_values() -> dict:
    """Minimal Nomad cluster declaration."""
    return {
        "name": "test-nomad-cluster",
        "region": "eu-west-1",
        "server_count": 3,
        "client_count": 5,
    }
