"""Tests for the error taxonomy."""

from __future__ import annotations

from provisioner.errors import (
    CancellationError,
    ImmutableFieldChangedError,
    PollFailedError,
    PollTimeoutError,
    ProvisionerError,
    ReadinessError,
    RemoteAPIError,
    ResourceNotFoundError,
    SchemaError,
    UnknownKindError,
)


class TestErrorHierarchy:
    """Every engine error derives from ProvisionerError."""

    def test_hierarchy(self) -> None:
        assert issubclass(ResourceNotFoundError, RemoteAPIError)
        for cls in (PollTimeoutError, PollFailedError, CancellationError):
            assert issubclass(cls, ReadinessError)
        for cls in (
            SchemaError,
            RemoteAPIError,
            ImmutableFieldChangedError,
            ReadinessError,
            UnknownKindError,
        ):
            assert issubclass(cls, ProvisionerError)


class TestMessages:
    """Error messages carry their context."""

    def test_schema_error_lists_problems(self) -> None:
        """Each problem appears on its own line."""
        error = SchemaError("Invalid nomad_cluster spec", ["a: bad", "b: worse"])
        assert str(error) == "Invalid nomad_cluster spec:\n  - a: bad\n  - b: worse"
        assert error.errors == ["a: bad", "b: worse"]

    def test_schema_error_without_problems(self) -> None:
        error = SchemaError("Spec mismatch")
        assert str(error) == "Spec mismatch"
        assert error.errors == []

    def test_readiness_errors_carry_id(self) -> None:
        """The created resource's ID survives on every readiness error."""
        assert PollTimeoutError("abc", 3.0).resource_id == "abc"
        assert PollFailedError("abc", "ERROR").resource_id == "abc"
        assert CancellationError("abc").resource_id == "abc"

    def test_timeout_message(self) -> None:
        error = PollTimeoutError("abc", 12.34, last_status="PENDING")
        assert "12.3s" in str(error)
        assert "PENDING" in str(error)
        assert "none observed" in str(PollTimeoutError("abc", 1.0))

    def test_immutable_lists_attributes(self) -> None:
        error = ImmutableFieldChangedError(("region", "datacenter"))
        assert error.attributes == ("region", "datacenter")
        assert "region, datacenter" in str(error)

    def test_unknown_kind_sorted(self) -> None:
        error = UnknownKindError("x", ["vault_cluster", "consul_cluster"])
        assert error.known == ["consul_cluster", "vault_cluster"]
