"""Declaration file loading with validation.

A declaration file lists the desired resources:

    resources:
      - kind: nomad_cluster
        name: primary
        attributes:
          name: test-nomad-cluster
          region: eu-west-1
          server_count: 3
          client_count: 5

Documents are validated twice at the boundary: pydantic checks the document
shape, then each kind's schema checks the attributes.

SECURITY: File size is checked before reading to prevent DoS via large files.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from .config import MAX_SPEC_FILE_SIZE_BYTES
from .errors import SchemaError, UnknownKindError
from .registry import ResourceKindRegistry
from .schema import ResourceSpec

logger = logging.getLogger(__name__)


class SpecLoadError(Exception):
    """Raised when a declaration file cannot be loaded or fails validation."""

    pass


class ResourceDeclaration(BaseModel):
    """One declared resource as written in the file."""

    model_config = {"extra": "forbid"}

    kind: Annotated[str, Field(min_length=1)]
    name: Annotated[str, Field(min_length=1, max_length=128, pattern=r"^[A-Za-z0-9_-]+$")]
    attributes: dict[str, Any] = Field(default_factory=dict)


class DeclarationDocument(BaseModel):
    """Top-level declaration file."""

    model_config = {"extra": "forbid"}

    resources: list[ResourceDeclaration] = Field(default_factory=list)


@dataclass(frozen=True)
class DeclaredResource:
    """A validated declaration ready for reconciliation."""

    kind: str
    name: str
    spec: ResourceSpec

    @property
    def address(self) -> str:
        """Unique handle of the declaration, e.g. "nomad_cluster.primary"."""
        return f"{self.kind}.{self.name}"


def parse_declarations(
    raw_data: Any, registry: ResourceKindRegistry, source: str = "<memory>"
) -> list[DeclaredResource]:
    """Validate already-decoded declaration data.

    Args:
        raw_data: Decoded YAML document.
        registry: Registry used to resolve kinds and schemas.
        source: Where the data came from, used in error messages.

    Returns:
        Declared resources in file order.

    Raises:
        SpecLoadError: On any shape, kind, schema or duplicate-address problem.
    """
    if not isinstance(raw_data, dict):
        raise SpecLoadError(f"Declaration file must contain a YAML mapping: {source}")

    try:
        document = DeclarationDocument.model_validate(raw_data)
    except ValidationError as e:
        # Format Pydantic validation errors for readability
        errors = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            errors.append(f"  - {loc}: {error['msg']}")
        error_list = "\n".join(errors)
        raise SpecLoadError(f"Validation failed for {source}:\n{error_list}") from e

    declared: list[DeclaredResource] = []
    seen: set[str] = set()

    for index, declaration in enumerate(document.resources):
        try:
            kind = registry.get(declaration.kind)
        except UnknownKindError as e:
            raise SpecLoadError(f"{source}: resources[{index}]: {e}") from e

        try:
            spec = kind.parse(declaration.attributes)
        except SchemaError as e:
            raise SpecLoadError(f"{source}: resources[{index}] ({declaration.name}): {e}") from e

        resource = DeclaredResource(kind=kind.name, name=declaration.name, spec=spec)
        if resource.address in seen:
            raise SpecLoadError(f"{source}: duplicate declaration '{resource.address}'")
        seen.add(resource.address)
        declared.append(resource)

    return declared


def load_declarations(path: Path, registry: ResourceKindRegistry) -> list[DeclaredResource]:
    """Load and validate a declaration file from YAML.

    Args:
        path: Declaration file.
        registry: Registry used to resolve kinds and schemas.

    Returns:
        Declared resources in file order.

    Raises:
        SpecLoadError: If the file cannot be read or fails validation.
    """
    if not path.exists():
        raise SpecLoadError(f"Declaration file not found: {path}")

    # SECURITY: Check file size before reading to prevent DoS
    try:
        file_size = path.stat().st_size
    except OSError as e:
        raise SpecLoadError(f"Failed to stat declaration file {path}: {e}") from e

    if file_size > MAX_SPEC_FILE_SIZE_BYTES:
        raise SpecLoadError(
            f"Declaration file exceeds maximum size of {MAX_SPEC_FILE_SIZE_BYTES} bytes: {path}"
        )

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SpecLoadError(f"Failed to read declaration file {path}: {e}") from e

    try:
        raw_data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SpecLoadError(f"Invalid YAML in {path}: {e}") from e

    declared = parse_declarations(raw_data, registry, source=str(path))
    logger.info("Loaded %d resource declarations from %s", len(declared), path)
    return declared
