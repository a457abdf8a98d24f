"""Attribute schema and typed resource specs.

A resource kind is described by an ordered table of AttributeDescriptors.
The table drives everything the engine does with a resource:
1. Validation of caller-declared desired state (types, ranges, enums)
2. Translation between local snake_case names and remote camelCase fields
3. Diffing (which attributes are mutable, which force replacement)
4. Masking of sensitive values in reprs and logs

ResourceSpec is the typed container produced by a schema. Values are checked
with pydantic TypeAdapters: strict for desired state, lax for remote payloads.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .errors import SchemaError

SENSITIVE_PLACEHOLDER = "(sensitive)"

_SNAKE_SEGMENT = re.compile(r"_([a-z0-9])")


class AttributeType(str, Enum):
    """Semantic type of an attribute value."""

    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    STRING_LIST = "string_list"
    STRING_MAP = "string_map"


class Requirement(str, Enum):
    """How an attribute is supplied."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    COMPUTED = "computed"  # Remote-assigned, read-only to the caller


_TYPE_ADAPTERS: dict[AttributeType, TypeAdapter[Any]] = {
    AttributeType.STRING: TypeAdapter(str),
    AttributeType.INTEGER: TypeAdapter(int),
    AttributeType.BOOLEAN: TypeAdapter(bool),
    AttributeType.STRING_LIST: TypeAdapter(list[str]),
    AttributeType.STRING_MAP: TypeAdapter(dict[str, str]),
}


def to_camel_case(name: str) -> str:
    """Convert a snake_case attribute name to the remote camelCase form.

    Args:
        name: Local attribute name (e.g., "server_count").

    Returns:
        Remote field name (e.g., "serverCount").
    """
    return _SNAKE_SEGMENT.sub(lambda m: m.group(1).upper(), name)


# =============================================================================
# Validators
# =============================================================================


def one_of(*choices: str) -> Callable[[Any], None]:
    """Build a validator accepting only the given values."""
    allowed = tuple(choices)

    def validate(value: Any) -> None:
        if value not in allowed:
            raise ValueError(f"must be one of {list(allowed)}")

    return validate


def between(minimum: int, maximum: int) -> Callable[[Any], None]:
    """Build a validator accepting integers in the inclusive range."""

    def validate(value: Any) -> None:
        if not minimum <= value <= maximum:
            raise ValueError(f"must be between {minimum} and {maximum}")

    return validate


# =============================================================================
# Descriptors
# =============================================================================


@dataclass(frozen=True)
class AttributeDescriptor:
    """One attribute of a resource kind.

    Attributes:
        name: Local snake_case name.
        type: Semantic value type.
        requirement: Required, optional or computed.
        default: Value used when an optional attribute is not declared.
        remote_name: Remote field name (derived from name when empty).
        sensitive: Value must never be logged or surfaced in diffs.
        force_new: Changing the value requires destroy-then-create.
        validator: Extra check for declared values, raises ValueError.
        description: Human-readable description.
    """

    name: str
    type: AttributeType
    requirement: Requirement = Requirement.OPTIONAL
    default: Any = None
    remote_name: str = ""
    sensitive: bool = False
    force_new: bool = False
    validator: Callable[[Any], None] | None = None
    description: str = ""

    def __post_init__(self) -> None:
        if not self.remote_name:
            object.__setattr__(self, "remote_name", to_camel_case(self.name))
        if self.requirement == Requirement.REQUIRED and self.default is not None:
            raise ValueError(f"Required attribute '{self.name}' cannot declare a default")
        if self.requirement == Requirement.COMPUTED and (
            self.default is not None or self.force_new or self.validator is not None
        ):
            raise ValueError(
                f"Computed attribute '{self.name}' cannot declare a default, "
                "force_new or a validator"
            )

    @property
    def is_required(self) -> bool:
        return self.requirement == Requirement.REQUIRED

    @property
    def is_computed(self) -> bool:
        return self.requirement == Requirement.COMPUTED

    @property
    def is_collection(self) -> bool:
        return self.type in (AttributeType.STRING_LIST, AttributeType.STRING_MAP)

    def default_value(self) -> Any:
        """Return a private copy of the declared default."""
        return copy.deepcopy(self.default)

    def empty_value(self) -> Any:
        """Return the empty value for collections, None for scalars."""
        if self.type == AttributeType.STRING_LIST:
            return []
        if self.type == AttributeType.STRING_MAP:
            return {}
        return None

    def coerce(self, value: Any, strict: bool) -> Any:
        """Check a value against the attribute type.

        Args:
            value: Candidate value (not None).
            strict: Reject values that would need conversion.

        Returns:
            The value as the attribute's Python type.

        Raises:
            ValueError: If the value does not match. The message never
                contains the value itself.
        """
        try:
            return _TYPE_ADAPTERS[self.type].validate_python(value, strict=strict)
        except ValidationError as e:
            first = e.errors()[0]
            raise ValueError(f"expected {self.type.value}: {first['msg']}") from None

    def mask(self, value: Any) -> Any:
        """Return the value as it may appear in logs and reprs."""
        if self.sensitive and value is not None:
            return SENSITIVE_PLACEHOLDER
        return value


# =============================================================================
# Specs
# =============================================================================


class ResourceSpec(Mapping[str, Any]):
    """Ordered, schema-checked mapping of attribute name to value.

    Instances are immutable; use evolve() to derive a modified copy.
    Lists and maps are copied on the way in and on the way out, so
    mutating a returned value never changes the spec.
    Build instances through ResourceSchema.parse() (desired state) or
    translator.from_remote_payload() (observed state).
    """

    __slots__ = ("_schema", "_values")

    def __init__(self, schema: ResourceSchema, values: Mapping[str, Any]) -> None:
        self._schema = schema
        self._values = {
            attr.name: copy.deepcopy(values.get(attr.name)) for attr in schema.attributes
        }

    @property
    def schema(self) -> ResourceSchema:
        return self._schema

    def __getitem__(self, name: str) -> Any:
        value = self._values[name]
        if isinstance(value, (list, dict)):
            return copy.deepcopy(value)
        return value

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        shown = {
            attr.name: attr.mask(self._values[attr.name]) for attr in self._schema.attributes
        }
        return f"ResourceSpec({self._schema.name}, {shown!r})"

    def settable_values(self) -> dict[str, Any]:
        """Return the caller-owned (non-computed) values."""
        return {attr.name: self[attr.name] for attr in self._schema.settable}

    def evolve(self, **changes: Any) -> ResourceSpec:
        """Return a copy with some settable attributes changed.

        Raises:
            SchemaError: If a change is unknown, computed, or invalid.
        """
        values = self.settable_values()
        values.update(changes)
        spec = self._schema.parse(values, partial=True)
        computed = {attr.name: self._values[attr.name] for attr in self._schema.computed}
        return ResourceSpec(self._schema, {**spec._values, **computed})


class ResourceSchema:
    """Ordered attribute table for one resource kind."""

    def __init__(self, name: str, attributes: Iterable[AttributeDescriptor]) -> None:
        self._name = name
        self._attributes = tuple(attributes)
        self._by_name: dict[str, AttributeDescriptor] = {}
        remote_names: set[str] = set()

        for attr in self._attributes:
            if attr.name in self._by_name:
                raise ValueError(f"Duplicate attribute '{attr.name}' in schema '{name}'")
            if attr.remote_name in remote_names:
                raise ValueError(
                    f"Duplicate remote field '{attr.remote_name}' in schema '{name}'"
                )
            self._by_name[attr.name] = attr
            remote_names.add(attr.remote_name)

    @property
    def name(self) -> str:
        return self._name

    @property
    def attributes(self) -> tuple[AttributeDescriptor, ...]:
        return self._attributes

    @property
    def settable(self) -> tuple[AttributeDescriptor, ...]:
        return tuple(attr for attr in self._attributes if not attr.is_computed)

    @property
    def computed(self) -> tuple[AttributeDescriptor, ...]:
        return tuple(attr for attr in self._attributes if attr.is_computed)

    @property
    def mutable(self) -> tuple[AttributeDescriptor, ...]:
        """Settable attributes that can be updated in place."""
        return tuple(attr for attr in self.settable if not attr.force_new)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def attribute(self, name: str) -> AttributeDescriptor:
        """Look up a descriptor by local name.

        Raises:
            SchemaError: If the schema has no such attribute.
        """
        try:
            return self._by_name[name]
        except KeyError:
            raise SchemaError(f"Schema '{self._name}' has no attribute '{name}'") from None

    def parse(self, values: Mapping[str, Any], *, partial: bool = False) -> ResourceSpec:
        """Validate caller-declared desired state into a ResourceSpec.

        Undeclared optional attributes take their schema default. Computed
        attributes are left empty; they are populated from remote payloads.

        Args:
            values: Desired attribute values keyed by local name.
            partial: Skip the required-attribute check.

        Returns:
            Validated spec.

        Raises:
            SchemaError: Listing every problem found.
        """
        errors: list[str] = []

        for key in values:
            attr = self._by_name.get(key)
            if attr is None:
                errors.append(f"{key}: unknown attribute")
            elif attr.is_computed and values[key] is not None:
                errors.append(f"{key}: computed attribute cannot be declared")

        resolved: dict[str, Any] = {}
        for attr in self.settable:
            raw = values.get(attr.name)
            if raw is None:
                resolved[attr.name] = attr.default_value()
                continue
            try:
                value = attr.coerce(raw, strict=True)
                if attr.validator is not None:
                    attr.validator(value)
            except ValueError as e:
                errors.append(f"{attr.name}: {e}")
                continue
            resolved[attr.name] = value

        if not partial:
            errors.extend(
                f"{attr.name}: required attribute is missing"
                for attr in self.settable
                if attr.is_required and values.get(attr.name) is None
            )

        if errors:
            raise SchemaError(f"Invalid {self._name} spec", errors)

        return ResourceSpec(self, resolved)

    def check_required(self, spec: ResourceSpec) -> None:
        """Ensure every required attribute has a value.

        Raises:
            SchemaError: Naming the missing attributes.
        """
        missing = [
            f"{attr.name}: required attribute is missing"
            for attr in self.settable
            if attr.is_required and spec.get(attr.name) is None
        ]
        if missing:
            raise SchemaError(f"Invalid {self._name} spec", missing)
