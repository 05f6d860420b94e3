"""Structural descriptors supplied by schema adapters.

The analysis core never touches a ``GraphQLSchema`` or an OpenAPI dict
directly. Adapters wrap their native types in :class:`TypeShape` objects and
describe operations with :class:`QueryDescriptor` and
:class:`MutationDescriptor`; everything downstream works on those.

``TypeShape`` is lazy on purpose: ``fields()`` and ``item()`` are computed on
demand so recursive schemas (``User.friends: [User]``) can be described
without materializing an infinite tree.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class ShapeKind(Enum):
    """Structural category of a type after unwrapping."""

    OBJECT = "object"
    ARRAY = "array"
    SCALAR = "scalar"
    UNKNOWN = "unknown"


class TypeShape(ABC):
    """Adapter-neutral view over a schema type.

    Implementations must return fields in declaration order, and must
    already have stripped nullability wrappers.
    """

    @property
    @abstractmethod
    def kind(self) -> ShapeKind:
        """The structural kind of this type."""

    @property
    @abstractmethod
    def name(self) -> str | None:
        """The named type, or None for anonymous inline types."""

    @abstractmethod
    def item(self) -> TypeShape | None:
        """For arrays, the shape of one element."""

    @abstractmethod
    def fields(self) -> list[tuple[str, TypeShape]]:
        """For objects, ``(field name, field shape)`` pairs in declaration order."""

    @property
    def scalar_type(self) -> str:
        """``string``, ``number`` or ``boolean``. Anything else maps to ``string``."""
        return "string"

    @property
    def is_identifier(self) -> bool:
        """True when this is the schema's canonical identifier scalar."""
        return False

    @property
    def is_array(self) -> bool:
        return self.kind is ShapeKind.ARRAY

    @property
    def is_object(self) -> bool:
        return self.kind is ShapeKind.OBJECT

    @property
    def is_scalar(self) -> bool:
        return self.kind is ShapeKind.SCALAR

    def field_names(self) -> list[str]:
        return [name for name, _ in self.fields()]

    def field(self, name: str) -> TypeShape | None:
        """Look up a field by exact name."""
        for field_name, shape in self.fields():
            if field_name == name:
                return shape
        return None

    def field_ci(self, name: str) -> tuple[str, TypeShape] | None:
        """Look up a field by case-insensitive name, returning its declared name."""
        lowered = name.lower()
        for field_name, shape in self.fields():
            if field_name.lower() == lowered:
                return field_name, shape
        return None

    def __repr__(self) -> str:
        label = self.name or "<anonymous>"
        return f"{type(self).__name__}({self.kind.value} {label})"


@dataclass(frozen=True)
class ArgumentDescriptor:
    """One argument (GraphQL) or query parameter (REST) of a list operation.

    Attributes:
        name: Declared name, case preserved.
        required: Whether the argument is non-null / required.
        shape: Declared type, already unwrapped.
        location: ``argument`` for GraphQL, ``query`` for REST query params.
    """

    name: str
    required: bool
    shape: TypeShape
    location: str = "argument"


@dataclass(frozen=True)
class QueryDescriptor:
    """A list-capable read operation.

    Attributes:
        operation_name: Operation identifier (GraphQL operation name or
            OpenAPI operationId).
        arguments: Declared arguments/parameters in declaration order.
        response: Shape of the raw response.
        response_key: GraphQL response key (root field name or alias). Paths
            measured from the raw response root start with this key.
        path: REST path template, e.g. ``/pets``.
        params_type_name: Name of the generated params/variables type, when
            the operation accepts any.
    """

    operation_name: str
    arguments: tuple[ArgumentDescriptor, ...]
    response: TypeShape
    response_key: str | None = None
    path: str | None = None
    params_type_name: str | None = None

    @property
    def argument_names(self) -> list[str]:
        return [arg.name for arg in self.arguments]

    @property
    def root_prefix(self) -> tuple[str, ...]:
        return (self.response_key,) if self.response_key else ()


@dataclass(frozen=True)
class MutationDescriptor:
    """A write operation that may belong to an entity.

    Attributes:
        operation_name: Operation identifier.
        kind: ``mutation`` for GraphQL, else the lower-case HTTP verb.
        path: REST path template (None for GraphQL).
        has_input: Whether a structured input payload is accepted.
        path_params: Path parameter names in path order (REST only).
    """

    operation_name: str
    kind: str
    path: str | None = None
    has_input: bool = False
    path_params: tuple[str, ...] = ()

    def __str__(self) -> str:
        if self.path:
            return f"{self.kind.upper()} {self.path}"
        return self.operation_name


__all__ = [
    "ShapeKind",
    "TypeShape",
    "ArgumentDescriptor",
    "QueryDescriptor",
    "MutationDescriptor",
]
