"""Data model produced by entity discovery.

Every record is a frozen dataclass holding tuples, so an :class:`Entity` is
built once per discovery pass and never mutated afterward. ``to_dict()`` walks
the records in field order, which keeps serialized output byte-identical
across repeated runs on an unchanged schema.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any


class FilterStyle(Enum):
    """Detected request-side filter convention."""

    HASURA = "hasura"
    PRISMA = "prisma"
    JSONAPI = "jsonapi"
    REST_SIMPLE = "rest-simple"
    CUSTOM = "custom"


class PredicateMapping(Enum):
    """Filter conventions a predicate translator can be synthesized for."""

    HASURA = "hasura"
    PRISMA = "prisma"
    JSONAPI = "jsonapi"
    REST_SIMPLE = "rest-simple"

    @classmethod
    def from_filter_style(cls, style: FilterStyle | None) -> PredicateMapping | None:
        if style is None or style is FilterStyle.CUSTOM:
            return None
        return cls(style.value)


class PaginationStyle(Enum):
    """What the request side of a list operation accepts."""

    OFFSET = "offset"
    PAGE = "page"
    CURSOR = "cursor"
    RELAY = "relay"
    NONE = "none"


class ResponsePaginationStyle(Enum):
    """How a list response signals that more data exists."""

    CURSOR = "cursor"
    RELAY = "relay"
    HAS_MORE = "hasMore"
    OFFSET = "offset"
    NONE = "none"


class MutationKind(Enum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class SyncMode(Enum):
    """Full collection fetch vs. predicate push-down."""

    FULL = "full"
    ON_DEMAND = "on-demand"


@dataclass(frozen=True)
class FilterCapabilities:
    """Detected filtering support.

    Attributes:
        has_filtering: Whether the list operation accepts any filter.
        filter_style: Detected convention, ``custom`` when unrecognized.
        filter_params: REST parameter names that carry filters.
        filter_input_type_name: GraphQL input object type of the filter arg.
        filter_arg_name: GraphQL argument that carries the filter (``where``).
    """

    has_filtering: bool = False
    filter_style: FilterStyle | None = None
    filter_params: tuple[str, ...] = ()
    filter_input_type_name: str | None = None
    filter_arg_name: str | None = None


@dataclass(frozen=True)
class SortCapabilities:
    has_sorting: bool = False
    sort_param_name: str | None = None
    order_by_input_type_name: str | None = None


@dataclass(frozen=True)
class PaginationCapabilities:
    """Request-side pagination parameters."""

    style: PaginationStyle = PaginationStyle.NONE
    limit_param: str | None = None
    offset_param: str | None = None
    page_param: str | None = None
    per_page_param: str | None = None
    cursor_param: str | None = None


@dataclass(frozen=True)
class PaginationResponseInfo:
    """Response-side pagination signals.

    ``*_field`` names are relative to the analyzed object; ``*_path`` tuples are
    measured from the raw response root (GraphQL paths begin with the
    response key).
    """

    style: ResponsePaginationStyle = ResponsePaginationStyle.NONE
    next_cursor_field: str | None = None
    next_cursor_path: tuple[str, ...] = ()
    has_more_field: str | None = None
    has_more_path: tuple[str, ...] = ()
    total_field: str | None = None
    total_path: tuple[str, ...] = ()


@dataclass(frozen=True)
class QueryCapabilities:
    filter: FilterCapabilities = field(default_factory=FilterCapabilities)
    sort: SortCapabilities = field(default_factory=SortCapabilities)
    pagination: PaginationCapabilities = field(default_factory=PaginationCapabilities)

    @property
    def has_any(self) -> bool:
        return (
            self.filter.has_filtering
            or self.sort.has_sorting
            or self.pagination.style is not PaginationStyle.NONE
        )


@dataclass(frozen=True)
class Mutation:
    """A CRUD operation attached to an entity."""

    kind: MutationKind
    operation_name: str
    input_type_name: str | None = None
    path_param_name: str | None = None


@dataclass(frozen=True)
class ListQuery:
    """The operation that fetches an entity's collection.

    Attributes:
        operation_name: Operation identifier.
        query_key_tokens: Cache key tokens for the collection.
        params_type_name: Params/variables type name, if the query takes any.
        selector_path: Dotted path from the raw response root to the item
            array. None when the response itself is the array.
        item_path: Path inside each array element to the entity (``node``
            for Relay edges), None when elements are the entities.
    """

    operation_name: str
    query_key_tokens: tuple[str, ...]
    params_type_name: str | None = None
    selector_path: str | None = None
    item_path: str | None = None


@dataclass(frozen=True)
class Entity:
    """A domain type discovered from a list-returning operation."""

    name: str
    type_name: str
    key_field: str
    key_field_type: str
    list_query: ListQuery
    mutations: tuple[Mutation, ...] = ()
    sync_mode: SyncMode | None = None
    predicate_mapping: PredicateMapping | None = None
    filter_capabilities: FilterCapabilities = field(default_factory=FilterCapabilities)
    sort_capabilities: SortCapabilities = field(default_factory=SortCapabilities)
    pagination_capabilities: PaginationCapabilities = field(
        default_factory=PaginationCapabilities
    )
    pagination_response: PaginationResponseInfo = field(default_factory=PaginationResponseInfo)

    def mutation(self, kind: MutationKind) -> Mutation | None:
        """First mutation of the given kind, the one code generation uses."""
        for mutation in self.mutations:
            if mutation.kind is kind:
                return mutation
        return None

    def to_dict(self) -> dict[str, Any]:
        return to_dict(self)


@dataclass(frozen=True)
class DiscoveryResult:
    """Entities plus the human-readable warnings collected while finding them."""

    entities: tuple[Entity, ...] = ()
    warnings: tuple[str, ...] = ()

    def get(self, name: str) -> Entity | None:
        for entity in self.entities:
            if entity.name == name:
                return entity
        return None

    @property
    def entity_names(self) -> list[str]:
        return [entity.name for entity in self.entities]

    def to_dict(self) -> dict[str, Any]:
        return to_dict(self)

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def to_dict(value: Any) -> Any:
    """Serialize model records to plain JSON-compatible structures.

    None-valued fields are dropped; enums become their wire values; tuples
    become lists. Field order follows the dataclass definition.
    """
    if is_dataclass(value) and not isinstance(value, type):
        result: dict[str, Any] = {}
        for f in fields(value):
            item = getattr(value, f.name)
            if item is None:
                continue
            result[f.name] = to_dict(item)
        return result
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [to_dict(item) for item in value]
    if isinstance(value, dict):
        return {key: to_dict(item) for key, item in value.items()}
    return value


__all__ = [
    "FilterStyle",
    "PredicateMapping",
    "PaginationStyle",
    "ResponsePaginationStyle",
    "MutationKind",
    "SyncMode",
    "FilterCapabilities",
    "SortCapabilities",
    "PaginationCapabilities",
    "PaginationResponseInfo",
    "QueryCapabilities",
    "Mutation",
    "ListQuery",
    "Entity",
    "DiscoveryResult",
    "to_dict",
]
