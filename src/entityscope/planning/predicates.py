"""Predicate Translator Synthesizer.

Turns a generic "fetch a subset of rows" request into the native query
arguments of one entity's list operation. Each convention has a fixed
operator table; an operator outside the table raises
:class:`~entityscope.errors.TranslationError` instead of being dropped, so a
translation is either complete or refused.

Example::

    translator = synthesize_translator(entity)
    translator.translate(
        SubsetRequest(
            filters=(FilterClause("price", Operator.GTE, 10),),
            sorts=(SortClause("name", SortDirection.DESC),),
            limit=20,
        )
    )
    # rest-simple -> {"price_gte": 10, "sort": "-name", "limit": 20}
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from entityscope.errors import ErrorContext, TranslationError
from entityscope.models import Entity, PaginationStyle, PredicateMapping
from entityscope.naming import split_path

logger = logging.getLogger(__name__)


class Operator(Enum):
    """Generic comparison operators of a subset request."""

    EQ = "eq"
    NE = "ne"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"
    IN = "in"
    NIN = "nin"
    LIKE = "like"
    CONTAINS = "contains"


class SortDirection(Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class FilterClause:
    """``field`` is a dotted path; ``operator`` may be given as its string value."""

    field: str
    operator: Operator | str
    value: Any


@dataclass(frozen=True)
class SortClause:
    field: str
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True)
class SubsetRequest:
    """Normalized request for a subset of an entity's rows."""

    filters: tuple[FilterClause, ...] = ()
    sorts: tuple[SortClause, ...] = ()
    limit: int | None = None
    offset: int | None = None
    cursor: str | None = None


# Native spelling of each generic operator, per convention.
OPERATOR_TABLES: Mapping[PredicateMapping, Mapping[Operator, str]] = MappingProxyType(
    {
        PredicateMapping.REST_SIMPLE: MappingProxyType({op: f"_{op.value}" for op in Operator}),
        PredicateMapping.JSONAPI: MappingProxyType(
            {op: ("" if op is Operator.EQ else op.value) for op in Operator}
        ),
        PredicateMapping.HASURA: MappingProxyType(
            {
                Operator.EQ: "_eq",
                Operator.NE: "_neq",
                Operator.LT: "_lt",
                Operator.LTE: "_lte",
                Operator.GT: "_gt",
                Operator.GTE: "_gte",
                Operator.IN: "_in",
                Operator.NIN: "_nin",
                Operator.LIKE: "_like",
            }
        ),
        PredicateMapping.PRISMA: MappingProxyType(
            {
                Operator.EQ: "equals",
                Operator.NE: "not",
                Operator.LT: "lt",
                Operator.LTE: "lte",
                Operator.GT: "gt",
                Operator.GTE: "gte",
                Operator.IN: "in",
                Operator.NIN: "notIn",
                Operator.CONTAINS: "contains",
            }
        ),
    }
)


@dataclass(frozen=True)
class TranslatorSpec:
    """Everything needed to translate subset requests for one entity.

    Attributes:
        entity_name: Entity the translator belongs to.
        style: Target convention.
        filter_arg_name: GraphQL argument carrying the filter object.
        sort_param_name: Parameter/argument carrying the sort.
        pagination_style: Request-side pagination style of the entity.
        limit_param: Native name of the page size parameter.
        offset_param: Native name of the offset parameter.
        page_param: Native page-number parameter (page-style REST).
        per_page_param: Native page-size parameter (page-style REST).
        cursor_param: Native cursor parameter.
        bare_eq_fields: REST fields filtered for equality by bare name.
    """

    entity_name: str
    style: PredicateMapping
    filter_arg_name: str = "where"
    sort_param_name: str = "sort"
    pagination_style: PaginationStyle = PaginationStyle.NONE
    limit_param: str = "limit"
    offset_param: str = "offset"
    page_param: str | None = None
    per_page_param: str | None = None
    cursor_param: str | None = None
    bare_eq_fields: frozenset[str] = field(default_factory=frozenset)

    @property
    def operators(self) -> Mapping[Operator, str]:
        return OPERATOR_TABLES[self.style]

    def supports(self, operator: Operator | str) -> bool:
        try:
            return _operator(operator, self.style) in self.operators
        except TranslationError:
            return False

    def translate(self, request: SubsetRequest) -> dict[str, Any]:
        """Map ``request`` to native query arguments.

        Raises:
            TranslationError: If any part of the request cannot be expressed
                in this convention.
        """
        if self.style in (PredicateMapping.HASURA, PredicateMapping.PRISMA):
            result = self._translate_graphql(request)
        else:
            result = self._translate_rest(request)
        self._translate_pagination(request, result)
        return result

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity": self.entity_name,
            "style": self.style.value,
            "operators": [op.value for op in self.operators],
        }

    # -------------------------------------------------------------------------
    # Filters and sorts
    # -------------------------------------------------------------------------

    def _native(self, clause: FilterClause) -> tuple[Operator, str]:
        operator = _operator(clause.operator, self.style)
        native = self.operators.get(operator)
        if native is None:
            raise TranslationError(
                f"Operator '{operator.value}' is not supported by {self.style.value} "
                f"filters of entity {self.entity_name}",
                operator=operator.value,
                style=self.style.value,
                context=ErrorContext(extra={"field": clause.field}),
            )
        return operator, native

    def _translate_rest(self, request: SubsetRequest) -> dict[str, Any]:
        params: dict[str, Any] = {}
        for clause in request.filters:
            operator, native = self._native(clause)
            if self.style is PredicateMapping.JSONAPI:
                key = f"filter[{clause.field}]" + (f"[{native}]" if native else "")
            elif operator is Operator.EQ and clause.field in self.bare_eq_fields:
                key = clause.field
            else:
                key = f"{clause.field}{native}"
            params[key] = clause.value

        if request.sorts:
            params[self.sort_param_name] = ",".join(
                f"{'-' if s.direction is SortDirection.DESC else ''}{s.field}" for s in request.sorts
            )
        return params

    def _translate_graphql(self, request: SubsetRequest) -> dict[str, Any]:
        variables: dict[str, Any] = {}
        conditions = []
        for clause in request.filters:
            _, native = self._native(clause)
            conditions.append(_nest(split_path(clause.field), {native: clause.value}))

        if len(conditions) == 1:
            variables[self.filter_arg_name] = conditions[0]
        elif conditions:
            combinator = "_and" if self.style is PredicateMapping.HASURA else "AND"
            variables[self.filter_arg_name] = {combinator: conditions}

        if request.sorts:
            variables[self.sort_param_name] = [
                _nest(split_path(s.field), s.direction.value) for s in request.sorts
            ]
        return variables

    # -------------------------------------------------------------------------
    # Pagination
    # -------------------------------------------------------------------------

    def _translate_pagination(self, request: SubsetRequest, result: dict[str, Any]) -> None:
        if request.cursor is not None:
            if self.cursor_param is None:
                raise self._unsupported("cursor", "the list operation takes no cursor")
            result[self.cursor_param] = request.cursor

        if self.pagination_style is PaginationStyle.PAGE and self.page_param:
            per_page = self.per_page_param or "perPage"
            if request.limit is not None:
                result[per_page] = request.limit
            if request.offset is not None:
                if not request.limit:
                    raise self._unsupported("offset", "page-numbered pagination needs a limit")
                result[self.page_param] = request.offset // request.limit + 1
            return

        if request.limit is not None:
            result[self.limit_param] = request.limit
        if request.offset is not None:
            if self.pagination_style in (PaginationStyle.CURSOR, PaginationStyle.RELAY):
                raise self._unsupported("offset", "the list operation paginates by cursor")
            result[self.offset_param] = request.offset

    def _unsupported(self, what: str, why: str) -> TranslationError:
        return TranslationError(
            f"Cannot translate {what} for entity {self.entity_name}: {why}",
            style=self.style.value,
        )


# Pagination parameter names used when the entity does not declare its own.
DEFAULT_PAGINATION_PARAMS: Mapping[PredicateMapping, tuple[str, str]] = MappingProxyType(
    {
        PredicateMapping.REST_SIMPLE: ("limit", "offset"),
        PredicateMapping.JSONAPI: ("page[limit]", "page[offset]"),
        PredicateMapping.HASURA: ("limit", "offset"),
        PredicateMapping.PRISMA: ("take", "skip"),
    }
)

DEFAULT_SORT_PARAMS: Mapping[PredicateMapping, str] = MappingProxyType(
    {
        PredicateMapping.REST_SIMPLE: "sort",
        PredicateMapping.JSONAPI: "sort",
        PredicateMapping.HASURA: "order_by",
        PredicateMapping.PRISMA: "orderBy",
    }
)


def synthesize_translator(entity: Entity) -> TranslatorSpec | None:
    """Build the predicate translator for ``entity``.

    Returns:
        A :class:`TranslatorSpec`, or None when the entity has no
        translatable filter convention.
    """
    style = entity.predicate_mapping
    if style is None:
        logger.debug(f"{entity.name}: no predicate mapping, no translator")
        return None

    pagination = entity.pagination_capabilities
    default_limit, default_offset = DEFAULT_PAGINATION_PARAMS[style]
    sort_param = DEFAULT_SORT_PARAMS[style]
    if style is not PredicateMapping.JSONAPI and entity.sort_capabilities.sort_param_name:
        sort_param = entity.sort_capabilities.sort_param_name

    limit_param, offset_param = default_limit, default_offset
    if style is not PredicateMapping.JSONAPI or pagination.style is PaginationStyle.OFFSET:
        limit_param = pagination.limit_param or default_limit
        offset_param = pagination.offset_param or default_offset

    params = set(entity.filter_capabilities.filter_params)
    bare_eq = frozenset(p for p in params if f"{p}_eq" not in params)

    return TranslatorSpec(
        entity_name=entity.name,
        style=style,
        filter_arg_name=entity.filter_capabilities.filter_arg_name or "where",
        sort_param_name=sort_param,
        pagination_style=pagination.style,
        limit_param=limit_param,
        offset_param=offset_param,
        page_param=pagination.page_param,
        per_page_param=pagination.per_page_param,
        cursor_param=pagination.cursor_param,
        bare_eq_fields=bare_eq if style is PredicateMapping.REST_SIMPLE else frozenset(),
    )


def _operator(value: Operator | str, style: PredicateMapping) -> Operator:
    if isinstance(value, Operator):
        return value
    try:
        return Operator(value)
    except ValueError:
        raise TranslationError(
            f"Unknown filter operator '{value}'",
            operator=str(value),
            style=style.value,
        ) from None


def _nest(path: tuple[str, ...], leaf: Any) -> Any:
    """``("owner", "name"), {"_eq": 1}`` -> ``{"owner": {"name": {"_eq": 1}}}``."""
    result = leaf
    for part in reversed(path):
        result = {part: result}
    return result


__all__ = [
    "FilterClause",
    "OPERATOR_TABLES",
    "Operator",
    "SortClause",
    "SortDirection",
    "SubsetRequest",
    "TranslatorSpec",
    "synthesize_translator",
]
