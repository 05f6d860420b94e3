"""Capability Analyzer - classify filter, sort and pagination support.

Looks only at the *request side* of a list operation: argument names and,
for GraphQL, the declared input types of those arguments. Each concern is a
chain of :class:`~entityscope.rules.Rule` objects evaluated first-match-wins,
so classification is deterministic for a fixed argument list.

Filter chains differ per source family and are supplied by the adapter:

- REST: ``filter[field]`` / ``filter[field][op]`` -> jsonapi, then operator
  suffixes (``price_gte``) -> rest-simple, then any leftover non-reserved
  parameter -> rest-simple.
- GraphQL: a ``where``/``filter``/``filters`` argument of input-object type,
  classified hasura -> prisma -> custom from its type name and fields.

Sort and pagination chains are shared.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from entityscope.models import (
    FilterCapabilities,
    FilterStyle,
    PaginationCapabilities,
    PaginationStyle,
    PredicateMapping,
    QueryCapabilities,
    SortCapabilities,
)
from entityscope.rules import Rule, first_match
from entityscope.shapes import ArgumentDescriptor, TypeShape

logger = logging.getLogger(__name__)

Arguments = Sequence[ArgumentDescriptor]

# =============================================================================
# Name tables
# =============================================================================

FILTER_ARG_NAMES: tuple[str, ...] = ("where", "filter", "filters")

HASURA_FILTER_TYPE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"_bool_exp$"),
    re.compile(r"_where$"),
)
HASURA_FILTER_FIELDS: tuple[str, ...] = (
    "_eq", "_neq", "_lt", "_lte", "_gt", "_gte", "_in", "_nin", "_and", "_or", "_not",
)
PRISMA_FILTER_TYPE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"WhereInput$"),
    re.compile(r"WhereUniqueInput$"),
)
PRISMA_FILTER_FIELDS: tuple[str, ...] = (
    "equals", "not", "in", "notIn", "lt", "lte", "gt", "gte",
    "contains", "startsWith", "endsWith", "AND", "OR", "NOT",
)

HASURA_ORDER_BY_PATTERNS: tuple[re.Pattern[str], ...] = (re.compile(r"_order_by$"),)
PRISMA_ORDER_BY_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"OrderByInput$"),
    re.compile(r"OrderByWithRelationInput$"),
)

REST_OPERATOR_SUFFIXES: tuple[str, ...] = (
    "_eq", "_ne", "_lt", "_lte", "_gt", "_gte", "_in", "_nin", "_like", "_contains",
)

SORT_PARAM_NAMES: tuple[str, ...] = (
    "sort", "sortBy", "sort_by", "orderBy", "order_by", "$orderby", "order",
)
LIMIT_PARAM_NAMES: tuple[str, ...] = (
    "limit", "first", "take", "$top", "per_page", "perPage", "pageSize",
)
OFFSET_PARAM_NAMES: tuple[str, ...] = ("offset", "skip", "$skip", "start")
PAGE_PARAM_NAMES: tuple[str, ...] = ("page", "pageNumber", "page_number")
PER_PAGE_PARAM_NAMES: tuple[str, ...] = ("per_page", "perPage", "pageSize", "limit")
CURSOR_PARAM_NAMES: tuple[str, ...] = ("cursor", "after", "before")
RELAY_SIZE_NAMES: tuple[str, ...] = ("first", "last")
RELAY_CURSOR_NAMES: tuple[str, ...] = ("after", "before")

RESERVED_PARAM_NAMES: frozenset[str] = frozenset(
    name.lower()
    for name in (
        *SORT_PARAM_NAMES,
        *LIMIT_PARAM_NAMES,
        *OFFSET_PARAM_NAMES,
        *PAGE_PARAM_NAMES,
        *CURSOR_PARAM_NAMES,
        "last",
    )
)

_JSONAPI_FIELD_RE = re.compile(r"^filter\[([^\]]+)\]")
_JSONAPI_OPERATOR_RE = re.compile(r"^filter\[[^\]]+\]\[([^\]]+)\]")


# =============================================================================
# Helpers
# =============================================================================


def find_argument(arguments: Arguments, names: Sequence[str]) -> ArgumentDescriptor | None:
    """First argument matching ``names`` (in ``names`` order), case-insensitive."""
    by_lower = {arg.name.lower(): arg for arg in reversed(arguments)}
    for name in names:
        arg = by_lower.get(name.lower())
        if arg is not None:
            return arg
    return None


def _find_name(arguments: Arguments, names: Sequence[str]) -> str | None:
    arg = find_argument(arguments, names)
    return arg.name if arg is not None else None


def _has(arguments: Arguments, names: Sequence[str]) -> bool:
    return find_argument(arguments, names) is not None


def _matches_any(name: str | None, patterns: Sequence[re.Pattern[str]]) -> bool:
    return name is not None and any(pattern.search(name) for pattern in patterns)


# =============================================================================
# Filter analysis
# =============================================================================

FilterSubject = tuple[str | None, frozenset[str]]

FILTER_STYLE_RULES: tuple[Rule[FilterSubject, FilterStyle], ...] = (
    Rule(
        "hasura-type-name",
        lambda s: FilterStyle.HASURA if _matches_any(s[0], HASURA_FILTER_TYPE_PATTERNS) else None,
    ),
    Rule(
        "hasura-fields",
        lambda s: FilterStyle.HASURA if any(f in s[1] for f in HASURA_FILTER_FIELDS) else None,
    ),
    Rule(
        "prisma-type-name",
        lambda s: FilterStyle.PRISMA if _matches_any(s[0], PRISMA_FILTER_TYPE_PATTERNS) else None,
    ),
    Rule(
        "prisma-fields",
        lambda s: FilterStyle.PRISMA if any(f in s[1] for f in PRISMA_FILTER_FIELDS) else None,
    ),
)


def detect_filter_style(input_type: TypeShape) -> FilterStyle:
    """Classify a GraphQL filter input object; ``custom`` when unrecognized."""
    subject = (input_type.name, frozenset(input_type.field_names()))
    hit = first_match(FILTER_STYLE_RULES, subject)
    return hit[1] if hit else FilterStyle.CUSTOM


def detect_filter_style_from_type_name(type_name: str) -> FilterStyle | None:
    """Classify by type name alone, without looking at fields."""
    if _matches_any(type_name, HASURA_FILTER_TYPE_PATTERNS):
        return FilterStyle.HASURA
    if _matches_any(type_name, PRISMA_FILTER_TYPE_PATTERNS):
        return FilterStyle.PRISMA
    return None


def _graphql_filter_argument(arguments: Arguments) -> FilterCapabilities | None:
    for name in FILTER_ARG_NAMES:
        arg = find_argument(arguments, (name,))
        if arg is None or not arg.shape.is_object:
            continue
        return FilterCapabilities(
            has_filtering=True,
            filter_style=detect_filter_style(arg.shape),
            filter_input_type_name=arg.shape.name,
            filter_arg_name=arg.name,
        )
    return None


def _jsonapi_params(arguments: Arguments) -> FilterCapabilities | None:
    params = tuple(
        arg.name for arg in arguments if arg.name.startswith("filter[") and arg.name.endswith("]")
    )
    if not params:
        return None
    return FilterCapabilities(has_filtering=True, filter_style=FilterStyle.JSONAPI, filter_params=params)


def _operator_suffix_params(arguments: Arguments) -> FilterCapabilities | None:
    params = tuple(arg.name for arg in arguments if arg.name.endswith(REST_OPERATOR_SUFFIXES))
    if not params:
        return None
    return FilterCapabilities(
        has_filtering=True, filter_style=FilterStyle.REST_SIMPLE, filter_params=params
    )


def _residual_params(arguments: Arguments) -> FilterCapabilities | None:
    params = tuple(
        arg.name
        for arg in arguments
        if arg.name.lower() not in RESERVED_PARAM_NAMES
        and not arg.name.startswith("$")
        and "[" not in arg.name
    )
    if not params:
        return None
    return FilterCapabilities(
        has_filtering=True, filter_style=FilterStyle.REST_SIMPLE, filter_params=params
    )


GRAPHQL_FILTER_RULES: tuple[Rule[Arguments, FilterCapabilities], ...] = (
    Rule("filter-argument", _graphql_filter_argument),
)

REST_FILTER_RULES: tuple[Rule[Arguments, FilterCapabilities], ...] = (
    Rule("jsonapi", _jsonapi_params),
    Rule("operator-suffix", _operator_suffix_params),
    Rule("residual", _residual_params),
)


def extract_jsonapi_filter_field(param_name: str) -> str | None:
    """``filter[price][gte]`` -> ``price``."""
    match = _JSONAPI_FIELD_RE.match(param_name)
    return match.group(1) if match else None


def extract_jsonapi_filter_operator(param_name: str) -> str | None:
    """``filter[price][gte]`` -> ``gte``; ``filter[status]`` -> None (equality)."""
    match = _JSONAPI_OPERATOR_RE.match(param_name)
    return match.group(1) if match else None


def extract_rest_simple_filter(param_name: str) -> tuple[str, str]:
    """``price_gte`` -> ``("price", "gte")``; ``status`` -> ``("status", "eq")``."""
    for suffix in sorted(REST_OPERATOR_SUFFIXES, key=len, reverse=True):
        if param_name.endswith(suffix) and len(param_name) > len(suffix):
            return param_name[: -len(suffix)], suffix[1:]
    return param_name, "eq"


# =============================================================================
# Sort analysis
# =============================================================================


def detect_order_by_style(type_name: str | None) -> PredicateMapping | None:
    if _matches_any(type_name, HASURA_ORDER_BY_PATTERNS):
        return PredicateMapping.HASURA
    if _matches_any(type_name, PRISMA_ORDER_BY_PATTERNS):
        return PredicateMapping.PRISMA
    return None


def analyze_sort(arguments: Arguments, names: Sequence[str] = SORT_PARAM_NAMES) -> SortCapabilities:
    arg = find_argument(arguments, names)
    if arg is None:
        return SortCapabilities()
    return SortCapabilities(
        has_sorting=True,
        sort_param_name=arg.name,
        order_by_input_type_name=arg.shape.name if arg.shape.is_object else None,
    )


# =============================================================================
# Pagination analysis (request side)
# =============================================================================


def _relay(arguments: Arguments) -> PaginationCapabilities | None:
    if not (_has(arguments, RELAY_SIZE_NAMES) and _has(arguments, RELAY_CURSOR_NAMES)):
        return None
    return PaginationCapabilities(
        style=PaginationStyle.RELAY,
        limit_param=_find_name(arguments, RELAY_SIZE_NAMES),
        cursor_param=_find_name(arguments, RELAY_CURSOR_NAMES),
    )


def _cursor(arguments: Arguments) -> PaginationCapabilities | None:
    arg = find_argument(arguments, CURSOR_PARAM_NAMES)
    # Prisma's ``cursor: PetWhereUniqueInput`` is a seek position, not a token.
    if arg is None or arg.shape.is_object:
        return None
    return PaginationCapabilities(
        style=PaginationStyle.CURSOR,
        limit_param=_find_name(arguments, LIMIT_PARAM_NAMES),
        cursor_param=arg.name,
    )


def _page(arguments: Arguments) -> PaginationCapabilities | None:
    page = _find_name(arguments, PAGE_PARAM_NAMES)
    if page is None:
        return None
    return PaginationCapabilities(
        style=PaginationStyle.PAGE,
        page_param=page,
        per_page_param=_find_name(arguments, PER_PAGE_PARAM_NAMES),
    )


def _take_skip(arguments: Arguments) -> PaginationCapabilities | None:
    if not _has(arguments, ("take", "skip")):
        return None
    return PaginationCapabilities(
        style=PaginationStyle.OFFSET,
        limit_param=_find_name(arguments, ("take",)),
        offset_param=_find_name(arguments, ("skip",)),
    )


def _limit_offset(arguments: Arguments) -> PaginationCapabilities | None:
    limit = _find_name(arguments, LIMIT_PARAM_NAMES)
    offset = _find_name(arguments, OFFSET_PARAM_NAMES)
    if limit is None and offset is None:
        return None
    return PaginationCapabilities(style=PaginationStyle.OFFSET, limit_param=limit, offset_param=offset)


PAGINATION_RULES: tuple[Rule[Arguments, PaginationCapabilities], ...] = (
    Rule("relay", _relay),
    Rule("cursor", _cursor),
    Rule("page", _page),
    Rule("take-skip", _take_skip),
    Rule("limit-offset", _limit_offset),
)


def analyze_pagination(
    arguments: Arguments,
    rules: Sequence[Rule[Arguments, PaginationCapabilities]] = PAGINATION_RULES,
) -> PaginationCapabilities:
    hit = first_match(rules, arguments)
    return hit[1] if hit else PaginationCapabilities()


def page_param_name(pagination: PaginationCapabilities) -> str | None:
    """The request parameter that carries the page token between requests."""
    if pagination.style in (PaginationStyle.CURSOR, PaginationStyle.RELAY):
        return pagination.cursor_param
    if pagination.style is PaginationStyle.OFFSET:
        return pagination.offset_param
    if pagination.style is PaginationStyle.PAGE:
        return pagination.page_param
    return None


# =============================================================================
# Analyzer
# =============================================================================


class CapabilityAnalyzer:
    """Classifies filter, sort and pagination support of a list operation.

    Args:
        filter_rules: Adapter-specific filter chain.
        sort_names: Recognized sort argument names, in priority order.
        pagination_rules: Request-side pagination chain.
    """

    def __init__(
        self,
        filter_rules: Sequence[Rule[Arguments, FilterCapabilities]],
        sort_names: Sequence[str] = SORT_PARAM_NAMES,
        pagination_rules: Sequence[Rule[Arguments, PaginationCapabilities]] = PAGINATION_RULES,
    ) -> None:
        self.filter_rules = tuple(filter_rules)
        self.sort_names = tuple(sort_names)
        self.pagination_rules = tuple(pagination_rules)

    def analyze(self, arguments: Arguments) -> QueryCapabilities:
        return QueryCapabilities(
            filter=self.analyze_filter(arguments),
            sort=analyze_sort(arguments, self.sort_names),
            pagination=analyze_pagination(arguments, self.pagination_rules),
        )

    def analyze_filter(self, arguments: Arguments) -> FilterCapabilities:
        hit = first_match(self.filter_rules, arguments)
        if hit is None:
            return FilterCapabilities()
        rule_name, capabilities = hit
        logger.debug(f"filter rule '{rule_name}' matched -> {capabilities.filter_style}")
        return capabilities


def infer_predicate_mapping(capabilities: QueryCapabilities) -> PredicateMapping | None:
    """Pick a translator convention from detected capabilities.

    A recognized filter style wins; otherwise an order-by input type that
    follows a known naming convention decides; otherwise None.
    """
    if capabilities.filter.has_filtering:
        mapping = PredicateMapping.from_filter_style(capabilities.filter.filter_style)
        if mapping is not None:
            return mapping
    return detect_order_by_style(capabilities.sort.order_by_input_type_name)


__all__ = [
    "CapabilityAnalyzer",
    "GRAPHQL_FILTER_RULES",
    "REST_FILTER_RULES",
    "PAGINATION_RULES",
    "FILTER_STYLE_RULES",
    "SORT_PARAM_NAMES",
    "REST_OPERATOR_SUFFIXES",
    "RESERVED_PARAM_NAMES",
    "analyze_pagination",
    "analyze_sort",
    "detect_filter_style",
    "detect_filter_style_from_type_name",
    "detect_order_by_style",
    "extract_jsonapi_filter_field",
    "extract_jsonapi_filter_operator",
    "extract_rest_simple_filter",
    "find_argument",
    "infer_predicate_mapping",
    "page_param_name",
]
