"""Pagination Response Analyzer - how a list response says "there is more".

Only the envelope object of a list response is inspected. Rules run in a
fixed order and the first structural match decides:

1. relay: a ``pageInfo`` object exposing ``hasNextPage`` and/or ``endCursor``
2. cursor: a scalar field named like a next-page cursor
3. hasMore: a boolean field named like a has-more flag
4. offset: a numeric field named like a total count

Field names are compared case-insensitively; recorded names and paths use
the declared spelling.
"""

from __future__ import annotations

import logging

from entityscope.models import PaginationResponseInfo, ResponsePaginationStyle
from entityscope.rules import Rule, first_match
from entityscope.shapes import TypeShape

logger = logging.getLogger(__name__)

PAGE_INFO_FIELD = "pageInfo"
RELAY_HAS_NEXT_FIELD = "hasNextPage"
RELAY_END_CURSOR_FIELD = "endCursor"

CURSOR_FIELD_NAMES: tuple[str, ...] = (
    "nextCursor", "cursor", "endCursor", "after", "nextPageToken", "next_cursor", "next_page_token",
)
HAS_MORE_FIELD_NAMES: tuple[str, ...] = (
    "hasMore", "hasNextPage", "hasNext", "moreResults", "has_more", "has_next_page", "has_next",
)
TOTAL_FIELD_NAMES: tuple[str, ...] = (
    "total", "totalCount", "count", "totalItems", "totalResults", "total_count", "total_items",
)

Subject = tuple[TypeShape, tuple[str, ...]]


def _first_field(
    shape: TypeShape, names: tuple[str, ...], scalar_type: str | None = None
) -> str | None:
    for name in names:
        hit = shape.field_ci(name)
        if hit is None:
            continue
        declared, field_shape = hit
        if not field_shape.is_scalar:
            continue
        if scalar_type is not None and field_shape.scalar_type != scalar_type:
            continue
        return declared
    return None


def _relay(subject: Subject) -> PaginationResponseInfo | None:
    shape, prefix = subject
    hit = shape.field_ci(PAGE_INFO_FIELD)
    if hit is None or not hit[1].is_object:
        return None
    page_info_name, page_info = hit
    has_next = page_info.field_ci(RELAY_HAS_NEXT_FIELD)
    end_cursor = page_info.field_ci(RELAY_END_CURSOR_FIELD)
    if has_next is None and end_cursor is None:
        return None
    base = (*prefix, page_info_name)
    return PaginationResponseInfo(
        style=ResponsePaginationStyle.RELAY,
        next_cursor_field=end_cursor[0] if end_cursor else None,
        next_cursor_path=(*base, end_cursor[0]) if end_cursor else (),
        has_more_field=has_next[0] if has_next else None,
        has_more_path=(*base, has_next[0]) if has_next else (),
    )


def _cursor(subject: Subject) -> PaginationResponseInfo | None:
    shape, prefix = subject
    name = _first_field(shape, CURSOR_FIELD_NAMES)
    if name is None:
        return None
    return PaginationResponseInfo(
        style=ResponsePaginationStyle.CURSOR,
        next_cursor_field=name,
        next_cursor_path=(*prefix, name),
    )


def _has_more(subject: Subject) -> PaginationResponseInfo | None:
    shape, prefix = subject
    name = _first_field(shape, HAS_MORE_FIELD_NAMES, "boolean")
    if name is None:
        return None
    return PaginationResponseInfo(
        style=ResponsePaginationStyle.HAS_MORE,
        has_more_field=name,
        has_more_path=(*prefix, name),
    )


def _total(subject: Subject) -> PaginationResponseInfo | None:
    shape, prefix = subject
    name = _first_field(shape, TOTAL_FIELD_NAMES, "number")
    if name is None:
        return None
    return PaginationResponseInfo(
        style=ResponsePaginationStyle.OFFSET,
        total_field=name,
        total_path=(*prefix, name),
    )


RESPONSE_RULES: tuple[Rule[Subject, PaginationResponseInfo], ...] = (
    Rule("relay", _relay),
    Rule("cursor", _cursor),
    Rule("has-more", _has_more),
    Rule("total", _total),
)


def analyze_pagination_response(
    shape: TypeShape, *, prefix: tuple[str, ...] = ()
) -> PaginationResponseInfo:
    """Classify response-side pagination of a list response envelope.

    Args:
        shape: The envelope object (a bare array yields ``none``).
        prefix: Path from the raw response root to ``shape``, prepended to
            every recorded path. GraphQL passes the response key.

    Returns:
        Populated :class:`PaginationResponseInfo`; style ``none`` when no
        rule matched.
    """
    if not shape.is_object:
        return PaginationResponseInfo()
    hit = first_match(RESPONSE_RULES, (shape, prefix))
    if hit is None:
        return PaginationResponseInfo()
    logger.debug(f"response pagination of {shape.name or 'response'}: {hit[0]}")
    return hit[1]


__all__ = [
    "CURSOR_FIELD_NAMES",
    "HAS_MORE_FIELD_NAMES",
    "TOTAL_FIELD_NAMES",
    "RESPONSE_RULES",
    "analyze_pagination_response",
]
