"""Infinite-Query Planner - how to walk an entity's list page by page.

Combines the request-side pagination style with the response-side signal:

=================  ======================  ==================================
request            response                next page
=================  ======================  ==================================
cursor / relay     cursor / relay          the response cursor, or stop when
                                           the has-more flag is false
offset             offset (total)          ``last + size`` while below total
offset             hasMore                 ``last + size`` while flag is true
page               hasMore / relay         ``last + 1`` while flag is true
=================  ======================  ==================================

Anything else is not inferable and yields one warning, unless the caller
overrides the accessor with ``nextPageParamPath``, which always wins.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from entityscope.analysis.capabilities import page_param_name
from entityscope.config.overrides import InfiniteQueryOverride
from entityscope.models import (
    Entity,
    PaginationCapabilities,
    PaginationResponseInfo,
    PaginationStyle,
    ResponsePaginationStyle,
    to_dict,
)
from entityscope.naming import split_path

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20

_CURSOR_REQUESTS = frozenset({PaginationStyle.CURSOR, PaginationStyle.RELAY})
_CURSOR_RESPONSES = frozenset({ResponsePaginationStyle.CURSOR, ResponsePaginationStyle.RELAY})


class NextPageStrategy(Enum):
    """How the next page parameter is computed from the last page."""

    RESPONSE_CURSOR = "response-cursor"
    OFFSET_TOTAL = "offset-total"
    OFFSET_HAS_MORE = "offset-has-more"
    PAGE_HAS_MORE = "page-has-more"
    PATH = "path"


@dataclass(frozen=True)
class NextPageRule:
    """A next-page formula that can be evaluated or rendered.

    Attributes:
        strategy: Which formula applies.
        cursor_path: Path to the next cursor (``RESPONSE_CURSOR``/``PATH``).
        has_more_path: Path to a boolean gate, empty when ungated.
        total_path: Path to the total count (``OFFSET_TOTAL``).
        page_size: Step added to an offset.
    """

    strategy: NextPageStrategy
    cursor_path: tuple[str, ...] = ()
    has_more_path: tuple[str, ...] = ()
    total_path: tuple[str, ...] = ()
    page_size: int = DEFAULT_PAGE_SIZE

    def evaluate(self, last_page: Any, last_page_param: Any = None) -> Any:
        """Next page parameter, or None when there are no more pages."""
        if self.has_more_path and not _lookup(last_page, self.has_more_path):
            return None

        if self.strategy in (NextPageStrategy.RESPONSE_CURSOR, NextPageStrategy.PATH):
            value = _lookup(last_page, self.cursor_path)
            return None if value in (None, "") else value

        if self.strategy is NextPageStrategy.OFFSET_HAS_MORE:
            return (last_page_param or 0) + self.page_size

        if self.strategy is NextPageStrategy.PAGE_HAS_MORE:
            return (last_page_param or 1) + 1

        if self.strategy is NextPageStrategy.OFFSET_TOTAL:
            total = _lookup(last_page, self.total_path)
            following = (last_page_param or 0) + self.page_size
            if isinstance(total, (int, float)) and following < total:
                return following
            return None

        return None

    def expression(self) -> str:
        """Render as an accessor expression over ``lastPage``/``lastPageParam``."""
        gate = f"lastPage.{'.'.join(self.has_more_path)}" if self.has_more_path else None

        if self.strategy in (NextPageStrategy.RESPONSE_CURSOR, NextPageStrategy.PATH):
            body = f"lastPage.{'.'.join(self.cursor_path)}"
        elif self.strategy is NextPageStrategy.OFFSET_HAS_MORE:
            body = f"(lastPageParam ?? 0) + {self.page_size}"
        elif self.strategy is NextPageStrategy.PAGE_HAS_MORE:
            body = "(lastPageParam ?? 1) + 1"
        else:
            following = f"(lastPageParam ?? 0) + {self.page_size}"
            total = f"lastPage.{'.'.join(self.total_path)}"
            return f"{following} < {total} ? {following} : undefined"

        if gate is None:
            return body
        return f"{gate} ? {body} : undefined"


@dataclass(frozen=True)
class InfiniteQueryPlan:
    """Iteration recipe for one list operation."""

    operation_name: str
    initial_page_param: Any
    page_param_name: str | None
    next_page: NextPageRule

    def next_page_param(
        self,
        last_page: Any,
        all_pages: Sequence[Any] = (),
        last_page_param: Any = None,
    ) -> Any:
        """Compute the parameter for the page after ``last_page``.

        Args:
            last_page: Raw response of the most recent page.
            all_pages: Every page fetched so far (unused by the inferred
                formulas, accepted for signature compatibility).
            last_page_param: The parameter that fetched ``last_page``.

        Returns:
            The next parameter, or None when iteration should stop.
        """
        return self.next_page.evaluate(last_page, last_page_param)

    def expression(self) -> str:
        return self.next_page.expression()

    def to_dict(self) -> dict[str, Any]:
        result = to_dict(self)
        result["expression"] = self.expression()
        return result


@dataclass(frozen=True)
class NotInferable:
    """No plan could be produced.

    ``warning`` is None when nothing went wrong (the operation does not
    paginate, or planning was disabled by an override).
    """

    operation_name: str
    reason: str
    warning: str | None = None


def plan_infinite_query(
    entity: Entity,
    override: InfiniteQueryOverride | None = None,
    *,
    default_page_size: int = DEFAULT_PAGE_SIZE,
) -> InfiniteQueryPlan | NotInferable:
    """Plan incremental pagination for an entity's list operation.

    Args:
        entity: A discovered entity.
        override: Per-operation override, keyed by operation name in
            :class:`~entityscope.config.DiscoveryOverrides.queries`.
        default_page_size: Step for offset arithmetic when the override
            does not set ``pageSize``.

    Returns:
        An :class:`InfiniteQueryPlan`, or :class:`NotInferable`.
    """
    operation = entity.list_query.operation_name
    request = entity.pagination_capabilities
    response = entity.pagination_response
    page_size = (override.page_size if override else None) or default_page_size

    if override is not None and override.disabled:
        return NotInferable(operation, "disabled by override")

    if override is not None and override.next_page_param_path:
        rule = NextPageRule(
            NextPageStrategy.PATH,
            cursor_path=split_path(override.next_page_param_path),
            page_size=page_size,
        )
        return _plan(operation, request, rule, override)

    if request.style is PaginationStyle.NONE:
        return NotInferable(operation, "operation does not accept pagination parameters")

    rule = _infer_rule(request, response, page_size)
    if rule is None:
        warning = (
            f'Operation "{operation}" has pagination parameters '
            f"({page_param_name(request) or request.style.value}) but its response pagination "
            f"({response.style.value}) cannot drive {request.style.value} pagination. "
            f"Skipping infinite query plan. "
            f"Configure 'queries.{operation}.nextPageParamPath' in the overrides to enable."
        )
        logger.warning(warning)
        return NotInferable(
            operation,
            f"{request.style.value} request with {response.style.value} response",
            warning,
        )
    return _plan(operation, request, rule, override)


def _infer_rule(
    request: PaginationCapabilities,
    response: PaginationResponseInfo,
    page_size: int,
) -> NextPageRule | None:
    if request.style in _CURSOR_REQUESTS:
        if response.style in _CURSOR_RESPONSES and response.next_cursor_path:
            return NextPageRule(
                NextPageStrategy.RESPONSE_CURSOR,
                cursor_path=response.next_cursor_path,
                has_more_path=response.has_more_path,
                page_size=page_size,
            )
        return None

    if request.style is PaginationStyle.OFFSET:
        if response.style is ResponsePaginationStyle.OFFSET and response.total_path:
            return NextPageRule(
                NextPageStrategy.OFFSET_TOTAL, total_path=response.total_path, page_size=page_size
            )
        if response.style is ResponsePaginationStyle.HAS_MORE:
            return NextPageRule(
                NextPageStrategy.OFFSET_HAS_MORE,
                has_more_path=response.has_more_path,
                page_size=page_size,
            )
        return None

    if request.style is PaginationStyle.PAGE and _has_more_signal(response):
        return NextPageRule(
            NextPageStrategy.PAGE_HAS_MORE, has_more_path=response.has_more_path, page_size=page_size
        )
    return None


def _has_more_signal(response: PaginationResponseInfo) -> bool:
    if response.style is ResponsePaginationStyle.HAS_MORE:
        return True
    return response.style is ResponsePaginationStyle.RELAY and bool(response.has_more_path)


def _plan(
    operation: str,
    request: PaginationCapabilities,
    rule: NextPageRule,
    override: InfiniteQueryOverride | None,
) -> InfiniteQueryPlan:
    if override is not None and override.has_initial_page_param:
        initial = override.initial_page_param
    else:
        initial = default_initial_page_param(request)
    return InfiniteQueryPlan(
        operation_name=operation,
        initial_page_param=initial,
        page_param_name=page_param_name(request),
        next_page=rule,
    )


def default_initial_page_param(request: PaginationCapabilities) -> int | None:
    if request.style is PaginationStyle.OFFSET:
        return 0
    if request.style is PaginationStyle.PAGE:
        return 1
    return None


def _lookup(data: Any, path: tuple[str, ...]) -> Any:
    current = data
    for part in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "InfiniteQueryPlan",
    "NextPageRule",
    "NextPageStrategy",
    "NotInferable",
    "default_initial_page_param",
    "plan_infinite_query",
]
