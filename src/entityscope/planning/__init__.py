"""Infinite-query plans and predicate translators for discovered entities."""

from entityscope.planning.infinite import (
    InfiniteQueryPlan,
    NextPageRule,
    NextPageStrategy,
    NotInferable,
    plan_infinite_query,
)
from entityscope.planning.predicates import (
    OPERATOR_TABLES,
    FilterClause,
    Operator,
    SortClause,
    SortDirection,
    SubsetRequest,
    TranslatorSpec,
    synthesize_translator,
)

__all__ = [
    "InfiniteQueryPlan",
    "NextPageRule",
    "NextPageStrategy",
    "NotInferable",
    "plan_infinite_query",
    "OPERATOR_TABLES",
    "FilterClause",
    "Operator",
    "SortClause",
    "SortDirection",
    "SubsetRequest",
    "TranslatorSpec",
    "synthesize_translator",
]
