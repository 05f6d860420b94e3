"""Request- and response-side capability analysis of list operations."""

from entityscope.analysis.capabilities import (
    GRAPHQL_FILTER_RULES,
    PAGINATION_RULES,
    REST_FILTER_RULES,
    CapabilityAnalyzer,
    detect_filter_style,
    detect_order_by_style,
    infer_predicate_mapping,
    page_param_name,
)
from entityscope.analysis.responses import analyze_pagination_response

__all__ = [
    "CapabilityAnalyzer",
    "GRAPHQL_FILTER_RULES",
    "REST_FILTER_RULES",
    "PAGINATION_RULES",
    "analyze_pagination_response",
    "detect_filter_style",
    "detect_order_by_style",
    "infer_predicate_mapping",
    "page_param_name",
]
