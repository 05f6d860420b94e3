"""entityscope - Entity discovery for GraphQL and OpenAPI schemas.

Finds the entities an API exposes, what their list operations can filter,
sort and paginate by, and how to drive them page by page or translate a
generic subset request into native query arguments.

Quick Start:
    from entityscope import OpenAPIAdapter, discover, plan_infinite_query

    result = discover(OpenAPIAdapter.from_file("petstore.yaml"))
    for entity in result.entities:
        print(entity.name, entity.key_field, entity.list_query.selector_path)

    for warning in result.warnings:
        print("warning:", warning)
"""

from __future__ import annotations

__version__ = "0.4.0"

# Adapters
from entityscope.adapters import GraphQLAdapter, OpenAPIAdapter, SchemaAdapter

# Configuration
from entityscope.config import (
    CollectionOverride,
    DiscoveryOverrides,
    InfiniteQueryOverride,
    Settings,
    load_overrides,
    load_settings,
)

# Discovery
from entityscope.discovery import Discoverer, discover

# Errors
from entityscope.errors import (
    ConfigValidationError,
    EntityScopeError,
    SchemaLoadError,
    TranslationError,
)

# Data model
from entityscope.models import (
    DiscoveryResult,
    Entity,
    FilterCapabilities,
    FilterStyle,
    ListQuery,
    Mutation,
    MutationKind,
    PaginationCapabilities,
    PaginationResponseInfo,
    PaginationStyle,
    PredicateMapping,
    ResponsePaginationStyle,
    SortCapabilities,
    SyncMode,
)

# Planning
from entityscope.planning import (
    FilterClause,
    InfiniteQueryPlan,
    NotInferable,
    Operator,
    SortClause,
    SortDirection,
    SubsetRequest,
    TranslatorSpec,
    plan_infinite_query,
    synthesize_translator,
)

__all__ = [
    "__version__",
    # Adapters
    "SchemaAdapter",
    "GraphQLAdapter",
    "OpenAPIAdapter",
    # Configuration
    "Settings",
    "load_settings",
    "CollectionOverride",
    "InfiniteQueryOverride",
    "DiscoveryOverrides",
    "load_overrides",
    # Discovery
    "Discoverer",
    "discover",
    # Errors
    "EntityScopeError",
    "ConfigValidationError",
    "SchemaLoadError",
    "TranslationError",
    # Data model
    "DiscoveryResult",
    "Entity",
    "ListQuery",
    "Mutation",
    "MutationKind",
    "FilterCapabilities",
    "FilterStyle",
    "SortCapabilities",
    "PaginationCapabilities",
    "PaginationResponseInfo",
    "PaginationStyle",
    "ResponsePaginationStyle",
    "PredicateMapping",
    "SyncMode",
    # Planning
    "InfiniteQueryPlan",
    "NotInferable",
    "plan_infinite_query",
    "FilterClause",
    "SortClause",
    "SortDirection",
    "Operator",
    "SubsetRequest",
    "TranslatorSpec",
    "synthesize_translator",
]
