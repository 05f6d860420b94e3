"""Schema adapters for the supported source families."""

from entityscope.adapters.base import SchemaAdapter
from entityscope.adapters.graphql import GraphQLAdapter, GraphQLShape
from entityscope.adapters.openapi import JSONSchemaShape, OpenAPIAdapter
from entityscope.adapters.ref_resolver import RefResolver

__all__ = [
    "SchemaAdapter",
    "GraphQLAdapter",
    "GraphQLShape",
    "OpenAPIAdapter",
    "JSONSchemaShape",
    "RefResolver",
]
