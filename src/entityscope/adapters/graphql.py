"""GraphQL schema adapter built on graphql-core.

Wraps a :class:`graphql.GraphQLSchema` (plus, optionally, parsed operation
documents) in the neutral descriptors the discoverer works with.

Without documents, every root ``Query`` field is a list-query candidate and
every ``Mutation`` field a mutation candidate. With documents, only the named
operations they declare are considered, and the operation name (not the
root field name) identifies them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from functools import cached_property
from pathlib import Path
from typing import Any

from graphql import (
    DocumentNode,
    FieldNode,
    GraphQLError,
    GraphQLField,
    GraphQLNamedType,
    GraphQLSchema,
    OperationDefinitionNode,
    OperationType,
    build_schema,
    get_named_type,
    is_enum_type,
    is_input_object_type,
    is_interface_type,
    is_list_type,
    is_non_null_type,
    is_object_type,
    is_scalar_type,
    parse,
)

from entityscope.adapters.base import SchemaAdapter
from entityscope.analysis.capabilities import GRAPHQL_FILTER_RULES
from entityscope.discovery.arrays import ENVELOPE_FIELD_NAMES
from entityscope.discovery.mutations import MutationMatcher, NamingMutationMatcher
from entityscope.errors import ErrorCode, ErrorContext, SchemaLoadError
from entityscope.models import PredicateMapping
from entityscope.naming import to_pascal_case
from entityscope.shapes import (
    ArgumentDescriptor,
    MutationDescriptor,
    QueryDescriptor,
    ShapeKind,
    TypeShape,
)

logger = logging.getLogger(__name__)

NUMBER_SCALARS: frozenset[str] = frozenset({"Int", "Float"})
BOOLEAN_SCALARS: frozenset[str] = frozenset({"Boolean"})
IDENTIFIER_SCALAR = "ID"


class GraphQLShape(TypeShape):
    """:class:`TypeShape` over a graphql-core type; non-null wrappers are stripped."""

    def __init__(self, type_: Any) -> None:
        while is_non_null_type(type_):
            type_ = type_.of_type
        self._type = type_

    @property
    def kind(self) -> ShapeKind:
        t = self._type
        if is_list_type(t):
            return ShapeKind.ARRAY
        if is_object_type(t) or is_interface_type(t) or is_input_object_type(t):
            return ShapeKind.OBJECT
        if is_scalar_type(t) or is_enum_type(t):
            return ShapeKind.SCALAR
        return ShapeKind.UNKNOWN

    @property
    def name(self) -> str | None:
        if is_list_type(self._type):
            return None
        return getattr(self._type, "name", None)

    def item(self) -> TypeShape | None:
        if is_list_type(self._type):
            return GraphQLShape(self._type.of_type)
        return None

    @cached_property
    def _fields(self) -> list[tuple[str, TypeShape]]:
        if self.kind is not ShapeKind.OBJECT:
            return []
        return [(name, GraphQLShape(f.type)) for name, f in self._type.fields.items()]

    def fields(self) -> list[tuple[str, TypeShape]]:
        return self._fields

    @property
    def scalar_type(self) -> str:
        name = self.name
        if name in NUMBER_SCALARS:
            return "number"
        if name in BOOLEAN_SCALARS:
            return "boolean"
        return "string"

    @property
    def is_identifier(self) -> bool:
        return is_scalar_type(self._type) and self._type.name == IDENTIFIER_SCALAR


class GraphQLAdapter(SchemaAdapter):
    """Adapter for GraphQL schemas.

    Args:
        schema: A built graphql-core schema.
        documents: Operation documents (SDL strings or parsed
            :class:`graphql.DocumentNode`). When given, list queries and
            mutations come from their named operations.
    """

    source_type = "graphql"
    envelope_field_names = ENVELOPE_FIELD_NAMES
    filter_rules = GRAPHQL_FILTER_RULES
    supported_presets = frozenset({PredicateMapping.HASURA, PredicateMapping.PRISMA})

    def __init__(
        self,
        schema: GraphQLSchema,
        documents: Iterable[str | DocumentNode] | str | DocumentNode | None = None,
    ) -> None:
        self.schema = schema
        self.documents = _parse_documents(documents) if documents is not None else None
        self._matcher = NamingMutationMatcher()

    @classmethod
    def from_sdl(
        cls,
        sdl: str,
        documents: Iterable[str | DocumentNode] | str | DocumentNode | None = None,
    ) -> GraphQLAdapter:
        """Build an adapter from schema definition language text."""
        try:
            schema = build_schema(sdl)
        except GraphQLError as e:
            raise SchemaLoadError(
                f"Invalid GraphQL schema: {e.message}",
                context=ErrorContext(operation="build_schema"),
            ) from e
        return cls(schema, documents)

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        documents: Iterable[str | DocumentNode] | str | DocumentNode | None = None,
    ) -> GraphQLAdapter:
        """Build an adapter from a ``.graphql`` SDL file."""
        path = Path(path)
        try:
            sdl = path.read_text(encoding="utf-8")
        except OSError as e:
            raise SchemaLoadError(
                f"Cannot read GraphQL schema: {e}",
                code=ErrorCode.SCHEMA_LOAD_FAILED,
                context=ErrorContext(source=str(path)),
            ) from e
        return cls.from_sdl(sdl, documents)

    @property
    def mutation_matcher(self) -> MutationMatcher:
        return self._matcher

    def has_query_root(self) -> bool:
        return self.schema.query_type is not None

    def resolve_named_type(self, name: str) -> TypeShape | None:
        named = self.schema.get_type(name)
        return GraphQLShape(named) if named is not None else None

    def unwrap(self, type_: Any) -> TypeShape:
        named: GraphQLNamedType = get_named_type(type_)
        return GraphQLShape(named)

    def entity_name(self, query: QueryDescriptor, item_shape: TypeShape) -> str | None:
        return item_shape.name

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def list_query_descriptors(self) -> list[QueryDescriptor]:
        query_type = self.schema.query_type
        if query_type is None:
            return []

        if self.documents is None:
            return [
                self._query_descriptor(name, name, name, field, has_variables=bool(field.args))
                for name, field in query_type.fields.items()
            ]

        descriptors: list[QueryDescriptor] = []
        for operation in self._operations(OperationType.QUERY):
            root = _first_field(operation)
            if root is None:
                continue
            field = query_type.fields.get(root.name.value)
            if field is None:
                logger.debug(f"{operation.name.value}: unknown root field {root.name.value}")
                continue
            response_key = root.alias.value if root.alias else root.name.value
            descriptors.append(
                self._query_descriptor(
                    operation.name.value,
                    response_key,
                    root.name.value,
                    field,
                    has_variables=bool(operation.variable_definitions),
                )
            )
        return descriptors

    def _query_descriptor(
        self,
        operation_name: str,
        response_key: str,
        field_name: str,
        field: GraphQLField,
        *,
        has_variables: bool,
    ) -> QueryDescriptor:
        arguments = tuple(
            ArgumentDescriptor(
                name=arg_name,
                required=is_non_null_type(arg.type),
                shape=self.unwrap(arg.type),
            )
            for arg_name, arg in field.args.items()
        )
        params_type = f"{to_pascal_case(operation_name)}QueryVariables" if has_variables else None
        return QueryDescriptor(
            operation_name=operation_name,
            arguments=arguments,
            response=GraphQLShape(field.type),
            response_key=response_key,
            params_type_name=params_type,
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def mutation_descriptors(self) -> list[MutationDescriptor]:
        if self.documents is not None:
            return [
                MutationDescriptor(
                    operation_name=operation.name.value,
                    kind="mutation",
                    has_input=bool(operation.variable_definitions),
                )
                for operation in self._operations(OperationType.MUTATION)
            ]

        mutation_type = self.schema.mutation_type
        if mutation_type is None:
            return []
        return [
            MutationDescriptor(operation_name=name, kind="mutation", has_input=bool(field.args))
            for name, field in mutation_type.fields.items()
        ]

    def _operations(self, operation_type: OperationType) -> list[OperationDefinitionNode]:
        operations: list[OperationDefinitionNode] = []
        for document in self.documents or ():
            for definition in document.definitions:
                if not isinstance(definition, OperationDefinitionNode):
                    continue
                if definition.operation is not operation_type or definition.name is None:
                    continue
                operations.append(definition)
        return operations


def _first_field(operation: OperationDefinitionNode) -> FieldNode | None:
    for selection in operation.selection_set.selections:
        if isinstance(selection, FieldNode):
            return selection
    return None


def _parse_documents(
    documents: Iterable[str | DocumentNode] | str | DocumentNode,
) -> list[DocumentNode]:
    if isinstance(documents, (str, DocumentNode)):
        documents = [documents]
    parsed: list[DocumentNode] = []
    for document in documents:
        if isinstance(document, DocumentNode):
            parsed.append(document)
            continue
        try:
            parsed.append(parse(document))
        except GraphQLError as e:
            raise SchemaLoadError(
                f"Invalid GraphQL document: {e.message}",
                context=ErrorContext(operation="parse"),
            ) from e
    return parsed


__all__ = ["GraphQLAdapter", "GraphQLShape"]
