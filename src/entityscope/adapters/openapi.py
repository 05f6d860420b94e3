"""OpenAPI 3.x document adapter.

List-query candidates are ``GET`` operations on collection paths (paths that
do not end in a ``{param}`` segment) with a JSON schema on their 200/201
response. Mutations are ``POST``/``PUT``/``PATCH``/``DELETE`` operations on
any path; the :class:`PathMutationMatcher` decides which belong to which
entity.
"""

from __future__ import annotations

import json
import logging
import re
from functools import cached_property
from pathlib import Path
from typing import Any

import yaml

from entityscope.adapters.base import SchemaAdapter
from entityscope.adapters.ref_resolver import RefResolver
from entityscope.analysis.capabilities import REST_FILTER_RULES
from entityscope.discovery.mutations import MutationMatcher, PathMutationMatcher
from entityscope.errors import ErrorContext, SchemaLoadError
from entityscope.models import PredicateMapping
from entityscope.naming import singularize, to_camel_case, to_pascal_case
from entityscope.shapes import (
    ArgumentDescriptor,
    MutationDescriptor,
    QueryDescriptor,
    ShapeKind,
    TypeShape,
)

logger = logging.getLogger(__name__)

MUTATION_METHODS: tuple[str, ...] = ("post", "put", "patch", "delete")
SUCCESS_STATUSES: tuple[str, ...] = ("200", "201")
REST_KEY_FIELD_CANDIDATES: tuple[str, ...] = ("id", "ID", "_id", "uuid", "key")

_PATH_PARAM_RE = re.compile(r"\{([^{}/]+)\}")
_NUMBER_TYPES = frozenset({"integer", "number"})
_SCALAR_TYPES = frozenset({"string", "integer", "number", "boolean"})


class JSONSchemaShape(TypeShape):
    """:class:`TypeShape` over a JSON Schema node, following ``$ref`` lazily.

    Args:
        schema: Raw schema node, possibly a ``$ref`` or composition.
        resolver: Resolver for the owning document.
    """

    def __init__(self, schema: dict[str, Any], resolver: RefResolver) -> None:
        self._raw = schema if isinstance(schema, dict) else {}
        self._resolver = resolver

    @cached_property
    def _schema(self) -> dict[str, Any]:
        return self._resolver.resolve_schema(self._raw)

    @cached_property
    def _type(self) -> str | None:
        declared = self._schema.get("type")
        if isinstance(declared, list):
            declared = next((t for t in declared if t != "null"), None)
        if declared is None:
            if "properties" in self._schema:
                return "object"
            if "items" in self._schema:
                return "array"
        return declared

    @property
    def kind(self) -> ShapeKind:
        if self._type == "array":
            return ShapeKind.ARRAY
        if self._type == "object":
            return ShapeKind.OBJECT
        if self._type in _SCALAR_TYPES:
            return ShapeKind.SCALAR
        return ShapeKind.UNKNOWN

    @property
    def name(self) -> str | None:
        if self.kind is ShapeKind.ARRAY:
            return None
        return self._resolver.schema_name(self._raw) or self._schema.get("title")

    @property
    def title(self) -> str | None:
        title = self._schema.get("title")
        return title if isinstance(title, str) else None

    def item(self) -> TypeShape | None:
        if self.kind is not ShapeKind.ARRAY:
            return None
        return JSONSchemaShape(self._schema.get("items") or {}, self._resolver)

    @cached_property
    def _fields(self) -> list[tuple[str, TypeShape]]:
        if self.kind is not ShapeKind.OBJECT:
            return []
        properties = self._schema.get("properties") or {}
        return [(name, JSONSchemaShape(prop, self._resolver)) for name, prop in properties.items()]

    def fields(self) -> list[tuple[str, TypeShape]]:
        return self._fields

    @property
    def scalar_type(self) -> str:
        if self._type in _NUMBER_TYPES:
            return "number"
        if self._type == "boolean":
            return "boolean"
        return "string"


class OpenAPIAdapter(SchemaAdapter):
    """Adapter for OpenAPI 3.x documents.

    Example::

        adapter = OpenAPIAdapter.from_file("openapi.yaml")
        result = discover(adapter)

    Args:
        document: The parsed OpenAPI document.
    """

    source_type = "openapi"
    envelope_field_names = None
    filter_rules = REST_FILTER_RULES
    supported_presets = frozenset({PredicateMapping.REST_SIMPLE, PredicateMapping.JSONAPI})

    def __init__(self, document: dict[str, Any]) -> None:
        self.document = document
        self.resolver = RefResolver(document)
        self._matcher = PathMutationMatcher()

    @classmethod
    def from_file(cls, path: str | Path) -> OpenAPIAdapter:
        """Load an OpenAPI document from a JSON or YAML file.

        Raises:
            SchemaLoadError: If the file cannot be read or parsed, or does
                not contain a mapping.
        """
        filepath = Path(path)
        context = ErrorContext(source=str(filepath), operation="load_openapi")
        try:
            content = filepath.read_text(encoding="utf-8")
            if filepath.suffix in (".yaml", ".yml"):
                document = yaml.safe_load(content)
            else:
                document = json.loads(content)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise SchemaLoadError(f"Cannot load OpenAPI document: {e}", context=context) from e

        if not isinstance(document, dict):
            raise SchemaLoadError("OpenAPI document must be a mapping", context=context)
        return cls(document)

    @property
    def mutation_matcher(self) -> MutationMatcher:
        return self._matcher

    @property
    def missing_root_warning(self) -> str:
        return "OpenAPI document has no paths - no entities discovered"

    def _paths(self) -> dict[str, Any]:
        paths = self.document.get("paths")
        return paths if isinstance(paths, dict) else {}

    def has_query_root(self) -> bool:
        return bool(self._paths())

    def resolve_named_type(self, name: str) -> TypeShape | None:
        schemas = self.document.get("components", {}).get("schemas", {})
        if name not in schemas:
            return None
        return JSONSchemaShape({"$ref": f"#/components/schemas/{name}"}, self.resolver)

    def unwrap(self, type_: Any) -> TypeShape:
        shape: TypeShape = JSONSchemaShape(type_, self.resolver)
        while shape.is_array:
            item = shape.item()
            if item is None:
                break
            shape = item
        return shape

    def entity_name(self, query: QueryDescriptor, item_shape: TypeShape) -> str | None:
        title = getattr(item_shape, "title", None)
        if title:
            return to_pascal_case(title)
        if item_shape.name:
            return to_pascal_case(item_shape.name)
        segments = [s for s in (query.path or "").split("/") if s and not s.startswith("{")]
        if not segments:
            return None
        return to_pascal_case(singularize(segments[-1]))

    def key_field_candidates(self, entity_name: str) -> tuple[str, ...]:
        return (*REST_KEY_FIELD_CANDIDATES, f"{to_camel_case(entity_name)}Id")

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def list_query_descriptors(self) -> list[QueryDescriptor]:
        descriptors: list[QueryDescriptor] = []
        for path, path_item in self._paths().items():
            if not isinstance(path_item, dict) or _is_item_path(path):
                continue
            operation = path_item.get("get")
            if not isinstance(operation, dict):
                continue
            schema = self._success_schema(operation)
            if schema is None:
                logger.debug(f"GET {path}: no JSON success response")
                continue

            operation_id = _operation_id(operation, "get", path)
            arguments = tuple(
                ArgumentDescriptor(
                    name=param["name"],
                    required=bool(param.get("required", False)),
                    shape=self.unwrap(param.get("schema") or {}),
                    location="query",
                )
                for param in self._parameters(path_item, operation)
                if param.get("in") == "query"
            )
            descriptors.append(
                QueryDescriptor(
                    operation_name=operation_id,
                    arguments=arguments,
                    response=JSONSchemaShape(schema, self.resolver),
                    path=path,
                    params_type_name=f"{to_pascal_case(operation_id)}Params" if arguments else None,
                )
            )
        return descriptors

    def mutation_descriptors(self) -> list[MutationDescriptor]:
        descriptors: list[MutationDescriptor] = []
        for path, path_item in self._paths().items():
            if not isinstance(path_item, dict):
                continue
            for method in MUTATION_METHODS:
                operation = path_item.get(method)
                if not isinstance(operation, dict):
                    continue
                descriptors.append(
                    MutationDescriptor(
                        operation_name=_operation_id(operation, method, path),
                        kind=method,
                        path=path,
                        has_input="requestBody" in operation,
                        path_params=tuple(_PATH_PARAM_RE.findall(path)),
                    )
                )
        return descriptors

    def _parameters(
        self, path_item: dict[str, Any], operation: dict[str, Any]
    ) -> list[dict[str, Any]]:
        """Path-level parameters overlaid by operation-level ones, keyed by (name, in)."""
        merged: dict[tuple[str, str], dict[str, Any]] = {}
        for raw in [*path_item.get("parameters", []), *operation.get("parameters", [])]:
            param = self.resolver.resolve(raw["$ref"]) if "$ref" in raw else raw
            if "name" not in param:
                continue
            merged[(param["name"], param.get("in", ""))] = param
        return list(merged.values())

    def _success_schema(self, operation: dict[str, Any]) -> dict[str, Any] | None:
        responses = operation.get("responses", {})
        for status in SUCCESS_STATUSES:
            if status not in responses:
                continue
            response = responses[status]
            if "$ref" in response:
                response = self.resolver.resolve(response["$ref"])
            for media_type, media in (response.get("content") or {}).items():
                if media_type == "application/json" or media_type.endswith("+json"):
                    schema = media.get("schema")
                    if schema:
                        return schema
            return None
        return None


def _is_item_path(path: str) -> bool:
    last = path.rstrip("/").rsplit("/", 1)[-1]
    return last.startswith("{") and last.endswith("}")


def _operation_id(operation: dict[str, Any], method: str, path: str) -> str:
    operation_id = operation.get("operationId")
    if operation_id:
        return operation_id
    words = [re.sub(r"[{}]", "", part) for part in path.split("/") if part]
    return to_camel_case("_".join([method, *words]))


__all__ = ["JSONSchemaShape", "OpenAPIAdapter"]
