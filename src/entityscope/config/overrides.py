"""User overrides for discovery and infinite-query planning.

Overrides are read from YAML (or passed as a dict) and validated up front.
Keys may be written in camelCase or snake_case::

    collections:
      Pet:
        keyField: petId
        selectorPath: data.items
        syncMode: on-demand
        predicateMapping: rest-simple
    queries:
      listPets:
        nextPageParamPath: meta.nextCursor
        pageSize: 50

Structural problems (unknown keys, wrong types, unknown enum values) raise
:class:`ConfigValidationError`. Semantic problems, such as a key field the
entity does not have, are only detected during discovery and produce
warnings there.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from entityscope.errors import ConfigValidationError, ErrorCode, ErrorContext
from entityscope.models import PredicateMapping, SyncMode


class _OverrideModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )


class CollectionOverride(_OverrideModel):
    """Per-entity discovery overrides."""

    key_field: str | None = None
    selector_path: str | None = None
    sync_mode: SyncMode | None = None
    predicate_mapping: PredicateMapping | None = None


class InfiniteQueryOverride(_OverrideModel):
    """Per-operation infinite-query overrides.

    Attributes:
        next_page_param_path: Dotted path into the last page that holds the
            next page parameter. Always wins over inference.
        initial_page_param: Replaces the inferred initial value when set
            (including when explicitly set to null).
        page_size: Page size used for offset arithmetic.
        disabled: Never produce a plan for this operation.
    """

    next_page_param_path: str | None = None
    initial_page_param: int | str | None = None
    page_size: int | None = Field(default=None, ge=1)
    disabled: bool = False

    @property
    def has_initial_page_param(self) -> bool:
        return "initial_page_param" in self.model_fields_set


class DiscoveryOverrides(_OverrideModel):
    """All overrides, keyed by entity name and operation name."""

    collections: dict[str, CollectionOverride] = Field(default_factory=dict)
    queries: dict[str, InfiniteQueryOverride] = Field(default_factory=dict)

    def collection(self, entity_name: str) -> CollectionOverride | None:
        return self.collections.get(entity_name)

    def query(self, operation_name: str) -> InfiniteQueryOverride | None:
        return self.queries.get(operation_name)


def load_overrides(source: str | Path | dict[str, Any] | None = None) -> DiscoveryOverrides:
    """Load and validate overrides from a YAML file or a dict.

    Args:
        source: Path to a YAML file, an already-parsed mapping, or None for
            no overrides.

    Returns:
        Validated :class:`DiscoveryOverrides`.

    Raises:
        ConfigValidationError: If the file is missing or malformed, or the
            data does not match the override schema.
    """
    if source is None:
        return DiscoveryOverrides()

    origin = "<dict>"
    if isinstance(source, dict):
        data: Any = source
    else:
        path = Path(source)
        origin = str(path)
        if not path.exists():
            raise ConfigValidationError(
                message=f"Overrides file not found: {path}",
                code=ErrorCode.CONFIG_NOT_FOUND,
                context=ErrorContext(source=origin),
            )
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigValidationError(
                message=f"Invalid YAML in overrides file: {e}",
                context=ErrorContext(source=origin),
            ) from e

    if not isinstance(data, dict):
        raise ConfigValidationError(
            message="Overrides must be a mapping",
            value=type(data).__name__,
            context=ErrorContext(source=origin),
        )

    try:
        return DiscoveryOverrides.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise ConfigValidationError(
            message=f"Invalid override at '{field}': {first['msg']}",
            field=field,
            value=first.get("input"),
            context=ErrorContext(source=origin, extra={"error_count": e.error_count()}),
        ) from e


__all__ = [
    "CollectionOverride",
    "InfiniteQueryOverride",
    "DiscoveryOverrides",
    "load_overrides",
]
