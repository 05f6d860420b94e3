"""Entity Discoverer - turn list operations into entities.

For every list-query candidate the adapter yields, in declaration order:

1. locate the item array in the response (or honor a ``selectorPath``
   override), unwrapping Relay ``edges { node }`` pairs;
2. name the entity and resolve its key field, skipping it with one warning
   when no key can be found;
3. classify request-side capabilities and response-side pagination;
4. attach matching mutations;
5. settle the predicate mapping and sync mode, applying overrides.

Candidates returning an already-discovered item type are dropped, so the
first list operation for a type wins. Data-shape problems never raise; they
produce warnings on the :class:`DiscoveryResult`.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from entityscope.analysis.capabilities import CapabilityAnalyzer, infer_predicate_mapping
from entityscope.analysis.responses import analyze_pagination_response
from entityscope.config.overrides import CollectionOverride, DiscoveryOverrides
from entityscope.config.settings import Settings
from entityscope.discovery.arrays import ArrayLocation, locate_array, resolve_selector
from entityscope.discovery.keys import resolve_key_field
from entityscope.models import (
    DiscoveryResult,
    Entity,
    ListQuery,
    PaginationResponseInfo,
    PredicateMapping,
    QueryCapabilities,
    ResponsePaginationStyle,
    SyncMode,
)
from entityscope.naming import join_path, split_path
from entityscope.shapes import MutationDescriptor, QueryDescriptor, ShapeKind, TypeShape

if TYPE_CHECKING:
    from entityscope.adapters.base import SchemaAdapter

logger = logging.getLogger(__name__)

RELAY_EDGES_FIELD = "edges"
RELAY_NODE_FIELD = "node"


@dataclass
class _Outcome:
    """Result of evaluating one list-query candidate."""

    entity: Entity | None = None
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class _Items:
    location: ArrayLocation
    shape: TypeShape
    item_path: str | None


class Discoverer:
    """Discovers entities from a schema adapter.

    Example::

        adapter = OpenAPIAdapter.from_file("petstore.yaml")
        result = Discoverer(adapter).discover()
        for entity in result.entities:
            print(entity.name, entity.key_field)

    Args:
        adapter: Source-family adapter.
        overrides: Validated user overrides.
        settings: Tunables; defaults are used when omitted.
        max_workers: Evaluate candidates on a thread pool of this size.
            Defaults to ``settings.max_workers``.
    """

    def __init__(
        self,
        adapter: SchemaAdapter,
        overrides: DiscoveryOverrides | None = None,
        *,
        settings: Settings | None = None,
        max_workers: int | None = None,
    ) -> None:
        self.adapter = adapter
        self.overrides = overrides or DiscoveryOverrides()
        self.settings = settings or Settings()
        self.max_workers = max_workers or self.settings.max_workers
        self.analyzer = CapabilityAnalyzer(adapter.filter_rules)

    def discover(self) -> DiscoveryResult:
        """Run discovery and return entities plus warnings."""
        if not self.adapter.has_query_root():
            message = self.adapter.missing_root_warning
            logger.warning(message)
            return DiscoveryResult(warnings=(message,))

        queries = self.adapter.list_query_descriptors()
        mutations = self.adapter.mutation_descriptors()
        logger.debug(
            f"{self.adapter.source_type}: {len(queries)} list candidate(s), "
            f"{len(mutations)} mutation candidate(s)"
        )

        if self.max_workers > 1 and len(queries) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                outcomes = list(pool.map(lambda q: self._evaluate(q, mutations), queries))
        else:
            outcomes = [self._evaluate(query, mutations) for query in queries]

        entities: list[Entity] = []
        warnings: list[str] = []
        seen_types: set[str] = set()
        for outcome in outcomes:
            entity = outcome.entity
            if entity is not None and entity.type_name in seen_types:
                logger.debug(
                    f"{entity.list_query.operation_name}: {entity.type_name} already discovered, skipping"
                )
                continue
            for message in outcome.warnings:
                if message not in warnings:
                    warnings.append(message)
            if entity is None:
                continue
            seen_types.add(entity.type_name)
            entities.append(entity)
            logger.debug(f"discovered entity {entity.name} via {entity.list_query.operation_name}")

        for message in warnings:
            logger.warning(message)
        logger.info(
            f"{self.adapter.source_type}: discovered {len(entities)} entit"
            f"{'y' if len(entities) == 1 else 'ies'} with {len(warnings)} warning(s)"
        )
        return DiscoveryResult(entities=tuple(entities), warnings=tuple(warnings))

    # -------------------------------------------------------------------------
    # Per-candidate evaluation
    # -------------------------------------------------------------------------

    def _evaluate(
        self, query: QueryDescriptor, mutations: Sequence[MutationDescriptor]
    ) -> _Outcome:
        outcome = _Outcome()
        located: list[str] = []
        location = locate_array(
            query.response,
            max_depth=self.settings.array_max_depth,
            allowed_names=self.adapter.envelope_field_names,
            warnings=located,
            context=query.operation_name,
        )
        if location is None:
            logger.debug(f"{query.operation_name}: no item array, not a list query")
            return outcome

        items = self._items(location)
        if items is None:
            item = location.item
            if item is None or item.kind is ShapeKind.UNKNOWN:
                outcome.warnings.append(
                    _unusable_items_warning(query, location, "have no usable type")
                )
            else:
                logger.debug(f"{query.operation_name}: items are {item.kind.value}, not a list query")
            return outcome
        entity_name = self.adapter.entity_name(query, items.shape)
        if entity_name is None:
            outcome.warnings.append(_unusable_items_warning(query, location, "cannot be named"))
            return outcome

        override = self.overrides.collection(entity_name) or CollectionOverride()
        if override.selector_path:
            chosen = self._selector_override(query, override.selector_path, entity_name, outcome)
            if chosen is not None:
                items = chosen
                located = []
        outcome.warnings.extend(located)

        key = resolve_key_field(
            items.shape,
            override.key_field,
            candidates=self.adapter.key_field_candidates(entity_name),
            entity_name=entity_name,
            warnings=outcome.warnings,
        )
        if not key.found:
            type_name = items.shape.name
            label = entity_name
            if type_name is not None and type_name != entity_name:
                label = f"{entity_name} (type {type_name})"
            outcome.warnings.append(
                f"Could not find key field for entity {label} - skipping collection generation"
            )
            return outcome

        capabilities = self.analyzer.analyze(query.arguments)
        predicate_mapping = self._predicate_mapping(entity_name, capabilities, override, outcome)
        sync_mode = self._sync_mode(entity_name, predicate_mapping, override, outcome)

        outcome.entity = Entity(
            name=entity_name,
            type_name=items.shape.name or entity_name,
            key_field=key.name,
            key_field_type=key.type,
            list_query=ListQuery(
                operation_name=query.operation_name,
                query_key_tokens=(entity_name,),
                params_type_name=query.params_type_name,
                selector_path=join_path((*query.root_prefix, *items.location.path)) or None,
                item_path=items.item_path,
            ),
            mutations=self.adapter.mutation_matcher.match(entity_name, query, mutations),
            sync_mode=sync_mode,
            predicate_mapping=predicate_mapping,
            filter_capabilities=capabilities.filter,
            sort_capabilities=capabilities.sort,
            pagination_capabilities=capabilities.pagination,
            pagination_response=self._pagination_response(query, items.location),
        )
        return outcome

    def _items(self, location: ArrayLocation) -> _Items | None:
        item = location.item
        if item is None or not item.is_object:
            return None
        if location.path and location.path[-1] == RELAY_EDGES_FIELD:
            node = item.field(RELAY_NODE_FIELD)
            if node is not None and node.is_object:
                return _Items(location, node, RELAY_NODE_FIELD)
        return _Items(location, item, None)

    def _selector_override(
        self,
        query: QueryDescriptor,
        selector_path: str,
        entity_name: str,
        outcome: _Outcome,
    ) -> _Items | None:
        path = split_path(selector_path)
        prefix = query.root_prefix
        if prefix and path[: len(prefix)] == prefix:
            path = path[len(prefix):]
        shape = resolve_selector(query.response, path)
        if shape is not None and shape.is_array:
            items = self._items(ArrayLocation(path=path, shape=shape))
            if items is not None:
                return items
        outcome.warnings.append(
            f"Configured selectorPath '{selector_path}' does not point to an array of objects "
            f"in {query.operation_name} for entity {entity_name} - falling back to automatic detection"
        )
        return None

    def _pagination_response(
        self, query: QueryDescriptor, location: ArrayLocation
    ) -> PaginationResponseInfo:
        """Analyze the object that holds the item array, then the response root."""
        if not location.path:
            return PaginationResponseInfo()
        parent_path = location.path[:-1]
        parent = resolve_selector(query.response, parent_path)
        if parent is not None:
            info = analyze_pagination_response(parent, prefix=(*query.root_prefix, *parent_path))
            if info.style is not ResponsePaginationStyle.NONE or not parent_path:
                return info
        return analyze_pagination_response(query.response, prefix=query.root_prefix)

    def _predicate_mapping(
        self,
        entity_name: str,
        capabilities: QueryCapabilities,
        override: CollectionOverride,
        outcome: _Outcome,
    ) -> PredicateMapping | None:
        supported = self.adapter.supported_presets
        if override.predicate_mapping is not None:
            if override.predicate_mapping in supported:
                return override.predicate_mapping
            outcome.warnings.append(
                f"predicateMapping '{override.predicate_mapping.value}' is not supported for "
                f"{self.adapter.source_type} schemas (entity {entity_name}) - "
                f"falling back to the detected style"
            )
        detected = infer_predicate_mapping(capabilities)
        return detected if detected in supported else None

    def _sync_mode(
        self,
        entity_name: str,
        predicate_mapping: PredicateMapping | None,
        override: CollectionOverride,
        outcome: _Outcome,
    ) -> SyncMode | None:
        if override.sync_mode is SyncMode.ON_DEMAND and predicate_mapping is None:
            outcome.warnings.append(
                f"Entity {entity_name} is configured for on-demand sync but its filter style "
                f"cannot be translated - using full sync. Set 'predicateMapping' in the "
                f"collection override to enable on-demand sync."
            )
            return SyncMode.FULL
        return override.sync_mode


def _unusable_items_warning(query: QueryDescriptor, location: ArrayLocation, problem: str) -> str:
    where = join_path((*query.root_prefix, *location.path)) or "the response"
    return (
        f"Items of {where} in {query.operation_name} {problem} - skipping. "
        f"Set 'selectorPath' in the collection override to point at an array of objects."
    )


def discover(
    adapter: SchemaAdapter,
    overrides: DiscoveryOverrides | None = None,
    *,
    settings: Settings | None = None,
) -> DiscoveryResult:
    """Discover entities from ``adapter``.

    Args:
        adapter: Source-family adapter.
        overrides: Validated overrides (see :func:`load_overrides`).
        settings: Tunables; defaults are used when omitted.

    Returns:
        The :class:`DiscoveryResult`. Never raises for schema-shape reasons.
    """
    return Discoverer(adapter, overrides, settings=settings).discover()


__all__ = ["Discoverer", "discover"]
