"""Schema adapter interface.

An adapter turns one source family (GraphQL schema, OpenAPI document) into
the neutral descriptors in :mod:`entityscope.shapes`, and supplies the
policy data that differs between families: which envelope field names may
hold a result list, which filter rules apply, which translator presets make
sense, and how mutations are matched. The discoverer only ever talks to this
interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Collection, Sequence
from typing import Any

from entityscope.analysis.capabilities import Arguments
from entityscope.discovery.keys import KEY_FIELD_CANDIDATES
from entityscope.discovery.mutations import MutationMatcher
from entityscope.models import FilterCapabilities, PredicateMapping
from entityscope.rules import Rule
from entityscope.shapes import MutationDescriptor, QueryDescriptor, TypeShape


class SchemaAdapter(ABC):
    """Abstract base class for schema source families.

    Subclasses must implement the structural accessors. Policy attributes
    have defaults that subclasses override as class attributes.
    """

    #: Short family label used in logs and CLI output.
    source_type: str = "unknown"

    #: Field names allowed to hold the item array inside an envelope
    #: (None means any field).
    envelope_field_names: Collection[str] | None = None

    #: Filter detection chain for list operation arguments.
    filter_rules: Sequence[Rule[Arguments, FilterCapabilities]] = ()

    #: Translator presets that make sense for this family.
    supported_presets: frozenset[PredicateMapping] = frozenset()

    @property
    @abstractmethod
    def mutation_matcher(self) -> MutationMatcher:
        """Matcher that attaches mutations to an entity."""

    @abstractmethod
    def has_query_root(self) -> bool:
        """Whether the source exposes any read surface at all."""

    @abstractmethod
    def list_query_descriptors(self) -> list[QueryDescriptor]:
        """Candidate list operations, in declaration order."""

    @abstractmethod
    def mutation_descriptors(self) -> list[MutationDescriptor]:
        """All write operations, in declaration order."""

    @abstractmethod
    def resolve_named_type(self, name: str) -> TypeShape | None:
        """Look up a named type in the source."""

    @abstractmethod
    def unwrap(self, type_: Any) -> TypeShape:
        """Strip nullability and list wrappers from a native type."""

    @abstractmethod
    def entity_name(self, query: QueryDescriptor, item_shape: TypeShape) -> str | None:
        """Name of the entity a list operation returns."""

    @property
    def missing_root_warning(self) -> str:
        return f"No query surface found in {self.source_type} schema - no entities discovered"

    def key_field_candidates(self, entity_name: str) -> tuple[str, ...]:
        """Ordered fallback names for the key field."""
        return KEY_FIELD_CANDIDATES

    def __repr__(self) -> str:
        return f"{type(self).__name__}(source_type={self.source_type!r})"


__all__ = ["SchemaAdapter"]
