"""Mutation Matcher - attach create/update/delete operations to an entity.

Two conventions are supported:

- :class:`NamingMutationMatcher` (GraphQL): ``createPet``, ``updatePet``,
  ``deletePet``/``removePet``. Type names are derived by convention, never
  introspected.
- :class:`PathMutationMatcher` (REST): ``POST /pets``, ``PUT|PATCH /pets/{id}``,
  ``DELETE /pets/{id}`` relative to the list path. The single path parameter
  of the item path is recorded so update/delete URLs can be built later.

Matchers may attach several mutations of the same kind; consumers take the
first one of each kind.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Protocol

from entityscope.models import Mutation, MutationKind
from entityscope.naming import to_pascal_case
from entityscope.rules import Rule, first_match
from entityscope.shapes import MutationDescriptor, QueryDescriptor

logger = logging.getLogger(__name__)

CREATE_PREFIXES: tuple[str, ...] = ("create",)
UPDATE_PREFIXES: tuple[str, ...] = ("update",)
DELETE_PREFIXES: tuple[str, ...] = ("delete", "remove")

CREATE_VERBS: frozenset[str] = frozenset({"post"})
UPDATE_VERBS: frozenset[str] = frozenset({"put", "patch"})
DELETE_VERBS: frozenset[str] = frozenset({"delete"})


class MutationMatcher(Protocol):
    """Finds the mutations that belong to one entity."""

    def match(
        self,
        entity_name: str,
        list_query: QueryDescriptor,
        descriptors: Sequence[MutationDescriptor],
    ) -> tuple[Mutation, ...]: ...


def _prefix_rule(kind: MutationKind, prefixes: tuple[str, ...]) -> Rule[str, MutationKind]:
    return Rule(kind.value, lambda name: kind if name.startswith(prefixes) else None)


NAMING_RULES: tuple[Rule[str, MutationKind], ...] = (
    _prefix_rule(MutationKind.INSERT, CREATE_PREFIXES),
    _prefix_rule(MutationKind.UPDATE, UPDATE_PREFIXES),
    _prefix_rule(MutationKind.DELETE, DELETE_PREFIXES),
)


class NamingMutationMatcher:
    """Match mutations by operation-name prefix plus entity name."""

    def __init__(self, rules: Sequence[Rule[str, MutationKind]] = NAMING_RULES) -> None:
        self.rules = tuple(rules)

    def match(
        self,
        entity_name: str,
        list_query: QueryDescriptor,
        descriptors: Sequence[MutationDescriptor],
    ) -> tuple[Mutation, ...]:
        needle = entity_name.lower()
        found: list[Mutation] = []
        for descriptor in descriptors:
            lowered = descriptor.operation_name.lower()
            if needle not in lowered:
                continue
            hit = first_match(self.rules, lowered)
            if hit is None:
                continue
            kind = hit[1]
            input_type = None
            if kind is not MutationKind.DELETE:
                input_type = f"{to_pascal_case(descriptor.operation_name)}Variables"
            found.append(
                Mutation(kind=kind, operation_name=descriptor.operation_name, input_type_name=input_type)
            )
        logger.debug(f"{entity_name}: matched {len(found)} mutation(s) by name")
        return tuple(found)


class PathMutationMatcher:
    """Match mutations by HTTP verb and path relative to the list path."""

    def match(
        self,
        entity_name: str,
        list_query: QueryDescriptor,
        descriptors: Sequence[MutationDescriptor],
    ) -> tuple[Mutation, ...]:
        if not list_query.path:
            return ()
        base = _normalize(list_query.path)
        item_pattern = re.compile(rf"^{re.escape(base)}/\{{([^{{}}/]+)\}}$")

        found: list[Mutation] = []
        for descriptor in descriptors:
            if descriptor.path is None:
                continue
            path = _normalize(descriptor.path)
            verb = descriptor.kind.lower()
            input_type = _input_type_name(descriptor)

            if verb in CREATE_VERBS and path == base:
                found.append(
                    Mutation(
                        kind=MutationKind.INSERT,
                        operation_name=descriptor.operation_name,
                        input_type_name=input_type,
                    )
                )
                continue

            item_match = item_pattern.match(path)
            if item_match is None:
                continue
            param = item_match.group(1)
            if verb in UPDATE_VERBS:
                found.append(
                    Mutation(
                        kind=MutationKind.UPDATE,
                        operation_name=descriptor.operation_name,
                        input_type_name=input_type,
                        path_param_name=param,
                    )
                )
            elif verb in DELETE_VERBS:
                found.append(
                    Mutation(
                        kind=MutationKind.DELETE,
                        operation_name=descriptor.operation_name,
                        path_param_name=param,
                    )
                )
        logger.debug(f"{entity_name}: matched {len(found)} mutation(s) under {base}")
        return tuple(found)


def _normalize(path: str) -> str:
    stripped = path.rstrip("/")
    return stripped or "/"


def _input_type_name(descriptor: MutationDescriptor) -> str | None:
    if not descriptor.has_input:
        return None
    return f"{to_pascal_case(descriptor.operation_name)}Input"


__all__ = [
    "MutationMatcher",
    "NamingMutationMatcher",
    "PathMutationMatcher",
    "NAMING_RULES",
]
