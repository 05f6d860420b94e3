"""Array Locator - find the list of items inside a response shape.

List operations either return the array directly (``Pet[]``) or wrap it in
an envelope (``{ data: Pet[], total: int }``, ``{ response: { items: [...] } }``).
The locator walks object fields in declaration order and returns the
dotted path to the array.

Search is bounded by ``max_depth`` objects and never re-enters a named type
already on the current path, so self-referential schemas terminate.
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import dataclass

from entityscope.naming import join_path
from entityscope.shapes import TypeShape

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 3

# Field names a GraphQL envelope uses for its item list. Anything else on a
# GraphQL object is more likely a relation (User.posts) than a result list.
ENVELOPE_FIELD_NAMES: frozenset[str] = frozenset(
    {"data", "items", "edges", "nodes", "results", "records", "list", "rows"}
)


@dataclass(frozen=True)
class ArrayLocation:
    """Where the item array lives.

    Attributes:
        path: Field names from the analyzed shape down to the array.
            Empty when the shape is itself the array.
        shape: The array shape found at ``path``.
    """

    path: tuple[str, ...]
    shape: TypeShape

    @property
    def selector(self) -> str | None:
        """Dotted selector, or None for a bare array."""
        return join_path(self.path) if self.path else None

    @property
    def item(self) -> TypeShape | None:
        return self.shape.item()


def locate_array(
    shape: TypeShape,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    allowed_names: Collection[str] | None = None,
    warnings: list[str] | None = None,
    context: str | None = None,
) -> ArrayLocation | None:
    """Locate the array-valued field holding list results.

    Args:
        shape: Response shape to search.
        max_depth: Maximum number of objects to descend through.
        allowed_names: When given, only fields with these names are
            considered as envelope members.
        warnings: Receives one warning per level with more than one
            candidate.
        context: Label used in warnings (usually the operation name).

    Returns:
        The first array in declaration order, or None.
    """
    return _locate(
        shape,
        depth=0,
        on_path=frozenset(),
        max_depth=max_depth,
        allowed_names=allowed_names,
        warnings=warnings,
        context=context,
    )


def _locate(
    shape: TypeShape,
    *,
    depth: int,
    on_path: frozenset[str],
    max_depth: int,
    allowed_names: Collection[str] | None,
    warnings: list[str] | None,
    context: str | None,
) -> ArrayLocation | None:
    if shape.is_array:
        return ArrayLocation(path=(), shape=shape)
    if not shape.is_object or depth >= max_depth:
        return None
    if shape.name is not None:
        if shape.name in on_path:
            return None
        on_path = on_path | {shape.name}

    candidates: list[ArrayLocation] = []
    for field_name, field_shape in shape.fields():
        if allowed_names is not None and field_name not in allowed_names:
            continue
        found = _locate(
            field_shape,
            depth=depth + 1,
            on_path=on_path,
            max_depth=max_depth,
            allowed_names=allowed_names,
            warnings=warnings,
            context=context,
        )
        if found is not None:
            candidates.append(ArrayLocation(path=(field_name, *found.path), shape=found.shape))

    if not candidates:
        return None
    if len(candidates) > 1:
        names = ", ".join(join_path(c.path) for c in candidates)
        chosen = join_path(candidates[0].path)
        label = context or shape.name or "response"
        message = (
            f"Multiple array fields found in {label}: {names}. "
            f"Using '{chosen}'. Set 'selectorPath' in the collection override "
            f"to pick a different field."
        )
        logger.debug(message)
        if warnings is not None:
            warnings.append(message)
    return candidates[0]


def resolve_selector(
    shape: TypeShape,
    path: tuple[str, ...],
) -> TypeShape | None:
    """Follow ``path`` through object fields; return the shape found there."""
    current: TypeShape | None = shape
    for part in path:
        if current is None or not current.is_object:
            return None
        current = current.field(part)
    return current


__all__ = [
    "ArrayLocation",
    "DEFAULT_MAX_DEPTH",
    "ENVELOPE_FIELD_NAMES",
    "locate_array",
    "resolve_selector",
]
