"""Key Field Resolver - pick the field that identifies unique rows."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from entityscope.shapes import TypeShape

logger = logging.getLogger(__name__)

KEY_FIELD_CANDIDATES: tuple[str, ...] = ("id", "_id", "uuid", "key")


@dataclass(frozen=True)
class KeyField:
    """Resolved key field. ``name`` is None when nothing matched."""

    name: str | None
    type: str = "string"

    @property
    def found(self) -> bool:
        return self.name is not None


def resolve_key_field(
    shape: TypeShape,
    override: str | None = None,
    *,
    candidates: Sequence[str] = KEY_FIELD_CANDIDATES,
    entity_name: str | None = None,
    warnings: list[str] | None = None,
) -> KeyField:
    """Choose the key field of an item type.

    Priority:
        1. ``override``, when the type declares it. A miss warns and falls
           through to inference.
        2. A field named ``id`` typed as the identifier scalar.
        3. The first of ``candidates`` the type declares.

    Args:
        shape: Item type.
        override: User-configured key field name.
        candidates: Ordered fallback names, supplied by the adapter.
        entity_name: Used in the override-miss warning.
        warnings: Receives the override-miss warning.

    Returns:
        The resolved :class:`KeyField`.
    """
    fields = dict(shape.fields())

    if override:
        if override in fields:
            return KeyField(override, fields[override].scalar_type)
        message = (
            f"Configured keyField '{override}' not found in entity "
            f"{entity_name or shape.name or 'unknown'} - falling back to automatic detection"
        )
        logger.debug(message)
        if warnings is not None:
            warnings.append(message)

    id_shape = fields.get("id")
    if id_shape is not None and id_shape.is_identifier:
        return KeyField("id", "string")

    for candidate in candidates:
        if candidate in fields:
            return KeyField(candidate, fields[candidate].scalar_type)

    return KeyField(None)


__all__ = ["KEY_FIELD_CANDIDATES", "KeyField", "resolve_key_field"]
