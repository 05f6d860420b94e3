"""Naming helpers shared by adapters and matchers."""

from __future__ import annotations

import re

_SEPARATOR_RE = re.compile(r"[-_\s]+(.)?")


def to_pascal_case(name: str) -> str:
    """Convert ``list-pets``, ``list_pets`` or ``listPets`` to ``ListPets``."""
    converted = _SEPARATOR_RE.sub(lambda m: (m.group(1) or "").upper(), name)
    return converted[:1].upper() + converted[1:]


def to_camel_case(name: str) -> str:
    """Convert a name to camelCase (``Pet`` -> ``pet``, ``pet_tag`` -> ``petTag``)."""
    pascal = to_pascal_case(name)
    return pascal[:1].lower() + pascal[1:]


def singularize(name: str) -> str:
    """Convert a plural English word to singular.

    Simple heuristic-based singularization for API resource names.

    Args:
        name: Plural form (e.g., "pets", "categories", "boxes").

    Returns:
        Singular form (e.g., "pet", "category", "box").
    """
    if name.endswith("ies") and len(name) > 3:
        return name[:-3] + "y"
    if name.endswith(("ses", "xes", "ches", "shes")):
        return name[:-2]
    if name.endswith("s") and not name.endswith("ss"):
        return name[:-1]
    return name


def split_path(path: str) -> tuple[str, ...]:
    """Split a dotted selector path into its segments, ignoring empty parts."""
    return tuple(part for part in path.split(".") if part)


def join_path(parts: tuple[str, ...] | list[str]) -> str:
    return ".".join(parts)


__all__ = [
    "to_pascal_case",
    "to_camel_case",
    "singularize",
    "split_path",
    "join_path",
]
