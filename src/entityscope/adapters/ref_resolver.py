"""RefResolver - follows $ref pointers inside an OpenAPI document."""

from __future__ import annotations

from typing import Any

_MAX_REF_CHAIN = 32


class RefResolver:
    """Resolves internal JSON ``$ref`` pointers within an OpenAPI document.

    Only local references (``#/...``) are followed; anything else resolves
    to an empty schema. Chains of references (a component that is itself a
    ``$ref``) are followed to the end, and results are cached per pointer.

    Example::

        resolver = RefResolver(document)
        schema = resolver.resolve("#/components/schemas/Pet")
        resolver.ref_name("#/components/schemas/Pet")  # "Pet"

    Args:
        document: The full OpenAPI document.
    """

    def __init__(self, document: dict[str, Any]) -> None:
        self._document = document
        self._cache: dict[str, dict[str, Any]] = {}

    def resolve(self, ref: str) -> dict[str, Any]:
        """Resolve ``ref`` to its target dict, or ``{}`` when it dangles."""
        if ref in self._cache:
            return self._cache[ref]

        seen: set[str] = set()
        current_ref = ref
        target: dict[str, Any] = {}
        while len(seen) < _MAX_REF_CHAIN and current_ref not in seen:
            seen.add(current_ref)
            target = self._lookup(current_ref)
            next_ref = target.get("$ref")
            if not isinstance(next_ref, str):
                break
            current_ref = next_ref
        else:
            target = {}

        self._cache[ref] = target
        return target

    def _lookup(self, ref: str) -> dict[str, Any]:
        if not ref.startswith("#/"):
            return {}
        current: Any = self._document
        for raw in ref[2:].split("/"):
            part = raw.replace("~1", "/").replace("~0", "~")
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return {}
        return current if isinstance(current, dict) else {}

    @staticmethod
    def ref_name(ref: str) -> str:
        """Last pointer segment: ``#/components/schemas/Pet`` -> ``Pet``."""
        return ref.rsplit("/", 1)[-1].replace("~1", "/").replace("~0", "~")

    def resolve_schema(
        self, schema: dict[str, Any], _visited: frozenset[str] = frozenset()
    ) -> dict[str, Any]:
        """Resolve a schema that may be a ``$ref`` or a composition.

        Referenced targets are resolved in turn, so a ``$ref`` to an
        ``allOf`` component comes back merged. ``allOf`` members are merged
        (properties and required lists combined, other keys taken from the
        last member); ``oneOf``/``anyOf`` resolve to their first non-null
        member. A reference already being resolved yields ``{}``.
        """
        ref = schema.get("$ref")
        if isinstance(ref, str):
            if ref in _visited:
                return {}
            return self.resolve_schema(self.resolve(ref), _visited | {ref})

        if "allOf" in schema:
            merged: dict[str, Any] = {}
            merged_props: dict[str, Any] = {}
            merged_required: list[str] = []
            for sub in schema["allOf"]:
                resolved = self.resolve_schema(sub, _visited)
                merged_props.update(resolved.get("properties", {}))
                merged_required.extend(resolved.get("required", []))
                for key, value in resolved.items():
                    if key not in ("properties", "required"):
                        merged[key] = value
            if merged_props:
                merged["properties"] = merged_props
            if merged_required:
                merged["required"] = merged_required
            return merged

        for key in ("oneOf", "anyOf"):
            options = [opt for opt in schema.get(key) or [] if opt.get("type") != "null"]
            if options:
                return self.resolve_schema(options[0], _visited)

        return schema

    def schema_name(self, schema: dict[str, Any]) -> str | None:
        """Component name of a referenced schema, else its ``title``."""
        ref = schema.get("$ref")
        if isinstance(ref, str):
            return self.ref_name(ref)
        for key in ("allOf", "oneOf", "anyOf"):
            options = [opt for opt in schema.get(key) or [] if opt.get("type") != "null"]
            if len(options) == 1 or (key != "allOf" and options):
                return self.schema_name(options[0])
        title = schema.get("title")
        return title if isinstance(title, str) else None


__all__ = ["RefResolver"]
