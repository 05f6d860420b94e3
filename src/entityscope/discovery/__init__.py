"""Entity discovery: array location, key fields, mutations and the discoverer."""

from entityscope.discovery.arrays import (
    ENVELOPE_FIELD_NAMES,
    ArrayLocation,
    locate_array,
    resolve_selector,
)
from entityscope.discovery.discoverer import Discoverer, discover
from entityscope.discovery.keys import KEY_FIELD_CANDIDATES, KeyField, resolve_key_field
from entityscope.discovery.mutations import (
    MutationMatcher,
    NamingMutationMatcher,
    PathMutationMatcher,
)

__all__ = [
    "ArrayLocation",
    "ENVELOPE_FIELD_NAMES",
    "locate_array",
    "resolve_selector",
    "KEY_FIELD_CANDIDATES",
    "KeyField",
    "resolve_key_field",
    "MutationMatcher",
    "NamingMutationMatcher",
    "PathMutationMatcher",
    "Discoverer",
    "discover",
]
