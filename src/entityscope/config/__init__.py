"""Settings and user overrides."""

from entityscope.config.overrides import (
    CollectionOverride,
    DiscoveryOverrides,
    InfiniteQueryOverride,
    load_overrides,
)
from entityscope.config.settings import Settings, load_settings

__all__ = [
    "Settings",
    "load_settings",
    "CollectionOverride",
    "InfiniteQueryOverride",
    "DiscoveryOverrides",
    "load_overrides",
]
