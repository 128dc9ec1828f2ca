"""Data loading utilities for the Notorious rules engine."""

from .loader import (
    IslandData,
    IslandLoader,
    IslandLoadError,
    load_islands,
    load_default_islands,
)

__all__ = [
    # Loader
    "IslandData",
    "IslandLoader",
    "IslandLoadError",
    "load_islands",
    "load_default_islands",
]
