"""Track data loading utilities for the marble race engine."""

from .loader import (
    TrackLoader,
    TrackLoadError,
    load_game_config,
    load_default_config,
    get_track_stats,
    resource_path,
)

__all__ = [
    # Loader
    "TrackLoader",
    "TrackLoadError",
    "load_game_config",
    "load_default_config",
    "get_track_stats",
    "resource_path",
]
