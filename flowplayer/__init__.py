"""
flowplayer: interactive sparse optical flow on video.

Example usage:
    >>> from flowplayer import VideoPlayer, get_preset_config
    >>>
    >>> config = get_preset_config("lucas_kanade")
    >>> with VideoPlayer.open("clip.avi", config) as player:
    ...     player.run()
"""

from __future__ import annotations

from typing import Any

from flowplayer.version import __version__


# Note: Avoid importing cv2 here to keep import time fast.
# Users can explicitly import what they need

__all__ = [
    "__version__",
    # Lazy public API
    "VideoPlayer",
    "VideoSource",
    "PlayerConfig",
    "get_preset_config",
]


def __getattr__(name: str) -> Any:
    """Lazy import for modules that pull in cv2."""
    if name == "VideoPlayer":
        from flowplayer.apps.runtime.player import VideoPlayer
        return VideoPlayer
    elif name == "VideoSource":
        from flowplayer.apps.runtime.video_source import VideoSource
        return VideoSource
    elif name == "PlayerConfig":
        from flowplayer.apps.config import PlayerConfig
        return PlayerConfig
    elif name == "get_preset_config":
        from flowplayer.apps.config import get_preset_config
        return get_preset_config
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
