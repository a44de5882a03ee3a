"""Runtime building blocks for the player (source, filters, trackers, UI).

Keep this package lightweight at import time: cv2 is only imported when a
runtime component is used.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "VideoSource",
    "BackgroundRemover",
    "BackgroundSubtractorFactory",
    "PointStore",
    "FeatureDetector",
    "FlowTrackerFactory",
    "HighGuiWindow",
    "WindowLayout",
    "VideoPlayer",
]

_LOCATIONS = {
    "VideoSource": ".video_source",
    "BackgroundRemover": ".background",
    "BackgroundSubtractorFactory": ".background",
    "PointStore": ".points",
    "FeatureDetector": ".features",
    "FlowTrackerFactory": ".flow",
    "HighGuiWindow": ".window",
    "WindowLayout": ".window",
    "VideoPlayer": ".player",
}


def __getattr__(name: str) -> Any:
    if name in _LOCATIONS:
        import importlib

        module = importlib.import_module(_LOCATIONS[name], __name__)
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
