"""Runnable front ends built on the player runtime.

Keep this module lightweight: avoid importing cv2 at import time.
"""

from __future__ import annotations

import importlib
from typing import Any


__all__ = [
    "config",
    "runtime",
]


def __getattr__(name: str) -> Any:
    # Lazy module access (helps keep `import flowplayer` fast).
    if name in __all__:
        return importlib.import_module(f"{__name__}.{name}")
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
