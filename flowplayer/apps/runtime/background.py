"""Background removal with OpenCV background subtractors."""

from __future__ import annotations

from typing import Callable, Dict, Optional

import numpy as np
import cv2

from ..config import BackgroundConfig


def _bgsegm():
    bgsegm = getattr(cv2, 'bgsegm', None)
    if bgsegm is None:
        raise ImportError(
            "The MOG and GMG background models live in cv2.bgsegm; "
            "install `opencv-contrib-python` to use them."
        )
    return bgsegm


class BackgroundSubtractorFactory:
    """Factory hiding the differing create*() calls of the subtractor family."""

    _creators: Dict[str, Callable[[], object]] = {
        'mog': lambda: _bgsegm().createBackgroundSubtractorMOG(),
        'gmg': lambda: _bgsegm().createBackgroundSubtractorGMG(),
        'mog2': lambda: cv2.createBackgroundSubtractorMOG2(),
        'knn': lambda: cv2.createBackgroundSubtractorKNN(),
    }

    @classmethod
    def methods(cls) -> list:
        return sorted(cls._creators)

    @classmethod
    def create(cls, method: str):
        """
        Create a background subtractor.

        Args:
            method: One of 'mog', 'gmg', 'mog2', 'knn'

        Returns:
            An object with `apply(frame) -> mask`
        """
        creator = cls._creators.get(method)
        if creator is None:
            raise ValueError(f"Unknown background method: {method!r}")
        return creator()


class BackgroundRemover:
    """Stateful per-stream filter blackening pixels classified as background.

    The output buffer is owned by the remover and reused between frames, so
    callers must copy the result if they need it past the next `apply`.
    """

    def __init__(self, subtractor):
        self.subtractor = subtractor
        self._output: Optional[np.ndarray] = None

    @classmethod
    def from_config(cls, config: BackgroundConfig) -> "BackgroundRemover":
        return cls(BackgroundSubtractorFactory.create(config.method))

    def mask(self, frame: np.ndarray) -> np.ndarray:
        """Update the background model with `frame` and return its foreground mask."""
        return self.subtractor.apply(frame)

    def apply(self, frame: np.ndarray) -> np.ndarray:
        """Return `frame` with every background pixel set to zero."""
        fg_mask = self.mask(frame)
        if self._output is None or self._output.shape != frame.shape or self._output.dtype != frame.dtype:
            self._output = np.zeros_like(frame)
        else:
            self._output.fill(0)
        keep = fg_mask != 0
        if frame.ndim == 3 and keep.ndim == 2:
            keep = keep[..., None]
        np.copyto(self._output, frame, where=keep)
        return self._output
