"""Pyramidal Lucas-Kanade trackers.

Two entry points share one interface:

- `PyramidFlowTracker` prepares each frame once (the bordered base level of
  an optical flow pyramid); the player keeps it and hands it back as the
  prior of the next frame.
- `ImageFlowTracker` takes grayscale frames and lets OpenCV build pyramids
  inside `calcOpticalFlowPyrLK` on every call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

import numpy as np
import cv2

from ..config import FlowConfig, TerminationConfig
from .features import make_termination_criteria
from .points import as_points

Pyramid = List[np.ndarray]


class BaseFlowTracker(ABC):
    """Track points from a prior grayscale frame into the next one."""

    def __init__(self, config: FlowConfig, termination: TerminationConfig):
        self.config = config
        self.criteria = make_termination_criteria(termination)

    def build_pyramid(self, gray: np.ndarray) -> Optional[Pyramid]:
        """Return a per-frame pyramid to cache, or None when the tracker needs none."""
        return None

    @abstractmethod
    def track(
        self,
        prior_gray: np.ndarray,
        next_gray: np.ndarray,
        prior_points: np.ndarray,
        prior_pyramid: Optional[Pyramid] = None,
        next_pyramid: Optional[Pyramid] = None,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Track `prior_points` into the next frame.

        Returns:
            Tuple of (next_points, status)
            - next_points: (N, 2) float32, one per prior point
            - status: (N,) bool, True where the flow was found
        """
        pass

    def _calc(self, prior_img: np.ndarray, next_img: np.ndarray,
              prior_points: np.ndarray, levels: int) -> Tuple[np.ndarray, np.ndarray]:
        prior_points = as_points(prior_points)
        if len(prior_points) == 0:
            return prior_points, np.zeros((0,), dtype=bool)
        next_points, status, _err = cv2.calcOpticalFlowPyrLK(
            prior_img,
            next_img,
            prior_points.reshape(-1, 1, 2),
            None,
            winSize=tuple(self.config.window),
            maxLevel=levels,
            criteria=self.criteria,
            flags=self.config.flags,
            minEigThreshold=self.config.min_eig_threshold,
        )
        if next_points is None or status is None:
            return np.empty((0, 2), dtype=np.float32), np.zeros((0,), dtype=bool)
        return as_points(next_points), status.reshape(-1).astype(bool)


class ImageFlowTracker(BaseFlowTracker):
    """Single-image entry: OpenCV pyramidizes both frames internally."""

    def track(self, prior_gray, next_gray, prior_points, prior_pyramid=None, next_pyramid=None):
        return self._calc(prior_gray, next_gray, prior_points, self.config.levels)


class PyramidFlowTracker(BaseFlowTracker):
    """Pyramid entry: reuses the frames the player caches between iterations.

    The Python bindings take a single image per input, not a list of levels,
    so only the base level is cached; `calcOpticalFlowPyrLK` builds the
    coarser `levels` from it on each call.
    """

    def build_pyramid(self, gray: np.ndarray) -> Pyramid:
        _levels, pyramid = cv2.buildOpticalFlowPyramid(
            gray, tuple(self.config.window), 0, withDerivatives=False
        )
        return list(pyramid)

    def track(self, prior_gray, next_gray, prior_points, prior_pyramid=None, next_pyramid=None):
        if prior_pyramid is None:
            prior_pyramid = self.build_pyramid(prior_gray)
        if next_pyramid is None:
            next_pyramid = self.build_pyramid(next_gray)
        return self._calc(prior_pyramid[0], next_pyramid[0], prior_points, self.config.levels)


class FlowTrackerFactory:
    """Factory for creating flow trackers."""

    @staticmethod
    def create(config: FlowConfig, termination: TerminationConfig) -> BaseFlowTracker:
        trackers = {
            'pyramid': PyramidFlowTracker,
            'image': ImageFlowTracker,
        }

        tracker_class = trackers.get(config.entry)
        if tracker_class is None:
            raise ValueError(f"Unknown flow entry: {config.entry!r}")

        return tracker_class(config, termination)
