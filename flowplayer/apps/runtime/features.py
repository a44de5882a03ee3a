"""Corner detection and sub-pixel refinement."""

from __future__ import annotations

import logging
from typing import Tuple

import numpy as np
import cv2

from ..config import DetectorConfig, TerminationConfig
from .points import as_points

logger = logging.getLogger(__name__)

_NO_ZERO_ZONE = (-1, -1)


def make_termination_criteria(config: TerminationConfig) -> tuple:
    """Stop after `max_iterations` or once a step moves less than `epsilon`."""
    return (
        cv2.TERM_CRITERIA_COUNT | cv2.TERM_CRITERIA_EPS,
        int(config.max_iterations),
        float(config.epsilon),
    )


class FeatureDetector:
    """Shi-Tomasi corners with optional sub-pixel refinement."""

    def __init__(self, config: DetectorConfig, termination: TerminationConfig):
        self.config = config
        self.criteria = make_termination_criteria(termination)

    def detect(self, gray: np.ndarray) -> np.ndarray:
        """Return up to `max_corners` good tracking points in `gray` as (N, 2) float32."""
        cfg = self.config
        corners = cv2.goodFeaturesToTrack(
            gray,
            maxCorners=cfg.max_corners,
            qualityLevel=cfg.quality_level,
            minDistance=cfg.min_distance,
            mask=None,
            blockSize=cfg.block_size,
            useHarrisDetector=cfg.use_harris,
            k=cfg.harris_k,
        )
        if corners is None or len(corners) == 0:
            logger.info("good tracking points: 0")
            return np.empty((0, 2), dtype=np.float32)

        if cfg.refine:
            corners = self._refine(gray, corners, self._fit_window(gray, cfg.refine_window))

        points = as_points(corners)
        logger.info("good tracking points: %d", len(points))
        return points

    def refine_point(self, gray: np.ndarray, point: Tuple[float, float]) -> Tuple[float, float]:
        """Move `point` to the nearest corner in `gray` at sub-pixel precision.

        Points outside the image are first clamped to its border.
        """
        height, width = gray.shape[:2]
        x = min(max(float(point[0]), 0.0), float(width - 1))
        y = min(max(float(point[1]), 0.0), float(height - 1))
        window = self._fit_window(gray, self.config.click_window)
        refined = self._refine(gray, np.array([[[x, y]]], dtype=np.float32), window)
        return float(refined[0, 0, 0]), float(refined[0, 0, 1])

    def _refine(self, gray: np.ndarray, corners: np.ndarray, window: Tuple[int, int]) -> np.ndarray:
        corners = np.ascontiguousarray(corners, dtype=np.float32).reshape(-1, 1, 2)
        return cv2.cornerSubPix(gray, corners, tuple(window), _NO_ZERO_ZONE, self.criteria)

    @staticmethod
    def _fit_window(gray: np.ndarray, window: Tuple[int, int]) -> Tuple[int, int]:
        # cornerSubPix requires the image to span at least 2 * win + 5 pixels.
        height, width = gray.shape[:2]
        win_w = max(1, min(int(window[0]), (width - 5) // 2))
        win_h = max(1, min(int(window[1]), (height - 5) // 2))
        return win_w, win_h
