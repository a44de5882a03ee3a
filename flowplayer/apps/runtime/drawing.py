"""Overlay drawing for tracked points."""

from __future__ import annotations

import logging
from typing import Tuple

import numpy as np
import cv2

from .points import as_points

logger = logging.getLogger(__name__)

GREEN = (0, 255, 0)


def draw_point(image: np.ndarray, center, radius: int = 3,
               color: Tuple[int, int, int] = GREEN) -> None:
    """Draw a filled disk of `radius` on `image` at `center`."""
    x, y = int(round(float(center[0]))), int(round(float(center[1])))
    cv2.circle(image, (x, y), int(radius), tuple(int(c) for c in color),
               thickness=cv2.FILLED, lineType=cv2.LINE_8)


def draw_points(image: np.ndarray, status: np.ndarray, points: np.ndarray,
                radius: int = 3, color: Tuple[int, int, int] = GREEN) -> np.ndarray:
    """Draw each point whose status is True and return the points drawn."""
    points = as_points(points)
    status = np.asarray(status, dtype=bool).reshape(-1)
    if len(status) != len(points):
        raise ValueError(f"{len(status)} status flags for {len(points)} points")
    good = points[status]
    for point in good:
        draw_point(image, point, radius, color)
    logger.debug("drawPoints(): %d / %d", len(good), len(points))
    return good
