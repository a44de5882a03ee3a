"""Tracking point storage."""

from __future__ import annotations

from typing import Iterable, Iterator, Tuple, Union

import numpy as np


def as_points(points: Union[np.ndarray, Iterable]) -> np.ndarray:
    """Coerce any point-like input to a float32 (N, 2) array."""
    arr = np.asarray(points, dtype=np.float32)
    if arr.size == 0:
        return np.empty((0, 2), dtype=np.float32)
    return arr.reshape(-1, 2)


class PointStore:
    """An ordered sequence of 2-D float points. Duplicates are allowed."""

    def __init__(self, points=None):
        self._points = as_points(points if points is not None else [])

    @property
    def points(self) -> np.ndarray:
        """Points as a (N, 2) float32 array."""
        return self._points

    def clear(self):
        self._points = np.empty((0, 2), dtype=np.float32)

    def add(self, point: Tuple[float, float]):
        self._points = np.vstack([self._points, as_points([point])])

    def replace(self, points):
        self._points = as_points(points)

    def swap(self, other: "PointStore"):
        self._points, other._points = other._points, self._points

    def __len__(self) -> int:
        return int(self._points.shape[0])

    def __bool__(self) -> bool:
        return len(self) > 0

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self._points)

    def __repr__(self) -> str:
        return f"PointStore(n={len(self)})"
