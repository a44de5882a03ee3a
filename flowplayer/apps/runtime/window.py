"""OpenCV highgui surface: windows, trackbars, mouse and key polling.

All callbacks registered here are invoked by OpenCV on the calling thread
while `wait_key` runs, so they may mutate their owner without locking.
"""

from __future__ import annotations

import os
from typing import Callable, Optional, Tuple

import numpy as np
import cv2


def has_display() -> bool:
    """Check if a display is available (X11/Wayland)."""
    display = os.environ.get('DISPLAY', '')
    wayland = os.environ.get('WAYLAND_DISPLAY', '')
    return bool(display or wayland)


class WindowLayout:
    """Tile new windows left to right, `across` per row.

    Each row starts below the tallest window of the previous one. The 23 pixel
    allowance leaves room for the window manager's title bar.
    """

    TITLE_BAR = 23

    def __init__(self, across: int = 1):
        self.reset(across)

    def reset(self, across: int = 1):
        """Restart the layout at the top-left corner."""
        self.across = max(1, int(across))
        self.count = 0
        self.move_x = 0
        self.move_y = 0
        self.max_y = 0

    def place(self, size: Tuple[int, int]) -> Tuple[int, int]:
        """Return the (x, y) for the next window of `size` (width, height)."""
        if self.count % self.across == 0:
            self.move_y += self.max_y + self.TITLE_BAR
            self.max_y = self.move_x = 0
        self.count += 1
        position = (self.move_x, self.move_y)
        self.move_x += int(size[0])
        self.max_y = max(self.max_y, int(size[1]))
        return position


class HighGuiWindow:
    """A named OpenCV window with the operations the player uses."""

    def __init__(self, title: str, layout: Optional[WindowLayout] = None):
        self.title = title
        self.layout = layout
        self._open = False

    def open(self, size: Optional[Tuple[int, int]] = None):
        cv2.namedWindow(self.title, cv2.WINDOW_AUTOSIZE)
        if self.layout is not None and size is not None:
            x, y = self.layout.place(size)
            cv2.moveWindow(self.title, x, y)
        self._open = True

    def set_mouse_callback(self, callback: Callable[[int, int, int, int, object], None]):
        cv2.setMouseCallback(self.title, callback)

    def create_trackbar(self, name: str, count: int, on_change: Callable[[int], None]):
        cv2.createTrackbar(name, self.title, 0, int(count), on_change)

    def set_trackbar_pos(self, name: str, position: int):
        cv2.setTrackbarPos(name, self.title, int(position))

    def show(self, image: np.ndarray):
        cv2.imshow(self.title, image)

    def wait_key(self, delay_ms: int) -> int:
        """Wait up to `delay_ms` (0 means forever) and return the key code, or -1."""
        return cv2.waitKey(int(delay_ms))

    def close(self):
        if self._open:
            cv2.destroyWindow(self.title)
            self._open = False
