from __future__ import annotations

import cv2
import numpy as np
import pytest


WIDTH, HEIGHT = 320, 240


def make_frame(shift: int = 0, width: int = WIDTH, height: int = HEIGHT) -> np.ndarray:
    """A BGR frame of white squares on black, moved right by `shift` pixels."""
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    for x0 in range(20, width - 40, 50):
        for y0 in range(20, height - 40, 50):
            cv2.rectangle(frame, (x0 + shift, y0), (x0 + shift + 19, y0 + 19), (255, 255, 255), -1)
    return frame


def make_frames(n: int) -> list:
    return [make_frame(i % 8) for i in range(n)]


class FakeCapture:
    """Scripted stand-in for cv2.VideoCapture."""

    def __init__(self, frames, fps=25.0, fourcc="MJPG", opened=True, frame_count=None):
        self.frames = list(frames)
        self.pos = 0
        self.fps = fps
        self.fourcc = cv2.VideoWriter_fourcc(*fourcc) if fourcc else 0
        self.opened = opened
        self.frame_count = len(self.frames) if frame_count is None else frame_count
        self.released = False

    def isOpened(self):
        return self.opened

    def get(self, prop):
        if prop == cv2.CAP_PROP_FPS:
            return self.fps
        if prop == cv2.CAP_PROP_FRAME_COUNT:
            return float(self.frame_count)
        if prop == cv2.CAP_PROP_POS_FRAMES:
            return float(self.pos)
        if prop == cv2.CAP_PROP_FOURCC:
            return float(self.fourcc)
        if prop == cv2.CAP_PROP_FRAME_WIDTH:
            return float(self.frames[0].shape[1]) if self.frames else 0.0
        if prop == cv2.CAP_PROP_FRAME_HEIGHT:
            return float(self.frames[0].shape[0]) if self.frames else 0.0
        return 0.0

    def set(self, prop, value):
        if prop == cv2.CAP_PROP_POS_FRAMES:
            self.pos = max(0, min(int(value), len(self.frames)))
            return True
        return False

    def read(self, image=None):
        if self.pos >= len(self.frames):
            return False, None
        frame = self.frames[self.pos].copy()
        self.pos += 1
        return True, frame

    def release(self):
        self.released = True
        self.opened = False


class FakeWindow:
    """Records what the player does with its window.

    `keys` scripts `wait_key`: ints are returned as key codes, callables are
    called with the window (to click or drag inside the key wait) and their
    result is returned.
    """

    def __init__(self, keys=()):
        self.keys = list(keys)
        self.opened_with = None
        self.mouse_callback = None
        self.trackbars = {}
        self.trackbar_positions = []
        self.shown = []
        self.waits = []
        self.closed = False

    def open(self, size=None):
        self.opened_with = size

    def set_mouse_callback(self, callback):
        self.mouse_callback = callback

    def create_trackbar(self, name, count, on_change):
        self.trackbars[name] = (count, on_change)

    def set_trackbar_pos(self, name, position):
        self.trackbar_positions.append(position)
        # OpenCV fires the callback on programmatic moves too.
        self.trackbars[name][1](position)

    def show(self, image):
        self.shown.append(image.copy())

    def wait_key(self, delay_ms):
        self.waits.append(delay_ms)
        if not self.keys:
            return ord('q')
        key = self.keys.pop(0)
        if callable(key):
            return key(self)
        return key

    def click(self, x, y):
        self.mouse_callback(cv2.EVENT_LBUTTONDOWN, x, y, 0, None)

    def drag(self, position, name="Position"):
        self.trackbars[name][1](position)

    def close(self):
        self.closed = True


@pytest.fixture
def frames():
    return make_frames(100)


@pytest.fixture(autouse=True)
def _log_to_tmp(tmp_path, monkeypatch):
    from flowplayer.utils.rich_utils import disable_file_logging

    # Keep console mirroring out of the working tree.
    monkeypatch.setenv("FLOWPLAYER_LOG_FILE", str(tmp_path / "logs" / "flowplayer.log"))
    yield
    disable_file_logging()
