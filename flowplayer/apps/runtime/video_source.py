"""Video source adapter over `cv2.VideoCapture`.

A source is either a video file (seekable, with a known frame count) or a live
camera (frame count 0, position always 0 from the player's point of view).
"""

from __future__ import annotations

from typing import Optional, Tuple, Union

import numpy as np
import cv2

DEFAULT_CAMERA = -1


def fourcc_to_string(code: int) -> str:
    """Decode a 32-bit FourCC into its 4 characters (little-endian byte order)."""
    code = int(code) & 0xFFFFFFFF
    return bytes((code >> shift) & 0xFF for shift in (0, 8, 16, 24)).decode('latin-1')


def string_to_fourcc(text: str) -> int:
    """Encode 4 characters back into a 32-bit little-endian FourCC."""
    raw = text.encode('latin-1')
    if len(raw) != 4:
        raise ValueError(f"FourCC must be exactly 4 characters, got {text!r}")
    return raw[0] | (raw[1] << 8) | (raw[2] << 16) | (raw[3] << 24)


def parse_source(source: str) -> Union[int, str]:
    """
    Interpret a command-line source argument.

    '-' (or an empty string) selects the default camera, an integer selects
    that camera, anything else is a video file path.
    """
    if source is None or source.strip() in ('', '-'):
        return DEFAULT_CAMERA
    try:
        return int(source.strip())
    except ValueError:
        return source


class VideoSource:
    """A video file or camera with the properties the player needs."""

    def __init__(self, capture, title: str, is_camera: bool, fallback_fps: float = 30.0):
        self.capture = capture
        self.title = title
        self.is_camera = is_camera
        self.fallback_fps = fallback_fps

    @classmethod
    def open(cls, source: Union[int, str], fallback_fps: float = 30.0) -> "VideoSource":
        """
        Open a camera index or a video file path.

        Never raises on a bad path or a missing camera: check `is_open`.
        """
        if isinstance(source, int):
            return cls(cv2.VideoCapture(source), f"Camera {source}", True, fallback_fps)
        return cls(cv2.VideoCapture(str(source)), str(source), False, fallback_fps)

    @property
    def is_open(self) -> bool:
        return self.capture is not None and bool(self.capture.isOpened())

    def grab_next_frame(self, out: Optional[np.ndarray] = None) -> Optional[np.ndarray]:
        """Read the next BGR frame, reusing `out` when given. None at end of stream."""
        if out is not None:
            ok, frame = self.capture.read(out)
        else:
            ok, frame = self.capture.read()
        if not ok or frame is None or frame.size == 0:
            return None
        return frame

    def _get(self, prop: int) -> float:
        value = self.capture.get(prop)
        return float(value) if value is not None else 0.0

    @property
    def frame_size(self) -> Tuple[int, int]:
        """(width, height) in pixels."""
        return (int(self._get(cv2.CAP_PROP_FRAME_WIDTH)),
                int(self._get(cv2.CAP_PROP_FRAME_HEIGHT)))

    @property
    def fps(self) -> float:
        fps = self._get(cv2.CAP_PROP_FPS)
        return fps if fps > 0 else self.fallback_fps

    @property
    def frame_count(self) -> int:
        """Total frames in a video file, 0 for cameras or when unknown."""
        if self.is_camera:
            return 0
        return max(0, int(self._get(cv2.CAP_PROP_FRAME_COUNT)))

    @property
    def fourcc(self) -> int:
        return int(self._get(cv2.CAP_PROP_FOURCC))

    @property
    def fourcc_string(self) -> str:
        return fourcc_to_string(self.fourcc)

    @property
    def position(self) -> int:
        """Index of the next frame to be read."""
        return int(self._get(cv2.CAP_PROP_POS_FRAMES))

    def set_position(self, frame_idx: int) -> bool:
        return bool(self.capture.set(cv2.CAP_PROP_POS_FRAMES, int(frame_idx)))

    def describe(self) -> str:
        """One-line stream summary, e.g. '100 (640x480) frames of MJPG video at 25 FPS'."""
        width, height = self.frame_size
        count = self.frame_count
        text = f"{count} " if count else ""
        text += f"({width}x{height}) frames of "
        if count:
            text += f"{self.fourcc_string} "
        text += f"video at {self.fps:g} FPS"
        return text

    def release(self):
        """Release the capture."""
        if self.capture is not None:
            self.capture.release()
            self.capture = None
