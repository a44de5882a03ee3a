"""Interactive sparse optical flow video player.

The player runs a frame-at-a-time state machine:

    grab -> preprocess -> gray -> (pyramid) -> apply pending mode
         -> track prior points -> draw -> show -> swap prior/next

Hot-keys and mouse clicks only record a pending request (`mode`), which is
applied exactly once, on the next frame. The trackbar scrubs file-backed
videos: a drag seeks, switches to STEP and renders the target frame right
away, so the buffers are fresh when the key wait returns.

All OpenCV callbacks run synchronously inside `wait_key` on the main
thread; nothing here is shared with another thread.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple, Union

import numpy as np
import cv2

from ..config import PlayerConfig, BackgroundConfig
from .background import BackgroundRemover
from .drawing import draw_point, draw_points
from .features import FeatureDetector
from .flow import BaseFlowTracker, FlowTrackerFactory
from .points import PointStore
from .video_source import VideoSource
from .window import HighGuiWindow, WindowLayout
from flowplayer.utils.rich_utils import CONSOLE

logger = logging.getLogger(__name__)

# Player states
RUN = 'run'
STEP = 'step'

# Pending user requests, applied once on the next frame
NONE = 'none'
POINT = 'point'
CLEAR = 'clear'
TRACK = 'track'


class GrayPreprocessor:
    """BGR frame to grayscale."""

    def __call__(self, frame: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
        return _to_gray(frame, out)


class ForegroundPreprocessor:
    """Blacken the background, then convert to grayscale."""

    def __init__(self, remover: BackgroundRemover):
        self.remover = remover

    def __call__(self, frame: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
        return _to_gray(self.remover.apply(frame), out)


def _to_gray(frame: np.ndarray, out: Optional[np.ndarray]) -> np.ndarray:
    if out is not None and out.shape == frame.shape[:2] and out.dtype == frame.dtype:
        return cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY, dst=out)
    return cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)


def make_preprocessor(config: BackgroundConfig):
    if config.enabled:
        return ForegroundPreprocessor(BackgroundRemover.from_config(config))
    return GrayPreprocessor()


class VideoPlayer:
    """Play a video file or camera, tracking points chosen by hot-key or mouse."""

    def __init__(
        self,
        source: VideoSource,
        config: Optional[PlayerConfig] = None,
        window=None,
        preprocess=None,
        detector: Optional[FeatureDetector] = None,
        tracker: Optional[BaseFlowTracker] = None,
    ):
        """
        Args:
            source: An opened (or failed) VideoSource; the player owns it.
            config: Player configuration (defaults to the Lucas-Kanade preset values).
            window: Display surface; defaults to a HighGuiWindow titled after the source.
            preprocess: Callable turning a BGR frame into the gray tracking frame.
            detector: Feature detector used for TRACK requests and click refinement.
            tracker: Flow tracker (pyramid or image entry).
        """
        self.config = config or PlayerConfig()
        self.source = source
        self.title = source.title
        self.window = window if window is not None else HighGuiWindow(self.title)
        self.preprocess = preprocess if preprocess is not None else make_preprocessor(self.config.background)
        self.detector = detector or FeatureDetector(self.config.detector, self.config.termination)
        self.tracker = tracker or FlowTrackerFactory.create(self.config.flow, self.config.termination)

        self.ms_delay = int(1000 // source.fps) if source.is_open else 0
        self.frame_count = source.frame_count if source.is_open else 0
        self.position = 0
        self.state = self.config.camera_start_state if source.is_camera else self.config.file_start_state
        self.night = False
        self.mode = NONE
        self.new_point: Tuple[float, float] = (0.0, 0.0)

        # Buffers, reused across frames
        self.image: Optional[np.ndarray] = None
        self._frame: Optional[np.ndarray] = None
        self.prior_gray: Optional[np.ndarray] = None
        self.next_gray: Optional[np.ndarray] = None
        self.prior_pyramid = None
        self.next_pyramid = None
        self.prior_points = PointStore()
        self.next_points = PointStore()

        self.frames_shown = 0
        self._syncing_trackbar = False

        if self.is_open:
            self._setup_window()
            self.reset()

    @classmethod
    def open(
        cls,
        source: Union[int, str],
        config: Optional[PlayerConfig] = None,
        layout: Optional[WindowLayout] = None,
    ) -> "VideoPlayer":
        """Open a camera index or a video file path and build a player for it."""
        config = config or PlayerConfig()
        video = VideoSource.open(source, fallback_fps=config.fallback_fps)
        return cls(video, config, window=HighGuiWindow(video.title, layout))

    @property
    def is_open(self) -> bool:
        """True if this can play."""
        return self.source.is_open

    # ------------------------------------------------------------------ #
    # Window and callbacks
    # ------------------------------------------------------------------ #

    def _setup_window(self):
        self.window.open(self.source.frame_size)
        self.window.set_mouse_callback(self._on_mouse)
        if self.frame_count:
            self.window.create_trackbar(self.config.display.trackbar_name, self.frame_count, self._on_trackbar)

    def _on_mouse(self, event, x, y, flags, param):
        """Left click: track a new point from the next frame on."""
        if event == cv2.EVENT_LBUTTONDOWN:
            self.new_point = (float(x), float(y))
            self.mode = POINT

    def _on_trackbar(self, position: int):
        """Scrub to `position`, stop, and render that frame."""
        if self._syncing_trackbar:
            return
        self.source.set_position(position)
        self.state = STEP
        self.reset()
        self.show_frame()

    def _sync_trackbar(self):
        # setTrackbarPos fires the trackbar callback; it must not seek again.
        self._syncing_trackbar = True
        try:
            self.window.set_trackbar_pos(self.config.display.trackbar_name, self.position)
        finally:
            self._syncing_trackbar = False

    # ------------------------------------------------------------------ #
    # Frame pipeline
    # ------------------------------------------------------------------ #

    def reset(self):
        """Seed prior state from the current frame without consuming it."""
        p = self.source.position
        frame = self.source.grab_next_frame(self._frame)
        self.source.set_position(p)
        if frame is None:
            return
        self._frame = frame
        self.next_gray = self.preprocess(frame, self.next_gray)
        self.prior_gray = self.next_gray.copy()
        pyramid = self.tracker.build_pyramid(self.prior_gray)
        self.prior_pyramid = self.next_pyramid = pyramid

    def show_frame(self) -> bool:
        """Process and display the next frame. Return False at end of stream."""
        frame = self.source.grab_next_frame(self._frame)
        if frame is None:
            self.state = STEP
            return False
        self._frame = frame

        if self.frame_count:
            self.position = self.source.position
            self._sync_trackbar()

        if self.image is None or self.image.shape != frame.shape:
            self.image = frame.copy()
        else:
            np.copyto(self.image, frame)

        self.next_gray = self.preprocess(frame, self.next_gray)
        self.next_pyramid = self.tracker.build_pyramid(self.next_gray)
        self.handle_modes()

        self.window.show(self.image)
        self.prior_points.swap(self.next_points)
        self.prior_gray, self.next_gray = self.next_gray, self.prior_gray
        self.prior_pyramid, self.next_pyramid = self.next_pyramid, self.prior_pyramid
        self.frames_shown += 1
        return True

    def _auto_track_due(self) -> bool:
        interval = self.config.auto_track_interval
        if interval <= 0:
            return False
        # Live sources have no position; count frames instead.
        index = self.position if self.frame_count else self.frames_shown
        return index % interval == 0

    def handle_modes(self):
        """Apply night and the pending request, then track and draw points."""
        display = self.config.display
        if self.night:
            self.image[...] = 0

        mode = TRACK if self._auto_track_due() else self.mode

        if mode == CLEAR:
            self.prior_points.clear()
            self.next_points.clear()
        elif mode == TRACK:
            self.next_points.replace(self.detector.detect(self.next_gray))
            for point in self.next_points:
                draw_point(self.image, point, display.point_radius, display.point_color)
        elif self.prior_points:
            next_points, status = self.tracker.track(
                self.prior_gray,
                self.next_gray,
                self.prior_points.points,
                self.prior_pyramid,
                self.next_pyramid,
            )
            self.next_points.replace(
                draw_points(self.image, status, next_points, display.point_radius, display.point_color)
            )
        else:
            self.next_points.clear()

        if mode == POINT:
            point = self.detector.refine_point(self.next_gray, self.new_point)
            self.next_points.add(point)
            draw_point(self.image, point, display.point_radius, display.point_color)

        self.mode = NONE

    # ------------------------------------------------------------------ #
    # Main loop
    # ------------------------------------------------------------------ #

    def handle_key(self, key: int) -> bool:
        """Apply a hot-key. Return False when the user asked to quit."""
        if key is None or key < 0:
            return True
        c = chr(key & 0xFF).lower()
        if c == 'q':
            return False
        if c == 'n':
            self.night = not self.night
            CONSOLE.print(f"[cyan]Night: {'ON' if self.night else 'OFF'}")
        elif c == 't':
            self.mode = TRACK
        elif c == 'c':
            self.mode = CLEAR
        elif c == 'r':
            self.state = RUN
        elif c == 's':
            self.state = STEP
        return True

    def run(self) -> bool:
        """Analyze the video frame by frame according to hot-keys.

        Return True when the user quits, False if the source is not open.
        """
        while self.is_open:
            self.show_frame()
            wait = self.ms_delay if self.state == RUN else 0
            if not self.handle_key(self.window.wait_key(wait)):
                return True
        return False

    def describe(self) -> str:
        return self.source.describe()

    def close(self):
        """Destroy the window and release the video."""
        self.window.close()
        self.source.release()

    def __enter__(self) -> "VideoPlayer":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
