from __future__ import annotations

import random

import cv2
import numpy as np
import pytest

from conftest import FakeCapture, FakeWindow


def _player(frames, preset="lucas_kanade", keys=(), is_camera=False, fps=25.0, **kwargs):
    from flowplayer.apps.config import get_preset_config
    from flowplayer.apps.runtime.player import VideoPlayer
    from flowplayer.apps.runtime.video_source import VideoSource

    title = "Camera -1" if is_camera else "clip.avi"
    capture = FakeCapture(frames, fps=fps)
    source = VideoSource(capture, title, is_camera)
    window = FakeWindow(keys)
    return VideoPlayer(source, get_preset_config(preset), window=window, **kwargs)


def _green_mask(image):
    return np.all(image == (0, 255, 0), axis=-1)


def test_file_player_setup(frames):
    from flowplayer.apps.runtime.player import NONE, STEP

    player = _player(frames)
    window = player.window

    assert player.is_open
    assert window.opened_with == (320, 240)
    assert window.mouse_callback is not None
    assert window.trackbars["Position"][0] == 100
    assert player.frame_count == 100
    assert player.ms_delay == 40
    assert player.state == STEP
    assert player.mode == NONE
    assert player.night is False

    # reset seeds both gray frames without consuming a frame
    assert player.source.position == 0
    assert np.array_equal(player.prior_gray, player.next_gray)
    assert player.prior_gray is not player.next_gray
    assert player.prior_pyramid is player.next_pyramid


def test_camera_player_has_no_trackbar(frames):
    from flowplayer.apps.runtime.player import RUN

    player = _player(frames, is_camera=True, fps=0.0)
    assert player.title == "Camera -1"
    assert player.frame_count == 0
    assert player.window.trackbars == {}
    assert player.ms_delay == 33
    assert player.state == RUN
    assert player.describe().endswith("video at 30 FPS")

    player.show_frame()
    assert player.position == 0
    assert player.window.trackbar_positions == []


def test_empty_first_frame_steps_without_swapping():
    from flowplayer.apps.runtime.player import STEP

    player = _player([])
    player.state = "run"
    assert player.show_frame() is False
    assert player.state == STEP
    assert player.window.shown == []
    assert player.frames_shown == 0
    assert len(player.prior_points) == 0


def test_track_request_detects_and_draws(frames):
    player = _player(frames)
    assert player.handle_key(ord("t"))
    player.show_frame()

    detected = len(player.prior_points)
    assert 0 < detected <= 500
    assert _green_mask(player.window.shown[-1]).any()

    # the next frame tracks what was detected
    player.show_frame()
    assert 0 < len(player.prior_points) <= detected
    assert _green_mask(player.window.shown[-1]).any()


def test_keys_are_case_insensitive(frames):
    from flowplayer.apps.runtime.player import CLEAR, RUN, STEP, TRACK

    player = _player(frames)
    player.handle_key(ord("T"))
    assert player.mode == TRACK
    player.handle_key(ord("C"))
    assert player.mode == CLEAR
    player.handle_key(ord("R"))
    assert player.state == RUN
    player.handle_key(ord("S"))
    assert player.state == STEP
    player.handle_key(ord("N"))
    assert player.night is True
    assert player.handle_key(ord("x")) is True
    assert player.handle_key(-1) is True
    assert player.handle_key(ord("Q")) is False


def test_clear_empties_both_sets_and_is_idempotent(frames):
    player = _player(frames)
    player.handle_key(ord("t"))
    player.show_frame()
    assert len(player.prior_points) > 0

    for _ in range(2):
        player.handle_key(ord("c"))
        player.show_frame()
        assert len(player.prior_points) == 0
        assert len(player.next_points) == 0

    # and they stay empty until the next TRACK or POINT
    player.show_frame()
    assert len(player.prior_points) == 0


def test_click_adds_one_refined_point(frames):
    player = _player(frames)
    player.show_frame()
    assert len(player.prior_points) == 0

    player.window.click(120, 80)
    player.show_frame()

    assert len(player.prior_points) == 1
    x, y = player.prior_points.points[0]
    assert abs(x - 120) <= 31 and abs(y - 80) <= 31
    shown = player.window.shown[-1]
    assert _green_mask(shown)[int(round(y)), int(round(x))]


def test_click_outside_image_does_not_crash(frames):
    player = _player(frames)
    player.window.click(5000, -20)
    player.show_frame()
    assert len(player.prior_points) == 1
    assert np.all(np.isfinite(player.prior_points.points))


def test_point_count_never_grows_without_a_request(frames):
    from flowplayer.apps.runtime.player import POINT

    rng = random.Random(7)
    player = _player(frames)
    player.handle_key(ord("t"))
    player.show_frame()

    for _ in range(40):
        choice = rng.choice(["none", "none", "click", "clear", "night"])
        if choice == "click":
            player.window.click(rng.randrange(320), rng.randrange(240))
        elif choice == "clear":
            player.handle_key(ord("c"))
        elif choice == "night":
            player.handle_key(ord("n"))

        before = len(player.prior_points)
        added = 1 if player.mode == POINT else 0
        if not player.show_frame():
            break
        assert len(player.prior_points) <= before + added


def test_night_blanks_the_video(frames):
    player = _player(frames)
    player.handle_key(ord("t"))
    player.show_frame()
    player.handle_key(ord("n"))
    player.show_frame()

    shown = player.window.shown[-1]
    green = _green_mask(shown)
    assert green.any()
    assert not shown[~green].any()


def test_night_toggled_twice_matches_no_toggle(frames):
    plain = _player(frames)
    toggled = _player(frames)
    for player in (plain, toggled):
        player.handle_key(ord("t"))
        player.show_frame()
    toggled.handle_key(ord("n"))
    toggled.handle_key(ord("n"))
    plain.show_frame()
    toggled.show_frame()

    assert np.array_equal(plain.window.shown[-1], toggled.window.shown[-1])


def test_trackbar_scrub_seeks_steps_and_renders_once(frames):
    from flowplayer.apps.runtime.player import RUN, STEP

    player = _player(frames)
    player.state = RUN
    shown_before = len(player.window.shown)

    player.window.drag(50)

    assert player.position in (50, 51)
    assert player.state == STEP
    assert len(player.window.shown) == shown_before + 1
    assert np.array_equal(player.window.shown[-1], frames[50])
    # the trackbar echo did not trigger a second seek
    assert player.window.trackbar_positions == [player.position]


def test_reset_does_not_consume_a_frame(frames):
    player = _player(frames)
    player.source.set_position(10)
    player.reset()

    assert player.source.position == 10
    assert np.array_equal(player.prior_gray, player.next_gray)
    assert player.prior_pyramid is player.next_pyramid
    expected = cv2.cvtColor(frames[10], cv2.COLOR_BGR2GRAY)
    assert np.array_equal(player.prior_gray, expected)


def test_replayed_frame_detects_identical_points(frames):
    player = _player(frames)

    results = []
    for _ in range(2):
        player.window.drag(10)
        player.handle_key(ord("t"))
        player.show_frame()
        results.append(player.prior_points.points.copy())

    assert len(results[0]) > 0
    assert np.array_equal(results[0], results[1])


def test_run_loop_waits_by_state_and_quits(frames):
    player = _player(frames, keys=[ord("r"), -1, ord("s"), ord("q")])
    assert player.run() is True
    assert player.window.waits == [0, 40, 40, 0]
    assert len(player.window.shown) == 4


def test_end_of_stream_switches_to_step(frames):
    player = _player(frames[:2], keys=[ord("r"), -1, -1, ord("q")])
    assert player.run() is True
    # third frame is missing: RUN becomes STEP and waits forever for a key
    assert player.window.waits == [0, 40, 0, 0]
    assert len(player.window.shown) == 2


def test_closed_source_does_not_run():
    from flowplayer.apps.runtime.player import VideoPlayer
    from flowplayer.apps.runtime.video_source import VideoSource

    source = VideoSource(FakeCapture([], opened=False), "missing.avi", False)
    window = FakeWindow()
    player = VideoPlayer(source, window=window)
    assert not player.is_open
    assert window.opened_with is None
    assert player.run() is False


def test_close_releases_source_and_window(frames):
    player = _player(frames)
    capture = player.source.capture
    with player:
        player.show_frame()
    assert player.window.closed
    assert capture.released


def test_lucas_kanade_variant_caches_pyramids(frames):
    player = _player(frames)
    player.show_frame()
    assert isinstance(player.prior_pyramid, list)
    assert player.prior_pyramid[0].shape == (240, 320)


class _KeepAll:
    def apply(self, frame):
        return np.full(frame.shape[:2], 255, dtype=np.uint8)


def _foreground_player(frames, **kwargs):
    from flowplayer.apps.runtime.background import BackgroundRemover
    from flowplayer.apps.runtime.player import ForegroundPreprocessor

    preprocess = ForegroundPreprocessor(BackgroundRemover(_KeepAll()))
    return _player(frames, preset="foreground", preprocess=preprocess, **kwargs)


def test_foreground_variant_redetects_every_16_frames(frames):
    from flowplayer.apps.runtime.player import RUN

    player = _foreground_player(frames)
    assert player.state == RUN
    assert player.prior_pyramid is None

    for _ in range(15):
        player.show_frame()
        assert len(player.prior_points) == 0

    player.show_frame()
    assert player.position == 16
    assert len(player.prior_points) > 0

    player.show_frame()
    assert len(player.prior_points) > 0


def test_foreground_camera_counts_frames_for_redetection(frames):
    player = _foreground_player(frames, is_camera=True)
    player.show_frame()
    assert len(player.prior_points) > 0


def test_foreground_gray_comes_from_masked_frame(frames):
    from flowplayer.apps.runtime.background import BackgroundRemover
    from flowplayer.apps.runtime.player import ForegroundPreprocessor

    class _DropAll:
        def apply(self, frame):
            return np.zeros(frame.shape[:2], dtype=np.uint8)

    preprocess = ForegroundPreprocessor(BackgroundRemover(_DropAll()))
    player = _player(frames, preset="foreground", preprocess=preprocess)
    player.show_frame()
    assert not player.prior_gray.any()
    # the display still shows the raw video
    assert np.array_equal(player.window.shown[-1], frames[0])


@pytest.mark.skipif(not hasattr(cv2, "bgsegm"), reason="needs opencv-contrib-python")
def test_foreground_preset_builds_mog_remover(frames):
    from flowplayer.apps.runtime.player import ForegroundPreprocessor

    player = _player(frames, preset="foreground")
    assert isinstance(player.preprocess, ForegroundPreprocessor)
    assert player.show_frame() is True
