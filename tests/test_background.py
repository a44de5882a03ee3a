from __future__ import annotations

import cv2
import numpy as np
import pytest

from conftest import make_frame


class MaskSubtractor:
    """Foreground wherever the red channel is bright."""

    def __init__(self):
        self.calls = 0

    def apply(self, frame):
        self.calls += 1
        return np.where(frame[..., 2] > 128, 255, 0).astype(np.uint8)


def test_remover_blackens_background_pixels():
    from flowplayer.apps.runtime.background import BackgroundRemover

    frame = np.full((40, 60, 3), 50, dtype=np.uint8)
    frame[10:20, 10:20] = (10, 20, 200)

    remover = BackgroundRemover(MaskSubtractor())
    out = remover.apply(frame)

    assert out.shape == frame.shape and out.dtype == frame.dtype
    assert np.array_equal(out[10:20, 10:20], frame[10:20, 10:20])
    assert not out[:10].any()
    assert not out[20:].any()


def test_remover_reuses_its_output_buffer():
    from flowplayer.apps.runtime.background import BackgroundRemover

    remover = BackgroundRemover(MaskSubtractor())
    first = remover.apply(np.zeros((40, 60, 3), dtype=np.uint8))
    bright = np.zeros((40, 60, 3), dtype=np.uint8)
    bright[..., 2] = 255
    second = remover.apply(bright)

    assert second is first
    assert second[..., 2].min() == 255
    assert remover.subtractor.calls == 2


def test_remover_with_mog2_learns_static_background():
    from flowplayer.apps.runtime.background import BackgroundRemover, BackgroundSubtractorFactory

    remover = BackgroundRemover(BackgroundSubtractorFactory.create("mog2"))
    background = make_frame(0)
    for _ in range(30):
        remover.apply(background)

    moving = background.copy()
    cv2.rectangle(moving, (150, 100), (190, 140), (0, 0, 255), -1)
    out = remover.apply(moving)

    assert out.shape == moving.shape
    # pixels far from the new object stay black
    assert not out[:60, :100].any()
    assert out[110:130, 160:180].any()


@pytest.mark.skipif(not hasattr(cv2, "bgsegm"), reason="needs opencv-contrib-python")
@pytest.mark.parametrize("method", ["mog", "gmg"])
def test_factory_creates_contrib_models(method):
    from flowplayer.apps.runtime.background import BackgroundSubtractorFactory

    subtractor = BackgroundSubtractorFactory.create(method)
    mask = subtractor.apply(make_frame(0))
    assert mask.shape == (240, 320)


def test_factory_rejects_unknown_method():
    from flowplayer.apps.runtime.background import BackgroundSubtractorFactory

    assert BackgroundSubtractorFactory.methods() == ["gmg", "knn", "mog", "mog2"]
    with pytest.raises(ValueError):
        BackgroundSubtractorFactory.create("median")
