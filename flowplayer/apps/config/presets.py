"""Preset configurations for the two player variants."""

from .base_config import (
    PlayerConfig,
    FlowConfig,
    DetectorConfig,
    BackgroundConfig,
)


def get_preset_config(preset_name: str) -> PlayerConfig:
    """
    Get a predefined player configuration.

    Args:
        preset_name: 'lucas_kanade' (cached pyramids, refined detections) or
            'foreground' (background removal, periodic re-detection)

    Returns:
        PlayerConfig instance
    """
    presets = {
        'lucas_kanade': PlayerConfig(
            name='lucas_kanade',
            file_start_state='step',
            camera_start_state='run',
            flow=FlowConfig(entry='pyramid'),
            detector=DetectorConfig(refine=True),
            background=BackgroundConfig(enabled=False),
        ),
        'foreground': PlayerConfig(
            name='foreground',
            auto_track_interval=16,
            file_start_state='run',
            camera_start_state='run',
            flow=FlowConfig(entry='image'),
            detector=DetectorConfig(refine=False),
            background=BackgroundConfig(enabled=True, method='mog'),
        ),
    }

    if preset_name not in presets:
        raise ValueError(
            f"Unknown preset {preset_name!r}; expected one of {sorted(presets)}"
        )

    return presets[preset_name]
