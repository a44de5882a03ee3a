"""Configuration for the player and the demos."""

from .base_config import (
    TerminationConfig,
    DetectorConfig,
    FlowConfig,
    BackgroundConfig,
    DisplayConfig,
    PlayerConfig,
)
from .presets import get_preset_config

__all__ = [
    "TerminationConfig",
    "DetectorConfig",
    "FlowConfig",
    "BackgroundConfig",
    "DisplayConfig",
    "PlayerConfig",
    "get_preset_config",
]
