"""Configuration classes for the optical flow player and the demos.

The defaults below are the fixed tracking/detection parameters the player was
tuned with. They live here so the runtime classes stay pure orchestration.
"""

from dataclasses import dataclass, field, asdict
from typing import Tuple, Literal
from pathlib import Path
import yaml
import json


@dataclass
class TerminationConfig:
    """Iterative search termination: stop after N steps or below epsilon movement."""

    max_iterations: int = 20
    epsilon: float = 0.03  # pixels


@dataclass
class DetectorConfig:
    """Corner detection (goodFeaturesToTrack) and sub-pixel refinement."""

    max_corners: int = 500
    quality_level: float = 0.01
    min_distance: float = 10.0
    block_size: int = 3
    use_harris: bool = False
    harris_k: float = 0.04

    # Refine bulk detections to sub-pixel accuracy
    refine: bool = True
    refine_window: Tuple[int, int] = (10, 10)
    # Window used when snapping a mouse click to the nearest corner
    click_window: Tuple[int, int] = (31, 31)


@dataclass
class FlowConfig:
    """Pyramidal Lucas-Kanade configuration."""

    window: Tuple[int, int] = (31, 31)
    levels: int = 3
    min_eig_threshold: float = 0.001
    flags: int = 0
    # 'pyramid': build one pyramid per frame and reuse it as the next prior
    # 'image': hand grayscale frames to the tracker directly
    entry: Literal['pyramid', 'image'] = 'pyramid'


@dataclass
class BackgroundConfig:
    """Background removal before grayscale conversion."""

    enabled: bool = False
    method: Literal['mog', 'mog2', 'gmg', 'knn'] = 'mog'


@dataclass
class DisplayConfig:
    """Player window appearance."""

    trackbar_name: str = "Position"
    point_radius: int = 3
    point_color: Tuple[int, int, int] = (0, 255, 0)  # BGR green


@dataclass
class PlayerConfig:
    """Configuration for the interactive optical flow player."""

    name: str = 'lucas_kanade'

    # Re-detect features every N frames (0 disables)
    auto_track_interval: int = 0
    # Initial RUN/STEP state by source kind
    file_start_state: Literal['run', 'step'] = 'step'
    camera_start_state: Literal['run', 'step'] = 'run'
    # Substituted when the capture reports 0 FPS (some webcams do)
    fallback_fps: float = 30.0

    # Sub-configs
    termination: TerminationConfig = field(default_factory=TerminationConfig)
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    flow: FlowConfig = field(default_factory=FlowConfig)
    background: BackgroundConfig = field(default_factory=BackgroundConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)

    @classmethod
    def from_yaml(cls, path: str) -> "PlayerConfig":
        """Load config from YAML file."""
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict) -> "PlayerConfig":
        """Create config from dictionary."""
        data = dict(data)
        termination_data = data.pop('termination', {}) or {}
        detector_data = _tuples(data.pop('detector', {}) or {})
        flow_data = _tuples(data.pop('flow', {}) or {})
        background_data = data.pop('background', {}) or {}
        display_data = _tuples(data.pop('display', {}) or {})

        return cls(
            **data,
            termination=TerminationConfig(**termination_data),
            detector=DetectorConfig(**detector_data),
            flow=FlowConfig(**flow_data),
            background=BackgroundConfig(**background_data),
            display=DisplayConfig(**display_data),
        )

    def merge(self, data: dict) -> "PlayerConfig":
        """Return a copy with the sections of `data` laid over this config."""
        merged = self.to_dict()
        for key, value in (data or {}).items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key].update(value)
            else:
                merged[key] = value
        return PlayerConfig.from_dict(merged)

    def to_yaml(self, path: str):
        """Save config to YAML file."""
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False)

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return asdict(self)

    def __str__(self) -> str:
        """String representation."""
        return json.dumps(self.to_dict(), indent=2)


def _tuples(section: dict) -> dict:
    # YAML has no tuples; window sizes and colors come back as lists.
    return {k: tuple(v) if isinstance(v, list) else v for k, v in section.items()}
