#!/usr/bin/env python3
"""
Lucas-Kanade Optical Flow Player

Track sparse feature points through a video file or a camera stream with
pyramidal Lucas-Kanade. Pyramids are built once per frame and reused as the
prior of the next frame; detected corners are refined to sub-pixel accuracy.

Usage examples:
    # Camera input
    python -m flowplayer.apps.lucas_kanade -

    # Video file (starts paused; press r to run, s to step)
    python -m flowplayer.apps.lucas_kanade ../resources/Megamind.avi

Controls:
    - t: find good tracking points
    - c: clear all tracking points
    - n: toggle the backing video display
    - click: add a tracking point
    - s / r: step / run a video file
    - q: quit
"""

import sys
from typing import List, Optional

from flowplayer.apps.player_app import run_player_app

DESCRIPTION = "Demonstrate Lucas-Kanade optical flow tracking."


def main(argv: Optional[List[str]] = None, prog: str = "lucas-kanade") -> int:
    """Main entry point."""
    return run_player_app(prog, DESCRIPTION, 'lucas_kanade', argv)


if __name__ == '__main__':
    sys.exit(main())
