#!/usr/bin/env python3
"""
Foreground Optical Flow Player

Remove the video background with a Gaussian-mixture background model, then
track corners on what remains. Features are re-detected every 16 frames so
points follow newly moving objects.

Usage examples:
    # Camera input
    python -m flowplayer.apps.foreground_klt -

    # Video file with the MOG2 model instead of MOG
    python -m flowplayer.apps.foreground_klt --background mog2 video.avi
"""

import sys
from typing import List, Optional

from flowplayer.apps.player_app import run_player_app

DESCRIPTION = "Demonstrate optical flow tracking after background removal."


def main(argv: Optional[List[str]] = None, prog: str = "foreground") -> int:
    """Main entry point."""
    return run_player_app(prog, DESCRIPTION, 'foreground', argv)


if __name__ == '__main__':
    sys.exit(main())
