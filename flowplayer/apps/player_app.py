"""Shared command-line front end for the optical flow player apps."""

from __future__ import annotations

import argparse
from typing import List, Optional

from rich.console import Console

from flowplayer.apps.config import PlayerConfig, get_preset_config
from flowplayer.utils.rich_utils import CONSOLE, ERR_CONSOLE, configure_python_logging, enable_file_logging

BACKGROUND_METHODS = ('mog', 'mog2', 'gmg', 'knn')


class UsageError(Exception):
    """Wrong arity or an unrecognized option."""


class _Parser(argparse.ArgumentParser):
    # Report argument errors to the caller instead of exiting with status 2.
    def error(self, message):
        raise UsageError(message)


def show_keys(console: Console, prog: str) -> None:
    """Print the hot-keys."""
    console.print(
        f"\n{prog}: Use keys to modify tracking behavior and display.\n"
        f"\n"
        f"{prog}: q to quit the program.\n"
        f"{prog}: t to find good tracking points.\n"
        f"{prog}: c to clear all tracking points.\n"
        f"{prog}: n to toggle the backing video display.\n"
        f"\n"
        f"{prog}: Click the mouse to add a tracking point.\n"
        f"\n"
        f"{prog}: If you are playing a video file ...\n"
        f"{prog}: s to step the video by a frame.\n"
        f"{prog}: r to run the video at speed.\n",
        markup=False,
        highlight=False,
    )


def show_usage(console: Console, prog: str, description: str) -> None:
    """Print usage followed by the hot-keys."""
    console.print(
        f"{prog}: {description}\n"
        f"\n"
        f"Usage: {prog} [--config FILE] [--background METHOD] <video>\n"
        f"\n"
        f"Where: <video> is an optional video file.\n"
        f"       If <video> is '-' use a camera instead.\n"
        f"       --config FILE is a YAML file overriding the player settings.\n"
        f"       --background METHOD removes the background first "
        f"({', '.join(BACKGROUND_METHODS)}).\n"
        f"\n"
        f"Example: {prog} - # use a camera\n"
        f"Example: {prog} ../resources/Megamind.avi\n",
        markup=False,
        highlight=False,
    )
    show_keys(console, prog)


def build_parser(prog: str) -> argparse.ArgumentParser:
    parser = _Parser(prog=prog, add_help=False)
    parser.add_argument('video', nargs='?', help="Video file path, or '-' for the default camera")
    parser.add_argument('--config', type=str, help='Path to YAML configuration file')
    parser.add_argument('--background', type=str, choices=BACKGROUND_METHODS,
                        help='Remove the background with this model before tracking')
    parser.add_argument('-h', '--help', action='store_true', help='Show usage and hot-keys')
    return parser


def load_config(preset: str, config_path: Optional[str] = None,
                background: Optional[str] = None) -> PlayerConfig:
    """Start from a preset, overlay a YAML file, then command-line overrides."""
    config = get_preset_config(preset)
    if config_path:
        import yaml

        CONSOLE.print(f"[dim]Loading configuration from: {config_path}[/dim]")
        with open(config_path, 'r') as f:
            config = config.merge(yaml.safe_load(f) or {})
    if background:
        config.background.enabled = True
        config.background.method = background
    return config


def run_player_app(prog: str, description: str, preset: str, argv: Optional[List[str]] = None) -> int:
    """Parse `argv`, play the video, and return the process exit code."""
    from flowplayer.apps.runtime.video_source import DEFAULT_CAMERA

    parser = build_parser(prog)
    try:
        args = parser.parse_args(argv)
        if not args.help and args.video is None:
            raise UsageError("a <video> argument is required")
    except UsageError as exc:
        ERR_CONSOLE.print(f"{prog}: {exc}\n", markup=False, highlight=False)
        show_usage(ERR_CONSOLE, prog, description)
        return 1
    if args.help:
        show_usage(CONSOLE, prog, description)
        return 0

    enable_file_logging()
    configure_python_logging()

    try:
        config = load_config(preset, args.config, args.background)
    except (OSError, TypeError, ValueError) as exc:
        ERR_CONSOLE.print(f"[red]Error: {exc}[/red]")
        return 1

    source = DEFAULT_CAMERA if args.video == '-' else args.video

    from flowplayer.apps.runtime.player import VideoPlayer

    try:
        player = VideoPlayer.open(source, config)
    except (ImportError, ValueError) as exc:
        ERR_CONSOLE.print(f"[red]Error: {exc}[/red]")
        return 1

    with player:
        if player.is_open:
            show_keys(CONSOLE, prog)
            CONSOLE.print(player.describe(), markup=False, highlight=False)
            if player.run():
                return 0
        else:
            ERR_CONSOLE.print(f"{prog}: Cannot open {player.title}\n", markup=False, highlight=False)

    show_usage(ERR_CONSOLE, prog, description)
    return 1
