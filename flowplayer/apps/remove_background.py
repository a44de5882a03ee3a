#!/usr/bin/env python3
"""
Video Background Removal

Read a camera or a video file, blacken every pixel the background model
classifies as background, and write the result to a new video file.

Usage examples:
    # Camera 0 to ./output.avi
    python -m flowplayer.apps.remove_background 0 ./output.avi

    # Video file, showing input and output side by side while writing
    python -m flowplayer.apps.remove_background --show clip.avi masked.avi
"""

import argparse
import sys
from typing import List, Optional

from flowplayer.utils.rich_utils import CONSOLE, ERR_CONSOLE, configure_python_logging, enable_file_logging, track

BACKGROUND_METHODS = ('mog', 'mog2', 'gmg', 'knn')
FALLBACK_FOURCC = 'MJPG'


class _Parser(argparse.ArgumentParser):
    def error(self, message):
        raise ValueError(message)


def show_usage(prog: str) -> None:
    ERR_CONSOLE.print(
        f"{prog}: Demo video background removal.\n"
        f"\n"
        f"Usage: {prog} [--method METHOD] [--show] [--max-frames N] <camera> <output>\n"
        f"\n"
        f"Where: <camera> is a camera number or video file name.\n"
        f"       <output> is where to write the modified video.\n"
        f"\n"
        f"Example: {prog} 0 ./output.avi\n",
        markup=False,
        highlight=False,
    )


def parse_args(argv: Optional[List[str]], prog: str) -> argparse.Namespace:
    parser = _Parser(prog=prog, add_help=False)
    parser.add_argument('camera', help='Camera number or video file name')
    parser.add_argument('output', help='Where to write the modified video')
    parser.add_argument('--method', type=str, choices=BACKGROUND_METHODS, default='mog',
                        help='Background model')
    parser.add_argument('--show', action='store_true',
                        help='Show input and output windows while writing')
    parser.add_argument('--max-frames', type=int, default=None,
                        help='Stop after N frames (default: whole file, or until q for cameras)')
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None, prog: str = "remove-background") -> int:
    """Main entry point."""
    try:
        args = parse_args(argv, prog)
    except ValueError as exc:
        ERR_CONSOLE.print(f"{prog}: {exc}\n", markup=False, highlight=False)
        show_usage(prog)
        return 1

    enable_file_logging()
    configure_python_logging()

    import cv2

    from flowplayer.apps.runtime.background import BackgroundRemover, BackgroundSubtractorFactory
    from flowplayer.apps.runtime.video_source import VideoSource, parse_source, string_to_fourcc
    from flowplayer.apps.runtime.window import HighGuiWindow, WindowLayout, has_display

    CONSOLE.print(f"{prog}: Camera is {args.camera}", markup=False, highlight=False)
    CONSOLE.print(f"{prog}: Output is {args.output}", markup=False, highlight=False)

    try:
        remover = BackgroundRemover(BackgroundSubtractorFactory.create(args.method))
    except (ImportError, ValueError) as exc:
        ERR_CONSOLE.print(f"[red]Error: {exc}[/red]")
        return 1

    source = VideoSource.open(parse_source(args.camera))
    if not source.is_open:
        show_usage(prog)
        return 1

    codec = source.fourcc or string_to_fourcc(FALLBACK_FOURCC)
    writer = cv2.VideoWriter(args.output, codec, source.fps, source.frame_size)
    if not writer.isOpened():
        source.release()
        show_usage(prog)
        return 1

    count = source.frame_count
    width, height = source.frame_size
    CONSOLE.print(
        f"{prog}: {source.fourcc_string} {count} ({width}x{height}) frames at {source.fps:g} FPS",
        markup=False,
        highlight=False,
    )
    CONSOLE.print(f"{prog}: Writing to {args.output}", markup=False, highlight=False)

    limit = args.max_frames if args.max_frames is not None else (count or None)
    windows = []
    if args.show and not has_display():
        CONSOLE.print("[yellow]Warning: No display available, writing without --show[/yellow]")
    elif args.show:
        layout = WindowLayout(across=2)
        windows = [HighGuiWindow(source.title, layout), HighGuiWindow(f"{source.title} (foreground)", layout)]
        for window in windows:
            window.open(source.frame_size)

    def frames():
        index = 0
        while limit is None or index < limit:
            index += 1
            yield index

    written = 0
    try:
        iterator = frames()
        if limit is not None and not windows:
            iterator = track(iterator, description="Removing background", total=limit)
        for _ in iterator:
            frame = source.grab_next_frame()
            if frame is None:
                # Files end early when the reported count overshoots; cameras just stop.
                if source.is_camera or limit is None:
                    break
                continue
            output = remover.apply(frame)
            writer.write(output)
            written += 1
            if windows:
                windows[0].show(frame)
                windows[1].show(output)
                key = windows[0].wait_key(1)
                if key >= 0 and chr(key & 0xFF).lower() == 'q':
                    break
    finally:
        for window in windows:
            window.close()
        writer.release()
        source.release()

    CONSOLE.print(f"{prog}: Wrote {written} frames", markup=False, highlight=False)
    return 0


if __name__ == '__main__':
    sys.exit(main())
