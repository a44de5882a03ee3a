from __future__ import annotations

import sys

from flowplayer.utils.rich_utils import CONSOLE


def _print_help() -> None:
    CONSOLE.print(
        "flowplayer - interactive sparse optical flow demos\n"
        "\n"
        "Usage:\n"
        "  flowplayer <command> [args...]\n"
        "\n"
        "Commands:\n"
        "  lucas-kanade       pyramidal Lucas-Kanade tracking on a video or camera\n"
        "  foreground         Lucas-Kanade tracking after background removal\n"
        "  remove-background  write a copy of a video with the background removed\n"
        "\n"
        "Run `flowplayer <command> --help` for command-specific help.\n"
        ,
        markup=False,
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the `flowplayer` console script."""
    if argv is None:
        argv = sys.argv[1:]

    if not argv or argv[0] in {"-h", "--help"}:
        _print_help()
        return 0

    cmd, rest = argv[0], argv[1:]
    prog = f"flowplayer {cmd}"

    if cmd == "lucas-kanade":
        from flowplayer.apps.lucas_kanade import main as lk_main

        return lk_main(rest, prog=prog)
    if cmd == "foreground":
        from flowplayer.apps.foreground_klt import main as fg_main

        return fg_main(rest, prog=prog)
    if cmd == "remove-background":
        from flowplayer.apps.remove_background import main as rb_main

        return rb_main(rest, prog=prog)

    CONSOLE.print(f"[red]Unknown command: {cmd!r}[/]\n")
    _print_help()
    return 2
