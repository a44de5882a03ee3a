"""Module entry point: `python -m flowplayer`."""

from __future__ import annotations

from flowplayer.cli.main import main


if __name__ == "__main__":
    raise SystemExit(main())
