# Copyright 2022 the Regents of the University of California, Nerfstudio Team and contributors. All rights reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Shared rich console, file mirroring and `logging` routing."""

from __future__ import annotations

import os
from pathlib import Path
import re
import sys

from rich.console import Console
from rich.logging import RichHandler

_ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")


class _TeeStream:
    """A minimal text stream that tees Rich console output to a log file.

    - Terminal output keeps ANSI styling.
    - File output is stripped of ANSI escape codes for readability.
    """

    def __init__(self, stream_name: str = "stdout") -> None:
        self._stream_name = stream_name
        self._log_file = None

    @property
    def _stream(self):
        # Resolve lazily so pytest's `capsys` captures output.
        return getattr(sys, self._stream_name)

    def set_log_file(self, log_file) -> None:
        self._log_file = log_file

    def write(self, text: str) -> int:
        stream = self._stream
        written = stream.write(text)
        stream.flush()

        if self._log_file is not None:
            if getattr(self._log_file, "closed", False):
                self._log_file = None
            else:
                try:
                    self._log_file.write(_ANSI_ESCAPE_RE.sub("", text))
                    self._log_file.flush()
                except (OSError, ValueError):
                    # Keep console output working if the log handle went bad.
                    self._log_file = None
        return written

    def flush(self) -> None:
        self._stream.flush()
        if self._log_file is not None:
            if getattr(self._log_file, "closed", False):
                self._log_file = None
            else:
                try:
                    self._log_file.flush()
                except (OSError, ValueError):
                    self._log_file = None

    def isatty(self) -> bool:
        return bool(getattr(self._stream, "isatty", lambda: False)())

    @property
    def encoding(self) -> str:
        return getattr(self._stream, "encoding", "utf-8")


_TEE_STREAM = _TeeStream("stdout")
_TEE_ERR_STREAM = _TeeStream("stderr")
CONSOLE = Console(width=120, file=_TEE_STREAM)
ERR_CONSOLE = Console(width=120, file=_TEE_ERR_STREAM)

_LOG_FILE_HANDLE = None
_LOG_FILE_PATH: Path | None = None
_PY_LOGGING_CONFIGURED = False


def _default_log_dir() -> Path:
    # Prefer a local ./logs directory when possible; fall back to the user's cache.
    cwd_logs = Path.cwd() / "logs"
    try:
        cwd_logs.mkdir(parents=True, exist_ok=True)
        test_file = cwd_logs / ".flowplayer_write_test"
        test_file.write_text("ok", encoding="utf-8")
        test_file.unlink(missing_ok=True)
        return cwd_logs
    except OSError:
        cache_root = Path(os.getenv("XDG_CACHE_HOME", str(Path.home() / ".cache")))
        return cache_root / "flowplayer" / "logs"


def enable_file_logging(*, log_file: str | Path | None = None, log_dir: str | Path | None = None) -> Path | None:
    """Enable mirroring console output to a plaintext log file.

    If `log_file` is not provided, it is resolved from:
      1) `FLOWPLAYER_LOG_FILE`
      2) `FLOWPLAYER_LOG_DIR` + "flowplayer.log"
      3) `./logs/flowplayer.log` (or fallback to XDG cache if not writable)
    """

    global _LOG_FILE_HANDLE, _LOG_FILE_PATH

    if log_file is None:
        env_file = os.getenv("FLOWPLAYER_LOG_FILE")
        if env_file:
            log_file = env_file
        else:
            env_dir = os.getenv("FLOWPLAYER_LOG_DIR")
            if env_dir:
                log_dir = env_dir

    if log_file is None:
        base_dir = Path(log_dir) if log_dir is not None else _default_log_dir()
        log_file = base_dir / "flowplayer.log"

    log_path = Path(log_file)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        return None

    # Idempotent if called repeatedly with the same file.
    if (
        _LOG_FILE_HANDLE is not None
        and _LOG_FILE_PATH == log_path
        and not getattr(_LOG_FILE_HANDLE, "closed", False)
    ):
        return _LOG_FILE_PATH

    try:
        new_handle = log_path.open("a", encoding="utf-8")
    except OSError:
        return None

    previous_handle = _LOG_FILE_HANDLE
    _LOG_FILE_HANDLE = new_handle
    _LOG_FILE_PATH = log_path
    _TEE_STREAM.set_log_file(new_handle)
    _TEE_ERR_STREAM.set_log_file(new_handle)

    if previous_handle is not None:
        try:
            previous_handle.close()
        except OSError:
            pass
    return _LOG_FILE_PATH


def disable_file_logging() -> None:
    """Disable mirroring console output to a log file (best-effort)."""
    global _LOG_FILE_HANDLE, _LOG_FILE_PATH

    _TEE_STREAM.set_log_file(None)
    _TEE_ERR_STREAM.set_log_file(None)
    if _LOG_FILE_HANDLE is not None:
        try:
            _LOG_FILE_HANDLE.close()
        except OSError:
            pass
    _LOG_FILE_HANDLE = None
    _LOG_FILE_PATH = None


def configure_python_logging(level: str | int | None = None) -> None:
    """Route standard `logging` output through Rich CONSOLE.

    Since CONSOLE is tee'd to a plaintext log file via `enable_file_logging`,
    per-frame diagnostics end up in the same log as the banner and key help.

    This is best-effort and idempotent.
    """

    global _PY_LOGGING_CONFIGURED
    if _PY_LOGGING_CONFIGURED:
        return

    import logging

    if level is None:
        level = os.getenv("FLOWPLAYER_LOG_LEVEL", "INFO").upper()

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=CONSOLE,
                rich_tracebacks=False,
                show_time=True,
                show_level=True,
                show_path=False,
            ),
        ],
        force=True,
    )
    _PY_LOGGING_CONFIGURED = True


def track(iterable, *, description: str, total: int | None = None):  # noqa: ANN001
    """A small wrapper around `rich.progress.track` using the shared CONSOLE."""
    from rich.progress import track as _track

    return _track(
        iterable,
        description=description,
        total=total,
        console=CONSOLE,
        transient=True,
        refresh_per_second=10,
    )
