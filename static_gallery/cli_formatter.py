"""
Module: cli_formatter
Purpose: Console output for the static-gallery command line.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import TextIO

from .utils import BOLD, COLOR_RESET, color_256

PROGRESS_WIDTH = 30
PALETTE_CODES: dict[str, int] = {
    "primary": 74,
    "ok": 64,
    "warn": 221,
    "error": 160,
    "muted": 245,
}


@dataclass
class FormatterConfig:
    """
    Configuration options governing CLIFormatter output.
    """

    use_color: bool = True
    unicode_enabled: bool = True
    show_progress: bool = True


class CLIFormatter:
    """
    Render status, progress and summary lines for a gallery run.
    """

    def __init__(
        self,
        config: FormatterConfig | None = None,
        stream: TextIO | None = None,
        progress_stream: TextIO | None = None,
    ) -> None:
        self.config = config or FormatterConfig()
        self.stream = stream or sys.stdout
        self.progress_stream = progress_stream or sys.stderr
        self.palette = {key: color_256(code) for key, code in PALETTE_CODES.items()}
        self._progress_open = False

    def line(self, text: str = "") -> None:
        """Print a plain line."""
        self._write(text)

    def info(self, text: str) -> None:
        self._write(self._style(text, self.palette["primary"]))

    def success(self, text: str) -> None:
        self._write(self._style(text, self.palette["ok"], bold=True))

    def warning(self, text: str) -> None:
        self._write(self._style(text, self.palette["warn"], bold=True))

    def error(self, text: str) -> None:
        """Print error text; multi-line messages keep one entry per line."""
        for chunk in text.splitlines() or [text]:
            self._write(self._style(chunk, self.palette["error"], bold=True))

    def muted(self, text: str) -> None:
        self._write(self._style(text, self.palette["muted"]))

    def progress(self, done: int, total: int) -> None:
        """
        Redraw a single progress line on the progress stream.

        Args:
            done: Finished work items.
            total: Total work items.
        """
        if not self.config.show_progress or total <= 0:
            return
        filled = PROGRESS_WIDTH * done // total
        fill_char, empty_char = ("█", "░") if self.config.unicode_enabled else ("#", "-")
        bar = fill_char * filled + empty_char * (PROGRESS_WIDTH - filled)
        percent = 100 * done // total
        self.progress_stream.write(f"\rRendering [{bar}] {done}/{total} ({percent}%)")
        self.progress_stream.flush()
        self._progress_open = True
        if done >= total:
            self.end_progress()

    def end_progress(self) -> None:
        if self._progress_open:
            self.progress_stream.write("\n")
            self.progress_stream.flush()
            self._progress_open = False

    def summary(self, rows: list[tuple[str, str]]) -> None:
        """Print aligned label/value rows."""
        width = max((len(label) for label, _ in rows), default=0)
        for label, value in rows:
            self._write(f"  {label:<{width}} : {value}")

    # ----------------------------------------------------------------- internals
    def _write(self, text: str) -> None:
        self.end_progress()
        self.stream.write(text + "\n")

    def _style(self, text: str, color: str | None = None, bold: bool = False) -> str:
        if not self.config.use_color or not text:
            return text
        prefix = ""
        if bold:
            prefix += BOLD
        if color:
            prefix += color
        if not prefix:
            return text
        return f"{prefix}{text}{COLOR_RESET}"


def detect_terminal_capabilities(
    *,
    no_color_flag: bool = False,
    stdout_isatty: bool | None = None,
    stderr_isatty: bool | None = None,
) -> FormatterConfig:
    """
    Determine formatter configuration based on environment cues.
    """
    if stdout_isatty is None:
        stdout_isatty = sys.stdout.isatty()
    if stderr_isatty is None:
        stderr_isatty = sys.stderr.isatty()
    term = os.environ.get("TERM", "").lower()
    use_color = (
        not no_color_flag
        and not os.environ.get("NO_COLOR")
        and stdout_isatty
        and term != "dumb"
    )
    return FormatterConfig(
        use_color=use_color,
        unicode_enabled=term != "dumb" and _supports_unicode(),
        show_progress=stderr_isatty,
    )


def _supports_unicode() -> bool:
    encoding = getattr(sys.stderr, "encoding", None)
    if not encoding:
        return False
    try:
        "█░".encode(encoding)
        return True
    except UnicodeEncodeError:
        return False
