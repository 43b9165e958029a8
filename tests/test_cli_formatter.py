import io
import re

from static_gallery.cli_formatter import CLIFormatter, FormatterConfig, detect_terminal_capabilities


def _make_formatter(**config_overrides):
    config = FormatterConfig(**config_overrides)
    stream = io.StringIO()
    progress = io.StringIO()
    return CLIFormatter(config=config, stream=stream, progress_stream=progress), stream, progress


def _strip_ansi(text: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def test_colored_output_wraps_ansi():
    formatter, stream, _ = _make_formatter(use_color=True)
    formatter.success("done")
    output = stream.getvalue()
    assert "\x1b[" in output
    assert _strip_ansi(output) == "done\n"


def test_plain_output_has_no_ansi():
    formatter, stream, _ = _make_formatter(use_color=False)
    formatter.warning("careful")
    formatter.error("first\nsecond")
    assert stream.getvalue() == "careful\nfirst\nsecond\n"


def test_progress_line_is_redrawn_and_closed():
    formatter, _, progress = _make_formatter(use_color=False, unicode_enabled=False)
    formatter.progress(1, 4)
    formatter.progress(4, 4)
    output = progress.getvalue()
    assert output.count("\r") == 2
    assert "1/4 (25%)" in output
    assert output.endswith("4/4 (100%)\n")
    assert "#" * 30 in output


def test_progress_disabled():
    formatter, _, progress = _make_formatter(show_progress=False)
    formatter.progress(1, 2)
    assert progress.getvalue() == ""


def test_writing_a_line_ends_open_progress():
    formatter, stream, progress = _make_formatter(use_color=False)
    formatter.progress(1, 3)
    formatter.line("hello")
    assert progress.getvalue().endswith("\n")
    assert stream.getvalue() == "hello\n"


def test_summary_rows_are_aligned():
    formatter, stream, _ = _make_formatter(use_color=False)
    formatter.summary([("Pictures", "3"), ("Failed", "0")])
    assert stream.getvalue().splitlines() == ["  Pictures : 3", "  Failed   : 0"]


def test_detect_capabilities_respects_no_color(monkeypatch):
    monkeypatch.setenv("NO_COLOR", "1")
    config = detect_terminal_capabilities(stdout_isatty=True, stderr_isatty=True)
    assert config.use_color is False
    assert config.show_progress is True


def test_detect_capabilities_non_tty(monkeypatch):
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.setenv("TERM", "xterm-256color")
    config = detect_terminal_capabilities(stdout_isatty=False, stderr_isatty=False)
    assert config.use_color is False
    assert config.show_progress is False
