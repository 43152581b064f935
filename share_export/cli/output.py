"""Console formatting for the share-export CLI.

Colour is used only when the stream is a terminal and ``NO_COLOR`` is
unset.  Errors always go to stderr; everything else goes to stdout
unless :func:`use_stderr` was called (``export -o -`` writes the
document itself to stdout).
"""

from __future__ import annotations

import os
import sys
from typing import TextIO

_STYLES = {
    "bold": "1",
    "dim": "2",
    "red": "31",
    "green": "32",
    "yellow": "33",
    "cyan": "36",
}

_stream: TextIO | None = None


def _color_enabled() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


_COLOR = _color_enabled()


def use_stderr() -> None:
    """Send all status output to stderr from now on."""
    global _stream
    _stream = sys.stderr


def _emit(text: str = "", *, stream: TextIO | None = None) -> None:
    print(text, file=stream or _stream or sys.stdout)


def style(text: str, *names: str) -> str:
    if not _COLOR or not names:
        return text
    codes = ";".join(_STYLES[name] for name in names)
    return f"\033[{codes}m{text}\033[0m"


def bold(text: str) -> str:
    return style(text, "bold")


def dim(text: str) -> str:
    return style(text, "dim")


# ── Lines ───────────────────────────────────────────────────────────


def blank() -> None:
    _emit()


def header(title: str) -> None:
    _emit(f"\n{bold(title)}")


def info(msg: str) -> None:
    _emit(f"  {msg}")


def success(msg: str) -> None:
    _emit(f"  {style('✓', 'green')} {msg}")


def warn(msg: str) -> None:
    _emit(f"  {style('!', 'yellow')} {msg}")


def error(msg: str) -> None:
    _emit(f"  {style('✗', 'red')} {msg}", stream=sys.stderr)


def kv(key: str, value: object) -> None:
    _emit(f"  {dim(key + ':')}  {value}")


def next_step(command: str, description: str = "") -> None:
    desc = f"  {dim(description)}" if description else ""
    _emit(f"    {style(command, 'cyan')}{desc}")


# ── Extraction reporting ────────────────────────────────────────────


def human_size(num_bytes: int) -> str:
    """``812 B``, ``14.2 KB``, ``3.0 MB``."""
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.1f} KB"
    return f"{num_bytes / (1024 * 1024):.1f} MB"


def attempt(name: str, succeeded: bool, reason: str | None = None) -> None:
    """One strategy attempt: ``✗ rendered_dom  browser error: ...``."""
    mark = style("✓", "green") if succeeded else style("✗", "red")
    detail = f"  {dim(reason)}" if reason else ""
    _emit(f"    {mark} {name:<20}{detail}", stream=sys.stderr)
