"""
Terminal host for the heatmap controller.

A one-file, one-view "editor": the document is read from disk, the view
records whatever decorations the controller sets, and the result is
printed with 24-bit ANSI background colours or as JSON.

No external dependencies, stdlib only.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Sequence

from .colour import blend_over, parse_hex
from .styles import HeatStyle


_BOLD = "\033[1m"
_DIM = "\033[2m"
_RESET = "\033[0m"
_RULER_MARK = "█"


def _bg(rgb: tuple[int, int, int]) -> str:
    return f"\033[48;2;{rgb[0]};{rgb[1]};{rgb[2]}m"


def _fg(rgb: tuple[int, int, int]) -> str:
    return f"\033[38;2;{rgb[0]};{rgb[1]};{rgb[2]}m"


# ===================================================================
# Document / view / host
# ===================================================================

def split_lines(text: str) -> list[str]:
    """Split on "\n" only, the way git numbers lines.

    str.splitlines would also break on form feeds and other separators,
    shifting every later line away from its blame entry.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class TerminalDocument:
    def __init__(self, path: str, lines: list[str]):
        self.path = path
        self.lines = lines

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @classmethod
    def from_file(cls, path: str) -> TerminalDocument:
        text = Path(path).read_bytes().decode("utf-8", errors="replace")
        return cls(path, split_lines(text))


class TerminalView:
    """Records decorations per style, keyed by style identity."""

    def __init__(self, document: TerminalDocument):
        self.document = document
        self.decorations: dict[HeatStyle, list[tuple[int, int]]] = {}

    def set_decorations(self, style: HeatStyle, ranges: Sequence[tuple[int, int]]) -> None:
        if ranges:
            self.decorations[style] = list(ranges)
        else:
            self.decorations.pop(style, None)

    def line_styles(self) -> dict[int, HeatStyle]:
        """0-based line index -> applied style."""
        styled: dict[int, HeatStyle] = {}
        for style, ranges in self.decorations.items():
            for start, end in ranges:
                for line in range(start, end + 1):
                    styled[line] = style
        return styled


class TerminalHost:
    """Single visible view; errors go to stderr."""

    def __init__(self, view: TerminalView | None = None):
        self.view = view
        self.errors: list[str] = []

    def active_view(self) -> TerminalView | None:
        return self.view

    def visible_views(self) -> list[TerminalView]:
        return [self.view] if self.view is not None else []

    def show_error(self, message: str) -> None:
        self.errors.append(message)
        print(f"blame-heatmap: {message}", file=sys.stderr)


# ===================================================================
# Output formatting
# ===================================================================

def format_terminal(view: TerminalView, styles: Sequence[HeatStyle]) -> str:
    """Render the document with a heat-coloured background per line."""
    doc = view.document
    styled = view.line_styles()
    width = len(str(max(doc.line_count, 1)))
    show_ruler = any(style.ruler for style in styles)
    text_width = max((len(line) for line in doc.lines), default=0)

    out: list[str] = ["", f"  {_BOLD}{doc.path}{_RESET}", ""]
    for index, text in enumerate(doc.lines):
        gutter = f"{_DIM}{index + 1:>{width}}{_RESET} "
        style = styled.get(index)
        if style is None:
            row = f"  {gutter}{text}"
            if show_ruler:
                row += " " * (text_width - len(text) + 1)
            out.append(row)
            continue

        bg = blend_over(parse_hex(style.background))
        row = f"  {gutter}{_bg(bg)}{text.ljust(text_width)}{_RESET}"
        if style.ruler:
            row += f" {_fg(blend_over(parse_hex(style.ruler)))}{_RULER_MARK}{_RESET}"
        out.append(row)
    out.append("")
    return "\n".join(out)


def format_json(view: TerminalView, styles: Sequence[HeatStyle]) -> str:
    """Styles and per-level line ranges, 1-based and inclusive."""
    buckets: list[dict[str, Any]] = []
    for style in styles:
        ranges = view.decorations.get(style, [])
        buckets.append({
            "level": style.index,
            "ranges": [[start + 1, end + 1] for start, end in ranges],
        })

    output = {
        "file": view.document.path,
        "levels": len(styles),
        "styles": [
            {
                "level": style.index,
                "fraction": style.fraction,
                "background": style.background,
                "ruler": style.ruler,
            }
            for style in styles
        ],
        "buckets": buckets,
    }
    return json.dumps(output, indent=2)
