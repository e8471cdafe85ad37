"""Colour palette and text styles for the terminal interface."""

from __future__ import annotations

import re
import textwrap
from dataclasses import dataclass, replace

from rich.cells import cell_len
from rich.color import ColorSystem
from rich.style import Style

COLOR_NEON_CYAN = "#00FFFF"
COLOR_NEON_ORANGE = "#FF6600"
COLOR_NEON_PINK = "#FF1493"
COLOR_DIM_WHITE = "#B0B0B0"
COLOR_DARK_BG = "#0A0A0F"
COLOR_GOLD = "#FFD700"
COLOR_DIM_GRAY = "#555555"
COLOR_RED = "#FF3333"
COLOR_GREEN = "#33FF33"

_TAB = "    "
_ANSI = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)")


def _strip_ansi(text: str) -> str:
    return _ANSI.sub("", text)


def visible_width(text: str) -> int:
    """Return the widest line's width in terminal cells, ignoring escape codes."""
    return max(cell_len(line) for line in _strip_ansi(text).split("\n"))


@dataclass(frozen=True)
class TextStyle:
    """Colours, emphasis, padding, width and an optional rounded border.

    ``width`` counts padding but not the border; text is word-wrapped to fit.
    """

    foreground: str | None = None
    background: str | None = None
    bold: bool = False
    italic: bool = False
    padding_left: int = 0
    padding_right: int = 0
    width: int = 0
    border: bool = False
    border_foreground: str | None = None

    def with_width(self, width: int) -> TextStyle:
        """Return a copy of this style with the given width."""
        return replace(self, width=width)

    def _lines(self, text: str) -> list[str]:
        lines = text.replace("\r\n", "\n").replace("\t", _TAB).split("\n")
        if self.width <= 0:
            return lines
        wrap_at = max(self.width - self.padding_left - self.padding_right, 1)
        wrapped: list[str] = []
        for line in lines:
            wrapped.extend(
                textwrap.wrap(
                    line,
                    width=wrap_at,
                    expand_tabs=False,
                    replace_whitespace=False,
                    break_on_hyphens=False,
                )
                or [""]
            )
        return wrapped

    def render(self, text: str) -> str:
        """Render text with this style as a string with terminal escape codes."""
        lines = self._lines(text)
        inner = max(visible_width(line) for line in lines)
        if self.width > 0:
            inner = max(inner, self.width - self.padding_left - self.padding_right)

        style = Style(
            color=self.foreground,
            bgcolor=self.background,
            bold=self.bold or None,
            italic=self.italic or None,
        )
        rendered = [
            style.render(
                " " * self.padding_left
                + line
                + " " * (inner - visible_width(line) + self.padding_right),
                color_system=ColorSystem.TRUECOLOR,
            )
            for line in lines
        ]

        if not self.border:
            return "\n".join(rendered)

        edge = Style(color=self.border_foreground)
        span = inner + self.padding_left + self.padding_right

        def paint(chunk: str) -> str:
            return edge.render(chunk, color_system=ColorSystem.TRUECOLOR)

        framed = [paint("╭" + "─" * span + "╮")]
        framed.extend(paint("│") + line + paint("│") for line in rendered)
        framed.append(paint("╰" + "─" * span + "╯"))
        return "\n".join(framed)


STYLE_USER_LABEL = TextStyle(foreground=COLOR_NEON_CYAN, bold=True)
STYLE_USER_MESSAGE = TextStyle(foreground=COLOR_DIM_WHITE, padding_left=2)

STYLE_ASSISTANT_LABEL = TextStyle(foreground=COLOR_DIM_WHITE, bold=True)
STYLE_ASSISTANT_MESSAGE = TextStyle(foreground=COLOR_DIM_WHITE, padding_left=2)

STYLE_TOOL_CALL_LABEL = TextStyle(foreground=COLOR_NEON_ORANGE, bold=True)
STYLE_TOOL_CALL_ARGS = TextStyle(foreground=COLOR_DIM_GRAY, padding_left=4)

STYLE_TOOL_RESULT = TextStyle(foreground=COLOR_GREEN, padding_left=4)
STYLE_TOOL_RESULT_ERROR = TextStyle(foreground=COLOR_RED, padding_left=4)
STYLE_TOOL_RESULT_META = TextStyle(foreground=COLOR_DIM_GRAY, italic=True, padding_left=4)

STYLE_STATUS_BAR = TextStyle(
    foreground=COLOR_NEON_PINK, background=COLOR_DARK_BG, padding_left=1, padding_right=1
)
STYLE_STATUS_BAR_DIM = TextStyle(foreground=COLOR_DIM_GRAY, background=COLOR_DARK_BG)
STYLE_STATUS_BAR_HIGHLIGHT = TextStyle(foreground=COLOR_GOLD, background=COLOR_DARK_BG)

STYLE_INPUT_BORDER = TextStyle(
    border=True, border_foreground=COLOR_NEON_CYAN, padding_left=1, padding_right=1
)
STYLE_INPUT_BORDER_DISABLED = TextStyle(
    border=True, border_foreground=COLOR_DIM_GRAY, padding_left=1, padding_right=1
)

STYLE_ERROR_TEXT = TextStyle(foreground=COLOR_RED, bold=True)
STYLE_LOGO = TextStyle(foreground=COLOR_NEON_CYAN, bold=True)
STYLE_SEPARATOR = TextStyle(foreground=COLOR_DIM_GRAY)
STYLE_TIMESTAMP = TextStyle(foreground=COLOR_DIM_GRAY, italic=True)