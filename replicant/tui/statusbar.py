"""The footer showing model, context usage, tool counts and autonomy level."""

from __future__ import annotations

import time

from replicant.tui.theme import (
    COLOR_GOLD,
    COLOR_GREEN,
    COLOR_RED,
    STYLE_SEPARATOR,
    STYLE_STATUS_BAR,
    STYLE_STATUS_BAR_DIM,
    STYLE_STATUS_BAR_HIGHLIGHT,
    STYLE_TOOL_RESULT,
    TextStyle,
    visible_width,
)

_SHORT_NAMES = {
    "read_file": "Read",
    "write_file": "Write",
    "edit_file": "Edit",
    "list_dir": "List",
    "execute": "Exec",
    "glob": "Glob",
    "grep": "Grep",
    "remember": "Mem+",
    "recall": "Mem?",
    "delegate": "Deleg",
    "spawn": "Spawn",
    "mission": "Mission",
}

# Display order for the tool counters: common tools first.
_KNOWN_TOOLS = tuple(_SHORT_NAMES)

_AUTONOMY_HINTS = {
    "full": ">> auto-approve all (tab to cycle)",
    "high": "> auto-approve most (tab to cycle)",
    "normal": "~ confirm edits+shell (tab to cycle)",
}
_DEFAULT_HINT = "# confirm all (tab to cycle)"


def _trunc_div(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _format_elapsed(seconds: float) -> str:
    total = int(seconds + 0.5)
    if total <= 0:
        return "0s"
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"


def render_progress_bar(width: int, pct: int) -> str:
    """Render a bar of ``#`` (filled) and ``-`` (empty) cells, coloured by level."""
    filled = max(0, min(_trunc_div(width * pct, 100), width))
    empty = max(0, width - filled)
    if pct > 75:
        colour = COLOR_RED
    elif pct > 50:
        colour = COLOR_GOLD
    else:
        colour = COLOR_GREEN
    bar_style = TextStyle(foreground=colour)
    return bar_style.render("#" * filled) + STYLE_STATUS_BAR_DIM.render("-" * empty)


def short_tool_name(name: str) -> str:
    """Return a compact display name for a tool."""
    if name in _SHORT_NAMES:
        return _SHORT_NAMES[name]
    return name[:8] if len(name) > 8 else name


class StatusBarModel:
    """Session statistics rendered as a three-line footer."""

    def __init__(
        self, model_name: str, context_limit: int, replicant_name: str, width: int
    ) -> None:
        self.model_name = model_name
        self.context_limit = context_limit
        self.autonomy = "off"
        self.token_in = 0
        self.token_out = 0
        self.start_time = time.monotonic()
        self.width = width
        self.streaming = False
        self.mouse_enabled = True
        self.replicant = replicant_name
        self.tool_counts: dict[str, int] = {}

    def set_autonomy(self, level: str) -> None:
        """Set the displayed autonomy level."""
        self.autonomy = level

    def set_width(self, width: int) -> None:
        """Set the bar width."""
        self.width = width

    def add_tokens(self, tokens_in: int, tokens_out: int) -> None:
        """Add to the running token counters."""
        self.token_in += tokens_in
        self.token_out += tokens_out

    def set_tokens(self, tokens_in: int, tokens_out: int) -> None:
        """Set the token counters to absolute values."""
        self.token_in = tokens_in
        self.token_out = tokens_out

    def set_streaming(self, streaming: bool) -> None:
        """Mark whether the agent is streaming."""
        self.streaming = streaming

    def set_mouse(self, enabled: bool) -> None:
        """Set the mouse capture indicator."""
        self.mouse_enabled = enabled

    def record_tool_call(self, name: str) -> None:
        """Count one call of the named tool."""
        self.tool_counts[name] = self.tool_counts.get(name, 0) + 1

    def _percent_used(self) -> int:
        if self.context_limit <= 0:
            return 0
        pct = _trunc_div((self.token_in + self.token_out) * 100, self.context_limit)
        return min(pct, 100)

    def _line1(self) -> str:
        sep = STYLE_STATUS_BAR_DIM.render(" | ")
        parts = [
            STYLE_STATUS_BAR_HIGHLIGHT.render(" * ")
            if self.streaming
            else STYLE_STATUS_BAR_DIM.render("   ")
        ]
        context_k = _trunc_div(self.context_limit, 1000)
        parts.append(STYLE_STATUS_BAR.render(f"[{self.model_name} ({context_k}k context)]"))

        pct = self._percent_used()
        parts.append(" ")
        parts.append(render_progress_bar(10, pct))
        parts.append(STYLE_STATUS_BAR_DIM.render(f" {pct}%"))
        parts.append(sep)
        parts.append(STYLE_STATUS_BAR.render(self.replicant))
        parts.append(sep)
        parts.append(
            STYLE_STATUS_BAR_DIM.render(_format_elapsed(time.monotonic() - self.start_time))
        )

        line = "".join(parts)
        line_width = visible_width(line)
        if line_width < self.width:
            line += STYLE_STATUS_BAR.render(" " * (self.width - line_width))
        return line

    def _tool_entries(self) -> list[tuple[str, int]]:
        known = [(n, self.tool_counts[n]) for n in _KNOWN_TOOLS if n in self.tool_counts]
        extra = [(n, c) for n, c in self.tool_counts.items() if n not in _SHORT_NAMES]
        return known + extra

    def _line2(self) -> str:
        if self.tool_counts:
            rendered = [
                STYLE_TOOL_RESULT.render("v")
                + STYLE_STATUS_BAR_DIM.render(f" {short_tool_name(name)} x{count}")
                for name, count in self._tool_entries()
            ]
            left = STYLE_STATUS_BAR_DIM.render(" | ").join(rendered)
        else:
            left = STYLE_STATUS_BAR_DIM.render("  no tool calls yet")

        hint = STYLE_STATUS_BAR_HIGHLIGHT.render(
            _AUTONOMY_HINTS.get(self.autonomy, _DEFAULT_HINT)
        )
        gap = max(self.width - visible_width(left) - visible_width(hint), 2)
        return left + " " * gap + hint

    def view(self) -> str:
        """Render the footer: summary line, separator, tool counts and hint."""
        separator = STYLE_SEPARATOR.render("-" * self.width)
        return self._line1() + "\n" + separator + "\n" + self._line2()