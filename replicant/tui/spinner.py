"""The animated 'is thinking' indicator."""

from __future__ import annotations

from typing import Any

from replicant.tui.messages import TickMsg
from replicant.tui.theme import COLOR_NEON_CYAN, STYLE_ASSISTANT_LABEL, TextStyle

FRAMES = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")
FRAME_INTERVAL = 0.08
"""Seconds between animation frames."""

DEFAULT_LABEL = "replicant"

_FRAME_STYLE = TextStyle(foreground=COLOR_NEON_CYAN)


class SpinnerModel:
    """A spinner with a name shown beside it."""

    interval = FRAME_INTERVAL

    def __init__(self, label: str = DEFAULT_LABEL) -> None:
        self.label = label
        self.active = False
        self.frame = 0

    def set_label(self, name: str) -> None:
        """Set the name shown next to the spinner."""
        self.label = name

    def start(self) -> TickMsg:
        """Activate the spinner and return the first tick to schedule."""
        self.active = True
        return TickMsg()

    def stop(self) -> None:
        """Deactivate the spinner."""
        self.active = False

    def update(self, msg: Any) -> TickMsg | None:
        """Advance on a tick; return the next tick to schedule, if any."""
        if not self.active or not isinstance(msg, TickMsg):
            return None
        self.frame = (self.frame + 1) % len(FRAMES)
        return TickMsg()

    def view(self) -> str:
        """Render the current frame and label, or '' when inactive."""
        if not self.active:
            return ""
        name = self.label or DEFAULT_LABEL
        return _FRAME_STYLE.render(FRAMES[self.frame]) + STYLE_ASSISTANT_LABEL.render(
            " " + name + " is thinking"
        )