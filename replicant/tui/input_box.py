"""The text input box with submit-on-enter and input history."""

from __future__ import annotations

from typing import Any

from replicant.tui.messages import KeyMsg, SubmitMsg
from replicant.tui.theme import (
    COLOR_DIM_GRAY,
    COLOR_DIM_WHITE,
    STYLE_INPUT_BORDER,
    STYLE_INPUT_BORDER_DISABLED,
    TextStyle,
)

MAX_HISTORY = 100
DEFAULT_PLACEHOLDER = "speak..."
TEXTAREA_HEIGHT = 3

_FOCUSED_TEXT = TextStyle(foreground=COLOR_DIM_WHITE)
_BLURRED_TEXT = TextStyle(foreground=COLOR_DIM_GRAY)
_PLACEHOLDER = TextStyle(foreground=COLOR_DIM_GRAY)


class InputModel:
    """A multi-line input field.

    Enter submits, Alt+Enter inserts a newline, and Up/Down cycle through
    earlier submissions while the input is a single line.
    """

    def __init__(self, width: int) -> None:
        self.width = width
        self.placeholder = DEFAULT_PLACEHOLDER
        self.disabled = False
        self.history: list[str] = []
        self._value = ""
        self._focused = True
        self._history_idx = -1
        self._draft = ""

    @property
    def value(self) -> str:
        """The current text in the box."""
        return self._value

    def set_value(self, text: str) -> None:
        """Replace the text in the box."""
        self._value = text

    def set_width(self, width: int) -> None:
        """Set the box width."""
        self.width = width

    def set_placeholder(self, text: str) -> None:
        """Set the text shown while the box is empty."""
        self.placeholder = text

    def disable(self) -> None:
        """Grey out the box and ignore input."""
        self.disabled = True
        self.placeholder = "thinking..."
        self._focused = False

    def enable(self) -> None:
        """Make the box active again, clearing its text."""
        self.disabled = False
        self.placeholder = DEFAULT_PLACEHOLDER
        self._focused = True
        self._value = ""
        self._history_idx = -1
        self._draft = ""

    def height(self) -> int:
        """Total rendered height: the text area plus its border."""
        return TEXTAREA_HEIGHT + 2

    def _is_single_line(self) -> bool:
        return "\n" not in self._value

    def _show_history_entry(self) -> None:
        self._value = self.history[self._history_idx]

    def _edit(self, msg: KeyMsg) -> None:
        if not self._focused:
            return
        key = msg.key
        if key == "enter" and msg.alt:
            self._value += "\n"
        elif key == "backspace":
            self._value = self._value[:-1]
        elif key == "space" and not msg.alt:
            self._value += " "
        elif len(key) == 1 and not msg.alt:
            self._value += key

    def update(self, msg: Any) -> SubmitMsg | None:
        """Handle a key press; return a SubmitMsg when the user submits."""
        if self.disabled or not isinstance(msg, KeyMsg):
            return None

        if msg.key == "enter" and not msg.alt:
            text = self._value
            if not text:
                return None
            self.history.append(text)
            if len(self.history) > MAX_HISTORY:
                self.history = self.history[-MAX_HISTORY:]
            self._history_idx = -1
            self._draft = ""
            return SubmitMsg(text)

        if msg.key == "up" and self._is_single_line() and self.history:
            if self._history_idx == -1:
                self._draft = self._value
                self._history_idx = len(self.history) - 1
            elif self._history_idx > 0:
                self._history_idx -= 1
            self._show_history_entry()
            return None

        if msg.key == "down" and self._is_single_line() and self._history_idx >= 0:
            if self._history_idx < len(self.history) - 1:
                self._history_idx += 1
                self._show_history_entry()
            else:
                self._history_idx = -1
                self._value = self._draft
                self._draft = ""
            return None

        self._edit(msg)
        return None

    def _inner(self) -> str:
        if self._value:
            style = _FOCUSED_TEXT if self._focused else _BLURRED_TEXT
            rows = [style.render(line) for line in self._value.split("\n")][-TEXTAREA_HEIGHT:]
        else:
            rows = [_PLACEHOLDER.render(self.placeholder)]
        rows += [""] * (TEXTAREA_HEIGHT - len(rows))
        return "\n".join(rows)

    def view(self) -> str:
        """Render the box inside its border."""
        border = STYLE_INPUT_BORDER_DISABLED if self.disabled else STYLE_INPUT_BORDER
        return border.with_width(self.width - 2).render(self._inner())