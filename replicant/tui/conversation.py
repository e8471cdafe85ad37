"""The scrollable conversation view and its message history."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from replicant.tui.messages import KeyMsg
from replicant.tui.theme import (
    STYLE_ASSISTANT_LABEL,
    STYLE_ASSISTANT_MESSAGE,
    STYLE_LOGO,
    STYLE_SEPARATOR,
    STYLE_TIMESTAMP,
    STYLE_TOOL_CALL_ARGS,
    STYLE_TOOL_CALL_LABEL,
    STYLE_TOOL_RESULT,
    STYLE_TOOL_RESULT_ERROR,
    STYLE_TOOL_RESULT_META,
    STYLE_USER_LABEL,
    STYLE_USER_MESSAGE,
)

MAX_RESULT_LINES = 15
MAX_ARG_VALUE_LINES = 3

RUNNING_FRAMES = ("/", "-", "\\", "|")
WAITING_FRAMES = (".  ", ".. ", "...", "   ")


@dataclass
class ReplayEntry:
    """One item of a previous session replayed into the view."""

    type: str
    content: str = ""
    tool_name: str = ""
    tool_args: str = ""
    tool_id: str = ""
    is_error: bool = False


class MessageKind(enum.Enum):
    """The role of a rendered conversation block."""

    USER = "user"
    ASSISTANT = "assistant"
    TOOL_CALL = "tool_call"
    TOOL_RESULT = "tool_result"
    BANNER = "banner"
    TASK_GROUP = "task_group"


@dataclass
class MessageBlock:
    """A rendered unit of the conversation history."""

    kind: MessageKind
    rendered: str
    raw_text: str = ""
    timestamp: datetime = field(default_factory=datetime.now)
    block_id: str = ""


@dataclass
class _TaskEntry:
    task_id: str
    name: str
    status: str
    detail: str = ""


def _is_active(status: str) -> bool:
    return status in ("running", "waiting")


class _Viewport:
    """A fixed-height window onto a list of lines."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.lines: list[str] = [""]
        self.y_offset = 0

    def _max_offset(self) -> int:
        return max(0, len(self.lines) - self.height)

    def set_content(self, content: str) -> None:
        self.lines = content.split("\n")
        self.y_offset = min(self.y_offset, self._max_offset())

    def goto_bottom(self) -> None:
        self.y_offset = self._max_offset()

    def scroll(self, delta: int) -> None:
        self.y_offset = max(0, min(self.y_offset + delta, self._max_offset()))

    def view(self) -> str:
        height = max(self.height, 0)
        visible = self.lines[self.y_offset : self.y_offset + height]
        visible += [""] * (height - len(visible))
        return "\n".join(visible)


def _clock(when: datetime) -> str:
    return when.strftime("%H:%M:%S")


class ConversationModel:
    """Conversation history rendered into a scrollable viewport."""

    def __init__(self, width: int, height: int, replicant_name: str = "") -> None:
        self.replicant_name = replicant_name or "assistant"
        self.width = width
        self.height = height
        self.blocks: list[MessageBlock] = []
        self._viewport = _Viewport(width, height)
        self._streaming_idx = -1
        self._stream_parts: list[str] = []
        self._tasks: list[_TaskEntry] = []
        self._task_block_idx = -1
        self._task_frame = 0

    def set_size(self, width: int, height: int) -> None:
        """Resize the view."""
        self.width = width
        self.height = height
        self._viewport.width = width
        self._viewport.height = height
        self._rebuild()

    def _append(self, block: MessageBlock) -> None:
        self.blocks.append(block)
        self._rebuild()

    def add_banner(self, text: str) -> None:
        """Add a highlighted banner or notice line."""
        self._append(MessageBlock(MessageKind.BANNER, STYLE_LOGO.render(text)))

    def _header(self, label: str, when: datetime) -> str:
        return label + "  " + STYLE_TIMESTAMP.render(_clock(when))

    def add_user_message(self, text: str) -> None:
        """Add a completed user message."""
        now = datetime.now()
        header = self._header(STYLE_USER_LABEL.render("▸ you"), now)
        body = STYLE_USER_MESSAGE.with_width(self.width - 2).render(text)
        self._append(MessageBlock(MessageKind.USER, header + "\n" + body + "\n", timestamp=now))

    def _assistant_header(self, when: datetime) -> str:
        return self._header(STYLE_ASSISTANT_LABEL.render("▸ " + self.replicant_name), when)

    def start_assistant_message(self) -> None:
        """Open a new streaming assistant message."""
        self._stream_parts = []
        now = datetime.now()
        self.blocks.append(
            MessageBlock(MessageKind.ASSISTANT, self._assistant_header(now) + "\n", timestamp=now)
        )
        self._streaming_idx = len(self.blocks) - 1
        self._rebuild()

    def append_chunk(self, text: str) -> None:
        """Append streamed text, opening an assistant message if none is open."""
        if not 0 <= self._streaming_idx < len(self.blocks):
            self.start_assistant_message()
        self._stream_parts.append(text)
        block = self.blocks[self._streaming_idx]
        block.raw_text = "".join(self._stream_parts)
        body = STYLE_ASSISTANT_MESSAGE.with_width(self.width - 2).render(block.raw_text)
        block.rendered = self._assistant_header(block.timestamp) + "\n" + body + "\n"
        self._rebuild()

    def finalize_assistant(self) -> None:
        """Close the streaming assistant message with a separator."""
        if 0 <= self._streaming_idx < len(self.blocks):
            self.blocks[self._streaming_idx].rendered += (
                STYLE_SEPARATOR.render("─" * max(self.width, 0)) + "\n"
            )
        self._streaming_idx = -1
        self._stream_parts = []
        self._rebuild()

    def add_tool_call(self, tool_id: str, name: str, args: str) -> None:
        """Add a tool call with its arguments formatted for reading."""
        label = STYLE_TOOL_CALL_LABEL.render("◆ " + name)
        formatted = STYLE_TOOL_CALL_ARGS.with_width(self.width - 6).render(
            format_tool_args(name, args)
        )
        self._append(
            MessageBlock(MessageKind.TOOL_CALL, label + "\n" + formatted + "\n", block_id=tool_id)
        )

    def add_tool_result(self, tool_id: str, result: str, is_error: bool = False) -> None:
        """Add a tool result, truncated to a few lines, or an error."""
        if is_error:
            body = STYLE_TOOL_RESULT_ERROR.with_width(self.width - 6).render("  error: " + result)
            self._append(MessageBlock(MessageKind.TOOL_RESULT, body + "\n", block_id=tool_id))
            return

        lines = result.split("\n")
        meta = ""
        if len(lines) > MAX_RESULT_LINES:
            meta = f"[{len(lines) - MAX_RESULT_LINES} more lines]"
            lines = lines[:MAX_RESULT_LINES]
        content = "\n".join("    " + line for line in lines)

        rendered = STYLE_TOOL_RESULT.with_width(self.width - 6).render(content) + "\n"
        if meta:
            rendered += STYLE_TOOL_RESULT_META.render(meta) + "\n"
        self._append(MessageBlock(MessageKind.TOOL_RESULT, rendered, block_id=tool_id))

    def append_tool_progress(self, tool_id: str, output: str) -> None:
        """Append partial output to the matching tool call, or the latest one."""
        target: MessageBlock | None = None
        for block in reversed(self.blocks):
            if block.kind is not MessageKind.TOOL_CALL:
                continue
            if block.block_id == tool_id:
                target = block
                break
            if target is None:
                target = block
        if target is None:
            return
        target.rendered += (
            STYLE_TOOL_RESULT.with_width(self.width - 6).render("  » " + output) + "\n"
        )
        self._rebuild()

    def replay_history(self, entries: list[ReplayEntry]) -> None:
        """Add the entries of a previous session to the view."""
        in_assistant = False
        for entry in entries:
            if entry.type == "user":
                if in_assistant:
                    self.finalize_assistant()
                    in_assistant = False
                self.add_user_message(entry.content)
            elif entry.type == "assistant":
                if not in_assistant:
                    self.start_assistant_message()
                    in_assistant = True
                self.append_chunk(entry.content)
            elif entry.type == "tool_call":
                if in_assistant:
                    self.finalize_assistant()
                    in_assistant = False
                self.add_tool_call(entry.tool_id, entry.tool_name, entry.tool_args)
            elif entry.type == "tool_result":
                self.add_tool_result(entry.tool_id, entry.content, entry.is_error)
        if in_assistant:
            self.finalize_assistant()

    def update_task(self, task_id: str, name: str, status: str, detail: str = "") -> None:
        """Add a task to the task display or update its status."""
        for task in self._tasks:
            if task.task_id == task_id:
                task.status = status
                if detail:
                    task.detail = detail
                break
        else:
            self._tasks.append(_TaskEntry(task_id, name, status, detail))
        self._render_task_group()

    def advance_task_frame(self) -> None:
        """Move the task indicators to their next animation frame."""
        if not self._tasks:
            return
        self._task_frame += 1
        self._render_task_group()

    def has_active_tasks(self) -> bool:
        """Return True if any task is running or waiting."""
        return any(_is_active(t.status) for t in self._tasks)

    def _task_line(self, task: _TaskEntry) -> str:
        if task.status == "running":
            icon, style = RUNNING_FRAMES[self._task_frame % len(RUNNING_FRAMES)], STYLE_TOOL_CALL_LABEL
        elif task.status == "waiting":
            icon, style = WAITING_FRAMES[self._task_frame % len(WAITING_FRAMES)], STYLE_TOOL_CALL_ARGS
        elif task.status == "completed":
            icon, style = "ok", STYLE_TOOL_RESULT
        elif task.status == "failed":
            icon, style = "!!", STYLE_TOOL_RESULT_ERROR
        else:
            icon, style = "  ", STYLE_TOOL_CALL_ARGS
        line = f"  [{icon}] {task.name}"
        if task.detail:
            line += " " + STYLE_TIMESTAMP.render(task.detail)
        return style.render(line) + "\n"

    def _render_task_group(self) -> None:
        rendered = "".join(self._task_line(t) for t in self._tasks)
        if 0 <= self._task_block_idx < len(self.blocks):
            self.blocks[self._task_block_idx].rendered = rendered
        else:
            self.blocks.append(MessageBlock(MessageKind.TASK_GROUP, rendered))
            self._task_block_idx = len(self.blocks) - 1
        self._rebuild()

        if not self.has_active_tasks():
            self._tasks = []
            self._task_block_idx = -1

    def last_assistant_text(self) -> str:
        """Return the raw text of the latest assistant message, or ''."""
        for block in reversed(self.blocks):
            if block.kind is MessageKind.ASSISTANT:
                return block.raw_text
        return ""

    def _rebuild(self) -> None:
        self._viewport.set_content("".join(b.rendered for b in self.blocks))
        self._viewport.goto_bottom()

    def update(self, msg: Any) -> None:
        """Handle scroll keys."""
        if not isinstance(msg, KeyMsg):
            return
        page = max(self._viewport.height, 1)
        deltas = {
            "pgdown": page,
            "pgup": -page,
            "ctrl+d": page // 2,
            "ctrl+u": -(page // 2),
            "down": 1,
            "up": -1,
        }
        delta = deltas.get(str(msg))
        if delta is not None:
            self._viewport.scroll(delta)

    def view(self) -> str:
        """Render the visible part of the conversation."""
        return self._viewport.view()


def _go_value(item: Any) -> str:
    if item is None:
        return "<nil>"
    if isinstance(item, bool):
        return "true" if item else "false"
    if isinstance(item, float) and item.is_integer() and abs(item) < 1e21:
        return str(int(item))
    if isinstance(item, dict):
        return "map[" + " ".join(f"{k}:{_go_value(item[k])}" for k in sorted(item)) + "]"
    if isinstance(item, list):
        return "[" + " ".join(_go_value(v) for v in item) + "]"
    return str(item)


def _normalise_numbers(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return int(value)
    if isinstance(value, dict):
        return {k: _normalise_numbers(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_normalise_numbers(v) for v in value]
    return value


def truncate_arg_value(value: str) -> str:
    """Keep the first few lines of a value and note how many were dropped."""
    lines = value.split("\n")
    if len(lines) <= MAX_ARG_VALUE_LINES:
        return value
    hidden = len(lines) - MAX_ARG_VALUE_LINES
    return "\n".join(lines[:MAX_ARG_VALUE_LINES]) + f"\n[{hidden} more lines]"


def format_tool_args(name: str, args_json: str) -> str:
    """Format JSON tool arguments as ``key: value`` lines."""
    if not args_json:
        return ""
    try:
        data = json.loads(args_json)
    except json.JSONDecodeError:
        return truncate_arg_value(args_json)
    if data is None:
        return ""
    if not isinstance(data, dict):
        return truncate_arg_value(args_json)

    lines = []
    for key, value in data.items():
        if isinstance(value, str):
            text = value
        elif isinstance(value, list):
            text = "[" + ", ".join(_go_value(v) for v in value) + "]"
        else:
            text = json.dumps(
                _normalise_numbers(value), separators=(",", ":"), sort_keys=True, ensure_ascii=False
            )
        lines.append(f"{key}: {truncate_arg_value(text)}")
    return "\n".join(lines)