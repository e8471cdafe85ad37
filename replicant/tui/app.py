"""The root model of the terminal interface: layout, key handling and agent streaming."""

from __future__ import annotations

import enum
import json
import queue
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from replicant.tui.clipboard import write_clipboard
from replicant.tui.conversation import ConversationModel, ReplayEntry
from replicant.tui.input_box import InputModel
from replicant.tui.messages import (
    AutonomyChangedMsg,
    KeyMsg,
    PermissionRequestMsg,
    StreamChunkMsg,
    StreamDoneMsg,
    StreamErrorMsg,
    SubmitMsg,
    TaskStatusMsg,
    TickMsg,
    TokenUsageMsg,
    ToolCallMsg,
    ToolProgressMsg,
    ToolResultMsg,
    WindowSizeMsg,
)
from replicant.tui.spinner import SpinnerModel
from replicant.tui.statusbar import StatusBarModel

BANNER_TEXT = " ╱╲  REPLICANT\n╱  ╲ v0.1.0"
STATUS_BAR_HEIGHT = 3
DEFAULT_INPUT_HEIGHT = 5
DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 24

Command = Callable[[], Any]
"""A deferred action that produces the next message for ``update`` (or None)."""

AgentFunc = Callable[[threading.Event, str, "queue.Queue[Any]"], None]
"""Runs one agent turn: receives a cancel event, the user message and an event queue."""

CommandHandler = Callable[[str, str], str]
"""Handles a slash command and returns text to show, or ''."""

_AUTONOMY_CYCLE = {"off": "normal", "normal": "high", "high": "full"}


class _AgentState(enum.Enum):
    IDLE = enum.auto()
    WAITING_FOR_AGENT = enum.auto()
    STREAMING = enum.auto()
    WAITING_FOR_PERMISSION = enum.auto()


class _Closed:
    """Marks the end of an agent's event stream."""


_CLOSED = _Closed()


@dataclass(frozen=True)
class _Pending:
    """An agent event together with the queue it came from, so draining continues."""

    inner: Any
    events: queue.Queue[Any]


@dataclass(frozen=True)
class _ClipboardResult:
    error: BaseException | None = None


def _emit(msg: Any) -> Command:
    return lambda: msg


def _after(delay: float, msg: Any) -> Command:
    def command() -> Any:
        time.sleep(delay)
        return msg

    return command


def _drain(events: queue.Queue[Any]) -> Command:
    """Read the next agent event; a closed stream becomes StreamDoneMsg."""

    def command() -> Any:
        item = events.get()
        if item is _CLOSED:
            return StreamDoneMsg()
        if isinstance(item, (StreamDoneMsg, StreamErrorMsg)):
            return item
        return _Pending(item, events)

    return command


def _copy_command(text: str) -> Command:
    def command() -> Any:
        try:
            write_clipboard(text)
        except OSError as exc:
            return _ClipboardResult(exc)
        return _ClipboardResult()

    return command


def _stub_response(text: str) -> str:
    return (
        f"I received: {json.dumps(text, ensure_ascii=False)}\n\n"
        "This is a stub response — wire up a real AgentFunc to connect to the LLM."
    )


def truncate(text: str, limit: int) -> str:
    """Shorten text to ``limit`` characters, marking the cut with '...'."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class AppModel:
    """The whole interface: conversation, input box, spinner and status bar.

    ``update`` handles one message and returns the commands to run next;
    each command, when called, yields a message to feed back into ``update``.
    """

    def __init__(
        self,
        model_name: str,
        context_limit: int,
        agent_fn: AgentFunc | None = None,
        cmd_handler: CommandHandler | None = None,
        initial_autonomy: str = "",
        replicant_name: str = "",
    ) -> None:
        self.statusbar = StatusBarModel(model_name, context_limit, replicant_name, DEFAULT_WIDTH)
        if initial_autonomy:
            self.statusbar.set_autonomy(initial_autonomy)
        self.conversation = ConversationModel(
            DEFAULT_WIDTH,
            DEFAULT_HEIGHT - STATUS_BAR_HEIGHT - DEFAULT_INPUT_HEIGHT,
            replicant_name,
        )
        self.input = InputModel(DEFAULT_WIDTH)
        self.spinner = SpinnerModel()
        if replicant_name:
            self.spinner.set_label(replicant_name)

        self.agent_fn = agent_fn
        self.cmd_handler = cmd_handler
        self.state = _AgentState.IDLE
        self.width = DEFAULT_WIDTH
        self.height = DEFAULT_HEIGHT
        self.mouse_enabled = False
        self.quitting = False
        self.queued_messages: list[str] = []

        self._cancel: threading.Event | None = None
        self._pending_permission: queue.Queue[bool] | None = None
        self._pending_events: queue.Queue[Any] | None = None
        self._replay_entries: list[ReplayEntry] = []

    @property
    def busy(self) -> bool:
        """True while an agent turn is in progress."""
        return self.state is not _AgentState.IDLE

    @property
    def awaiting_permission(self) -> bool:
        """True while a permission prompt waits for y or n."""
        return self.state is _AgentState.WAITING_FOR_PERMISSION

    def with_replay_entries(self, entries: list[ReplayEntry]) -> AppModel:
        """Set history to replay after the first resize and return the model."""
        self._replay_entries = list(entries)
        return self

    # ── update ──────────────────────────────────────────────────────────────

    def update(self, msg: Any) -> list[Command]:
        """Handle one message and return the commands to run next."""
        commands: list[Command] = []

        if isinstance(msg, WindowSizeMsg):
            self._on_resize(msg)
        elif isinstance(msg, KeyMsg):
            early = self._on_key(msg)
            if early is not None:
                return early
        elif isinstance(msg, SubmitMsg):
            if self._on_submit(msg, commands):
                return commands
        elif isinstance(msg, _Pending):
            self._on_pending(msg, commands)
        elif self._on_plain(msg, commands):
            return commands

        self.conversation.update(msg)
        submitted = self.input.update(msg)
        if submitted is not None:
            commands.append(_emit(submitted))
        tick = self.spinner.update(msg)
        if tick is not None:
            commands.append(_after(self.spinner.interval, tick))
        if isinstance(msg, TickMsg) and self.conversation.has_active_tasks():
            self.conversation.advance_task_frame()
        return commands

    def _on_resize(self, msg: WindowSizeMsg) -> None:
        self.width = msg.width
        self.height = msg.height
        self._relayout()
        if not self.conversation.blocks:
            self.conversation.add_banner(BANNER_TEXT)
            if self._replay_entries:
                self.conversation.replay_history(self._replay_entries)
                self._replay_entries = []

    def _cancel_agent(self) -> None:
        if self._cancel is not None:
            self._cancel.set()
            self._cancel = None

    def _answer_permission(self, approved: bool) -> list[Command]:
        if self._pending_permission is not None:
            self._pending_permission.put(approved)
        self._pending_permission = None
        self.state = _AgentState.STREAMING
        self.statusbar.set_streaming(True)
        if self._pending_events is not None:
            events = self._pending_events
            self._pending_events = None
            return [_drain(events)]
        return []

    def _on_key(self, msg: KeyMsg) -> list[Command] | None:
        """Handle a key; a returned list ends the update, None falls through."""
        key = str(msg)

        if self.state is _AgentState.WAITING_FOR_PERMISSION and self._pending_permission is not None:
            if key in ("y", "Y"):
                return self._answer_permission(True)
            if key in ("n", "N", "esc"):
                return self._answer_permission(False)
            if key == "ctrl+c":
                self._pending_permission.put(False)
                self._pending_permission = None
                self._cancel_agent()
                self.quitting = True
            return []

        if key == "ctrl+c":
            self._cancel_agent()
            self.quitting = True
            return []

        if msg.key == "esc":
            if self.busy:
                self._interrupt()
            return []

        if key == "ctrl+m":
            self.mouse_enabled = not self.mouse_enabled
            self.statusbar.set_mouse(self.mouse_enabled)
            return []

        if key == "ctrl+y":
            text = self.conversation.last_assistant_text()
            return [_copy_command(text)] if text else []

        if key == "tab" and self.state is _AgentState.IDLE:
            if self.cmd_handler is not None:
                following = _AUTONOMY_CYCLE.get(self.statusbar.autonomy, "off")
                response = self.cmd_handler("auto", following)
                self.statusbar.set_autonomy(following)
                self.conversation.add_banner(response)
            return []

        return None

    def _interrupt(self) -> None:
        self._cancel_agent()
        if self._pending_permission is not None:
            self._pending_permission.put(False)
            self._pending_permission = None
            self._pending_events = None
        self.queued_messages = []
        self.state = _AgentState.IDLE
        self.spinner.stop()
        self.conversation.finalize_assistant()
        self.conversation.add_banner("[interrupted]")
        self.input.enable()
        self.statusbar.set_streaming(False)

    def _on_submit(self, msg: SubmitMsg, commands: list[Command]) -> bool:
        """Handle submitted text; True ends the update early."""
        text = msg.text.strip()
        if not text:
            return True

        if self.busy and not text.startswith("/"):
            self.queued_messages.append(text)
            self.conversation.add_banner(f"[queued: {truncate(text, 60)}]")
            self.input.enable()
            return True

        if text.startswith("/"):
            self.input.enable()
            self._on_slash_command(text, commands)
            return True

        self.conversation.add_user_message(text)
        self.input.set_placeholder("type to queue follow-up...")
        self.input.set_value("")
        self.state = _AgentState.WAITING_FOR_AGENT
        self.statusbar.set_streaming(True)
        commands.append(_after(self.spinner.interval, self.spinner.start()))

        if self.agent_fn is not None:
            cancel = threading.Event()
            self._cancel = cancel
            events: queue.Queue[Any] = queue.Queue()
            agent_fn = self.agent_fn

            def run_agent() -> None:
                try:
                    agent_fn(cancel, text, events)
                finally:
                    events.put(_CLOSED)

            threading.Thread(target=run_agent, daemon=True).start()
            commands.append(_drain(events))
        else:
            commands.append(_emit(StreamChunkMsg(_stub_response(text))))
        return False

    def _on_slash_command(self, text: str, commands: list[Command]) -> None:
        name, _, args = text[1:].partition(" ")
        name = name.strip().lower()
        args = args.strip()

        if name in ("quit", "q"):
            self.quitting = True
            return
        if name in ("copy", "cp"):
            last = self.conversation.last_assistant_text()
            if last:
                commands.append(_copy_command(last))
            else:
                self.conversation.add_banner("nothing to copy")
            return
        if name == "mouse":
            self.mouse_enabled = not self.mouse_enabled
            self.statusbar.set_mouse(self.mouse_enabled)
            if self.mouse_enabled:
                self.conversation.add_banner(
                    "mouse capture on (scroll with mouse, Ctrl+M to toggle)"
                )
            else:
                self.conversation.add_banner(
                    "mouse capture off (select text with mouse, Ctrl+M to toggle)"
                )
            return

        if self.cmd_handler is not None:
            response = self.cmd_handler(name, args)
            if response:
                self.conversation.add_banner(response)
            if name in ("auto", "autonomy") and args:
                self.statusbar.set_autonomy(args)
        else:
            self.conversation.add_banner(f"unknown command: /{name}")

    def _on_chunk(self, text: str) -> None:
        if self.state is _AgentState.WAITING_FOR_AGENT:
            self.state = _AgentState.STREAMING
            self.spinner.stop()
            self.conversation.start_assistant_message()
        self.conversation.append_chunk(text)

    def _on_tool_call(self, msg: ToolCallMsg) -> None:
        if self.state is _AgentState.WAITING_FOR_AGENT:
            self.state = _AgentState.STREAMING
            self.spinner.stop()
        self.conversation.add_tool_call(msg.tool_id, msg.name, msg.args)
        self.statusbar.record_tool_call(msg.name)

    def _on_permission(
        self, msg: PermissionRequestMsg, events: queue.Queue[Any] | None
    ) -> None:
        self.conversation.add_banner(
            f"[{msg.tool_name}] wants to run: {msg.args}\nAllow? (y/n)"
        )
        self._pending_permission = msg.response
        self._pending_events = events
        self.state = _AgentState.WAITING_FOR_PERMISSION
        self.spinner.stop()
        self.statusbar.set_streaming(False)

    def _on_side_info(self, msg: Any) -> None:
        if isinstance(msg, TokenUsageMsg):
            self.statusbar.set_tokens(msg.input_tokens, msg.output_tokens)
        elif isinstance(msg, TaskStatusMsg):
            self.conversation.update_task(msg.task_id, msg.name, msg.status, msg.detail)
        elif isinstance(msg, AutonomyChangedMsg):
            self.statusbar.set_autonomy(msg.level)

    def _on_pending(self, msg: _Pending, commands: list[Command]) -> None:
        inner = msg.inner
        if isinstance(inner, PermissionRequestMsg):
            self._on_permission(inner, msg.events)
            return
        if isinstance(inner, StreamChunkMsg):
            self._on_chunk(inner.text)
        elif isinstance(inner, ToolCallMsg):
            self._on_tool_call(inner)
        elif isinstance(inner, ToolResultMsg):
            self.conversation.add_tool_result(inner.tool_id, inner.result, inner.is_error)
        elif isinstance(inner, ToolProgressMsg):
            self.conversation.append_tool_progress(inner.tool_id, inner.output)
        else:
            self._on_side_info(inner)
        commands.append(_drain(msg.events))

    def _on_plain(self, msg: Any, commands: list[Command]) -> bool:
        """Handle messages sent directly rather than drained; True ends the update."""
        if isinstance(msg, StreamChunkMsg):
            self._on_chunk(msg.text)
        elif isinstance(msg, ToolCallMsg):
            self._on_tool_call(msg)
        elif isinstance(msg, ToolResultMsg):
            self.conversation.add_tool_result(msg.tool_id, msg.result, msg.is_error)
        elif isinstance(msg, ToolProgressMsg):
            self.conversation.append_tool_progress(msg.tool_id, msg.output)
        elif isinstance(msg, StreamDoneMsg):
            return self._on_done(commands)
        elif isinstance(msg, StreamErrorMsg):
            self.conversation.add_tool_result("", f"error: {msg.error}", True)
            self.conversation.finalize_assistant()
            self.state = _AgentState.IDLE
            self.spinner.stop()
            self.input.enable()
            self.statusbar.set_streaming(False)
            self._cancel_agent()
        elif isinstance(msg, PermissionRequestMsg):
            self._on_permission(msg, None)
        elif isinstance(msg, _ClipboardResult):
            if msg.error is not None:
                self.conversation.add_banner(f"clipboard: {msg.error}")
            else:
                self.conversation.add_banner("copied last response to clipboard")
        else:
            self._on_side_info(msg)
        return False

    def _on_done(self, commands: list[Command]) -> bool:
        self.conversation.finalize_assistant()
        self.spinner.stop()
        self.statusbar.set_streaming(False)
        self._cancel_agent()
        self.state = _AgentState.IDLE
        self.input.enable()
        if self.queued_messages:
            following = self.queued_messages.pop(0)
            commands.append(_emit(SubmitMsg(following)))
            return True
        return False

    # ── view ────────────────────────────────────────────────────────────────

    def _relayout(self) -> None:
        conv_height = max(self.height - self.input.height() - STATUS_BAR_HEIGHT, 1)
        self.conversation.set_size(self.width, conv_height)
        self.input.set_width(self.width)
        self.statusbar.set_width(self.width)

    def view(self) -> str:
        """Render the conversation, input box and status bar, top to bottom."""
        conversation = self.conversation.view()
        if self.spinner.active:
            conversation += "\n" + self.spinner.view()
        return conversation + "\n" + self.input.view() + "\n" + self.statusbar.view()