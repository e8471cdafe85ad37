"""Messages passed to the terminal interface's update loop."""

from __future__ import annotations

import queue
from dataclasses import dataclass

from replicant.tools.tool import RiskLevel


@dataclass(frozen=True)
class KeyMsg:
    """A key press, named like ``enter``, ``up``, ``ctrl+c`` or a typed character."""

    key: str
    alt: bool = False

    def __str__(self) -> str:
        return f"alt+{self.key}" if self.alt else self.key


@dataclass(frozen=True)
class WindowSizeMsg:
    """The terminal was resized."""

    width: int
    height: int


@dataclass(frozen=True)
class TickMsg:
    """An animation tick for the spinner."""


@dataclass(frozen=True)
class SubmitMsg:
    """The user submitted the input box."""

    text: str


@dataclass(frozen=True)
class StreamChunkMsg:
    """A partial text chunk from the model's stream."""

    text: str


@dataclass(frozen=True)
class ToolCallMsg:
    """The agent invokes a tool."""

    tool_id: str
    name: str
    args: str


@dataclass(frozen=True)
class ToolResultMsg:
    """The result of a tool execution."""

    tool_id: str
    result: str
    is_error: bool = False


@dataclass(frozen=True)
class StreamDoneMsg:
    """The agent finished its response turn."""


@dataclass(frozen=True)
class StreamErrorMsg:
    """An error occurred while streaming."""

    error: BaseException


@dataclass(frozen=True)
class PermissionRequestMsg:
    """Ask the user to approve a tool call; the answer is put on ``response``."""

    tool_call_id: str
    tool_name: str
    args: str
    risk_level: RiskLevel = RiskLevel.NONE
    response: queue.Queue[bool] | None = None


@dataclass(frozen=True)
class PermissionResponseMsg:
    """The user's decision on a permission request."""

    tool_call_id: str
    approved: bool


@dataclass(frozen=True)
class ToolProgressMsg:
    """Partial output from a running tool."""

    tool_id: str
    output: str


@dataclass(frozen=True)
class CommandMsg:
    """A local slash command handled without the agent."""

    command: str
    args: str = ""


@dataclass(frozen=True)
class AutonomyChangedMsg:
    """The autonomy level changed."""

    level: str


@dataclass(frozen=True)
class TokenUsageMsg:
    """Cumulative token counts for the status bar."""

    input_tokens: int
    output_tokens: int


@dataclass(frozen=True)
class TaskStatusMsg:
    """Update of one entry in the active task display."""

    task_id: str
    name: str
    status: str
    detail: str = ""