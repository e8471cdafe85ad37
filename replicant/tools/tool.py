"""The interface every agent tool implements, and helpers to run tools."""

from __future__ import annotations

import enum
import json
import queue
import threading
from abc import ABC, abstractmethod
from typing import Any

DEFAULT_TOOL_TIMEOUT = 120.0
"""Seconds allowed to tools that do not declare their own timeout."""


class RiskLevel(enum.IntEnum):
    """How dangerous a tool call is, for permission checks."""

    NONE = 0
    LOW = 1
    HIGH = 2

    def __str__(self) -> str:
        return self.name.lower()


class ToolError(Exception):
    """Raised when a tool cannot carry out a call."""


def _matches(value: Any, kind: type) -> bool:
    if isinstance(value, bool):
        return kind is bool
    return isinstance(value, kind)


class Tool(ABC):
    """An action the agent can take.

    Subclasses set ``name``, ``description`` and ``risk`` and may set
    ``timeout`` (seconds). A tool that can honour a time limit itself may
    also define ``run_with_timeout(args, timeout)``.
    """

    name: str = ""
    description: str = ""
    risk: RiskLevel = RiskLevel.NONE
    timeout: float | None = None

    @abstractmethod
    def parameters(self) -> dict[str, Any]:
        """Return the JSON Schema of the tool's input."""

    @abstractmethod
    def run(self, args: str) -> str:
        """Run the tool with JSON-encoded arguments and return its output."""

    def _decode_args(self, args: str, fields: dict[str, type]) -> dict[str, Any]:
        """Decode a JSON object, returning each field or its type's zero value."""
        try:
            data = json.loads(args)
        except json.JSONDecodeError as exc:
            raise ToolError(f"{self.name}: invalid arguments: {exc}") from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ToolError(f"{self.name}: invalid arguments: expected a JSON object")

        decoded: dict[str, Any] = {}
        for key, kind in fields.items():
            value = data.get(key)
            if value is None:
                decoded[key] = kind()
            elif _matches(value, kind):
                decoded[key] = value
            else:
                raise ToolError(
                    f"{self.name}: invalid arguments: {key} must be of type {kind.__name__}"
                )
        return decoded


def get_timeout(tool: Tool) -> float:
    """Return the number of seconds a tool is allowed to run."""
    declared = getattr(tool, "timeout", None)
    return DEFAULT_TOOL_TIMEOUT if declared is None else declared


def run_tool(tool: Tool, args: str, timeout: float | None = None) -> str:
    """Run a tool, enforcing a time limit.

    Tools that provide ``run_with_timeout`` enforce the limit themselves;
    others run in a background thread and a ``TimeoutError`` is raised if
    they do not finish in time. ``timeout`` defaults to the tool's own.
    """
    limit = get_timeout(tool) if timeout is None else timeout

    runner = getattr(tool, "run_with_timeout", None)
    if callable(runner):
        return runner(args, limit)

    results: queue.Queue[tuple[bool, Any]] = queue.Queue(maxsize=1)

    def worker() -> None:
        try:
            results.put((True, tool.run(args)))
        except Exception as exc:
            results.put((False, exc))

    threading.Thread(target=worker, name=f"tool-{tool.name}", daemon=True).start()
    try:
        ok, value = results.get(timeout=limit)
    except queue.Empty:
        raise TimeoutError(f"{tool.name}: timed out after {limit:g}s") from None
    if ok:
        return value
    raise value