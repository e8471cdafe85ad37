"""The shell command tool."""

from __future__ import annotations

import os
import signal
import subprocess
from typing import Any

from replicant.tools.tool import RiskLevel, Tool, ToolError

DEFAULT_EXEC_TIMEOUT = 30
MAX_OUTPUT_LEN = 50000


def _kill_group(proc: subprocess.Popen[bytes]) -> None:
    if hasattr(os, "killpg"):
        try:
            os.killpg(proc.pid, signal.SIGKILL)
            return
        except OSError:
            pass
    proc.kill()


def _run_shell(command: str, limit: float) -> tuple[bytes, int]:
    """Run ``sh -c command`` and return its combined output and exit code."""
    try:
        proc = subprocess.Popen(
            ["sh", "-c", command],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            start_new_session=True,
        )
    except OSError:
        return b"", -1

    try:
        output, _ = proc.communicate(timeout=max(limit, 0))
    except subprocess.TimeoutExpired:
        _kill_group(proc)
        output, _ = proc.communicate()
        return output or b"", -1

    code = proc.returncode
    return output or b"", -1 if code < 0 else code


class ExecuteTool(Tool):
    """Run a shell command and report its output and exit code."""

    name = "execute"
    description = (
        "Run a shell command via sh -c and return its combined stdout+stderr output "
        "along with the exit code. Output is truncated to 50000 characters."
    )
    risk = RiskLevel.HIGH
    timeout = 600.0

    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "command": {
                    "type": "string",
                    "description": "The shell command to execute.",
                },
                "timeout": {
                    "type": "integer",
                    "description": f"Timeout in seconds. Defaults to {DEFAULT_EXEC_TIMEOUT}.",
                },
            },
            "required": ["command"],
        }

    def run(self, args: str) -> str:
        return self.run_with_timeout(args, None)

    def run_with_timeout(self, args: str, timeout: float | None) -> str:
        """Run the command, bounded by the tighter of ``timeout`` and the per-call limit."""
        a = self._decode_args(args, {"command": str, "timeout": int})
        command = a["command"]
        if not command:
            raise ToolError("execute: command is required")
        per_call = a["timeout"] if a["timeout"] > 0 else DEFAULT_EXEC_TIMEOUT
        limit = per_call if timeout is None else min(per_call, timeout)

        raw, exit_code = _run_shell(command, limit)
        truncated = len(raw) > MAX_OUTPUT_LEN
        if truncated:
            raw = raw[:MAX_OUTPUT_LEN]
        output = raw.decode("utf-8", errors="replace")

        result = f"exit_code: {exit_code}\n{output}"
        if truncated:
            result += "\n[output truncated]"
        return result