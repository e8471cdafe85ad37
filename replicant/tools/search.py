"""Tools that find files by name and search file contents."""

from __future__ import annotations

import os
import re
import shutil
import stat
import subprocess
from collections.abc import Iterator
from typing import Any

from replicant.tools.tool import RiskLevel, Tool, ToolError

MAX_GLOB_RESULTS = 200
MAX_GREP_RESULTS = 100


class _BadPattern(Exception):
    pass


def _read_char(pattern: str, i: int) -> tuple[str, int]:
    if i >= len(pattern) or pattern[i] in "-]":
        raise _BadPattern
    if pattern[i] == "\\":
        i += 1
        if i >= len(pattern):
            raise _BadPattern
    return pattern[i], i + 1


def _translate_class(pattern: str, i: int) -> tuple[str, int]:
    """Translate a bracket expression starting just after '['."""
    negate = i < len(pattern) and pattern[i] == "^"
    if negate:
        i += 1
    ranges: list[tuple[str, str]] = []
    while True:
        if i < len(pattern) and pattern[i] == "]" and ranges:
            i += 1
            break
        lo, i = _read_char(pattern, i)
        hi = lo
        if i < len(pattern) and pattern[i] == "-":
            hi, i = _read_char(pattern, i + 1)
        ranges.append((lo, hi))

    body = "".join(
        re.escape(lo) if lo == hi else f"{re.escape(lo)}-{re.escape(hi)}"
        for lo, hi in ranges
        if lo <= hi
    )
    if not body:
        return ("[^/]" if negate else "(?!)"), i
    return f"[{'^' if negate else ''}{body}]", i


def _compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a shell filename pattern (``*``, ``?``, ``[...]``, ``\\``)."""
    parts: list[str] = []
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if c == "*":
            parts.append("[^/]*")
            i += 1
        elif c == "?":
            parts.append("[^/]")
            i += 1
        elif c == "\\":
            if i + 1 >= len(pattern):
                raise _BadPattern
            parts.append(re.escape(pattern[i + 1]))
            i += 2
        elif c == "[":
            piece, i = _translate_class(pattern, i + 1)
            parts.append(piece)
        else:
            parts.append(re.escape(c))
            i += 1
    return re.compile("".join(parts), re.DOTALL)


def _base(path: str) -> str:
    stripped = path.rstrip("/")
    if not stripped:
        return "/" if path else "."
    return stripped.rsplit("/", 1)[-1]


def _walk_dir(directory: str) -> Iterator[tuple[str, str]]:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError:
        return
    for entry in entries:
        path = os.path.normpath(os.path.join(directory, entry.name))
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError:
            continue
        if is_dir:
            yield from _walk_dir(path)
        else:
            yield path, entry.name


def _walk_files(root: str) -> Iterator[tuple[str, str]]:
    """Yield (path, name) for every non-directory under root, in lexical order."""
    try:
        info = os.lstat(root)
    except OSError:
        return
    if stat.S_ISDIR(info.st_mode):
        yield from _walk_dir(root)
    else:
        yield root, _base(root)


class GlobTool(Tool):
    """Find files whose names match a pattern."""

    name = "glob_files"
    description = (
        "Recursively walk a directory and return file paths that match a glob pattern. "
        f"Returns at most {MAX_GLOB_RESULTS} results, sorted alphabetically."
    )
    risk = RiskLevel.NONE

    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "pattern": {
                    "type": "string",
                    "description": 'Glob pattern to match filenames against (e.g. "*.go", "**/*.ts").',
                },
                "path": {
                    "type": "string",
                    "description": "Root directory to search. Defaults to current working directory.",
                },
            },
            "required": ["pattern"],
        }

    def run(self, args: str) -> str:
        a = self._decode_args(args, {"pattern": str, "path": str})
        if not a["pattern"]:
            raise ToolError("glob_files: pattern is required")
        root = a["path"] or "."
        match_part = _base(a["pattern"])

        matcher: re.Pattern[str] | None = None
        matches: list[str] = []
        for path, name in _walk_files(root):
            if matcher is None:
                try:
                    matcher = _compile_pattern(match_part)
                except _BadPattern:
                    raise ToolError(
                        f"glob_files: walking {root}: syntax error in pattern"
                    ) from None
            if matcher.fullmatch(name):
                matches.append(path)
                if len(matches) >= MAX_GLOB_RESULTS:
                    break

        if not matches:
            return "no matches found"
        return "\n".join(sorted(matches))


class GrepTool(Tool):
    """Search file contents for a regular expression."""

    name = "grep"
    description = (
        "Search for a regex pattern in files, returning matches in file:line:content format. "
        "Uses ripgrep (rg) when available, falling back to grep -rn. "
        f"Returns at most {MAX_GREP_RESULTS} matching lines."
    )
    risk = RiskLevel.NONE

    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "pattern": {
                    "type": "string",
                    "description": "Regular expression pattern to search for.",
                },
                "path": {
                    "type": "string",
                    "description": "Directory or file to search. Defaults to current working directory.",
                },
                "include": {
                    "type": "string",
                    "description": 'Glob filter for file names to include (e.g. "*.go").',
                },
            },
            "required": ["pattern"],
        }

    @staticmethod
    def _command(pattern: str, path: str, include: str) -> list[str]:
        rg = shutil.which("rg")
        if rg:
            cmd = [rg]
            if include:
                cmd += ["--glob", include]
            return cmd + ["--line-number", "--no-heading", "--color=never", pattern, path]
        cmd = ["grep", "-rn", "--color=never"]
        if include:
            cmd.append(f"--include={include}")
        return cmd + [pattern, path]

    def run(self, args: str) -> str:
        a = self._decode_args(args, {"pattern": str, "path": str, "include": str})
        if not a["pattern"]:
            raise ToolError("grep: pattern is required")
        path = a["path"] or "."

        try:
            proc = subprocess.run(
                self._command(a["pattern"], path, a["include"]),
                stdin=subprocess.DEVNULL,
                capture_output=True,
            )
        except OSError as exc:
            raise ToolError(f"grep: {exc}") from exc

        if proc.returncode == 1:
            return "no matches found"
        if proc.returncode != 0:
            message = proc.stderr.decode("utf-8", errors="replace").strip()
            raise ToolError(f"grep: {message or f'exit status {proc.returncode}'}")

        stdout = proc.stdout.decode("utf-8", errors="replace").rstrip("\n")
        if not stdout:
            return "no matches found"
        lines = stdout.split("\n")
        if len(lines) > MAX_GREP_RESULTS:
            return "\n".join(lines[:MAX_GREP_RESULTS]) + (
                f"\n[results truncated to {MAX_GREP_RESULTS} lines]"
            )
        return "\n".join(lines)