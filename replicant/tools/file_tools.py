"""Tools that read, write, edit and list files."""

from __future__ import annotations

import os
from typing import Any

from replicant.tools.tool import RiskLevel, Tool, ToolError

DEFAULT_READ_LIMIT = 500


class ReadFileTool(Tool):
    """Read a file as numbered lines."""

    name = "read_file"
    description = (
        "Read the contents of a file, returning lines prefixed with line numbers (cat -n style). "
        "Use offset and limit to read a specific range of lines."
    )
    risk = RiskLevel.NONE

    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "Absolute or relative path to the file to read.",
                },
                "offset": {
                    "type": "integer",
                    "description": "1-based line number to start reading from. Defaults to 1.",
                },
                "limit": {
                    "type": "integer",
                    "description": (
                        f"Maximum number of lines to return. Defaults to {DEFAULT_READ_LIMIT}."
                    ),
                },
            },
            "required": ["path"],
        }

    def run(self, args: str) -> str:
        a = self._decode_args(args, {"path": str, "offset": int, "limit": int})
        path = a["path"]
        if not path:
            raise ToolError("read_file: path is required")
        offset = a["offset"] if a["offset"] > 0 else 1
        limit = a["limit"] if a["limit"] > 0 else DEFAULT_READ_LIMIT

        lines: list[str] = []
        line_num = 0
        try:
            with open(path, "rb") as handle:
                for raw in handle:
                    line_num += 1
                    if line_num < offset:
                        continue
                    if len(lines) >= limit:
                        break
                    text = raw.rstrip(b"\n")
                    if text.endswith(b"\r"):
                        text = text[:-1]
                    lines.append(f"{line_num:6d}\t{text.decode('utf-8', errors='replace')}\n")
        except OSError as exc:
            raise ToolError(f"read_file: {exc}") from exc

        if not lines and line_num < offset:
            raise ToolError(
                f"read_file: offset {offset} exceeds file length ({line_num} lines)"
            )
        return "".join(lines)


class WriteFileTool(Tool):
    """Create or overwrite a file."""

    name = "write_file"
    description = (
        "Create a new file or overwrite an existing file with the given content. "
        "Parent directories are created automatically if they don't exist."
    )
    risk = RiskLevel.LOW

    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "Path to the file to create or overwrite.",
                },
                "content": {
                    "type": "string",
                    "description": "Full content to write to the file.",
                },
            },
            "required": ["path", "content"],
        }

    def run(self, args: str) -> str:
        a = self._decode_args(args, {"path": str, "content": str})
        path = a["path"]
        if not path:
            raise ToolError("write_file: path is required")

        directory = os.path.dirname(path)
        if directory and directory != ".":
            try:
                os.makedirs(directory, mode=0o755, exist_ok=True)
            except OSError as exc:
                raise ToolError(f"write_file: create directories: {exc}") from exc

        data = a["content"].encode("utf-8")
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o644)
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
        except OSError as exc:
            raise ToolError(f"write_file: {exc}") from exc

        return f"wrote {len(data)} bytes to {path}"


class EditFileTool(Tool):
    """Replace one exact, unique occurrence of a string in a file."""

    name = "edit_file"
    description = (
        "Perform an exact search-and-replace in a file. "
        "old_string must appear exactly once; the tool replaces it with new_string."
    )
    risk = RiskLevel.LOW

    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "Absolute or relative path to the file to edit.",
                },
                "old_string": {
                    "type": "string",
                    "description": "The exact string to find. Must appear exactly once in the file.",
                },
                "new_string": {
                    "type": "string",
                    "description": "The string to replace old_string with.",
                },
            },
            "required": ["path", "old_string", "new_string"],
        }

    def run(self, args: str) -> str:
        a = self._decode_args(args, {"path": str, "old_string": str, "new_string": str})
        path = a["path"]
        if not path:
            raise ToolError("edit_file: path is required")

        try:
            with open(path, "rb") as handle:
                content = handle.read().decode("utf-8", errors="surrogateescape")
        except OSError as exc:
            raise ToolError(f"edit_file: {exc}") from exc

        old = a["old_string"]
        count = content.count(old)
        if count == 0:
            raise ToolError(f"edit_file: old_string not found in {path}")
        if count > 1:
            raise ToolError(
                f"edit_file: old_string appears {count} times in {path} (must be unique)"
            )

        updated = content.replace(old, a["new_string"], 1)
        try:
            with open(path, "wb") as handle:
                handle.write(updated.encode("utf-8", errors="surrogateescape"))
        except OSError as exc:
            raise ToolError(f"edit_file: writing {path}: {exc}") from exc

        return f"edit_file: replaced 1 occurrence in {path}"


class ListDirTool(Tool):
    """List a directory's entries with their kind and size."""

    name = "list_dir"
    description = (
        "List the contents of a directory, showing file names, sizes, "
        "and whether each entry is a file or directory."
    )
    risk = RiskLevel.NONE

    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "Path to the directory to list. Defaults to current directory.",
                },
            },
            "required": [],
        }

    def run(self, args: str) -> str:
        path = self._decode_args(args, {"path": str})["path"] if args else ""
        path = path or "."

        try:
            entries = sorted(os.scandir(path), key=lambda e: e.name)
        except OSError as exc:
            raise ToolError(f"list_dir: {exc}") from exc

        lines = []
        for entry in entries:
            try:
                size = entry.stat(follow_symlinks=False).st_size
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError:
                continue
            kind = "dir " if is_dir else "file"
            lines.append(f"{kind}  {size:8d}  {entry.name}\n")

        if not lines:
            return "(empty directory)"
        return "".join(lines)