"""A name-indexed set of tools available to agents."""

from __future__ import annotations

from collections.abc import Iterable

from replicant.tools.execute import ExecuteTool
from replicant.tools.file_tools import EditFileTool, ListDirTool, ReadFileTool, WriteFileTool
from replicant.tools.search import GlobTool, GrepTool
from replicant.tools.tool import Tool


class ToolRegistry:
    """All available tools, keyed by name, starting with the built-in ones."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}
        for tool in (
            ReadFileTool(),
            WriteFileTool(),
            EditFileTool(),
            ListDirTool(),
            ExecuteTool(),
            GlobTool(),
            GrepTool(),
        ):
            self.register(tool)

    def register(self, tool: Tool) -> None:
        """Add a tool, replacing any tool with the same name."""
        self._tools[tool.name] = tool

    def get(self, name: str) -> Tool | None:
        """Return the tool with the given name, or None."""
        return self._tools.get(name)

    def resolve(self, names: Iterable[str]) -> list[Tool]:
        """Return the tools for the given names, expanding wildcards and skipping unknowns."""
        return self.resolve_with_wildcards(names)

    def resolve_with_wildcards(self, names: Iterable[str]) -> list[Tool]:
        """Resolve names; a name ending in ``*`` selects every tool with that prefix."""
        out: list[Tool] = []
        for name in names:
            if name.endswith("*"):
                prefix = name[:-1]
                out.extend(t for n, t in self._tools.items() if n.startswith(prefix))
            elif name in self._tools:
                out.append(self._tools[name])
        return out

    def all(self) -> list[Tool]:
        """Return every registered tool."""
        return list(self._tools.values())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)