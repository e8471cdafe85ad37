from typing import Any

from replicant.tools.tool import RiskLevel, Tool
from replicant.tools.tool_registry import ToolRegistry


class CustomTestTool(Tool):
    description = "test tool"
    risk = RiskLevel.NONE

    def __init__(self, name: str) -> None:
        self.name = name

    def parameters(self) -> dict[str, Any]:
        return {"type": "object"}

    def run(self, args: str) -> str:
        return "ok"


def test_has_all_builtins():
    r = ToolRegistry()
    for name in ("read_file", "edit_file", "execute", "glob_files", "grep"):
        assert r.get(name) is not None and r.get(name).name == name


def test_get():
    tool = ToolRegistry().get("read_file")
    assert tool.name == "read_file"


def test_get_missing():
    assert ToolRegistry().get("nonexistent_tool") is None


def test_resolve_skips_unknown():
    tools = ToolRegistry().resolve(["read_file", "grep", "nonexistent"])
    assert [t.name for t in tools] == ["read_file", "grep"]


def test_resolve_empty():
    assert ToolRegistry().resolve([]) == []


def test_all():
    names = {t.name for t in ToolRegistry().all()}
    assert names == {
        "read_file",
        "write_file",
        "edit_file",
        "list_dir",
        "execute",
        "glob_files",
        "grep",
    }


def test_register():
    r = ToolRegistry()
    r.register(CustomTestTool("custom_tool"))
    got = r.get("custom_tool")
    assert got.name == "custom_tool"
    assert got.run("{}") == "ok"


def test_register_overwrites():
    r = ToolRegistry()
    original = r.get("grep")
    replacement = CustomTestTool("grep")
    r.register(replacement)
    assert r.get("grep") is replacement
    assert r.get("grep") is not original


def test_resolve_wildcard_prefix():
    r = ToolRegistry()
    r.register(CustomTestTool("mcp:github:issues"))
    r.register(CustomTestTool("mcp:github:pulls"))
    r.register(CustomTestTool("mcp:slack:post"))
    names = sorted(t.name for t in r.resolve(["mcp:github:*"]))
    assert names == ["mcp:github:issues", "mcp:github:pulls"]


def test_resolve_star_selects_everything():
    r = ToolRegistry()
    assert len(r.resolve_with_wildcards(["*"])) == len(r.all())