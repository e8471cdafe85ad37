"""Persona definitions: configuration plus the system prompt an agent runs with."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_MAX_TURNS = 50
DEFAULT_TEMPERATURE = 0.3
DEFAULT_MAX_TOKENS = 8192
DEFAULT_NAME = "replicant"


@dataclass
class MCPServerConfig:
    """Connection parameters for one MCP server used by a persona."""

    command: str = ""
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    url: str = ""
    transport: str = ""


@dataclass
class ReplicantDef:
    """An agent persona loaded from a markdown file with YAML frontmatter.

    The frontmatter supplies the configuration fields; the markdown body
    becomes ``system_prompt``.
    """

    name: str = ""
    description: str = ""
    model: str = ""
    tools: list[str] = field(default_factory=list)
    max_turns: int = 0
    temperature: float = 0.0
    max_tokens: int = 0
    mcp_servers: dict[str, MCPServerConfig] = field(default_factory=dict)
    system_prompt: str = ""
    source_path: str = ""

    def apply_defaults(self) -> None:
        """Fill unset (zero or empty) optional fields with their defaults."""
        if self.max_turns == 0:
            self.max_turns = DEFAULT_MAX_TURNS
        if self.temperature == 0:
            self.temperature = DEFAULT_TEMPERATURE
        if self.max_tokens == 0:
            self.max_tokens = DEFAULT_MAX_TOKENS
        if not self.name:
            self.name = DEFAULT_NAME