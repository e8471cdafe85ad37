"""Load persona definitions from markdown documents with YAML frontmatter."""

from __future__ import annotations

import datetime
import os
from typing import IO, Any

import yaml

from replicant.personas.definition import MCPServerConfig, ReplicantDef

_DELIM = "---"


class LoadError(Exception):
    """Raised when a persona document cannot be read or parsed."""


def split_frontmatter(text: str) -> tuple[str, str]:
    """Split a document into its YAML frontmatter and markdown body.

    The document must begin (after optional blank lines) with ``---``;
    the frontmatter ends at the next line that starts with ``---``.
    """
    text = text.replace("\r\n", "\n")
    trimmed = text.lstrip("\n")
    if not trimmed.startswith(_DELIM):
        raise LoadError("missing opening frontmatter delimiter '---'")

    rest = trimmed[len(_DELIM):]
    if rest.startswith("\n"):
        rest = rest[1:]

    idx = rest.find("\n" + _DELIM)
    if idx == -1:
        raise LoadError("missing closing frontmatter delimiter '---'")

    frontmatter = rest[:idx]
    after = rest[idx + 1 + len(_DELIM):]
    if after.startswith("\n"):
        after = after[1:]
    return frontmatter, after


def _field_error(key: str, value: Any, wanted: str) -> LoadError:
    return LoadError(f"parse yaml frontmatter: field {key}: cannot use {value!r} as {wanted}")


def _as_str(key: str, value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, datetime.date)):
        return str(value)
    raise _field_error(key, value, "a string")


def _as_int(key: str, value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        raise _field_error(key, value, "an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise _field_error(key, value, "an integer")


def _as_float(key: str, value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _field_error(key, value, "a number")
    return float(value)


def _as_str_list(key: str, value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise _field_error(key, value, "a list")
    return [_as_str(key, item) for item in value]


def _as_str_map(key: str, value: Any) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise _field_error(key, value, "a mapping")
    return {str(k): _as_str(key, v) for k, v in value.items()}


def _server_config(name: str, value: Any) -> MCPServerConfig:
    if value is None:
        return MCPServerConfig()
    if not isinstance(value, dict):
        raise _field_error(f"mcp_servers.{name}", value, "a mapping")
    return MCPServerConfig(
        command=_as_str("command", value.get("command")),
        args=_as_str_list("args", value.get("args")),
        env=_as_str_map("env", value.get("env")),
        url=_as_str("url", value.get("url")),
        transport=_as_str("transport", value.get("transport")),
    )


def _build_definition(data: Any) -> ReplicantDef:
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise LoadError("parse yaml frontmatter: frontmatter must be a mapping")

    servers = data.get("mcp_servers")
    if servers is not None and not isinstance(servers, dict):
        raise _field_error("mcp_servers", servers, "a mapping")

    return ReplicantDef(
        name=_as_str("name", data.get("name")),
        description=_as_str("description", data.get("description")),
        model=_as_str("model", data.get("model")),
        tools=_as_str_list("tools", data.get("tools")),
        max_turns=_as_int("max_turns", data.get("max_turns")),
        temperature=_as_float("temperature", data.get("temperature")),
        max_tokens=_as_int("max_tokens", data.get("max_tokens")),
        mcp_servers={str(k): _server_config(str(k), v) for k, v in (servers or {}).items()},
    )


def load_from_text(text: str) -> ReplicantDef:
    """Parse a persona document held in a string."""
    frontmatter, body = split_frontmatter(text)
    try:
        data = yaml.safe_load(frontmatter)
    except yaml.YAMLError as exc:
        raise LoadError(f"parse yaml frontmatter: {exc}") from exc

    definition = _build_definition(data)
    definition.system_prompt = body.strip()
    definition.apply_defaults()
    return definition


def load_from_reader(reader: IO[str] | IO[bytes]) -> ReplicantDef:
    """Parse a persona document from a text or binary file-like object."""
    try:
        data = reader.read()
        text = data.decode("utf-8") if isinstance(data, bytes) else data
    except (OSError, UnicodeDecodeError) as exc:
        raise LoadError(f"read: {exc}") from exc
    return load_from_text(text)


def load_from_file(path: str | os.PathLike[str]) -> ReplicantDef:
    """Load a persona document from disk and record where it came from."""
    source = os.fspath(path)
    try:
        with open(source, "rb") as handle:
            data = handle.read()
    except OSError as exc:
        raise LoadError(f"open {source}: {exc}") from exc

    try:
        definition = load_from_text(data.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise LoadError(f"parse {source}: {exc}") from exc
    except LoadError as exc:
        raise LoadError(f"parse {source}: {exc}") from exc

    definition.source_path = source
    return definition