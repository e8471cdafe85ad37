# replicant

Building blocks for a terminal coding agent:

- **Personas** (`replicant.personas`): agent definitions written as markdown
  files with YAML frontmatter. The frontmatter configures the agent and the
  body becomes its system prompt.
- **Tools** (`replicant.tools`): file, shell and search tools that an agent
  can call with JSON arguments, plus a registry to look them up.
- **TUI models** (`replicant.tui`): the state and rendering behind a chat-style
  terminal interface, covering the conversation view, input box with history,
  status bar, spinner and clipboard support.

## Installation

```
pip install .
```

Add the `test` extra to run the test suite:

```
pip install ".[test]"
pytest
```

## Personas

A persona file looks like this:

```markdown
---
name: archer
description: A careful code reviewer
model: anthropic/claude-sonnet-4-20250514
tools:
  - read_file
  - grep
max_turns: 10
temperature: 0.7
max_tokens: 4096
---
You are Archer. Review code thoroughly.
```

Fields that are left out get defaults: `max_turns` 50, `temperature` 0.3,
`max_tokens` 8192 and `name` "replicant".

```python
from replicant.personas.loader import load_from_file
from replicant.personas.persona_registry import Registry

definition = load_from_file("replicants/archer.md")
print(definition.name, definition.system_prompt)

# Reads *.md from ./replicants/ and ~/.replicant/replicants/.
# When two files share a name, the one in the earlier directory wins.
registry = Registry()
for persona in registry.list():
    print(persona.name, "-", persona.description)
```

## Tools

Every tool takes its arguments as a JSON string and returns text. It raises
`ToolError` when the arguments are wrong or the operation fails.

```python
import json
from replicant.tools.tool_registry import ToolRegistry
from replicant.tools.tool import run_tool

tools = ToolRegistry()
read_file = tools.get("read_file")
print(read_file.run(json.dumps({"path": "README.md", "limit": 5})))

# Names ending in "*" match every tool with that prefix.
selected = tools.resolve(["read_file", "grep", "mcp:github:*"])

# Runs a tool under the timeout that tool declares for itself.
print(run_tool(tools.get("execute"), json.dumps({"command": "echo hi"}), None))
```

The built-in tools are `read_file`, `write_file`, `edit_file`, `list_dir`,
`execute`, `glob_files` and `grep`. Each one has a risk level (`RiskLevel`),
which a permission layer can check before the tool runs.

## Terminal UI

`replicant.tui.app.AppModel` holds the state of the whole interface and is
driven by message objects from `replicant.tui.messages`, such as `KeyMsg`,
`SubmitMsg`, `StreamChunkMsg` and `ToolCallMsg`. Call `update(msg)` to feed
it a message and `view()` to get the rendered screen.