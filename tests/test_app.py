import queue
import threading

import pytest

from replicant.tui.app import BANNER_TEXT, AppModel, truncate
from replicant.tui.conversation import MessageKind, ReplayEntry
from replicant.tui.messages import (
    KeyMsg,
    PermissionRequestMsg,
    StreamChunkMsg,
    StreamDoneMsg,
    StreamErrorMsg,
    SubmitMsg,
    TaskStatusMsg,
    TokenUsageMsg,
    ToolCallMsg,
    ToolResultMsg,
    WindowSizeMsg,
)


def pump(app, commands, limit=300):
    pending = list(commands)
    steps = 0
    while pending and steps < limit:
        steps += 1
        msg = pending.pop(0)()
        if msg is not None:
            pending.extend(app.update(msg))
    return steps


def rendered_text(app):
    return "".join(b.rendered for b in app.conversation.blocks)


def test_truncate():
    assert truncate("abcdef", 3) == "abc..."
    assert truncate("abc", 3) == "abc"


def test_resize_adds_banner_once_and_replays():
    app = AppModel("model", 200000).with_replay_entries(
        [ReplayEntry(type="user", content="earlier question")]
    )
    app.update(WindowSizeMsg(100, 30))
    kinds = [b.kind for b in app.conversation.blocks]
    assert kinds[0] is MessageKind.BANNER
    assert MessageKind.USER in kinds
    count = len(app.conversation.blocks)
    app.update(WindowSizeMsg(90, 30))
    assert len(app.conversation.blocks) == count
    assert app.width == 90


def test_view_fills_height():
    app = AppModel("model", 200000)
    app.update(WindowSizeMsg(80, 24))
    view = app.view()
    assert len(view.split("\n")) == app.height
    assert "no tool calls yet" in view


def test_quit_command_and_ctrl_c():
    app = AppModel("model", 1000)
    app.update(SubmitMsg("/quit"))
    assert app.quitting
    other = AppModel("model", 1000)
    other.update(KeyMsg("ctrl+c"))
    assert other.quitting


def test_unknown_command_without_handler():
    app = AppModel("model", 1000)
    app.update(SubmitMsg("/foo bar"))
    assert "unknown command: /foo" in rendered_text(app)


def test_command_handler_receives_lowercase_name_and_sets_autonomy():
    calls = []

    def handler(name, args):
        calls.append((name, args))
        return "ok"

    app = AppModel("model", 1000, cmd_handler=handler)
    app.update(SubmitMsg("/AUTO  high "))
    assert calls == [("auto", "high")]
    assert app.statusbar.autonomy == "high"


def test_tab_cycles_autonomy():
    calls = []

    def handler(name, args):
        calls.append((name, args))
        return f"autonomy: {args}"

    app = AppModel("model", 1000, cmd_handler=handler, initial_autonomy="off")
    app.update(KeyMsg("tab"))
    assert calls == [("auto", "normal")]
    assert app.statusbar.autonomy == "normal"
    app.update(KeyMsg("tab"))
    app.update(KeyMsg("tab"))
    app.update(KeyMsg("tab"))
    assert app.statusbar.autonomy == "off"


def test_copy_with_nothing():
    app = AppModel("model", 1000)
    app.update(SubmitMsg("/copy"))
    assert "nothing to copy" in rendered_text(app)


def test_agent_stream_completes():
    def agent(cancel, message, events):
        events.put(ToolCallMsg("1", "read_file", '{"path": "a.txt"}'))
        events.put(ToolResultMsg("1", "contents"))
        events.put(StreamChunkMsg("done: " + message))

    app = AppModel("model", 1000, agent_fn=agent, replicant_name="deckard")
    pump(app, app.update(SubmitMsg("task")))
    assert app.conversation.last_assistant_text() == "done: task"
    assert app.statusbar.tool_counts == {"read_file": 1}
    assert not app.busy
    assert not app.spinner.active


def test_stub_agent_echoes():
    app = AppModel("model", 1000)
    pump(app, app.update(SubmitMsg("hello")))
    text = app.conversation.last_assistant_text()
    assert text.startswith("I received:")
    assert '"hello"' in text


def test_messages_queued_while_busy():
    app = AppModel("model", 1000)
    app.update(SubmitMsg("first"))
    assert app.busy
    app.update(SubmitMsg("second"))
    assert app.queued_messages == ["second"]
    assert "[queued: second]" in rendered_text(app)
    commands = app.update(StreamDoneMsg())
    assert not app.busy
    assert [c() for c in commands] == [SubmitMsg("second")]
    assert app.queued_messages == []


def test_permission_flow():
    def agent(cancel, message, events):
        answers = queue.Queue()
        events.put(PermissionRequestMsg("c1", "execute", "ls", response=answers))
        events.put(StreamChunkMsg(f"approved={answers.get(timeout=5)}"))

    app = AppModel("model", 1000, agent_fn=agent)
    pump(app, app.update(SubmitMsg("run ls")))
    assert app.awaiting_permission
    assert "wants to run: ls" in rendered_text(app)
    pump(app, app.update(KeyMsg("y")))
    assert app.conversation.last_assistant_text() == "approved=True"
    assert not app.busy


def test_escape_interrupts_agent():
    started = threading.Event()
    seen = {}

    def agent(cancel, message, events):
        seen["cancel"] = cancel
        started.set()
        cancel.wait(5)

    app = AppModel("model", 1000, agent_fn=agent)
    app.update(SubmitMsg("long job"))
    assert started.wait(5)
    app.update(KeyMsg("esc"))
    assert seen["cancel"].is_set()
    assert not app.busy
    assert "[interrupted]" in rendered_text(app)


def test_stream_error_resets_state():
    app = AppModel("model", 1000)
    app.update(SubmitMsg("go"))
    app.update(StreamErrorMsg(RuntimeError("boom")))
    assert not app.busy
    assert "error: boom" in rendered_text(app)


def test_token_usage_and_tasks():
    app = AppModel("model", 1000)
    app.update(TokenUsageMsg(10, 20))
    assert (app.statusbar.token_in, app.statusbar.token_out) == (10, 20)
    app.update(TaskStatusMsg("t1", "build", "running"))
    assert app.conversation.has_active_tasks()
    app.update(TaskStatusMsg("t1", "build", "completed"))
    assert not app.conversation.has_active_tasks()


def test_ctrl_m_toggles_mouse():
    app = AppModel("model", 1000)
    app.update(KeyMsg("ctrl+m"))
    assert app.mouse_enabled is True
    assert app.statusbar.mouse_enabled is True
    app.update(KeyMsg("ctrl+m"))
    assert app.mouse_enabled is False


@pytest.mark.parametrize("text", ["", "   "])
def test_blank_submit_ignored(text):
    app = AppModel("model", 1000)
    assert app.update(SubmitMsg(text)) == []
    assert not app.busy
    assert app.conversation.blocks == []


def test_banner_text_constant_used():
    app = AppModel("model", 1000)
    app.update(WindowSizeMsg(80, 24))
    assert "REPLICANT" in app.conversation.blocks[0].rendered
    assert "REPLICANT" in BANNER_TEXT