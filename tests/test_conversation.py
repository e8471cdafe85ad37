import re

from replicant.tui.conversation import (
    ConversationModel,
    MessageKind,
    ReplayEntry,
    format_tool_args,
    truncate_arg_value,
)
from replicant.tui.messages import KeyMsg

_ANSI = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]")


def plain(text):
    return _ANSI.sub("", text)


def assistant_blocks(m):
    return [b for b in m.blocks if b.kind is MessageKind.ASSISTANT]


def test_shared_stream_buffer():
    m = ConversationModel(80, 24, "deckard")
    m.start_assistant_message()
    m.append_chunk("hello ")
    m2 = m
    m2.append_chunk("world")
    m.append_chunk("!")
    assert m.last_assistant_text() == "hello world!"


def test_last_assistant_text():
    m = ConversationModel(80, 24, "test")
    assert m.last_assistant_text() == ""
    m.add_user_message("hello")
    m.start_assistant_message()
    m.append_chunk("response text")
    m.finalize_assistant()
    assert m.last_assistant_text() == "response text"


def test_replicant_name_in_label():
    m = ConversationModel(80, 24, "zhora")
    m.start_assistant_message()
    m.append_chunk("debugging...")
    m.finalize_assistant()
    assert any("zhora" in plain(b.rendered) for b in assistant_blocks(m))


def test_empty_name_defaults_to_assistant():
    m = ConversationModel(80, 24, "")
    m.start_assistant_message()
    m.append_chunk("hi")
    m.finalize_assistant()
    assert any("assistant" in plain(b.rendered) for b in assistant_blocks(m))


def test_append_chunk_without_open_message_starts_one():
    m = ConversationModel(80, 24, "rachael")
    m.append_chunk("orphan")
    assert len(assistant_blocks(m)) == 1
    assert m.last_assistant_text() == "orphan"


def test_tool_result_truncated():
    m = ConversationModel(80, 100, "x")
    m.add_tool_result("id1", "\n".join(f"line{i}" for i in range(20)), False)
    text = plain(m.blocks[-1].rendered)
    assert "[5 more lines]" in text
    assert "line14" in text
    assert "line15" not in text


def test_tool_result_error():
    m = ConversationModel(80, 24, "x")
    m.add_tool_result("id1", "boom", True)
    assert "error: boom" in plain(m.blocks[-1].rendered)
    assert m.blocks[-1].block_id == "id1"


def test_tool_progress_attaches_to_matching_call():
    m = ConversationModel(80, 50, "x")
    m.add_tool_call("a", "execute", '{"command":"ls"}')
    m.add_tool_call("b", "grep", '{"pattern":"x"}')
    m.append_tool_progress("a", "progress-a")
    assert "progress-a" in plain(m.blocks[0].rendered)
    assert "progress-a" not in plain(m.blocks[1].rendered)


def test_tool_progress_falls_back_to_latest_call():
    m = ConversationModel(80, 50, "x")
    m.add_tool_call("a", "execute", "")
    m.add_tool_call("b", "grep", "")
    m.append_tool_progress("zzz", "fallback")
    assert "fallback" in plain(m.blocks[1].rendered)


def test_replay_history():
    m = ConversationModel(80, 100, "deckard")
    m.replay_history(
        [
            ReplayEntry(type="user", content="question"),
            ReplayEntry(type="assistant", content="part one "),
            ReplayEntry(type="assistant", content="part two"),
            ReplayEntry(type="tool_call", tool_id="t1", tool_name="read_file", tool_args='{"path":"a"}'),
            ReplayEntry(type="tool_result", tool_id="t1", content="data"),
        ]
    )
    kinds = [b.kind for b in m.blocks]
    assert kinds == [
        MessageKind.USER,
        MessageKind.ASSISTANT,
        MessageKind.TOOL_CALL,
        MessageKind.TOOL_RESULT,
    ]
    assert m.last_assistant_text() == "part one part two"


def test_task_group_lifecycle():
    m = ConversationModel(80, 40, "x")
    m.update_task("t1", "build", "running")
    assert m.has_active_tasks()
    assert "[/] build" in plain(m.view())
    m.advance_task_frame()
    assert "[-] build" in plain(m.view())
    m.update_task("t1", "build", "completed")
    assert not m.has_active_tasks()
    assert "[ok] build" in plain(m.view())
    m.update_task("t2", "test", "running")
    groups = [b for b in m.blocks if b.kind is MessageKind.TASK_GROUP]
    assert len(groups) == 2


def test_view_has_fixed_height_and_scrolls():
    m = ConversationModel(80, 5, "x")
    for i in range(20):
        m.add_banner(f"banner{i}")
    assert len(m.view().split("\n")) == 5
    assert "banner19" in plain(m.view())
    m.update(KeyMsg("pgup"))
    assert "banner19" not in plain(m.view())
    m.update(KeyMsg("pgdown"))
    assert "banner19" in plain(m.view())


def test_format_tool_args():
    out = format_tool_args("x", '{"path":"a.txt","tags":["a","b"],"n":3}')
    assert out == "path: a.txt\ntags: [a, b]\nn: 3"


def test_format_tool_args_edge_cases():
    assert format_tool_args("x", "") == ""
    assert format_tool_args("x", "{}") == ""
    assert format_tool_args("x", "not json") == "not json"


def test_truncate_arg_value():
    assert truncate_arg_value("a\nb\nc") == "a\nb\nc"
    assert truncate_arg_value("a\nb\nc\nd\ne") == "a\nb\nc\n[2 more lines]"