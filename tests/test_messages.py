import dataclasses
import queue

import pytest

from replicant.tools.tool import RiskLevel
from replicant.tui.messages import (
    AutonomyChangedMsg,
    CommandMsg,
    KeyMsg,
    PermissionRequestMsg,
    PermissionResponseMsg,
    StreamChunkMsg,
    StreamDoneMsg,
    StreamErrorMsg,
    SubmitMsg,
    TaskStatusMsg,
    TickMsg,
    TokenUsageMsg,
    ToolCallMsg,
    ToolProgressMsg,
    ToolResultMsg,
    WindowSizeMsg,
)


def test_submit_holds_text():
    assert SubmitMsg("hello").text == "hello"


def test_messages_are_immutable():
    msg = StreamChunkMsg("chunk")
    with pytest.raises(dataclasses.FrozenInstanceError):
        msg.text = "other"
    assert msg.text == "chunk"


def test_value_equality():
    assert ToolCallMsg("1", "grep", "{}") == ToolCallMsg("1", "grep", "{}")
    assert ToolCallMsg("1", "grep", "{}") != ToolCallMsg("2", "grep", "{}")


def test_empty_messages_compare_equal():
    assert len({StreamDoneMsg(), StreamDoneMsg()}) == 1
    assert len({TickMsg(), TickMsg(), StreamDoneMsg()}) == 2


def test_tool_result_defaults_to_success():
    msg = ToolResultMsg("id", "out")
    assert msg.is_error is False
    assert msg.result == "out"


def test_key_msg_string():
    assert str(KeyMsg("ctrl+c")) == "ctrl+c"
    assert str(KeyMsg("enter", alt=True)) == "alt+enter"


def test_permission_request_response_queue():
    answers: queue.Queue[bool] = queue.Queue()
    msg = PermissionRequestMsg(
        tool_call_id="c1",
        tool_name="execute",
        args="{}",
        risk_level=RiskLevel.HIGH,
        response=answers,
    )
    msg.response.put(True)
    assert answers.get_nowait() is True
    assert msg.risk_level == RiskLevel.HIGH


def test_permission_response():
    msg = PermissionResponseMsg("c1", approved=False)
    assert (msg.tool_call_id, msg.approved) == ("c1", False)


def test_stream_error_holds_error():
    err = RuntimeError("boom")
    assert StreamErrorMsg(err).error is err


def test_field_round_trips():
    assert WindowSizeMsg(120, 40) == WindowSizeMsg(width=120, height=40)
    assert TokenUsageMsg(10, 20).output_tokens == 20
    assert ToolProgressMsg("t1", "line").output == "line"
    assert CommandMsg("auto", "high").args == "high"
    assert AutonomyChangedMsg("full").level == "full"
    task = TaskStatusMsg("t1", "implement auth middleware", "running", "running tests")
    assert dataclasses.astuple(task) == (
        "t1",
        "implement auth middleware",
        "running",
        "running tests",
    )