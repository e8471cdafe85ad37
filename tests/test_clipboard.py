import base64
import subprocess
import sys
from unittest import mock

from replicant.tui.clipboard import osc52_sequence, write_clipboard


def _payload(seq: str) -> str:
    prefix = "\x1b]52;c;"
    assert seq.startswith(prefix)
    assert seq.endswith("\x07")
    return base64.b64decode(seq[len(prefix):-1]).decode("utf-8")


def test_osc52_round_trip():
    for text in ["hello", "", "multi\nline ▸ unicode"]:
        assert _payload(osc52_sequence(text)) == text


def test_fallback_writes_osc52(monkeypatch, capsys):
    monkeypatch.setattr(sys, "platform", "linux")
    with mock.patch("shutil.which", return_value=None):
        used_command = write_clipboard("copied text")
    assert used_command is False
    assert capsys.readouterr().out == osc52_sequence("copied text")


def test_unknown_platform_falls_back(monkeypatch, capsys):
    monkeypatch.setattr(sys, "platform", "plan9")
    assert write_clipboard("abc") is False
    assert _payload(capsys.readouterr().out) == "abc"


def test_darwin_uses_pbcopy(monkeypatch, capsys):
    monkeypatch.setattr(sys, "platform", "darwin")
    with mock.patch("subprocess.run") as run:
        assert write_clipboard("hi") is True
    args, kwargs = run.call_args
    assert args[0] == ["pbcopy"]
    assert kwargs["input"] == b"hi"
    assert capsys.readouterr().out == ""


def test_linux_prefers_xclip(monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    with mock.patch("shutil.which", side_effect=lambda n: "/usr/bin/" + n), mock.patch(
        "subprocess.run"
    ) as run:
        assert write_clipboard("x") is True
    assert run.call_args[0][0] == ["/usr/bin/xclip", "-selection", "clipboard"]


def test_failing_command_falls_back(monkeypatch, capsys):
    monkeypatch.setattr(sys, "platform", "darwin")
    failure = subprocess.CalledProcessError(1, ["pbcopy"])
    with mock.patch("subprocess.run", side_effect=failure):
        assert write_clipboard("data") is False
    assert _payload(capsys.readouterr().out) == "data"