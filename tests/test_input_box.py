from replicant.tui.input_box import MAX_HISTORY, InputModel
from replicant.tui.messages import KeyMsg, SubmitMsg
from replicant.tui.theme import visible_width


def _submit(m: InputModel, text: str):
    m.set_value(text)
    return m.update(KeyMsg("enter"))


def test_history_cycles_through_submissions():
    m = InputModel(80)
    for text in ["first", "second", "third"]:
        out = _submit(m, text)
        assert out == SubmitMsg(text)
        m.enable()

    assert len(m.history) == 3

    m.update(KeyMsg("up"))
    assert m.value == "third"
    m.update(KeyMsg("up"))
    assert m.value == "second"
    m.update(KeyMsg("up"))
    assert m.value == "first"
    m.update(KeyMsg("up"))
    assert m.value == "first"

    m.update(KeyMsg("down"))
    assert m.value == "second"
    m.update(KeyMsg("down"))
    m.update(KeyMsg("down"))
    assert m.value == ""


def test_history_preserves_draft():
    m = InputModel(80)
    _submit(m, "old message")
    m.enable()

    m.set_value("partial dra")
    m.update(KeyMsg("up"))
    assert m.value == "old message"
    m.update(KeyMsg("down"))
    assert m.value == "partial dra"


def test_empty_enter_does_not_submit():
    m = InputModel(80)
    assert m.update(KeyMsg("enter")) is None
    assert m.history == []


def test_alt_enter_inserts_newline():
    m = InputModel(80)
    m.set_value("line one")
    assert m.update(KeyMsg("enter", alt=True)) is None
    assert m.value == "line one\n"


def test_up_does_not_browse_when_multiline():
    m = InputModel(80)
    _submit(m, "earlier")
    m.enable()
    m.set_value("a\nb")
    m.update(KeyMsg("up"))
    assert m.value == "a\nb"


def test_typing_and_backspace():
    m = InputModel(80)
    for key in ["h", "i", "space", "x"]:
        m.update(KeyMsg(key))
    assert m.value == "hi x"
    m.update(KeyMsg("backspace"))
    assert m.value == "hi "


def test_disabled_ignores_input():
    m = InputModel(80)
    m.set_value("pending")
    m.disable()
    assert m.update(KeyMsg("enter")) is None
    m.update(KeyMsg("a"))
    assert m.value == "pending"
    assert m.placeholder == "thinking..."


def test_enable_resets_state():
    m = InputModel(80)
    m.set_placeholder("type to queue follow-up...")
    m.set_value("something")
    m.enable()
    assert m.value == ""
    assert m.placeholder == "speak..."


def test_history_is_capped():
    m = InputModel(80)
    for i in range(MAX_HISTORY + 5):
        _submit(m, f"msg {i}")
    assert len(m.history) == MAX_HISTORY
    assert m.history[-1] == f"msg {MAX_HISTORY + 4}"
    assert m.history[0] == "msg 5"


def test_height_is_textarea_plus_border():
    assert InputModel(80).height() == 5


def test_view_shows_placeholder_and_fills_width():
    m = InputModel(40)
    view = m.view()
    assert "speak..." in view
    lines = view.split("\n")
    assert len(lines) == m.height()
    assert visible_width(view) == 40


def test_view_shows_value():
    m = InputModel(40)
    m.set_value("hello there")
    assert "hello there" in m.view()
    assert "speak..." not in m.view()