from datetime import date

from tests.helpers import messages
from ffiii_tui.commands import Batch, Call, Emit, Sequence, Tick, batch, sequence
from ffiii_tui.keys import account_keys, form_keys, global_keys, help_line, key_name
from ffiii_tui.layout import Layout, left_width_for
from ffiii_tui.messages import Key, PeriodSelected, Quit, View
from ffiii_tui.notify import Level, Notify, NotifyModel
from ffiii_tui.period import PeriodPicker, add_months, month_bounds
from ffiii_tui.prompt import CANCEL, Continuation, LineInput, PromptModel, PromptRequest
from ffiii_tui.widgets import Column, SelectList, Table, visible_window


class Echo(Continuation):
    def __init__(self):
        self.values = []

    def resolve(self, value):
        self.values.append(value)
        return Emit(value)


def test_batch_and_sequence_compact():
    a, b = Emit(1), Emit(2)

    assert batch() is None
    assert batch(None, a) == a
    assert batch(a, None, b) == Batch((a, b))
    assert sequence(None, None) is None
    assert sequence(a, b) == Sequence((a, b))


def test_call_and_tick_produce_messages():
    assert Call(lambda x, y: x + y, (2, 3))() == 5
    assert Tick(0, Quit())() == Quit()
    assert messages(batch(Emit("a"), Call(str, (1,)))) == ["a", "1"]


def test_prompt_enter_trims_and_defaults_to_cancel():
    model = PromptModel()
    cont = Echo()

    model.update(PromptRequest("Name: ", "  x ", cont))
    assert model.view() == "Name:   x "
    assert model.update(Key("enter")) == Emit("x")

    model.update(PromptRequest("Name: ", "", cont))
    model.update(Key("enter"))
    assert cont.values == ["x", CANCEL]


def test_prompt_escape_ignores_typed_text():
    model = PromptModel()
    cont = Echo()
    model.update(PromptRequest("Name: ", "", cont))

    model.update(Key("a"))
    cmd = model.update(Key("esc"))

    assert cmd == Emit(CANCEL)
    assert cont.values == [CANCEL]
    assert not model.focused
    assert model.update(Key("esc")) is None


def test_line_input_editing():
    line = LineInput("helo")
    line.update("left")
    line.update("l")
    assert line.value == "hello"
    line.update("home")
    line.update("delete")
    assert line.value == "ello"
    line.update("ctrl+u")
    assert line.value == ""
    line.update("backspace")
    assert line.value == ""


def test_notify_clears_only_latest():
    model = NotifyModel()

    first = model.update(Notify("one"))
    model.update(Notify("two", Level.ERR))
    model.update(first.msg)

    assert first.delay == 10.0
    assert model.view() == "Notification: two"
    assert model.level is Level.ERR


def test_layout_list_height_and_left_width():
    layout = Layout(width=100, height=30, top_height=3, summary_height=5)

    assert layout.list_height() == 25
    assert layout.list_height(True) == 20
    assert left_width_for(layout, 10) == 30
    assert left_width_for(layout, 40) == 44
    assert left_width_for(layout, 90) == 50
    assert layout.with_summary_rows(4).summary_height == 7


def test_visible_window_centres_selection():
    assert visible_window(0, 100, 10) == 0
    assert visible_window(50, 100, 10) == 45
    assert visible_window(99, 100, 10) == 90
    assert visible_window(3, 5, 10) == 0


def test_select_list_navigation():
    widget = SelectList("Items")
    widget.set_size(20, 3)
    widget.set_items(list("abcdef"))

    widget.update("down")
    widget.update("pgdown")
    assert widget.selected() == "e"
    assert widget.visible() == ["d", "e", "f"]
    widget.update("home")
    assert widget.selected() == "a"
    widget.set_items(["x"])
    assert widget.selected() == "x"


def test_table_keeps_header_row():
    table = Table([Column("A", 3)])
    table.set_size(10, 4)
    table.set_rows([(str(i),) for i in range(10)])

    table.update("end")

    assert table.selected_index() == 9
    assert len(table.visible()) == 3


def test_key_names():
    assert key_name("a") == "a"
    assert key_name("\x1b") == "esc"
    assert key_name("\n") == "enter"
    assert key_name("\x01") == "ctrl+a"
    assert key_name(258) == "down"


def test_account_keys_disable_own_view():
    keymap = account_keys(View.EXPENSES)

    assert keymap.action("e") is None
    assert keymap.action("a") == "assets"
    assert global_keys().action("ctrl+c") == "quit"
    assert form_keys().action("down") == "next"


def test_help_line_wraps_to_two_rows_when_full():
    keymap = form_keys()

    assert len(help_line(keymap, 40)) == 1
    assert len(help_line(keymap, 40, full=True)) == 2


def test_period_helpers():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2024, 1, 15), -1) == date(2023, 12, 15)
    assert month_bounds(2023, 2) == (date(2023, 2, 1), date(2023, 2, 28))


def test_period_picker_is_clamped():
    picker = PeriodPicker(date(2024, 3, 15))
    picker.open(2024, 3)

    for _ in range(7):
        picker.update(Key("down"))
    assert (picker.year, picker.month) == (2029, 3)

    cmd = picker.update(Key("enter"))
    assert cmd == Emit(PeriodSelected(2029, 3))
    assert picker.update(Key("left")) is None


def test_period_picker_view():
    picker = PeriodPicker(date(2024, 3, 15))
    picker.open(2024, 3)

    year, months = picker.view()

    assert year == "< 2024 >"
    assert "[Mar]" in months
