import curses
from datetime import date

import pytest

from tests.helpers import FakeAPI, FakeStdScr, asset, messages
from ffiii_tui import screen
from ffiii_tui.messages import AssetsUpdated, SetFocusedView, ToggleFullView, View, WindowSize
from ffiii_tui.notify import Level, Notify
from ffiii_tui.prompt import PromptRequest
from ffiii_tui.transactions import ApplySearch
from ffiii_tui.ui import App
from ffiii_tui.widgets import Column


@pytest.fixture(autouse=True)
def no_cursor(monkeypatch):
    monkeypatch.setattr(curses, "curs_set", lambda state: 0)


def sized_app(width=120, height=30):
    api = FakeAPI()
    api.add_account(asset("1", "Checking"), 250)
    app = App(api, today=date(2024, 3, 15))
    for msg in messages(app.update(WindowSize(width, height))):
        app.update(msg)
    app.update(AssetsUpdated())
    return app


def test_draw_shows_header_panels_and_rows():
    app = sized_app()
    win = FakeStdScr(30, 120)

    screen.draw(win, app)

    text = win.text()
    assert win.lines[0].startswith(" ffiii-tui | Period: 2024-03-01 - 2024-03-31")
    assert " Assets " in text
    assert " Transactions " in text
    assert "Checking" in text


def test_status_line_priority():
    app = sized_app()
    app.update(Notify("saved", Level.WARN))
    assert screen.status_line(app) == ("Notification: saved", curses.A_BOLD)

    app.update(PromptRequest("Search query: ", "", ApplySearch()))
    assert screen.status_line(app)[0] == "Search query: "


def test_full_view_hides_left_panel():
    app = sized_app()
    app.update(ToggleFullView())
    win = FakeStdScr(30, 120)

    screen.draw(win, app)

    assert " Assets " not in win.text()
    assert win.lines[app.layout.top_height].startswith("┌─ Transactions ")


def test_form_is_drawn_when_focused():
    app = sized_app()
    app.update(SetFocusedView(View.NEW_TRANSACTION))
    win = FakeStdScr(30, 120)

    screen.draw(win, app)

    text = win.text()
    assert " New transaction " in text
    assert "Current Type: unknown" in text


def test_left_widget_follows_focused_list():
    app = sized_app()
    assert screen.left_widget(app) is app.assets

    app.update(SetFocusedView(View.CATEGORIES))
    assert screen.left_widget(app) is app.categories


def test_format_row_pads_and_truncates():
    columns = [Column("A", 3), Column("B", 2)]

    assert screen.format_row(["abcdef", "x"], columns) == "abc x "


def test_put_ignores_curses_errors():
    class Failing(FakeStdScr):
        def addnstr(self, *args):
            raise curses.error("off screen")

    screen.put(Failing(), 50, 0, "text", 10)
