"""Curses drawing of the application state."""
from __future__ import annotations

import curses
from contextlib import contextmanager

from .keys import help_line
from .layout import FRAME_HEIGHT
from .messages import View
from .notify import Level
from .widgets import SelectList, Table


@contextmanager
def temp_cursor(state: int):
    """Temporarily set cursor visibility and restore on exit."""

    prev = None
    try:
        prev = curses.curs_set(state)
    except curses.error:  # pragma: no cover - some terminals
        prev = None
    try:
        yield
    finally:
        if prev is not None:
            try:
                curses.curs_set(prev)
            except curses.error:  # pragma: no cover - cleanup best effort
                pass


@contextmanager
def keypad_mode(win):
    """Enable keypad mode and ensure it is disabled afterwards."""

    try:
        win.keypad(True)
    except curses.error:  # pragma: no cover - fake windows
        pass
    try:
        yield
    finally:
        try:
            win.keypad(False)
        except curses.error:  # pragma: no cover - fake windows
            pass


def put(win, y: int, x: int, text: str, width: int, attr: int = curses.A_NORMAL) -> None:
    if width <= 0:
        return
    try:
        win.addnstr(y, x, text, width, attr)
    except curses.error:
        pass


def frame(win, y: int, x: int, height: int, width: int, title: str = "", focused: bool = False) -> None:
    """Draw a box with the title on its top edge."""
    if height < 2 or width < 2:
        return
    horizontal = "─" * (width - 2)
    put(win, y, x, f"┌{horizontal}┐", width)
    for row in range(1, height - 1):
        put(win, y + row, x, "│", 1)
        put(win, y + row, x + width - 1, "│", 1)
    put(win, y + height - 1, x, f"└{horizontal}┘", width)
    if title:
        attr = curses.A_BOLD if focused else curses.A_NORMAL
        put(win, y, x + 2, f" {title} ", width - 4, attr)


def draw_list(win, y: int, x: int, height: int, width: int, widget: SelectList, focused: bool) -> None:
    """Bordered list; each item shows its title and description."""
    frame(win, y, x, height, width, widget.title, focused)
    inner = width - 2
    rows = height - FRAME_HEIGHT
    top = widget.top()
    for i, item in enumerate(widget.visible()[:rows]):
        attr = curses.A_REVERSE if focused and top + i == widget.index else curses.A_NORMAL
        description = getattr(item, "description", None)
        if description is None:
            # summary rows
            text = f"{item.title}: {item.value_parsed}"
        else:
            text = f"{item.title} | {description}"
        put(win, y + 1 + i, x + 1, text.ljust(inner), inner, attr)
    count = len(widget.items)
    pos = f"{widget.index + 1}/{count}" if count else "0/0"
    put(win, y + height - 1, x + max(1, width - len(pos) - 2), pos, len(pos))


def format_row(cells, columns) -> str:
    return " ".join(str(cell)[: col.width].ljust(col.width) for cell, col in zip(cells, columns))


def draw_table(win, y: int, x: int, height: int, width: int, table: Table, title: str, focused: bool) -> None:
    frame(win, y, x, height, width, title, focused)
    inner = width - 2
    put(win, y + 1, x + 1, format_row([c.title for c in table.columns], table.columns), inner, curses.A_BOLD)
    top = table.top()
    for i, row in enumerate(table.visible()[: height - FRAME_HEIGHT - 1]):
        attr = curses.A_REVERSE if focused and top + i == table.index else curses.A_NORMAL
        put(win, y + 2 + i, x + 1, format_row(row, table.columns).ljust(inner), inner, attr)
    count = len(table.rows)
    pos = f"{table.index + 1}/{count}" if count else "0/0"
    put(win, y + height - 1, x + max(1, width - len(pos) - 2), pos, len(pos))


def draw_form(win, y: int, x: int, height: int, width: int, form, focused: bool) -> None:
    title = "New transaction" if form.new else f"Edit transaction {form.state.transaction_id}"
    frame(win, y, x, height, width, title, focused)
    inner = width - 2
    rows = form.view_rows()
    visible = height - FRAME_HEIGHT
    current = next((i for i, row in enumerate(rows) if row[0]), 0)
    top = min(max(0, current - visible // 2), max(0, len(rows) - visible))
    for i, (selected, label, value) in enumerate(rows[top : top + visible]):
        if not value and not selected:
            line = label
        else:
            line = f"  {label}: {value}"
        attr = curses.A_REVERSE if selected and focused else curses.A_NORMAL
        put(win, y + 1 + i, x + 1, line, inner, attr)


def status_line(app) -> tuple[str, int]:
    """Prompt, period picker or notification, in that order."""
    if app.prompt.focused:
        return app.prompt.view(), curses.A_BOLD
    if app.period.focused:
        return "  ".join(app.period.view()), curses.A_BOLD
    attr = curses.A_NORMAL
    if app.notify.level is Level.ERR:
        attr = curses.A_BOLD | curses.A_REVERSE
    elif app.notify.level is Level.WARN:
        attr = curses.A_BOLD
    return app.notify.view(), attr


def left_widget(app):
    """The entity list shown on the left; assets unless another list is focused."""
    if app.focused_view in (View.TRANSACTIONS, View.NEW_TRANSACTION):
        return app.assets
    return app.focused_component()


def draw(stdscr, app) -> None:
    layout = app.layout
    stdscr.erase()

    put(stdscr, 0, 0, app.transactions.header(), layout.width, curses.A_BOLD)
    text, attr = status_line(app)
    put(stdscr, 1, 0, text, layout.width, attr)
    keymap = app.focused_component().keymap
    for i, line in enumerate(help_line(keymap, layout.width, app.show_full_help)):
        put(stdscr, 2 + i, 0, line, layout.width, curses.A_DIM)

    body_y = layout.top_height
    body_h = layout.height - body_y
    if layout.left_width > 0:
        model = left_widget(app)
        y = body_y
        if model.config.has_summary:
            draw_list(stdscr, y, 0, layout.summary_height, layout.left_width, app.summary.list, False)
            y += layout.summary_height
        draw_list(stdscr, y, 0, body_h - (y - body_y), layout.left_width, model.list, model.focused)

    x = layout.left_width
    if app.focused_view is View.NEW_TRANSACTION:
        draw_form(stdscr, body_y, x, body_h, layout.right_width(), app.form, True)
    else:
        draw_table(
            stdscr,
            body_y,
            x,
            body_h,
            layout.right_width(),
            app.transactions.table,
            "Transactions",
            app.transactions.focused,
        )

    try:
        curses.curs_set(1 if app.prompt.focused else 0)
        if app.prompt.focused:
            stdscr.move(1, min(layout.width - 1, len(app.prompt.label) + app.prompt.input.cursor))
    except curses.error:  # pragma: no cover - some terminals
        pass
    stdscr.refresh()
