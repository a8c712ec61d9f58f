"""Key bindings and curses key names."""
from __future__ import annotations

import curses
from dataclasses import dataclass, replace

from .messages import View


@dataclass(frozen=True)
class Binding:
    keys: tuple
    help_key: str
    description: str
    enabled: bool = True

    def matches(self, key: str) -> bool:
        return self.enabled and key in self.keys


def bind(keys, help_key: str, description: str) -> Binding:
    if isinstance(keys, str):
        keys = (keys,)
    return Binding(tuple(keys), help_key, description)


class KeyMap:
    """Named bindings in display order."""

    def __init__(self, **bindings: Binding):
        self.bindings = dict(bindings)

    def action(self, key: str) -> str | None:
        """Name of the first enabled binding for ``key``."""
        for name, binding in self.bindings.items():
            if binding.matches(key):
                return name
        return None

    def disable(self, *names: str) -> "KeyMap":
        bindings = dict(self.bindings)
        for name in names:
            if name in bindings:
                bindings[name] = replace(bindings[name], enabled=False)
        return KeyMap(**bindings)

    def help(self) -> list[Binding]:
        return [b for b in self.bindings.values() if b.enabled]


def global_keys() -> KeyMap:
    return KeyMap(
        quit=bind("ctrl+c", "ctrl+c", "quit"),
        help=bind("?", "?", "help"),
        previous_period=bind("[", "[", "previous period"),
        next_period=bind("]", "]", "next period"),
        period=bind("p", "p", "select period"),
    )


# view switching keys shared by the account lists and the transactions view
VIEW_KEYS = {
    View.TRANSACTIONS: ("transactions", "t", "transactions"),
    View.ASSETS: ("assets", "a", "assets"),
    View.CATEGORIES: ("categories", "c", "categories"),
    View.EXPENSES: ("expenses", "e", "expenses"),
    View.REVENUES: ("revenues", "i", "revenues"),
    View.LIABILITIES: ("liabilities", "o", "liabilities"),
}


def account_keys(view: View) -> KeyMap:
    """Keys of an account list; the key of the list's own view is disabled."""
    bindings = dict(
        quit=bind(("q", "esc"), "q", "back"),
        refresh=bind("r", "r", "refresh"),
    )
    for name, key, desc in VIEW_KEYS.values():
        bindings[name] = bind(key, key, desc)
    bindings.update(
        reset_filter=bind("ctrl+a", "ctrl+a", "reset filter"),
        sort=bind("s", "s", "sort"),
        new=bind("n", "n", "new"),
        filter=bind("f", "f", "filter"),
        select=bind("enter", "enter", "view transactions"),
    )
    keymap = KeyMap(**bindings)
    own = VIEW_KEYS.get(view)
    if own is not None:
        keymap = keymap.disable(own[0])
    return keymap


def transaction_keys() -> KeyMap:
    return KeyMap(
        refresh=bind("r", "r", "refresh"),
        filter=bind("f", "f", "filter"),
        search=bind("s", "s", "search"),
        new=bind("n", "n", "new"),
        clone=bind("N", "N", "clone"),
        edit=bind("enter", "enter", "edit"),
        delete=bind("D", "D", "delete"),
        reset_filter=bind("ctrl+a", "ctrl+a", "reset filter"),
        full_view=bind("t", "t", "toggle full view"),
        assets=bind("a", "a", "assets"),
        categories=bind("c", "c", "categories"),
        expenses=bind("e", "e", "expenses"),
        revenues=bind("i", "i", "revenues"),
        liabilities=bind("o", "o", "liabilities"),
    )


def form_keys() -> KeyMap:
    return KeyMap(
        submit=bind("enter", "enter", "submit"),
        next=bind(("tab", "down"), "tab", "next field"),
        previous=bind(("shift+tab", "up"), "shift+tab", "previous field"),
        choice_next=bind("right", "→", "next choice"),
        choice_previous=bind("left", "←", "previous choice"),
        new_entity=bind("n", "n", "new account/category"),
        add_split=bind("ctrl+a", "ctrl+a", "add split"),
        delete_split=bind("ctrl+d", "ctrl+d", "delete split"),
        reset=bind("ctrl+n", "ctrl+n", "reset"),
        refresh=bind("ctrl+r", "ctrl+r", "refresh choices"),
        full_view=bind("ctrl+f", "ctrl+f", "toggle full view"),
        cancel=bind("esc", "esc", "cancel"),
    )


def period_keys() -> KeyMap:
    return KeyMap(
        previous_month=bind(("left", "h"), "←", "previous month"),
        next_month=bind(("right", "l"), "→", "next month"),
        previous_year=bind(("up", "k"), "↑", "previous year"),
        next_year=bind(("down", "j"), "↓", "next year"),
        select=bind("enter", "enter", "select"),
        close=bind(("esc", "q"), "esc", "close"),
    )


CONTROL_KEYS = {
    1: "ctrl+a",
    3: "ctrl+c",
    4: "ctrl+d",
    5: "ctrl+e",
    6: "ctrl+f",
    8: "backspace",
    9: "tab",
    10: "enter",
    13: "enter",
    14: "ctrl+n",
    18: "ctrl+r",
    21: "ctrl+u",
    27: "esc",
    127: "backspace",
}

CURSES_KEYS = {
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_LEFT: "left",
    curses.KEY_RIGHT: "right",
    curses.KEY_PPAGE: "pgup",
    curses.KEY_NPAGE: "pgdown",
    curses.KEY_HOME: "home",
    curses.KEY_END: "end",
    curses.KEY_BACKSPACE: "backspace",
    curses.KEY_DC: "delete",
    curses.KEY_BTAB: "shift+tab",
    curses.KEY_ENTER: "enter",
}


def key_name(ch) -> str | None:
    """Translate a ``get_wch`` result into a key name."""
    if isinstance(ch, str):
        if len(ch) == 1 and ord(ch) in CONTROL_KEYS:
            return CONTROL_KEYS[ord(ch)]
        return ch
    if ch in CURSES_KEYS:
        return CURSES_KEYS[ch]
    if ch in CONTROL_KEYS:
        return CONTROL_KEYS[ch]
    return None


def help_line(keymap: KeyMap, width: int, full: bool = False) -> list[str]:
    """Legend rows; one row normally, two when full help is on."""
    entries = [f"{b.help_key} {b.description}" for b in keymap.help()]
    rows: list[str] = []
    current = ""
    limit = 2 if full else 1
    for entry in entries:
        candidate = f"{current} • {entry}" if current else entry
        if len(candidate) > width and current:
            rows.append(current)
            if len(rows) == limit:
                return rows
            current = entry
        else:
            current = candidate
    if current and len(rows) < limit:
        rows.append(current)
    return rows
