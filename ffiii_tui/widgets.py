"""Scrollable list and table widgets.

Both keep a cursor and a viewport; drawing lives in :mod:`ffiii_tui.screen`.
"""
from __future__ import annotations

from dataclasses import dataclass


def visible_window(index: int, total: int, visible: int) -> int:
    """First visible row keeping ``index`` centred where possible."""
    if visible <= 0:
        return 0
    return min(max(0, index - visible // 2), max(0, total - visible))


class _Cursor:
    def __init__(self):
        self.index = 0
        self.width = 0
        self.height = 0

    def _count(self) -> int:
        raise NotImplementedError

    def _page(self) -> int:
        return max(1, self.height)

    def set_size(self, width: int, height: int) -> None:
        self.width = max(0, width)
        self.height = max(0, height)

    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def select(self, index: int) -> None:
        count = self._count()
        if count == 0:
            self.index = 0
            return
        self.index = min(max(0, index), count - 1)

    def update(self, key: str):
        """Move the cursor; widgets never produce follow-up commands."""
        if key in ("up", "k"):
            self.select(self.index - 1)
        elif key in ("down", "j"):
            self.select(self.index + 1)
        elif key in ("pgup", "left"):
            self.select(self.index - self._page())
        elif key in ("pgdown", "right"):
            self.select(self.index + self._page())
        elif key in ("home", "g"):
            self.select(0)
        elif key in ("end", "G"):
            self.select(self._count() - 1)
        return None

    def top(self) -> int:
        return visible_window(self.index, self._count(), self._page())


class SelectList(_Cursor):
    """Vertical list of items with a title and a description."""

    def __init__(self, title: str = ""):
        super().__init__()
        self.title = title
        self.items: list = []

    def _count(self) -> int:
        return len(self.items)

    def set_items(self, items) -> None:
        self.items = list(items)
        self.select(self.index)

    def selected(self):
        if not self.items:
            return None
        return self.items[self.index]

    def visible(self) -> list:
        top = self.top()
        return self.items[top : top + self._page()]


@dataclass(frozen=True)
class Column:
    title: str
    width: int


class Table(_Cursor):
    """Rows of pre-formatted cells under fixed-width columns."""

    def __init__(self, columns: list[Column]):
        super().__init__()
        self.columns = columns
        self.rows: list[tuple] = []

    def _count(self) -> int:
        return len(self.rows)

    def _page(self) -> int:
        # header row
        return max(1, self.height - 1)

    def set_rows(self, rows) -> None:
        self.rows = list(rows)
        self.select(self.index)

    def selected_index(self) -> int | None:
        if not self.rows:
            return None
        return self.index

    def visible(self) -> list[tuple]:
        top = self.top()
        return self.rows[top : top + self._page()]
