"""Reporting period helpers and the month picker."""
from __future__ import annotations

import calendar
from datetime import date

from .commands import Emit
from .keys import period_keys
from .messages import Key, PeriodSelected

PICKER_YEARS = 5


def add_months(d: date, months: int) -> date:
    y = d.year + (d.month - 1 + months) // 12
    m = (d.month - 1 + months) % 12 + 1
    day = min(d.day, calendar.monthrange(y, m)[1])
    return date(y, m, day)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month."""
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


class PeriodPicker:
    """Month picker spanning a few years around the current period.

    Opening it is driven by the orchestrator, which owns the current period;
    the picker only tracks the highlighted month.
    """

    def __init__(self, today: date | None = None):
        self.keymap = period_keys()
        self.focused = False
        today = today or date.today()
        self.center = (today.year, today.month)
        self.year, self.month = self.center

    def open(self, year: int, month: int) -> None:
        self.center = (year, month)
        self.year, self.month = year, month
        self.focused = True

    def close(self) -> None:
        self.focused = False

    def _move(self, months: int) -> None:
        target = add_months(date(self.year, self.month, 1), months)
        lo = add_months(date(self.center[0], self.center[1], 1), -12 * PICKER_YEARS)
        hi = add_months(date(self.center[0], self.center[1], 1), 12 * PICKER_YEARS)
        target = min(max(target, lo), hi)
        self.year, self.month = target.year, target.month

    def update(self, msg):
        if not self.focused or not isinstance(msg, Key):
            return None
        action = self.keymap.action(msg.name)
        if action == "previous_month":
            self._move(-1)
        elif action == "next_month":
            self._move(1)
        elif action == "previous_year":
            self._move(-12)
        elif action == "next_year":
            self._move(12)
        elif action == "select":
            self.close()
            return Emit(PeriodSelected(self.year, self.month))
        elif action == "close":
            self.close()
            return None
        return None

    def view(self) -> list[str]:
        """The year row and the month row with the highlighted month bracketed."""
        names = [calendar.month_abbr[m] for m in range(1, 13)]
        cells = []
        for idx, name in enumerate(names, start=1):
            cells.append(f"[{name}]" if idx == self.month else f" {name} ")
        return [f"< {self.year} >", "".join(cells)]
