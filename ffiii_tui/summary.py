"""Basic summary of the period shown above the asset list."""
from __future__ import annotations

from .commands import Call
from .errors import FfiiiError
from .layout import FRAME_WIDTH, Layout
from .logger import get_logger
from .messages import RefreshSummary, SummaryUpdated, UpdatePositions
from .notify import Level, Notify
from .widgets import SelectList

log = get_logger(__name__)


def summary_items(api) -> list:
    """Summary entries, largest monetary value first."""
    return sorted(api.summary_items().values(), key=lambda s: s.monetary_value, reverse=True)


class SummaryModel:
    def __init__(self, api, layout: Layout | None = None):
        if api is None:
            raise ValueError("summary requires an API")
        self.api = api
        self.list = SelectList("Summary")
        self.focused = False
        self._resize(layout or Layout())

    def focus(self) -> None:
        self.focused = True

    def blur(self) -> None:
        self.focused = False

    def _resize(self, layout: Layout) -> None:
        self.list.set_size(layout.left_width - FRAME_WIDTH, max(0, layout.summary_height - 2))

    def item_count(self) -> int:
        return len(self.list.items)

    def max_width(self) -> int:
        return max((len(s.title) + len(s.value_parsed) for s in self.list.items), default=0)

    def _fetch(self):
        try:
            self.api.update_summary()
        except FfiiiError as exc:
            log.warning("refresh of summary failed: %s", exc)
            return Notify(str(exc), Level.WARN)
        return SummaryUpdated()

    def update(self, msg):
        if isinstance(msg, RefreshSummary):
            return Call(self._fetch)
        if isinstance(msg, SummaryUpdated):
            self.list.set_items(summary_items(self.api))
            return None
        if isinstance(msg, UpdatePositions) and msg.layout is not None:
            self._resize(msg.layout)
        return None
