"""Generic entity list shared by the asset, expense, revenue, liability and category views.

Each view is an :class:`EntityListModel` built from an immutable
:class:`ListConfig`. The config says where the data comes from, how rows are
built and sorted, whether a synthetic ``Total`` row leads the list and how new
entities are requested.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .commands import Call, Emit, batch, sequence
from .errors import FfiiiError
from .keys import account_keys
from .layout import FRAME_WIDTH, Layout
from .logger import get_logger
from .models import Account
from .messages import (
    CreationRejected,
    DataLoadCompleted,
    EntityCreated,
    Filter,
    Key,
    SetFocusedView,
    UpdatePositions,
    View,
)
from .notify import Level, Notify, notify_log
from .prompt import ask
from .widgets import SelectList

log = get_logger(__name__)

TOTAL_NAME = "Total"


@dataclass(frozen=True)
class ListItem:
    """A row of an entity list."""

    entity: Any
    label: str
    value: float
    currency: str
    is_total: bool = False

    @property
    def title(self) -> str:
        return self.entity.name

    @property
    def description(self) -> str:
        return f"{self.label}: {self.value:.2f} {self.currency}"


@dataclass(frozen=True)
class ListConfig:
    """Immutable description of one entity list view."""

    resource: str
    title: str
    view: View
    account_type: str
    refresh_msg: type
    updated_msg: type
    fetch: Callable[[Any, str], None]
    build_items: Callable[[Any, int], list]
    filter_for: Callable[[Any], Filter]
    prompt: str
    continuation: Callable[[Any], Any]
    create_msg: Optional[type] = None
    create: Optional[Callable[[Any, Any], str]] = None
    created_label: str = ""
    has_total: bool = False
    total_item: Optional[Callable[[Any, list], ListItem]] = None
    sort_states: tuple = ()
    has_summary: bool = False
    insights_msg: Optional[type] = None
    fetch_insights: Optional[Callable[[Any], None]] = None
    refresh_also: tuple = field(default_factory=tuple)


def sum_total(api, items: list, label: str) -> ListItem:
    """Synthetic row carrying the sum of every other row."""
    total = sum(item.value for item in items)
    currency = api.primary_currency().code
    return ListItem(Account(id="", name=TOTAL_NAME, currency_code=currency), label, total, currency, is_total=True)


def sort_by_value(items: list) -> list:
    """Drop zero rows and order the rest by value, largest first."""
    return sorted((item for item in items if item.value != 0), key=lambda item: item.value, reverse=True)


def fetch_accounts(api, account_type: str) -> None:
    api.update_accounts(account_type)


def account_filter(entity) -> Filter:
    return Filter(account=entity)


class EntityListModel:
    def __init__(self, api, config: ListConfig, layout: Layout | None = None):
        if api is None:
            raise ValueError(f"{config.resource} list requires an API")
        if config.fetch is None or config.build_items is None:
            raise ValueError(f"{config.resource} list requires a data source")
        if config.has_total and config.total_item is None:
            raise ValueError(f"{config.resource} list requires a total row builder")
        self.api = api
        self.config = config
        self.keymap = account_keys(config.view)
        self.list = SelectList(config.title)
        self.items: list[ListItem] = []
        self.sort_index = 0
        self.prompt_value = ""
        self.focused = False
        self.layout = layout or Layout()
        self._resize(self.layout)

    # focus

    def focus(self) -> None:
        self.focused = True

    def blur(self) -> None:
        self.focused = False

    def init(self):
        return Emit(self.config.refresh_msg())

    # operations

    @property
    def sort_state(self) -> int:
        if not self.config.sort_states:
            return 0
        return self.config.sort_states[self.sort_index]

    def refresh(self):
        return Call(self._fetch, (self.config.fetch, self.config.account_type))

    def refresh_insights(self):
        return Call(self._fetch, (self.config.fetch_insights,))

    def _fetch(self, fetch, *args):
        try:
            fetch(self.api, *args)
        except FfiiiError as exc:
            log.warning("refresh of %s failed: %s", self.config.resource, exc)
            return Notify(str(exc), Level.WARN)
        return self.config.updated_msg()

    def apply_update(self):
        self._rebuild()
        return Emit(DataLoadCompleted(self.config.resource))

    def _rebuild(self) -> None:
        items = list(self.config.build_items(self.api, self.sort_state))
        if self.config.has_total:
            items.insert(0, self.config.total_item(self.api, items))
        self.items = items
        self.list.set_items(items)

    def toggle_sort(self):
        if not self.config.sort_states:
            return None
        self.sort_index = (self.sort_index + 1) % len(self.config.sort_states)
        self._rebuild()
        return None

    def filter(self, item: ListItem | None):
        if item is None or item.is_total:
            return None
        return Emit(self.config.filter_for(item.entity))

    def select(self, item: ListItem | None):
        cmd = self.filter(item)
        if cmd is None:
            return None
        return sequence(cmd, Emit(SetFocusedView(View.TRANSACTIONS)))

    def prompt_create(self):
        back = Emit(SetFocusedView(self.config.view))
        value, self.prompt_value = self.prompt_value, ""
        return ask(self.config.prompt, value, self.config.continuation(back))

    def create(self, msg):
        return Call(self._create, (msg,))

    def _create(self, msg):
        try:
            name = self.config.create(self.api, msg)
        except FfiiiError as exc:
            log.warning("creating %s failed: %s", self.config.resource, exc)
            return Notify(str(exc), Level.WARN)
        return EntityCreated(self.config.resource, name)

    def _resize(self, layout: Layout) -> None:
        self.layout = layout
        self.list.set_size(layout.left_width - FRAME_WIDTH, layout.list_height(self.config.has_summary))

    # message handling

    def update(self, msg):
        config = self.config
        if isinstance(msg, config.refresh_msg):
            return self.refresh()
        if config.insights_msg is not None and isinstance(msg, config.insights_msg):
            return self.refresh_insights()
        if isinstance(msg, config.updated_msg):
            return self.apply_update()
        if config.create_msg is not None and isinstance(msg, config.create_msg):
            return self.create(msg)
        if isinstance(msg, EntityCreated) and msg.resource == config.resource:
            return batch(
                Emit(config.refresh_msg()),
                notify_log(f"{config.created_label} '{msg.name}' created"),
            )
        if isinstance(msg, CreationRejected) and msg.resource == config.resource:
            self.prompt_value = msg.value
            return None
        if isinstance(msg, UpdatePositions):
            if msg.layout is not None:
                self._resize(msg.layout)
            return None

        if not self.focused or not isinstance(msg, Key):
            return None

        action = self.keymap.action(msg.name)
        if action == "quit":
            return Emit(SetFocusedView(View.TRANSACTIONS))
        if action == "refresh":
            return batch(Emit(config.refresh_msg()), *(Emit(m()) for m in config.refresh_also))
        if action in ("transactions", "assets", "categories", "expenses", "revenues", "liabilities"):
            return Emit(SetFocusedView(View(action)))
        if action == "reset_filter":
            return Emit(Filter(reset=True))
        if action == "sort":
            return self.toggle_sort()
        if action == "new":
            return self.prompt_create()
        if action == "filter":
            return self.filter(self.list.selected())
        if action == "select":
            return self.select(self.list.selected())
        return self.list.update(msg.name)
