"""Top-level model routing messages between the views.

The :class:`App` owns the layout, the focused view and the lazy-load status
map. Keys reach only the focused view (or the open prompt / period picker);
a fixed set of message types is broadcast to every view because several of
them cache data derived from it.
"""
from __future__ import annotations

from datetime import date

from .assets import NewAsset, new_assets_model
from .categories import NewCategory, new_categories_model
from .commands import Emit, Tick, batch
from .expenses import NewExpense, new_expenses_model
from .keys import global_keys
from .layout import Layout, left_width_for
from .liabilities import NewLiabilityRequest, new_liabilities_model
from .logger import get_logger
from .messages import (
    LOADED_RESOURCES,
    AssetsUpdated,
    CategoriesUpdated,
    CreationRejected,
    DataLoadCompleted,
    DeleteSplit,
    DeleteTransaction,
    EditTransaction,
    EntityCreated,
    ExpensesUpdated,
    Filter,
    Key,
    LazyLoadPoll,
    LiabilitiesUpdated,
    NewTransaction,
    OpenPeriodPicker,
    PeriodSelected,
    Quit,
    RefreshAll,
    RefreshAssets,
    RefreshCategories,
    RefreshCategoryInsights,
    RefreshExpenseInsights,
    RefreshExpenses,
    RefreshLiabilities,
    RefreshRevenueInsights,
    RefreshRevenues,
    RefreshSummary,
    RefreshTransactions,
    ResetTransactionForm,
    RevenuesUpdated,
    Search,
    SetFocusedView,
    SummaryUpdated,
    ToggleFullView,
    TransactionDeleted,
    TransactionSaved,
    TransactionsLoaded,
    UpdatePositions,
    View,
    WindowSize,
)
from .notify import ClearNotification, Notify, NotifyModel, notify_warn
from .period import PeriodPicker
from .prompt import PromptModel, PromptRequest
from .revenues import NewRevenue, new_revenues_model
from .summary import SummaryModel
from .transaction_form import TransactionFormModel
from .transactions import TransactionsModel

log = get_logger(__name__)

LAZY_LOAD_DELAY = 1.0

# delivered to every view regardless of focus
BROADCAST = (
    UpdatePositions,
    RefreshAssets,
    AssetsUpdated,
    RefreshExpenses,
    RefreshExpenseInsights,
    ExpensesUpdated,
    RefreshRevenues,
    RefreshRevenueInsights,
    RevenuesUpdated,
    RefreshLiabilities,
    LiabilitiesUpdated,
    RefreshCategories,
    RefreshCategoryInsights,
    CategoriesUpdated,
    CreationRejected,
    RefreshSummary,
    SummaryUpdated,
    RefreshTransactions,
    TransactionsLoaded,
    EntityCreated,
    CreationRejected,
    NewAsset,
    NewExpense,
    NewRevenue,
    NewLiabilityRequest,
    NewCategory,
    Filter,
    Search,
    DeleteTransaction,
    TransactionDeleted,
    NewTransaction,
    EditTransaction,
    ResetTransactionForm,
    DeleteSplit,
    TransactionSaved,
)


class App:
    def __init__(self, api, full_view: bool = False, today: date | None = None):
        if api is None:
            raise ValueError("app requires an API")
        self.api = api
        self.keymap = global_keys()
        self.layout = Layout(full_transaction_view=full_view)
        self.focused_view = View.TRANSACTIONS
        self.load_status = {resource: False for resource in LOADED_RESOURCES}
        self.lazy_counter = 0
        self.show_full_help = False

        self.transactions = TransactionsModel(api, self.layout)
        self.assets = new_assets_model(api, self.layout)
        self.expenses = new_expenses_model(api, self.layout)
        self.revenues = new_revenues_model(api, self.layout)
        self.liabilities = new_liabilities_model(api, self.layout)
        self.categories = new_categories_model(api, self.layout)
        self.summary = SummaryModel(api, self.layout)
        self.form = TransactionFormModel(api, today=today)
        self.prompt = PromptModel()
        self.notify = NotifyModel()
        self.period = PeriodPicker(today)

        self.transactions.focus()

    # components

    def components(self) -> list:
        return [
            self.transactions,
            self.assets,
            self.expenses,
            self.revenues,
            self.liabilities,
            self.categories,
            self.summary,
            self.form,
        ]

    def component_for(self, view: View):
        if view is View.TRANSACTIONS:
            return self.transactions
        elif view is View.ASSETS:
            return self.assets
        elif view is View.CATEGORIES:
            return self.categories
        elif view is View.EXPENSES:
            return self.expenses
        elif view is View.REVENUES:
            return self.revenues
        elif view is View.LIABILITIES:
            return self.liabilities
        elif view is View.NEW_TRANSACTION:
            return self.form
        raise ValueError(f"unknown view: {view!r}")

    def focused_component(self):
        return self.component_for(self.focused_view)

    # layout

    def recompute_layout(self) -> Layout:
        layout = self.layout.with_summary_rows(self.summary.item_count())
        layout = layout.with_help_rows(2 if self.show_full_help else 1)
        if layout.full_transaction_view and self.focused_view in (View.TRANSACTIONS, View.NEW_TRANSACTION):
            left = 0
        else:
            left = left_width_for(layout, self.summary.max_width())
        self.layout = layout.with_left_width(left)
        return self.layout

    def update_positions(self):
        return Emit(UpdatePositions(self.recompute_layout()))

    def set_focused_view(self, view: View):
        for component in self.components():
            component.blur()
        self.focused_view = view
        self.component_for(view).focus()
        return self.update_positions()

    # lazy loading

    def init(self):
        return Emit(RefreshAll())

    def refresh_all(self):
        self.load_status = {resource: False for resource in LOADED_RESOURCES}
        return batch(
            Emit(RefreshAssets()),
            Emit(RefreshExpenses()),
            Emit(RefreshRevenues()),
            Emit(RefreshLiabilities()),
            Emit(RefreshCategories()),
            Emit(LazyLoadPoll(self.api.timeout_seconds())),
        )

    def all_loaded(self) -> bool:
        return all(self.load_status.get(resource, False) for resource in LOADED_RESOURCES)

    def lazy_load_poll(self, remaining: int):
        if self.all_loaded():
            self.lazy_counter = 0
            return batch(Emit(RefreshTransactions()), Emit(RefreshSummary()))
        if remaining > 0:
            self.lazy_counter = remaining - 1
            return Tick(LAZY_LOAD_DELAY, LazyLoadPoll(remaining - 1))
        self.lazy_counter = 0
        log.warning("resources still loading after poll ceiling: %s", self.load_status)
        return notify_warn("Could not load all resources in time")

    # period

    def change_period(self):
        self.transactions.current_search = ""
        # insight values are per period
        return batch(
            Emit(RefreshTransactions()),
            Emit(RefreshSummary()),
            Emit(RefreshExpenseInsights()),
            Emit(RefreshRevenueInsights()),
            Emit(RefreshCategoryInsights()),
        )

    # message handling

    def broadcast(self, msg):
        return batch(*(component.update(msg) for component in self.components()))

    def update(self, msg):
        if isinstance(msg, Quit):
            return None
        if isinstance(msg, WindowSize):
            self.layout = self.layout.resized(msg.width, msg.height)
            return self.update_positions()
        if isinstance(msg, Notify) or isinstance(msg, ClearNotification):
            return self.notify.update(msg)
        if isinstance(msg, PromptRequest):
            return self.prompt.update(msg)
        if isinstance(msg, SetFocusedView):
            return self.set_focused_view(msg.view)
        if isinstance(msg, ToggleFullView):
            self.layout = self.layout.with_full_view(not self.layout.full_transaction_view)
            return self.update_positions()
        if isinstance(msg, RefreshAll):
            return self.refresh_all()
        if isinstance(msg, DataLoadCompleted):
            self.load_status[msg.resource] = True
            return None
        if isinstance(msg, LazyLoadPoll):
            return self.lazy_load_poll(msg.remaining)
        if isinstance(msg, OpenPeriodPicker):
            start = self.api.period_start()
            self.period.open(start.year, start.month)
            return None
        if isinstance(msg, PeriodSelected):
            self.api.set_period(msg.year, msg.month)
            return self.change_period()
        if isinstance(msg, SummaryUpdated):
            return batch(self.broadcast(msg), self.update_positions())
        if isinstance(msg, BROADCAST):
            return self.broadcast(msg)
        if isinstance(msg, Key):
            return self.handle_key(msg)
        return self.focused_component().update(msg)

    def handle_key(self, msg: Key):
        if msg.name == "ctrl+c":
            return Emit(Quit())
        if self.prompt.focused:
            return self.prompt.update(msg)
        if self.period.focused:
            return self.period.update(msg)

        action = self.keymap.action(msg.name)
        # the form edits text, so printable global keys stay with it
        typing = self.focused_view is View.NEW_TRANSACTION
        if action == "help" and not typing:
            self.show_full_help = not self.show_full_help
            return self.update_positions()
        if action == "previous_period" and not typing:
            self.api.previous_period()
            return self.change_period()
        if action == "next_period" and not typing:
            self.api.next_period()
            return self.change_period()
        if action == "period" and not typing:
            return Emit(OpenPeriodPicker())
        return self.focused_component().update(msg)
