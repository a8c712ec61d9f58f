"""Transactions table with in-memory filtering and server-side search.

Filtering narrows the loaded set without another request. Only one filter is
active at a time: an account, a category or a free-text query. A query
matches split by split, so a multi-split transaction keeps only its matching
rows unless the group title itself matches.
"""
from __future__ import annotations

from dataclasses import dataclass

from .commands import Call, Emit, batch, sequence
from .errors import FfiiiError
from .keys import transaction_keys
from .layout import FRAME_HEIGHT, FRAME_WIDTH, Layout
from .logger import get_logger
from .messages import (
    DeleteTransaction,
    EditTransaction,
    Filter,
    Key,
    NewTransaction,
    RefreshAll,
    RefreshAssets,
    RefreshExpenseInsights,
    RefreshLiabilities,
    RefreshRevenueInsights,
    RefreshTransactions,
    Search,
    SetFocusedView,
    ToggleFullView,
    TransactionDeleted,
    TransactionsLoaded,
    UpdatePositions,
    View,
)
from .models import TYPE_ICONS, Account, Category, Split, Transaction
from .notify import Level, Notify, notify_log, notify_warn
from .prompt import CANCEL, Continuation, ask
from .widgets import Column, Table

log = get_logger(__name__)

COLUMNS = (
    ("ID", 2),
    ("Type", 4),
    ("Date", 10),
    ("Source", 5),
    ("Destination", 5),
    ("Category", 5),
    ("Currency", 3),
    ("Amount", 5),
    ("Foreign Currency", 4),
    ("Foreign Amount", 5),
    ("Description", 10),
    ("TxID", 4),
)

DELETE_PROMPT = "Are you sure you want to delete transaction(type 'yes!' if yes) %s:%s: "
DELETE_CONFIRMATION = "yes!"


# ────────────────────────────────────────────────────────────
#  Matching
# ────────────────────────────────────────────────────────────


def _contains(value: str, query: str) -> bool:
    return query.lower() in (value or "").lower()


def _same_account(a: Account, b: Account) -> bool:
    if a.id and b.id:
        return a.id == b.id
    return a.name == b.name


def _same_category(a: Category, b: Category) -> bool:
    if a.id and b.id:
        return a.id == b.id
    return a.name == b.name


def split_matches(split: Split, query: str) -> bool:
    """Case-insensitive substring match over the visible split fields."""
    return (
        _contains(split.description, query)
        or _contains(split.source.name, query)
        or _contains(split.destination.name, query)
        or _contains(split.category.name, query)
        or _contains(split.currency_code, query)
        or _contains(f"{split.amount:.2f}", query)
        or _contains(split.foreign_currency_code, query)
        or _contains(f"{split.foreign_amount:.2f}", query)
    )


def matching_splits(
    transaction: Transaction,
    account: Account | None = None,
    category: Category | None = None,
    query: str = "",
) -> list[int]:
    """Indexes of the splits of ``transaction`` that pass the active filter."""
    indexes = range(len(transaction.splits))
    if account is not None:
        return [
            i
            for i in indexes
            if _same_account(transaction.splits[i].source, account)
            or _same_account(transaction.splits[i].destination, account)
        ]
    if category is not None:
        return [i for i in indexes if _same_category(transaction.splits[i].category, category)]
    if query:
        if _contains(transaction.group_title, query):
            return list(indexes)
        return [i for i in indexes if split_matches(transaction.splits[i], query)]
    return list(indexes)


def filter_transactions(transactions, account=None, category=None, query="") -> list[tuple[Transaction, list[int]]]:
    """Transactions with at least one matching split, with those splits."""
    visible = []
    for transaction in transactions:
        splits = matching_splits(transaction, account, category, query)
        if splits:
            visible.append((transaction, splits))
    return visible


def transaction_rows(visible) -> list[tuple]:
    rows = []
    for transaction, splits in visible:
        icon = TYPE_ICONS.get(transaction.type, "")
        for idx in splits:
            split = transaction.splits[idx]
            rows.append(
                (
                    str(transaction.id),
                    " ↳" if len(transaction.splits) > 1 and idx > 0 else icon,
                    transaction.date,
                    split.source.name,
                    split.destination.name,
                    split.category.name,
                    split.currency_code,
                    f"{split.amount:.2f}",
                    split.foreign_currency_code,
                    f"{split.foreign_amount:.2f}",
                    split.description,
                    transaction.transaction_id,
                )
            )
    return rows


def fit_columns(rows) -> list[Column]:
    widths = [width for _, width in COLUMNS]
    for row in rows:
        for idx, cell in enumerate(row):
            widths[idx] = max(widths[idx], len(cell))
    return [Column(title, width) for (title, _), width in zip(COLUMNS, widths)]


# ────────────────────────────────────────────────────────────
#  Prompt continuations
# ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ApplyFilterQuery(Continuation):
    def resolve(self, value: str):
        return sequence(Emit(Filter(query=value)), Emit(SetFocusedView(View.TRANSACTIONS)))


@dataclass(frozen=True)
class ApplySearch(Continuation):
    def resolve(self, value: str):
        return sequence(Emit(Search(value)), Emit(SetFocusedView(View.TRANSACTIONS)))


@dataclass(frozen=True)
class ConfirmDelete(Continuation):
    transaction: Transaction

    def resolve(self, value: str):
        back = Emit(SetFocusedView(View.TRANSACTIONS))
        if value == DELETE_CONFIRMATION:
            return sequence(back, Emit(DeleteTransaction(self.transaction)))
        return back


# ────────────────────────────────────────────────────────────
#  Model
# ────────────────────────────────────────────────────────────


class TransactionsModel:
    def __init__(self, api, layout: Layout | None = None):
        if api is None:
            raise ValueError("transactions view requires an API")
        self.api = api
        self.keymap = transaction_keys()
        self.table = Table(fit_columns([]))
        self.transactions: list[Transaction] = []
        self.row_refs: list[int] = []
        self.current_search = ""
        self.current_account: Account | None = None
        self.current_category: Category | None = None
        self.current_filter = ""
        self.generation = 0
        self.focused = False
        self._resize(layout or Layout())

    def focus(self) -> None:
        self.focused = True

    def blur(self) -> None:
        self.focused = False

    def _resize(self, layout: Layout) -> None:
        self.layout = layout
        self.table.set_size(
            layout.width - layout.left_width - FRAME_WIDTH,
            layout.height - FRAME_HEIGHT - layout.top_height,
        )

    # filter state

    def apply_filter(self, msg: Filter) -> None:
        if msg.reset:
            self.current_account = None
            self.current_category = None
            self.current_filter = ""
        if msg.account is not None:
            self.current_account = msg.account
            self.current_category = None
            self.current_filter = ""
        if msg.category is not None:
            self.current_category = msg.category
            self.current_account = None
            self.current_filter = ""
        if msg.query == CANCEL:
            self.current_filter = ""
        elif msg.query:
            self.current_filter = msg.query
            self.current_account = None
            self.current_category = None
        self.rebuild()

    def rebuild(self) -> None:
        visible = filter_transactions(
            self.transactions,
            self.current_account,
            self.current_category,
            self.current_filter,
        )
        rows = transaction_rows(visible)
        self.row_refs = [transaction.id for transaction, splits in visible for _ in splits]
        self.table.columns = fit_columns(rows)
        self.table.set_rows(rows)

    def header(self) -> str:
        line = " ffiii-tui"
        if self.current_search:
            line += f" | Search: {self.current_search}"
        else:
            line += f" | Period: {self.api.period_start():%Y-%m-%d} - {self.api.period_end():%Y-%m-%d}"
        if self.current_account is not None:
            line += f" | Account: {self.current_account.name}"
        if self.current_category is not None:
            line += f" | Category: {self.current_category.name}"
        if self.current_filter:
            line += f" | Filter: {self.current_filter}"
        return line

    # loading

    def refresh(self):
        self.generation += 1
        return Call(self._load, (self.current_search, self.generation))

    def _load(self, query: str, generation: int):
        try:
            transactions = self.api.list_transactions(query)
        except FfiiiError as exc:
            log.warning("loading transactions failed: %s", exc)
            return Notify(str(exc), Level.WARN)
        return TransactionsLoaded(tuple(transactions), generation)

    def _loaded(self, msg: TransactionsLoaded) -> None:
        if msg.generation != self.generation:
            log.debug("dropping transactions of generation %d, current is %d", msg.generation, self.generation)
            return
        self.transactions = list(msg.transactions)
        self.rebuild()

    def search(self, query: str):
        if query == CANCEL and not self.current_search:
            return None
        self.current_search = "" if query == CANCEL else query
        return Emit(RefreshTransactions())

    def delete(self, transaction: Transaction):
        if not transaction.transaction_id:
            return Emit(SetFocusedView(View.TRANSACTIONS))
        return Call(self._delete, (transaction,))

    def _delete(self, transaction: Transaction):
        try:
            self.api.delete_transaction(transaction.transaction_id)
        except FfiiiError as exc:
            log.warning("deleting transaction %s failed: %s", transaction.transaction_id, exc)
            return TransactionDeleted(transaction, str(exc))
        return TransactionDeleted(transaction)

    def _deleted(self, msg: TransactionDeleted):
        back = Emit(SetFocusedView(View.TRANSACTIONS))
        if msg.error:
            return batch(notify_warn(f"Error deleting transaction, {msg.error}"), back)
        return batch(
            notify_log("Transaction deleted successfully."),
            back,
            Emit(RefreshAssets()),
            Emit(RefreshLiabilities()),
            Emit(RefreshTransactions()),
            Emit(RefreshExpenseInsights()),
            Emit(RefreshRevenueInsights()),
        )

    # selection

    def selected_transaction(self):
        """The selected transaction, or a warning command when there is none."""
        if not self.table.rows:
            return None, notify_warn("No transactions.")
        index = self.table.selected_index()
        if index is None or index >= len(self.row_refs):
            return None, notify_warn("Transaction not selected.")
        trx_id = self.row_refs[index]
        if trx_id >= len(self.transactions):
            return None, notify_warn("Transaction not selected.")
        return self.transactions[trx_id], None

    def _with_selected(self, action):
        transaction, warning = self.selected_transaction()
        if transaction is None:
            return warning
        return action(transaction)

    @staticmethod
    def _confirm_delete(transaction: Transaction):
        title = transaction.group_title
        if not title and transaction.splits:
            title = transaction.splits[0].description
        return ask(DELETE_PROMPT % (transaction.transaction_id, title), "no", ConfirmDelete(transaction))

    # message handling

    def update(self, msg):
        if isinstance(msg, RefreshTransactions):
            return self.refresh()
        if isinstance(msg, TransactionsLoaded):
            self._loaded(msg)
            return None
        if isinstance(msg, Filter):
            self.apply_filter(msg)
            return None
        if isinstance(msg, Search):
            return self.search(msg.query)
        if isinstance(msg, DeleteTransaction):
            return self.delete(msg.transaction)
        if isinstance(msg, TransactionDeleted):
            return self._deleted(msg)
        if isinstance(msg, UpdatePositions):
            if msg.layout is not None:
                self._resize(msg.layout)
            return None

        if not self.focused or not isinstance(msg, Key):
            return None

        action = self.keymap.action(msg.name)
        if action == "refresh":
            return Emit(RefreshAll())
        if action == "filter":
            return ask("Filter query: ", self.current_filter, ApplyFilterQuery())
        if action == "search":
            return ask("Search query: ", self.current_search, ApplySearch())
        if action == "new":
            return Emit(SetFocusedView(View.NEW_TRANSACTION))
        if action == "clone":
            return self._with_selected(
                lambda trx: sequence(Emit(NewTransaction(trx)), Emit(SetFocusedView(View.NEW_TRANSACTION)))
            )
        if action == "edit":
            return self._with_selected(
                lambda trx: sequence(Emit(EditTransaction(trx)), Emit(SetFocusedView(View.NEW_TRANSACTION)))
            )
        if action == "delete":
            return self._with_selected(self._confirm_delete)
        if action == "reset_filter":
            return Emit(Filter(reset=True))
        if action == "full_view":
            return Emit(ToggleFullView())
        if action in ("assets", "categories", "expenses", "revenues", "liabilities"):
            return Emit(SetFocusedView(View(action)))
        return self.table.update(msg.name)
