"""Form for creating, cloning and editing transactions."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime

from .assets import CreateAsset
from .categories import CreateCategory
from .commands import Call, Emit, batch, sequence
from .errors import FfiiiError
from .expenses import CreateExpense
from .keys import form_keys
from .liabilities import CreateLiability
from .logger import get_logger
from .messages import (
    DeleteSplit,
    EditTransaction,
    Key,
    NewTransaction,
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
    SetFocusedView,
    ToggleFullView,
    TransactionSaved,
    View,
)
from .models import Account, Category, RequestSplit, RequestTransaction, Transaction
from .notify import notify_err, notify_log, notify_warn
from .prompt import CANCEL, Continuation, LineInput, ask
from .revenues import CreateRevenue

log = get_logger(__name__)

BALANCE_TYPES = ("asset", "liabilities")

SPLIT_FIELDS = ("source", "destination", "category", "amount", "foreign_amount", "description")
CHOICE_FIELDS = ("source", "destination", "category")

LABELS = {
    "source": "Source",
    "destination": "Destination",
    "category": "Category",
    "amount": "Amount",
    "foreign_amount": "Foreign Amount",
    "description": "Description",
    "date": "Date",
    "group_title": "Group Title",
}


def transaction_type(source: Account | None, destination: Account | None) -> str:
    """Firefly transaction type implied by the account types."""
    stx = source.type if source else ""
    dtx = destination.type if destination else ""
    if stx == "asset" and dtx in ("expense", "liabilities", "cash"):
        return "withdrawal"
    if stx == "asset" and dtx == "asset":
        return "transfer"
    if stx == "revenue":
        return "deposit"
    if stx == "liabilities" and dtx == "expense":
        return "withdrawal"
    if stx == "liabilities" and dtx == "asset":
        return "deposit"
    if stx == "liabilities" and dtx == "liabilities":
        return "transfer"
    return "unknown"


@dataclass
class SplitDraft:
    source: Account | None = None
    destination: Account | None = None
    category: Category | None = None
    amount: str = ""
    foreign_amount: str = ""
    description: str = ""
    journal_id: str = ""

    def default_description(self) -> str:
        category = self.category.name if self.category else ""
        source = self.source.name if self.source else ""
        destination = self.destination.name if self.destination else ""
        return f"{category}, {source} -> {destination}"

    def final_description(self) -> str:
        return self.description or self.default_description()

    def currency_code(self) -> str:
        if self.source is None:
            return ""
        if self.source.type in BALANCE_TYPES:
            return self.source.currency_code
        if self.source.type == "revenue" and self.destination is not None:
            return self.destination.currency_code
        return ""

    def foreign_allowed(self) -> bool:
        return (
            self.source is not None
            and self.destination is not None
            and self.source.type in BALANCE_TYPES
            and self.destination.type in BALANCE_TYPES
            and self.source.currency_code != self.destination.currency_code
        )

    def foreign_currency_code(self) -> str:
        if self.foreign_allowed():
            return self.destination.currency_code
        return ""


@dataclass(frozen=True)
class FormField:
    name: str
    split: int = -1

    @property
    def is_choice(self) -> bool:
        return self.name in CHOICE_FIELDS

    @property
    def label(self) -> str:
        return LABELS[self.name]


@dataclass(frozen=True)
class DeleteSplitAt(Continuation):
    def resolve(self, value: str):
        back = Emit(SetFocusedView(View.NEW_TRANSACTION))
        if value == CANCEL:
            return back
        try:
            index = int(value)
        except ValueError:
            return back
        return Emit(DeleteSplit(index))


def _parse_amount(value: str) -> float | None:
    try:
        amount = float(value)
    except ValueError:
        return None
    if not math.isfinite(amount) or amount <= 0:
        return None
    return amount


@dataclass
class FormState:
    date: str = ""
    group_title: str = ""
    transaction_id: str = ""
    splits: list[SplitDraft] = field(default_factory=list)


class TransactionFormModel:
    def __init__(self, api, today: date | None = None):
        if api is None:
            raise ValueError("transaction form requires an API")
        self.api = api
        self.keymap = form_keys()
        self.focused = False
        self.new = True
        self.today = today
        self.input = LineInput()
        self.field_index = 0
        self.state = FormState()
        self.set_transaction(None, new=True)

    def focus(self) -> None:
        self.focused = True

    def blur(self) -> None:
        self.focused = False

    # state

    def _today(self) -> date:
        return self.today or date.today()

    def set_transaction(self, transaction: Transaction | None, new: bool) -> None:
        """Load ``transaction`` into the form; ``None`` starts an empty one."""
        self.new = new
        if transaction is not None and transaction.transaction_id:
            splits = [
                SplitDraft(
                    source=s.source,
                    destination=s.destination,
                    category=s.category if s.category.id or s.category.name else None,
                    amount=f"{s.amount:.2f}" if s.amount else "",
                    foreign_amount=f"{s.foreign_amount:.2f}" if s.foreign_amount else "",
                    description=s.description,
                    journal_id="" if new else s.journal_id,
                )
                for s in transaction.splits
            ]
            self.state = FormState(
                date=transaction.date if not new else self._today().isoformat(),
                group_title=transaction.group_title,
                transaction_id="" if new else transaction.transaction_id,
                splits=splits or [SplitDraft()],
            )
        else:
            self.state = FormState(date=self._today().isoformat(), splits=[SplitDraft()])
        self.field_index = 0
        self._load_input()

    def transaction_type(self) -> str:
        first = self.state.splits[0]
        return transaction_type(first.source, first.destination)

    def group_title(self) -> str:
        if len(self.state.splits) < 2:
            return ""
        if self.state.group_title:
            return self.state.group_title
        first = self.state.splits[0]
        kind = self.transaction_type()
        source = first.source.name if first.source else ""
        destination = first.destination.name if first.destination else ""
        acc = ""
        if kind == "withdrawal":
            acc = source
        elif kind == "deposit":
            acc = destination
        elif kind == "transfer":
            acc = f"{source} -> {destination}"
        return f"{kind}, splits: {len(self.state.splits)}, {acc}"

    # fields

    def fields(self) -> list[FormField]:
        fields = [FormField(name, idx) for idx in range(len(self.state.splits)) for name in SPLIT_FIELDS]
        fields.append(FormField("date"))
        if len(self.state.splits) > 1:
            fields.append(FormField("group_title"))
        return fields

    def current_field(self) -> FormField:
        fields = self.fields()
        self.field_index = min(self.field_index, len(fields) - 1)
        return fields[self.field_index]

    def field_value(self, f: FormField):
        if f.split >= 0:
            return getattr(self.state.splits[f.split], f.name)
        return getattr(self.state, f.name)

    def _set_field_value(self, f: FormField, value) -> None:
        if f.split >= 0:
            setattr(self.state.splits[f.split], f.name, value)
        else:
            setattr(self.state, f.name, value)

    def _load_input(self) -> None:
        f = self.current_field()
        self.input.set_value("" if f.is_choice else self.field_value(f))

    def _move(self, step: int) -> None:
        self.field_index = (self.field_index + step) % len(self.fields())
        self._load_input()

    def options(self, f: FormField) -> list:
        """Choices for a select field, following the transaction type."""
        if f.name == "category":
            return self.api.categories_list()
        by_type = self.api.accounts_by_type
        first = self.state.splits[0]
        kind = self.transaction_type()
        draft = self.state.splits[f.split]
        if f.name == "source":
            if f.split > 0:
                if kind in ("withdrawal", "transfer") and first.source is not None:
                    return [first.source]
                return by_type("revenue") + by_type("liabilities")
            return by_type("asset") + by_type("revenue") + by_type("liabilities")
        if f.split > 0 and kind in ("deposit", "transfer") and first.destination is not None:
            return [first.destination]
        source_type = draft.source.type if draft.source else ""
        if source_type == "asset":
            accounts = by_type("expense") + by_type("asset") + by_type("liabilities")
            if f.split > 0:
                accounts = by_type("expense") + by_type("liabilities")
            return accounts
        if source_type == "revenue":
            return by_type("asset") + by_type("liabilities")
        if source_type == "liabilities":
            accounts = by_type("asset") + by_type("expense") + by_type("liabilities")
            if f.split > 0:
                accounts = by_type("asset") + by_type("expense")
            return accounts
        return []

    def _cycle(self, step: int) -> None:
        f = self.current_field()
        options = self.options(f)
        if not options:
            return
        current = self.field_value(f)
        try:
            idx = options.index(current) + step
        except ValueError:
            idx = 0 if step > 0 else len(options) - 1
        self._set_field_value(f, options[idx % len(options)])

    # actions

    def add_split(self) -> None:
        self.state.splits.append(SplitDraft())

    def delete_split(self, index: int):
        back = Emit(SetFocusedView(View.NEW_TRANSACTION))
        if 1 <= index < len(self.state.splits):
            del self.state.splits[index]
            self.field_index = min(self.field_index, len(self.fields()) - 1)
            self._load_input()
            return back
        return sequence(notify_warn("Invalid split index"), back)

    def prompt_new_entity(self):
        f = self.current_field()
        back = Emit(SetFocusedView(View.NEW_TRANSACTION))
        if f.name == "category":
            return ask("New Category(<name>): ", "", CreateCategory(back))
        current = self.field_value(f)
        kind = current.type if current is not None else ("asset" if f.name == "source" else "expense")
        if kind == "asset":
            return ask("New Asset(<name>,<currency>): ", "", CreateAsset(back))
        if kind == "expense":
            return ask("New Expense(<name>): ", "", CreateExpense(back))
        if kind == "revenue":
            return ask("New Revenue(<name>): ", "", CreateRevenue(back))
        if kind == "liabilities":
            return ask(
                "New Liabity(<name>,<currency>,<type:loan|debt|mortage>,<direction:credit|debit>): ",
                "",
                CreateLiability(back),
            )
        return None

    def validate(self) -> str:
        """Empty when the form can be submitted, otherwise the first problem."""
        try:
            datetime.strptime(self.state.date, "%Y-%m-%d")
        except ValueError:
            return "Invalid date, expected YYYY-MM-DD"
        for idx, draft in enumerate(self.state.splits):
            if draft.source is None or draft.destination is None:
                return f"Split {idx}: source and destination are required"
            if _parse_amount(draft.amount) is None:
                return f"Split {idx}: please enter a valid positive number for amount"
            if draft.foreign_allowed():
                if _parse_amount(draft.foreign_amount) is None:
                    return f"Split {idx}: please enter a valid positive number for foreign amount"
            elif draft.foreign_amount:
                return f"Split {idx}: foreign amount is only applicable between asset/liability accounts of different currencies"
        return ""

    def build_request(self) -> RequestTransaction:
        kind = self.transaction_type()
        splits = []
        for draft in self.state.splits:
            splits.append(
                RequestSplit(
                    type=kind,
                    date=self.state.date,
                    amount=float(draft.amount),
                    description=draft.final_description(),
                    source_id=draft.source.id,
                    destination_id=draft.destination.id,
                    currency_code=draft.currency_code(),
                    foreign_currency_code=draft.foreign_currency_code(),
                    foreign_amount=float(draft.foreign_amount) if draft.foreign_amount else 0.0,
                    category_id=draft.category.id if draft.category else "",
                    journal_id=draft.journal_id,
                )
            )
        return RequestTransaction(group_title=self.group_title(), splits=splits)

    def submit(self):
        problem = self.validate()
        if problem:
            return notify_warn(problem)
        request = self.build_request()
        return Call(self._save, (request, self.new, self.state.transaction_id))

    def _save(self, request: RequestTransaction, new: bool, transaction_id: str):
        try:
            if new:
                self.api.create_transaction(request)
            else:
                self.api.update_transaction(transaction_id, request)
        except FfiiiError as exc:
            log.error("saving transaction failed: %s", exc)
            return TransactionSaved(created=new, error=str(exc))
        return TransactionSaved(created=new)

    def _saved(self, msg: TransactionSaved):
        back = Emit(SetFocusedView(View.TRANSACTIONS))
        if msg.error:
            return sequence(notify_err(msg.error), back)
        self.set_transaction(None, new=True)
        text = "Transaction created successfully" if msg.created else "Transaction updated successfully"
        return batch(
            back,
            notify_log(text),
            Emit(RefreshAssets()),
            Emit(RefreshLiabilities()),
            Emit(RefreshSummary()),
            Emit(RefreshTransactions()),
            Emit(RefreshExpenseInsights()),
            Emit(RefreshRevenueInsights()),
            Emit(RefreshCategoryInsights()),
        )

    # message handling

    def update(self, msg):
        if isinstance(msg, NewTransaction):
            self.set_transaction(msg.transaction, new=True)
            return None
        if isinstance(msg, EditTransaction):
            self.set_transaction(msg.transaction, new=False)
            return None
        if isinstance(msg, ResetTransactionForm):
            self.set_transaction(None, new=True)
            return None
        if isinstance(msg, DeleteSplit):
            return self.delete_split(msg.index)
        if isinstance(msg, TransactionSaved):
            return self._saved(msg)

        if not self.focused or not isinstance(msg, Key):
            return None

        f = self.current_field()
        action = self.keymap.action(msg.name)
        if f.is_choice and action == "new_entity":
            return self.prompt_new_entity()
        if f.is_choice and action in ("choice_next", "choice_previous"):
            self._cycle(1 if action == "choice_next" else -1)
            return None
        if action == "submit":
            return self.submit()
        if action == "next":
            self._move(1)
            return None
        if action == "previous":
            self._move(-1)
            return None
        if action == "add_split":
            self.add_split()
            return None
        if action == "delete_split":
            return ask("Delete split number: ", "", DeleteSplitAt())
        if action == "reset":
            return batch(Emit(SetFocusedView(View.NEW_TRANSACTION)), Emit(ResetTransactionForm()))
        if action == "refresh":
            return batch(
                Emit(RefreshAssets()),
                Emit(RefreshExpenses()),
                Emit(RefreshRevenues()),
                Emit(RefreshLiabilities()),
                Emit(RefreshCategories()),
            )
        if action == "full_view":
            return Emit(ToggleFullView())
        if action == "cancel":
            return Emit(SetFocusedView(View.TRANSACTIONS))
        if not f.is_choice:
            self.input.update(msg.name)
            self._set_field_value(f, self.input.value)
        return None

    def view_rows(self) -> list[tuple[bool, str, str]]:
        """(focused, label, value) for every field, split headers included."""
        rows = []
        current = self.current_field()
        last_split = None
        for f in self.fields():
            if f.split >= 0 and f.split != last_split:
                last_split = f.split
                title = f"Current Type: {self.transaction_type()}" if f.split == 0 else f"Split: {f.split}"
                rows.append((False, title, ""))
            value = self.field_value(f)
            if f.is_choice:
                shown = value.name if value is not None else ""
            elif f.name == "description" and not value:
                shown = self.state.splits[f.split].default_description()
            elif f.name == "group_title" and not value:
                shown = self.group_title()
            else:
                shown = value
            label = f.label
            if f.name == "amount":
                label = f"Amount {self.state.splits[f.split].currency_code()}".rstrip()
            elif f.name == "foreign_amount":
                code = self.state.splits[f.split].foreign_currency_code() or "N/A"
                label = f"Foreign Amount {code}"
            rows.append((f == current, label, shown))
        return rows
