"""Messages exchanged between the runtime, the orchestrator and the views."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .models import Account, Category, Transaction

# Resources the lazy loader waits for before revealing the dashboard.
ASSETS = "assets"
EXPENSES = "expenses"
REVENUES = "revenues"
LIABILITIES = "liabilities"
CATEGORIES = "categories"

LOADED_RESOURCES = (ASSETS, EXPENSES, REVENUES, LIABILITIES, CATEGORIES)


class View(Enum):
    TRANSACTIONS = "transactions"
    ASSETS = "assets"
    CATEGORIES = "categories"
    EXPENSES = "expenses"
    REVENUES = "revenues"
    LIABILITIES = "liabilities"
    NEW_TRANSACTION = "new_transaction"


# --- runtime ---------------------------------------------------------------


@dataclass(frozen=True)
class Key:
    """A key press, named like ``"a"``, ``"enter"`` or ``"ctrl+c"``."""

    name: str


@dataclass(frozen=True)
class WindowSize:
    width: int
    height: int


@dataclass(frozen=True)
class Quit:
    pass


# --- orchestration ---------------------------------------------------------


@dataclass(frozen=True)
class UpdatePositions:
    layout: Any = None


@dataclass(frozen=True)
class SetFocusedView:
    view: View


@dataclass(frozen=True)
class ToggleFullView:
    pass


@dataclass(frozen=True)
class RefreshAll:
    pass


@dataclass(frozen=True)
class DataLoadCompleted:
    resource: str


@dataclass(frozen=True)
class LazyLoadPoll:
    remaining: int


@dataclass(frozen=True)
class OpenPeriodPicker:
    pass


@dataclass(frozen=True)
class PeriodSelected:
    year: int
    month: int


# --- refresh requests and completions -------------------------------------


@dataclass(frozen=True)
class RefreshAssets:
    pass


@dataclass(frozen=True)
class AssetsUpdated:
    pass


@dataclass(frozen=True)
class RefreshExpenses:
    pass


@dataclass(frozen=True)
class RefreshExpenseInsights:
    pass


@dataclass(frozen=True)
class ExpensesUpdated:
    pass


@dataclass(frozen=True)
class RefreshRevenues:
    pass


@dataclass(frozen=True)
class RefreshRevenueInsights:
    pass


@dataclass(frozen=True)
class RevenuesUpdated:
    pass


@dataclass(frozen=True)
class RefreshLiabilities:
    pass


@dataclass(frozen=True)
class LiabilitiesUpdated:
    pass


@dataclass(frozen=True)
class RefreshCategories:
    pass


@dataclass(frozen=True)
class RefreshCategoryInsights:
    pass


@dataclass(frozen=True)
class CategoriesUpdated:
    pass


@dataclass(frozen=True)
class RefreshSummary:
    pass


@dataclass(frozen=True)
class SummaryUpdated:
    pass


@dataclass(frozen=True)
class RefreshTransactions:
    pass


@dataclass(frozen=True)
class TransactionsLoaded:
    transactions: tuple
    generation: int


@dataclass(frozen=True)
class EntityCreated:
    """An account or category was created on the server."""

    resource: str
    name: str


@dataclass(frozen=True)
class CreationRejected:
    """Creation input that failed validation; the next prompt starts from it."""

    resource: str
    value: str


# --- transactions ----------------------------------------------------------


@dataclass(frozen=True)
class Filter:
    """Replace the transaction filter; at most one criterion is kept."""

    account: Optional[Account] = None
    category: Optional[Category] = None
    query: str = ""
    reset: bool = False


@dataclass(frozen=True)
class Search:
    query: str


@dataclass(frozen=True)
class DeleteTransaction:
    transaction: Transaction


@dataclass(frozen=True)
class NewTransaction:
    """Open the form prefilled from ``transaction`` (a clone)."""

    transaction: Transaction


@dataclass(frozen=True)
class EditTransaction:
    transaction: Transaction


@dataclass(frozen=True)
class ResetTransactionForm:
    pass


@dataclass(frozen=True)
class DeleteSplit:
    index: int


@dataclass(frozen=True)
class TransactionDeleted:
    transaction: Transaction
    error: str = ""


@dataclass(frozen=True)
class TransactionSaved:
    """Result of submitting the form; ``error`` is empty on success."""

    created: bool
    error: str = ""
