"""Expense accounts with what was spent on them this period."""
from __future__ import annotations

from dataclasses import dataclass

from .account_list import (
    EntityListModel,
    ListConfig,
    ListItem,
    account_filter,
    fetch_accounts,
    sort_by_value,
    sum_total,
)
from .commands import Emit, sequence
from .messages import EXPENSES, ExpensesUpdated, RefreshExpenseInsights, RefreshExpenses, View
from .prompt import CANCEL, Continuation

ACCOUNT_TYPE = "expense"
LABEL = "Spent"


@dataclass(frozen=True)
class NewExpense:
    name: str


@dataclass(frozen=True)
class CreateExpense(Continuation):
    back: object

    def resolve(self, value: str):
        if value == CANCEL or not value.strip():
            return self.back
        return sequence(Emit(NewExpense(value.strip())), self.back)


def expense_items(api, sort_state: int = 0) -> list[ListItem]:
    items = [
        ListItem(account, LABEL, api.expense_diff(account.id), account.currency_code)
        for account in api.accounts_by_type(ACCOUNT_TYPE)
    ]
    if sort_state:
        items = sort_by_value(items)
    return items


def _create(api, msg: NewExpense) -> str:
    api.create_expense_account(msg.name)
    return msg.name


CONFIG = ListConfig(
    resource=EXPENSES,
    title="Expenses",
    view=View.EXPENSES,
    account_type=ACCOUNT_TYPE,
    refresh_msg=RefreshExpenses,
    updated_msg=ExpensesUpdated,
    fetch=fetch_accounts,
    build_items=expense_items,
    filter_for=account_filter,
    prompt="New Expense(<name>): ",
    continuation=CreateExpense,
    create_msg=NewExpense,
    create=_create,
    created_label="Expense account",
    has_total=True,
    total_item=lambda api, items: sum_total(api, items, LABEL),
    sort_states=(0, 1),
    insights_msg=RefreshExpenseInsights,
    fetch_insights=lambda api: api.update_expense_insights(),
)


def new_expenses_model(api, layout=None) -> EntityListModel:
    return EntityListModel(api, CONFIG, layout)
