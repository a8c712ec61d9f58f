"""Liability accounts, shown from our point of view."""
from __future__ import annotations

import re
from dataclasses import dataclass

from .account_list import EntityListModel, ListConfig, ListItem, account_filter, fetch_accounts, sum_total
from .commands import Emit, sequence
from .messages import LIABILITIES, CreationRejected, LiabilitiesUpdated, RefreshLiabilities, View
from .models import NewLiability
from .notify import notify_warn
from .prompt import CANCEL, Continuation

ACCOUNT_TYPE = "liabilities"
TOTAL_LABEL = "Balance"

LIABILITY_RE = re.compile(r"^\s*([^,]+)\s*,\s*([^,]+)\s*,\s*([^,]+)\s*,\s*([^,]+)\s*$")


@dataclass(frozen=True)
class NewLiabilityRequest:
    liability: NewLiability


@dataclass(frozen=True)
class CreateLiability(Continuation):
    """Parse ``<name>,<currency>,<type>,<direction>``."""

    back: object

    def resolve(self, value: str):
        if value == CANCEL:
            return self.back
        match = LIABILITY_RE.match(value)
        if match is None:
            return self.reject("Invalid liability request", value)
        name, currency, kind, direction = (part.strip() for part in match.groups())
        if not name or not currency:
            return self.reject("Invalid liability name or currency", value)
        request = NewLiabilityRequest(NewLiability(name, currency, kind, direction))
        return sequence(Emit(request), self.back)

    def reject(self, warning: str, value: str):
        return sequence(notify_warn(warning), Emit(CreationRejected(LIABILITIES, value)), self.back)


def liability_item(account, balance: float) -> ListItem:
    """Debit liabilities are money we owe, so their balance is negated."""
    if account.liability_direction == "debit":
        return ListItem(account, "We owe", -balance, account.currency_code)
    return ListItem(account, "They owe us", balance, account.currency_code)


def liability_items(api, sort_state: int = 0) -> list[ListItem]:
    return [
        liability_item(account, api.account_balance(account.id))
        for account in api.accounts_by_type(ACCOUNT_TYPE)
    ]


def _create(api, msg: NewLiabilityRequest) -> str:
    api.create_liability_account(msg.liability)
    return msg.liability.name


CONFIG = ListConfig(
    resource=LIABILITIES,
    title="Liabilities",
    view=View.LIABILITIES,
    account_type=ACCOUNT_TYPE,
    refresh_msg=RefreshLiabilities,
    updated_msg=LiabilitiesUpdated,
    fetch=fetch_accounts,
    build_items=liability_items,
    filter_for=account_filter,
    prompt="New Liabity(<name>,<currency>,<type:loan|debt|mortage>,<direction:credit|debit>): ",
    continuation=CreateLiability,
    create_msg=NewLiabilityRequest,
    create=_create,
    created_label="Liability account",
    has_total=True,
    total_item=lambda api, items: sum_total(api, items, TOTAL_LABEL),
)


def new_liabilities_model(api, layout=None) -> EntityListModel:
    return EntityListModel(api, CONFIG, layout)
