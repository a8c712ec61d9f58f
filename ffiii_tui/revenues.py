"""Revenue accounts with what they earned this period."""
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
from .messages import REVENUES, RefreshRevenueInsights, RefreshRevenues, RevenuesUpdated, View
from .prompt import CANCEL, Continuation

ACCOUNT_TYPE = "revenue"
LABEL = "Earned"


@dataclass(frozen=True)
class NewRevenue:
    name: str


@dataclass(frozen=True)
class CreateRevenue(Continuation):
    back: object

    def resolve(self, value: str):
        if value == CANCEL or not value.strip():
            return self.back
        return sequence(Emit(NewRevenue(value.strip())), self.back)


def revenue_items(api, sort_state: int = 0) -> list[ListItem]:
    items = [
        ListItem(account, LABEL, api.revenue_diff(account.id), account.currency_code)
        for account in api.accounts_by_type(ACCOUNT_TYPE)
    ]
    if sort_state:
        items = sort_by_value(items)
    return items


def _create(api, msg: NewRevenue) -> str:
    api.create_revenue_account(msg.name)
    return msg.name


CONFIG = ListConfig(
    resource=REVENUES,
    title="Revenues",
    view=View.REVENUES,
    account_type=ACCOUNT_TYPE,
    refresh_msg=RefreshRevenues,
    updated_msg=RevenuesUpdated,
    fetch=fetch_accounts,
    build_items=revenue_items,
    filter_for=account_filter,
    prompt="New Revenue(<name>): ",
    continuation=CreateRevenue,
    create_msg=NewRevenue,
    create=_create,
    created_label="Revenue account",
    has_total=True,
    total_item=lambda api, items: sum_total(api, items, LABEL),
    sort_states=(0, 1),
    insights_msg=RefreshRevenueInsights,
    fetch_insights=lambda api: api.update_revenue_insights(),
)


def new_revenues_model(api, layout=None) -> EntityListModel:
    return EntityListModel(api, CONFIG, layout)
