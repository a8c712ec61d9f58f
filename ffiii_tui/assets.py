"""Asset accounts with their current balances."""
from __future__ import annotations

from dataclasses import dataclass

from .account_list import EntityListModel, ListConfig, ListItem, account_filter, fetch_accounts
from .commands import Emit, sequence
from .messages import ASSETS, AssetsUpdated, CreationRejected, RefreshAssets, RefreshSummary, View
from .notify import notify_warn
from .prompt import CANCEL, Continuation

ACCOUNT_TYPE = "asset"


@dataclass(frozen=True)
class NewAsset:
    name: str
    currency: str


@dataclass(frozen=True)
class CreateAsset(Continuation):
    """Parse ``<name>,<currency>`` and request a new asset account."""

    back: object

    def resolve(self, value: str):
        if value == CANCEL:
            return self.back
        name, sep, currency = value.partition(",")
        name, currency = name.strip(), currency.strip()
        if not sep or not name or not currency:
            return sequence(
                notify_warn("Invalid asset name or currency"),
                Emit(CreationRejected(ASSETS, value)),
                self.back,
            )
        return sequence(Emit(NewAsset(name, currency)), self.back)


def asset_items(api, sort_state: int = 0) -> list[ListItem]:
    return [
        ListItem(account, "Balance", api.account_balance(account.id), account.currency_code)
        for account in api.accounts_by_type(ACCOUNT_TYPE)
    ]


def _create(api, msg: NewAsset) -> str:
    api.create_asset_account(msg.name, msg.currency)
    return msg.name


CONFIG = ListConfig(
    resource=ASSETS,
    title="Assets",
    view=View.ASSETS,
    account_type=ACCOUNT_TYPE,
    refresh_msg=RefreshAssets,
    updated_msg=AssetsUpdated,
    fetch=fetch_accounts,
    build_items=asset_items,
    filter_for=account_filter,
    prompt="New Asset(<name>,<currency>): ",
    continuation=CreateAsset,
    create_msg=NewAsset,
    create=_create,
    created_label="Asset account",
    has_summary=True,
    refresh_also=(RefreshSummary,),
)


def new_assets_model(api, layout=None) -> EntityListModel:
    return EntityListModel(api, CONFIG, layout)
