"""Domain values loaded from Firefly III."""
from __future__ import annotations

from dataclasses import dataclass, field

# Firefly reports long account type names on transaction splits.
ACCOUNT_TYPES = {
    "asset account": "asset",
    "default account": "asset",
    "expense account": "expense",
    "beneficiary account": "expense",
    "revenue account": "revenue",
    "cash account": "cash",
    "loan": "liabilities",
    "debt": "liabilities",
    "mortgage": "liabilities",
    "liability credit account": "liabilities",
}

TYPE_ICONS = {
    "withdrawal": "←",
    "deposit": "→",
    "transfer": "⇄",
}


def normalize_account_type(value: str | None) -> str:
    """Map a Firefly account type to asset, expense, revenue, cash or liabilities."""
    if not value:
        return ""
    lowered = value.strip().lower()
    if lowered in ACCOUNT_TYPES:
        return ACCOUNT_TYPES[lowered]
    if lowered == "liability":
        return "liabilities"
    return lowered


@dataclass(frozen=True)
class Currency:
    """A currency as reported by the server."""

    code: str = ""
    symbol: str = ""
    decimal_places: int = 2


@dataclass(frozen=True)
class Account:
    """An account of any type."""

    id: str
    name: str
    currency_code: str = ""
    type: str = ""
    liability_direction: str = ""
    balance: float = field(default=0.0, compare=False)

    def signed_balance(self) -> float:
        """Balance as shown to the user; debit liabilities are what we owe."""
        if self.liability_direction == "debit":
            return -self.balance
        return self.balance


@dataclass(frozen=True)
class Category:
    """A spending category."""

    id: str
    name: str
    notes: str = ""


@dataclass(frozen=True)
class SummaryItem:
    """One entry of the basic summary."""

    key: str
    title: str
    monetary_value: float
    currency_code: str
    value_parsed: str


@dataclass(frozen=True)
class Split:
    """One journal of a transaction group."""

    source: Account
    destination: Account
    category: Category
    currency_code: str = ""
    amount: float = 0.0
    foreign_currency_code: str = ""
    foreign_amount: float = 0.0
    description: str = ""
    journal_id: str = ""


@dataclass(frozen=True)
class Transaction:
    """A transaction group with its splits.

    ``id`` is the position in the loaded list; ``transaction_id`` is the
    server identifier.
    """

    id: int
    transaction_id: str
    type: str
    date: str
    group_title: str = ""
    splits: tuple[Split, ...] = ()


@dataclass(frozen=True)
class NewLiability:
    name: str
    currency_code: str
    type: str
    direction: str


@dataclass
class RequestSplit:
    """A split ready to be sent to the server."""

    type: str
    date: str
    amount: float
    description: str
    source_id: str
    destination_id: str
    currency_code: str = ""
    foreign_currency_code: str = ""
    foreign_amount: float = 0.0
    category_id: str = ""
    journal_id: str = ""

    def to_payload(self) -> dict:
        payload = {
            "type": self.type,
            "date": self.date,
            "amount": f"{self.amount:.2f}",
            "description": self.description,
            "source_id": self.source_id,
            "destination_id": self.destination_id,
        }
        if self.currency_code:
            payload["currency_code"] = self.currency_code
        if self.foreign_currency_code and self.foreign_amount:
            payload["foreign_currency_code"] = self.foreign_currency_code
            payload["foreign_amount"] = f"{self.foreign_amount:.2f}"
        if self.category_id:
            payload["category_id"] = self.category_id
        if self.journal_id:
            payload["transaction_journal_id"] = self.journal_id
        return payload


@dataclass
class RequestTransaction:
    group_title: str
    splits: list[RequestSplit] = field(default_factory=list)
    apply_rules: bool = True
    fire_webhooks: bool = True

    def to_payload(self) -> dict:
        return {
            "apply_rules": self.apply_rules,
            "fire_webhooks": self.fire_webhooks,
            "group_title": self.group_title,
            "transactions": [s.to_payload() for s in self.splits],
        }
