"""
firefly.py — Firefly III REST client
────────────────────────────────────
Keeps the reporting period and per-resource caches the views read from.

Main helpers:
  - update_accounts(type) / accounts_by_type(type) / account_balance(id)
  - update_expense_insights() / update_revenue_insights()
  - update_categories() / update_category_insights()
  - update_summary() / summary_items()
  - list_transactions(query)
  - create_* / update_transaction / delete_transaction

Notes:
  • update_* calls run on worker threads; every cache write is ticketed so an
    older request finishing late never replaces data from a newer one.
  • non-success responses raise APIError with the server's "message".
"""

from __future__ import annotations

import threading
from datetime import date
from typing import Any, Dict, List, Optional

import requests

from .errors import APIError, FfiiiError, http_error
from .logger import get_logger
from .models import (
    Account,
    Category,
    Currency,
    NewLiability,
    RequestTransaction,
    Split,
    SummaryItem,
    Transaction,
    normalize_account_type,
)
from .period import add_months, month_bounds

log = get_logger(__name__)

DEFAULT_TIMEOUT = 10  # seconds
PAGE_LIMIT = 100
MAX_PAGES = 1000
DATE_FMT = "%Y-%m-%d"

# "mortage" is what the liability prompt advertises
LIABILITY_TYPES = {"loan": "loan", "debt": "debt", "mortgage": "mortgage", "mortage": "mortgage"}


def _float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


class FireflyClient:
    """Synchronous client; the UI wraps every call in a deferred command."""

    def __init__(
        self,
        api_url: str,
        api_key: str,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        today: Optional[date] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/json",
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            }
        )
        today = today or date.today()
        self.start_date, self.end_date = month_bounds(today.year, today.month)

        self._lock = threading.Lock()
        self._issued: Dict[str, int] = {}
        self._committed: Dict[str, int] = {}

        self._accounts: Dict[str, List[Account]] = {}
        self._expense_diff: Dict[str, float] = {}
        self._revenue_diff: Dict[str, float] = {}
        self._categories: List[Category] = []
        self._category_spent: Dict[str, float] = {}
        self._category_earned: Dict[str, float] = {}
        self._summary: Dict[str, SummaryItem] = {}
        self._primary: Optional[Currency] = None

    # ────────────────────────────────────────────────────────
    #  HTTP core
    # ────────────────────────────────────────────────────────

    def _request(self, method: str, path: str, *, params=None, payload=None, ok=(200,)) -> Any:
        url = f"{self.api_url}/{path.lstrip('/')}"
        log.debug("%s %s params=%s", method, url, params)
        try:
            resp = self.session.request(method, url, params=params, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            log.error("%s %s failed: %s", method, url, exc)
            raise FfiiiError(f"failed to send request: {exc}") from exc

        if resp.status_code not in ok:
            message = ""
            try:
                body = resp.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                message = str(body.get("message") or "")
            log.warning("%s %s returned %s: %s", method, url, resp.status_code, message)
            raise APIError(resp.status_code, message or http_error(resp.status_code))

        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise FfiiiError(f"invalid response body: {exc}") from exc

    def _paginated(self, path: str, params: Dict[str, Any]) -> List[dict]:
        """Collect ``data`` from every page of a list endpoint."""
        rows: List[dict] = []
        for page in range(1, MAX_PAGES + 1):
            body = self._request("GET", path, params={**params, "page": page}) or {}
            data = body.get("data") or []
            rows.extend(data)
            pagination = (body.get("meta") or {}).get("pagination") or {}
            total_pages = int(pagination.get("total_pages") or 0)
            if not data or (total_pages and page >= total_pages):
                break
        return rows

    def _period_params(self) -> Dict[str, str]:
        return {
            "start": self.start_date.strftime(DATE_FMT),
            "end": self.end_date.strftime(DATE_FMT),
        }

    def _ticket(self, resource: str) -> int:
        with self._lock:
            ticket = self._issued.get(resource, 0) + 1
            self._issued[resource] = ticket
            return ticket

    def _commit(self, resource: str, ticket: int, apply) -> bool:
        with self._lock:
            if ticket <= self._committed.get(resource, 0):
                log.debug("dropping stale %s result (ticket %d)", resource, ticket)
                return False
            self._committed[resource] = ticket
            apply()
            return True

    # ────────────────────────────────────────────────────────
    #  Period
    # ────────────────────────────────────────────────────────

    def period_start(self) -> date:
        return self.start_date

    def period_end(self) -> date:
        return self.end_date

    def set_period(self, year: int, month: int) -> None:
        self.start_date, self.end_date = month_bounds(year, month)
        log.info("period set to %s - %s", self.start_date, self.end_date)

    def previous_period(self) -> None:
        d = add_months(self.start_date, -1)
        self.set_period(d.year, d.month)

    def next_period(self) -> None:
        d = add_months(self.start_date, 1)
        self.set_period(d.year, d.month)

    def timeout_seconds(self) -> int:
        return self.timeout

    # ────────────────────────────────────────────────────────
    #  Currency
    # ────────────────────────────────────────────────────────

    def update_primary_currency(self) -> Currency:
        body = self._request("GET", "currencies/primary") or {}
        attrs = (body.get("data") or {}).get("attributes") or {}
        currency = Currency(
            code=attrs.get("code", ""),
            symbol=attrs.get("symbol", ""),
            decimal_places=int(attrs.get("decimal_places") or 2),
        )
        with self._lock:
            self._primary = currency
        return currency

    def primary_currency(self) -> Currency:
        with self._lock:
            return self._primary or Currency()

    def _ensure_primary_currency(self) -> None:
        if self._primary is None:
            self.update_primary_currency()

    # ────────────────────────────────────────────────────────
    #  Accounts
    # ────────────────────────────────────────────────────────

    def update_accounts(self, account_type: str) -> None:
        """Reload accounts of one type; expense and revenue insights follow."""
        self._ensure_primary_currency()
        resource = f"accounts:{account_type}"
        ticket = self._ticket(resource)
        rows = self._paginated("accounts", {"type": account_type})
        accounts = []
        for row in rows:
            attrs = row.get("attributes") or {}
            accounts.append(
                Account(
                    id=str(row.get("id", "")),
                    name=attrs.get("name", ""),
                    currency_code=attrs.get("currency_code") or "",
                    type=account_type,
                    liability_direction=attrs.get("liability_direction") or "",
                    balance=_float(attrs.get("current_balance")),
                )
            )
        log.info("loaded %d %s accounts", len(accounts), account_type)

        def apply():
            self._accounts[account_type] = accounts

        self._commit(resource, ticket, apply)
        if account_type == "expense":
            self.update_expense_insights()
        elif account_type == "revenue":
            self.update_revenue_insights()

    def accounts_by_type(self, account_type: str) -> List[Account]:
        with self._lock:
            return list(self._accounts.get(account_type, []))

    def account_balance(self, account_id: str) -> float:
        with self._lock:
            for accounts in self._accounts.values():
                for account in accounts:
                    if account.id == account_id:
                        return account.balance
        return 0.0

    def account_by_id(self, account_id: str) -> Optional[Account]:
        with self._lock:
            for accounts in self._accounts.values():
                for account in accounts:
                    if account.id == account_id:
                        return account
        return None

    def create_asset_account(self, name: str, currency_code: str) -> None:
        self._request(
            "POST",
            "accounts",
            payload={
                "name": name,
                "type": "asset",
                "currency_code": currency_code.upper(),
                "include_net_worth": True,
                "active": True,
                "account_role": "defaultAsset",
            },
            ok=(200, 201),
        )
        log.info("created asset account %s", name)

    def create_expense_account(self, name: str) -> None:
        self._request("POST", "accounts", payload={"name": name, "type": "expense"}, ok=(200, 201))
        log.info("created expense account %s", name)

    def create_revenue_account(self, name: str) -> None:
        self._request("POST", "accounts", payload={"name": name, "type": "revenue"}, ok=(200, 201))
        log.info("created revenue account %s", name)

    def create_liability_account(self, liability: NewLiability) -> None:
        liability_type = LIABILITY_TYPES.get(liability.type.lower(), liability.type.lower())
        self._request(
            "POST",
            "accounts",
            payload={
                "name": liability.name,
                "type": "liability",
                "currency_code": liability.currency_code.upper(),
                "liability_type": liability_type,
                "liability_direction": liability.direction.lower(),
                "active": True,
                "include_net_worth": True,
            },
            ok=(200, 201),
        )
        log.info("created liability account %s", liability.name)

    # ────────────────────────────────────────────────────────
    #  Insights
    # ────────────────────────────────────────────────────────

    def _insights(self, path: str) -> Dict[str, float]:
        body = self._request("GET", f"insight/{path}", params=self._period_params()) or []
        return {str(item.get("id", "")): _float(item.get("difference_float")) for item in body}

    def update_expense_insights(self) -> None:
        ticket = self._ticket("insight:expense")
        spent = {k: -v for k, v in self._insights("expense/expense").items()}

        def apply():
            self._expense_diff = spent

        self._commit("insight:expense", ticket, apply)

    def update_revenue_insights(self) -> None:
        ticket = self._ticket("insight:revenue")
        earned = self._insights("income/revenue")

        def apply():
            self._revenue_diff = earned

        self._commit("insight:revenue", ticket, apply)

    def expense_diff(self, account_id: str) -> float:
        with self._lock:
            return self._expense_diff.get(account_id, 0.0)

    def revenue_diff(self, account_id: str) -> float:
        with self._lock:
            return self._revenue_diff.get(account_id, 0.0)

    # ────────────────────────────────────────────────────────
    #  Categories
    # ────────────────────────────────────────────────────────

    def update_categories(self) -> None:
        self._ensure_primary_currency()
        ticket = self._ticket("categories")
        rows = self._paginated("categories", {})
        categories = [
            Category(
                id=str(row.get("id", "")),
                name=(row.get("attributes") or {}).get("name", ""),
                notes=(row.get("attributes") or {}).get("notes") or "",
            )
            for row in rows
        ]
        log.info("loaded %d categories", len(categories))

        def apply():
            self._categories = categories

        self._commit("categories", ticket, apply)
        self.update_category_insights()

    def update_category_insights(self) -> None:
        ticket = self._ticket("insight:category")
        spent = {k: -v for k, v in self._insights("expense/category").items()}
        earned = self._insights("income/category")

        def apply():
            self._category_spent = spent
            self._category_earned = earned

        self._commit("insight:category", ticket, apply)

    def categories_list(self) -> List[Category]:
        with self._lock:
            return list(self._categories)

    def category_spent(self, category_id: str) -> float:
        with self._lock:
            return self._category_spent.get(category_id, 0.0)

    def category_earned(self, category_id: str) -> float:
        with self._lock:
            return self._category_earned.get(category_id, 0.0)

    def create_category(self, name: str, notes: str = "") -> None:
        self._request("POST", "categories", payload={"name": name, "notes": notes}, ok=(200, 201))
        log.info("created category %s", name)

    # ────────────────────────────────────────────────────────
    #  Summary
    # ────────────────────────────────────────────────────────

    def update_summary(self) -> None:
        ticket = self._ticket("summary")
        body = self._request("GET", "summary/basic", params=self._period_params()) or {}
        items = {
            key: SummaryItem(
                key=key,
                title=raw.get("title", ""),
                monetary_value=_float(raw.get("monetary_value")),
                currency_code=raw.get("currency_code", ""),
                value_parsed=raw.get("value_parsed", ""),
            )
            for key, raw in body.items()
            if isinstance(raw, dict)
        }

        def apply():
            self._summary = items

        self._commit("summary", ticket, apply)

    def summary_items(self) -> Dict[str, SummaryItem]:
        with self._lock:
            return dict(self._summary)

    def summary_max_width(self) -> int:
        with self._lock:
            return max((len(s.title) + len(s.value_parsed) for s in self._summary.values()), default=0)

    # ────────────────────────────────────────────────────────
    #  Transactions
    # ────────────────────────────────────────────────────────

    def list_transactions(self, query: str = "") -> List[Transaction]:
        """Transactions of the current period, or server-side search results."""
        if query:
            rows = self._paginated("search/transactions", {"query": query, "limit": PAGE_LIMIT})
        else:
            rows = self._paginated("transactions", {**self._period_params(), "limit": PAGE_LIMIT})
        transactions = [self._parse_group(idx, row) for idx, row in enumerate(rows)]
        log.info("loaded %d transactions (query=%r)", len(transactions), query)
        return transactions

    @staticmethod
    def _parse_group(index: int, row: dict) -> Transaction:
        attrs = row.get("attributes") or {}
        splits = []
        for s in attrs.get("transactions") or []:
            splits.append(
                Split(
                    source=Account(
                        id=str(s.get("source_id") or ""),
                        name=s.get("source_name") or "",
                        currency_code=s.get("currency_code") or "",
                        type=normalize_account_type(s.get("source_type")),
                    ),
                    destination=Account(
                        id=str(s.get("destination_id") or ""),
                        name=s.get("destination_name") or "",
                        currency_code=s.get("currency_code") or "",
                        type=normalize_account_type(s.get("destination_type")),
                    ),
                    category=Category(
                        id=str(s.get("category_id") or ""),
                        name=s.get("category_name") or "",
                    ),
                    currency_code=s.get("currency_code") or "",
                    amount=_float(s.get("amount")),
                    foreign_currency_code=s.get("foreign_currency_code") or "",
                    foreign_amount=_float(s.get("foreign_amount")),
                    description=s.get("description") or "",
                    journal_id=str(s.get("transaction_journal_id") or ""),
                )
            )
        first = (attrs.get("transactions") or [{}])[0]
        return Transaction(
            id=index,
            transaction_id=str(row.get("id", "")),
            type=first.get("type") or "",
            date=(first.get("date") or "")[:10],
            group_title=attrs.get("group_title") or "",
            splits=tuple(splits),
        )

    def create_transaction(self, request: RequestTransaction) -> str:
        body = self._request("POST", "transactions", payload=request.to_payload(), ok=(200, 201)) or {}
        return str((body.get("data") or {}).get("id", ""))

    def update_transaction(self, transaction_id: str, request: RequestTransaction) -> str:
        body = self._request("PUT", f"transactions/{transaction_id}", payload=request.to_payload()) or {}
        return str((body.get("data") or {}).get("id", ""))

    def delete_transaction(self, transaction_id: str) -> None:
        self._request("DELETE", f"transactions/{transaction_id}", ok=(200, 204))
        log.info("deleted transaction %s", transaction_id)
