from datetime import date

import pytest
import requests

from ffiii_tui.errors import APIError, FfiiiError
from ffiii_tui.firefly import FireflyClient
from ffiii_tui.models import NewLiability, RequestSplit, RequestTransaction


class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body
        self.content = b"" if body is None else b"{}"

    def json(self):
        if self._body is None:
            raise ValueError("no body")
        return self._body


class FakeSession:
    """Answers requests from a ``{(method, path): response}`` table."""

    def __init__(self, routes=None):
        self.headers = {}
        self.routes = routes or {}
        self.requests = []

    def request(self, method, url, params=None, json=None, timeout=None):
        path = url.split("/api/v1/", 1)[1]
        self.requests.append((method, path, params, json))
        route = self.routes.get((method, path))
        if isinstance(route, Exception):
            raise route
        if isinstance(route, list):
            return route.pop(0)
        return route or FakeResponse(200, {"data": []})


def make_client(routes=None):
    session = FakeSession(routes)
    client = FireflyClient("http://firefly/api/v1/", "token", session=session, today=date(2024, 3, 15))
    return client, session


def currency_route():
    return FakeResponse(200, {"data": {"attributes": {"code": "USD", "symbol": "$", "decimal_places": 2}}})


def test_session_headers_and_period():
    client, session = make_client()

    assert session.headers["Authorization"] == "Bearer token"
    assert session.headers["Accept"] == "application/json"
    assert client.period_start() == date(2024, 3, 1)
    assert client.period_end() == date(2024, 3, 31)
    client.previous_period()
    assert client.period_start() == date(2024, 2, 1)
    assert client.period_end() == date(2024, 2, 29)


def test_accounts_are_paginated():
    pages = [
        FakeResponse(200, {
            "data": [{"id": "1", "attributes": {"name": "Checking", "currency_code": "USD", "current_balance": "10.5"}}],
            "meta": {"pagination": {"total_pages": 2}},
        }),
        FakeResponse(200, {
            "data": [{"id": "2", "attributes": {"name": "Savings", "currency_code": "EUR", "current_balance": "20"}}],
            "meta": {"pagination": {"total_pages": 2}},
        }),
    ]
    client, session = make_client({("GET", "accounts"): pages, ("GET", "currencies/primary"): currency_route()})

    client.update_accounts("asset")

    assert [a.name for a in client.accounts_by_type("asset")] == ["Checking", "Savings"]
    assert client.account_balance("1") == pytest.approx(10.5)
    assert client.primary_currency().code == "USD"
    pages_requested = [p["page"] for m, path, p, _ in session.requests if path == "accounts"]
    assert pages_requested == [1, 2]


def test_expense_accounts_load_insights():
    insights = FakeResponse(200, [{"id": "5", "difference_float": -42.5}])
    client, session = make_client({
        ("GET", "currencies/primary"): currency_route(),
        ("GET", "insight/expense/expense"): insights,
    })

    client.update_accounts("expense")

    assert client.expense_diff("5") == pytest.approx(42.5)
    params = [p for m, path, p, _ in session.requests if path == "insight/expense/expense"][0]
    assert params == {"start": "2024-03-01", "end": "2024-03-31"}


def test_api_error_uses_server_message():
    client, _ = make_client({("GET", "summary/basic"): FakeResponse(401, {"message": "Unauthenticated."})})

    with pytest.raises(APIError) as exc:
        client.update_summary()

    assert exc.value.status == 401
    assert str(exc.value) == "Unauthenticated."


def test_api_error_without_body():
    client, _ = make_client({("DELETE", "transactions/9"): FakeResponse(500)})

    with pytest.raises(APIError, match="HTTP error: 500"):
        client.delete_transaction("9")


def test_network_failure_is_ffiii_error():
    client, _ = make_client({("GET", "categories"): requests.ConnectionError("refused")})
    client._primary = client.primary_currency()

    with pytest.raises(FfiiiError, match="failed to send request"):
        client.update_categories()


def test_stale_commit_is_dropped():
    client, _ = make_client()
    old = client._ticket("summary")
    new = client._ticket("summary")

    assert client._commit("summary", new, lambda: None)
    assert not client._commit("summary", old, lambda: None)


def test_summary_parsing():
    body = {
        "balance-in-USD": {
            "title": "Balance (USD)",
            "monetary_value": "1200.5",
            "currency_code": "USD",
            "value_parsed": "$1,200.50",
        },
        "ignored": "x",
    }
    client, _ = make_client({("GET", "summary/basic"): FakeResponse(200, body)})

    client.update_summary()

    items = client.summary_items()
    assert list(items) == ["balance-in-USD"]
    assert items["balance-in-USD"].monetary_value == pytest.approx(1200.5)
    assert client.summary_max_width() == len("Balance (USD)") + len("$1,200.50")


def test_transactions_parse_splits():
    body = {
        "data": [
            {
                "id": "77",
                "attributes": {
                    "group_title": "Trip",
                    "transactions": [
                        {
                            "type": "withdrawal",
                            "date": "2024-03-04T12:00:00+00:00",
                            "source_id": "1",
                            "source_name": "Checking",
                            "source_type": "Asset account",
                            "destination_id": "9",
                            "destination_name": "Hotel",
                            "destination_type": "Expense account",
                            "category_id": "3",
                            "category_name": "Travel",
                            "currency_code": "USD",
                            "amount": "120.00",
                            "description": "Hotel night",
                            "transaction_journal_id": "501",
                        }
                    ],
                },
            }
        ],
        "meta": {"pagination": {"total_pages": 1}},
    }
    client, session = make_client({("GET", "transactions"): FakeResponse(200, body)})

    (trx,) = client.list_transactions()

    assert trx.transaction_id == "77"
    assert trx.date == "2024-03-04"
    assert trx.group_title == "Trip"
    split = trx.splits[0]
    assert split.source.type == "asset"
    assert split.destination.type == "expense"
    assert split.amount == pytest.approx(120.0)
    assert split.journal_id == "501"
    assert session.requests[0][2]["limit"] == 100


def test_search_uses_search_endpoint():
    client, session = make_client()

    client.list_transactions("hotel")

    method, path, params, _ = session.requests[0]
    assert path == "search/transactions"
    assert params["query"] == "hotel"


def test_create_liability_maps_misspelled_type():
    client, session = make_client({("POST", "accounts"): FakeResponse(201, {"data": {"id": "3"}})})

    client.create_liability_account(NewLiability("House", "usd", "mortage", "Debit"))

    payload = session.requests[0][3]
    assert payload["type"] == "liability"
    assert payload["liability_type"] == "mortgage"
    assert payload["liability_direction"] == "debit"
    assert payload["currency_code"] == "USD"


def test_create_and_update_transaction_payload():
    routes = {
        ("POST", "transactions"): FakeResponse(200, {"data": {"id": "12"}}),
        ("PUT", "transactions/12"): FakeResponse(200, {"data": {"id": "12"}}),
    }
    client, session = make_client(routes)
    request = RequestTransaction(
        group_title="",
        splits=[RequestSplit("withdrawal", "2024-03-02", 5.0, "Coffee", "1", "9", currency_code="USD", journal_id="44")],
    )

    assert client.create_transaction(request) == "12"
    assert client.update_transaction("12", request) == "12"

    payload = session.requests[0][3]
    assert payload["apply_rules"] is True
    assert payload["transactions"][0]["amount"] == "5.00"
    assert payload["transactions"][0]["transaction_journal_id"] == "44"
    assert session.requests[1][0] == "PUT"
