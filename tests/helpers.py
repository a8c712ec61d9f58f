import curses
import sys
from datetime import date
from pathlib import Path

# Ensure the project root is on the Python path
sys.path.append(str(Path(__file__).resolve().parents[1]))

from ffiii_tui.commands import Batch, Call, Emit, Sequence, Tick
from ffiii_tui.errors import APIError
from ffiii_tui.messages import Key
from ffiii_tui.models import Account, Category, Currency, SummaryItem
from ffiii_tui.period import add_months, month_bounds


class FakeAPI:
    """In-memory stand-in for :class:`ffiii_tui.firefly.FireflyClient`.

    ``fail`` maps a method name to the error it raises; every call is
    recorded in ``calls`` as ``(name, args)``.
    """

    def __init__(self, today=date(2024, 3, 15)):
        self.calls = []
        self.fail = {}
        self.accounts = {}
        self.balances = {}
        self.expense = {}
        self.revenue = {}
        self.categories = []
        self.spent = {}
        self.earned = {}
        self.summary = {}
        self.transactions = []
        self.search_results = []
        self.currency = Currency("USD", "$", 2)
        self.timeout = 10
        self.start, self.end = month_bounds(today.year, today.month)

    def _record(self, name, *args):
        self.calls.append((name, args))
        if name in self.fail:
            raise self.fail[name]

    def called(self, name):
        return [args for n, args in self.calls if n == name]

    # period

    def period_start(self):
        return self.start

    def period_end(self):
        return self.end

    def set_period(self, year, month):
        self._record("set_period", year, month)
        self.start, self.end = month_bounds(year, month)

    def previous_period(self):
        d = add_months(self.start, -1)
        self.set_period(d.year, d.month)

    def next_period(self):
        d = add_months(self.start, 1)
        self.set_period(d.year, d.month)

    def timeout_seconds(self):
        return self.timeout

    def primary_currency(self):
        return self.currency

    # accounts

    def add_account(self, account, balance=0.0):
        self.accounts.setdefault(account.type, []).append(account)
        self.balances[account.id] = balance
        return account

    def update_accounts(self, account_type):
        self._record("update_accounts", account_type)

    def accounts_by_type(self, account_type):
        return list(self.accounts.get(account_type, []))

    def account_balance(self, account_id):
        return self.balances.get(account_id, 0.0)

    def update_expense_insights(self):
        self._record("update_expense_insights")

    def update_revenue_insights(self):
        self._record("update_revenue_insights")

    def expense_diff(self, account_id):
        return self.expense.get(account_id, 0.0)

    def revenue_diff(self, account_id):
        return self.revenue.get(account_id, 0.0)

    def create_asset_account(self, name, currency_code):
        self._record("create_asset_account", name, currency_code)

    def create_expense_account(self, name):
        self._record("create_expense_account", name)

    def create_revenue_account(self, name):
        self._record("create_revenue_account", name)

    def create_liability_account(self, liability):
        self._record("create_liability_account", liability)

    # categories

    def update_categories(self):
        self._record("update_categories")

    def update_category_insights(self):
        self._record("update_category_insights")

    def categories_list(self):
        return list(self.categories)

    def category_spent(self, category_id):
        return self.spent.get(category_id, 0.0)

    def category_earned(self, category_id):
        return self.earned.get(category_id, 0.0)

    def create_category(self, name, notes=""):
        self._record("create_category", name, notes)

    # summary

    def update_summary(self):
        self._record("update_summary")

    def summary_items(self):
        return dict(self.summary)

    # transactions

    def list_transactions(self, query=""):
        self._record("list_transactions", query)
        if query:
            return list(self.search_results)
        return list(self.transactions)

    def create_transaction(self, request):
        self._record("create_transaction", request)
        return "100"

    def update_transaction(self, transaction_id, request):
        self._record("update_transaction", transaction_id, request)
        return transaction_id

    def delete_transaction(self, transaction_id):
        self._record("delete_transaction", transaction_id)


def api_error(message="boom", status=500):
    return APIError(status, message)


def asset(id, name, currency="USD"):
    return Account(id=id, name=name, currency_code=currency, type="asset")


def expense(id, name, currency="USD"):
    return Account(id=id, name=name, currency_code=currency, type="expense")


def revenue(id, name, currency="USD"):
    return Account(id=id, name=name, currency_code=currency, type="revenue")


def liability(id, name, direction="credit", currency="USD"):
    return Account(id=id, name=name, currency_code=currency, type="liabilities", liability_direction=direction)


def category(id, name):
    return Category(id=id, name=name)


def summary_item(key, title, value, parsed):
    return SummaryItem(key=key, title=title, monetary_value=value, currency_code="USD", value_parsed=parsed)


def leaves(cmd):
    """Leaf commands of ``cmd`` in declaration order."""
    if cmd is None:
        return []
    if isinstance(cmd, (Batch, Sequence)):
        out = []
        for member in cmd.cmds:
            out.extend(leaves(member))
        return out
    return [cmd]


def messages(cmd):
    """Messages produced by running every leaf of ``cmd`` without sleeping."""
    out = []
    for leaf in leaves(cmd):
        if isinstance(leaf, Tick):
            out.append(leaf.msg)
        else:
            out.append(leaf())
    return out


def emitted(cmd):
    """Messages of the ``Emit`` leaves only; ``Call`` leaves are not run."""
    return [leaf.msg for leaf in leaves(cmd) if isinstance(leaf, Emit)]


def calls(cmd):
    return [leaf for leaf in leaves(cmd) if isinstance(leaf, Call)]


def press(model, *names):
    """Feed keys to ``model`` and return the last command."""
    cmd = None
    for name in names:
        cmd = model.update(Key(name))
    return cmd


class FakeStdScr:
    """Records ``addnstr`` calls; enough of a curses window for drawing."""

    def __init__(self, height=24, width=80, keys=()):
        self.height = height
        self.width = width
        self.lines = {}
        self.keys = list(keys)
        self.delay = None

    def getmaxyx(self):
        return (self.height, self.width)

    def erase(self):
        self.lines = {}

    def addnstr(self, y, x, text, n, attr=0):
        row = self.lines.get(y, "")
        row = row.ljust(x)
        self.lines[y] = row[:x] + text[:n] + row[x + n :]

    def refresh(self):
        pass

    def move(self, y, x):
        pass

    def keypad(self, flag):
        pass

    def timeout(self, ms):
        self.delay = ms

    def get_wch(self):
        if not self.keys:
            raise curses.error("no input")
        return self.keys.pop(0)

    def text(self):
        return "\n".join(self.lines.get(y, "") for y in range(self.height))
