import pytest

from tests.helpers import FakeAPI, liability, messages, press
from ffiii_tui import liabilities
from ffiii_tui.commands import Emit, Sequence
from ffiii_tui.messages import LIABILITIES, CreationRejected, EntityCreated, LiabilitiesUpdated, SetFocusedView, View
from ffiii_tui.models import NewLiability
from ffiii_tui.notify import Level, Notify


def test_debit_liability_is_negated():
    item = liabilities.liability_item(liability("1", "Car loan", "debit"), 120.0)

    assert item.value == pytest.approx(-120.0)
    assert item.description == "We owe: -120.00 USD"


def test_credit_liability_keeps_sign():
    item = liabilities.liability_item(liability("1", "Friend", "credit"), 120.0)

    assert item.value == pytest.approx(120.0)
    assert item.description == "They owe us: 120.00 USD"


def test_total_respects_direction():
    api = FakeAPI()
    api.add_account(liability("1", "Mortgage", "debit"), 1000.0)
    api.add_account(liability("2", "Friend", "credit"), 250.0)
    model = liabilities.new_liabilities_model(api)

    model.update(LiabilitiesUpdated())

    total = model.list.items[0]
    assert total.is_total
    assert total.value == pytest.approx(-750.0)
    assert total.description == "Balance: -750.00 USD"
    assert sum(i.value for i in model.list.items[1:]) == pytest.approx(total.value)


def test_create_liability_continuation():
    back = Emit(SetFocusedView(View.LIABILITIES))
    cont = liabilities.CreateLiability(back)

    cmd = cont.resolve("Car, usd, loan, debit")

    expected = liabilities.NewLiabilityRequest(NewLiability("Car", "usd", "loan", "debit"))
    assert cmd == Sequence((Emit(expected), back))


@pytest.mark.parametrize("value", ["Car", "Car,usd", "Car,usd,loan", "a,b,c,d,e"])
def test_create_liability_rejects_wrong_field_count(value):
    back = Emit(SetFocusedView(View.LIABILITIES))

    cmd = liabilities.CreateLiability(back).resolve(value)

    assert messages(cmd) == [
        Notify("Invalid liability request", Level.WARN),
        CreationRejected(LIABILITIES, value),
        SetFocusedView(View.LIABILITIES),
    ]


def test_create_liability_cancelled():
    back = Emit(SetFocusedView(View.LIABILITIES))

    assert liabilities.CreateLiability(back).resolve("None") == back


def test_create_liability_calls_api():
    api = FakeAPI()
    model = liabilities.new_liabilities_model(api)
    request = liabilities.NewLiabilityRequest(NewLiability("Car", "USD", "mortage", "debit"))

    assert model.update(request)() == EntityCreated("liabilities", "Car")
    assert api.called("create_liability_account") == [(request.liability,)]


def test_rejected_input_prefills_next_prompt():
    model = liabilities.new_liabilities_model(FakeAPI())
    model.focus()
    back = Emit(SetFocusedView(View.LIABILITIES))

    for msg in messages(liabilities.CreateLiability(back).resolve("Car, usd")):
        model.update(msg)

    reopened = press(model, "n")
    assert reopened.msg.value == "Car, usd"
    assert press(model, "n").msg.value == ""


def test_rejection_for_other_list_is_ignored():
    model = liabilities.new_liabilities_model(FakeAPI())
    model.focus()

    model.update(CreationRejected("assets", "Wallet"))

    assert press(model, "n").msg.value == ""
