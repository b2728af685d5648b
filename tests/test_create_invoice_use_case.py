from __future__ import annotations

from datetime import timedelta

import pytest

from account_service.application.dto.billing import CreateInvoiceInput
from account_service.application.use_cases.create_invoice import CreateInvoiceUseCase, OrderIdGenerator
from account_service.domain.exceptions import InvalidAmountError, PaymentProviderError, UserNotFoundError
from tests.fakes import FakeAccountStore, FakePaymentGateway, make_user


def _use_case(store, gateway, clock=None) -> CreateInvoiceUseCase:
    return CreateInvoiceUseCase(
        accounts_port=store,
        ledger_port=store,
        payment_gateway=gateway,
        order_ids=OrderIdGenerator(clock=clock or (lambda: 1_700_000_000_000_000_000)),
    )


def test_create_invoice_inits_provider_payment_and_stores_new_row():
    store = FakeAccountStore()
    store.add_user(make_user())
    gateway = FakePaymentGateway()

    output = _use_case(store, gateway).execute(CreateInvoiceInput(user_id="user-1", amount=15000))

    assert output.payment_id == "555001"
    assert output.payment_url == "https://securepay.tinkoff.ru/new/abc"
    payment = store.payments["555001"]
    assert payment.status == "NEW"
    assert payment.amount == 15000
    assert payment.user_id == "user-1"

    [request] = gateway.requests
    assert request.amount == 15000
    assert request.customer_key == "Ivanov Ivan"
    assert request.email == "ivan@example.com"
    assert request.redirect_due_date - payment.created_at == timedelta(days=4)


def test_provider_failure_leaves_no_payment_row():
    store = FakeAccountStore()
    store.add_user(make_user())

    with pytest.raises(PaymentProviderError):
        _use_case(store, FakePaymentGateway(fail=True)).execute(CreateInvoiceInput(user_id="user-1", amount=100))

    assert store.payments == {}


@pytest.mark.parametrize("amount", [0, -100])
def test_non_positive_amount_is_rejected_before_calling_provider(amount: int):
    store = FakeAccountStore()
    store.add_user(make_user())
    gateway = FakePaymentGateway()

    with pytest.raises(InvalidAmountError):
        _use_case(store, gateway).execute(CreateInvoiceInput(user_id="user-1", amount=amount))
    assert gateway.requests == []


def test_unknown_user_cannot_create_invoice():
    with pytest.raises(UserNotFoundError):
        _use_case(FakeAccountStore(), FakePaymentGateway()).execute(CreateInvoiceInput(user_id="ghost", amount=100))


def test_order_ids_strictly_increase_even_when_clock_stalls():
    generator = OrderIdGenerator(clock=lambda: 1_000)

    ids = [int(generator.next_id()) for _ in range(5)]

    assert ids == [1_000, 1_001, 1_002, 1_003, 1_004]


def test_order_ids_follow_the_clock_when_it_moves_forward():
    ticks = iter([10, 50, 20, 60])
    generator = OrderIdGenerator(clock=lambda: next(ticks))

    assert [generator.next_id() for _ in range(4)] == ["10", "50", "51", "60"]
