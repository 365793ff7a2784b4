"""
End-to-end tests of the module facade against an in-memory database.
"""

import logging
from decimal import Decimal
from unittest.mock import patch

import pytest

from core.audit import entries_for_order
from core.config_store import DatabaseConfigStore
from core.dependencies import clear_settings, get_settings
from core.metrics import dispatch_total, init_metrics, record_dispatch
from db.models import PaypalCart, PaypalLog, PaypalOrder, PaypalPlanifiedPayment
from db.session import reset_engines
from payments.errors import (
    ConnectionFailed,
    PayPalConnectionError,
    Refused,
    Unexpected,
)
from payments.models import (
    CartSnapshot,
    CheckoutContext,
    OrderStatus,
    PaymentMethod,
    ProviderResponse,
)
from payments.module import PayPalModule, create_module
from payments.ports import EventStatusUpdater, OrderStatusEvent
from tests.conftest import APPROVAL_URL, STORE_URL


@pytest.fixture
def events():
    return []


@pytest.fixture
def module(mock_settings, session_factory, provider, events):
    return PayPalModule(
        settings=mock_settings,
        status_updater=EventStatusUpdater(events.append),
        session_factory=session_factory,
        provider=provider,
    )


@pytest.fixture
def card_cart(test_db_session, order):
    test_db_session.add(PaypalCart(id=order.cart_id, credit_card_id="CARD-77"))
    test_db_session.commit()


@pytest.fixture
def plan_cart(test_db_session, order):
    plan = PaypalPlanifiedPayment(
        id=3, title="Monthly", frequency="MONTH", frequency_interval=1, cycle=3
    )
    test_db_session.add(plan)
    test_db_session.add(PaypalCart(id=order.cart_id, planified_payment_id=3))
    test_db_session.commit()


def test_pay_with_stored_card(module, provider, events, test_db_session, order, card_cart):
    target = module.pay(order)

    provider.charge.assert_called_once_with(order, "CARD-77")
    assert target.url == f"{STORE_URL}/order/placed/{order.id}"
    assert events == [OrderStatusEvent(order_id=order.id, status=OrderStatus.paid)]

    recorded = test_db_session.get(PaypalOrder, order.id)
    assert recorded.method == PaymentMethod.credit_card.value
    assert recorded.state == "approved"
    assert recorded.payment_id == "PAY-CARD-1"
    assert recorded.amount == Decimal("50.00")

    entries = entries_for_order(test_db_session, order.id)
    assert len(entries) == 1
    assert entries[0].level == logging.INFO
    assert entries[0].customer_id == order.customer_id
    assert module.get_transaction_for_order(order.id) == "PAY-CARD-1"


def test_pay_with_plan_records_agreement(module, provider, test_db_session, order, plan_cart):
    target = module.pay(order)

    assert target.url == APPROVAL_URL
    plan = provider.create_agreement.call_args.args[1]
    assert plan.title == "Monthly"
    assert plan.cycle == 3

    recorded = test_db_session.get(PaypalOrder, order.id)
    assert recorded.agreement_id == "EC-AGR-1"
    assert recorded.planified_title == "Monthly"
    assert recorded.payment_id is None
    assert module.get_transaction_for_order(order.id) == ""


def test_pay_without_paypal_cart_redirects(module, provider, events, order):
    target = module.pay(order)

    provider.create_checkout_session.assert_called_once_with(order)
    assert target.url == APPROVAL_URL
    assert events == []
    assert module.get_transaction_for_order(order.id) == "PAY-REDIRECT-1"


def test_refused_card_keeps_audit_entry_only(
    module, provider, events, test_db_session, order, card_cart
):
    provider.charge.return_value = ProviderResponse(state="failed", reference="PAY-X")

    with pytest.raises(Refused):
        module.pay(order)

    assert events == []
    assert test_db_session.get(PaypalOrder, order.id) is None

    entries = entries_for_order(test_db_session, order.id)
    assert [(e.level, e.message) for e in entries] == [
        (logging.CRITICAL, "Order failed with method : credit_card")
    ]


def test_connection_failure_is_audited(module, provider, test_db_session, order, plan_cart):
    provider.create_agreement.side_effect = PayPalConnectionError(
        "https://api.sandbox.paypal.com/v1/payments/billing-agreements",
        '{"plan": {"id": "P-1"}}',
        "Connection reset by peer",
    )

    with pytest.raises(ConnectionFailed):
        module.pay(order)

    assert test_db_session.get(PaypalOrder, order.id) is None
    entry = test_db_session.query(PaypalLog).one()
    assert entry.level == logging.CRITICAL
    assert entry.message.startswith(
        "url : https://api.sandbox.paypal.com/v1/payments/billing-agreements."
    )
    assert "Connection reset by peer" in entry.message


def test_post_activation_seeds_defaults_once(module, session_factory):
    module.post_activation()

    config = DatabaseConfigStore(session_factory)
    assert config.get("minimum_amount") == "0"
    assert config.get("maximum_amount") == "0"
    assert config.get("send_payment_confirmation_message") == "1"
    assert config.get("cart_item_count") == "999"

    config.set("cart_item_count", 5)
    module.post_activation()
    assert config.get("cart_item_count") == "5"


def test_activation_toggles(module):
    module.change_payment_enabled(True)
    assert module.is_payment_enabled() is True

    module.post_deactivation()
    assert module.is_payment_enabled() is False


def test_is_valid_payment_uses_module_config(module):
    module.configure(
        {
            "paypal_payment_enabled": True,
            "sandbox": False,
            "minimum_amount": "10",
            "maximum_amount": "100",
            "cart_item_count": 9,
        }
    )
    context = CheckoutContext(
        client_ip="203.0.113.10",
        cart=CartSnapshot(total=Decimal("50"), item_count=3),
    )
    assert module.is_valid_payment(context) is True

    module.post_deactivation()
    assert module.is_valid_payment(context) is False


def test_manage_stock_on_creation(module):
    assert module.manage_stock_on_creation() is False


def test_provider_built_from_module_config(mock_settings, session_factory):
    module = PayPalModule(
        settings=mock_settings,
        status_updater=EventStatusUpdater(lambda event: None),
        session_factory=session_factory,
    )
    module.config.set("login", "merchant-login")
    module.config.set("sandbox", False)

    client = module.provider

    assert client.api.client_id == "merchant-login"
    assert client.api.client_secret == "test_secret"
    assert "sandbox" not in client.api.endpoint


@patch("payments.module.init_tracer")
def test_create_module_from_environment(mock_init_tracer, monkeypatch):
    monkeypatch.setenv("OTEL_SERVICE_NAME", "shop-paypal")
    reset_engines()
    try:
        module = create_module(EventStatusUpdater(lambda event: None))

        assert get_settings().STORE_URL == STORE_URL
        assert module.settings is get_settings()
        mock_init_tracer.assert_called_once_with("shop-paypal", "http://localhost:4317")

        module.post_activation()
        assert module.config.get("cart_item_count") == "999"
    finally:
        clear_settings()
        reset_engines()


def test_failing_cart_lookup_is_audited(module, provider, test_db_session, order):
    with patch(
        "payments.repositories.find_cart_payment_ref",
        side_effect=RuntimeError("no such table: paypal_cart"),
    ):
        with pytest.raises(Unexpected, match="no such table"):
            module.pay(order)

    provider.create_checkout_session.assert_not_called()
    entry = test_db_session.query(PaypalLog).one()
    assert entry.order_id == order.id
    assert entry.level == logging.CRITICAL
    assert entry.message == "no such table: paypal_cart"


@patch("payments.module.init_tracer")
def test_create_module_applies_metrics_switch(mock_init_tracer, monkeypatch):
    monkeypatch.setenv("METRICS_ENABLED", "false")
    reset_engines()
    metric = dispatch_total.labels(flow="paypal", result="success")
    try:
        create_module(EventStatusUpdater(lambda event: None))
        initial = metric._value.get()

        record_dispatch("paypal", "success")

        assert metric._value.get() == initial
    finally:
        init_metrics(True)
        clear_settings()
        reset_engines()
