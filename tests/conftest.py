"""Test configuration and fixtures."""

import os
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.config_store import MemoryConfigStore
from core.settings import Settings
from db.models import Base
from payments.dispatcher import PaymentDispatcher
from payments.models import Order, PlanDefinition, ProviderResponse
from payments.urls import StoreUrls

STORE_URL = "https://shop.test"
APPROVAL_URL = "https://www.sandbox.paypal.com/cgi-bin/webscr?cmd=_express-checkout&token=EC-123"


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Setup test environment variables before each test."""
    original_env = dict(os.environ)

    os.environ.update(
        {
            "DATABASE_URL": "sqlite:///:memory:",
            "PAYPAL_CLIENT_ID": "test_client_id",
            "PAYPAL_SECRET": "test_secret",
            "STORE_URL": STORE_URL,
            "ENVIRONMENT": "development",
            "DISABLE_TRACING": "true",
        }
    )

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def mock_settings():
    return Settings(
        DATABASE_URL="sqlite:///:memory:",
        PAYPAL_CLIENT_ID="test_client_id",
        PAYPAL_SECRET="test_secret",
        STORE_URL=STORE_URL,
        ENVIRONMENT="development",
    )


@pytest.fixture
def test_db_engine():
    """In-memory database shared by every session of a test."""
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(test_db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_db_engine)


@pytest.fixture
def test_db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def order():
    return Order(
        id=42,
        customer_id=7,
        total=Decimal("50.00"),
        cart_id=1001,
        reference="ORD000042",
    )


@pytest.fixture
def monthly_plan():
    return PlanDefinition(
        id=3,
        title="Monthly",
        description="Pay in 3 months",
        frequency="MONTH",
        frequency_interval=1,
        cycle=3,
    )


class FakePlanRepository:
    def __init__(self, plans=None):
        self.plans = {plan.id: plan for plan in plans or []}

    def find(self, plan_id):
        return self.plans.get(plan_id)


@pytest.fixture
def plans(monthly_plan):
    return FakePlanRepository([monthly_plan])


@pytest.fixture
def provider():
    """Provider client answering like a healthy sandbox."""
    client = MagicMock()
    client.charge.return_value = ProviderResponse(state="approved", reference="PAY-CARD-1")
    client.create_agreement.return_value = ProviderResponse(
        state="created", reference="EC-AGR-1", approval_link=APPROVAL_URL
    )
    client.create_checkout_session.return_value = ProviderResponse(
        state="created", reference="PAY-REDIRECT-1", approval_link=APPROVAL_URL
    )
    return client


@pytest.fixture
def scope():
    return MagicMock()


@pytest.fixture
def status_updater():
    return MagicMock()


@pytest.fixture
def audit():
    return MagicMock()


@pytest.fixture
def dispatcher(provider, scope, status_updater, audit, plans):
    return PaymentDispatcher(
        provider=provider,
        scope=scope,
        status_updater=status_updater,
        audit=audit,
        plans=plans,
        urls=StoreUrls(STORE_URL),
    )


@pytest.fixture
def config():
    return MemoryConfigStore(
        {
            "paypal_payment_enabled": True,
            "sandbox": False,
            "minimum_amount": 0,
            "maximum_amount": 0,
            "cart_item_count": 9,
        }
    )
