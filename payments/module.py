"""
PayPal payment module

Entry point the host platform talks to. It wires the dispatcher, the
eligibility checker and the configuration to the module database and
exposes the lifecycle hooks the host calls on activation/deactivation.
"""

from collections.abc import Callable

import structlog
from sqlalchemy.orm import Session

from core.audit import DatabaseAuditLogger
from core.config_store import DatabaseConfigStore
from core.dependencies import get_settings, init_settings
from core.logging import BusinessEvents
from core.metrics import init_metrics
from core.settings import Settings
from core.tracing import init_tracer
from db.models import Base
from db.session import SessionLocal, SessionTransactionalScope, get_engine
from payments.configuration import ConfigurationService, change_payment_enabled
from payments.dispatcher import PaymentDispatcher
from payments.eligibility import EligibilityChecker
from payments.models import CheckoutContext, Order, RedirectTarget
from payments.module_conf import (
    CART_ITEM_COUNT,
    MAXIMUM_AMOUNT,
    MINIMUM_AMOUNT,
    PayPalModuleConfProvider,
    is_payment_enabled,
)
from payments.paypal_client import PayPalClient
from payments.ports import (
    ConfigStore,
    OrderLinkResolver,
    OrderStatusUpdater,
    PaymentProviderClient,
)
from payments.repositories import (
    DatabaseCartRepository,
    DatabasePlanRepository,
    DatabaseTransactionRecorder,
    payment_id_for_order,
)
from payments.urls import StoreUrls

log = structlog.get_logger(__name__)


class PayPalModule:
    def __init__(
        self,
        settings: Settings | None,
        status_updater: OrderStatusUpdater,
        session_factory: Callable[[], Session] | None = None,
        config: ConfigStore | None = None,
        provider: PaymentProviderClient | None = None,
        link_resolver: OrderLinkResolver | None = None,
    ):
        self.settings = settings if settings is not None else get_settings()
        self.status_updater = status_updater
        if session_factory is None:
            SessionLocal.configure(bind=get_engine(self.settings))
            session_factory = SessionLocal
        self.session_factory = session_factory
        self.config = config or DatabaseConfigStore(session_factory)
        self.urls = StoreUrls(self.settings.STORE_URL)
        self.link_resolver = link_resolver
        self._provider = provider

    def conf_provider(self) -> PayPalModuleConfProvider:
        return PayPalModuleConfProvider(
            self.config,
            fallback_client_id=self.settings.PAYPAL_CLIENT_ID,
            fallback_secret=self.settings.PAYPAL_SECRET,
        )

    @property
    def provider(self) -> PaymentProviderClient:
        # Built lazily so credential changes made in the admin are picked up
        if self._provider is None:
            self._provider = PayPalClient(self.conf_provider().get_data(), self.urls)
        return self._provider

    def pay(self, order: Order) -> RedirectTarget:
        """Dispatch the order to PayPal; see PaymentDispatcher.dispatch."""
        with self.session_factory() as session:
            dispatcher = PaymentDispatcher(
                provider=self.provider,
                scope=SessionTransactionalScope(session),
                status_updater=self.status_updater,
                audit=DatabaseAuditLogger(self.session_factory, session),
                plans=DatabasePlanRepository(session),
                urls=self.urls,
                recorder=DatabaseTransactionRecorder(session),
                carts=DatabaseCartRepository(session),
            )
            return dispatcher.dispatch(order)

    def is_valid_payment(self, context: CheckoutContext) -> bool:
        return EligibilityChecker(self.config, self.link_resolver).is_eligible(context)

    def manage_stock_on_creation(self) -> bool:
        # Stock is decreased when the order switches to paid
        return False

    def post_activation(self) -> None:
        with self.session_factory() as session:
            Base.metadata.create_all(session.get_bind())

        # Defaults on first install only
        if self.config.get(MINIMUM_AMOUNT, None) is None:
            self.config.set(MINIMUM_AMOUNT, 0)
            self.config.set(MAXIMUM_AMOUNT, 0)
            self.config.set("send_payment_confirmation_message", 1)
            self.config.set(CART_ITEM_COUNT, 999)

        log.info(BusinessEvents.MODULE_ACTIVATED)

    def post_deactivation(self) -> None:
        self.change_payment_enabled(False)
        log.info(BusinessEvents.MODULE_DEACTIVATED)

    def is_payment_enabled(self) -> bool:
        return is_payment_enabled(self.config)

    def change_payment_enabled(self, enabled: bool) -> None:
        change_payment_enabled(self.config, enabled)

    def configure(self, data: dict) -> str:
        return ConfigurationService(self.config).apply(data)

    def get_transaction_for_order(self, order_id: int) -> str:
        with self.session_factory() as session:
            return payment_id_for_order(session, order_id)


def create_module(
    status_updater: OrderStatusUpdater, settings: Settings | None = None
) -> PayPalModule:
    """Host startup: load settings, set up metrics and tracing, build the module."""
    settings = init_settings(settings)
    init_metrics(settings.METRICS_ENABLED)
    init_tracer(settings.OTEL_SERVICE_NAME, settings.OTEL_EXPORTER_OTLP_ENDPOINT)
    return PayPalModule(settings=settings, status_updater=status_updater)
