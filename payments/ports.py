"""
Collaborator interfaces the dispatcher and eligibility checker depend on.

Concrete implementations live next to their concern: the PayPal SDK client
in payments.paypal_client, the audit sink in core.audit, configuration in
core.config_store and the transaction scope in db.session.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from payments.models import (
    CartPaymentRef,
    LinkedOrder,
    Order,
    OrderStatus,
    PaymentIntent,
    PaymentOutcome,
    PlanDefinition,
    ProviderResponse,
)


class PaymentProviderClient(Protocol):
    def charge(self, order: Order, token: str) -> ProviderResponse: ...

    def create_agreement(
        self, order: Order, plan: PlanDefinition
    ) -> ProviderResponse: ...

    def create_checkout_session(self, order: Order) -> ProviderResponse: ...


@dataclass(frozen=True)
class OrderStatusEvent:
    order_id: int
    status: OrderStatus


class OrderStatusUpdater(Protocol):
    def set_status(self, order_id: int, status: OrderStatus) -> None: ...


class EventStatusUpdater:
    """Turns status requests into OrderStatusEvent objects for the host.

    The host decides what the handler does with the event (dispatch it on
    its own bus, queue it, apply it inline); the module does not wait on it.
    """

    def __init__(self, handler: Callable[[OrderStatusEvent], Any]):
        self.handler = handler

    def set_status(self, order_id: int, status: OrderStatus) -> None:
        self.handler(OrderStatusEvent(order_id=order_id, status=status))


class AuditLogger(Protocol):
    def log(
        self,
        message: str,
        *,
        order_id: int | None,
        customer_id: int | None,
        level: int,
        in_transaction: bool = False,
    ) -> None: ...


class TransactionalScope(Protocol):
    def begin(self) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class ConfigStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


class CartRepository(Protocol):
    def find(self, cart_id: int) -> CartPaymentRef | None: ...


class PlanRepository(Protocol):
    def find(self, plan_id: int) -> PlanDefinition | None: ...


class TransactionRecorder(Protocol):
    def record(
        self, order: Order, intent: PaymentIntent, outcome: PaymentOutcome
    ) -> None: ...


class OrderLinkResolver(Protocol):
    def resolve(self, token: str) -> LinkedOrder | None: ...
