"""
Domain types used by the dispatcher, the flows and the eligibility check.

Orders and carts belong to the host; these dataclasses are the read-only
view the module works with.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class OrderStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    failed = "failed"
    cancelled = "cancelled"


class OutcomeState(str, Enum):
    approved = "approved"
    created = "created"
    refused = "refused"


class PaymentMethod(str, Enum):
    paypal = "paypal"
    credit_card = "credit_card"
    planified_payment = "planified_payment"


@dataclass(frozen=True)
class Order:
    id: int
    customer_id: int
    total: Decimal
    cart_id: int
    status: OrderStatus = OrderStatus.pending
    currency: str = "EUR"
    reference: str | None = None


@dataclass(frozen=True)
class CartPaymentRef:
    """PayPal data attached to the order's cart."""

    cart_id: int
    credit_card_id: str | None = None
    planified_payment_id: int | None = None


@dataclass(frozen=True)
class PlanDefinition:
    id: int
    title: str
    description: str = ""
    frequency: str = "MONTH"
    frequency_interval: int = 1
    cycle: int = 0  # 0 means no end date
    min_amount: Decimal = Decimal("0")
    max_amount: Decimal = Decimal("0")
    position: int = 0


@dataclass(frozen=True)
class DirectCharge:
    stored_card_token: str
    method = PaymentMethod.credit_card


@dataclass(frozen=True)
class RecurringAgreement:
    plan: PlanDefinition
    method = PaymentMethod.planified_payment


@dataclass(frozen=True)
class OneTimeRedirect:
    method = PaymentMethod.paypal


PaymentIntent = DirectCharge | RecurringAgreement | OneTimeRedirect


@dataclass(frozen=True)
class PaymentOutcome:
    state: OutcomeState
    reference: str
    approval_link: str | None = None


@dataclass(frozen=True)
class RedirectTarget:
    url: str
    method: PaymentMethod
    outcome: PaymentOutcome

    @property
    def approval_link(self) -> str | None:
        return self.outcome.approval_link


@dataclass(frozen=True)
class CartSnapshot:
    total: Decimal
    item_count: int


@dataclass(frozen=True)
class LinkedOrder:
    """An existing order reached through a payment link token."""

    order_id: int
    total: Decimal
    item_count: int


@dataclass(frozen=True)
class CheckoutContext:
    """Everything the eligibility check needs from the current request."""

    client_ip: str | None = None
    cart: CartSnapshot | None = None
    link_token: str | None = None
    session_order_to_pay_id: int | None = None


@dataclass(frozen=True)
class ProviderResponse:
    """Raw answer of the provider before a flow interprets it."""

    state: str
    reference: str
    approval_link: str | None = None
