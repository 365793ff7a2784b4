"""SQLAlchemy-backed lookups and writes used during dispatch."""

from decimal import Decimal

from sqlalchemy.orm import Session

from db.models import PaypalCart, PaypalOrder, PaypalPlanifiedPayment
from payments.models import (
    CartPaymentRef,
    Order,
    PaymentIntent,
    PaymentOutcome,
    PlanDefinition,
    RecurringAgreement,
)


def to_plan_definition(row: PaypalPlanifiedPayment) -> PlanDefinition:
    return PlanDefinition(
        id=row.id,
        title=row.title,
        description=row.description or "",
        frequency=row.frequency,
        frequency_interval=row.frequency_interval,
        cycle=row.cycle,
        min_amount=Decimal(row.min_amount or 0),
        max_amount=Decimal(row.max_amount or 0),
        position=row.position or 0,
    )


class DatabasePlanRepository:
    def __init__(self, session: Session):
        self.session = session

    def find(self, plan_id: int) -> PlanDefinition | None:
        row = self.session.get(PaypalPlanifiedPayment, plan_id)
        return to_plan_definition(row) if row is not None else None


def find_cart_payment_ref(session: Session, cart_id: int) -> CartPaymentRef | None:
    cart = session.get(PaypalCart, cart_id)
    if cart is None:
        return None
    return CartPaymentRef(
        cart_id=cart.id,
        credit_card_id=cart.credit_card_id,
        planified_payment_id=cart.planified_payment_id,
    )


class DatabaseCartRepository:
    def __init__(self, session: Session):
        self.session = session

    def find(self, cart_id: int) -> CartPaymentRef | None:
        return find_cart_payment_ref(self.session, cart_id)


class DatabaseTransactionRecorder:
    """Stores the provider reference of a dispatched order in paypal_order."""

    def __init__(self, session: Session):
        self.session = session

    def record(
        self, order: Order, intent: PaymentIntent, outcome: PaymentOutcome
    ) -> None:
        row = self.session.get(PaypalOrder, order.id)
        if row is None:
            row = PaypalOrder(id=order.id)
            self.session.add(row)

        row.method = intent.method.value
        row.state = outcome.state.value
        row.amount = order.total
        row.currency = order.currency

        if isinstance(intent, RecurringAgreement):
            row.agreement_id = outcome.reference
            row.planified_title = intent.plan.title
            row.planified_frequency = intent.plan.frequency
            row.planified_frequency_interval = intent.plan.frequency_interval
            row.planified_cycle = intent.plan.cycle
        else:
            row.payment_id = outcome.reference


def payment_id_for_order(session: Session, order_id: int) -> str:
    row = session.get(PaypalOrder, order_id)
    if row is None:
        return ""
    return row.payment_id or ""
