"""
Payment Dispatcher

Chooses the payment flow for an order and runs it inside one transaction:
- stored card token on the cart    -> credit card charge
- existing recurring plan on cart  -> billing agreement
- anything else                    -> PayPal checkout redirect

Every attempt leaves exactly one audit entry. Failures roll back the
transaction and are raised as DispatchError subclasses after logging.
"""

import logging

import structlog

from core.logging import BusinessEvents
from core.metrics import record_dispatch
from core.tracing import get_tracer
from payments.errors import (
    ConnectionFailed,
    PayPalConnectionError,
    Refused,
    Unexpected,
)
from payments.flows import PaymentFlow, flow_for
from payments.models import (
    CartPaymentRef,
    DirectCharge,
    OneTimeRedirect,
    Order,
    OrderStatus,
    OutcomeState,
    PaymentIntent,
    PaymentOutcome,
    RecurringAgreement,
    RedirectTarget,
)
from payments.ports import (
    AuditLogger,
    OrderStatusUpdater,
    PaymentProviderClient,
    CartRepository,
    PlanRepository,
    TransactionalScope,
    TransactionRecorder,
)
from payments.urls import StoreUrls

log = structlog.get_logger(__name__)


def select_intent(
    cart_ref: CartPaymentRef | None, plans: PlanRepository
) -> PaymentIntent:
    """Pick the payment shape for a cart; the first matching rule wins."""
    if cart_ref is None:
        return OneTimeRedirect()

    if cart_ref.credit_card_id:
        return DirectCharge(stored_card_token=cart_ref.credit_card_id)

    if cart_ref.planified_payment_id is not None:
        plan = plans.find(cart_ref.planified_payment_id)
        if plan is not None:
            return RecurringAgreement(plan=plan)

    return OneTimeRedirect()


class PaymentDispatcher:
    def __init__(
        self,
        provider: PaymentProviderClient,
        scope: TransactionalScope,
        status_updater: OrderStatusUpdater,
        audit: AuditLogger,
        plans: PlanRepository,
        urls: StoreUrls,
        recorder: TransactionRecorder | None = None,
        carts: CartRepository | None = None,
    ):
        self.provider = provider
        self.scope = scope
        self.status_updater = status_updater
        self.audit = audit
        self.plans = plans
        self.urls = urls
        self.recorder = recorder
        self.carts = carts

    def dispatch(
        self, order: Order, cart_ref: CartPaymentRef | None = None
    ) -> RedirectTarget:
        """Run the payment flow selected for the order.

        Returns where the customer must be redirected. Raises Refused when
        the provider declines a card, ConnectionFailed on transport errors
        and Unexpected for anything else. Never retries.
        """
        with get_tracer().start_as_current_span("paypal.dispatch") as span:
            span.set_attribute("order.id", order.id)
            method = "unselected"

            self.scope.begin()
            try:
                if order.total <= 0:
                    raise ValueError(f"Order {order.id} has no amount to pay")

                if cart_ref is None and self.carts is not None:
                    cart_ref = self.carts.find(order.cart_id)

                intent = select_intent(cart_ref, self.plans)
                flow = flow_for(intent, self.provider)
                method = flow.method.value
                span.set_attribute("paypal.method", method)

                log.info(
                    BusinessEvents.DISPATCH_ATTEMPT,
                    order_id=order.id,
                    customer_id=order.customer_id,
                    method=method,
                    amount=str(order.total),
                )

                outcome = flow.execute(order, intent)
                if outcome.state is not OutcomeState.refused:
                    target = self._complete(order, intent, flow, outcome)
                    self.scope.commit()
            except PayPalConnectionError as exc:
                self.scope.rollback()
                self._fail(order, method, "connection_failed", exc.describe())
                span.set_attribute("paypal.result", "connection_failed")
                raise ConnectionFailed(
                    exc.describe(),
                    order.id,
                    order.customer_id,
                    url=exc.url,
                    data=exc.data,
                ) from exc
            except Exception as exc:
                self.scope.rollback()
                self._fail(order, method, "unexpected", str(exc))
                span.set_attribute("paypal.result", "unexpected")
                raise Unexpected(str(exc), order.id, order.customer_id) from exc

            if outcome.state is OutcomeState.refused:
                self.scope.rollback()
                message = f"Order failed with method : {method}"
                self._fail(order, method, "refused", message)
                span.set_attribute("paypal.result", "refused")
                raise Refused(
                    message,
                    order.id,
                    order.customer_id,
                    cancel_url=self.urls.payment_cancel(order.id),
                )

            if outcome.state is OutcomeState.approved:
                # Card payments have no provider callback, so the order is paid
                # now. Sent only once the transaction has committed.
                self.status_updater.set_status(order.id, OrderStatus.paid)

            span.set_attribute("paypal.result", "success")
            record_dispatch(method, "success")
            log.info(
                BusinessEvents.DISPATCH_SUCCESS,
                order_id=order.id,
                customer_id=order.customer_id,
                method=method,
                state=outcome.state.value,
                reference=outcome.reference,
            )
            return target

    def _complete(
        self,
        order: Order,
        intent: PaymentIntent,
        flow: PaymentFlow,
        outcome: PaymentOutcome,
    ) -> RedirectTarget:
        if outcome.state is OutcomeState.approved:
            url = self.urls.order_placed(order.id)
            message = f"Order paid with success with method : {flow.method.value}"
        else:
            url = outcome.approval_link
            message = (
                f"Order created with success in PayPal with method : {flow.method.value}"
            )

        if self.recorder is not None:
            self.recorder.record(order, intent, outcome)

        self.audit.log(
            message,
            order_id=order.id,
            customer_id=order.customer_id,
            level=logging.INFO,
            in_transaction=True,
        )
        return RedirectTarget(url=url, method=flow.method, outcome=outcome)

    def _fail(self, order: Order, method: str, result: str, message: str):
        record_dispatch(method, result)
        log.error(
            BusinessEvents.DISPATCH_FAILURE,
            order_id=order.id,
            customer_id=order.customer_id,
            method=method,
            result=result,
            error=message,
        )
        try:
            self.audit.log(
                message,
                order_id=order.id,
                customer_id=order.customer_id,
                level=logging.CRITICAL,
            )
        except Exception:
            # The classified DispatchError still reaches the caller
            log.exception(
                BusinessEvents.AUDIT_ENTRY,
                order_id=order.id,
                result=result,
                error="audit write failed",
            )
