"""
Payment flows

Each flow wraps exactly one provider call and turns the provider answer
into a PaymentOutcome. Flows never retry; provider exceptions propagate to
the dispatcher.
"""

from abc import ABC, abstractmethod

from payments.errors import PayPalError
from payments.models import (
    DirectCharge,
    OneTimeRedirect,
    Order,
    OutcomeState,
    PaymentIntent,
    PaymentMethod,
    PaymentOutcome,
    RecurringAgreement,
)
from payments.ports import PaymentProviderClient


class PaymentFlow(ABC):
    method: PaymentMethod

    def __init__(self, provider: PaymentProviderClient):
        self.provider = provider

    @abstractmethod
    def execute(self, order: Order, intent: PaymentIntent) -> PaymentOutcome:
        pass


class CreditCardFlow(PaymentFlow):
    """Synchronous capture with a stored card; the only flow with a final state."""

    method = PaymentMethod.credit_card

    def execute(self, order: Order, intent: DirectCharge) -> PaymentOutcome:
        response = self.provider.charge(order, intent.stored_card_token)
        state = (
            OutcomeState.approved
            if response.state == OutcomeState.approved.value
            else OutcomeState.refused
        )
        return PaymentOutcome(state=state, reference=response.reference)


class _ApprovalFlow(PaymentFlow):
    def _created(self, order: Order, response) -> PaymentOutcome:
        if not response.approval_link:
            raise PayPalError(
                f"No approval link returned for order {order.id} ({self.method.value})"
            )
        return PaymentOutcome(
            state=OutcomeState.created,
            reference=response.reference,
            approval_link=response.approval_link,
        )


class AgreementFlow(_ApprovalFlow):
    method = PaymentMethod.planified_payment

    def execute(self, order: Order, intent: RecurringAgreement) -> PaymentOutcome:
        return self._created(order, self.provider.create_agreement(order, intent.plan))


class RedirectFlow(_ApprovalFlow):
    method = PaymentMethod.paypal

    def execute(self, order: Order, intent: OneTimeRedirect) -> PaymentOutcome:
        return self._created(order, self.provider.create_checkout_session(order))


_FLOWS: dict[type, type[PaymentFlow]] = {
    DirectCharge: CreditCardFlow,
    RecurringAgreement: AgreementFlow,
    OneTimeRedirect: RedirectFlow,
}


def flow_for(intent: PaymentIntent, provider: PaymentProviderClient) -> PaymentFlow:
    return _FLOWS[type(intent)](provider)
