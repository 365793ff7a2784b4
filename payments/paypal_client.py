"""
PayPal SDK client

Implements the three provider calls the dispatcher needs on top of
paypalrestsdk:
- credit card charge with a stored card token
- billing plan + billing agreement creation for recurring payments
- standard PayPal checkout (redirect) payment creation

Transport failures are raised as PayPalConnectionError carrying the
attempted URL and payload.
"""

import json
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any
from urllib.parse import parse_qs, urlparse

import paypalrestsdk
import requests
import structlog
from paypalrestsdk.exceptions import ConnectionError as SdkConnectionError

from core.logging import BusinessEvents
from payments.errors import PayPalConnectionError, PayPalError
from payments.models import Order, PlanDefinition, ProviderResponse
from payments.module_conf import PayPalCredentials
from payments.urls import StoreUrls

log = structlog.get_logger(__name__)

PAYMENT_PATH = "/v1/payments/payment"
BILLING_PLAN_PATH = "/v1/payments/billing-plans"
BILLING_AGREEMENT_PATH = "/v1/payments/billing-agreements"


def _amount(value) -> str:
    return f"{value:.2f}"


def find_link(resource, rel: str = "approval_url") -> str | None:
    for link in resource.links or []:
        if link.rel == rel:
            return link.href
    return None


class PayPalClient:
    def __init__(self, credentials: PayPalCredentials, urls: StoreUrls):
        self.urls = urls
        self.api = paypalrestsdk.Api(
            {
                "mode": credentials.mode,
                "client_id": credentials.client_id,
                "client_secret": credentials.client_secret,
            }
        )

    def _call(self, path: str, payload: dict[str, Any], operation: Callable[[], Any]):
        url = f"{self.api.endpoint}{path}"
        log.info(BusinessEvents.PROVIDER_CALL, url=url)
        try:
            return operation()
        except (SdkConnectionError, requests.RequestException) as exc:
            log.error(BusinessEvents.PROVIDER_ERROR, url=url, error=str(exc))
            raise PayPalConnectionError(url, json.dumps(payload), str(exc)) from exc

    def _transaction(self, order: Order) -> dict[str, Any]:
        return {
            "amount": {"total": _amount(order.total), "currency": order.currency},
            "description": f"Order {order.reference or order.id}",
            "invoice_number": str(order.reference or order.id),
        }

    def charge(self, order: Order, token: str) -> ProviderResponse:
        payload = {
            "intent": "sale",
            "payer": {
                "payment_method": "credit_card",
                "funding_instruments": [
                    {"credit_card_token": {"credit_card_id": token}}
                ],
            },
            "transactions": [self._transaction(order)],
        }
        payment = paypalrestsdk.Payment(payload, api=self.api)

        if not self._call(PAYMENT_PATH, payload, payment.create):
            # Validation errors and declines come back as a failed create
            log.warning(
                BusinessEvents.PROVIDER_ERROR, order_id=order.id, error=payment.error
            )
            return ProviderResponse(state="refused", reference=payment.id or "")

        return ProviderResponse(state=payment.state, reference=payment.id)

    def create_agreement(self, order: Order, plan: PlanDefinition) -> ProviderResponse:
        plan_payload = {
            "name": plan.title,
            "description": plan.description or plan.title,
            "type": "INFINITE" if plan.cycle == 0 else "FIXED",
            "payment_definitions": [
                {
                    "name": plan.title,
                    "type": "REGULAR",
                    "frequency": plan.frequency,
                    "frequency_interval": str(plan.frequency_interval),
                    "cycles": str(plan.cycle),
                    "amount": {
                        "value": _amount(order.total),
                        "currency": order.currency,
                    },
                }
            ],
            "merchant_preferences": {
                "return_url": self.urls.agreement_ok(order.id),
                "cancel_url": self.urls.agreement_cancel(order.id),
                "auto_bill_amount": "YES",
                "initial_fail_amount_action": "CONTINUE",
                "max_fail_attempts": "0",
            },
        }
        billing_plan = paypalrestsdk.BillingPlan(plan_payload, api=self.api)
        if not self._call(BILLING_PLAN_PATH, plan_payload, billing_plan.create):
            raise PayPalError(f"Billing plan creation failed: {billing_plan.error}")

        activation = {"state": "ACTIVE"}
        if not self._call(
            f"{BILLING_PLAN_PATH}/{billing_plan.id}", activation, billing_plan.activate
        ):
            raise PayPalError(f"Billing plan activation failed: {billing_plan.error}")

        start_date = datetime.now(UTC) + timedelta(days=1)
        agreement_payload = {
            "name": plan.title,
            "description": plan.description or plan.title,
            "start_date": start_date.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "plan": {"id": billing_plan.id},
            "payer": {"payment_method": "paypal"},
        }
        agreement = paypalrestsdk.BillingAgreement(agreement_payload, api=self.api)
        if not self._call(BILLING_AGREEMENT_PATH, agreement_payload, agreement.create):
            raise PayPalError(f"Billing agreement creation failed: {agreement.error}")

        approval_link = find_link(agreement)
        # Agreements get an id only once executed; the token identifies them until then
        token = ""
        if approval_link:
            token = parse_qs(urlparse(approval_link).query).get("token", [""])[0]

        return ProviderResponse(
            state="created", reference=token, approval_link=approval_link
        )

    def create_checkout_session(self, order: Order) -> ProviderResponse:
        payload = {
            "intent": "sale",
            "payer": {"payment_method": "paypal"},
            "redirect_urls": {
                "return_url": self.urls.payment_ok(order.id),
                "cancel_url": self.urls.payment_cancel(order.id),
            },
            "transactions": [self._transaction(order)],
        }
        payment = paypalrestsdk.Payment(payload, api=self.api)
        if not self._call(PAYMENT_PATH, payload, payment.create):
            raise PayPalError(f"Payment creation failed: {payment.error}")

        return ProviderResponse(
            state=payment.state, reference=payment.id, approval_link=find_link(payment)
        )
