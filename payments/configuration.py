"""
Admin configuration of the PayPal module.

Validates the submitted configuration, stores every field in the
ConfigStore and switches off the features this installation does not
offer.
"""

from decimal import Decimal
from typing import Any, Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from core.logging import BusinessEvents
from payments.errors import ConfigurationError
from payments.module_conf import PAYMENT_ENABLED, is_payment_enabled
from payments.ports import ConfigStore

log = structlog.get_logger(__name__)

CardType = Literal["visa", "mastercard", "discover", "amex"]

# Always stored as false whatever was submitted
FORCED_OFF = (
    "send_payment_confirmation_message",
    "method_express_checkout",
    "method_credit_card",
    "method_planified_payment",
    "send_recursive_message",
)


class ConfigurationForm(BaseModel):
    """Fields of the admin configuration form."""

    login: str = ""
    password: str = ""
    merchant_id: str = ""
    sandbox: bool = True
    paypal_payment_enabled: bool = False
    minimum_amount: Decimal = Field(default=Decimal("0"), ge=0)
    maximum_amount: Decimal = Field(default=Decimal("0"), ge=0)
    cart_item_count: int = Field(default=9, ge=0)
    allowed_ip_list: str = ""
    allowed_card_types: list[CardType] = []

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def check_amount_range(self):
        if 0 < self.maximum_amount < self.minimum_amount:
            raise ValueError("maximum_amount must not be lower than minimum_amount")
        return self


def _validation_message(exc: ValidationError) -> str:
    fields = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "form"
        fields.append(f"{location}: {error['msg']}")
    return "Please check your input: " + "; ".join(fields)


class ConfigurationService:
    def __init__(self, config: ConfigStore):
        self.config = config

    def apply(self, data: dict[str, Any]) -> str:
        """Store a submitted configuration and return the admin log message."""
        try:
            form = ConfigurationForm.model_validate(data)
        except ValidationError as exc:
            log.warning(BusinessEvents.CONFIG_UPDATED, error=str(exc))
            raise ConfigurationError(_validation_message(exc)) from exc

        old_status = is_payment_enabled(self.config)

        for name, value in form.model_dump().items():
            if isinstance(value, list):
                value = ";".join(value)
            self.config.set(name, value)

        for name in FORCED_OFF:
            self.config.set(name, False)

        status_log = ""
        if old_status != form.paypal_payment_enabled:
            status_log = (
                " (Payment actived)"
                if form.paypal_payment_enabled
                else " (Payment deactived)"
            )

        message = "PayPal configuration updated" + status_log
        log.info(
            BusinessEvents.CONFIG_UPDATED,
            message=message,
            enabled=form.paypal_payment_enabled,
            sandbox=form.sandbox,
        )
        return message


def change_payment_enabled(config: ConfigStore, enabled: bool) -> None:
    config.set(PAYMENT_ENABLED, enabled)
