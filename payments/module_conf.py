"""Merchant configuration of the PayPal module, read from the ConfigStore."""

from typing import Literal

from pydantic import BaseModel

from core.config_store import as_bool
from payments.ports import ConfigStore

PAYMENT_ENABLED = "paypal_payment_enabled"
SANDBOX = "sandbox"
LOGIN = "login"
PASSWORD = "password"
MERCHANT_ID = "merchant_id"
MINIMUM_AMOUNT = "minimum_amount"
MAXIMUM_AMOUNT = "maximum_amount"
CART_ITEM_COUNT = "cart_item_count"
ALLOWED_IP_LIST = "allowed_ip_list"


class PayPalCredentials(BaseModel):
    client_id: str = ""
    client_secret: str = ""
    merchant_id: str = ""
    mode: Literal["sandbox", "live"] = "sandbox"


def is_payment_enabled(config: ConfigStore) -> bool:
    return as_bool(config.get(PAYMENT_ENABLED, False))


def is_sandbox_mode(config: ConfigStore) -> bool:
    # Unset means sandbox; going live is an explicit choice
    return as_bool(config.get(SANDBOX, True))


class PayPalModuleConfProvider:
    """Single view of the module configuration shared with the host."""

    def __init__(
        self, config: ConfigStore, fallback_client_id: str = "", fallback_secret: str = ""
    ):
        self.config = config
        self.fallback_client_id = fallback_client_id
        self.fallback_secret = fallback_secret

    def get_type(self) -> str:
        return "PayPal"

    def get_id(self) -> str:
        return self.config.get(MERCHANT_ID, "")

    def get_active(self) -> bool:
        return is_payment_enabled(self.config)

    def get_data(self) -> PayPalCredentials:
        return PayPalCredentials(
            client_id=self.config.get(LOGIN, "") or self.fallback_client_id,
            client_secret=self.config.get(PASSWORD, "") or self.fallback_secret,
            merchant_id=self.config.get(MERCHANT_ID, ""),
            mode="sandbox" if is_sandbox_mode(self.config) else "live",
        )
