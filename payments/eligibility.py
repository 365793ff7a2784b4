"""
Eligibility check

Decides whether PayPal is offered at checkout. Reads thresholds from the
ConfigStore and has no side effects besides logging and a metric.
"""

from decimal import Decimal

import structlog

from core.config_store import as_decimal, as_int
from core.logging import BusinessEvents
from core.metrics import record_eligibility
from payments.models import CheckoutContext
from payments.module_conf import (
    ALLOWED_IP_LIST,
    CART_ITEM_COUNT,
    MAXIMUM_AMOUNT,
    MINIMUM_AMOUNT,
    is_payment_enabled,
    is_sandbox_mode,
)
from payments.ports import ConfigStore, OrderLinkResolver

log = structlog.get_logger(__name__)

DEFAULT_MAX_ITEM_COUNT = 9


def parse_ip_list(raw: str | None) -> list[str]:
    """One address per line, surrounding whitespace and blank lines ignored."""
    return [ip.strip() for ip in (raw or "").split("\n") if ip.strip()]


def amount_within_limits(total: Decimal, minimum: Decimal, maximum: Decimal) -> bool:
    """Limits of 0 or less are disabled; both bounds are inclusive."""
    return (
        total > 0
        and (minimum <= 0 or total >= minimum)
        and (maximum <= 0 or total <= maximum)
    )


class EligibilityChecker:
    def __init__(
        self, config: ConfigStore, link_resolver: OrderLinkResolver | None = None
    ):
        self.config = config
        self.link_resolver = link_resolver

    def _totals(self, context: CheckoutContext) -> tuple[Decimal, int] | None:
        if context.link_token:
            if self.link_resolver is None:
                return None
            linked = self.link_resolver.resolve(context.link_token)
            if linked is None:
                return None
            # The linked order only counts when it is the one this session pays
            total = (
                linked.total
                if context.session_order_to_pay_id == linked.order_id
                else Decimal("0")
            )
            return total, linked.item_count

        if context.cart is None:
            return None
        return context.cart.total, context.cart.item_count

    def is_eligible(self, context: CheckoutContext) -> bool:
        eligible = self._check(context)
        record_eligibility(eligible)
        log.debug(
            BusinessEvents.ELIGIBILITY_CHECKED,
            eligible=eligible,
            client_ip=context.client_ip,
        )
        return eligible

    def _check(self, context: CheckoutContext) -> bool:
        if not is_payment_enabled(self.config):
            return False

        totals = self._totals(context)
        if totals is None:
            return False
        total, item_count = totals

        minimum = as_decimal(self.config.get(MINIMUM_AMOUNT, 0))
        maximum = as_decimal(self.config.get(MAXIMUM_AMOUNT, 0))
        if not amount_within_limits(total, minimum, maximum):
            return False

        max_items = as_int(
            self.config.get(CART_ITEM_COUNT, DEFAULT_MAX_ITEM_COUNT),
            DEFAULT_MAX_ITEM_COUNT,
        )
        if item_count > max_items:
            return False

        if is_sandbox_mode(self.config):
            allowed = parse_ip_list(self.config.get(ALLOWED_IP_LIST, ""))
            return context.client_ip in allowed

        return True
