"""
Prometheus metrics for the PayPal checkout module.

The host application exposes the default registry; this module only
declares the counters the dispatcher and eligibility checker update.
Counting can be switched off with the METRICS_ENABLED setting.
"""

from prometheus_client import Counter

dispatch_total = Counter(
    "paypal_dispatch_total",
    "Total number of payment dispatches",
    ["flow", "result"],  # result: success, refused, connection_failed, unexpected
)

eligibility_checks = Counter(
    "paypal_eligibility_checks_total",
    "Total number of eligibility checks",
    ["eligible"],
)

_enabled = True


def init_metrics(enabled: bool = True) -> None:
    """Turn counter updates on or off, from Settings.METRICS_ENABLED."""
    global _enabled
    _enabled = enabled


def record_dispatch(flow: str, result: str) -> None:
    if not _enabled:
        return
    dispatch_total.labels(flow=flow, result=result).inc()


def record_eligibility(eligible: bool) -> None:
    if not _enabled:
        return
    eligibility_checks.labels(eligible=str(eligible).lower()).inc()
