"""
Audit Log Module

Every payment dispatch writes one row into the paypal_log table, on success
and on failure. Entries are append-only and mirrored to structlog so they
also land in the process logs.
"""

import logging
from collections.abc import Callable

import structlog
from sqlalchemy.orm import Session

from core.logging import BusinessEvents
from db.models import PaypalLog

log = structlog.get_logger(__name__)

CHANNEL = "paypal"


class DatabaseAuditLogger:
    """Audit sink backed by the paypal_log table.

    Entries logged with in_transaction=True join the request session and
    commit or roll back with it. All other entries are committed right away
    through a fresh session so they survive a rolled back dispatch.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        session: Session | None = None,
    ):
        self.session_factory = session_factory
        self.session = session

    def log(
        self,
        message: str,
        *,
        order_id: int | None,
        customer_id: int | None,
        level: int = logging.INFO,
        in_transaction: bool = False,
    ) -> None:
        entry = PaypalLog(
            order_id=order_id,
            customer_id=customer_id,
            channel=CHANNEL,
            level=level,
            message=message,
        )

        log.log(
            level,
            BusinessEvents.AUDIT_ENTRY,
            message=message,
            order_id=order_id,
            customer_id=customer_id,
        )

        if in_transaction and self.session is not None:
            self.session.add(entry)
            return

        with self.session_factory() as own_session:
            own_session.add(entry)
            own_session.commit()


def entries_for_order(session: Session, order_id: int) -> list[PaypalLog]:
    """Audit entries for an order, oldest first."""
    return (
        session.query(PaypalLog)
        .filter(PaypalLog.order_id == order_id)
        .order_by(PaypalLog.id)
        .all()
    )
