"""
Test module for audit logging.

This module tests:
- entries written through the request session
- entries committed on their own session
- ordering of the per-order audit trail
"""

import logging

from core.audit import CHANNEL, DatabaseAuditLogger, entries_for_order
from db.models import PaypalLog


def test_entry_outside_transaction_is_committed(session_factory, test_db_session):
    audit = DatabaseAuditLogger(session_factory)

    audit.log(
        "Order failed with method : credit_card",
        order_id=42,
        customer_id=7,
        level=logging.CRITICAL,
    )

    entry = test_db_session.query(PaypalLog).one()
    assert entry.order_id == 42
    assert entry.customer_id == 7
    assert entry.level == logging.CRITICAL
    assert entry.channel == CHANNEL
    assert entry.created_at is not None


def test_entry_in_transaction_follows_commit(session_factory, test_db_session):
    request_session = session_factory()
    audit = DatabaseAuditLogger(session_factory, request_session)

    audit.log("committed", order_id=1, customer_id=2, in_transaction=True)
    request_session.commit()
    request_session.close()

    assert [e.message for e in entries_for_order(test_db_session, 1)] == ["committed"]


def test_entry_in_transaction_follows_rollback(session_factory, test_db_session):
    request_session = session_factory()
    audit = DatabaseAuditLogger(session_factory, request_session)

    audit.log("rolled back", order_id=1, customer_id=2, in_transaction=True)
    request_session.rollback()
    request_session.close()

    assert entries_for_order(test_db_session, 1) == []


def test_in_transaction_without_session_commits_directly(session_factory, test_db_session):
    audit = DatabaseAuditLogger(session_factory)

    audit.log("standalone", order_id=5, customer_id=None, in_transaction=True)

    assert [e.message for e in entries_for_order(test_db_session, 5)] == ["standalone"]


def test_entries_for_order_oldest_first(session_factory, test_db_session):
    audit = DatabaseAuditLogger(session_factory)
    for message in ("first", "second", "third"):
        audit.log(message, order_id=9, customer_id=1)
    audit.log("other order", order_id=10, customer_id=1)

    assert [e.message for e in entries_for_order(test_db_session, 9)] == [
        "first",
        "second",
        "third",
    ]
