"""
Database Models Module

This module defines SQLAlchemy ORM models for:
- PayPal data attached to host carts
- Recurring (planified) payment definitions
- PayPal transactions recorded per host order
- Audit log entries
- Module key/value configuration
"""

from datetime import datetime, UTC

from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    Text,
    Numeric,
    Index,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class PaypalPlanifiedPayment(Base):
    """Recurring payment plan a customer can pick for a cart."""

    __tablename__ = "paypal_planified_payment"

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    frequency = Column(String(10), nullable=False, default="MONTH")
    frequency_interval = Column(Integer, nullable=False, default=1)
    cycle = Column(Integer, nullable=False, default=0)
    min_amount = Column(Numeric(16, 6), default=0)
    max_amount = Column(Numeric(16, 6), default=0)
    position = Column(Integer, default=0)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))
    updated_at = Column(
        DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC)
    )

    def __repr__(self):
        return f"<PaypalPlanifiedPayment(id={self.id}, title={self.title!r})>"


class PaypalCart(Base):
    """PayPal data attached to a host cart (id is the host cart id)."""

    __tablename__ = "paypal_cart"

    id = Column(Integer, primary_key=True, autoincrement=False)
    credit_card_id = Column(String(40))
    planified_payment_id = Column(
        Integer, ForeignKey("paypal_planified_payment.id", ondelete="SET NULL")
    )
    express_payment_id = Column(String(255))
    express_payer_id = Column(String(255))
    express_token = Column(String(255))
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))
    updated_at = Column(
        DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC)
    )

    planified_payment = relationship("PaypalPlanifiedPayment")

    def __repr__(self):
        return f"<PaypalCart(id={self.id}, credit_card_id={self.credit_card_id})>"


class PaypalOrder(Base):
    """PayPal transaction recorded for a host order (id is the host order id)."""

    __tablename__ = "paypal_order"
    __table_args__ = (Index("ix_paypal_order_payment_id", "payment_id"),)

    id = Column(Integer, primary_key=True, autoincrement=False)
    payment_id = Column(String(50))
    agreement_id = Column(String(255))
    method = Column(String(50), nullable=False)
    state = Column(String(20), nullable=False)
    amount = Column(Numeric(16, 6), nullable=False, default=0)
    currency = Column(String(10), nullable=False, default="EUR")
    planified_title = Column(String(255))
    planified_frequency = Column(String(10))
    planified_frequency_interval = Column(Integer)
    planified_cycle = Column(Integer)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(UTC))
    updated_at = Column(
        DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC)
    )

    def __repr__(self):
        return f"<PaypalOrder(id={self.id}, method={self.method}, state={self.state})>"


class PaypalLog(Base):
    """Append-only audit entries written for every dispatch attempt."""

    __tablename__ = "paypal_log"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, index=True)
    customer_id = Column(Integer, index=True)
    channel = Column(String(255), nullable=False, default="paypal")
    level = Column(Integer, nullable=False, index=True)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return (
            f"<PaypalLog(id={self.id}, order_id={self.order_id}, level={self.level})>"
        )


class PaypalModuleConfig(Base):
    """Key/value configuration of the module."""

    __tablename__ = "paypal_module_config"

    name = Column(String(128), primary_key=True)
    value = Column(Text)
    updated_at = Column(
        DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC)
    )

    def __repr__(self):
        return f"<PaypalModuleConfig(name={self.name!r})>"
