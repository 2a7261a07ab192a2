# -*- coding: utf-8 -*-
from __future__ import annotations

from decimal import Decimal
from sqlalchemy.types import DateTime, TypeDecorator

from ..aggregation import UNKNOWN_EMPLOYEE, round2, to_decimal, tip_halves
from ..extensions import db
from ..timezone import UTC, to_utc_instant


PAYMENT_METHODS = ("cash", "card")


class UTCDateTime(TypeDecorator):
    """Stored as naive UTC, returned as aware UTC."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return to_utc_instant(value).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value.replace(tzinfo=UTC)


class Transaction(db.Model):
    __tablename__ = "transactions"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True, index=True)
    payment_method = db.Column(db.String(8), nullable=False)  # cash|card

    # subtotal excludes tips; total = subtotal + tips, fixed at creation
    subtotal = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    tips = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    total = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    transaction_date = db.Column(UTCDateTime, nullable=False, index=True)

    employee = db.relationship("Employee", lazy="joined")
    items = db.relationship(
        "TransactionItem",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionItem.id",
        lazy="selectin",
    )

    @property
    def employee_name(self) -> str:
        return self.employee.name if self.employee is not None else UNKNOWN_EMPLOYEE

    @property
    def tip_split(self) -> tuple[Decimal, Decimal]:
        return tip_halves(self.tips)

    @property
    def total_ok(self) -> bool:
        return round2(self.total) == round2(to_decimal(self.subtotal) + to_decimal(self.tips))


class TransactionItem(db.Model):
    __tablename__ = "transaction_items"

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(
        db.Integer, db.ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    service_id = db.Column(db.Integer, db.ForeignKey("services.id", ondelete="SET NULL"), nullable=True)
    service_name = db.Column(db.String(180), nullable=False)  # snapshot, not a live reference
    price = db.Column(db.Numeric(12, 2), nullable=False, default=0)  # unit price at sale time
    quantity = db.Column(db.Integer, nullable=False, default=1)

    transaction = db.relationship("Transaction", back_populates="items")
