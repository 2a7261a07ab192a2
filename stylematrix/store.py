# -*- coding: utf-8 -*-
"""
Persistence boundary: range fetches with the employee/items joins the pages
need, plus the handful of mutations the app performs.

Validation happens here, before anything is added to the session, and raises
``ValidationError``. Database failures are rolled back and re-raised as
``SQLAlchemyError`` for the views to report.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload, noload, selectinload

from .aggregation import round2
from .errors import ValidationError
from .extensions import db
from .models import (
    CATEGORIES, PAYMENT_METHODS, ROLES,
    Employee, Service, Transaction, TransactionItem, User,
)
from .timezone import now_as_utc_instant

logger = logging.getLogger(__name__)

_PHONE_RE = re.compile(r"^[0-9+\-\s()]+$")
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


# ------------ helpers ---------------------------------------------------------
def is_valid_phone(phone: str) -> bool:
    phone = phone or ""
    return bool(_PHONE_RE.match(phone)) and len(re.sub(r"\D", "", phone)) >= 8


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email or ""))


def _amount(raw: Any, field: str, message: str) -> Decimal:
    if raw is None or str(raw).strip() == "":
        raise ValidationError(message, field=field)
    try:
        v = Decimal(str(raw).strip())
    except InvalidOperation:
        raise ValidationError(message, field=field)
    if not v.is_finite():
        raise ValidationError(message, field=field)
    return v


def _int_or_none(raw: Any) -> Optional[int]:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _commit() -> None:
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


# ------------ transactions ----------------------------------------------------
def fetch_transactions(start: datetime, end: datetime, with_items: bool = True,
                       newest_first: bool = True) -> list[Transaction]:
    """Transactions with ``start <= transaction_date <= end`` (UTC instants)."""
    logger.debug("fetch_transactions %s .. %s", start.isoformat(), end.isoformat())
    q = Transaction.query.options(joinedload(Transaction.employee))
    q = q.options(selectinload(Transaction.items) if with_items else noload(Transaction.items))
    q = q.filter(Transaction.transaction_date >= start, Transaction.transaction_date <= end)
    if newest_first:
        q = q.order_by(Transaction.transaction_date.desc(), Transaction.id.desc())
    else:
        q = q.order_by(Transaction.transaction_date.asc(), Transaction.id.asc())
    return q.all()


def fetch_transaction_instants(start: datetime, end: datetime) -> list[datetime]:
    stmt = db.select(Transaction.transaction_date).where(
        Transaction.transaction_date >= start,
        Transaction.transaction_date <= end,
    )
    return list(db.session.execute(stmt).scalars().all())


def get_transaction(tx_id: int) -> Optional[Transaction]:
    return db.session.get(Transaction, tx_id)


def create_transaction(employee_id: Any, payment_method: Any, lines: Mapping[Any, Any] | Iterable,
                       tips: Any = 0, now: Optional[datetime] = None) -> Transaction:
    """
    Record a sale. ``lines`` maps service id -> quantity (or is a sequence of
    pairs). Item names and prices are snapshotted from the catalog.
    """
    emp_id = _int_or_none(employee_id)
    employee = db.session.get(Employee, emp_id) if emp_id else None
    if employee is None or not employee.is_active:
        raise ValidationError("Please select an employee", field="employee_id")

    pairs = list(lines.items()) if isinstance(lines, Mapping) else list(lines or [])
    if not pairs:
        raise ValidationError("Please select at least one service", field="services")

    if payment_method not in PAYMENT_METHODS:
        raise ValidationError("Please select a payment method", field="payment_method")

    if tips is None or str(tips).strip() == "":
        tips_v = Decimal("0")
    else:
        tips_v = _amount(tips, "tips", "Tips must be a non-negative amount")
    if tips_v < 0:
        raise ValidationError("Tips must be a non-negative amount", field="tips")

    items: list[TransactionItem] = []
    subtotal = Decimal("0")
    for service_id, qty in pairs:
        service = db.session.get(Service, _int_or_none(service_id) or 0)
        if service is None:
            raise ValidationError("Selected service no longer exists", field="services")
        quantity = _int_or_none(qty)
        if quantity is None or quantity < 1:
            raise ValidationError("Quantity must be at least 1", field="services")
        price = round2(service.price)
        subtotal += price * quantity
        items.append(TransactionItem(
            service_id=service.id,
            service_name=service.name,
            price=price,
            quantity=quantity,
        ))

    subtotal = round2(subtotal)
    tips_v = round2(tips_v)
    tx = Transaction(
        employee_id=employee.id,
        payment_method=payment_method,
        subtotal=subtotal,
        tips=tips_v,
        total=round2(subtotal + tips_v),
        transaction_date=now_as_utc_instant(now),
        items=items,
    )
    db.session.add(tx)
    _commit()
    logger.info("transaction %s created: employee=%s %s subtotal=%s tips=%s",
                tx.id, employee.id, payment_method, subtotal, tips_v)
    return tx


def delete_transaction(tx_id: int) -> bool:
    """Delete a transaction and its items. False if it does not exist."""
    tx = db.session.get(Transaction, tx_id)
    if tx is None:
        return False
    db.session.delete(tx)
    _commit()
    logger.info("transaction %s deleted", tx_id)
    return True


# ------------ employees -------------------------------------------------------
def list_employees(active_only: bool = False) -> list[Employee]:
    q = Employee.query
    if active_only:
        return q.filter(Employee.is_active.is_(True)).order_by(Employee.name.asc()).all()
    return q.order_by(Employee.is_active.desc(), Employee.created_at.desc(), Employee.id.desc()).all()


def _employee_fields(name: Any, phone: Any) -> tuple[str, str]:
    name = (name or "").strip()
    phone = (phone or "").strip()
    if not name:
        raise ValidationError("Employee name is required", field="name")
    if not is_valid_phone(phone):
        raise ValidationError("Please enter a valid phone number", field="phone")
    return name, phone


def create_employee(name: Any, phone: Any) -> Employee:
    name, phone = _employee_fields(name, phone)
    e = Employee(name=name, phone=phone, is_active=True)
    db.session.add(e)
    _commit()
    return e


def update_employee(employee_id: int, name: Any, phone: Any) -> Optional[Employee]:
    name, phone = _employee_fields(name, phone)
    e = db.session.get(Employee, employee_id)
    if e is None:
        return None
    e.name, e.phone = name, phone
    _commit()
    return e


def set_employee_active(employee_id: int, active: bool) -> Optional[Employee]:
    e = db.session.get(Employee, employee_id)
    if e is None:
        return None
    e.is_active = bool(active)
    _commit()
    return e


# ------------ services --------------------------------------------------------
def list_services(category: Optional[str] = None) -> list[Service]:
    q = Service.query
    if category:
        q = q.filter(Service.category == category)
    return q.order_by(Service.category.asc(), Service.name.asc()).all()


def _service_fields(name: Any, price: Any, category: Any) -> tuple[str, Decimal, str]:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Service name is required", field="name")
    price_v = _amount(price, "price", "Please enter a valid price")
    if price_v <= 0:
        raise ValidationError("Please enter a valid price", field="price")
    category = (category or "service").strip()
    if category not in CATEGORIES:
        raise ValidationError("Unknown category", field="category")
    return name, round2(price_v), category


def create_service(name: Any, price: Any, category: Any = "service") -> Service:
    name, price_v, category = _service_fields(name, price, category)
    s = Service(name=name, price=price_v, category=category)
    db.session.add(s)
    _commit()
    return s


def update_service(service_id: int, name: Any, price: Any, category: Any) -> Optional[Service]:
    name, price_v, category = _service_fields(name, price, category)
    s = db.session.get(Service, service_id)
    if s is None:
        return None
    s.name, s.price, s.category = name, price_v, category
    _commit()
    return s


def delete_service(service_id: int) -> bool:
    s = db.session.get(Service, service_id)
    if s is None:
        return False
    # past items keep their name/price snapshot
    TransactionItem.query.filter(TransactionItem.service_id == service_id).update(
        {TransactionItem.service_id: None}, synchronize_session=False
    )
    db.session.delete(s)
    _commit()
    return True


# ------------ users -----------------------------------------------------------
def find_user_by_email(email: Any) -> Optional[User]:
    email = (email or "").strip().lower()
    if not email:
        return None
    return User.query.filter(db.func.lower(User.email) == email).first()


def create_user(email: Any, password: str, role: str = "employee",
                employee_id: Optional[int] = None) -> User:
    email = (email or "").strip().lower()
    if not is_valid_email(email):
        raise ValidationError("Please enter a valid email address", field="email")
    if not password:
        raise ValidationError("Password is required", field="password")
    if role not in ROLES:
        raise ValidationError("Unknown role", field="role")
    u = User(email=email, role=role, employee_id=employee_id)
    u.set_password(password)
    db.session.add(u)
    _commit()
    return u
