# -*- coding: utf-8 -*-
"""
Sales aggregation: one pass over a window of transactions.

Records may be ORM ``Transaction`` rows or plain mappings shaped like the
store rows (``subtotal``, ``tips``, ``payment_method``, ``employee_id`` and
either ``employee_name`` or a nested ``employees: {"name": ...}``).
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from .timezone import to_local_calendar_date


TIP_SPLIT = Decimal("0.5")  # employee share; the business keeps the rest
UNKNOWN_EMPLOYEE = "Unknown"
CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(v: Any) -> Decimal:
    if v is None or v == "":
        return ZERO
    if isinstance(v, Decimal):
        return v
    return Decimal(str(v))


def round2(v: Any) -> Decimal:
    return to_decimal(v).quantize(CENT, rounding=ROUND_HALF_UP)


def tip_halves(tips: Any) -> Tuple[Decimal, Decimal]:
    """(employee share, business share) of a tip amount."""
    t = to_decimal(tips)
    return t * TIP_SPLIT, t * (1 - TIP_SPLIT)


def get_field(record: Any, name: str, default: Any = None) -> Any:
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def employee_display_name(record: Any) -> str:
    name = get_field(record, "employee_name")
    if not name:
        emp = get_field(record, "employee") or get_field(record, "employees")
        if emp is not None:
            name = get_field(emp, "name")
    return name or UNKNOWN_EMPLOYEE


@dataclass
class EmployeeStats:
    name: str
    employee_id: Any = None
    transaction_count: int = 0
    cash_total: Decimal = ZERO
    card_total: Decimal = ZERO
    tips: Decimal = ZERO

    @property
    def total_sales(self) -> Decimal:
        return self.cash_total + self.card_total

    @property
    def employee_tips(self) -> Decimal:
        return tip_halves(self.tips)[0]

    @property
    def business_tips(self) -> Decimal:
        return tip_halves(self.tips)[1]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "employee_id": self.employee_id,
            "transaction_count": self.transaction_count,
            "cash_total": str(round2(self.cash_total)),
            "card_total": str(round2(self.card_total)),
            "tips": str(round2(self.tips)),
            "total_sales": str(round2(self.total_sales)),
        }


@dataclass
class SalesAggregate:
    total_sales: Decimal = ZERO
    cash_total: Decimal = ZERO
    card_total: Decimal = ZERO
    tips_total: Decimal = ZERO
    transaction_count: int = 0
    # key -> stats, in order of first appearance
    per_employee: Dict[Any, EmployeeStats] = field(default_factory=dict)

    @property
    def employee_tips_half(self) -> Decimal:
        return tip_halves(self.tips_total)[0]

    @property
    def business_tips_half(self) -> Decimal:
        return tip_halves(self.tips_total)[1]

    @property
    def employees(self) -> List[EmployeeStats]:
        return list(self.per_employee.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_sales": str(round2(self.total_sales)),
            "cash_total": str(round2(self.cash_total)),
            "card_total": str(round2(self.card_total)),
            "tips_total": str(round2(self.tips_total)),
            "employee_tips_half": str(round2(self.employee_tips_half)),
            "business_tips_half": str(round2(self.business_tips_half)),
            "transaction_count": self.transaction_count,
            "per_employee": [s.to_dict() for s in self.per_employee.values()],
        }


def aggregate_transactions(transactions: Iterable[Any], group_by: str = "name") -> SalesAggregate:
    """
    Reduce transactions to totals and a per-employee breakdown.

    ``group_by="name"`` buckets by rendered employee name, so two employees
    sharing a name share a bucket. ``group_by="id"`` buckets by employee id.
    The subtotal of every transaction lands in exactly one of cash/card;
    anything that is not ``cash`` counts as card.
    """
    if group_by not in ("name", "id"):
        raise ValueError(f"unknown grouping: {group_by!r}")

    agg = SalesAggregate()
    for t in transactions:
        subtotal = to_decimal(get_field(t, "subtotal"))
        tips = to_decimal(get_field(t, "tips"))
        is_cash = (get_field(t, "payment_method") or "") == "cash"

        agg.transaction_count += 1
        agg.total_sales += subtotal
        agg.tips_total += tips
        if is_cash:
            agg.cash_total += subtotal
        else:
            agg.card_total += subtotal

        name = employee_display_name(t)
        emp_id = get_field(t, "employee_id")
        if group_by == "name":
            key = name
        else:
            key = emp_id if emp_id is not None else f"unknown-{name}"

        stats = agg.per_employee.get(key)
        if stats is None:
            stats = agg.per_employee[key] = EmployeeStats(name=name, employee_id=emp_id)
        stats.transaction_count += 1
        stats.tips += tips
        if is_cash:
            stats.cash_total += subtotal
        else:
            stats.card_total += subtotal
    return agg


def count_by_local_day(records: Iterable[Any]) -> Counter:
    """Local calendar date -> number of transactions (records or bare instants)."""
    counts: Counter = Counter()
    for r in records:
        instant = r if isinstance(r, (datetime, str)) else get_field(r, "transaction_date")
        if instant is None:
            continue
        counts[to_local_calendar_date(instant)] += 1
    return counts


def item_label(item: Any) -> str:
    name = get_field(item, "service_name") or ""
    qty = int(get_field(item, "quantity") or 1)
    return f"{name} (x{qty})" if qty > 1 else name


def item_summary(items: Iterable[Any] | None, sep: str = ", ") -> str:
    labels = [item_label(i) for i in (items or [])]
    return sep.join(labels) if labels else "N/A"
