# -*- coding: utf-8 -*-
"""
Per-request page state. Each object is built when a view is entered and is
dropped with the response; nothing is kept at module level.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional

from . import store
from .aggregation import (
    SalesAggregate, aggregate_transactions, count_by_local_day, item_summary, round2,
)
from .payouts import PayoutSheet
from .timezone import (
    days_in_month, first_weekday_of_month, format_local_date, format_local_time,
    format_month_param, local_day_bounds, local_month_bounds, local_today, month_name,
    normalize_month, shift_month,
)


class SalesWindow:
    """Transactions of one local day or month and their aggregate."""

    def __init__(self, start: Optional[datetime], end: Optional[datetime], label: str,
                 transactions: Iterable[Any], group_by: str = "name"):
        self.start = start
        self.end = end
        self.label = label
        self.transactions = list(transactions)
        self.aggregate: SalesAggregate = aggregate_transactions(self.transactions, group_by=group_by)

    @classmethod
    def for_day(cls, day: date, group_by: str = "name") -> "SalesWindow":
        start, end = local_day_bounds(day)
        rows = store.fetch_transactions(start, end, newest_first=True)
        return cls(start, end, f"Date: {format_local_date(day)}", rows, group_by)

    @classmethod
    def for_month(cls, year: int, month_index: int, group_by: str = "name",
                  with_items: bool = True) -> "SalesWindow":
        y, mi = normalize_month(year, month_index)
        start, end = local_month_bounds(y, mi)
        rows = store.fetch_transactions(start, end, with_items=with_items, newest_first=False)
        return cls(start, end, f"Month: {month_name(mi)} {y}", rows, group_by)

    @classmethod
    def empty(cls, label: str = "") -> "SalesWindow":
        return cls(None, None, label, [])

    def rows(self) -> list[dict]:
        out = []
        for t in self.transactions:
            employee_tip, business_tip = t.tip_split
            out.append({
                "id": t.id,
                "time": format_local_time(t.transaction_date),
                "date": format_local_date(t.transaction_date),
                "items": item_summary(t.items),
                "employee": t.employee_name,
                "payment_method": t.payment_method,
                "tips": str(round2(t.tips)),
                "employee_tip": str(round2(employee_tip)),
                "business_tip": str(round2(business_tip)),
                "total": str(round2(t.total)),
            })
        return out

    def to_dict(self) -> dict:
        return {"label": self.label, "summary": self.aggregate.to_dict(), "transactions": self.rows()}


class CalendarMonth:
    """Month grid with per-local-day transaction counts."""

    def __init__(self, year: int, month_index: int, today: Optional[date] = None):
        self.year, self.month_index = normalize_month(year, month_index)
        self.today = today or local_today()
        self.counts: dict[date, int] = {}

    def load(self) -> "CalendarMonth":
        start, end = local_month_bounds(self.year, self.month_index)
        self.counts = dict(count_by_local_day(store.fetch_transaction_instants(start, end)))
        return self

    @property
    def label(self) -> str:
        return f"{month_name(self.month_index)} {self.year}"

    @property
    def param(self) -> str:
        return format_month_param(self.year, self.month_index)

    @property
    def prev_param(self) -> str:
        return format_month_param(*shift_month(self.year, self.month_index, -1))

    @property
    def next_param(self) -> str:
        return format_month_param(*shift_month(self.year, self.month_index, 1))

    def weeks(self) -> list[list[Optional[dict]]]:
        cells: list[Optional[dict]] = [None] * first_weekday_of_month(self.year, self.month_index)
        for day in range(1, days_in_month(self.year, self.month_index) + 1):
            d = date(self.year, self.month_index + 1, day)
            cells.append({
                "day": day,
                "date": d,
                "count": self.counts.get(d, 0),
                "is_today": d == self.today,
            })
        while len(cells) % 7:
            cells.append(None)
        return [cells[i:i + 7] for i in range(0, len(cells), 7)]


class SalaryPage:
    """Month totals per employee id with the entered payout percentages."""

    def __init__(self, year: int, month_index: int):
        self.year, self.month_index = normalize_month(year, month_index)
        self.window = SalesWindow.for_month(self.year, self.month_index, group_by="id", with_items=False)
        agg = self.window.aggregate
        self.employees = sorted(agg.per_employee.items(), key=lambda kv: kv[1].name.lower())
        self.sheet = PayoutSheet(agg.total_sales, agg.business_tips_half)
        for key, stats in self.employees:
            self.sheet.add_row(str(key), stats.name, stats.total_sales)

    @property
    def param(self) -> str:
        return format_month_param(self.year, self.month_index)

    def apply(self, percentages: Mapping[str, Any]) -> dict[str, str]:
        """Enter every posted percentage; unknown rows are ignored."""
        states = {}
        for key, raw in (percentages or {}).items():
            if str(key) in self.sheet.rows:
                states[str(key)] = self.sheet.enter(str(key), raw)
        return states

    def to_dict(self, states: Optional[Mapping[str, str]] = None) -> dict:
        states = states or {}
        rows = {}
        for key, row in self.sheet.rows.items():
            d = row.to_dict()
            d["state"] = states.get(key, row.state)
            rows[key] = d
        return {"month": self.param, "rows": rows, "summary": self.sheet.summary.to_dict()}
