# -*- coding: utf-8 -*-
"""
Monthly sales report as CSV text.

Layout (fixed order): header, SUMMARY, EMPLOYEE PERFORMANCE, DETAILED
TRANSACTIONS. Amounts carry two decimals and no currency code.
"""
from __future__ import annotations

import csv
import io
from datetime import datetime
from typing import Any, Iterable, Optional

from .aggregation import SalesAggregate, get_field, employee_display_name, item_summary, round2
from .timezone import format_local_date, format_local_time, month_name, normalize_month, to_utc_instant

CSV_MIMETYPE = "text/csv; charset=utf-8"

SUMMARY_ROWS = (
    ("Total Sales (excl. tips)", "total_sales"),
    ("Cash Total", "cash_total"),
    ("Card Total", "card_total"),
    ("Total Tips", "tips_total"),
    ("Employee Tips (50%)", "employee_tips_half"),
    ("Business Tips (50%)", "business_tips_half"),
)

EMPLOYEE_HEADER = [
    "Employee Name", "Transactions", "Cash Total", "Card Total", "Total Tips",
    "Employee Tips (50%)", "Business Tips (50%)", "Total Sales (excl. tips)",
]

DETAIL_HEADER = [
    "Date", "Time", "Transaction ID", "Employee Name", "Payment Method",
    "Services/Products", "Subtotal", "Tips", "Total",
]


def money(v: Any) -> str:
    return f"{round2(v):.2f}"


def report_filename(year: int, month_index: int) -> str:
    y, mi = normalize_month(year, month_index)
    return f"Monthly_Sales_Report_{month_name(mi)}_{y}.csv"


def _section(writer, title: str) -> None:
    writer.writerow([title])
    writer.writerow(["=" * len(title)])


def build_monthly_report(aggregate: SalesAggregate, transactions: Iterable[Any], year: int,
                         month_index: int, generated_at: Optional[datetime] = None,
                         business_name: str = "STYLE MATRIX") -> str:
    y, mi = normalize_month(year, month_index)
    generated_at = generated_at or datetime.now().astimezone()

    buf = io.StringIO()
    w = csv.writer(buf, lineterminator="\n")

    w.writerow([f"{business_name} - MONTHLY SALES REPORT"])
    w.writerow([f"Month: {month_name(mi)} {y}"])
    w.writerow([f"Generated: {format_local_date(generated_at)} {format_local_time(generated_at)}"])
    w.writerow([])

    _section(w, "SUMMARY")
    for label, attr in SUMMARY_ROWS:
        w.writerow([label, money(getattr(aggregate, attr))])
    w.writerow(["Total Transactions", aggregate.transaction_count])
    w.writerow([])

    _section(w, "EMPLOYEE PERFORMANCE")
    w.writerow(EMPLOYEE_HEADER)
    for stats in aggregate.per_employee.values():
        w.writerow([
            stats.name,
            stats.transaction_count,
            money(stats.cash_total),
            money(stats.card_total),
            money(stats.tips),
            money(stats.employee_tips),
            money(stats.business_tips),
            money(stats.total_sales),
        ])
    w.writerow([])

    _section(w, "DETAILED TRANSACTIONS")
    w.writerow(DETAIL_HEADER)
    ordered = sorted(transactions, key=lambda t: to_utc_instant(get_field(t, "transaction_date")))
    for t in ordered:
        instant = get_field(t, "transaction_date")
        w.writerow([
            format_local_date(instant),
            format_local_time(instant),
            get_field(t, "id"),
            employee_display_name(t),
            (get_field(t, "payment_method") or "").upper(),
            item_summary(get_field(t, "items") or get_field(t, "transaction_items"), sep="; "),
            money(get_field(t, "subtotal")),
            money(get_field(t, "tips")),
            money(get_field(t, "total")),
        ])
    return buf.getvalue()
