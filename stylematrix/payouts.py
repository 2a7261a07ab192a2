# -*- coding: utf-8 -*-
"""
Percentage-of-sales payouts for the salary page.

Nothing here is persisted: percentages are entered per request and the
business summary is recomputed from scratch after every edit.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Optional

from .aggregation import ZERO, round2, to_decimal
from .errors import ValidationError

EMPTY, VALID, REJECTED = "empty", "valid", "rejected"


class PayoutError(ValidationError):
    pass


def compute_payout(total_sales: Any, percentage: Any) -> Decimal:
    """``total_sales * percentage / 100``; percentage must lie in [0, 100]."""
    pct = to_decimal(percentage)
    if pct < 0 or pct > 100:
        raise PayoutError("Percentage must be between 0 and 100", field="percentage")
    return to_decimal(total_sales) * pct / 100


@dataclass
class BusinessSummary:
    total_sales: Decimal
    total_paid_to_employees: Decimal
    business_tips: Decimal
    total_remaining: Decimal

    def to_dict(self) -> Dict[str, str]:
        return {
            "total_sales": str(round2(self.total_sales)),
            "total_paid_to_employees": str(round2(self.total_paid_to_employees)),
            "business_tips": str(round2(self.business_tips)),
            "total_remaining": str(round2(self.total_remaining)),
        }


def recompute_business_summary(month_total_sales: Any, business_tips_half: Any,
                               payouts: Iterable[Any]) -> BusinessSummary:
    sales = to_decimal(month_total_sales)
    tips = to_decimal(business_tips_half)
    paid = sum((to_decimal(p) for p in payouts), ZERO)
    return BusinessSummary(
        total_sales=sales,
        total_paid_to_employees=paid,
        business_tips=tips,
        total_remaining=sales - paid + tips,
    )


@dataclass
class PayoutRow:
    key: Any
    name: str
    total_sales: Decimal
    state: str = EMPTY
    percentage: Optional[Decimal] = None
    amount: Decimal = ZERO

    def reset(self) -> None:
        self.state, self.percentage, self.amount = EMPTY, None, ZERO

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state,
            "percentage": None if self.percentage is None else str(self.percentage),
            "amount": str(round2(self.amount)),
        }


class PayoutSheet:
    """
    Payout rows of one month. Each row is empty, valid(percentage, amount), or
    momentarily rejected: an out-of-range entry reports ``rejected`` and leaves
    the row empty with a zero amount.
    """

    def __init__(self, month_total_sales: Any, business_tips_half: Any):
        self.month_total_sales = to_decimal(month_total_sales)
        self.business_tips_half = to_decimal(business_tips_half)
        self.rows: Dict[Any, PayoutRow] = {}

    def add_row(self, key: Any, name: str, total_sales: Any) -> PayoutRow:
        row = self.rows[key] = PayoutRow(key=key, name=name, total_sales=to_decimal(total_sales))
        return row

    def enter(self, key: Any, raw: Any) -> str:
        """Apply an entered percentage to a row; returns the resulting state."""
        row = self.rows[key]
        if raw is None or str(raw).strip() == "":
            row.reset()
            return EMPTY
        try:
            pct = Decimal(str(raw).strip())
            if not pct.is_finite():
                raise InvalidOperation
            amount = compute_payout(row.total_sales, pct)
        except (InvalidOperation, PayoutError):
            row.reset()
            return REJECTED
        row.state, row.percentage, row.amount = VALID, pct, amount
        return VALID

    @property
    def summary(self) -> BusinessSummary:
        return recompute_business_summary(
            self.month_total_sales,
            self.business_tips_half,
            (r.amount for r in self.rows.values()),
        )
