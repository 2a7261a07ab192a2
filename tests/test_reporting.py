"""
Tests for the monthly CSV report.
"""

import csv
import io
from datetime import datetime
from decimal import Decimal

from stylematrix.aggregation import aggregate_transactions
from stylematrix.reporting import build_monthly_report, report_filename
from stylematrix.timezone import UTC

GENERATED = datetime(2024, 4, 1, 6, 0, tzinfo=UTC)  # 10:00 AM local


def _rows(text):
    return list(csv.reader(io.StringIO(text)))


def _sales():
    return [
        {
            "id": 7,
            "employee_name": "Omar",
            "payment_method": "card",
            "subtotal": Decimal("200"),
            "tips": Decimal("0"),
            "total": Decimal("200"),
            "transaction_date": "2024-03-20T09:00:00Z",
            "items": [{"service_name": "Hair Coloring", "quantity": 1}],
        },
        {
            "id": 3,
            "employee_name": "Sara",
            "payment_method": "cash",
            "subtotal": Decimal("100"),
            "tips": Decimal("10"),
            "total": Decimal("110"),
            "transaction_date": "2024-03-09T21:30:00Z",
            "items": [
                {"service_name": "Haircut", "quantity": 2},
                {"service_name": "Shampoo", "quantity": 1},
            ],
        },
    ]


class TestReportFilename:
    def test_pattern(self):
        assert report_filename(2024, 2) == "Monthly_Sales_Report_March_2024.csv"
        assert report_filename(2024, 12) == "Monthly_Sales_Report_January_2025.csv"


class TestBuildMonthlyReport:
    def test_header_and_summary(self):
        sales = _sales()
        rows = _rows(build_monthly_report(aggregate_transactions(sales), sales, 2024, 2,
                                          generated_at=GENERATED))
        assert rows[0] == ["STYLE MATRIX - MONTHLY SALES REPORT"]
        assert rows[1] == ["Month: March 2024"]
        assert rows[2] == ["Generated: 01/04/2024 10:00 AM"]
        assert rows[3] == []
        assert rows[4] == ["SUMMARY"]
        summary = {r[0]: r[1] for r in rows[6:13]}
        assert summary == {
            "Total Sales (excl. tips)": "300.00",
            "Cash Total": "100.00",
            "Card Total": "200.00",
            "Total Tips": "10.00",
            "Employee Tips (50%)": "5.00",
            "Business Tips (50%)": "5.00",
            "Total Transactions": "2",
        }

    def test_employee_rows_follow_first_appearance(self):
        sales = _sales()
        rows = _rows(build_monthly_report(aggregate_transactions(sales), sales, 2024, 2,
                                          generated_at=GENERATED))
        start = rows.index(["EMPLOYEE PERFORMANCE"])
        assert rows[start + 2][0] == "Employee Name"
        assert rows[start + 3] == ["Omar", "1", "0.00", "200.00", "0.00", "0.00", "0.00", "200.00"]
        assert rows[start + 4] == ["Sara", "1", "100.00", "0.00", "10.00", "5.00", "5.00", "100.00"]

    def test_details_are_sorted_by_instant_in_local_time(self):
        sales = _sales()
        rows = _rows(build_monthly_report(aggregate_transactions(sales), sales, 2024, 2,
                                          generated_at=GENERATED))
        start = rows.index(["DETAILED TRANSACTIONS"])
        detail = rows[start + 3:]
        assert detail[0] == [
            "10/03/2024", "01:30 AM", "3", "Sara", "CASH",
            "Haircut (x2); Shampoo", "100.00", "10.00", "110.00",
        ]
        assert detail[1][2] == "7"
        assert detail[1][4] == "CARD"
        assert len(detail) == 2

    def test_empty_month_keeps_sections(self):
        rows = _rows(build_monthly_report(aggregate_transactions([]), [], 2024, 1,
                                          generated_at=GENERATED, business_name="SALON"))
        assert rows[0] == ["SALON - MONTHLY SALES REPORT"]
        assert ["Total Sales (excl. tips)", "0.00"] in rows
        assert ["Total Transactions", "0"] in rows
        perf = rows.index(["EMPLOYEE PERFORMANCE"])
        detail = rows.index(["DETAILED TRANSACTIONS"])
        # header row then the blank separator, no data rows
        assert rows[perf + 3] == []
        assert rows[detail + 2][0] == "Date"
        assert rows[detail + 3:] == []
