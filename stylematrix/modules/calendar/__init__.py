# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from datetime import datetime

from flask import Blueprint, Response, current_app, flash, redirect, render_template, request, url_for
from sqlalchemy.exc import SQLAlchemyError

from ...extensions import db
from ...pages import CalendarMonth, SalesWindow
from ...reporting import CSV_MIMETYPE, build_monthly_report, report_filename
from ...security import roles_required
from ...timezone import UTC, format_month_param, parse_local_date, parse_month

logger = logging.getLogger(__name__)

bp = Blueprint("calendar", __name__)


def _calendar(endpoint: str, can_export: bool):
    """
    ?m=YYYY-MM picks the month, ?d=YYYY-MM-DD a day inside it,
    ?view=month swaps the day details for the whole month.
    """
    year, mi = parse_month(request.args.get("m"))
    selected = parse_local_date(request.args.get("d"))
    monthly = request.args.get("view") == "month"
    if selected and not request.args.get("m"):
        year, mi = selected.year, selected.month - 1

    cal = CalendarMonth(year, mi)
    details = None
    try:
        cal.load()
        if monthly:
            details = SalesWindow.for_month(year, mi)
        elif selected:
            details = SalesWindow.for_day(selected)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("loading calendar %s failed", format_month_param(year, mi))
        flash("Error loading calendar data.", "danger")

    return render_template(
        "calendar/index.html",
        cal=cal,
        details=details,
        selected=selected,
        monthly=monthly,
        endpoint=endpoint,
        can_export=can_export and monthly and details is not None,
    )


@bp.get("/admin/calendar")
@roles_required("admin")
def admin_calendar():
    return _calendar("calendar.admin_calendar", can_export=True)


@bp.get("/employee/calendar")
@roles_required("employee")
def employee_calendar():
    return _calendar("calendar.employee_calendar", can_export=False)


@bp.get("/admin/calendar/report.csv")
@roles_required("admin")
def export_report():
    year, mi = parse_month(request.args.get("m"))
    try:
        window = SalesWindow.for_month(year, mi)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("monthly report %s failed", format_month_param(year, mi))
        flash("Error generating report.", "danger")
        return redirect(url_for("calendar.admin_calendar", m=format_month_param(year, mi), view="month"))

    body = build_monthly_report(
        window.aggregate,
        window.transactions,
        year,
        mi,
        generated_at=datetime.now(UTC),
        business_name=current_app.config["BUSINESS_NAME"],
    )
    logger.info("monthly report %s: %d transactions", format_month_param(year, mi), window.aggregate.transaction_count)
    return Response(
        body,
        content_type=CSV_MIMETYPE,
        headers={"Content-Disposition": f'attachment; filename="{report_filename(year, mi)}"'},
    )
