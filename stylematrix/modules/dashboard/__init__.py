# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from datetime import datetime

from flask import Blueprint, current_app, flash, jsonify, redirect, render_template, request, url_for
from sqlalchemy.exc import SQLAlchemyError

from ...extensions import db
from ...pages import SalesWindow
from ...security import roles_required
from ...store import delete_transaction
from ...timezone import UTC, format_local_date, format_local_time, local_today

logger = logging.getLogger(__name__)

bp = Blueprint("dashboard", __name__)


# ------------ helpers ---------------------------------------------------------
def _today_window() -> tuple[SalesWindow, bool]:
    today = local_today()
    try:
        return SalesWindow.for_day(today), True
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("loading transactions for %s failed", today.isoformat())
        return SalesWindow.empty(f"Date: {format_local_date(today)}"), False


def _last_update() -> str:
    return f"Last updated: {format_local_time(datetime.now(UTC))}"


def _safe_next(default: str) -> str:
    nxt = request.form.get("next") or ""
    if nxt.startswith("/") and not nxt.startswith("//"):
        return nxt
    return default


def _page(data_endpoint: str, can_delete: bool):
    window, ok = _today_window()
    if not ok:
        flash("Error loading data. Showing empty totals.", "danger")
    return render_template(
        "dashboard/index.html",
        window=window,
        agg=window.aggregate,
        can_delete=can_delete,
        data_url=url_for(data_endpoint),
        refresh_seconds=current_app.config["AUTO_REFRESH_SECONDS"],
        last_update=_last_update(),
    )


def _feed(page_endpoint: str, can_delete: bool):
    # the page sends an increasing seq and ignores any answer that is not the latest
    seq = request.args.get("seq", default=0, type=int)
    window, ok = _today_window()
    if not ok:
        return jsonify({"ok": False, "seq": seq, "error": "Error loading data"}), 503
    payload = window.to_dict()
    payload.update(
        ok=True,
        seq=seq,
        last_update=_last_update(),
        summary_html=render_template("_summary.html", agg=window.aggregate),
        transactions_html=render_template(
            "_transactions.html", window=window, can_delete=can_delete, back_url=url_for(page_endpoint)
        ),
    )
    return jsonify(payload)


# ------------ admin -----------------------------------------------------------
@bp.get("/admin/")
@roles_required("admin")
def admin_index():
    return _page("dashboard.admin_data", can_delete=True)


@bp.get("/admin/data")
@roles_required("admin")
def admin_data():
    return _feed("dashboard.admin_index", can_delete=True)


@bp.post("/admin/transactions/<int:tx_id>/delete")
@roles_required("admin")
def delete(tx_id: int):
    back = _safe_next(url_for("dashboard.admin_index"))
    if request.form.get("confirm") != "1":
        flash("Deletion was not confirmed.", "warning")
        return redirect(back)
    try:
        deleted = delete_transaction(tx_id)
    except SQLAlchemyError:
        logger.exception("deleting transaction %s failed", tx_id)
        flash("Error deleting transaction.", "danger")
        return redirect(back)
    if deleted:
        flash("Transaction deleted successfully", "success")
    else:
        flash("Transaction not found.", "warning")
    return redirect(back)


# ------------ employee --------------------------------------------------------
# business-wide totals, same as the admin view
@bp.get("/employee/")
@roles_required("employee")
def employee_index():
    return _page("dashboard.employee_data", can_delete=False)


@bp.get("/employee/data")
@roles_required("employee")
def employee_data():
    return _feed("dashboard.employee_index", can_delete=False)
