# -*- coding: utf-8 -*-
from __future__ import annotations

import logging

from flask import Blueprint, flash, jsonify, render_template, request
from sqlalchemy.exc import SQLAlchemyError

from ...extensions import db
from ...pages import SalaryPage
from ...payouts import REJECTED
from ...security import roles_required
from ...timezone import format_month_param, parse_month

logger = logging.getLogger(__name__)

bp = Blueprint("salary", __name__, url_prefix="/admin/salary")


def _load(year: int, mi: int) -> SalaryPage | None:
    try:
        return SalaryPage(year, mi)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("loading salary data for %s failed", format_month_param(year, mi))
        return None


@bp.get("/")
@roles_required("admin")
def index():
    year, mi = parse_month(request.args.get("m"))
    page = _load(year, mi)
    if page is None:
        flash("Error loading salary data. Please try again.", "danger")
    return render_template("salary/index.html", page=page, month_param=format_month_param(year, mi))


@bp.post("/payouts")
@roles_required("admin")
def payouts():
    """
    Recompute payouts for the posted percentages.
    Body: {"month": "YYYY-MM", "percentages": {"<row key>": "<0..100>"}}
    """
    payload = request.get_json(silent=True) or {}
    year, mi = parse_month(payload.get("month"))
    page = _load(year, mi)
    if page is None:
        return jsonify({"ok": False, "error": "Error loading salary data"}), 503

    states = page.apply(payload.get("percentages") or {})
    body = page.to_dict(states)
    body["ok"] = True
    if REJECTED in states.values():
        body["message"] = "Percentage must be between 0 and 100"
    return jsonify(body)
