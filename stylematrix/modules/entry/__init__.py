# -*- coding: utf-8 -*-
from __future__ import annotations

import logging

from flask import Blueprint, flash, redirect, render_template, request, url_for
from sqlalchemy.exc import SQLAlchemyError

from ...errors import ValidationError
from ...extensions import db
from ...models import CATEGORIES, PAYMENT_METHODS
from ...security import roles_required
from ... import store

logger = logging.getLogger(__name__)

bp = Blueprint("entry", __name__, url_prefix="/employee/new")


def _posted_lines(f) -> dict[str, str]:
    # selected services arrive as service_id=<id>, quantities as qty_<id>
    return {sid: (f.get(f"qty_{sid}") or "1") for sid in f.getlist("service_id")}


def _form(status: int = 200):
    try:
        employees = store.list_employees(active_only=True)
        services = store.list_services()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("loading entry form data failed")
        flash("Error loading data.", "danger")
        employees, services = [], []
    by_category = {c: [s for s in services if s.category == c] for c in CATEGORIES}
    return render_template(
        "entry/new.html",
        employees=employees,
        by_category=by_category,
        payment_methods=PAYMENT_METHODS,
        form=request.form,
        selected=_posted_lines(request.form),
    ), status


@bp.route("/", methods=["GET", "POST"])
@roles_required("employee")
def new():
    if request.method == "GET":
        return _form()

    f = request.form
    try:
        store.create_transaction(
            f.get("employee_id"),
            f.get("payment_method"),
            _posted_lines(f),
            f.get("tips"),
        )
    except ValidationError as exc:
        flash(exc.message, "danger")
        return _form(400)
    except SQLAlchemyError:
        logger.exception("creating transaction failed")
        flash("Error creating transaction.", "danger")
        return _form(500)

    flash("Transaction created successfully!", "success")
    return redirect(url_for("dashboard.employee_index"))
