# -*- coding: utf-8 -*-
from __future__ import annotations

import logging

from flask import Blueprint, flash, redirect, render_template, request, url_for
from sqlalchemy.exc import SQLAlchemyError

from ...errors import ValidationError
from ...extensions import db
from ...security import roles_required
from ... import store

logger = logging.getLogger(__name__)

bp = Blueprint("employees", __name__, url_prefix="/admin/employees")


@bp.route("/", methods=["GET", "POST"])
@roles_required("admin")
def index():
    if request.method == "POST":
        f = request.form
        op = f.get("op")
        eid = f.get("id", default=0, type=int)
        try:
            if op == "create":
                store.create_employee(f.get("name"), f.get("phone"))
                flash("Employee created successfully", "success")
            elif op == "update":
                if store.update_employee(eid, f.get("name"), f.get("phone")):
                    flash("Employee updated successfully", "success")
                else:
                    flash("Employee not found", "warning")
            elif op in ("activate", "deactivate"):
                if f.get("confirm") != "1":
                    flash("Action was not confirmed.", "warning")
                elif store.set_employee_active(eid, op == "activate"):
                    flash(f"Employee {op}d successfully", "success")
                else:
                    flash("Employee not found", "warning")
        except ValidationError as exc:
            flash(exc.message, "danger")
        except SQLAlchemyError:
            logger.exception("employee %s failed", op)
            flash("Error saving employee.", "danger")
        return redirect(url_for("employees.index"))

    try:
        employees = store.list_employees()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("loading employees failed")
        flash("Error loading employees.", "danger")
        employees = []
    return render_template("employees/index.html", employees=employees)
