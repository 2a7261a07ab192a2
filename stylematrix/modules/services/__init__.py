# -*- coding: utf-8 -*-
from __future__ import annotations

import logging

from flask import Blueprint, flash, redirect, render_template, request, url_for
from sqlalchemy.exc import SQLAlchemyError

from ...errors import ValidationError
from ...extensions import db
from ...models import CATEGORIES
from ...security import roles_required
from ... import store

logger = logging.getLogger(__name__)

bp = Blueprint("services", __name__, url_prefix="/admin/services")


def _kind(category: str | None) -> str:
    return "Product" if category == "product" else "Service"


@bp.route("/", methods=["GET", "POST"])
@roles_required("admin")
def index():
    if request.method == "POST":
        f = request.form
        op = f.get("op")
        sid = f.get("id", default=0, type=int)
        try:
            if op == "create":
                s = store.create_service(f.get("name"), f.get("price"), f.get("category"))
                flash(f"{_kind(s.category)} added successfully", "success")
            elif op == "update":
                s = store.update_service(sid, f.get("name"), f.get("price"), f.get("category"))
                if s:
                    flash(f"{_kind(s.category)} updated successfully", "success")
                else:
                    flash("Service not found", "warning")
            elif op == "delete":
                if f.get("confirm") != "1":
                    flash("Deletion was not confirmed.", "warning")
                elif store.delete_service(sid):
                    flash("Service deleted successfully", "success")
                else:
                    flash("Service not found", "warning")
        except ValidationError as exc:
            flash(exc.message, "danger")
        except SQLAlchemyError:
            logger.exception("service %s failed", op)
            flash("Error saving service.", "danger")
        return redirect(url_for("services.index"))

    try:
        services = store.list_services()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("loading services failed")
        flash("Error loading services.", "danger")
        services = []
    return render_template("services/index.html", services=services, categories=CATEGORIES)
