# -*- coding: utf-8 -*-

import logging

from flask import Blueprint, render_template, request, redirect, url_for, flash
from flask_login import current_user, login_user, logout_user, login_required
from ..security import landing_url
from ..store import find_user_by_email

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)

@auth_bp.route("/login", methods=["GET", "POST"])
def login():
    if request.method == "GET" and current_user.is_authenticated:
        return redirect(landing_url(current_user))
    if request.method == "POST":
        email = request.form.get("email", "").strip()
        password = request.form.get("password", "")
        u = find_user_by_email(email)
        if not u or not u.check_password(password):
            # same message whether or not the account exists
            flash("Invalid email or password", "danger")
        else:
            login_user(u, remember=True)
            logger.info("user %s signed in as %s", u.id, u.role)
            return redirect(landing_url(u))
    return render_template("auth/login.html")

@auth_bp.route("/logout")
@login_required
def logout():
    logout_user()
    return redirect(url_for("auth.login"))
