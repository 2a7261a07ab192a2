# -*- coding: utf-8 -*-
from functools import wraps
from flask import redirect, url_for, request, flash
from flask_login import current_user

HOME_BY_ROLE = {
    "admin": "dashboard.admin_index",
    "employee": "dashboard.employee_index",
}

def landing_url(user) -> str:
    endpoint = HOME_BY_ROLE.get(getattr(user, "role", ""), "auth.login")
    return url_for(endpoint)

def roles_required(*roles):
    """
    Not signed in -> /login.
    Signed in with a role outside ``roles`` -> /login as well (no partial render).
    """
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated:
                return redirect(url_for("auth.login", next=request.path))
            if current_user.role not in roles:
                flash("Please sign in with an account that can open this page.", "warning")
                return redirect(url_for("auth.login"))
            return f(*args, **kwargs)
        return wrapper
    return decorator
