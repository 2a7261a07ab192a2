# -*- coding: utf-8 -*-
import logging
from flask import Flask, redirect, current_app
from flask_login import login_required, current_user

from .config import Config, ensure_instance
from .extensions import db, migrate, login_manager
from .aggregation import round2

# blueprints
from .auth import auth_bp
from .modules.dashboard import bp as dashboard_bp
from .modules.calendar import bp as calendar_bp
from .modules.salary import bp as salary_bp
from .modules.employees import bp as employees_bp
from .modules.services import bp as services_bp
from .modules.entry import bp as entry_bp

from .security import landing_url


def _configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger(__name__).setLevel(level)
    app.logger.setLevel(level)


def create_app(config_object=Config):
    app = Flask(
        __name__,
        instance_relative_config=True,
        template_folder="templates",
    )
    app.config.from_object(config_object)
    _configure_logging(app)
    ensure_instance(app)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    # --- jinja filters ---
    @app.template_filter("fmt_amount")
    def fmt_amount(v):
        # report/CSV style: two decimals, no currency code
        return f"{round2(v):.2f}"

    @app.template_filter("fmt_money")
    def fmt_money(v):
        return f"{current_app.config['CURRENCY_CODE']} {round2(v):.2f}"

    @app.context_processor
    def inject_business():
        return {
            "business_name": app.config["BUSINESS_NAME"],
            "currency_code": app.config["CURRENCY_CODE"],
        }

    # --- blueprints ---
    app.register_blueprint(auth_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(calendar_bp)
    app.register_blueprint(salary_bp)
    app.register_blueprint(employees_bp)
    app.register_blueprint(services_bp)
    app.register_blueprint(entry_bp)

    # --- home ---
    @app.route("/")
    @login_required
    def home():
        return redirect(landing_url(current_user))

    return app
