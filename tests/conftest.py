"""
Pytest configuration and fixtures for the salon point-of-sale app.

Every test gets a fresh in-memory database with two employees, a small
catalog and one admin plus one employee login.
"""

from datetime import datetime, timezone

import pytest

from stylematrix import create_app, store
from stylematrix.config import TestConfig
from stylematrix.extensions import db

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "AdminPassword123"
EMPLOYEE_EMAIL = "sara@example.com"
EMPLOYEE_PASSWORD = "SaraPassword123"


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def employees(app):
    """Two active employees: Sara and Omar."""
    sara = store.create_employee("Sara", "+971 50 123 4567")
    omar = store.create_employee("Omar", "+971 55 765 4321")
    return {"sara": sara, "omar": omar}


@pytest.fixture
def services(app):
    """Two services and one product."""
    return {
        "haircut": store.create_service("Haircut", "50.00", "service"),
        "beard": store.create_service("Beard Trim", "30.00", "service"),
        "shampoo": store.create_service("Shampoo", "45.00", "product"),
    }


@pytest.fixture
def admin_user(app):
    return store.create_user(ADMIN_EMAIL, ADMIN_PASSWORD, role="admin")


@pytest.fixture
def employee_user(app, employees):
    return store.create_user(EMPLOYEE_EMAIL, EMPLOYEE_PASSWORD, role="employee",
                             employee_id=employees["sara"].id)


def _login(client, email, password):
    return client.post("/login", data={"email": email, "password": password})


@pytest.fixture
def admin_client(client, admin_user):
    _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    return client


@pytest.fixture
def employee_client(client, employee_user):
    _login(client, EMPLOYEE_EMAIL, EMPLOYEE_PASSWORD)
    return client


@pytest.fixture
def make_sale(app):
    """Record a sale at a given UTC instant (defaults to now)."""

    def _make(employee, payment_method="cash", lines=None, tips=0, at=None):
        return store.create_transaction(
            employee.id,
            payment_method,
            lines or {},
            tips,
            now=at or datetime.now(timezone.utc),
        )

    return _make
