"""Shared test fixtures."""
import itertools
from datetime import datetime, timedelta

import pytest

from app import create_app
from config import TestConfig
from models import db
from models.company import Company
from models.lead import VisitorLead
from models.user import User, PLATFORM_ADMIN, COMPANY_ADMIN, EMPLOYEE
from models.visitor import Visitor
from utils.auth_utils import generate_token, hash_password

PASSWORD = "secret123"


@pytest.fixture
def app():
    """Flask app on a fresh in-memory SQLite database."""
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def session(app):
    return db.session


@pytest.fixture
def make_company(app):
    """Factory fixture: persisted Company with a deterministic code."""
    counter = itertools.count(1)

    def _make(name=None, status="active", company_code=None):
        n = next(counter)
        company = Company(
            name=name or f"Company {n}",
            company_code=company_code or f"COMP{n:06d}",
            status=status,
        )
        db.session.add(company)
        db.session.commit()
        return company
    return _make


@pytest.fixture
def make_user(app):
    counter = itertools.count(1)

    def _make(role=EMPLOYEE, company=None, email=None, full_name=None, is_active=True, password=PASSWORD):
        n = next(counter)
        user = User(
            email=email or f"{role}{n}@example.com",
            password_hash=hash_password(password),
            full_name=full_name or f"{role.replace('_', ' ').title()} {n}",
            role=role,
            company_id=company.id if company else None,
            is_active=is_active,
        )
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture
def make_visitor(app):
    counter = itertools.count(1)

    def _make(phone=None, full_name=None, **fields):
        n = next(counter)
        visitor = Visitor(phone=phone or f"90000000{n:02d}", full_name=full_name or f"Visitor {n}", **fields)
        db.session.add(visitor)
        db.session.commit()
        return visitor
    return _make


@pytest.fixture
def make_lead(app):
    """Factory fixture: lead captured `days_ago` days before now."""
    def _make(visitor, employee, company=None, days_ago=0, **fields):
        created = datetime.utcnow() - timedelta(days=days_ago)
        lead = VisitorLead(
            visitor_id=visitor.id,
            employee_id=employee.id,
            company_id=(company or employee.company).id,
            capture_date=created.date(),
            created_at=created,
            updated_at=created,
            **fields,
        )
        db.session.add(lead)
        db.session.commit()
        return lead
    return _make


@pytest.fixture
def company(make_company):
    return make_company(name="Acme Expo")


@pytest.fixture
def other_company(make_company):
    return make_company(name="Globex")


@pytest.fixture
def platform_admin(make_user):
    return make_user(role=PLATFORM_ADMIN, email="root@example.com")


@pytest.fixture
def company_admin(make_user, company):
    return make_user(role=COMPANY_ADMIN, company=company, email="admin@acme.example.com")


@pytest.fixture
def employee(make_user, company):
    return make_user(role=EMPLOYEE, company=company, email="emp@acme.example.com", full_name="Ravi Kumar")


@pytest.fixture
def coworker(make_user, company):
    return make_user(role=EMPLOYEE, company=company, email="emp2@acme.example.com")


@pytest.fixture
def outsider(make_user, other_company):
    return make_user(role=EMPLOYEE, company=other_company, email="emp@globex.example.com")


@pytest.fixture
def auth_headers(app):
    """Build an Authorization header for a user."""
    def _headers(user):
        return {"Authorization": f"Bearer {generate_token(user)}"}
    return _headers
