# models/__init__.py
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def iso(value):
    return value.isoformat() if value is not None else None


# Import all models
from .company import Company
from .user import User, PLATFORM_ADMIN, COMPANY_ADMIN, EMPLOYEE
from .visitor import Visitor
from .lead import VisitorLead
