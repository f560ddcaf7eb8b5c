"""Create the tables and the first platform admin.

    ADMIN_EMAIL=owner@example.com ADMIN_PASSWORD=secret123 python scripts/seed.py
"""
import sys
import os
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app import create_app
from models import db
from models.user import User, PLATFORM_ADMIN
from utils.auth_utils import hash_password


def seed_platform_admin(email, password, full_name="Platform Admin"):
    existing = User.query.filter_by(email=email).first()
    if existing:
        print(f"Platform admin already exists: {email}")
        return existing

    user = User(
        email=email,
        password_hash=hash_password(password),
        full_name=full_name,
        role=PLATFORM_ADMIN,
        company_id=None,
        is_active=True,
    )
    db.session.add(user)
    db.session.commit()
    print(f"✅ Created platform admin: {email}")
    return user


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        db.create_all()
        seed_platform_admin(
            os.getenv("ADMIN_EMAIL", "admin@example.com").strip().lower(),
            os.getenv("ADMIN_PASSWORD", "admin123"),
        )
