import os
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

SECRET_KEY = os.getenv("SECRET_KEY", "expo-leads-secret-key")


def _database_url():
    url = os.getenv("DATABASE_URL", f"sqlite:///{os.path.join(BASE_DIR, 'expo_leads.db')}")
    # Hosted Postgres often hands out postgres:// but SQLAlchemy needs postgresql://
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


def _flag(name, default="false"):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = SECRET_KEY
    JWT_SECRET = os.getenv("JWT_SECRET", SECRET_KEY)
    JWT_EXPIRES_DAYS = int(os.getenv("JWT_EXPIRES_DAYS", "7"))

    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}
    if not SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
        SQLALCHEMY_ENGINE_OPTIONS.update({
            "pool_size": int(os.getenv("DB_POOL_SIZE", "20")),
            "pool_timeout": int(os.getenv("DB_POOL_TIMEOUT", "10")),
            "pool_recycle": 1800,
        })

    PAGE_SIZE = int(os.getenv("PAGE_SIZE", "50"))
    MOBILE_PAGE_SIZE = int(os.getenv("MOBILE_PAGE_SIZE", "20"))

    # Employees joining through a company code skip admin approval
    ALLOW_MOBILE_SELF_REGISTRATION = _flag("ALLOW_MOBILE_SELF_REGISTRATION")

    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT = os.getenv("LOG_FORMAT", "text")


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    JWT_SECRET = "test-jwt-secret-long-enough-for-hs256"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    PAGE_SIZE = 5
    MOBILE_PAGE_SIZE = 5
    ALLOW_MOBILE_SELF_REGISTRATION = True
