# backend/wapmarket/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Signs JWT bearer tokens; override in every real deployment
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite for local runs, PostgreSQL in production (postgresql://...)
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///wapmarket.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    JWT_ALGORITHM = "HS256"
    JWT_EXPIRES_HOURS = int(os.environ.get("JWT_EXPIRES_HOURS", "24"))

    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    # Flat delivery fee in XAF
    DELIVERY_FEE = int(os.environ.get("DELIVERY_FEE", "2000"))

    # When False, checkout lets stock go negative (historical behavior)
    ENFORCE_STOCK = _env_bool("ENFORCE_STOCK", False)

    CORS_ORIGINS = os.environ.get(
        "CORS_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:8080",
    )

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Default admin created by `flask system init`
    ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "admin@wapmarket.local")
    ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "Admin12345")
    ADMIN_PHONE = os.environ.get("ADMIN_PHONE", "+240555558213")
