# backend/retail360/config.py
from __future__ import annotations
import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored next to the instance by default
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///retail360.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Currency stamped on new shops and cross-shop transactions
    DEFAULT_CURRENCY = os.environ.get("DEFAULT_CURRENCY", "GHS")
