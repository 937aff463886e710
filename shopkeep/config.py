"""Configuration settings for Shopkeep."""
from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


class Config:
    """Base configuration class."""

    SECRET_KEY = os.environ.get("SHOPKEEP_SECRET_KEY", "shopkeep-dev-key")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "SHOPKEEP_DATABASE_URI", f"sqlite:///{BASE_DIR / 'shopkeep.db'}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    ENVIRONMENT = os.environ.get("SHOPKEEP_ENV", "development")
    LOG_RETENTION = int(os.environ.get("SHOPKEEP_LOG_RETENTION", 200))

    CATALOG_URL = os.environ.get("SHOPKEEP_CATALOG_URL", "https://www.dnd5eapi.co/api")
    CATALOG_TIMEOUT = float(os.environ.get("SHOPKEEP_CATALOG_TIMEOUT", 10))
    ITEMS_PER_PAGE = int(os.environ.get("SHOPKEEP_ITEMS_PER_PAGE", 20))
    STARTING_GOLD = int(os.environ.get("SHOPKEEP_STARTING_GOLD", 100))
    DEFAULT_PLAYER = os.environ.get("SHOPKEEP_DEFAULT_PLAYER", "Adventurer")
