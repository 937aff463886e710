from __future__ import annotations

from pathlib import Path
import sys

import pytest
import requests
from sqlalchemy.pool import StaticPool

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from shopkeep import create_app
from shopkeep.config import Config
from shopkeep.extensions import db
from shopkeep.store.catalog import catalog_client

CATALOG_URL = "https://catalog.test/api"

CATALOG_DOCUMENTS: dict[str, dict] = {
    "equipment": {
        "count": 4,
        "results": [
            {"index": "chain-shirt", "name": "Chain Shirt", "url": "/api/equipment/chain-shirt"},
            {"index": "club", "name": "Club", "url": "/api/equipment/club"},
            {"index": "longsword", "name": "Longsword", "url": "/api/equipment/longsword"},
            {"index": "shortsword", "name": "Shortsword", "url": "/api/equipment/shortsword"},
        ],
    },
    "equipment/chain-shirt": {
        "index": "chain-shirt",
        "name": "Chain Shirt",
        "cost": {"quantity": 50, "unit": "gp"},
    },
    "equipment/club": {"index": "club", "name": "Club", "cost": {"quantity": 1, "unit": "sp"}},
    "equipment/longsword": {
        "index": "longsword",
        "name": "Longsword",
        "cost": {"quantity": 15, "unit": "gp"},
    },
    "equipment/shortsword": {
        "index": "shortsword",
        "name": "Shortsword",
        "cost": {"quantity": 10, "unit": "gp"},
    },
    "equipment/blessed-token": {"index": "blessed-token", "name": "Blessed Token"},
    "magic-items": {
        "count": 3,
        "results": [
            {"index": "bag-of-holding", "name": "Bag of Holding", "url": "/api/magic-items/bag-of-holding"},
            {"index": "flame-tongue", "name": "Flame Tongue", "url": "/api/magic-items/flame-tongue"},
            {"index": "staff-of-power", "name": "Staff of Power", "url": "/api/magic-items/staff-of-power"},
        ],
    },
    "magic-items/bag-of-holding": {
        "index": "bag-of-holding",
        "name": "Bag of Holding",
        "rarity": {"name": "Uncommon"},
    },
    "magic-items/flame-tongue": {
        "index": "flame-tongue",
        "name": "Flame Tongue",
        "rarity": {"name": "Rare"},
        "cost": {"quantity": 5000, "unit": "gp"},
    },
    "magic-items/staff-of-power": {
        "index": "staff-of-power",
        "name": "Staff of Power",
        "rarity": {"name": "Very Rare"},
    },
    "magic-items/sentient-blade": {
        "index": "sentient-blade",
        "name": "Sentient Blade",
        "rarity": {"name": "Varies"},
    },
}


class TestingConfig(Config):
    """Configuration tuned for isolated unit tests."""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {
        "connect_args": {"check_same_thread": False},
        "poolclass": StaticPool,
    }
    CATALOG_URL = CATALOG_URL
    STARTING_GOLD = 100
    ITEMS_PER_PAGE = 20


class FakeResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(self, status_code: int, payload: dict | None = None) -> None:
        self.status_code = status_code
        self._payload = payload

    def json(self) -> dict:
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeCatalogSession:
    """Serve catalog documents from memory, keyed by API path."""

    def __init__(self, documents: dict[str, dict]) -> None:
        self.documents = dict(documents)
        self.requested: list[str] = []
        self.error: Exception | None = None
        self.status_override: int | None = None

    def get(self, url: str, timeout: float | None = None) -> FakeResponse:
        self.requested.append(url)
        if self.error is not None:
            raise self.error
        if self.status_override is not None:
            return FakeResponse(self.status_override)
        path = url[len(CATALOG_URL) + 1 :]
        if path not in self.documents:
            return FakeResponse(404, {"error": "Not found"})
        return FakeResponse(200, self.documents[path])


@pytest.fixture()
def app():
    """Create a Flask app instance backed by an in-memory database."""

    application = create_app(TestingConfig)
    yield application
    with application.app_context():
        db.drop_all()
        db.session.remove()


@pytest.fixture()
def client(app):
    """Provide a Flask test client for request assertions."""

    return app.test_client()


@pytest.fixture()
def catalog(app, monkeypatch):
    """Point the shared catalog client at an in-memory catalog."""

    session = FakeCatalogSession(CATALOG_DOCUMENTS)
    monkeypatch.setattr(catalog_client, "session", session)
    return session


@pytest.fixture()
def file_app(tmp_path):
    """Create an app backed by an on-disk database shared across threads."""

    class FileBackedConfig(TestingConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'shopkeep.db'}"
        SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"timeout": 15}}

    application = create_app(FileBackedConfig)
    yield application
    with application.app_context():
        db.drop_all()
        db.session.remove()
