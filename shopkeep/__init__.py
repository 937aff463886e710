"""Application factory for Shopkeep."""
from __future__ import annotations

from flask import Flask

from .config import Config
from .extensions import db
from .logging_service import log_manager
from .store.catalog import catalog_client


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    db.init_app(app)
    log_manager.init_app(app)
    catalog_client.init_app(app)

    from .store.services import ensure_store_defaults

    with app.app_context():
        db.create_all()
        ensure_store_defaults()

    from .store import bp as store_bp
    from .logging import bp as logging_bp

    app.register_blueprint(store_bp, url_prefix="/store")
    app.register_blueprint(logging_bp, url_prefix="/logs")

    for component in ("Store", "Ledger", "Inventory", "Catalog", "Logging"):
        log_manager.register_component(component)

    return app
