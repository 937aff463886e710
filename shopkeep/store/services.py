"""Helper utilities for store data management."""
from __future__ import annotations

from typing import Any, Iterable

from flask import current_app

from ..extensions import db
from . import inventory
from .catalog import PARSERS, try_price_of
from .ledger import MAX_GOLD
from .models import User


def provision_user(name: str, gold: int = 0) -> User:
    """Create a player account with an opening gold balance."""

    if gold < 0 or gold > MAX_GOLD:
        raise ValueError(f"Opening gold must be between 0 and {MAX_GOLD}.")
    user = User(name=name, gold=gold)
    db.session.add(user)
    db.session.commit()
    return user


def ensure_store_defaults() -> User | None:
    """Provision the default player when no account exists yet."""

    if User.query.first() is not None:
        return None
    return provision_user(
        current_app.config.get("DEFAULT_PLAYER", "Adventurer"),
        current_app.config.get("STARTING_GOLD", 100),
    )


def parse_user_id(value: Any) -> int | None:
    """Return a positive integer user id, or ``None`` for anything else."""

    if isinstance(value, bool) or value is None:
        return None
    try:
        user_id = int(value)
    except (TypeError, ValueError):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    return user_id if user_id > 0 else None


def parse_price(value: Any) -> int | None:
    """Return a positive integer price, or ``None`` for anything else."""

    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, float):
        if not value.is_integer() or not 0 < value <= MAX_GOLD:
            return None
        return int(value)
    try:
        price = int(value)
    except (TypeError, ValueError):
        return None
    return price if 0 < price <= MAX_GOLD else None


def filter_items(items: Iterable[dict[str, Any]], search: str | None) -> list[dict[str, Any]]:
    """Keep catalog entries whose name contains the search term."""

    term = (search or "").strip().lower()
    if not term:
        return list(items)
    return [item for item in items if term in (item.get("name") or "").lower()]


def paginate_items(items: list[dict[str, Any]], page: int, per_page: int) -> dict[str, Any]:
    """Return one page of catalog entries with page bookkeeping."""

    total = len(items)
    per_page = max(per_page, 1)
    total_pages = max((total + per_page - 1) // per_page, 1) if total else 1
    page = min(max(page, 1), total_pages)
    offset = (page - 1) * per_page if total else 0

    return {
        "items": items[offset : offset + per_page],
        "total": total,
        "page": page,
        "per_page": per_page,
        "pages": total_pages,
    }


def build_listing(
    entries: Iterable[dict[str, Any]],
    *,
    search: str | None = None,
    page: int = 1,
    per_page: int = 20,
    user_id: int | None = None,
) -> dict[str, Any]:
    """Filter, paginate and annotate catalog entries with owned counts."""

    owned_by_name: dict[str, int] = {}
    if user_id is not None:
        owned_by_name = {record.item_name: record.owned for record in inventory.list_records(user_id)}

    listing = paginate_items(filter_items(entries, search), page, per_page)
    listing["items"] = [
        {
            "index": entry.get("index"),
            "name": entry.get("name"),
            "url": entry.get("url"),
            "owned": owned_by_name.get(entry.get("name") or "", 0),
        }
        for entry in listing["items"]
    ]
    return listing


def build_item_detail(kind: str, payload: dict[str, Any]) -> dict[str, Any]:
    """Return a catalog detail document with the resolved store price."""

    item = PARSERS[kind](payload)
    detail = dict(payload)
    detail["item_type"] = kind
    detail["price"] = try_price_of(item)
    return detail
