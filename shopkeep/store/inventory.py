"""Per-user owned counts for catalog items."""
from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from .errors import NotFound, NothingOwned, StoreError, Unavailable
from .models import InventoryRecord, User


def normalize_item_name(item_name: str) -> str:
    """Return the inventory key for an item name."""

    name = (item_name or "").strip()
    if not name:
        raise ValueError("An item name is required.")
    return name


def _read_owned(user_id: int, item_name: str) -> int | None:
    statement = select(InventoryRecord.owned).where(
        InventoryRecord.user_id == user_id, InventoryRecord.item_name == item_name
    )
    return db.session.execute(statement).scalar_one_or_none()


def _require_user(user_id: int) -> None:
    if db.session.execute(select(User.id).where(User.id == user_id)).first() is None:
        raise NotFound(f"User {user_id} not found.")


def _increment_existing(user_id: int, item_name: str, item_index: str | None) -> int | None:
    values: dict[str, object] = {"owned": InventoryRecord.owned + 1}
    if item_index:
        values["item_index"] = item_index
    statement = (
        update(InventoryRecord)
        .where(InventoryRecord.user_id == user_id, InventoryRecord.item_name == item_name)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if db.session.execute(statement).rowcount == 0:
        return None
    return _read_owned(user_id, item_name)


def _create_record(user_id: int, item_name: str, item_index: str | None) -> int:
    db.session.add(
        InventoryRecord(user_id=user_id, item_name=item_name, item_index=item_index, owned=1)
    )
    try:
        db.session.flush()
    except IntegrityError:
        # a concurrent first purchase created the record
        db.session.rollback()
        owned = _increment_existing(user_id, item_name, item_index)
        if owned is None:
            raise
        return owned
    return 1


def increment(user_id: int, item_name: str, item_index: str | None = None) -> int:
    """Add one item to a user's inventory, creating the record on first purchase."""

    name = normalize_item_name(item_name)
    try:
        owned = _increment_existing(user_id, name, item_index)
        if owned is None:
            _require_user(user_id)
            owned = _create_record(user_id, name, item_index)
        db.session.commit()
    except StoreError:
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise Unavailable("Unable to update the inventory.") from exc
    return owned


def decrement(user_id: int, item_name: str) -> int:
    """Remove one item from a user's inventory; the record stays at zero."""

    name = normalize_item_name(item_name)
    statement = (
        update(InventoryRecord)
        .where(
            InventoryRecord.user_id == user_id,
            InventoryRecord.item_name == name,
            InventoryRecord.owned > 0,
        )
        .values(owned=InventoryRecord.owned - 1)
        .execution_options(synchronize_session=False)
    )
    try:
        if db.session.execute(statement).rowcount == 0:
            raise NothingOwned(name)
        owned = _read_owned(user_id, name)
        db.session.commit()
    except StoreError:
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise Unavailable("Unable to update the inventory.") from exc
    return owned


def get_owned(user_id: int, item_name: str) -> int:
    """Return how many of an item a user holds; zero when never bought."""

    try:
        owned = _read_owned(user_id, normalize_item_name(item_name))
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise Unavailable("Unable to read the inventory.") from exc
    return owned or 0


def list_records(user_id: int) -> list[InventoryRecord]:
    """Return every inventory record of a user ordered by item name."""

    try:
        _require_user(user_id)
        statement = (
            select(InventoryRecord)
            .where(InventoryRecord.user_id == user_id)
            .order_by(InventoryRecord.item_name.asc())
        )
        return list(db.session.execute(statement).scalars().all())
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise Unavailable("Unable to read the inventory.") from exc
