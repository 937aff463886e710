"""Gold balance operations.

Every mutation is a single conditional ``UPDATE`` committed before the call
returns, so concurrent debits for one user can never overdraw the balance.
"""
from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from .errors import BalanceLimitExceeded, InsufficientFunds, NotFound, StoreError, Unavailable
from .models import User

# largest value a signed 64-bit SQL INTEGER column holds
MAX_GOLD = 2**63 - 1


def validate_amount(amount: int) -> int:
    """Reject anything other than a positive whole number of gold."""

    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValueError("Amount must be a positive whole number of gold.")
    if amount > MAX_GOLD:
        raise ValueError(f"Amount cannot exceed {MAX_GOLD} gold.")
    return amount


def _read_gold(user_id: int) -> int | None:
    return db.session.execute(select(User.gold).where(User.id == user_id)).scalar_one_or_none()


def get_balance(user_id: int) -> int:
    """Return the current gold balance of a user."""

    try:
        gold = _read_gold(user_id)
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise Unavailable("Unable to read the gold balance.") from exc
    if gold is None:
        raise NotFound(f"User {user_id} not found.")
    return gold


def debit(user_id: int, amount: int) -> int:
    """Remove gold from a balance, refusing to go below zero."""

    amount = validate_amount(amount)
    statement = (
        update(User)
        .where(User.id == user_id, User.gold >= amount)
        .values(gold=User.gold - amount)
        .execution_options(synchronize_session=False)
    )
    try:
        result = db.session.execute(statement)
        if result.rowcount == 0:
            gold = _read_gold(user_id)
            if gold is None:
                raise NotFound(f"User {user_id} not found.")
            raise InsufficientFunds(gold, amount)
        gold = _read_gold(user_id)
        db.session.commit()
    except StoreError:
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise Unavailable("Unable to update the gold balance.") from exc
    return gold


def credit(user_id: int, amount: int) -> int:
    """Add gold to a balance, refusing to pass the storable maximum."""

    amount = validate_amount(amount)
    statement = (
        update(User)
        .where(User.id == user_id, User.gold <= MAX_GOLD - amount)
        .values(gold=User.gold + amount)
        .execution_options(synchronize_session=False)
    )
    try:
        result = db.session.execute(statement)
        if result.rowcount == 0:
            gold = _read_gold(user_id)
            if gold is None:
                raise NotFound(f"User {user_id} not found.")
            raise BalanceLimitExceeded(gold, amount)
        gold = _read_gold(user_id)
        db.session.commit()
    except StoreError:
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise Unavailable("Unable to update the gold balance.") from exc
    return gold
