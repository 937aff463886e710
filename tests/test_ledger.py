"""Unit tests for gold balance operations."""

from __future__ import annotations

import pytest

from shopkeep.store import ledger
from shopkeep.store.errors import BalanceLimitExceeded, InsufficientFunds, NotFound
from shopkeep.store.services import provision_user


def test_debit_within_balance_lowers_gold_by_amount(app):
    """A debit that the balance covers should subtract exactly the amount."""

    with app.app_context():
        user_id = provision_user("Rook", 120).id

        assert ledger.debit(user_id, 45) == 75
        assert ledger.get_balance(user_id) == 75


def test_debit_of_entire_balance_reaches_zero(app):
    with app.app_context():
        user_id = provision_user("Rook", 50).id

        assert ledger.debit(user_id, 50) == 0
        assert ledger.get_balance(user_id) == 0


def test_debit_beyond_balance_is_refused_without_change(app):
    """Overdrawing should raise InsufficientFunds and leave gold untouched."""

    with app.app_context():
        user_id = provision_user("Rook", 30).id

        with pytest.raises(InsufficientFunds) as excinfo:
            ledger.debit(user_id, 50)

        assert excinfo.value.balance == 30
        assert excinfo.value.amount == 50
        assert ledger.get_balance(user_id) == 30


def test_credit_adds_large_amounts(app):
    with app.app_context():
        user_id = provision_user("Rook", 10).id

        assert ledger.credit(user_id, 1_000_000) == 1_000_010


def test_unknown_user_raises_not_found(app):
    """Every ledger call should reject users that do not exist."""

    with app.app_context():
        with pytest.raises(NotFound):
            ledger.get_balance(999)
        with pytest.raises(NotFound):
            ledger.debit(999, 5)
        with pytest.raises(NotFound):
            ledger.credit(999, 5)


@pytest.mark.parametrize("amount", [0, -5, 2.5, "10", True, 10**20, ledger.MAX_GOLD + 1])
def test_non_positive_or_fractional_amounts_are_rejected(app, amount):
    with app.app_context():
        user_id = provision_user("Rook", 100).id

        with pytest.raises(ValueError):
            ledger.debit(user_id, amount)
        with pytest.raises(ValueError):
            ledger.credit(user_id, amount)
        assert ledger.get_balance(user_id) == 100


def test_default_player_is_provisioned_with_starting_gold(app):
    """The application should seed a single player on first start."""

    with app.app_context():
        from shopkeep.store.models import User

        users = User.query.all()

        assert [user.name for user in users] == ["Adventurer"]
        assert ledger.get_balance(users[0].id) == 100


def test_credit_up_to_the_maximum_keeps_an_integer_balance(app):
    """The largest storable balance should come back as an exact integer."""

    with app.app_context():
        user_id = provision_user("Rook", 0).id

        balance = ledger.credit(user_id, ledger.MAX_GOLD)

        assert balance == ledger.MAX_GOLD
        assert isinstance(ledger.get_balance(user_id), int)


def test_credit_past_the_maximum_is_refused_without_change(app):
    with app.app_context():
        user_id = provision_user("Rook", 10).id

        with pytest.raises(BalanceLimitExceeded) as excinfo:
            ledger.credit(user_id, ledger.MAX_GOLD)

        assert excinfo.value.balance == 10
        assert ledger.get_balance(user_id) == 10
