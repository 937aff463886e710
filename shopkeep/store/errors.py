"""Failure kinds raised by the store ledger, inventory and coordinator."""
from __future__ import annotations


class StoreError(Exception):
    """Base class for every store failure."""

    status_code = 500
    public_message = "The store could not complete the request."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class NotFound(StoreError):
    """No such user."""

    status_code = 404
    public_message = "User not found."


class ItemNotFound(StoreError):
    """The catalog has no item under the requested index."""

    status_code = 404
    public_message = "Item not found in the catalog."


class UnpricedItem(ItemNotFound):
    """The catalog item exists but carries no usable price."""

    public_message = "This item is not for sale."


class InsufficientFunds(StoreError):
    """The balance does not cover the requested debit."""

    status_code = 400
    public_message = "Not enough gold to buy this item."

    def __init__(self, balance: int, amount: int) -> None:
        super().__init__(f"Not enough gold: {balance} available, {amount} required.")
        self.balance = balance
        self.amount = amount


class NothingOwned(StoreError):
    """The user holds none of the item being sold."""

    status_code = 400
    public_message = "You do not own this item."

    def __init__(self, item_name: str) -> None:
        super().__init__(f"You do not own any {item_name}.")
        self.item_name = item_name


class BalanceLimitExceeded(StoreError):
    """The credit would push the balance past the largest storable amount."""

    status_code = 400
    public_message = "That much gold cannot be held."

    def __init__(self, balance: int, amount: int) -> None:
        super().__init__(f"Cannot add {amount} gold to a balance of {balance}.")
        self.balance = balance
        self.amount = amount


class Unavailable(StoreError):
    """The catalog or the storage layer could not be reached."""

    status_code = 503
    public_message = "The store is temporarily unavailable. Try again shortly."


class TransactionFailed(StoreError):
    """The second saga step failed after the first one committed."""

    status_code = 500
    public_message = "The transaction could not be completed. No changes were kept."
    unreconciled_message = (
        "The transaction could not be completed and is pending review. "
        "Check your gold and inventory before trying again."
    )

    def __init__(self, step: str, *, compensated: bool, cause: BaseException | None = None) -> None:
        if not compensated:
            self.public_message = self.unreconciled_message
        super().__init__(self.public_message)
        self.step = step
        self.compensated = compensated
        self.cause = cause


BUSINESS_REFUSALS: tuple[type[StoreError], ...] = (
    InsufficientFunds,
    NothingOwned,
    BalanceLimitExceeded,
    ItemNotFound,
    NotFound,
)
