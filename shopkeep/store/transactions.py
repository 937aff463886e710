"""Buy and sell transactions spanning the ledger and the inventory.

The two resources commit separately, so each transaction runs as a two-step
saga: the step that can refuse for business reasons runs first, and a failure
of the second step triggers one compensating call on the first resource.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, NoReturn
from uuid import uuid4

from ..logging_service import log_manager
from . import inventory, ledger
from .catalog import Item, price_of
from .errors import BUSINESS_REFUSALS, TransactionFailed

CatalogLookup = Callable[[str], Item]


class SagaState(str, Enum):
    """Lifecycle of a single buy or sell."""

    PENDING = "pending"
    STEP1_DONE = "step1_done"
    COMMITTED = "committed"
    COMPENSATING = "compensating"
    FAILED = "failed"


@dataclass
class Saga:
    """State trail of one in-flight transaction."""

    action: str
    user_id: int
    item_name: str
    state: SagaState = SagaState.PENDING
    history: list[SagaState] = field(default_factory=lambda: [SagaState.PENDING])
    correlation_id: str = field(default_factory=lambda: str(uuid4()))

    def advance(self, state: SagaState) -> None:
        self.state = state
        self.history.append(state)

    @property
    def trail(self) -> str:
        return " -> ".join(state.value for state in self.history)


@dataclass(frozen=True)
class Receipt:
    """Authoritative balances after a committed transaction."""

    gold: int
    owned: int
    item_name: str
    price: int

    def to_dict(self) -> dict[str, object]:
        return {
            "gold": self.gold,
            "owned": self.owned,
            "item": self.item_name,
            "price": self.price,
        }


def _compensate(
    saga: Saga,
    cause: Exception,
    undo: Callable[[], int],
    *,
    failed_step: str,
    undo_step: str,
) -> NoReturn:
    """Run the compensating call once, log the outcome and raise.

    A refusal from the second step is re-raised as-is once it has been undone;
    anything else becomes TransactionFailed.
    """

    saga.advance(SagaState.COMPENSATING)
    context = (
        f"user_id={saga.user_id} item='{saga.item_name}' failed_step={failed_step} "
        f"cause={cause.__class__.__name__}: {cause}"
    )
    try:
        undo()
    except Exception as undo_exc:
        saga.advance(SagaState.FAILED)
        log_manager.record(
            component="Store",
            action=saga.action,
            level="error",
            result="error",
            title="Reconciliation required — compensation failed",
            user_summary=(
                f"A {saga.action} of {saga.item_name} left balances inconsistent and needs manual review."
            ),
            technical_details=(
                f"store.transactions {context}; {undo_step} raised "
                f"{undo_exc.__class__.__name__}: {undo_exc}; trail={saga.trail}"
            ),
            correlation_id=saga.correlation_id,
        )
        raise TransactionFailed(failed_step, compensated=False, cause=cause) from undo_exc

    saga.advance(SagaState.FAILED)
    log_manager.record(
        component="Store",
        action=saga.action,
        level="error",
        result="error",
        title=f"{saga.action.capitalize()} rolled back",
        user_summary=f"The {saga.action} of {saga.item_name} failed and was reverted.",
        technical_details=f"store.transactions {context}; {undo_step} succeeded; trail={saga.trail}",
        correlation_id=saga.correlation_id,
    )
    if isinstance(cause, BUSINESS_REFUSALS):
        raise cause
    raise TransactionFailed(failed_step, compensated=True, cause=cause) from cause


def buy(
    user_id: int,
    item_index: str,
    item_name: str | None,
    catalog_lookup: CatalogLookup,
) -> Receipt:
    """Charge the item's price and add one to the user's inventory."""

    item = catalog_lookup(item_index)
    price = price_of(item)
    name = inventory.normalize_item_name(item_name or item.name)
    saga = Saga("buy", user_id, name)

    gold = ledger.debit(user_id, price)
    saga.advance(SagaState.STEP1_DONE)

    try:
        owned = inventory.increment(user_id, name, item.index or item_index)
    except Exception as exc:
        _compensate(
            saga,
            exc,
            lambda: ledger.credit(user_id, price),
            failed_step="inventory.increment",
            undo_step="ledger.credit",
        )

    saga.advance(SagaState.COMMITTED)
    return Receipt(gold=gold, owned=owned, item_name=name, price=price)


def sell(user_id: int, item_name: str, cost: int) -> Receipt:
    """Remove one item from the user's inventory and pay out its price."""

    price = ledger.validate_amount(cost)
    name = inventory.normalize_item_name(item_name)
    saga = Saga("sell", user_id, name)

    owned = inventory.decrement(user_id, name)
    saga.advance(SagaState.STEP1_DONE)

    try:
        gold = ledger.credit(user_id, price)
    except Exception as exc:
        _compensate(
            saga,
            exc,
            lambda: inventory.increment(user_id, name),
            failed_step="ledger.credit",
            undo_step="inventory.increment",
        )

    saga.advance(SagaState.COMMITTED)
    return Receipt(gold=gold, owned=owned, item_name=name, price=price)
