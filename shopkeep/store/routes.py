"""Routes for the Shopkeep store backed by the database and the item catalog."""
from __future__ import annotations

from functools import partial

from flask import current_app, jsonify, request

from ..logging_service import log_manager
from . import bp, inventory, ledger, transactions
from .catalog import EQUIPMENT, ITEM_KINDS, MAGIC_ITEM, catalog_client, price_of
from .errors import BUSINESS_REFUSALS, StoreError, TransactionFailed
from .services import build_item_detail, build_listing, parse_price, parse_user_id


def _json_response(payload: dict[str, object], *, status: int = 200):
    """Return a JSON response with a consistent structure."""

    response = jsonify(payload)
    response.status_code = status
    return response


def _json_error(message: str, *, status: int = 400):
    """Return a JSON error payload with the supplied status."""

    return _json_response({"success": False, "message": message}, status=status)


def _store_error(exc: StoreError, *, action: str, context: str):
    """Log a store failure and translate it into a JSON error."""

    if isinstance(exc, BUSINESS_REFUSALS):
        log_manager.record(
            component="Store",
            action=action,
            level="warn",
            result="error",
            title=f"{action.capitalize()} refused — {exc.__class__.__name__}",
            user_summary=exc.message,
            technical_details=f"store.{action} refused {context}: {exc.message}",
        )
        return _json_error(exc.message, status=exc.status_code)

    if not isinstance(exc, TransactionFailed):
        # compensated sagas already logged their own entry
        log_manager.record(
            component="Store",
            action=action,
            level="error",
            result="error",
            title=f"{action.capitalize()} failed — {exc.__class__.__name__}",
            user_summary=exc.public_message,
            technical_details=f"store.{action} failed {context}: {exc.message}",
        )
    return _json_error(exc.public_message, status=exc.status_code)


def _resolve_kind(value: object) -> str | None:
    kind = (str(value).strip() if value else "") or None
    if kind is not None and kind not in ITEM_KINDS:
        raise ValueError(kind)
    return kind


def _listing(kind: str):
    search = request.args.get("search")
    page = request.args.get("page", type=int) or 1
    per_page = request.args.get("per_page", type=int) or current_app.config.get("ITEMS_PER_PAGE", 20)
    raw_user = request.args.get("userId")
    user_id = parse_user_id(raw_user)
    if raw_user is not None and user_id is None:
        return _json_error("User ID must be a positive integer.")

    try:
        entries = catalog_client.list_items(kind)
        listing = build_listing(
            entries, search=search, page=page, per_page=per_page, user_id=user_id
        )
    except StoreError as exc:
        return _store_error(exc, action="browse", context=f"kind={kind} user_id={user_id}")
    return _json_response(listing)


def _detail(kind: str, index: str):
    try:
        payload = catalog_client.fetch_details(kind, index)
    except StoreError as exc:
        return _store_error(exc, action="inspect", context=f"kind={kind} index='{index}'")
    return _json_response(build_item_detail(kind, payload))


@bp.get("/equipment")
def equipment():
    """List equipment from the catalog."""
    return _listing(EQUIPMENT)


@bp.get("/equipment/<index>")
def equipment_detail(index: str):
    """Return one equipment entry with its store price."""
    return _detail(EQUIPMENT, index)


@bp.get("/magic-items")
def magic_items():
    """List magic items from the catalog."""
    return _listing(MAGIC_ITEM)


@bp.get("/magic-items/<index>")
def magic_item_detail(index: str):
    """Return one magic item with its rarity-based store price."""
    return _detail(MAGIC_ITEM, index)


@bp.get("/gold")
def gold():
    """Return the gold balance of a user."""

    user_id = parse_user_id(request.args.get("userId"))
    if user_id is None:
        return _json_error("User ID is required.")

    try:
        balance = ledger.get_balance(user_id)
    except StoreError as exc:
        return _store_error(exc, action="balance", context=f"user_id={user_id}")
    return _json_response({"gold": balance})


@bp.get("/inventory")
def inventory_view():
    """Return every item record of a user along with their gold."""

    user_id = parse_user_id(request.args.get("userId"))
    if user_id is None:
        return _json_error("User ID is required.")

    try:
        records = inventory.list_records(user_id)
        balance = ledger.get_balance(user_id)
    except StoreError as exc:
        return _store_error(exc, action="inventory", context=f"user_id={user_id}")
    return _json_response({"gold": balance, "items": [record.serialize() for record in records]})


@bp.post("/buy")
def buy():
    """Buy one item at its catalog price."""

    payload = request.get_json(silent=True) or {}
    user_id = parse_user_id(payload.get("userId"))
    item_index = str(payload.get("equipmentIndex") or "").strip()
    item_name = str(payload.get("equipmentName") or "").strip() or None

    if user_id is None or not item_index:
        log_manager.record(
            component="Store",
            action="buy",
            level="error",
            result="error",
            title="Purchase rejected — incomplete request",
            user_summary="A user and an item are required to make a purchase.",
            technical_details="store.buy received a payload without userId or equipmentIndex.",
        )
        return _json_error("User ID and Equipment Index are required.")

    try:
        kind = _resolve_kind(payload.get("itemType"))
    except ValueError:
        return _json_error("Item type must be 'equipment' or 'magic-item'.")

    context = f"user_id={user_id} index='{item_index}' name='{item_name}'"
    try:
        receipt = transactions.buy(
            user_id, item_index, item_name, partial(catalog_client.lookup, kind=kind)
        )
    except StoreError as exc:
        return _store_error(exc, action="buy", context=context)
    except ValueError as exc:
        return _json_error(str(exc))

    quoted = parse_price(payload.get("cost"))
    if quoted is not None and quoted != receipt.price:
        log_manager.record(
            component="Store",
            action="buy",
            level="warn",
            result="success",
            title="Purchase charged catalog price",
            user_summary=f"{receipt.item_name} was charged {receipt.price} gold.",
            technical_details=(
                f"store.buy {context} quoted {quoted} but catalog price is {receipt.price}."
            ),
        )

    message = f"Bought {receipt.item_name} for {receipt.price} gold."
    log_manager.record(
        component="Store",
        action="buy",
        level="info",
        result="success",
        title="Purchase completed",
        user_summary=message,
        technical_details=(
            f"store.buy {context} debited {receipt.price}; gold={receipt.gold} owned={receipt.owned}."
        ),
    )
    return _json_response({"success": True, "message": message, **receipt.to_dict()})


@bp.post("/sell")
def sell():
    """Sell one owned item back to the store."""

    payload = request.get_json(silent=True) or {}
    user_id = parse_user_id(payload.get("userId"))
    item_name = str(payload.get("equipmentName") or "").strip()
    item_index = str(payload.get("equipmentIndex") or "").strip()

    if user_id is None or not item_name:
        log_manager.record(
            component="Store",
            action="sell",
            level="error",
            result="error",
            title="Sale rejected — incomplete request",
            user_summary="A user and an item are required to sell.",
            technical_details="store.sell received a payload without userId or equipmentName.",
        )
        return _json_error("User ID and Equipment Name are required.")

    try:
        kind = _resolve_kind(payload.get("itemType"))
    except ValueError:
        return _json_error("Item type must be 'equipment' or 'magic-item'.")

    context = f"user_id={user_id} name='{item_name}' index='{item_index}'"
    try:
        if item_index:
            price = price_of(catalog_client.lookup(item_index, kind))
        else:
            price = parse_price(payload.get("cost"))
            if price is None:
                return _json_error("Cost must be a positive whole number of gold.")
        receipt = transactions.sell(user_id, item_name, price)
    except StoreError as exc:
        return _store_error(exc, action="sell", context=context)
    except ValueError as exc:
        return _json_error(str(exc))

    message = f"Sold {receipt.item_name} for {receipt.price} gold."
    log_manager.record(
        component="Store",
        action="sell",
        level="info",
        result="success",
        title="Sale completed",
        user_summary=message,
        technical_details=(
            f"store.sell {context} credited {receipt.price}; gold={receipt.gold} owned={receipt.owned}."
        ),
    )
    return _json_response({"success": True, "message": message, **receipt.to_dict()})
