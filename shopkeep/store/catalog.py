"""Read-only access to the remote item reference catalog and item pricing."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Optional, Union
from urllib.parse import quote

import requests

from .errors import ItemNotFound, Unavailable, UnpricedItem

EQUIPMENT = "equipment"
MAGIC_ITEM = "magic-item"

ITEM_KINDS: dict[str, str] = {
    EQUIPMENT: "equipment",
    MAGIC_ITEM: "magic-items",
}

RARITY_COSTS: dict[str, int] = {
    "common": 50,
    "uncommon": 75,
    "rare": 100,
    "very_rare": 200,
    "legendary": 300,
}


@dataclass(frozen=True)
class Equipment:
    """Mundane gear priced by its flat catalog cost."""

    index: str
    name: str
    cost: Optional[int]
    kind: ClassVar[str] = EQUIPMENT


@dataclass(frozen=True)
class MagicItem:
    """Magic gear priced by rarity; the catalog's own price is ignored."""

    index: str
    name: str
    rarity: Optional[str]
    kind: ClassVar[str] = MAGIC_ITEM


Item = Union[Equipment, MagicItem]


def normalize_rarity(value: str) -> str:
    """Map catalog rarity labels such as ``Very Rare`` onto table keys."""

    return value.strip().lower().replace(" ", "_").replace("-", "_")


def price_of(item: Item) -> int:
    """Return the gold price of an item, raising when it cannot be sold."""

    if isinstance(item, MagicItem):
        cost = RARITY_COSTS.get(normalize_rarity(item.rarity or ""))
    else:
        cost = item.cost
    if not cost or cost <= 0:
        raise UnpricedItem(f"{item.name} is not for sale.")
    return cost


def try_price_of(item: Item) -> Optional[int]:
    """Return the price of an item or ``None`` for unpriced entries."""

    try:
        return price_of(item)
    except UnpricedItem:
        return None


def parse_equipment(payload: dict[str, Any]) -> Equipment:
    """Build an equipment entry from a catalog detail document."""

    cost = payload.get("cost") or {}
    quantity = cost.get("quantity") if isinstance(cost, dict) else None
    return Equipment(
        index=payload.get("index", ""),
        name=payload.get("name", ""),
        cost=quantity if isinstance(quantity, int) else None,
    )


def parse_magic_item(payload: dict[str, Any]) -> MagicItem:
    """Build a magic item entry from a catalog detail document."""

    rarity = payload.get("rarity") or {}
    return MagicItem(
        index=payload.get("index", ""),
        name=payload.get("name", ""),
        rarity=rarity.get("name") if isinstance(rarity, dict) else None,
    )


PARSERS = {
    EQUIPMENT: parse_equipment,
    MAGIC_ITEM: parse_magic_item,
}


class CatalogClient:
    """HTTP client for the item reference API."""

    def __init__(
        self,
        base_url: str = "https://www.dnd5eapi.co/api",
        *,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def init_app(self, app) -> None:
        """Read catalog settings from the Flask app configuration."""
        self.base_url = app.config.get("CATALOG_URL", self.base_url).rstrip("/")
        self.timeout = app.config.get("CATALOG_TIMEOUT", self.timeout)
        app.extensions["catalog"] = self

    def _collection(self, kind: str) -> str:
        try:
            return ITEM_KINDS[kind]
        except KeyError as exc:
            raise ValueError(f"Unsupported item type '{kind}'") from exc

    def _get(self, path: str) -> Any:
        url = f"{self.base_url}/{path}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise Unavailable(f"Catalog request to {url} failed: {exc}") from exc

        if response.status_code == 404:
            raise ItemNotFound(f"Catalog has no entry at {path}.")
        try:
            response.raise_for_status()
            return response.json()
        except requests.HTTPError as exc:
            raise Unavailable(f"Catalog responded with {response.status_code} for {url}.") from exc
        except ValueError as exc:
            raise Unavailable(f"Catalog returned malformed data for {url}.") from exc

    def list_items(self, kind: str) -> list[dict[str, Any]]:
        """Return the summary entries (index, name, url) of a collection."""
        collection = self._collection(kind)
        try:
            payload = self._get(collection)
        except ItemNotFound as exc:
            raise Unavailable(f"Catalog collection '{collection}' is missing.") from exc
        return list(payload.get("results", []))

    def fetch_details(self, kind: str, index: str) -> dict[str, Any]:
        """Return the raw detail document of one catalog entry."""
        collection = self._collection(kind)
        if not index:
            raise ItemNotFound("An item index is required.")
        return self._get(f"{collection}/{quote(index, safe='')}")

    def get_item(self, kind: str, index: str) -> Item:
        """Return a typed catalog entry."""
        return PARSERS[kind](self.fetch_details(kind, index))

    def lookup(self, index: str, kind: str | None = None) -> Item:
        """Resolve an index, trying equipment before magic items when no kind is given."""
        if kind:
            return self.get_item(kind, index)
        try:
            return self.get_item(EQUIPMENT, index)
        except ItemNotFound:
            return self.get_item(MAGIC_ITEM, index)


catalog_client = CatalogClient()
