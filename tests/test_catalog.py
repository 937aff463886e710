"""Tests for catalog access and item pricing."""

from __future__ import annotations

import pytest
import requests

from shopkeep.store.catalog import (
    EQUIPMENT,
    MAGIC_ITEM,
    RARITY_COSTS,
    Equipment,
    MagicItem,
    catalog_client,
    normalize_rarity,
    price_of,
)
from shopkeep.store.errors import ItemNotFound, Unavailable, UnpricedItem


@pytest.mark.parametrize(
    ("rarity", "expected"),
    [
        ("Common", 50),
        ("Uncommon", 75),
        ("Rare", 100),
        ("Very Rare", 200),
        ("Very_rare", 200),
        ("Legendary", 300),
    ],
)
def test_magic_items_are_priced_by_rarity(rarity, expected):
    assert price_of(MagicItem("x", "X", rarity)) == expected


def test_equipment_is_priced_by_flat_cost():
    assert price_of(Equipment("longsword", "Longsword", 15)) == 15


@pytest.mark.parametrize(
    "item",
    [
        Equipment("blessed-token", "Blessed Token", None),
        Equipment("pebble", "Pebble", 0),
        MagicItem("sentient-blade", "Sentient Blade", "Varies"),
        MagicItem("mystery", "Mystery", None),
    ],
)
def test_items_without_usable_price_are_unpriced(item):
    with pytest.raises(UnpricedItem):
        price_of(item)


def test_rarity_labels_normalize_onto_table_keys():
    assert normalize_rarity(" Very Rare ") == "very_rare"
    assert set(RARITY_COSTS) == {"common", "uncommon", "rare", "very_rare", "legendary"}


def test_rare_magic_item_ignores_catalog_price(catalog):
    """A Rare item always costs 100 whatever raw price the catalog reports."""

    item = catalog_client.get_item(MAGIC_ITEM, "flame-tongue")

    assert isinstance(item, MagicItem)
    assert item.rarity == "Rare"
    assert price_of(item) == 100


def test_lookup_falls_back_to_magic_items(catalog):
    item = catalog_client.lookup("bag-of-holding")

    assert isinstance(item, MagicItem)
    assert [url.rsplit("/api/", 1)[1] for url in catalog.requested] == [
        "equipment/bag-of-holding",
        "magic-items/bag-of-holding",
    ]


def test_lookup_with_kind_only_queries_that_collection(catalog):
    item = catalog_client.lookup("chain-shirt", EQUIPMENT)

    assert item == Equipment("chain-shirt", "Chain Shirt", 50)
    assert len(catalog.requested) == 1


def test_missing_index_raises_item_not_found(catalog):
    with pytest.raises(ItemNotFound):
        catalog_client.lookup("vorpal-spoon")


def test_connection_errors_surface_as_unavailable(catalog):
    catalog.error = requests.ConnectionError("connection refused")

    with pytest.raises(Unavailable):
        catalog_client.lookup("club", EQUIPMENT)


def test_server_errors_surface_as_unavailable(catalog):
    catalog.status_override = 502

    with pytest.raises(Unavailable):
        catalog_client.list_items(EQUIPMENT)


def test_unsupported_kind_is_rejected(catalog):
    with pytest.raises(ValueError):
        catalog_client.list_items("potion")


def test_init_app_reads_catalog_settings(app):
    assert catalog_client.base_url == "https://catalog.test/api"
    assert app.extensions["catalog"] is catalog_client
