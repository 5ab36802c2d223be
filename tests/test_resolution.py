"""Tests for barcode resolution and the temporary product cache."""

import math

import pytest

from store_manager.adapters.json_file_storage import JsonFileStorage
from store_manager.domain.products import (
    CatalogItem,
    TemporaryItem,
    UnknownProductPrompt,
)
from store_manager.errors import InvalidInputError
from store_manager.services.temporary_products import TEMPORARY_PRODUCTS_KEY
from tests.conftest import PosFixture, build_pos


def test_catalog_hit(pos: PosFixture) -> None:
    pos.catalog.add("8964000111", "Milk 1L", 250.0)

    resolved = pos.resolver.resolve("8964000111")

    assert isinstance(resolved, CatalogItem)
    assert resolved.product.name == "Milk 1L"


def test_temporary_product_shadows_catalog(pos: PosFixture) -> None:
    pos.catalog.add("8964000111", "Milk 1L", 250.0)
    pos.temporary_products.register("8964000111", "Loose milk", 200.0)

    resolved = pos.resolver.resolve("8964000111")

    assert isinstance(resolved, TemporaryItem)
    assert resolved.product.name == "Loose milk"
    assert pos.catalog.lookups == []


def test_unknown_barcode_prompts(pos: PosFixture) -> None:
    resolved = pos.resolver.resolve("0000000000")

    assert resolved == UnknownProductPrompt(barcode="0000000000")
    assert resolved.options == ("sell_temporary", "add_to_inventory")


def test_catalog_error_is_treated_as_miss(pos: PosFixture) -> None:
    pos.catalog.fail_lookups = True

    resolved = pos.resolver.resolve("8964000111")

    assert isinstance(resolved, UnknownProductPrompt)


def test_register_validates_input(pos: PosFixture) -> None:
    with pytest.raises(InvalidInputError):
        pos.temporary_products.register("12345678", "  ", 10.0)
    with pytest.raises(InvalidInputError):
        pos.temporary_products.register("12345678", "Bread", 0)
    with pytest.raises(InvalidInputError):
        pos.temporary_products.register("12345678", "Bread", math.nan)

    assert pos.storage.get(TEMPORARY_PRODUCTS_KEY) is None


def test_register_and_remove(pos: PosFixture) -> None:
    product = pos.temporary_products.register("12345678", " Bread ", 120.0)

    assert product.id == "12345678"
    assert pos.temporary_products.get("12345678") == product
    assert pos.temporary_products.remove("12345678") is True
    assert pos.temporary_products.get("12345678") is None
    assert pos.temporary_products.remove("12345678") is False


def test_unreadable_temporary_cache_falls_through_to_catalog(tmp_path) -> None:
    storage = JsonFileStorage.create(str(tmp_path))
    (tmp_path / "pos_temporary_products.json").write_text("{not json", encoding="utf-8")
    pos = build_pos(storage)
    pos.catalog.add("8964000111", "Milk 1L", 250.0)
    pos.registry.start_session("Ali")

    hit = pos.manager.process_barcode("8964000111")
    miss = pos.manager.process_barcode("12345678")

    assert hit.notice.title == "Item added"
    assert miss.prompt is not None
    assert pos.temporary_products.get("8964000111") is None
