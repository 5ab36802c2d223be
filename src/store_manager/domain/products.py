"""Domain models for products scanned at the till."""

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, Field, HttpUrl


@dataclass(frozen=True)
class CatalogProduct:
    """A product stored in the main catalog."""

    id: str
    name: str
    price: float
    barcode: str | None
    image: str | None
    description: str | None = None
    category: str | None = None
    brand: str | None = None
    stock_quantity: int | None = None


@dataclass(frozen=True)
class TemporaryProduct:
    """An uncatalogued item sold under an ad hoc name and price.

    The id is the barcode that missed the catalog.
    """

    id: str
    name: str
    price: float


@dataclass(frozen=True)
class CatalogItem:
    """Resolution result backed by a catalog product."""

    product: CatalogProduct
    kind: Literal["catalog"] = "catalog"


@dataclass(frozen=True)
class TemporaryItem:
    """Resolution result backed by a cached temporary product."""

    product: TemporaryProduct
    kind: Literal["temporary"] = "temporary"


ResolvedItem = CatalogItem | TemporaryItem


@dataclass(frozen=True)
class UnknownProductPrompt:
    """Asks the operator how to sell a barcode nobody recognises."""

    barcode: str
    options: tuple[str, ...] = ("sell_temporary", "add_to_inventory")


class ProductDraft(BaseModel):
    """Fields required to add a product to the main inventory."""

    name: str = Field(min_length=3)
    description: str = Field(min_length=10)
    price: float = Field(ge=0)
    image: HttpUrl
    category: Literal["Electronics", "Groceries", "Fashion", "Home Goods", "Bakery"]
    brand: str = Field(min_length=2)
    stock_quantity: int
    barcode: str = Field(min_length=8)
