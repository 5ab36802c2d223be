"""Barcode to product resolution."""

import logging
from dataclasses import dataclass
from typing import Protocol

from store_manager.domain.products import (
    CatalogItem,
    CatalogProduct,
    ProductDraft,
    ResolvedItem,
    TemporaryItem,
    UnknownProductPrompt,
)
from store_manager.services.temporary_products import TemporaryProductCache

_logger = logging.getLogger(__name__)


class CatalogRepository(Protocol):
    """Persistence interface for the main product catalog."""

    def lookup_by_barcode(self, barcode: str) -> CatalogProduct | None:
        """Return the catalog product with this barcode, if any."""

    def create_product(self, draft: ProductDraft) -> CatalogProduct:
        """Create a catalog product and return it."""


@dataclass
class ProductResolver:
    """Resolves barcodes against temporary products, then the catalog."""

    temporary_products: TemporaryProductCache
    catalog_repository: CatalogRepository

    def resolve(self, barcode: str) -> ResolvedItem | UnknownProductPrompt:
        """Return the product for a barcode or a prompt to resolve it by hand.

        Catalog errors are treated as misses so a flaky lookup never blocks
        a sale.
        """
        temporary = self.temporary_products.get(barcode)
        if temporary is not None:
            return TemporaryItem(product=temporary)

        try:
            product = self.catalog_repository.lookup_by_barcode(barcode)
        except Exception:
            _logger.warning("Catalog lookup failed: barcode=%s", barcode, exc_info=True)
            product = None
        if product is not None:
            return CatalogItem(product=product)
        return UnknownProductPrompt(barcode=barcode)
