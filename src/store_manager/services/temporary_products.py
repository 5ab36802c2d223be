"""Local cache of uncatalogued products sold at the till."""

import logging
import math
from dataclasses import dataclass

from store_manager.domain.products import TemporaryProduct
from store_manager.errors import InvalidInputError
from store_manager.services.storage import LocalStorage

TEMPORARY_PRODUCTS_KEY = "pos:temporary_products"

_logger = logging.getLogger(__name__)


@dataclass
class TemporaryProductCache:
    """Temporary products keyed by barcode. Entries never expire."""

    storage: LocalStorage

    def get(self, barcode: str) -> TemporaryProduct | None:
        """Return the temporary product for an exact barcode match."""
        raw = self._entries().get(barcode)
        if not isinstance(raw, dict):
            return None
        return TemporaryProduct(
            id=barcode,
            name=str(raw.get("name", "")),
            price=float(raw.get("price", 0.0)),
        )

    def register(self, barcode: str, name: str, price: float) -> TemporaryProduct:
        """Validate and store a temporary product for a barcode."""
        cleaned = name.strip()
        if not cleaned:
            raise InvalidInputError("Please enter a product name.")
        if not math.isfinite(price) or price <= 0:
            raise InvalidInputError("Please enter a price greater than zero.")
        entries = self._entries()
        entries[barcode] = {"id": barcode, "name": cleaned, "price": price}
        self.storage.set(TEMPORARY_PRODUCTS_KEY, entries)
        return TemporaryProduct(id=barcode, name=cleaned, price=price)

    def remove(self, barcode: str) -> bool:
        """Forget a temporary product, e.g. once it has been catalogued."""
        entries = self._entries()
        if entries.pop(barcode, None) is None:
            return False
        self.storage.set(TEMPORARY_PRODUCTS_KEY, entries)
        return True

    def _entries(self) -> dict[str, object]:
        try:
            raw = self.storage.get(TEMPORARY_PRODUCTS_KEY)
        except ValueError:
            _logger.warning("Ignoring unreadable temporary products", exc_info=True)
            return {}
        return raw if isinstance(raw, dict) else {}
