"""Supabase-backed product catalog repository."""

from dataclasses import dataclass

from supabase import Client

from store_manager.domain.products import CatalogProduct, ProductDraft
from store_manager.services.resolution import CatalogRepository

_PRODUCT_COLUMNS = (
    "id, name, price, barcode, image, description, category, brand, stock_quantity"
)


@dataclass
class SupabaseCatalogRepository(CatalogRepository):
    """Supabase implementation for catalog lookups and creation."""

    client: Client

    def lookup_by_barcode(self, barcode: str) -> CatalogProduct | None:
        """Return the product with this barcode, if present."""
        response = (
            self.client.table("products")
            .select(_PRODUCT_COLUMNS)
            .eq("barcode", barcode)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_product(response.data[0])

    def create_product(self, draft: ProductDraft) -> CatalogProduct:
        """Insert a product row and return it."""
        payload = draft.model_dump(mode="json")
        payload["specifications"] = {}
        response = self.client.table("products").insert(payload).execute()
        if not response.data:
            raise RuntimeError("Failed to create product")
        return _to_product(response.data[0])


def _to_product(row: dict[str, object]) -> CatalogProduct:
    stock = row.get("stock_quantity")
    return CatalogProduct(
        id=str(row["id"]),
        name=str(row["name"]),
        price=float(row["price"]),
        barcode=row.get("barcode"),
        image=row.get("image"),
        description=row.get("description"),
        category=row.get("category"),
        brand=row.get("brand"),
        stock_quantity=int(stock) if stock is not None else None,
    )
