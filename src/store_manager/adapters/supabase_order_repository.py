"""Supabase-backed order repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from store_manager.domain.orders import OrderRecord
from store_manager.domain.sessions import CartLine
from store_manager.services.checkout import OrderRepository

_STATUS = "Delivered"
_PAYMENT_METHOD = "In-Store"


@dataclass
class SupabaseOrderRepository(OrderRepository):
    """Supabase implementation for in-store orders."""

    client: Client

    def create_order(
        self, customer_name: str, items: list[CartLine], total: float
    ) -> OrderRecord:
        """Insert an order row and return it."""
        response = (
            self.client.table("orders")
            .insert(
                {
                    "customer": {
                        "name": customer_name,
                        "email": "",
                        "phone": "",
                        "address": "In-Store",
                    },
                    "items": [
                        {
                            "id": line.product_id,
                            "name": line.name,
                            "price": line.unit_price,
                            "quantity": line.quantity,
                            "image": line.image_ref,
                        }
                        for line in items
                    ],
                    "total": total,
                    "status": _STATUS,
                    "payment_method": _PAYMENT_METHOD,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create order")
        row = response.data[0]
        created_at = row.get("created_at")
        return OrderRecord(
            id=str(row["id"]),
            customer_name=customer_name,
            items=list(items),
            total=total,
            status=row.get("status", _STATUS),
            payment_method=row.get("payment_method", _PAYMENT_METHOD),
            created_at=(
                datetime.fromisoformat(created_at)
                if created_at
                else datetime.now(tz=UTC)
            ),
        )
