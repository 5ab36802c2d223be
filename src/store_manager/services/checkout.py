"""Turns a customer session into a persisted order and a printable bill."""

import logging
from dataclasses import dataclass, replace
from typing import Protocol
from uuid import UUID

from store_manager.domain.orders import (
    CURRENCY,
    OrderRecord,
    ReceiptCustomer,
    ReceiptLine,
    ReceiptPayload,
)
from store_manager.domain.sessions import CartLine, cart_total
from store_manager.errors import EmptyCartError
from store_manager.services.audit import ActivityService
from store_manager.services.sessions import SessionRegistry
from store_manager.services.storage import LocalStorage

BILL_TO_PRINT_KEY = "pos:bill_to_print"
PRINT_VIEW_PATH = "/pos/receipt"

_logger = logging.getLogger(__name__)


class OrderRepository(Protocol):
    """Persistence interface for orders."""

    def create_order(
        self, customer_name: str, items: list[CartLine], total: float
    ) -> OrderRecord:
        """Create an order and return it."""


@dataclass(frozen=True)
class OrderReceipt:
    """Outcome of a completed sale."""

    order: OrderRecord
    payload: ReceiptPayload
    print_path: str = PRINT_VIEW_PATH


@dataclass
class SaleFinalizer:
    """Completes sales for customer sessions."""

    registry: SessionRegistry
    order_repository: OrderRepository
    activity_service: ActivityService
    storage: LocalStorage

    def complete_sale(self, session_id: UUID) -> OrderReceipt:
        """Persist the session's cart as an order and close the session.

        If the order cannot be created the exception propagates and the
        session is left untouched. Once the order exists, failures in
        activity logging, bill staging or session cleanup are logged and the
        sale still completes.
        """
        session = self.registry.get(session_id)
        if not session.cart:
            raise EmptyCartError("Cannot complete a sale with an empty cart.")

        items = [replace(line) for line in session.lines]
        total = cart_total(items)
        order = self.order_repository.create_order(
            customer_name=session.name, items=items, total=total
        )
        _logger.info("Created order %s for session %s", order.id, session.id)

        try:
            self.activity_service.record_activity(
                "POS Sale",
                f"Sold {sum(line.quantity for line in items)} item(s) to "
                f"{session.name} for {CURRENCY} {total:.2f} (order {order.id})",
            )
        except Exception:
            _logger.exception("Failed to record activity for order %s", order.id)

        payload = ReceiptPayload(
            order_id=order.id,
            customer=ReceiptCustomer(name=session.name, id=str(session.id)),
            items=[
                ReceiptLine(
                    id=line.product_id,
                    name=line.name,
                    price=line.unit_price,
                    quantity=line.quantity,
                    image=line.image_ref,
                )
                for line in items
            ],
            total=total,
            date=order.created_at,
        )
        try:
            self.storage.set(BILL_TO_PRINT_KEY, payload.model_dump(mode="json"))
        except Exception:
            _logger.exception("Failed to stage bill for order %s", order.id)
        try:
            self.registry.end_session(session.id)
        except Exception:
            _logger.exception(
                "Failed to close session %s after order %s", session.id, order.id
            )
        return OrderReceipt(order=order, payload=payload)
