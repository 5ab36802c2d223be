"""Controller behind the Store Manager point-of-sale screen."""

import logging
from collections import deque
from dataclasses import dataclass, field
from uuid import UUID

from pydantic import ValidationError

from store_manager.domain.notices import Notice
from store_manager.domain.orders import CURRENCY
from store_manager.domain.products import (
    CatalogItem,
    ProductDraft,
    TemporaryItem,
    UnknownProductPrompt,
)
from store_manager.domain.sessions import CartLine
from store_manager.errors import EmptyCartError, InvalidInputError, SessionNotFoundError
from store_manager.services.cart import CartService
from store_manager.services.checkout import OrderReceipt, SaleFinalizer
from store_manager.services.resolution import CatalogRepository, ProductResolver
from store_manager.services.sessions import SessionRegistry
from store_manager.services.temporary_products import TemporaryProductCache

DIALOG_NEW_SESSION = "new_session"
DIALOG_UNKNOWN_PRODUCT = "unknown_product"
DIALOG_ADD_PRODUCT = "add_product"
DIALOGS = {DIALOG_NEW_SESSION, DIALOG_UNKNOWN_PRODUCT, DIALOG_ADD_PRODUCT}

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanResult:
    """What happened to a scanned or resolved barcode."""

    notice: Notice
    line: CartLine | None = None
    prompt: UnknownProductPrompt | None = None


@dataclass(frozen=True)
class SaleResult:
    """Outcome of a sale attempt."""

    notice: Notice
    receipt: OrderReceipt | None = None


@dataclass
class StoreManager:
    """Coordinates sessions, scanning, the unknown-product dialogs and checkout.

    Collaborator failures are turned into notices here; only requests for
    sessions that do not exist raise.
    """

    registry: SessionRegistry
    cart_service: CartService
    resolver: ProductResolver
    temporary_products: TemporaryProductCache
    catalog_repository: CatalogRepository
    finalizer: SaleFinalizer
    dialog: str | None = None
    pending_barcode: str | None = None
    notices: deque[Notice] = field(default_factory=lambda: deque(maxlen=20))

    @property
    def dialog_open(self) -> bool:
        return self.dialog is not None

    def open_dialog(self, kind: str) -> None:
        """Mark a dialog as open so scanner input is held back."""
        if kind not in DIALOGS:
            raise InvalidInputError(f"Unknown dialog: {kind}")
        if kind != DIALOG_NEW_SESSION and self.pending_barcode is None:
            raise InvalidInputError("No unknown product is waiting to be resolved.")
        self.dialog = kind

    def dismiss_dialog(self) -> None:
        """Close any open dialog and forget the pending barcode."""
        self.dialog = None
        self.pending_barcode = None

    def start_session(self, name: str) -> Notice:
        try:
            self.registry.start_session(name)
        except InvalidInputError as exc:
            return self._notify(Notice.error("Invalid name", str(exc)))
        if self.dialog == DIALOG_NEW_SESSION:
            self.dialog = None
        return self._notify(
            Notice.info("Session started", f"Now serving {name.strip()}.")
        )

    def end_session(self, session_id: UUID) -> Notice:
        session = self.registry.end_session(session_id)
        return self._notify(
            Notice.info("Session ended", f"Closed the session for {session.name}.")
        )

    def set_active(self, session_id: UUID) -> Notice:
        session = self.registry.set_active(session_id)
        return Notice.info("Session switched", f"Now serving {session.name}.")

    def process_barcode(self, code: str) -> ScanResult:
        """Resolve a barcode and add it to the active session's cart."""
        barcode = code.strip()
        if not barcode:
            return ScanResult(notice=Notice.warning("Empty barcode", "Nothing to scan."))
        session = self.registry.active_session()
        if session is None:
            return ScanResult(
                notice=self._notify(
                    Notice.warning(
                        "No active session",
                        "Start a customer session before scanning products.",
                    )
                )
            )

        resolved = self.resolver.resolve(barcode)
        if isinstance(resolved, UnknownProductPrompt):
            self.dialog = DIALOG_UNKNOWN_PRODUCT
            self.pending_barcode = barcode
            return ScanResult(
                notice=self._notify(
                    Notice.warning(
                        "Product not found",
                        f"No product matches barcode {barcode}.",
                    )
                ),
                prompt=resolved,
            )

        line = self.cart_service.add_to_cart(session.id, resolved)
        return ScanResult(
            notice=self._notify(
                Notice.info("Item added", f"{line.name} added to {session.name}'s cart.")
            ),
            line=line,
        )

    def sell_as_temporary(self, name: str, price: float) -> ScanResult:
        """Sell the pending barcode under an ad hoc name and price."""
        barcode = self.pending_barcode
        if barcode is None:
            return ScanResult(notice=self._no_pending_notice())
        session = self.registry.active_session()
        if session is None:
            return ScanResult(notice=self._no_session_notice())
        try:
            product = self.temporary_products.register(barcode, name, price)
        except InvalidInputError as exc:
            return ScanResult(notice=self._notify(Notice.error("Invalid item", str(exc))))

        line = self.cart_service.add_to_cart(session.id, TemporaryItem(product=product))
        self.dismiss_dialog()
        return ScanResult(
            notice=self._notify(
                Notice.info("Temporary item added", f"{product.name} added to cart.")
            ),
            line=line,
        )

    def open_product_form(self) -> dict[str, object] | None:
        """Switch to the full product form, seeded with the pending barcode."""
        if self.pending_barcode is None:
            return None
        self.dialog = DIALOG_ADD_PRODUCT
        return {"barcode": self.pending_barcode}

    def add_to_inventory(self, fields: dict[str, object]) -> ScanResult:
        """Create a catalog product for the pending barcode and add it to the cart."""
        barcode = self.pending_barcode
        if barcode is None:
            return ScanResult(notice=self._no_pending_notice())
        session = self.registry.active_session()
        if session is None:
            return ScanResult(notice=self._no_session_notice())
        try:
            draft = ProductDraft.model_validate({**fields, "barcode": barcode})
        except ValidationError as exc:
            return ScanResult(
                notice=self._notify(
                    Notice.error("Invalid product", _format_validation_error(exc))
                )
            )
        try:
            product = self.catalog_repository.create_product(draft)
        except Exception:
            _logger.exception("Failed to create product for barcode %s", barcode)
            return ScanResult(
                notice=self._notify(
                    Notice.error(
                        "Could not add product",
                        "The product could not be saved. Please try again.",
                    )
                )
            )

        self.temporary_products.remove(barcode)
        line = self.cart_service.add_to_cart(session.id, CatalogItem(product=product))
        self.dismiss_dialog()
        return ScanResult(
            notice=self._notify(
                Notice.info("Product added", f"{product.name} added to inventory and cart.")
            ),
            line=line,
        )

    def remove_item(self, session_id: UUID, product_id: str) -> Notice:
        if not self.cart_service.remove_from_cart(session_id, product_id):
            return Notice.warning("Not in cart", "That item is no longer in the cart.")
        return self._notify(Notice.info("Item removed", "The item was removed."))

    def complete_sale(self, session_id: UUID) -> SaleResult:
        """Finalize a session, reporting any failure as a notice."""
        try:
            receipt = self.finalizer.complete_sale(session_id)
        except SessionNotFoundError:
            raise
        except EmptyCartError as exc:
            return SaleResult(notice=self._notify(Notice.error("Cart is empty", str(exc))))
        except Exception:
            _logger.exception("Failed to complete sale for session %s", session_id)
            return SaleResult(
                notice=self._notify(
                    Notice.error(
                        "Sale failed",
                        "The order could not be saved. "
                        "The cart has been kept so you can try again.",
                    )
                )
            )
        order = receipt.order
        return SaleResult(
            notice=self._notify(
                Notice.info(
                    "Sale completed",
                    f"Order {order.id} for {order.customer_name}: "
                    f"{CURRENCY} {order.total:.2f}",
                )
            ),
            receipt=receipt,
        )

    def _notify(self, notice: Notice) -> Notice:
        self.notices.append(notice)
        return notice

    def _no_session_notice(self) -> Notice:
        return self._notify(
            Notice.warning(
                "No active session",
                "Start or select a customer session first.",
            )
        )

    def _no_pending_notice(self) -> Notice:
        return self._notify(
            Notice.error("Nothing to resolve", "Scan an unknown product first.")
        )


def _format_validation_error(exc: ValidationError) -> str:
    """Flatten pydantic errors into one line for the operator."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)
