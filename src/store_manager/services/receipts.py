"""Receipt rendering for the print view."""

import logging
from dataclasses import dataclass

from store_manager.domain.orders import CURRENCY, ReceiptPayload
from store_manager.services.checkout import BILL_TO_PRINT_KEY
from store_manager.services.storage import LocalStorage

_logger = logging.getLogger(__name__)

_WIDTH = 42
_NAME_WIDTH = 18


@dataclass
class ReceiptService:
    """Reads the staged bill and renders it for an 80mm printer."""

    storage: LocalStorage
    store_name: str
    store_address: str
    store_phone: str

    def load_staged(self) -> ReceiptPayload | None:
        """Return the staged bill, or None if there is nothing to print."""
        try:
            raw = self.storage.get(BILL_TO_PRINT_KEY)
            if raw is None:
                return None
            return ReceiptPayload.model_validate(raw)
        except ValueError:
            _logger.warning("Failed to parse staged bill", exc_info=True)
            return None

    def render_text(self, payload: ReceiptPayload) -> str:
        """Render a plain-text receipt."""
        rule = "-" * _WIDTH
        date = payload.date
        hour = date.hour % 12 or 12
        date_text = f"{date:%b} {date.day}, {date.year} {hour}:{date:%M %p}"
        lines = [
            self.store_name.center(_WIDTH).rstrip(),
            self.store_address.center(_WIDTH).rstrip(),
            f"Phone: {self.store_phone}".center(_WIDTH).rstrip(),
            rule,
            _pair("Order ID:", payload.order_id[:12]),
            _pair("Date:", date_text),
            _pair("Customer:", payload.customer.name),
            rule,
            f"{'Item':<{_NAME_WIDTH}}{'Qty':>4}{'Price':>10}{'Total':>10}",
        ]
        for item in payload.items:
            lines.append(
                f"{item.name[:_NAME_WIDTH]:<{_NAME_WIDTH}}"
                f"{item.quantity:>4}"
                f"{item.price:>10.2f}"
                f"{item.price * item.quantity:>10.2f}"
            )
        lines.extend(
            [
                rule,
                _pair("Total:", f"{CURRENCY} {payload.total:.2f}"),
                "Thank you for shopping with us!".center(_WIDTH).rstrip(),
            ]
        )
        return "\n".join(lines) + "\n"


def _pair(label: str, value: str) -> str:
    padding = max(_WIDTH - len(label) - len(value), 1)
    return f"{label}{' ' * padding}{value}"
