"""Domain models for point-of-sale customer sessions."""

from dataclasses import dataclass, field
from uuid import UUID


@dataclass
class CartLine:
    """A single product line in a customer's cart."""

    product_id: str
    name: str
    unit_price: float
    quantity: int
    image_ref: str

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


@dataclass
class CustomerSession:
    """An open sale for one customer, keyed by product id in scan order."""

    id: UUID
    name: str
    cart: dict[str, CartLine] = field(default_factory=dict)

    @property
    def lines(self) -> list[CartLine]:
        return list(self.cart.values())


def cart_total(lines: list[CartLine]) -> float:
    """Sum line totals, rounded to cents."""
    return round(sum(line.line_total for line in lines), 2)
