"""Cart mutations for customer sessions."""

from dataclasses import dataclass
from uuid import UUID

from store_manager.domain.products import ResolvedItem
from store_manager.domain.sessions import CartLine
from store_manager.services.sessions import SessionRegistry


@dataclass
class CartService:
    """Adds and removes cart lines, persisting the registry after each change."""

    registry: SessionRegistry
    placeholder_image_url: str

    def add_to_cart(self, session_id: UUID, item: ResolvedItem) -> CartLine:
        """Add one unit of an item, merging with an existing line."""
        session = self.registry.get(session_id)
        product_id, name, price, image = self._line_fields(item)
        line = session.cart.get(product_id)
        if line is not None:
            line.quantity += 1
        else:
            line = CartLine(
                product_id=product_id,
                name=name,
                unit_price=price,
                quantity=1,
                image_ref=image or self.placeholder_image_url,
            )
            session.cart[product_id] = line
        self.registry.save()
        return line

    def remove_from_cart(self, session_id: UUID, product_id: str) -> bool:
        """Drop the whole line for a product. Returns False if it was absent."""
        session = self.registry.get(session_id)
        if session.cart.pop(product_id, None) is None:
            return False
        self.registry.save()
        return True

    @staticmethod
    def _line_fields(item: ResolvedItem) -> tuple[str, str, float, str | None]:
        if item.kind == "catalog":
            product = item.product
            return product.id, product.name, product.price, product.image
        if item.kind == "temporary":
            temporary = item.product
            return temporary.id, temporary.name, temporary.price, None
        raise ValueError(f"Unsupported item kind: {item.kind}")
