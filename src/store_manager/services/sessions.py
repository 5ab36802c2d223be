"""Registry of concurrent customer sessions at the till."""

import logging
from dataclasses import dataclass, field
from uuid import UUID, uuid4

from store_manager.domain.sessions import CartLine, CustomerSession
from store_manager.errors import InvalidInputError, SessionNotFoundError
from store_manager.services.storage import LocalStorage

SESSIONS_KEY = "pos:sessions"

_logger = logging.getLogger(__name__)


@dataclass
class SessionRegistry:
    """Holds open customer sessions and persists them on every change.

    At most one session is active. The whole registry is written back to
    local storage after each change so a restart only loses the change that
    was in flight.
    """

    storage: LocalStorage
    sessions: list[CustomerSession] = field(default_factory=list)
    active_id: UUID | None = None

    def load(self) -> None:
        """Replace in-memory state with the stored snapshot."""
        self.sessions = []
        self.active_id = None
        try:
            raw = self.storage.get(SESSIONS_KEY)
            if raw is None:
                return
            sessions, active_id = _snapshot_from_dict(raw)
        except (AttributeError, KeyError, TypeError, ValueError):
            _logger.warning("Discarding unreadable session snapshot", exc_info=True)
            return
        self.sessions = sessions
        if any(session.id == active_id for session in sessions):
            self.active_id = active_id
        elif sessions:
            self.active_id = sessions[0].id

    def save(self) -> None:
        """Write the full registry to local storage."""
        self.storage.set(
            SESSIONS_KEY,
            {
                "active_id": str(self.active_id) if self.active_id else None,
                "sessions": [_session_to_dict(session) for session in self.sessions],
            },
        )

    def start_session(self, name: str) -> UUID:
        """Open a session with an empty cart and make it active."""
        cleaned = name.strip()
        if not cleaned:
            raise InvalidInputError("Please enter a customer name.")
        session = CustomerSession(id=uuid4(), name=cleaned)
        self.sessions.append(session)
        self.active_id = session.id
        self.save()
        _logger.info("Started session %s for %s", session.id, cleaned)
        return session.id

    def end_session(self, session_id: UUID) -> CustomerSession:
        """Remove a session, discarding whatever is left in its cart."""
        session = self.get(session_id)
        self.sessions = [item for item in self.sessions if item.id != session_id]
        if self.active_id == session_id:
            self.active_id = self.sessions[0].id if self.sessions else None
        self.save()
        _logger.info("Ended session %s", session_id)
        return session

    def set_active(self, session_id: UUID) -> CustomerSession:
        """Route scanner input to another session."""
        session = self.get(session_id)
        self.active_id = session_id
        self.save()
        return session

    def get(self, session_id: UUID) -> CustomerSession:
        """Return a session or raise SessionNotFoundError."""
        session = self.find(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session

    def find(self, session_id: UUID) -> CustomerSession | None:
        """Return a session, or None if it does not exist."""
        for session in self.sessions:
            if session.id == session_id:
                return session
        return None

    def active_session(self) -> CustomerSession | None:
        """Return the session receiving scanner input, if any."""
        if self.active_id is None:
            return None
        return self.find(self.active_id)

    def list_sessions(self) -> list[CustomerSession]:
        """Return open sessions in the order they were started."""
        return list(self.sessions)


def _session_to_dict(session: CustomerSession) -> dict[str, object]:
    return {
        "id": str(session.id),
        "name": session.name,
        "cart": [
            {
                "product_id": line.product_id,
                "name": line.name,
                "unit_price": line.unit_price,
                "quantity": line.quantity,
                "image_ref": line.image_ref,
            }
            for line in session.cart.values()
        ],
    }


def _snapshot_from_dict(
    raw: object,
) -> tuple[list[CustomerSession], UUID | None]:
    if not isinstance(raw, dict):
        raise TypeError("Session snapshot must be an object")
    sessions = []
    for row in raw.get("sessions", []):
        cart: dict[str, CartLine] = {}
        for line in row.get("cart", []):
            product_id = str(line["product_id"])
            cart[product_id] = CartLine(
                product_id=product_id,
                name=str(line["name"]),
                unit_price=float(line["unit_price"]),
                quantity=int(line["quantity"]),
                image_ref=str(line["image_ref"]),
            )
        sessions.append(
            CustomerSession(id=UUID(row["id"]), name=str(row["name"]), cart=cart)
        )
    active_raw = raw.get("active_id")
    active_id = UUID(active_raw) if active_raw else None
    return sessions, active_id
