"""Exceptions raised by the point-of-sale services."""


class StoreManagerError(Exception):
    """Base class for store manager errors."""


class InvalidInputError(StoreManagerError):
    """Operator input failed validation; nothing was changed."""


class SessionNotFoundError(StoreManagerError):
    """No customer session exists with the requested id."""


class EmptyCartError(StoreManagerError):
    """A sale was requested for a session with nothing in its cart."""


class CameraUnavailableError(StoreManagerError):
    """The camera device could not be opened."""
