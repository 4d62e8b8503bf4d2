# Overview: Failure taxonomy shared by the hierarchy, ledger and registry services.

from __future__ import annotations


class MasterShopError(Exception):
    """Base class for master-shop network failures."""
    pass


class NotFoundError(MasterShopError):
    """Raised when a referenced shop, user, master or transaction does not exist."""
    pass


class InvalidAmountError(MasterShopError):
    """Raised when a monetary value is negative or missing."""
    pass


class InvalidStateTransitionError(MasterShopError):
    """Raised when a cross-shop transaction is moved out of a terminal state."""
    pass


class DuplicateConnectionError(MasterShopError):
    """Raised by strict connects when the child is already connected."""
    pass


class ValidationError(MasterShopError):
    """Raised for unknown enum values and missing required fields."""
    pass
