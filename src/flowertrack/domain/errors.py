"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class InsufficientStockError(DomainError):
    """A sale or stock transfer asks for more units than the pool holds."""

    def __init__(self, message: str, requested: int = 0, available: int = 0):
        super().__init__(message)
        self.requested = requested
        self.available = available


def shop_not_found(shop_id: str) -> str:
    """Return message for missing shop."""
    return f"Shop {shop_id} not found"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def missing_shop_fields(fields: list[str]) -> str:
    """Return message for blank required shop fields."""
    return f"Shop {', '.join(fields)} {'is' if len(fields) == 1 else 'are'} required"


def negative_value(field: str, value: object) -> str:
    """Return message for a value that must not be negative."""
    return f"{field} must not be negative (got {value})"


def insufficient_stock(pool: str, requested: int, available: int) -> str:
    """Return message when a pool cannot cover a request."""
    return (
        f"Not enough flowers in {pool} stock: requested {requested}, "
        f"{available} available"
    )


def invalid_quantity(field: str, value: Optional[object]) -> str:
    """Return message for a quantity that is not a positive integer."""
    return f"{field} must be a positive whole number (got {value})"
