"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI and HTTP layers can catch them uniformly and translate them into
user-facing messages or status codes.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist or is not visible to the caller."""


class InsufficientStock(ValidationError):
    """A stock decrease would take a product's quantity below zero."""

    def __init__(self, product_name: str, available: int, requested: int) -> None:
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {product_name}. "
            f"Available: {available}, Requested: {requested}"
        )


class InvalidTransition(DomainException):
    """Base class for rejected status changes."""


class UnknownStatus(InvalidTransition):
    """The requested status is not a member of the order status enumeration."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Unknown order status: {value!r}")


class TransitionDenied(InvalidTransition):
    """The acting role may not move the order from its current status."""

    def __init__(self, current: str, requested: str, role: str) -> None:
        self.current = current
        self.requested = requested
        self.role = role
        super().__init__(
            f"Cannot change status from {current} to {requested} as {role}"
        )


class AlreadyAssigned(DomainException):
    """A return order was already claimed by another transporter."""


class ConcurrencyConflict(DomainException):
    """The entity changed since it was read; the write was not applied."""


class StockTransactionTimeout(ConcurrencyConflict):
    """A stock transaction could not acquire the product store in time."""
