"""Error taxonomy shared by every bounded context.

Aggregates keep raising ``protean.exceptions.ValidationError`` for field and
invariant violations. Command handlers raise the classes below when a
failure needs a more specific kind (missing record, ownership, stock, coupon
state). ``classify`` folds both families into one ``(kind, message, details)``
triple that the HTTP layer renders.
"""

from enum import Enum

from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError


class ErrorKind(Enum):
    INVALID_INPUT = "InvalidInput"
    NOT_FOUND = "NotFound"
    FORBIDDEN = "Forbidden"
    CONFLICT = "Conflict"
    STOCK_EXCEEDED = "StockExceeded"
    INVALID_STATE = "InvalidState"
    INTERNAL = "Internal"


HTTP_STATUS = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.STOCK_EXCEEDED: 400,
    ErrorKind.INVALID_STATE: 400,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


class DomainError(Exception):
    """Base class for failures that carry an explicit ``ErrorKind``."""

    kind = ErrorKind.INTERNAL

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND


class ForbiddenError(DomainError):
    kind = ErrorKind.FORBIDDEN


class ConflictError(DomainError):
    kind = ErrorKind.CONFLICT


class StockExceededError(DomainError):
    kind = ErrorKind.STOCK_EXCEEDED

    def __init__(self, max_additional: int, available: int | None = None):
        if max_additional > 0:
            message = f"Only {max_additional} more unit(s) can be added for this item"
        else:
            message = "No more units of this item are available"
        super().__init__(message, max_additional=max_additional)
        self.max_additional = max_additional
        self.available = available


class CouponUnavailableError(DomainError):
    """Coupon exists but cannot be used right now (inactive)."""

    kind = ErrorKind.INVALID_STATE


class CouponExpiredError(CouponUnavailableError):
    def __init__(self, code: str):
        super().__init__("This coupon has expired", code=code, reason="expired")


class CollaboratorError(DomainError):
    """An external collaborator (catalogue, inventory) failed unexpectedly."""

    kind = ErrorKind.INTERNAL


def _flatten_messages(messages) -> str:
    if isinstance(messages, dict):
        parts = []
        for field, errors in messages.items():
            if isinstance(errors, list | tuple):
                errors = "; ".join(str(e) for e in errors)
            parts.append(f"{field}: {errors}")
        return ", ".join(parts)
    if isinstance(messages, list | tuple):
        return "; ".join(str(m) for m in messages)
    return str(messages)


def classify(exc: Exception) -> tuple[ErrorKind, str, dict]:
    """Map any exception raised while processing a request to the taxonomy."""
    if isinstance(exc, DomainError):
        return exc.kind, exc.message, dict(exc.details)

    if isinstance(exc, ValidationError):
        return ErrorKind.INVALID_INPUT, _flatten_messages(exc.messages), {}

    if isinstance(exc, ObjectNotFoundError):
        messages = getattr(exc, "messages", None) or exc.args
        return ErrorKind.NOT_FOUND, _flatten_messages(messages) or "Not found", {}

    if isinstance(exc, ExpectedVersionError):
        return ErrorKind.CONFLICT, "The record was modified by another request; retry", {}

    return ErrorKind.INTERNAL, str(exc) or exc.__class__.__name__, {}
