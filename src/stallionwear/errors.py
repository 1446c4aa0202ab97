"""Error taxonomy for the order / cart / inventory core.

Business-rule violations are ``ValidationError`` subclasses so that they flow
through Protean exactly like field validation failures; missing entities are
``ObjectNotFoundError`` subclasses. ``error_response`` turns any of them into
a transport-neutral ``(status, body)`` pair for whatever layer sits on top.
A write that lost Protean's version check (``ExpectedVersionError``) is a
conflict, like a stock shortfall.
"""

import structlog
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ProteanException, ValidationError

from stallionwear.config import is_production

logger = structlog.get_logger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again later."


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------
class NotFound(ObjectNotFoundError):
    """A referenced entity does not exist."""


class ProductNotFound(NotFound):
    pass


class OrderNotFound(NotFound):
    pass


class VariantNotFound(NotFound):
    pass


class ItemNotFound(NotFound):
    """No cart or wishlist line matches ``(product, size, color)``."""


# ---------------------------------------------------------------------------
# Business rules
# ---------------------------------------------------------------------------
class InsufficientStock(ValidationError):
    """Requested quantity exceeds the variant stock at check time."""


class InvalidTransition(ValidationError):
    """The order state machine does not allow the requested status change."""


class AmountMismatch(ValidationError):
    """Computed totals disagree with stored or submitted totals."""


class InvalidAmount(AmountMismatch):
    """The final amount of an order is not positive."""


class PriceMismatch(ValidationError):
    """A caller-supplied price diverges from the current variant price."""


# ---------------------------------------------------------------------------
# Access and collaborators
# ---------------------------------------------------------------------------
class AccessDenied(ProteanException):
    def __init__(self, messages):
        super().__init__(messages)
        self.messages = messages


class UpstreamFailure(ProteanException):
    """The media store or the persistence layer failed."""

    def __init__(self, messages, upstream=None):
        super().__init__(messages)
        self.messages = messages
        self.upstream = upstream


# Most specific classes first
_STATUS_CODES = (
    (InsufficientStock, 409),
    (InvalidTransition, 409),
    (ExpectedVersionError, 409),
    (AmountMismatch, 422),
    (PriceMismatch, 422),
    (ValidationError, 400),
    (ObjectNotFoundError, 404),
    (AccessDenied, 403),
    (UpstreamFailure, 502),
)


def status_code_for(exc: Exception) -> int:
    for exc_cls, status in _STATUS_CODES:
        if isinstance(exc, exc_cls):
            return status
    return 500


def error_response(exc: Exception) -> tuple[int, dict]:
    """Map an exception to a status code and a response body.

    Client-fixable errors always carry their messages. Upstream and
    unexpected errors only reveal details outside production.
    """
    status = status_code_for(exc)
    body = {"error": type(exc).__name__}

    if status >= 500:
        logger.error("request_failed", error_type=type(exc).__name__, error=str(exc), status=status)
        if is_production():
            body["messages"] = {"_entity": [GENERIC_ERROR_MESSAGE]}
        else:
            body["messages"] = _messages_of(exc)
    else:
        body["messages"] = _messages_of(exc)

    return status, body


def _messages_of(exc: Exception) -> dict:
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        return messages
    return {"_entity": [str(messages or exc)]}
