"""Custom exception classes for the charm catalog."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Machine-readable error classes returned to API clients."""

    NOT_FOUND = "not found"
    BAD_REQUEST = "bad request"
    UNAUTHORIZED = "unauthorized"
    INTERNAL = "internal"


_STATUS_CODES = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.INTERNAL: 500,
}


class CatalogError(Exception):
    """Base exception for all catalog errors.

    Attributes:
        message: Human-readable error message.
        kind: Error class.
        reference: The input (usually a charm or bundle id) that triggered it.
        status_code: HTTP status code for API responses.
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.INTERNAL,
        reference: Optional[str] = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.
            kind: Error class.
            reference: The triggering input, if any.
        """
        self.message = message
        self.kind = kind
        self.reference = reference
        self.status_code = _STATUS_CODES[kind]
        super().__init__(self.message)


class NotFoundError(CatalogError):
    """Raised when no charm or bundle matches a request."""

    def __init__(self, message: str, reference: Optional[str] = None) -> None:
        super().__init__(message, ErrorKind.NOT_FOUND, reference)


class BadRequestError(CatalogError):
    """Raised when request input cannot be interpreted."""

    def __init__(self, message: str, reference: Optional[str] = None) -> None:
        super().__init__(message, ErrorKind.BAD_REQUEST, reference)


class UnauthorizedError(CatalogError):
    """Raised when the caller may not perform the requested access."""

    def __init__(self, message: str = "unauthorized", reference: Optional[str] = None) -> None:
        super().__init__(message, ErrorKind.UNAUTHORIZED, reference)


class InternalError(CatalogError):
    """Raised when the backing store or another collaborator fails."""

    def __init__(self, message: str, reference: Optional[str] = None) -> None:
        super().__init__(message, ErrorKind.INTERNAL, reference)


def no_matching_entity(ref: object) -> NotFoundError:
    """Build the user-facing error for an id that matches nothing.

    Args:
        ref: The reference as given by the client.

    Returns:
        NotFoundError naming the reference.
    """
    return NotFoundError(f'no matching charm or bundle for "{ref}"', reference=str(ref))
