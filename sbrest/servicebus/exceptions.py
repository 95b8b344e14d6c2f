"""
Service Bus Exception Hierarchy

Typed failures for request assembly, response interpretation and transport.

ServiceBusError
├── ConnectionStringError       client cannot be built from the connection string
├── LocalMessageError           lock operation on a message that was never leased
├── EmptyBusError               receive timed out with nothing available
├── NonSerializedBodyError      body is not a serialized structure
├── TransportError              the HTTP exchange itself failed
└── RemoteError                 server answered with a non-success status
    ├── BadRequestError             (400)
    ├── AuthorizationFailureError   (401)
    ├── ResourceFailureError        (403)
    ├── ResourceNotFoundError       (410)
    ├── InternalServerError         (500)
    └── UnknownStatusError          (anything else)
"""

from typing import Any, Dict, Optional


class ServiceBusError(Exception):
    """
    Base exception for all Service Bus client errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code (e.g., 'LocalMessage')
        details: Additional context (status_code, entity path, etc.)
    """

    error_code: str = "ServiceBusError"
    default_message: str = "Service Bus request failed"

    def __init__(
        self,
        message: Optional[str] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        message = message or self.__class__.default_message
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format for diagnostics."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details
            }
        }


class ConnectionStringError(ServiceBusError):
    """Raised when a connection string lacks a usable Endpoint."""
    error_code = "InvalidConnectionString"
    default_message = "Endpoint not in connection string."


# ========== Local precondition errors ==========

class LocalMessageError(ServiceBusError):
    """Raised when complete/abandon/renew is attempted on a message with no lease."""
    error_code = "LocalMessage"
    default_message = (
        "The message doesn't exist on the server. This happens when you try and "
        "delete/lock a message you created locally."
    )


class EmptyBusError(ServiceBusError):
    """Raised when a receive timed out before a message became available."""
    error_code = "EmptyBus"
    default_message = (
        "Service Bus Queue/Subscription didn't have any messages before receive timed out."
    )


class NonSerializedBodyError(ServiceBusError):
    """Raised when a message body cannot be parsed as a structured document."""
    error_code = "NonSerializedBody"
    default_message = (
        "Parsing the body failed. This happens if the message sender doesn't serialize "
        "the message. Use message.body or message.text to read the raw body."
    )


class TransportError(ServiceBusError):
    """
    Wraps a failure while executing the HTTP exchange.

    Attributes:
        cause: The original exception raised by the HTTP library.
    """
    error_code = "TransportError"

    def __init__(self, cause: Exception, message: Optional[str] = None):
        message = message or f"HTTP exchange failed: {cause}"
        super().__init__(message, details={"cause": type(cause).__name__})
        self.cause = cause


# ========== Status-derived errors ==========

class RemoteError(ServiceBusError):
    """Base class for errors reflecting a server status code."""
    error_code = "RemoteError"
    status_code: Optional[int] = None

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message, details={"status_code": self.status_code})


class BadRequestError(RemoteError):
    error_code = "BadRequest"
    status_code = 400
    default_message = "Remote returned code 400."


class AuthorizationFailureError(RemoteError):
    error_code = "AuthorizationFailure"
    status_code = 401
    default_message = "Remote returned 401. Check your connection string."


class ResourceFailureError(RemoteError):
    error_code = "ResourceFailure"
    status_code = 403
    default_message = "Message failed to send. The message may be too large or the queue is full."


class ResourceNotFoundError(RemoteError):
    error_code = "ResourceNotFound"
    status_code = 410
    default_message = "The requested queue does not exist or could not be found."


class InternalServerError(RemoteError):
    error_code = "InternalError"
    status_code = 500
    default_message = "Remote returned 500 - Internal server error"


class UnknownStatusError(RemoteError):
    """Raised for any status code outside the recognized set."""
    error_code = "UnknownError"

    def __init__(self, status_code: int, message: Optional[str] = None):
        message = message or f"Something unexpected happened (status {status_code})"
        super().__init__(message, status_code=status_code)


SUCCESS_STATUS_CODES = frozenset({200, 201})

_STATUS_ERRORS = {
    cls.status_code: cls
    for cls in (
        BadRequestError,
        AuthorizationFailureError,
        ResourceFailureError,
        ResourceNotFoundError,
        InternalServerError,
    )
}


def raise_for_status(status_code: int) -> None:
    """
    Interpret a Service Bus status code.

    Args:
        status_code: HTTP status returned by the transport

    Raises:
        RemoteError: Matching subclass for every non-success status
    """
    if status_code in SUCCESS_STATUS_CODES:
        return
    error_cls = _STATUS_ERRORS.get(status_code)
    if error_cls is None:
        raise UnknownStatusError(status_code)
    raise error_cls()
