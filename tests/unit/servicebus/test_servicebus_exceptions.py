"""
Unit Tests for Service Bus Exceptions

Tests for the exception hierarchy and status code classification.
"""

import pytest

from sbrest.servicebus.exceptions import (
    AuthorizationFailureError,
    BadRequestError,
    ConnectionStringError,
    EmptyBusError,
    InternalServerError,
    LocalMessageError,
    NonSerializedBodyError,
    RemoteError,
    ResourceFailureError,
    ResourceNotFoundError,
    ServiceBusError,
    TransportError,
    UnknownStatusError,
    raise_for_status,
)


class TestServiceBusError:
    """Tests for base ServiceBusError class."""

    def test_basic_error(self):
        error = ServiceBusError("Something went wrong")

        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.error_code == "ServiceBusError"
        assert error.details == {}

    def test_error_with_custom_code(self):
        error = ServiceBusError("Custom error", error_code="CustomCode", details={"key": "value"})

        assert error.error_code == "CustomCode"
        assert error.details == {"key": "value"}

    def test_to_dict(self):
        error = LocalMessageError(details={"message_id": "m1"})

        assert error.to_dict() == {
            "error": {
                "code": "LocalMessage",
                "message": LocalMessageError.default_message,
                "details": {"message_id": "m1"},
            }
        }

    @pytest.mark.parametrize("error_cls", [
        ConnectionStringError,
        LocalMessageError,
        EmptyBusError,
        NonSerializedBodyError,
        BadRequestError,
        AuthorizationFailureError,
        ResourceFailureError,
        ResourceNotFoundError,
        InternalServerError,
    ])
    def test_default_messages(self, error_cls):
        error = error_cls()

        assert isinstance(error, ServiceBusError)
        assert error.message == error_cls.default_message


class TestTransportError:
    """Tests for TransportError."""

    def test_wraps_cause(self):
        cause = ConnectionResetError("reset by peer")

        error = TransportError(cause)

        assert error.cause is cause
        assert "reset by peer" in str(error)
        assert error.details == {"cause": "ConnectionResetError"}


class TestRaiseForStatus:
    """Tests for status code classification."""

    @pytest.mark.parametrize("status", [200, 201])
    def test_success(self, status):
        assert raise_for_status(status) is None

    @pytest.mark.parametrize("status,error_cls", [
        (400, BadRequestError),
        (401, AuthorizationFailureError),
        (403, ResourceFailureError),
        (410, ResourceNotFoundError),
        (500, InternalServerError),
    ])
    def test_known_failures(self, status, error_cls):
        with pytest.raises(error_cls) as exc_info:
            raise_for_status(status)

        assert exc_info.value.status_code == status
        assert exc_info.value.details == {"status_code": status}
        assert isinstance(exc_info.value, RemoteError)

    @pytest.mark.parametrize("status", [204, 404, 409, 503, 599])
    def test_unknown_status(self, status):
        """Test anything outside the recognized set carries its status."""
        with pytest.raises(UnknownStatusError) as exc_info:
            raise_for_status(status)

        assert exc_info.value.status_code == status
        assert exc_info.value.error_code == "UnknownError"
        assert str(status) in str(exc_info.value)
