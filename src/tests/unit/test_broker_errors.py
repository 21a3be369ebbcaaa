"""Tests for error handling classes."""

import pytest

from userbroker.core.errors import (
    BrokerError,
    ErrorCode,
    InstanceAlreadyExistsError,
    InstanceNotFoundError,
    InvalidRequestError,
    OperationInProgressError,
    ProvisioningFailureError,
    UnavailableError,
)


@pytest.mark.parametrize(
    ("error_cls", "code", "status_code"),
    [
        (InstanceAlreadyExistsError, ErrorCode.ALREADY_EXISTS, 409),
        (InstanceNotFoundError, ErrorCode.NOT_FOUND, 404),
        (InvalidRequestError, ErrorCode.INVALID_REQUEST, 400),
        (ProvisioningFailureError, ErrorCode.PROVISIONING_FAILURE, 502),
        (UnavailableError, ErrorCode.UNAVAILABLE, 503),
        (OperationInProgressError, ErrorCode.OPERATION_IN_PROGRESS, 409),
    ],
)
def test_error_code_and_status(
    error_cls: type[BrokerError], code: ErrorCode, status_code: int
) -> None:
    """Each error carries its code and HTTP status."""
    exc = error_cls()
    assert isinstance(exc, BrokerError)
    assert exc.code == code
    assert exc.status_code == status_code


class TestBrokerError:
    """Tests for BrokerError behaviour shared by all subclasses."""

    def test_custom_message(self) -> None:
        """Should accept custom message."""
        exc = InstanceNotFoundError("no such instance with ID svc-1")
        assert exc.message == "no such instance with ID svc-1"
        assert str(exc) == "no such instance with ID svc-1"

    def test_to_response(self) -> None:
        """to_response() should return ErrorResponse with correct fields."""
        resp = InvalidRequestError("Namespace not detected in request").to_response()

        assert resp.error.code == "INVALID_REQUEST"
        assert resp.error.message == "Namespace not detected in request"
        assert resp.model_dump() == {
            "error": {
                "code": "INVALID_REQUEST",
                "message": "Namespace not detected in request",
            }
        }
