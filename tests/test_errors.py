from __future__ import annotations

import pytest

from babylon.domain.errors import (
    GENERIC_ERROR_MESSAGE,
    STATUS_BY_CODE,
    BabylonError,
    ConflictError,
    DatabaseError,
    ErrorCode,
    ExternalServiceError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    UnauthorizedError,
    ValidationError,
    is_babylon_error,
    is_operational_error,
    status_for,
    to_error_response,
)
from babylon.infrastructure.retry import is_retryable_error


class TestErrorClasses:
    @pytest.mark.parametrize(
        "error,code,status",
        [
            (ValidationError("bad username"), ErrorCode.VALIDATION_ERROR, 400),
            (NotFoundError("User"), ErrorCode.NOT_FOUND, 404),
            (UnauthorizedError(), ErrorCode.UNAUTHORIZED, 401),
            (ForbiddenError(), ErrorCode.FORBIDDEN, 403),
            (ConflictError("Username taken"), ErrorCode.CONFLICT, 409),
            (RateLimitError(30), ErrorCode.RATE_LIMITED, 429),
            (DatabaseError("query failed"), ErrorCode.DATABASE_ERROR, 500),
            (ExternalServiceError("privy", "down"), ErrorCode.EXTERNAL_SERVICE_ERROR, 502),
        ],
    )
    def test_code_and_status(self, error, code, status):
        assert error.code is code
        assert error.status_code == status
        assert status_for(error) == status

    def test_status_table(self):
        assert set(STATUS_BY_CODE) == set(ErrorCode)
        assert STATUS_BY_CODE[ErrorCode.INTERNAL_ERROR] == 500

    def test_not_found_message(self):
        assert NotFoundError("User", "abc").message == "User not found: abc"
        assert NotFoundError("User").message == "User not found"
        assert NotFoundError("User", "abc").context == {"resource": "User", "id": "abc"}

    def test_default_messages(self):
        assert str(UnauthorizedError()) == "Authentication required"
        assert str(ForbiddenError()) == "Access denied"
        assert str(RateLimitError(5)) == "Too many requests"

    def test_external_service_message(self):
        error = ExternalServiceError("privy", "token endpoint unavailable")
        assert error.message == "privy: token endpoint unavailable"
        assert error.context == {"service": "privy"}

    def test_cause_is_chained(self):
        cause = OSError("socket closed")
        assert DatabaseError("query failed", cause=cause).__cause__ is cause

    def test_operational_flags(self):
        assert is_operational_error(ValidationError("x")) is True
        assert is_operational_error(DatabaseError("x")) is False
        assert is_operational_error(ValueError("x")) is False
        assert is_babylon_error(ConflictError("x")) is True
        assert is_babylon_error(ValueError("x")) is False

    def test_to_dict(self):
        data = ConflictError("Username taken", {"username": "alice"}).to_dict()
        assert data["name"] == "ConflictError"
        assert data["code"] == "CONFLICT"
        assert data["statusCode"] == 409
        assert data["context"] == {"username": "alice"}
        assert data["timestamp"].endswith("+00:00")

    def test_rate_limit_is_retryable(self):
        assert is_retryable_error(RateLimitError(1)) is True
        assert is_retryable_error(ValidationError("bad input")) is False


class TestToErrorResponse:
    def test_babylon_error(self):
        response = to_error_response(NotFoundError("User", "abc"))
        assert response == {
            "success": False,
            "error": {
                "code": "NOT_FOUND",
                "message": "User not found: abc",
                "details": {"resource": "User", "id": "abc"},
            },
        }

    def test_babylon_error_without_context_has_no_details(self):
        response = to_error_response(UnauthorizedError())
        assert "details" not in response["error"]

    def test_operational_message_passes_through_in_production(self):
        response = to_error_response(ValidationError("bio too long"), production=True)
        assert response["error"]["message"] == "bio too long"

    def test_unexpected_error_in_development(self):
        response = to_error_response(KeyError("boom"))
        assert response["error"]["code"] == "INTERNAL_ERROR"
        assert "boom" in response["error"]["message"]

    def test_unexpected_error_in_production(self):
        response = to_error_response(RuntimeError("secret detail"), production=True)
        assert response["error"] == {"code": "INTERNAL_ERROR", "message": GENERIC_ERROR_MESSAGE}

    def test_non_exception(self):
        response = to_error_response({"weird": True})
        assert response["error"]["message"] == GENERIC_ERROR_MESSAGE
        assert status_for({"weird": True}) == 500

    def test_custom_base_error(self):
        error = BabylonError("token expired", code=ErrorCode.EXPIRED_TOKEN)
        assert error.status_code == 401
        assert to_error_response(error)["error"]["code"] == "EXPIRED_TOKEN"
