"""Error taxonomy shared by the client, the pipeline and the tool layer."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    CONFIRMATION_REQUIRED = "CONFIRMATION_REQUIRED"
    DATE_CONSTRAINT_ERROR = "DATE_CONSTRAINT_ERROR"
    TOOL_NOT_FOUND = "TOOL_NOT_FOUND"
    NETWORK_ERROR = "NETWORK_ERROR"
    REQUEST_ERROR = "REQUEST_ERROR"
    API_ERROR = "API_ERROR"
    AUTH_INVALID = "AUTH_INVALID"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    CONFLICT = "CONFLICT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    RATE_LIMITED = "RATE_LIMITED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# Used when the vendor error envelope carries no code of its own.
STATUS_ERROR_CODES: dict[int, ErrorCode] = {
    401: ErrorCode.AUTH_INVALID,
    402: ErrorCode.INSUFFICIENT_FUNDS,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.VALIDATION_ERROR,
    429: ErrorCode.RATE_LIMITED,
}


class GeotaskerError(Exception):
    """
    Base error carrying a machine-readable code and a human message.

    Args:
        code: Error code, either an ErrorCode or a vendor supplied string
        message: Human readable description
        status_code: HTTP status of the failed call, 0 when no response was received
        details: Optional structured details
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 0,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = str(code)
        self.message = message
        self.status_code = status_code
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.status_code:
            payload["statusCode"] = self.status_code
        if self.details:
            payload["details"] = self.details
        return payload

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code!r}, message={self.message!r}, "
            f"status_code={self.status_code})"
        )


class ConfigurationError(GeotaskerError):
    def __init__(self, message: str):
        super().__init__(ErrorCode.CONFIGURATION_ERROR, message)


class InvalidRequestError(GeotaskerError):
    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: str = ErrorCode.INVALID_REQUEST,
    ):
        super().__init__(code, message, details=details)


class ConfirmationRequiredError(InvalidRequestError):
    def __init__(self, message: str):
        super().__init__(message, code=ErrorCode.CONFIRMATION_REQUIRED)


class ImageryApiError(GeotaskerError):
    """Classified failure of a vendor API call."""

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500
