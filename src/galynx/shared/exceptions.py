"""Consolidated exceptions for the Galynx desktop core.

All custom exceptions are defined here to provide a single source of truth
for error handling across the application.
"""

from dataclasses import asdict, dataclass


class GalynxError(Exception):
    """Base exception for Galynx errors"""

    pass


class ApiError(GalynxError):
    """Base exception for every failure an operation can surface"""

    def to_dto(self) -> "ApiErrorDto":
        """Flatten into a displayable {status, error, message} triple"""
        return ApiErrorDto.from_error(self)


class NetworkError(ApiError):
    """Raised when the transport fails (DNS, connect, TLS, read)"""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"network request failed: {detail}")


class HttpError(ApiError):
    """Raised when the API answers with a non-2xx status"""

    def __init__(self, status: int, error: str, message: str) -> None:
        self.status = status
        self.error = error
        self.message = message
        super().__init__(f"api returned error ({status}): {error} {message}")


class UnauthenticatedError(ApiError):
    """Raised when no valid credential is available"""

    def __init__(self) -> None:
        super().__init__("unauthenticated")


class InvalidResponseError(ApiError):
    """Raised when a body cannot be decoded into the expected shape"""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"invalid response: {detail}")


class StorageError(ApiError):
    """Raised when credential persistence fails"""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"storage error: {detail}")


class RealtimeError(ApiError):
    """Raised when a realtime handshake cannot be constructed"""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"realtime error: {detail}")


class ConfigurationError(GalynxError, ValueError):
    """Raised when configuration is invalid or missing"""

    pass


@dataclass(frozen=True)
class ApiErrorDto:
    """Error shape handed to the frontend"""

    status: int
    error: str
    message: str

    @classmethod
    def from_error(cls, err: ApiError) -> "ApiErrorDto":
        if isinstance(err, HttpError):
            return cls(status=err.status, error=err.error, message=err.message)
        if isinstance(err, UnauthenticatedError):
            return cls(
                status=401,
                error="unauthorized",
                message="You must sign in again.",
            )
        return cls(status=500, error="internal_error", message=str(err))

    def to_dict(self) -> dict:
        return asdict(self)
