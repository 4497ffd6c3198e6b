__all__ = [
    "AuthError",
    "BadRequestError",
    "BaseError",
    "ConfigError",
    "ConflictError",
    "ContainerError",
    "ForbiddenError",
    "InternalError",
    "NetworkError",
    "NotFoundError",
    "NotSupportedError",
    "SerializationError",
    "UnauthorizedError",
    "http_error",
]


class BaseError(Exception):
    status_code: int = 500
    kind: str = "error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}" if self.message else self.kind


class AuthError(BaseError):
    status_code = 401
    kind = "auth"


class NetworkError(BaseError):
    status_code = 502
    kind = "network"


class BadRequestError(NetworkError):
    status_code = 400


class UnauthorizedError(NetworkError):
    status_code = 401


class ForbiddenError(NetworkError):
    status_code = 403


class NotFoundError(NetworkError):
    status_code = 404


class ConflictError(NetworkError):
    status_code = 409


class InternalError(NetworkError):
    status_code = 500


class ConfigError(BaseError):
    status_code = 500
    kind = "config"


class SerializationError(BaseError):
    status_code = 500
    kind = "serialization"


class ContainerError(BaseError):
    status_code = 500
    kind = "container"


class NotSupportedError(BaseError):
    status_code = 415
    kind = "not_supported"


def http_error(status_code: int, message: str) -> NetworkError:
    if status_code == 400:
        return BadRequestError(message)
    elif status_code == 401:
        return UnauthorizedError(message)
    elif status_code == 403:
        return ForbiddenError(message)
    elif status_code == 404:
        return NotFoundError(message)
    elif status_code == 409:
        return ConflictError(message)
    elif status_code == 500:
        return InternalError(message)
    return NetworkError(message)
