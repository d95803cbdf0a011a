import enum


class ServiceError(Exception):
    """Base for errors that map onto an HTTP status in the response envelope."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    status_code = 400


class AuthorizationError(ServiceError):
    status_code = 401


class RecordNotFoundError(ServiceError):
    status_code = 404


class ConfigurationError(ServiceError):
    status_code = 500


class RemoteErrorKind(str, enum.Enum):
    NOT_FOUND = "not_found"
    TRANSIENT = "transient"
    PERMISSION = "permission"
    REJECTED = "rejected"


class RemoteStoreError(ServiceError):
    """Failure reported by the remote drive, classified at the client boundary."""

    status_code = 500

    def __init__(self, kind: RemoteErrorKind, message: str, http_status: int | None = None):
        super().__init__(message)
        self.kind = kind
        self.http_status = http_status
        self.context: dict = {}

    @property
    def is_not_found(self) -> bool:
        return self.kind is RemoteErrorKind.NOT_FOUND

    @classmethod
    def from_status(cls, http_status: int, message: str) -> "RemoteStoreError":
        if http_status == 404:
            kind = RemoteErrorKind.NOT_FOUND
        elif http_status in (401, 403):
            kind = RemoteErrorKind.PERMISSION
        elif http_status in (408, 429) or http_status >= 500:
            kind = RemoteErrorKind.TRANSIENT
        else:
            kind = RemoteErrorKind.REJECTED
        return cls(kind, message, http_status)

    def add_context(self, **context) -> "RemoteStoreError":
        self.context.update(context)
        return self

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} ({details})"
