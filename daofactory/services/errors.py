class ServiceError(RuntimeError):
    """Recoverable service error (validation/authorization/uniqueness/etc.)."""

    code = "service_error"
    status = 400

    def __init__(self, message: str | None = None):
        super().__init__(message or self.code)
        self.message = message or self.code


class InvalidArgument(ServiceError):
    code = "invalid_argument"
    status = 400


class NotFound(ServiceError):
    code = "not_found"
    status = 404


class Forbidden(ServiceError):
    code = "forbidden"
    status = 403


class Conflict(ServiceError):
    code = "conflict"
    status = 409


class InvalidState(ServiceError):
    code = "invalid_state"
    status = 400


def ensure_max_len(max_len: int, **fields) -> None:
    """Reject over-long keys and titles instead of truncating them into a collision."""
    for field, value in fields.items():
        if value is not None and len(value) > max_len:
            raise InvalidArgument(f"{field} must be at most {max_len} characters")
