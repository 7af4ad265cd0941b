"""Error taxonomy shared by the services and the HTTP boundary.

Every error carries the message returned verbatim to the caller, the HTTP
status it maps to, and whether the caller may retry the same request.
"""


class DealershipError(Exception):
    status_code = 500
    retryable = False

    def __init__(self, message: str, *, field: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.field = field
        if status_code is not None:
            self.status_code = status_code


class ValidationError(DealershipError):
    status_code = 400


class NotFound(DealershipError):
    status_code = 404


class InvalidState(DealershipError):
    status_code = 409


class Unauthorized(DealershipError):
    status_code = 403


class StorageFailure(DealershipError):
    status_code = 503
    retryable = True
