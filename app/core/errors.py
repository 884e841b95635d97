from enum import Enum

GENERIC_ERROR_MESSAGE = "An internal server error occurred processing the API request."


class ErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    BAD_REQUEST = "bad_request"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    METHOD_NOT_ALLOWED = "method_not_allowed"
    UPSTREAM_FAILURE = "upstream_failure"
    UPSTREAM_TIMEOUT = "upstream_timeout"
    CONFIGURATION = "configuration_error"
    PERSISTENCE = "persistence_error"
    INTERNAL = "internal_error"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]

    @property
    def exposed(self) -> bool:
        """False when the message may carry operator-only detail."""
        return self not in (ErrorKind.CONFIGURATION, ErrorKind.PERSISTENCE, ErrorKind.INTERNAL)


_STATUS_CODES = {
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.METHOD_NOT_ALLOWED: 405,
    ErrorKind.UPSTREAM_FAILURE: 502,
    ErrorKind.UPSTREAM_TIMEOUT: 504,
    ErrorKind.CONFIGURATION: 500,
    ErrorKind.PERSISTENCE: 500,
    ErrorKind.INTERNAL: 500,
}


class ChatError(Exception):
    """Failure of a chat operation, tagged with the kind the API boundary maps to a status."""

    def __init__(self, kind: ErrorKind, message: str, upstream_status: int | None = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.upstream_status = upstream_status

    @property
    def status_code(self) -> int:
        # Upstream client errors are passed through; server-side ones stay 502.
        if self.kind == ErrorKind.UPSTREAM_FAILURE and self.upstream_status and 400 <= self.upstream_status < 500:
            return self.upstream_status
        return self.kind.status_code

    @property
    def safe_message(self) -> str:
        return self.message if self.kind.exposed else GENERIC_ERROR_MESSAGE
