"""Transport status mapping for access errors."""

from ..access.errors import ErrorKind, RecordAccessError
from .models import ErrorBody

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.PERMISSION_DENIED: 403,
    ErrorKind.PERSISTENCE_CONFLICT: 409,
}


def http_status_for(error: RecordAccessError) -> int:
    return STATUS_BY_KIND[error.kind]


def error_body(error: RecordAccessError) -> ErrorBody:
    return ErrorBody(kind=error.kind, message=error.message, status_code=http_status_for(error))
