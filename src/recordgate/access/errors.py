"""Typed errors raised by the record access layer.

Each error carries an ``ErrorKind``; the transport status for a kind is decided
only at the boundary (see ``recordgate.api.status``).
"""

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    PERSISTENCE_CONFLICT = "persistence_conflict"


class RecordAccessError(Exception):
    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RecordNotFoundError(RecordAccessError):
    kind = ErrorKind.NOT_FOUND


class PermissionDeniedError(RecordAccessError):
    kind = ErrorKind.PERMISSION_DENIED


class PersistenceConflictError(RecordAccessError):
    """A create or delete failed in the storage layer; the cause is only logged."""

    kind = ErrorKind.PERSISTENCE_CONFLICT

    def __init__(self, message: str, operation: str):
        super().__init__(message)
        self.operation = operation


class UnknownEntityError(KeyError):
    """An entity name was not registered."""

    def __init__(self, entity_name: str):
        super().__init__(entity_name)
        self.entity_name = entity_name

    def __str__(self) -> str:
        return f"Entity '{self.entity_name}' is not registered"
