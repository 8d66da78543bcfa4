# core_forum_db/exceptions.py
"""
Typed database errors and the classifier that maps driver errors onto them

Everything above ``classify_database_error`` works with the typed taxonomy
only. Vendor specific codes are known nowhere else.
"""
import errno
import socket
from enum import Enum
from typing import Any, List, Optional

from sqlalchemy import exc as sa_exc

from .constants import (
    CONNECTION_ERROR, CONNECTION_REFUSED, DUPLICATE_ERROR, FOREIGN_KEY_VIOLATION,
    HOST_NOT_FOUND, NOT_FOUND, NOT_NULL_VIOLATION, QUERY_ERROR, TRANSACTION_ERROR,
    UNDEFINED_COLUMN, UNDEFINED_TABLE, UNIQUE_VIOLATION, VALIDATION_ERROR
)

__all__ = [
    "ErrorKind",
    "DatabaseError",
    "QueryError",
    "ConnectionError",
    "TransactionError",
    "ValidationError",
    "ResourceNotFoundError",
    "DuplicateEntryError",
    "PERMANENT_ERRORS",
    "classify_database_error",
    "extract_error_code",
    "is_database_error",
    "is_retryable_error",
]


class ErrorKind(Enum):
    """The seven failure kinds surfaced by this package"""
    DATABASE = "database"
    QUERY = "query"
    CONNECTION = "connection"
    TRANSACTION = "transaction"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"


class DatabaseError(Exception):
    """Base exception for all database errors"""

    kind = ErrorKind.DATABASE

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        original_error: Any = None,
        driver_code: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.original_error = original_error
        self.driver_code = driver_code

    @property
    def cause(self) -> Any:
        """The wrapped driver error, if any"""
        return self.original_error

    def __str__(self):
        if self.original_error is not None:
            return f"{self.message} (Original: {self.original_error})"
        return self.message


class QueryError(DatabaseError):
    """Exception raised for malformed or unresolvable queries"""

    kind = ErrorKind.QUERY

    def __init__(
        self,
        message: str,
        query: Optional[str] = None,
        params: Optional[List[Any]] = None,
        original_error: Any = None,
        driver_code: Optional[str] = None
    ):
        super().__init__(message, QUERY_ERROR, original_error, driver_code)
        self.query = query
        self.params = params


class ConnectionError(DatabaseError):
    """Exception raised for connection-related errors"""

    kind = ErrorKind.CONNECTION

    def __init__(self, message: str, original_error: Any = None, driver_code: Optional[str] = None):
        super().__init__(message, CONNECTION_ERROR, original_error, driver_code)


class TransactionError(DatabaseError):
    """Exception raised for transaction and savepoint lifecycle violations"""

    kind = ErrorKind.TRANSACTION

    def __init__(self, message: str, original_error: Any = None, driver_code: Optional[str] = None):
        super().__init__(message, TRANSACTION_ERROR, original_error, driver_code)


class ValidationError(DatabaseError):
    """Exception raised when the request itself is invalid"""

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        original_error: Any = None,
        driver_code: Optional[str] = None
    ):
        super().__init__(message, VALIDATION_ERROR, original_error, driver_code)
        self.field = field


class ResourceNotFoundError(DatabaseError):
    """Exception raised when a requested resource is not found"""

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        message: str,
        resource: Optional[str] = None,
        original_error: Any = None,
        driver_code: Optional[str] = None
    ):
        super().__init__(message, NOT_FOUND, original_error, driver_code)
        self.resource = resource


class DuplicateEntryError(DatabaseError):
    """Exception raised for unique key violations"""

    kind = ErrorKind.DUPLICATE

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        original_error: Any = None,
        driver_code: Optional[str] = None
    ):
        super().__init__(message, DUPLICATE_ERROR, original_error, driver_code)
        self.field = field


# Failures caused by the request itself; retrying cannot help
PERMANENT_ERRORS = (ValidationError, ResourceNotFoundError, DuplicateEntryError)


def is_database_error(error: Any) -> bool:
    """Check if exception is already a typed database error"""
    return isinstance(error, DatabaseError)


def is_retryable_error(error: Any) -> bool:
    """Typed errors are retryable unless they are permanent"""
    return isinstance(error, DatabaseError) and not isinstance(error, PERMANENT_ERRORS)


def _unwrap_driver_error(error: Any) -> Any:
    """SQLAlchemy wraps DBAPI errors; the vendor code lives on ``.orig``"""
    if isinstance(error, sa_exc.DBAPIError) and error.orig is not None:
        return error.orig
    return error


def _first_attribute(error: Any, *names: str) -> Optional[str]:
    for name in names:
        value = getattr(error, name, None)
        if isinstance(value, str) and value:
            return value
    diag = getattr(error, "diag", None)
    if diag is not None:
        for name in names:
            value = getattr(diag, name, None)
            if isinstance(value, str) and value:
                return value
    return None


def extract_error_code(error: Any) -> Optional[str]:
    """
    Read the vendor failure code from a driver error

    Supports asyncpg (``sqlstate``), psycopg2 (``pgcode``), node-pg style
    objects (``code``) and socket level failures.
    """
    code = _first_attribute(error, "sqlstate", "pgcode", "code")
    if code:
        return code

    if isinstance(error, socket.gaierror):
        return HOST_NOT_FOUND
    if isinstance(error, ConnectionRefusedError) or getattr(error, "errno", None) == errno.ECONNREFUSED:
        return CONNECTION_REFUSED
    return None


def classify_database_error(error: Any) -> DatabaseError:
    """
    Map an arbitrary caught error onto the typed taxonomy

    Args:
        error: Whatever was raised by the driver or the caller's operation

    Returns:
        The same object if it is already typed, otherwise a new
        DatabaseError subclass wrapping it
    """
    if isinstance(error, DatabaseError):
        return error

    if not isinstance(error, Exception):
        return DatabaseError("Unknown database error", original_error=error)

    driver_error = _unwrap_driver_error(error)
    code = extract_error_code(driver_error)

    if code == UNIQUE_VIOLATION:
        return DuplicateEntryError(
            "Duplicate entry",
            field=_first_attribute(driver_error, "constraint", "constraint_name"),
            original_error=error,
            driver_code=code,
        )
    if code == FOREIGN_KEY_VIOLATION:
        return ValidationError(
            "Foreign key constraint failed",
            field=_first_attribute(driver_error, "column", "column_name"),
            original_error=error,
            driver_code=code,
        )
    if code == NOT_NULL_VIOLATION:
        return ValidationError(
            "Required field is missing",
            field=_first_attribute(driver_error, "column", "column_name"),
            original_error=error,
            driver_code=code,
        )
    if code == UNDEFINED_TABLE:
        return QueryError("Table does not exist", original_error=error, driver_code=code)
    if code == UNDEFINED_COLUMN:
        return QueryError("Column does not exist", original_error=error, driver_code=code)
    if code in (CONNECTION_REFUSED, HOST_NOT_FOUND):
        return ConnectionError("Database connection failed", original_error=error, driver_code=code)

    message = str(driver_error) or type(driver_error).__name__
    return DatabaseError(message, code=code, original_error=error, driver_code=code)
