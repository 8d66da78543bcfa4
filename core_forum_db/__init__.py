# core_forum_db/__init__.py
"""
Core query-construction and transaction layer for the forum data access code

Features:
- Positionally-parameterized SELECT, COUNT, INSERT, UPDATE and DELETE builders
- Typed error taxonomy with a driver error classifier
- Retry with exponential backoff for transient failures
- Transaction and savepoint bookkeeping, optionally issuing real SQL
"""

__version__ = "0.1.0"

from .clauses import (
    WhereClauseBuilder,
    build_order_clause,
    build_pagination_clause,
    build_search_clause,
    build_where_clause,
)
from .config import DatabaseConfig, get_database_config
from .decorators import (
    RetryOptions,
    log_query_execution,
    retry_execute,
    retry_on_transient_error,
    safe_execute,
)
from .exceptions import *
from .executors import AsyncpgExecutor, SQLAlchemyExecutor
from .gateway import TableGateway
from .pagination import create_paginated_result
from .query_builder import (
    QueryBuilder,
    build_count_query,
    build_delete_query,
    build_insert_query,
    build_query,
    build_select_query,
    build_update_query,
)
from .transactions import Savepoint, TransactionManager, TransactionRegistry
from .types import *

__all__ = [
    # Clause builders
    "WhereClauseBuilder",
    "build_where_clause",
    "build_search_clause",
    "build_order_clause",
    "build_pagination_clause",

    # Query composer
    "QueryBuilder",
    "build_query",
    "build_select_query",
    "build_count_query",
    "build_insert_query",
    "build_update_query",
    "build_delete_query",
    "create_paginated_result",

    # Execution
    "RetryOptions",
    "safe_execute",
    "retry_execute",
    "retry_on_transient_error",
    "log_query_execution",
    "AsyncpgExecutor",
    "SQLAlchemyExecutor",
    "TableGateway",

    # Transactions
    "TransactionManager",
    "TransactionRegistry",
    "Savepoint",

    # Configuration
    "DatabaseConfig",
    "get_database_config",

    # Exceptions
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

    # Types
    "FilterOperator",
    "SortDirection",
    "TransactionMode",
    "FilterCondition",
    "OrderSpec",
    "SearchSpec",
    "PaginationRequest",
    "QueryOptions",
    "PaginationInfo",
    "PaginatedResult",
    "Clause",
    "BuiltQuery",
    "TransactionHandle",
    "Row",
    "QueryExecutor",

    "__version__",
]
