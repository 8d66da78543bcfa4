# core_forum_db/types.py
"""
Type definitions for query building and transaction bookkeeping
"""
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, NamedTuple, Optional, Sequence, Union

from .constants import DEFAULT_PAGE_SIZE

__all__ = [
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
]


class FilterOperator(Enum):
    """Comparison operators supported by the filter clause"""
    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    LIKE = "like"
    IN = "in"
    NIN = "nin"

    @property
    def is_list_operator(self) -> bool:
        return self in (FilterOperator.IN, FilterOperator.NIN)


class SortDirection(Enum):
    """Sort direction for ORDER BY"""
    ASC = "asc"
    DESC = "desc"


class TransactionMode(Enum):
    """
    How the transaction manager treats transactions and savepoints

    BOOKKEEPING tracks state in memory only. SQL also sends BEGIN, COMMIT,
    ROLLBACK and the SAVEPOINT statements through the executor.
    """
    BOOKKEEPING = "bookkeeping"
    SQL = "sql"


@dataclass
class FilterCondition:
    """A single ``field <operator> value`` condition"""
    field: str
    operator: Union[FilterOperator, str]
    value: Any = None

    def __post_init__(self):
        """Validate filter condition"""
        # Raises ValueError for unknown operators
        self.operator = FilterOperator(self.operator)
        if self.operator.is_list_operator and not isinstance(self.value, (list, tuple)):
            raise ValueError(
                f"Operator '{self.operator.value}' expects a list, "
                f"got {type(self.value).__name__} for field {self.field}"
            )


@dataclass
class OrderSpec:
    """Ordering for a single field"""
    field: str
    direction: Union[SortDirection, str] = SortDirection.ASC

    def __post_init__(self):
        if isinstance(self.direction, str):
            self.direction = SortDirection(self.direction.lower())
        else:
            self.direction = SortDirection(self.direction)


@dataclass
class SearchSpec:
    """Substring search of one query across several fields"""
    query: str
    fields: List[str] = field(default_factory=list)


@dataclass
class PaginationRequest:
    """Pagination parameters"""
    page: int = 1
    per_page: int = DEFAULT_PAGE_SIZE

    def __post_init__(self):
        """Validate pagination parameters"""
        if self.page < 1:
            raise ValueError("Page must be at least 1")
        if self.per_page < 1:
            raise ValueError("Per page must be positive")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    @property
    def limit(self) -> int:
        return self.per_page


@dataclass
class QueryOptions:
    """Composable options for SELECT and COUNT statements"""
    filters: Optional[List[FilterCondition]] = None
    order: Optional[List[OrderSpec]] = None
    search: Optional[SearchSpec] = None
    pagination: Optional[PaginationRequest] = None
    fields: Optional[List[str]] = None


@dataclass
class PaginationInfo:
    """Navigation metadata of a page"""
    page: int
    per_page: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @property
    def next_page(self) -> Optional[int]:
        """Get next page number"""
        return self.page + 1 if self.has_next else None

    @property
    def prev_page(self) -> Optional[int]:
        """Get previous page number"""
        return self.page - 1 if self.has_prev else None


@dataclass
class PaginatedResult:
    """Paginated query result"""
    data: List[Any]
    pagination: PaginationInfo

    def to_dict(self) -> Dict[str, Any]:
        return {"data": list(self.data), "pagination": asdict(self.pagination)}


class Clause(NamedTuple):
    """A SQL fragment and the parameters it binds"""
    clause: str
    params: List[Any]


class BuiltQuery(NamedTuple):
    """A complete statement and its positional parameters"""
    sql: str
    params: List[Any]


@dataclass
class TransactionHandle:
    """Handle returned by TransactionManager.begin"""
    id: str
    is_active: bool = True


Row = Dict[str, Any]
QueryExecutor = Callable[[str, Sequence[Any]], Awaitable[List[Row]]]
