# core_forum_db/gateway.py
"""
Table gateway combining the query builder with an executor
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from .config import DatabaseConfig
from .constants import MAX_PAGE_SIZE
from .decorators import RetryOptions, retry_execute, safe_execute
from .exceptions import QueryError, ResourceNotFoundError, ValidationError
from .pagination import create_paginated_result
from .query_builder import QueryBuilder
from .types import BuiltQuery, FilterCondition, PaginatedResult, PaginationRequest, QueryExecutor, QueryOptions

logger = logging.getLogger(__name__)


class TableGateway:
    """
    CRUD helpers for a single table

    Reads are retried on transient failures. Writes run once through
    safe_execute and are never replayed.

    Args:
        table: Table name, trusted to come from code
        executor: Execution capability
        retry_options: Backoff policy for reads
        max_page_size: Largest accepted ``per_page``
    """

    def __init__(
        self,
        table: str,
        executor: QueryExecutor,
        retry_options: Optional[RetryOptions] = None,
        max_page_size: int = MAX_PAGE_SIZE
    ):
        self.table = table
        self.executor = executor
        self.retry_options = retry_options
        self.max_page_size = max_page_size

    @classmethod
    def from_config(cls, table: str, executor: QueryExecutor, config: DatabaseConfig) -> "TableGateway":
        return cls(
            table,
            executor,
            retry_options=RetryOptions.from_config(config),
            max_page_size=config.max_page_size,
        )

    async def _read(self, query: BuiltQuery) -> List[Dict[str, Any]]:
        return await retry_execute(lambda: self.executor(query.sql, query.params), self.retry_options)

    async def _write(self, query: BuiltQuery) -> List[Dict[str, Any]]:
        return await safe_execute(lambda: self.executor(query.sql, query.params))

    async def find(self, options: Optional[QueryOptions] = None) -> List[Dict[str, Any]]:
        """Read records matching the options"""
        return await self._read(QueryBuilder.build_select_query(self.table, options))

    async def find_one(self, filters: Sequence[FilterCondition]) -> Dict[str, Any]:
        """Read a single record, raising ResourceNotFoundError when none matches"""
        options = QueryOptions(filters=list(filters), pagination=PaginationRequest(page=1, per_page=1))
        rows = await self.find(options)
        if not rows:
            raise ResourceNotFoundError(f"{self.table} not found", resource=self.table)
        return rows[0]

    async def count(self, options: Optional[QueryOptions] = None) -> int:
        """Count records matching search and filters"""
        query = QueryBuilder.build_count_query(self.table, options)
        rows = await self._read(query)
        if not rows:
            raise QueryError(f"Count on {self.table} returned no rows", query=query.sql, params=query.params)
        return int(next(iter(rows[0].values())))

    async def paginate(self, options: QueryOptions) -> PaginatedResult:
        """Read one page plus the total count"""
        if options.pagination is None:
            raise ValueError("paginate requires pagination options")
        if options.pagination.per_page > self.max_page_size:
            raise ValidationError(
                f"Per page cannot exceed {self.max_page_size}", field="per_page"
            )

        rows = await self.find(options)
        total = await self.count(options)
        return create_paginated_result(rows, total, options.pagination)

    async def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a record and return the stored row"""
        rows = await self._write(QueryBuilder.build_insert_query(self.table, record))
        logger.debug(f"Inserted into {self.table}")
        return rows[0] if rows else dict(record)

    async def update(self, values: Dict[str, Any], filters: Sequence[FilterCondition]) -> List[Dict[str, Any]]:
        """Update matching records and return them"""
        return await self._write(QueryBuilder.build_update_query(self.table, values, filters))

    async def delete(self, filters: Sequence[FilterCondition]) -> List[Dict[str, Any]]:
        """Delete matching records"""
        return await self._write(QueryBuilder.build_delete_query(self.table, filters))
