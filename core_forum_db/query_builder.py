# core_forum_db/query_builder.py
"""
Statement composition from clause builders

Clauses are always emitted in the order search, filters, order, pagination.
The parameter offset is threaded through every builder, so the returned
parameter list is the only authoritative binding order.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from .clauses import (
    build_order_clause, build_pagination_clause, build_search_clause, build_where_clause
)
from .types import BuiltQuery, FilterCondition, QueryOptions
from .utils import placeholder

logger = logging.getLogger(__name__)

WHERE_PREFIX = "WHERE "


def _join(*parts: str) -> str:
    return " ".join(part for part in parts if part)


class QueryBuilder:
    """Builds parameterized SELECT, COUNT, INSERT, UPDATE and DELETE statements"""

    @staticmethod
    def build_query(base_query: str, options: Optional[QueryOptions] = None) -> BuiltQuery:
        """
        Append search, filter, order and pagination clauses to a base statement

        Args:
            base_query: Statement head, e.g. ``SELECT * FROM users``
            options: Query options; every part is optional

        Returns:
            BuiltQuery with the full SQL and its parameters
        """
        opts = options or QueryOptions()
        parts = [base_query]
        params: List[Any] = []
        has_where = False

        search = build_search_clause(opts.search, len(params))
        if search.clause:
            parts.append(f"WHERE {search.clause}")
            params.extend(search.params)
            has_where = True

        where = build_where_clause(opts.filters, len(params))
        if where.clause:
            if has_where:
                parts.append(f"AND {where.clause[len(WHERE_PREFIX):]}")
            else:
                parts.append(where.clause)
            params.extend(where.params)

        parts.append(build_order_clause(opts.order))

        if opts.pagination is not None:
            pagination = build_pagination_clause(opts.pagination, len(params))
            parts.append(pagination.clause)
            params.extend(pagination.params)

        return BuiltQuery(_join(*parts), params)

    @staticmethod
    def build_select_query(table: str, options: Optional[QueryOptions] = None) -> BuiltQuery:
        """Build SELECT with optional projection, search, filters, order and pagination"""
        opts = options or QueryOptions()
        columns = ", ".join(opts.fields) if opts.fields else "*"
        return QueryBuilder.build_query(f"SELECT {columns} FROM {table}", opts)

    @staticmethod
    def build_count_query(table: str, options: Optional[QueryOptions] = None) -> BuiltQuery:
        """
        Build COUNT query

        Only search and filters apply; order and pagination are ignored.
        """
        opts = options or QueryOptions()
        if opts.order or opts.pagination is not None:
            logger.debug(f"Ignoring order and pagination for count on {table}")
        count_options = QueryOptions(filters=opts.filters, search=opts.search)
        return QueryBuilder.build_query(f"SELECT COUNT(*) FROM {table}", count_options)

    @staticmethod
    def build_insert_query(table: str, record: Dict[str, Any]) -> BuiltQuery:
        """Build ``INSERT ... RETURNING *`` in the record's key order"""
        if not record:
            raise ValueError(f"Cannot build insert for {table} without values")

        columns = list(record.keys())
        placeholders = ", ".join(placeholder(i) for i in range(1, len(columns) + 1))
        sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders}) RETURNING *"
        return BuiltQuery(sql, list(record.values()))

    @staticmethod
    def build_update_query(
        table: str,
        values: Dict[str, Any],
        filters: Optional[Sequence[FilterCondition]] = None
    ) -> BuiltQuery:
        """
        Build ``UPDATE ... SET ... WHERE ... RETURNING *``

        SET placeholders come first; the WHERE clause continues numbering
        after them.
        """
        if not values:
            raise ValueError(f"Cannot build update for {table} without values")

        columns = list(values.keys())
        assignments = ", ".join(
            f"{column} = {placeholder(i)}" for i, column in enumerate(columns, start=1)
        )
        where = build_where_clause(filters, len(columns))
        if not where.clause:
            logger.warning(f"Building UPDATE on {table} without a WHERE clause")

        sql = _join(f"UPDATE {table} SET {assignments}", where.clause, "RETURNING *")
        return BuiltQuery(sql, list(values.values()) + where.params)

    @staticmethod
    def build_delete_query(table: str, filters: Optional[Sequence[FilterCondition]] = None) -> BuiltQuery:
        """Build DELETE with a filter clause"""
        where = build_where_clause(filters)
        if not where.clause:
            logger.warning(f"Building DELETE on {table} without a WHERE clause")
        return BuiltQuery(_join(f"DELETE FROM {table}", where.clause), where.params)


build_query = QueryBuilder.build_query
build_select_query = QueryBuilder.build_select_query
build_count_query = QueryBuilder.build_count_query
build_insert_query = QueryBuilder.build_insert_query
build_update_query = QueryBuilder.build_update_query
build_delete_query = QueryBuilder.build_delete_query
