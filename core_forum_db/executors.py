# core_forum_db/executors.py
"""
Adapters exposing drivers as the ``execute(sql, params)`` capability

The adapters take an already open connection (or pool) from the caller and
never open connections themselves.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

import asyncpg
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection

from .constants import SLOW_QUERY_THRESHOLD
from .decorators import log_query_execution
from .utils import rows_to_dicts, to_named_params

logger = logging.getLogger(__name__)


class AsyncpgExecutor:
    """
    Execute statements on an asyncpg connection or pool

    asyncpg understands ``$n`` placeholders natively. With a pool every call
    may land on a different connection, so use a connection for SQL-mode
    transactions.
    """

    def __init__(
        self,
        target: Union[asyncpg.Connection, asyncpg.Pool],
        slow_query_threshold: float = SLOW_QUERY_THRESHOLD
    ):
        self.target = target
        self.slow_query_threshold = slow_query_threshold

    @log_query_execution
    async def __call__(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        records = await self.target.fetch(sql, *(params or []))
        return rows_to_dicts(records)


class SQLAlchemyExecutor:
    """
    Execute statements on a SQLAlchemy AsyncConnection

    ``$n`` placeholders are rewritten to named binds so any dialect works.
    SQL transaction mode needs a connection with
    ``isolation_level="AUTOCOMMIT"`` so SQLAlchemy does not autobegin.
    """

    def __init__(self, connection: AsyncConnection, slow_query_threshold: float = SLOW_QUERY_THRESHOLD):
        self.connection = connection
        self.slow_query_threshold = slow_query_threshold

    @log_query_execution
    async def __call__(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        named_sql, binds = to_named_params(sql, params or [])
        result = await self.connection.execute(text(named_sql), binds)
        if not result.returns_rows:
            return []
        return rows_to_dicts(result)
