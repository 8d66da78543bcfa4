"""
Test configuration and fixtures for the forum query layer tests
"""
from typing import Any, List, Optional, Sequence

import pytest

from core_forum_db import (
    FilterCondition,
    RetryOptions,
    TransactionManager,
    TransactionMode,
    TransactionRegistry,
)


class RecordingExecutor:
    """Fake execution capability recording every call

    Queued responses are returned in order; an exception instance in the
    queue is raised instead of returned.
    """

    def __init__(self, responses: Optional[List[Any]] = None):
        self.calls = []
        self.responses = list(responses or [])

    async def __call__(self, sql: str, params: Optional[Sequence[Any]] = None):
        self.calls.append((sql, list(params or [])))
        if self.responses:
            response = self.responses.pop(0)
            if isinstance(response, BaseException):
                raise response
            return response
        return []

    @property
    def statements(self) -> List[str]:
        return [sql for sql, _ in self.calls]


class FakeDriverError(Exception):
    """Driver error carrying node-pg style ``code`` and ``constraint``"""

    def __init__(self, message: str, code: Optional[str] = None, constraint: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.constraint = constraint


class FakeAsyncpgError(Exception):
    """Driver error shaped like asyncpg's PostgresError"""

    def __init__(self, message: str, sqlstate: str, **details):
        super().__init__(message)
        self.sqlstate = sqlstate
        for name, value in details.items():
            setattr(self, name, value)


@pytest.fixture
def executor_factory():
    return RecordingExecutor


@pytest.fixture
def driver_error():
    return FakeDriverError


@pytest.fixture
def asyncpg_error():
    return FakeAsyncpgError


@pytest.fixture
def registry() -> TransactionRegistry:
    """Fresh registry per test"""
    return TransactionRegistry()


@pytest.fixture
def manager(registry) -> TransactionManager:
    return TransactionManager(registry=registry)


@pytest.fixture
def sql_executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def sql_manager(registry, sql_executor) -> TransactionManager:
    return TransactionManager(registry=registry, executor=sql_executor, mode=TransactionMode.SQL)


@pytest.fixture
def fast_retry() -> RetryOptions:
    return RetryOptions(max_retries=3, initial_delay=0.0, max_delay=0.0)


@pytest.fixture
def sample_filters() -> List[FilterCondition]:
    return [
        FilterCondition("status", "eq", "active"),
        FilterCondition("age", "gte", 18),
    ]
