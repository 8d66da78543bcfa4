# core_forum_db/transactions.py
"""
Transaction and savepoint bookkeeping

The manager tracks which logical transactions are active in an explicit
TransactionRegistry. In BOOKKEEPING mode nothing is sent to the database; in
SQL mode BEGIN, COMMIT, ROLLBACK and the SAVEPOINT statements are also issued
through the executor, which must route them to the connection that runs the
transaction's queries.

Every registry mutation is a single dict operation, so interleaving
coroutines on one event loop cannot observe a half-applied change.
"""
import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, TypeVar

from .config import DatabaseConfig
from .constants import TRANSACTION_ID_PREFIX
from .decorators import safe_execute
from .exceptions import DatabaseError, TransactionError
from .types import QueryExecutor, TransactionHandle, TransactionMode
from .utils import safe_identifier

logger = logging.getLogger(__name__)

T = TypeVar("T")
TransactionCallback = Callable[[TransactionHandle], Awaitable[T]]


class TransactionRegistry:
    """Map of active transaction id to handle"""

    def __init__(self):
        self._transactions: Dict[str, TransactionHandle] = {}

    def register(self, handle: TransactionHandle) -> None:
        self._transactions[handle.id] = handle

    def get(self, tx_id: str) -> Optional[TransactionHandle]:
        return self._transactions.get(tx_id)

    def remove(self, tx_id: str) -> Optional[TransactionHandle]:
        return self._transactions.pop(tx_id, None)

    def ids(self) -> List[str]:
        return list(self._transactions)

    def __contains__(self, tx_id: object) -> bool:
        return tx_id in self._transactions

    def __len__(self) -> int:
        return len(self._transactions)


class Savepoint:
    """
    Named rollback point inside an active transaction

    Valid only while the owning transaction is active and until released.
    """

    def __init__(self, name: str, transaction_id: str, manager: "TransactionManager"):
        self.name = safe_identifier(name)
        self.transaction_id = transaction_id
        self._manager = manager
        self.is_released = False

    def _ensure_usable(self) -> None:
        if not self._manager.is_active(self.transaction_id):
            raise TransactionError(f"Transaction {self.transaction_id} is not active")
        if self.is_released:
            raise TransactionError(f"Savepoint {self.name} has already been released")

    async def rollback(self) -> None:
        """Roll back to this savepoint; the savepoint stays usable"""
        self._ensure_usable()
        await self._manager._execute_statement(f"ROLLBACK TO SAVEPOINT {self.name}")
        logger.debug(f"Rolled back to savepoint {self.name} in {self.transaction_id}")

    async def release(self) -> None:
        """Release this savepoint"""
        self._ensure_usable()
        await self._manager._execute_statement(f"RELEASE SAVEPOINT {self.name}")
        self.is_released = True
        logger.debug(f"Released savepoint {self.name} in {self.transaction_id}")

    def __repr__(self) -> str:
        return f"Savepoint(name={self.name!r}, transaction_id={self.transaction_id!r})"


class TransactionManager:
    """
    Issues transaction handles and commits or rolls them back by id

    Args:
        registry: Registry of active transactions, one per process by convention
        executor: Execution capability, required in SQL mode
        mode: BOOKKEEPING (default) or SQL; falls back to ``config``
        config: Optional configuration supplying the mode
    """

    def __init__(
        self,
        registry: Optional[TransactionRegistry] = None,
        executor: Optional[QueryExecutor] = None,
        mode: Optional[TransactionMode] = None,
        config: Optional[DatabaseConfig] = None
    ):
        self.registry = registry if registry is not None else TransactionRegistry()
        self.executor = executor
        if mode is None:
            mode = config.transaction_mode if config is not None else TransactionMode.BOOKKEEPING
        self.mode = TransactionMode(mode)

        if self.mode is TransactionMode.SQL and executor is None:
            raise ValueError("SQL transaction mode requires an executor")

    @staticmethod
    def _generate_transaction_id() -> str:
        return f"{TRANSACTION_ID_PREFIX}{uuid.uuid4().hex}"

    async def _execute_statement(self, sql: str) -> None:
        if self.mode is TransactionMode.SQL:
            await safe_execute(lambda: self.executor(sql, []))

    def _get_active(self, tx_id: str) -> TransactionHandle:
        handle = self.registry.get(tx_id)
        if handle is None:
            raise TransactionError(f"Transaction {tx_id} not found")
        if not handle.is_active:
            raise TransactionError(f"Transaction {tx_id} is not active")
        return handle

    async def begin(self) -> TransactionHandle:
        """Begin a new transaction and register it as active"""
        handle = TransactionHandle(id=self._generate_transaction_id())
        await self._execute_statement("BEGIN")
        self.registry.register(handle)
        logger.debug(f"Transaction {handle.id} started")
        return handle

    async def commit(self, tx_id: str) -> None:
        """Commit an active transaction"""
        handle = self._get_active(tx_id)
        await self._execute_statement("COMMIT")
        handle.is_active = False
        self.registry.remove(tx_id)
        logger.debug(f"Transaction {tx_id} committed")

    async def rollback(self, tx_id: str) -> None:
        """
        Roll back an active transaction

        The handle is deactivated and unregistered even if the ROLLBACK
        statement fails.
        """
        handle = self._get_active(tx_id)
        try:
            await self._execute_statement("ROLLBACK")
        finally:
            handle.is_active = False
            self.registry.remove(tx_id)
        logger.debug(f"Transaction {tx_id} rolled back")

    def is_active(self, tx_id: str) -> bool:
        """Check if a transaction is active"""
        handle = self.registry.get(tx_id)
        return handle is not None and handle.is_active

    @property
    def active_count(self) -> int:
        """Get active transaction count"""
        return len(self.registry)

    def active_transaction_ids(self) -> List[str]:
        """Get all active transaction ids"""
        return self.registry.ids()

    async def create_savepoint(self, handle: TransactionHandle, name: str) -> Savepoint:
        """Create a savepoint within an active transaction"""
        if not self.is_active(handle.id):
            raise TransactionError(f"Transaction {handle.id} is not active")

        savepoint = Savepoint(name, handle.id, self)
        await self._execute_statement(f"SAVEPOINT {savepoint.name}")
        logger.debug(f"Savepoint {savepoint.name} created in {handle.id}")
        return savepoint

    async def with_transaction(self, callback: TransactionCallback) -> Any:
        """
        Run a callback inside a transaction

        Commits on success. Any failure, including validation failures,
        rolls the transaction back and is re-raised as a typed error.
        Cancellation also rolls back and is re-raised unchanged.
        """
        handle = await self.begin()

        try:
            result = await safe_execute(lambda: callback(handle))
            await self.commit(handle.id)
        except Exception as e:
            logger.error(f"Transaction {handle.id} rollback: {e}")
            await self._abort(handle.id)
            raise
        except BaseException as e:
            logger.warning(f"Transaction {handle.id} interrupted by {type(e).__name__}, rolling back")
            await self._abort(handle.id)
            raise

        return result

    async def _abort(self, tx_id: str) -> None:
        """Roll back if still active; a failed rollback is logged and the caller's error wins"""
        if not self.is_active(tx_id):
            return
        try:
            await self.rollback(tx_id)
        except DatabaseError as e:
            logger.error(f"Rollback of {tx_id} failed: {e}")

    async def with_savepoint(
        self,
        handle: TransactionHandle,
        name: str,
        callback: Callable[[Savepoint], Awaitable[T]]
    ) -> Any:
        """
        Run a callback under a savepoint

        Releases the savepoint on success, unless the callback already did,
        and rolls back to it on failure. The callback's error is re-raised
        even when rolling back to the savepoint is no longer possible.
        """
        savepoint = await self.create_savepoint(handle, name)

        try:
            result = await safe_execute(lambda: callback(savepoint))
            if not savepoint.is_released:
                await savepoint.release()
        except Exception as e:
            logger.error(f"Savepoint {savepoint.name} rollback: {e}")
            await self._abort_savepoint(savepoint)
            raise
        except BaseException as e:
            logger.warning(f"Savepoint {savepoint.name} interrupted by {type(e).__name__}, rolling back")
            await self._abort_savepoint(savepoint)
            raise

        return result

    @staticmethod
    async def _abort_savepoint(savepoint: Savepoint) -> None:
        try:
            await savepoint.rollback()
        except DatabaseError as e:
            logger.error(f"Rollback to savepoint {savepoint.name} failed: {e}")

    async def transaction_batch(self, operations: Sequence[TransactionCallback]) -> List[Any]:
        """Run operations sequentially in one transaction, collecting results in order"""
        async def run_all(handle: TransactionHandle) -> List[Any]:
            results = []
            for operation in operations:
                results.append(await operation(handle))
            return results

        return await self.with_transaction(run_all)
