"""
Transactional access to the store tables.

Every mutating service runs inside ``Ledger.transaction`` which

- pins the isolation level on the connection before the first statement,
- commits when the block finishes (or rolls back for read-only blocks),
- rolls back on any error, detaching loaded objects first so they stay
  readable, and turns driver errors into
  ``ConcurrencyConflict`` / ``PersistenceError``.

``checkpoint`` flushes pending writes and clears the identity map while the
transaction stays open, which keeps large batches from growing the session.
"""

from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, AsyncIterator, List, Optional, Type, TypeVar

import structlog
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import ConcurrencyConflict, PersistenceError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class IsolationLevel(str, Enum):
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"


# SQLite only accepts SERIALIZABLE and READ UNCOMMITTED.
_DIALECT_LEVELS = {
    "sqlite": {
        IsolationLevel.READ_COMMITTED: "READ UNCOMMITTED",
        IsolationLevel.REPEATABLE_READ: "SERIALIZABLE",
    },
}

# serialization_failure, deadlock_detected, unique_violation
_CONFLICT_SQLSTATES = {"40001", "40P01", "23505"}
_SQLITE_CONFLICT_MESSAGES = ("database is locked", "unique constraint failed")


def _sqlstate(err: DBAPIError) -> Optional[str]:
    orig = err.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def is_conflict(err: DBAPIError) -> bool:
    if _sqlstate(err) in _CONFLICT_SQLSTATES:
        return True
    message = str(err.orig).lower()
    return any(m in message for m in _SQLITE_CONFLICT_MESSAGES)


def translate_error(err: DBAPIError) -> Exception:
    if is_conflict(err):
        return ConcurrencyConflict("Concurrent update detected, retry the request")
    if isinstance(err, OperationalError):
        return PersistenceError("Database unavailable")
    return PersistenceError("Database error")


class Ledger:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.checkpoints = 0

    def _dialect_level(self, isolation: IsolationLevel) -> str:
        dialect = self.session.bind.dialect.name if self.session.bind is not None else ""
        return _DIALECT_LEVELS.get(dialect, {}).get(isolation, isolation.value)

    def _has_pending_writes(self) -> bool:
        return bool(self.session.new or self.session.dirty or self.session.deleted)

    async def _discard(self) -> None:
        # Detach first so objects the caller already holds are not expired by the rollback.
        self.session.expunge_all()
        await self.session.rollback()

    @asynccontextmanager
    async def transaction(
        self,
        isolation: IsolationLevel,
        *,
        read_only: bool = False,
    ) -> AsyncIterator["Ledger"]:
        if self.session.in_transaction():
            # Close an autobegun read-only transaction; refuse to swallow pending writes.
            if self._has_pending_writes():
                raise RuntimeError("Session already holds uncommitted changes")
            await self.session.commit()

        try:
            await self.session.connection(
                execution_options={"isolation_level": self._dialect_level(isolation)}
            )
            yield self
            if read_only:
                await self._discard()
            else:
                await self.session.commit()
        except DBAPIError as err:
            await self._discard()
            translated = translate_error(err)
            logger.warning(
                "transaction_failed",
                isolation=isolation.value,
                error=type(translated).__name__,
                sqlstate=_sqlstate(err),
            )
            raise translated from err
        except Exception:
            await self._discard()
            raise

    async def get(self, model: Type[T], ident: Any) -> Optional[T]:
        return await self.session.get(model, ident)

    async def find(self, stmt) -> List[Any]:
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_one(self, stmt) -> Optional[Any]:
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    def save(self, entity: Any) -> None:
        """Insert a new entity or mark a loaded one for update."""
        self.session.add(entity)

    async def delete(self, entity: Any) -> None:
        await self.session.delete(entity)

    async def checkpoint(self) -> None:
        """Write pending changes and forget tracked entities, keeping the transaction open."""
        await self.session.flush()
        self.session.expunge_all()
        self.checkpoints += 1
        logger.debug("ledger_checkpoint", checkpoints=self.checkpoints)
