"""
Menagerie Backend: Table Storage Gateway
=========================================

What:  The single point of contact with the relational store for one table.
Why:   Keeps SQL, connection handling and driver error text in one place;
       everything above this module sees rows, None, or a StorageError.
How:   SQLAlchemy Core statements built from a declarative model's table,
       executed on the shared async engine with bound parameters only.
Who:   Used by the Resource Controller (API) and the HTML views.

Operation Semantics:
    create(payload)       INSERT ... RETURNING          → row
    list(order_by)        SELECT ... ORDER BY           → [row, ...]
    get(id)               SELECT ... WHERE id = :id     → row | None
    update(id, payload)   UPDATE ... WHERE ... RETURNING → row | None
    delete(id)            DELETE ... WHERE ... RETURNING → True | None

    update and delete are one statement each, so the check for "does the row
    exist" and the write happen atomically inside the store.

Connection Handling:
    Every operation runs inside `engine.begin()`: one pooled connection, one
    statement, one transaction. The connection goes back to the pool when the
    block exits, whether by commit, rollback, timeout or cancellation.

Error Classification:
    IntegrityError                          → ConflictError
    Operational/Interface errors, pool
    timeout, invalidated connection, OSError,
    per-operation timeout                   → StorageUnavailableError
    anything else, undecodable rows         → StorageInternalError

    No retries. Driver text is logged here and never placed in a message.
"""

import asyncio
import logging
from typing import Any, Generic, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import RowMapping
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.ext.asyncio import AsyncEngine

from menagerie.exceptions import (
    ConflictError,
    StorageError,
    StorageInternalError,
    StorageUnavailableError,
)

logger = logging.getLogger(__name__)

ReadT = TypeVar("ReadT", bound=BaseModel)
CreateT = TypeVar("CreateT", bound=BaseModel)

_UNAVAILABLE_TYPES = (
    PoolTimeoutError,
    OperationalError,
    InterfaceError,
    asyncio.TimeoutError,
    TimeoutError,
    OSError,
)


def classify_error(exc: BaseException, operation: str, table: str) -> StorageError:
    """
    Map any exception raised while talking to the store onto the closed
    StorageError set.

    Order matters: IntegrityError and OperationalError are both DBAPIError
    subclasses, so the specific checks come before the invalidated-connection
    fallback.
    """
    context = {
        "operation": operation,
        "table": table,
        "error_type": type(exc).__name__,
        "detail": str(exc),
    }
    if isinstance(exc, IntegrityError):
        return ConflictError(context=context)
    if isinstance(exc, _UNAVAILABLE_TYPES):
        return StorageUnavailableError(
            message="The database is temporarily unavailable. Please try again later.",
            context=context,
        )
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return StorageUnavailableError(
            message="The database is temporarily unavailable. Please try again later.",
            context=context,
        )
    return StorageInternalError(context=context)


class TableGateway(Generic[ReadT, CreateT]):
    """
    CRUD access to one table whose primary key column is named `id`.

    Parameterized by:
        model:        declarative model providing the table and its columns
        read_schema:  Pydantic model each returned row is decoded into
        default_order: ORDER BY for list() when the caller gives none;
                       defaults to the identifier so results are stable

    The create schema's fields must be a subset of the table's columns; they
    are the only columns create() and update() ever write.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        model: Type[Any],
        read_schema: Type[ReadT],
        *,
        statement_timeout: float = 30.0,
        default_order: Optional[Sequence[Any]] = None,
    ):
        self.engine = engine
        self.model = model
        self.read_schema = read_schema
        self.table = model.__table__
        self.statement_timeout = statement_timeout
        self._columns = tuple(self.table.c)
        self._id = self.table.c.id
        self._default_order = tuple(default_order) if default_order else (self._id,)

    # ── Operations ────────────────────────────────────────────────────────

    async def create(self, payload: CreateT) -> ReadT:
        """Insert a row; the identifier is generated by the storage layer."""
        stmt = (
            insert(self.table)
            .values(**self._writable(payload))
            .returning(*self._columns)
        )
        rows = await self._run("create", stmt)
        if not rows:
            raise self._internal("create", "INSERT returned no row")
        row = self._decode("create", rows[0])
        logger.info("Created %s row %s", self.table.name, rows[0]["id"])
        return row

    async def list(self, order_by: Optional[Sequence[Any]] = None) -> List[ReadT]:
        """All rows, ordered by `order_by` or the gateway's default order."""
        stmt = select(*self._columns).order_by(*(order_by or self._default_order))
        rows = await self._run("list", stmt)
        return [self._decode("list", row) for row in rows]

    async def get(self, resource_id: Any) -> Optional[ReadT]:
        stmt = select(*self._columns).where(self._id == resource_id)
        rows = await self._run("get", stmt)
        return self._decode("get", rows[0]) if rows else None

    async def update(self, resource_id: Any, payload: CreateT) -> Optional[ReadT]:
        """
        Replace the writable columns of the row matching `resource_id`.

        The identifier is only ever used in the WHERE clause.
        """
        stmt = (
            update(self.table)
            .where(self._id == resource_id)
            .values(**self._writable(payload))
            .returning(*self._columns)
        )
        rows = await self._run("update", stmt)
        return self._decode("update", rows[0]) if rows else None

    async def delete(self, resource_id: Any) -> Optional[bool]:
        """True when a row was removed, None when nothing matched."""
        stmt = delete(self.table).where(self._id == resource_id).returning(self._id)
        rows = await self._run("delete", stmt)
        return True if rows else None

    # ── Internals ─────────────────────────────────────────────────────────

    def _writable(self, payload: CreateT) -> dict:
        values = payload.model_dump()
        values.pop(self._id.name, None)
        return values

    async def _run(self, operation: str, statement: Any) -> List[RowMapping]:
        """Execute one statement under the per-operation timeout, classifying failures."""
        try:
            return await asyncio.wait_for(
                self._execute(statement), timeout=self.statement_timeout
            )
        except Exception as exc:
            error = classify_error(exc, operation, self.table.name)
            self._log_failure(error)
            raise error from exc

    async def _execute(self, statement: Any) -> List[RowMapping]:
        async with self.engine.begin() as conn:
            result = await conn.execute(statement)
            # Rows must be buffered before the connection is released
            return list(result.mappings().all())

    def _decode(self, operation: str, row: RowMapping) -> ReadT:
        try:
            return self.read_schema.model_validate(dict(row))
        except ValidationError as exc:
            raise self._internal(operation, str(exc)) from exc

    def _internal(self, operation: str, detail: str) -> StorageInternalError:
        error = StorageInternalError(
            context={"operation": operation, "table": self.table.name, "detail": detail}
        )
        self._log_failure(error)
        return error

    @staticmethod
    def _log_failure(error: StorageError) -> None:
        if isinstance(error, ConflictError):
            logger.warning("Storage conflict: %s", error.context)
        else:
            logger.error("Storage failure (%s): %s", type(error).__name__, error.context)
