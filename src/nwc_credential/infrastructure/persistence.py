"""CredentialRepository — concrete implementation of CredentialRepositoryProtocol.

Every statement is a parameterized text() query; values are never
interpolated into SQL. A result of 0 rows on UPDATE/DELETE means the
targeted credential does not exist.

Transaction ownership: The CALLER (application service) is responsible for
committing or rolling back.

Each statement is bounded by a deadline. Deadline expiry, pool exhaustion
and lost connections map to StoreUnavailableError (transient), distinct from
the definitive NOT_FOUND / DUPLICATE_ENTRY outcomes.
"""

import asyncio
from typing import Any

from sqlalchemy import TextClause, text
from sqlalchemy.engine import Result
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from src.nwc_common.errors import (
    AppError,
    CredentialNotFoundError,
    DuplicateEntryError,
    StoreError,
    StoreUnavailableError,
)
from src.nwc_credential.domain.models import CredentialRecord

_UNIQUE_VIOLATION = "23505"

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_INSERT_SQL = text("""
    INSERT INTO customer_nwc
        (customer_id, server_key, user_key, uri, app_service, budget)
    VALUES
        (:customer_id, :server_key, :user_key, :uri, :app_service, :budget)
    RETURNING id, customer_id, server_key, user_key, uri, app_service, budget
""")

_LIST_BY_CUSTOMER_SQL = text("""
    SELECT id, customer_id, server_key, user_key, uri, app_service, budget
    FROM customer_nwc
    WHERE customer_id = :customer_id
    ORDER BY id
""")

_UPDATE_BY_NATURAL_KEY_SQL = text("""
    UPDATE customer_nwc
    SET server_key = :server_key,
        user_key = :user_key,
        uri = :uri,
        budget = :budget
    WHERE customer_id = :customer_id AND app_service = :app_service
    RETURNING id, customer_id, server_key, user_key, uri, app_service, budget
""")

# Targeting by id allows moving a credential to another app_service
_UPDATE_BY_ID_SQL = text("""
    UPDATE customer_nwc
    SET server_key = :server_key,
        user_key = :user_key,
        uri = :uri,
        app_service = :app_service,
        budget = :budget
    WHERE id = :id AND customer_id = :customer_id
    RETURNING id, customer_id, server_key, user_key, uri, app_service, budget
""")

_DELETE_SQL = text("""
    DELETE FROM customer_nwc
    WHERE customer_id = :customer_id AND app_service = :app_service
    RETURNING id
""")


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------

def is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return sqlstate == _UNIQUE_VIOLATION or "duplicate" in str(orig).lower()


def to_store_error(
    exc: BaseException, record: CredentialRecord | None = None
) -> AppError:
    """Translate a driver/pool failure into the application error taxonomy."""
    if isinstance(exc, IntegrityError) and is_unique_violation(exc) and record is not None:
        return DuplicateEntryError(record.customer_id, record.app_service)
    if isinstance(exc, (TimeoutError, PoolTimeoutError, OperationalError, InterfaceError, OSError)):
        return StoreUnavailableError(f"Database unavailable: {exc.__class__.__name__}")
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return StoreUnavailableError("Database connection lost")
    return StoreError(f"Database error: {exc.__class__.__name__}")


def _row_to_record(row: object) -> CredentialRecord:
    return CredentialRecord(
        id=row.id,  # type: ignore[attr-defined]
        customer_id=row.customer_id,  # type: ignore[attr-defined]
        server_key=row.server_key,  # type: ignore[attr-defined]
        user_key=row.user_key,  # type: ignore[attr-defined]
        uri=row.uri,  # type: ignore[attr-defined]
        app_service=row.app_service,  # type: ignore[attr-defined]
        budget=row.budget,  # type: ignore[attr-defined]
    )


def _write_params(record: CredentialRecord) -> dict[str, Any]:
    return {
        "customer_id": record.customer_id,
        "server_key": record.server_key,
        "user_key": record.user_key,
        "uri": record.uri,
        "app_service": record.app_service,
        "budget": record.budget,
    }


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class CredentialRepository:
    """Concrete repository over the customer_nwc table."""

    def __init__(self, timeout: float = 5.0) -> None:
        self._timeout = timeout

    async def _execute(
        self,
        db: AsyncSession,
        statement: TextClause,
        params: dict[str, Any],
        record: CredentialRecord | None = None,
    ) -> Result[Any]:
        try:
            async with asyncio.timeout(self._timeout):
                return await db.execute(statement, params)
        except (SQLAlchemyError, TimeoutError, OSError) as exc:
            raise to_store_error(exc, record) from exc

    async def insert(
        self, db: AsyncSession, record: CredentialRecord
    ) -> CredentialRecord:
        result = await self._execute(db, _INSERT_SQL, _write_params(record), record)
        row = result.fetchone()
        if row is None:
            raise StoreError("Credential insert returned no rows")
        return _row_to_record(row)

    async def list_by_customer(
        self, db: AsyncSession, customer_id: str
    ) -> list[CredentialRecord]:
        result = await self._execute(
            db, _LIST_BY_CUSTOMER_SQL, {"customer_id": customer_id}
        )
        return [_row_to_record(row) for row in result.fetchall()]

    async def update(
        self, db: AsyncSession, record: CredentialRecord
    ) -> CredentialRecord:
        params = _write_params(record)
        if record.id is not None:
            params["id"] = record.id
            statement = _UPDATE_BY_ID_SQL
        else:
            statement = _UPDATE_BY_NATURAL_KEY_SQL
        result = await self._execute(db, statement, params, record)
        row = result.fetchone()
        if row is None:
            raise CredentialNotFoundError(record.customer_id, record.app_service)
        return _row_to_record(row)

    async def delete(
        self, db: AsyncSession, customer_id: str, app_service: str
    ) -> None:
        result = await self._execute(
            db, _DELETE_SQL, {"customer_id": customer_id, "app_service": app_service}
        )
        if result.fetchone() is None:
            raise CredentialNotFoundError(customer_id, app_service)
