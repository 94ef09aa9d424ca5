"""CredentialApplicationService — the cache-consistency policy.

The customer_nwc table is the system of record; Redis holds a per-customer
mirror that only shortcuts reads.

  create: generate → insert + commit → fenced append into the cache
  read:   cache hit → return; miss/error → store → populate (SET NX)
  update: update + commit → invalidate cache entry
  delete: delete + commit → invalidate cache entry

Cache failures never fail a request once the store has answered; they are
logged and the entry is invalidated so the next read heals it from the store.

Known race: a read that falls back to the store may repopulate the cache
with a snapshot taken just before a concurrent update/delete committed.
SET NX narrows the window but does not close it.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.nwc_common.errors import AppError, CacheError, CredentialNotFoundError, ValidationError
from src.nwc_credential.domain.cache import CredentialCacheProtocol
from src.nwc_credential.domain.generator import CredentialGenerator
from src.nwc_credential.domain.models import CredentialRecord
from src.nwc_credential.domain.repository import CredentialRepositoryProtocol
from src.nwc_credential.infrastructure.persistence import CredentialRepository, to_store_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CredentialApplicationService:
    def __init__(
        self,
        generator: CredentialGenerator,
        cache: CredentialCacheProtocol,
        repo: CredentialRepositoryProtocol | None = None,
        timeout: float = 5.0,
    ) -> None:
        self._generator = generator
        self._cache = cache
        self._repo: CredentialRepositoryProtocol = repo or CredentialRepository(timeout=timeout)
        self._timeout = timeout

    async def _rollback(self, db: AsyncSession) -> None:
        try:
            async with asyncio.timeout(self._timeout):
                await db.rollback()
        except (SQLAlchemyError, OSError) as exc:
            # the session is discarded with the request; the original error is what the caller sees
            logger.warning("Rollback failed: %s", exc.__class__.__name__)

    async def _write(
        self,
        db: AsyncSession,
        operation: Callable[[], Awaitable[T]],
        record: CredentialRecord | None = None,
    ) -> T:
        try:
            result = await operation()
            async with asyncio.timeout(self._timeout):
                await db.commit()
        except (SQLAlchemyError, OSError) as exc:
            # builtin TimeoutError from asyncio.timeout is an OSError
            await self._rollback(db)
            raise to_store_error(exc, record) from exc
        except Exception:
            await self._rollback(db)
            raise
        return result

    async def _invalidate(self, customer_id: str, reason: str) -> None:
        try:
            await self._cache.invalidate(customer_id)
        except CacheError as exc:
            # Store is already updated; the stale entry is served until overwritten
            logger.error(
                "Cache invalidation after %s failed for customer=%s: %s",
                reason,
                customer_id,
                exc.message,
            )

    async def create(
        self, db: AsyncSession, customer_id: str, app_service: str, budget: int
    ) -> CredentialRecord:
        generated = self._generator.generate()
        candidate = CredentialRecord(
            customer_id=customer_id,
            server_key=generated.server_key,
            user_key=generated.user_key,
            uri=generated.uri,
            app_service=app_service,
            budget=budget,
        )
        record = await self._write(
            db, lambda: self._repo.insert(db, candidate), candidate
        )
        logger.info(
            "Created NWC credential id=%s customer=%s app_service=%s",
            record.id,
            customer_id,
            app_service,
        )

        async def seed() -> list[CredentialRecord]:
            return await self._repo.list_by_customer(db, customer_id)

        try:
            await self._cache.append(customer_id, record, seed)
        except AppError as exc:
            logger.warning(
                "Cache append failed for customer=%s, credential persisted: %s",
                customer_id,
                exc.message,
            )
            await self._invalidate(customer_id, reason="failed append")
        return record

    async def read(self, db: AsyncSession, customer_id: str) -> list[CredentialRecord]:
        try:
            cached = await self._cache.get(customer_id)
        except CacheError as exc:
            logger.warning("Cache read failed for customer=%s: %s", customer_id, exc.message)
            await self._invalidate(customer_id, reason="failed read")
            cached = None

        if cached:
            return cached

        logger.info("NWC credentials for customer=%s not in cache, reading store", customer_id)
        records = await self._repo.list_by_customer(db, customer_id)
        if not records:
            raise CredentialNotFoundError(customer_id)

        try:
            await self._cache.put_if_absent(customer_id, records)
        except CacheError as exc:
            logger.warning("Cache populate failed for customer=%s: %s", customer_id, exc.message)
        return records

    async def update(self, db: AsyncSession, record: CredentialRecord) -> CredentialRecord:
        if not record.customer_id or not record.app_service:
            raise ValidationError("customer_id and app_service are required")
        stored = await self._write(db, lambda: self._repo.update(db, record), record)
        await self._invalidate(record.customer_id, reason="update")
        logger.info(
            "Updated NWC credential id=%s customer=%s app_service=%s",
            stored.id,
            record.customer_id,
            record.app_service,
        )
        return replace(record, id=stored.id)

    async def delete(self, db: AsyncSession, customer_id: str, app_service: str) -> None:
        await self._write(db, lambda: self._repo.delete(db, customer_id, app_service))
        await self._invalidate(customer_id, reason="delete")
        logger.info("Deleted NWC credential customer=%s app_service=%s", customer_id, app_service)
