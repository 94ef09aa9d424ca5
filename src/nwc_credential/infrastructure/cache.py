"""RedisCredentialCache — concrete implementation of CredentialCacheProtocol.

Appends after a create are fenced with WATCH/MULTI/EXEC so two concurrent
creates for the same customer cannot drop each other's entry: the loser of
the race gets a WatchError and retries against the fresh value.
"""

import asyncio
import json
import logging
from collections.abc import Awaitable
from typing import TypeVar

import redis.asyncio as aioredis
from redis.exceptions import RedisError, WatchError

from src.nwc_common.errors import CacheError
from src.nwc_credential.domain.cache import SeedLoader, cache_key
from src.nwc_credential.domain.models import CredentialRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


def encode_records(records: list[CredentialRecord]) -> str:
    return json.dumps({"data": [r.to_dict() for r in records]})


def decode_records(raw: str) -> list[CredentialRecord]:
    """Parse a cached payload. Raises CacheError if it is not a valid record list."""
    try:
        payload = json.loads(raw)
        return [CredentialRecord.from_dict(item) for item in payload["data"]]
    except (ValueError, KeyError, TypeError) as exc:
        raise CacheError(f"Malformed cache payload: {exc}") from exc


class RedisCredentialCache:
    def __init__(
        self,
        redis: aioredis.Redis,
        timeout: float = 1.0,
        ttl_seconds: int | None = None,
        cas_retries: int = 5,
    ) -> None:
        self._redis = redis
        self._timeout = timeout
        self._ttl = ttl_seconds
        self._cas_retries = cas_retries

    async def _bounded(self, awaitable: Awaitable[T]) -> T:
        try:
            async with asyncio.timeout(self._timeout):
                return await awaitable
        except WatchError:
            raise
        except (RedisError, OSError) as exc:
            # builtin TimeoutError from asyncio.timeout is an OSError
            raise CacheError(f"Redis unavailable: {exc.__class__.__name__}") from exc

    async def get(self, customer_id: str) -> list[CredentialRecord] | None:
        raw = await self._bounded(self._redis.get(cache_key(customer_id)))
        if raw is None:
            return None
        return decode_records(raw)

    async def put(self, customer_id: str, records: list[CredentialRecord]) -> None:
        await self._bounded(
            self._redis.set(cache_key(customer_id), encode_records(records), ex=self._ttl)
        )

    async def put_if_absent(
        self, customer_id: str, records: list[CredentialRecord]
    ) -> bool:
        written = await self._bounded(
            self._redis.set(
                cache_key(customer_id), encode_records(records), ex=self._ttl, nx=True
            )
        )
        return bool(written)

    async def append(
        self, customer_id: str, record: CredentialRecord, seed: SeedLoader
    ) -> list[CredentialRecord]:
        """Append ``record`` to the cached list, or seed the entry on a miss.

        ``seed`` is awaited only on a miss and must return the customer's full
        record list; ``record`` is added to it if the loader did not include it.
        """
        key = cache_key(customer_id)
        for attempt in range(1, self._cas_retries + 1):
            try:
                async with self._redis.pipeline(transaction=True) as pipe:
                    await self._bounded(pipe.watch(key))
                    raw = await self._bounded(pipe.get(key))
                    if raw is None:
                        records = list(await seed())
                        if record.id is None or all(r.id != record.id for r in records):
                            records.append(record)
                    else:
                        records = decode_records(raw)
                        records.append(record)
                    pipe.multi()
                    pipe.set(key, encode_records(records), ex=self._ttl)
                    await self._bounded(pipe.execute())
                    return records
            except WatchError:
                logger.debug("Cache append contention on %s (attempt %d)", key, attempt)
        raise CacheError(f"Cache append for {key} lost {self._cas_retries} races")

    async def invalidate(self, customer_id: str) -> None:
        await self._bounded(self._redis.delete(cache_key(customer_id)))
