"""FastAPI dependencies that assemble the credential service per request.

The generator is built once (relay validated at startup); the repository
and cache adapters are cheap wrappers around the shared pools.
"""

from functools import lru_cache
from typing import Annotated

import redis.asyncio as aioredis
from fastapi import Depends

from config.settings import settings
from src.nwc_common.redis_client import get_redis
from src.nwc_credential.application.service import CredentialApplicationService
from src.nwc_credential.domain.generator import CredentialGenerator
from src.nwc_credential.infrastructure.cache import RedisCredentialCache
from src.nwc_credential.infrastructure.persistence import CredentialRepository


@lru_cache(maxsize=1)
def get_generator() -> CredentialGenerator:
    """Raises ValueError if NOSTR_RELAY is not a valid ws:// or wss:// URL."""
    return CredentialGenerator(settings.NOSTR_RELAY)


async def get_credential_service(
    redis: Annotated[aioredis.Redis, Depends(get_redis)],
) -> CredentialApplicationService:
    cache = RedisCredentialCache(
        redis,
        timeout=settings.CACHE_TIMEOUT_SECONDS,
        ttl_seconds=settings.CACHE_TTL_SECONDS,
        cas_retries=settings.CACHE_CAS_RETRIES,
    )
    return CredentialApplicationService(
        generator=get_generator(),
        cache=cache,
        repo=CredentialRepository(timeout=settings.DB_TIMEOUT_SECONDS),
        timeout=settings.DB_TIMEOUT_SECONDS,
    )
