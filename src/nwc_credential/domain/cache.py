"""Credential cache Protocol — the per-customer mirror of the customer_nwc table.

Key:   f"{customer_id}:nwc"
Value: JSON {"data": [CredentialRecord, ...]} in insertion order.

A missing key is a miss (None), never an error. Unreachable Redis and
malformed payloads raise CacheError; the application service decides
whether that is fatal (it never is).
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from src.nwc_credential.domain.models import CredentialRecord

SeedLoader = Callable[[], Awaitable[list[CredentialRecord]]]


def cache_key(customer_id: str) -> str:
    return f"{customer_id}:nwc"


class CredentialCacheProtocol(Protocol):
    async def get(self, customer_id: str) -> list[CredentialRecord] | None: ...

    async def put(self, customer_id: str, records: list[CredentialRecord]) -> None: ...

    async def put_if_absent(
        self, customer_id: str, records: list[CredentialRecord]
    ) -> bool: ...

    async def append(
        self, customer_id: str, record: CredentialRecord, seed: SeedLoader
    ) -> list[CredentialRecord]: ...

    async def invalidate(self, customer_id: str) -> None: ...
