"""Shared test fixtures.

NOSTR_RELAY has no default in Settings, so it is set before anything under
src/ or config/ is imported.
"""

# ruff: noqa: E402  -- NOSTR_RELAY must be set before config.settings is imported

import os

os.environ.setdefault("NOSTR_RELAY", "wss://relay.test")

from dataclasses import replace
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from src.nwc_common.errors import (
    CacheError,
    CredentialNotFoundError,
    DuplicateEntryError,
    StoreUnavailableError,
)
from src.nwc_credential.application.service import CredentialApplicationService
from src.nwc_credential.domain.cache import SeedLoader
from src.nwc_credential.domain.generator import CredentialGenerator
from src.nwc_credential.domain.models import CredentialRecord

TEST_RELAY = "wss://relay.test"


class InMemoryCredentialRepository:
    """customer_nwc stand-in with the same natural-key uniqueness as the schema."""

    def __init__(self) -> None:
        self.rows: list[CredentialRecord] = []
        self.available = True
        self.list_calls = 0
        self._next_id = 1

    def _check(self) -> None:
        if not self.available:
            raise StoreUnavailableError("store offline")

    def _find(self, record: CredentialRecord) -> int | None:
        for i, row in enumerate(self.rows):
            if record.id is not None:
                if row.id == record.id and row.customer_id == record.customer_id:
                    return i
            elif row.natural_key == record.natural_key:
                return i
        return None

    async def insert(self, db: object, record: CredentialRecord) -> CredentialRecord:
        self._check()
        if any(row.natural_key == record.natural_key for row in self.rows):
            raise DuplicateEntryError(record.customer_id, record.app_service)
        stored = replace(record, id=self._next_id)
        self._next_id += 1
        self.rows.append(stored)
        return replace(stored)

    async def list_by_customer(self, db: object, customer_id: str) -> list[CredentialRecord]:
        self._check()
        self.list_calls += 1
        return [replace(row) for row in self.rows if row.customer_id == customer_id]

    async def update(self, db: object, record: CredentialRecord) -> CredentialRecord:
        self._check()
        index = self._find(record)
        if index is None:
            raise CredentialNotFoundError(record.customer_id, record.app_service)
        self.rows[index] = replace(record, id=self.rows[index].id)
        return replace(self.rows[index])

    async def delete(self, db: object, customer_id: str, app_service: str) -> None:
        self._check()
        before = len(self.rows)
        self.rows = [r for r in self.rows if r.natural_key != (customer_id, app_service)]
        if len(self.rows) == before:
            raise CredentialNotFoundError(customer_id, app_service)


class InMemoryCredentialCache:
    def __init__(self) -> None:
        self.entries: dict[str, list[CredentialRecord]] = {}
        self.available = True

    def _check(self) -> None:
        if not self.available:
            raise CacheError("cache offline")

    async def get(self, customer_id: str) -> list[CredentialRecord] | None:
        self._check()
        records = self.entries.get(customer_id)
        return None if records is None else [replace(r) for r in records]

    async def put(self, customer_id: str, records: list[CredentialRecord]) -> None:
        self._check()
        self.entries[customer_id] = [replace(r) for r in records]

    async def put_if_absent(self, customer_id: str, records: list[CredentialRecord]) -> bool:
        self._check()
        if customer_id in self.entries:
            return False
        self.entries[customer_id] = [replace(r) for r in records]
        return True

    async def append(
        self, customer_id: str, record: CredentialRecord, seed: SeedLoader
    ) -> list[CredentialRecord]:
        self._check()
        if customer_id in self.entries:
            records = self.entries[customer_id] + [replace(record)]
        else:
            records = list(await seed())
            if all(r.id != record.id for r in records):
                records.append(replace(record))
        self.entries[customer_id] = records
        return [replace(r) for r in records]

    async def invalidate(self, customer_id: str) -> None:
        self._check()
        self.entries.pop(customer_id, None)


@pytest.fixture
def generator() -> CredentialGenerator:
    return CredentialGenerator(TEST_RELAY)


@pytest.fixture
def store() -> InMemoryCredentialRepository:
    return InMemoryCredentialRepository()


@pytest.fixture
def cache() -> InMemoryCredentialCache:
    return InMemoryCredentialCache()


@pytest.fixture
def db() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def service(
    generator: CredentialGenerator,
    store: InMemoryCredentialRepository,
    cache: InMemoryCredentialCache,
) -> CredentialApplicationService:
    return CredentialApplicationService(generator=generator, cache=cache, repo=store)


@pytest.fixture
async def client(service: CredentialApplicationService, db: AsyncMock) -> AsyncClient:
    """Async HTTP client wired to the in-memory store and cache."""
    from src.main import app
    from src.nwc_common.database import get_db_session
    from src.nwc_credential.api.dependencies import get_credential_service

    async def _service() -> CredentialApplicationService:
        return service

    async def _session() -> AsyncMock:
        return db

    app.dependency_overrides[get_credential_service] = _service
    app.dependency_overrides[get_db_session] = _session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
