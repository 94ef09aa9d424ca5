"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.nwc_credential.domain.models import CredentialRecord


class CredentialRepositoryProtocol(Protocol):
    async def insert(
        self, db: AsyncSession, record: CredentialRecord
    ) -> CredentialRecord: ...

    async def list_by_customer(
        self, db: AsyncSession, customer_id: str
    ) -> list[CredentialRecord]: ...

    async def update(
        self, db: AsyncSession, record: CredentialRecord
    ) -> CredentialRecord: ...

    async def delete(
        self, db: AsyncSession, customer_id: str, app_service: str
    ) -> None: ...
