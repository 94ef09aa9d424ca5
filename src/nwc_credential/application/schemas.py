"""Pydantic schemas for the nwc_credential API."""

from pydantic import BaseModel, Field

from src.nwc_credential.domain.models import CredentialRecord

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateCredentialRequest(BaseModel):
    customer_id: str = Field(..., min_length=1, max_length=255)
    app_service: str = Field(..., min_length=1, max_length=255)
    budget: int = Field(..., ge=INT64_MIN, le=INT64_MAX, description="Opaque spending allowance")


class UpdateCredentialRequest(BaseModel):
    """Full replacement tuple. Keys are stored verbatim and never regenerated."""

    id: int | None = Field(None, description="Target a stored row by id instead of natural key")
    server_key: str = Field(..., min_length=1, max_length=128)
    user_key: str = Field(..., min_length=1, max_length=128)
    uri: str = Field(..., min_length=1)
    app_service: str = Field(..., min_length=1, max_length=255)
    budget: int = Field(..., ge=INT64_MIN, le=INT64_MAX)

    def to_record(self, customer_id: str) -> CredentialRecord:
        return CredentialRecord(
            id=self.id,
            customer_id=customer_id,
            server_key=self.server_key,
            user_key=self.user_key,
            uri=self.uri,
            app_service=self.app_service,
            budget=self.budget,
        )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class CredentialResponse(BaseModel):
    id: int | None
    customer_id: str
    server_key: str
    user_key: str
    uri: str
    app_service: str
    budget: int

    @classmethod
    def from_record(cls, record: CredentialRecord) -> "CredentialResponse":
        return cls(**record.to_dict())
