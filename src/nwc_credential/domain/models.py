"""Domain models for nwc_credential — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class CredentialRecord:
    customer_id: str
    server_key: str          # hex secret, persisted verbatim
    user_key: str            # hex secret, persisted verbatim
    uri: str                 # nostr+walletconnect:// URI
    app_service: str
    budget: int              # signed 64-bit, opaque spending allowance
    id: int | None = None    # assigned by the store on insert

    @property
    def natural_key(self) -> tuple[str, str]:
        return self.customer_id, self.app_service

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CredentialRecord":
        """Build a record from its cache/JSON form. Raises KeyError/TypeError on bad input."""
        budget = data["budget"]
        if not isinstance(budget, int) or isinstance(budget, bool):
            raise TypeError(f"budget must be an integer, got {budget!r}")
        return cls(
            id=data.get("id"),
            customer_id=str(data["customer_id"]),
            server_key=str(data["server_key"]),
            user_key=str(data["user_key"]),
            uri=str(data["uri"]),
            app_service=str(data["app_service"]),
            budget=budget,
        )


@dataclass(frozen=True)
class GeneratedCredential:
    server_key: str
    user_key: str
    uri: str
    server_public_key: str
