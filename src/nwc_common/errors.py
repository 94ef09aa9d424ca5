"""Unified error codes and custom exceptions.

Every error carries a stable ``error_kind`` string so callers can branch on
the kind of failure without parsing messages.

Error code ranges:
  2xxx: NWC credential (definitive outcomes)
  9xxx: System (store/cache failures)
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        error_kind: str = "INTERNAL_ERROR",
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.error_kind = error_kind
        super().__init__(message)


# --- 2xxx: NWC credential ---

class CredentialNotFoundError(AppError):
    def __init__(self, customer_id: str, app_service: str | None = None) -> None:
        target = customer_id if app_service is None else f"{customer_id}/{app_service}"
        super().__init__(2001, f"NWC credential not found: {target}", 404, "NOT_FOUND")


class DuplicateEntryError(AppError):
    def __init__(self, customer_id: str, app_service: str) -> None:
        super().__init__(
            2002,
            f"Duplicate entry: {customer_id}/{app_service} already has an NWC credential",
            409,
            "DUPLICATE_ENTRY",
        )


class ValidationError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2003, f"Invalid request: {detail}", 422, "VALIDATION_ERROR")


# --- 9xxx: System ---

class StoreError(AppError):
    def __init__(self, detail: str = "Database error") -> None:
        super().__init__(9001, detail, 500, "STORE_ERROR")


class StoreUnavailableError(AppError):
    """Transient store failure: timeout, pool exhaustion or lost connection.

    The write may or may not have been applied; callers should retry.
    """

    def __init__(self, detail: str = "Database temporarily unavailable") -> None:
        super().__init__(9002, detail, 503, "STORE_UNAVAILABLE")


class CacheError(AppError):
    def __init__(self, detail: str = "Cache error") -> None:
        super().__init__(9003, detail, 500, "CACHE_ERROR")
