"""
Error taxonomy for the blueprint pipeline.

Every error carries the HTTP status and machine-readable code that the API
layer reports. Only some of them ever reach a caller: acquisition failures
are always recovered from the fallback dataset, and generation failures are
recovered when the dataset knows the handle.
"""
from typing import List


class BlueprintError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str = "An unexpected error occurred.", code: str | None = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class ValidationError(BlueprintError):
    """Bad handle or request body. Raised before any rate-limit accounting."""
    status_code = 400
    code = "INVALID_USERNAME"


class RateLimitedError(BlueprintError):
    status_code = 429
    code = "RATE_LIMITED"

    def __init__(self, retry_after: int):
        super().__init__(f"Too many requests. Retry in {retry_after}s.")
        self.retry_after = retry_after


class AcquisitionExhausted(BlueprintError):
    """Every content source failed. Always recovered via the fallback dataset."""
    status_code = 502
    code = "SOURCES_UNAVAILABLE"


class GenerationError(BlueprintError):
    """Transient generation failure (bad model, timeout, upstream error)."""
    status_code = 503
    code = "AI_ERROR"


class GenerationAuthError(GenerationError):
    """Credential-class failure. No other model/version will do better."""


class GenerationExhausted(GenerationError):
    def __init__(self, message: str, failures: List[str] | None = None):
        super().__init__(message)
        self.failures = failures or []


class PayloadInvalid(GenerationError):
    """Generated text did not contain a complete analysis."""


class InternalError(BlueprintError):
    pass
