# file: errors.py
from typing import Optional


class PayloadError(ValueError):
    """Base error for instructions that cannot be turned into a plan. Never retryable."""
    kind = "PayloadError"


class MalformedInput(PayloadError):
    kind = "MalformedInput"

    def __init__(self, reason: str):
        super().__init__(f"invalid JSON: {reason}")


class UnsupportedVersion(PayloadError):
    kind = "UnsupportedVersion"

    def __init__(self, version: str = ""):
        self.version = version
        super().__init__(f'version must be "v2", got {version!r}')


class MissingField(PayloadError):
    kind = "MissingField"

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"{field} is required")


class InvalidAmount(PayloadError):
    kind = "InvalidAmount"

    def __init__(self, field: str, value: str, reason: str = "not a valid decimal"):
        self.field = field
        self.value = value
        super().__init__(f"{field} invalid: {value!r} ({reason})")


class ExchangeSetupError(RuntimeError):
    """Plan is valid, but no exchange client can be built for it."""


class UnsupportedExchangeError(ExchangeSetupError):
    pass


class CredentialResolutionError(ExchangeSetupError):
    pass
