# destitutes/errors.py
from typing import Optional


class AppError(RuntimeError):
    """Base class for every user-facing failure in the app."""


class ConfigError(AppError):
    """Raised when configuration is missing or invalid."""


class ValidationError(AppError):
    """Raised when user input blocks a transition. The message is shown as-is."""


class PermissionDenied(AppError):
    """Camera or location permission refused by the user."""


class CameraUnavailable(AppError):
    """No camera stream could be opened (unsupported browser, no hardware)."""


class GeolocationUnavailable(AppError):
    """Location services unsupported, or the fix timed out."""


class ProviderError(AppError):
    """A call into a hosted service (auth, database, storage, ...) failed."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class AuthError(ProviderError):
    pass


class PaymentError(ProviderError):
    pass


class RelayError(ProviderError):
    pass
