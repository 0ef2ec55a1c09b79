"""Custom exception hierarchy for pyecocharge."""

from __future__ import annotations


class EcoChargeError(Exception):
    """Base exception for all pyecocharge errors."""


class EcoChargeConfigError(EcoChargeError):
    """Invalid or missing configuration."""


class EcoChargeValidationError(EcoChargeError, ValueError):
    """Input rejected locally before anything is sent to the service."""


class EcoChargeBusyError(EcoChargeError):
    """A request is already in flight for this flow."""


class EcoChargeStorageError(EcoChargeError):
    """The credential store could not be read or written."""


class EcoChargeTransportError(EcoChargeError):
    """No usable response (network failure, timeout, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        endpoint: str = "",
    ) -> None:
        self.endpoint = endpoint
        super().__init__(message)


class EcoChargeApiError(EcoChargeError):
    """Service answered with a non-success status.

    ``detail`` carries the human-readable reason from the ``{"detail": ...}``
    error body, or ``None`` when the service did not supply one.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        detail: str | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.endpoint = endpoint
        super().__init__(message)


class EcoChargeAuthenticationError(EcoChargeApiError):
    """Admin login rejected, or accepted without a usable token."""
