"""Admin credential model."""

from __future__ import annotations

from pydantic import field_validator

from pyecocharge.models._base import EcoChargeBaseModel


class AdminCredential(EcoChargeBaseModel):
    """Opaque token returned by a successful admin login.

    The token is never inspected client-side. Holding one is treated as
    holding a valid session; there is no expiry check.
    """

    token: str

    @field_validator("token")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        token = value.strip()
        if not token:
            raise ValueError("token must be non-empty")
        return token

    def __repr__(self) -> str:
        return "AdminCredential(token=<redacted>)"
