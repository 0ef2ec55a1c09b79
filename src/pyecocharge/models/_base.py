"""Base model for EcoCharge API responses.

Every response model inherits from :class:`EcoChargeBaseModel` which
provides:

* a frozen, extra-ignoring configuration so server-side additions never
  break parsing;
* a ``model_validator(mode="before")`` that drops ``None`` values so the
  field default is used, and gives subclasses a ``_from_wire`` hook to map
  wire-only keys onto fields;
* a ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class EcoChargeBaseModel(BaseModel):
    """Base for EcoCharge API response models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict, repr=False)
    """Original API response dict."""

    @classmethod
    def _from_wire(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Map wire keys onto field names. Subclasses override."""
        return values

    @model_validator(mode="before")
    @classmethod
    def _clean_wire_values(cls, values: Any) -> Any:
        """Drop ``None`` values, apply the wire mapping, and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        original = dict(values)
        cleaned = cls._from_wire({key: value for key, value in original.items() if value is not None})

        # Only auto-stash raw when not explicitly provided (i.e. model_validate
        # from an API dict).
        if "raw" not in values:
            cleaned["raw"] = original
        return cleaned
