"""Connection outcome model.

Mapped from the ``/connect`` success body::

    {"slot_id": 7, "Initial_Source": "RENEWABLE", "Est_Bill": 120.5}
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import StrEnum
from typing import Any

from pydantic import field_validator

from pyecocharge.models._base import EcoChargeBaseModel

_CENTS = Decimal("0.01")


class EnergySource(StrEnum):
    RENEWABLE = "RENEWABLE"
    GRID = "GRID"

    @classmethod
    def classify(cls, label: str) -> EnergySource:
        """Anything mentioning ``RENEWABLE`` is renewable, everything else is grid."""
        return cls.RENEWABLE if "RENEWABLE" in label.upper() else cls.GRID


class ConnectionOutcome(EcoChargeBaseModel):
    """Authorization returned for an accepted connect request."""

    slot_id: int
    """Charging slot assigned to the vehicle."""
    energy_source: EnergySource
    """Source the session starts on."""
    source_label: str = ""
    """Source text as sent by the service (e.g. ``"RENEWABLE (Solar)"``)."""
    estimated_bill: Decimal
    """Estimated bill, rounded to cents."""

    @classmethod
    def _from_wire(cls, values: dict[str, Any]) -> dict[str, Any]:
        mapped = dict(values)
        label = mapped.pop("Initial_Source", None)
        if label is not None:
            mapped.setdefault("source_label", str(label))
            mapped.setdefault("energy_source", EnergySource.classify(str(label)))
        bill = mapped.pop("Est_Bill", None)
        if bill is not None:
            mapped.setdefault("estimated_bill", bill)
        return mapped

    @field_validator("estimated_bill", mode="before")
    @classmethod
    def _to_cents(cls, value: Any) -> Decimal:
        if isinstance(value, bool):
            raise ValueError("estimated_bill must be a number")
        try:
            # str() first so 120.1 becomes Decimal("120.1"), not its binary expansion
            amount = value if isinstance(value, Decimal) else Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"estimated_bill is not a number: {value!r}") from exc
        if not amount.is_finite():
            raise ValueError(f"estimated_bill must be finite, got {value!r}")
        return amount.quantize(_CENTS, rounding=ROUND_HALF_UP)

    @property
    def is_renewable(self) -> bool:
        return self.energy_source is EnergySource.RENEWABLE
