"""Charging mode selection.

Exactly one mode is active at a time. Only ``BOUNDED`` carries a parameter,
the energy limit in kWh; switching to another mode drops it, and switching
back starts again from :data:`DEFAULT_LIMIT_KWH`.
"""

from __future__ import annotations

import dataclasses
from enum import StrEnum
from typing import Any

from pyecocharge._constants import DEFAULT_LIMIT_KWH, MAX_LIMIT_KWH, MIN_LIMIT_KWH
from pyecocharge.exceptions import EcoChargeValidationError


class ChargingMode(StrEnum):
    """Charging modes; values are the wire tags sent to ``/connect``."""

    IMMEDIATE = "CHARGE_NOW"
    """Fastest speed at market price."""
    OPTIMIZED = "FULL_CHARGE"
    """Cost-optimized, renewable-first."""
    BOUNDED = "CUSTOM"
    """Stop after a fixed amount of energy."""


def _check_limit(limit_kwh: Any) -> int:
    if isinstance(limit_kwh, bool) or not isinstance(limit_kwh, int):
        raise EcoChargeValidationError(f"limit_kwh must be an integer, got {limit_kwh!r}")
    if not MIN_LIMIT_KWH <= limit_kwh <= MAX_LIMIT_KWH:
        raise EcoChargeValidationError(
            f"limit_kwh must be between {MIN_LIMIT_KWH} and {MAX_LIMIT_KWH} kWh, got {limit_kwh}"
        )
    return limit_kwh


@dataclasses.dataclass(frozen=True)
class ChargingModeSelection:
    """The active charging mode and, for ``BOUNDED``, its limit.

    Use the :meth:`immediate`, :meth:`optimized` and :meth:`bounded`
    constructors; the limit is validated on construction.
    """

    mode: ChargingMode = ChargingMode.IMMEDIATE
    limit_kwh: int | None = None

    def __post_init__(self) -> None:
        if self.mode is ChargingMode.BOUNDED:
            _check_limit(self.limit_kwh)
        elif self.limit_kwh is not None:
            raise EcoChargeValidationError(f"{self.mode.name} takes no limit_kwh")

    @classmethod
    def immediate(cls) -> ChargingModeSelection:
        return cls(ChargingMode.IMMEDIATE)

    @classmethod
    def optimized(cls) -> ChargingModeSelection:
        return cls(ChargingMode.OPTIMIZED)

    @classmethod
    def bounded(cls, limit_kwh: int = DEFAULT_LIMIT_KWH) -> ChargingModeSelection:
        return cls(ChargingMode.BOUNDED, limit_kwh)

    @classmethod
    def default_for(cls, mode: ChargingMode) -> ChargingModeSelection:
        """Selection for *mode* with default parameters."""
        mode = ChargingMode(mode)
        if mode is ChargingMode.BOUNDED:
            return cls.bounded()
        return cls(mode)

    def switch_to(self, mode: ChargingMode) -> ChargingModeSelection:
        """Select *mode*. Re-selecting the active mode keeps its parameters."""
        if ChargingMode(mode) is self.mode:
            return self
        return self.default_for(mode)

    def with_limit(self, limit_kwh: int) -> ChargingModeSelection:
        if self.mode is not ChargingMode.BOUNDED:
            raise EcoChargeValidationError(f"limit_kwh only applies to BOUNDED, active mode is {self.mode.name}")
        return ChargingModeSelection(ChargingMode.BOUNDED, limit_kwh)

    def to_payload(self) -> dict[str, Any]:
        """Wire fields for ``/connect`` (``mode`` and, when bounded, ``custom_kwh``)."""
        payload: dict[str, Any] = {"mode": self.mode.value}
        if self.mode is ChargingMode.BOUNDED:
            payload["custom_kwh"] = self.limit_kwh
        return payload
