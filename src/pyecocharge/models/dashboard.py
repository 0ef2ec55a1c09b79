"""Dashboard snapshot model.

Mapped from the ``/admin/dashboard_stats`` response. A snapshot is a full,
immutable read of the network state; each poll produces a new one.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pyecocharge._constants import GREEN_SCORE_HIGH, GREEN_SCORE_MEDIUM, HIGH_LOAD_PERCENT
from pyecocharge.models._base import EcoChargeBaseModel


class GreenScoreBand(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class LiveSession(EcoChargeBaseModel):
    """One active charging session."""

    slot_id: int
    vehicle_number: str = ""
    mode: str = ""
    current_source: str = ""

    @property
    def is_renewable(self) -> bool:
        return "RENEWABLE" in self.current_source.upper()


class DashboardSnapshot(EcoChargeBaseModel):
    """Point-in-time read of the network state."""

    total_delivered_kwh: float
    """Energy delivered since the service started."""
    renewable_users: int
    conventional_users: int
    paused_users: int
    active_load_kw: float
    grid_capacity_kw: float
    solar_now_kw: float
    wind_now_kw: float
    net_green_available_kw: float
    green_score: float | None = None
    """``system_health.green_score``, 0-100."""
    live_sessions: tuple[LiveSession, ...] = ()

    @classmethod
    def _from_wire(cls, values: dict[str, Any]) -> dict[str, Any]:
        mapped = dict(values)
        health = mapped.pop("system_health", None)
        if isinstance(health, dict) and health.get("green_score") is not None:
            mapped.setdefault("green_score", health["green_score"])
        return mapped

    @property
    def capacity_percent(self) -> float | None:
        """Active load as a percentage of grid capacity (``None`` without capacity)."""
        if self.grid_capacity_kw <= 0:
            return None
        return self.active_load_kw / self.grid_capacity_kw * 100

    @property
    def is_high_load(self) -> bool:
        percent = self.capacity_percent
        return percent is not None and percent > HIGH_LOAD_PERCENT

    @property
    def energy_mix(self) -> dict[str, int]:
        """User counts per source category."""
        return {
            "renewable": self.renewable_users,
            "conventional": self.conventional_users,
            "paused": self.paused_users,
        }

    @property
    def green_score_band(self) -> GreenScoreBand | None:
        if self.green_score is None:
            return None
        if self.green_score > GREEN_SCORE_HIGH:
            return GreenScoreBand.HIGH
        if self.green_score > GREEN_SCORE_MEDIUM:
            return GreenScoreBand.MEDIUM
        return GreenScoreBand.LOW
