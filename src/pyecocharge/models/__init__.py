"""Data models for EcoCharge API requests and responses."""

from pyecocharge.models._base import EcoChargeBaseModel
from pyecocharge.models.connection import ConnectionOutcome, EnergySource
from pyecocharge.models.dashboard import DashboardSnapshot, GreenScoreBand, LiveSession
from pyecocharge.models.identifier import (
    SEGMENTS,
    SegmentKind,
    SegmentSpec,
    VehicleIdentifier,
    format_segment,
)
from pyecocharge.models.mode import ChargingMode, ChargingModeSelection
from pyecocharge.models.token import AdminCredential

__all__ = [
    "AdminCredential",
    "ChargingMode",
    "ChargingModeSelection",
    "ConnectionOutcome",
    "DashboardSnapshot",
    "EcoChargeBaseModel",
    "EnergySource",
    "GreenScoreBand",
    "LiveSession",
    "SEGMENTS",
    "SegmentKind",
    "SegmentSpec",
    "VehicleIdentifier",
    "format_segment",
]
