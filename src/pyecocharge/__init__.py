"""pyecocharge - Async Python client and console for the EcoCharge network."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyecocharge")
except PackageNotFoundError:
    __version__ = "0+local"
from pyecocharge.client import EcoChargeClient
from pyecocharge.config import EcoChargeConfig
from pyecocharge.connection import ConnectionFlow, ConnectionState
from pyecocharge.exceptions import (
    EcoChargeApiError,
    EcoChargeAuthenticationError,
    EcoChargeBusyError,
    EcoChargeConfigError,
    EcoChargeError,
    EcoChargeStorageError,
    EcoChargeTransportError,
    EcoChargeValidationError,
)
from pyecocharge.gate import CredentialGate, GateState
from pyecocharge.identifier import IdentifierComposer
from pyecocharge.models import (
    AdminCredential,
    ChargingMode,
    ChargingModeSelection,
    ConnectionOutcome,
    DashboardSnapshot,
    EnergySource,
    GreenScoreBand,
    LiveSession,
    VehicleIdentifier,
)
from pyecocharge.notices import Notice, NoticeLevel
from pyecocharge.storage import CredentialStore, FileCredentialStore
from pyecocharge.sync import SyncLoop

__all__ = [
    "__version__",
    "AdminCredential",
    "ChargingMode",
    "ChargingModeSelection",
    "ConnectionFlow",
    "ConnectionOutcome",
    "ConnectionState",
    "CredentialGate",
    "CredentialStore",
    "DashboardSnapshot",
    "EcoChargeApiError",
    "EcoChargeAuthenticationError",
    "EcoChargeBusyError",
    "EcoChargeClient",
    "EcoChargeConfig",
    "EcoChargeConfigError",
    "EcoChargeError",
    "EcoChargeStorageError",
    "EcoChargeTransportError",
    "EcoChargeValidationError",
    "EnergySource",
    "FileCredentialStore",
    "GateState",
    "GreenScoreBand",
    "IdentifierComposer",
    "LiveSession",
    "Notice",
    "NoticeLevel",
    "SyncLoop",
    "VehicleIdentifier",
]
