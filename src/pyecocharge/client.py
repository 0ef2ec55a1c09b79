"""High-level async client for the EcoCharge network service."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from pyecocharge._api.connect import connect_vehicle
from pyecocharge._api.dashboard import fetch_dashboard_stats
from pyecocharge._api.login import login as _login
from pyecocharge._transport import HttpTransport, Transport
from pyecocharge.config import EcoChargeConfig
from pyecocharge.exceptions import EcoChargeError
from pyecocharge.models.connection import ConnectionOutcome
from pyecocharge.models.dashboard import DashboardSnapshot
from pyecocharge.models.identifier import VehicleIdentifier
from pyecocharge.models.mode import ChargingModeSelection
from pyecocharge.models.token import AdminCredential

_logger = logging.getLogger(__name__)


class EcoChargeClient:
    """Async client for the EcoCharge API.

    The client is stateless with respect to the console flows: it only
    turns calls into requests and responses into models, raising on any
    failure.

    Usage::

        async with EcoChargeClient(config) as client:
            outcome = await client.connect(identifier, selection)
    """

    def __init__(
        self,
        config: EcoChargeConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config or EcoChargeConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport

    @property
    def config(self) -> EcoChargeConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> EcoChargeClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise EcoChargeError("Client not initialized. Use 'async with EcoChargeClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    async def connect(
        self,
        identifier: VehicleIdentifier,
        selection: ChargingModeSelection,
    ) -> ConnectionOutcome:
        """Request a charging slot for a vehicle."""
        return await connect_vehicle(self._require_transport(), identifier, selection)

    async def login(self, username: str, password: str) -> AdminCredential:
        """Authenticate as an administrator and return the credential."""
        return await _login(self._require_transport(), username, password)

    async def get_dashboard_stats(self, *, token: str | None = None) -> DashboardSnapshot:
        """Fetch a dashboard snapshot, sending *token* as a bearer credential."""
        return await fetch_dashboard_stats(self._require_transport(), token=token)
