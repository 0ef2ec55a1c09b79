"""Dashboard statistics endpoint.

Endpoint:
  - GET /admin/dashboard_stats
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from pyecocharge._constants import DASHBOARD_ENDPOINT
from pyecocharge._transport import Transport
from pyecocharge.exceptions import EcoChargeTransportError
from pyecocharge.models.dashboard import DashboardSnapshot

_logger = logging.getLogger(__name__)


def parse_dashboard_response(response: Any) -> DashboardSnapshot:
    if not isinstance(response, dict):
        raise EcoChargeTransportError(
            f"Unexpected {DASHBOARD_ENDPOINT} response type: {type(response).__name__}",
            endpoint=DASHBOARD_ENDPOINT,
        )
    try:
        return DashboardSnapshot.model_validate(response)
    except ValidationError as exc:
        raise EcoChargeTransportError(
            f"Malformed {DASHBOARD_ENDPOINT} response: {exc.error_count()} invalid field(s)",
            endpoint=DASHBOARD_ENDPOINT,
        ) from exc


async def fetch_dashboard_stats(transport: Transport, *, token: str | None = None) -> DashboardSnapshot:
    """Fetch one dashboard snapshot."""
    response = await transport.request_json("GET", DASHBOARD_ENDPOINT, token=token)
    snapshot = parse_dashboard_response(response)
    _logger.debug(
        "Dashboard snapshot load=%s/%s sessions=%d",
        snapshot.active_load_kw,
        snapshot.grid_capacity_kw,
        len(snapshot.live_sessions),
    )
    return snapshot
