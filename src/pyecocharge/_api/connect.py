"""Connect endpoint.

Endpoint:
  - POST /connect
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from pyecocharge._constants import CONNECT_ENDPOINT, MSG_INVALID_VEHICLE
from pyecocharge._transport import Transport
from pyecocharge.exceptions import EcoChargeTransportError, EcoChargeValidationError
from pyecocharge.models.connection import ConnectionOutcome
from pyecocharge.models.identifier import VehicleIdentifier
from pyecocharge.models.mode import ChargingModeSelection

_logger = logging.getLogger(__name__)


def build_connect_request(
    identifier: VehicleIdentifier,
    selection: ChargingModeSelection,
) -> dict[str, Any]:
    """Build the ``/connect`` body.

    Raises
    ------
    EcoChargeValidationError
        If the identifier is incomplete. Nothing must be sent in that case.
    """
    if not identifier.is_valid():
        raise EcoChargeValidationError(MSG_INVALID_VEHICLE)
    return {"vehicle_number": identifier.composed, **selection.to_payload()}


def parse_connect_response(response: Any) -> ConnectionOutcome:
    """Parse a ``/connect`` success body into a :class:`ConnectionOutcome`."""
    if not isinstance(response, dict):
        raise EcoChargeTransportError(
            f"Unexpected {CONNECT_ENDPOINT} response type: {type(response).__name__}",
            endpoint=CONNECT_ENDPOINT,
        )
    try:
        return ConnectionOutcome.model_validate(response)
    except ValidationError as exc:
        raise EcoChargeTransportError(
            f"Malformed {CONNECT_ENDPOINT} response: {exc.error_count()} invalid field(s)",
            endpoint=CONNECT_ENDPOINT,
        ) from exc


async def connect_vehicle(
    transport: Transport,
    identifier: VehicleIdentifier,
    selection: ChargingModeSelection,
) -> ConnectionOutcome:
    """Request a charging slot for *identifier* in the selected mode."""
    payload = build_connect_request(identifier, selection)
    response = await transport.request_json("POST", CONNECT_ENDPOINT, payload)
    outcome = parse_connect_response(response)
    _logger.debug(
        "Connect authorized vehicle=%s slot=%s source=%s",
        identifier.composed,
        outcome.slot_id,
        outcome.energy_source,
    )
    return outcome
