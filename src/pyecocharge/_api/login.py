"""Admin login endpoint.

Endpoint:
  - POST /admin/login
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from pyecocharge._constants import LOGIN_ENDPOINT
from pyecocharge._redact import redact_for_log
from pyecocharge._transport import Transport
from pyecocharge.exceptions import EcoChargeApiError, EcoChargeAuthenticationError
from pyecocharge.models.token import AdminCredential

_logger = logging.getLogger(__name__)


def build_login_request(username: str, password: str) -> dict[str, str]:
    """Build the ``/admin/login`` body."""
    return {"username": username, "password": password}


def parse_login_response(response: Any) -> AdminCredential:
    """Parse login response and extract the credential.

    Raises
    ------
    EcoChargeAuthenticationError
        If the response carries no usable token.
    """
    _logger.debug("Login response parsed=%s", redact_for_log(response))
    if not isinstance(response, dict) or not isinstance(response.get("token"), str):
        raise EcoChargeAuthenticationError(
            "Login response missing token",
            endpoint=LOGIN_ENDPOINT,
        )
    try:
        return AdminCredential.model_validate(response)
    except ValidationError as exc:
        raise EcoChargeAuthenticationError(
            "Login response carried an empty token",
            endpoint=LOGIN_ENDPOINT,
        ) from exc


async def login(transport: Transport, username: str, password: str) -> AdminCredential:
    """Authenticate as an administrator."""
    payload = build_login_request(username, password)
    try:
        response = await transport.request_json("POST", LOGIN_ENDPOINT, payload)
    except EcoChargeApiError as exc:
        status = exc.status_code
        if status is not None and status >= 500:
            raise
        raise EcoChargeAuthenticationError(
            f"Login failed: {exc.detail or f'HTTP {status}'}",
            status_code=status,
            detail=exc.detail,
            endpoint=LOGIN_ENDPOINT,
        ) from exc
    return parse_login_response(response)
