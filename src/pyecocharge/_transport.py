"""HTTP JSON transport for the EcoCharge service."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyecocharge._redact import redact_for_log
from pyecocharge.config import EcoChargeConfig
from pyecocharge.exceptions import EcoChargeApiError, EcoChargeTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def request_json(
        self,
        method: str,
        endpoint: str,
        payload: Mapping[str, Any] | None = None,
        *,
        token: str | None = None,
    ) -> Any:
        ...


def _error_detail(text: str) -> str | None:
    """Extract ``detail`` from an error body, if it is the usual JSON shape."""
    try:
        body = json.loads(text)
    except json.JSONDecodeError:
        return None
    if not isinstance(body, dict):
        return None
    detail = body.get("detail")
    if isinstance(detail, str) and detail.strip():
        return detail.strip()
    # Validation errors come back as a list of {"msg": ...} entries.
    if isinstance(detail, list):
        messages = [str(item.get("msg")) for item in detail if isinstance(item, dict) and item.get("msg")]
        if messages:
            return "; ".join(messages)
    return None


class HttpTransport:
    """JSON-over-HTTP transport sharing one ``aiohttp`` session."""

    def __init__(
        self,
        config: EcoChargeConfig,
        http_session: aiohttp.ClientSession,
    ) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def request_json(
        self,
        method: str,
        endpoint: str,
        payload: Mapping[str, Any] | None = None,
        *,
        token: str | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Raises
        ------
        EcoChargeApiError
            The service answered with a non-2xx status.
        EcoChargeTransportError
            No response was obtained, or the body is not JSON.
        """
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": self._config.user_agent,
        }
        if token:
            headers["authorization"] = f"Bearer {token}"

        url = f"{self._config.base_url}{endpoint}"
        _logger.debug("%s %s", method, url)
        if self._config.api_trace_enabled and payload is not None:
            _logger.debug("%s request body=%s", endpoint, redact_for_log(dict(payload)))

        try:
            async with self._http.request(
                method,
                url,
                json=dict(payload) if payload is not None else None,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                raw = await resp.read()
                status = resp.status
        except aiohttp.ClientError as exc:
            raise EcoChargeTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc
        except asyncio.TimeoutError as exc:
            raise EcoChargeTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc

        if not 200 <= status < 300:
            text = raw.decode("utf-8", errors="replace")
            detail = _error_detail(text)
            raise EcoChargeApiError(
                f"HTTP {status} from {endpoint}: {detail or text[:200]}",
                status_code=status,
                detail=detail,
                endpoint=endpoint,
            )

        try:
            body = json.loads(raw.decode("utf-8"))
        except ValueError as exc:
            # JSONDecodeError or UnicodeDecodeError
            raise EcoChargeTransportError(
                f"Invalid JSON from {endpoint}: {raw[:200].decode('utf-8', errors='replace')}",
                endpoint=endpoint,
            ) from exc

        if self._config.api_trace_enabled:
            _logger.debug("%s response body=%s", endpoint, redact_for_log(body))
        return body
