"""Client configuration for pyecocharge."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from pyecocharge._constants import (
    BASE_URL,
    CREDENTIAL_KEY,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    USER_AGENT,
)
from pyecocharge.exceptions import EcoChargeConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _default_credential_path() -> Path:
    config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else Path.home() / ".config"
    return base / "pyecocharge" / "credentials.json"


@dataclasses.dataclass(frozen=True)
class EcoChargeConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Service base URL, without a trailing slash.
    poll_interval : float
        Seconds between two dashboard fetches while the admin view is open.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    credential_path : Path
        JSON file holding the persisted admin credential.
    credential_key : str
        Entry name of the admin credential inside ``credential_path``.
    user_agent : str
        User-Agent header sent with every request.
    api_trace_enabled : bool
        Log redacted request and response bodies at DEBUG level.
    """

    base_url: str = BASE_URL
    poll_interval: float = DEFAULT_POLL_INTERVAL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    credential_path: Path = dataclasses.field(default_factory=_default_credential_path)
    credential_key: str = CREDENTIAL_KEY
    user_agent: str = USER_AGENT
    api_trace_enabled: bool = False

    def __post_init__(self) -> None:
        parsed = urlparse(self.base_url)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise EcoChargeConfigError(f"base_url must be an http(s) URL, got {self.base_url!r}")
        # Endpoint paths start with "/", keep the join unambiguous.
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        object.__setattr__(self, "credential_path", Path(self.credential_path).expanduser())
        if self.poll_interval <= 0:
            raise EcoChargeConfigError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.request_timeout <= 0:
            raise EcoChargeConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        if not self.credential_key:
            raise EcoChargeConfigError("credential_key must be non-empty")

    @classmethod
    def from_env(cls, **overrides: Any) -> EcoChargeConfig:
        """Create configuration from environment variables.

        Reads the optional ``ECOCHARGE_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        EcoChargeConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        base_url = env.get("ECOCHARGE_BASE_URL")
        if base_url is not None:
            config_kwargs["base_url"] = base_url

        credential_path = env.get("ECOCHARGE_CREDENTIAL_PATH")
        if credential_path is not None:
            config_kwargs["credential_path"] = Path(credential_path)

        # Numeric values, handle separately
        for env_key, field_name in (
            ("ECOCHARGE_POLL_INTERVAL", "poll_interval"),
            ("ECOCHARGE_REQUEST_TIMEOUT", "request_timeout"),
        ):
            raw = env.get(env_key)
            if raw is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = float(raw)
            except ValueError as exc:
                raise EcoChargeConfigError(f"{env_key} must be a number, got {raw!r}") from exc

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(
                env.get("ECOCHARGE_API_TRACE_ENABLED"),
                False,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
