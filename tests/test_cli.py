from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest

from pyecocharge import cli
from pyecocharge.models.connection import ConnectionOutcome
from pyecocharge.models.dashboard import DashboardSnapshot
from pyecocharge.storage import FileCredentialStore


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("ECOCHARGE_BASE_URL", "ECOCHARGE_CREDENTIAL_PATH", "ECOCHARGE_POLL_INTERVAL"):
        monkeypatch.delenv(key, raising=False)


def _fake_backend(monkeypatch: pytest.MonkeyPatch, responses: dict[str, Any]) -> list[tuple[str, Any]]:
    calls: list[tuple[str, Any]] = []

    async def fake_request_json(_self: Any, method: str, endpoint: str, payload: Any = None, *, token: Any = None) -> Any:
        calls.append((endpoint, payload))
        return responses[endpoint]

    monkeypatch.setattr("pyecocharge._transport.HttpTransport.request_json", fake_request_json)
    return calls


def test_render_outcome() -> None:
    outcome = ConnectionOutcome(slot_id=3, energy_source="GRID", estimated_bill=Decimal("45"))
    text = cli.render_outcome(outcome)
    assert "#3" in text
    assert "Conventional" in text
    assert "45.00" in text


def test_render_snapshot_flags_high_load() -> None:
    snapshot = DashboardSnapshot.model_validate(
        {
            "total_delivered_kwh": 10,
            "renewable_users": 1,
            "conventional_users": 2,
            "paused_users": 0,
            "active_load_kw": 90,
            "grid_capacity_kw": 100,
            "solar_now_kw": 1,
            "wind_now_kw": 2,
            "net_green_available_kw": 0,
            "system_health": {"green_score": 40},
            "live_sessions": [{"slot_id": 4, "vehicle_number": "KA-12-AB-3456", "mode": "CHARGE_NOW", "current_source": "GRID"}],
        }
    )
    text = cli.render_snapshot(snapshot)
    assert "90%" in text
    assert "HIGH LOAD" in text
    assert "40/100 (low)" in text
    assert "KA-12-AB-3456" in text


def test_connect_with_incomplete_vehicle_sends_nothing(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    calls = _fake_backend(monkeypatch, {})

    assert cli.main(["connect", "KA-12"]) == cli.EXIT_FAILED

    assert calls == []
    assert "Please enter a valid vehicle number" in capsys.readouterr().err


def test_connect_prints_authorization(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    calls = _fake_backend(
        monkeypatch,
        {"/connect": {"slot_id": 7, "Initial_Source": "RENEWABLE", "Est_Bill": 120.5}},
    )

    assert cli.main(["connect", "ka12ab3456", "--mode", "custom", "--kwh", "30"]) == cli.EXIT_OK

    assert calls == [("/connect", {"vehicle_number": "KA-12-AB-3456", "mode": "CUSTOM", "custom_kwh": 30})]
    out = capsys.readouterr().out
    assert "Vehicle connected successfully!" in out
    assert "120.50" in out


def test_kwh_requires_custom_mode() -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["connect", "KA-12-AB-3456", "--kwh", "30"])
    assert exc_info.value.code == 2


def test_login_then_logout(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = tmp_path / "credentials.json"
    _fake_backend(monkeypatch, {"/admin/login": {"token": "tok-cli"}})

    assert cli.main(["--credential-path", str(path), "login", "-u", "admin", "-p", "secret"]) == cli.EXIT_OK
    assert FileCredentialStore(path).get("admin_token") == "tok-cli"

    assert cli.main(["--credential-path", str(path), "logout"]) == cli.EXIT_OK
    assert not path.exists()


def test_dashboard_requires_login(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls = _fake_backend(monkeypatch, {})

    code = cli.main(["--credential-path", str(tmp_path / "none.json"), "dashboard", "--once"])

    assert code == cli.EXIT_NOT_AUTHENTICATED
    assert calls == []


def test_dashboard_once_prints_snapshot(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    path = tmp_path / "credentials.json"
    FileCredentialStore(path).set("admin_token", "tok-disk")
    calls = _fake_backend(
        monkeypatch,
        {
            "/admin/dashboard_stats": {
                "total_delivered_kwh": 10,
                "renewable_users": 1,
                "conventional_users": 0,
                "paused_users": 0,
                "active_load_kw": 20,
                "grid_capacity_kw": 100,
                "solar_now_kw": 1,
                "wind_now_kw": 2,
                "net_green_available_kw": 0,
                "live_sessions": [],
            }
        },
    )

    assert cli.main(["--credential-path", str(path), "dashboard", "--once"]) == cli.EXIT_OK

    assert calls[0][0] == "/admin/dashboard_stats"
    assert "No active sessions" in capsys.readouterr().out


def test_bad_base_url_is_configuration_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["--base-url", "ftp://nope", "logout"]) == cli.EXIT_FAILED
    assert "Configuration error" in capsys.readouterr().err
