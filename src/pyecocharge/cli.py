"""Command-line console for the EcoCharge network.

Usage
-----
::

    pyecocharge connect KA-12-AB-3456 --mode custom --kwh 30
    pyecocharge login --username admin
    pyecocharge dashboard            # refreshes until Ctrl-C
    pyecocharge dashboard --once
    pyecocharge logout

The service address and credential file come from ``ECOCHARGE_*``
environment variables (see :meth:`EcoChargeConfig.from_env`) unless given
with ``--base-url`` / ``--credential-path``.
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

from pyecocharge.client import EcoChargeClient
from pyecocharge.config import EcoChargeConfig
from pyecocharge.connection import ConnectionFlow
from pyecocharge.exceptions import EcoChargeConfigError, EcoChargeError
from pyecocharge.gate import CredentialGate, GateState
from pyecocharge.models.connection import ConnectionOutcome
from pyecocharge.models.dashboard import DashboardSnapshot
from pyecocharge.models.identifier import SEGMENTS, VehicleIdentifier
from pyecocharge.models.mode import ChargingMode
from pyecocharge.notices import Notice, NoticeLevel
from pyecocharge.storage import FileCredentialStore
from pyecocharge.sync import SyncLoop

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_NOT_AUTHENTICATED = 2

_MODE_CHOICES: dict[str, ChargingMode] = {
    "now": ChargingMode.IMMEDIATE,
    "full": ChargingMode.OPTIMIZED,
    "custom": ChargingMode.BOUNDED,
}

_IDENTIFIER_HINT = "-".join(spec.placeholder for spec in SEGMENTS)


# ── rendering ────────────────────────────────────────────────


def _print_notice(notice: Notice) -> None:
    stream = sys.stdout if notice.level is NoticeLevel.SUCCESS else sys.stderr
    print(f"[{notice.level}] {notice.message}", file=stream)


def render_outcome(outcome: ConnectionOutcome) -> str:
    source = "Renewable" if outcome.is_renewable else "Conventional"
    return "\n".join(
        [
            "Connection Authorized",
            f"  Assigned slot  : #{outcome.slot_id}",
            f"  Energy source  : {source}",
            f"  Estimated bill : {outcome.estimated_bill:.2f}",
        ]
    )


def render_snapshot(snapshot: DashboardSnapshot) -> str:
    percent = snapshot.capacity_percent
    load = f"{round(percent)}%" if percent is not None else "n/a"
    warning = "  HIGH LOAD" if snapshot.is_high_load else ""
    score = "n/a" if snapshot.green_score is None else f"{snapshot.green_score:g}/100 ({snapshot.green_score_band})"
    mix = ", ".join(f"{name} {count}" for name, count in snapshot.energy_mix.items())

    lines = [
        f"Active load     : {snapshot.active_load_kw:g} / {snapshot.grid_capacity_kw:g} kW ({load}){warning}",
        f"Green score     : {score}",
        f"Total delivered : {snapshot.total_delivered_kwh:.1f} kWh",
        f"Users           : {mix}",
        f"Solar / wind    : {snapshot.solar_now_kw:g} / {snapshot.wind_now_kw:g} kW"
        f" (net green {snapshot.net_green_available_kw:g} kW)",
        "",
        f"{'Slot':<6}{'Vehicle':<16}{'Mode':<14}Source",
    ]
    if not snapshot.live_sessions:
        lines.append("No active sessions")
    for session in snapshot.live_sessions:
        source = "Renewable" if session.is_renewable else "Conventional"
        lines.append(f"{'#' + str(session.slot_id):<6}{session.vehicle_number:<16}{session.mode:<14}{source}")
    return "\n".join(lines)


# ── commands ─────────────────────────────────────────────────


def _make_gate(client: EcoChargeClient, config: EcoChargeConfig) -> CredentialGate:
    return CredentialGate(
        client,
        FileCredentialStore(config.credential_path),
        credential_key=config.credential_key,
        notify=_print_notice,
    )


async def _cmd_connect(args: argparse.Namespace, config: EcoChargeConfig) -> int:
    async with EcoChargeClient(config) as client:
        flow = ConnectionFlow(client, notify=_print_notice)
        flow.composer.load(VehicleIdentifier.parse(args.vehicle))
        flow.select_mode(_MODE_CHOICES[args.mode])
        if args.kwh is not None:
            flow.set_limit(args.kwh)
        outcome = await flow.submit()
    if outcome is None:
        return EXIT_FAILED
    print(render_outcome(outcome))
    return EXIT_OK


async def _cmd_login(args: argparse.Namespace, config: EcoChargeConfig) -> int:
    password = args.password if args.password is not None else getpass.getpass("Password: ")
    async with EcoChargeClient(config) as client:
        gate = _make_gate(client, config)
        ok = await gate.login(args.username, password)
    return EXIT_OK if ok else EXIT_FAILED


async def _cmd_logout(_args: argparse.Namespace, config: EcoChargeConfig) -> int:
    async with EcoChargeClient(config) as client:
        _make_gate(client, config).logout()
    print("Logged out")
    return EXIT_OK


async def _cmd_dashboard(args: argparse.Namespace, config: EcoChargeConfig) -> int:
    async with EcoChargeClient(config) as client:
        gate = _make_gate(client, config)
        if gate.initialize() is not GateState.AUTHENTICATED:
            print("Not logged in; run 'pyecocharge login' first", file=sys.stderr)
            return EXIT_NOT_AUTHENTICATED

        first = asyncio.Event()

        def _show(snapshot: DashboardSnapshot) -> None:
            if not args.once:
                print(f"\n── {datetime.now():%H:%M:%S} " + "─" * 40)
            print(render_snapshot(snapshot))
            first.set()

        async with SyncLoop(client, interval=config.poll_interval, on_snapshot=_show) as loop:
            loop.attach(gate)
            if not args.once:
                # Runs until interrupted.
                await asyncio.Event().wait()
                return EXIT_OK
            try:
                await asyncio.wait_for(first.wait(), timeout=config.request_timeout + config.poll_interval)
            except TimeoutError:
                error = loop.last_error
                print(f"No dashboard data received: {error or 'timed out'}", file=sys.stderr)
                return EXIT_FAILED
    return EXIT_OK


# ── entry point ──────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pyecocharge", description="EcoCharge network console")
    parser.add_argument("--base-url", help="Service base URL (default: $ECOCHARGE_BASE_URL or http://127.0.0.1:8000)")
    parser.add_argument("--credential-path", type=Path, help="Credential file (default: $ECOCHARGE_CREDENTIAL_PATH)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    connect = sub.add_parser("connect", help="Authorize a charging session for a vehicle")
    connect.add_argument("vehicle", help=f"Vehicle number, e.g. {_IDENTIFIER_HINT}")
    connect.add_argument("--mode", choices=sorted(_MODE_CHOICES), default="now", help="Charging mode (default: now)")
    connect.add_argument("--kwh", type=int, help="Energy limit for --mode custom (10-100)")
    connect.set_defaults(handler=_cmd_connect)

    login = sub.add_parser("login", help="Log in as administrator and remember the credential")
    login.add_argument("--username", "-u", required=True)
    login.add_argument("--password", "-p", help="Password (prompted when omitted)")
    login.set_defaults(handler=_cmd_login)

    logout = sub.add_parser("logout", help="Forget the stored administrator credential")
    logout.set_defaults(handler=_cmd_logout)

    dashboard = sub.add_parser("dashboard", help="Show the live network dashboard")
    dashboard.add_argument("--once", action="store_true", help="Print one snapshot and exit")
    dashboard.set_defaults(handler=_cmd_dashboard)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, Any] = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.credential_path:
        overrides["credential_path"] = args.credential_path

    try:
        config = EcoChargeConfig.from_env(**overrides)
        if args.command == "connect" and args.kwh is not None and args.mode != "custom":
            parser.error("--kwh requires --mode custom")
        return asyncio.run(args.handler(args, config))
    except EcoChargeConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_FAILED
    except EcoChargeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FAILED
    except KeyboardInterrupt:
        return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
