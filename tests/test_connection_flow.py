from __future__ import annotations

import asyncio
from decimal import Decimal

import pytest

from pyecocharge.connection import ConnectionFlow, ConnectionState
from pyecocharge.exceptions import EcoChargeApiError, EcoChargeBusyError, EcoChargeTransportError
from pyecocharge.models.connection import ConnectionOutcome
from pyecocharge.models.identifier import VehicleIdentifier
from pyecocharge.models.mode import ChargingMode, ChargingModeSelection
from pyecocharge.notices import Notice, NoticeLevel


def _outcome(slot_id: int = 7) -> ConnectionOutcome:
    return ConnectionOutcome.model_validate({"slot_id": slot_id, "Initial_Source": "RENEWABLE", "Est_Bill": 120.5})


class _FakeConnector:
    def __init__(self, outcome: ConnectionOutcome | None = None, error: Exception | None = None) -> None:
        self.outcome = outcome or _outcome()
        self.error = error
        self.calls: list[tuple[VehicleIdentifier, ChargingModeSelection]] = []

    async def connect(self, identifier: VehicleIdentifier, selection: ChargingModeSelection) -> ConnectionOutcome:
        self.calls.append((identifier, selection))
        if self.error is not None:
            raise self.error
        return self.outcome


class _GatedConnector:
    """Blocks every connect until released."""

    def __init__(self) -> None:
        self.release = asyncio.Event()
        self.started = asyncio.Event()
        self.error: Exception | None = None
        self.calls = 0

    async def connect(self, _identifier: VehicleIdentifier, _selection: ChargingModeSelection) -> ConnectionOutcome:
        self.calls += 1
        self.started.set()
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return _outcome()


def _ready_flow(client: object, notices: list[Notice] | None = None) -> ConnectionFlow:
    flow = ConnectionFlow(client, notify=notices.append if notices is not None else None)  # type: ignore[arg-type]
    flow.composer.load(VehicleIdentifier.parse("KA-12-AB-3456"))
    return flow


@pytest.mark.asyncio
async def test_submit_authorizes_bounded_session() -> None:
    client = _FakeConnector()
    notices: list[Notice] = []
    flow = _ready_flow(client, notices)
    states: list[ConnectionState] = []
    flow.add_listener(states.append)

    flow.select_mode(ChargingMode.BOUNDED)
    flow.set_limit(30)
    assert flow.can_submit

    outcome = await flow.submit()

    assert outcome is not None
    assert outcome.slot_id == 7
    assert outcome.is_renewable
    assert outcome.estimated_bill == Decimal("120.50")
    assert flow.state is ConnectionState.AUTHORIZED
    assert flow.outcome == outcome
    assert states == [ConnectionState.SUBMITTING, ConnectionState.AUTHORIZED]
    assert notices == [Notice(NoticeLevel.SUCCESS, "Vehicle connected successfully!")]

    identifier, selection = client.calls[0]
    assert identifier.composed == "KA-12-AB-3456"
    assert selection == ChargingModeSelection.bounded(30)


@pytest.mark.asyncio
async def test_incomplete_identifier_never_reaches_network() -> None:
    client = _FakeConnector()
    notices: list[Notice] = []
    flow = ConnectionFlow(client, notify=notices.append)
    flow.composer.set_segment(0, "KA")

    assert not flow.can_submit
    assert await flow.submit() is None

    assert client.calls == []
    assert flow.state is ConnectionState.IDLE
    assert notices == [Notice(NoticeLevel.ERROR, "Please enter a valid vehicle number")]
    assert flow.last_error is not None


@pytest.mark.asyncio
async def test_server_detail_is_shown_and_flow_returns_to_idle() -> None:
    error = EcoChargeApiError("HTTP 400", status_code=400, detail="Station full")
    notices: list[Notice] = []
    flow = _ready_flow(_FakeConnector(error=error), notices)
    states: list[ConnectionState] = []
    flow.add_listener(states.append)

    assert await flow.submit() is None

    assert states == [ConnectionState.SUBMITTING, ConnectionState.FAILED, ConnectionState.IDLE]
    assert flow.state is ConnectionState.IDLE
    assert flow.outcome is None
    assert flow.last_error is error
    assert notices == [Notice(NoticeLevel.ERROR, "Station full")]
    # identifier kept for a retry
    assert flow.can_submit


@pytest.mark.asyncio
async def test_failure_without_detail_uses_generic_message() -> None:
    notices: list[Notice] = []
    flow = _ready_flow(_FakeConnector(error=EcoChargeTransportError("boom", endpoint="/connect")), notices)

    await flow.submit()

    assert notices == [Notice(NoticeLevel.ERROR, "Connection failed")]


@pytest.mark.asyncio
async def test_second_submit_while_in_flight_is_rejected() -> None:
    client = _GatedConnector()
    flow = _ready_flow(client)

    first = asyncio.create_task(flow.submit())
    await client.started.wait()
    assert flow.state is ConnectionState.SUBMITTING
    assert not flow.can_submit

    with pytest.raises(EcoChargeBusyError):
        await flow.submit()

    client.release.set()
    assert await first is not None
    assert client.calls == 1


@pytest.mark.asyncio
async def test_submit_while_authorized_requires_reset() -> None:
    flow = _ready_flow(_FakeConnector())
    await flow.submit()

    with pytest.raises(EcoChargeBusyError):
        await flow.submit()


@pytest.mark.asyncio
async def test_reset_clears_outcome_identifier_and_mode() -> None:
    flow = _ready_flow(_FakeConnector())
    flow.select_mode(ChargingMode.OPTIMIZED)
    await flow.submit()

    flow.reset()

    assert flow.state is ConnectionState.IDLE
    assert flow.outcome is None
    assert flow.composer.identifier.is_empty()
    assert flow.selection == ChargingModeSelection.immediate()


@pytest.mark.asyncio
async def test_result_arriving_after_reset_is_discarded() -> None:
    client = _GatedConnector()
    notices: list[Notice] = []
    flow = _ready_flow(client, notices)

    pending = asyncio.create_task(flow.submit())
    await client.started.wait()
    flow.reset()
    assert flow.state is ConnectionState.IDLE

    # still in flight until the request settles
    flow.composer.load(VehicleIdentifier.parse("KA-12-AB-3456"))
    assert not flow.can_submit

    client.release.set()
    assert await pending is None
    assert flow.state is ConnectionState.IDLE
    assert flow.outcome is None
    assert notices == []
    assert flow.can_submit


@pytest.mark.asyncio
async def test_failure_arriving_after_reset_is_discarded() -> None:
    client = _GatedConnector()
    client.error = EcoChargeApiError("HTTP 500", status_code=500, detail="late")
    notices: list[Notice] = []
    flow = _ready_flow(client, notices)

    pending = asyncio.create_task(flow.submit())
    await client.started.wait()
    flow.reset()
    client.release.set()

    assert await pending is None
    assert flow.last_error is None
    assert notices == []


@pytest.mark.asyncio
async def test_cancelled_submit_returns_to_idle() -> None:
    client = _GatedConnector()
    flow = _ready_flow(client)

    pending = asyncio.create_task(flow.submit())
    await client.started.wait()
    pending.cancel()
    with pytest.raises(asyncio.CancelledError):
        await pending

    assert flow.state is ConnectionState.IDLE
    assert flow.can_submit


@pytest.mark.asyncio
async def test_explicit_arguments_override_composer() -> None:
    client = _FakeConnector()
    flow = ConnectionFlow(client)

    await flow.submit(VehicleIdentifier.parse("MH01CD0001"), ChargingModeSelection.optimized())

    identifier, selection = client.calls[0]
    assert identifier.composed == "MH-01-CD-0001"
    assert selection.mode is ChargingMode.OPTIMIZED


@pytest.mark.asyncio
async def test_failing_notice_callback_does_not_break_flow() -> None:
    def _boom(_notice: Notice) -> None:
        raise RuntimeError("toast layer gone")

    flow = ConnectionFlow(_FakeConnector(), notify=_boom)
    flow.composer.load(VehicleIdentifier.parse("KA-12-AB-3456"))

    assert await flow.submit() is not None
    assert flow.state is ConnectionState.AUTHORIZED


@pytest.mark.asyncio
async def test_unexpected_error_propagates_and_flow_returns_to_idle() -> None:
    flow = _ready_flow(_FakeConnector(error=RuntimeError("decoder bug")))
    states: list[ConnectionState] = []
    flow.add_listener(states.append)

    with pytest.raises(RuntimeError):
        await flow.submit()

    assert states == [ConnectionState.SUBMITTING, ConnectionState.IDLE]
    assert flow.can_submit
