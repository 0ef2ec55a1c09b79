"""Periodic dashboard synchronization.

:class:`SyncLoop` fetches a :class:`~pyecocharge.models.dashboard.DashboardSnapshot`
immediately on start and then every ``interval`` seconds until stopped.

Cadence policy: fetches are dispatched on a fixed cadence without waiting
for the previous one to finish, so a fetch slower than the interval overlaps
the next. Each dispatch gets a sequence number and a response is applied
only if it is newer than the held snapshot; a slow fetch never overwrites a
fresher one.

A failed fetch is logged and skipped: the previous snapshot stays, and the
schedule continues unchanged. Stopping cancels the timer and every fetch in
flight; anything that still resolves afterwards is discarded.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any, Protocol

from pyecocharge._constants import DEFAULT_POLL_INTERVAL
from pyecocharge.exceptions import EcoChargeConfigError, EcoChargeError
from pyecocharge.gate import CredentialGate, GateState
from pyecocharge.models.dashboard import DashboardSnapshot

_logger = logging.getLogger(__name__)


class SnapshotSource(Protocol):
    async def get_dashboard_stats(self, *, token: str | None = None) -> DashboardSnapshot:
        ...


class SyncLoop:
    """Cancellable periodic fetch of dashboard snapshots.

    Parameters
    ----------
    client
        Anything with an ``async get_dashboard_stats(token=...)``.
    interval
        Seconds between two dispatches.
    on_snapshot
        Called with every snapshot that replaces the held one.
    sleep
        Timer source; ``asyncio.sleep`` unless a test substitutes its own.
    """

    def __init__(
        self,
        client: SnapshotSource,
        *,
        interval: float = DEFAULT_POLL_INTERVAL,
        on_snapshot: Callable[[DashboardSnapshot], None] | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if interval <= 0:
            raise EcoChargeConfigError(f"interval must be positive, got {interval}")
        self._client = client
        self._interval = interval
        self._on_snapshot = on_snapshot
        self._sleep = sleep
        self._token_provider: Callable[[], str | None] | None = None
        self._detach: Callable[[], None] | None = None

        self._timer: asyncio.Task[None] | None = None
        self._fetches: set[asyncio.Task[None]] = set()
        # Bumped on every start/stop; fetches from another generation are stale.
        self._generation = 0
        self._dispatched = 0
        self._applied = 0

        self._snapshot: DashboardSnapshot | None = None
        self._updated_at: datetime | None = None
        self._last_error: BaseException | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> DashboardSnapshot | None:
        """Latest snapshot, ``None`` before the first successful fetch."""
        return self._snapshot

    @property
    def updated_at(self) -> datetime | None:
        return self._updated_at

    @property
    def last_error(self) -> BaseException | None:
        """Failure of the most recent fetch, cleared by the next success."""
        return self._last_error

    @property
    def is_running(self) -> bool:
        return self._timer is not None

    @property
    def interval(self) -> float:
        return self._interval

    # ------------------------------------------------------------------
    # Gate binding
    # ------------------------------------------------------------------

    def attach(self, gate: CredentialGate) -> None:
        """Follow *gate*: run while it is open, stop when it closes."""
        self.detach()
        self._token_provider = lambda: gate.token
        self._detach = gate.add_listener(self._on_gate_state)
        if gate.is_authenticated:
            self.start()

    def detach(self) -> None:
        if self._detach is not None:
            self._detach()
            self._detach = None
        self._token_provider = None

    def _on_gate_state(self, state: GateState) -> None:
        if state is GateState.AUTHENTICATED:
            self.start()
        else:
            self.stop()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Fetch now, then every interval. No-op when already running.

        Must be called from within a running event loop.
        """
        if self._timer is not None:
            return
        self._generation += 1
        self._snapshot = None
        self._updated_at = None
        self._last_error = None
        _logger.debug("Starting dashboard sync every %.1fs", self._interval)
        self._timer = asyncio.create_task(self._run(self._generation), name="pyecocharge-sync")
        self._timer.add_done_callback(self._on_timer_done)

    def stop(self) -> None:
        """Cancel the timer and in-flight fetches and drop the held snapshot."""
        if self._timer is None:
            return
        _logger.debug("Stopping dashboard sync")
        self._generation += 1
        self._timer.cancel()
        self._timer = None
        for task in list(self._fetches):
            task.cancel()
        self._snapshot = None
        self._updated_at = None

    def close(self) -> None:
        """Tear down: stop and stop following the gate."""
        self.stop()
        self.detach()

    async def aclose(self) -> None:
        """Like :meth:`close`, then wait for cancelled tasks to finish."""
        timer = self._timer
        pending = list(self._fetches)
        self.close()
        tasks = [task for task in (timer, *pending) if task is not None]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def __aenter__(self) -> SyncLoop:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Ticks
    # ------------------------------------------------------------------

    async def _run(self, generation: int) -> None:
        while generation == self._generation:
            self._dispatch(generation)
            await self._sleep(self._interval)

    def _on_timer_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        _logger.error("Dashboard sync stopped: timer failed", exc_info=exc)
        if self._timer is task:
            self._timer = None
            self._last_error = exc

    def _dispatch(self, generation: int) -> None:
        self._dispatched += 1
        task = asyncio.create_task(self._tick(generation, self._dispatched))
        self._fetches.add(task)
        task.add_done_callback(self._fetches.discard)

    async def _tick(self, generation: int, sequence: int) -> None:
        token = self._token_provider() if self._token_provider is not None else None
        try:
            snapshot = await self._client.get_dashboard_stats(token=token)
        except EcoChargeError as exc:
            if generation == self._generation:
                self._last_error = exc
                _logger.warning("Dashboard fetch #%d failed, keeping last snapshot: %s", sequence, exc)
            return
        except Exception as exc:
            if generation == self._generation:
                self._last_error = exc
                _logger.exception("Dashboard fetch #%d failed unexpectedly", sequence)
            return

        if generation != self._generation:
            _logger.debug("Discarding dashboard fetch #%d resolved after stop", sequence)
            return
        if sequence < self._applied:
            _logger.debug("Discarding dashboard fetch #%d, #%d already applied", sequence, self._applied)
            return

        self._applied = sequence
        self._snapshot = snapshot
        self._updated_at = datetime.now(UTC)
        self._last_error = None
        if self._on_snapshot is not None:
            try:
                self._on_snapshot(snapshot)
            except Exception:
                _logger.exception("Snapshot callback failed")
