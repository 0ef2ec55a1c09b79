"""Connection request lifecycle for the charging terminal.

States::

    IDLE --submit--> SUBMITTING --ok--> AUTHORIZED --reset--> IDLE
                          |
                          +--error--> FAILED --> IDLE

``FAILED`` is transient: listeners see it, then the flow settles in
``IDLE`` so the operator can retry. Only one request can be in flight.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Protocol

from pyecocharge._constants import MSG_CONNECT_FAILED, MSG_CONNECT_OK, MSG_INVALID_VEHICLE
from pyecocharge.exceptions import EcoChargeBusyError, EcoChargeError, EcoChargeValidationError
from pyecocharge.identifier import IdentifierComposer
from pyecocharge.models.connection import ConnectionOutcome
from pyecocharge.models.identifier import VehicleIdentifier
from pyecocharge.models.mode import ChargingMode, ChargingModeSelection
from pyecocharge.notices import NoticeCallback, NoticeLevel, emit, failure_message

_logger = logging.getLogger(__name__)


class ConnectionState(StrEnum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    AUTHORIZED = "authorized"
    FAILED = "failed"


class Connector(Protocol):
    async def connect(
        self,
        identifier: VehicleIdentifier,
        selection: ChargingModeSelection,
    ) -> ConnectionOutcome:
        ...


class ConnectionFlow:
    """Turns a valid identifier and a mode choice into an authorization.

    Parameters
    ----------
    client
        Anything with an ``async connect(identifier, selection)``, usually
        an :class:`~pyecocharge.client.EcoChargeClient`.
    composer
        Identifier composer the terminal types into. A fresh one is
        created when omitted.
    notify
        Receives success and error notices.
    """

    def __init__(
        self,
        client: Connector,
        *,
        composer: IdentifierComposer | None = None,
        notify: NoticeCallback | None = None,
    ) -> None:
        self._client = client
        self.composer = composer if composer is not None else IdentifierComposer()
        self._notify = notify
        self._selection = ChargingModeSelection.immediate()
        self._state = ConnectionState.IDLE
        self._outcome: ConnectionOutcome | None = None
        self._last_error: EcoChargeError | None = None
        # Bumped by reset(); a response from an older generation is dropped.
        self._generation = 0
        # Stays set until the request settles, even across reset().
        self._in_flight = False
        self._listeners: list[Callable[[ConnectionState], None]] = []

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def outcome(self) -> ConnectionOutcome | None:
        """Authorization, held only while ``AUTHORIZED``."""
        return self._outcome

    @property
    def selection(self) -> ChargingModeSelection:
        return self._selection

    @property
    def last_error(self) -> EcoChargeError | None:
        return self._last_error

    @property
    def can_submit(self) -> bool:
        """Whether the connect trigger should be enabled."""
        return self._state is ConnectionState.IDLE and not self._in_flight and self.composer.is_valid()

    def add_listener(self, callback: Callable[[ConnectionState], None]) -> Callable[[], None]:
        """Call *callback* on every state change. Returns an unsubscribe function."""
        self._listeners.append(callback)

        def _remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _remove

    def select_mode(self, mode: ChargingMode) -> ChargingModeSelection:
        self._selection = self._selection.switch_to(mode)
        return self._selection

    def set_limit(self, limit_kwh: int) -> ChargingModeSelection:
        """Set the ``BOUNDED`` energy limit (10-100 kWh)."""
        self._selection = self._selection.with_limit(limit_kwh)
        return self._selection

    async def submit(
        self,
        identifier: VehicleIdentifier | None = None,
        selection: ChargingModeSelection | None = None,
    ) -> ConnectionOutcome | None:
        """Send the connect request.

        Uses the composer's identifier and the current selection unless
        given explicitly. Returns the outcome, or ``None`` when the attempt
        failed; the failure is then in :attr:`last_error` and was sent as an
        error notice.

        Raises
        ------
        EcoChargeBusyError
            A request is already in flight, or the flow is still authorized
            (call :meth:`reset` first).
        """
        if self._in_flight:
            raise EcoChargeBusyError("A connect request is already in flight")
        if self._state is ConnectionState.AUTHORIZED:
            raise EcoChargeBusyError("Vehicle already authorized; reset before connecting again")

        identifier = identifier if identifier is not None else self.composer.identifier
        selection = selection if selection is not None else self._selection

        if not identifier.is_valid():
            _logger.debug("Connect rejected locally, incomplete identifier %r", identifier.composed)
            self._last_error = EcoChargeValidationError(MSG_INVALID_VEHICLE)
            emit(self._notify, NoticeLevel.ERROR, MSG_INVALID_VEHICLE)
            return None

        generation = self._generation
        self._last_error = None
        self._in_flight = True
        self._set_state(ConnectionState.SUBMITTING)
        try:
            outcome = await self._client.connect(identifier, selection)
        except EcoChargeError as exc:
            self._in_flight = False
            if generation != self._generation:
                _logger.debug("Discarding connect failure after reset: %s", exc)
                return None
            _logger.info("Connect failed for %s: %s", identifier.composed, exc)
            self._last_error = exc
            self._set_state(ConnectionState.FAILED)
            emit(self._notify, NoticeLevel.ERROR, failure_message(exc, MSG_CONNECT_FAILED))
            self._set_state(ConnectionState.IDLE)
            return None
        except BaseException:
            # Cancelled, or an error outside the taxonomy: back to IDLE, then propagate.
            self._in_flight = False
            if generation == self._generation:
                self._set_state(ConnectionState.IDLE)
            raise
        finally:
            self._in_flight = False

        if generation != self._generation:
            _logger.debug("Discarding connect result for slot %s after reset", outcome.slot_id)
            return None

        self._outcome = outcome
        self._set_state(ConnectionState.AUTHORIZED)
        emit(self._notify, NoticeLevel.SUCCESS, MSG_CONNECT_OK)
        return outcome

    def reset(self) -> None:
        """Disconnect: drop the outcome and the identifier, back to ``IDLE``."""
        self._generation += 1
        self._outcome = None
        self._last_error = None
        self.composer.reset()
        self._selection = ChargingModeSelection.immediate()
        self._set_state(ConnectionState.IDLE)

    def _set_state(self, state: ConnectionState) -> None:
        if state is self._state:
            return
        _logger.debug("Connection state %s -> %s", self._state, state)
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                _logger.exception("Connection state listener failed")
