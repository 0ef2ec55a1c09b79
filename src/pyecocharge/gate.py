"""Credential gate for the admin dashboard.

The gate is a two-state switch, ``UNAUTHENTICATED`` / ``AUTHENTICATED``,
that decides whether the dashboard may synchronize.

Trust on presence: a credential found in the store at :meth:`CredentialGate.initialize`
opens the gate without contacting the service. The token is never checked
for expiry or revocation client-side; a caller that needs a liveness
guarantee must add its own check (e.g. one dashboard fetch) on top.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Protocol

from pyecocharge._constants import CREDENTIAL_KEY, MSG_LOGIN_FAILED, MSG_LOGIN_OK
from pyecocharge.exceptions import EcoChargeBusyError, EcoChargeError, EcoChargeStorageError
from pyecocharge.models.token import AdminCredential
from pyecocharge.notices import NoticeCallback, NoticeLevel, emit, failure_message
from pyecocharge.storage import CredentialStore

_logger = logging.getLogger(__name__)


class GateState(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class Authenticator(Protocol):
    async def login(self, username: str, password: str) -> AdminCredential:
        ...


class CredentialGate:
    """Owns the admin credential and the authenticated flag.

    Parameters
    ----------
    client
        Anything with an ``async login(username, password)``.
    store
        Durable store the credential is persisted in.
    credential_key
        Name of the store entry.
    notify
        Receives success and error notices.
    """

    def __init__(
        self,
        client: Authenticator,
        store: CredentialStore,
        *,
        credential_key: str = CREDENTIAL_KEY,
        notify: NoticeCallback | None = None,
    ) -> None:
        self._client = client
        self._store = store
        self._key = credential_key
        self._notify = notify
        self._state = GateState.UNAUTHENTICATED
        self._credential: AdminCredential | None = None
        self._username: str | None = None
        self._last_error: EcoChargeError | None = None
        self._generation = 0
        self._login_pending = False
        self._listeners: list[Callable[[GateState], None]] = []

    @property
    def state(self) -> GateState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state is GateState.AUTHENTICATED

    @property
    def credential(self) -> AdminCredential | None:
        return self._credential

    @property
    def token(self) -> str | None:
        return self._credential.token if self._credential is not None else None

    @property
    def username(self) -> str | None:
        """Name used for the last successful login; ``None`` after a restore."""
        return self._username

    @property
    def login_pending(self) -> bool:
        return self._login_pending

    @property
    def last_error(self) -> EcoChargeError | None:
        return self._last_error

    def add_listener(self, callback: Callable[[GateState], None]) -> Callable[[], None]:
        """Call *callback* on every state change. Returns an unsubscribe function."""
        self._listeners.append(callback)

        def _remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _remove

    def initialize(self) -> GateState:
        """Restore a persisted credential, opening the gate if one exists."""
        stored = self._store.get(self._key)
        if not stored:
            _logger.debug("No stored admin credential, gate stays closed")
            return self._state
        try:
            credential = AdminCredential(token=stored)
        except ValueError:
            _logger.warning("Ignoring blank stored admin credential")
            return self._state
        _logger.debug("Restored admin credential, opening gate")
        self._credential = credential
        self._set_state(GateState.AUTHENTICATED)
        return self._state

    async def login(self, username: str, password: str) -> bool:
        """Log in and persist the credential. Returns whether the gate is now open.

        Raises
        ------
        EcoChargeBusyError
            A login is already pending.
        """
        if self._login_pending:
            raise EcoChargeBusyError("A login request is already pending")

        generation = self._generation
        self._last_error = None
        self._login_pending = True
        try:
            credential = await self._client.login(username, password)
        except EcoChargeError as exc:
            self._login_pending = False
            if generation != self._generation:
                _logger.debug("Discarding login failure after logout: %s", exc)
                return False
            _logger.info("Admin login failed for %s: %s", username, exc)
            self._last_error = exc
            emit(self._notify, NoticeLevel.ERROR, failure_message(exc, MSG_LOGIN_FAILED))
            return self.is_authenticated
        finally:
            self._login_pending = False

        if generation != self._generation:
            _logger.debug("Discarding login result after logout")
            return False

        try:
            self._store.set(self._key, credential.token)
        except EcoChargeStorageError as exc:
            _logger.warning("Login succeeded but the credential could not be stored: %s", exc)
            self._last_error = exc
            emit(self._notify, NoticeLevel.ERROR, failure_message(exc, MSG_LOGIN_FAILED))
            return False

        self._credential = credential
        self._username = username
        self._set_state(GateState.AUTHENTICATED)
        emit(self._notify, NoticeLevel.SUCCESS, MSG_LOGIN_OK)
        return True

    def logout(self) -> None:
        """Forget the credential everywhere and close the gate.

        The gate closes even when the stored entry cannot be removed; the
        :class:`EcoChargeStorageError` is raised afterwards.
        """
        self._generation += 1
        self._credential = None
        self._username = None
        self._last_error = None
        try:
            self._store.delete(self._key)
        finally:
            self._set_state(GateState.UNAUTHENTICATED)

    def _set_state(self, state: GateState) -> None:
        if state is self._state:
            return
        _logger.debug("Gate state %s -> %s", self._state, state)
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                _logger.exception("Gate state listener failed")

