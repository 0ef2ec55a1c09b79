"""Durable client-local storage for the admin credential.

Entries live in one small JSON object file, ``{"admin_token": "..."}``,
rewritten atomically on every change. Values are stored in clear text.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from pyecocharge.exceptions import EcoChargeStorageError

_logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    """Named string entries that survive process restarts.

    Implementations raise :class:`~pyecocharge.exceptions.EcoChargeStorageError`
    when the backing medium fails.
    """

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class FileCredentialStore:
    """:class:`CredentialStore` backed by a JSON file."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, str]:
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise EcoChargeStorageError(f"Cannot read credential file {self._path}: {exc}") from exc
        try:
            data = json.loads(raw.decode("utf-8"))
        except ValueError:
            _logger.warning("Ignoring unreadable credential file %s", self._path)
            return {}
        if not isinstance(data, dict):
            _logger.warning("Ignoring credential file %s: not a JSON object", self._path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        try:
            self._replace(data)
        except OSError as exc:
            raise EcoChargeStorageError(f"Cannot write credential file {self._path}: {exc}") from exc

    def _replace(self, data: dict[str, str]) -> None:
        if not data:
            self._path.unlink(missing_ok=True)
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".credentials-", dir=self._path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        return value or None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)
        _logger.debug("Stored credential entry %s in %s", key, self._path)

    def delete(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is None:
            return
        self._write(data)
        _logger.debug("Deleted credential entry %s from %s", key, self._path)
