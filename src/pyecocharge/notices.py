"""User-facing notices (the console's transient toasts)."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable
from enum import StrEnum

from pyecocharge.exceptions import (
    EcoChargeApiError,
    EcoChargeError,
    EcoChargeStorageError,
    EcoChargeValidationError,
)

_logger = logging.getLogger(__name__)


class NoticeLevel(StrEnum):
    SUCCESS = "success"
    ERROR = "error"


@dataclasses.dataclass(frozen=True, slots=True)
class Notice:
    level: NoticeLevel
    message: str


NoticeCallback = Callable[[Notice], None]


def failure_message(exc: EcoChargeError, fallback: str) -> str:
    """Reason to show for *exc*: the server detail when there is one, else *fallback*."""
    if isinstance(exc, EcoChargeApiError) and exc.detail:
        return exc.detail
    if isinstance(exc, (EcoChargeValidationError, EcoChargeStorageError)):
        return str(exc)
    return fallback


def emit(callback: NoticeCallback | None, level: NoticeLevel, message: str) -> None:
    """Deliver a notice; a failing callback is logged and otherwise ignored."""
    if callback is None:
        return
    try:
        callback(Notice(level, message))
    except Exception:
        _logger.exception("Notice callback failed for %s notice", level)
