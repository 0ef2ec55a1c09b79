"""Vehicle identifier composer.

Holds the identifier while the operator types it segment by segment. The
formatting itself is the pure :func:`~pyecocharge.models.identifier.format_segment`;
moving the input focus to the next segment is a separate side effect,
reported through ``on_focus_advance``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from pyecocharge.models.identifier import SEGMENTS, VehicleIdentifier, segment_spec

_logger = logging.getLogger(__name__)


def next_focus(identifier: VehicleIdentifier, index: int) -> int | None:
    """Segment that should receive focus after editing segment *index*.

    ``None`` means focus stays where it is: the segment is not full yet, or
    it is the last one.
    """
    if identifier.is_segment_complete(index) and index + 1 < len(SEGMENTS):
        return index + 1
    return None


class IdentifierComposer:
    """Mutable holder for the identifier being composed. No I/O."""

    def __init__(self, *, on_focus_advance: Callable[[int], None] | None = None) -> None:
        self._identifier = VehicleIdentifier()
        self._focus = 0
        self._on_focus_advance = on_focus_advance

    @property
    def identifier(self) -> VehicleIdentifier:
        return self._identifier

    @property
    def focus(self) -> int:
        """Index of the segment currently receiving input."""
        return self._focus

    def set_segment(self, index: int, raw: str) -> VehicleIdentifier:
        """Replace segment *index* with the normalised *raw* input and return the new state."""
        segment_spec(index)
        self._identifier = self._identifier.with_segment(index, raw)
        self._focus = index
        target = next_focus(self._identifier, index)
        if target is not None:
            self._advance_focus(target)
        return self._identifier

    def load(self, identifier: VehicleIdentifier) -> VehicleIdentifier:
        """Fill every segment from *identifier*, as if typed in order."""
        for index, value in enumerate(identifier.segments):
            self.set_segment(index, value)
        return self._identifier

    def is_valid(self) -> bool:
        return self._identifier.is_valid()

    def reset(self) -> None:
        self._identifier = VehicleIdentifier()
        self._focus = 0

    def _advance_focus(self, index: int) -> None:
        self._focus = index
        if self._on_focus_advance is None:
            return
        try:
            self._on_focus_advance(index)
        except Exception:
            _logger.exception("Focus callback failed for segment %d", index)
