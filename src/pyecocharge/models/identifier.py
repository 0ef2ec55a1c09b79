"""Vehicle identifier model.

A vehicle identifier is made of four fixed-format segments, e.g.
``KA-12-AB-3456``:

====  ==========  =======  ======
idx   field       kind     length
====  ==========  =======  ======
0     region      letters  2
1     series      digits   2
2     class       letters  2
3     serial      digits   4
====  ==========  =======  ======

Segments may be partially filled while the operator types; the identifier is
*valid* only once every segment is at its full length.
"""

from __future__ import annotations

import dataclasses
import re
import string
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

SEPARATOR = "-"

_SPLIT_RE = re.compile(r"[\s\-_./]+")


class SegmentKind(StrEnum):
    LETTERS = "letters"
    DIGITS = "digits"


@dataclasses.dataclass(frozen=True, slots=True)
class SegmentSpec:
    """Format of one identifier segment."""

    name: str
    kind: SegmentKind
    length: int
    placeholder: str

    @property
    def alphabet(self) -> str:
        if self.kind is SegmentKind.LETTERS:
            return string.ascii_uppercase
        return string.digits


SEGMENTS: tuple[SegmentSpec, ...] = (
    SegmentSpec("region", SegmentKind.LETTERS, 2, "AA"),
    SegmentSpec("series", SegmentKind.DIGITS, 2, "11"),
    SegmentSpec("vehicle_class", SegmentKind.LETTERS, 2, "AA"),
    SegmentSpec("serial", SegmentKind.DIGITS, 4, "1234"),
)


def segment_spec(index: int) -> SegmentSpec:
    """Return the format of segment *index*, raising ``IndexError`` when out of range."""
    if not 0 <= index < len(SEGMENTS):
        raise IndexError(f"segment index must be between 0 and {len(SEGMENTS) - 1}, got {index}")
    return SEGMENTS[index]


def format_segment(index: int, raw: str) -> str:
    """Normalise operator input for segment *index*.

    Letter segments are uppercased, then every character outside the
    segment's alphabet is dropped and the result is truncated to the
    segment length. Never raises for bad characters; they are just removed.
    """
    spec = segment_spec(index)
    text = raw.upper() if spec.kind is SegmentKind.LETTERS else raw
    allowed = spec.alphabet
    kept = "".join(ch for ch in text if ch in allowed)
    return kept[: spec.length]


class VehicleIdentifier(BaseModel):
    """Immutable identifier state; every update returns a new instance."""

    model_config = ConfigDict(frozen=True)

    region: str = ""
    series: str = ""
    vehicle_class: str = ""
    serial: str = ""

    @model_validator(mode="before")
    @classmethod
    def _normalise_segments(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        normalised = dict(values)
        if "class" in normalised and "vehicle_class" not in normalised:
            normalised["vehicle_class"] = normalised.pop("class")
        for index, spec in enumerate(SEGMENTS):
            value = normalised.get(spec.name)
            if value is not None:
                normalised[spec.name] = format_segment(index, str(value))
        return normalised

    @classmethod
    def parse(cls, text: str) -> VehicleIdentifier:
        """Build an identifier from text typed in one go.

        With separators (``KA-12-AB-3456``, ``ka 12 ab 3456``) each part
        fills one segment. Without them (``KA12AB3456``) characters are
        consumed in order, each segment taking as many matching characters
        as it can hold.
        """
        parts = [part for part in _SPLIT_RE.split(text.strip()) if part]
        if len(parts) > 1:
            values = {spec.name: parts[index] for index, spec in enumerate(SEGMENTS) if index < len(parts)}
            return cls(**values)

        remaining = text.strip().upper()
        consumed: dict[str, str] = {}
        for spec in SEGMENTS:
            taken = ""
            while remaining and len(taken) < spec.length and remaining[0] in spec.alphabet:
                taken += remaining[0]
                remaining = remaining[1:]
            consumed[spec.name] = taken
            if len(taken) < spec.length:
                break
        return cls(**consumed)

    @property
    def segments(self) -> tuple[str, str, str, str]:
        return (self.region, self.series, self.vehicle_class, self.serial)

    def segment(self, index: int) -> str:
        segment_spec(index)
        return self.segments[index]

    def is_segment_complete(self, index: int) -> bool:
        return len(self.segment(index)) == segment_spec(index).length

    def is_valid(self) -> bool:
        """Whether every segment is at its full length."""
        return all(self.is_segment_complete(index) for index in range(len(SEGMENTS)))

    def is_empty(self) -> bool:
        return not any(self.segments)

    def with_segment(self, index: int, raw: str) -> VehicleIdentifier:
        """Return a copy with segment *index* replaced by the normalised *raw*."""
        spec = segment_spec(index)
        values = {s.name: value for s, value in zip(SEGMENTS, self.segments, strict=True)}
        values[spec.name] = raw
        return VehicleIdentifier(**values)

    @property
    def composed(self) -> str:
        """Segments joined with ``-`` (``KA-12-AB-3456``)."""
        return SEPARATOR.join(self.segments)

    def __str__(self) -> str:
        return self.composed
