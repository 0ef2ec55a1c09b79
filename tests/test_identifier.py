from __future__ import annotations

import pytest

from pyecocharge.identifier import IdentifierComposer, next_focus
from pyecocharge.models.identifier import VehicleIdentifier, format_segment


@pytest.mark.parametrize(
    ("index", "raw", "expected"),
    [
        (0, "ka", "KA"),
        (0, "k1a", "KA"),
        (0, "KAX", "KA"),
        (1, "1a2", "12"),
        (1, "123", "12"),
        (2, "a-b", "AB"),
        (3, "34x56", "3456"),
        (3, "345678", "3456"),
        (3, "", ""),
    ],
)
def test_format_segment_filters_and_truncates(index: int, raw: str, expected: str) -> None:
    assert format_segment(index, raw) == expected


def test_format_segment_rejects_unknown_index() -> None:
    with pytest.raises(IndexError):
        format_segment(4, "12")


def test_format_segment_never_produces_digits_in_letter_segment() -> None:
    assert format_segment(2, "12") == ""


def test_identifier_validity_requires_every_segment_full() -> None:
    assert VehicleIdentifier(region="KA", series="12", vehicle_class="AB", serial="3456").is_valid()
    assert not VehicleIdentifier(region="KA", series="12", vehicle_class="AB", serial="345").is_valid()
    assert not VehicleIdentifier().is_valid()
    assert VehicleIdentifier().is_empty()


def test_identifier_normalises_on_construction() -> None:
    identifier = VehicleIdentifier.model_validate({"region": "ka", "series": "1x2", "class": "ab", "serial": "3456"})
    assert identifier.composed == "KA-12-AB-3456"
    assert str(identifier) == "KA-12-AB-3456"


def test_with_segment_returns_new_instance() -> None:
    original = VehicleIdentifier(region="KA")
    updated = original.with_segment(1, "12")
    assert original.series == ""
    assert updated.segments == ("KA", "12", "", "")


@pytest.mark.parametrize(
    "text",
    ["KA-12-AB-3456", "ka 12 ab 3456", "KA12AB3456", "ka12ab3456"],
)
def test_parse_accepts_common_spellings(text: str) -> None:
    assert VehicleIdentifier.parse(text).composed == "KA-12-AB-3456"


def test_parse_stops_at_first_incomplete_segment() -> None:
    identifier = VehicleIdentifier.parse("K12AB3456")
    assert identifier.region == "K"
    assert identifier.series == ""
    assert not identifier.is_valid()


def test_next_focus_moves_only_when_segment_is_full() -> None:
    assert next_focus(VehicleIdentifier(region="K"), 0) is None
    assert next_focus(VehicleIdentifier(region="KA"), 0) == 1
    assert next_focus(VehicleIdentifier(serial="3456"), 3) is None


def test_composer_advances_focus_and_reports_it() -> None:
    advanced: list[int] = []
    composer = IdentifierComposer(on_focus_advance=advanced.append)

    composer.set_segment(0, "k")
    assert composer.focus == 0
    composer.set_segment(0, "ka")
    composer.set_segment(1, "12")
    composer.set_segment(2, "ab")
    composer.set_segment(3, "3456")

    assert advanced == [1, 2, 3]
    assert composer.focus == 3
    assert composer.is_valid()
    assert composer.identifier.composed == "KA-12-AB-3456"


def test_composer_survives_failing_focus_callback() -> None:
    def _boom(_index: int) -> None:
        raise RuntimeError("widget gone")

    composer = IdentifierComposer(on_focus_advance=_boom)
    composer.set_segment(0, "KA")
    assert composer.focus == 1
    assert composer.identifier.region == "KA"


def test_composer_load_and_reset() -> None:
    composer = IdentifierComposer()
    composer.load(VehicleIdentifier.parse("KA-12-AB-3456"))
    assert composer.is_valid()

    composer.reset()
    assert composer.identifier.is_empty()
    assert composer.focus == 0
