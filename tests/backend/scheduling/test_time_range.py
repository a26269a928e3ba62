from datetime import datetime

import pytest

from backend.scheduling.errors import InvalidDate, InvalidRange
from backend.scheduling.time_range import TimeRange, parse_timestamp


def _range(start_hour: int, start_minute: int, end_hour: int, end_minute: int) -> TimeRange:
    return TimeRange(
        datetime(2026, 1, 5, start_hour, start_minute),
        datetime(2026, 1, 5, end_hour, end_minute),
    )


@pytest.mark.parametrize(
    ('first', 'second'),
    [
        (_range(10, 0, 10, 30), _range(10, 15, 10, 45)),
        (_range(10, 15, 10, 45), _range(10, 0, 10, 30)),
        (_range(10, 0, 11, 0), _range(10, 15, 10, 30)),
        (_range(10, 15, 10, 30), _range(10, 0, 11, 0)),
        (_range(10, 0, 10, 30), _range(10, 0, 10, 30)),
        (_range(10, 0, 10, 1), _range(10, 0, 10, 30)),
    ],
)
def test_overlaps_detects_intersecting_ranges(first: TimeRange, second: TimeRange) -> None:
    assert first.overlaps(second)
    assert second.overlaps(first)


@pytest.mark.parametrize(
    ('first', 'second'),
    [
        (_range(10, 0, 10, 30), _range(10, 30, 11, 0)),
        (_range(10, 30, 11, 0), _range(10, 0, 10, 30)),
        (_range(9, 0, 9, 30), _range(10, 0, 10, 30)),
    ],
)
def test_overlaps_rejects_adjacent_and_disjoint_ranges(first: TimeRange, second: TimeRange) -> None:
    assert not first.overlaps(second)
    assert not second.overlaps(first)


@pytest.mark.parametrize(
    'end',
    [datetime(2026, 1, 5, 10, 0), datetime(2026, 1, 5, 9, 59)],
)
def test_time_range_requires_end_after_start(end: datetime) -> None:
    with pytest.raises(InvalidRange) as exception_info:
        TimeRange(datetime(2026, 1, 5, 10, 0), end)

    assert exception_info.value.message == 'endAt must be after startAt'


def test_starting_at_builds_range_of_given_length() -> None:
    time_range = TimeRange.starting_at(datetime(2026, 1, 5, 10, 0), 30)

    assert time_range.end == datetime(2026, 1, 5, 10, 30)


def test_parse_timestamp_normalizes_offsets_to_naive_utc() -> None:
    assert parse_timestamp('2026-01-05T10:00:00Z', 'startAt') == datetime(2026, 1, 5, 10, 0)
    assert parse_timestamp('2026-01-05T15:30:00+05:30', 'startAt') == datetime(2026, 1, 5, 10, 0)
    assert parse_timestamp(datetime(2026, 1, 5, 10, 0), 'startAt') == datetime(2026, 1, 5, 10, 0)


@pytest.mark.parametrize('value', ['not-a-date', '2026-13-40T10:00', '', None])
def test_parse_timestamp_rejects_unparseable_values(value) -> None:
    with pytest.raises(InvalidDate) as exception_info:
        parse_timestamp(value, 'endAt')

    assert exception_info.value.message == 'Invalid endAt'
    assert exception_info.value.status_code == 400
