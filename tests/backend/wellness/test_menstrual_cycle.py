from datetime import date, timedelta

import pytest

from backend.wellness.menstrual_cycle import (
    CyclePrediction,
    analyze_cycle_regularity,
    average_cycle_length,
    calculate_next_period,
    common_symptoms,
    derive_cycle_lengths,
    get_current_phase,
)

LAST_START = date(2026, 3, 1)


def test_calculate_next_period_without_start_returns_empty_prediction() -> None:
    assert calculate_next_period(None, [28, 29, 30]) == CyclePrediction()


def test_calculate_next_period_uses_average_of_last_three_cycles() -> None:
    prediction = calculate_next_period(LAST_START, [20, 28, 30, 35])

    # (28 + 30 + 35) / 3 = 31
    assert prediction.next_period_date == LAST_START + timedelta(days=31)
    assert prediction.ovulation_date == LAST_START + timedelta(days=17)
    assert prediction.fertile_window_start == LAST_START + timedelta(days=12)
    assert prediction.fertile_window_end == LAST_START + timedelta(days=18)


def test_calculate_next_period_rounds_half_up() -> None:
    prediction = calculate_next_period(LAST_START, [28, 29])

    assert prediction.next_period_date == LAST_START + timedelta(days=29)


def test_calculate_next_period_falls_back_to_average_length() -> None:
    prediction = calculate_next_period(LAST_START, [None, 0], average_cycle_length=30)

    assert prediction.next_period_date == LAST_START + timedelta(days=30)


@pytest.mark.parametrize(
    ('cycle_lengths', 'expected'),
    [
        ([], 'unknown'),
        ([28, 29], 'unknown'),
        ([28, None, 0, 29], 'unknown'),
        ([28, 29, 28, 30], 'regular'),
        ([21, 35, 28], 'irregular'),
    ],
)
def test_analyze_cycle_regularity(cycle_lengths, expected: str) -> None:
    assert analyze_cycle_regularity(cycle_lengths) == expected


@pytest.mark.parametrize(
    ('days_since_start', 'expected'),
    [
        (0, 'menstrual'),
        (5, 'menstrual'),
        (6, 'follicular'),
        (14, 'follicular'),
        (17, 'ovulation'),
        (18, 'luteal'),
    ],
)
def test_get_current_phase(days_since_start: int, expected: str) -> None:
    today = LAST_START + timedelta(days=days_since_start)

    assert get_current_phase(LAST_START, today=today) == expected


def test_get_current_phase_without_start_is_unknown() -> None:
    assert get_current_phase(None) == 'unknown'


def test_derive_cycle_lengths_fills_gaps_between_starts() -> None:
    starts = [date(2026, 1, 1), date(2026, 1, 31), date(2026, 3, 2)]

    assert derive_cycle_lengths(starts, [None, None, None]) == [None, 30, 30]
    assert derive_cycle_lengths(starts, [27, 26, None]) == [27, 26, 30]


def test_average_cycle_length_rounds_half_up_and_falls_back() -> None:
    assert average_cycle_length([None, 28, 29]) == 29
    assert average_cycle_length([None, 0], default=31) == 31


def test_common_symptoms_counts_types_and_keeps_top_five() -> None:
    history = [
        [{'type': 'cramps'}, {'type': 'bloating'}, {'severity': 'low'}],
        [{'type': 'cramps'}, {'type': 'acne'}, {'type': 'fatigue'}, {'type': 'headache'}],
        None,
    ]

    assert common_symptoms(history) == [
        ('cramps', 2),
        ('bloating', 1),
        ('unknown', 1),
        ('acne', 1),
        ('fatigue', 1),
    ]
