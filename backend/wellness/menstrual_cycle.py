"""Cycle predictions computed from a user's recorded period history."""

import math
from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

DEFAULT_CYCLE_LENGTH = 28
DEFAULT_PERIOD_LENGTH = 5
RECENT_CYCLES_CONSIDERED = 3
MIN_CYCLES_FOR_REGULARITY = 3
REGULAR_STD_DEV_DAYS = 3
LUTEAL_PHASE_DAYS = 14
FERTILE_DAYS_BEFORE_OVULATION = 5
FERTILE_DAYS_AFTER_OVULATION = 1
OVULATION_PHASE_DAYS = 3
MAX_TRACKED_CYCLES = 12
TOP_SYMPTOMS = 5


@dataclass(frozen=True)
class CyclePrediction:
    next_period_date: Optional[date] = None
    ovulation_date: Optional[date] = None
    fertile_window_start: Optional[date] = None
    fertile_window_end: Optional[date] = None


def _positive_lengths(cycle_lengths: Iterable[Optional[int]]) -> list[int]:
    return [length for length in cycle_lengths if isinstance(length, int) and length > 0]


def calculate_next_period(
    last_period_start: Optional[date],
    cycle_lengths: Iterable[Optional[int]] = (),
    average_cycle_length: int = DEFAULT_CYCLE_LENGTH,
) -> CyclePrediction:
    if last_period_start is None:
        return CyclePrediction()

    recent = _positive_lengths(list(cycle_lengths)[-RECENT_CYCLES_CONSIDERED:])
    if recent:
        # Half-up rounding; round() would round 28.5 down to 28.
        predicted_length = math.floor(sum(recent) / len(recent) + 0.5)
    else:
        predicted_length = average_cycle_length

    next_period = last_period_start + timedelta(days=predicted_length)
    ovulation = next_period - timedelta(days=LUTEAL_PHASE_DAYS)

    return CyclePrediction(
        next_period_date=next_period,
        ovulation_date=ovulation,
        fertile_window_start=ovulation - timedelta(days=FERTILE_DAYS_BEFORE_OVULATION),
        fertile_window_end=ovulation + timedelta(days=FERTILE_DAYS_AFTER_OVULATION),
    )


def analyze_cycle_regularity(cycle_lengths: Iterable[Optional[int]]) -> str:
    lengths = _positive_lengths(cycle_lengths)
    if len(lengths) < MIN_CYCLES_FOR_REGULARITY:
        return 'unknown'

    average = sum(lengths) / len(lengths)
    variance = sum((length - average) ** 2 for length in lengths) / len(lengths)
    return 'regular' if math.sqrt(variance) < REGULAR_STD_DEV_DAYS else 'irregular'


def get_current_phase(
    last_period_start: Optional[date],
    average_cycle_length: int = DEFAULT_CYCLE_LENGTH,
    average_period_length: int = DEFAULT_PERIOD_LENGTH,
    today: Optional[date] = None,
) -> str:
    if last_period_start is None:
        return 'unknown'

    days_since_start = ((today or date.today()) - last_period_start).days
    if days_since_start <= average_period_length:
        return 'menstrual'
    if days_since_start <= average_cycle_length / 2:
        return 'follicular'
    if days_since_start <= average_cycle_length / 2 + OVULATION_PHASE_DAYS:
        return 'ovulation'
    return 'luteal'


def derive_cycle_lengths(
    period_starts: Sequence[date],
    recorded_lengths: Sequence[Optional[int]],
) -> list[Optional[int]]:
    """Fill missing cycle lengths from the gap to the previous period start.

    ``period_starts`` must be in ascending order. The first cycle has no
    previous start, so it keeps whatever was recorded.
    """
    lengths: list[Optional[int]] = []
    previous: Optional[date] = None
    for start, recorded in zip(period_starts, recorded_lengths):
        if recorded is None and previous is not None:
            recorded = (start - previous).days
        lengths.append(recorded)
        previous = start
    return lengths


def average_cycle_length(
    cycle_lengths: Iterable[Optional[int]],
    default: int = DEFAULT_CYCLE_LENGTH,
) -> int:
    lengths = _positive_lengths(cycle_lengths)
    if not lengths:
        return default
    return math.floor(sum(lengths) / len(lengths) + 0.5)


def common_symptoms(symptom_lists: Iterable[Optional[list[dict]]], limit: int = TOP_SYMPTOMS) -> list[tuple[str, int]]:
    """Most frequent symptom types across cycles, ties kept in first-seen order."""
    counts = Counter(
        symptom.get('type') or 'unknown'
        for symptoms in symptom_lists
        for symptom in symptoms or []
    )
    return counts.most_common(limit)
