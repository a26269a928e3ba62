from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from backend.scheduling.errors import InvalidDate, InvalidRange


@dataclass(frozen=True)
class TimeRange:
    """Half-open interval ``[start, end)``."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise InvalidRange('endAt must be after startAt')

    @classmethod
    def starting_at(cls, start: datetime, minutes: int) -> 'TimeRange':
        return cls(start, start + timedelta(minutes=minutes))

    def overlaps(self, other: 'TimeRange') -> bool:
        # Ranges that only share an endpoint do not overlap.
        return self.start < other.end and self.end > other.start


def parse_timestamp(value: datetime | str | None, field_name: str) -> datetime:
    """Parse an ISO-8601 timestamp into a naive UTC datetime.

    Naive input is taken as already being UTC. Raises ``InvalidDate`` when the
    value cannot be parsed.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        if not isinstance(value, str) or not value.strip():
            raise InvalidDate(f'Invalid {field_name}')
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as exc:
            raise InvalidDate(f'Invalid {field_name}') from exc

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
