"""Calendar-day keys computed from local wall-clock time."""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta, tzinfo

from nutrition_ledger.domain.errors import InvalidInputError

_DAY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def day_key(instant: datetime, tz: tzinfo | None = None) -> str:
    """Return the YYYY-MM-DD local date of an instant.

    With ``tz=None`` the system zone is used. Naive instants are read as
    local wall-clock time.
    """
    return instant.astimezone(tz).date().isoformat()


def parse_day(day: str) -> date:
    """Parse a strict YYYY-MM-DD day key."""
    if not isinstance(day, str) or not _DAY_PATTERN.match(day):
        raise InvalidInputError(f"Invalid day key: {day!r}")
    try:
        return date.fromisoformat(day)
    except ValueError as exc:
        raise InvalidInputError(f"Invalid day key: {day!r}") from exc


def shift_day(day: str, days: int) -> str:
    """Return the day key ``days`` calendar days after ``day``."""
    try:
        return (parse_day(day) + timedelta(days=days)).isoformat()
    except OverflowError as exc:
        raise InvalidInputError(f"Day out of range: {day!r} {days:+d}") from exc


def day_window(end_day: str, days: int) -> list[str]:
    """Return the ``days`` calendar days ending at ``end_day``, oldest first."""
    end = parse_day(end_day)
    try:
        return [
            (end - timedelta(days=back)).isoformat()
            for back in range(days - 1, -1, -1)
        ]
    except OverflowError as exc:
        raise InvalidInputError(f"Day window out of range: {end_day!r}") from exc


def utc_day_to_local_day(day: str, tz: tzinfo | None = None) -> str:
    """Read ``day`` as UTC midnight and return the local day of that instant."""
    midnight = datetime.combine(parse_day(day), time.min, tzinfo=UTC)
    try:
        return day_key(midnight, tz)
    except OverflowError as exc:
        raise InvalidInputError(f"Day out of range: {day!r}") from exc


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True)
class Calendar:
    """Local calendar with an injectable clock."""

    tz: tzinfo | None = None
    clock: Callable[[], datetime] = field(default=_utc_now)

    def now(self) -> datetime:
        """Return the current instant."""
        return self.clock()

    def day_key(self, instant: datetime) -> str:
        """Return the local day key for an instant."""
        return day_key(instant, self.tz)

    def today(self) -> str:
        """Return today's local day key."""
        return self.day_key(self.now())
