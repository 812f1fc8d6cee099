"""Domain models for aggregated views."""

from dataclasses import dataclass
from datetime import datetime

from nutrition_ledger.domain.entries import Entry, MacroTotals


@dataclass(frozen=True)
class DailyPoint:
    """Totals and calorie offset for a single day."""

    day: str
    totals: MacroTotals
    offset: float

    @property
    def net_calories(self) -> float:
        """Calories after exercise, never negative."""
        return max(0.0, self.totals.calories - self.offset)


@dataclass(frozen=True)
class PeriodSummary:
    """Daily points for a window plus per-day averages."""

    daily: list[DailyPoint]
    avg_calories: float
    avg_fat: float
    avg_carbs: float
    avg_protein: float
    avg_net_calories: float


@dataclass(frozen=True)
class RankedFood:
    """Deduplicated food with its frequency and most recent entry."""

    representative: Entry
    frequency: int

    @property
    def food(self) -> str:
        """Literal name from the most recent entry."""
        return self.representative.food

    @property
    def last_used_at(self) -> datetime:
        """Timestamp of the most recent entry."""
        return self.representative.timestamp
