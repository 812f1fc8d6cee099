"""Aggregated daily totals and multi-day series."""

from dataclasses import dataclass

from nutrition_ledger.domain.days import Calendar, day_window
from nutrition_ledger.domain.entries import Entry, MacroTotals
from nutrition_ledger.domain.errors import InvalidInputError
from nutrition_ledger.domain.stats import DailyPoint, PeriodSummary
from nutrition_ledger.services.entries import EntryService
from nutrition_ledger.services.offsets import OffsetService

MAX_SERIES_DAYS = 366


@dataclass
class AggregationService:
    """Service that derives totals from the entry and offset stores.

    Nothing is cached; every call rescans the stores.
    """

    entry_service: EntryService
    offset_service: OffsetService
    calendar: Calendar

    async def day_totals(self, day: str) -> MacroTotals:
        """Return summed calories and macros for a day."""
        entries = await self.entry_service.list_entries_for_day(day)
        return _sum_totals(entries)

    async def net_calories(self, day: str) -> float:
        """Return calories eaten minus calories burned, floored at zero."""
        totals = await self.day_totals(day)
        offset = await self.offset_service.get_offset(day)
        return max(0.0, totals.calories - offset)

    async def series(self, days: int) -> list[DailyPoint]:
        """Return one point per day for the window ending today, oldest first."""
        if not 1 <= days <= MAX_SERIES_DAYS:
            raise InvalidInputError(f"days must be between 1 and {MAX_SERIES_DAYS}")
        points = []
        for day in day_window(self.calendar.today(), days):
            totals = await self.day_totals(day)
            offset = await self.offset_service.get_offset(day)
            points.append(DailyPoint(day=day, totals=totals, offset=offset))
        return points

    async def summarize(self, days: int) -> PeriodSummary:
        """Return the series for a window with per-day averages."""
        daily = await self.series(days)
        total_days = max(len(daily), 1)
        totals = _sum_totals_of_points(daily)
        net = sum(point.net_calories for point in daily)
        return PeriodSummary(
            daily=daily,
            avg_calories=totals.calories / total_days,
            avg_fat=totals.fat / total_days,
            avg_carbs=totals.carbs / total_days,
            avg_protein=totals.protein / total_days,
            avg_net_calories=net / total_days,
        )


def _sum_totals(entries: list[Entry]) -> MacroTotals:
    total = MacroTotals()
    for entry in entries:
        total = MacroTotals(
            calories=total.calories + entry.calories,
            fat=total.fat + (entry.fat or 0.0),
            carbs=total.carbs + (entry.carbs or 0.0),
            protein=total.protein + (entry.protein or 0.0),
        )
    return total


def _sum_totals_of_points(points: list[DailyPoint]) -> MacroTotals:
    total = MacroTotals()
    for point in points:
        total = MacroTotals(
            calories=total.calories + point.totals.calories,
            fat=total.fat + point.totals.fat,
            carbs=total.carbs + point.totals.carbs,
            protein=total.protein + point.totals.protein,
        )
    return total
