"""Public operation surface consumed by the UI and exporters."""

from collections.abc import Mapping
from dataclasses import dataclass
from uuid import UUID

from nutrition_ledger.domain.entries import Entry, MacroTotals
from nutrition_ledger.domain.migration import MigrationReport
from nutrition_ledger.domain.stats import DailyPoint, PeriodSummary, RankedFood
from nutrition_ledger.services.aggregation import AggregationService
from nutrition_ledger.services.entries import EntryService
from nutrition_ledger.services.food_search import (
    DEFAULT_SEARCH_LIMIT,
    FoodSearchService,
)
from nutrition_ledger.services.migration import MigrationService
from nutrition_ledger.services.offsets import OffsetService


@dataclass
class NutritionLedger:
    """Facade over the entry, offset, aggregation, search and migration services."""

    entry_service: EntryService
    offset_service: OffsetService
    aggregation_service: AggregationService
    food_search_service: FoodSearchService
    migration_service: MigrationService

    async def create_entry(self, data: Mapping[str, object]) -> Entry:
        """Validate and store a new entry."""
        return await self.entry_service.create_entry(data)

    async def get_entry(self, entry_id: UUID) -> Entry | None:
        """Return an entry by id, or None."""
        return await self.entry_service.get_entry(entry_id)

    async def update_entry(
        self, entry_id: UUID, changes: Mapping[str, object]
    ) -> Entry | None:
        """Apply a partial edit; None when the entry is missing."""
        return await self.entry_service.update_entry(entry_id, changes)

    async def delete_entry(self, entry_id: UUID) -> bool:
        """Delete an entry and return True if it existed."""
        return await self.entry_service.delete_entry(entry_id)

    async def list_entries_for_day(self, day: str) -> list[Entry]:
        """Return a day's entries, most recent first."""
        return await self.entry_service.list_entries_for_day(day)

    async def list_entries_for_today(self) -> list[Entry]:
        """Return today's entries, most recent first."""
        return await self.entry_service.list_entries_for_today()

    async def list_entries_in_range(self, start_day: str, end_day: str) -> list[Entry]:
        """Return entries between two days inclusive, most recent first."""
        return await self.entry_service.list_entries_in_range(start_day, end_day)

    async def list_all_entries(self) -> list[Entry]:
        """Return every entry in chronological order."""
        return await self.entry_service.list_all_entries()

    async def day_totals(self, day: str) -> MacroTotals:
        """Return summed calories and macros for a day."""
        return await self.aggregation_service.day_totals(day)

    async def net_calories(self, day: str) -> float:
        """Return calories eaten minus burned, floored at zero."""
        return await self.aggregation_service.net_calories(day)

    async def series(self, days: int) -> list[DailyPoint]:
        """Return daily points for the window ending today, oldest first."""
        return await self.aggregation_service.series(days)

    async def summarize(self, days: int) -> PeriodSummary:
        """Return a window's daily points with averages."""
        return await self.aggregation_service.summarize(days)

    async def get_offset(self, day: str) -> float:
        """Return calories burned on a day, 0 when unset."""
        return await self.offset_service.get_offset(day)

    async def set_offset(self, day: str, calories_burned: float) -> None:
        """Replace calories burned on a day."""
        await self.offset_service.set_offset(day, calories_burned)

    async def unique_foods(self) -> list[RankedFood]:
        """Return logged foods ranked by frequency and recency."""
        return await self.food_search_service.unique_foods()

    async def search(
        self, query: str, limit: int = DEFAULT_SEARCH_LIMIT
    ) -> list[RankedFood]:
        """Return ranked foods whose name contains the query."""
        return await self.food_search_service.search(query, limit)

    async def run_migration_if_needed(self) -> MigrationReport:
        """Correct UTC-derived day keys unless already done."""
        return await self.migration_service.run_if_needed()

    async def clear_all_data(self) -> None:
        """Delete all entries and offsets; the migration state is kept."""
        await self.entry_service.clear_entries()
        await self.offset_service.clear_offsets()
