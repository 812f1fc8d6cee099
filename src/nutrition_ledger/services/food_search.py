"""Ranked food catalogue built from previously logged entries."""

from dataclasses import dataclass

from nutrition_ledger.domain.entries import Entry, normalize_food_name
from nutrition_ledger.domain.stats import RankedFood
from nutrition_ledger.services.entries import EntryService

MIN_QUERY_LENGTH = 2
DEFAULT_SEARCH_LIMIT = 5


@dataclass
class FoodSearchService:
    """Autocomplete over the foods a user has already logged."""

    entry_service: EntryService

    async def unique_foods(self) -> list[RankedFood]:
        """Return one ranked food per case-insensitive name.

        The most recent entry of each group is its representative. Foods are
        ordered by frequency, then by the representative's timestamp.
        """
        entries = await self.entry_service.list_all_entries()
        return _rank(_group(entries))

    async def search(
        self, query: str, limit: int = DEFAULT_SEARCH_LIMIT
    ) -> list[RankedFood]:
        """Return ranked foods whose name contains the query anywhere."""
        needle = normalize_food_name(query)
        if len(needle) < MIN_QUERY_LENGTH or limit < 1:
            return []
        foods = await self.unique_foods()
        matches = [
            food
            for food in foods
            if needle in food.representative.normalized_food
        ]
        return matches[:limit]


def _group(entries: list[Entry]) -> dict[str, RankedFood]:
    # entries arrive oldest first, so each later entry replaces the representative
    groups: dict[str, RankedFood] = {}
    for entry in entries:
        key = entry.normalized_food
        current = groups.get(key)
        frequency = current.frequency + 1 if current else 1
        groups[key] = RankedFood(representative=entry, frequency=frequency)
    return groups


def _rank(groups: dict[str, RankedFood]) -> list[RankedFood]:
    return sorted(
        groups.values(),
        key=lambda food: (food.frequency, food.last_used_at),
        reverse=True,
    )
