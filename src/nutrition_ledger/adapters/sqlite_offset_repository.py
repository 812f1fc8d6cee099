"""SQLite repository for per-day calorie offsets."""

from dataclasses import dataclass

from nutrition_ledger.adapters.sqlite_store import SqliteKeyValueStore
from nutrition_ledger.domain.errors import StorageError
from nutrition_ledger.services.offsets import OffsetRepository

OFFSET_PREFIX = "offset:"


@dataclass
class SqliteOffsetRepository(OffsetRepository):
    """SQLite implementation for calorie offsets."""

    store: SqliteKeyValueStore

    async def get_offset(self, day: str) -> float | None:
        """Return the stored offset for a day."""
        record = await self.store.get(f"{OFFSET_PREFIX}{day}")
        if record is None:
            return None
        if not isinstance(record, dict) or "calories_burned" not in record:
            raise StorageError(f"Malformed offset record for {day}")
        return float(record["calories_burned"])

    async def set_offset(self, day: str, calories_burned: float) -> None:
        """Overwrite the offset for a day."""
        await self.store.set(
            f"{OFFSET_PREFIX}{day}",
            {"day": day, "calories_burned": calories_burned},
        )

    async def clear_offsets(self) -> None:
        """Delete every offset record."""
        await self.store.delete_prefix(OFFSET_PREFIX)
