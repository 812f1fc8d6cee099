"""SQLite repository for entry records."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from nutrition_ledger.adapters.sqlite_store import SqliteKeyValueStore
from nutrition_ledger.domain.entries import Entry, EntryMethod
from nutrition_ledger.domain.errors import StorageError
from nutrition_ledger.services.entries import EntryRepository

ENTRY_PREFIX = "entry:"


def entry_key(entry_id: UUID) -> str:
    """Return the storage key for an entry."""
    return f"{ENTRY_PREFIX}{entry_id}"


@dataclass
class SqliteEntryRepository(EntryRepository):
    """SQLite implementation for entries."""

    store: SqliteKeyValueStore

    async def save_entry(self, entry: Entry) -> None:
        """Insert or overwrite an entry record."""
        await self.store.set(entry_key(entry.id), _to_record(entry))

    async def get_entry(self, entry_id: UUID) -> Entry | None:
        """Return an entry by id."""
        record = await self.store.get(entry_key(entry_id))
        if record is None:
            return None
        return _parse_entry(record)

    async def delete_entry(self, entry_id: UUID) -> bool:
        """Delete an entry record."""
        return await self.store.delete(entry_key(entry_id))

    async def list_entries(self) -> list[Entry]:
        """Return every entry record."""
        records = await self.store.values(ENTRY_PREFIX)
        return [_parse_entry(record) for record in records]

    async def clear_entries(self) -> None:
        """Delete every entry record."""
        await self.store.delete_prefix(ENTRY_PREFIX)


def _to_record(entry: Entry) -> dict[str, object]:
    return {
        "id": str(entry.id),
        "day": entry.day,
        "timestamp": entry.timestamp.isoformat(),
        "food": entry.food,
        "quantity": entry.quantity,
        "unit": entry.unit,
        "calories": entry.calories,
        "fat": entry.fat,
        "carbs": entry.carbs,
        "protein": entry.protein,
        "method": entry.method.value,
        "confidence": entry.confidence,
    }


def _parse_entry(record: object) -> Entry:
    if not isinstance(record, dict):
        raise StorageError("Entry record is not an object")
    try:
        return Entry(
            id=UUID(record["id"]),
            day=str(record["day"]),
            timestamp=_parse_timestamp(record["timestamp"]),
            food=str(record["food"]),
            quantity=float(record["quantity"]),
            unit=str(record["unit"]),
            calories=float(record["calories"]),
            method=EntryMethod(record["method"]),
            fat=_optional_float(record.get("fat")),
            carbs=_optional_float(record.get("carbs")),
            protein=_optional_float(record.get("protein")),
            confidence=_optional_float(record.get("confidence")),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise StorageError(f"Malformed entry record: {exc}") from exc


def _parse_timestamp(value: object) -> datetime:
    # older records store Unix milliseconds
    if isinstance(value, int | float):
        return datetime.fromtimestamp(value / 1000, tz=UTC)
    return datetime.fromisoformat(str(value))


def _optional_float(value: object) -> float | None:
    if value is None:
        return None
    return float(value)
