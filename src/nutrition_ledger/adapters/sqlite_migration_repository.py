"""SQLite repository for the migration flag."""

from dataclasses import dataclass
from uuid import UUID

from nutrition_ledger.adapters.sqlite_store import SqliteKeyValueStore
from nutrition_ledger.domain.errors import StorageError
from nutrition_ledger.domain.migration import MigrationState, MigrationStatus
from nutrition_ledger.services.migration import MigrationStateRepository

MIGRATION_KEY = "meta:migration"


@dataclass
class SqliteMigrationStateRepository(MigrationStateRepository):
    """SQLite implementation for the migration state record."""

    store: SqliteKeyValueStore

    async def get_migration_state(self) -> MigrationState | None:
        """Return the stored migration state."""
        record = await self.store.get(MIGRATION_KEY)
        if record is None:
            return None
        if not isinstance(record, dict):
            raise StorageError("Malformed migration record")
        try:
            return MigrationState(
                status=MigrationStatus(record["status"]),
                corrected_ids=frozenset(
                    UUID(value) for value in record.get("corrected_ids") or []
                ),
            )
        except (KeyError, ValueError) as exc:
            raise StorageError(f"Malformed migration record: {exc}") from exc

    async def set_migration_state(self, state: MigrationState) -> None:
        """Persist the migration state."""
        await self.store.set(
            MIGRATION_KEY,
            {
                "status": state.status.value,
                "corrected_ids": sorted(str(value) for value in state.corrected_ids),
            },
        )
