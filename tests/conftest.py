"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path
from uuid import UUID

import pytest

from nutrition_ledger.config import Settings
from nutrition_ledger.containers import AppContainer, build_ledger
from nutrition_ledger.domain.days import Calendar
from nutrition_ledger.domain.entries import Entry
from nutrition_ledger.domain.errors import StorageError
from nutrition_ledger.domain.migration import MigrationState
from nutrition_ledger.services.entries import EntryRepository
from nutrition_ledger.services.ledger import NutritionLedger
from nutrition_ledger.services.migration import MigrationStateRepository
from nutrition_ledger.services.offsets import OffsetRepository

START = datetime(2025, 1, 10, 15, 0, tzinfo=UTC)


@dataclass
class TickingClock:
    """Clock that advances one second on every read."""

    current: datetime = START
    step: timedelta = timedelta(seconds=1)

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


@dataclass
class InMemoryEntryRepository(EntryRepository):
    """In-memory entry repository for tests."""

    entries: dict[UUID, Entry] = field(default_factory=dict)
    saves: list[UUID] = field(default_factory=list)

    async def save_entry(self, entry: Entry) -> None:
        self.saves.append(entry.id)
        self.entries[entry.id] = entry

    async def get_entry(self, entry_id: UUID) -> Entry | None:
        return self.entries.get(entry_id)

    async def delete_entry(self, entry_id: UUID) -> bool:
        return self.entries.pop(entry_id, None) is not None

    async def list_entries(self) -> list[Entry]:
        return list(self.entries.values())

    async def clear_entries(self) -> None:
        self.entries.clear()


@dataclass
class FlakyEntryRepository(InMemoryEntryRepository):
    """Entry repository whose writes fail for selected ids."""

    failing_ids: set[UUID] = field(default_factory=set)

    async def save_entry(self, entry: Entry) -> None:
        if entry.id in self.failing_ids:
            raise StorageError("quota exceeded")
        await super().save_entry(entry)


@dataclass
class UnavailableEntryRepository(InMemoryEntryRepository):
    """Entry repository whose reads always fail."""

    async def list_entries(self) -> list[Entry]:
        raise StorageError("database locked")


@dataclass
class InMemoryOffsetRepository(OffsetRepository):
    """In-memory offset repository for tests."""

    offsets: dict[str, float] = field(default_factory=dict)

    async def get_offset(self, day: str) -> float | None:
        return self.offsets.get(day)

    async def set_offset(self, day: str, calories_burned: float) -> None:
        self.offsets[day] = calories_burned

    async def clear_offsets(self) -> None:
        self.offsets.clear()


@dataclass
class InMemoryMigrationStateRepository(MigrationStateRepository):
    """In-memory migration state repository for tests."""

    state: MigrationState | None = None
    writes: int = 0

    async def get_migration_state(self) -> MigrationState | None:
        return self.state

    async def set_migration_state(self, state: MigrationState) -> None:
        self.writes += 1
        self.state = state


@dataclass
class FailingMigrationStateRepository(InMemoryMigrationStateRepository):
    """Migration state repository whose selected write attempts fail."""

    failing_attempts: set[int] = field(default_factory=set)
    attempts: int = 0

    async def set_migration_state(self, state: MigrationState) -> None:
        self.attempts += 1
        if self.attempts in self.failing_attempts:
            raise StorageError("disk full")
        await super().set_migration_state(state)


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def calendar(clock: TickingClock) -> Calendar:
    return Calendar(tz=UTC, clock=clock)


@pytest.fixture
def entry_repository() -> InMemoryEntryRepository:
    return InMemoryEntryRepository()


@pytest.fixture
def offset_repository() -> InMemoryOffsetRepository:
    return InMemoryOffsetRepository()


@pytest.fixture
def state_repository() -> InMemoryMigrationStateRepository:
    return InMemoryMigrationStateRepository()


@pytest.fixture
def ledger(
    entry_repository: InMemoryEntryRepository,
    offset_repository: InMemoryOffsetRepository,
    state_repository: InMemoryMigrationStateRepository,
    calendar: Calendar,
) -> NutritionLedger:
    return build_ledger(
        entry_repository=entry_repository,
        offset_repository=offset_repository,
        state_repository=state_repository,
        calendar=calendar,
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(ledger_db_path=tmp_path / "ledger.db", ledger_timezone="UTC")


@pytest.fixture
def container(
    settings: Settings, calendar: Calendar, ledger: NutritionLedger
) -> AppContainer:
    return AppContainer(settings=settings, calendar=calendar, ledger=ledger)


def entry_payload(food: str, calories: float, /, **extra: object) -> dict[str, object]:
    """Return a minimal valid entry payload."""
    payload: dict[str, object] = {
        "food": food,
        "quantity": 1,
        "unit": "piece",
        "calories": calories,
        "method": "text",
    }
    payload.update(extra)
    return payload
