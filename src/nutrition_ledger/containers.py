"""Dependency container wiring for the application."""

from dataclasses import dataclass

from nutrition_ledger.adapters.sqlite_entry_repository import SqliteEntryRepository
from nutrition_ledger.adapters.sqlite_migration_repository import (
    SqliteMigrationStateRepository,
)
from nutrition_ledger.adapters.sqlite_offset_repository import SqliteOffsetRepository
from nutrition_ledger.adapters.sqlite_store import SqliteKeyValueStore
from nutrition_ledger.config import Settings, resolve_timezone
from nutrition_ledger.domain.days import Calendar
from nutrition_ledger.services.aggregation import AggregationService
from nutrition_ledger.services.entries import EntryRepository, EntryService
from nutrition_ledger.services.food_search import FoodSearchService
from nutrition_ledger.services.ledger import NutritionLedger
from nutrition_ledger.services.migration import (
    MigrationService,
    MigrationStateRepository,
)
from nutrition_ledger.services.offsets import OffsetRepository, OffsetService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    calendar: Calendar
    ledger: NutritionLedger


def build_ledger(
    entry_repository: EntryRepository,
    offset_repository: OffsetRepository,
    state_repository: MigrationStateRepository,
    calendar: Calendar,
) -> NutritionLedger:
    """Wire the ledger services over the given repositories."""
    entry_service = EntryService(entry_repository, calendar)
    offset_service = OffsetService(offset_repository)
    return NutritionLedger(
        entry_service=entry_service,
        offset_service=offset_service,
        aggregation_service=AggregationService(
            entry_service=entry_service,
            offset_service=offset_service,
            calendar=calendar,
        ),
        food_search_service=FoodSearchService(entry_service),
        migration_service=MigrationService(
            entry_repository=entry_repository,
            state_repository=state_repository,
            calendar=calendar,
        ),
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    calendar = Calendar(tz=resolve_timezone(resolved_settings.ledger_timezone))
    store = SqliteKeyValueStore(resolved_settings.ledger_db_path)
    store.initialize()
    ledger = build_ledger(
        entry_repository=SqliteEntryRepository(store),
        offset_repository=SqliteOffsetRepository(store),
        state_repository=SqliteMigrationStateRepository(store),
        calendar=calendar,
    )
    return AppContainer(
        settings=resolved_settings,
        calendar=calendar,
        ledger=ledger,
    )
