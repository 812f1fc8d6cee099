"""Tests for the day-key migration."""

import asyncio
import logging
from datetime import UTC, datetime, timedelta, timezone
from uuid import UUID, uuid4

import pytest

from nutrition_ledger.domain.days import Calendar
from nutrition_ledger.domain.entries import Entry, EntryMethod
from nutrition_ledger.domain.errors import MigrationPartialFailure, StorageError
from nutrition_ledger.domain.migration import MigrationState, MigrationStatus
from nutrition_ledger.services.migration import MigrationService
from tests.conftest import (
    FailingMigrationStateRepository,
    FlakyEntryRepository,
    InMemoryEntryRepository,
    InMemoryMigrationStateRepository,
    UnavailableEntryRepository,
)

NEW_YORK_WINTER = timezone(timedelta(hours=-5))
TOKYO = timezone(timedelta(hours=9))


def _entry(day: str, food: str = "Toast") -> Entry:
    return Entry(
        id=uuid4(),
        day=day,
        timestamp=datetime(2025, 1, 10, 2, 0, tzinfo=UTC),
        food=food,
        quantity=1,
        unit="slice",
        calories=80,
        method=EntryMethod.TEXT,
    )


def _service(
    repository: InMemoryEntryRepository,
    state_repository: InMemoryMigrationStateRepository,
    tz: timezone,
) -> MigrationService:
    return MigrationService(
        entry_repository=repository,
        state_repository=state_repository,
        calendar=Calendar(tz=tz),
    )


def test_migration_rewrites_utc_days_and_sets_flag() -> None:
    repository = InMemoryEntryRepository()
    state_repository = InMemoryMigrationStateRepository()
    entry = _entry("2025-01-10")
    repository.entries[entry.id] = entry

    report = asyncio.run(
        _service(repository, state_repository, NEW_YORK_WINTER).run_if_needed()
    )

    migrated = repository.entries[entry.id]
    assert migrated.day == "2025-01-09"
    assert migrated.id == entry.id
    assert migrated.timestamp == entry.timestamp
    assert migrated.food == entry.food
    assert report.rewritten == [entry.id]
    assert report.status is MigrationStatus.MIGRATED
    assert state_repository.state == MigrationState(status=MigrationStatus.MIGRATED)


def test_migration_leaves_matching_days_untouched() -> None:
    repository = InMemoryEntryRepository()
    state_repository = InMemoryMigrationStateRepository()
    entry = _entry("2025-01-10")
    repository.entries[entry.id] = entry

    report = asyncio.run(_service(repository, state_repository, TOKYO).run_if_needed())

    assert repository.saves == []
    assert report.rewritten == []
    assert report.status is MigrationStatus.MIGRATED


def test_second_run_is_a_no_op() -> None:
    repository = InMemoryEntryRepository()
    state_repository = InMemoryMigrationStateRepository()
    entry = _entry("2025-01-10")
    repository.entries[entry.id] = entry
    service = _service(repository, state_repository, NEW_YORK_WINTER)

    asyncio.run(service.run_if_needed())
    saves_after_first = list(repository.saves)
    second = asyncio.run(service.run_if_needed())

    assert repository.saves == saves_after_first
    assert second.ran is False
    assert repository.entries[entry.id].day == "2025-01-09"


def test_partial_failure_keeps_flag_and_retries_only_remaining() -> None:
    good = _entry("2025-01-10", "Good")
    bad = _entry("2025-01-05", "Bad")
    repository = FlakyEntryRepository(failing_ids={bad.id})
    repository.entries = {good.id: good, bad.id: bad}
    state_repository = InMemoryMigrationStateRepository()
    service = _service(repository, state_repository, NEW_YORK_WINTER)

    first = asyncio.run(service.run_if_needed())

    assert first.status is MigrationStatus.NOT_MIGRATED
    assert set(first.failures) == {bad.id}
    assert repository.entries[good.id].day == "2025-01-09"
    assert repository.entries[bad.id].day == "2025-01-05"
    assert state_repository.state is not None
    assert state_repository.state.corrected_ids == frozenset({good.id})
    with pytest.raises(MigrationPartialFailure):
        first.raise_for_failures()

    repository.failing_ids.clear()
    second = asyncio.run(service.run_if_needed())

    assert second.status is MigrationStatus.MIGRATED
    assert second.rewritten == [bad.id]
    # already-corrected entries are not shifted a second time
    assert repository.entries[good.id].day == "2025-01-09"
    assert repository.entries[bad.id].day == "2025-01-04"
    second.raise_for_failures()


def test_malformed_stored_day_is_reported_not_fatal() -> None:
    repository = InMemoryEntryRepository()
    state_repository = InMemoryMigrationStateRepository()
    broken = _entry("not-a-day")
    repository.entries[broken.id] = broken

    report = asyncio.run(
        _service(repository, state_repository, NEW_YORK_WINTER).run_if_needed()
    )

    assert list(report.failures) == [broken.id]
    assert report.status is MigrationStatus.NOT_MIGRATED


def test_migration_skips_when_already_migrated() -> None:
    repository = InMemoryEntryRepository()
    entry = _entry("2025-01-10")
    repository.entries[entry.id] = entry
    state_repository = InMemoryMigrationStateRepository(
        state=MigrationState(status=MigrationStatus.MIGRATED)
    )

    report = asyncio.run(
        _service(repository, state_repository, NEW_YORK_WINTER).run_if_needed()
    )

    assert report.ran is False
    assert state_repository.writes == 0
    assert repository.entries[entry.id].day == "2025-01-10"


def test_failures_are_keyed_by_entry_id() -> None:
    entry = _entry("2025-01-10")
    repository = FlakyEntryRepository(failing_ids={entry.id})
    repository.entries[entry.id] = entry

    report = asyncio.run(
        _service(
            repository, InMemoryMigrationStateRepository(), NEW_YORK_WINTER
        ).run_if_needed()
    )

    with pytest.raises(MigrationPartialFailure) as excinfo:
        report.raise_for_failures()
    assert list(excinfo.value.failures) == [str(entry.id)]
    assert all(isinstance(key, UUID) for key in report.failures)


def test_failed_checkpoint_aborts_before_rewriting() -> None:
    repository = InMemoryEntryRepository()
    entry = _entry("2025-01-10")
    repository.entries[entry.id] = entry
    state_repository = FailingMigrationStateRepository(failing_attempts={1})
    service = _service(repository, state_repository, NEW_YORK_WINTER)

    with pytest.raises(StorageError):
        asyncio.run(service.run_if_needed())

    assert repository.entries[entry.id].day == "2025-01-10"

    asyncio.run(service.run_if_needed())

    assert repository.entries[entry.id].day == "2025-01-09"
    assert state_repository.state == MigrationState(status=MigrationStatus.MIGRATED)


def test_lost_final_state_write_never_shifts_twice() -> None:
    repository = InMemoryEntryRepository()
    first = _entry("2025-01-10", "First")
    second = _entry("2025-03-01", "Second")
    repository.entries = {first.id: first, second.id: second}
    # attempts 1 and 2 checkpoint each entry, attempt 3 is the closing write
    state_repository = FailingMigrationStateRepository(failing_attempts={3})
    service = _service(repository, state_repository, NEW_YORK_WINTER)

    with pytest.raises(StorageError):
        asyncio.run(service.run_if_needed())

    assert state_repository.state == MigrationState(
        status=MigrationStatus.NOT_MIGRATED,
        corrected_ids=frozenset({first.id, second.id}),
    )

    retry = asyncio.run(service.run_if_needed())

    assert retry.rewritten == []
    assert retry.status is MigrationStatus.MIGRATED
    assert repository.entries[first.id].day == "2025-01-09"
    assert repository.entries[second.id].day == "2025-02-28"


def test_unreadable_entries_are_logged_and_raised(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(logging.getLogger("nutrition_ledger"), "propagate", True)
    state_repository = InMemoryMigrationStateRepository()
    service = _service(
        UnavailableEntryRepository(), state_repository, NEW_YORK_WINTER
    )

    with caplog.at_level(logging.ERROR), pytest.raises(StorageError):
        asyncio.run(service.run_if_needed())

    assert state_repository.writes == 0
    assert "could not read entries" in caplog.text
