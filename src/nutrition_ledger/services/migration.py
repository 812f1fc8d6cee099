"""One-time correction of day keys computed from UTC dates."""

import logging
from dataclasses import dataclass, replace
from typing import Protocol
from uuid import UUID

from nutrition_ledger.domain.days import Calendar, utc_day_to_local_day
from nutrition_ledger.domain.errors import InvalidInputError, StorageError
from nutrition_ledger.domain.migration import (
    MigrationReport,
    MigrationState,
    MigrationStatus,
    needs_migration,
)
from nutrition_ledger.services.entries import EntryRepository

_logger = logging.getLogger(__name__)


class MigrationStateRepository(Protocol):
    """Persistence interface for the migration flag."""

    async def get_migration_state(self) -> MigrationState | None:
        """Return the stored migration state, if any."""

    async def set_migration_state(self, state: MigrationState) -> None:
        """Persist the migration state."""


@dataclass
class MigrationService:
    """Rewrites entries whose day key was taken from the UTC date.

    A pass with zero per-entry failures marks the migration as done. Otherwise
    the ids corrected so far are persisted and the next run picks up the rest.
    """

    entry_repository: EntryRepository
    state_repository: MigrationStateRepository
    calendar: Calendar

    async def run_if_needed(self) -> MigrationReport:
        """Run the migration unless it has already completed.

        Each id is checkpointed as corrected before its entry is rewritten, so
        an interrupted pass can leave a day unshifted but never shifts it twice.
        A failed checkpoint aborts the pass with ``StorageError``.
        """
        state = await self.state_repository.get_migration_state()
        if not needs_migration(state):
            return MigrationReport(status=MigrationStatus.MIGRATED, ran=False)

        corrected = set(state.corrected_ids) if state else set()
        try:
            entries = await self.entry_repository.list_entries()
        except StorageError:
            _logger.exception("Day-key migration could not read entries")
            raise
        rewritten: list[UUID] = []
        failures: dict[UUID, str] = {}
        for entry in entries:
            if entry.id in corrected:
                continue
            try:
                local_day = utc_day_to_local_day(entry.day, self.calendar.tz)
            except InvalidInputError as exc:
                failures[entry.id] = self._skip(entry.id, exc)
                continue
            if local_day == entry.day:
                continue
            corrected.add(entry.id)
            await self._checkpoint(corrected)
            try:
                await self.entry_repository.save_entry(replace(entry, day=local_day))
            except StorageError as exc:
                failures[entry.id] = self._skip(entry.id, exc)
                corrected.discard(entry.id)
                await self._checkpoint(corrected)
                continue
            rewritten.append(entry.id)

        if failures:
            status = MigrationStatus.NOT_MIGRATED
            next_state = MigrationState(
                status=status, corrected_ids=frozenset(corrected)
            )
        else:
            status = MigrationStatus.MIGRATED
            next_state = MigrationState(status=status)
        await self.state_repository.set_migration_state(next_state)
        _logger.info(
            "Day-key migration pass: examined=%s rewritten=%s failed=%s status=%s",
            len(entries),
            len(rewritten),
            len(failures),
            status,
        )
        return MigrationReport(
            status=status,
            ran=True,
            examined=len(entries),
            rewritten=rewritten,
            failures=failures,
        )

    async def _checkpoint(self, corrected: set[UUID]) -> None:
        await self.state_repository.set_migration_state(
            MigrationState(
                status=MigrationStatus.NOT_MIGRATED,
                corrected_ids=frozenset(corrected),
            )
        )

    @staticmethod
    def _skip(entry_id: UUID, exc: Exception) -> str:
        _logger.warning(
            "Day-key migration skipped entry: id=%s error=%s", entry_id, exc
        )
        return str(exc)
