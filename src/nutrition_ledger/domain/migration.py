"""Domain models for the one-time day-key migration."""

from dataclasses import dataclass, field
from enum import StrEnum
from uuid import UUID

from nutrition_ledger.domain.errors import MigrationPartialFailure


class MigrationStatus(StrEnum):
    """Persisted migration state; flips once and never reverts."""

    NOT_MIGRATED = "not_migrated"
    MIGRATED = "migrated"


@dataclass(frozen=True)
class MigrationState:
    """Migration flag plus ids already corrected by an earlier partial pass."""

    status: MigrationStatus = MigrationStatus.NOT_MIGRATED
    corrected_ids: frozenset[UUID] = frozenset()


def needs_migration(state: MigrationState | None) -> bool:
    """Return True unless the migration has completed."""
    return state is None or state.status is not MigrationStatus.MIGRATED


@dataclass(frozen=True)
class MigrationReport:
    """Outcome of a migration run."""

    status: MigrationStatus
    ran: bool
    examined: int = 0
    rewritten: list[UUID] = field(default_factory=list)
    failures: dict[UUID, str] = field(default_factory=dict)

    def raise_for_failures(self) -> None:
        """Raise MigrationPartialFailure if any entry could not be rewritten."""
        if self.failures:
            raise MigrationPartialFailure(
                {str(entry_id): reason for entry_id, reason in self.failures.items()}
            )
