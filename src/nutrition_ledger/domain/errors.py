"""Error types raised by the ledger core."""


class LedgerError(Exception):
    """Base class for ledger errors."""


class StorageError(LedgerError, RuntimeError):
    """Raised when the persistent medium is unavailable or rejects a write."""


class InvalidInputError(LedgerError, ValueError):
    """Raised when an entry, offset or day key fails validation."""


class MigrationPartialFailure(LedgerError):
    """Raised when a migration pass could not rewrite every entry."""

    def __init__(self, failures: dict[str, str]) -> None:
        self.failures = failures
        super().__init__(f"Day-key migration failed for {len(failures)} entries")
