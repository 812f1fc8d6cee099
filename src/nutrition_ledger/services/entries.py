"""Entry store service."""

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Protocol, TypeVar
from uuid import UUID, uuid4

from pydantic import BaseModel, ValidationError

from nutrition_ledger.domain.days import Calendar, parse_day
from nutrition_ledger.domain.entries import Entry, EntryDraft, EntryPatch
from nutrition_ledger.domain.errors import InvalidInputError

ModelT = TypeVar("ModelT", bound=BaseModel)


class EntryRepository(Protocol):
    """Persistence interface for entry records."""

    async def save_entry(self, entry: Entry) -> None:
        """Insert or overwrite an entry record."""

    async def get_entry(self, entry_id: UUID) -> Entry | None:
        """Return an entry by id, if present."""

    async def delete_entry(self, entry_id: UUID) -> bool:
        """Delete an entry and return True if it existed."""

    async def list_entries(self) -> list[Entry]:
        """Return every stored entry in no particular order."""

    async def clear_entries(self) -> None:
        """Delete every entry record."""


@dataclass
class EntryService:
    """Application service for entry CRUD and day queries."""

    repository: EntryRepository
    calendar: Calendar

    async def create_entry(self, data: Mapping[str, object]) -> Entry:
        """Validate and persist a new entry.

        ``id`` and ``timestamp`` are assigned here. ``day`` defaults to today's
        local day key unless the draft carries a historical date.
        """
        draft = _validate(EntryDraft, data)
        now = self.calendar.now()
        entry = Entry(
            id=uuid4(),
            day=draft.day or self.calendar.day_key(now),
            timestamp=now,
            food=draft.food,
            quantity=draft.quantity,
            unit=draft.unit,
            calories=draft.calories,
            method=draft.method,
            fat=draft.fat,
            carbs=draft.carbs,
            protein=draft.protein,
            confidence=draft.confidence,
        )
        await self.repository.save_entry(entry)
        return entry

    async def get_entry(self, entry_id: UUID) -> Entry | None:
        """Return an entry by id."""
        return await self.repository.get_entry(entry_id)

    async def update_entry(
        self, entry_id: UUID, changes: Mapping[str, object]
    ) -> Entry | None:
        """Apply a partial edit; returns None when the entry does not exist."""
        patch = _validate(EntryPatch, changes)
        existing = await self.repository.get_entry(entry_id)
        if existing is None:
            return None
        updated = replace(existing, **patch.changes())
        await self.repository.save_entry(updated)
        return updated

    async def delete_entry(self, entry_id: UUID) -> bool:
        """Delete an entry; repeating the call is harmless."""
        return await self.repository.delete_entry(entry_id)

    async def list_entries_for_day(self, day: str) -> list[Entry]:
        """Return entries logged on a day, most recent first."""
        parse_day(day)
        entries = await self.repository.list_entries()
        return _newest_first([entry for entry in entries if entry.day == day])

    async def list_entries_for_today(self) -> list[Entry]:
        """Return today's entries, most recent first."""
        return await self.list_entries_for_day(self.calendar.today())

    async def list_entries_in_range(self, start_day: str, end_day: str) -> list[Entry]:
        """Return entries between two days inclusive, most recent first."""
        if parse_day(start_day) > parse_day(end_day):
            raise InvalidInputError("start_day must not be after end_day")
        entries = await self.repository.list_entries()
        return _newest_first(
            [entry for entry in entries if start_day <= entry.day <= end_day]
        )

    async def list_all_entries(self) -> list[Entry]:
        """Return every entry in chronological order."""
        entries = await self.repository.list_entries()
        return sorted(entries, key=lambda entry: entry.timestamp)

    async def clear_entries(self) -> None:
        """Delete every entry."""
        await self.repository.clear_entries()


def _newest_first(entries: list[Entry]) -> list[Entry]:
    return sorted(entries, key=lambda entry: entry.timestamp, reverse=True)


def _validate(model: type[ModelT], data: Mapping[str, object]) -> ModelT:
    try:
        return model.model_validate(dict(data))
    except ValidationError as exc:
        raise InvalidInputError(_describe(exc)) from exc


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "entry"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)
