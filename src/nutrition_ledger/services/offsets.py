"""Per-day calorie offset service."""

import math
from dataclasses import dataclass
from typing import Protocol

from nutrition_ledger.domain.days import parse_day
from nutrition_ledger.domain.errors import InvalidInputError


class OffsetRepository(Protocol):
    """Persistence interface for per-day calories burned."""

    async def get_offset(self, day: str) -> float | None:
        """Return the stored offset for a day, if any."""

    async def set_offset(self, day: str, calories_burned: float) -> None:
        """Overwrite the offset for a day."""

    async def clear_offsets(self) -> None:
        """Delete every offset record."""


@dataclass
class OffsetService:
    """Service for calories burned per day."""

    repository: OffsetRepository

    async def get_offset(self, day: str) -> float:
        """Return calories burned on a day, or 0 when unset."""
        parse_day(day)
        value = await self.repository.get_offset(day)
        return value if value is not None else 0.0

    async def set_offset(self, day: str, calories_burned: float) -> None:
        """Replace the offset for a day."""
        parse_day(day)
        if isinstance(calories_burned, bool) or not isinstance(
            calories_burned, int | float
        ):
            raise InvalidInputError("Offset must be a number")
        if not math.isfinite(calories_burned) or calories_burned < 0:
            raise InvalidInputError("Offset must be a finite, non-negative number")
        await self.repository.set_offset(day, float(calories_burned))

    async def clear_offsets(self) -> None:
        """Delete every offset."""
        await self.repository.clear_offsets()
