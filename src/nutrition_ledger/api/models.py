"""Pydantic models for the local HTTP API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from nutrition_ledger.domain.entries import EntryMethod


class EntryOut(BaseModel):
    """Entry record as returned to the UI."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    day: str
    timestamp: datetime
    food: str
    quantity: float
    unit: str
    calories: float
    fat: float | None
    carbs: float | None
    protein: float | None
    method: EntryMethod
    confidence: float | None


class MacroTotalsOut(BaseModel):
    """Summed calories and macros."""

    model_config = ConfigDict(from_attributes=True)

    calories: float
    fat: float
    carbs: float
    protein: float


class DailyPointOut(BaseModel):
    """One day of a series."""

    model_config = ConfigDict(from_attributes=True)

    day: str
    totals: MacroTotalsOut
    offset: float
    net_calories: float


class PeriodSummaryOut(BaseModel):
    """Series for a window with per-day averages."""

    model_config = ConfigDict(from_attributes=True)

    daily: list[DailyPointOut]
    avg_calories: float
    avg_fat: float
    avg_carbs: float
    avg_protein: float
    avg_net_calories: float


class RankedFoodOut(BaseModel):
    """Deduplicated food for autocomplete."""

    model_config = ConfigDict(from_attributes=True)

    food: str
    frequency: int
    last_used_at: datetime
    representative: EntryOut


class OffsetIn(BaseModel):
    """Calories burned on a day."""

    calories_burned: float = Field(ge=0)


class OffsetOut(BaseModel):
    """Stored calories burned on a day."""

    day: str
    calories_burned: float


class MigrationOut(BaseModel):
    """Outcome of a migration run."""

    status: str
    ran: bool
    examined: int
    rewritten: int
    failed: int
