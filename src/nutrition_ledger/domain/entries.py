"""Domain models for logged food entries."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from nutrition_ledger.domain.days import parse_day

MAX_FOOD_NAME_LENGTH = 100
MAX_UNIT_LENGTH = 32
MAX_QUANTITY = 10000.0
MAX_CALORIES = 10000.0


class EntryMethod(StrEnum):
    """How an entry was captured."""

    TEXT = "text"
    VOICE = "voice"
    BARCODE = "barcode"
    PHOTO = "photo"


@dataclass(frozen=True)
class Entry:
    """One logged food intake."""

    id: UUID
    day: str
    timestamp: datetime
    food: str
    quantity: float
    unit: str
    calories: float
    method: EntryMethod
    fat: float | None = None
    carbs: float | None = None
    protein: float | None = None
    confidence: float | None = None

    @property
    def normalized_food(self) -> str:
        """Food name used for case-insensitive grouping."""
        return normalize_food_name(self.food)


@dataclass(frozen=True)
class MacroTotals:
    """Summed calories and macros; absent macros count as zero."""

    calories: float = 0.0
    fat: float = 0.0
    carbs: float = 0.0
    protein: float = 0.0


def normalize_food_name(name: str) -> str:
    """Return the grouping key for a food name."""
    return name.strip().casefold()


class EntryDraft(BaseModel):
    """Validated input for a new entry."""

    model_config = ConfigDict(
        extra="forbid", str_strip_whitespace=True, allow_inf_nan=False
    )

    food: str = Field(min_length=1, max_length=MAX_FOOD_NAME_LENGTH)
    quantity: float = Field(gt=0, le=MAX_QUANTITY)
    unit: str = Field(min_length=1, max_length=MAX_UNIT_LENGTH)
    calories: float = Field(ge=0, le=MAX_CALORIES)
    fat: float | None = Field(default=None, ge=0)
    carbs: float | None = Field(default=None, ge=0)
    protein: float | None = Field(default=None, ge=0)
    method: EntryMethod
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    day: str | None = None

    @field_validator("day")
    @classmethod
    def _check_day(cls, value: str | None) -> str | None:
        if value is not None:
            parse_day(value)
        return value


class EntryPatch(BaseModel):
    """Validated partial edit of an entry; only set fields are applied."""

    model_config = ConfigDict(
        extra="forbid", str_strip_whitespace=True, allow_inf_nan=False
    )

    food: str | None = Field(
        default=None, min_length=1, max_length=MAX_FOOD_NAME_LENGTH
    )
    quantity: float | None = Field(default=None, gt=0, le=MAX_QUANTITY)
    unit: str | None = Field(default=None, min_length=1, max_length=MAX_UNIT_LENGTH)
    calories: float | None = Field(default=None, ge=0, le=MAX_CALORIES)
    fat: float | None = Field(default=None, ge=0)
    carbs: float | None = Field(default=None, ge=0)
    protein: float | None = Field(default=None, ge=0)
    method: EntryMethod | None = None
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _reject_cleared_required(self) -> "EntryPatch":
        for name in ("food", "quantity", "unit", "calories", "method"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")
        return self

    def changes(self) -> dict[str, object]:
        """Return only the fields that were explicitly set."""
        return self.model_dump(exclude_unset=True)
