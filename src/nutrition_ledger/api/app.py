"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from nutrition_ledger.api.models import (
    DailyPointOut,
    EntryOut,
    MigrationOut,
    OffsetIn,
    OffsetOut,
    PeriodSummaryOut,
    RankedFoodOut,
)
from nutrition_ledger.app_logging import configure_logging
from nutrition_ledger.containers import AppContainer
from nutrition_ledger.domain.entries import EntryDraft, EntryPatch
from nutrition_ledger.domain.errors import InvalidInputError, LedgerError, StorageError
from nutrition_ledger.domain.migration import MigrationReport
from nutrition_ledger.domain.stats import DailyPoint
from nutrition_ledger.services.food_search import DEFAULT_SEARCH_LIMIT
from nutrition_ledger.services.ledger import NutritionLedger


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            await app.state.container.ledger.run_migration_if_needed()
        except LedgerError:
            logger.exception("Day-key migration failed at startup")
        yield

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(
        request: Request, exc: InvalidInputError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc)},
        )

    @app.exception_handler(StorageError)
    async def storage_error_handler(
        request: Request, exc: StorageError
    ) -> JSONResponse:
        logger.error("Ledger storage failure: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Storage unavailable"},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/entries", status_code=status.HTTP_201_CREATED)
    async def create_entry(draft: EntryDraft, request: Request) -> EntryOut:
        """Log a new food entry."""
        data = draft.model_dump(exclude_unset=True)
        entry = await _ledger(request).create_entry(data)
        return EntryOut.model_validate(entry)

    @app.get("/entries")
    async def list_entries(request: Request, day: str | None = None) -> list[EntryOut]:
        """List entries for a day, defaulting to today."""
        ledger = _ledger(request)
        if day is None:
            entries = await ledger.list_entries_for_today()
        else:
            entries = await ledger.list_entries_for_day(day)
        return [EntryOut.model_validate(entry) for entry in entries]

    @app.get("/entries/export")
    async def export_entries(request: Request) -> list[EntryOut]:
        """Return every entry in chronological order."""
        entries = await _ledger(request).list_all_entries()
        return [EntryOut.model_validate(entry) for entry in entries]

    @app.get("/entries/{entry_id}")
    async def get_entry(entry_id: UUID, request: Request) -> EntryOut:
        """Return one entry."""
        entry = await _ledger(request).get_entry(entry_id)
        if entry is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return EntryOut.model_validate(entry)

    @app.patch("/entries/{entry_id}")
    async def update_entry(
        entry_id: UUID, patch: EntryPatch, request: Request
    ) -> EntryOut:
        """Apply a partial edit to an entry."""
        entry = await _ledger(request).update_entry(entry_id, patch.changes())
        if entry is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return EntryOut.model_validate(entry)

    @app.delete("/entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_entry(entry_id: UUID, request: Request) -> None:
        """Delete an entry."""
        if not await _ledger(request).delete_entry(entry_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)

    @app.get("/days/{day}")
    async def day_overview(day: str, request: Request) -> DailyPointOut:
        """Return totals, offset and net calories for a day."""
        ledger = _ledger(request)
        totals = await ledger.day_totals(day)
        offset = await ledger.get_offset(day)
        point = DailyPoint(day=day, totals=totals, offset=offset)
        return DailyPointOut.model_validate(point)

    @app.get("/days/{day}/offset")
    async def get_offset(day: str, request: Request) -> OffsetOut:
        """Return calories burned on a day."""
        value = await _ledger(request).get_offset(day)
        return OffsetOut(day=day, calories_burned=value)

    @app.put("/days/{day}/offset")
    async def set_offset(day: str, payload: OffsetIn, request: Request) -> OffsetOut:
        """Replace calories burned on a day."""
        await _ledger(request).set_offset(day, payload.calories_burned)
        return OffsetOut(day=day, calories_burned=payload.calories_burned)

    @app.get("/series")
    async def series(request: Request, days: int = 7) -> list[DailyPointOut]:
        """Return daily points for the window ending today, oldest first."""
        points = await _ledger(request).series(days)
        return [DailyPointOut.model_validate(point) for point in points]

    @app.get("/summary")
    async def summary(request: Request, days: int = 7) -> PeriodSummaryOut:
        """Return a window's daily points with averages."""
        period = await _ledger(request).summarize(days)
        return PeriodSummaryOut.model_validate(period)

    @app.get("/foods")
    async def unique_foods(request: Request) -> list[RankedFoodOut]:
        """Return previously logged foods ranked by frequency and recency."""
        foods = await _ledger(request).unique_foods()
        return [RankedFoodOut.model_validate(food) for food in foods]

    @app.get("/foods/search")
    async def search_foods(
        request: Request, q: str = "", limit: int = DEFAULT_SEARCH_LIMIT
    ) -> list[RankedFoodOut]:
        """Search previously logged foods."""
        foods = await _ledger(request).search(q, limit)
        return [RankedFoodOut.model_validate(food) for food in foods]

    @app.post("/migration/run")
    async def run_migration(request: Request) -> MigrationOut:
        """Run the day-key migration if it has not completed yet."""
        report = await _ledger(request).run_migration_if_needed()
        return _migration_out(report)

    return app


def _ledger(request: Request) -> NutritionLedger:
    container: AppContainer = request.app.state.container
    return container.ledger


def _migration_out(report: MigrationReport) -> MigrationOut:
    return MigrationOut(
        status=report.status.value,
        ran=report.ran,
        examined=report.examined,
        rewritten=len(report.rewritten),
        failed=len(report.failures),
    )
