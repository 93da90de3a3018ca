"""FastAPI application entry point for Teebox."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from teebox import __version__
from teebox.api import settlement as settlement_api
from teebox.config import settings
from teebox.models.database import async_session, init_db
from teebox.settlement.service import SettlementService

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events."""
    logger.info("Starting Teebox...")

    # Ensure data directory exists
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)

    await init_db()
    logger.info(f"Database initialized at {settings.db_path}")

    if not settings.datagolf_api_key:
        logger.warning("DATAGOLF_API_KEY is not set - settlement runs will fail to fetch stats")

    service = SettlementService.from_settings(settings, async_session)
    app.state.settlement_service = service

    scheduler = None
    if not settings.disable_background:
        from teebox.scheduler.manager import SchedulerManager

        scheduler = SchedulerManager()
        await scheduler.start()
        scheduler.setup_settlement_job(
            service,
            interval_minutes=settings.settle_interval_minutes,
            days_back=settings.completed_lookback_days,
        )
    else:
        logger.info("Background services disabled (TEEBOX_DISABLE_BACKGROUND=true)")
    app.state.scheduler = scheduler

    yield

    logger.info("Shutting down Teebox...")
    if scheduler:
        await scheduler.stop()
    await service.close()


app = FastAPI(
    title="Teebox",
    description="Golf matchup and parlay settlement engine",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(settlement_api.router, prefix="/api/settlement", tags=["settlement"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("teebox.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
