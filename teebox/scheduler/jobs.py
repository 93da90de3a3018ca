"""Job definitions for scheduled tasks."""

import logging
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class JobType(str, Enum):
    """Types of scheduled jobs."""

    SETTLE_COMPLETED = "settle_completed"


async def settle_completed_job(service, days_back: Optional[int] = None) -> dict:
    """Settle recently finished tournaments that still have pending picks.

    Errors are logged and returned so the scheduler keeps the job alive.
    """
    logger.info("Running scheduled settlement of completed tournaments")
    try:
        summary = await service.settle_completed_tournaments(days_back)
    except Exception as e:
        logger.error(f"Scheduled settlement failed: {e}")
        return {"action": "error", "error": str(e)}

    logger.info(
        f"Scheduled settlement finished: {summary.get('successful_settlements', 0)}/"
        f"{summary.get('tournaments_processed', 0)} tournaments, "
        f"{summary.get('total_picks_settled', 0)} picks"
    )
    return summary
