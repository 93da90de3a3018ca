"""Backfill of the UI-facing live stats table after a settlement run."""

import logging
from typing import Sequence

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from teebox.config import utc_now_naive
from teebox.models.live_stats import LiveTournamentStat
from teebox.settlement.types import PlayerRoundStat

logger = logging.getLogger(__name__)


def to_live_row(stat: PlayerRoundStat, event_name: str) -> dict:
    """Map a normalized stat onto the live_tournament_stats shape."""
    return {
        "dg_id": stat.dg_id,
        "player_name": stat.player_name,
        "event_name": event_name,
        "course_name": "",
        "round_num": str(stat.round_num),
        "position": stat.position or "",
        "thru": 18 if stat.historical else stat.thru,
        "today": stat.today_score or 0,
        "total": stat.total_score or 0,
        "data_golf_updated_at": utc_now_naive(),
    }


async def populate_live_stats(
    db: AsyncSession,
    event_id: int,
    event_name: str,
    stats: Sequence[PlayerRoundStat],
    batch_size: int = 100,
) -> int:
    """Replace the event's cached rows with the freshly fetched stats.

    Failures are logged and swallowed; this table never affects settlement.
    Returns the number of rows written.
    """
    try:
        await db.execute(
            delete(LiveTournamentStat).where(LiveTournamentStat.event_name == event_name)
        )

        rows = [to_live_row(s, event_name) for s in stats if s.round_num]
        for i in range(0, len(rows), batch_size):
            db.add_all([LiveTournamentStat(**row) for row in rows[i:i + batch_size]])
            await db.flush()

        await db.commit()
        logger.info(f"Populated {len(rows)} live stats records for event {event_id} ({event_name})")
        return len(rows)
    except Exception as e:
        logger.error(f"Failed to populate live stats for event {event_id}: {e}")
        await db.rollback()
        return 0
