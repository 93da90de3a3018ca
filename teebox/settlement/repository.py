"""Settlement reads and writes against the relational store."""

import json
import logging
from datetime import date, datetime
from typing import Optional, Sequence, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from teebox.models.market import BettingMarket
from teebox.models.parlay import Parlay, ParlayPick
from teebox.models.settlement import SettlementHistory
from teebox.models.tournament import Tournament
from teebox.settlement.types import SettlementStatus

logger = logging.getLogger(__name__)

PickT = TypeVar("PickT")


class SettlementRepository:
    """Thin query/update layer over one AsyncSession.

    Writes are flushed, not committed; the caller owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # ── reads ────────────────────────────────────────────────────────────────

    async def get_tournament(self, event_id: int) -> Optional[Tournament]:
        result = await self.db.execute(select(Tournament).where(Tournament.event_id == event_id))
        return result.scalar_one_or_none()

    async def get_pending_picks(self, event_id: int) -> list[ParlayPick]:
        result = await self.db.execute(
            select(ParlayPick)
            .where(
                ParlayPick.event_id == event_id,
                ParlayPick.settlement_status == SettlementStatus.PENDING.value,
            )
            .order_by(ParlayPick.matchup_id, ParlayPick.id)
        )
        picks = list(result.scalars().all())
        rounds = sorted({p.round_num for p in picks if p.round_num})
        logger.info(
            f"Found {len(picks)} pending picks for event {event_id}"
            + (f" across rounds: {', '.join(str(r) for r in rounds)}" if rounds else "")
        )
        return picks

    async def get_matchup(self, matchup_id: int) -> Optional[BettingMarket]:
        result = await self.db.execute(select(BettingMarket).where(BettingMarket.id == matchup_id))
        return result.scalar_one_or_none()

    async def get_unsettled_parlays_for_event(self, event_id: int) -> list[Parlay]:
        """Parlays with at least one pick in the event and no outcome yet."""
        parlay_ids = (
            select(ParlayPick.parlay_id)
            .where(ParlayPick.event_id == event_id)
            .distinct()
        )
        result = await self.db.execute(
            select(Parlay)
            .where(Parlay.id.in_(parlay_ids), Parlay.outcome.is_(None))
            .options(selectinload(Parlay.picks))
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def get_parlay(self, parlay_id: int) -> Optional[Parlay]:
        result = await self.db.execute(
            select(Parlay)
            .where(Parlay.id == parlay_id)
            .options(selectinload(Parlay.picks))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_tournaments_with_pending_picks(self, ended_since: Optional[date] = None) -> list[Tournament]:
        query = (
            select(Tournament)
            .join(ParlayPick, ParlayPick.event_id == Tournament.event_id)
            .where(ParlayPick.settlement_status == SettlementStatus.PENDING.value)
            .distinct()
            .order_by(Tournament.event_id)
        )
        if ended_since is not None:
            query = query.where(Tournament.end_date.is_not(None), Tournament.end_date >= ended_since)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_settlement_history(self, pick_id: int) -> list[SettlementHistory]:
        result = await self.db.execute(
            select(SettlementHistory)
            .where(SettlementHistory.parlay_pick_id == pick_id)
            .order_by(SettlementHistory.id)
        )
        return list(result.scalars().all())

    async def count_picks_by_status(self) -> dict[str, int]:
        result = await self.db.execute(
            select(ParlayPick.settlement_status, func.count(ParlayPick.id))
            .group_by(ParlayPick.settlement_status)
        )
        return {status or "unknown": count for status, count in result.all()}

    async def pending_picks_by_event(self) -> list[dict]:
        result = await self.db.execute(
            select(
                ParlayPick.event_id,
                Tournament.event_name,
                Tournament.tour,
                func.count(ParlayPick.id),
            )
            .outerjoin(Tournament, Tournament.event_id == ParlayPick.event_id)
            .where(ParlayPick.settlement_status == SettlementStatus.PENDING.value)
            .group_by(ParlayPick.event_id, Tournament.event_name, Tournament.tour)
            .order_by(ParlayPick.event_id)
        )
        return [
            {
                "event_id": event_id,
                "tournament_name": name or "Unknown",
                "tour": tour or "Unknown",
                "pending_picks": count,
            }
            for event_id, name, tour, count in result.all()
        ]

    # ── writes ───────────────────────────────────────────────────────────────

    async def update_pick_settlement(
        self,
        pick_id: int,
        outcome: str,
        settled_at: datetime,
        reason: str,
    ) -> bool:
        """Mark a pending pick settled. Returns False if it was no longer pending."""
        result = await self.db.execute(
            update(ParlayPick)
            .where(
                ParlayPick.id == pick_id,
                ParlayPick.settlement_status == SettlementStatus.PENDING.value,
            )
            .values(
                pick_outcome=outcome,
                settlement_status=SettlementStatus.SETTLED.value,
                settled_at=settled_at,
                settlement_notes=reason,
            )
        )
        return result.rowcount == 1

    async def reset_pick(self, pick_id: int) -> None:
        await self.db.execute(
            update(ParlayPick)
            .where(ParlayPick.id == pick_id)
            .values(
                settlement_status=SettlementStatus.PENDING.value,
                pick_outcome=None,
                settled_at=None,
                settlement_notes=None,
            )
        )

    async def append_settlement_record(
        self,
        pick_id: int,
        event_id: int,
        method: str,
        new_outcome: Optional[str],
        reason: str,
        old_outcome: Optional[str] = None,
        tour_type: Optional[str] = None,
        settlement_data: Optional[dict] = None,
        settled_by: str = "system",
    ) -> SettlementHistory:
        record = SettlementHistory(
            parlay_pick_id=pick_id,
            event_id=event_id,
            tour_type=tour_type,
            settlement_method=method,
            old_outcome=old_outcome,
            new_outcome=new_outcome,
            settlement_reason=reason,
            settlement_data=json.dumps(settlement_data, default=str) if settlement_data is not None else None,
            settled_by=settled_by,
        )
        self.db.add(record)
        await self.db.flush()
        return record

    async def update_parlay_outcome(
        self,
        parlay_id: int,
        outcome: Optional[str],
        actual_payout: Optional[float],
        settled_at: Optional[datetime] = None,
    ) -> None:
        await self.db.execute(
            update(Parlay)
            .where(Parlay.id == parlay_id)
            .values(outcome=outcome, actual_payout=actual_payout, settled_at=settled_at)
        )

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()


def group_picks_by_matchup(picks: Sequence[PickT]) -> dict[int, list[PickT]]:
    """Group picks by matchup id, preserving first-seen order."""
    grouped: dict[int, list[PickT]] = {}
    for pick in picks:
        grouped.setdefault(pick.matchup_id, []).append(pick)
    return grouped
