"""Settle every pending pick of a tournament event.

Flow for one event:
    tournament -> pending picks -> feed stats -> group by matchup
    -> resolve + grade + persist (per matchup) -> parlay roll-up -> UI stat backfill

Per-matchup problems (missing stats, unfinished rounds, unknown matchup) are
collected into the result's ``errors`` and leave those picks pending for the
next run. Only a missing tournament or an unusable feed aborts the run.
"""

import logging
from datetime import timedelta
from typing import Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from teebox.config import Settings, utc_now_naive, utc_today
from teebox.feeds.datagolf import DataGolfFeed, get_tour_type
from teebox.settlement.errors import (
    InconsistentRoundError,
    MatchupNotFoundError,
    ParlayNotFoundError,
    SettlementError,
    TournamentNotFoundError,
)
from teebox.settlement.grader import PickGrader
from teebox.settlement.live_stats import populate_live_stats
from teebox.settlement.parlays import ParlayAggregator
from teebox.settlement.repository import SettlementRepository, group_picks_by_matchup
from teebox.settlement.resolver import MatchupResolver, StatIndex
from teebox.settlement.types import (
    ParlayOutcome,
    PendingPick,
    PickSettlementResult,
    SettlementMethod,
    SettlementOutcome,
    SettlementResult,
    TourType,
)

logger = logging.getLogger(__name__)


class SettlementService:
    """Coordinates stat fetch, grading, persistence and parlay roll-up.

    Built once by the application (see ``teebox.main``) and shared; each
    call opens its own session from ``session_factory``.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        feed: DataGolfFeed,
        resolver: Optional[MatchupResolver] = None,
        grader: Optional[PickGrader] = None,
        aggregator: Optional[ParlayAggregator] = None,
        live_stats_batch_size: int = 100,
        completed_lookback_days: int = 7,
    ):
        self.session_factory = session_factory
        self.feed = feed
        self.resolver = resolver or MatchupResolver()
        self.grader = grader or PickGrader()
        self.aggregator = aggregator or ParlayAggregator()
        self.live_stats_batch_size = live_stats_batch_size
        self.completed_lookback_days = completed_lookback_days

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
        feed: Optional[DataGolfFeed] = None,
    ) -> "SettlementService":
        return cls(
            session_factory=session_factory,
            feed=feed or DataGolfFeed.from_settings(settings),
            aggregator=ParlayAggregator(legacy_push_payout=settings.legacy_push_payout),
            live_stats_batch_size=settings.live_stats_batch_size,
            completed_lookback_days=settings.completed_lookback_days,
        )

    # ── event settlement ─────────────────────────────────────────────────────

    async def settle_event(
        self,
        event_id: int,
        method: Union[SettlementMethod, str] = SettlementMethod.AUTOMATIC,
    ) -> SettlementResult:
        """Settle all pending picks for an event.

        Raises TournamentNotFoundError or StatFetchError; everything scoped to
        a single matchup ends up in ``SettlementResult.errors`` instead.
        """
        method = SettlementMethod(method)
        logger.info(f"Starting settlement for event {event_id} using {method.value} method")

        async with self.session_factory() as db:
            repo = SettlementRepository(db)

            tournament = await repo.get_tournament(event_id)
            if tournament is None:
                raise TournamentNotFoundError(event_id)

            event_name = tournament.event_name
            tour_type = get_tour_type(event_name, tournament.tour)
            logger.info(f"Event {event_id} ({event_name}) identified as {tour_type.value} tour")

            pending = [PendingPick.from_model(p) for p in await repo.get_pending_picks(event_id)]
            result = SettlementResult(
                event_id=event_id,
                tour_type=tour_type,
                total_picks=len(pending),
                settlement_method=method,
            )
            if not pending:
                return result

            stats = await self.feed.fetch_player_stats(event_id, tour_type)
            logger.info(f"Fetched {len(stats)} player-round stats for event {event_id}")
            index = StatIndex(stats)

            for matchup_id, picks in group_picks_by_matchup(pending).items():
                try:
                    graded = await self._settle_matchup(repo, matchup_id, picks, index)
                    persisted = await self._persist_picks(repo, graded, event_id, tour_type, method)
                    await repo.commit()
                    result.settled_picks.extend(persisted)
                except SettlementError as e:
                    error_msg = f"Failed to settle matchup {matchup_id}: {e}"
                    logger.warning(error_msg)
                    result.errors.append(error_msg)
                except Exception as e:
                    error_msg = f"Failed to settle matchup {matchup_id}: {e}"
                    logger.error(error_msg)
                    result.errors.append(error_msg)
                    await repo.rollback()

            result.settled_parlays = await self._update_parlay_outcomes(repo, event_id)
            await populate_live_stats(
                db, event_id, event_name, stats, batch_size=self.live_stats_batch_size
            )

        logger.info(
            f"Settlement completed for event {event_id}: {len(result.settled_picks)} picks settled, "
            f"{len(result.settled_parlays)} parlays decided, {len(result.errors)} errors"
        )
        return result

    async def _settle_matchup(
        self,
        repo: SettlementRepository,
        matchup_id: int,
        picks: list[PendingPick],
        index: StatIndex,
    ) -> list[PickSettlementResult]:
        matchup = await repo.get_matchup(matchup_id)
        if matchup is None:
            raise MatchupNotFoundError(matchup_id)

        rounds = {p.round_num for p in picks if p.round_num}
        if len(rounds) > 1:
            raise InconsistentRoundError(
                f"Picks disagree on round: {', '.join(str(r) for r in sorted(rounds))}"
            )
        round_num = rounds.pop() if rounds else matchup.round_num
        if not round_num:
            raise InconsistentRoundError(f"Unable to determine round number for matchup {matchup_id}")

        logger.info(f"Settling matchup {matchup_id} ({matchup.market_type}) for round {round_num}")

        slots = matchup.slots()
        slot_stats = index.for_slots(slots, round_num)
        resolution = self.resolver.resolve(
            matchup_id,
            round_num,
            slot_stats,
            slot_names={s.slot: s.player_name for s in slots},
        )
        logger.info(f"Matchup {matchup_id} resolved: {resolution.kind.value} - {resolution.reason}")
        return self.grader.grade(picks, resolution, matchup, slot_stats, round_num=round_num)

    async def _persist_picks(
        self,
        repo: SettlementRepository,
        graded: list[PickSettlementResult],
        event_id: int,
        tour_type: TourType,
        method: SettlementMethod,
    ) -> list[PickSettlementResult]:
        now = utc_now_naive()
        persisted = []
        for pick in graded:
            updated = await repo.update_pick_settlement(
                pick.pick_id,
                outcome=pick.new_outcome.value,
                settled_at=now,
                reason=pick.settlement_reason,
            )
            if not updated:
                logger.warning(f"Pick {pick.pick_id} was settled elsewhere, skipping")
                continue
            await repo.append_settlement_record(
                pick.pick_id,
                event_id=event_id,
                method=method.value,
                new_outcome=pick.new_outcome.value,
                reason=pick.settlement_reason,
                old_outcome=pick.old_outcome,
                tour_type=tour_type.value,
                settlement_data={
                    "player_stats": pick.player_stats,
                    "settlement_context": pick.settlement_data,
                },
            )
            persisted.append(pick)
        return persisted

    async def _update_parlay_outcomes(self, repo: SettlementRepository, event_id: int) -> list[ParlayOutcome]:
        """Roll settled picks up into parlay outcomes. Never fails the run."""
        try:
            parlays = await repo.get_unsettled_parlays_for_event(event_id)
            decided = self.aggregator.aggregate(parlays)
            now = utc_now_naive()
            for outcome in decided:
                await repo.update_parlay_outcome(
                    outcome.parlay_id,
                    outcome.outcome.value,
                    outcome.actual_payout,
                    settled_at=now,
                )
                logger.info(
                    f"Updated parlay {outcome.parlay_id} outcome to {outcome.outcome.value} "
                    f"with payout {outcome.actual_payout:.2f} ({outcome.note})"
                )
            await repo.commit()
            return decided
        except Exception as e:
            logger.error(f"Failed to update parlay outcomes for event {event_id}: {e}")
            await repo.rollback()
            return []

    # ── batch / admin operations ─────────────────────────────────────────────

    async def settle_completed_tournaments(self, days_back: Optional[int] = None) -> dict:
        """Settle every recently finished tournament that still has pending picks."""
        days_back = self.completed_lookback_days if days_back is None else days_back
        since = utc_today() - timedelta(days=days_back)

        async with self.session_factory() as db:
            tournaments = [
                (t.event_id, t.event_name, t.tour)
                for t in await SettlementRepository(db).get_tournaments_with_pending_picks(ended_since=since)
            ]

        if not tournaments:
            logger.info("No completed tournaments with pending picks")
            return {
                "action": "skipped",
                "tournaments_processed": 0,
                "successful_settlements": 0,
                "total_picks_settled": 0,
                "results": [],
            }

        logger.info(f"Found {len(tournaments)} completed tournaments with pending picks")
        results = []
        successful = 0
        total_settled = 0
        for event_id, event_name, tour in tournaments:
            try:
                outcome = await self.settle_event(event_id, SettlementMethod.AUTOMATIC)
                successful += 1
                total_settled += len(outcome.settled_picks)
                results.append({
                    "event_id": event_id,
                    "tournament": event_name,
                    "tour": tour,
                    "status": "settled",
                    "picks_settled": len(outcome.settled_picks),
                    "errors": outcome.errors,
                })
            except Exception as e:
                logger.error(f"Error settling tournament {event_name} ({event_id}): {e}")
                results.append({
                    "event_id": event_id,
                    "tournament": event_name,
                    "tour": tour,
                    "status": "error",
                    "error": str(e),
                    "picks_settled": 0,
                })

        logger.info(
            f"Completed tournament settlement: {successful}/{len(tournaments)} tournaments settled, "
            f"{total_settled} picks processed"
        )
        return {
            "action": "completed",
            "tournaments_processed": len(tournaments),
            "successful_settlements": successful,
            "total_picks_settled": total_settled,
            "results": results,
        }

    async def reverse_parlay_settlement(self, parlay_id: int, reason: str = "", settled_by: str = "admin") -> dict:
        """Reset a parlay and its picks to pending, recording an override per pick."""
        async with self.session_factory() as db:
            repo = SettlementRepository(db)
            parlay = await repo.get_parlay(parlay_id)
            if parlay is None:
                raise ParlayNotFoundError(parlay_id)

            picks = [PendingPick.from_model(p) for p in parlay.picks]
            for pick in picks:
                await repo.reset_pick(pick.id)
                await repo.append_settlement_record(
                    pick.id,
                    event_id=pick.event_id,
                    method=SettlementMethod.OVERRIDE.value,
                    new_outcome=None,
                    reason=f"Reversed: {reason}" if reason else "Reversed",
                    old_outcome=pick.pick_outcome,
                    settled_by=settled_by,
                )
            await repo.update_parlay_outcome(parlay_id, None, None, settled_at=None)
            await repo.commit()

        logger.info(f"Reversed settlement for parlay {parlay_id}: {len(picks)} picks reset. Reason: {reason}")
        return {"parlay_id": parlay_id, "picks_reset": len(picks), "reason": reason}

    async def settlement_status(self) -> dict:
        """Pick counts by settlement status and pending picks per event."""
        async with self.session_factory() as db:
            repo = SettlementRepository(db)
            counts = await repo.count_picks_by_status()
            events = await repo.pending_picks_by_event()

        return {
            "summary": {
                "total_picks": sum(counts.values()),
                "status_breakdown": counts,
                "pending_picks": counts.get("pending", 0),
                "events_with_pending": len(events),
            },
            "events_detail": events,
        }

    async def close(self) -> None:
        await self.feed.close()


def summarize_outcomes(picks: list[PickSettlementResult]) -> dict[str, int]:
    """Count settled picks by outcome (for logs and API responses)."""
    counts = {o.value: 0 for o in SettlementOutcome}
    for pick in picks:
        counts[pick.new_outcome.value] += 1
    return counts
