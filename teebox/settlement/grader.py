"""Project a matchup resolution onto the picks placed on that matchup."""

from typing import Iterable, Mapping, Optional

from teebox.models.market import BettingMarket
from teebox.settlement.types import (
    MatchupResolution,
    PendingPick,
    PickSettlementResult,
    PlayerRoundStat,
    ResolutionKind,
    SettlementOutcome,
)


class PickGrader:
    """Grades picks against a resolved matchup. Produces results only."""

    def grade(
        self,
        picks: Iterable[PendingPick],
        resolution: MatchupResolution,
        matchup: BettingMarket,
        slot_stats: Mapping[int, PlayerRoundStat],
        round_num: Optional[int] = None,
    ) -> list[PickSettlementResult]:
        """Grade each pick; ``round_num`` is the round actually settled (defaults to the matchup's)."""
        if round_num is None:
            round_num = matchup.round_num
        snapshot = [slot_stats[s].snapshot() for s in sorted(slot_stats)]
        positions = {f"slot{s}": slot_stats[s].position for s in sorted(slot_stats)}

        results = []
        for pick in picks:
            outcome = self.outcome_for(pick.pick, resolution)
            results.append(
                PickSettlementResult(
                    pick_id=pick.id,
                    parlay_id=pick.parlay_id,
                    old_outcome=pick.pick_outcome,
                    new_outcome=outcome,
                    settlement_reason=f"{outcome.value.capitalize()}: {resolution.reason}",
                    player_stats=snapshot,
                    settlement_data={
                        "matchup_id": matchup.id,
                        "matchup_type": matchup.market_type,
                        "round_num": round_num,
                        "pick_position": pick.pick,
                        "matchup_result": resolution.to_dict(),
                        "player_positions": positions,
                    },
                )
            )
        return results

    @staticmethod
    def outcome_for(picked_slot: int, resolution: MatchupResolution) -> SettlementOutcome:
        if resolution.kind == ResolutionKind.VOID:
            return SettlementOutcome.VOID
        if resolution.kind == ResolutionKind.PUSH:
            return SettlementOutcome.PUSH
        if picked_slot == resolution.winning_slot:
            return SettlementOutcome.WIN
        return SettlementOutcome.LOSS
