"""Parlay outcome and payout roll-up.

A parlay is only decided once every one of its picks is settled. Outcome
precedence:

1. any loss                   -> loss, payout 0
2. all void                   -> void, stake refunded
3. push(es) with wins/pushes  -> push
4. all win                    -> win, potential payout
5. void(s) with wins          -> push

For 3 and 5 the payout is the stake when nothing won. When some legs won, the
payout is re-priced over the winning legs only (stake x product of their
decimal odds). The legacy behaviour refunded the stake in that case as well;
it is kept behind ``legacy_push_payout`` and as the fallback when a winning
leg has no recorded odds.
"""

import logging
import math
from typing import Iterable, Optional, Sequence

from teebox.models.parlay import Parlay, ParlayPick
from teebox.settlement.types import ParlayOutcome, SettlementOutcome, SettlementStatus

logger = logging.getLogger(__name__)

_VALID = {o.value for o in SettlementOutcome}


def _money(value: float) -> float:
    return round(value, 2)


def combine_leg_outcomes(
    outcomes: Sequence[str],
    stake: float,
    potential_payout: Optional[float],
    winning_leg_odds: Sequence[Optional[float]] = (),
    legacy_push_payout: bool = False,
) -> tuple[SettlementOutcome, float, str]:
    """Combine settled leg outcomes into (parlay outcome, payout, note)."""
    stake = float(stake or 0)
    if not outcomes:
        raise ValueError("Cannot combine an empty parlay")

    if SettlementOutcome.LOSS.value in outcomes:
        return SettlementOutcome.LOSS, 0.0, "At least one leg lost"

    if all(o == SettlementOutcome.VOID.value for o in outcomes):
        return SettlementOutcome.VOID, _money(stake), "All legs void - stake refunded"

    if all(o == SettlementOutcome.WIN.value for o in outcomes):
        payout = potential_payout if potential_payout is not None else _reprice(stake, winning_leg_odds)
        return SettlementOutcome.WIN, _money(payout or stake), "All legs won"

    # Remaining cases: no loss, at least one push or void, the rest win/push/void
    wins = sum(1 for o in outcomes if o == SettlementOutcome.WIN.value)
    if wins == 0:
        return SettlementOutcome.PUSH, _money(stake), "No winning legs - stake refunded"

    if legacy_push_payout:
        return SettlementOutcome.PUSH, _money(stake), "Mixed win/push legs - stake refunded (legacy)"

    repriced = _reprice(stake, winning_leg_odds)
    if repriced is None:
        return SettlementOutcome.PUSH, _money(stake), "Mixed legs without leg odds - stake refunded"
    return SettlementOutcome.PUSH, _money(repriced), f"Re-priced over {wins} winning leg(s)"


def _reprice(stake: float, odds: Sequence[Optional[float]]) -> Optional[float]:
    if not odds or any(o is None or o <= 1.0 for o in odds):
        return None
    return stake * math.prod(odds)


class ParlayAggregator:
    """Decides parlay outcomes for parlays whose picks are all settled."""

    def __init__(self, legacy_push_payout: bool = False):
        self.legacy_push_payout = legacy_push_payout

    @staticmethod
    def is_ready(picks: Iterable[ParlayPick]) -> bool:
        picks = list(picks)
        return bool(picks) and all(
            p.settlement_status == SettlementStatus.SETTLED.value and p.pick_outcome in _VALID
            for p in picks
        )

    def evaluate(self, parlay: Parlay) -> Optional[ParlayOutcome]:
        """Outcome for one parlay, or None if any pick is still pending."""
        if parlay.outcome is not None:
            return None
        if not self.is_ready(parlay.picks):
            return None

        outcomes = [p.pick_outcome for p in parlay.picks]
        winning_odds = [p.decimal_odds for p in parlay.picks if p.pick_outcome == SettlementOutcome.WIN.value]
        potential = parlay.potential_payout
        if potential is None and parlay.total_odds:
            potential = float(parlay.amount or 0) * parlay.total_odds

        outcome, payout, note = combine_leg_outcomes(
            outcomes,
            parlay.amount,
            potential,
            winning_leg_odds=winning_odds,
            legacy_push_payout=self.legacy_push_payout,
        )
        return ParlayOutcome(parlay_id=parlay.id, outcome=outcome, actual_payout=payout, note=note)

    def aggregate(self, parlays: Iterable[Parlay]) -> list[ParlayOutcome]:
        decided = []
        skipped = 0
        for parlay in parlays:
            result = self.evaluate(parlay)
            if result is None:
                skipped += 1
                continue
            decided.append(result)
        if skipped:
            logger.debug(f"Parlay roll-up skipped {skipped} parlays with unsettled picks")
        return decided
