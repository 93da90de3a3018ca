"""Decide a round matchup from player round stats.

Pure decision logic, no I/O. Given the same stats it always returns the same
resolution.
"""

import logging
from typing import Iterable, Mapping, Optional

from teebox.models.market import MatchupSlot
from teebox.settlement.errors import MissingStatsError, RoundIncompleteError, ScoreBasisMismatchError
from teebox.settlement.positions import parse_position
from teebox.settlement.types import MatchupResolution, PlayerRoundStat, ResolutionKind, ScoreBasis

logger = logging.getLogger(__name__)


def format_score(score: int, strokes: bool = False) -> str:
    """Golf-style score relative to par: -4, E, +2. Stroke counts print as-is."""
    if strokes:
        return str(score)
    if score == 0:
        return "E"
    return f"+{score}" if score > 0 else str(score)


def _join_slots(slots: list[int]) -> str:
    return ", ".join(str(s) for s in slots)


class StatIndex:
    """Lookup of normalized stats by (player, round).

    Players are matched on DataGolf id when both sides have one, otherwise on
    case-insensitive name.
    """

    def __init__(self, stats: Iterable[PlayerRoundStat]):
        self._by_id: dict[tuple[int, int], PlayerRoundStat] = {}
        self._by_name: dict[tuple[str, int], PlayerRoundStat] = {}
        for stat in stats:
            if stat.dg_id is not None:
                self._by_id.setdefault((stat.dg_id, stat.round_num), stat)
            self._by_name.setdefault((self._name_key(stat.player_name), stat.round_num), stat)

    @staticmethod
    def _name_key(name: str) -> str:
        return " ".join((name or "").lower().split())

    def __len__(self) -> int:
        return len(self._by_name)

    def find(self, dg_id: Optional[int], player_name: str, round_num: int) -> Optional[PlayerRoundStat]:
        if dg_id is not None:
            stat = self._by_id.get((dg_id, round_num))
            if stat is not None:
                return stat
        return self._by_name.get((self._name_key(player_name), round_num))

    def for_slots(self, slots: list[MatchupSlot], round_num: int) -> dict[int, Optional[PlayerRoundStat]]:
        return {s.slot: self.find(s.dg_id, s.player_name, round_num) for s in slots}


class MatchupResolver:
    """Decides the winning slot of a 2-ball or 3-ball round matchup."""

    def resolve(
        self,
        matchup_id: int,
        round_num: int,
        slot_stats: Mapping[int, Optional[PlayerRoundStat]],
        slot_names: Optional[Mapping[int, str]] = None,
    ) -> MatchupResolution:
        """Resolve one matchup.

        Raises MissingStatsError when any slot has no stats for the round and
        RoundIncompleteError when any slot is still on the course. A withdrawal
        or disqualification voids the matchup before completeness is considered.
        ScoreBasisMismatchError when the slots mix stroke counts and to-par scores.
        """
        slot_names = slot_names or {}
        slots = sorted(slot_stats)

        missing = [s for s in slots if slot_stats[s] is None]
        if missing:
            labels = [self._label(s, slot_names.get(s)) for s in missing]
            raise MissingStatsError(matchup_id, round_num, labels)

        stats: dict[int, PlayerRoundStat] = {s: slot_stats[s] for s in slots}
        mismatched = [s for s, stat in stats.items() if stat.round_num != round_num]
        if mismatched:
            raise MissingStatsError(
                matchup_id,
                round_num,
                [self._label(s, stats[s].player_name) for s in mismatched],
            )

        # slot -> disqualified (True) or withdrew (False)
        out = {s: parse_position(stat.position).is_disqualified and not stat.withdrawn
               for s, stat in stats.items() if self._is_out(stat)}
        if out:
            any_dq = any(out.values())
            if len(out) == len(slots):
                reason = "All players withdrew or were disqualified" if any_dq else "All players withdrew"
            elif len(out) == 1:
                s = next(iter(out))
                verb = "was disqualified" if out[s] else "withdrew"
                reason = f"{self._label(s, stats[s].player_name)} {verb}"
            else:
                verb = "withdrew or were disqualified" if any_dq else "withdrew"
                reason = f"Slots {_join_slots(sorted(out))} {verb}"
            return MatchupResolution(None, ResolutionKind.VOID, reason)

        incomplete = [s for s, stat in stats.items() if not self._is_round_complete(stat)]
        if incomplete:
            raise RoundIncompleteError(
                matchup_id, round_num, {s: stats[s].thru for s in slots}
            )

        bases = {s: stats[s].score_basis for s in slots}
        if len(set(bases.values())) > 1:
            raise ScoreBasisMismatchError(
                matchup_id, round_num, {s: basis.value for s, basis in bases.items()}
            )

        scores = {s: stats[s].round_score for s in slots}
        strokes = bases[slots[0]] == ScoreBasis.STROKES
        best = min(scores.values())
        leaders = [s for s in slots if scores[s] == best]

        if len(leaders) > 1:
            return MatchupResolution(
                None,
                ResolutionKind.PUSH,
                f"Tie - slots {_join_slots(leaders)} tied at {format_score(best, strokes)}",
            )

        winner = leaders[0]
        others = ", ".join(
            f"{self._label(s, stats[s].player_name)} shot {format_score(scores[s], strokes)}"
            for s in slots if s != winner
        )
        reason = f"{self._label(winner, stats[winner].player_name)} shot {format_score(best, strokes)}, {others}"
        return MatchupResolution(winner, ResolutionKind.WIN, reason)

    @staticmethod
    def _label(slot: int, name: Optional[str]) -> str:
        return f"Slot {slot} ({name})" if name else f"Slot {slot}"

    @staticmethod
    def _is_out(stat: PlayerRoundStat) -> bool:
        return stat.withdrawn or parse_position(stat.position).is_out

    @staticmethod
    def _is_round_complete(stat: PlayerRoundStat) -> bool:
        if stat.round_complete or stat.thru >= 18:
            return True
        return parse_position(stat.position).is_finished
