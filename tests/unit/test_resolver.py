"""Tests for matchup resolution."""

import pytest

from teebox.models.market import MatchupSlot
from teebox.settlement.errors import MissingStatsError, RoundIncompleteError, ScoreBasisMismatchError
from teebox.settlement.resolver import MatchupResolver, StatIndex, format_score
from teebox.settlement.types import ResolutionKind, ScoreBasis


@pytest.fixture
def resolver():
    return MatchupResolver()


class TestFormatScore:
    def test_values(self):
        assert format_score(-4) == "-4"
        assert format_score(0) == "E"
        assert format_score(2) == "+2"
        assert format_score(68, strokes=True) == "68"


class TestClearWin:
    """Lowest round score wins outright."""

    def test_two_ball(self, resolver, stat_factory):
        stats = {1: stat_factory("Scheffler", 1, today=-4), 2: stat_factory("McIlroy", 2, today=-1)}
        res = resolver.resolve(1, 2, stats)
        assert res.kind == ResolutionKind.WIN
        assert res.winning_slot == 1
        assert res.reason == "Slot 1 (Scheffler) shot -4, Slot 2 (McIlroy) shot -1"

    def test_three_ball_slot_three_wins(self, resolver, stat_factory):
        stats = {
            1: stat_factory("A", 1, today=1),
            2: stat_factory("B", 2, today=0),
            3: stat_factory("C", 3, today=-2),
        }
        res = resolver.resolve(1, 2, stats)
        assert res.kind == ResolutionKind.WIN
        assert res.winning_slot == 3
        assert "Slot 3 (C) shot -2" in res.reason
        assert "Slot 2 (B) shot E" in res.reason

    def test_deterministic(self, resolver, stat_factory):
        stats = {1: stat_factory("A", 1, today=-3), 2: stat_factory("B", 2, today=-3), 3: stat_factory("C", 3, today=5)}
        first = resolver.resolve(7, 2, stats)
        for _ in range(5):
            assert resolver.resolve(7, 2, stats) == first

    def test_falls_back_to_total_when_today_missing(self, resolver, stat_factory):
        stats = {
            1: stat_factory("A", 1, today=None, total=70),
            2: stat_factory("B", 2, today=None, total=68),
        }
        res = resolver.resolve(1, 2, stats)
        assert res.winning_slot == 2


class TestTies:
    def test_two_way_tie_is_push(self, resolver, stat_factory):
        stats = {1: stat_factory("A", 1, today=-2), 2: stat_factory("B", 2, today=-2)}
        res = resolver.resolve(1, 2, stats)
        assert res.kind == ResolutionKind.PUSH
        assert res.winning_slot is None
        assert res.reason == "Tie - slots 1, 2 tied at -2"

    def test_three_way_tie_for_lowest_is_push(self, resolver, stat_factory):
        stats = {
            1: stat_factory("A", 1, today=-1),
            2: stat_factory("B", 2, today=3),
            3: stat_factory("C", 3, today=-1),
        }
        res = resolver.resolve(1, 2, stats)
        assert res.kind == ResolutionKind.PUSH
        assert "slots 1, 3" in res.reason

    def test_three_ball_tie_for_lowest_with_third_behind(self, resolver, stat_factory):
        stats = {
            1: stat_factory("A", 1, today=-2),
            2: stat_factory("B", 2, today=-2),
            3: stat_factory("C", 3, today=-1),
        }
        res = resolver.resolve(1, 2, stats)
        assert res.kind == ResolutionKind.PUSH
        assert res.winning_slot is None
        assert res.reason == "Tie - slots 1, 2 tied at -2"

    def test_tie_for_second_still_has_winner(self, resolver, stat_factory):
        stats = {
            1: stat_factory("A", 1, today=-5),
            2: stat_factory("B", 2, today=0),
            3: stat_factory("C", 3, today=0),
        }
        res = resolver.resolve(1, 2, stats)
        assert res.kind == ResolutionKind.WIN
        assert res.winning_slot == 1


class TestWithdrawals:
    """Withdrawal or disqualification voids the matchup and outranks scores and completeness."""

    def test_single_withdrawal_voids(self, resolver, stat_factory):
        stats = {
            1: stat_factory("A", 1, today=-6),
            2: stat_factory("B", 2, today=4, position="WD", withdrawn=True, thru=7),
        }
        res = resolver.resolve(1, 2, stats)
        assert res.kind == ResolutionKind.VOID
        assert res.reason == "Slot 2 (B) withdrew"

    def test_withdrawal_from_position_only(self, resolver, stat_factory):
        stats = {1: stat_factory("A", 1, position="WD", thru=4), 2: stat_factory("B", 2, thru=10)}
        res = resolver.resolve(1, 2, stats)
        assert res.kind == ResolutionKind.VOID

    def test_withdrawal_outranks_incomplete_round(self, resolver, stat_factory):
        stats = {
            1: stat_factory("A", 1, thru=9),
            2: stat_factory("B", 2, withdrawn=True, thru=3),
        }
        assert resolver.resolve(1, 2, stats).kind == ResolutionKind.VOID

    def test_all_withdrew(self, resolver, stat_factory):
        stats = {1: stat_factory("A", 1, withdrawn=True), 2: stat_factory("B", 2, withdrawn=True)}
        assert resolver.resolve(1, 2, stats).reason == "All players withdrew"

    def test_two_of_three_withdrew(self, resolver, stat_factory):
        stats = {
            1: stat_factory("A", 1, withdrawn=True),
            2: stat_factory("B", 2),
            3: stat_factory("C", 3, withdrawn=True),
        }
        assert resolver.resolve(1, 2, stats).reason == "Slots 1, 3 withdrew"

    def test_disqualified_mid_round_voids(self, resolver, stat_factory):
        stats = {
            1: stat_factory("A", 1, today=-1, thru=18),
            2: stat_factory("B", 2, today=-3, thru=9, position="DQ"),
        }
        res = resolver.resolve(1, 2, stats)
        assert res.kind == ResolutionKind.VOID
        assert res.winning_slot is None
        assert res.reason == "Slot 2 (B) was disqualified"

    def test_disqualified_after_finishing_voids(self, resolver, stat_factory):
        stats = {
            1: stat_factory("A", 1, today=2),
            2: stat_factory("B", 2, today=-5, position="DQ"),
        }
        assert resolver.resolve(1, 2, stats).kind == ResolutionKind.VOID

    def test_withdrawal_and_disqualification(self, resolver, stat_factory):
        stats = {
            1: stat_factory("A", 1, withdrawn=True),
            2: stat_factory("B", 2),
            3: stat_factory("C", 3, position="DQ"),
        }
        assert resolver.resolve(1, 2, stats).reason == "Slots 1, 3 withdrew or were disqualified"


class TestIncomplete:
    def test_incomplete_round_raises(self, resolver, stat_factory):
        stats = {1: stat_factory("A", 1, today=-3, thru=18), 2: stat_factory("B", 2, today=-1, thru=14)}
        with pytest.raises(RoundIncompleteError) as exc:
            resolver.resolve(5, 2, stats)
        assert exc.value.holes == {1: 18, 2: 14}
        assert "have not completed round 2" in str(exc.value)
        assert "Slot 2: 14 holes" in str(exc.value)

    def test_cut_player_counts_as_complete(self, resolver, stat_factory):
        stats = {1: stat_factory("A", 1, today=2, thru=0, position="CUT"), 2: stat_factory("B", 2, today=-1)}
        res = resolver.resolve(1, 2, stats)
        assert res.winning_slot == 2

    def test_round_complete_flag_overrides_thru(self, resolver, stat_factory):
        stats = {
            1: stat_factory("A", 1, today=-1, thru=0, round_complete=True),
            2: stat_factory("B", 2, today=1),
        }
        assert resolver.resolve(1, 2, stats).winning_slot == 1


class TestScoreBasis:
    def test_mixed_basis_raises(self, resolver, stat_factory):
        stats = {1: stat_factory("A", 1, today=70), 2: stat_factory("B", 2, today=-1)}
        stats[1].score_basis = ScoreBasis.STROKES
        with pytest.raises(ScoreBasisMismatchError) as exc:
            resolver.resolve(4, 2, stats)
        assert exc.value.bases == {1: "strokes", 2: "to_par"}
        assert "different bases" in str(exc.value)

    def test_strokes_compare_with_each_other(self, resolver, stat_factory):
        stats = {1: stat_factory("A", 1, today=68), 2: stat_factory("B", 2, today=71)}
        for stat in stats.values():
            stat.score_basis = ScoreBasis.STROKES
        res = resolver.resolve(4, 2, stats)
        assert res.winning_slot == 1
        assert res.reason == "Slot 1 (A) shot 68, Slot 2 (B) shot 71"


class TestMissingStats:
    def test_missing_slot_raises_with_names(self, resolver, stat_factory):
        stats = {1: stat_factory("A", 1), 2: None}
        with pytest.raises(MissingStatsError) as exc:
            resolver.resolve(3, 2, stats, slot_names={1: "A", 2: "Bob"})
        assert exc.value.missing == ["Slot 2 (Bob)"]

    def test_round_mismatch_raises(self, resolver, stat_factory):
        stats = {1: stat_factory("A", 1, round_num=2), 2: stat_factory("B", 2, round_num=1)}
        with pytest.raises(MissingStatsError):
            resolver.resolve(3, 2, stats)


class TestStatIndex:
    def test_lookup_by_id_then_name(self, stat_factory):
        index = StatIndex([
            stat_factory("Scottie Scheffler", 18417, round_num=2),
            stat_factory("No Id Player", None, round_num=2),
        ])
        slots = [
            MatchupSlot(1, 18417, "S. Scheffler"),
            MatchupSlot(2, None, "  no id   PLAYER "),
            MatchupSlot(3, 999, "Unknown"),
        ]
        found = index.for_slots(slots, 2)
        assert found[1].dg_id == 18417
        assert found[2].player_name == "No Id Player"
        assert found[3] is None

    def test_round_is_part_of_key(self, stat_factory):
        index = StatIndex([stat_factory("A", 1, round_num=1)])
        assert index.find(1, "A", 2) is None
        assert index.find(1, "A", 1) is not None
