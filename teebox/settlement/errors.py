"""Settlement exceptions.

SettlementError subclasses are scoped to a single matchup: the orchestrator
records them and moves on. Everything else aborts the run.
"""


class SettlementError(Exception):
    """A matchup could not be settled this run; its picks stay pending."""

    pass


class MissingStatsError(SettlementError):
    def __init__(self, matchup_id: int, round_num: int, missing: list[str]):
        self.matchup_id = matchup_id
        self.round_num = round_num
        self.missing = missing
        super().__init__(
            f"Missing player stats for round {round_num}: {', '.join(missing)}"
        )


class RoundIncompleteError(SettlementError):
    def __init__(self, matchup_id: int, round_num: int, holes: dict[int, int]):
        self.matchup_id = matchup_id
        self.round_num = round_num
        self.holes = holes
        detail = ", ".join(f"Slot {slot}: {thru} holes" for slot, thru in sorted(holes.items()))
        super().__init__(
            f"Cannot settle - players have not completed round {round_num}. {detail}"
        )


class MatchupNotFoundError(SettlementError):
    def __init__(self, matchup_id: int):
        self.matchup_id = matchup_id
        super().__init__(f"Matchup {matchup_id} not found")


class InconsistentRoundError(SettlementError):
    """Picks on one matchup disagree on the round, or no round is known."""

    pass


class ScoreBasisMismatchError(SettlementError):
    """Round scores for the slots are not on a comparable basis (strokes vs to-par)."""

    def __init__(self, matchup_id: int, round_num: int, bases: dict[int, str]):
        self.matchup_id = matchup_id
        self.round_num = round_num
        self.bases = bases
        detail = ", ".join(f"Slot {slot}: {basis}" for slot, basis in sorted(bases.items()))
        super().__init__(
            f"Cannot compare round {round_num} scores on different bases. {detail}"
        )


class TournamentNotFoundError(Exception):
    def __init__(self, event_id: int):
        self.event_id = event_id
        super().__init__(f"Tournament not found for event {event_id}")


class ParlayNotFoundError(Exception):
    def __init__(self, parlay_id: int):
        self.parlay_id = parlay_id
        super().__init__(f"Parlay {parlay_id} not found")
