"""Value types shared by the settlement pipeline."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Optional


class TourType(str, Enum):
    """Tour classification of a tournament."""

    PGA = "pga"
    EURO = "euro"
    DP_WORLD = "dp_world"
    KORN_FERRY = "korn_ferry"
    LIV = "liv"


class SettlementOutcome(str, Enum):
    WIN = "win"
    LOSS = "loss"
    PUSH = "push"
    VOID = "void"


class SettlementMethod(str, Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"
    OVERRIDE = "override"


class SettlementStatus(str, Enum):
    PENDING = "pending"
    SETTLED = "settled"


class ResolutionKind(str, Enum):
    """How a matchup was decided, before projecting onto picks."""

    WIN = "win"
    PUSH = "push"
    VOID = "void"


class ScoreBasis(str, Enum):
    """What a round score is measured in."""

    TO_PAR = "to_par"
    STROKES = "strokes"


@dataclass
class PlayerRoundStat:
    """One player's statistics for one round of one event."""

    dg_id: Optional[int]
    player_name: str
    event_id: int
    tour_type: TourType
    round_num: int
    position: Optional[str] = None
    total_score: Optional[int] = None
    today_score: Optional[int] = None
    thru: int = 0
    withdrawn: bool = False
    round_complete: bool = False
    made_cut: Optional[bool] = None
    historical: bool = False
    score_basis: ScoreBasis = ScoreBasis.TO_PAR
    raw_data: dict = field(default_factory=dict, repr=False)

    @property
    def round_score(self) -> int:
        """Score used to compare players in a round matchup."""
        if self.today_score is not None:
            return self.today_score
        if self.total_score is not None:
            return self.total_score
        return 0

    def snapshot(self) -> dict:
        """Audit snapshot (no raw feed payload)."""
        data = asdict(self)
        data.pop("raw_data", None)
        data["tour_type"] = self.tour_type.value
        data["score_basis"] = self.score_basis.value
        return data


@dataclass(frozen=True)
class PendingPick:
    """Detached copy of a pick row, safe to use after a session rollback."""

    id: int
    parlay_id: int
    matchup_id: int
    event_id: int
    pick: int
    round_num: Optional[int] = None
    pick_outcome: Optional[str] = None
    picked_player_name: Optional[str] = None

    @classmethod
    def from_model(cls, row: Any) -> "PendingPick":
        return cls(
            id=row.id,
            parlay_id=row.parlay_id,
            matchup_id=row.matchup_id,
            event_id=row.event_id,
            pick=row.pick,
            round_num=row.round_num,
            pick_outcome=row.pick_outcome,
            picked_player_name=row.picked_player_name,
        )


@dataclass(frozen=True)
class MatchupResolution:
    winning_slot: Optional[int]
    kind: ResolutionKind
    reason: str

    def to_dict(self) -> dict:
        return {"winning_slot": self.winning_slot, "kind": self.kind.value, "reason": self.reason}


@dataclass
class PickSettlementResult:
    pick_id: int
    parlay_id: int
    new_outcome: SettlementOutcome
    settlement_reason: str
    old_outcome: Optional[str] = None
    player_stats: list[dict] = field(default_factory=list)
    settlement_data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "pick_id": self.pick_id,
            "parlay_id": self.parlay_id,
            "old_outcome": self.old_outcome,
            "new_outcome": self.new_outcome.value,
            "settlement_reason": self.settlement_reason,
            "player_stats": self.player_stats,
            "settlement_data": self.settlement_data,
        }


@dataclass
class ParlayOutcome:
    parlay_id: int
    outcome: SettlementOutcome
    actual_payout: float
    note: str = ""

    def to_dict(self) -> dict:
        return {
            "parlay_id": self.parlay_id,
            "outcome": self.outcome.value,
            "actual_payout": self.actual_payout,
            "note": self.note,
        }


@dataclass
class SettlementResult:
    event_id: int
    tour_type: TourType
    settled_picks: list[PickSettlementResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    total_picks: int = 0
    settlement_method: SettlementMethod = SettlementMethod.AUTOMATIC
    settled_parlays: list[ParlayOutcome] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "tour_type": self.tour_type.value,
            "settled_picks": [p.to_dict() for p in self.settled_picks],
            "errors": list(self.errors),
            "total_picks": self.total_picks,
            "settlement_method": self.settlement_method.value,
            "settled_parlays": [p.to_dict() for p in self.settled_parlays],
        }
