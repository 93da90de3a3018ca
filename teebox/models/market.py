"""Betting market model: a 2-ball or 3-ball round matchup."""

from datetime import datetime
from typing import NamedTuple, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from teebox.config import utc_now_naive
from teebox.models.database import Base


class MatchupSlot(NamedTuple):
    """One player position within a matchup (slot 1..N)."""

    slot: int
    dg_id: Optional[int]
    player_name: str


class BettingMarket(Base):
    """A group of 2 or 3 players bet against each other for one round."""

    __tablename__ = "betting_markets"
    __table_args__ = (Index("ix_betting_markets_event_round", "event_id", "round_num"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(Integer, ForeignKey("tournaments.event_id"))
    round_num: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # two_way | three_way
    market_type: Mapped[str] = mapped_column(String(20), default="two_way")

    player1_dg_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    player1_name: Mapped[str] = mapped_column(String(100))
    player2_dg_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    player2_name: Mapped[str] = mapped_column(String(100))
    player3_dg_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    player3_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now_naive)

    @property
    def is_three_way(self) -> bool:
        return self.market_type == "three_way"

    def slots(self) -> list[MatchupSlot]:
        """Ordered slots for this matchup; a three-way market always has three."""
        slots = [
            MatchupSlot(1, self.player1_dg_id, self.player1_name),
            MatchupSlot(2, self.player2_dg_id, self.player2_name),
        ]
        if self.is_three_way or self.player3_name:
            slots.append(MatchupSlot(3, self.player3_dg_id, self.player3_name or ""))
        return slots

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "event_id": self.event_id,
            "round_num": self.round_num,
            "market_type": self.market_type,
            "slots": [s._asdict() for s in self.slots()],
        }
