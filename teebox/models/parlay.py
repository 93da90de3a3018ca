"""Parlay and ParlayPick models."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from teebox.config import utc_now_naive
from teebox.models.database import Base


class Parlay(Base):
    """An ordered bundle of picks combined into one all-or-nothing wager."""

    __tablename__ = "parlays"
    __table_args__ = (Index("ix_parlays_outcome", "outcome"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    round_num: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    amount: Mapped[float] = mapped_column(Float, default=0.0)  # stake
    total_odds: Mapped[Optional[float]] = mapped_column(Float, nullable=True)  # decimal
    potential_payout: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Settlement: win | loss | push | void, NULL until every pick is settled
    outcome: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    actual_payout: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    settled_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now_naive)

    picks: Mapped[List["ParlayPick"]] = relationship(
        "ParlayPick",
        back_populates="parlay",
        cascade="all, delete-orphan",
        order_by="ParlayPick.id",
    )

    def to_dict(self, include_picks: bool = False) -> dict:
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "round_num": self.round_num,
            "amount": self.amount,
            "total_odds": self.total_odds,
            "potential_payout": self.potential_payout,
            "outcome": self.outcome,
            "actual_payout": self.actual_payout,
            "settled_at": self.settled_at.isoformat() if self.settled_at else None,
            "created_at": self.created_at.isoformat(),
        }
        if include_picks:
            data["picks"] = [p.to_dict() for p in self.picks]
        return data


class ParlayPick(Base):
    """A single selection of one slot within a matchup."""

    __tablename__ = "parlay_picks"
    __table_args__ = (
        Index("ix_parlay_picks_event_status", "event_id", "settlement_status"),
        Index("ix_parlay_picks_parlay_id", "parlay_id"),
        Index("ix_parlay_picks_matchup_id", "matchup_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    parlay_id: Mapped[int] = mapped_column(Integer, ForeignKey("parlays.id"))
    matchup_id: Mapped[int] = mapped_column(Integer, ForeignKey("betting_markets.id"))
    event_id: Mapped[int] = mapped_column(Integer, ForeignKey("tournaments.event_id"))
    round_num: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    pick: Mapped[int] = mapped_column(Integer)  # chosen slot, 1..3
    picked_player_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    picked_player_dg_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    decimal_odds: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Settlement
    settlement_status: Mapped[str] = mapped_column(String(10), default="pending")  # pending | settled
    pick_outcome: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    settled_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    settlement_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now_naive)

    parlay: Mapped["Parlay"] = relationship("Parlay", back_populates="picks")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "parlay_id": self.parlay_id,
            "matchup_id": self.matchup_id,
            "event_id": self.event_id,
            "round_num": self.round_num,
            "pick": self.pick,
            "picked_player_name": self.picked_player_name,
            "picked_player_dg_id": self.picked_player_dg_id,
            "decimal_odds": self.decimal_odds,
            "settlement_status": self.settlement_status,
            "pick_outcome": self.pick_outcome,
            "settled_at": self.settled_at.isoformat() if self.settled_at else None,
            "settlement_notes": self.settlement_notes,
        }
