"""Settlement history — append-only audit log of grading decisions."""

import json
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from teebox.config import utc_now_naive
from teebox.models.database import Base


class SettlementHistory(Base):
    """One grading decision for one pick. Rows are inserted, never updated."""

    __tablename__ = "settlement_history"
    __table_args__ = (
        Index("ix_settlement_history_pick", "parlay_pick_id"),
        Index("ix_settlement_history_event", "event_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    parlay_pick_id: Mapped[int] = mapped_column(Integer)
    event_id: Mapped[int] = mapped_column(Integer)
    tour_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    settlement_method: Mapped[str] = mapped_column(String(10))  # automatic | manual | override
    old_outcome: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    new_outcome: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)  # NULL = reversed
    settlement_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    settlement_data: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # JSON stat snapshot
    settled_by: Mapped[str] = mapped_column(String(64), default="system")

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now_naive)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "parlay_pick_id": self.parlay_pick_id,
            "event_id": self.event_id,
            "tour_type": self.tour_type,
            "settlement_method": self.settlement_method,
            "old_outcome": self.old_outcome,
            "new_outcome": self.new_outcome,
            "settlement_reason": self.settlement_reason,
            "settlement_data": json.loads(self.settlement_data) if self.settlement_data else None,
            "settled_by": self.settled_by,
            "created_at": self.created_at.isoformat(),
        }
