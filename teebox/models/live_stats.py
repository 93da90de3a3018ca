"""Denormalized per-round player stats for UI display.

Not authoritative for settlement: the settlement engine always grades from a
fresh feed fetch and only backfills this table afterwards.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from teebox.config import utc_now_naive
from teebox.models.database import Base


class LiveTournamentStat(Base):
    __tablename__ = "live_tournament_stats"
    __table_args__ = (Index("ix_live_stats_player", "event_name", "player_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    dg_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    player_name: Mapped[str] = mapped_column(String(100))
    event_name: Mapped[str] = mapped_column(String(200))
    course_name: Mapped[str] = mapped_column(String(200), default="")
    round_num: Mapped[str] = mapped_column(String(4))
    position: Mapped[str] = mapped_column(String(10), default="")
    thru: Mapped[int] = mapped_column(Integer, default=0)
    today: Mapped[int] = mapped_column(Integer, default=0)
    total: Mapped[int] = mapped_column(Integer, default=0)
    data_golf_updated_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now_naive)

    def to_dict(self) -> dict:
        return {
            "dg_id": self.dg_id,
            "player_name": self.player_name,
            "event_name": self.event_name,
            "round_num": self.round_num,
            "position": self.position,
            "thru": self.thru,
            "today": self.today,
            "total": self.total,
            "data_golf_updated_at": self.data_golf_updated_at.isoformat(),
        }
