"""Tournament model."""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from teebox.config import utc_now_naive
from teebox.models.database import Base


class Tournament(Base):
    """A tournament event. Created by ingestion, read-only for settlement."""

    __tablename__ = "tournaments"

    event_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    event_name: Mapped[str] = mapped_column(String(200))
    tour: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)  # pga, euro, korn_ferry, liv
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now_naive)

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "event_name": self.event_name,
            "tour": self.tour,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
        }
