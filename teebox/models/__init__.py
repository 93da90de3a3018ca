"""Database models for Teebox."""

from teebox.models.database import Base, get_db, init_db
from teebox.models.tournament import Tournament
from teebox.models.market import BettingMarket, MatchupSlot
from teebox.models.parlay import Parlay, ParlayPick
from teebox.models.settlement import SettlementHistory
from teebox.models.live_stats import LiveTournamentStat

__all__ = [
    "Base",
    "get_db",
    "init_db",
    "Tournament",
    "BettingMarket",
    "MatchupSlot",
    "Parlay",
    "ParlayPick",
    "SettlementHistory",
    "LiveTournamentStat",
]
