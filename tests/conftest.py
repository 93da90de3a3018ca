"""Shared test fixtures for Teebox."""

from datetime import date, timedelta
from types import SimpleNamespace
from typing import AsyncGenerator, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from teebox.models.database import Base
from teebox.models.market import BettingMarket
from teebox.models.parlay import Parlay, ParlayPick
from teebox.models.tournament import Tournament
from teebox.settlement.types import PlayerRoundStat, TourType


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite engine shared by every session in a test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for testing."""
    async with session_factory() as session:
        yield session


def make_stat(
    name: str,
    dg_id: Optional[int],
    today: Optional[int] = 0,
    round_num: int = 2,
    thru: int = 18,
    position: Optional[str] = "T10",
    withdrawn: bool = False,
    round_complete: Optional[bool] = None,
    event_id: int = 100,
    total: Optional[int] = None,
) -> PlayerRoundStat:
    """Build a normalized player-round stat with sensible defaults."""
    return PlayerRoundStat(
        dg_id=dg_id,
        player_name=name,
        event_id=event_id,
        tour_type=TourType.PGA,
        round_num=round_num,
        position=position,
        total_score=total if total is not None else today,
        today_score=today,
        thru=thru,
        withdrawn=withdrawn,
        round_complete=thru >= 18 if round_complete is None else round_complete,
    )


@pytest.fixture
def stat_factory():
    return make_stat


@pytest.fixture
def mock_feed():
    """Feed double; tests set ``fetch_player_stats.return_value``."""
    feed = MagicMock()
    feed.fetch_player_stats = AsyncMock(return_value=[])
    feed.close = AsyncMock()
    return feed


async def seed_tournament(
    db: AsyncSession,
    event_id: int = 100,
    event_name: str = "The Memorial Tournament",
    tour: Optional[str] = "pga",
    end_date: Optional[date] = None,
) -> Tournament:
    tournament = Tournament(
        event_id=event_id,
        event_name=event_name,
        tour=tour,
        start_date=(end_date or date.today()) - timedelta(days=3),
        end_date=end_date or date.today(),
    )
    db.add(tournament)
    await db.flush()
    return tournament


async def seed_matchup(
    db: AsyncSession,
    players: list[tuple[int, str]],
    event_id: int = 100,
    round_num: Optional[int] = 2,
) -> BettingMarket:
    """Create a 2-ball (two players) or 3-ball (three players) market."""
    three_way = len(players) == 3
    market = BettingMarket(
        event_id=event_id,
        round_num=round_num,
        market_type="three_way" if three_way else "two_way",
        player1_dg_id=players[0][0],
        player1_name=players[0][1],
        player2_dg_id=players[1][0],
        player2_name=players[1][1],
        player3_dg_id=players[2][0] if three_way else None,
        player3_name=players[2][1] if three_way else None,
    )
    db.add(market)
    await db.flush()
    return market


async def seed_parlay(
    db: AsyncSession,
    legs: list[tuple[BettingMarket, int, float]],
    amount: float = 10.0,
    round_num: Optional[int] = 2,
    user_id: str = "user-1",
) -> Parlay:
    """Create a parlay with one pick per (matchup, picked slot, decimal odds) leg."""
    total_odds = 1.0
    for _, _, odds in legs:
        total_odds *= odds
    parlay = Parlay(
        user_id=user_id,
        round_num=round_num,
        amount=amount,
        total_odds=total_odds,
        potential_payout=round(amount * total_odds, 2),
    )
    db.add(parlay)
    await db.flush()

    for matchup, slot, odds in legs:
        db.add(
            ParlayPick(
                parlay_id=parlay.id,
                matchup_id=matchup.id,
                event_id=matchup.event_id,
                round_num=round_num,
                pick=slot,
                picked_player_name=getattr(matchup, f"player{slot}_name"),
                picked_player_dg_id=getattr(matchup, f"player{slot}_dg_id"),
                decimal_odds=odds,
            )
        )
    await db.flush()
    return parlay


@pytest.fixture
def seed():
    """Seeding helpers: ``seed.tournament``, ``seed.matchup``, ``seed.parlay``."""
    return SimpleNamespace(tournament=seed_tournament, matchup=seed_matchup, parlay=seed_parlay)
