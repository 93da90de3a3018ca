"""Tests for the settlement HTTP router."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi import FastAPI

from teebox.api import settlement as settlement_api
from teebox.feeds.base import StatFetchError
from teebox.settlement.errors import ParlayNotFoundError, TournamentNotFoundError
from teebox.settlement.types import SettlementMethod, SettlementResult, TourType


@pytest.fixture
def mock_service():
    service = MagicMock()
    service.settle_event = AsyncMock(
        return_value=SettlementResult(event_id=100, tour_type=TourType.PGA, total_picks=0)
    )
    service.settle_completed_tournaments = AsyncMock(return_value={"action": "skipped", "tournaments_processed": 0})
    service.settlement_status = AsyncMock(return_value={"summary": {"pending_picks": 4}, "events_detail": []})
    service.reverse_parlay_settlement = AsyncMock(return_value={"parlay_id": 7, "picks_reset": 2, "reason": "x"})
    return service


@pytest.fixture
async def client(mock_service):
    app = FastAPI()
    app.include_router(settlement_api.router, prefix="/api/settlement")
    app.state.settlement_service = mock_service
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


class TestSettleEventRoute:
    async def test_defaults_to_manual(self, client, mock_service):
        resp = await client.post("/api/settlement/events/100")
        assert resp.status_code == 200
        assert resp.json()["event_id"] == 100
        assert resp.json()["tour_type"] == "pga"
        mock_service.settle_event.assert_awaited_once_with(100, SettlementMethod.MANUAL)

    async def test_explicit_method(self, client, mock_service):
        resp = await client.post("/api/settlement/events/100", json={"method": "override"})
        assert resp.status_code == 200
        mock_service.settle_event.assert_awaited_once_with(100, SettlementMethod.OVERRIDE)

    async def test_bad_method_rejected(self, client):
        resp = await client.post("/api/settlement/events/100", json={"method": "magic"})
        assert resp.status_code == 422

    async def test_unknown_tournament_is_404(self, client, mock_service):
        mock_service.settle_event.side_effect = TournamentNotFoundError(100)
        resp = await client.post("/api/settlement/events/100")
        assert resp.status_code == 404
        assert "Tournament not found" in resp.json()["detail"]

    async def test_feed_failure_is_502(self, client, mock_service):
        mock_service.settle_event.side_effect = StatFetchError("HTTP 503: /preds/in-play")
        resp = await client.post("/api/settlement/events/100")
        assert resp.status_code == 502


class TestBatchAndStatusRoutes:
    async def test_completed(self, client, mock_service):
        resp = await client.post("/api/settlement/completed", json={"days_back": 3})
        assert resp.status_code == 200
        assert resp.json()["action"] == "skipped"
        mock_service.settle_completed_tournaments.assert_awaited_once_with(3)

    async def test_completed_default_lookback(self, client, mock_service):
        await client.post("/api/settlement/completed")
        mock_service.settle_completed_tournaments.assert_awaited_once_with(None)

    async def test_status(self, client):
        resp = await client.get("/api/settlement/status")
        assert resp.status_code == 200
        assert resp.json()["summary"]["pending_picks"] == 4


class TestReverseRoute:
    async def test_reverse(self, client, mock_service):
        resp = await client.post("/api/settlement/parlays/7/reverse", json={"reason": "x"})
        assert resp.status_code == 200
        assert resp.json()["picks_reset"] == 2
        mock_service.reverse_parlay_settlement.assert_awaited_once_with(7, "x", "admin")

    async def test_unknown_parlay_is_404(self, client, mock_service):
        mock_service.reverse_parlay_settlement.side_effect = ParlayNotFoundError(7)
        resp = await client.post("/api/settlement/parlays/7/reverse", json={"reason": "x"})
        assert resp.status_code == 404


class TestServiceMissing:
    async def test_503_when_not_initialized(self):
        app = FastAPI()
        app.include_router(settlement_api.router, prefix="/api/settlement")
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
            resp = await c.get("/api/settlement/status")
        assert resp.status_code == 503
