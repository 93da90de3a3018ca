"""Settlement API — manual event settlement, batch runs, status and reversal."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from teebox.feeds.base import StatFetchError
from teebox.settlement.errors import ParlayNotFoundError, TournamentNotFoundError
from teebox.settlement.types import SettlementMethod

logger = logging.getLogger(__name__)

router = APIRouter()


class SettleRequest(BaseModel):
    method: SettlementMethod = SettlementMethod.MANUAL


class CompletedRequest(BaseModel):
    days_back: Optional[int] = None


class ReverseRequest(BaseModel):
    reason: str = ""
    settled_by: str = "admin"


def _service(request: Request):
    service = getattr(request.app.state, "settlement_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Settlement service not initialized")
    return service


@router.post("/events/{event_id}")
async def settle_event(event_id: int, request: Request, body: Optional[SettleRequest] = None):
    """Settle all pending picks for one event."""
    service = _service(request)
    method = body.method if body else SettlementMethod.MANUAL
    try:
        result = await service.settle_event(event_id, method)
    except TournamentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StatFetchError as e:
        logger.error(f"Stat fetch failed for event {event_id}: {e}")
        raise HTTPException(status_code=502, detail=f"Failed to fetch player stats: {e}")
    return result.to_dict()


@router.post("/completed")
async def settle_completed(request: Request, body: Optional[CompletedRequest] = None):
    """Settle every recently finished tournament with pending picks."""
    service = _service(request)
    return await service.settle_completed_tournaments(body.days_back if body else None)


@router.get("/status")
async def settlement_status(request: Request):
    """Pick counts by settlement status."""
    return await _service(request).settlement_status()


@router.post("/parlays/{parlay_id}/reverse")
async def reverse_parlay(parlay_id: int, body: ReverseRequest, request: Request):
    """Reset a settled parlay and its picks to pending."""
    service = _service(request)
    try:
        return await service.reverse_parlay_settlement(parlay_id, body.reason, body.settled_by)
    except ParlayNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
