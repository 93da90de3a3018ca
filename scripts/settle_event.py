"""Settle all pending picks for one tournament event.

Usage: python scripts/settle_event.py <event_id> [automatic|manual|override]
Default method: manual
"""

import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


async def main():
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    event_id = int(sys.argv[1])
    method = sys.argv[2] if len(sys.argv) > 2 else "manual"

    from teebox.config import settings
    from teebox.feeds.base import StatFetchError
    from teebox.models.database import async_session, init_db
    from teebox.settlement.errors import TournamentNotFoundError
    from teebox.settlement.service import SettlementService, summarize_outcomes

    await init_db()

    service = SettlementService.from_settings(settings, async_session)
    try:
        result = await service.settle_event(event_id, method)
    except (TournamentNotFoundError, StatFetchError) as e:
        print(f"ERROR: {e}")
        sys.exit(2)
    finally:
        await service.close()

    print(f"Event {event_id} ({result.tour_type.value}): "
          f"{len(result.settled_picks)}/{result.total_picks} picks settled")
    for outcome, count in summarize_outcomes(result.settled_picks).items():
        if count:
            print(f"  {outcome}: {count}")
    for parlay in result.settled_parlays:
        print(f"  Parlay {parlay.parlay_id}: {parlay.outcome.value} ${parlay.actual_payout:.2f}")
    for error in result.errors:
        print(f"  ERROR {error}")


if __name__ == "__main__":
    asyncio.run(main())
