"""DataGolf in-play feed: the stat source for round settlement.

One request per tour returns every player in the live event, including
per-round scores (R1..R4), so past rounds are settled from the same payload
as the live one. R<n> values are strokes; they are converted to par using
the course par implied by finished live rounds (R<n> minus today).
"""

import logging
from collections import Counter
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from teebox.feeds.base import BaseFeed, StatFetchError
from teebox.settlement.positions import parse_position, parse_thru
from teebox.settlement.types import PlayerRoundStat, ScoreBasis, TourType

logger = logging.getLogger(__name__)

IN_PLAY_PATH = "/preds/in-play"

# Feed tour code per classification. Korn Ferry and LIV events come through
# the PGA in-play feed.
FEED_TOUR = {
    TourType.PGA: "pga",
    TourType.KORN_FERRY: "pga",
    TourType.LIV: "pga",
    TourType.EURO: "euro",
    TourType.DP_WORLD: "euro",
}

ROUND_FIELDS = ("R1", "R2", "R3", "R4")

# Plausible 18-hole course par when deriving it from R<n> strokes minus today.
PAR_MIN = 60
PAR_MAX = 80


class InPlayPlayer(BaseModel):
    """One player entry of the in-play payload, validated at the boundary."""

    model_config = ConfigDict(extra="allow")

    dg_id: int
    player_name: str
    current_pos: Optional[str] = None
    position: Optional[str] = None
    current_score: Optional[Any] = None
    total: Optional[Any] = None
    today: Optional[Any] = None
    thru: Optional[Any] = None
    round: Optional[int] = None
    make_cut: Optional[float] = None
    R1: Optional[Any] = None
    R2: Optional[Any] = None
    R3: Optional[Any] = None
    R4: Optional[Any] = None

    @field_validator("current_pos", "position", mode="before")
    @classmethod
    def _position_to_str(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value)

    @field_validator("player_name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("player_name is blank")
        return value


def get_tour_type(event_name: Optional[str] = None, tour: Optional[str] = None) -> TourType:
    """Classify a tournament from its declared tour, falling back to its name."""
    if tour:
        db_tour = tour.lower().strip()
        if db_tour == "euro":
            return TourType.EURO
        if db_tour in ("dp_world", "dp world"):
            return TourType.DP_WORLD
        if db_tour in ("korn_ferry", "korn ferry"):
            return TourType.KORN_FERRY
        if db_tour == "liv":
            return TourType.LIV
        if db_tour == "pga":
            return TourType.PGA

    if event_name:
        name = event_name.lower()
        if "euro" in name or "dp world" in name or "european" in name:
            return TourType.EURO
        if "korn ferry" in name:
            return TourType.KORN_FERRY
        if "liv" in name:
            return TourType.LIV

    return TourType.PGA


class DataGolfFeed(BaseFeed):
    """Fetches and normalizes in-play player stats from DataGolf."""

    def __init__(self, api_key: str, base_url: str = "https://feeds.datagolf.com", timeout: float = 30.0):
        super().__init__(base_url=base_url, timeout=timeout)
        self.api_key = api_key

    @classmethod
    def from_settings(cls, settings) -> "DataGolfFeed":
        return cls(
            api_key=settings.datagolf_api_key,
            base_url=settings.datagolf_base_url,
            timeout=settings.feed_timeout,
        )

    def _redact(self, text: str) -> str:
        if self.api_key:
            return text.replace(self.api_key, "REDACTED")
        return text

    get_tour_type = staticmethod(get_tour_type)

    async def fetch_player_stats(self, event_id: int, tour_type: TourType) -> list[PlayerRoundStat]:
        """Fetch every player's live and per-round stats for the event's tour."""
        if not self.api_key:
            raise StatFetchError("DATAGOLF_API_KEY is not configured")

        feed_tour = FEED_TOUR.get(tour_type)
        if feed_tour is None:
            raise StatFetchError(f"Unsupported tour type: {tour_type}")

        logger.info(f"Fetching {feed_tour.upper()} in-play stats for event {event_id} ({tour_type.value})")
        payload = await self.fetch_json(
            IN_PLAY_PATH,
            params={
                "tour": feed_tour,
                "dead_heat": "no",
                "odds_format": "percent",
                "key": self.api_key,
            },
        )
        stats = self.normalize_payload(payload, event_id, tour_type)
        logger.info(f"{feed_tour.upper()} in-play stats normalized: {len(stats)} player-rounds")
        return stats

    def normalize_payload(self, payload: Any, event_id: int, tour_type: TourType) -> list[PlayerRoundStat]:
        if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
            raise StatFetchError("Unexpected in-play payload shape: expected an object with a 'data' list")

        players: list[InPlayPlayer] = []
        rejected = 0
        for entry in payload["data"]:
            try:
                players.append(InPlayPlayer.model_validate(entry))
            except ValidationError as e:
                rejected += 1
                logger.warning(f"Skipping malformed in-play entry: {e.error_count()} error(s)")

        event_par = self._event_par(players)
        if event_par is None:
            logger.info(f"Course par not derivable for event {event_id}; R1..R4 scores kept as strokes")

        by_key: dict[tuple[Any, int], PlayerRoundStat] = {}
        for player in players:
            par = self._player_par(player)
            if par is None:
                par = event_par
            records = [self._normalize_live(player, event_id, tour_type)]
            records.extend(self._normalize_rounds(player, event_id, tour_type, par))
            for record in records:
                key = (record.dg_id, record.round_num)
                existing = by_key.get(key)
                if existing is None or self._prefer(record, existing):
                    by_key[key] = record

        if rejected:
            logger.warning(f"Rejected {rejected} of {len(payload['data'])} in-play entries")
        return list(by_key.values())

    def _player_par(self, player: InPlayPlayer) -> Optional[int]:
        """Course par from a finished live round that also has its R<n> strokes."""
        if not player.round or player.round > len(ROUND_FIELDS):
            return None
        strokes = self.to_int(getattr(player, ROUND_FIELDS[player.round - 1]))
        today = self.to_int(player.today)
        if strokes is None or today is None or parse_thru(player.thru) < 18:
            return None
        par = strokes - today
        if not PAR_MIN <= par <= PAR_MAX:
            return None
        return par

    def _event_par(self, players: list[InPlayPlayer]) -> Optional[int]:
        pars = [par for par in (self._player_par(p) for p in players) if par is not None]
        if not pars:
            return None
        return Counter(pars).most_common(1)[0][0]

    @staticmethod
    def _prefer(candidate: PlayerRoundStat, existing: PlayerRoundStat) -> bool:
        """Pick between two records for the same player-round.

        A withdrawal or DQ on the live line always stands. Otherwise the R<n>
        record only replaces a live line that has finished the round, so a
        partial R<n> never hides the holes still to play.
        """
        if DataGolfFeed._is_out(existing):
            return False
        if DataGolfFeed._is_out(candidate):
            return True
        if candidate.historical == existing.historical:
            return False
        if candidate.historical:
            return existing.round_complete
        return not candidate.round_complete

    @staticmethod
    def _is_out(stat: PlayerRoundStat) -> bool:
        return stat.withdrawn or parse_position(stat.position).is_out

    def _normalize_live(self, player: InPlayPlayer, event_id: int, tour_type: TourType) -> PlayerRoundStat:
        raw_position = player.current_pos or player.position
        position = parse_position(raw_position)
        total = self.to_int(player.current_score)
        if total is None:
            total = self.to_int(player.total)
        thru = parse_thru(player.thru)

        return PlayerRoundStat(
            dg_id=player.dg_id,
            player_name=player.player_name,
            event_id=event_id,
            tour_type=tour_type,
            round_num=player.round or 1,
            position=position.raw or None,
            total_score=total,
            today_score=self.to_int(player.today),
            thru=thru,
            withdrawn=position.is_withdrawn,
            round_complete=thru >= 18 or position.is_finished,
            made_cut=True if player.make_cut == 1 else position.made_cut,
            raw_data=player.model_dump(),
        )

    def _normalize_rounds(
        self, player: InPlayPlayer, event_id: int, tour_type: TourType, par: Optional[int] = None
    ) -> list[PlayerRoundStat]:
        """R1..R4 records, converted to par when the course par is known."""
        position = parse_position(player.current_pos or player.position)
        made_cut = True if player.make_cut == 1 else position.made_cut
        basis = ScoreBasis.STROKES if par is None else ScoreBasis.TO_PAR

        records = []
        for round_num, field_name in enumerate(ROUND_FIELDS, start=1):
            strokes = self.to_int(getattr(player, field_name))
            if strokes is None:
                continue
            score = strokes if par is None else strokes - par
            records.append(
                PlayerRoundStat(
                    dg_id=player.dg_id,
                    player_name=player.player_name,
                    event_id=event_id,
                    tour_type=tour_type,
                    round_num=round_num,
                    position=None,
                    total_score=score,
                    today_score=score,
                    thru=18,
                    withdrawn=False,
                    round_complete=True,
                    made_cut=made_cut,
                    historical=True,
                    score_basis=basis,
                    raw_data={"round_specific_score": strokes, "historical_round": round_num, "par": par},
                )
            )
        return records
