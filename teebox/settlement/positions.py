"""Leaderboard position parsing.

Single parser for position strings from the stat feed ("T5", "=5", "5",
"CUT", "MC", "WD", "DQ"). Both the feed normalizer and the matchup resolver
go through here.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class PositionKind(str, Enum):
    RANKED = "ranked"
    CUT = "cut"
    WITHDRAWN = "withdrawn"
    DISQUALIFIED = "disqualified"
    UNKNOWN = "unknown"


_CUT = {"CUT", "MC"}
_WITHDRAWN = {"WD", "W/D"}
_DISQUALIFIED = {"DQ"}

_RANK_RE = re.compile(r"^(T|=)?\s*(\d+)$")


@dataclass(frozen=True)
class Position:
    kind: PositionKind
    rank: Optional[int] = None
    tied: bool = False
    raw: str = ""

    @property
    def is_withdrawn(self) -> bool:
        return self.kind == PositionKind.WITHDRAWN

    @property
    def is_disqualified(self) -> bool:
        return self.kind == PositionKind.DISQUALIFIED

    @property
    def is_out(self) -> bool:
        """Player left the event mid-tournament (withdrawn or disqualified)."""
        return self.kind in (PositionKind.WITHDRAWN, PositionKind.DISQUALIFIED)

    @property
    def is_cut(self) -> bool:
        return self.kind == PositionKind.CUT

    @property
    def is_finished(self) -> bool:
        """No more holes to come: missed the cut or out of the event."""
        return self.is_cut or self.is_out

    @property
    def made_cut(self) -> Optional[bool]:
        if self.kind == PositionKind.RANKED:
            return True
        if self.kind == PositionKind.CUT:
            return False
        return None


def parse_position(raw: Union[str, int, None]) -> Position:
    """Parse a raw leaderboard position into a Position."""
    if raw is None:
        return Position(PositionKind.UNKNOWN)
    if isinstance(raw, bool):
        return Position(PositionKind.UNKNOWN, raw=str(raw))
    if isinstance(raw, int):
        return Position(PositionKind.RANKED, rank=raw, raw=str(raw))

    text = str(raw).strip().upper()
    if not text or text in ("-", "--"):
        return Position(PositionKind.UNKNOWN, raw=text)
    if text in _CUT:
        return Position(PositionKind.CUT, raw=text)
    if text in _WITHDRAWN:
        return Position(PositionKind.WITHDRAWN, raw=text)
    if text in _DISQUALIFIED:
        return Position(PositionKind.DISQUALIFIED, raw=text)

    match = _RANK_RE.match(text)
    if match:
        return Position(
            PositionKind.RANKED,
            rank=int(match.group(2)),
            tied=match.group(1) is not None,
            raw=text,
        )
    return Position(PositionKind.UNKNOWN, raw=text)


def parse_thru(raw: Union[str, int, float, None]) -> int:
    """Holes completed; "F" means the round is finished."""
    if raw is None:
        return 0
    if isinstance(raw, bool):
        return 0
    if isinstance(raw, (int, float)):
        return max(0, int(raw))
    text = str(raw).strip().upper().rstrip("*")
    if text == "F":
        return 18
    if text.isdigit():
        return int(text)
    return 0
