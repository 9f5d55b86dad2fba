"""Standing data class."""

# Tab Engine
# Copyright (C) 2025  Tab Engine developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class Standing:
    """A team's derived position in the standings. Never edited directly.

    Attributes
    ----------
    rank : int
        Competition rank; teams tied on every configured key share it.
    team_id : str
        Team the standing belongs to.
    wins, losses : int
        Record including byes.
    total_speaks : float
        Speaker-score total including any bye credit.
    average_speaks : float
        ``total_speaks`` per decided round.
    opp_win_pct : float
        Mean win ratio of the opponents faced, from live records.
    adjusted_speaks : float
        Total after dropping the highest and lowest rounds.
    opp_wins : int
        Summed wins of the opponents faced.
    rounds_completed : int
        Decided rounds including byes.
    byes : int
        Byes received.
    tiebreakers : dict
        Value of every configured tiebreak key.
    """

    rank: int
    team_id: str
    wins: int
    losses: int
    total_speaks: float
    average_speaks: float
    opp_win_pct: float
    adjusted_speaks: float = 0.0
    opp_wins: int = 0
    rounds_completed: int = 0
    byes: int = 0
    tiebreakers: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "team_id": self.team_id,
            "wins": self.wins,
            "losses": self.losses,
            "total_speaks": self.total_speaks,
            "average_speaks": self.average_speaks,
            "opp_win_pct": self.opp_win_pct,
            "adjusted_speaks": self.adjusted_speaks,
            "opp_wins": self.opp_wins,
            "rounds_completed": self.rounds_completed,
            "byes": self.byes,
            "tiebreakers": dict(self.tiebreakers),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Standing":
        return cls(
            rank=int(data["rank"]),
            team_id=str(data["team_id"]),
            wins=int(data.get("wins", 0)),
            losses=int(data.get("losses", 0)),
            total_speaks=float(data.get("total_speaks", 0.0)),
            average_speaks=float(data.get("average_speaks", 0.0)),
            opp_win_pct=float(data.get("opp_win_pct", 0.0)),
            adjusted_speaks=float(data.get("adjusted_speaks", 0.0)),
            opp_wins=int(data.get("opp_wins", 0)),
            rounds_completed=int(data.get("rounds_completed", 0)),
            byes=int(data.get("byes", 0)),
            tiebreakers=dict(data.get("tiebreakers", {})),
        )
