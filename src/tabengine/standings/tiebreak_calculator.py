"""Tiebreak values for team standings."""

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
from typing import Dict, Iterable, List, Tuple

from tabengine.constants import (
    TB_ADJUSTED_SPEAKS,
    TB_HEAD_TO_HEAD,
    TB_LOSSES,
    TB_OPP_WIN_PCT,
    TB_OPP_WINS,
    TB_SPEAKS,
    TB_WINS,
)
from tabengine.utils import setup_logger

logger = setup_logger(__name__)


@dataclass
class TeamRecord:
    """Results of one team gathered from decided pairings.

    Attributes
    ----------
    team_id : str
        Team the record belongs to.
    wins, losses : int
        Byes count as wins.
    byes : int
        Byes received.
    round_speaks : list of float
        Speaks of every debated, non-forfeited round.
    bye_speaks : list of float
        Speaks credited for each bye.
    opponents : list of str
        Every opponent faced, with repetition.
    beaten : dict
        ``opponent_id -> wins over that opponent``.
    """

    team_id: str
    wins: int = 0
    losses: int = 0
    byes: int = 0
    round_speaks: List[float] = field(default_factory=list)
    bye_speaks: List[float] = field(default_factory=list)
    opponents: List[str] = field(default_factory=list)
    beaten: Dict[str, int] = field(default_factory=dict)

    @property
    def rounds_completed(self) -> int:
        return self.wins + self.losses

    @property
    def speaks_by_round(self) -> List[float]:
        return self.round_speaks + self.bye_speaks

    @property
    def total_speaks(self) -> float:
        return sum(self.speaks_by_round)

    @property
    def win_ratio(self) -> float:
        if self.rounds_completed == 0:
            return 0.0
        return self.wins / self.rounds_completed


class TiebreakCalculator:
    """Calculates tiebreak scores for team standings.

    Supported keys:

    - wins: Rounds won, byes included
    - losses: Rounds lost (fewer is better)
    - speaks: Total speaker points
    - adjusted_speaks: Total after dropping the highest and lowest rounds
    - opp_win_pct: Mean win ratio of every opponent faced
    - opp_wins: Summed wins of every opponent faced
    - head_to_head: Wins over the other teams tied on the earlier keys
    """

    def __init__(self, drop_high_low: int = 1) -> None:
        self.drop_high_low = drop_high_low

    def calculate_all_tiebreaks(
        self, records: Dict[str, TeamRecord]
    ) -> Dict[str, Dict[str, float]]:
        """Calculate all tiebreaks for all teams.

        Args:
            records: Every team's record (id -> TeamRecord), opponents included

        Returns:
            team id -> tiebreak key -> value
        """
        return {
            team_id: self.calculate_team_tiebreaks(record, records)
            for team_id, record in records.items()
        }

    def calculate_team_tiebreaks(
        self, record: TeamRecord, all_records: Dict[str, TeamRecord]
    ) -> Dict[str, float]:
        """Calculate all tiebreak scores for a single team.

        Opponent statistics always read the opponents' current records.
        """
        opponent_ratios = []
        opponent_wins = 0
        for opp_id in record.opponents:
            opponent = all_records.get(opp_id)
            if opponent is None:
                opponent_ratios.append(0.0)
                continue
            opponent_ratios.append(opponent.win_ratio)
            opponent_wins += opponent.wins

        opp_win_pct = sum(opponent_ratios) / len(opponent_ratios) if opponent_ratios else 0.0
        return {
            TB_WINS: float(record.wins),
            TB_LOSSES: float(record.losses),
            TB_SPEAKS: record.total_speaks,
            TB_ADJUSTED_SPEAKS: self._calculate_adjusted_speaks(record.speaks_by_round),
            TB_OPP_WIN_PCT: opp_win_pct,
            TB_OPP_WINS: float(opponent_wins),
            TB_HEAD_TO_HEAD: 0.0,  # Set per tie group while ranking
        }

    def _calculate_adjusted_speaks(self, speaks: List[float]) -> float:
        """Total speaks dropping the highest and lowest ``drop_high_low`` rounds.

        With too few rounds to drop from both ends the plain total is used.
        """
        drop = self.drop_high_low
        if drop == 0 or len(speaks) <= 2 * drop:
            return sum(speaks)
        return sum(sorted(speaks)[drop:-drop])

    @staticmethod
    def calculate_head_to_head_in_group(record: TeamRecord, tied_ids: Iterable[str]) -> int:
        """Wins of ``record`` over the teams it is tied with."""
        return sum(record.beaten.get(team_id, 0) for team_id in tied_ids)

    @staticmethod
    def calculate_head_to_head(team1: TeamRecord, team2: TeamRecord) -> Tuple[int, int]:
        """Wins of each team over the other.

        Returns:
            Tuple of (team1 wins over team2, team2 wins over team1)
        """
        return team1.beaten.get(team2.team_id, 0), team2.beaten.get(team1.team_id, 0)
