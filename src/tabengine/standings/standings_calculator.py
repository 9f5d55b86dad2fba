"""Ranked team standings with configurable tiebreakers."""

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

from typing import Dict, List, Optional, Sequence

from tabengine.constants import (
    TB_ADJUSTED_SPEAKS,
    TB_HEAD_TO_HEAD,
    TB_OPP_WIN_PCT,
    TB_OPP_WINS,
    TB_SPEAKS,
    TB_WINS,
)
from tabengine.models.pairing import Pairing
from tabengine.models.settings import ByeSpeaksPolicy, TabulationSettings
from tabengine.models.standing import Standing
from tabengine.models.team import Team
from tabengine.standings.tiebreak_calculator import TeamRecord, TiebreakCalculator
from tabengine.utils import setup_logger

logger = setup_logger(__name__)

# Keys where the larger value ranks higher
_DESCENDING = {
    TB_WINS,
    TB_SPEAKS,
    TB_ADJUSTED_SPEAKS,
    TB_OPP_WIN_PCT,
    TB_OPP_WINS,
    TB_HEAD_TO_HEAD,
}
_PRECISION = 9


class StandingsCalculator:
    """Compute standings from the current set of pairings.

    Nothing is cached: every call recomputes records, opponent statistics
    and ranks from the pairings it is given.
    """

    def __init__(self, settings: Optional[TabulationSettings] = None) -> None:
        self.settings = settings or TabulationSettings()
        self.tiebreaks = TiebreakCalculator(self.settings.drop_high_low_speaks)

    def build_records(self, pairings: Sequence[Pairing]) -> Dict[str, TeamRecord]:
        """Collect wins, losses, speaks and opponents from decided pairings."""
        records: Dict[str, TeamRecord] = {}

        def record_of(team_id: str) -> TeamRecord:
            if team_id not in records:
                records[team_id] = TeamRecord(team_id)
            return records[team_id]

        for pairing in pairings:
            if not pairing.is_decided:
                continue
            if pairing.is_bye:
                bye_team = record_of(pairing.aff_team_id)
                bye_team.wins += 1
                bye_team.byes += 1
                continue

            result = pairing.result
            winner = record_of(pairing.winner_id)
            loser = record_of(pairing.loser_id)
            winner.wins += 1
            loser.losses += 1
            winner.beaten[loser.team_id] = winner.beaten.get(loser.team_id, 0) + 1
            aff = record_of(pairing.aff_team_id)
            neg = record_of(pairing.neg_team_id)
            aff.opponents.append(neg.team_id)
            neg.opponents.append(aff.team_id)
            if not result.forfeit:
                aff.round_speaks.append(result.aff_speaks)
                neg.round_speaks.append(result.neg_speaks)

        for record in records.values():
            if record.byes:
                record.bye_speaks = [self._bye_credit(record)] * record.byes
        return records

    def _bye_credit(self, record: TeamRecord) -> float:
        if self.settings.bye_speaks == ByeSpeaksPolicy.ZERO or not record.round_speaks:
            return 0.0
        return sum(record.round_speaks) / len(record.round_speaks)

    def _key_value(
        self,
        key: str,
        record: TeamRecord,
        group: Sequence[TeamRecord],
        values: Dict[str, Dict[str, float]],
    ) -> float:
        """Value of ``key`` for ``record`` within the group it is tied in."""
        if key == TB_HEAD_TO_HEAD:
            tied = {r.team_id for r in group if r.team_id != record.team_id}
            return float(self.tiebreaks.calculate_head_to_head_in_group(record, tied))
        return values[record.team_id][key]

    def _tie_groups(
        self,
        group: List[TeamRecord],
        keys: Sequence[str],
        values: Dict[str, Dict[str, float]],
    ) -> List[List[TeamRecord]]:
        """Split ``group`` into ordered groups tied on every key.

        Each key only separates teams still tied on the keys before it, so
        head to head counts wins among exactly those teams.
        """
        if not keys or len(group) < 2:
            return [sorted(group, key=lambda r: r.team_id)]
        key, rest = keys[0], keys[1:]
        buckets: Dict[float, List[TeamRecord]] = {}
        for record in group:
            value = round(self._key_value(key, record, group, values), _PRECISION)
            if key == TB_HEAD_TO_HEAD:
                values[record.team_id][TB_HEAD_TO_HEAD] = value
            buckets.setdefault(value, []).append(record)
        descending = key in _DESCENDING
        ordered: List[List[TeamRecord]] = []
        for value in sorted(buckets, reverse=descending):
            ordered.extend(self._tie_groups(buckets[value], rest, values))
        return ordered

    def compute(self, teams: Sequence[Team], pairings: Sequence[Pairing]) -> List[Standing]:
        """Rank every active team.

        Args:
            teams: Roster; withdrawn teams are left out of the table but
                still count as opponents
            pairings: Every pairing so far; only completed ones with a
                result, and byes, are counted

        Returns:
            Standings ordered by rank, then team id
        """
        records = self.build_records(pairings)
        for team in teams:
            records.setdefault(team.id, TeamRecord(team.id))
        values = self.tiebreaks.calculate_all_tiebreaks(records)

        active = [records[t.id] for t in teams if t.is_active]
        groups = self._tie_groups(active, self.settings.tiebreak_order, values)

        standings: List[Standing] = []
        for group in groups:
            rank = len(standings) + 1
            for record in group:
                standings.append(self._standing(rank, record, values[record.team_id]))
        logger.debug("Computed standings for %d teams", len(standings))
        return standings

    def _standing(self, rank: int, record: TeamRecord, team_values: Dict[str, float]) -> Standing:
        speaks = record.speaks_by_round
        return Standing(
            rank=rank,
            team_id=record.team_id,
            wins=record.wins,
            losses=record.losses,
            total_speaks=record.total_speaks,
            average_speaks=sum(speaks) / len(speaks) if speaks else 0.0,
            opp_win_pct=team_values[TB_OPP_WIN_PCT],
            adjusted_speaks=team_values[TB_ADJUSTED_SPEAKS],
            opp_wins=int(team_values[TB_OPP_WINS]),
            rounds_completed=record.rounds_completed,
            byes=record.byes,
            tiebreakers={key: team_values[key] for key in self.settings.tiebreak_order},
        )


def compute_standings(
    teams: Sequence[Team],
    pairings: Sequence[Pairing],
    settings: Optional[TabulationSettings] = None,
) -> List[Standing]:
    """Rank the active teams. See :class:`StandingsCalculator`."""
    return StandingsCalculator(settings).compute(teams, pairings)
