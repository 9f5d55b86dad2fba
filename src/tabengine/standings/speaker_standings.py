"""Individual speaker tab built from per-speaker ballot scores."""

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
from typing import Any, Dict, Iterable, List, Optional, Sequence

from tabengine.models.pairing import Pairing
from tabengine.models.settings import TabulationSettings
from tabengine.models.team import Team
from tabengine.standings.tiebreak_calculator import TiebreakCalculator
from tabengine.utils import setup_logger

logger = setup_logger(__name__)

_PRECISION = 9


@dataclass
class SpeakerRecord:
    """Every score one speaker received, in round order."""

    speaker_id: str
    team_id: str
    points: List[float] = field(default_factory=list)


@dataclass(frozen=True)
class SpeakerStanding:
    """A speaker's position on the speaker tab.

    Attributes
    ----------
    rank : int
        Competition rank; speakers tied on adjusted and total points share it.
    speaker_id : str
        Speaker the standing belongs to.
    team_id : str
        Team the speaker last spoke for.
    rounds_spoken : int
        Scored rounds. Forfeits and byes carry no scores.
    total_points, average_points : float
        Sum and mean of the scores.
    high_point, low_point : float
        Best and worst single score.
    adjusted_points : float
        Total after dropping the highest and lowest rounds.
    """

    rank: int
    speaker_id: str
    team_id: str
    rounds_spoken: int
    total_points: float
    average_points: float
    high_point: float
    low_point: float
    adjusted_points: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "speaker_id": self.speaker_id,
            "team_id": self.team_id,
            "rounds_spoken": self.rounds_spoken,
            "total_points": self.total_points,
            "average_points": self.average_points,
            "high_point": self.high_point,
            "low_point": self.low_point,
            "adjusted_points": self.adjusted_points,
        }


class SpeakerStandingsCalculator:
    """Rank individual speakers by adjusted points, then total points.

    The high/low drop uses ``drop_high_low_speaks`` from the settings, the
    same rule the team ``adjusted_speaks`` tiebreak applies.
    """

    def __init__(self, settings: Optional[TabulationSettings] = None) -> None:
        self.settings = settings or TabulationSettings()
        self.tiebreaks = TiebreakCalculator(self.settings.drop_high_low_speaks)

    def build_records(self, pairings: Sequence[Pairing]) -> Dict[str, SpeakerRecord]:
        """Collect every speaker score from completed, non-forfeited debates."""
        records: Dict[str, SpeakerRecord] = {}
        ordered = sorted(pairings, key=lambda p: (p.round_number, p.id))
        for pairing in ordered:
            if not pairing.is_decided or pairing.is_bye or pairing.result.forfeit:
                continue
            result = pairing.result
            sides = (
                (pairing.aff_team_id, result.aff_speaker_scores),
                (pairing.neg_team_id, result.neg_speaker_scores),
            )
            for team_id, scores in sides:
                for speaker_id, points in scores.items():
                    record = records.setdefault(speaker_id, SpeakerRecord(speaker_id, team_id))
                    record.team_id = team_id
                    record.points.append(points)
        return records

    def compute(
        self,
        pairings: Sequence[Pairing],
        teams: Optional[Sequence[Team]] = None,
        exclude_team_ids: Iterable[str] = (),
    ) -> List[SpeakerStanding]:
        """Rank every speaker with at least one score.

        Args:
            pairings: Every pairing so far
            teams: Roster; when given, speakers of withdrawn teams are left out
            exclude_team_ids: Teams whose speakers are left out, e.g. the
                breaking teams for a non-breaking speaker award

        Returns:
            Speaker standings ordered by rank, then speaker id
        """
        excluded = set(exclude_team_ids)
        if teams is not None:
            excluded.update(team.id for team in teams if not team.is_active)

        records = [
            record
            for record in self.build_records(pairings).values()
            if record.team_id not in excluded
        ]
        rows = [self._row(record) for record in records]
        rows.sort(key=lambda row: (-row[0], -row[1], row[2].speaker_id))

        standings: List[SpeakerStanding] = []
        previous = None
        rank = 0
        for position, (adjusted, total, record) in enumerate(rows, start=1):
            if (adjusted, total) != previous:
                rank = position
                previous = (adjusted, total)
            standings.append(self._standing(rank, record))
        logger.debug("Computed speaker tab for %d speakers", len(standings))
        return standings

    def _row(self, record: SpeakerRecord):
        adjusted = self.tiebreaks._calculate_adjusted_speaks(record.points)
        return round(adjusted, _PRECISION), round(sum(record.points), _PRECISION), record

    def _standing(self, rank: int, record: SpeakerRecord) -> SpeakerStanding:
        points = record.points
        return SpeakerStanding(
            rank=rank,
            speaker_id=record.speaker_id,
            team_id=record.team_id,
            rounds_spoken=len(points),
            total_points=sum(points),
            average_points=sum(points) / len(points),
            high_point=max(points),
            low_point=min(points),
            adjusted_points=self.tiebreaks._calculate_adjusted_speaks(points),
        )


def compute_speaker_standings(
    pairings: Sequence[Pairing],
    settings: Optional[TabulationSettings] = None,
    teams: Optional[Sequence[Team]] = None,
    exclude_team_ids: Iterable[str] = (),
    top_n: Optional[int] = None,
) -> List[SpeakerStanding]:
    """Rank speakers, optionally keeping only the first ``top_n`` rows.

    See :class:`SpeakerStandingsCalculator`.
    """
    standings = SpeakerStandingsCalculator(settings).compute(pairings, teams, exclude_team_ids)
    if top_n is not None:
        standings = standings[:top_n]
    return standings
