"""Team standings and tiebreaks."""

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

from tabengine.standings.speaker_standings import (
    SpeakerStanding,
    SpeakerStandingsCalculator,
    compute_speaker_standings,
)
from tabengine.standings.standings_calculator import StandingsCalculator, compute_standings
from tabengine.standings.tiebreak_calculator import TeamRecord, TiebreakCalculator

__all__ = [
    "SpeakerStanding",
    "SpeakerStandingsCalculator",
    "compute_speaker_standings",
    "StandingsCalculator",
    "compute_standings",
    "TeamRecord",
    "TiebreakCalculator",
]
