"""Roster model: teams, judges, conflicts, pairings and settings."""

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

from tabengine.models.conflict import (
    Conflict,
    ConflictSet,
    JudgeInstitutionConflict,
    JudgeTeamConflict,
    TeamConflict,
    conflict_from_dict,
    conflict_to_dict,
)
from tabengine.models.diagnostics import TabWarning
from tabengine.models.judge import ExperienceTier, Judge, JudgeAvailability, TimeOfDay
from tabengine.models.pairing import BallotResult, Pairing
from tabengine.models.pairing_history import (
    PairingHistory,
    PairingHistoryEntry,
    canonical_pair,
)
from tabengine.models.round_data import RoundData
from tabengine.models.settings import (
    ByeSpeaksPolicy,
    DrawMethod,
    OddBracketPolicy,
    PullupRestriction,
    SideMethod,
    TabulationSettings,
)
from tabengine.models.standing import Standing
from tabengine.models.team import Team

__all__ = [
    "BallotResult",
    "ByeSpeaksPolicy",
    "Conflict",
    "ConflictSet",
    "DrawMethod",
    "ExperienceTier",
    "Judge",
    "JudgeAvailability",
    "JudgeInstitutionConflict",
    "JudgeTeamConflict",
    "OddBracketPolicy",
    "Pairing",
    "PairingHistory",
    "PairingHistoryEntry",
    "PullupRestriction",
    "RoundData",
    "SideMethod",
    "Standing",
    "TabWarning",
    "TabulationSettings",
    "Team",
    "TeamConflict",
    "TimeOfDay",
    "canonical_pair",
    "conflict_from_dict",
    "conflict_to_dict",
]
