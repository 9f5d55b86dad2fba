"""Tab Engine: draws, judge allocation, standings and brackets for debate tournaments."""

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

import logging

from tabengine.allocation import AssignmentProposal, allocate_judges, commit_assignments
from tabengine.controllers import RoundManager
from tabengine.elimination import (
    BracketResult,
    BreakCategory,
    build_bracket,
    calculate_liveness,
    generate_all_breaks,
    generate_break,
)
from tabengine.exceptions import (
    InfeasibleConstraintException,
    PreconditionViolatedException,
    TabEngineException,
)
from tabengine.models import (
    BallotResult,
    ConflictSet,
    Judge,
    Pairing,
    PairingHistory,
    Standing,
    TabulationSettings,
    TabWarning,
    Team,
)
from tabengine.pairing import DrawResult, generate_round
from tabengine.standings import SpeakerStanding, compute_speaker_standings, compute_standings

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AssignmentProposal",
    "allocate_judges",
    "commit_assignments",
    "RoundManager",
    "BracketResult",
    "BreakCategory",
    "build_bracket",
    "calculate_liveness",
    "generate_all_breaks",
    "generate_break",
    "InfeasibleConstraintException",
    "PreconditionViolatedException",
    "TabEngineException",
    "BallotResult",
    "ConflictSet",
    "Judge",
    "Pairing",
    "PairingHistory",
    "Standing",
    "TabulationSettings",
    "TabWarning",
    "Team",
    "DrawResult",
    "generate_round",
    "compute_standings",
    "SpeakerStanding",
    "compute_speaker_standings",
]
