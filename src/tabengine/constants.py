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

# --- Constants ---

# Pairing status values
STATUS_SCHEDULED = "scheduled"
STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"
STATUS_BYE = "bye"

# Pairing flags
FLAG_BYE = "bye"
FLAG_PULLUP = "pullup"
FLAG_ESCALATED = "escalated"
FLAG_SIDE_CLASH = "side_clash"
FLAG_INTERMEDIATE = "intermediate"
FLAG_SWAPPED = "swapped"

# Default draw penalties
DEFAULT_HISTORY_PENALTY = 1000.0
DEFAULT_INSTITUTION_PENALTY = 500.0
DEFAULT_SIDE_PENALTY = 100.0
# Weight of distance from the ideal fold position (1 vs n/2+1)
FOLD_POSITION_WEIGHT = 1.0

# Default judge allocation weights
DEFAULT_EXPERIENCE_WEIGHT = 100.0
DEFAULT_TIME_PREFERENCE_WEIGHT = 60.0
DEFAULT_SPECIALIZATION_WEIGHT = 80.0
DEFAULT_JUDGE_INSTITUTION_PENALTY = 400.0
DEFAULT_PANEL_WEIGHT = 0.5
# Rooms ranked beyond this are weighted like the last one
ROOM_PRIORITY_DEPTH = 10

# Node budget for the exact bracket matcher before it settles on its best find
MATCHING_NODE_LIMIT = 200_000

# Time-of-day buckets (start hour inclusive, end hour exclusive)
MORNING_HOURS = (8, 12)
AFTERNOON_HOURS = (12, 17)
EVENING_HOURS = (17, 21)

# Tiebreak keys
TB_WINS = "wins"
TB_LOSSES = "losses"
TB_SPEAKS = "speaks"
TB_ADJUSTED_SPEAKS = "adjusted_speaks"
TB_OPP_WIN_PCT = "opp_win_pct"
TB_OPP_WINS = "opp_wins"
TB_HEAD_TO_HEAD = "head_to_head"

TIEBREAK_NAMES = {
    TB_WINS: "Wins",
    TB_LOSSES: "Losses",
    TB_SPEAKS: "Total Speaks",
    TB_ADJUSTED_SPEAKS: "Adjusted Speaks",
    TB_OPP_WIN_PCT: "Opponent Win %",
    TB_OPP_WINS: "Opponent Wins",
    TB_HEAD_TO_HEAD: "Head to Head",
}

DEFAULT_TIEBREAK_ORDER = [TB_WINS, TB_SPEAKS, TB_OPP_WIN_PCT]

# Elimination brackets
SUPPORTED_BRACKET_SIZES = (4, 8, 16, 32)
# Indexed by the number of rounds left including the named one
ELIMINATION_ROUND_NAMES = {
    1: "Finals",
    2: "Semifinals",
    3: "Quarterfinals",
    4: "Octofinals",
    5: "Round of 32",
}

# Warning codes
WARN_PULLUP = "pullup"
WARN_ESCALATED = "escalated"
WARN_BYE = "bye"
WARN_SIDE_CLASH = "side_clash"
WARN_PARTIAL_ASSIGNMENT = "partial_assignment"
WARN_INSUFFICIENT_JUDGES = "insufficient_judges"
WARN_FORCED_SOFT_CONFLICT = "forced_soft_conflict"
WARN_EXTRA_SEEDS = "extra_seeds"
