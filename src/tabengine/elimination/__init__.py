"""Breaks and elimination brackets."""

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

from tabengine.elimination.bracket_builder import (
    BracketResult,
    RoundPlan,
    advance_winner,
    build_bracket,
    round_name,
    seeding_order,
)
from tabengine.elimination.break_generator import (
    BreakCategory,
    BreakGenerator,
    BreakRemark,
    BreakResult,
    BreakRule,
    breaking_team_ids,
    calculate_liveness,
    generate_all_breaks,
    generate_break,
)

__all__ = [
    "BracketResult",
    "RoundPlan",
    "advance_winner",
    "build_bracket",
    "round_name",
    "seeding_order",
    "BreakCategory",
    "BreakGenerator",
    "BreakRemark",
    "BreakResult",
    "BreakRule",
    "breaking_team_ids",
    "calculate_liveness",
    "generate_all_breaks",
    "generate_break",
]
