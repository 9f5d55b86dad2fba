"""Draw generation for preliminary rounds."""

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

from tabengine.pairing.draw_generator import DrawGenerator, DrawResult, generate_round
from tabengine.pairing.matching import MatchingResult, min_cost_matching
from tabengine.pairing.munkres import Munkres, MunkresResult, solve_assignment

__all__ = [
    "DrawGenerator",
    "DrawResult",
    "generate_round",
    "MatchingResult",
    "min_cost_matching",
    "Munkres",
    "MunkresResult",
    "solve_assignment",
]
