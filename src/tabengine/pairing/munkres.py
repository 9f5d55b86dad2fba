"""Munkres (Hungarian) algorithm for the minimum-cost assignment problem."""

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
from typing import Sequence

from tabengine.type_hints import Assignment, CostMatrix
from tabengine.utils import setup_logger

logger = setup_logger(__name__)

# Cost of a forbidden cell. Any solution using one is rejected by callers.
DISALLOWED = 1e12


def is_disallowed(cost: float) -> bool:
    return cost >= DISALLOWED


def pad_matrix(matrix: Sequence[Sequence[float]], pad_value: float = 0.0) -> CostMatrix:
    """Pad a possibly non-square matrix to a square one."""
    rows = len(matrix)
    cols = max((len(row) for row in matrix), default=0)
    n = max(rows, cols)
    padded: CostMatrix = []
    for i in range(n):
        row = list(matrix[i]) if i < rows else []
        row.extend([pad_value] * (n - len(row)))
        padded.append(row)
    return padded


@dataclass
class MunkresResult:
    """Rows assigned to columns, restricted to the unpadded matrix.

    Attributes
    ----------
    assignment : list of (row, col)
        One entry per original row that landed on an original column.
    total_cost : float
        Sum of the original costs of ``assignment``.
    """

    assignment: Assignment = field(default_factory=list)
    total_cost: float = 0.0

    def column_for(self, row: int) -> int:
        for r, c in self.assignment:
            if r == row:
                return c
        return -1


class Munkres:
    """
    Hungarian algorithm with row/column potentials, O(n^3).

    Shortest augmenting paths are grown one row at a time; the potentials
    keep every reduced cost non-negative so the final assignment is optimal.
    """

    def compute(self, cost_matrix: Sequence[Sequence[float]]) -> MunkresResult:
        """Compute the optimal assignment for ``cost_matrix``.

        Parameters
        ----------
        cost_matrix : sequence of sequence of float
            Rows are agents, columns are tasks. Rectangular input is padded
            with zero-cost cells.

        Returns
        -------
        MunkresResult
            Assignment over the original rows and columns.
        """
        if not cost_matrix:
            return MunkresResult()

        rows = len(cost_matrix)
        cols = max(len(row) for row in cost_matrix)
        matrix = pad_matrix(cost_matrix)
        n = len(matrix)
        logger.debug("Solving %dx%d assignment (padded to %d)", rows, cols, n)

        inf = float("inf")
        u = [0.0] * (n + 1)
        v = [0.0] * (n + 1)
        # p[j]: row (1-based) matched to column j; column 0 is the virtual root
        p = [0] * (n + 1)
        way = [0] * (n + 1)

        for i in range(1, n + 1):
            p[0] = i
            j0 = 0
            minv = [inf] * (n + 1)
            used = [False] * (n + 1)
            while True:
                used[j0] = True
                i0 = p[j0]
                delta = inf
                j1 = 0
                row = matrix[i0 - 1]
                for j in range(1, n + 1):
                    if used[j]:
                        continue
                    cur = row[j - 1] - u[i0] - v[j]
                    if cur < minv[j]:
                        minv[j] = cur
                        way[j] = j0
                    if minv[j] < delta:
                        delta = minv[j]
                        j1 = j
                for j in range(n + 1):
                    if used[j]:
                        u[p[j]] += delta
                        v[j] -= delta
                    else:
                        minv[j] -= delta
                j0 = j1
                if p[j0] == 0:
                    break
            # Augment along the alternating path
            while True:
                j1 = way[j0]
                p[j0] = p[j1]
                j0 = j1
                if j0 == 0:
                    break

        result = MunkresResult()
        for j in range(1, n + 1):
            r, c = p[j] - 1, j - 1
            if r < rows and c < len(cost_matrix[r]):
                result.assignment.append((r, c))
                result.total_cost += cost_matrix[r][c]
        result.assignment.sort()
        return result


def solve_assignment(cost_matrix: Sequence[Sequence[float]]) -> MunkresResult:
    """Convenience wrapper around :class:`Munkres`."""
    return Munkres().compute(cost_matrix)


def assignment_uses_disallowed(
    cost_matrix: Sequence[Sequence[float]], assignment: Assignment
) -> bool:
    """Whether any assigned cell is forbidden."""
    return any(is_disallowed(cost_matrix[r][c]) for r, c in assignment)
