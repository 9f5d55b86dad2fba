"""Exact minimum-cost matching inside a single bracket."""

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
from typing import Callable, List, Optional, Tuple

from tabengine.constants import MATCHING_NODE_LIMIT
from tabengine.utils import setup_logger

logger = setup_logger(__name__)

# Leaving a team unmatched costs more than any realistic set of pairings.
LEAVE_OUT_COST = 1e9

# Returns the cost of pairing two positions, or None when the pair is excluded.
PairCostFn = Callable[[int, int], Optional[float]]


@dataclass
class MatchingResult:
    """Outcome of :func:`min_cost_matching`.

    Attributes
    ----------
    pairs : list of (int, int)
        Matched positions, lower position first, sorted.
    unmatched : list of int
        Positions that could not be matched, sorted.
    cost : float
        Total cost of ``pairs`` (leave-out costs excluded).
    exhaustive : bool
        False when the node budget ran out before the search completed.
    """

    pairs: List[Tuple[int, int]] = field(default_factory=list)
    unmatched: List[int] = field(default_factory=list)
    cost: float = 0.0
    exhaustive: bool = True

    @property
    def is_perfect(self) -> bool:
        return not self.unmatched


def min_cost_matching(
    n: int, pair_cost: PairCostFn, node_limit: int = MATCHING_NODE_LIMIT
) -> MatchingResult:
    """
    Minimum-cost matching over ``n`` ranked positions by branch and bound.

    Every position is either paired with a non-excluded partner or left
    unmatched at ``LEAVE_OUT_COST``, so the fewest possible positions end up
    unmatched. Among equally sized leftover sets the lowest-ranked (highest
    position) teams are preferred, then the cheapest pairings.

    Parameters
    ----------
    n : int
        Number of positions, 0 is the highest-ranked team.
    pair_cost : callable
        ``pair_cost(i, j)`` for ``i < j``; None marks an excluded pair.
    node_limit : int
        Search nodes to expand before settling on the best matching found.

    Returns
    -------
    MatchingResult
    """
    if n == 0:
        return MatchingResult()

    edges: List[List[Tuple[float, int]]] = [[] for _ in range(n)]
    for i in range(n):
        for j in range(i + 1, n):
            cost = pair_cost(i, j)
            if cost is None:
                continue
            edges[i].append((cost, j))
            edges[j].append((cost, i))
    for adjacent in edges:
        adjacent.sort()

    # Lower-ranked positions are slightly cheaper to leave out
    leave = [LEAVE_OUT_COST - i for i in range(n)]
    bound = [
        min(edges[i][0][0] / 2.0, leave[i]) if edges[i] else leave[i] for i in range(n)
    ]
    # Most constrained positions branch first
    order = sorted(range(n), key=lambda i: (len(edges[i]), i))

    matched = [False] * n
    pairs: List[Tuple[int, int]] = []
    left: List[int] = []
    best_total = float("inf")
    best: Tuple[List[Tuple[int, int]], List[int]] = ([], list(range(n)))
    nodes = 0
    truncated = False

    def search(start: int, total: float) -> None:
        nonlocal best_total, best, nodes, truncated
        k = start
        while k < n and matched[order[k]]:
            k += 1
        if k == n:
            if total < best_total:
                best_total = total
                best = (list(pairs), list(left))
            return
        nodes += 1
        if nodes > node_limit:
            truncated = True
            return
        remaining = sum(bound[order[m]] for m in range(k, n) if not matched[order[m]])
        if total + remaining >= best_total:
            return

        i = order[k]
        matched[i] = True
        for cost, j in edges[i]:
            if matched[j]:
                continue
            matched[j] = True
            pairs.append((min(i, j), max(i, j)))
            search(k + 1, total + cost)
            pairs.pop()
            matched[j] = False
            if truncated:
                break
        if not truncated:
            left.append(i)
            search(k + 1, total + leave[i])
            left.pop()
        matched[i] = False

    search(0, 0.0)

    best_pairs, best_left = best
    result = MatchingResult(
        pairs=sorted(best_pairs),
        unmatched=sorted(best_left),
        exhaustive=not truncated,
    )
    result.cost = sum(
        next(c for c, j in edges[a] if j == b) for a, b in result.pairs
    )
    if truncated:
        logger.debug("Matching search stopped after %d nodes (n=%d)", node_limit, n)
    logger.debug(
        "Matched %d pairs over %d positions, %d unmatched",
        len(result.pairs),
        n,
        len(result.unmatched),
    )
    return result
