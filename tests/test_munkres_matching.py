import itertools
import random

from tabengine.pairing.matching import min_cost_matching
from tabengine.pairing.munkres import (
    DISALLOWED,
    assignment_uses_disallowed,
    pad_matrix,
    solve_assignment,
)


def _brute_force(matrix):
    n = len(matrix)
    return min(
        sum(matrix[r][c] for r, c in enumerate(perm))
        for perm in itertools.permutations(range(n))
    )


def test_munkres_small_known_matrix():
    matrix = [[4, 1, 3], [2, 0, 5], [3, 2, 2]]
    result = solve_assignment(matrix)
    assert result.total_cost == 5
    assert result.assignment == [(0, 1), (1, 0), (2, 2)]
    assert result.column_for(2) == 2


def test_munkres_matches_brute_force():
    rng = random.Random(7)
    for size in range(1, 7):
        for _ in range(5):
            matrix = [[rng.randint(0, 50) for _ in range(size)] for _ in range(size)]
            assert solve_assignment(matrix).total_cost == _brute_force(matrix)


def test_munkres_rectangular_input():
    matrix = [[1, 2, 3], [3, 1, 2]]
    result = solve_assignment(matrix)
    assert len(result.assignment) == 2
    assert result.total_cost == 2
    assert pad_matrix(matrix)[2] == [0.0, 0.0, 0.0]


def test_munkres_avoids_disallowed_cells_when_possible():
    matrix = [[DISALLOWED, 5], [1, DISALLOWED]]
    result = solve_assignment(matrix)
    assert result.assignment == [(0, 1), (1, 0)]
    assert not assignment_uses_disallowed(matrix, result.assignment)

    blocked = [[DISALLOWED, DISALLOWED], [1, 2]]
    forced = solve_assignment(blocked)
    assert assignment_uses_disallowed(blocked, forced.assignment)


def test_matching_finds_cheapest_perfect_matching():
    costs = {(0, 1): 10, (0, 2): 1, (0, 3): 10, (1, 2): 10, (1, 3): 1, (2, 3): 10}
    result = min_cost_matching(4, lambda i, j: costs[(i, j)])
    assert result.pairs == [(0, 2), (1, 3)]
    assert result.is_perfect
    assert result.cost == 2
    assert result.exhaustive


def test_matching_respects_exclusions():
    def cost(i, j):
        if 0 in (i, j) and 3 not in (i, j):
            return None
        return 0.0

    result = min_cost_matching(4, cost)
    assert (0, 3) in result.pairs
    assert (1, 2) in result.pairs


def test_matching_leaves_out_lowest_ranked_positions():
    def cost(i, j):
        return None if 3 in (i, j) else 0.0

    result = min_cost_matching(4, cost)
    assert result.pairs == [(0, 1)]
    assert result.unmatched == [2, 3]


def test_matching_with_no_allowed_pairs():
    result = min_cost_matching(2, lambda i, j: None)
    assert result.pairs == []
    assert result.unmatched == [0, 1]
    assert min_cost_matching(0, lambda i, j: 0.0).is_perfect
