"""Per-round draw generation: power pairing, random and round robin draws."""

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

import random
from collections import Counter
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

from tabengine.constants import (
    FLAG_BYE,
    FLAG_ESCALATED,
    FLAG_INTERMEDIATE,
    FLAG_PULLUP,
    FLAG_SIDE_CLASH,
    FLAG_SWAPPED,
    FOLD_POSITION_WEIGHT,
    STATUS_BYE,
    STATUS_SCHEDULED,
    WARN_BYE,
    WARN_ESCALATED,
    WARN_PULLUP,
    WARN_SIDE_CLASH,
)
from tabengine.exceptions import InfeasibleConstraintException, InvalidPairingException
from tabengine.models.conflict import Conflict, ConflictSet
from tabengine.models.diagnostics import TabWarning
from tabengine.models.pairing import Pairing
from tabengine.models.pairing_history import PairingHistory, PairingHistoryEntry
from tabengine.models.settings import (
    DrawMethod,
    OddBracketPolicy,
    PullupRestriction,
    SideMethod,
    TabulationSettings,
)
from tabengine.models.team import Team
from tabengine.pairing.matching import min_cost_matching
from tabengine.pairing.munkres import DISALLOWED, assignment_uses_disallowed, solve_assignment
from tabengine.type_hints import AFF, Side
from tabengine.utils import setup_logger

logger = setup_logger(__name__)

HistoryInput = Union[PairingHistory, Iterable[PairingHistoryEntry]]
ConflictInput = Union[ConflictSet, Iterable[Conflict]]


@dataclass
class DrawResult:
    """Outcome of generating one round.

    Attributes
    ----------
    round_number : int
        Round the draw belongs to.
    pairings : list of Pairing
        Debates ordered by room rank, byes last.
    teams : list of Team
        Copies of the input teams with side, pull-up and bye counters applied.
    warnings : list of TabWarning
        Pull-ups, escalations, byes and side clashes.
    """

    round_number: int
    pairings: List[Pairing] = field(default_factory=list)
    teams: List[Team] = field(default_factory=list)
    warnings: List[TabWarning] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.pairings

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round_number": self.round_number,
            "pairings": [p.to_dict() for p in self.pairings],
            "teams": [t.to_dict() for t in self.teams],
            "warnings": [w.to_dict() for w in self.warnings],
        }


@dataclass
class _Bracket:
    wins: float
    teams: List[Team]


@dataclass
class _DraftPairing:
    """Two teams drawn together before sides and room ranks are decided."""

    team_a: Team
    team_b: Optional[Team]
    bracket: float
    flags: List[str] = field(default_factory=list)


class DrawGenerator:
    """
    Generate the pairings of one round.

    Inputs are snapshotted on construction and never mutated; the updated
    team counters are returned as copies in :class:`DrawResult`.

    Parameters
    ----------
    teams : sequence of Team
        Full roster; withdrawn teams are carried through untouched.
    history : PairingHistory or iterable of PairingHistoryEntry
        Every earlier meeting.
    settings : TabulationSettings
        Draw configuration.
    round_number : int
        Round being drawn, 1-based.
    conflicts : ConflictSet or iterable of Conflict
        Hard conflicts; only team-team entries affect the draw.
    side_allocations : dict, optional
        ``team_id -> "aff" | "neg"`` for the preallocated side method.
    """

    def __init__(
        self,
        teams: Sequence[Team],
        history: HistoryInput,
        settings: TabulationSettings,
        round_number: int,
        conflicts: ConflictInput = (),
        side_allocations: Optional[Dict[str, Side]] = None,
    ) -> None:
        self.round_number = round_number
        self.settings = settings
        self._roster: List[Team] = [replace(team) for team in teams]
        if isinstance(history, PairingHistory):
            self._history = history.copy()
        else:
            self._history = PairingHistory.from_entries(history)
        if isinstance(conflicts, ConflictSet):
            self._conflicts = conflicts
        else:
            self._conflicts = ConflictSet(conflicts)
        self._side_allocations: Dict[str, Side] = dict(side_allocations or {})
        self._rng = random.Random(settings.seed)

        self._active: List[Team] = sorted(
            (t for t in self._roster if t.is_active), key=self._rank_key
        )
        self._position: Dict[str, int] = {t.id: i for i, t in enumerate(self._active)}

        # Per-attempt state, reset for every bye candidate tried
        self._pulled_up: Set[str] = set()
        self._escalated: Set[str] = set()
        self._warnings: List[TabWarning] = []

    # ----- ordering and costs -----

    @staticmethod
    def _rank_key(team: Team) -> Tuple[int, float, str]:
        return (-team.wins, -team.speaks, team.id)

    def _sort(self, teams: Iterable[Team]) -> List[Team]:
        return sorted(teams, key=lambda t: self._position[t.id])

    def _exclusion_reason(self, a: Team, b: Team) -> Optional[str]:
        if self._conflicts.teams_conflict(a.id, b.id):
            return "team_conflict"
        if (
            self.settings.avoid_rematches
            and self._history.meetings(a.id, b.id) > self.settings.max_repeat_opponents
        ):
            return "rematch"
        return None

    @staticmethod
    def _side_excess(a: Team, b: Team) -> int:
        """Side skew beyond 1 left by the better orientation of the pair."""

        def excess(imbalance: int) -> int:
            return max(0, abs(imbalance) - 1)

        a_aff = excess(a.side_imbalance + 1) + excess(b.side_imbalance - 1)
        b_aff = excess(b.side_imbalance + 1) + excess(a.side_imbalance - 1)
        return min(a_aff, b_aff)

    def pair_cost(self, a: Team, b: Team) -> Optional[float]:
        """Cost of drawing ``a`` against ``b``; None when the pair is excluded."""
        if self._exclusion_reason(a, b) is not None:
            return None
        cost = 0.0
        meetings = self._history.meetings(a.id, b.id)
        if meetings > 0:
            cost += self.settings.history_penalty * meetings
        if self.settings.institution_protect and a.shares_institution(b):
            cost += self.settings.institution_penalty
        cost += self.settings.side_penalty * self._side_excess(a, b)
        return cost

    def _is_clean(self, a: Team, b: Team) -> bool:
        """No rematch, institution clash or hard conflict."""
        if self._exclusion_reason(a, b) is not None:
            return False
        if self._history.have_met(a.id, b.id):
            return False
        return not (self.settings.institution_protect and a.shares_institution(b))

    def _infeasible(
        self, message: str, stuck: Sequence[Team], pool: Sequence[Team]
    ) -> InfeasibleConstraintException:
        blocking = []
        reasons: Counter = Counter()
        for team in stuck:
            for other in pool:
                if other.id == team.id:
                    continue
                reason = self._exclusion_reason(team, other)
                if reason is not None:
                    blocking.append(tuple(sorted((team.id, other.id))))
                    reasons[reason] += 1
        rule = reasons.most_common(1)[0][0] if reasons else None
        logger.warning("%s: %s", message, ", ".join(t.id for t in stuck))
        return InfeasibleConstraintException(
            message,
            teams=[t.id for t in stuck],
            rule=rule,
            blocking=sorted(set(blocking)),
        )

    # ----- entry point -----

    def generate(self) -> DrawResult:
        """Generate the round.

        Returns
        -------
        DrawResult
            Empty (``is_empty``) when fewer than two teams are active.

        Raises
        ------
        InfeasibleConstraintException
            When hard exclusions cannot be met after escalation and merging.
        """
        if len(self._active) < 2:
            logger.info(
                "Round %d: fewer than two active teams, nothing to draw", self.round_number
            )
            return DrawResult(round_number=self.round_number, teams=self._roster)

        method = self.settings.draw_method
        if method == DrawMethod.ROUND_ROBIN:
            self._reset_attempt()
            drafts = self._round_robin()
        else:
            drafts = self._with_bye(method)

        result = self._finalize(drafts)
        logger.info(
            "Round %d draw generated: %d debates, %d warnings",
            self.round_number,
            sum(1 for p in result.pairings if not p.is_bye),
            len(result.warnings),
        )
        return result

    def _reset_attempt(self) -> None:
        self._pulled_up = set()
        self._escalated = set()
        self._warnings = []

    def _with_bye(self, method: DrawMethod) -> List[_DraftPairing]:
        """Run the draw, trying bye candidates in order when the count is odd."""
        if method == DrawMethod.RANDOM:
            order = self._sort(self._active)
            self._rng.shuffle(order)
        else:
            order = list(self._active)

        if len(order) % 2 == 0:
            self._reset_attempt()
            return self._draw(method, order)

        last_error: Optional[InfeasibleConstraintException] = None
        for candidate in self._bye_candidates(order, method):
            self._reset_attempt()
            remaining = [t for t in order if t.id != candidate.id]
            try:
                drafts = self._draw(method, remaining)
            except InfeasibleConstraintException as exc:
                logger.debug("Bye to %s leaves an infeasible draw: %s", candidate.id, exc)
                last_error = exc
                continue
            drafts.append(_DraftPairing(candidate, None, float(candidate.wins), [FLAG_BYE]))
            self._warnings.append(
                TabWarning(WARN_BYE, f"{candidate.name} receives the bye", (candidate.id,))
            )
            return drafts
        assert last_error is not None
        raise last_error

    def _bye_candidates(self, order: List[Team], method: DrawMethod) -> List[Team]:
        """Fewest byes first, then lowest-ranked; the bottom bracket comes first."""
        if method == DrawMethod.RANDOM:
            index = {t.id: i for i, t in enumerate(order)}
            return sorted(order, key=lambda t: (t.bye_count, -index[t.id]))
        bottom_wins = min(t.wins for t in order)
        bottom = [t for t in order if t.wins == bottom_wins]
        rest = [t for t in order if t.wins != bottom_wins]

        def key(team: Team) -> Tuple[int, int]:
            return (team.bye_count, -self._position[team.id])

        return sorted(bottom, key=key) + sorted(rest, key=key)

    def _draw(self, method: DrawMethod, teams: List[Team]) -> List[_DraftPairing]:
        if method == DrawMethod.RANDOM:
            return self._random(teams)
        return self._power_paired(teams)

    # ----- power pairing -----

    def _make_brackets(self, teams: List[Team]) -> List[_Bracket]:
        by_wins: Dict[int, List[Team]] = {}
        for team in teams:
            by_wins.setdefault(team.wins, []).append(team)
        return [
            _Bracket(float(wins), self._sort(by_wins[wins]))
            for wins in sorted(by_wins, reverse=True)
        ]

    def _power_paired(self, teams: List[Team]) -> List[_DraftPairing]:
        brackets = self._make_brackets(teams)
        drafts: List[_DraftPairing] = []
        previous: List[Tuple[_Bracket, List[_DraftPairing]]] = []

        for index, bracket in enumerate(brackets):
            if not bracket.teams:
                continue
            lower = self._next_bracket(brackets, index)

            if len(bracket.teams) % 2 == 1:
                if lower is None:
                    raise InvalidPairingException(
                        f"Bottom bracket {bracket.wins} is odd after the bye was removed"
                    )
                intermediate = self._resolve_odd_bracket(bracket, lower)
                if intermediate is not None:
                    drafts.append(intermediate)
                if not bracket.teams:
                    continue

            pairs, leftover = self._solve_bracket(bracket.teams)
            solved = [_DraftPairing(a, b, bracket.wins) for a, b in pairs]
            # A pull-up may have emptied the bracket below
            lower = self._next_bracket(brackets, index)

            if leftover and lower is not None:
                for team in leftover:
                    self._escalated.add(team.id)
                self._warnings.append(
                    TabWarning(
                        WARN_ESCALATED,
                        f"{len(leftover)} teams escalated out of bracket {bracket.wins}",
                        tuple(t.id for t in leftover),
                    )
                )
                logger.warning(
                    "Round %d: escalating %s out of bracket %s",
                    self.round_number,
                    [t.id for t in leftover],
                    bracket.wins,
                )
                lower.teams = self._sort(leftover + lower.teams)
            elif leftover:
                solved = self._merge_with_previous(bracket, previous, leftover, drafts)

            drafts.extend(solved)
            if solved:
                previous.append((bracket, solved))
        return drafts

    @staticmethod
    def _next_bracket(brackets: List[_Bracket], index: int) -> Optional[_Bracket]:
        for bracket in brackets[index + 1:]:
            if bracket.teams:
                return bracket
        return None

    def _merge_with_previous(
        self,
        bracket: _Bracket,
        previous: List[Tuple[_Bracket, List[_DraftPairing]]],
        leftover: List[Team],
        drafts: List[_DraftPairing],
    ) -> List[_DraftPairing]:
        """Re-solve an infeasible bottom bracket together with the brackets above.

        Brackets are folded in one at a time, nearest first, until the
        merged pool pairs completely.
        """
        if not previous:
            raise self._infeasible(
                f"No valid pairing exists for bracket {bracket.wins}", leftover, bracket.teams
            )
        pool = list(bracket.teams)
        still_left = leftover
        for upper, upper_drafts in reversed(previous):
            for draft in upper_drafts:
                drafts.remove(draft)
            pool.extend(d.team_a for d in upper_drafts)
            pool.extend(d.team_b for d in upper_drafts if d.team_b is not None)
            pool = self._sort(pool)
            logger.warning(
                "Round %d: merging bracket %s into bracket %s",
                self.round_number,
                bracket.wins,
                upper.wins,
            )
            pairs, still_left = self._solve_bracket(pool)
            if not still_left:
                return [_DraftPairing(a, b, bracket.wins) for a, b in pairs]
        raise self._infeasible(
            f"No valid pairing exists for brackets {previous[0][0].wins} to {bracket.wins}",
            still_left,
            pool,
        )

    def _pullup_candidates(self, lower: _Bracket) -> List[Team]:
        candidates = list(lower.teams)
        if self.settings.pullup_restriction == PullupRestriction.LEAST_TO_DATE:
            fewest = min(t.pullup_count for t in candidates)
            candidates = [t for t in candidates if t.pullup_count == fewest]
        return candidates

    def _pull_up(self, team: Team, lower: _Bracket, bracket: _Bracket) -> None:
        lower.teams = [t for t in lower.teams if t.id != team.id]
        self._pulled_up.add(team.id)
        self._warnings.append(
            TabWarning(
                WARN_PULLUP,
                f"{team.name} pulled up from bracket {lower.wins} to {bracket.wins}",
                (team.id,),
            )
        )

    def _resolve_odd_bracket(
        self, bracket: _Bracket, lower: _Bracket
    ) -> Optional[_DraftPairing]:
        """Make ``bracket`` even; returns the intermediate pairing if one is formed."""
        policy = self.settings.odd_bracket
        candidates = self._pullup_candidates(lower)

        if policy in (OddBracketPolicy.INTERMEDIATE, OddBracketPolicy.INTERMEDIATE_BUBBLE):
            pair = self._intermediate_pair(bracket, candidates)
            if pair is not None:
                upper_team, lower_team = pair
                bracket.teams = [t for t in bracket.teams if t.id != upper_team.id]
                self._pull_up(lower_team, lower, bracket)
                return _DraftPairing(
                    upper_team, lower_team, bracket.wins - 0.5, [FLAG_INTERMEDIATE]
                )
            logger.debug(
                "No intermediate pairing possible for bracket %s, pulling up instead",
                bracket.wins,
            )

        chosen = candidates[-1] if policy == OddBracketPolicy.PULLUP_BOTTOM else candidates[0]
        self._pull_up(chosen, lower, bracket)
        bracket.teams = self._sort(bracket.teams + [chosen])
        return None

    def _intermediate_pair(
        self, bracket: _Bracket, candidates: List[Team]
    ) -> Optional[Tuple[Team, Team]]:
        uppers = list(reversed(bracket.teams))
        options: List[Tuple[Team, Team]] = []
        if self.settings.odd_bracket == OddBracketPolicy.INTERMEDIATE_BUBBLE:
            # Bubble up, then bubble down, before the remaining combinations
            options.append((uppers[0], candidates[0]))
            if len(uppers) > 1:
                options.append((uppers[1], candidates[0]))
            if len(candidates) > 1:
                options.append((uppers[0], candidates[1]))
        options.extend((u, c) for u in uppers for c in candidates)

        allowed = [(u, c) for u, c in options if self._exclusion_reason(u, c) is None]
        if not allowed:
            return None
        if self.settings.odd_bracket == OddBracketPolicy.INTERMEDIATE_BUBBLE:
            for u, c in allowed:
                if self._is_clean(u, c):
                    return u, c
        return allowed[0]

    def _solve_bracket(self, teams: List[Team]) -> Tuple[List[Tuple[Team, Team]], List[Team]]:
        """Pair an even bracket: fold first, exact matching when the fold is blocked."""
        n = len(teams)
        half = n // 2
        top, bottom = teams[:half], teams[half:]
        matrix = []
        for i, a in enumerate(top):
            row = []
            for j, b in enumerate(bottom):
                cost = self.pair_cost(a, b)
                row.append(
                    DISALLOWED if cost is None else cost + FOLD_POSITION_WEIGHT * abs(i - j)
                )
            matrix.append(row)
        solution = solve_assignment(matrix)
        if not assignment_uses_disallowed(matrix, solution.assignment):
            return [(top[r], bottom[c]) for r, c in solution.assignment], []

        logger.debug("Fold blocked for %s, solving exact matching", [t.id for t in teams])

        def cost_fn(i: int, j: int) -> Optional[float]:
            cost = self.pair_cost(teams[i], teams[j])
            if cost is None:
                return None
            return cost + FOLD_POSITION_WEIGHT * abs((j - i) - half)

        matching = min_cost_matching(n, cost_fn)
        pairs = [(teams[i], teams[j]) for i, j in matching.pairs]
        return pairs, [teams[k] for k in matching.unmatched]

    # ----- random and round robin -----

    def _random(self, order: List[Team]) -> List[_DraftPairing]:
        consecutive = [(order[i], order[i + 1]) for i in range(0, len(order) - 1, 2)]
        if all(self._exclusion_reason(a, b) is None for a, b in consecutive):
            return [_DraftPairing(a, b, 0.0) for a, b in consecutive]

        def cost_fn(i: int, j: int) -> Optional[float]:
            cost = self.pair_cost(order[i], order[j])
            if cost is None:
                return None
            return cost + FOLD_POSITION_WEIGHT * abs(j - i - 1)

        matching = min_cost_matching(len(order), cost_fn)
        if matching.unmatched:
            stuck = [order[k] for k in matching.unmatched]
            raise self._infeasible("No valid random draw exists", stuck, order)
        return [_DraftPairing(order[i], order[j], 0.0) for i, j in matching.pairs]

    def _round_robin(self) -> List[_DraftPairing]:
        """Circle method over teams ordered by id, rotated by round."""
        slots: List[Optional[Team]] = sorted(self._active, key=lambda t: t.id)
        if len(slots) % 2 == 1:
            slots.append(None)
        size = len(slots)
        shift = (self.round_number - 1) % (size - 1)
        rest = slots[1:]
        if shift:
            rest = rest[-shift:] + rest[:-shift]
        circle = [slots[0]] + rest

        drafts: List[_DraftPairing] = []
        for i in range(size // 2):
            a, b = circle[i], circle[size - 1 - i]
            if a is None or b is None:
                team = a if a is not None else b
                drafts.append(_DraftPairing(team, None, float(team.wins), [FLAG_BYE]))
                self._warnings.append(
                    TabWarning(WARN_BYE, f"{team.name} receives the bye", (team.id,))
                )
            else:
                drafts.append(_DraftPairing(a, b, 0.0))
        self._repair_by_swapping([d for d in drafts if d.team_b is not None])
        return drafts

    def _repair_by_swapping(self, drafts: List[_DraftPairing]) -> None:
        """Swap partners between two debates until no pair is excluded."""
        for draft in drafts:
            if self._exclusion_reason(draft.team_a, draft.team_b) is None:
                continue
            if not self._swap_partner(draft, drafts):
                raise self._infeasible(
                    f"Round robin pairing of round {self.round_number} cannot be repaired",
                    [draft.team_a, draft.team_b],
                    [d.team_a for d in drafts] + [d.team_b for d in drafts],
                )

    def _swap_partner(self, draft: _DraftPairing, drafts: List[_DraftPairing]) -> bool:
        a, b = draft.team_a, draft.team_b
        for other in drafts:
            if other is draft:
                continue
            c, d = other.team_a, other.team_b
            for x, y in ((c, d), (d, c)):
                if self._exclusion_reason(a, x) is None and self._exclusion_reason(b, y) is None:
                    draft.team_b, other.team_a, other.team_b = x, b, y
                    draft.flags.append(FLAG_SWAPPED)
                    other.flags.append(FLAG_SWAPPED)
                    return True
        return False

    # ----- sides, room ranks and counters -----

    def _assign_sides(self, draft: _DraftPairing) -> Tuple[Team, Team]:
        a, b = self._sort([draft.team_a, draft.team_b])
        method = self.settings.side_method
        if method == SideMethod.PREALLOCATED:
            pref_a = self._side_allocations.get(a.id)
            pref_b = self._side_allocations.get(b.id)
            if pref_a is not None and pref_a == pref_b:
                draft.flags.append(FLAG_SIDE_CLASH)
                self._warnings.append(
                    TabWarning(
                        WARN_SIDE_CLASH,
                        f"{a.name} and {b.name} are both allocated {pref_a}",
                        (a.id, b.id),
                    )
                )
            elif pref_a is not None:
                return (a, b) if pref_a == AFF else (b, a)
            elif pref_b is not None:
                return (b, a) if pref_b == AFF else (a, b)
        elif method == SideMethod.RANDOM:
            return (a, b) if self._rng.random() < 0.5 else (b, a)

        def need(team: Team) -> Tuple[int, int, int]:
            return (team.side_imbalance, team.aff_count, self._position[team.id])

        return (a, b) if need(a) <= need(b) else (b, a)

    def _finalize(self, drafts: List[_DraftPairing]) -> DrawResult:
        debates = [d for d in drafts if d.team_b is not None]
        byes = [d for d in drafts if d.team_b is None]
        sided = [(d, *self._assign_sides(d)) for d in debates]
        sided.sort(
            key=lambda item: (
                -item[0].bracket,
                -(item[1].speaks + item[2].speaks),
                min(self._position[item[1].id], self._position[item[2].id]),
            )
        )

        updated = {team.id: team for team in self._roster}
        pairings: List[Pairing] = []
        for rank, (draft, aff, neg) in enumerate(sided, start=1):
            flags = list(draft.flags)
            if {aff.id, neg.id} & self._pulled_up:
                flags.append(FLAG_PULLUP)
            if {aff.id, neg.id} & self._escalated:
                flags.append(FLAG_ESCALATED)
            pairings.append(
                Pairing(
                    id=f"R{self.round_number}-{rank}",
                    round_number=self.round_number,
                    aff_team_id=aff.id,
                    neg_team_id=neg.id,
                    status=STATUS_SCHEDULED,
                    bracket=draft.bracket,
                    room_rank=rank,
                    flags=flags,
                )
            )
            updated[aff.id].aff_count += 1
            updated[neg.id].neg_count += 1

        for draft in byes:
            rank = len(pairings) + 1
            team = draft.team_a
            pairings.append(
                Pairing(
                    id=f"R{self.round_number}-{rank}",
                    round_number=self.round_number,
                    aff_team_id=team.id,
                    neg_team_id=None,
                    status=STATUS_BYE,
                    bracket=draft.bracket,
                    room_rank=rank,
                    flags=list(draft.flags),
                )
            )
            updated[team.id].bye_count += 1

        for team_id in self._pulled_up:
            updated[team_id].pullup_count += 1

        return DrawResult(
            round_number=self.round_number,
            pairings=pairings,
            teams=self._roster,
            warnings=list(self._warnings),
        )


def generate_round(
    teams: Sequence[Team],
    history: HistoryInput,
    settings: TabulationSettings,
    round_number: int,
    conflicts: ConflictInput = (),
    side_allocations: Optional[Dict[str, Side]] = None,
) -> DrawResult:
    """Generate the draw for ``round_number``. See :class:`DrawGenerator`."""
    generator = DrawGenerator(
        teams, history, settings, round_number, conflicts, side_allocations
    )
    return generator.generate()
