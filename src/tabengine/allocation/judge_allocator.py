"""Judge allocation as a weighted bipartite assignment."""

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

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from tabengine.constants import (
    ROOM_PRIORITY_DEPTH,
    WARN_FORCED_SOFT_CONFLICT,
    WARN_INSUFFICIENT_JUDGES,
    WARN_PARTIAL_ASSIGNMENT,
)
from tabengine.exceptions import (
    InfeasibleConstraintException,
    InvalidPairingException,
    JudgeNotFoundException,
    PairingNotFoundException,
    PreconditionViolatedException,
)
from tabengine.models.conflict import Conflict, ConflictSet
from tabengine.models.diagnostics import TabWarning
from tabengine.models.judge import ExperienceTier, Judge
from tabengine.models.pairing import Pairing
from tabengine.models.settings import TabulationSettings
from tabengine.models.team import Team
from tabengine.pairing.munkres import DISALLOWED, is_disallowed, solve_assignment
from tabengine.type_hints import Overrides, SlotKey
from tabengine.utils import normalize_institution, setup_logger

logger = setup_logger(__name__)

ROLE_CHAIR = "chair"
ROLE_PANELLIST = "panellist"


@dataclass
class SlotAssignment:
    """One judge slot of a pairing and who fills it.

    Attributes
    ----------
    pairing_id : str
        Pairing the slot belongs to.
    slot : int
        0 is the chair.
    role : str
        ``"chair"`` or ``"panellist"``.
    judge_id : str or None
        None when the slot could not be filled.
    cost : float
        Soft cost of the placement.
    has_conflict : bool
        A soft penalty applied to this placement.
    conflict_reasons : list of str
        Human readable description of every soft penalty.
    """

    pairing_id: str
    slot: int
    role: str
    judge_id: Optional[str] = None
    cost: float = 0.0
    has_conflict: bool = False
    conflict_reasons: List[str] = field(default_factory=list)

    @property
    def key(self) -> SlotKey:
        return (self.pairing_id, self.slot)

    @property
    def is_filled(self) -> bool:
        return self.judge_id is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pairing_id": self.pairing_id,
            "slot": self.slot,
            "role": self.role,
            "judge_id": self.judge_id,
            "cost": self.cost,
            "has_conflict": self.has_conflict,
            "conflict_reasons": list(self.conflict_reasons),
        }


@dataclass
class AllocationSummary:
    """Totals reported alongside a proposal."""

    total_assigned: int = 0
    conflict_count: int = 0
    unassigned_pairing_ids: List[str] = field(default_factory=list)
    warnings: List[TabWarning] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.unassigned_pairing_ids)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_assigned": self.total_assigned,
            "conflict_count": self.conflict_count,
            "unassigned_pairing_ids": list(self.unassigned_pairing_ids),
            "warnings": [w.to_dict() for w in self.warnings],
            "is_partial": self.is_partial,
        }


@dataclass
class AssignmentProposal:
    """Uncommitted allocation for operator review.

    The allocator that produced it is kept so overrides can be checked
    against the same judges, conflicts and dates at commit time.
    """

    pairings: List[Pairing]
    slots: List[SlotAssignment]
    allocator: "JudgeAllocator" = field(repr=False, compare=False)

    def slot(self, pairing_id: str, slot: int) -> SlotAssignment:
        for assignment in self.slots:
            if assignment.pairing_id == pairing_id and assignment.slot == slot:
                return assignment
        raise PairingNotFoundException(f"No judge slot {slot} for pairing {pairing_id}")

    def judges_for(self, pairing_id: str) -> List[str]:
        """Assigned judge ids of a pairing, chair first."""
        return [
            s.judge_id
            for s in sorted(self.slots, key=lambda s: s.slot)
            if s.pairing_id == pairing_id and s.judge_id is not None
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {"slots": [s.to_dict() for s in self.slots]}


class JudgeAllocator:
    """
    Assign judges to the slots of a round's pairings.

    Parameters
    ----------
    pairings : sequence of Pairing
        The round's pairings; byes and unfilled placeholders get no slots.
    judges : sequence of Judge
        Judges who may be used.
    conflicts : ConflictSet or iterable of Conflict
        Judge-team and judge-institution entries are hard exclusions.
    settings : TabulationSettings
        Slot count and cost weights.
    teams : sequence or mapping of Team, optional
        Supplies team institutions for institution conflicts. Required to
        cover every judged team when any judge-institution conflict exists.
    round_date : date, optional
        Date used for pairings without a scheduled time.
    existing_load : mapping, optional
        ``judge_id -> rounds already judged`` on the round's day.
    """

    def __init__(
        self,
        pairings: Sequence[Pairing],
        judges: Sequence[Judge],
        conflicts: Union[ConflictSet, Iterable[Conflict]],
        settings: TabulationSettings,
        teams: Optional[Union[Sequence[Team], Mapping[str, Team]]] = None,
        round_date: Optional[date] = None,
        existing_load: Optional[Mapping[str, int]] = None,
    ) -> None:
        self.pairings = [replace(p) for p in pairings]
        self.judges = list(judges)
        self.settings = settings
        self.round_date = round_date
        if isinstance(conflicts, ConflictSet):
            self.conflicts = conflicts
        else:
            self.conflicts = ConflictSet(conflicts)
        if teams is None:
            self._teams: Dict[str, Team] = {}
        elif isinstance(teams, Mapping):
            self._teams = dict(teams)
        else:
            self._teams = {t.id: t for t in teams}
        self._load: Dict[str, int] = dict(existing_load or {})
        self._judges_by_id: Dict[str, Judge] = {j.id: j for j in self.judges}
        self._pairings_by_id: Dict[str, Pairing] = {p.id: p for p in self.pairings}
        self._require_team_institutions()

    def judgeable(self) -> List[Pairing]:
        """Pairings that need judges: both teams known and not a bye."""
        return [
            p for p in self.pairings if not p.is_bye and len(p.team_ids) == 2
        ]

    def _require_team_institutions(self) -> None:
        """Institution conflicts can only be enforced for teams we know."""
        if not self.conflicts.has_institution_conflicts:
            return
        unknown = sorted(
            {t for p in self.judgeable() for t in p.team_ids if t not in self._teams}
        )
        if unknown:
            raise PreconditionViolatedException(
                f"Judge-institution conflicts exist but teams {unknown} were not "
                "supplied, so their institutions are unknown"
            )

    def _institution_of(self, team_id: str) -> Optional[str]:
        team = self._teams.get(team_id)
        return team.institution if team is not None else None

    def _pairing_date(self, pairing: Pairing) -> Optional[date]:
        if pairing.scheduled_time is not None:
            return pairing.scheduled_time.date()
        return self.round_date

    def hard_reason(self, judge: Judge, pairing: Pairing) -> Optional[str]:
        """Why ``judge`` may never sit on ``pairing``, or None."""
        for team_id in pairing.team_ids:
            reason = self.conflicts.judge_team_reason(
                judge.id, team_id, self._institution_of(team_id)
            )
            if reason is not None:
                return reason
        day = self._pairing_date(pairing)
        if not judge.availability.is_available_on(day):
            return f"unavailable on {day.isoformat()}"
        if self._load.get(judge.id, 0) >= judge.max_rounds_per_day:
            return f"already judged {judge.max_rounds_per_day} rounds that day"
        return None

    def _room_weight(self, pairing: Pairing) -> float:
        rank = pairing.room_rank if pairing.room_rank > 0 else ROOM_PRIORITY_DEPTH
        rank = min(rank, ROOM_PRIORITY_DEPTH)
        return (ROOM_PRIORITY_DEPTH + 1 - rank) / ROOM_PRIORITY_DEPTH

    def soft_cost(self, judge: Judge, pairing: Pairing, slot: int) -> Tuple[float, List[str]]:
        """Soft cost of a placement and the penalties that make it a conflict."""
        s = self.settings
        reasons: List[str] = []
        slot_weight = 1.0 if slot == 0 else s.panel_weight
        cost = (
            s.experience_weight
            * (ExperienceTier.EXPERT - judge.tier)
            * self._room_weight(pairing)
            * slot_weight
        )

        if not judge.availability.prefers(pairing.scheduled_time):
            cost += s.time_preference_weight
            reasons.append("outside preferred time of day")
        if s.format_key and judge.specializations and s.format_key not in judge.specializations:
            cost += s.specialization_weight
            reasons.append(f"does not specialize in {s.format_key}")
        own = judge.institution_key
        if own is not None:
            for team_id in pairing.team_ids:
                if normalize_institution(self._institution_of(team_id)) == own:
                    cost += s.judge_institution_penalty
                    reasons.append(f"judges own institution {judge.institution}")
                    break
        return cost, reasons

    def allocate(self) -> Tuple[AssignmentProposal, AllocationSummary]:
        """Solve the allocation.

        Returns:
            The proposal for review and its summary. Slots that cannot be
            filled without a hard conflict are left empty and reported.
        """
        pairings = self.judgeable()
        per_room = self.settings.judges_per_room
        slots = [(p, s) for p in pairings for s in range(per_room)]
        n_judges = len(self.judges)
        n_slots = len(slots)
        summary = AllocationSummary()

        if not slots:
            logger.info("No pairings need judges")
            return AssignmentProposal(self.pairings, [], self), summary

        costs: List[List[float]] = []
        reasons: Dict[Tuple[int, int], List[str]] = {}
        worst = 0.0
        for i, judge in enumerate(self.judges):
            row = []
            for j, (pairing, slot) in enumerate(slots):
                if self.hard_reason(judge, pairing) is not None:
                    row.append(DISALLOWED)
                    continue
                cost, why = self.soft_cost(judge, pairing, slot)
                reasons[(i, j)] = why
                worst = max(worst, cost)
                row.append(cost)
            costs.append(row)

        # Leaving a slot empty costs more than any set of real placements,
        # and an empty chair more than every empty panel seat together
        unfilled_panel = (worst + 1.0) * (n_slots + 1)
        unfilled_chair = unfilled_panel * (n_slots + 1)
        matrix: List[List[float]] = []
        for row in costs:
            matrix.append(row + [0.0] * n_judges)
        for _ in range(n_slots):
            matrix.append(
                [unfilled_chair if slot == 0 else unfilled_panel for _, slot in slots]
                + [0.0] * n_judges
            )
        solution = solve_assignment(matrix)

        by_column: Dict[int, int] = {c: r for r, c in solution.assignment}
        assignments: List[SlotAssignment] = []
        for j, (pairing, slot) in enumerate(slots):
            row = by_column.get(j)
            entry = SlotAssignment(
                pairing_id=pairing.id,
                slot=slot,
                role=ROLE_CHAIR if slot == 0 else ROLE_PANELLIST,
            )
            if row is not None and row < n_judges and not is_disallowed(costs[row][j]):
                why = reasons.get((row, j), [])
                entry.judge_id = self.judges[row].id
                entry.cost = costs[row][j]
                entry.has_conflict = bool(why)
                entry.conflict_reasons = list(why)
            assignments.append(entry)

        proposal = AssignmentProposal(self.pairings, assignments, self)
        summary = self.summarize(proposal)
        logger.info(
            "Allocated %d of %d judge slots (%d soft conflicts)",
            summary.total_assigned,
            n_slots,
            summary.conflict_count,
        )
        return proposal, summary

    def summarize(self, proposal: AssignmentProposal) -> AllocationSummary:
        """Totals and warnings for a proposal."""
        filled = [s for s in proposal.slots if s.is_filled]
        conflicted = [s for s in filled if s.has_conflict]
        unassigned: List[str] = []
        for s in proposal.slots:
            if not s.is_filled and s.pairing_id not in unassigned:
                unassigned.append(s.pairing_id)

        warnings: List[TabWarning] = []
        needed = len(proposal.slots)
        if len(self.judges) < needed:
            warnings.append(
                TabWarning(
                    WARN_INSUFFICIENT_JUDGES,
                    f"Not enough judges: have {len(self.judges)}, need {needed}",
                )
            )
        if unassigned:
            logger.warning("Pairings left without a full panel: %s", unassigned)
            warnings.append(
                TabWarning(
                    WARN_PARTIAL_ASSIGNMENT,
                    f"{len(unassigned)} pairings have unfilled judge slots",
                    tuple(unassigned),
                )
            )
        if conflicted:
            warnings.append(
                TabWarning(
                    WARN_FORCED_SOFT_CONFLICT,
                    f"{len(conflicted)} assignments carry a soft conflict",
                    tuple(s.judge_id for s in conflicted if s.judge_id is not None),
                )
            )
        return AllocationSummary(
            total_assigned=len(filled),
            conflict_count=len(conflicted),
            unassigned_pairing_ids=unassigned,
            warnings=warnings,
        )

    def commit(
        self, proposal: AssignmentProposal, overrides: Optional[Overrides] = None
    ) -> List[Pairing]:
        """Apply operator overrides to ``proposal`` and return judged pairings.

        Overrides are checked one by one; nothing is re-solved.

        Raises:
            InfeasibleConstraintException: An override breaks a hard exclusion
            PreconditionViolatedException: An override double-books a judge
        """
        chosen: Dict[SlotKey, Optional[str]] = {s.key: s.judge_id for s in proposal.slots}
        for key, judge_id in (overrides or {}).items():
            pairing_id, slot = key
            pairing = self._pairings_by_id.get(pairing_id)
            if pairing is None:
                raise PairingNotFoundException(f"Unknown pairing {pairing_id}")
            if key not in chosen:
                raise InvalidPairingException(
                    f"Pairing {pairing_id} has no judge slot {slot}"
                )
            if judge_id is not None:
                judge = self._judges_by_id.get(judge_id)
                if judge is None:
                    raise JudgeNotFoundException(f"Unknown judge {judge_id}")
                reason = self.hard_reason(judge, pairing)
                if reason is not None:
                    raise InfeasibleConstraintException(
                        f"Judge {judge_id} cannot sit on {pairing_id}: {reason}",
                        teams=pairing.team_ids,
                        judges=[judge_id],
                        rule="judge_conflict",
                    )
            chosen[key] = judge_id

        seen: Dict[str, SlotKey] = {}
        for key in sorted(chosen):
            judge_id = chosen[key]
            if judge_id is None:
                continue
            if judge_id in seen:
                raise PreconditionViolatedException(
                    f"Judge {judge_id} is booked on both {seen[judge_id]} and {key}"
                )
            seen[judge_id] = key

        committed = []
        for pairing in proposal.pairings:
            keys = sorted(k for k in chosen if k[0] == pairing.id)
            judge_ids = [chosen[k] for k in keys if chosen[k] is not None]
            committed.append(replace(pairing, judge_ids=judge_ids))
        logger.info("Committed judges for %d pairings", len(committed))
        return committed


def allocate_judges(
    pairings: Sequence[Pairing],
    judges: Sequence[Judge],
    conflicts: Union[ConflictSet, Iterable[Conflict]],
    settings: TabulationSettings,
    teams: Optional[Union[Sequence[Team], Mapping[str, Team]]] = None,
    round_date: Optional[date] = None,
    existing_load: Optional[Mapping[str, int]] = None,
) -> Tuple[AssignmentProposal, AllocationSummary]:
    """Propose a judge allocation. See :class:`JudgeAllocator`."""
    allocator = JudgeAllocator(
        pairings, judges, conflicts, settings, teams, round_date, existing_load
    )
    return allocator.allocate()


def commit_assignments(
    proposal: AssignmentProposal, overrides: Optional[Overrides] = None
) -> List[Pairing]:
    """Commit a reviewed proposal with optional per-slot overrides."""
    return proposal.allocator.commit(proposal, overrides)
