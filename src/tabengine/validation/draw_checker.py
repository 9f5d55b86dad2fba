"""Invariant checks for generated draws."""

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

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Union

from tabengine.models.conflict import Conflict, ConflictSet
from tabengine.models.pairing import Pairing
from tabengine.models.pairing_history import PairingHistory, PairingHistoryEntry
from tabengine.models.settings import TabulationSettings
from tabengine.models.team import Team
from tabengine.utils import setup_logger

logger = setup_logger(__name__)


class CriterionStatus(Enum):
    """Status of a draw criterion."""

    COMPLIANT = "COMPLIANT"
    VIOLATION = "VIOLATION"
    NOT_APPLICABLE = "NOT_APPLICABLE"


class ViolationType(Enum):
    """Types of draw criterion violations."""

    ABSOLUTE = "ABSOLUTE"  # D1-D5: Must not violate
    QUALITY = "QUALITY"  # Q1-Q3: Should minimize


@dataclass
class CriterionResult:
    """Result of validating a single criterion."""

    criterion: str
    status: CriterionStatus
    violation_type: Optional[ViolationType] = None
    description: str = ""
    details: Dict[str, object] = field(default_factory=dict)

    @property
    def message(self) -> str:
        return self.description


@dataclass
class ValidationReport:
    """Complete validation report for a round's draw."""

    total_criteria: int
    compliant_count: int
    violations: List[CriterionResult]
    overall_status: CriterionStatus
    summary: str
    quality_warnings: List[CriterionResult] = field(default_factory=list)
    criteria_results: List[CriterionResult] = field(default_factory=list)

    @property
    def is_compliant(self) -> bool:
        return self.overall_status == CriterionStatus.COMPLIANT

    @property
    def compliance_percentage(self) -> float:
        """Calculate compliance percentage."""
        if self.total_criteria == 0:
            return 100.0
        return (self.compliant_count / self.total_criteria) * 100.0


def _compliant(criterion: str, description: str) -> CriterionResult:
    return CriterionResult(
        criterion=criterion, status=CriterionStatus.COMPLIANT, description=description
    )


def _violation(
    criterion: str, violation_type: ViolationType, description: str, **details: object
) -> CriterionResult:
    return CriterionResult(
        criterion=criterion,
        status=CriterionStatus.VIOLATION,
        violation_type=violation_type,
        description=description,
        details=dict(details),
    )


class DrawChecker:
    """Validates a round's pairings against the draw invariants.

    Absolute criteria:

    - D1: Every active team appears exactly once
    - D2: One bye for an odd number of active teams, none otherwise
    - D3: No pairing joins two teams with a hard conflict
    - D4: No pairing exceeds the allowed number of rematches
    - D5: No team is paired against itself

    Quality criteria:

    - Q1: Teams of one institution meet
    - Q2: Teams meet again within the allowed rematches
    - Q3: A team's aff/neg count drifts more than one apart
    """

    def check_d1_each_team_once(
        self, pairings: Sequence[Pairing], active_ids: Iterable[str]
    ) -> CriterionResult:
        """D1: Every active team appears exactly once."""
        seen = Counter(team_id for p in pairings for team_id in p.team_ids)
        active = set(active_ids)
        missing = sorted(active - set(seen))
        duplicated = sorted(t for t, n in seen.items() if n > 1)
        unknown = sorted(set(seen) - active)
        if missing or duplicated or unknown:
            return _violation(
                "D1",
                ViolationType.ABSOLUTE,
                "Active teams not drawn exactly once",
                missing=missing,
                duplicated=duplicated,
                unknown=unknown,
            )
        return _compliant("D1", "Every active team drawn once")

    def check_d2_bye_count(
        self, pairings: Sequence[Pairing], active_count: int
    ) -> CriterionResult:
        """D2: Exactly one bye when the active count is odd."""
        if active_count < 2:
            return CriterionResult(
                criterion="D2",
                status=CriterionStatus.NOT_APPLICABLE,
                description="Fewer than two active teams",
            )
        byes = [p.id for p in pairings if p.is_bye]
        expected = active_count % 2
        if len(byes) != expected:
            return _violation(
                "D2",
                ViolationType.ABSOLUTE,
                f"Expected {expected} byes, found {len(byes)}",
                byes=byes,
            )
        return _compliant("D2", f"{expected} bye(s) as expected")

    def check_d3_no_team_conflicts(
        self, pairings: Sequence[Pairing], conflicts: ConflictSet
    ) -> CriterionResult:
        """D3: No hard team-team conflict is drawn."""
        clashes = [
            p.id
            for p in pairings
            if len(p.team_ids) == 2 and conflicts.teams_conflict(*p.team_ids)
        ]
        if clashes:
            return _violation(
                "D3", ViolationType.ABSOLUTE, "Conflicted teams paired", pairings=clashes
            )
        return _compliant("D3", "No conflicted teams paired")

    def check_d4_rematches(
        self,
        pairings: Sequence[Pairing],
        history: PairingHistory,
        settings: TabulationSettings,
    ) -> CriterionResult:
        """D4: Rematch limit respected."""
        if not settings.avoid_rematches:
            return CriterionResult(
                criterion="D4",
                status=CriterionStatus.NOT_APPLICABLE,
                description="Rematches allowed",
            )
        repeats = [
            p.id
            for p in pairings
            if len(p.team_ids) == 2
            and history.meetings(*p.team_ids) > settings.max_repeat_opponents
        ]
        if repeats:
            return _violation(
                "D4", ViolationType.ABSOLUTE, "Disallowed rematches drawn", pairings=repeats
            )
        return _compliant("D4", "No disallowed rematches")

    def check_d5_no_self_pairing(self, pairings: Sequence[Pairing]) -> CriterionResult:
        """D5: Nobody debates themselves."""
        selfish = [
            p.id
            for p in pairings
            if p.aff_team_id is not None and p.aff_team_id == p.neg_team_id
        ]
        if selfish:
            return _violation(
                "D5", ViolationType.ABSOLUTE, "Team paired with itself", pairings=selfish
            )
        return _compliant("D5", "No self pairings")

    def check_quality_criteria(
        self,
        pairings: Sequence[Pairing],
        teams: Dict[str, Team],
        history: PairingHistory,
        settings: TabulationSettings,
    ) -> List[CriterionResult]:
        """Q1-Q3: soft draw quality."""
        debates = [p for p in pairings if len(p.team_ids) == 2]

        clashes = [
            p.id
            for p in debates
            if p.aff_team_id in teams
            and p.neg_team_id in teams
            and teams[p.aff_team_id].shares_institution(teams[p.neg_team_id])
        ]
        q1 = (
            _violation("Q1", ViolationType.QUALITY, "Institution clashes", pairings=clashes)
            if clashes and settings.institution_protect
            else _compliant("Q1", "No institution clashes")
        )

        rematches = [p.id for p in debates if history.have_met(*p.team_ids)]
        q2 = (
            _violation("Q2", ViolationType.QUALITY, "Allowed rematches drawn", pairings=rematches)
            if rematches
            else _compliant("Q2", "No rematches")
        )

        skewed = []
        for p in debates:
            aff, neg = teams.get(p.aff_team_id), teams.get(p.neg_team_id)
            if aff is not None and abs(aff.side_imbalance + 1) > 1:
                skewed.append(aff.id)
            if neg is not None and abs(neg.side_imbalance - 1) > 1:
                skewed.append(neg.id)
        q3 = (
            _violation("Q3", ViolationType.QUALITY, "Side imbalance above one", teams=skewed)
            if skewed
            else _compliant("Q3", "Sides balanced")
        )
        return [q1, q2, q3]

    def validate_round(
        self,
        pairings: Sequence[Pairing],
        teams: Sequence[Team],
        conflicts: Union[ConflictSet, Iterable[Conflict]],
        history: Union[PairingHistory, Iterable[PairingHistoryEntry]],
        settings: TabulationSettings,
    ) -> ValidationReport:
        """Validate a round's draw.

        Args:
            pairings: The draw to check
            teams: Roster as it was before the draw
            conflicts: Hard conflicts
            history: Meetings before the draw
            settings: Draw configuration

        Returns:
            Report whose overall status is a violation if any absolute
            criterion failed
        """
        if not isinstance(conflicts, ConflictSet):
            conflicts = ConflictSet(conflicts)
        if not isinstance(history, PairingHistory):
            history = PairingHistory.from_entries(history)
        active_ids = [t.id for t in teams if t.is_active]
        by_id = {t.id: t for t in teams}

        all_results = [
            self.check_d1_each_team_once(pairings, active_ids),
            self.check_d2_bye_count(pairings, len(active_ids)),
            self.check_d3_no_team_conflicts(pairings, conflicts),
            self.check_d4_rematches(pairings, history, settings),
            self.check_d5_no_self_pairing(pairings),
        ]
        all_results.extend(self.check_quality_criteria(pairings, by_id, history, settings))

        compliant_count = sum(1 for r in all_results if r.status == CriterionStatus.COMPLIANT)
        absolute_violations = [
            r
            for r in all_results
            if r.status == CriterionStatus.VIOLATION
            and r.violation_type == ViolationType.ABSOLUTE
        ]
        quality_warnings = [
            r
            for r in all_results
            if r.status == CriterionStatus.VIOLATION
            and r.violation_type == ViolationType.QUALITY
        ]
        overall_status = (
            CriterionStatus.VIOLATION if absolute_violations else CriterionStatus.COMPLIANT
        )
        if overall_status == CriterionStatus.COMPLIANT:
            summary = (
                f"Absolute criteria satisfied; {len(quality_warnings)} "
                "quality criteria flagged"
            )
        else:
            summary = (
                f"Absolute violations detected - {len(absolute_violations)} "
                f"criteria failed; {len(quality_warnings)} quality warnings"
            )
        logger.debug("Draw check complete: %s", summary)

        return ValidationReport(
            total_criteria=len(all_results),
            compliant_count=compliant_count,
            violations=absolute_violations,
            overall_status=overall_status,
            summary=summary,
            quality_warnings=quality_warnings,
            criteria_results=all_results,
        )
