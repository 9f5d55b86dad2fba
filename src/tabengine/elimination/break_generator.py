"""Break qualification for elimination rounds."""

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

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from tabengine.exceptions import InvalidConfigurationException
from tabengine.models.standing import Standing
from tabengine.models.team import Team
from tabengine.type_hints import Liveness
from tabengine.utils import normalize_institution, setup_logger

logger = setup_logger(__name__)

# Only this many teams of one institution may break under the AIDA rules
AIDA_INSTITUTION_LIMIT = 3


class BreakRule(Enum):
    STANDARD = "standard"
    AIDA_1996 = "aida_1996"
    AIDA_2016 = "aida_2016"


class BreakRemark(Enum):
    CAPPED = "capped"
    INELIGIBLE = "ineligible"
    DIFFERENT_BREAK = "different_break"
    PROMOTED = "promoted"


@dataclass(frozen=True)
class BreakCategory:
    """A break such as "Open" or "Novice".

    Attributes
    ----------
    id : str
        Unique identifier.
    name : str
        Display name.
    break_size : int
        Teams that break.
    rule : BreakRule
        Qualification rule.
    institution_cap : int
        Maximum breaking teams per institution, 0 for no cap.
    is_general : bool
        The open break every team is eligible for by default.
    priority : int
        Lower values are processed first by :func:`generate_all_breaks`.
    """

    id: str
    name: str
    break_size: int
    rule: BreakRule = BreakRule.STANDARD
    institution_cap: int = 0
    is_general: bool = True
    priority: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.rule, BreakRule):
            try:
                object.__setattr__(self, "rule", BreakRule(str(self.rule).replace("-", "_")))
            except ValueError:
                raise InvalidConfigurationException(f"Unknown break rule {self.rule!r}") from None
        if self.break_size < 1:
            raise InvalidConfigurationException("break_size must be at least 1")
        if self.institution_cap < 0:
            raise InvalidConfigurationException("institution_cap must not be negative")


@dataclass
class BreakResult:
    """One team's outcome in a break category."""

    team_id: str
    institution: Optional[str]
    break_rank: int
    is_breaking: bool
    remark: Optional[BreakRemark]
    category_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "team_id": self.team_id,
            "institution": self.institution,
            "break_rank": self.break_rank,
            "is_breaking": self.is_breaking,
            "remark": self.remark.value if self.remark else None,
            "category_id": self.category_id,
        }


TeamsInput = Optional[Union[Sequence[Team], Mapping[str, Team]]]


class BreakGenerator:
    """Select the breaking teams of one category from the standings."""

    def __init__(
        self,
        standings: Sequence[Standing],
        category: BreakCategory,
        eligibility: Optional[Mapping[str, bool]] = None,
        other_breaks: Optional[Mapping[str, str]] = None,
        teams: TeamsInput = None,
    ) -> None:
        self.standings = sorted(standings, key=lambda s: (s.rank, s.team_id))
        self.category = category
        self.eligibility = dict(eligibility or {})
        self.other_breaks = dict(other_breaks or {})
        if teams is None:
            self._institutions: Dict[str, Optional[str]] = {}
        elif isinstance(teams, Mapping):
            self._institutions = {k: t.institution for k, t in teams.items()}
        else:
            self._institutions = {t.id: t.institution for t in teams}

    def generate(self) -> List[BreakResult]:
        rule = self.category.rule
        if rule == BreakRule.AIDA_2016:
            results = self._generate_aida_2016()
        elif rule == BreakRule.AIDA_1996:
            results = self._generate_ranked(institution_limit=AIDA_INSTITUTION_LIMIT)
        else:
            results = self._generate_ranked(institution_limit=None)
        logger.info(
            "Break %s: %d of %d places filled",
            self.category.id,
            sum(1 for r in results if r.is_breaking),
            self.category.break_size,
        )
        return results

    def _generate_ranked(self, institution_limit: Optional[int]) -> List[BreakResult]:
        """Walk the standings, breaking teams until the category is full.

        With ``institution_limit`` only that many teams of one institution,
        counted down the whole standings, are considered at all.
        """
        institution_rank: Dict[str, int] = {}
        team_institution_rank: Dict[str, int] = {}
        for standing in self.standings:
            key = normalize_institution(self._institutions.get(standing.team_id))
            if key is None:
                continue
            institution_rank[key] = institution_rank.get(key, 0) + 1
            team_institution_rank[standing.team_id] = institution_rank[key]

        cap = self.category.institution_cap
        breaking_by_institution: Dict[str, int] = {}
        results: List[BreakResult] = []
        breaking = 0
        for standing in self.standings:
            team_id = standing.team_id
            institution = self._institutions.get(team_id)
            key = normalize_institution(institution)
            already = breaking_by_institution.get(key, 0) if key is not None else 0
            other = self.other_breaks.get(team_id)

            remark: Optional[BreakRemark] = None
            is_breaking = False
            if not self.eligibility.get(team_id, True):
                remark = BreakRemark.INELIGIBLE
            elif other is not None and other != self.category.id:
                remark = BreakRemark.DIFFERENT_BREAK
            elif (
                institution_limit is not None
                and team_institution_rank.get(team_id, 0) > institution_limit
            ):
                remark = BreakRemark.CAPPED
            elif key is not None and cap > 0 and already >= cap:
                remark = BreakRemark.CAPPED
            elif breaking < self.category.break_size:
                is_breaking = True
                breaking += 1
                if key is not None:
                    breaking_by_institution[key] = already + 1

            results.append(
                BreakResult(
                    team_id=team_id,
                    institution=institution,
                    break_rank=breaking if is_breaking else 0,
                    is_breaking=is_breaking,
                    remark=remark,
                    category_id=self.category.id,
                )
            )
        return results

    def _generate_aida_2016(self) -> List[BreakResult]:
        """AIDA-1996, then capped teams are promoted into any vacant places."""
        results = self._generate_ranked(institution_limit=AIDA_INSTITUTION_LIMIT)
        breaking = sum(1 for r in results if r.is_breaking)
        for result in results:
            if breaking >= self.category.break_size:
                break
            if not result.is_breaking and result.remark == BreakRemark.CAPPED:
                breaking += 1
                result.is_breaking = True
                result.break_rank = breaking
                result.remark = BreakRemark.PROMOTED
        return results


def generate_break(
    standings: Sequence[Standing],
    category: BreakCategory,
    eligibility: Optional[Mapping[str, bool]] = None,
    other_breaks: Optional[Mapping[str, str]] = None,
    teams: TeamsInput = None,
) -> List[BreakResult]:
    """Break of a single category. See :class:`BreakGenerator`."""
    return BreakGenerator(standings, category, eligibility, other_breaks, teams).generate()


def generate_all_breaks(
    standings: Sequence[Standing],
    categories: Iterable[BreakCategory],
    eligibility_map: Optional[Mapping[str, Mapping[str, bool]]] = None,
    teams: TeamsInput = None,
) -> Dict[str, List[BreakResult]]:
    """Generate every category's break in priority order.

    A team breaking in a higher-priority category is marked
    ``different_break`` in the later ones.
    """
    eligibility_map = eligibility_map or {}
    assigned: Dict[str, str] = {}
    results: Dict[str, List[BreakResult]] = {}
    for category in sorted(categories, key=lambda c: (c.priority, c.id)):
        category_results = generate_break(
            standings,
            category,
            eligibility_map.get(category.id),
            assigned,
            teams,
        )
        results[category.id] = category_results
        for result in category_results:
            if result.is_breaking:
                assigned.setdefault(result.team_id, category.id)
    return results


def breaking_team_ids(results: Iterable[BreakResult]) -> List[str]:
    """Breaking teams in break-rank order, ready to seed a bracket."""
    breaking = [r for r in results if r.is_breaking]
    return [r.team_id for r in sorted(breaking, key=lambda r: r.break_rank)]


def calculate_liveness(
    standing: Standing,
    standings: Sequence[Standing],
    break_size: int,
    rounds_remaining: int,
) -> Liveness:
    """Whether a team can still break.

    ``dead`` when at least ``break_size`` teams already have more wins than
    the team can reach; ``safe`` when fewer than ``break_size`` other teams
    can still reach its current wins; otherwise ``live``.
    """
    best_possible = standing.wins + rounds_remaining
    others = [s for s in standings if s.team_id != standing.team_id]
    out_of_reach = sum(1 for s in others if s.wins > best_possible)
    if out_of_reach >= break_size:
        return "dead"
    threats = sum(1 for s in others if s.wins + rounds_remaining >= standing.wins)
    if threats < break_size:
        return "safe"
    return "live"
