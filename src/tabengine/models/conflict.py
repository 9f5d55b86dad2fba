"""Hard conflict records and their lookup index."""

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
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Set, Union

from tabengine.exceptions import UnknownConflictTypeException
from tabengine.utils import normalize_institution


@dataclass(frozen=True)
class TeamConflict:
    """These two teams must never be paired."""

    team_a_id: str
    team_b_id: str

    @property
    def key(self) -> FrozenSet[str]:
        return frozenset((self.team_a_id, self.team_b_id))


@dataclass(frozen=True)
class JudgeTeamConflict:
    """This judge must not adjudicate this team."""

    judge_id: str
    team_id: str


@dataclass(frozen=True)
class JudgeInstitutionConflict:
    """This judge must not adjudicate any team from this institution."""

    judge_id: str
    institution: str


Conflict = Union[TeamConflict, JudgeTeamConflict, JudgeInstitutionConflict]

_CONFLICT_KINDS = {
    "team": TeamConflict,
    "judge_team": JudgeTeamConflict,
    "judge_institution": JudgeInstitutionConflict,
}


def conflict_to_dict(conflict: Conflict) -> Dict[str, Any]:
    """Serialize a conflict with its variant tag."""
    if isinstance(conflict, TeamConflict):
        return {"kind": "team", "team_a_id": conflict.team_a_id, "team_b_id": conflict.team_b_id}
    if isinstance(conflict, JudgeTeamConflict):
        return {"kind": "judge_team", "judge_id": conflict.judge_id, "team_id": conflict.team_id}
    if isinstance(conflict, JudgeInstitutionConflict):
        return {
            "kind": "judge_institution",
            "judge_id": conflict.judge_id,
            "institution": conflict.institution,
        }
    raise UnknownConflictTypeException(f"Unknown conflict type: {type(conflict).__name__}")


def conflict_from_dict(data: Dict[str, Any]) -> Conflict:
    """Deserialize a tagged conflict record."""
    kind = data.get("kind")
    if kind not in _CONFLICT_KINDS:
        raise UnknownConflictTypeException(f"Unknown conflict kind: {kind!r}")
    fields = {k: v for k, v in data.items() if k != "kind"}
    return _CONFLICT_KINDS[kind](**fields)


class ConflictSet:
    """Index over hard conflicts with O(1) symmetric lookups.

    Team-team conflicts are consumed by the draw generator; judge-team and
    judge-institution conflicts by the judge allocator.
    """

    def __init__(self, conflicts: Iterable[Conflict] = ()) -> None:
        self._conflicts: List[Conflict] = []
        self._team_pairs: Set[FrozenSet[str]] = set()
        self._judge_teams: Dict[str, Set[str]] = {}
        self._judge_institutions: Dict[str, Set[str]] = {}
        for conflict in conflicts:
            self.add(conflict)

    def add(self, conflict: Conflict) -> None:
        if isinstance(conflict, TeamConflict):
            self._team_pairs.add(conflict.key)
        elif isinstance(conflict, JudgeTeamConflict):
            self._judge_teams.setdefault(conflict.judge_id, set()).add(conflict.team_id)
        elif isinstance(conflict, JudgeInstitutionConflict):
            key = normalize_institution(conflict.institution)
            if key is not None:
                self._judge_institutions.setdefault(conflict.judge_id, set()).add(key)
        else:
            raise UnknownConflictTypeException(
                f"Unknown conflict type: {type(conflict).__name__}"
            )
        self._conflicts.append(conflict)

    def __iter__(self):
        return iter(self._conflicts)

    def __len__(self) -> int:
        return len(self._conflicts)

    @property
    def has_institution_conflicts(self) -> bool:
        return bool(self._judge_institutions)

    def teams_conflict(self, team_a_id: str, team_b_id: str) -> bool:
        return frozenset((team_a_id, team_b_id)) in self._team_pairs

    def team_conflicts_of(self, team_id: str) -> List[str]:
        """Ids of the teams that ``team_id`` must never meet."""
        partners = []
        for pair in self._team_pairs:
            if team_id in pair and len(pair) == 2:
                partners.extend(t for t in pair if t != team_id)
        return sorted(partners)

    def judge_team_reason(
        self, judge_id: str, team_id: str, institution: Optional[str]
    ) -> Optional[str]:
        """Why ``judge_id`` may not judge the team, or None if allowed."""
        if team_id in self._judge_teams.get(judge_id, ()):
            return f"judge-team conflict with {team_id}"
        key = normalize_institution(institution)
        if key is not None and key in self._judge_institutions.get(judge_id, ()):
            return f"judge-institution conflict with {institution}"
        return None

    @classmethod
    def from_dicts(cls, records: Iterable[Dict[str, Any]]) -> "ConflictSet":
        return cls(conflict_from_dict(record) for record in records)
