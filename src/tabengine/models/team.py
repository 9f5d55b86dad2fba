"""Team data class."""

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
from typing import Any, Dict, Optional

from tabengine.utils import normalize_institution


@dataclass
class Team:
    """A competing team in the tournament.

    Withdrawal is a flag, never a removal, so historical pairings that
    reference the team stay valid.

    Attributes
    ----------
    id : str
        Unique identifier.
    name : str
        Display name.
    institution : str or None
        School or club the team represents.
    wins, losses : int
        Cumulative record.
    speaks : float
        Cumulative speaker-score total.
    aff_count, neg_count : int
        Rounds debated on each side.
    is_active : bool
        False once the team has withdrawn.
    pullup_count : int
        Rounds in which the team was moved into a higher bracket.
    bye_count : int
        Byes received so far.
    """

    id: str
    name: str
    institution: Optional[str] = None
    wins: int = 0
    losses: int = 0
    speaks: float = 0.0
    aff_count: int = 0
    neg_count: int = 0
    is_active: bool = True
    pullup_count: int = 0
    bye_count: int = 0

    @property
    def side_imbalance(self) -> int:
        """Positive when the team has been aff more often than neg."""
        return self.aff_count - self.neg_count

    @property
    def institution_key(self) -> Optional[str]:
        return normalize_institution(self.institution)

    def shares_institution(self, other: "Team") -> bool:
        """Whether both teams belong to the same (known) institution."""
        key = self.institution_key
        return key is not None and key == other.institution_key

    def to_dict(self) -> Dict[str, Any]:
        """Serialize team to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "institution": self.institution,
            "wins": self.wins,
            "losses": self.losses,
            "speaks": self.speaks,
            "aff_count": self.aff_count,
            "neg_count": self.neg_count,
            "is_active": self.is_active,
            "pullup_count": self.pullup_count,
            "bye_count": self.bye_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Team":
        """Deserialize team from dictionary."""
        return cls(
            id=str(data["id"]),
            name=data.get("name", str(data["id"])),
            institution=data.get("institution"),
            wins=int(data.get("wins", 0)),
            losses=int(data.get("losses", 0)),
            speaks=float(data.get("speaks", 0.0)),
            aff_count=int(data.get("aff_count", 0)),
            neg_count=int(data.get("neg_count", 0)),
            is_active=data.get("is_active", True),
            pullup_count=int(data.get("pullup_count", 0)),
            bye_count=int(data.get("bye_count", 0)),
        )
