"""Data models for tournament rounds."""

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
from typing import Any, Dict, List, Optional

from tabengine.models.diagnostics import TabWarning
from tabengine.models.pairing import Pairing


@dataclass
class RoundData:
    """Container for all data related to a single preliminary round.

    Attributes
    ----------
    round_number : int
        Round number (1-indexed).
    pairings : list of Pairing
        The round's draw, byes included.
    warnings : list of TabWarning
        Warnings raised while drawing and allocating.
    judges_committed : bool
        Indicates whether a judge allocation has been committed.
    """

    round_number: int
    pairings: List[Pairing] = field(default_factory=list)
    warnings: List[TabWarning] = field(default_factory=list)
    judges_committed: bool = False

    @property
    def is_completed(self) -> bool:
        """Every debate of the round has a recorded result."""
        return bool(self.pairings) and all(p.is_decided for p in self.pairings)

    @property
    def has_results(self) -> bool:
        return any(p.result is not None for p in self.pairings)

    def find(self, pairing_id: str) -> Optional[Pairing]:
        for pairing in self.pairings:
            if pairing.id == pairing_id:
                return pairing
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize round data to dictionary."""
        return {
            "round_number": self.round_number,
            "pairings": [p.to_dict() for p in self.pairings],
            "warnings": [w.to_dict() for w in self.warnings],
            "judges_committed": self.judges_committed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoundData":
        """Deserialize round data from dictionary."""
        return cls(
            round_number=data["round_number"],
            pairings=[Pairing.from_dict(p) for p in data.get("pairings", [])],
            warnings=[TabWarning.from_dict(w) for w in data.get("warnings", [])],
            judges_committed=data.get("judges_committed", False),
        )
