"""Data models for past pairings."""

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
from typing import Any, Dict, Iterable, Iterator, List, Set

from tabengine.type_hints import TeamPair


def canonical_pair(team_a_id: str, team_b_id: str) -> TeamPair:
    """Order-independent key for a team pair: (min, max)."""
    return (team_a_id, team_b_id) if team_a_id <= team_b_id else (team_b_id, team_a_id)


@dataclass(frozen=True)
class PairingHistoryEntry:
    """One past meeting between two teams."""

    team_a_id: str
    team_b_id: str
    round_number: int

    @property
    def key(self) -> TeamPair:
        return canonical_pair(self.team_a_id, self.team_b_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "team_a_id": self.team_a_id,
            "team_b_id": self.team_b_id,
            "round_number": self.round_number,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PairingHistoryEntry":
        return cls(
            team_a_id=str(data["team_a_id"]),
            team_b_id=str(data["team_b_id"]),
            round_number=int(data["round_number"]),
        )


@dataclass
class PairingHistory:
    """
    Append-only log of past pairings.

    Attributes
    ----------
    entries : list of PairingHistoryEntry
        Every meeting in the order it was recorded.

    Meetings are counted under the canonical (min, max) key so rematch
    lookups are O(1) regardless of which side each team was on.
    """

    entries: List[PairingHistoryEntry] = field(default_factory=list)
    _meetings: Counter = field(default_factory=Counter, init=False, repr=False)
    _opponents: Dict[str, List[str]] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        for entry in self.entries:
            self._index(entry)

    def _index(self, entry: PairingHistoryEntry) -> None:
        self._meetings[entry.key] += 1
        self._opponents.setdefault(entry.team_a_id, []).append(entry.team_b_id)
        self._opponents.setdefault(entry.team_b_id, []).append(entry.team_a_id)

    def add_pairing(self, team_a_id: str, team_b_id: str, round_number: int) -> None:
        """Record that two teams have been paired."""
        entry = PairingHistoryEntry(team_a_id, team_b_id, round_number)
        self.entries.append(entry)
        self._index(entry)

    def meetings(self, team_a_id: str, team_b_id: str) -> int:
        """How many times the two teams have met."""
        return self._meetings.get(canonical_pair(team_a_id, team_b_id), 0)

    def have_met(self, team_a_id: str, team_b_id: str) -> bool:
        """Check if two teams have previously met each other."""
        return self.meetings(team_a_id, team_b_id) > 0

    def opponents_of(self, team_id: str) -> List[str]:
        return list(self._opponents.get(team_id, []))

    def rounds(self) -> Set[int]:
        return {entry.round_number for entry in self.entries}

    def remove_round(self, round_number: int) -> None:
        """Drop every entry of one round (used when an unreleased round is undone)."""
        kept = [e for e in self.entries if e.round_number != round_number]
        self.entries = []
        self._meetings = Counter()
        self._opponents = {}
        for entry in kept:
            self.entries.append(entry)
            self._index(entry)

    def copy(self) -> "PairingHistory":
        return PairingHistory(entries=list(self.entries))

    def __iter__(self) -> Iterator[PairingHistoryEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize pairing history to dictionary."""
        return {"entries": [entry.to_dict() for entry in self.entries]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PairingHistory":
        """Deserialize pairing history from dictionary."""
        return cls(
            entries=[PairingHistoryEntry.from_dict(e) for e in data.get("entries", [])]
        )

    @classmethod
    def from_entries(cls, entries: Iterable[PairingHistoryEntry]) -> "PairingHistory":
        return cls(entries=list(entries))
