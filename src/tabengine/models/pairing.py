"""Pairing and ballot result data classes."""

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
from datetime import datetime
from typing import Any, Dict, List, Optional

from tabengine.constants import FLAG_BYE, STATUS_BYE, STATUS_COMPLETED, STATUS_SCHEDULED
from tabengine.exceptions import InvalidPairingException
from tabengine.type_hints import AFF, NEG, Side
from tabengine.utils import parse_datetime


@dataclass(frozen=True)
class BallotResult:
    """Externally recorded outcome of one debate.

    Attributes
    ----------
    winner : str
        ``"aff"`` or ``"neg"``.
    aff_speaks, neg_speaks : float
        Team speaker totals for the debate.
    forfeit : bool
        The loser forfeited; the win counts but no speaks are credited.
    aff_speaker_scores, neg_speaker_scores : dict
        ``speaker_id -> points`` for the individual speakers of each side.
        Optional; only the speaker tab reads them.
    """

    winner: Side
    aff_speaks: float = 0.0
    neg_speaks: float = 0.0
    forfeit: bool = False
    aff_speaker_scores: Dict[str, float] = field(default_factory=dict)
    neg_speaker_scores: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.winner not in (AFF, NEG):
            raise InvalidPairingException(f"Ballot winner must be aff or neg, got {self.winner!r}")
        shared = set(self.aff_speaker_scores) & set(self.neg_speaker_scores)
        if shared:
            raise InvalidPairingException(
                f"Speakers scored on both sides: {', '.join(sorted(shared))}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "winner": self.winner,
            "aff_speaks": self.aff_speaks,
            "neg_speaks": self.neg_speaks,
            "forfeit": self.forfeit,
            "aff_speaker_scores": dict(self.aff_speaker_scores),
            "neg_speaker_scores": dict(self.neg_speaker_scores),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BallotResult":
        return cls(
            winner=data["winner"],
            aff_speaks=float(data.get("aff_speaks", 0.0)),
            neg_speaks=float(data.get("neg_speaks", 0.0)),
            forfeit=data.get("forfeit", False),
            aff_speaker_scores={
                str(k): float(v) for k, v in data.get("aff_speaker_scores", {}).items()
            },
            neg_speaker_scores={
                str(k): float(v) for k, v in data.get("neg_speaker_scores", {}).items()
            },
        )


@dataclass
class Pairing:
    """One debate (or bye) in a round.

    Attributes
    ----------
    id : str
        Unique identifier, ``R{round}-{room_rank}`` for generated draws.
    round_number : int
        Round the pairing belongs to.
    aff_team_id, neg_team_id : str or None
        Teams on each side. ``neg_team_id`` is None for a bye; both are None
        for an elimination placeholder not yet filled.
    judge_ids : list of str
        Chair first, then panellists. May be empty.
    bracket : float
        Win-count partition the pairing was drawn from; intermediate
        brackets use half values.
    room_rank : int
        1 is the most important room.
    flags : list of str
        Markers such as ``bye``, ``pullup``, ``escalated``, ``side_clash``.
    aff_seed, neg_seed : int or None
        Elimination seeds.
    advances_to : str or None
        Id of the elimination pairing the winner moves to.
    advances_to_slot : str or None
        ``"aff"`` or ``"neg"`` slot of ``advances_to``.
    result : BallotResult or None
        Recorded outcome.
    """

    id: str
    round_number: int
    aff_team_id: Optional[str]
    neg_team_id: Optional[str]
    judge_ids: List[str] = field(default_factory=list)
    room: Optional[str] = None
    scheduled_time: Optional[datetime] = None
    status: str = STATUS_SCHEDULED
    bracket: float = 0.0
    room_rank: int = 0
    flags: List[str] = field(default_factory=list)
    aff_seed: Optional[int] = None
    neg_seed: Optional[int] = None
    advances_to: Optional[str] = None
    advances_to_slot: Optional[Side] = None
    result: Optional[BallotResult] = None

    @property
    def is_bye(self) -> bool:
        return self.status == STATUS_BYE or FLAG_BYE in self.flags

    @property
    def team_ids(self) -> List[str]:
        """Ids of the teams present, aff first."""
        return [t for t in (self.aff_team_id, self.neg_team_id) if t is not None]

    @property
    def is_decided(self) -> bool:
        """Counts towards standings: completed with a ballot, or a bye."""
        if self.is_bye:
            return self.aff_team_id is not None
        return self.status == STATUS_COMPLETED and self.result is not None

    @property
    def winner_id(self) -> Optional[str]:
        if self.is_bye:
            return self.aff_team_id
        if self.result is None:
            return None
        return self.aff_team_id if self.result.winner == AFF else self.neg_team_id

    @property
    def loser_id(self) -> Optional[str]:
        if self.is_bye or self.result is None:
            return None
        return self.neg_team_id if self.result.winner == AFF else self.aff_team_id

    def side_of(self, team_id: str) -> Optional[Side]:
        if team_id == self.aff_team_id:
            return AFF
        if team_id == self.neg_team_id:
            return NEG
        return None

    def opponent_of(self, team_id: str) -> Optional[str]:
        if team_id == self.aff_team_id:
            return self.neg_team_id
        if team_id == self.neg_team_id:
            return self.aff_team_id
        return None

    def with_result(self, result: BallotResult) -> "Pairing":
        """Copy of this pairing completed with ``result``."""
        if self.is_bye:
            raise InvalidPairingException(f"Cannot record a result for bye {self.id}")
        return replace(self, result=result, status=STATUS_COMPLETED)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize pairing to dictionary."""
        return {
            "id": self.id,
            "round_number": self.round_number,
            "aff_team_id": self.aff_team_id,
            "neg_team_id": self.neg_team_id,
            "judge_ids": list(self.judge_ids),
            "room": self.room,
            "scheduled_time": (
                self.scheduled_time.isoformat() if self.scheduled_time else None
            ),
            "status": self.status,
            "bracket": self.bracket,
            "room_rank": self.room_rank,
            "flags": list(self.flags),
            "aff_seed": self.aff_seed,
            "neg_seed": self.neg_seed,
            "advances_to": self.advances_to,
            "advances_to_slot": self.advances_to_slot,
            "result": self.result.to_dict() if self.result else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pairing":
        """Deserialize pairing from dictionary."""
        result = data.get("result")
        return cls(
            id=str(data["id"]),
            round_number=int(data["round_number"]),
            aff_team_id=data.get("aff_team_id"),
            neg_team_id=data.get("neg_team_id"),
            judge_ids=list(data.get("judge_ids", [])),
            room=data.get("room"),
            scheduled_time=parse_datetime(data.get("scheduled_time")),
            status=data.get("status", STATUS_SCHEDULED),
            bracket=float(data.get("bracket", 0.0)),
            room_rank=int(data.get("room_rank", 0)),
            flags=list(data.get("flags", [])),
            aff_seed=data.get("aff_seed"),
            neg_seed=data.get("neg_seed"),
            advances_to=data.get("advances_to"),
            advances_to_slot=data.get("advances_to_slot"),
            result=BallotResult.from_dict(result) if result else None,
        )
