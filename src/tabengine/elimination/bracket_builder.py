"""Seeding and expansion of single-elimination brackets."""

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
from typing import Any, Dict, List, Optional, Sequence

from tabengine.constants import (
    ELIMINATION_ROUND_NAMES,
    STATUS_SCHEDULED,
    SUPPORTED_BRACKET_SIZES,
    WARN_EXTRA_SEEDS,
)
from tabengine.exceptions import (
    InvalidConfigurationException,
    InvalidPairingException,
    PairingNotFoundException,
    PreconditionViolatedException,
)
from tabengine.models.diagnostics import TabWarning
from tabengine.models.pairing import Pairing
from tabengine.type_hints import AFF, NEG
from tabengine.utils import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class RoundPlan:
    """One elimination round.

    Attributes
    ----------
    round_number : int
        Round number as stored on the pairings.
    name : str
        Display name such as ``"Quarterfinals"``.
    pairing_ids : list of str
        Matches of the round in bracket order.
    teams_remaining : int
        Teams still alive when the round starts.
    """

    round_number: int
    name: str
    pairing_ids: List[str]
    teams_remaining: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round_number": self.round_number,
            "name": self.name,
            "pairing_ids": list(self.pairing_ids),
            "teams_remaining": self.teams_remaining,
        }


@dataclass
class BracketResult:
    """A fully expanded bracket. Only the first round has teams."""

    pairings: List[Pairing] = field(default_factory=list)
    round_plans: List[RoundPlan] = field(default_factory=list)
    warnings: List[TabWarning] = field(default_factory=list)
    seeds: Dict[int, str] = field(default_factory=dict)

    @property
    def round_names(self) -> List[str]:
        return [plan.name for plan in self.round_plans]

    def pairing(self, pairing_id: str) -> Pairing:
        for pairing in self.pairings:
            if pairing.id == pairing_id:
                return pairing
        raise PairingNotFoundException(f"No bracket pairing {pairing_id}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pairings": [p.to_dict() for p in self.pairings],
            "round_plans": [r.to_dict() for r in self.round_plans],
            "warnings": [w.to_dict() for w in self.warnings],
            "seeds": {str(k): v for k, v in self.seeds.items()},
        }


def seeding_order(size: int) -> List[int]:
    """Bracket-line order of seeds, e.g. 8 -> [1, 8, 4, 5, 2, 7, 3, 6].

    Built by repeatedly replacing every seed ``s`` with ``s, 2m + 1 - s``
    where ``m`` is the current length, so seed k meets seed size + 1 - k in
    the first round and the top seeds stay apart until the late rounds.
    """
    if size < 2 or size & (size - 1):
        raise InvalidConfigurationException(f"Bracket size must be a power of two, got {size}")
    order = [1, 2]
    while len(order) < size:
        m = len(order)
        order = [x for s in order for x in (s, 2 * m + 1 - s)]
    return order


def round_name(rounds_left: int) -> str:
    """Name of a round by how many rounds remain including it."""
    try:
        return ELIMINATION_ROUND_NAMES[rounds_left]
    except KeyError:
        return f"Round of {2 ** rounds_left}"


def _pairing_id(round_index: int, match: int) -> str:
    return f"E{round_index}-{match}"


def build_bracket(
    seeded_team_ids: Sequence[str], size: int, round_offset: int = 0
) -> BracketResult:
    """Seed ``size`` teams into a single-elimination bracket.

    Args:
        seeded_team_ids: Team ids, best seed first
        size: Bracket size, one of 4, 8, 16 or 32
        round_offset: Added to the round number stored on each pairing

    Raises:
        InvalidConfigurationException: Unsupported size
        PreconditionViolatedException: Fewer seeds than the bracket holds
    """
    if size not in SUPPORTED_BRACKET_SIZES:
        raise InvalidConfigurationException(
            f"Unsupported bracket size {size}; expected one of {SUPPORTED_BRACKET_SIZES}"
        )
    if len(seeded_team_ids) < size:
        raise PreconditionViolatedException(
            f"Bracket of {size} needs {size} seeds, got {len(seeded_team_ids)}"
        )
    if len(set(seeded_team_ids)) != len(seeded_team_ids):
        raise PreconditionViolatedException("Seeded team ids must be unique")

    result = BracketResult()
    if len(seeded_team_ids) > size:
        extra = tuple(seeded_team_ids[size:])
        result.warnings.append(
            TabWarning(
                WARN_EXTRA_SEEDS,
                f"{len(extra)} seeds beyond the bracket size of {size} were ignored",
                extra,
            )
        )
        logger.warning("Ignoring %d extra seeds", len(extra))
    result.seeds = {seed: team_id for seed, team_id in enumerate(seeded_team_ids[:size], start=1)}

    total_rounds = size.bit_length() - 1
    order = seeding_order(size)
    matches_in_round = size // 2
    for r in range(1, total_rounds + 1):
        ids = []
        for k in range(matches_in_round):
            pairing = Pairing(
                id=_pairing_id(r, k + 1),
                round_number=round_offset + r,
                aff_team_id=None,
                neg_team_id=None,
                status=STATUS_SCHEDULED,
                room_rank=k + 1,
            )
            if r == 1:
                high, low = sorted((order[2 * k], order[2 * k + 1]))
                pairing.aff_team_id = result.seeds[high]
                pairing.neg_team_id = result.seeds[low]
                pairing.aff_seed = high
                pairing.neg_seed = low
            if r < total_rounds:
                pairing.advances_to = _pairing_id(r + 1, k // 2 + 1)
                pairing.advances_to_slot = AFF if k % 2 == 0 else NEG
            result.pairings.append(pairing)
            ids.append(pairing.id)
        result.round_plans.append(
            RoundPlan(
                round_number=round_offset + r,
                name=round_name(total_rounds - r + 1),
                pairing_ids=ids,
                teams_remaining=matches_in_round * 2,
            )
        )
        matches_in_round //= 2

    logger.info("Built %d-team bracket: %s", size, ", ".join(result.round_names))
    return result


def advance_winner(pairings: Sequence[Pairing], pairing_id: str) -> List[Pairing]:
    """Copy of ``pairings`` with the winner of ``pairing_id`` moved into its next match.

    Raises:
        InvalidPairingException: The pairing has no recorded winner
    """
    by_id: Dict[str, Pairing] = {p.id: p for p in pairings}
    if pairing_id not in by_id:
        raise PairingNotFoundException(f"No bracket pairing {pairing_id}")
    source = by_id[pairing_id]
    winner = source.winner_id
    if winner is None:
        raise InvalidPairingException(f"Pairing {pairing_id} has no winner yet")
    if source.advances_to is None:
        return list(pairings)

    seed: Optional[int] = source.aff_seed if winner == source.aff_team_id else source.neg_seed
    target = by_id.get(source.advances_to)
    if target is None:
        raise PairingNotFoundException(f"No bracket pairing {source.advances_to}")
    if source.advances_to_slot == AFF:
        updated = replace(target, aff_team_id=winner, aff_seed=seed)
    else:
        updated = replace(target, neg_team_id=winner, neg_seed=seed)
    return [updated if p.id == target.id else p for p in pairings]
