"""TabulationSettings data class."""

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

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Type, TypeVar

from tabengine.constants import (
    DEFAULT_EXPERIENCE_WEIGHT,
    DEFAULT_HISTORY_PENALTY,
    DEFAULT_INSTITUTION_PENALTY,
    DEFAULT_JUDGE_INSTITUTION_PENALTY,
    DEFAULT_PANEL_WEIGHT,
    DEFAULT_SIDE_PENALTY,
    DEFAULT_SPECIALIZATION_WEIGHT,
    DEFAULT_TIEBREAK_ORDER,
    DEFAULT_TIME_PREFERENCE_WEIGHT,
    TIEBREAK_NAMES,
)
from tabengine.exceptions import InvalidConfigurationException


class DrawMethod(Enum):
    POWER_PAIRED = "power_paired"
    RANDOM = "random"
    ROUND_ROBIN = "round_robin"


class SideMethod(Enum):
    BALANCE = "balance"
    RANDOM = "random"
    PREALLOCATED = "preallocated"


class OddBracketPolicy(Enum):
    PULLUP_TOP = "pullup_top"
    PULLUP_BOTTOM = "pullup_bottom"
    INTERMEDIATE = "intermediate"
    INTERMEDIATE_BUBBLE = "intermediate_bubble"


class PullupRestriction(Enum):
    LEAST_TO_DATE = "least_to_date"
    NONE = "none"


class ByeSpeaksPolicy(Enum):
    AVERAGE = "average"
    ZERO = "zero"


E = TypeVar("E", bound=Enum)


def _coerce_enum(enum_cls: Type[E], value: Any, name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidConfigurationException(
            f"Invalid {name} {value!r}; expected one of: {allowed}"
        ) from None


_ENUM_FIELDS = {
    "draw_method": DrawMethod,
    "side_method": SideMethod,
    "odd_bracket": OddBracketPolicy,
    "pullup_restriction": PullupRestriction,
    "bye_speaks": ByeSpeaksPolicy,
}

_NON_NEGATIVE_FIELDS = (
    "max_repeat_opponents",
    "history_penalty",
    "institution_penalty",
    "side_penalty",
    "drop_high_low_speaks",
    "experience_weight",
    "time_preference_weight",
    "specialization_weight",
    "judge_institution_penalty",
    "panel_weight",
)


@dataclass(frozen=True)
class TabulationSettings:
    """Immutable configuration passed explicitly into every engine call.

    Attributes
    ----------
    draw_method : DrawMethod
        Power paired, random or round robin.
    side_method : SideMethod
        How aff/neg is decided within a pairing.
    odd_bracket : OddBracketPolicy
        How an odd-sized bracket is resolved.
    pullup_restriction : PullupRestriction
        Restrict pull-up candidates to teams pulled up least so far.
    avoid_rematches : bool
        Exclude pairs that have met more than ``max_repeat_opponents`` times.
    max_repeat_opponents : int
        Meetings allowed before a pair is excluded.
    institution_protect : bool
        Penalize pairs from the same institution.
    history_penalty, institution_penalty, side_penalty : float
        Draw cost weights.
    judges_per_room : int
        Slots per pairing; slot 0 is the chair.
    seed : int or None
        Seed for the random draw and side methods.
    tiebreak_order : tuple of str
        Standings keys in priority order.
    drop_high_low_speaks : int
        Rounds dropped from each end for adjusted speaks.
    bye_speaks : ByeSpeaksPolicy
        Speaks credited for a bye.
    experience_weight, time_preference_weight, specialization_weight,
    judge_institution_penalty, panel_weight : float
        Judge allocation cost weights.
    format_key : str or None
        Specialization tag the round's format calls for.
    """

    draw_method: DrawMethod = DrawMethod.POWER_PAIRED
    side_method: SideMethod = SideMethod.BALANCE
    odd_bracket: OddBracketPolicy = OddBracketPolicy.PULLUP_TOP
    pullup_restriction: PullupRestriction = PullupRestriction.LEAST_TO_DATE
    avoid_rematches: bool = True
    max_repeat_opponents: int = 0
    institution_protect: bool = True
    history_penalty: float = DEFAULT_HISTORY_PENALTY
    institution_penalty: float = DEFAULT_INSTITUTION_PENALTY
    side_penalty: float = DEFAULT_SIDE_PENALTY
    judges_per_room: int = 1
    seed: Optional[int] = None
    tiebreak_order: Tuple[str, ...] = field(
        default_factory=lambda: tuple(DEFAULT_TIEBREAK_ORDER)
    )
    drop_high_low_speaks: int = 1
    bye_speaks: ByeSpeaksPolicy = ByeSpeaksPolicy.AVERAGE
    experience_weight: float = DEFAULT_EXPERIENCE_WEIGHT
    time_preference_weight: float = DEFAULT_TIME_PREFERENCE_WEIGHT
    specialization_weight: float = DEFAULT_SPECIALIZATION_WEIGHT
    judge_institution_penalty: float = DEFAULT_JUDGE_INSTITUTION_PENALTY
    panel_weight: float = DEFAULT_PANEL_WEIGHT
    format_key: Optional[str] = None

    def __post_init__(self) -> None:
        # Frozen: coerced values go in through object.__setattr__
        for name, enum_cls in _ENUM_FIELDS.items():
            object.__setattr__(self, name, _coerce_enum(enum_cls, getattr(self, name), name))
        object.__setattr__(self, "tiebreak_order", tuple(self.tiebreak_order))

        for name in _NON_NEGATIVE_FIELDS:
            if getattr(self, name) < 0:
                raise InvalidConfigurationException(f"{name} must not be negative")
        if self.judges_per_room < 1:
            raise InvalidConfigurationException("judges_per_room must be at least 1")
        if not self.tiebreak_order:
            raise InvalidConfigurationException("tiebreak_order must not be empty")
        unknown = [key for key in self.tiebreak_order if key not in TIEBREAK_NAMES]
        if unknown:
            raise InvalidConfigurationException(f"Unknown tiebreak keys: {unknown}")
        if len(set(self.tiebreak_order)) != len(self.tiebreak_order):
            raise InvalidConfigurationException("tiebreak_order contains duplicates")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize settings to dictionary."""
        data: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, tuple):
                value = list(value)
            data[f.name] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TabulationSettings":
        """Deserialize settings from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
