"""Judge and availability data classes."""

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
from datetime import date, datetime
from enum import Enum, IntEnum
from typing import Any, Dict, FrozenSet, Optional

from tabengine.constants import AFTERNOON_HOURS, EVENING_HOURS, MORNING_HOURS
from tabengine.utils import normalize_institution, parse_date


class ExperienceTier(IntEnum):
    """Ordinal judging experience; comparisons follow the ordering."""

    NOVICE = 1
    INTERMEDIATE = 2
    ADVANCED = 3
    EXPERT = 4

    @classmethod
    def parse(cls, value: Any) -> "ExperienceTier":
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        return cls[str(value).strip().upper()]


class TimeOfDay(Enum):
    """Time-of-day buckets used for judge preferences."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"

    @classmethod
    def for_time(cls, when: datetime) -> Optional["TimeOfDay"]:
        """Bucket a scheduled time, or None outside the judging day."""
        hour = when.hour
        if MORNING_HOURS[0] <= hour < MORNING_HOURS[1]:
            return cls.MORNING
        if AFTERNOON_HOURS[0] <= hour < AFTERNOON_HOURS[1]:
            return cls.AFTERNOON
        if EVENING_HOURS[0] <= hour < EVENING_HOURS[1]:
            return cls.EVENING
        return None


@dataclass(frozen=True)
class JudgeAvailability:
    """Per-tournament availability of a judge.

    An empty ``dates`` set means the judge is available on any date; an empty
    ``time_preferences`` set means the judge has no preference.
    """

    dates: FrozenSet[date] = frozenset()
    time_preferences: FrozenSet[TimeOfDay] = frozenset()

    def is_available_on(self, day: Optional[date]) -> bool:
        if day is None or not self.dates:
            return True
        return day in self.dates

    def prefers(self, when: Optional[datetime]) -> bool:
        """False only when a preference exists and ``when`` falls outside it."""
        if when is None or not self.time_preferences:
            return True
        return TimeOfDay.for_time(when) in self.time_preferences

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dates": sorted(d.isoformat() for d in self.dates),
            "time_preferences": sorted(t.value for t in self.time_preferences),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JudgeAvailability":
        return cls(
            dates=frozenset(parse_date(d) for d in data.get("dates", [])),
            time_preferences=frozenset(
                TimeOfDay(t) for t in data.get("time_preferences", [])
            ),
        )


@dataclass
class Judge:
    """An adjudicator available to the tournament.

    Attributes
    ----------
    id : str
        Unique identifier.
    name : str
        Display name.
    tier : ExperienceTier
        Experience level.
    specializations : frozenset of str
        Format tags the judge specializes in. Empty means any format.
    availability : JudgeAvailability
        Dates and time-of-day preferences.
    is_alumni : bool
        Former competitor of the circuit.
    max_rounds_per_day : int
        Daily workload cap.
    institution : str or None
        Judge's own institution; judging it is a soft conflict.
    """

    id: str
    name: str
    tier: ExperienceTier = ExperienceTier.NOVICE
    specializations: FrozenSet[str] = frozenset()
    availability: JudgeAvailability = field(default_factory=JudgeAvailability)
    is_alumni: bool = False
    max_rounds_per_day: int = 6
    institution: Optional[str] = None

    @property
    def institution_key(self) -> Optional[str]:
        return normalize_institution(self.institution)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize judge to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "tier": self.tier.name.lower(),
            "specializations": sorted(self.specializations),
            "availability": self.availability.to_dict(),
            "is_alumni": self.is_alumni,
            "max_rounds_per_day": self.max_rounds_per_day,
            "institution": self.institution,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Judge":
        """Deserialize judge from dictionary."""
        return cls(
            id=str(data["id"]),
            name=data.get("name", str(data["id"])),
            tier=ExperienceTier.parse(data.get("tier", "novice")),
            specializations=frozenset(data.get("specializations", [])),
            availability=JudgeAvailability.from_dict(data.get("availability", {})),
            is_alumni=data.get("is_alumni", False),
            max_rounds_per_day=int(data.get("max_rounds_per_day", 6)),
            institution=data.get("institution"),
        )
