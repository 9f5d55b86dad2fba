"""Structured warnings attached to successful results."""

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
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class TabWarning:
    """A degraded-but-successful outcome the operator should see.

    Attributes:
        code: One of the ``WARN_*`` constants
        message: Human readable description
        subjects: Ids of the teams, judges or pairings concerned
    """

    code: str
    message: str
    subjects: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "subjects": list(self.subjects)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TabWarning":
        return cls(
            code=data["code"],
            message=data.get("message", ""),
            subjects=tuple(data.get("subjects", ())),
        )
