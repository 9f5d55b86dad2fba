"""Exceptions for use in Tab Engine"""

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

from typing import Any, Dict, Optional, Sequence, Tuple

# ========== Base Application Exception ==========


class TabEngineException(Exception):
    """Base exception for all Tab Engine errors.

    All custom exceptions in the engine inherit from this class.
    This enables catching all engine-specific errors with a single except clause.
    """

    pass


# ========== Constraint Exceptions ==========


class InfeasibleConstraintException(TabEngineException):
    """Raised when hard exclusions cannot be satisfied after every fallback.

    Attributes:
        teams: Ids of the teams that could not be placed
        judges: Ids of the judges involved, if any
        rule: Short name of the blocking rule (e.g. "team_conflict")
        blocking: Pairs of ids whose exclusion blocked the solve
    """

    def __init__(
        self,
        message: str,
        teams: Sequence[str] = (),
        judges: Sequence[str] = (),
        rule: Optional[str] = None,
        blocking: Sequence[Tuple[str, str]] = (),
    ) -> None:
        super().__init__(message)
        self.teams: Tuple[str, ...] = tuple(teams)
        self.judges: Tuple[str, ...] = tuple(judges)
        self.rule = rule
        self.blocking: Tuple[Tuple[str, str], ...] = tuple(blocking)

    def to_dict(self) -> Dict[str, Any]:
        """Structured diagnostic for the calling layer."""
        return {
            "message": str(self),
            "teams": list(self.teams),
            "judges": list(self.judges),
            "rule": self.rule,
            "blocking": [list(pair) for pair in self.blocking],
        }


class PreconditionViolatedException(TabEngineException):
    """Raised when an operation's precondition no longer holds.

    Examples are regenerating a round that already has pairings or building
    a bracket with fewer seeds than its size.
    """

    pass


# ========== Pairing Exceptions ==========


class PairingException(TabEngineException):
    """Base exception for pairing-related errors."""

    pass


class InvalidPairingException(PairingException):
    """Raised when a generated or supplied pairing breaks a draw invariant."""

    pass


class PairingNotFoundException(PairingException):
    """Raised when a requested pairing does not exist."""

    pass


# ========== Roster Exceptions ==========


class RosterException(TabEngineException):
    """Base exception for roster-related errors."""

    pass


class TeamNotFoundException(RosterException):
    """Raised when a requested team cannot be found."""

    pass


class JudgeNotFoundException(RosterException):
    """Raised when a requested judge cannot be found."""

    pass


class UnknownConflictTypeException(RosterException):
    """Raised when a conflict record is not one of the known variants."""

    pass


# ========== Configuration Exceptions ==========


class ConfigurationException(TabEngineException):
    """Base exception for configuration errors."""

    pass


class InvalidConfigurationException(ConfigurationException):
    """Raised when configuration data is invalid."""

    pass
