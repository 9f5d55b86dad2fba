"""Round management for tournaments."""

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

import threading
from collections import Counter
from dataclasses import replace
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from tabengine.allocation.judge_allocator import (
    AllocationSummary,
    AssignmentProposal,
    allocate_judges,
    commit_assignments,
)
from tabengine.elimination.bracket_builder import BracketResult, advance_winner, build_bracket
from tabengine.elimination.break_generator import (
    BreakCategory,
    breaking_team_ids,
    generate_break,
)
from tabengine.exceptions import (
    InvalidPairingException,
    PairingNotFoundException,
    PreconditionViolatedException,
    TeamNotFoundException,
)
from tabengine.models import (
    BallotResult,
    Conflict,
    ConflictSet,
    Judge,
    Pairing,
    PairingHistory,
    RoundData,
    Standing,
    TabulationSettings,
    Team,
)
from tabengine.pairing.draw_generator import DrawResult, generate_round
from tabengine.standings.standings_calculator import StandingsCalculator, compute_standings
from tabengine.type_hints import Overrides, Side
from tabengine.utils import setup_logger
from tabengine.validation.draw_checker import DrawChecker

logger = setup_logger(__name__)


class RoundManager:
    """Manages round progression for one tournament.

    This class is responsible for:
    - Drawing preliminary rounds and keeping the pairing history
    - Proposing and committing judge allocations
    - Recording ballots and refreshing team records
    - Building the elimination bracket from the break

    Operations on the same round are serialized by a per-round lock; the
    engine functions it calls are pure, so separate rounds never contend.
    """

    def __init__(
        self,
        teams: Iterable[Team],
        judges: Iterable[Judge] = (),
        conflicts: Union[ConflictSet, Iterable[Conflict]] = (),
        settings: Optional[TabulationSettings] = None,
        pairing_history: Optional[PairingHistory] = None,
        round_dates: Optional[Mapping[int, date]] = None,
    ):
        """Initialize the round manager.

        Args:
            teams: Roster of teams
            judges: Judges available for allocation
            conflicts: Hard conflicts between teams and judges
            settings: Tabulation settings, defaults when omitted
            pairing_history: Meetings recorded before this manager took over
            round_dates: Calendar date of each round, for judge day limits
        """
        self.teams: Dict[str, Team] = {t.id: t for t in teams}
        self.judges: List[Judge] = list(judges)
        self.conflicts = conflicts if isinstance(conflicts, ConflictSet) else ConflictSet(conflicts)
        self.settings = settings or TabulationSettings()
        self.pairing_history = pairing_history or PairingHistory()
        self.round_dates: Dict[int, date] = dict(round_dates or {})
        self.rounds: Dict[int, RoundData] = {}
        self.elimination: Optional[BracketResult] = None
        self.checker = DrawChecker()
        self._locks: Dict[int, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._state_lock = threading.RLock()
        # Draw counters of each team as they were before a round was drawn
        self._snapshots: Dict[int, Dict[str, Team]] = {}

    def _round_lock(self, round_number: int) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(round_number, threading.Lock())

    @property
    def current_round_number(self) -> int:
        """Highest drawn round number, or 0 before the first draw."""
        return max(self.rounds, default=0)

    @property
    def completed_rounds_count(self) -> int:
        return sum(1 for r in self.rounds.values() if r.is_completed)

    def get_round(self, round_number: int) -> Optional[RoundData]:
        return self.rounds.get(round_number)

    def _require_round(self, round_number: int) -> RoundData:
        round_data = self.rounds.get(round_number)
        if round_data is None:
            raise PreconditionViolatedException(f"Round {round_number} has not been drawn")
        return round_data

    def all_pairings(self) -> List[Pairing]:
        """Every preliminary pairing in round order."""
        return [p for n in sorted(self.rounds) for p in self.rounds[n].pairings]

    def find_pairing(self, pairing_id: str) -> Tuple[RoundData, Pairing]:
        for round_data in self.rounds.values():
            pairing = round_data.find(pairing_id)
            if pairing is not None:
                return round_data, pairing
        raise PairingNotFoundException(f"No pairing with id {pairing_id}")

    def generate_round(
        self, round_number: int, side_allocations: Optional[Dict[str, Side]] = None
    ) -> DrawResult:
        """Draw a preliminary round and record it.

        Args:
            round_number: Round to draw
            side_allocations: Preallocated sides, when the settings ask for them

        Returns:
            The draw result; an empty result is not recorded

        Raises:
            PreconditionViolatedException: The round was already drawn
            InvalidPairingException: The draw failed its invariant checks
            InfeasibleConstraintException: No valid draw exists
        """
        with self._round_lock(round_number):
            if round_number in self.rounds:
                raise PreconditionViolatedException(f"Round {round_number} already drawn")

            with self._state_lock:
                teams_before = {tid: replace(t) for tid, t in self.teams.items()}
                history = self.pairing_history.copy()

            logger.info(f"Generating round {round_number} for {len(teams_before)} teams")
            result = generate_round(
                list(teams_before.values()),
                history,
                self.settings,
                round_number,
                self.conflicts,
                side_allocations,
            )
            if result.is_empty:
                logger.info(f"Round {round_number} has no active teams to draw")
                return result

            report = self.checker.validate_round(
                result.pairings,
                list(teams_before.values()),
                self.conflicts,
                history,
                self.settings,
            )
            if not report.is_compliant:
                raise InvalidPairingException(
                    f"Round {round_number} draw failed validation: {report.summary}"
                )

            with self._state_lock:
                self._snapshots[round_number] = teams_before
                for team in result.teams:
                    current = self.teams.get(team.id)
                    if current is None:
                        continue
                    self.teams[team.id] = replace(
                        current,
                        aff_count=team.aff_count,
                        neg_count=team.neg_count,
                        pullup_count=team.pullup_count,
                        bye_count=team.bye_count,
                    )
                for pairing in result.pairings:
                    if not pairing.is_bye and len(pairing.team_ids) == 2:
                        self.pairing_history.add_pairing(
                            pairing.aff_team_id, pairing.neg_team_id, round_number
                        )
                self.rounds[round_number] = RoundData(
                    round_number=round_number,
                    pairings=list(result.pairings),
                    warnings=list(result.warnings),
                )
                self._refresh_team_records()

            logger.info(
                f"Round {round_number} drawn: {len(result.pairings)} pairings, "
                f"{len(report.quality_warnings)} quality warnings"
            )
            return result

    def _existing_load(self, round_number: int) -> Dict[str, int]:
        """Rounds each judge already sits on that day, other rounds only."""
        day = self.round_dates.get(round_number)
        if day is None:
            return {}
        load: Counter = Counter()
        for n, round_data in self.rounds.items():
            if n == round_number or self.round_dates.get(n) != day:
                continue
            if not round_data.judges_committed:
                continue
            for pairing in round_data.pairings:
                load.update(pairing.judge_ids)
        return dict(load)

    def propose_judges(self, round_number: int) -> Tuple[AssignmentProposal, AllocationSummary]:
        """Propose a judge allocation for a drawn round.

        Args:
            round_number: Round to allocate

        Returns:
            The proposal and its summary
        """
        with self._round_lock(round_number):
            round_data = self._require_round(round_number)
            with self._state_lock:
                load = self._existing_load(round_number)
                teams = dict(self.teams)
            proposal, summary = allocate_judges(
                round_data.pairings,
                self.judges,
                self.conflicts,
                self.settings,
                teams=teams,
                round_date=self.round_dates.get(round_number),
                existing_load=load,
            )
            if summary.is_partial:
                logger.warning(
                    f"Round {round_number}: {len(summary.unassigned_pairing_ids)} "
                    "pairings without a full panel"
                )
            return proposal, summary

    def commit_judges(
        self,
        round_number: int,
        proposal: AssignmentProposal,
        overrides: Optional[Overrides] = None,
    ) -> List[Pairing]:
        """Commit a reviewed judge proposal, applying overrides.

        Args:
            round_number: Round the proposal belongs to
            proposal: Result of :meth:`propose_judges`
            overrides: ``(pairing_id, slot) -> judge_id or None``

        Returns:
            The round's pairings with judges set
        """
        with self._round_lock(round_number):
            round_data = self._require_round(round_number)
            own_ids = {p.id for p in round_data.pairings}
            foreign = [p.id for p in proposal.pairings if p.id not in own_ids]
            if foreign:
                raise PreconditionViolatedException(
                    f"Proposal includes pairings outside round {round_number}: {foreign}"
                )
            committed = {p.id: p for p in commit_assignments(proposal, overrides)}
            with self._state_lock:
                round_data.pairings = [
                    replace(p, judge_ids=list(committed[p.id].judge_ids))
                    if p.id in committed
                    else p
                    for p in round_data.pairings
                ]
                round_data.judges_committed = True
            logger.info(f"Judges committed for round {round_number}")
            return list(round_data.pairings)

    def record_result(self, pairing_id: str, result: BallotResult) -> Pairing:
        """Record a ballot for a preliminary pairing.

        Args:
            pairing_id: Pairing the ballot belongs to
            result: The ballot

        Returns:
            The completed pairing
        """
        round_data, _ = self.find_pairing(pairing_id)
        with self._round_lock(round_data.round_number):
            with self._state_lock:
                pairing = round_data.find(pairing_id)
                completed = pairing.with_result(result)
                round_data.pairings = [
                    completed if p.id == pairing_id else p for p in round_data.pairings
                ]
                self._refresh_team_records()
            logger.debug(f"Recorded {result.winner} win for pairing {pairing_id}")
            return completed

    def _refresh_team_records(self) -> None:
        """Recompute wins, losses and speaks of every team from the ballots."""
        records = StandingsCalculator(self.settings).build_records(self.all_pairings())
        for team_id, team in self.teams.items():
            record = records.get(team_id)
            if record is None:
                self.teams[team_id] = replace(team, wins=0, losses=0, speaks=0.0)
            else:
                self.teams[team_id] = replace(
                    team,
                    wins=record.wins,
                    losses=record.losses,
                    speaks=record.total_speaks,
                )

    def withdraw_team(self, team_id: str) -> None:
        """Mark a team inactive; its past pairings remain."""
        with self._state_lock:
            team = self.teams.get(team_id)
            if team is None:
                raise TeamNotFoundException(f"No team with id {team_id}")
            self.teams[team_id] = replace(team, is_active=False)
        logger.info(f"Team {team_id} withdrawn")

    def standings(self) -> List[Standing]:
        """Current standings of the active teams."""
        with self._state_lock:
            teams = list(self.teams.values())
            pairings = self.all_pairings()
        return compute_standings(teams, pairings, self.settings)

    def build_elimination(
        self, size: int, category: Optional[BreakCategory] = None
    ) -> BracketResult:
        """Seed the elimination bracket from the current standings.

        Args:
            size: Bracket size
            category: Break category; without one the top of the standings seeds

        Returns:
            The bracket
        """
        standings = self.standings()
        if category is not None:
            results = generate_break(standings, category, teams=self.teams)
            seeds: Sequence[str] = breaking_team_ids(results)
        else:
            seeds = [s.team_id for s in standings]
        bracket = build_bracket(seeds, size, round_offset=self.current_round_number)
        with self._state_lock:
            self.elimination = bracket
        return bracket

    def record_elimination_result(self, pairing_id: str, result: BallotResult) -> BracketResult:
        """Record an elimination ballot and advance the winner."""
        with self._state_lock:
            if self.elimination is None:
                raise PreconditionViolatedException("No elimination bracket has been built")
            pairing = self.elimination.pairing(pairing_id)
            if len(pairing.team_ids) != 2:
                raise InvalidPairingException(f"Pairing {pairing_id} is not filled yet")
            completed = pairing.with_result(result)
            pairings = [completed if p.id == pairing_id else p for p in self.elimination.pairings]
            self.elimination.pairings = advance_winner(pairings, pairing_id)
            logger.info(f"{completed.winner_id} advances from {pairing_id}")
            return self.elimination

    def undo_round(self, round_number: int) -> RoundData:
        """Remove the latest round, provided no ballots have been entered.

        Args:
            round_number: Round to remove; must be the latest

        Returns:
            The removed round
        """
        with self._round_lock(round_number):
            with self._state_lock:
                round_data = self._require_round(round_number)
                if round_number != self.current_round_number:
                    raise PreconditionViolatedException(
                        f"Round {round_number} is not the latest round"
                    )
                if round_data.has_results:
                    raise PreconditionViolatedException(
                        f"Round {round_number} already has results"
                    )
                snapshot = self._snapshots.pop(round_number, {})
                for team_id, before in snapshot.items():
                    team = self.teams.get(team_id)
                    if team is not None:
                        self.teams[team_id] = replace(
                            team,
                            aff_count=before.aff_count,
                            neg_count=before.neg_count,
                            pullup_count=before.pullup_count,
                            bye_count=before.bye_count,
                        )
                self.pairing_history.remove_round(round_number)
                del self.rounds[round_number]
                self._refresh_team_records()
            logger.info(f"Round {round_number} undone")
            return round_data
