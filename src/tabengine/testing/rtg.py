"""Random Tab Generator (RTG) for simulated tournaments."""

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

import json
import math
import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from tabengine.constants import SUPPORTED_BRACKET_SIZES
from tabengine.controllers.round_manager import RoundManager
from tabengine.elimination.break_generator import BreakCategory, calculate_liveness
from tabengine.models import (
    BallotResult,
    ExperienceTier,
    Judge,
    JudgeInstitutionConflict,
    TabulationSettings,
    Team,
)
from tabengine.type_hints import AFF, NEG
from tabengine.utils import setup_logger

logger = setup_logger(__name__)

INSTITUTION_NAMES = (
    "Northgate",
    "Riverside",
    "Hillcrest",
    "Lakeview",
    "Westbrook",
    "Oakmont",
    "Fairhaven",
    "Pinecrest",
)


class StrengthDistribution(Enum):
    """How team strengths are spread."""

    UNIFORM = "uniform"
    NORMAL = "normal"
    SKEWED = "skewed"


class ResultPattern(Enum):
    """Ballot generation patterns."""

    REALISTIC = "realistic"
    PREDICTABLE = "predictable"
    RANDOM = "random"


@dataclass
class RTGConfig:
    """Configuration for Random Tab Generator."""

    num_teams: int
    num_rounds: int
    num_judges: int = 0
    num_institutions: int = 4
    strength_distribution: StrengthDistribution = StrengthDistribution.NORMAL
    result_pattern: ResultPattern = ResultPattern.REALISTIC
    seed: Optional[int] = None
    break_size: int = 0
    judge_conflict_rate: float = 0.1
    settings: Optional[TabulationSettings] = None


class TeamFactory:
    """Factory for creating simulated teams."""

    def __init__(self, config: RTGConfig):
        self.config = config
        self.random = (
            random.Random(config.seed) if config.seed is not None else random.Random()
        )

    def _institutions(self) -> List[str]:
        count = max(1, min(self.config.num_institutions, len(INSTITUTION_NAMES)))
        return list(INSTITUTION_NAMES[:count])

    def create_teams(self) -> Tuple[List[Team], Dict[str, float]]:
        """Create teams and their hidden strengths."""
        institutions = self._institutions()
        teams = []
        strengths = {}
        for i in range(self.config.num_teams):
            institution = institutions[i % len(institutions)]
            team_id = f"T{i + 1:03d}"
            suffix = chr(65 + i // len(institutions) % 26)
            teams.append(
                Team(id=team_id, name=f"{institution} {suffix}", institution=institution)
            )
            strengths[team_id] = self._generate_strength()
        logger.info(
            "Created %s teams with %s strengths",
            len(teams),
            self.config.strength_distribution.value,
        )
        return teams, strengths

    def create_judges(self) -> Tuple[List[Judge], List[JudgeInstitutionConflict]]:
        """Create judges, some conflicted with an institution."""
        institutions = self._institutions()
        tiers = list(ExperienceTier)
        judges = []
        conflicts = []
        for i in range(self.config.num_judges):
            institution = self.random.choice(institutions)
            judge = Judge(
                id=f"J{i + 1:03d}",
                name=f"Judge {i + 1}",
                tier=self.random.choice(tiers),
                institution=institution,
            )
            judges.append(judge)
            if self.random.random() < self.config.judge_conflict_rate:
                conflicts.append(JudgeInstitutionConflict(judge.id, institution))
        return judges, conflicts

    def _generate_strength(self) -> float:
        if self.config.strength_distribution == StrengthDistribution.UNIFORM:
            return self.random.uniform(0.0, 100.0)
        if self.config.strength_distribution == StrengthDistribution.SKEWED:
            if self.random.random() < 0.7:
                return self.random.uniform(0.0, 50.0)
            return self.random.uniform(50.0, 100.0)
        return max(0.0, min(100.0, self.random.gauss(50.0, 15.0)))


class BallotSimulator:
    """Simulates ballots from team strengths."""

    def __init__(self, config: RTGConfig, strengths: Dict[str, float]):
        self.config = config
        self.strengths = strengths
        self.random = (
            random.Random(config.seed + 1) if config.seed is not None else random.Random()
        )

    def simulate(self, aff_id: str, neg_id: str) -> BallotResult:
        """Return a ballot for one debate; the winner never has lower speaks."""
        aff_strength = self.strengths.get(aff_id, 50.0)
        neg_strength = self.strengths.get(neg_id, 50.0)
        if self.config.result_pattern == ResultPattern.RANDOM:
            aff_wins = self.random.random() < 0.5
        elif self.config.result_pattern == ResultPattern.PREDICTABLE:
            aff_wins = aff_strength >= neg_strength
        else:
            expected = 1.0 / (1.0 + math.pow(10.0, (neg_strength - aff_strength) / 40.0))
            aff_wins = self.random.random() < expected

        aff_speaks = self._speaks(aff_strength)
        neg_speaks = self._speaks(neg_strength)
        if aff_wins and aff_speaks < neg_speaks:
            aff_speaks, neg_speaks = neg_speaks, aff_speaks
        elif not aff_wins and neg_speaks < aff_speaks:
            aff_speaks, neg_speaks = neg_speaks, aff_speaks
        return BallotResult(
            winner=AFF if aff_wins else NEG, aff_speaks=aff_speaks, neg_speaks=neg_speaks
        )

    def _speaks(self, strength: float) -> float:
        # Two speakers between 70 and 80, centred on the team's strength
        per_speaker = 70.0 + strength / 10.0 + self.random.uniform(-1.5, 1.5)
        return round(2 * max(70.0, min(80.0, per_speaker)), 1)


class RandomTabGenerator:
    """Runs a whole simulated tournament through :class:`RoundManager`."""

    def __init__(self, config: RTGConfig):
        self.config = config
        self.factory = TeamFactory(config)
        self.teams, self.strengths = self.factory.create_teams()
        self.judges, self.conflicts = self.factory.create_judges()
        self.simulator = BallotSimulator(config, self.strengths)
        settings = config.settings or TabulationSettings(seed=config.seed)
        self.manager = RoundManager(
            self.teams,
            judges=self.judges,
            conflicts=self.conflicts,
            settings=settings,
        )

    def generate_complete_tournament(self) -> Dict[str, Any]:
        """Draw, judge and ballot every round, then break if configured."""
        if self.config.num_teams < 2:
            raise ValueError("A tournament needs at least two teams")
        logger.info(
            "Generating tab: %s teams, %s rounds, %s judges",
            self.config.num_teams,
            self.config.num_rounds,
            self.config.num_judges,
        )
        rounds = []
        for round_number in range(1, self.config.num_rounds + 1):
            rounds.append(self._play_round(round_number))

        standings = self.manager.standings()
        data: Dict[str, Any] = {
            "teams": [t.to_dict() for t in self.manager.teams.values()],
            "judges": [j.to_dict() for j in self.judges],
            "rounds": rounds,
            "standings": [s.to_dict() for s in standings],
        }

        if self.config.break_size:
            data["elimination"] = self._play_elimination()
        return data

    def _play_round(self, round_number: int) -> Dict[str, Any]:
        draw = self.manager.generate_round(round_number)
        summary = None
        if self.judges:
            proposal, summary = self.manager.propose_judges(round_number)
            self.manager.commit_judges(round_number, proposal)
        for pairing in draw.pairings:
            if pairing.is_bye:
                continue
            ballot = self.simulator.simulate(pairing.aff_team_id, pairing.neg_team_id)
            self.manager.record_result(pairing.id, ballot)

        entry = self.manager.get_round(round_number).to_dict()
        entry["allocation"] = summary.to_dict() if summary else None
        if self.config.break_size:
            standings = self.manager.standings()
            remaining = self.config.num_rounds - round_number
            entry["liveness"] = {
                s.team_id: calculate_liveness(s, standings, self.config.break_size, remaining)
                for s in standings
            }
        return entry

    def _play_elimination(self) -> Dict[str, Any]:
        size = self.config.break_size
        if size not in SUPPORTED_BRACKET_SIZES or size > self.config.num_teams:
            logger.warning(
                "Skipping elimination: cannot break %s of %s teams", size, self.config.num_teams
            )
            return {}
        category = BreakCategory(id="open", name="Open", break_size=size)
        bracket = self.manager.build_elimination(size, category)
        for plan in bracket.round_plans:
            for pairing_id in plan.pairing_ids:
                pairing = self.manager.elimination.pairing(pairing_id)
                ballot = self.simulator.simulate(pairing.aff_team_id, pairing.neg_team_id)
                bracket = self.manager.record_elimination_result(pairing_id, ballot)
        return bracket.to_dict()

    def export_json_format(self, tournament_data: Dict[str, Any]) -> str:
        """Serialize generated tournament data as JSON."""
        return json.dumps(tournament_data, indent=2, default=str)
