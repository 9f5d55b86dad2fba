"""Command line entry point for tab simulations."""

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

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from tabengine.exceptions import TabEngineException
from tabengine.utils import configure_logging, setup_logger

logger = setup_logger(__name__)


# ANSI color codes for terminal output
class Colors:
    OKGREEN = "\033[92m"
    WARNING = "\033[93m"
    FAIL = "\033[91m"
    ENDC = "\033[0m"
    BOLD = "\033[1m"


def run_simulate_command(args: argparse.Namespace) -> int:
    """Run the simulate (RTG) command."""
    from tabengine.models import TabulationSettings
    from tabengine.testing.rtg import (
        RandomTabGenerator,
        ResultPattern,
        RTGConfig,
        StrengthDistribution,
    )

    print(f"\n{Colors.BOLD}Simulating tournament...{Colors.ENDC}")

    config = RTGConfig(
        num_teams=args.teams,
        num_rounds=args.rounds,
        num_judges=args.judges,
        strength_distribution=StrengthDistribution(args.distribution),
        result_pattern=ResultPattern(args.pattern),
        seed=args.seed,
        break_size=args.break_size,
        settings=TabulationSettings(
            draw_method=args.draw_method,
            odd_bracket=args.odd_bracket,
            judges_per_room=args.judges_per_room,
            seed=args.seed,
        ),
    )
    rtg = RandomTabGenerator(config)
    tab = rtg.generate_complete_tournament()

    if args.output:
        output_path = Path(args.output)
        output_path.write_text(rtg.export_json_format(tab), encoding="utf-8")
        print(f"{Colors.OKGREEN}Tab saved to: {output_path}{Colors.ENDC}")

    print(f"\n{Colors.BOLD}Tournament Simulated:{Colors.ENDC}")
    print(f"  Teams: {len(tab['teams'])}")
    print(f"  Rounds: {len(tab['rounds'])}")
    warnings = sum(len(r["warnings"]) for r in tab["rounds"])
    if warnings:
        print(f"  {Colors.WARNING}Draw warnings: {warnings}{Colors.ENDC}")
    for standing in tab["standings"][:8]:
        print(
            f"  {standing['rank']:>3}. {standing['team_id']}  "
            f"{standing['wins']}-{standing['losses']}  {standing['total_speaks']:.1f}"
        )
    elimination = tab.get("elimination")
    if elimination:
        final = elimination["pairings"][-1]
        result = final.get("result") or {}
        winner_key = "aff_team_id" if result.get("winner") == "aff" else "neg_team_id"
        winner = final[winner_key]
        print(f"  Champion: {Colors.OKGREEN}{winner}{Colors.ENDC}")
    return 0


def run_validate_command(args: argparse.Namespace) -> int:
    """Re-check the invariants of every round in a saved tab."""
    from tabengine.models import Pairing, PairingHistory, TabulationSettings, Team
    from tabengine.validation.draw_checker import DrawChecker

    data = json.loads(Path(args.file).read_text(encoding="utf-8"))
    teams = [Team.from_dict(t) for t in data.get("teams", [])]
    settings = TabulationSettings.from_dict(data.get("settings", {}))
    checker = DrawChecker()
    history = PairingHistory()
    failures = 0
    for entry in data.get("rounds", []):
        round_number = entry["round_number"]
        pairings = [Pairing.from_dict(p) for p in entry.get("pairings", [])]
        if args.round is None or args.round == round_number:
            report = checker.validate_round(pairings, teams, [], history, settings)
            colour = Colors.OKGREEN if report.is_compliant else Colors.FAIL
            print(f"  Round {round_number}: {colour}{report.summary}{Colors.ENDC}")
            if not report.is_compliant:
                failures += 1
                for violation in report.violations:
                    print(f"    {violation.criterion}: {violation.description}")
        for pairing in pairings:
            if len(pairing.team_ids) == 2 and not pairing.is_bye:
                history.add_pairing(pairing.aff_team_id, pairing.neg_team_id, round_number)
    return 1 if failures else 0


def create_main_parser() -> argparse.ArgumentParser:
    """Create main argument parser."""
    parser = argparse.ArgumentParser(
        prog="tab-engine-sim",
        description="Simulation and validation CLI for Tab Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Simulate a tournament with a quarterfinal break
  tab-engine-sim simulate --teams 24 --rounds 5 --judges 14 --break-size 8

  # Validate a saved tab
  tab-engine-sim validate --file tab.json
        """,
    )
    parser.add_argument(
        "--log-level", default="WARNING", help="Logging level (default: WARNING)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    sim_parser = subparsers.add_parser("simulate", help="Simulate a tournament")
    sim_parser.add_argument("--teams", type=int, default=16)
    sim_parser.add_argument("--rounds", type=int, default=5)
    sim_parser.add_argument("--judges", type=int, default=0)
    sim_parser.add_argument("--judges-per-room", type=int, default=1)
    sim_parser.add_argument(
        "--distribution", choices=["uniform", "normal", "skewed"], default="normal"
    )
    sim_parser.add_argument(
        "--pattern", choices=["realistic", "predictable", "random"], default="realistic"
    )
    sim_parser.add_argument(
        "--draw-method",
        choices=["power_paired", "random", "round_robin"],
        default="power_paired",
    )
    sim_parser.add_argument(
        "--odd-bracket",
        choices=["pullup_top", "pullup_bottom", "intermediate", "intermediate_bubble"],
        default="pullup_top",
    )
    sim_parser.add_argument("--seed", type=int)
    sim_parser.add_argument("--break-size", type=int, default=0)
    sim_parser.add_argument("--output")
    sim_parser.set_defaults(func=run_simulate_command)

    val_parser = subparsers.add_parser("validate", help="Validate a saved tab")
    val_parser.add_argument("--file", required=True)
    val_parser.add_argument("--round", type=int)
    val_parser.set_defaults(func=run_validate_command)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for tab-engine-sim CLI."""
    parser = create_main_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    if not getattr(args, "func", None):
        parser.print_help()
        return 1
    try:
        return args.func(args)
    except TabEngineException as e:
        logger.error(f"Tab engine error: {e}")
        print(f"{Colors.FAIL}Error: {e}{Colors.ENDC}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
