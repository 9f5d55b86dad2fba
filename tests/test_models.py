from datetime import date, datetime

import pytest

from tabengine.exceptions import (
    InvalidConfigurationException,
    InvalidPairingException,
    UnknownConflictTypeException,
)
from tabengine.models import (
    BallotResult,
    ConflictSet,
    DrawMethod,
    ExperienceTier,
    Judge,
    JudgeAvailability,
    JudgeInstitutionConflict,
    OddBracketPolicy,
    Pairing,
    PairingHistory,
    RoundData,
    TabulationSettings,
    Team,
    TeamConflict,
    TimeOfDay,
    conflict_from_dict,
    conflict_to_dict,
)


def test_team_side_imbalance_and_institution_matching():
    a = Team(id="A", name="Alpha", institution="  North   Gate ", aff_count=3, neg_count=1)
    b = Team(id="B", name="Beta", institution="north gate")
    c = Team(id="C", name="Gamma")

    assert a.side_imbalance == 2
    assert a.shares_institution(b)
    assert not a.shares_institution(c)
    assert not c.shares_institution(Team(id="D", name="Delta"))


def test_team_serialization_keeps_counters():
    team = Team(
        id="A", name="Alpha", wins=2, losses=1, speaks=301.5, pullup_count=1, bye_count=1
    )
    restored = Team.from_dict(team.to_dict())
    assert restored == team


def test_pairing_history_counts_meetings_regardless_of_side():
    history = PairingHistory()
    history.add_pairing("B", "A", 1)
    history.add_pairing("A", "B", 3)
    history.add_pairing("A", "C", 2)

    assert history.meetings("A", "B") == 2
    assert history.meetings("B", "A") == 2
    assert history.have_met("C", "A")
    assert not history.have_met("B", "C")
    assert sorted(history.opponents_of("A")) == ["B", "B", "C"]
    assert history.rounds() == {1, 2, 3}

    history.remove_round(3)
    assert history.meetings("A", "B") == 1
    assert len(history) == 2


def test_ballot_result_rejects_unknown_winner():
    with pytest.raises(InvalidPairingException):
        BallotResult(winner="draw")


def test_ballot_result_speaker_scores():
    ballot = BallotResult(
        winner="aff",
        aff_speaks=151,
        neg_speaks=149,
        aff_speaker_scores={"a1": 76, "a2": 75},
        neg_speaker_scores={"n1": 74.5, "n2": 74.5},
    )
    restored = BallotResult.from_dict(ballot.to_dict())
    assert restored == ballot
    assert BallotResult.from_dict({"winner": "neg"}).aff_speaker_scores == {}

    with pytest.raises(InvalidPairingException):
        BallotResult(winner="aff", aff_speaker_scores={"x": 75}, neg_speaker_scores={"x": 74})


def test_pairing_result_helpers():
    pairing = Pairing(id="R1-1", round_number=1, aff_team_id="A", neg_team_id="B")
    assert not pairing.is_decided
    assert pairing.winner_id is None

    done = pairing.with_result(BallotResult(winner="neg", aff_speaks=150, neg_speaks=152))
    assert done.is_decided
    assert done.winner_id == "B"
    assert done.loser_id == "A"
    assert done.side_of("A") == "aff"
    assert done.opponent_of("B") == "A"
    assert pairing.result is None

    restored = Pairing.from_dict(done.to_dict())
    assert restored.result == done.result


def test_bye_cannot_take_a_result():
    bye = Pairing(id="R1-3", round_number=1, aff_team_id="E", neg_team_id=None, status="bye")
    assert bye.is_bye
    assert bye.is_decided
    assert bye.winner_id == "E"
    with pytest.raises(InvalidPairingException):
        bye.with_result(BallotResult(winner="aff"))


def test_pairing_parses_scheduled_time():
    data = Pairing(id="R1-1", round_number=1, aff_team_id="A", neg_team_id="B").to_dict()
    data["scheduled_time"] = "2025-03-01T09:30:00"
    pairing = Pairing.from_dict(data)
    assert pairing.scheduled_time == datetime(2025, 3, 1, 9, 30)


def test_settings_coerce_strings_and_validate():
    settings = TabulationSettings(draw_method="Random", odd_bracket="intermediate_bubble")
    assert settings.draw_method is DrawMethod.RANDOM
    assert settings.odd_bracket is OddBracketPolicy.INTERMEDIATE_BUBBLE

    with pytest.raises(InvalidConfigurationException):
        TabulationSettings(draw_method="swiss")
    with pytest.raises(InvalidConfigurationException):
        TabulationSettings(max_repeat_opponents=-1)
    with pytest.raises(InvalidConfigurationException):
        TabulationSettings(judges_per_room=0)
    with pytest.raises(InvalidConfigurationException):
        TabulationSettings(tiebreak_order=("wins", "wins"))
    with pytest.raises(InvalidConfigurationException):
        TabulationSettings(tiebreak_order=("wins", "coin_toss"))


def test_settings_from_dict_ignores_unknown_keys():
    settings = TabulationSettings.from_dict(
        {
            "side_method": "random",
            "seed": 4,
            "tiebreak_order": ["wins", "speaks"],
            "venue": "x",
        }
    )
    assert settings.seed == 4
    assert settings.tiebreak_order == ("wins", "speaks")
    assert TabulationSettings.from_dict(settings.to_dict()) == settings


def test_conflict_set_lookups():
    conflicts = ConflictSet(
        [TeamConflict("A", "B"), JudgeInstitutionConflict("J1", "North Gate")]
    )
    assert conflicts.teams_conflict("B", "A")
    assert not conflicts.teams_conflict("A", "C")
    assert conflicts.team_conflicts_of("A") == ["B"]
    assert conflicts.judge_team_reason("J1", "C", "north gate ") is not None
    assert conflicts.judge_team_reason("J2", "C", "north gate") is None


def test_conflict_records_are_tagged():
    conflict = JudgeInstitutionConflict("J1", "Riverside")
    assert conflict_from_dict(conflict_to_dict(conflict)) == conflict
    with pytest.raises(UnknownConflictTypeException):
        conflict_from_dict({"kind": "venue", "room": "101"})


def test_judge_availability():
    judge = Judge(
        id="J1",
        name="Judge",
        tier=ExperienceTier.parse("advanced"),
        availability=JudgeAvailability(
            dates=frozenset({date(2025, 3, 1)}),
            time_preferences=frozenset({TimeOfDay.MORNING}),
        ),
    )
    assert judge.tier > ExperienceTier.INTERMEDIATE
    assert judge.availability.is_available_on(date(2025, 3, 1))
    assert not judge.availability.is_available_on(date(2025, 3, 2))
    assert judge.availability.is_available_on(None)
    assert judge.availability.prefers(datetime(2025, 3, 1, 9))
    assert not judge.availability.prefers(datetime(2025, 3, 1, 18))
    assert Judge.from_dict(judge.to_dict()) == judge


def test_round_data_completion():
    pairings = [
        Pairing(id="R1-1", round_number=1, aff_team_id="A", neg_team_id="B"),
        Pairing(id="R1-2", round_number=1, aff_team_id="C", neg_team_id=None, status="bye"),
    ]
    round_data = RoundData(round_number=1, pairings=pairings)
    assert not round_data.is_completed
    assert not round_data.has_results

    round_data.pairings[0] = pairings[0].with_result(BallotResult(winner="aff"))
    assert round_data.is_completed
    assert round_data.has_results
    assert RoundData.from_dict(round_data.to_dict()).find("R1-1").winner_id == "A"
