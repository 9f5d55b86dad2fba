import pytest

from tabengine import compute_speaker_standings
from tabengine.models import BallotResult, Pairing, TabulationSettings, Team
from tabengine.standings.speaker_standings import SpeakerStandingsCalculator


def _debate(pid, round_number, aff, neg, winner, aff_scores, neg_scores, forfeit=False):
    pairing = Pairing(id=pid, round_number=round_number, aff_team_id=aff, neg_team_id=neg)
    result = BallotResult(
        winner=winner,
        aff_speaks=sum(aff_scores.values()),
        neg_speaks=sum(neg_scores.values()),
        forfeit=forfeit,
        aff_speaker_scores=aff_scores,
        neg_speaker_scores=neg_scores,
    )
    return pairing.with_result(result)


def _three_rounds():
    return [
        _debate("R1-1", 1, "A", "B", "aff", {"a1": 78, "a2": 75}, {"b1": 74, "b2": 73}),
        _debate("R2-1", 2, "B", "A", "neg", {"b1": 77, "b2": 72}, {"a1": 74, "a2": 76}),
        _debate("R3-1", 3, "A", "B", "neg", {"a1": 76, "a2": 75}, {"b1": 76, "b2": 77}),
    ]


def test_speaker_totals_and_extremes():
    standings = compute_speaker_standings(_three_rounds())
    by_id = {s.speaker_id: s for s in standings}

    a1 = by_id["a1"]
    assert a1.team_id == "A"
    assert a1.rounds_spoken == 3
    assert a1.total_points == 228
    assert a1.average_points == pytest.approx(76.0)
    assert a1.high_point == 78
    assert a1.low_point == 74
    # One round dropped from each end by default
    assert a1.adjusted_points == 76


def test_ranked_by_adjusted_then_total_points():
    standings = compute_speaker_standings(_three_rounds())
    # a1 and b1 both keep 76 after the drop; a1 has the higher total
    assert [s.speaker_id for s in standings] == ["a1", "b1", "a2", "b2"]
    assert [s.rank for s in standings] == [1, 2, 3, 4]


def test_no_drop_ranks_by_total():
    settings = TabulationSettings(drop_high_low_speaks=0)
    standings = compute_speaker_standings(_three_rounds(), settings)
    assert {s.speaker_id: s.total_points for s in standings} == {
        "a1": 228,
        "b1": 227,
        "a2": 226,
        "b2": 222,
    }
    assert all(s.adjusted_points == s.total_points for s in standings)


def test_tied_speakers_share_rank():
    pairings = [
        _debate("R1-1", 1, "A", "B", "aff", {"a1": 75}, {"b1": 75}),
        _debate("R1-2", 1, "C", "D", "aff", {"c1": 75}, {"d1": 70}),
    ]
    standings = compute_speaker_standings(pairings)
    assert [(s.speaker_id, s.rank) for s in standings] == [
        ("a1", 1),
        ("b1", 1),
        ("c1", 1),
        ("d1", 4),
    ]


def test_forfeits_byes_and_pending_debates_carry_no_scores():
    pairings = [
        _debate("R1-1", 1, "A", "B", "aff", {"a1": 75}, {"b1": 74}),
        _debate("R2-1", 2, "A", "B", "aff", {"a1": 80}, {"b1": 70}, forfeit=True),
        Pairing(id="R3-2", round_number=3, aff_team_id="A", neg_team_id=None, status="bye"),
        Pairing(id="R3-1", round_number=3, aff_team_id="B", neg_team_id="C"),
    ]
    standings = compute_speaker_standings(pairings)
    assert {s.speaker_id: s.rounds_spoken for s in standings} == {"a1": 1, "b1": 1}


def test_excludes_breaking_and_withdrawn_teams():
    teams = [
        Team(id="A", name="Alpha"),
        Team(id="B", name="Beta", is_active=False),
    ]
    standings = compute_speaker_standings(_three_rounds(), teams=teams)
    assert {s.team_id for s in standings} == {"A"}

    standings = compute_speaker_standings(_three_rounds(), exclude_team_ids=["A"])
    assert [s.speaker_id for s in standings] == ["b1", "b2"]
    assert standings[0].rank == 1


def test_top_n_and_empty_tab():
    assert len(compute_speaker_standings(_three_rounds(), top_n=2)) == 2
    assert compute_speaker_standings([]) == []


def test_speaker_team_follows_latest_round():
    pairings = [
        _debate("R2-1", 2, "C", "B", "aff", {"swap": 75}, {"b1": 74}),
        _debate("R1-1", 1, "A", "B", "aff", {"swap": 76}, {"b1": 73}),
    ]
    records = SpeakerStandingsCalculator().build_records(pairings)
    assert records["swap"].team_id == "C"
    assert records["swap"].points == [76, 75]
