import random
from datetime import date, datetime

import pytest

from tabengine.allocation.judge_allocator import (
    ROLE_CHAIR,
    ROLE_PANELLIST,
    allocate_judges,
    commit_assignments,
)
from tabengine.constants import (
    WARN_FORCED_SOFT_CONFLICT,
    WARN_INSUFFICIENT_JUDGES,
    WARN_PARTIAL_ASSIGNMENT,
)
from tabengine.exceptions import (
    InfeasibleConstraintException,
    InvalidPairingException,
    JudgeNotFoundException,
    PairingNotFoundException,
    PreconditionViolatedException,
)
from tabengine.models import (
    ConflictSet,
    ExperienceTier,
    Judge,
    JudgeAvailability,
    JudgeInstitutionConflict,
    JudgeTeamConflict,
    Pairing,
    TabulationSettings,
    Team,
    TimeOfDay,
)


def _pairing(pid, aff, neg, rank=1, **kwargs):
    return Pairing(
        id=pid, round_number=1, aff_team_id=aff, neg_team_id=neg, room_rank=rank, **kwargs
    )


def _judge(jid, tier=ExperienceTier.ADVANCED, **kwargs):
    return Judge(id=jid, name=f"Judge {jid}", tier=tier, **kwargs)


def _teams():
    return [
        Team(id="A", name="A", institution="North"),
        Team(id="B", name="B", institution="South"),
        Team(id="C", name="C", institution="East"),
        Team(id="D", name="D", institution="West"),
    ]


def test_institution_conflicts_still_allow_complete_assignment():
    pairings = [_pairing("P1", "A", "B", 1), _pairing("P2", "C", "D", 2)]
    judges = [_judge("J1"), _judge("J2"), _judge("J3")]
    conflicts = [
        JudgeInstitutionConflict("J1", "North"),
        JudgeInstitutionConflict("J2", "East"),
    ]

    proposal, summary = allocate_judges(
        pairings, judges, conflicts, TabulationSettings(), teams=_teams()
    )

    assert summary.total_assigned == 2
    assert summary.conflict_count == 0
    assert not summary.is_partial
    assert proposal.slot("P1", 0).judge_id != "J1"
    assert proposal.slot("P2", 0).judge_id != "J2"
    assert all(not s.has_conflict for s in proposal.slots)


def test_institution_conflict_without_team_roster_is_rejected():
    pairings = [_pairing("P1", "A", "B")]
    conflicts = [JudgeInstitutionConflict("J1", "North")]

    with pytest.raises(PreconditionViolatedException):
        allocate_judges(pairings, [_judge("J1")], conflicts, TabulationSettings())
    with pytest.raises(PreconditionViolatedException):
        allocate_judges(
            pairings, [_judge("J1")], conflicts, TabulationSettings(), teams=_teams()[1:]
        )


def test_team_roster_optional_without_institution_conflicts():
    pairings = [_pairing("P1", "A", "B")]
    proposal, summary = allocate_judges(
        pairings, [_judge("J1")], [JudgeTeamConflict("J1", "C")], TabulationSettings()
    )
    assert proposal.slot("P1", 0).judge_id == "J1"
    assert summary.total_assigned == 1


def _max_fillable(slots, eligible, used=frozenset()):
    if not slots:
        return 0
    first, rest = slots[0], slots[1:]
    best = _max_fillable(rest, eligible, used)
    for judge_id in eligible[first]:
        if judge_id not in used:
            best = max(best, 1 + _max_fillable(rest, eligible, used | {judge_id}))
    return best


def test_hard_conflicts_never_violated_on_small_inputs():
    rng = random.Random(99)
    institutions = ["North", "South", "East", "West"]
    for case in range(40):
        n_pairings = rng.randint(1, 6)
        n_judges = rng.randint(1, 6)
        teams = [
            Team(id=f"T{i}", name=f"T{i}", institution=rng.choice(institutions))
            for i in range(2 * n_pairings)
        ]
        pairings = [
            _pairing(f"P{k}", f"T{2 * k}", f"T{2 * k + 1}", k + 1) for k in range(n_pairings)
        ]
        judges = [
            _judge(f"J{j}", tier=rng.choice(list(ExperienceTier)))
            for j in range(n_judges)
        ]
        conflicts = []
        for judge in judges:
            if rng.random() < 0.5:
                conflicts.append(JudgeInstitutionConflict(judge.id, rng.choice(institutions)))
            if rng.random() < 0.5:
                conflicts.append(JudgeTeamConflict(judge.id, rng.choice(teams).id))
        conflict_set = ConflictSet(conflicts)
        institution_of = {t.id: t.institution for t in teams}

        proposal, summary = allocate_judges(
            pairings, judges, conflict_set, TabulationSettings(), teams=teams
        )

        eligible = {}
        for pairing in pairings:
            eligible[pairing.id] = [
                j.id
                for j in judges
                if all(
                    conflict_set.judge_team_reason(j.id, t, institution_of[t]) is None
                    for t in pairing.team_ids
                )
            ]
        for slot in proposal.slots:
            if slot.judge_id is not None:
                assert slot.judge_id in eligible[slot.pairing_id], f"case {case}"

        assigned = [s.judge_id for s in proposal.slots if s.judge_id is not None]
        assert len(assigned) == len(set(assigned))
        expected = _max_fillable([p.id for p in pairings], eligible)
        assert summary.total_assigned == expected, f"case {case}"


def test_chairs_are_filled_before_panels():
    pairings = [_pairing("P1", "A", "B")]
    settings = TabulationSettings(judges_per_room=2)
    proposal, summary = allocate_judges(pairings, [_judge("J1")], [], settings)

    chair = proposal.slot("P1", 0)
    panel = proposal.slot("P1", 1)
    assert chair.role == ROLE_CHAIR
    assert chair.judge_id == "J1"
    assert panel.role == ROLE_PANELLIST
    assert panel.judge_id is None
    assert summary.is_partial
    assert summary.unassigned_pairing_ids == ["P1"]
    codes = {w.code for w in summary.warnings}
    assert {WARN_PARTIAL_ASSIGNMENT, WARN_INSUFFICIENT_JUDGES} <= codes


def test_experienced_judge_chairs_the_top_room():
    pairings = [_pairing("P1", "A", "B", 1), _pairing("P2", "C", "D", 2)]
    judges = [_judge("N", ExperienceTier.NOVICE), _judge("E", ExperienceTier.EXPERT)]
    proposal, _ = allocate_judges(pairings, judges, [], TabulationSettings())
    assert proposal.judges_for("P1") == ["E"]
    assert proposal.judges_for("P2") == ["N"]


def test_own_institution_is_a_flagged_soft_conflict():
    pairings = [_pairing("P1", "A", "B")]
    judges = [_judge("J1", institution="north")]
    proposal, summary = allocate_judges(
        pairings, judges, [], TabulationSettings(), teams=_teams()
    )
    slot = proposal.slot("P1", 0)
    assert slot.judge_id == "J1"
    assert slot.has_conflict
    assert any("own institution" in reason for reason in slot.conflict_reasons)
    assert summary.conflict_count == 1
    assert any(w.code == WARN_FORCED_SOFT_CONFLICT for w in summary.warnings)


def test_time_preference_and_specialization_are_soft():
    morning = datetime(2025, 3, 1, 9, 0)
    pairings = [_pairing("P1", "A", "B", scheduled_time=morning)]
    evening_judge = _judge(
        "J1",
        availability=JudgeAvailability(time_preferences=frozenset({TimeOfDay.EVENING})),
        specializations=frozenset({"policy"}),
    )
    settings = TabulationSettings(format_key="parli")
    proposal, _ = allocate_judges(pairings, [evening_judge], [], settings)
    slot = proposal.slot("P1", 0)
    assert slot.judge_id == "J1"
    assert len(slot.conflict_reasons) == 2


def test_unavailable_and_overloaded_judges_are_excluded():
    day = date(2025, 3, 1)
    pairings = [_pairing("P1", "A", "B"), _pairing("P2", "C", "D", 2)]
    judges = [
        _judge("away", availability=JudgeAvailability(dates=frozenset({date(2025, 3, 2)}))),
        _judge("tired", max_rounds_per_day=2),
        _judge("fresh", tier=ExperienceTier.NOVICE),
    ]
    proposal, summary = allocate_judges(
        pairings,
        judges,
        [],
        TabulationSettings(),
        round_date=day,
        existing_load={"tired": 2},
    )
    assigned = {s.judge_id for s in proposal.slots if s.judge_id}
    assert assigned == {"fresh"}
    assert summary.total_assigned == 1
    assert summary.is_partial


def test_byes_and_placeholders_get_no_slots():
    pairings = [
        _pairing("P1", "A", "B"),
        Pairing(id="P2", round_number=1, aff_team_id="C", neg_team_id=None, status="bye"),
        Pairing(id="P3", round_number=1, aff_team_id=None, neg_team_id=None),
    ]
    judges = [_judge("J1"), _judge("J2")]
    proposal, _ = allocate_judges(pairings, judges, [], TabulationSettings())
    assert {s.pairing_id for s in proposal.slots} == {"P1"}


def _two_room_proposal():
    pairings = [_pairing("P1", "A", "B", 1), _pairing("P2", "C", "D", 2)]
    judges = [_judge("J1"), _judge("J2"), _judge("J3")]
    conflicts = [JudgeTeamConflict("J3", "A")]
    return allocate_judges(pairings, judges, conflicts, TabulationSettings(), teams=_teams())


def test_commit_applies_overrides_without_resolving():
    proposal, _ = _two_room_proposal()
    unused = {"J1", "J2", "J3"} - {s.judge_id for s in proposal.slots}
    spare = unused.pop()
    before = proposal.judges_for("P1")

    if spare == "J3":
        committed = commit_assignments(proposal, {("P2", 0): "J3"})
        by_id = {p.id: p for p in committed}
        assert by_id["P2"].judge_ids == ["J3"]
        assert by_id["P1"].judge_ids == before
    else:
        committed = commit_assignments(proposal, {("P1", 0): spare})
        by_id = {p.id: p for p in committed}
        assert by_id["P1"].judge_ids == [spare]
    assert proposal.judges_for("P1") == before


def test_commit_can_clear_a_slot():
    proposal, _ = _two_room_proposal()
    committed = commit_assignments(proposal, {("P1", 0): None})
    assert {p.id: p for p in committed}["P1"].judge_ids == []


def test_commit_rejects_hard_conflict_override():
    proposal, _ = _two_room_proposal()
    with pytest.raises(InfeasibleConstraintException) as excinfo:
        commit_assignments(proposal, {("P1", 0): "J3"})
    assert excinfo.value.rule == "judge_conflict"
    assert excinfo.value.judges == ("J3",)


def test_commit_rejects_double_booking():
    proposal, _ = _two_room_proposal()
    p1_judge = proposal.slot("P1", 0).judge_id
    p2_judge = proposal.slot("P2", 0).judge_id
    if p2_judge != "J3":
        overrides = {("P1", 0): p2_judge}
    else:
        overrides = {("P2", 0): p1_judge}
    with pytest.raises(PreconditionViolatedException):
        commit_assignments(proposal, overrides)


def test_commit_rejects_unknown_targets():
    proposal, _ = _two_room_proposal()
    with pytest.raises(PairingNotFoundException):
        commit_assignments(proposal, {("P9", 0): "J1"})
    with pytest.raises(InvalidPairingException):
        commit_assignments(proposal, {("P1", 3): "J1"})
    with pytest.raises(JudgeNotFoundException):
        commit_assignments(proposal, {("P1", 0): "J9"})
