from __future__ import annotations
import itertools
from datetime import datetime, timezone
from app.services.reconciler import latest_submissions, merge_rosters, participant_index, reconcile
from conftest import submission

UTC = timezone.utc


def _member(uid, **extra):
    return {"user": {"id": uid, "firstName": uid.upper(), "email": f"{uid}@ex.com"}, **extra}


def _team_times(roster):
    return {t.id: t.registered_at for t in roster.teams}


RAW = [
    {"id": "a", "firstName": "Ann", "team": {"id": "t1", "name": "Rockets"}, "registeredAt": "2025-01-02T00:00:00Z"},
    {"id": "b", "firstName": "Ben", "team": {"id": "t1", "name": "Rockets"}, "registeredAt": "2025-01-01T00:00:00Z"},
    {"id": "c", "firstName": "Cat", "teamId": "t2", "teamName": "Comets", "registeredAt": "2025-01-03T00:00:00Z"},
    {"id": "d", "firstName": "Dan", "registeredAt": "2025-01-04T00:00:00Z"},
    {"userId": "e", "firstName": "Eve"},
]


def test_partitions_team_and_individual_entries():
    roster = reconcile("h1", RAW)
    assert {t.id: [m.id for m in t.members] for t in roster.teams} == {"t1": ["a", "b"], "t2": ["c"]}
    assert [p.id for p in roster.individuals] == ["d", "e"]
    assert roster.teams[0].name == "Rockets"
    assert all(m.team_id == "t1" and m.hackathon_id == "h1" for m in roster.teams[0].members)


def test_team_registered_at_defaults_to_earliest_member():
    roster = reconcile("h1", RAW)
    t1 = next(t for t in roster.teams if t.id == "t1")
    assert t1.registered_at == datetime(2025, 1, 1, tzinfo=UTC)


def test_team_registered_at_declared_on_entry_is_kept():
    roster = reconcile("h1", [{"id": "t9", "name": "Nine", "registeredAt": "2024-12-31T00:00:00Z", "members": [_member("x", registeredAt="2025-02-01T00:00:00Z")]}])
    assert roster.teams[0].registered_at == datetime(2024, 12, 31, tzinfo=UTC)


def test_teams_from_separate_fetches_merge_without_duplicates():
    first = {"id": "t1", "name": "Rockets", "members": [_member("A"), _member("B")]}
    second = {"id": "t1", "name": "Rockets", "members": [_member("A"), _member("C")]}
    roster = reconcile("h1", [first, second])
    assert len(roster.teams) == 1
    assert [m.id for m in roster.teams[0].members] == ["A", "B", "C"]

    merged = merge_rosters(reconcile("h1", [first]), reconcile("h1", [second]))
    assert [m.id for m in merged.teams[0].members] == ["A", "B", "C"]


def test_order_independent():
    expected = reconcile("h1", RAW).signature()
    for perm in itertools.permutations(RAW):
        assert reconcile("h1", list(perm)).signature() == expected


def test_idempotent():
    once = reconcile("h1", RAW)
    assert reconcile("h1", RAW + RAW).signature() == once.signature()
    assert merge_rosters(once, once).signature() == once.signature()


def test_user_in_team_is_not_also_an_individual():
    raw = [{"id": "a", "firstName": "Ann"}, {"id": "a", "email": "ann@ex.com", "team": {"id": "t1"}}]
    roster = reconcile("h1", raw)
    assert roster.individuals == []
    [member] = roster.teams[0].members
    assert member.first_name == "Ann" and member.email == "ann@ex.com"


def test_duplicate_individuals_merge_fields():
    raw = [
        {"id": "d", "firstName": "Dan", "registeredAt": "2025-01-05T00:00:00Z"},
        {"id": "d", "lastName": "Dee", "registeredAt": "2025-01-04T00:00:00Z", "hasSubmission": True, "submissionId": "s9"},
    ]
    for entries in (raw, raw[::-1]):
        [p] = reconcile("h1", entries).individuals
        assert p.name == "Dan Dee"
        assert p.registered_at == datetime(2025, 1, 4, tzinfo=UTC)
        assert p.has_submission and p.submission_id == "s9"


def test_user_claimed_by_two_teams_lands_in_one():
    raw = [{"id": "a", "team": {"id": "t2"}}, {"id": "a", "team": {"id": "t1"}}, {"id": "b", "team": {"id": "t2"}}]
    roster = reconcile("h1", raw)
    placements = {t.id: sorted(t.member_ids) for t in roster.teams}
    assert placements == {"t1": ["a"], "t2": ["b"]}


def test_malformed_entries_are_skipped():
    roster = reconcile("h1", ["nope", None, {"firstName": "no id"}, {"members": [_member("z")]}, {"id": "ok"}])
    assert [p.id for p in roster.participants()] == ["ok"]


def test_empty_input():
    roster = reconcile("h1", None)
    assert roster.teams == [] and roster.individuals == []


def test_enrichment_matches_submitter_and_hackathon():
    subs = [
        submission("s1", "h1", "a", submittedAt="2025-01-10T00:00:00Z"),
        submission("s2", "h2", "d"),
        submission("s3", "h1", "zz"),
    ]
    roster = reconcile("h1", RAW, submissions=subs)
    by_id = {p.id: p for p in roster.participants()}
    assert by_id["a"].has_submission and by_id["a"].submission_id == "s1"
    assert not by_id["d"].has_submission and by_id["d"].submission_id is None


def test_enrichment_overrides_stale_flags():
    roster = reconcile("h1", [{"id": "d", "hasSubmission": True, "submissionId": "gone"}], submissions=[])
    assert roster.individuals[0].has_submission is False


def test_most_recent_submission_wins_with_id_tiebreak():
    subs = [
        submission("s5", "h1", "a", submittedAt="2025-01-10T00:00:00Z"),
        submission("s7", "h1", "a", submittedAt="2025-01-12T00:00:00Z"),
        submission("s6", "h1", "a", submittedAt="2025-01-12T00:00:00Z"),
        submission("s1", "h1", "a"),
        submission("s2", "h1", "b"),
        submission("s0", "h1", "b"),
    ]
    for perm in (subs, subs[::-1]):
        latest = latest_submissions("h1", perm)
        assert latest["a"].id == "s6"
        assert latest["b"].id == "s0"


def test_participant_index_is_keyed_by_user_and_hackathon():
    r1 = reconcile("h1", [{"id": "a"}, {"id": "b", "team": {"id": "t1"}}])
    r2 = reconcile("h2", [{"id": "a"}])
    index = participant_index([r1, r2])
    assert set(index) == {("a", "h1"), ("b", "h1"), ("a", "h2")}
    assert participant_index([r2, r1]) == index


def test_merge_rosters_is_commutative():
    r1 = reconcile("h1", RAW[:3])
    r2 = reconcile("h1", RAW[2:])
    assert merge_rosters(r1, r2).signature() == merge_rosters(r2, r1).signature() == reconcile("h1", RAW).signature()
    assert _team_times(merge_rosters(r1, r2)) == _team_times(merge_rosters(r2, r1)) == _team_times(reconcile("h1", RAW))


def test_merge_keeps_declared_team_timestamp():
    undeclared = {"id": "t1", "name": "Rockets", "members": [_member("A", registeredAt="2025-01-05T00:00:00Z")]}
    declared = {"id": "t1", "name": "Rockets", "registeredAt": "2025-01-10T00:00:00Z", "members": [_member("B", registeredAt="2025-01-07T00:00:00Z")]}
    direct = reconcile("h1", [undeclared, declared])
    r_a, r_b = reconcile("h1", [undeclared]), reconcile("h1", [declared])
    assert r_a.teams[0].registered_at == datetime(2025, 1, 5, tzinfo=UTC)
    for merged in (merge_rosters(r_a, r_b), merge_rosters(r_b, r_a)):
        assert merged.signature() == direct.signature()
        assert merged.teams[0].registered_at == direct.teams[0].registered_at == datetime(2025, 1, 10, tzinfo=UTC)


def test_merge_without_declared_timestamp_uses_earliest_member():
    r_a = reconcile("h1", [{"id": "t1", "members": [_member("A", registeredAt="2025-01-05T00:00:00Z")]}])
    r_b = reconcile("h1", [{"id": "t1", "members": [_member("B", registeredAt="2025-01-03T00:00:00Z")]}])
    assert merge_rosters(r_a, r_b).teams[0].registered_at == datetime(2025, 1, 3, tzinfo=UTC)
