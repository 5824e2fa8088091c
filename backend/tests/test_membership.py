from __future__ import annotations
from app.schemas.enums import MembershipSignal
from app.services.membership import joined_hackathons
from conftest import hackathon, submission

REG, SUB, TEAM = MembershipSignal.REGISTRATION, MembershipSignal.SUBMISSION, MembershipSignal.TEAM


def _with_team(hid, *user_ids, legacy=False):
    members = [{"userId": uid} if legacy else {"user": {"id": uid}} for uid in user_ids]
    return hackathon(hid, teams=[{"id": f"team-{hid}", "name": "Crew", "members": members}])


def test_union_of_three_signals():
    all_h = [hackathon("h1"), hackathon("h2"), _with_team("h3", "u1", "u9"), hackathon("h4")]
    joined = joined_hackathons("u1", all_h, [hackathon("h1")], [submission("s1", "h2", "u1")])
    assert joined.ids == {"h1", "h2", "h3"}
    assert joined.signals_for("h1") == {REG}
    assert joined.signals_for("h2") == {SUB}
    assert joined.signals_for("h3") == {TEAM}
    assert not joined.has("h4")


def test_signals_accumulate_on_one_hackathon():
    h = _with_team("h1", "u1")
    joined = joined_hackathons("u1", [h], [h], [submission("s1", "h1", "u1")])
    assert joined.signals_for("h1") == {REG, SUB, TEAM}


def test_legacy_team_members_with_user_id():
    joined = joined_hackathons("u1", [_with_team("h3", "u1", legacy=True)], [], [])
    assert joined.ids == {"h3"}


def test_someone_elses_submission_does_not_count():
    joined = joined_hackathons("u1", [], [], [submission("s1", "h2", "u2"), submission("s2", "h3", None)])
    assert joined.ids == {"h3"}


def test_missing_sources_are_empty():
    assert joined_hackathons("u1", None, None, None).ids == frozenset()


def test_result_does_not_depend_on_input_order():
    all_h = [_with_team("h3", "u1"), hackathon("h1"), _with_team("h2", "u2")]
    subs = [submission("s1", "h2", "u1"), submission("s2", "h5", "u1")]
    a = joined_hackathons("u1", all_h, [hackathon("h1")], subs)
    b = joined_hackathons("u1", all_h[::-1], [hackathon("h1")], subs[::-1])
    assert a == b
    assert a.ids == {"h1", "h2", "h3", "h5"}


def test_merge_unions_signals():
    a = joined_hackathons("u1", [], [hackathon("h1")], [])
    b = joined_hackathons("u1", [], [], [submission("s1", "h1", "u1"), submission("s2", "h2", "u1")])
    merged = a.merge(b)
    assert merged.signals_for("h1") == {REG, SUB}
    assert merged.ids == {"h1", "h2"}
