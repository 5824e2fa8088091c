from __future__ import annotations
from typing import Iterable
from app.schemas.enums import MembershipSignal
from app.schemas.hackathon import HackathonSummary
from app.schemas.participation import JoinedHackathons
from app.schemas.submission import SubmissionRecord


def registration_signals(registrations: Iterable[HackathonSummary]) -> dict[str, set[MembershipSignal]]:
    return {h.id: {MembershipSignal.REGISTRATION} for h in registrations}


def submission_signals(user_id: str, submissions: Iterable[SubmissionRecord]) -> dict[str, set[MembershipSignal]]:
    # Submissions listed for the user may omit `submitterId`; only a different submitter disqualifies.
    return {
        s.hackathon_id: {MembershipSignal.SUBMISSION}
        for s in submissions
        if s.submitter_id is None or s.submitter_id == user_id
    }


def team_signals(user_id: str, hackathons: Iterable[HackathonSummary]) -> dict[str, set[MembershipSignal]]:
    return {
        h.id: {MembershipSignal.TEAM}
        for h in hackathons
        if any(m.member_user_id == user_id for team in h.teams for m in team.members)
    }


def union(user_id: str, *signal_maps: dict[str, set[MembershipSignal]]) -> JoinedHackathons:
    merged: dict[str, set[MembershipSignal]] = {}
    for signals in signal_maps:
        for hid, sigs in signals.items():
            merged.setdefault(hid, set()).update(sigs)
    return JoinedHackathons(user_id=user_id, signals={hid: frozenset(s) for hid, s in merged.items()})


def joined_hackathons(
    user_id: str,
    all_hackathons: Iterable[HackathonSummary] | None,
    my_registrations: Iterable[HackathonSummary] | None,
    my_submissions: Iterable[SubmissionRecord] | None,
) -> JoinedHackathons:
    """
    Hackathons the user has joined, by any of three independently-updated sources:
    the registration list, the user's submissions, and team rosters embedded in
    hackathon records. A hackathon is joined iff at least one source says so; the
    result keeps which source(s) fired per hackathon.
    """
    return union(
        user_id,
        registration_signals(my_registrations or []),
        submission_signals(user_id, my_submissions or []),
        team_signals(user_id, all_hackathons or []),
    )
