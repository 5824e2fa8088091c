from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Mapping
import structlog
from app.schemas.common import parse_timestamp
from app.schemas.participation import ParticipantRecord, Roster, TeamGroup
from app.schemas.submission import SubmissionRecord

log = structlog.get_logger()


@dataclass
class _TeamAccumulator:
    id: str
    name: str = ""
    declared_registered_at: datetime | None = None
    member_order: list[str] = field(default_factory=list)


def _user_id(raw: Mapping[str, Any]) -> str | None:
    user = raw.get("user")
    if isinstance(user, Mapping) and user.get("id") is not None:
        return str(user["id"])
    for key in ("userId", "user_id", "id"):
        if raw.get(key) is not None:
            return str(raw[key])
    return None


def _team_ref(raw: Mapping[str, Any]) -> tuple[str, str] | None:
    team = raw.get("team")
    if isinstance(team, Mapping) and team.get("id") is not None:
        return str(team["id"]), team.get("name") or ""
    if raw.get("teamId") is not None:
        return str(raw["teamId"]), raw.get("teamName") or ""
    return None


def _is_team_entry(raw: Mapping[str, Any]) -> bool:
    return isinstance(raw.get("members"), list)


def _participant_from(raw: Mapping[str, Any], hackathon_id: str, team: tuple[str, str] | None) -> ParticipantRecord | None:
    uid = _user_id(raw)
    if uid is None:
        return None
    user = raw.get("user") if isinstance(raw.get("user"), Mapping) else {}
    return ParticipantRecord(
        id=uid,
        hackathon_id=hackathon_id,
        first_name=raw.get("firstName") or user.get("firstName") or "",
        last_name=raw.get("lastName") or user.get("lastName") or "",
        email=raw.get("email") or user.get("email") or "",
        team_id=team[0] if team else None,
        team_name=(team[1] or None) if team else None,
        registered_at=raw.get("registeredAt") or user.get("registeredAt"),
        has_submission=bool(raw.get("hasSubmission")),
        submission_id=raw.get("submissionId"),
    )


def _earliest(a: datetime | None, b: datetime | None) -> datetime | None:
    if a is None:
        return b
    if b is None:
        return a
    return min(a, b)


def _pick(a: str, b: str) -> str:
    # Non-empty wins; two different non-empty values resolve the same way in any order.
    if not a:
        return b
    if not b:
        return a
    return min(a, b)


def merge_participant(a: ParticipantRecord, b: ParticipantRecord) -> ParticipantRecord:
    """Commutative field-wise merge of two records for the same (user, hackathon)."""
    if a.submission_id and b.submission_id:
        submission_id = min(a.submission_id, b.submission_id)
    else:
        submission_id = a.submission_id or b.submission_id
    return a.model_copy(update={
        "first_name": _pick(a.first_name, b.first_name),
        "last_name": _pick(a.last_name, b.last_name),
        "email": _pick(a.email, b.email),
        "team_id": a.team_id or b.team_id,
        "team_name": a.team_name or b.team_name,
        "registered_at": _earliest(a.registered_at, b.registered_at),
        "has_submission": a.has_submission or b.has_submission or bool(submission_id),
        "submission_id": submission_id,
    })


def reconcile(hackathon_id: str, raw_participants: Iterable[Any] | None, submissions: Iterable[SubmissionRecord] | None = None) -> Roster:
    """
    Build a deduplicated roster for one hackathon from raw participant entries.

    Entries come in two shapes: participant-shaped (a user with an optional `team`
    or `teamId` reference) and team-shaped (`{"id", "name", "members": [...]}`).
    Team-bearing entries are grouped by team id, keeping members in first-seen
    order; every user appears once per hackathon. A user who shows up both in a
    team and as an individual is kept in the team. When `submissions` is given,
    `hasSubmission`/`submissionId` are recomputed from it.
    """
    people: dict[str, ParticipantRecord] = {}
    teams: dict[str, _TeamAccumulator] = {}
    memberships: dict[str, set[str]] = {}

    def _add(record: ParticipantRecord) -> None:
        existing = people.get(record.id)
        people[record.id] = merge_participant(existing, record) if existing else record

    def _join(team_id: str, user_id: str) -> None:
        acc = teams[team_id]
        if user_id not in acc.member_order:
            acc.member_order.append(user_id)
        memberships.setdefault(user_id, set()).add(team_id)

    for raw in raw_participants or []:
        if not isinstance(raw, Mapping):
            log.warning("participant_entry_skipped", hackathon_id=hackathon_id, reason="not_an_object")
            continue
        if _is_team_entry(raw):
            tid = raw.get("id") if raw.get("id") is not None else raw.get("teamId")
            if tid is None:
                log.warning("participant_entry_skipped", hackathon_id=hackathon_id, reason="team_without_id")
                continue
            tid = str(tid)
            acc = teams.setdefault(tid, _TeamAccumulator(id=tid))
            acc.name = _pick(acc.name, raw.get("name") or "")
            acc.declared_registered_at = _earliest(acc.declared_registered_at, parse_timestamp(raw.get("registeredAt")))
            for member in raw["members"]:
                if not isinstance(member, Mapping):
                    continue
                record = _participant_from(member, hackathon_id, (tid, raw.get("name") or ""))
                if record is None:
                    continue
                _add(record)
                _join(tid, record.id)
            continue

        team = _team_ref(raw)
        record = _participant_from(raw, hackathon_id, team)
        if record is None:
            log.warning("participant_entry_skipped", hackathon_id=hackathon_id, reason="missing_user_id")
            continue
        _add(record)
        if team:
            acc = teams.setdefault(team[0], _TeamAccumulator(id=team[0]))
            acc.name = _pick(acc.name, team[1])
            _join(team[0], record.id)

    # One team per user: a user claimed by several teams stays in the lowest team id.
    owner_of = {}
    for uid, tids in memberships.items():
        owner_of[uid] = min(tids)
        if len(tids) > 1:
            log.warning("participant_in_multiple_teams", hackathon_id=hackathon_id, user_id=uid, team_ids=sorted(tids))

    if submissions is not None:
        latest = latest_submissions(hackathon_id, submissions)
        people = {uid: _with_submission(p, latest.get(uid)) for uid, p in people.items()}

    groups: list[TeamGroup] = []
    for tid, acc in teams.items():
        members = []
        for uid in acc.member_order:
            if owner_of.get(uid) != tid:
                continue
            members.append(people[uid].model_copy(update={"team_id": tid, "team_name": acc.name or None}))
        if not members:
            continue
        registered_at = acc.declared_registered_at
        if registered_at is None:
            stamps = [m.registered_at for m in members if m.registered_at is not None]
            registered_at = min(stamps) if stamps else None
        groups.append(TeamGroup(
            id=tid,
            hackathon_id=hackathon_id,
            name=acc.name,
            members=members,
            registered_at=registered_at,
            declared_registered_at=acc.declared_registered_at,
        ))

    individuals = [p for uid, p in people.items() if uid not in owner_of]
    return Roster(hackathon_id=hackathon_id, teams=groups, individuals=individuals)


def _with_submission(record: ParticipantRecord, submission: SubmissionRecord | None) -> ParticipantRecord:
    return record.model_copy(update={
        "has_submission": submission is not None,
        "submission_id": submission.id if submission is not None else None,
    })


def pick_latest(submissions: Iterable[SubmissionRecord]) -> SubmissionRecord | None:
    """The most recently submitted record; ties (and never-submitted drafts) go to the lowest id."""
    best = None
    for sub in sorted(submissions, key=lambda s: s.id):
        if best is None or _submitted_later(sub, best):
            best = sub
    return best


def latest_submissions(hackathon_id: str, submissions: Iterable[SubmissionRecord]) -> dict[str, SubmissionRecord]:
    """For each submitter, the one submission that counts in `hackathon_id`."""
    by_submitter: dict[str, list[SubmissionRecord]] = {}
    for sub in submissions:
        if sub.hackathon_id == hackathon_id and sub.submitter_id:
            by_submitter.setdefault(sub.submitter_id, []).append(sub)
    return {uid: pick_latest(subs) for uid, subs in by_submitter.items()}


def _submitted_later(candidate: SubmissionRecord, current: SubmissionRecord) -> bool:
    if candidate.submitted_at is None:
        return False
    if current.submitted_at is None:
        return True
    return candidate.submitted_at > current.submitted_at


def merge_rosters(*rosters: Roster) -> Roster:
    """Merge rosters of the same hackathon fetched separately. Order of arguments does not matter."""
    if not rosters:
        raise ValueError("merge_rosters needs at least one roster")
    hackathon_id = rosters[0].hackathon_id
    entries: list[dict] = []
    for roster in rosters:
        if roster.hackathon_id != hackathon_id:
            raise ValueError("cannot merge rosters of different hackathons")
        for team in roster.teams:
            entries.append({
                "id": team.id,
                "name": team.name,
                "registeredAt": team.declared_registered_at,
                "members": [_as_entry(m) for m in team.members],
            })
        entries.extend(_as_entry(p) for p in roster.individuals)
    return reconcile(hackathon_id, entries)


def _as_entry(p: ParticipantRecord) -> dict:
    return {
        "id": p.id,
        "firstName": p.first_name,
        "lastName": p.last_name,
        "email": p.email,
        "registeredAt": p.registered_at,
        "hasSubmission": p.has_submission,
        "submissionId": p.submission_id,
    }


def participant_index(rosters: Iterable[Roster]) -> dict[tuple[str, str], ParticipantRecord]:
    """Composite-keyed (userId, hackathonId) view across many hackathons."""
    index: dict[tuple[str, str], ParticipantRecord] = {}
    for roster in rosters:
        for p in roster.participants():
            key = (p.id, roster.hackathon_id)
            existing = index.get(key)
            index[key] = merge_participant(existing, p) if existing else p
    return index
