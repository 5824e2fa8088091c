from __future__ import annotations
import uuid
from datetime import datetime, timezone as dt_tz
from app.errors import AlreadyRegistered, FetchFailure, NotRegistered
from app.schemas.hackathon import HackathonSummary, UserRef
from app.schemas.submission import SubmissionPatch, SubmissionRecord, SubmissionWrite

DEMO_USER = {"id": "demo-user", "firstName": "Demo", "lastName": "Participant", "email": "demo@hackportal.dev"}

SAMPLE_HACKATHONS = [
    {
        "id": "agentmax-2024",
        "title": "AgentMax - AI Agent Building Challenge",
        "status": "COMPLETED",
        "registrationStart": "2024-12-01T00:00:00Z",
        "registrationEnd": "2026-02-15T23:59:59Z",
        "startDate": "2026-02-16T00:00:00Z",
        "endDate": "2026-03-02T23:59:59Z",
        "submissionDeadline": "2026-03-02T23:59:59Z",
        "minTeamSize": 1,
        "maxTeamSize": 4,
        "teams": [
            {
                "id": "team-agentsmith",
                "name": "Agent Smiths",
                "registeredAt": "2025-01-04T10:00:00Z",
                "members": [{"user": DEMO_USER, "role": "LEADER"}, {"user": {"id": "demo-teammate", "firstName": "Tara", "lastName": "Mate"}}],
            }
        ],
    },
    {
        "id": "web3-global",
        "title": "Web3 Global Hackathon",
        "status": "SUBMISSION_OPEN",
        "startDate": "2024-12-01T00:00:00Z",
        "endDate": "2024-12-20T23:59:59Z",
        "submissionDeadline": "2024-12-20T23:59:59Z",
        "minTeamSize": 1,
        "maxTeamSize": 5,
    },
    {
        "id": "green-tech",
        "title": "Green Tech Challenge",
        "status": "REGISTRATION_OPEN",
        "startDate": "2027-01-10T00:00:00Z",
        "endDate": "2027-01-20T23:59:59Z",
        "submissionDeadline": "2027-01-20T23:59:59Z",
        "minTeamSize": 2,
        "maxTeamSize": 4,
    },
]

SAMPLE_SUBMISSIONS = [
    {
        "id": "demo-sub-1",
        "hackathonId": "web3-global",
        "submitterId": "demo-user",
        "title": "DeFi Trading Platform",
        "description": "Non-custodial trading with on-chain risk limits.",
        "techStack": "Solidity, Python, React",
        "repositoryUrl": "https://github.com/hackportal-demo/defi-trading",
        "status": "UNDER_OFFLINE_REVIEW",
        "submittedAt": "2024-12-18T12:00:00Z",
        "files": [
            '{"name": "pitch.pdf", "url": "https://files.hackportal.dev/demo/pitch.pdf", "size": 482133, "type": "application/pdf"}',
            "https://files.hackportal.dev/demo/source.zip",
        ],
    },
]


class DemoPortalClient:
    """
    In-process sample data with the same interface as HttpPortalClient.

    Used when DEMO_MODE=1 so the dashboard renders without a reachable backend.
    Writes are kept in memory for the life of the client.
    """

    def __init__(self):
        self._hackathons = {h["id"]: HackathonSummary.model_validate(h) for h in SAMPLE_HACKATHONS}
        self._submissions = {s["id"]: SubmissionRecord.model_validate(s) for s in SAMPLE_SUBMISSIONS}
        self._registrations: set[str] = {"web3-global"}

    def _in_team(self, hackathon_id: str) -> bool:
        hackathon = self._hackathons.get(hackathon_id)
        return hackathon is not None and any(
            m.member_user_id == DEMO_USER["id"] for team in hackathon.teams for m in team.members
        )

    async def get_current_user(self) -> UserRef:
        return UserRef.model_validate(DEMO_USER)

    async def list_hackathons(self) -> list[HackathonSummary]:
        return list(self._hackathons.values())

    async def get_hackathon(self, hackathon_id: str) -> HackathonSummary:
        try:
            return self._hackathons[hackathon_id]
        except KeyError:
            raise FetchFailure("hackathon", f"Unknown hackathon {hackathon_id}", hackathon_id=hackathon_id, status_code=404)

    async def list_my_registrations(self) -> list[HackathonSummary]:
        return [self._hackathons[hid] for hid in sorted(self._registrations)]

    async def list_hackathon_participants(self, hackathon_id: str) -> list[dict]:
        hackathon = await self.get_hackathon(hackathon_id)
        out: list[dict] = []
        for team in hackathon.teams:
            for m in team.members:
                if m.user is None:
                    continue
                out.append({**m.user.model_dump(by_alias=True), "team": {"id": team.id, "name": team.name}, "registeredAt": team.registered_at})
        if hackathon_id in self._registrations and not any(p["id"] == DEMO_USER["id"] for p in out):
            out.append({**DEMO_USER, "team": None})
        return out

    async def list_my_submissions(self, user_id: str | None = None) -> list[SubmissionRecord]:
        return [s for s in self._submissions.values() if user_id is None or s.submitter_id == user_id]

    async def list_hackathon_submissions(self, hackathon_id: str) -> list[SubmissionRecord]:
        return [s for s in self._submissions.values() if s.hackathon_id == hackathon_id]

    async def get_submission(self, submission_id: str) -> SubmissionRecord:
        try:
            return self._submissions[submission_id]
        except KeyError:
            raise FetchFailure("submission", f"Unknown submission {submission_id}", status_code=404)

    async def register_for_hackathon(self, hackathon_id: str, registration: dict | None = None) -> None:
        await self.get_hackathon(hackathon_id)
        if hackathon_id in self._registrations:
            raise AlreadyRegistered(f"Already registered for {hackathon_id}")
        self._registrations.add(hackathon_id)

    async def create_submission(self, data: SubmissionWrite) -> SubmissionRecord:
        if data.hackathon_id not in self._registrations and not self._in_team(data.hackathon_id):
            raise NotRegistered(f"Not registered for hackathon {data.hackathon_id}")
        now = datetime.now(dt_tz.utc)
        record = SubmissionRecord.model_validate({
            **data.model_dump(),
            "id": f"demo-sub-{uuid.uuid4().hex[:8]}",
            "submitter_id": DEMO_USER["id"],
            "status": "DRAFT" if data.is_draft else "SUBMITTED",
            "submitted_at": None if data.is_draft else now,
            "created_at": now,
        })
        self._submissions[record.id] = record
        return record

    async def update_submission(self, submission_id: str, data: SubmissionPatch) -> SubmissionRecord:
        current = await self.get_submission(submission_id)
        update = data.model_dump(exclude_unset=True)
        if update.get("is_draft") is False and current.submitted_at is None:
            update["status"] = "SUBMITTED"
            update["submitted_at"] = datetime.now(dt_tz.utc)
        record = SubmissionRecord.model_validate({**current.model_dump(), **update})
        self._submissions[submission_id] = record
        return record

    async def aclose(self) -> None:
        return None
