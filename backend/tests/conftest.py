from __future__ import annotations
import asyncio
from typing import Any
import pytest
from app.errors import AuthExpired, FetchFailure
from app.schemas.hackathon import HackathonSummary, UserRef
from app.schemas.submission import SubmissionPatch, SubmissionRecord, SubmissionWrite


def hackathon(hid: str = "h1", start: str = "2025-01-10", deadline: str = "2025-01-20", **extra: Any) -> HackathonSummary:
    return HackathonSummary.model_validate({
        "id": hid,
        "title": extra.pop("title", f"Hackathon {hid}"),
        "status": extra.pop("status", "IN_PROGRESS"),
        "startDate": start,
        "submissionDeadline": deadline,
        **extra,
    })


def submission(sid: str = "s1", hid: str = "h1", submitter: str | None = "u1", **extra: Any) -> SubmissionRecord:
    return SubmissionRecord.model_validate({"id": sid, "hackathonId": hid, "submitterId": submitter, **extra})


class FakePortal:
    """In-memory PortalClient for orchestrator and route tests."""

    def __init__(self, user_id: str = "u1", hackathons=(), registrations=(), submissions=(), participants=None):
        self.user_id = user_id
        self.hackathons = {h.id: h for h in hackathons}
        self.registrations = set(registrations)
        self.submissions = {s.id: s for s in submissions}
        self.participants: dict[str, list[dict]] = dict(participants or {})
        self.failing: set[tuple[str, str | None]] = set()
        self.auth_expired = False
        self.delays: dict[str, asyncio.Event] = {}
        self.calls: list[tuple[str, Any]] = []

    async def _enter(self, method: str, key: str | None = None) -> None:
        self.calls.append((method, key))
        if self.auth_expired:
            raise AuthExpired("token expired")
        gate = self.delays.get(method)
        if gate is not None:
            await gate.wait()
        if (method, key) in self.failing:
            raise FetchFailure(method, f"{method} failed", hackathon_id=key)

    async def get_current_user(self) -> UserRef:
        await self._enter("current_user")
        return UserRef(id=self.user_id, first_name="Test", last_name="User")

    async def list_hackathons(self):
        await self._enter("hackathons")
        return list(self.hackathons.values())

    async def get_hackathon(self, hackathon_id):
        await self._enter("hackathon", hackathon_id)
        return self.hackathons[hackathon_id]

    async def list_my_registrations(self):
        await self._enter("registrations")
        return [self.hackathons[hid] for hid in sorted(self.registrations)]

    async def list_hackathon_participants(self, hackathon_id):
        await self._enter("participants", hackathon_id)
        return list(self.participants.get(hackathon_id, []))

    async def list_my_submissions(self, user_id=None):
        await self._enter("submissions")
        return [s for s in self.submissions.values() if user_id is None or s.submitter_id in (None, user_id)]

    async def list_hackathon_submissions(self, hackathon_id):
        await self._enter("hackathon_submissions", hackathon_id)
        return [s for s in self.submissions.values() if s.hackathon_id == hackathon_id]

    async def get_submission(self, submission_id):
        await self._enter("submission", submission_id)
        return self.submissions[submission_id]

    async def register_for_hackathon(self, hackathon_id, registration=None):
        await self._enter("register", hackathon_id)
        self.registrations.add(hackathon_id)

    async def create_submission(self, data: SubmissionWrite):
        await self._enter("create_submission", data.hackathon_id)
        record = SubmissionRecord.model_validate({**data.model_dump(), "id": f"s{len(self.submissions) + 1}", "submitter_id": self.user_id})
        self.submissions[record.id] = record
        return record

    async def update_submission(self, submission_id, data: SubmissionPatch):
        await self._enter("update_submission", submission_id)
        record = SubmissionRecord.model_validate({**self.submissions[submission_id].model_dump(), **data.model_dump(exclude_unset=True)})
        self.submissions[submission_id] = record
        return record


@pytest.fixture
def portal() -> FakePortal:
    return FakePortal(
        hackathons=[hackathon("h1"), hackathon("h2", "2025-02-01", "2025-02-10"), hackathon("h3")],
        registrations=["h1"],
        submissions=[submission("s1", "h1", "u1", status="DRAFT")],
        participants={
            "h1": [
                {"id": "u1", "firstName": "Ada", "team": {"id": "t1", "name": "Lovelace"}, "registeredAt": "2025-01-02T10:00:00Z"},
                {"id": "u2", "firstName": "Bob", "team": {"id": "t1", "name": "Lovelace"}, "registeredAt": "2025-01-01T09:00:00Z"},
                {"id": "u3", "firstName": "Cy", "registeredAt": "2025-01-03T09:00:00Z"},
            ],
        },
    )
