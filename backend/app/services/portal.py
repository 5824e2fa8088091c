from __future__ import annotations
from typing import Protocol
from app.schemas.hackathon import HackathonSummary, UserRef
from app.schemas.submission import SubmissionPatch, SubmissionRecord, SubmissionWrite


class PortalClient(Protocol):
    """Operations the participation layer needs from the portal API."""

    async def get_current_user(self) -> UserRef: ...

    async def list_hackathons(self) -> list[HackathonSummary]: ...

    async def get_hackathon(self, hackathon_id: str) -> HackathonSummary: ...

    async def list_my_registrations(self) -> list[HackathonSummary]: ...

    async def list_hackathon_participants(self, hackathon_id: str) -> list[dict]: ...

    async def list_my_submissions(self, user_id: str | None = None) -> list[SubmissionRecord]: ...

    async def list_hackathon_submissions(self, hackathon_id: str) -> list[SubmissionRecord]: ...

    async def get_submission(self, submission_id: str) -> SubmissionRecord: ...

    async def register_for_hackathon(self, hackathon_id: str, registration: dict | None = None) -> None: ...

    async def create_submission(self, data: SubmissionWrite) -> SubmissionRecord: ...

    async def update_submission(self, submission_id: str, data: SubmissionPatch) -> SubmissionRecord: ...
