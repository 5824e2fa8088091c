from __future__ import annotations
from typing import Any
from pydantic import Field, field_validator
import structlog
from app.schemas.common import PortalModel, Timestamp
from app.schemas.enums import HackathonStatus
from app.services.statuses import parse_hackathon_status

log = structlog.get_logger()


class UserRef(PortalModel):
    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""

    @field_validator("first_name", "last_name", "email", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any):
        return v or ""


def _member_is_usable(raw: Any) -> bool:
    if not isinstance(raw, dict):
        return isinstance(raw, TeamMemberRef)
    user = raw.get("user")
    if isinstance(user, dict):
        return user.get("id") is not None
    return raw.get("userId") is not None or raw.get("user_id") is not None


class TeamMemberRef(PortalModel):
    """A roster entry; the portal wraps the member's user, older payloads carry only `userId`."""

    user: UserRef | None = None
    user_id: str | None = None
    role: str | None = None

    @property
    def member_user_id(self) -> str | None:
        if self.user is not None:
            return self.user.id
        return self.user_id


class TeamRecord(PortalModel):
    id: str
    name: str = ""
    members: list[TeamMemberRef] = Field(default_factory=list)
    registered_at: Timestamp = None

    @field_validator("members", mode="before")
    @classmethod
    def usable_members(cls, v: Any):
        # One bad roster entry must not sink the team or its hackathon.
        if not isinstance(v, list):
            return v or []
        members = [m for m in v if _member_is_usable(m)]
        if len(members) != len(v):
            log.warning("team_member_skipped", count=len(v) - len(members), reason="missing_user_id")
        return members


class HackathonSummary(PortalModel):
    id: str
    title: str = ""
    status: HackathonStatus | None = None
    organizer_id: str | None = None
    registration_start: Timestamp = None
    registration_end: Timestamp = None
    start_date: Timestamp = None
    end_date: Timestamp = None
    submission_deadline: Timestamp = None
    min_team_size: int = 1
    max_team_size: int = 1
    teams: list[TeamRecord] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def canonical_status(cls, v: Any):
        if v is None or isinstance(v, HackathonStatus):
            return v
        return parse_hackathon_status(v)

    @field_validator("teams", mode="before")
    @classmethod
    def usable_teams(cls, v: Any):
        if not isinstance(v, list):
            return v or []
        teams = [t for t in v if isinstance(t, TeamRecord) or (isinstance(t, dict) and t.get("id") is not None)]
        if len(teams) != len(v):
            log.warning("team_skipped", count=len(v) - len(teams), reason="missing_team_id")
        return teams

    @field_validator("min_team_size", "max_team_size", mode="before")
    @classmethod
    def default_team_size(cls, v: Any):
        return 1 if v is None else v
