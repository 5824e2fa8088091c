from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel, Field
from app.schemas.common import PortalModel, Timestamp
from app.schemas.enums import GateAction, GateReason, MembershipSignal
from app.schemas.hackathon import HackathonSummary
from app.schemas.submission import SubmissionView


class ParticipantRecord(PortalModel):
    id: str
    hackathon_id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    team_id: str | None = None
    team_name: str | None = None
    registered_at: Timestamp = None
    has_submission: bool = False
    submission_id: str | None = None

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or "Unknown"


class TeamGroup(PortalModel):
    id: str
    hackathon_id: str
    name: str = ""
    members: list[ParticipantRecord] = Field(default_factory=list)
    registered_at: Timestamp = None
    # Value declared by the portal on the team entry; `registered_at` falls back to the earliest member.
    declared_registered_at: Timestamp = Field(default=None, exclude=True)

    @property
    def member_ids(self) -> frozenset[str]:
        return frozenset(m.id for m in self.members)


class Roster(PortalModel):
    hackathon_id: str
    teams: list[TeamGroup] = Field(default_factory=list)
    individuals: list[ParticipantRecord] = Field(default_factory=list)

    def participants(self) -> list[ParticipantRecord]:
        out = [m for t in self.teams for m in t.members]
        out.extend(self.individuals)
        return out

    def signature(self) -> tuple[frozenset, frozenset]:
        """Order-free identity of the roster: (teamId, memberSet) pairs and individual ids."""
        return (
            frozenset((t.id, t.member_ids) for t in self.teams),
            frozenset(p.id for p in self.individuals),
        )


class JoinedHackathons(BaseModel):
    """Joined hackathon ids with the membership signal(s) that asserted each one."""

    user_id: str
    signals: dict[str, frozenset[MembershipSignal]] = Field(default_factory=dict)

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(self.signals)

    def has(self, hackathon_id: str) -> bool:
        return hackathon_id in self.signals

    def signals_for(self, hackathon_id: str) -> frozenset[MembershipSignal]:
        return self.signals.get(hackathon_id, frozenset())

    def merge(self, other: JoinedHackathons) -> JoinedHackathons:
        if other.user_id != self.user_id:
            raise ValueError("cannot merge memberships of different users")
        merged = dict(self.signals)
        for hid, sigs in other.signals.items():
            merged[hid] = merged.get(hid, frozenset()) | sigs
        return JoinedHackathons(user_id=self.user_id, signals=merged)


class GateDecision(BaseModel):
    action: GateAction
    label: str
    disabled: bool
    reason_code: GateReason


class FetchFailureReport(BaseModel):
    source: str
    hackathon_id: str | None = None
    message: str


class HackathonParticipation(PortalModel):
    hackathon: HackathonSummary
    joined: bool
    signals: list[MembershipSignal] = Field(default_factory=list)
    gate: GateDecision
    submission: SubmissionView | None = None
    roster: Roster | None = None


class DashboardStats(BaseModel):
    joined: int = 0
    active: int = 0
    submitted: int = 0
    drafts: int = 0


class AggregateView(PortalModel):
    user_id: str
    generation: int = 0
    generated_at: datetime
    demo: bool = False
    hackathons: list[HackathonParticipation] = Field(default_factory=list)
    submissions: list[SubmissionView] = Field(default_factory=list)
    failures: list[FetchFailureReport] = Field(default_factory=list)
    stats: DashboardStats = Field(default_factory=DashboardStats)


class OrganizerRoster(PortalModel):
    rosters: list[Roster] = Field(default_factory=list)
    participants: list[ParticipantRecord] = Field(default_factory=list)
    failures: list[FetchFailureReport] = Field(default_factory=list)


class PendingAction(BaseModel):
    action: str = Field(min_length=1, max_length=64)
    hackathon_id: str | None = None
    payload: dict = Field(default_factory=dict)
