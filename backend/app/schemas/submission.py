from __future__ import annotations
from typing import Any
from pydantic import BaseModel, Field, computed_field, field_validator
from app.schemas.common import PortalModel, Timestamp
from app.schemas.enums import FileCategory, LifecyclePhase, StepState


class SubmissionRecord(PortalModel):
    id: str
    hackathon_id: str
    submitter_id: str | None = None
    team_id: str | None = None
    title: str = ""
    description: str = ""
    tech_stack: list[str] = Field(default_factory=list)
    repository_url: str | None = None
    demo_url: str | None = None
    files: Any = None  # untyped on the wire: JSON string, list of strings or list of objects
    status: str | None = None
    submitted_at: Timestamp = None
    created_at: Timestamp = None
    updated_at: Timestamp = None
    is_draft: bool | None = None
    is_final: bool | None = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any):
        return v or ""

    @field_validator("tech_stack", mode="before")
    @classmethod
    def split_tech_stack(cls, v: Any):
        if v is None:
            return []
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v


class FileDescriptor(BaseModel):
    name: str = Field(min_length=1)
    url: str
    size: int = Field(ge=0, default=0)
    type: str = ""
    category: FileCategory = FileCategory.PROJECT


class TimelineStep(BaseModel):
    label: str
    state: StepState
    annotation: str | None = None  # only set on the current step


class SubmissionView(SubmissionRecord):
    files: list[FileDescriptor] = Field(default_factory=list)
    lifecycle_phase: LifecyclePhase
    phase_label: str
    status_recognized: bool = True
    is_submitted: bool = False
    progress: int = Field(ge=0, le=100, default=0)
    timeline: list[TimelineStep] = Field(default_factory=list)

    @computed_field(alias="projectFiles")
    @property
    def project_files(self) -> list[FileDescriptor]:
        return [f for f in self.files if f.category == FileCategory.PROJECT]

    @computed_field(alias="presentationFiles")
    @property
    def presentation_files(self) -> list[FileDescriptor]:
        return [f for f in self.files if f.category == FileCategory.PRESENTATION]


class SubmissionWrite(PortalModel):
    """Payload for create/update; passed through to the portal after the gate check."""

    hackathon_id: str
    team_id: str | None = None
    title: str = Field(min_length=1, max_length=200)
    description: str = ""
    tech_stack: list[str] = Field(default_factory=list)
    repository_url: str | None = None
    demo_url: str | None = None
    files: list[dict] = Field(default_factory=list)
    is_draft: bool = True


class SubmissionPatch(PortalModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    tech_stack: list[str] | None = None
    repository_url: str | None = None
    demo_url: str | None = None
    files: list[dict] | None = None
    is_draft: bool | None = None
