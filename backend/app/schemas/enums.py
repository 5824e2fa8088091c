from __future__ import annotations
from enum import Enum


class HackathonStatus(str, Enum):
    DRAFT = "DRAFT"
    UPCOMING = "UPCOMING"
    REGISTRATION_OPEN = "REGISTRATION_OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    SUBMISSION_OPEN = "SUBMISSION_OPEN"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class SubmissionStatus(str, Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    UNDER_AI_REVIEW = "UNDER_AI_REVIEW"
    PASSED_TO_OFFLINE_REVIEW = "PASSED_TO_OFFLINE_REVIEW"
    UNDER_OFFLINE_REVIEW = "UNDER_OFFLINE_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    WINNER = "WINNER"


class LifecyclePhase(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    AI_REVIEW = "ai_review"
    OFFLINE_REVIEW = "offline_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    WINNER = "winner"


class StepState(str, Enum):
    COMPLETED = "completed"
    CURRENT = "current"
    PENDING = "pending"


class FileCategory(str, Enum):
    PROJECT = "project"
    PRESENTATION = "presentation"


class MembershipSignal(str, Enum):
    REGISTRATION = "registration"
    SUBMISSION = "submission"
    TEAM = "team"


class GateAction(str, Enum):
    REGISTER = "Register"
    SUBMISSION_OPENS_SOON = "SubmissionOpensSoon"
    SUBMIT_PROJECT = "SubmitProject"
    VIEW_SUBMISSION = "ViewSubmission"
    CONTINUE_PROJECT = "ContinueProject"
    VIEW_DRAFT = "ViewDraft"
    SUBMISSIONS_CLOSED = "SubmissionsClosed"


class GateReason(str, Enum):
    NOT_REGISTERED = "not_registered"
    WINDOW_NOT_OPEN = "window_not_open"
    READY_TO_SUBMIT = "ready_to_submit"
    ALREADY_SUBMITTED = "already_submitted"
    DRAFT_IN_PROGRESS = "draft_in_progress"
    DRAFT_LOCKED = "draft_locked"
    WINDOW_CLOSED = "window_closed"
