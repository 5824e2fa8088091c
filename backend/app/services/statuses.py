from __future__ import annotations
from typing import Any
from app.schemas.enums import HackathonStatus, SubmissionStatus


def status_key(raw: Any) -> str:
    """Case-folded, separator-free form: `AI_REVIEWED`, `ai-reviewed` and `Ai Reviewed` collide."""
    return "".join(ch for ch in str(raw).casefold() if ch not in "_- ")


_SUBMISSION_STATUSES = {status_key(s.value): s for s in SubmissionStatus}
_SUBMISSION_STATUSES.update({
    status_key("AI_REVIEWED"): SubmissionStatus.PASSED_TO_OFFLINE_REVIEW,
    status_key("AI_REVIEW"): SubmissionStatus.UNDER_AI_REVIEW,
    status_key("OFFLINE_REVIEW"): SubmissionStatus.UNDER_OFFLINE_REVIEW,
    status_key("SELECTED"): SubmissionStatus.APPROVED,
})

_HACKATHON_STATUSES = {status_key(s.value): s for s in HackathonStatus}
_HACKATHON_STATUSES.update({
    status_key("PUBLISHED"): HackathonStatus.UPCOMING,
    status_key("LIVE"): HackathonStatus.IN_PROGRESS,
    status_key("CANCELED"): HackathonStatus.CANCELLED,
})

ACTIVE_HACKATHON_STATUSES = frozenset({
    HackathonStatus.UPCOMING,
    HackathonStatus.REGISTRATION_OPEN,
    HackathonStatus.IN_PROGRESS,
    HackathonStatus.SUBMISSION_OPEN,
})


def parse_submission_status(raw: Any) -> SubmissionStatus | None:
    if raw is None:
        return None
    if isinstance(raw, SubmissionStatus):
        return raw
    return _SUBMISSION_STATUSES.get(status_key(raw))


def parse_hackathon_status(raw: Any) -> HackathonStatus | None:
    if raw is None:
        return None
    if isinstance(raw, HackathonStatus):
        return raw
    return _HACKATHON_STATUSES.get(status_key(raw))


def is_active_hackathon(status: HackathonStatus | None) -> bool:
    return status in ACTIVE_HACKATHON_STATUSES


def is_submitted(record) -> bool:
    """
    Whether a submission has left the draft stage.

    A recognized `status` is authoritative; the legacy flags (`submittedAt`,
    `isFinal`) only decide when no status is present. An unknown status counts
    as a draft, matching the classifier's fallback.
    """
    status = parse_submission_status(record.status)
    if status is not None:
        return status != SubmissionStatus.DRAFT
    if record.status:
        return False
    return record.submitted_at is not None or bool(record.is_final)
