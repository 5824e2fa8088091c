from __future__ import annotations
from datetime import datetime
import structlog
from app.errors import DeadlinePassed, NotRegistered
from app.schemas.enums import GateAction, GateReason
from app.schemas.hackathon import HackathonSummary
from app.schemas.participation import GateDecision
from app.schemas.submission import SubmissionRecord
from app.services.statuses import is_submitted
from app.services.time_windows import deadline_passed, ensure_utc, submission_window, window_state

log = structlog.get_logger()

LABELS = {
    GateAction.REGISTER: "Register for Hackathon",
    GateAction.SUBMISSION_OPENS_SOON: "Submission Opens Soon",
    GateAction.SUBMIT_PROJECT: "Submit Project",
    GateAction.VIEW_SUBMISSION: "View Submission",
    GateAction.CONTINUE_PROJECT: "Continue Project",
    GateAction.VIEW_DRAFT: "View Draft",
    GateAction.SUBMISSIONS_CLOSED: "Submissions Closed",
}


def _decision(action: GateAction, disabled: bool, reason: GateReason) -> GateDecision:
    return GateDecision(action=action, label=LABELS[action], disabled=disabled, reason_code=reason)


def evaluate(now: datetime, hackathon: HackathonSummary, is_registered: bool, submission: SubmissionRecord | None) -> GateDecision:
    """
    Call-to-action for a hackathon card.

    Viewing an existing submission is never blocked by time; a draft turns
    read-only once the deadline has passed. `is_registered` is true for any
    membership signal: a team member who never registered individually gets
    the same actions as a registrant.
    """
    if not is_registered:
        return _decision(GateAction.REGISTER, False, GateReason.NOT_REGISTERED)

    opens_at, deadline = submission_window(hackathon)
    state = window_state(now, opens_at, deadline)

    if submission is not None and is_submitted(submission):
        return _decision(GateAction.VIEW_SUBMISSION, False, GateReason.ALREADY_SUBMITTED)
    if state == "upcoming":
        return _decision(GateAction.SUBMISSION_OPENS_SOON, True, GateReason.WINDOW_NOT_OPEN)

    if submission is not None:
        if state == "passed":
            return _decision(GateAction.VIEW_DRAFT, False, GateReason.DRAFT_LOCKED)
        return _decision(GateAction.CONTINUE_PROJECT, False, GateReason.DRAFT_IN_PROGRESS)

    if state == "passed":
        return _decision(GateAction.SUBMISSIONS_CLOSED, True, GateReason.WINDOW_CLOSED)
    return _decision(GateAction.SUBMIT_PROJECT, False, GateReason.READY_TO_SUBMIT)


def ensure_can_mutate(now: datetime, hackathon: HackathonSummary, is_registered: bool) -> None:
    """
    Re-check the gate at the moment of a create/update call. Raises NotRegistered or DeadlinePassed.

    A form can stay open past the deadline, so render-time decisions are not trusted.
    """
    if not is_registered:
        log.info("gate_violation", hackathon_id=hackathon.id, code=NotRegistered.code)
        raise NotRegistered(f"Not registered for hackathon {hackathon.id}")
    _, deadline = submission_window(hackathon)
    if deadline_passed(now, deadline):
        log.info("gate_violation", hackathon_id=hackathon.id, code=DeadlinePassed.code)
        raise DeadlinePassed(f"Submission deadline passed at {ensure_utc(deadline).isoformat()}")
