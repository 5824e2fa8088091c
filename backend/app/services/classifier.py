from __future__ import annotations
from dataclasses import dataclass
from app.schemas.enums import LifecyclePhase, StepState, SubmissionStatus
from app.schemas.submission import SubmissionRecord, SubmissionView, TimelineStep
from app.services.files import decode_all
from app.services.statuses import is_submitted, parse_submission_status

IN_PROGRESS = "In progress"

_C, _N, _P = StepState.COMPLETED, StepState.CURRENT, StepState.PENDING

TIMELINES: dict[str, list[tuple[str, StepState]]] = {
    "draft": [("Draft", _N), ("Offline Review", _P), ("Final Result", _P)],
    "review": [("Submitted", _C), ("Offline Review", _N), ("Final Result", _P)],
    "final": [("Submitted", _C), ("Offline Review", _C), ("Final Result", _C)],
    "winner": [("Submitted", _C), ("Offline Review", _C), ("Winner!", _C)],
}

# status -> (phase, timeline family)
_PHASES: dict[SubmissionStatus, tuple[LifecyclePhase, str]] = {
    SubmissionStatus.DRAFT: (LifecyclePhase.DRAFT, "draft"),
    SubmissionStatus.SUBMITTED: (LifecyclePhase.SUBMITTED, "review"),
    SubmissionStatus.UNDER_AI_REVIEW: (LifecyclePhase.AI_REVIEW, "review"),
    SubmissionStatus.PASSED_TO_OFFLINE_REVIEW: (LifecyclePhase.OFFLINE_REVIEW, "review"),
    SubmissionStatus.UNDER_OFFLINE_REVIEW: (LifecyclePhase.OFFLINE_REVIEW, "review"),
    SubmissionStatus.APPROVED: (LifecyclePhase.APPROVED, "final"),
    SubmissionStatus.REJECTED: (LifecyclePhase.REJECTED, "final"),
    SubmissionStatus.WINNER: (LifecyclePhase.WINNER, "winner"),
}

PHASE_LABELS = {
    LifecyclePhase.DRAFT: "Draft",
    LifecyclePhase.SUBMITTED: "Submitted",
    LifecyclePhase.AI_REVIEW: "AI Review",
    LifecyclePhase.OFFLINE_REVIEW: "Offline Review",
    LifecyclePhase.APPROVED: "Approved ✓",
    LifecyclePhase.REJECTED: "Rejected",
    LifecyclePhase.WINNER: "Winner 🏆",
}


@dataclass(frozen=True)
class Classification:
    phase: LifecyclePhase
    timeline: list[TimelineStep]
    recognized: bool  # False when a non-empty status string matched no known status


def build_timeline(family: str) -> list[TimelineStep]:
    return [
        TimelineStep(label=label, state=state, annotation=IN_PROGRESS if state == StepState.CURRENT else None)
        for label, state in TIMELINES[family]
    ]


def classify(record: SubmissionRecord) -> Classification:
    """
    Map a submission to its lifecycle phase and 3-step timeline.

    Unrecognized statuses fall back to the draft timeline with `recognized=False`;
    callers log those as a data-quality signal. When no status is present the
    legacy flags decide between draft and submitted.
    """
    status = parse_submission_status(record.status)
    recognized = status is not None or not record.status
    if status is None:
        status = SubmissionStatus.SUBMITTED if (not record.status and is_submitted(record)) else SubmissionStatus.DRAFT
    phase, family = _PHASES[status]
    return Classification(phase=phase, timeline=build_timeline(family), recognized=recognized)


def progress_for(record: SubmissionRecord | None) -> int:
    if record is None:
        return 0
    if is_submitted(record):
        return 100
    if record.is_draft is False:
        return 80  # ready to submit
    return 50


def to_view(record: SubmissionRecord) -> SubmissionView:
    result = classify(record)
    data = record.model_dump(exclude={"files"})
    return SubmissionView(
        **data,
        files=decode_all(record.files),
        lifecycle_phase=result.phase,
        phase_label=PHASE_LABELS[result.phase],
        status_recognized=result.recognized,
        is_submitted=is_submitted(record),
        progress=progress_for(record),
        timeline=result.timeline,
    )
