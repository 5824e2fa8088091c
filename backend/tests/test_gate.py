from __future__ import annotations
from datetime import datetime, timezone
import pytest
from app.errors import DeadlinePassed, NotRegistered
from app.schemas.enums import GateAction, GateReason
from app.services.gate import ensure_can_mutate, evaluate
from conftest import hackathon, submission

UTC = timezone.utc
BEFORE = datetime(2025, 1, 5, tzinfo=UTC)
DURING = datetime(2025, 1, 15, tzinfo=UTC)
AFTER = datetime(2025, 1, 25, tzinfo=UTC)

DRAFT = submission(status="DRAFT")
SENT = submission(status="SUBMITTED", submittedAt="2025-01-12T00:00:00Z")


def test_not_registered_always_offers_registration():
    for now in (BEFORE, DURING, AFTER):
        d = evaluate(now, hackathon(), False, None)
        assert d.action == GateAction.REGISTER
        assert d.label == "Register for Hackathon"
        assert d.disabled is False
        assert d.reason_code == GateReason.NOT_REGISTERED


def test_before_window_is_disabled():
    d = evaluate(BEFORE, hackathon(), True, None)
    assert d.action == GateAction.SUBMISSION_OPENS_SOON
    assert d.label == "Submission Opens Soon"
    assert d.disabled is True
    assert d.reason_code == GateReason.WINDOW_NOT_OPEN


def test_open_window_without_submission():
    d = evaluate(DURING, hackathon(), True, None)
    assert (d.action, d.disabled, d.reason_code) == (GateAction.SUBMIT_PROJECT, False, GateReason.READY_TO_SUBMIT)


def test_window_bounds_are_inclusive():
    h = hackathon()
    assert evaluate(h.start_date, h, True, None).action == GateAction.SUBMIT_PROJECT
    assert evaluate(h.submission_deadline, h, True, None).action == GateAction.SUBMIT_PROJECT


@pytest.mark.parametrize("now", [BEFORE, DURING, AFTER])
def test_submitted_is_viewable_at_any_time(now):
    d = evaluate(now, hackathon(), True, SENT)
    assert d.action == GateAction.VIEW_SUBMISSION
    assert d.disabled is False
    assert d.reason_code == GateReason.ALREADY_SUBMITTED


def test_draft_in_window_continues():
    d = evaluate(DURING, hackathon(), True, DRAFT)
    assert d.action == GateAction.CONTINUE_PROJECT
    assert d.label == "Continue Project"


def test_draft_after_deadline_is_read_only():
    d = evaluate(AFTER, hackathon(), True, DRAFT)
    assert d.action == GateAction.VIEW_DRAFT
    assert d.disabled is False
    assert d.reason_code == GateReason.DRAFT_LOCKED


def test_nothing_submitted_after_deadline():
    d = evaluate(AFTER, hackathon(), True, None)
    assert d.action == GateAction.SUBMISSIONS_CLOSED
    assert d.disabled is True
    assert d.reason_code == GateReason.WINDOW_CLOSED


def test_deadline_falls_back_to_end_date():
    h = hackathon(deadline=None, endDate="2025-01-30")
    assert evaluate(AFTER, h, True, None).action == GateAction.SUBMIT_PROJECT
    assert evaluate(datetime(2025, 2, 1, tzinfo=UTC), h, True, None).action == GateAction.SUBMISSIONS_CLOSED


def test_unscheduled_hackathon_is_open():
    h = hackathon(start=None, deadline=None)
    assert evaluate(AFTER, h, True, None).action == GateAction.SUBMIT_PROJECT


def test_flag_submitted_without_status():
    legacy = submission(submittedAt="2025-01-12T00:00:00Z")
    assert evaluate(AFTER, hackathon(), True, legacy).action == GateAction.VIEW_SUBMISSION


def test_mutation_recheck():
    ensure_can_mutate(DURING, hackathon(), True)
    with pytest.raises(NotRegistered):
        ensure_can_mutate(DURING, hackathon(), False)
    with pytest.raises(DeadlinePassed):
        ensure_can_mutate(AFTER, hackathon(), True)
