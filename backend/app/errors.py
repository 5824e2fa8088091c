from __future__ import annotations


class ParticipationError(Exception):
    """Base class for named participation failures surfaced to callers."""

    code = "participation_error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.code)
        self.message = message or self.code


class FetchFailure(ParticipationError):
    code = "fetch_failure"

    def __init__(self, source: str, message: str | None = None, hackathon_id: str | None = None, status_code: int | None = None):
        super().__init__(message or f"Failed to fetch {source}")
        self.source = source
        self.hackathon_id = hackathon_id
        self.status_code = status_code


class AuthExpired(ParticipationError):
    code = "auth_expired"


class DeadlinePassed(ParticipationError):
    code = "deadline_passed"


class NotRegistered(ParticipationError):
    code = "not_registered"


class AlreadyRegistered(ParticipationError):
    code = "already_registered"


class RegistrationClosed(ParticipationError):
    code = "registration_closed"


class SubmissionValidationError(ParticipationError):
    code = "validation_error"


class StaleAggregation(ParticipationError):
    """A newer aggregation pass started for the same user; this result is discarded."""

    code = "stale_aggregation"
