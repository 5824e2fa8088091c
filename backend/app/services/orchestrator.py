from __future__ import annotations
import asyncio
import itertools
from datetime import datetime, timezone as dt_tz
from typing import Any, Awaitable, Iterable
import structlog
from app.config import settings
from app.errors import FetchFailure, RegistrationClosed, StaleAggregation
from app.schemas.hackathon import HackathonSummary
from app.schemas.participation import (
    AggregateView, DashboardStats, FetchFailureReport, HackathonParticipation,
    JoinedHackathons, OrganizerRoster, Roster,
)
from app.schemas.submission import SubmissionPatch, SubmissionRecord, SubmissionView, SubmissionWrite
from app.services.classifier import to_view
from app.services.gate import ensure_can_mutate, evaluate
from app.services.membership import joined_hackathons
from app.services.portal import PortalClient
from app.services.reconciler import participant_index, pick_latest, reconcile
from app.services.statuses import is_active_hackathon
from app.services.time_windows import ensure_utc

log = structlog.get_logger()


def utcnow() -> datetime:
    return datetime.now(dt_tz.utc)


async def _guarded(call: Awaitable[Any], failures: list[FetchFailureReport], default: Any, source: str, hackathon_id: str | None = None) -> Any:
    """Await one source; a FetchFailure becomes `default` plus one report. AuthExpired propagates."""
    try:
        return await call
    except FetchFailure as e:
        log.warning("participation_fetch_failed", source=e.source or source, hackathon_id=e.hackathon_id or hackathon_id, error=e.message)
        failures.append(FetchFailureReport(source=e.source or source, hackathon_id=e.hackathon_id or hackathon_id, message=e.message))
        return default


def build_view(record: SubmissionRecord) -> SubmissionView:
    view = to_view(record)
    if not view.status_recognized:
        log.warning("unrecognized_submission_status", submission_id=record.id, status=record.status)
    return view


def _hackathon_index(*collections: Iterable[HackathonSummary]) -> dict[str, HackathonSummary]:
    # Later collections win; callers pass the fullest source last.
    index: dict[str, HackathonSummary] = {}
    for collection in collections:
        for h in collection:
            index[h.id] = h
    return index


async def _fetch_rosters(client: PortalClient, hackathon_ids: Iterable[str], failures: list[FetchFailureReport], enrich: bool = False) -> list[Roster]:
    sem = asyncio.Semaphore(max(1, settings.participant_fetch_concurrency))

    async def one(hid: str) -> Roster:
        async with sem:
            if enrich:
                raw, subs = await asyncio.gather(
                    _guarded(client.list_hackathon_participants(hid), failures, [], "participants", hid),
                    _guarded(client.list_hackathon_submissions(hid), failures, None, "submissions", hid),
                )
            else:
                raw = await _guarded(client.list_hackathon_participants(hid), failures, [], "participants", hid)
                subs = None
        return reconcile(hid, raw, submissions=subs)

    return list(await asyncio.gather(*(one(hid) for hid in hackathon_ids)))


async def load_participation_state(client: PortalClient, user_id: str, now: datetime | None = None, generation: int = 0, demo: bool = False) -> AggregateView:
    """
    One aggregation pass for a participant's dashboard.

    Hackathons, registrations and the user's submissions are fetched concurrently,
    then the roster of every joined hackathon. A failed source contributes an empty
    result and one entry in `failures`; nothing is substituted from other sources.
    """
    now = ensure_utc(now or utcnow())
    failures: list[FetchFailureReport] = []

    hackathons, registrations, submissions = await asyncio.gather(
        _guarded(client.list_hackathons(), failures, [], "hackathons"),
        _guarded(client.list_my_registrations(), failures, [], "registrations"),
        _guarded(client.list_my_submissions(user_id), failures, [], "submissions"),
    )
    joined: JoinedHackathons = joined_hackathons(user_id, hackathons, registrations, submissions)
    index = _hackathon_index(registrations, hackathons)

    joined_ids = sorted(hid for hid in joined.ids if hid in index)
    for hid in sorted(joined.ids - set(index)):
        log.info("joined_hackathon_without_summary", hackathon_id=hid, signals=sorted(s.value for s in joined.signals_for(hid)))
    rosters = {r.hackathon_id: r for r in await _fetch_rosters(client, joined_ids, failures)}

    views = {s.id: build_view(s) for s in submissions}
    cards: list[HackathonParticipation] = []
    for hid, hackathon in sorted(index.items()):
        mine = pick_latest(s for s in submissions if s.hackathon_id == hid)
        cards.append(HackathonParticipation(
            hackathon=hackathon,
            joined=joined.has(hid),
            signals=sorted(joined.signals_for(hid), key=lambda s: s.value),
            gate=evaluate(now, hackathon, joined.has(hid), mine),
            submission=views[mine.id] if mine is not None else None,
            roster=rosters.get(hid),
        ))

    stats = DashboardStats(
        joined=len(joined.ids),
        active=sum(1 for hid in joined.ids if hid in index and is_active_hackathon(index[hid].status)),
        submitted=sum(1 for v in views.values() if v.is_submitted),
        drafts=sum(1 for v in views.values() if not v.is_submitted),
    )
    return AggregateView(
        user_id=user_id,
        generation=generation,
        generated_at=now,
        demo=demo,
        hackathons=cards,
        submissions=sorted(views.values(), key=lambda v: v.id),
        failures=failures,
        stats=stats,
    )


async def load_organizer_roster(client: PortalClient, hackathon_ids: Iterable[str]) -> OrganizerRoster:
    """Rosters of several hackathons, enriched with submissions and keyed by (userId, hackathonId)."""
    failures: list[FetchFailureReport] = []
    rosters = await _fetch_rosters(client, sorted(set(hackathon_ids)), failures, enrich=True)
    index = participant_index(rosters)
    participants = [index[key] for key in sorted(index)]
    return OrganizerRoster(rosters=rosters, participants=participants, failures=failures)


class ParticipationLoader:
    """
    Last-aggregation-wins for dashboard refreshes.

    Starting a refresh for a user cancels that user's previous in-flight pass;
    a pass that still finishes after a newer one started raises StaleAggregation
    and its view is dropped. Nothing is kept once a pass settles.
    """

    def __init__(self):
        # Generations are unique across users so a pruned entry can never be confused with a new pass.
        self._counter = itertools.count(1)
        self._generations: dict[str, int] = {}
        self._inflight: dict[str, asyncio.Task] = {}

    async def refresh(self, client: PortalClient, user_id: str, now: datetime | None = None, demo: bool = False) -> AggregateView:
        generation = next(self._counter)
        self._generations[user_id] = generation
        previous = self._inflight.get(user_id)
        if previous is not None and not previous.done():
            previous.cancel()

        task = asyncio.ensure_future(load_participation_state(client, user_id, now=now, generation=generation, demo=demo))
        self._inflight[user_id] = task
        try:
            view = await task
        except asyncio.CancelledError:
            if self._generations.get(user_id) != generation:
                log.info("stale_aggregation_discarded", user_id=user_id, generation=generation)
                raise StaleAggregation(f"Refresh {generation} superseded")
            raise
        finally:
            if self._inflight.get(user_id) is task:
                del self._inflight[user_id]
            current = self._generations.get(user_id) == generation
            if current:
                del self._generations[user_id]

        if not current:
            log.info("stale_aggregation_discarded", user_id=user_id, generation=generation)
            raise StaleAggregation(f"Refresh {generation} superseded")
        return view


loader = ParticipationLoader()


async def _joined_for(client: PortalClient, user_id: str, hackathon: HackathonSummary) -> JoinedHackathons:
    registrations, submissions = await asyncio.gather(
        client.list_my_registrations(),
        client.list_my_submissions(user_id),
    )
    return joined_hackathons(user_id, [hackathon], registrations, submissions)


async def register(client: PortalClient, user_id: str, hackathon_id: str, registration: dict | None = None, now: datetime | None = None) -> None:
    now = ensure_utc(now or utcnow())
    hackathon = await client.get_hackathon(hackathon_id)
    if hackathon.registration_end is not None and now > hackathon.registration_end:
        raise RegistrationClosed(f"Registration for {hackathon_id} closed at {hackathon.registration_end.isoformat()}")
    await client.register_for_hackathon(hackathon_id, registration)
    log.info("registered", user_id=user_id, hackathon_id=hackathon_id)


async def create_submission(client: PortalClient, user_id: str, data: SubmissionWrite, now: datetime | None = None) -> SubmissionView:
    now = ensure_utc(now or utcnow())
    hackathon = await client.get_hackathon(data.hackathon_id)
    joined = await _joined_for(client, user_id, hackathon)
    ensure_can_mutate(now, hackathon, joined.has(hackathon.id))
    record = await client.create_submission(data)
    log.info("submission_created", user_id=user_id, hackathon_id=hackathon.id, submission_id=record.id)
    return build_view(record)


async def update_submission(client: PortalClient, user_id: str, submission_id: str, data: SubmissionPatch, now: datetime | None = None) -> SubmissionView:
    now = ensure_utc(now or utcnow())
    current = await client.get_submission(submission_id)
    hackathon = await client.get_hackathon(current.hackathon_id)
    joined = await _joined_for(client, user_id, hackathon)
    ensure_can_mutate(now, hackathon, joined.has(hackathon.id))
    record = await client.update_submission(submission_id, data)
    log.info("submission_updated", user_id=user_id, hackathon_id=hackathon.id, submission_id=record.id)
    return build_view(record)
