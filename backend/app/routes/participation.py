from __future__ import annotations
from fastapi import APIRouter, Body, Depends, Query
from app.auth_deps import get_current_user, get_portal_client
from app.config import settings
from app.schemas.hackathon import UserRef
from app.schemas.participation import AggregateView, GateDecision, OrganizerRoster, Roster
from app.schemas.submission import SubmissionPatch, SubmissionView, SubmissionWrite
from app.services import orchestrator
from app.services.gate import evaluate
from app.services.membership import joined_hackathons
from app.services.portal import PortalClient
from app.services.reconciler import pick_latest

router = APIRouter(prefix="/participation", tags=["participation"])


@router.get("/me", response_model=AggregateView)
async def my_participation(client: PortalClient = Depends(get_portal_client), user: UserRef = Depends(get_current_user)):
    return await orchestrator.loader.refresh(client, user.id, demo=settings.demo_mode)


@router.get("/hackathons/{hackathon_id}/roster", response_model=Roster)
async def hackathon_roster(hackathon_id: str, client: PortalClient = Depends(get_portal_client)):
    result = await orchestrator.load_organizer_roster(client, [hackathon_id])
    return result.rosters[0]


@router.get("/organizer/roster", response_model=OrganizerRoster)
async def organizer_roster(
    hackathon_ids: list[str] = Query(default=[], alias="hackathonId"),
    client: PortalClient = Depends(get_portal_client),
):
    return await orchestrator.load_organizer_roster(client, hackathon_ids)


@router.get("/hackathons/{hackathon_id}/gate", response_model=GateDecision)
async def hackathon_gate(hackathon_id: str, client: PortalClient = Depends(get_portal_client), user: UserRef = Depends(get_current_user)):
    hackathon = await client.get_hackathon(hackathon_id)
    registrations = await client.list_my_registrations()
    submissions = await client.list_my_submissions(user.id)
    joined = joined_hackathons(user.id, [hackathon], registrations, submissions)
    mine = pick_latest(s for s in submissions if s.hackathon_id == hackathon_id)
    return evaluate(orchestrator.utcnow(), hackathon, joined.has(hackathon_id), mine)


@router.post("/hackathons/{hackathon_id}/register", status_code=204)
async def register_for_hackathon(
    hackathon_id: str,
    registration: dict | None = Body(default=None),
    client: PortalClient = Depends(get_portal_client),
    user: UserRef = Depends(get_current_user),
):
    await orchestrator.register(client, user.id, hackathon_id, registration)


@router.get("/submissions/{submission_id}", response_model=SubmissionView)
async def get_submission(submission_id: str, client: PortalClient = Depends(get_portal_client)):
    return orchestrator.build_view(await client.get_submission(submission_id))


@router.post("/submissions", response_model=SubmissionView, status_code=201)
async def create_submission(payload: SubmissionWrite, client: PortalClient = Depends(get_portal_client), user: UserRef = Depends(get_current_user)):
    return await orchestrator.create_submission(client, user.id, payload)


@router.patch("/submissions/{submission_id}", response_model=SubmissionView)
async def update_submission(
    submission_id: str,
    payload: SubmissionPatch,
    client: PortalClient = Depends(get_portal_client),
    user: UserRef = Depends(get_current_user),
):
    return await orchestrator.update_submission(client, user.id, submission_id, payload)
