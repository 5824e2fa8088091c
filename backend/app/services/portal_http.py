from __future__ import annotations
from typing import Any
import httpx
import structlog
from pydantic import ValidationError
from app.config import settings
from app.errors import (
    AlreadyRegistered, AuthExpired, DeadlinePassed, FetchFailure,
    RegistrationClosed, SubmissionValidationError,
)
from app.schemas.hackathon import HackathonSummary, UserRef
from app.schemas.submission import SubmissionPatch, SubmissionRecord, SubmissionWrite

log = structlog.get_logger()

NO_CACHE = {"Cache-Control": "no-cache, no-store, must-revalidate", "Pragma": "no-cache", "Expires": "0"}


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        msg = body.get("message") or body.get("detail") or body.get("error")
        if isinstance(msg, list):
            return "; ".join(str(m) for m in msg)
        if msg:
            return str(msg)
    return f"HTTP {response.status_code}"


def _unwrap(body: Any) -> Any:
    if isinstance(body, dict) and isinstance(body.get("data"), (list, dict)):
        return body["data"]
    return body


def _as_list(body: Any, source: str) -> list:
    body = _unwrap(body)
    if body is None:
        return []
    if not isinstance(body, list):
        raise FetchFailure(source, f"Expected a list from {source}")
    return body


class HttpPortalClient:
    """Async client for the portal REST API; forwards the caller's bearer token."""

    def __init__(self, token: str | None, base_url: str | None = None, transport: httpx.AsyncBaseTransport | None = None, timeout: float | None = None):
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.portal_api_url,
            headers=headers,
            timeout=timeout or settings.portal_api_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> HttpPortalClient:
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, source: str, hackathon_id: str | None = None, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise FetchFailure(source, f"{source}: {e.__class__.__name__}", hackathon_id=hackathon_id) from e
        if response.status_code == 401:
            raise AuthExpired(_error_message(response))
        return response

    async def _get_json(self, path: str, source: str, hackathon_id: str | None = None, **kwargs) -> Any:
        response = await self._request("GET", path, source, hackathon_id=hackathon_id, **kwargs)
        if response.is_error:
            raise FetchFailure(source, _error_message(response), hackathon_id=hackathon_id, status_code=response.status_code)
        try:
            return response.json()
        except ValueError as e:
            raise FetchFailure(source, f"{source}: invalid JSON", hackathon_id=hackathon_id) from e

    def _parse(self, model, items: list, source: str) -> list:
        out = []
        for item in items:
            try:
                out.append(model.model_validate(item))
            except ValidationError as e:
                log.warning("portal_record_skipped", source=source, errors=e.error_count())
        return out

    async def get_current_user(self) -> UserRef:
        body = _unwrap(await self._get_json("/auth/me", "current_user"))
        if isinstance(body, dict) and isinstance(body.get("user"), dict):
            body = body["user"]
        return UserRef.model_validate(body)

    async def list_hackathons(self) -> list[HackathonSummary]:
        items = _as_list(await self._get_json("/hackathons", "hackathons"), "hackathons")
        return self._parse(HackathonSummary, items, "hackathons")

    async def get_hackathon(self, hackathon_id: str) -> HackathonSummary:
        body = await self._get_json(f"/hackathons/{hackathon_id}", "hackathon", hackathon_id=hackathon_id)
        return HackathonSummary.model_validate(_unwrap(body))

    async def list_my_registrations(self) -> list[HackathonSummary]:
        items = _as_list(await self._get_json("/hackathons/my-hackathons", "registrations"), "registrations")
        return self._parse(HackathonSummary, items, "registrations")

    async def list_hackathon_participants(self, hackathon_id: str) -> list[dict]:
        body = await self._get_json(f"/hackathons/{hackathon_id}/participants", "participants", hackathon_id=hackathon_id, headers=NO_CACHE)
        return _as_list(body, "participants")

    async def list_my_submissions(self, user_id: str | None = None) -> list[SubmissionRecord]:
        params = {"userId": user_id} if user_id else None
        items = _as_list(await self._get_json("/submissions", "submissions", params=params), "submissions")
        return self._parse(SubmissionRecord, items, "submissions")

    async def list_hackathon_submissions(self, hackathon_id: str) -> list[SubmissionRecord]:
        body = await self._get_json("/submissions", "submissions", hackathon_id=hackathon_id, params={"hackathonId": hackathon_id})
        return self._parse(SubmissionRecord, _as_list(body, "submissions"), "submissions")

    async def get_submission(self, submission_id: str) -> SubmissionRecord:
        body = await self._get_json(f"/submissions/{submission_id}", "submission")
        return SubmissionRecord.model_validate(_unwrap(body))

    async def register_for_hackathon(self, hackathon_id: str, registration: dict | None = None) -> None:
        response = await self._request("POST", f"/hackathons/{hackathon_id}/register", "register", hackathon_id=hackathon_id, json=registration or {})
        if response.status_code == 409:
            raise AlreadyRegistered(_error_message(response))
        if response.status_code in (400, 403):
            raise RegistrationClosed(_error_message(response))
        if response.is_error:
            raise FetchFailure("register", _error_message(response), hackathon_id=hackathon_id, status_code=response.status_code)

    async def _write_submission(self, method: str, path: str, payload: dict, hackathon_id: str | None = None) -> SubmissionRecord:
        response = await self._request(method, path, "submission_write", hackathon_id=hackathon_id, json=payload)
        if response.status_code in (400, 422):
            message = _error_message(response)
            if "deadline" in message.lower():
                raise DeadlinePassed(message)
            raise SubmissionValidationError(message)
        if response.is_error:
            raise FetchFailure("submission_write", _error_message(response), hackathon_id=hackathon_id, status_code=response.status_code)
        return SubmissionRecord.model_validate(_unwrap(response.json()))

    async def create_submission(self, data: SubmissionWrite) -> SubmissionRecord:
        payload = data.model_dump(mode="json", by_alias=True)
        return await self._write_submission("POST", "/submissions", payload, hackathon_id=data.hackathon_id)

    async def update_submission(self, submission_id: str, data: SubmissionPatch) -> SubmissionRecord:
        payload = data.model_dump(mode="json", by_alias=True, exclude_unset=True)
        return await self._write_submission("PATCH", f"/submissions/{submission_id}", payload)
