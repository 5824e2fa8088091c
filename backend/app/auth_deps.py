from __future__ import annotations
from typing import AsyncGenerator
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.config import settings
from app.schemas.hackathon import UserRef
from app.services.demo_portal import DemoPortalClient
from app.services.portal import PortalClient
from app.services.portal_http import HttpPortalClient

security = HTTPBearer(auto_error=False)

_demo_client: DemoPortalClient | None = None


def _demo() -> DemoPortalClient:
    global _demo_client
    if _demo_client is None:
        _demo_client = DemoPortalClient()
    return _demo_client


async def get_portal_client(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> AsyncGenerator[PortalClient, None]:
    if settings.demo_mode:
        yield _demo()
        return
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    async with HttpPortalClient(credentials.credentials) as client:
        yield client


async def get_current_user(client: PortalClient = Depends(get_portal_client)) -> UserRef:
    return await client.get_current_user()
