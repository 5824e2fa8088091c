from __future__ import annotations
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, Path
from app.schemas.participation import PendingAction
from app.services.pending import PendingActionStore, get_pending_store

router = APIRouter(prefix="/pending", tags=["pending"])

PendingKey = Annotated[str, Path(min_length=1, max_length=128, pattern=r"^[A-Za-z0-9_.:-]+$")]


@router.put("/{key}", response_model=PendingAction)
def set_pending(key: PendingKey, action: PendingAction, store: PendingActionStore = Depends(get_pending_store)):
    store.set(key, action)
    return action


@router.get("/{key}", response_model=PendingAction)
def get_pending(key: PendingKey, store: PendingActionStore = Depends(get_pending_store)):
    action = store.get(key)
    if action is None:
        raise HTTPException(status_code=404, detail="No pending action")
    return action


@router.delete("/{key}", status_code=204)
def clear_pending(key: PendingKey, store: PendingActionStore = Depends(get_pending_store)):
    store.clear(key)
