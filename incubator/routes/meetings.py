"""Meeting listing -- SMC, one-on-one and FMC."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from incubator.auth import AuthUser, get_current_user
from incubator.dependencies import get_repository
from incubator.models import MeetingKind
from incubator.repository import StartupRepository
from incubator.schemas import MeetingWithStartup

router = APIRouter(prefix="/meetings", tags=["meetings"])

KINDS = (MeetingKind.SMC, MeetingKind.ONE_ON_ONE, MeetingKind.FMC)


@router.get("/", response_model=list[MeetingWithStartup])
async def list_meetings(
    kind: Optional[str] = None,
    startup_id: Optional[str] = Query(default=None, alias="startupId"),
    repo: StartupRepository = Depends(get_repository),
    user: AuthUser = Depends(get_current_user),
):
    if kind is not None and kind not in KINDS:
        raise HTTPException(status_code=400, detail=f"Unknown meeting kind: {kind}")
    return await repo.list_meetings(kind=kind, startup_id=startup_id)
