"""Startup read / delete endpoints."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from incubator.auth import AuthUser, get_current_user, require_admin
from incubator.dependencies import get_repository
from incubator.repository import StartupRepository
from incubator.schemas import StartupBrief, StartupDetail

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/startups", tags=["startups"])


@router.get("/", response_model=list[StartupBrief])
async def list_startups(
    stage: Optional[str] = None,
    search: Optional[str] = None,
    repo: StartupRepository = Depends(get_repository),
    user: AuthUser = Depends(get_current_user),
):
    return await repo.list_startups(stage=stage, search=search)


@router.get("/{startup_id}", response_model=StartupDetail)
async def get_startup(
    startup_id: str,
    repo: StartupRepository = Depends(get_repository),
    user: AuthUser = Depends(get_current_user),
):
    startup = await repo.get_startup(startup_id, with_children=True)
    if startup is None:
        raise HTTPException(status_code=404, detail="Startup not found")
    return startup


@router.delete("/{startup_id}")
async def delete_startup(
    startup_id: str,
    repo: StartupRepository = Depends(get_repository),
    user: AuthUser = Depends(require_admin),
):
    """Delete a startup together with all of its child records."""
    async with repo.transaction():
        startup = await repo.get_startup(startup_id)
        if startup is None:
            raise HTTPException(status_code=404, detail="Startup not found")
        await repo.delete_startup(startup)
    logger.info("Startup %s deleted by %s", startup_id, user.id)
    return {"message": "Startup deleted successfully", "id": startup_id}
