"""Admin endpoint -- wipe all incubation data."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from incubator.auth import AuthUser, require_admin
from incubator.dependencies import get_repository
from incubator.repository import StartupRepository
from incubator.schemas import ClearAllResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.delete("/clear-all-data", response_model=ClearAllResponse)
async def clear_all_data(
    repo: StartupRepository = Depends(get_repository),
    user: AuthUser = Depends(require_admin),
):
    """Delete every startup and child record. Accounts are left alone."""
    try:
        async with repo.transaction():
            deleted = await repo.clear_all()
    except Exception as e:
        logger.error("Clear all data failed: %s", e)
        raise HTTPException(status_code=500, detail=f"Failed to clear data: {e}")

    logger.warning("All incubation data cleared by %s: %s", user.id, deleted)
    return ClearAllResponse(
        success=True,
        message="All data cleared successfully from database",
        deleted=deleted,
    )
