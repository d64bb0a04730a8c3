"""Migration endpoints -- legacy export import and store counts."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from incubator.auth import AuthUser, require_admin
from incubator.dependencies import get_repository
from incubator.importer import import_bundle
from incubator.repository import StartupRepository
from incubator.schemas import (
    DatabaseCounts,
    MigrationResponse,
    MigrationStats,
    MigrationStatus,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/migration", tags=["migration"])


@router.post("/import", response_model=MigrationResponse)
async def import_export(
    request: Request,
    repo: StartupRepository = Depends(get_repository),
    user: AuthUser = Depends(require_admin),
):
    """Import a legacy export. Per-record failures come back in ``errors``.

    The body is parsed here so an unreadable payload is reported as a 500
    with the raw error, like any other failure of the run.
    """
    try:
        payload = await request.json()
        if not isinstance(payload, dict):
            raise ValueError(f"Export must be a JSON object, got {type(payload).__name__}")
        summary = await import_bundle(payload, repo)
    except Exception as e:
        logger.error("Migration failed: %s", e)
        raise HTTPException(
            status_code=500,
            detail={"success": False, "message": "Migration failed", "error": str(e)},
        )

    logger.info("Migration run by %s finished with %d errors", user.id, len(summary.errors))
    return MigrationResponse(
        success=True,
        message="Migration completed successfully!",
        stats=MigrationStats.from_summary(summary),
        errors=summary.errors,
    )


@router.get("/status", response_model=MigrationStatus)
async def migration_status(
    repo: StartupRepository = Depends(get_repository),
    user: AuthUser = Depends(require_admin),
):
    try:
        counts = await repo.counts()
    except Exception as e:
        logger.error("Migration status failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    return MigrationStatus(database=DatabaseCounts(**counts))
