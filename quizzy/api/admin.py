"""
Admin dashboard, settings, and audit log API endpoints
"""
from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request
from typing import Any, Dict, List
import logging

from quizzy.database import FlatStore, get_store
from quizzy.defaults import default_settings, utc_now_iso
from quizzy.schemas.stats import DashboardStats
from quizzy.services.audit_service import audit_service
from quizzy.services.settings_validator import validate_optional_settings, validate_settings
from quizzy.services.statistics_service import statistics_service
from quizzy.utils.helpers import validation_error

router = APIRouter(prefix="/api/admin", tags=["admin"])
logger = logging.getLogger(__name__)


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(store: FlatStore = Depends(get_store)):
    """
    Admin dashboard statistics

    Returns:
    - Quiz count and active students
    - Average score and completion rate
    - Recent activity feed
    - Performance trend (best-effort, see performanceTrendStatus)
    """
    document = await store.load()

    try:
        return statistics_service.dashboard_stats(document)
    except Exception as e:
        logger.error(f"Failed to compute dashboard stats: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to compute dashboard stats: {str(e)}"
        )


@router.get("/settings", response_model=Dict[str, Any])
async def get_settings(store: FlatStore = Depends(get_store)):
    document = await store.load()
    return document["settings"]


@router.put("/settings", response_model=Dict[str, Any])
async def replace_settings(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    store: FlatStore = Depends(get_store)
):
    """
    Replace settings

    Every recognized field must be present and valid; all violations are
    reported together and nothing is written when any exist.
    """
    errors = validate_settings(payload) + validate_optional_settings(payload)
    if errors:
        logger.info(f"Rejected settings update with {len(errors)} violation(s)")
        raise validation_error(errors)

    async with store.transaction() as document:
        document["settings"] = {**document["settings"], **payload, "lastUpdated": utc_now_iso()}
        audit_service.record(document, request, "settings.update", {"fields": sorted(payload)})

    return document["settings"]


@router.patch("/settings", response_model=Dict[str, Any])
async def update_settings(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    store: FlatStore = Depends(get_store)
):
    """Merge a partial update into the current settings, then validate the result"""
    async with store.transaction() as document:
        candidate = {**document["settings"], **payload}

        errors = validate_settings(candidate) + validate_optional_settings(candidate)
        if errors:
            logger.info(f"Rejected settings update with {len(errors)} violation(s)")
            raise validation_error(errors)

        candidate["lastUpdated"] = utc_now_iso()
        document["settings"] = candidate
        audit_service.record(document, request, "settings.update", {"fields": sorted(payload)})

    return document["settings"]


@router.post("/settings/reset", response_model=Dict[str, Any])
async def reset_settings(request: Request, store: FlatStore = Depends(get_store)):
    """Restore the default settings"""
    async with store.transaction() as document:
        document["settings"] = default_settings()
        audit_service.record(document, request, "settings.reset")

    logger.info("Settings reset to defaults")
    return document["settings"]


@router.get("/audit-logs", response_model=List[Dict[str, Any]])
async def list_audit_logs(
    limit: int = Query(100, ge=1, le=1000),
    store: FlatStore = Depends(get_store)
):
    """Most recent audit entries first"""
    document = await store.load()
    return list(reversed(document["auditLogs"]))[:limit]
