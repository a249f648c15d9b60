"""
Achievement management API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from typing import Any, Dict, List
import logging

from quizzy.database import FlatStore, get_store
from quizzy.schemas.achievement import AchievementCreate, AchievementUpdate
from quizzy.schemas.base import MessageResponse
from quizzy.services.audit_service import audit_service
from quizzy.utils.helpers import get_or_404, new_id, remove_record

router = APIRouter(prefix="/api/achievements", tags=["achievements"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[Dict[str, Any]])
async def list_achievements(store: FlatStore = Depends(get_store)):
    document = await store.load()
    return document["achievements"]


@router.post("", status_code=201)
async def create_achievement(
    payload: AchievementCreate,
    request: Request,
    store: FlatStore = Depends(get_store)
):
    achievement = {"id": new_id(), **payload.model_dump(by_alias=True)}

    async with store.transaction() as document:
        document["achievements"].append(achievement)
        audit_service.record(
            document, request, "achievement.create",
            {"achievementId": achievement["id"], "name": achievement["name"]}
        )

    logger.info(f"Achievement created: {achievement['id']} ({achievement['name']})")
    return achievement


@router.put("/{achievement_id}")
async def update_achievement(
    achievement_id: str,
    payload: AchievementUpdate,
    request: Request,
    store: FlatStore = Depends(get_store)
):
    """Partial update; used by the admin UI to toggle isActive"""
    changes = payload.model_dump(by_alias=True, exclude_unset=True)

    async with store.transaction() as document:
        achievement = get_or_404(document["achievements"], achievement_id, "Achievement")
        achievement.update(changes)
        audit_service.record(
            document, request, "achievement.update",
            {"achievementId": achievement_id, "fields": sorted(changes)}
        )

    return achievement


@router.delete("/{achievement_id}", response_model=MessageResponse)
async def delete_achievement(
    achievement_id: str,
    request: Request,
    store: FlatStore = Depends(get_store)
):
    """Remove an achievement and forget who earned it"""
    async with store.transaction() as document:
        if not remove_record(document["achievements"], achievement_id):
            raise HTTPException(status_code=404, detail="Achievement not found")

        for student, earned in document["userAchievements"].items():
            if isinstance(earned, list):
                document["userAchievements"][student] = [
                    a for a in earned if str(a) != achievement_id
                ]

        audit_service.record(document, request, "achievement.delete", {"achievementId": achievement_id})

    return {"message": "Achievement deleted successfully"}
