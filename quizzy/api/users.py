"""
User management and per-student analytics API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from typing import Any, Dict, List, Optional
import logging

from quizzy.database import FlatStore, get_store
from quizzy.defaults import utc_now_iso
from quizzy.schemas.base import MessageResponse
from quizzy.schemas.stats import StudentStats
from quizzy.schemas.user import UserCreate, UserUpdate
from quizzy.services.achievement_service import achievement_service
from quizzy.services.audit_service import audit_service
from quizzy.services.statistics_service import statistics_service
from quizzy.utils.helpers import get_or_404, new_id, remove_record, validation_error

router = APIRouter(prefix="/api/users", tags=["users"])
logger = logging.getLogger(__name__)


def _public(user: Dict[str, Any]) -> Dict[str, Any]:
    """User record without its password"""
    return {k: v for k, v in user.items() if k != "password"}


def _email_taken(document: Dict[str, Any], email: str, exclude_id: Optional[str] = None) -> bool:
    wanted = email.lower()
    return any(
        isinstance(u, dict)
        and str(u.get("email", "")).lower() == wanted
        and str(u.get("id")) != str(exclude_id)
        for u in document["users"]
    )


@router.get("", response_model=List[Dict[str, Any]])
async def list_users(store: FlatStore = Depends(get_store)):
    document = await store.load()
    return [_public(u) for u in document["users"] if isinstance(u, dict)]


@router.post("", status_code=201)
async def create_user(
    payload: UserCreate,
    request: Request,
    store: FlatStore = Depends(get_store)
):
    """
    Create a user

    - Email must be unique (case-insensitive)
    - Only admin users keep a password
    """
    async with store.transaction() as document:
        if _email_taken(document, payload.email):
            raise HTTPException(status_code=409, detail="A user with this email already exists")

        now = utc_now_iso()
        user = {
            "id": new_id(),
            "name": payload.name,
            "email": payload.email,
            "role": payload.role,
            "status": payload.status,
            "quizzesCompleted": 0,
            "averageScore": 0,
            "createdAt": now,
            "updatedAt": now,
        }
        if payload.role == "admin":
            user["password"] = payload.password

        document["users"].append(user)
        audit_service.record(document, request, "user.create", {"userId": user["id"], "role": user["role"]})

    logger.info(f"User created: {user['id']} ({user['role']})")
    return _public(user)


@router.get("/{user_id}")
async def get_user(user_id: str, store: FlatStore = Depends(get_store)):
    document = await store.load()
    return _public(get_or_404(document["users"], user_id, "User"))


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    payload: UserUpdate,
    request: Request,
    store: FlatStore = Depends(get_store)
):
    """Partial user update; demoting an admin drops the stored password"""
    changes = payload.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)

    async with store.transaction() as document:
        user = get_or_404(document["users"], user_id, "User")

        if "email" in changes and _email_taken(document, changes["email"], exclude_id=user_id):
            raise HTTPException(status_code=409, detail="A user with this email already exists")

        role = changes.get("role", user.get("role"))
        if role == "admin":
            if not (changes.get("password") or user.get("password")):
                raise validation_error(["password is required for admin users"])
        else:
            changes.pop("password", None)
            user.pop("password", None)

        user.update(changes)
        user["updatedAt"] = utc_now_iso()
        audit_service.record(
            document, request, "user.update",
            {"userId": user_id, "fields": sorted(k for k in changes if k != "password")}
        )

    return _public(user)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    request: Request,
    store: FlatStore = Depends(get_store)
):
    async with store.transaction() as document:
        if not remove_record(document["users"], user_id):
            raise HTTPException(status_code=404, detail="User not found")
        audit_service.record(document, request, "user.delete", {"userId": user_id})

    logger.info(f"User deleted: {user_id}")
    return {"message": "User deleted successfully"}


@router.get("/{student_name}/stats", response_model=StudentStats)
async def get_student_stats(student_name: str, store: FlatStore = Depends(get_store)):
    """Quiz performance summary for a student; zeros when they have no results"""
    document = await store.load()
    return statistics_service.student_stats(document, student_name)


@router.get("/{student_name}/achievements", response_model=List[Dict[str, Any]])
async def get_student_achievements(student_name: str, store: FlatStore = Depends(get_store)):
    """Achievements the student currently qualifies for"""
    document = await store.load()
    return achievement_service.earned_for(document, student_name)
