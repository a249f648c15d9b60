"""
Quiz management API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from typing import Any, Dict, List
import logging

from quizzy.database import FlatStore, get_store
from quizzy.defaults import utc_now_iso
from quizzy.schemas.base import MessageResponse
from quizzy.schemas.quiz import QuizCreate, QuizUpdate
from quizzy.services.audit_service import audit_service
from quizzy.utils.helpers import find_record, get_or_404, new_id, remove_record, validation_error

router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])
logger = logging.getLogger(__name__)


def _unknown_question_refs(document: Dict[str, Any], refs: List[Any]) -> List[str]:
    """Messages for id references that do not resolve to a stored question"""
    return [
        f"Unknown question id: {ref}"
        for ref in refs
        if not isinstance(ref, dict) and find_record(document["questions"], ref) is None
    ]


@router.get("", response_model=List[Dict[str, Any]])
async def list_quizzes(store: FlatStore = Depends(get_store)):
    document = await store.load()
    return document["quizzes"]


@router.post("", status_code=201)
async def create_quiz(
    payload: QuizCreate,
    request: Request,
    store: FlatStore = Depends(get_store)
):
    """
    Create a quiz over existing or embedded questions

    - Question id references must exist in the bank
    - Time limit and passing score default to the current settings
    """
    async with store.transaction() as document:
        errors = _unknown_question_refs(document, payload.questions)
        if errors:
            raise validation_error(errors)

        now = utc_now_iso()
        quiz = {
            "id": new_id(),
            "title": payload.title,
            "description": payload.description,
            "questions": payload.questions,
            "timeLimit": payload.time_limit or document["settings"]["quizTimeLimit"],
            "passingScore": (
                payload.passing_score
                if payload.passing_score is not None
                else document["settings"]["passingScore"]
            ),
            "isPublished": payload.is_published,
            "createdAt": now,
            "updatedAt": now,
        }

        document["quizzes"].append(quiz)
        audit_service.record(document, request, "quiz.create", {"quizId": quiz["id"], "title": quiz["title"]})

    logger.info(f"Quiz created: {quiz['id']} ({len(quiz['questions'])} questions)")
    return quiz


@router.get("/{quiz_id}")
async def get_quiz(quiz_id: str, store: FlatStore = Depends(get_store)):
    document = await store.load()
    return get_or_404(document["quizzes"], quiz_id, "Quiz")


@router.put("/{quiz_id}")
async def update_quiz(
    quiz_id: str,
    payload: QuizUpdate,
    request: Request,
    store: FlatStore = Depends(get_store)
):
    """Apply a partial update to a quiz"""
    changes = payload.model_dump(by_alias=True, exclude_unset=True)

    async with store.transaction() as document:
        quiz = get_or_404(document["quizzes"], quiz_id, "Quiz")

        if changes.get("questions") is not None:
            errors = _unknown_question_refs(document, changes["questions"])
            if errors:
                raise validation_error(errors)

        quiz.update(changes)
        quiz["updatedAt"] = utc_now_iso()
        audit_service.record(document, request, "quiz.update", {"quizId": quiz_id, "fields": sorted(changes)})

    return quiz


@router.delete("/{quiz_id}", response_model=MessageResponse)
async def delete_quiz(
    quiz_id: str,
    request: Request,
    store: FlatStore = Depends(get_store)
):
    async with store.transaction() as document:
        if not remove_record(document["quizzes"], quiz_id):
            raise HTTPException(status_code=404, detail="Quiz not found")
        audit_service.record(document, request, "quiz.delete", {"quizId": quiz_id})

    logger.info(f"Quiz deleted: {quiz_id}")
    return {"message": "Quiz deleted successfully"}
