"""
Question bank API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from typing import Any, Dict, List
import logging

from quizzy.database import FlatStore, get_store
from quizzy.defaults import utc_now_iso
from quizzy.schemas.base import MessageResponse
from quizzy.schemas.question import QuestionCreate, QuestionUpdate
from quizzy.schemas.stats import QuestionStats
from quizzy.services.audit_service import audit_service
from quizzy.services.statistics_service import statistics_service
from quizzy.utils.helpers import get_or_404, new_id, remove_record, validation_error

router = APIRouter(prefix="/api/questions", tags=["questions"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[Dict[str, Any]])
async def list_questions(store: FlatStore = Depends(get_store)):
    """All questions in the bank"""
    document = await store.load()
    return document["questions"]


@router.post("", status_code=201)
async def create_question(
    payload: QuestionCreate,
    request: Request,
    store: FlatStore = Depends(get_store)
):
    """Add a question to the bank"""
    now = utc_now_iso()
    question = {
        "id": new_id(),
        **payload.model_dump(by_alias=True, exclude_none=True),
        "createdAt": now,
        "updatedAt": now,
    }

    async with store.transaction() as document:
        document["questions"].append(question)
        audit_service.record(document, request, "question.create", {"questionId": question["id"]})

    logger.info(f"Question created: {question['id']}")
    return question


@router.get("/stats", response_model=List[QuestionStats])
async def get_question_stats(store: FlatStore = Depends(get_store)):
    """
    Per-question analytics

    Returns, for every question:
    - Attempts (results that answered it)
    - Correct answers and accuracy percentage
    - Average response time in seconds
    """
    document = await store.load()

    try:
        return statistics_service.question_stats(document["questions"], document["results"])
    except Exception as e:
        logger.error(f"Failed to compute question stats: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to compute question stats: {str(e)}"
        )


@router.get("/{question_id}")
async def get_question(question_id: str, store: FlatStore = Depends(get_store)):
    document = await store.load()
    return get_or_404(document["questions"], question_id, "Question")


@router.put("/{question_id}")
async def update_question(
    question_id: str,
    payload: QuestionUpdate,
    request: Request,
    store: FlatStore = Depends(get_store)
):
    """Edit a question; options and correctAnswer must stay consistent"""
    changes = payload.model_dump(by_alias=True, exclude_unset=True)

    async with store.transaction() as document:
        question = get_or_404(document["questions"], question_id, "Question")

        merged = {**question, **changes}
        if merged.get("correctAnswer") not in (merged.get("options") or []):
            raise validation_error(["correctAnswer must be one of the options"])

        question.update(changes)
        question["updatedAt"] = utc_now_iso()
        audit_service.record(
            document, request, "question.update",
            {"questionId": question_id, "fields": sorted(changes)}
        )

    return question


@router.delete("/{question_id}", response_model=MessageResponse)
async def delete_question(
    question_id: str,
    request: Request,
    store: FlatStore = Depends(get_store)
):
    """Remove a question and drop it from any quiz that references it"""
    async with store.transaction() as document:
        if not remove_record(document["questions"], question_id):
            raise HTTPException(status_code=404, detail="Question not found")

        for quiz in document["quizzes"]:
            if isinstance(quiz, dict) and isinstance(quiz.get("questions"), list):
                quiz["questions"] = [
                    ref for ref in quiz["questions"]
                    if str(ref.get("id") if isinstance(ref, dict) else ref) != question_id
                ]

        audit_service.record(document, request, "question.delete", {"questionId": question_id})

    logger.info(f"Question deleted: {question_id}")
    return {"message": "Question deleted successfully"}
