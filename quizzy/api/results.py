"""
Quiz result submission and result statistics API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Any, Dict, List, Optional
import logging

from quizzy.database import FlatStore, get_store
from quizzy.defaults import utc_now_iso
from quizzy.schemas.result import ResultAnswer, ResultCreate
from quizzy.schemas.stats import ResultStats
from quizzy.services.achievement_service import achievement_service
from quizzy.services.statistics_service import result_percentage, statistics_service
from quizzy.utils.helpers import find_record, new_id

router = APIRouter(prefix="/api/results", tags=["results"])
logger = logging.getLogger(__name__)


def _refresh_user_counters(document: Dict[str, Any], student_name: str) -> None:
    """Recompute aggregate counters on users whose name matches the student"""
    results = statistics_service.student_results(document, student_name)
    percentages = [result_percentage(r) for r in results]

    for user in document["users"]:
        if isinstance(user, dict) and user.get("name") == student_name:
            user["quizzesCompleted"] = sum(1 for r in results if r.get("completed") is not False)
            user["averageScore"] = round(sum(percentages) / len(percentages), 2) if percentages else 0
            user["updatedAt"] = utc_now_iso()


@router.get("", response_model=List[Dict[str, Any]])
async def list_results(
    student_name: Optional[str] = Query(None, alias="studentName"),
    store: FlatStore = Depends(get_store)
):
    """All results, optionally filtered by student name"""
    document = await store.load()
    if student_name is None:
        return document["results"]
    return statistics_service.student_results(document, student_name)


@router.post("", status_code=201)
async def submit_result(payload: ResultCreate, store: FlatStore = Depends(get_store)):
    """
    Record a quiz attempt

    - Results are append-only
    - Derived percentage is stored with the result
    - Matching users' counters are refreshed
    - Newly earned achievements are awarded and returned on the result
    """
    result = {
        "id": new_id(),
        "studentName": payload.student_name,
        "score": payload.score,
        "totalQuestions": payload.total_questions,
        "answers": [
            a.model_dump(by_alias=True, exclude_none=True) if isinstance(a, ResultAnswer) else a
            for a in payload.answers
        ],
        "timestamp": payload.timestamp,
        "completed": payload.completed,
        "percentage": round(payload.score / payload.total_questions * 100, 2),
    }
    if payload.quiz_id is not None:
        result["quizId"] = payload.quiz_id
    if payload.time_remaining is not None:
        result["timeRemaining"] = payload.time_remaining

    async with store.transaction() as document:
        if payload.quiz_id is not None and find_record(document["quizzes"], payload.quiz_id) is None:
            raise HTTPException(status_code=404, detail="Quiz not found")

        document["results"].append(result)
        _refresh_user_counters(document, payload.student_name)

        earned = achievement_service.award(document, payload.student_name)
        result["achievements"] = [a.get("name") for a in earned]

    logger.info(
        f"Result saved: {result['id']}, student: {payload.student_name}, "
        f"score: {payload.score}/{payload.total_questions}"
    )
    return result


@router.get("/stats", response_model=ResultStats)
async def get_result_stats(store: FlatStore = Depends(get_store)):
    """
    Result-level statistics

    Returns:
    - Total attempts, average, highest and lowest score
    - Last five attempts in submission order
    - Completion rate
    """
    document = await store.load()

    try:
        return statistics_service.result_stats(document["results"])
    except Exception as e:
        logger.error(f"Failed to compute result stats: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to compute result stats: {str(e)}"
        )


@router.get("/user/{student_name}", response_model=List[Dict[str, Any]])
async def get_student_results(student_name: str, store: FlatStore = Depends(get_store)):
    document = await store.load()
    return statistics_service.student_results(document, student_name)
