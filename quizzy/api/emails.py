"""
Email API endpoints - quiz reports, verification, password reset
"""
from fastapi import APIRouter, Depends
import logging

from quizzy.schemas.base import MessageResponse
from quizzy.schemas.email import QuizResultsEmailRequest, TokenEmailRequest
from quizzy.services.email_service import EmailService, get_email_service
from quizzy.utils.rate_limiter import email_rate_limiter

router = APIRouter(
    prefix="/api/email",
    tags=["email"],
    dependencies=[Depends(email_rate_limiter.check_rate_limit)]
)
logger = logging.getLogger(__name__)


@router.post("/quiz-results", response_model=MessageResponse)
async def send_quiz_results(
    payload: QuizResultsEmailRequest,
    mailer: EmailService = Depends(get_email_service)
):
    """Email a student their quiz score and answer breakdown"""
    await mailer.send_quiz_results(payload.email, payload.result_data.model_dump(by_alias=True))
    return {"message": "Quiz results email sent successfully"}


@router.post("/verification", response_model=MessageResponse)
async def send_verification(
    payload: TokenEmailRequest,
    mailer: EmailService = Depends(get_email_service)
):
    await mailer.send_verification(payload.email, payload.token)
    return {"message": "Verification email sent successfully"}


@router.post("/reset-password", response_model=MessageResponse)
async def send_password_reset(
    payload: TokenEmailRequest,
    mailer: EmailService = Depends(get_email_service)
):
    await mailer.send_password_reset(payload.email, payload.token)
    return {"message": "Password reset email sent successfully"}
