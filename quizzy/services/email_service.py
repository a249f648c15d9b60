"""
Email service for quiz reports, verification, and password reset
HTML templates rendered here, delivered over SMTP off the event loop
"""
import asyncio
import html
import logging
import smtplib
from datetime import datetime, timezone
from email.message import EmailMessage
from typing import Any, Dict, Optional
from urllib.parse import quote

from quizzy.config import settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Email could not be handed to the SMTP server"""


_HEADER = """
    <div style="font-family: 'Poppins', sans-serif; max-width: 600px; margin: 0 auto;">
      <div style="background: linear-gradient(135deg, #4CC9F0, #7B2CBF); color: white; padding: 30px; text-align: center; border-radius: 20px 20px 0 0;">
        <h1>{title}</h1>
        <p>{subtitle}</p>
      </div>
      <div style="background: white; padding: 30px; border-radius: 0 0 20px 20px; box-shadow: 0 4px 6px rgba(0,0,0,0.1);">
"""

_FOOTER = """
      </div>
    </div>
"""

_BUTTON = """
        <div style="text-align: center; margin: 30px 0;">
          <a href="{link}"
             style="background: #4CC9F0; color: white; padding: 12px 24px; border-radius: 8px; text-decoration: none; display: inline-block;">
            {label}
          </a>
        </div>
"""


def _format_date(timestamp: Any) -> str:
    if isinstance(timestamp, (int, float)) and not isinstance(timestamp, bool):
        try:
            return datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc).strftime("%B %d, %Y")
        except (OverflowError, OSError, ValueError):
            pass
    return "Unknown date"


class EmailService:
    """Renders and sends Quizzy emails"""

    def __init__(
        self,
        host: Optional[str] = None,
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        sender: str = "Quizzy <noreply@quizzy.com>",
        base_url: str = "http://localhost:5173",
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.sender = sender
        self.base_url = base_url.rstrip("/")

    # Templates

    def quiz_results_template(self, result_data: Dict[str, Any]) -> str:
        """Score summary plus a per-answer breakdown table"""
        score = result_data.get("score", 0)
        total = result_data.get("totalQuestions", 0)
        percentage = (score / total * 100) if total else 0.0

        rows = []
        for answer in result_data.get("answers") or []:
            color = "#2DC653" if answer.get("isCorrect") else "#E63946"
            rows.append(
                "<tr>"
                f"<td style=\"padding: 8px; border-bottom: 1px solid #eee;\">{html.escape(str(answer.get('questionText', '')))}</td>"
                f"<td style=\"padding: 8px; border-bottom: 1px solid #eee; color: {color};\">{html.escape(str(answer.get('selectedAnswer', '')))}</td>"
                f"<td style=\"padding: 8px; border-bottom: 1px solid #eee;\">{html.escape(str(answer.get('correctAnswer', '')))}</td>"
                "</tr>"
            )

        body = (
            f"        <p>Hi {html.escape(str(result_data.get('studentName', 'there')))}!</p>\n"
            f"        <p>You completed your quiz on {_format_date(result_data.get('timestamp'))}.</p>\n"
            "        <div style=\"text-align: center; margin: 30px 0;\">\n"
            f"          <h2 style=\"color: #2DC653;\">{score}/{total} ({percentage:.1f}%)</h2>\n"
            "        </div>\n"
        )

        if rows:
            body += (
                "        <table style=\"width: 100%; border-collapse: collapse;\">\n"
                "          <tr><th align=\"left\">Question</th><th align=\"left\">Your answer</th><th align=\"left\">Correct answer</th></tr>\n"
                f"          {''.join(rows)}\n"
                "        </table>\n"
            )

        return (
            _HEADER.format(title="Your Quiz Results", subtitle="Here is how you did")
            + body
            + _FOOTER
        )

    def verification_template(self, link: str) -> str:
        return (
            _HEADER.format(title="Welcome to Quizzy!", subtitle="One quick step to start your learning adventure")
            + "        <p>Hi there!</p>\n"
            + "        <p>We're excited to have you join our learning community. Please verify your email to get started:</p>\n"
            + _BUTTON.format(link=html.escape(link, quote=True), label="Verify Email Address")
            + "        <p style=\"color: #666; font-size: 12px;\">This link expires in 24 hours.</p>\n"
            + _FOOTER
        )

    def password_reset_template(self, link: str) -> str:
        return (
            _HEADER.format(title="Reset Your Password", subtitle="Follow the link below to set a new password")
            + "        <p>Hi there!</p>\n"
            + "        <p>We received a request to reset your password. Click the button below to choose a new one:</p>\n"
            + _BUTTON.format(link=html.escape(link, quote=True), label="Reset Password")
            + "        <p style=\"color: #666; font-size: 12px;\">This link expires in 1 hour. If you didn't request this, please ignore this email.</p>\n"
            + _FOOTER
        )

    # Delivery

    async def send_quiz_results(self, email: str, result_data: Dict[str, Any]) -> None:
        await self.send(email, "Your Quiz Results Are Here!", self.quiz_results_template(result_data))

    async def send_verification(self, email: str, token: str) -> None:
        link = f"{self.base_url}/verify-email?token={quote(token)}"
        await self.send(email, "Welcome to Quizzy!", self.verification_template(link))

    async def send_password_reset(self, email: str, token: str) -> None:
        link = f"{self.base_url}/reset-password?token={quote(token)}"
        await self.send(email, "Reset Your Password - Quizzy", self.password_reset_template(link))

    async def send(self, recipient: str, subject: str, html_body: str) -> None:
        """
        Deliver an HTML email

        Raises:
            EmailDeliveryError: SMTP is not configured or delivery failed
        """
        if not self.host:
            logger.error("Email delivery requested but SMTP_HOST is not configured")
            raise EmailDeliveryError("Email delivery is not configured")

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = recipient
        message["Subject"] = subject
        message.set_content("This email requires an HTML-capable client.")
        message.add_alternative(html_body, subtype="html")

        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send '{subject}' to {recipient}: {str(e)}")
            raise EmailDeliveryError(f"Failed to send email: {str(e)}") from e

        logger.info(f"Sent '{subject}' to {recipient}")

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=10) as server:
            if self.use_tls:
                server.starttls()
            if self.username:
                server.login(self.username, self.password or "")
            server.send_message(message)


# Global instance
email_service = EmailService(
    host=settings.SMTP_HOST,
    port=settings.SMTP_PORT,
    username=settings.SMTP_USERNAME,
    password=settings.SMTP_PASSWORD,
    use_tls=settings.SMTP_USE_TLS,
    sender=settings.EMAIL_FROM,
    base_url=settings.BASE_URL,
)


def get_email_service() -> EmailService:
    """Dependency that provides the email service"""
    return email_service
