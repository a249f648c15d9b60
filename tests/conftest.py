import pytest
from fastapi.testclient import TestClient

from quizzy.database import FlatStore, get_store
from quizzy.main import app
from quizzy.services.email_service import EmailService, get_email_service
from quizzy.utils.rate_limiter import email_rate_limiter


class RecordingEmailService(EmailService):
    """Renders real templates but keeps messages instead of sending them"""

    def __init__(self):
        super().__init__(base_url="https://quizzy.com")
        self.sent = []

    async def send(self, recipient, subject, html_body):
        self.sent.append({"to": recipient, "subject": subject, "html": html_body})


@pytest.fixture
def store(tmp_path):
    return FlatStore(tmp_path / "db.json", timeout=2.0)


@pytest.fixture
def mailer():
    return RecordingEmailService()


@pytest.fixture
def client(store, mailer):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_email_service] = lambda: mailer
    email_rate_limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()
