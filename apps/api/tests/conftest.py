"""Shared fixtures for API tests.

Every test gets its own SQLite file database and a mocked Resend transport.
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from referral_shared.email import EmailConfig, EmailSender
from referral_shared.schemas import ReferralMode, ReferralSubmission

from referral_api.config import Settings
from referral_api.db.database import create_engine, create_session_factory, init_db
from referral_api.main import create_app
from referral_api.referrals.intake import ReferralIntake

ADMIN_EMAIL = "admin@test.com"


def make_valid_payload(**overrides) -> dict:
    """Create a valid tracked-mode submission payload."""
    payload = {
        "referrerName": "A",
        "referrerEmail": "a@x.com",
        "refereeName": "B",
        "refereeEmail": "b@x.com",
        "fieldOfWork": "Eng",
        "program": "P1",
    }
    payload.update(overrides)
    return payload


def make_direct_payload(**overrides) -> dict:
    """Create a valid direct-mode submission payload."""
    payload = {
        "name": "Carol",
        "email": "carol@x.com",
        "company": "Acme Corp",
        "message": "Worth a call",
    }
    payload.update(overrides)
    return payload


def make_submission(**overrides) -> ReferralSubmission:
    """Create a valid tracked-mode submission."""
    return ReferralSubmission.model_validate(make_valid_payload(**overrides))


@pytest.fixture
def database_url(tmp_path) -> str:
    """Per-test SQLite database."""
    return f"sqlite+aiosqlite:///{tmp_path / 'referrals.db'}"


@pytest.fixture
def email_config() -> EmailConfig:
    """Email configuration with credentials and admin address."""
    return EmailConfig(
        api_key="re_test_key",
        from_email="noreply@test.com",
        admin_email=ADMIN_EMAIL,
    )


@pytest.fixture
def mock_send(monkeypatch) -> MagicMock:
    """Replace the Resend transport."""
    mock = MagicMock(return_value={"id": "email_123"})
    monkeypatch.setattr("resend.Emails.send", mock)
    return mock


@pytest.fixture
def settings(database_url, email_config) -> Settings:
    """Tracked-mode settings against the test database."""
    return Settings(database_url=database_url, email=email_config)


def _client_for(settings: Settings, **client_options):
    app = create_app(settings)
    with TestClient(app, **client_options) as test_client:
        yield test_client


@pytest.fixture
def client(settings, mock_send):
    """Test client for the tracked-mode app."""
    yield from _client_for(settings)


@pytest.fixture
def lenient_client(settings, mock_send):
    """Test client that returns 500 responses instead of raising."""
    yield from _client_for(settings, raise_server_exceptions=False)


@pytest.fixture
def direct_client(settings, mock_send):
    """Test client for the direct-mode app."""
    settings.referral_mode = ReferralMode.DIRECT
    yield from _client_for(settings)


@pytest.fixture
def strict_client(settings, mock_send):
    """Test client that answers 500 when a notification fails."""
    settings.notification_failure_is_error = True
    yield from _client_for(settings)


@pytest.fixture
async def session_factory(database_url):
    """Session factory over a freshly created schema."""
    engine = create_engine(database_url)
    await init_db(engine)
    yield create_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def make_intake(session_factory, email_config, mock_send):
    """Build a ReferralIntake over the test database."""

    def _make(
        mode: ReferralMode = ReferralMode.TRACKED,
        notification_failure_is_error: bool = False,
    ) -> ReferralIntake:
        return ReferralIntake(
            session_factory,
            EmailSender(email_config),
            mode=mode,
            notification_failure_is_error=notification_failure_is_error,
        )

    return _make
