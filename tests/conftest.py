"""Test configuration and fixtures for the JIRA API gateway."""

import os
from typing import Generator
from unittest.mock import Mock

import pytest

# Set environment variables BEFORE importing the app
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-purposes-only-12345"
os.environ["ENVIRONMENT"] = "development"
os.environ["JIRA_MAX_RESULTS"] = "10"
os.environ["LOG_JSON"] = "false"

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from jira_gateway.main import app
from jira_gateway.auth.security import create_access_token
from jira_gateway.config import get_settings
from jira_gateway.db.database import SessionLocal, engine, get_db
from jira_gateway.db.models import Base, JiraApplication, JiraIntegrationSettings, JiraUserToken

JIRA_URL = "https://jira.example.com"
USER_ID = 42
ACCESS_TOKEN = "user-access-token"
CONSUMER_KEY = "gateway-consumer"


@pytest.fixture(scope="session")
def private_key_pem() -> str:
    """RSA private key for signing test requests."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        # Drop all tables after each test for isolation
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def bootstrapped(db: Session) -> JiraIntegrationSettings:
    """Mark the integration as configured."""
    settings = JiraIntegrationSettings(configured=True, owner="admin")
    db.add(settings)
    db.commit()
    db.refresh(settings)
    return settings


@pytest.fixture
def jira_application(db: Session, private_key_pem: str) -> JiraApplication:
    """Register the application link for the test JIRA instance."""
    application = JiraApplication(
        jira_url=JIRA_URL,
        consumer_key=CONSUMER_KEY,
        private_key=private_key_pem,
    )
    db.add(application)
    db.commit()
    db.refresh(application)
    return application


@pytest.fixture
def user_token(db: Session) -> JiraUserToken:
    """Access token granted by the test user for the test JIRA instance."""
    token = JiraUserToken(
        user_id=USER_ID,
        jira_url=JIRA_URL,
        access_token=ACCESS_TOKEN,
    )
    db.add(token)
    db.commit()
    db.refresh(token)
    return token


@pytest.fixture
def configured(bootstrapped, jira_application, user_token) -> None:
    """Fully configured integration for the test user."""
    return None


@pytest.fixture
def auth_headers() -> dict:
    """Create authentication headers for the test user."""
    settings = get_settings()
    token = create_access_token(USER_ID, settings.secret_key, algorithm=settings.algorithm)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def mock_response():
    """Create a mock upstream JIRA response."""
    def _mock_response(status_code=200, content=b"", encoding="utf-8"):
        mock = Mock()
        mock.status_code = status_code
        mock.content = content
        mock.encoding = encoding
        return mock
    return _mock_response
