"""SQLAlchemy models backing the JIRA integration store."""

from datetime import datetime

from sqlalchemy import (
    Column,
    String,
    Integer,
    BigInteger,
    Boolean,
    DateTime,
    Text,
    Index,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class JiraIntegrationSettings(Base):
    """Bootstrap state of the JIRA integration for this deployment.

    The integration is usable once a row with configured=True exists.
    """

    __tablename__ = "jira_integration_settings"

    id = Column(Integer, primary_key=True)
    configured = Column(Boolean, default=False, nullable=False)
    owner = Column(String(255))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class JiraApplication(Base):
    """Application link registered on a JIRA instance.

    Holds the consumer key and RSA private key used to sign requests.
    """

    __tablename__ = "jira_applications"

    id = Column(Integer, primary_key=True)
    jira_url = Column(String(2048), unique=True, nullable=False, index=True)
    consumer_key = Column(String(255), nullable=False)
    private_key = Column(Text, nullable=False)  # PEM encoded
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class JiraUserToken(Base):
    """OAuth1 access token granted by a platform user for a JIRA instance."""

    __tablename__ = "jira_user_tokens"

    id = Column(Integer, primary_key=True)
    user_id = Column(BigInteger, nullable=False)
    jira_url = Column(String(2048), nullable=False)
    access_token = Column(String(512), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("idx_jira_user_tokens_user_url", "user_id", "jira_url", unique=True),
    )
