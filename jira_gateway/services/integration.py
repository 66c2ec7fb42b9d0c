"""JIRA integration store: bootstrap settings, application links and user tokens."""

from abc import ABC, abstractmethod
from typing import Optional

import structlog
from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..core.exceptions import AuthorizationError, OAuth1Error
from ..db.database import get_db
from ..db.models import JiraApplication, JiraIntegrationSettings, JiraUserToken
from ..integrations.oauth1 import OAuth1Provider

logger = structlog.get_logger(__name__)


def normalize_jira_url(jira_url: str) -> str:
    """Normalize a JIRA base URL for use as a lookup key."""
    return jira_url.strip().rstrip("/")


class JiraIntegrationStore(ABC):
    """Read access to the state owned by the JIRA integration."""

    @abstractmethod
    def get_settings(self) -> Optional[JiraIntegrationSettings]:
        """Get the integration settings, or None if not bootstrapped."""
        pass

    @abstractmethod
    def get_access_token(self, jira_url: str, user_id: int) -> Optional[str]:
        """Get the access token a user granted for a JIRA instance.

        Raises:
            AuthorizationError: If the token cannot be retrieved
        """
        pass

    @abstractmethod
    def get_oauth1_provider(self, jira_url: str) -> OAuth1Provider:
        """Build the signing context for a JIRA instance.

        Raises:
            OAuth1Error: If no usable application link is registered
        """
        pass


class DatabaseJiraIntegrationStore(JiraIntegrationStore):
    """Integration store backed by the SQLAlchemy session."""

    def __init__(self, db: Session, timeout: int = 30, verify_ssl: bool = True):
        self.db = db
        self.timeout = timeout
        self.verify_ssl = verify_ssl

    def get_settings(self) -> Optional[JiraIntegrationSettings]:
        return (
            self.db.query(JiraIntegrationSettings)
            .filter(JiraIntegrationSettings.configured.is_(True))
            .first()
        )

    def get_access_token(self, jira_url: str, user_id: int) -> Optional[str]:
        try:
            token = (
                self.db.query(JiraUserToken)
                .filter(
                    JiraUserToken.user_id == user_id,
                    JiraUserToken.jira_url == normalize_jira_url(jira_url),
                )
                .first()
            )
        except SQLAlchemyError as e:
            logger.error("access_token_lookup_failed", jira_url=jira_url, error=str(e))
            raise AuthorizationError(f"Failed to retrieve access token for {jira_url}") from e

        return token.access_token if token else None

    def get_oauth1_provider(self, jira_url: str) -> OAuth1Provider:
        try:
            application = (
                self.db.query(JiraApplication)
                .filter(JiraApplication.jira_url == normalize_jira_url(jira_url))
                .first()
            )
        except SQLAlchemyError as e:
            logger.error("application_link_lookup_failed", jira_url=jira_url, error=str(e))
            raise OAuth1Error(f"Failed to retrieve application link for {jira_url}") from e

        if application is None:
            raise OAuth1Error(f"No application link registered for {jira_url}")

        return OAuth1Provider(
            consumer_key=application.consumer_key,
            private_key=application.private_key,
            timeout=self.timeout,
            verify_ssl=self.verify_ssl,
        )

    def bootstrap(self, owner: Optional[str] = None) -> JiraIntegrationSettings:
        """Mark the integration as configured for this deployment."""
        settings = self.db.query(JiraIntegrationSettings).first()
        if settings is None:
            settings = JiraIntegrationSettings()
            self.db.add(settings)
        settings.configured = True
        settings.owner = owner
        self.db.commit()
        self.db.refresh(settings)
        logger.info("jira_integration_bootstrapped", owner=owner)
        return settings

    def register_application(
        self, jira_url: str, consumer_key: str, private_key: str
    ) -> JiraApplication:
        """Register (or replace) the application link for a JIRA instance."""
        key = normalize_jira_url(jira_url)
        application = self.db.query(JiraApplication).filter(JiraApplication.jira_url == key).first()
        if application is None:
            application = JiraApplication(jira_url=key)
            self.db.add(application)
        application.consumer_key = consumer_key
        application.private_key = private_key
        self.db.commit()
        self.db.refresh(application)
        logger.info("jira_application_registered", jira_url=key, consumer_key=consumer_key)
        return application


def get_integration_store(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> JiraIntegrationStore:
    """FastAPI dependency providing the integration store."""
    return DatabaseJiraIntegrationStore(
        db,
        timeout=settings.jira_request_timeout,
        verify_ssl=settings.jira_verify_ssl,
    )
