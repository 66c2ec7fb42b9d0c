"""Bootstrap check and per-user credential resolution."""

from ..core.exceptions import (
    AuthorizationError,
    AuthorizationKeyError,
    AuthorizationMissingCredentialError,
    AuthorizationUnexpectedError,
    IntegrationUnavailableError,
    OAuth1Error,
)
from ..core.logging import LogEvent, log_event
from ..core.messages import (
    APPLICATION_KEY_ERROR,
    EMPTY_ACCESS_TOKEN,
    INTEGRATION_UNAVAILABLE,
    INTEGRATION_UNAVAILABLE_SOLUTION,
    MessageCatalog,
)
from ..integrations.oauth1 import OAuth1Provider
from .integration import JiraIntegrationStore

APP_ID = "jira"


class BootstrapGuard:
    """Fails fast while the JIRA integration is not configured."""

    def __init__(self, store: JiraIntegrationStore, messages: MessageCatalog):
        self.store = store
        self.messages = messages

    def ensure_ready(self) -> None:
        """
        Raises:
            IntegrationUnavailableError: If the integration settings are absent
        """
        if self.store.get_settings() is None:
            log_event(
                LogEvent.INTEGRATION_UNAVAILABLE,
                "JIRA integration is not bootstrapped",
                level="WARNING",
            )
            raise IntegrationUnavailableError(
                self.messages.get_message(INTEGRATION_UNAVAILABLE, APP_ID),
                solution=self.messages.get_message(INTEGRATION_UNAVAILABLE_SOLUTION),
            )


class AccessCredentialResolver:
    """Resolves the credential and signing context for a (user, JIRA host) pair."""

    def __init__(self, store: JiraIntegrationStore, messages: MessageCatalog):
        self.store = store
        self.messages = messages

    def resolve(self, jira_url: str, user_id: int) -> str:
        """Get the access token the user granted for the JIRA instance.

        Raises:
            AuthorizationMissingCredentialError: If the user has not granted access
            AuthorizationUnexpectedError: If the credential store fails
        """
        try:
            access_token = self.store.get_access_token(jira_url, user_id)
        except AuthorizationError as e:
            log_event(
                LogEvent.JIRA_CREDENTIAL_ERROR,
                "Credential store failed",
                level="ERROR",
                jira_url=jira_url,
            )
            raise AuthorizationUnexpectedError(str(e)) from e

        if access_token is None or not access_token.strip():
            log_event(
                LogEvent.JIRA_CREDENTIAL_MISSING,
                "No access token granted",
                level="WARNING",
                jira_url=jira_url,
            )
            raise AuthorizationMissingCredentialError(
                self.messages.get_message(EMPTY_ACCESS_TOKEN, jira_url)
            )

        return access_token

    def resolve_provider(self, jira_url: str) -> OAuth1Provider:
        """Get the signing context for the JIRA instance.

        Raises:
            AuthorizationKeyError: If no signing context can be built for the host
        """
        try:
            return self.store.get_oauth1_provider(jira_url)
        except OAuth1Error as e:
            log_event(
                LogEvent.JIRA_APPLICATION_KEY_ERROR,
                "Cannot build signing context",
                level="ERROR",
                jira_url=jira_url,
                error=str(e),
            )
            raise AuthorizationKeyError(self.messages.get_message(APPLICATION_KEY_ERROR)) from e
