"""Human-readable message catalog for errors surfaced by the gateway."""

from functools import lru_cache
from typing import Dict, Optional

INTEGRATION_UNAVAILABLE = "integration.web.integration.unavailable"
INTEGRATION_UNAVAILABLE_SOLUTION = "integration.web.integration.unavailable.solution"
EMPTY_ACCESS_TOKEN = "integration.jira.access.empty"
INVALID_URL_ERROR = "integration.jira.url.api.invalid"
APPLICATION_KEY_ERROR = "integration.jira.private.key.validation"
JIRA_REQUEST_ERROR = "integration.jira.request.failed"
MISSING_TOKEN = "integration.web.jwt.missing"
INVALID_TOKEN = "integration.web.jwt.invalid"

DEFAULT_MESSAGES: Dict[str, str] = {
    INTEGRATION_UNAVAILABLE: "Integration {0} is unavailable.",
    INTEGRATION_UNAVAILABLE_SOLUTION: (
        "Make sure the integration was bootstrapped and its settings are available."
    ),
    EMPTY_ACCESS_TOKEN: (
        "No access token granted for JIRA instance {0}. "
        "Authorize the integration to access this JIRA instance and try again."
    ),
    INVALID_URL_ERROR: "Invalid JIRA URL: {0}",
    APPLICATION_KEY_ERROR: (
        "Could not sign requests to JIRA. Verify the application link "
        "and the private key registered for this JIRA instance."
    ),
    JIRA_REQUEST_ERROR: "Unexpected failure while calling JIRA at {0}.",
    MISSING_TOKEN: "Authorization header with a bearer token is required.",
    INVALID_TOKEN: "Could not validate the authorization token.",
}


class MessageCatalog:
    """Resolves message keys to formatted text.

    Unknown keys resolve to the key itself so a missing entry never hides
    the underlying error.
    """

    def __init__(self, messages: Optional[Dict[str, str]] = None):
        self._messages = dict(DEFAULT_MESSAGES)
        if messages:
            self._messages.update(messages)

    def get_message(self, key: str, *args) -> str:
        template = self._messages.get(key)
        if template is None:
            return key
        return template.format(*args)


@lru_cache
def get_message_catalog() -> MessageCatalog:
    """Get the shared message catalog."""
    return MessageCatalog()
