"""Exceptions raised by the gateway and by its collaborators.

Gateway errors carry the HTTP status they surface with, so the application
exception handler can render them without knowing each kind:

- IntegrationUnavailableError: integration not bootstrapped (503)
- InvalidJiraURLError: caller-supplied JIRA URL does not parse (400)
- AuthorizationMissingCredentialError: user has not granted access yet (401)
- AuthorizationUnexpectedError / AuthorizationKeyError: deployment faults (500)
- JiraAuthorizationError: unexpected failure while calling JIRA (500)
- TokenVerificationError: caller token missing or invalid (401)
"""

from typing import Optional

COMPONENT = "JIRA API"


class GatewayError(Exception):
    """Base exception for errors surfaced to API callers."""

    status_code = 500

    def __init__(
        self,
        message: str,
        component: str = COMPONENT,
        solution: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.component = component
        self.solution = solution


class IntegrationUnavailableError(GatewayError):
    """Raised when the JIRA integration has not been bootstrapped."""

    status_code = 503


class InvalidJiraURLError(GatewayError):
    """Raised when the JIRA base URL or the resolved API URL is malformed."""

    status_code = 400


class AuthorizationMissingCredentialError(GatewayError):
    """Raised when the caller has no access token for the JIRA host.

    This is user-actionable: the user must authorize the integration first.
    """

    status_code = 401


class AuthorizationUnexpectedError(GatewayError):
    """Raised when the credential store fails while looking up a token."""

    status_code = 500


class AuthorizationKeyError(GatewayError):
    """Raised when no signing context can be built for the JIRA host."""

    status_code = 500


class JiraAuthorizationError(GatewayError):
    """Raised when a signed call to JIRA fails unexpectedly."""

    status_code = 500


class TokenVerificationError(GatewayError):
    """Raised by the token verifier when the caller cannot be identified."""

    status_code = 401


class AuthorizationError(Exception):
    """Raised by the integration store when credential retrieval fails."""

    pass


class OAuth1Error(Exception):
    """Raised when an OAuth1 signing context or signed request fails."""

    pass


class OAuth1HttpRequestError(OAuth1Error):
    """Raised when JIRA answers a signed request with an HTTP error status."""

    def __init__(self, message: str, code: int):
        super().__init__(message)
        self.message = message
        self.code = code
